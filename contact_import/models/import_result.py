from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

"""Reconciliation result models for the commit phase.

ImportResult keeps the plain (imported, skipped, errors) triple consumers
already rely on, and additionally carries a structured ImportFailure per
skipped record so callers can dispatch on the failure kind.
"""

__all__ = [
    "FailureKind",
    "ImportFailure",
    "ImportResult",
    "ResultAccumulator",
    "MISSING_FIELDS_MESSAGE",
]

MISSING_FIELDS_MESSAGE = "Skipped contact: Missing required fields"


class FailureKind(str, Enum):
    """Why a record was skipped.

    - MISSING_REQUIRED_FIELDS: rejected before any storage call
    - STORE_REJECTED: storage create() returned no record
    - STORE_ERROR: storage create() raised
    """
    MISSING_REQUIRED_FIELDS = "MISSING_REQUIRED_FIELDS"
    STORE_REJECTED = "STORE_REJECTED"
    STORE_ERROR = "STORE_ERROR"


@dataclass(frozen=True)
class ImportFailure:
    index: int  # 0-based position in the submitted list
    name: str
    kind: FailureKind
    message: str  # human readable, unchanged legacy text


@dataclass(frozen=True)
class ImportResult:
    """Outcome of one commit run.

    Every submitted record increments exactly one of imported / skipped, and
    every skipped record has exactly one failure entry.
    """
    imported: int
    skipped: int
    failures: list[ImportFailure] = field(default_factory=list)
    start_time: datetime | None = None
    end_time: datetime | None = None
    elapsed_seconds: float = 0.0

    @property
    def submitted(self) -> int:
        return self.imported + self.skipped

    @property
    def errors(self) -> list[str]:
        return [f.message for f in self.failures]

    def as_triple(self) -> tuple[int, int, list[str]]:
        return (self.imported, self.skipped, self.errors)


class ResultAccumulator:
    """Mutable fold state used while commit walks the records."""

    def __init__(self) -> None:
        self.imported = 0
        self.failures: list[ImportFailure] = []
        self.start_time = datetime.now(UTC)

    @property
    def skipped(self) -> int:
        return len(self.failures)

    def add_imported(self) -> None:
        self.imported += 1

    def add_skipped(self, failure: ImportFailure) -> None:
        self.failures.append(failure)

    def build(self) -> ImportResult:
        end_time = datetime.now(UTC)
        return ImportResult(
            imported=self.imported,
            skipped=self.skipped,
            failures=list(self.failures),
            start_time=self.start_time,
            end_time=end_time,
            elapsed_seconds=(end_time - self.start_time).total_seconds(),
        )
