from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

Structured per-record failure entry written as JSON Lines by
contact_import.logging.error_log. index=-1 marks a source-level error where no
record position applies (e.g. an unparsable JSON document).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Input file name (or "<manual>" / "<stdin>")
        index: 0-based record position. -1 for source-level errors
        name: Contact name as submitted (may be empty)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable message
    """
    timestamp: str  # ISO8601 UTC
    source: str
    index: int  # 不明な場合 -1
    name: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(source: str, index: int, name: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            index=index,
            name=name,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line (fixed key set, no extras)."""
        return json.dumps(asdict(self), ensure_ascii=False)
