from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .row_draft import RowDraftList

"""Raw import payload variants.

One variant per input format; the operator picks the method once per session
and services.preview dispatches on the variant type.
"""

__all__ = [
    "ImportMethod",
    "DelimitedText",
    "StructuredDocument",
    "ManualRows",
    "RawImportPayload",
]


class ImportMethod(str, Enum):
    CSV = "csv"
    JSON = "json"
    MANUAL = "manual"


@dataclass(frozen=True)
class DelimitedText:
    body: str


@dataclass(frozen=True)
class StructuredDocument:
    body: str


@dataclass(frozen=True)
class ManualRows:
    rows: RowDraftList = field(default_factory=RowDraftList)


RawImportPayload = DelimitedText | StructuredDocument | ManualRows
