from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

import pandas as pd

from ..models.contact import IntermediateContact
from ..models.payload import (
    DelimitedText,
    ImportMethod,
    ManualRows,
    RawImportPayload,
    StructuredDocument,
)
from ..models.row_draft import RowDraftList
from ..parsers.delimited import parse_delimited_text
from ..parsers.manual import parse_manual_rows
from ..parsers.structured import parse_structured_document
from ..validation.validators import contact_issues

"""Preview builder: parser dispatch with no side effects.

build_preview() is the only entry point the session / CLI use to turn a raw
payload into the contact list shown for confirmation. Nothing is persisted
here; calling it twice with the same payload gives the same list (JSON
placeholder ids aside).
"""

logger = logging.getLogger(__name__)

__all__ = [
    "build_preview",
    "payload_for",
    "preview_frame",
    "PREVIEW_COLUMNS",
]

PREVIEW_COLUMNS = ["name", "phone", "email", "role", "organization", "issues"]


def payload_for(method: ImportMethod | str, source: str | RowDraftList) -> RawImportPayload:
    """Wrap raw operator input in the payload variant for ``method``."""
    method = ImportMethod(method)
    if method is ImportMethod.MANUAL:
        if not isinstance(source, RowDraftList):
            raise TypeError("manual import expects a RowDraftList")
        return ManualRows(rows=source)
    if not isinstance(source, str):
        raise TypeError(f"{method.value} import expects text input")
    if method is ImportMethod.CSV:
        return DelimitedText(body=source)
    return StructuredDocument(body=source)


def build_preview(payload: RawImportPayload, *, now: datetime | None = None) -> list[IntermediateContact]:
    """Parse ``payload`` with the parser matching its variant.

    Raises:
        FormatError: structured document could not be parsed (no partial preview)
    """
    match payload:
        case DelimitedText(body=body):
            contacts = parse_delimited_text(body, now=now)
        case StructuredDocument(body=body):
            contacts = parse_structured_document(body, now=now)
        case ManualRows(rows=rows):
            contacts = parse_manual_rows(rows, now=now)
        case _:
            raise TypeError(f"unsupported payload: {type(payload).__name__}")
    logger.debug("preview built variant=%s contacts=%d", type(payload).__name__, len(contacts))
    return contacts


def preview_frame(contacts: Sequence[IntermediateContact]) -> pd.DataFrame:
    """Tabular preview for display (one row per contact, issues joined by ', ')."""
    records = [
        {
            "name": c.name,
            "phone": c.phone,
            "email": c.email,
            "role": c.role,
            "organization": c.organization,
            "issues": ", ".join(contact_issues(c)),
        }
        for c in contacts
    ]
    return pd.DataFrame(records, columns=PREVIEW_COLUMNS)
