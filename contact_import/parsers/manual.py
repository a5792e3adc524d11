from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from ..models.contact import IntermediateContact
from ..models.row_draft import RowDraft

"""Manual-entry parser: RowDraft scratch rows -> IntermediateContact."""

__all__ = [
    "parse_manual_rows",
]


def parse_manual_rows(rows: Iterable[RowDraft], *, now: datetime | None = None) -> list[IntermediateContact]:
    """Drop drafts with a blank name and trim every remaining field.

    created_at is the preview time; drafts themselves are left untouched.
    """
    created_at = now or datetime.now(UTC)
    return [
        IntermediateContact(
            id="",
            name=draft.name.strip(),
            phone=draft.phone.strip(),
            email=draft.email.strip(),
            role=draft.role.strip(),
            organization=draft.organization.strip(),
            created_at=created_at,
        )
        for draft in rows
        if draft.name.strip()
    ]
