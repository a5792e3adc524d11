from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .contact import Role

"""RowDraft scratch records for manual contact entry.

RowDraftList enforces the "keep at least one row" rule of the manual entry
grid: the session always holds one draft, and removing the last remaining
draft is rejected instead of being left to the UI to disable.
"""

__all__ = [
    "RowDraft",
    "RowDraftList",
    "LastRowDraftError",
    "DRAFT_FIELDS",
]

DRAFT_FIELDS = ("name", "phone", "email", "role", "organization")


class LastRowDraftError(Exception):
    """Raised when removing the only remaining RowDraft."""


@dataclass
class RowDraft:
    """Mutable scratch row (manual entry only)."""
    name: str = ""
    phone: str = ""
    email: str = ""
    role: str = Role.PAYER_CONTACT.value  # 新規行の既定ロール
    organization: str = ""


class RowDraftList:
    """Ordered RowDraft collection that never drops below one entry."""

    def __init__(self, drafts: list[RowDraft] | None = None) -> None:
        self._drafts: list[RowDraft] = list(drafts) if drafts else [RowDraft()]

    def __len__(self) -> int:
        return len(self._drafts)

    def __iter__(self) -> Iterator[RowDraft]:
        return iter(self._drafts)

    def __getitem__(self, index: int) -> RowDraft:
        return self._drafts[index]

    @property
    def can_remove(self) -> bool:
        return len(self._drafts) > 1

    def add(self, draft: RowDraft | None = None) -> RowDraft:
        new = draft if draft is not None else RowDraft()
        self._drafts.append(new)
        return new

    def remove(self, index: int) -> RowDraft:
        if not self.can_remove:
            raise LastRowDraftError("cannot remove the last remaining row")
        return self._drafts.pop(index)

    def update(self, index: int, field_name: str, value: str) -> RowDraft:
        """Set one field of the draft at ``index``.

        Raises:
            KeyError: unknown field name
            ValueError: role outside the Role enumeration
            IndexError: index out of range
        """
        if field_name not in DRAFT_FIELDS:
            raise KeyError(f"unknown draft field: {field_name}")
        if field_name == "role" and not Role.is_known(value):
            raise ValueError(f"unknown role: {value}")
        draft = self._drafts[index]
        setattr(draft, field_name, value)
        return draft
