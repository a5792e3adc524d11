from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import UTC, datetime

from ..models.contact import IntermediateContact, StoredContact

"""JSON export of contacts.

export_contacts_list() emits the bare array accepted by the structured
document parser; export_contacts() wraps it in the dated backup envelope
(version 1.0) used for contact backups.
"""

__all__ = [
    "BACKUP_VERSION",
    "backup_filename",
    "export_contacts",
    "export_contacts_list",
]

BACKUP_VERSION = "1.0"


def export_contacts_list(contacts: Sequence[StoredContact | IntermediateContact]) -> str:
    return json.dumps([c.as_row() for c in contacts], ensure_ascii=False, indent=2)


def export_contacts(
    contacts: Sequence[StoredContact | IntermediateContact], *, now: datetime | None = None
) -> str:
    stamp = (now or datetime.now(UTC)).isoformat().replace("+00:00", "Z")
    backup = {
        "contacts": [c.as_row() for c in contacts],
        "timestamp": stamp,
        "version": BACKUP_VERSION,
    }
    return json.dumps(backup, ensure_ascii=False, indent=2)


def backup_filename(now: datetime | None = None) -> str:
    day = (now or datetime.now(UTC)).strftime("%Y-%m-%d")
    return f"contacts-backup-{day}.json"
