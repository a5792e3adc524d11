from __future__ import annotations

from datetime import UTC, datetime

from ..models.contact import DEFAULT_ROLE, IntermediateContact

"""Delimited-text (CSV-like) contact parser.

Rules:
1. The whole body is trimmed and split into lines
2. If the first line contains "name" (case-insensitive) it is a header and skipped
3. Each non-blank line is split on ',' and every field is trimmed and has '"' removed
4. Lines with fewer than 3 fields, or an empty name field, are dropped silently
5. Columns: name, phone, email, role, organization (extra columns ignored)

This is intentionally not a full CSV dialect: quoted commas are not
supported, matching the template format operators paste into the import box.
"""

__all__ = [
    "parse_delimited_text",
    "HEADER_TOKEN",
    "MIN_FIELDS",
]

HEADER_TOKEN = "name"
MIN_FIELDS = 3


def _split_fields(line: str) -> list[str]:
    return [f.strip().replace('"', "") for f in line.split(",")]


def _field(fields: list[str], index: int, default: str = "") -> str:
    if index < len(fields) and fields[index]:
        return fields[index]
    return default


def parse_delimited_text(body: str, *, now: datetime | None = None) -> list[IntermediateContact]:
    """Parse delimited text into contacts.

    Parameters
    ----------
    body: 貼り付けられたテキスト全体
    now: created_at に使う時刻 (None なら現在 UTC)
    """
    created_at = now or datetime.now(UTC)
    lines = body.strip().splitlines()
    if not lines:
        return []

    start = 1 if HEADER_TOKEN in lines[0].lower() else 0
    contacts: list[IntermediateContact] = []
    for raw in lines[start:]:
        line = raw.strip()
        if not line:
            continue
        fields = _split_fields(line)
        if len(fields) < MIN_FIELDS:
            continue
        name = _field(fields, 0)
        if not name:
            continue
        contacts.append(
            IntermediateContact(
                id="",
                name=name,
                phone=_field(fields, 1),
                email=_field(fields, 2),
                role=_field(fields, 3, DEFAULT_ROLE),
                organization=_field(fields, 4),
                created_at=created_at,
            )
        )
    return contacts
