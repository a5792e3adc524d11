from __future__ import annotations

import json
import uuid
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from ..models.contact import DEFAULT_ROLE, IntermediateContact
from .errors import FormatError

"""Structured-document (JSON) contact parser.

Accepts a top-level JSON array of objects with the optional keys
id, name, phone, email, role, organization, notes, createdAt.

Unlike the delimited parser, nameless records are NOT dropped here; they are
passed through and rejected at commit time with a per-record message.
"""

__all__ = [
    "parse_structured_document",
    "new_placeholder_id",
]


def new_placeholder_id() -> str:
    return uuid.uuid4().hex


def _text(value: Any, default: str = "") -> str:
    # 偽値 (None / "" / 0 / false) は既定値扱い
    if not value:
        return default
    if isinstance(value, str):
        return value
    return str(value)


def _timestamp(value: Any, fallback: datetime) -> datetime:
    if not value or not isinstance(value, str):
        return fallback
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return fallback
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _to_contact(
    item: Mapping[str, Any], created_at: datetime, id_factory: Callable[[], str]
) -> IntermediateContact:
    return IntermediateContact(
        id=_text(item.get("id")) or id_factory(),
        name=_text(item.get("name")),
        phone=_text(item.get("phone")),
        email=_text(item.get("email")),
        role=_text(item.get("role"), DEFAULT_ROLE),
        organization=_text(item.get("organization")),
        notes=_text(item.get("notes")),
        created_at=_timestamp(item.get("createdAt"), created_at),
    )


def parse_structured_document(
    body: str,
    *,
    now: datetime | None = None,
    id_factory: Callable[[], str] | None = None,
) -> list[IntermediateContact]:
    """Parse a JSON array of contact objects.

    Raises:
        FormatError: body is not valid JSON, or the top level is not an array
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError, RecursionError) as e:
        # 深すぎる入れ子も構文エラーと同じ扱い
        raise FormatError("Invalid JSON format") from e
    if not isinstance(data, list):
        raise FormatError(
            f"Invalid JSON format - expected array of contacts, got {type(data).__name__}"
        )

    created_at = now or datetime.now(UTC)
    make_id = id_factory or new_placeholder_id
    contacts: list[IntermediateContact] = []
    for item in data:
        # 配列要素がオブジェクトでない場合は空オブジェクトとして扱う
        mapping = item if isinstance(item, Mapping) else {}
        contacts.append(_to_contact(mapping, created_at, make_id))
    return contacts
