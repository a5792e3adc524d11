from __future__ import annotations

import re

from ..models.contact import IntermediateContact, Role

"""Phone / email validators for Indian contact data.

All functions are pure and total: they never raise and never mutate input.
Accepted phone shapes:
- 10 digits starting with 6-9 (domestic mobile)
- 12 digits starting with country code 91 followed by a domestic number
- '+91' prefixed input with 12 digits in total
"""

__all__ = [
    "is_valid_email",
    "is_valid_phone",
    "normalize_phone",
    "format_phone_number",
    "contact_issues",
]

_NON_DIGITS = re.compile(r"\D+")
_DOMESTIC = re.compile(r"^[6-9]\d{9}$")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
COUNTRY_CODE = "91"


def _digits(value: str) -> str:
    return _NON_DIGITS.sub("", value)


def is_valid_email(value: str) -> bool:
    """Shape check only (local@domain.tld); no DNS or deliverability check."""
    return _EMAIL.match(value.strip()) is not None


def is_valid_phone(value: str) -> bool:
    cleaned = _digits(value)
    if len(cleaned) == 10:
        return _DOMESTIC.match(cleaned) is not None
    if len(cleaned) == 12 and cleaned.startswith(COUNTRY_CODE):
        return _DOMESTIC.match(cleaned[2:]) is not None
    if value.startswith("+91") and len(cleaned) == 12:
        return _DOMESTIC.match(cleaned[2:]) is not None
    return False


def normalize_phone(value: str) -> str:
    """Return the bare 10-digit domestic number, or the input unchanged."""
    cleaned = _digits(value)
    if len(cleaned) == 10 and _DOMESTIC.match(cleaned):
        return cleaned
    if len(cleaned) == 12 and cleaned.startswith(COUNTRY_CODE):
        number = cleaned[2:]
        if _DOMESTIC.match(number):
            return number
    return value


def format_phone_number(value: str) -> str:
    """Display form '+91 XXXXX XXXXX' for valid numbers, else the input."""
    if not is_valid_phone(value):
        return value
    number = normalize_phone(value)
    return f"+{COUNTRY_CODE} {number[:5]} {number[5:]}"


def contact_issues(contact: IntermediateContact) -> list[str]:
    """Non-blocking preview annotations for one contact.

    Empty phone / email are not flagged individually; only the case where
    both are empty is reported, since that is what commit will reject.
    """
    issues: list[str] = []
    if not contact.name.strip():
        issues.append("missing name")
    if not contact.phone and not contact.email:
        issues.append("missing phone and email")
    if contact.phone and not is_valid_phone(contact.phone):
        issues.append("invalid phone")
    if contact.email and not is_valid_email(contact.email):
        issues.append("invalid email")
    if not Role.is_known(contact.role):
        issues.append("unknown role")
    return issues
