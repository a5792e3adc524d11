from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

"""Contact domain models for the bulk contact import pipeline.

IntermediateContact is the common shape produced by every parser and consumed
by the preview and commit phases. StoredContact is what the storage backend
hands back after a successful create; only its id and created_at are read.
"""

__all__ = [
    "Role",
    "IntermediateContact",
    "StoredContact",
    "DEFAULT_ROLE",
]


class Role(str, Enum):
    """Contact role tag.

    - PAYER_CONTACT: payer office (ESIC, CGHS, ...)
    - HOSPITAL_CONTACT: hospital claims desk
    - INSURANCE_AGENT: insurer side agent
    - TPA_CONTACT: third party administrator
    - OTHER: fallback when the source gives no role
    """
    PAYER_CONTACT = "payer_contact"
    HOSPITAL_CONTACT = "hospital_contact"
    INSURANCE_AGENT = "insurance_agent"
    TPA_CONTACT = "tpa_contact"
    OTHER = "other"

    @classmethod
    def is_known(cls, value: str) -> bool:
        return value in {r.value for r in cls}


DEFAULT_ROLE = Role.OTHER.value


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class IntermediateContact:
    """Parsed contact awaiting preview / commit (never persisted as-is).

    role は str のまま保持する (CSV では列挙外の値もそのまま通す)。
    """
    id: str  # empty until assigned by storage (JSON import may carry a placeholder)
    name: str
    phone: str
    email: str
    role: str
    organization: str
    notes: str | None = None
    created_at: datetime = field(default_factory=_utc_now)

    def as_fields(self) -> dict[str, str]:
        """Return the create() payload sent to the storage backend."""
        return {
            "name": self.name,
            "phone": self.phone or "",
            "email": self.email or "",
            "role": self.role or DEFAULT_ROLE,
            "organization": self.organization or "",
            "notes": self.notes or "",
        }

    def as_row(self) -> dict[str, str]:
        """Serialisable representation (JSON export, preview table)."""
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "role": self.role,
            "organization": self.organization,
            "notes": self.notes or "",
            "createdAt": self.created_at.isoformat().replace("+00:00", "Z"),
        }


@dataclass(frozen=True)
class StoredContact:
    """Contact as returned by the storage backend after create()."""
    id: str
    name: str
    phone: str
    email: str
    role: str
    organization: str = ""
    notes: str = ""
    created_at: datetime = field(default_factory=_utc_now)  # server assigned

    def as_row(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "role": self.role,
            "organization": self.organization,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat().replace("+00:00", "Z"),
        }
