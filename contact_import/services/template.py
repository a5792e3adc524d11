from __future__ import annotations

from pathlib import Path

"""Downloadable CSV template for first-time imports."""

__all__ = [
    "TEMPLATE_FILENAME",
    "TEMPLATE_HEADER",
    "render_template",
    "write_template",
]

TEMPLATE_FILENAME = "contacts-template.csv"
TEMPLATE_HEADER = "name,phone,email,role,organization"

_EXAMPLE_ROWS = (
    "ESIC Regional Office Mumbai,9876543210,esic.mumbai@gov.in,payer_contact,ESIC",
    "CGHS Delhi Office,9876543211,cghs.delhi@nic.in,payer_contact,CGHS",
    "Hospital Claims Department,9876543212,claims@hospital.com,hospital_contact,Main Hospital",
)


def render_template() -> str:
    return "\n".join((TEMPLATE_HEADER, *_EXAMPLE_ROWS))


def write_template(directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / TEMPLATE_FILENAME
    path.write_text(render_template() + "\n", encoding="utf-8")
    return path
