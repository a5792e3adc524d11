from __future__ import annotations

"""Parser exceptions."""

__all__ = [
    "FormatError",
]


class FormatError(ValueError):
    """Raised when an input document cannot be parsed at all (fatal to preview)."""
