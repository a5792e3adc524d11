from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display service with tqdm (TTY only).

Shows one progress bar per commit run, advanced once per record. In non-TTY
environments (CI, piped output) the bar is disabled entirely so that log
lines and the SUMMARY line stay clean.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Return True if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class ProgressTracker:
    """Progress tracker using tqdm for record commits."""

    def __init__(self, total_records: int, *, description: str = "Importing contacts") -> None:
        """Initialize progress tracker.

        Args:
            total_records: Number of records submitted to commit
            description: Description for the progress bar
        """
        self.total_records = total_records
        self.description = description
        self.current_record = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_records,
                desc=description,
                unit="contact",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_record(self, name: str) -> None:
        self.current_record += 1
        if self.enabled and self.pbar is not None:
            label = name if len(name) <= 24 else name[:21] + "..."
            self.pbar.set_description(f"{self.description} ({label})")

    def finish_record(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        """Close the progress bar."""
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
