from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.contact import IntermediateContact
from ..models.import_result import (
    MISSING_FIELDS_MESSAGE,
    FailureKind,
    ImportFailure,
    ImportResult,
    ResultAccumulator,
)
from .progress import ProgressTracker

"""Commit / reconciliation engine.

commit() is a sequential async fold over the previewed contacts:
- strict input order, one awaited create() at a time (no batching / gather)
- a record failure never aborts the run (no early exit, no cancellation)
- every record ends up counted as imported or skipped

The storage backend is injected as a plain awaitable callable so the engine
can be exercised without a live database.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "CreateContact",
    "commit",
    "has_required_fields",
]

CreateContact = Callable[[Mapping[str, str]], Awaitable[Any]]


def has_required_fields(contact: IntermediateContact) -> bool:
    """A contact needs a name and at least one of phone / email."""
    if not contact.name.strip():
        return False
    return bool(contact.phone or contact.email)


def _error_text(exc: BaseException) -> str:
    return str(exc) or "Unknown error"


async def commit(
    contacts: Sequence[IntermediateContact],
    create: CreateContact,
    *,
    progress: ProgressTracker | None = None,
    error_log: ErrorLogBuffer | None = None,
    source: str = "",
) -> ImportResult:
    """Persist ``contacts`` one by one through ``create`` and reconcile.

    Args:
        contacts: Previewed contacts, committed in this order
        create: Storage create operation; returns the stored record, or None
            when the backend rejects the row
        progress: Optional progress bar advanced once per record
        error_log: Optional JSON Lines buffer receiving one entry per failure
        source: Input name recorded in error log entries

    Returns:
        ImportResult with imported + skipped == len(contacts)
    """
    acc = ResultAccumulator()

    def _skip(index: int, contact: IntermediateContact, kind: FailureKind, message: str) -> None:
        acc.add_skipped(ImportFailure(index=index, name=contact.name, kind=kind, message=message))
        logger.warning("record=%d name=%r skipped kind=%s: %s", index, contact.name, kind.value, message)
        if error_log is not None:
            error_log.append(ErrorRecord.create(source, index, contact.name, kind.value, message))

    for index, contact in enumerate(contacts):
        if progress is not None:
            progress.start_record(contact.name)

        if not has_required_fields(contact):
            _skip(index, contact, FailureKind.MISSING_REQUIRED_FIELDS, MISSING_FIELDS_MESSAGE)
        else:
            try:
                stored = await create(contact.as_fields())
            except Exception as e:  # 接続断含め 1 件単位で skip 扱い
                _skip(
                    index,
                    contact,
                    FailureKind.STORE_ERROR,
                    f"Error importing {contact.name}: {_error_text(e)}",
                )
            else:
                if stored is None:
                    _skip(
                        index,
                        contact,
                        FailureKind.STORE_REJECTED,
                        f"Failed to import contact: {contact.name}",
                    )
                else:
                    acc.add_imported()
                    logger.debug("record=%d name=%r imported id=%s", index, contact.name, getattr(stored, "id", None))

        if progress is not None:
            progress.finish_record()
            progress.set_postfix(imported=acc.imported, skipped=acc.skipped)

    result = acc.build()
    logger.info(
        "commit finished submitted=%d imported=%d skipped=%d",
        result.submitted,
        result.imported,
        result.skipped,
    )
    return result
