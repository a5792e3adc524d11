from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from ..logging.error_log import ErrorLogBuffer
from ..models.contact import IntermediateContact
from ..models.import_result import ImportResult
from ..models.payload import ImportMethod, RawImportPayload
from ..models.row_draft import RowDraftList
from .preview import build_preview, payload_for
from .progress import ProgressTracker
from .reconcile import CreateContact, commit

"""Two-phase import session (edit -> preview -> confirm).

State transitions: editing ⇄ previewing → committed, and any open state → closed.

- preview() never persists; a FormatError leaves the session in editing with
  no preview stored
- confirm() is the only path to the storage backend
- cancel() discards all inputs; the close callback fires exactly once
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ImportSession",
    "SessionState",
    "SessionStateError",
]

CompleteCallback = Callable[[int, int, list[str]], None]
CloseCallback = Callable[[], None]


class SessionState(Enum):
    EDITING = "editing"
    PREVIEWING = "previewing"
    COMMITTED = "committed"
    CLOSED = "closed"


class SessionStateError(Exception):
    """Operation not allowed in the current session state."""


class ImportSession:
    """One bulk-import session; inputs and preview live only as long as it does."""

    def __init__(
        self,
        create: CreateContact,
        *,
        method: ImportMethod | str = ImportMethod.CSV,
        on_complete: CompleteCallback | None = None,
        on_close: CloseCallback | None = None,
        error_log: ErrorLogBuffer | None = None,
        source: str = "",
        show_progress: bool = False,
    ) -> None:
        self._create = create
        self._on_complete = on_complete
        self._on_close = on_close
        self._error_log = error_log
        self._source = source
        self._show_progress = show_progress
        self.method = ImportMethod(method)
        self.text = ""
        self.drafts = RowDraftList()
        self.preview_contacts: list[IntermediateContact] = []
        self.result: ImportResult | None = None
        self.state = SessionState.EDITING

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise SessionStateError(f"session is {self.state.value}; expected {allowed}")

    def select_method(self, method: ImportMethod | str) -> None:
        self._require(SessionState.EDITING)
        self.method = ImportMethod(method)

    def set_text(self, body: str) -> None:
        self._require(SessionState.EDITING)
        self.text = body

    def payload(self) -> RawImportPayload:
        source = self.drafts if self.method is ImportMethod.MANUAL else self.text
        return payload_for(self.method, source)

    def preview(self) -> list[IntermediateContact]:
        """Build the preview for the current method and inputs.

        Raises:
            FormatError: the JSON document could not be parsed
        """
        self._require(SessionState.EDITING, SessionState.PREVIEWING)
        contacts = build_preview(self.payload())
        self.preview_contacts = contacts
        self.state = SessionState.PREVIEWING
        logger.info("preview method=%s contacts=%d", self.method.value, len(contacts))
        return contacts

    def back_to_edit(self) -> None:
        self._require(SessionState.PREVIEWING)
        self.state = SessionState.EDITING

    async def confirm(self) -> ImportResult:
        """Commit the previewed contacts, then report and close."""
        self._require(SessionState.PREVIEWING)
        if not self.preview_contacts:
            raise SessionStateError("nothing to import: preview is empty")

        if self._show_progress:
            with ProgressTracker(len(self.preview_contacts)) as progress:
                result = await commit(
                    self.preview_contacts,
                    self._create,
                    progress=progress,
                    error_log=self._error_log,
                    source=self._source,
                )
        else:
            result = await commit(
                self.preview_contacts,
                self._create,
                error_log=self._error_log,
                source=self._source,
            )
        self.result = result
        self.state = SessionState.COMMITTED
        if self._on_complete is not None:
            self._on_complete(result.imported, result.skipped, result.errors)
        self._close()
        return result

    def cancel(self) -> None:
        self._require(SessionState.EDITING, SessionState.PREVIEWING)
        self.text = ""
        self.drafts = RowDraftList()
        self.preview_contacts = []
        self.state = SessionState.CLOSED
        self._close()

    def _close(self) -> None:
        if self._on_close is not None:
            self._on_close()
