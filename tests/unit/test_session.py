from __future__ import annotations

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from contact_import.models.payload import ImportMethod
from contact_import.models.row_draft import RowDraft
from contact_import.parsers.errors import FormatError
from contact_import.services.session import ImportSession, SessionState, SessionStateError

"""Import session state machine tests (edit -> preview -> confirm / cancel)."""


def test_initial_state(fake_creator):
    s = ImportSession(fake_creator)
    assert s.state is SessionState.EDITING
    assert s.method is ImportMethod.CSV
    assert s.text == ""
    assert len(s.drafts) == 1
    assert s.preview_contacts == []
    assert s.result is None


def test_preview_does_not_call_storage(fake_creator):
    s = ImportSession(fake_creator)
    s.set_text("name,phone,email\nAsha,9876543210,a@b.com")
    contacts = s.preview()
    assert [c.name for c in contacts] == ["Asha"]
    assert s.state is SessionState.PREVIEWING
    assert fake_creator.calls == []


def test_format_error_keeps_editing_state(fake_creator):
    s = ImportSession(fake_creator, method="json")
    s.set_text("{not json")
    with pytest.raises(FormatError):
        s.preview()
    assert s.state is SessionState.EDITING
    assert s.preview_contacts == []


def test_back_to_edit_then_change_method(fake_creator):
    s = ImportSession(fake_creator)
    s.set_text('[{"name": "Asha", "phone": "9876543210"}]')
    assert s.preview() == []  # JSON text read as CSV: first line has "name"
    with pytest.raises(SessionStateError):
        s.select_method("json")
    s.back_to_edit()
    s.select_method("json")
    assert [c.name for c in s.preview()] == ["Asha"]


def test_manual_method_uses_drafts(fake_creator):
    s = ImportSession(fake_creator, method=ImportMethod.MANUAL)
    s.drafts.update(0, "name", " Asha ")
    s.drafts.update(0, "phone", "9876543210")
    s.drafts.add(RowDraft(name=""))
    contacts = s.preview()
    assert [(c.name, c.role) for c in contacts] == [("Asha", "payer_contact")]


def test_confirm_commits_reports_and_closes(make_creator):
    creator = make_creator(reject={"Ravi"})
    on_complete = MagicMock()
    on_close = MagicMock()
    s = ImportSession(creator, on_complete=on_complete, on_close=on_close)
    s.set_text("Asha,9876543210,a@b.com\nRavi,9876543211,r@b.com")
    s.preview()
    result = asyncio.run(s.confirm())

    assert result.as_triple() == (1, 1, ["Failed to import contact: Ravi"])
    assert s.result is result
    assert s.state is SessionState.COMMITTED
    on_complete.assert_called_once_with(1, 1, ["Failed to import contact: Ravi"])
    on_close.assert_called_once_with()


def test_confirm_requires_preview(fake_creator):
    s = ImportSession(fake_creator)
    s.set_text("Asha,9876543210,a@b.com")
    with pytest.raises(SessionStateError):
        asyncio.run(s.confirm())
    assert fake_creator.calls == []


def test_confirm_rejects_empty_preview(fake_creator):
    s = ImportSession(fake_creator)
    s.set_text("name,phone,email")
    s.preview()
    with pytest.raises(SessionStateError):
        asyncio.run(s.confirm())
    assert s.state is SessionState.PREVIEWING


def test_confirm_twice_is_rejected(fake_creator):
    s = ImportSession(fake_creator)
    s.set_text("Asha,9876543210,a@b.com")
    s.preview()
    asyncio.run(s.confirm())
    with pytest.raises(SessionStateError):
        asyncio.run(s.confirm())
    assert len(fake_creator.calls) == 1


def test_cancel_discards_inputs(fake_creator):
    on_close = MagicMock()
    on_complete = MagicMock()
    s = ImportSession(fake_creator, on_close=on_close, on_complete=on_complete)
    s.set_text("Asha,9876543210,a@b.com")
    s.drafts.add()
    s.preview()
    s.cancel()
    assert s.state is SessionState.CLOSED
    assert s.text == ""
    assert len(s.drafts) == 1
    assert s.preview_contacts == []
    on_close.assert_called_once_with()
    on_complete.assert_not_called()
    assert fake_creator.calls == []
    with pytest.raises(SessionStateError):
        s.cancel()


def test_closed_session_rejects_edits(fake_creator):
    s = ImportSession(fake_creator)
    s.cancel()
    with pytest.raises(SessionStateError):
        s.set_text("x")
    with pytest.raises(SessionStateError):
        s.preview()


def test_confirm_with_progress_uses_tracker(fake_creator):
    s = ImportSession(fake_creator, show_progress=True)
    s.set_text("Asha,9876543210,a@b.com\nRavi,9876543211,r@b.com")
    s.preview()
    with patch("contact_import.services.session.ProgressTracker") as tracker_cls:
        tracker = tracker_cls.return_value.__enter__.return_value
        asyncio.run(s.confirm())
    tracker_cls.assert_called_once_with(2)
    assert tracker.finish_record.call_count == 2
