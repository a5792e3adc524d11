from __future__ import annotations

from unittest.mock import MagicMock, patch

from contact_import.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_follows_stdout():
    with patch("sys.stdout") as stdout:
        stdout.isatty.return_value = True
        assert is_tty_enabled() is True
        stdout.isatty.return_value = False
        assert is_tty_enabled() is False


def test_disabled_outside_tty():
    with patch("contact_import.services.progress.is_tty_enabled", return_value=False):
        with patch("contact_import.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(3)
            tracker.start_record("Asha")
            tracker.finish_record()
            tracker.close()
    mock_tqdm.assert_not_called()
    assert tracker.pbar is None
    assert tracker.current_record == 1


def test_enabled_tracker_drives_tqdm():
    pbar = MagicMock()
    with patch("contact_import.services.progress.is_tty_enabled", return_value=True):
        with patch("contact_import.services.progress.tqdm", return_value=pbar) as mock_tqdm:
            with ProgressTracker(2) as tracker:
                tracker.start_record("Hospital Claims Department North Wing")
                tracker.finish_record()
                tracker.set_postfix(imported=1, skipped=0)
    kwargs = mock_tqdm.call_args.kwargs
    assert kwargs["total"] == 2
    assert kwargs["unit"] == "contact"
    pbar.set_description.assert_any_call("Importing contacts (Hospital Claims Depar...)")
    pbar.update.assert_called_once_with(1)
    pbar.set_postfix.assert_called_once_with(imported=1, skipped=0)
    pbar.close.assert_called_once()
    assert tracker.pbar is None
