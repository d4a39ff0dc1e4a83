#!/usr/bin/env python3
"""Tests for core/error_handler.py."""

import sys
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path so imports work
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
from core.error_handler import (
    _format_error_message,
    safe_ui_action,
    safe_ui_action_returning,
    wrap_action_with_error_handling,
)
from data.storage import StorageUnavailableError


class TestSafeUiAction(unittest.TestCase):
    """Decorated actions never raise into tkinter."""

    @patch("core.error_handler.messagebox")
    def test_success_passes_through(self, mock_messagebox):
        @safe_ui_action("Add Trip")
        def action(value):
            return value * 2

        assert action(4) == 8
        mock_messagebox.showerror.assert_not_called()

    @patch("core.error_handler.messagebox")
    def test_error_shows_dialog_and_returns_none(self, mock_messagebox):
        @safe_ui_action("Add Trip")
        def action():
            raise ValueError("Quantity is required.")

        assert action() is None
        mock_messagebox.showerror.assert_called_once_with("Error: Add Trip", "Quantity is required.")

    @patch("core.error_handler.messagebox")
    def test_dialog_can_be_suppressed(self, mock_messagebox):
        @safe_ui_action("Refresh", show_error_dialog=False)
        def action():
            raise RuntimeError("boom")

        assert action() is None
        mock_messagebox.showerror.assert_not_called()

    @patch("core.error_handler.messagebox")
    def test_returning_variant(self, mock_messagebox):
        @safe_ui_action_returning("Save", return_on_error=False)
        def action():
            raise RuntimeError("boom")

        assert action() is False
        mock_messagebox.showerror.assert_called_once()

    @patch("core.error_handler.messagebox")
    def test_keyboard_interrupt_propagates(self, mock_messagebox):
        @safe_ui_action("Loop")
        def action():
            raise KeyboardInterrupt

        with self.assertRaises(KeyboardInterrupt):
            action()

    @patch("core.error_handler.messagebox")
    def test_dialog_failure_is_logged_not_raised(self, mock_messagebox):
        mock_messagebox.showerror.side_effect = RuntimeError("tk destroyed")

        @safe_ui_action("Close")
        def action():
            raise RuntimeError("boom")

        assert action() is None

    @patch("core.error_handler.messagebox")
    def test_wrap_uses_function_name(self, mock_messagebox):
        def refresh_reports():
            raise RuntimeError("boom")

        wrapped = wrap_action_with_error_handling(refresh_reports)
        assert wrapped() is None
        title = mock_messagebox.showerror.call_args[0][0]
        assert title == "Error: refresh_reports"


class TestFormatErrorMessage(unittest.TestCase):
    """User-facing error text."""

    def test_validation_message_is_shown_as_is(self):
        assert _format_error_message("Add Trip", "Bad date", ValueError("Bad date")) == "Bad date"

    def test_storage_hint(self):
        exc = StorageUnavailableError("offline")
        message = _format_error_message("Load Trips", "offline", exc)
        assert "while Load Trips" in message
        assert "local storage" in message

    def test_generic_message_is_truncated(self):
        long_text = "x" * 900
        message = _format_error_message("Export", long_text, RuntimeError(long_text))
        assert "..." in message
        assert "x" * 498 not in message


if __name__ == "__main__":
    unittest.main()
