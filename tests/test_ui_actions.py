#!/usr/bin/env python3
"""Tests for ui/ui_actions.py helpers and actions that need no live window."""

import os
import sys
import tempfile
import threading
from datetime import date
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

# Add parent directory to path so imports work
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
from data.database_service import DatabaseService
from data.models import TripEntry, Village
from ledger.reconciliation import failed_summary
from ledger.report_builder import ReportFilters
from ledger.trip_workflow import create_trip
from ui.ui_actions import (
    add_advance_action,
    add_trip_action,
    read_report_filters,
    refresh_reports_action,
    run_in_background,
    save_str_changes_action,
    toggle_str_status,
    trip_form_defaults,
    village_suggestions,
)


def _entry(value):
    entry = MagicMock()
    entry.get.return_value = value
    return entry


def _form(**overrides):
    form = {
        "date": "2024-03-05",
        "vehicle_number": "KA01AB1234",
        "str_number": "STR-1",
        "villages": ["Hosur"],
        "quantity": "10",
        "driver_name": "Ravi",
        "mobile_number": "9876543210",
        "vehicle_type": "lorry",
        "advance_amount": "500",
    }
    form.update(overrides)
    return form


class TestPureHelpers(unittest.TestCase):
    """Helpers used by the tabs."""

    def test_toggle_str_status(self):
        assert toggle_str_status("not received") == "Received"
        assert toggle_str_status(" received ") == "not received"

    def test_village_suggestions(self):
        villages = [Village(id=str(i), village_name=name) for i, name in enumerate(["Hosur", "Hoskote", "Anekal"])]
        assert village_suggestions(villages, "hos", ["hosur"]) == ["Hoskote"]
        assert village_suggestions(villages, "", []) == ["Hosur", "Hoskote", "Anekal"]

    def test_trip_form_defaults(self):
        trip = TripEntry(id="1", date="2024-03-05", quantity=10.0, advance_amount=2500.0, villages=["Hosur"])
        defaults = trip_form_defaults(trip)
        assert defaults["quantity"] == "10"
        assert defaults["advance_amount"] == "2500"
        assert defaults["villages"] == ["Hosur"]
        assert defaults["villages"] is not trip.villages

    def test_read_report_filters(self):
        app = SimpleNamespace(
            report_from=_entry("2024-03-01"),
            report_to=_entry("2024-03-31"),
            report_vehicle_entry=_entry(" ka01 "),
            report_village_entry=_entry(""),
        )
        filters = read_report_filters(app, lambda widget: widget.get())
        assert (filters.date_from, filters.date_to) == (date(2024, 3, 1), date(2024, 3, 31))
        assert filters.vehicle_number == "ka01"

    def test_read_report_filters_rejects_bad_dates(self):
        app = SimpleNamespace(
            report_from=_entry("2024-03-31"),
            report_to=_entry("2024-03-01"),
            report_vehicle_entry=_entry(""),
            report_village_entry=_entry(""),
        )
        with self.assertRaises(ValueError):
            read_report_filters(app, lambda widget: widget.get())
        app.report_to = _entry("31/03/2024")
        with self.assertRaises(ValueError):
            read_report_filters(app, lambda widget: widget.get())


class ActionTestCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.db = DatabaseService(os.path.join(self.tmpdir.name, "roadline.db"))
        self.app = MagicMock()
        self.log_action = MagicMock()
        self.notify = MagicMock()

    def tearDown(self):
        self.db.close()
        self.tmpdir.cleanup()


class TestTripActions(ActionTestCase):
    """Add-trip button handler."""

    def _run(self, form):
        self.show_invalid = MagicMock()
        self.reset_form = MagicMock()
        add_trip_action(
            app=self.app,
            storage=self.db,
            collect_trip_form_cb=lambda: form,
            clear_inline_errors_cb=MagicMock(),
            show_inline_error_cb=MagicMock(),
            show_invalid_cb=self.show_invalid,
            reset_trip_form_cb=self.reset_form,
            log_action_cb=self.log_action,
            notify_cb=self.notify,
        )

    def test_valid_form_saves_and_resets(self):
        self._run(_form())
        assert len(self.db.list_trips()) == 1
        self.reset_form.assert_called_once()
        self.app._refresh_after_trip_change.assert_called_once()
        assert self.log_action.call_args[0][0] == "ADD_TRIP"
        self.notify.assert_called_once_with("Trip #1 saved for KA01AB1234.", "success")

    def test_invalid_form_shows_message(self):
        self._run(_form(quantity=""))
        assert self.db.list_trips() == []
        self.show_invalid.assert_called_once_with("Quantity is required.")
        self.reset_form.assert_not_called()


class TestAdvanceActions(ActionTestCase):
    """Add-advance button handler."""

    def _run(self, amount):
        self.show_invalid = MagicMock()
        self.app.advance_amount_entry = _entry(amount)
        self.app.advance_note_entry = _entry("Diesel")
        add_advance_action(
            app=self.app,
            storage=self.db,
            get_entry_value_cb=lambda widget: widget.get(),
            show_invalid_cb=self.show_invalid,
            reset_entry_cb=MagicMock(),
            log_action_cb=self.log_action,
            notify_cb=self.notify,
        )

    def test_requires_selected_trip(self):
        self.app._get_selected_advance_trip.return_value = None
        self._run("100")
        self.show_invalid.assert_called_once_with("Select a trip to add the advance to.")

    def test_adds_advance_and_refreshes_details(self):
        trip = create_trip(self.db, _form())
        self.app._get_selected_advance_trip.return_value = (trip, None)
        self._run("250")
        summary = self.app._show_advance_trip_details.call_args[0][1]
        assert summary.total_advances == 750
        self.notify.assert_called_once_with("Advance of ₹250 added to trip #1.", "success")

    def test_rejects_zero_amount(self):
        trip = create_trip(self.db, _form())
        self.app._get_selected_advance_trip.return_value = (trip, None)
        self._run("0")
        self.show_invalid.assert_called_once_with("Advance amount must be greater than 0.")
        assert len(self.db.get_advances_by_trip(trip.id)) == 1


class TestStrActions(ActionTestCase):
    """Batch STR status save."""

    def test_no_edits(self):
        self.app._str_edits = {}
        save_str_changes_action(app=self.app, storage=self.db, log_action_cb=self.log_action, notify_cb=self.notify)
        self.notify.assert_called_once_with("No STR changes to save.", "info")

    def test_saves_changed_statuses(self):
        trip = create_trip(self.db, _form())
        self.app._str_edits = {trip.id: "Received"}
        self.app._str_trips = {trip.id: trip}
        save_str_changes_action(app=self.app, storage=self.db, log_action_cb=self.log_action, notify_cb=self.notify)
        assert self.db.get_trip(trip.id).str_status == "Received"
        self.app.refresh_str_status.assert_called_once()
        self.notify.assert_called_once_with("Updated STR status for 1 trip(s).", "success")

    @patch("core.error_handler.messagebox")
    def test_storage_error_is_reported(self, mock_messagebox):
        storage = MagicMock()
        storage.update_str_status.side_effect = RuntimeError("write failed")
        trip = TripEntry(id="1", sl_number=1, str_status="not received")
        self.app._str_edits = {"1": "Received"}
        self.app._str_trips = {"1": trip}
        save_str_changes_action(app=self.app, storage=storage, log_action_cb=self.log_action, notify_cb=self.notify)
        mock_messagebox.showerror.assert_called_once()
        self.notify.assert_not_called()

class TestBackgroundLoading(unittest.TestCase):
    """Loads that run off the Tk thread and report back through ``after``."""

    def _app(self):
        self.delivered = threading.Event()
        app = MagicMock()
        app.winfo_exists.return_value = True

        def _after(_delay, callback):
            callback()
            self.delivered.set()

        app.after.side_effect = _after
        return app

    def test_result_reaches_the_tk_callback(self):
        app = self._app()
        threads = []
        received = []

        def loader():
            threads.append(threading.current_thread())
            return 42

        run_in_background(app, loader, received.append, "Load Numbers", "numbers-loader")
        assert self.delivered.wait(5)
        assert received == [42]
        assert threads[0] is not threading.main_thread()

    @patch("core.error_handler.messagebox")
    def test_loader_error_is_shown(self, mock_messagebox):
        app = self._app()
        received = []

        def loader():
            raise RuntimeError("store offline")

        run_in_background(app, loader, received.append, "Load Numbers", "numbers-loader")
        assert self.delivered.wait(5)
        assert received == []
        mock_messagebox.showerror.assert_called_once()

    def test_closed_window_drops_result(self):
        app = self._app()
        app.winfo_exists.return_value = False
        received = []
        run_in_background(app, lambda: 1, received.append, "Load Numbers", "numbers-loader")
        assert self.delivered.wait(5)
        assert received == []

    def test_report_refresh_loads_off_the_tk_thread(self):
        app = self._app()
        threads = []
        row = SimpleNamespace(trip=TripEntry(id="1", sl_number=1, villages=["Hosur"]), summary=failed_summary(TripEntry(id="1")))

        def fake_load_report(storage, filters):
            threads.append(threading.current_thread())
            return [row]

        filters = ReportFilters(date_from=date(2024, 3, 1), date_to=date(2024, 3, 31))
        with patch("ui.ui_actions.load_report", side_effect=fake_load_report):
            refresh_reports_action(
                app=app,
                storage=MagicMock(),
                read_filters_cb=lambda: filters,
                show_invalid_cb=MagicMock(),
                row_stripe_tag_cb=lambda index: "even",
            )
            assert self.delivered.wait(5)
        assert threads[0] is not threading.main_thread()
        assert app._report_rows == [row]
        assert app._report_filters is filters



if __name__ == "__main__":
    unittest.main()
