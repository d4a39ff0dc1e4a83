#!/usr/bin/env python3
"""Tests for ledger/trip_workflow.py against a temporary local database."""

import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path so imports work
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
from data.database_service import DatabaseService
from data.models import TripEntry
from ledger.reconciliation import reconcile_trip_advances
from ledger.trip_workflow import (
    add_additional_advance,
    apply_str_status_changes,
    create_trip,
    delete_trip,
    edit_trip,
    save_vehicle,
    save_village,
    validate_trip_form,
)


def _form(**overrides):
    form = {
        "date": "2024-03-05",
        "vehicle_number": "ka01ab1234",
        "str_number": "str-100",
        "str_status": "not received",
        "villages": ["Hosur", "Attibele"],
        "quantity": "10",
        "driver_name": "Ravi Kumar",
        "mobile_number": "+919876543210",
        "vehicle_type": "lorry",
        "advance_amount": "500",
    }
    form.update(overrides)
    return form


class WorkflowTestCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.db = DatabaseService(os.path.join(self.tmpdir.name, "roadline.db"))

    def tearDown(self):
        self.db.close()
        self.tmpdir.cleanup()


class TestValidateTripForm(unittest.TestCase):
    """Form cleaning and rejection messages."""

    def test_cleans_values(self):
        cleaned = validate_trip_form(_form())
        assert cleaned["vehicle_number"] == "KA01AB1234"
        assert cleaned["str_number"] == "STR-100"
        assert cleaned["mobile_number"] == "9876543210"
        assert cleaned["quantity"] == 10.0
        assert cleaned["advance_amount"] == 500.0

    def test_blank_advance_is_zero(self):
        assert validate_trip_form(_form(advance_amount=""))["advance_amount"] == 0.0

    def test_rejections(self):
        bad_forms = [
            _form(date="05-03-2024"),
            _form(quantity="0"),
            _form(villages=[]),
            _form(mobile_number="12345"),
            _form(advance_amount="-1"),
            _form(vehicle_type="bus"),
            _form(driver_name=""),
        ]
        for form in bad_forms:
            with self.assertRaises(ValueError):
                validate_trip_form(form)


class TestCreateTrip(WorkflowTestCase):
    """Trip creation side effects."""

    def test_create_assigns_sl_and_records_initial_advance(self):
        first = create_trip(self.db, _form())
        second = create_trip(self.db, _form(advance_amount=""))
        assert (first.sl_number, second.sl_number) == (1, 2)

        advances = self.db.get_advances_by_trip(first.id, first.vehicle_number)
        assert len(advances) == 1
        assert advances[0].advance_type == "initial"
        assert advances[0].advance_amount == 500
        assert advances[0].note == "Initial advance amount set during trip creation"
        assert self.db.get_advances_by_trip(second.id) == []

    def test_create_remembers_vehicle_and_villages(self):
        create_trip(self.db, _form())
        vehicle = self.db.get_vehicle("KA01AB1234")
        assert vehicle.driver_name == "Ravi Kumar"
        assert vehicle.mobile_number == "9876543210"
        usage = {v.village_name: v.usage_count for v in self.db.list_villages()}
        assert usage == {"Attibele": 1, "Hosur": 1}

    def test_failed_initial_advance_keeps_trip(self):
        with patch.object(self.db, "add_advance", side_effect=RuntimeError("write failed")):
            trip = create_trip(self.db, _form())
        assert self.db.get_trip(trip.id) is not None
        summary = reconcile_trip_advances(trip, self.db.get_advances_by_trip)
        assert summary.has_synthetic_initial
        assert summary.total_advances == 500


class TestEditTrip(WorkflowTestCase):
    """Edits and advance increases."""

    def test_increase_records_additional_advance(self):
        trip = create_trip(self.db, _form())
        edit_trip(self.db, trip, _form(advance_amount="800"))
        assert self.db.get_trip(trip.id).advance_amount == 800
        advances = self.db.get_advances_by_trip(trip.id, trip.vehicle_number)
        additional = [a for a in advances if a.advance_type == "additional"]
        assert len(additional) == 1
        assert additional[0].advance_amount == 300
        assert additional[0].note == "Advance increased from ₹500 to ₹800"

    def test_decrease_only_updates_trip(self):
        trip = create_trip(self.db, _form())
        edit_trip(self.db, trip, _form(advance_amount="200"))
        assert self.db.get_trip(trip.id).advance_amount == 200
        assert len(self.db.get_advances_by_trip(trip.id)) == 1

    def test_raising_zero_advance_is_counted_once(self):
        trip = create_trip(self.db, _form(advance_amount="0"))
        edit_trip(self.db, trip, _form(advance_amount="300"))
        summary = reconcile_trip_advances(self.db.get_trip(trip.id), self.db.get_advances_by_trip)
        assert not summary.has_synthetic_initial
        assert summary.initial_total == 300
        assert summary.additional_total == 0
        assert summary.total_advances == 300

    def test_raising_legacy_advance_is_counted_once(self):
        legacy = self.db.add_trip(
            TripEntry(
                sl_number=1,
                date="2024-03-05",
                vehicle_number="KA01AB1234",
                str_number="STR-1",
                villages=["Hosur"],
                quantity=10,
                driver_name="Ravi",
                mobile_number="9876543210",
                advance_amount=500,
            )
        )
        edit_trip(self.db, legacy, _form(advance_amount="700", str_number="STR-1", villages=["Hosur"]))
        summary = reconcile_trip_advances(self.db.get_trip(legacy.id), self.db.get_advances_by_trip)
        assert not summary.has_synthetic_initial
        assert summary.initial_total == 500
        assert summary.additional_total == 200
        assert summary.total_advances == 700

    def test_raising_after_failed_initial_is_counted_once(self):
        with patch.object(self.db, "add_advance", side_effect=RuntimeError("write failed")):
            trip = create_trip(self.db, _form())
        edit_trip(self.db, trip, _form(advance_amount="800"))
        summary = reconcile_trip_advances(self.db.get_trip(trip.id), self.db.get_advances_by_trip)
        assert summary.total_advances == 800
        assert summary.count == 2

    def test_raising_with_real_initial_adds_only_difference(self):
        trip = create_trip(self.db, _form())
        edit_trip(self.db, trip, _form(advance_amount="800"))
        summary = reconcile_trip_advances(self.db.get_trip(trip.id), self.db.get_advances_by_trip)
        assert summary.initial_total == 500
        assert summary.additional_total == 300
        assert summary.total_advances == 800

    def test_no_changes_is_a_noop(self):
        trip = create_trip(self.db, _form())
        before = self.db.get_trip(trip.id).updated_at
        edit_trip(self.db, trip, _form())
        assert self.db.get_trip(trip.id).updated_at == before


class TestAdvancesAndStatus(WorkflowTestCase):
    """Additional advances, STR updates and deletion."""

    def test_additional_advance_requires_positive_amount(self):
        trip = create_trip(self.db, _form())
        with self.assertRaises(ValueError):
            add_additional_advance(self.db, trip, "0")
        with self.assertRaises(ValueError):
            add_additional_advance(self.db, None, "100")
        saved = add_additional_advance(self.db, trip, "250", note="Diesel")
        assert saved.advance_type == "additional"
        assert saved.note == "Diesel"
        summary = reconcile_trip_advances(trip, self.db.get_advances_by_trip)
        assert summary.total_advances == 750

    def test_str_changes_only_write_differences(self):
        first = create_trip(self.db, _form())
        second = create_trip(self.db, _form(str_number="STR-101"))
        trips = [first, second]
        updated = apply_str_status_changes(
            self.db, trips, {first.id: "Received", second.id: "not received"}
        )
        assert updated == 1
        assert self.db.get_trip(first.id).str_status == "Received"
        assert self.db.get_trip(second.id).str_status == "not received"

    def test_delete_trip(self):
        trip = create_trip(self.db, _form())
        with self.assertRaises(ValueError):
            delete_trip(self.db, "")
        delete_trip(self.db, trip.id)
        assert self.db.get_trip(trip.id) is None


class TestRegistries(WorkflowTestCase):
    """Vehicle and village saves from the settings screen."""

    def test_save_vehicle(self):
        vehicle = save_vehicle(
            self.db,
            {"vehicle_number": "mh12xy0001", "driver_name": "Suresh", "mobile_number": "9123456780", "vehicle_type": "tempo"},
        )
        assert vehicle.vehicle_number == "MH12XY0001"
        assert vehicle.vehicle_type == "tempo"
        with self.assertRaises(ValueError):
            save_vehicle(self.db, {"vehicle_number": "MH12XY0001", "driver_name": "", "mobile_number": "9123456780"})

    def test_save_village_adds_and_renames(self):
        village = save_village(self.db, "Hosur")
        assert village.village_name == "Hosur"
        assert save_village(self.db, "Hosur Town", village_id=village.id) is None
        assert [v.village_name for v in self.db.list_villages()] == ["Hosur Town"]
        with self.assertRaises(ValueError):
            save_village(self.db, "   ")


if __name__ == "__main__":
    unittest.main()
