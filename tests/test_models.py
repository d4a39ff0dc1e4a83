#!/usr/bin/env python3
"""Tests for data/models.py record mapping."""

import sys
from datetime import datetime
from pathlib import Path

# Add parent directory to path so imports work
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
from data.models import Advance, TripEntry, Vehicle, Village, document_key, pick, timestamp_text


class TestFieldNames(unittest.TestCase):
    """snake_case and camelCase spellings."""

    def test_document_key(self):
        assert document_key("vehicle_number") == "vehicleNumber"
        assert document_key("sl_number") == "slNumber"
        assert document_key("date") == "date"

    def test_pick_prefers_snake_case_then_camel_case(self):
        assert pick({"advance_amount": 5, "advanceAmount": 9}, "advance_amount") == 5
        assert pick({"advanceAmount": 9}, "advance_amount") == 9
        assert pick({"advance_amount": None}, "advance_amount", 0) == 0

    def test_timestamp_text(self):
        assert timestamp_text(datetime(2024, 3, 5, 10, 11, 12, 999)) == "2024-03-05 10:11:12"
        assert timestamp_text("2024-03-05T10:11:12.123Z") == "2024-03-05 10:11:12"
        assert timestamp_text(None) == ""


class TestFromRecord(unittest.TestCase):
    """Building domain records from stored documents."""

    def test_trip_from_camel_case(self):
        trip = TripEntry.from_record(
            {
                "slNumber": "7",
                "date": "2024-03-05T00:00:00",
                "vehicleNumber": "KA01AB1234",
                "villages": "Hosur, Attibele",
                "advanceAmount": "1,500",
                "strStatus": "",
            },
            record_id=12,
        )
        assert trip.id == "12"
        assert trip.sl_number == 7
        assert trip.date == "2024-03-05"
        assert trip.villages == ["Hosur", "Attibele"]
        assert trip.advance_amount == 1500
        assert trip.str_status == "not received"
        assert trip.vehicle_type == "lorry"

    def test_trip_document_excludes_id_and_timestamps(self):
        document = TripEntry(id="1", sl_number=2, vehicle_number="KA01", created_at="x").to_document()
        assert "id" not in document and "createdAt" not in document
        assert document["slNumber"] == 2

    def test_advance_flags_and_type(self):
        advance = Advance.from_record({"advanceAmount": 100, "isSettled": "true", "advanceType": ""})
        assert advance.is_settled is True
        assert advance.advance_type is None
        assert "is_synthetic" not in advance.to_record()

    def test_vehicle_id_is_number(self):
        vehicle = Vehicle.from_record({"driverName": "Ravi", "isActive": False}, record_id="KA01AB1234")
        assert vehicle.id == "KA01AB1234"
        assert vehicle.is_active is False

    def test_village(self):
        village = Village.from_record({"villageName": "Hosur", "usageCount": "3"}, record_id="v1")
        assert (village.id, village.village_name, village.usage_count, village.is_active) == ("v1", "Hosur", 3, True)


if __name__ == "__main__":
    unittest.main()
