#!/usr/bin/env python3
"""Unit tests for ledger/reconciliation.py."""

import sys
import time
from pathlib import Path

# Add parent directory to path so imports work
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
from data.models import Advance, TripEntry
from ledger.reconciliation import (
    call_with_timeout,
    failed_summary,
    load_trip_summaries,
    reconcile_trip_advances,
)


def _trip(trip_id="7", advance=500.0, vehicle="KA01AB1234"):
    return TripEntry(id=trip_id, sl_number=1, date="2024-03-05", vehicle_number=vehicle, advance_amount=advance)


class TestReconcileTripAdvances(unittest.TestCase):
    """Single-trip reconciliation including legacy trips."""

    def test_synthesizes_initial_when_only_trip_amount_exists(self):
        summary = reconcile_trip_advances(_trip(), lambda trip_id, vehicle: [])
        assert summary.has_synthetic_initial
        assert summary.initial_total == 500
        assert summary.total_advances == 500
        assert summary.count == 1
        assert summary.initial_count == 1
        synthetic = summary.initial_advances[0]
        assert synthetic.id == "initial-7"
        assert synthetic.is_synthetic
        assert synthetic.advance_type == "initial"

    def test_synthetic_id_is_stable(self):
        first = reconcile_trip_advances(_trip(), lambda trip_id, vehicle: [])
        second = reconcile_trip_advances(_trip(), lambda trip_id, vehicle: [])
        assert first.initial_advances[0].id == second.initial_advances[0].id

    def test_no_synthesis_when_real_initial_exists(self):
        advances = [Advance(id="1", advance_amount=500, advance_type="initial", trip_id="7")]
        summary = reconcile_trip_advances(_trip(), lambda trip_id, vehicle: advances)
        assert not summary.has_synthetic_initial
        assert summary.total_advances == 500
        assert summary.count == 1

    def test_no_synthesis_for_zero_advance_trip(self):
        summary = reconcile_trip_advances(_trip(advance=0), lambda trip_id, vehicle: [])
        assert not summary.has_synthetic_initial
        assert summary.total_advances == 0
        assert summary.count == 0

    def test_synthetic_initial_combines_with_additional(self):
        advances = [Advance(id="2", advance_amount=300, advance_type="additional", trip_id="7")]
        summary = reconcile_trip_advances(_trip(), lambda trip_id, vehicle: advances)
        assert summary.has_synthetic_initial
        assert summary.initial_total == 500
        assert summary.additional_total == 300
        assert summary.total_advances == 800
        assert summary.count == 2

    def test_synthetic_initial_is_placed_by_trip_creation_time(self):
        trip = _trip()
        trip.created_at = "2024-03-05 08:00:00"
        advances = [
            Advance(id="4", advance_amount=100, advance_type="additional", trip_id="7", created_at="2024-03-07 09:00:00"),
            Advance(id="3", advance_amount=100, advance_type="additional", trip_id="7", created_at="2024-03-06 09:00:00"),
            Advance(id="2", advance_amount=100, advance_type="additional", trip_id="7", created_at="2024-03-04 09:00:00"),
            Advance(id="1", advance_amount=100, advance_type="additional", trip_id="7", created_at="2024-03-03 09:00:00"),
        ]
        summary = reconcile_trip_advances(trip, lambda trip_id, vehicle: advances)
        assert [a.id for a in summary.advances] == ["4", "3", "initial-7", "2", "1"]
        assert [a.id for a in summary.recent_advances] == ["4", "3", "initial-7"]
        assert [a.id for a in advances] == ["4", "3", "2", "1"]

    def test_synthetic_initial_without_timestamp_goes_last(self):
        advances = [Advance(id="2", advance_amount=300, advance_type="additional", trip_id="7", created_at="2024-03-06 09:00:00")]
        summary = reconcile_trip_advances(_trip(), lambda trip_id, vehicle: advances)
        assert [a.id for a in summary.advances] == ["2", "initial-7"]

    def test_fetcher_receives_trip_and_vehicle(self):
        calls = []

        def fetcher(trip_id, vehicle):
            calls.append((trip_id, vehicle))
            return []

        reconcile_trip_advances(_trip(trip_id="9", vehicle="MH12XY0001"), fetcher)
        assert calls == [("9", "MH12XY0001")]

    def test_fetch_error_yields_failed_summary(self):
        def fetcher(trip_id, vehicle):
            raise ConnectionError("offline")

        summary = reconcile_trip_advances(_trip(), fetcher)
        assert summary.failed
        assert summary.count == 0
        assert summary.total_advances == 500

    def test_accepts_raw_record(self):
        record = {"id": "3", "vehicleNumber": "KA01", "advanceAmount": "250", "date": "2024-01-01"}
        summary = reconcile_trip_advances(record, lambda trip_id, vehicle: [])
        assert summary.trip_id == "3"
        assert summary.total_advances == 250

    def test_failed_summary_shape(self):
        summary = failed_summary(_trip(advance=120))
        assert summary.failed
        assert summary.advances == []
        assert summary.total_advances == 120


class TestLoadTripSummaries(unittest.TestCase):
    """Batch reconciliation with isolated failures."""

    def test_empty_input(self):
        assert load_trip_summaries([], lambda trip_id, vehicle: []) == {}

    def test_one_failure_does_not_affect_others(self):
        trips = [_trip(trip_id=str(i), advance=100 * i) for i in range(1, 6)]

        def fetcher(trip_id, vehicle):
            if trip_id == "3":
                raise RuntimeError("boom")
            return [Advance(id=f"a{trip_id}", advance_amount=50, advance_type="additional", trip_id=trip_id)]

        summaries = load_trip_summaries(trips, fetcher, max_workers=3)
        assert set(summaries) == {"1", "2", "3", "4", "5"}
        assert summaries["3"].failed
        for trip_id in ("1", "2", "4", "5"):
            assert not summaries[trip_id].failed
            assert summaries[trip_id].total_advances == 100 * int(trip_id) + 50


class TestCallWithTimeout(unittest.TestCase):
    """Bounded loaders fall back to defaults."""

    def test_returns_loader_value(self):
        assert call_with_timeout(lambda: 42, default=0, timeout=2) == 42

    def test_returns_default_on_error(self):
        def loader():
            raise RuntimeError("no network")

        assert call_with_timeout(loader, default="fallback", timeout=2) == "fallback"

    def test_returns_default_on_timeout(self):
        def loader():
            time.sleep(1.0)
            return "late"

        started = time.monotonic()
        assert call_with_timeout(loader, default="fallback", timeout=0.1) == "fallback"
        assert time.monotonic() - started < 0.9


if __name__ == "__main__":
    unittest.main()
