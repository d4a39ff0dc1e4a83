#!/usr/bin/env python3
"""Unit tests for ledger/advance_totals.py."""

import sys
from pathlib import Path

# Add parent directory to path so imports work
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
from data.models import Advance
from ledger.advance_totals import AdvanceKind, calculate_advance_totals, normalize_advance


class TestNormalizeAdvance(unittest.TestCase):
    """Classification of single advance records."""

    def test_initial_tag(self):
        result = normalize_advance({"advanceAmount": 500, "advanceType": "initial", "tripId": "t1"})
        assert result.kind is AdvanceKind.INITIAL
        assert result.amount == 500

    def test_additional_tag(self):
        result = normalize_advance({"advance_amount": "250", "advance_type": "additional"})
        assert result.kind is AdvanceKind.ADDITIONAL
        assert result.amount == 250

    def test_tags_must_match_exactly(self):
        for tag in ("INITIAL", " initial", "Additional", "additional "):
            result = normalize_advance({"advanceAmount": 100, "advanceType": tag, "tripId": "t1"})
            assert result.kind is None, tag

    def test_whitespace_trip_reference_is_a_reference(self):
        result = normalize_advance({"advanceAmount": 100, "tripId": " "})
        assert result.kind is AdvanceKind.ADDITIONAL

    def test_untagged_with_trip_counts_as_additional(self):
        result = normalize_advance(Advance(advance_amount=100, trip_id="t1"))
        assert result.kind is AdvanceKind.ADDITIONAL

    def test_untagged_without_trip_is_unclassified(self):
        result = normalize_advance({"advanceAmount": 100, "tripId": ""})
        assert result.kind is None

    def test_unknown_tag_is_unclassified(self):
        result = normalize_advance({"advanceAmount": 100, "advanceType": "refund", "tripId": "t1"})
        assert result.kind is None

    def test_malformed_amount_becomes_zero(self):
        assert normalize_advance({"advanceAmount": "abc", "advanceType": "initial"}).amount == 0
        assert normalize_advance({"advanceType": "initial"}).amount == 0

    def test_non_record_input(self):
        result = normalize_advance(42)
        assert result.kind is None
        assert result.amount == 0


class TestCalculateAdvanceTotals(unittest.TestCase):
    """Aggregated totals over a trip's advances."""

    def test_empty_and_invalid_input_returns_zeros(self):
        for value in (None, [], (), "not a list", {"advanceAmount": 5}):
            totals = calculate_advance_totals(value)
            assert totals.total == 0
            assert totals.count == 0
            assert totals.initial_advances == []
            assert totals.additional_advances == []

    def test_mixed_records(self):
        advances = [
            {"advanceAmount": 500, "advanceType": "initial", "tripId": "t1"},
            {"advanceAmount": 200, "advanceType": "additional", "tripId": "t1"},
            {"advanceAmount": 300, "tripId": "t1"},
        ]
        totals = calculate_advance_totals(advances)
        assert totals.initial == 500
        assert totals.additional == 500
        assert totals.total == 1000
        assert totals.count == 3
        assert totals.initial_count == 1
        assert totals.additional_count == 2

    def test_total_is_initial_plus_additional(self):
        advances = [
            Advance(advance_amount=120.5, advance_type="initial", trip_id="t"),
            Advance(advance_amount=79.5, advance_type="additional", trip_id="t"),
        ]
        totals = calculate_advance_totals(advances)
        assert totals.total == totals.initial + totals.additional == 200

    def test_count_includes_unclassified_records(self):
        advances = [
            {"advanceAmount": 100, "advanceType": "initial", "tripId": "t"},
            {"advanceAmount": 999, "tripId": ""},
        ]
        totals = calculate_advance_totals(advances)
        assert totals.count == 2
        assert totals.initial_count + totals.additional_count == 1
        assert totals.total == 100

    def test_inexact_tags_are_counted_but_not_summed(self):
        advances = [
            {"advanceAmount": 100, "advanceType": "INITIAL", "tripId": "t"},
            {"advanceAmount": 40, "advanceType": "additional", "tripId": "t"},
        ]
        totals = calculate_advance_totals(advances)
        assert totals.initial == 0
        assert totals.initial_count == 0
        assert totals.additional == 40
        assert totals.total == 40
        assert totals.count == 2

    def test_input_is_not_mutated(self):
        advances = [{"advanceAmount": "10", "advanceType": "initial", "tripId": "t"}]
        snapshot = [dict(a) for a in advances]
        calculate_advance_totals(advances)
        assert advances == snapshot

    def test_records_are_returned_unchanged(self):
        record = {"advanceAmount": 10, "advanceType": "initial", "tripId": "t"}
        totals = calculate_advance_totals([record])
        assert totals.initial_advances[0] is record


if __name__ == "__main__":
    unittest.main()
