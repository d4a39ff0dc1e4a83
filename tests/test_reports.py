#!/usr/bin/env python3
"""Tests for report building and the CSV/Excel/PDF/vCard exports."""

import csv
import os
import sys
import tempfile
from datetime import date
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path so imports work
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
import openpyxl
from core.config import CSV_HEADERS
from data.database_service import DatabaseService
from data.models import TripEntry, Vehicle
from ledger import report_pdf
from ledger.reconciliation import TripAdvanceSummary
from ledger.report_builder import (
    ReportFilters,
    ReportRow,
    ReportSummary,
    build_today_metrics,
    filter_trips,
    load_report,
    sort_trips,
    summarize_report,
)
from ledger.report_export import (
    build_vcard,
    default_export_filename,
    report_row_values,
    write_report_csv,
    write_report_xlsx,
    write_vcard,
)
from ledger.trip_workflow import add_additional_advance, create_trip
from utils.date_utils import iso_date, today


def _trip(trip_id, sl, trip_date, vehicle="KA01AB1234", villages=("Hosur",), status="not received", quantity=10):
    return TripEntry(
        id=trip_id,
        sl_number=sl,
        date=trip_date,
        vehicle_number=vehicle,
        str_number=f"STR-{sl}",
        str_status=status,
        villages=list(villages),
        quantity=quantity,
        driver_name="Ravi",
        mobile_number="9876543210",
    )


def _row(trip, initial=0.0, additional=0.0, count=0, synthetic=False):
    summary = TripAdvanceSummary(
        trip_id=trip.id,
        initial_total=initial,
        additional_total=additional,
        total_advances=initial + additional,
        count=count,
        initial_count=1 if initial else 0,
        additional_count=count - (1 if initial else 0),
        has_synthetic_initial=synthetic,
    )
    return ReportRow(trip=trip, summary=summary)


def _form(trip_date, vehicle="KA01AB1234", advance="500", str_number="STR-1"):
    return {
        "date": trip_date,
        "vehicle_number": vehicle,
        "str_number": str_number,
        "villages": ["Hosur"],
        "quantity": "10",
        "driver_name": "Ravi",
        "mobile_number": "9876543210",
        "vehicle_type": "lorry",
        "advance_amount": advance,
    }


class TestReportFilters(unittest.TestCase):
    """Filter matching and ordering."""

    def setUp(self):
        self.trips = [
            _trip("1", 1, "2024-03-01", villages=("Hosur", "Attibele")),
            _trip("2", 2, "2024-03-15", vehicle="MH12XY0001", villages=("Anekal",), status="Received"),
            _trip("3", 3, "2024-04-02"),
        ]

    def test_current_month(self):
        filters = ReportFilters.current_month(date(2024, 3, 20))
        assert (filters.date_from, filters.date_to) == (date(2024, 3, 1), date(2024, 3, 31))
        assert [t.id for t in filter_trips(self.trips, filters)] == ["1", "2"]

    def test_vehicle_village_and_status_filters(self):
        assert [t.id for t in filter_trips(self.trips, ReportFilters(vehicle_number="mh12"))] == ["2"]
        assert [t.id for t in filter_trips(self.trips, ReportFilters(village="atti"))] == ["1"]
        assert [t.id for t in filter_trips(self.trips, ReportFilters(str_status="received"))] == ["2"]

    def test_quick_filter_and_period_label(self):
        filters = ReportFilters.quick("today", date(2024, 3, 15))
        assert filters.period_label() == ("2024-03-15", "2024-03-15")
        assert ReportFilters().period_label() == ("start", "today")

    def test_sort_newest_date_then_highest_sl(self):
        trips = [_trip("a", 4, "2024-03-01"), _trip("b", 9, "2024-03-02"), _trip("c", 5, "2024-03-01")]
        assert [t.id for t in sort_trips(trips)] == ["b", "c", "a"]


class TestSummaries(unittest.TestCase):
    """Totals shown above the report table."""

    def test_empty_report(self):
        assert summarize_report([]) == ReportSummary()

    def test_summary_totals(self):
        rows = [
            _row(_trip("1", 1, "2024-03-01", quantity=10), initial=500, count=1),
            _row(_trip("2", 2, "2024-03-02", vehicle="ka01ab1234", quantity=2.5), initial=300, additional=200, count=2),
            _row(_trip("3", 3, "2024-03-03", vehicle="MH12XY0001", quantity=5)),
        ]
        summary = summarize_report(rows)
        assert summary.total_trips == 3
        assert summary.total_advances == 1000
        assert summary.total_quantity == 17.5
        assert summary.unique_vehicles == 2
        assert round(summary.avg_advance_per_trip, 2) == 333.33


class TestLoadReport(unittest.TestCase):
    """Reports and dashboard metrics from a live local store."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.db = DatabaseService(os.path.join(self.tmpdir.name, "roadline.db"))

    def tearDown(self):
        self.db.close()
        self.tmpdir.cleanup()

    def test_load_report_reconciles_each_trip(self):
        first = create_trip(self.db, _form("2024-03-01"))
        create_trip(self.db, _form("2024-03-10", advance="", str_number="STR-2"))
        create_trip(self.db, _form("2024-04-01", str_number="STR-3"))
        add_additional_advance(self.db, first, "250")

        rows = load_report(self.db, ReportFilters(date_from=date(2024, 3, 1), date_to=date(2024, 3, 31)))
        assert [r.trip.sl_number for r in rows] == [2, 1]
        by_sl = {r.trip.sl_number: r.summary for r in rows}
        assert by_sl[1].total_advances == 750
        assert by_sl[1].count == 2
        assert by_sl[2].total_advances == 0

    def test_load_report_without_dates(self):
        create_trip(self.db, _form("2024-03-01"))
        create_trip(self.db, _form("2024-04-01", vehicle="MH12XY0001", str_number="STR-2"))
        rows = load_report(self.db, ReportFilters(vehicle_number="MH12"))
        assert [r.trip.vehicle_number for r in rows] == ["MH12XY0001"]

    def test_today_metrics(self):
        day = iso_date(today())
        create_trip(self.db, _form(day))
        create_trip(self.db, _form("2020-01-01", vehicle="MH12XY0001", advance="100", str_number="STR-2"))
        metrics = build_today_metrics(self.db)
        assert metrics.today_trips_count == 1
        # Both initial advances were recorded today, whatever the trip date.
        assert metrics.today_advances_total == 600
        assert metrics.active_vehicles == 2
        assert len(metrics.recent_trips) == 1


class TestExports(unittest.TestCase):
    """CSV, Excel and vCard output."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.rows = [
            _row(_trip("1", 1, "2024-03-05", villages=("Hosur", "Attibele")), initial=500, additional=250, count=2),
            _row(_trip("2", 2, "2024-03-06", quantity=2.5)),
        ]

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_default_filename(self):
        filters = ReportFilters(date_from=date(2024, 3, 1), date_to=date(2024, 3, 31))
        assert default_export_filename(filters, "xlsx") == "SuhelRoadline_Report_2024-03-01_to_2024-03-31.xlsx"
        assert default_export_filename(ReportFilters()) == "SuhelRoadline_Report_start_to_today.csv"

    def test_row_values_follow_header_order(self):
        values = report_row_values(self.rows[0])
        assert len(values) == len(CSV_HEADERS)
        record = dict(zip(CSV_HEADERS, values))
        assert record["Date"] == "Mar 05, 2024"
        assert record["Villages"] == "Hosur; Attibele"
        assert record["Quantity"] == 10
        assert record["Initial Advances Total"] == 500
        assert record["Additional Advances Count"] == 1
        assert record["Grand Total Advances"] == 750
        assert record["Total Advance Records"] == 2
        assert report_row_values(self.rows[1])[CSV_HEADERS.index("Quantity")] == 2.5

    def test_write_csv(self):
        path = os.path.join(self.tmpdir.name, "report.csv")
        assert write_report_csv(self.rows, path) == 2
        with open(path, newline="", encoding="utf-8-sig") as handle:
            lines = list(csv.reader(handle))
        assert lines[0] == CSV_HEADERS
        assert lines[1][0] == "1"
        assert lines[1][CSV_HEADERS.index("Grand Total Advances")] == "750"
        assert len(lines) == 3

    def test_write_xlsx(self):
        path = os.path.join(self.tmpdir.name, "report.xlsx")
        summary = summarize_report(self.rows)
        filters = ReportFilters(date_from=date(2024, 3, 1), date_to=date(2024, 3, 31))
        assert write_report_xlsx(self.rows, summary, path, filters) == 2

        ws = openpyxl.load_workbook(path).active
        assert ws.title == "Trips"
        assert [c.value for c in ws[1]] == CSV_HEADERS
        assert ws.cell(2, 1).value == 1
        assert ws.cell(2, CSV_HEADERS.index("Grand Total Advances") + 1).value == 750
        assert ws.cell(ws.max_row, 1).value == "Period 2024-03-01 to 2024-03-31"
        assert ws.cell(ws.max_row, 6).value == 750

    def test_vcard_skips_incomplete_vehicles(self):
        vehicles = [
            Vehicle(vehicle_number="KA01AB1234", driver_name="Ravi", mobile_number="9876543210"),
            Vehicle(vehicle_number="MH12XY0001", driver_name="", mobile_number="9123456780"),
            Vehicle(vehicle_number="TN09ZZ0002", driver_name="Kumar", mobile_number=""),
        ]
        card = build_vcard(vehicles)
        assert card.count("BEGIN:VCARD") == 1
        assert "VERSION:3.0" in card
        assert "FN:Ravi (KA01AB1234)" in card
        assert "TEL:9876543210" in card

        path = os.path.join(self.tmpdir.name, "contacts.vcf")
        assert write_vcard(vehicles, path) == 1
        assert write_vcard(vehicles[1:], os.path.join(self.tmpdir.name, "empty.vcf")) == 0
        assert not os.path.exists(os.path.join(self.tmpdir.name, "empty.vcf"))


class TestReportPdf(unittest.TestCase):
    """PDF rendering through reportlab."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_generates_pdf(self):
        rows = [_row(_trip("1", 1, "2024-03-05"), initial=500, count=1, synthetic=True)]
        path = os.path.join(self.tmpdir.name, "report.pdf")
        result = report_pdf.generate_report_pdf(path, rows, summarize_report(rows), ReportFilters())
        assert result.success, result.message
        assert result.file_path == path
        with open(path, "rb") as handle:
            assert handle.read(5) == b"%PDF-"

    def test_empty_report_still_renders(self):
        path = os.path.join(self.tmpdir.name, "empty.pdf")
        result = report_pdf.generate_report_pdf(path, [], ReportSummary(), ReportFilters())
        assert result.success
        assert os.path.getsize(path) > 0

    def test_unwritable_path_reports_failure(self):
        path = os.path.join(self.tmpdir.name, "missing-dir", "report.pdf")
        result = report_pdf.generate_report_pdf(path, [], ReportSummary(), ReportFilters())
        assert not result.success
        assert result.error is not None

    def test_missing_reportlab(self):
        with patch.object(report_pdf, "_REPORTLAB_OK", False):
            assert not report_pdf.reportlab_available()
            result = report_pdf.generate_report_pdf("unused.pdf", [], ReportSummary(), ReportFilters())
        assert not result.success
        assert "reportlab" in result.message


if __name__ == "__main__":
    unittest.main()
