from __future__ import annotations

import csv
from typing import Any, Iterable

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill

from core.app_logging import trace
from core.config import (
    CSV_HEADERS,
    EXCEL_FILL_COLORS,
    EXPORT_FILENAME_PREFIX,
    VILLAGE_EXPORT_SEPARATOR,
)
from data.models import Vehicle
from ledger.report_builder import ReportFilters, ReportRow, ReportSummary
from utils.date_utils import format_display_date

_INR_NUMBER_FORMAT = "₹#,##,##0"


def _plain_number(value: float) -> Any:
    number = float(value or 0)
    return int(number) if number.is_integer() else round(number, 2)


def default_export_filename(filters: ReportFilters, extension: str = "csv") -> str:
    start, end = filters.period_label()
    return f"{EXPORT_FILENAME_PREFIX}_{start}_to_{end}.{extension}"


def report_row_values(row: ReportRow) -> list[Any]:
    """One export line in ``CSV_HEADERS`` order."""
    trip, summary = row.trip, row.summary
    return [
        trip.sl_number,
        format_display_date(trip.date),
        trip.vehicle_number,
        trip.str_number,
        trip.str_status,
        VILLAGE_EXPORT_SEPARATOR.join(trip.villages),
        _plain_number(trip.quantity),
        trip.driver_name,
        trip.mobile_number,
        trip.vehicle_type,
        _plain_number(summary.initial_total),
        summary.initial_count,
        _plain_number(summary.additional_total),
        summary.additional_count,
        _plain_number(summary.total_advances),
        summary.count,
    ]


@trace
def write_report_csv(rows: Iterable[ReportRow], file_path: str) -> int:
    """Write the report as CSV; returns the number of trip rows written."""
    written = 0
    # utf-8-sig so Excel opens village names in regional scripts correctly.
    with open(file_path, "w", newline="", encoding="utf-8-sig") as handle:
        writer = csv.writer(handle)
        writer.writerow(CSV_HEADERS)
        for row in rows:
            writer.writerow(report_row_values(row))
            written += 1
    return written


@trace
def write_report_xlsx(
    rows: Iterable[ReportRow],
    summary: ReportSummary,
    file_path: str,
    filters: ReportFilters | None = None,
) -> int:
    rows = list(rows)
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Trips"

    bold = Font(bold=True)
    header_fill = PatternFill("solid", fgColor=EXCEL_FILL_COLORS["header"])
    summary_fill = PatternFill("solid", fgColor=EXCEL_FILL_COLORS["summary"])
    center = Alignment(horizontal="center")

    ws.append(CSV_HEADERS)
    for cell in ws[1]:
        cell.font = bold
        cell.alignment = center
        cell.fill = header_fill
    ws.freeze_panes = "A2"

    money_columns = [CSV_HEADERS.index(h) + 1 for h in CSV_HEADERS if "Total" in h and "Records" not in h]
    for row in rows:
        ws.append(report_row_values(row))
        for col in money_columns:
            ws.cell(ws.max_row, col).number_format = _INR_NUMBER_FORMAT

    ws.append([])
    start, end = (filters or ReportFilters()).period_label()
    ws.append(
        [
            f"Period {start} to {end}",
            f"Trips: {summary.total_trips}",
            f"Vehicles: {summary.unique_vehicles}",
            f"Quantity: {_plain_number(summary.total_quantity)}",
            "Total Advances",
            _plain_number(summary.total_advances),
            "Avg / Trip",
            _plain_number(summary.avg_advance_per_trip),
        ]
    )
    for cell in ws[ws.max_row]:
        cell.font = bold
        cell.fill = summary_fill
    ws.cell(ws.max_row, 6).number_format = _INR_NUMBER_FORMAT
    ws.cell(ws.max_row, 8).number_format = _INR_NUMBER_FORMAT

    for col_cells in ws.columns:
        width = max(len(str(c.value or "")) for c in col_cells)
        ws.column_dimensions[col_cells[0].column_letter].width = min(max(width + 2, 10), 40)

    wb.save(file_path)
    return len(rows)


def build_vcard(vehicles: Iterable[Vehicle]) -> str:
    """Driver contacts as vCard 3.0; vehicles without driver or mobile are skipped."""
    cards = []
    for vehicle in vehicles:
        if not (vehicle.driver_name and vehicle.mobile_number):
            continue
        cards.append(
            "\n".join(
                [
                    "BEGIN:VCARD",
                    "VERSION:3.0",
                    f"FN:{vehicle.driver_name} ({vehicle.vehicle_number})",
                    f"N:{vehicle.driver_name};;;;",
                    f"TEL:{vehicle.mobile_number}",
                    f"NOTE:Vehicle: {vehicle.vehicle_number}",
                    "END:VCARD",
                ]
            )
        )
    return "\n\n".join(cards) + ("\n" if cards else "")


@trace
def write_vcard(vehicles: Iterable[Vehicle], file_path: str) -> int:
    content = build_vcard(vehicles)
    if not content:
        return 0
    with open(file_path, "w", encoding="utf-8") as handle:
        handle.write(content)
    return content.count("BEGIN:VCARD")
