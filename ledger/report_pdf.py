from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

try:
    from reportlab.lib import colors as rl_colors
    from reportlab.lib.pagesizes import A4, landscape
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.lib.units import inch as rl_inch
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
    _REPORTLAB_OK = True
except ImportError:
    _REPORTLAB_OK = False

from core.app_logging import trace
from core.config import PDF_COLORS, PDF_FONTS, PDF_HEADERS, PDF_LAYOUT, PDF_TEXT
from ledger.report_builder import ReportFilters, ReportRow, ReportSummary
from utils.currency import format_quantity, group_indian
from utils.date_utils import format_display_date


@dataclass
class PdfGenerationResult:
    """Result of PDF generation operation."""
    success: bool
    message: str
    file_path: str | None = None
    error: Exception | None = None


def reportlab_available() -> bool:
    return _REPORTLAB_OK


def _money(value: float) -> str:
    # Base-14 PDF fonts have no rupee glyph.
    return f"Rs. {group_indian(int(round(value or 0)))}"


def _header_style(header_bg: str) -> list:
    return [
        ("BACKGROUND", (0, 0), (-1, 0), rl_colors.HexColor(header_bg)),
        ("TEXTCOLOR", (0, 0), (-1, 0), rl_colors.HexColor(PDF_COLORS["header_text"])),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), PDF_FONTS["table_header_size"]),
        ("FONTSIZE", (0, 1), (-1, -1), PDF_FONTS["table_body_size"]),
        ("GRID", (0, 0), (-1, -1), 0.5, rl_colors.HexColor(PDF_COLORS["grid"])),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]


def _build_summary_table(summary: ReportSummary) -> "Table":
    data = [
        PDF_HEADERS["summary"],
        [
            str(summary.total_trips),
            _money(summary.total_advances),
            format_quantity(summary.total_quantity),
            str(summary.unique_vehicles),
            _money(summary.avg_advance_per_trip),
        ],
    ]
    table = Table(data)
    table.setStyle(
        TableStyle(
            _header_style(PDF_COLORS["header_bg"])
            + [
                ("BACKGROUND", (0, 1), (-1, 1), rl_colors.HexColor(PDF_COLORS["summary_bg"])),
                ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ]
        )
    )
    return table


def _build_trips_table(rows: Iterable[ReportRow], cell_style: "ParagraphStyle") -> "Table":
    data = [PDF_HEADERS["trips"]]
    for row in rows:
        trip, summary = row.trip, row.summary
        initial = _money(summary.initial_total)
        if summary.has_synthetic_initial:
            initial += "*"
        data.append(
            [
                str(trip.sl_number),
                format_display_date(trip.date),
                trip.vehicle_number,
                trip.str_number,
                Paragraph(", ".join(trip.villages), cell_style),
                format_quantity(trip.quantity),
                initial,
                _money(summary.additional_total),
                _money(summary.total_advances),
            ]
        )
    table = Table(
        data,
        colWidths=[w * rl_inch for w in PDF_LAYOUT["trips_col_widths"]],
        repeatRows=1,
    )
    table.setStyle(
        TableStyle(
            _header_style(PDF_COLORS["header_bg"])
            + [
                ("ALIGN", (0, 0), (-1, -1), "CENTER"),
                ("ALIGN", (6, 1), (-1, -1), "RIGHT"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [rl_colors.white, rl_colors.HexColor(PDF_COLORS["row_alt"])]),
            ]
        )
    )
    return table


@trace
def render_report_pdf(
    file_path: str,
    rows: list[ReportRow],
    summary: ReportSummary,
    filters: ReportFilters,
) -> None:
    if not _REPORTLAB_OK:
        raise ImportError("reportlab is not available")

    margin = PDF_LAYOUT["margin"] * rl_inch
    doc = SimpleDocTemplate(
        file_path,
        pagesize=landscape(A4),
        topMargin=margin,
        bottomMargin=margin,
        leftMargin=margin,
        rightMargin=margin,
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "Title",
        parent=styles["Heading1"],
        fontSize=PDF_FONTS["title_size"],
        textColor=rl_colors.HexColor(PDF_COLORS["title"]),
        fontName="Helvetica-Bold",
        spaceAfter=4,
    )
    subtitle_style = ParagraphStyle(
        "Subtitle",
        parent=styles["Normal"],
        fontSize=PDF_FONTS["subtitle_size"],
        textColor=rl_colors.HexColor(PDF_COLORS["subtitle"]),
        spaceAfter=10,
    )
    cell_style = ParagraphStyle("Cell", parent=styles["Normal"], fontSize=PDF_FONTS["table_body_size"], leading=11)
    spacer = Spacer(1, PDF_LAYOUT["section_spacer"] * rl_inch)

    start, end = filters.period_label()
    elements = [
        Paragraph(PDF_TEXT["title"], title_style),
        Paragraph(f"{PDF_TEXT['period_prefix']} {start} to {end}", subtitle_style),
        Paragraph(f"<b>{PDF_TEXT['section_summary']}</b>", styles["Heading3"]),
        _build_summary_table(summary),
        spacer,
        Paragraph(f"<b>{PDF_TEXT['section_trips']}</b>", styles["Heading3"]),
    ]
    if rows:
        elements.append(_build_trips_table(rows, cell_style))
        if any(r.summary.has_synthetic_initial for r in rows):
            elements.append(Paragraph(PDF_TEXT["synthetic_note"], subtitle_style))
    else:
        elements.append(Paragraph(PDF_TEXT["no_trips"], styles["Normal"]))

    elements.append(spacer)
    elements.append(
        Paragraph(
            f"{PDF_TEXT['footer_prefix']} {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            ParagraphStyle(
                "Footer",
                parent=styles["Normal"],
                fontSize=PDF_FONTS["footer_size"],
                textColor=rl_colors.HexColor(PDF_COLORS["footer"]),
                alignment=1,
            ),
        )
    )
    doc.build(elements)


@trace
def generate_report_pdf(
    file_path: str,
    rows: list[ReportRow],
    summary: ReportSummary,
    filters: ReportFilters,
) -> PdfGenerationResult:
    if not _REPORTLAB_OK:
        return PdfGenerationResult(
            success=False,
            message="reportlab is required to generate PDFs.\nInstall with: pip install reportlab",
        )
    try:
        render_report_pdf(file_path, rows, summary, filters)
    except (OSError, ValueError) as e:
        return PdfGenerationResult(success=False, message=f"Could not generate PDF: {e}", error=e)
    return PdfGenerationResult(success=True, message="Report PDF saved successfully.", file_path=file_path)
