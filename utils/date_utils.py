from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

from core.config import DISPLAY_DATE_FORMAT

QUICK_RANGES = ("today", "week", "month", "year")


def now_iso() -> str:
    return datetime.now().replace(microsecond=0).isoformat(sep=" ")


def today() -> date:
    return datetime.now().date()


def iso_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def parse_ymd(value) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    # Accept "YYYY-MM-DD" as well as full timestamps.
    try:
        return datetime.strptime(cleaned[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def format_display_date(value) -> str:
    """'2024-03-05' -> 'Mar 05, 2024'; unparseable input is returned as text."""
    parsed = parse_ymd(value)
    if parsed is None:
        return str(value or "")
    return parsed.strftime(DISPLAY_DATE_FORMAT)


def format_timestamp(value) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    text = str(value or "")
    return text[:16]


def month_bounds(value: date) -> tuple[date, date]:
    last_day = calendar.monthrange(value.year, value.month)[1]
    return value.replace(day=1), value.replace(day=last_day)


def year_bounds(value: date) -> tuple[date, date]:
    return date(value.year, 1, 1), date(value.year, 12, 31)


def quick_range(name: str, reference: date | None = None) -> tuple[date, date]:
    """
    Date range for a reports quick filter.

    ``week`` is the trailing seven days; ``month`` and ``year`` are calendar periods.
    """
    ref = reference or today()
    if name == "today":
        return ref, ref
    if name == "week":
        return ref - timedelta(days=7), ref
    if name == "month":
        return month_bounds(ref)
    if name == "year":
        return year_bounds(ref)
    raise ValueError(f"Unknown quick range: {name}")


def in_range(value, date_from: date | None, date_to: date | None) -> bool:
    """Inclusive on both ends; rows without a parseable date never match a bounded range."""
    if date_from is None and date_to is None:
        return True
    parsed = parse_ymd(value)
    if parsed is None:
        return False
    if date_from is not None and parsed < date_from:
        return False
    if date_to is not None and parsed > date_to:
        return False
    return True
