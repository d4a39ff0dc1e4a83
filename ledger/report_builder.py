from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from core.app_logging import trace
from core.config import ADVANCE_FETCH_WORKERS, DASHBOARD_RECENT_LIMIT
from data.models import Advance, TripEntry
from data.storage import StorageBackend
from ledger.reconciliation import TripAdvanceSummary, load_trip_summaries
from utils.date_utils import in_range, iso_date, month_bounds, quick_range, today


@dataclass
class ReportFilters:
    date_from: date | None = None
    date_to: date | None = None
    vehicle_number: str = ""
    village: str = ""
    str_status: str = ""

    @classmethod
    def current_month(cls, reference: date | None = None) -> "ReportFilters":
        start, end = month_bounds(reference or today())
        return cls(date_from=start, date_to=end)

    @classmethod
    def quick(cls, name: str, reference: date | None = None) -> "ReportFilters":
        start, end = quick_range(name, reference)
        return cls(date_from=start, date_to=end)

    def matches(self, trip: TripEntry) -> bool:
        if not in_range(trip.date, self.date_from, self.date_to):
            return False
        if self.vehicle_number and self.vehicle_number.strip().lower() not in trip.vehicle_number.lower():
            return False
        if self.village:
            needle = self.village.strip().lower()
            if not any(needle in v.lower() for v in trip.villages):
                return False
        if self.str_status and trip.str_status.lower() != self.str_status.lower():
            return False
        return True

    def period_label(self) -> tuple[str, str]:
        start = iso_date(self.date_from) if self.date_from else "start"
        end = iso_date(self.date_to) if self.date_to else "today"
        return start, end


@dataclass
class ReportRow:
    trip: TripEntry
    summary: TripAdvanceSummary


@dataclass
class ReportSummary:
    total_trips: int = 0
    total_advances: float = 0.0
    total_quantity: float = 0.0
    unique_vehicles: int = 0
    avg_advance_per_trip: float = 0.0


@dataclass
class TodayMetrics:
    today_trips_count: int = 0
    today_advances_total: float = 0.0
    active_vehicles: int = 0
    recent_trips: list[TripEntry] = field(default_factory=list)
    recent_advances: list[Advance] = field(default_factory=list)


def filter_trips(trips: Iterable[TripEntry], filters: ReportFilters) -> list[TripEntry]:
    return [t for t in trips if filters.matches(t)]


def sort_trips(trips: Iterable[TripEntry]) -> list[TripEntry]:
    """Newest trip date first, then highest SL number."""
    return sorted(trips, key=lambda t: (t.date, t.sl_number), reverse=True)


@trace
def load_report(
    storage: StorageBackend,
    filters: ReportFilters,
    max_workers: int = ADVANCE_FETCH_WORKERS,
) -> list[ReportRow]:
    """Trips matching ``filters`` paired with their reconciled advance totals."""
    if filters.date_from and filters.date_to:
        trips = storage.get_trips_by_date_range(iso_date(filters.date_from), iso_date(filters.date_to))
    else:
        trips = storage.list_trips()
    trips = sort_trips(filter_trips(trips, filters))
    summaries = load_trip_summaries(trips, storage.get_advances_by_trip, max_workers=max_workers)
    return [ReportRow(trip=t, summary=summaries[t.id]) for t in trips]


def summarize_report(rows: Iterable[ReportRow]) -> ReportSummary:
    rows = list(rows)
    if not rows:
        return ReportSummary()
    total_advances = sum(r.summary.total_advances for r in rows)
    return ReportSummary(
        total_trips=len(rows),
        total_advances=total_advances,
        total_quantity=sum(r.trip.quantity for r in rows),
        unique_vehicles=len({r.trip.vehicle_number.upper() for r in rows}),
        avg_advance_per_trip=total_advances / len(rows),
    )


@trace
def build_today_metrics(storage: StorageBackend, reference: date | None = None) -> TodayMetrics:
    day = iso_date(reference or today())
    trips = sort_trips(storage.get_trips_by_date_range(day, day))
    advances = storage.get_advances_by_created_range(f"{day} 00:00:00", f"{day} 23:59:59")
    return TodayMetrics(
        today_trips_count=len(trips),
        today_advances_total=sum(a.advance_amount for a in advances),
        active_vehicles=len(storage.list_vehicles()),
        recent_trips=trips[:DASHBOARD_RECENT_LIMIT],
        recent_advances=advances[:DASHBOARD_RECENT_LIMIT],
    )
