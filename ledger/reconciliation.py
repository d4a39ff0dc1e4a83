from __future__ import annotations

import concurrent.futures
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, TypeVar

from core.app_logging import get_app_logger, log_exception, trace
from core.config import (
    ADVANCE_FETCH_WORKERS,
    ADVANCE_TYPE_INITIAL,
    DASHBOARD_TIMEOUT_SECONDS,
    RECENT_ADVANCES_LIMIT,
    SYNTHETIC_ADVANCE_ID_PREFIX,
    SYNTHETIC_ADVANCE_NOTE,
)
from data.models import Advance, TripEntry, pick, timestamp_text
from ledger.advance_totals import calculate_advance_totals

logger = get_app_logger()

AdvanceFetcher = Callable[[str, str], list]
T = TypeVar("T")


@dataclass
class TripAdvanceSummary:
    trip_id: str
    advances: list = field(default_factory=list)
    initial_advances: list = field(default_factory=list)
    additional_advances: list = field(default_factory=list)
    initial_total: float = 0.0
    additional_total: float = 0.0
    total_advances: float = 0.0
    count: int = 0
    initial_count: int = 0
    additional_count: int = 0
    recent_advances: list = field(default_factory=list)
    has_synthetic_initial: bool = False
    failed: bool = False


def _as_trip(trip: TripEntry | Mapping[str, Any]) -> TripEntry:
    return trip if isinstance(trip, TripEntry) else TripEntry.from_record(trip)


def _created_at(record: Any) -> str:
    if isinstance(record, Advance):
        return timestamp_text(record.created_at)
    if isinstance(record, Mapping):
        return timestamp_text(pick(record, "created_at"))
    return ""


def _insert_newest_first(advances: list, advance: Advance) -> None:
    """Place ``advance`` in a list already sorted by ``created_at`` descending."""
    stamp = _created_at(advance)
    position = next((i for i, other in enumerate(advances) if _created_at(other) < stamp), len(advances))
    advances.insert(position, advance)


def synthetic_initial_advance(trip: TripEntry) -> Advance:
    """Stand-in initial advance for a trip whose advance lives only in ``advance_amount``."""
    return Advance(
        id=f"{SYNTHETIC_ADVANCE_ID_PREFIX}{trip.id}",
        advance_amount=trip.advance_amount,
        trip_id=trip.id,
        vehicle_number=trip.vehicle_number,
        trip_date=trip.date,
        advance_type=ADVANCE_TYPE_INITIAL,
        note=SYNTHETIC_ADVANCE_NOTE,
        created_at=trip.created_at,
        is_synthetic=True,
    )


def failed_summary(trip: TripEntry | Mapping[str, Any]) -> TripAdvanceSummary:
    """Zero summary used when a trip's advances could not be loaded."""
    entry = _as_trip(trip)
    return TripAdvanceSummary(trip_id=entry.id, total_advances=entry.advance_amount, failed=True)


@trace
def reconcile_trip_advances(trip: TripEntry | Mapping[str, Any], fetcher: AdvanceFetcher) -> TripAdvanceSummary:
    """
    Advance totals for one trip as every screen displays them.

    A trip created before advances were stored separately only has its
    ``advance_amount``; when no real initial advance exists, a synthetic one
    with the stable id ``initial-<trip id>`` is added before totalling.
    Fetch errors yield ``failed_summary`` instead of propagating.
    """
    entry = _as_trip(trip)
    try:
        fetched = list(fetcher(entry.id, entry.vehicle_number) or [])
    except Exception as exc:
        log_exception("Load Trip Advances", exc, context=f"trip={entry.id}")
        return failed_summary(entry)

    totals = calculate_advance_totals(fetched)
    advances = list(fetched)
    initial_advances = list(totals.initial_advances)
    initial_total = totals.initial
    count = totals.count
    synthesized = entry.advance_amount > 0 and totals.initial == 0
    if synthesized:
        synthetic = synthetic_initial_advance(entry)
        _insert_newest_first(advances, synthetic)
        initial_advances = [synthetic]
        initial_total = synthetic.advance_amount
        count += 1

    return TripAdvanceSummary(
        trip_id=entry.id,
        advances=advances,
        initial_advances=initial_advances,
        additional_advances=list(totals.additional_advances),
        initial_total=initial_total,
        additional_total=totals.additional,
        total_advances=initial_total + totals.additional,
        count=count,
        initial_count=len(initial_advances),
        additional_count=totals.additional_count,
        recent_advances=advances[:RECENT_ADVANCES_LIMIT],
        has_synthetic_initial=synthesized,
    )


@trace
def load_trip_summaries(
    trips: Iterable[TripEntry],
    fetcher: AdvanceFetcher,
    max_workers: int = ADVANCE_FETCH_WORKERS,
) -> dict[str, TripAdvanceSummary]:
    """Reconcile many trips in parallel; one trip's failure never affects the others."""
    entries = [_as_trip(t) for t in trips]
    if not entries:
        return {}
    summaries: dict[str, TripAdvanceSummary] = {}
    workers = max(1, min(max_workers, len(entries)))
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix="advances") as pool:
        futures = {pool.submit(reconcile_trip_advances, entry, fetcher): entry for entry in entries}
        for future in concurrent.futures.as_completed(futures):
            entry = futures[future]
            try:
                summaries[entry.id] = future.result()
            except Exception as exc:
                log_exception("Load Trip Advances", exc, context=f"trip={entry.id}")
                summaries[entry.id] = failed_summary(entry)
    return summaries


def call_with_timeout(
    loader: Callable[[], T],
    default: T,
    timeout: float = DASHBOARD_TIMEOUT_SECONDS,
    action: str = "Load Data",
) -> T:
    """Run ``loader``; return ``default`` when it raises or takes longer than ``timeout`` seconds."""
    pool = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="loader")
    future = pool.submit(loader)
    try:
        return future.result(timeout=timeout)
    except concurrent.futures.TimeoutError:
        logger.warning(f"{action} timed out after {timeout:.0f}s, using defaults")
        return default
    except Exception as exc:
        log_exception(action, exc)
        return default
    finally:
        pool.shutdown(wait=False, cancel_futures=True)
