from __future__ import annotations

from typing import Any, Iterable, Mapping

from core.app_logging import get_app_logger, log_exception, trace
from core.config import (
    ADVANCE_TYPE_ADDITIONAL,
    ADVANCE_TYPE_INITIAL,
    CARRIED_INITIAL_ADVANCE_NOTE,
    DEFAULT_VEHICLE_TYPE,
    EDIT_INITIAL_ADVANCE_NOTE,
    INITIAL_ADVANCE_NOTE,
    STR_STATUS_NOT_RECEIVED,
)
from data.models import Advance, TripEntry, Vehicle, Village
from data.storage import StorageBackend
from ledger.advance_totals import calculate_advance_totals
from utils.currency import format_inr
from utils.date_utils import iso_date, parse_ymd, today
from utils.validation import (
    non_negative_float,
    optional_text,
    positive_float,
    required_mobile,
    required_str_number,
    required_text,
    required_vehicle_number,
    required_villages,
    str_status,
    vehicle_type,
)

logger = get_app_logger()


def validate_trip_form(form: Mapping[str, Any]) -> dict[str, Any]:
    """
    Clean the trip entry/edit form.

    Raises ValueError with a user-facing message for the first invalid field.
    """
    raw_date = form.get("date") or iso_date(today())
    trip_date = parse_ymd(raw_date)
    if trip_date is None:
        raise ValueError("Date must be in YYYY-MM-DD format.")
    return {
        "date": iso_date(trip_date),
        "vehicle_number": required_vehicle_number(form.get("vehicle_number", "")),
        "str_number": required_str_number(form.get("str_number", "")),
        "str_status": str_status(form.get("str_status") or STR_STATUS_NOT_RECEIVED),
        "villages": required_villages(form.get("villages", [])),
        "quantity": positive_float("Quantity", form.get("quantity", "")),
        "driver_name": required_text("Driver name", form.get("driver_name", ""), max_len=80),
        "mobile_number": required_mobile(form.get("mobile_number", "")),
        "vehicle_type": vehicle_type(form.get("vehicle_type") or DEFAULT_VEHICLE_TYPE),
        "advance_amount": non_negative_float("Advance amount", form.get("advance_amount", "")),
    }


def remember_vehicle(storage: StorageBackend, trip: TripEntry) -> None:
    """Keep the vehicle list in step with the driver details last used for it."""
    try:
        storage.upsert_vehicle(
            Vehicle(
                vehicle_number=trip.vehicle_number,
                driver_name=trip.driver_name,
                mobile_number=trip.mobile_number,
                vehicle_type=trip.vehicle_type,
            )
        )
    except Exception as exc:
        log_exception("Remember Vehicle", exc, context=trip.vehicle_number)


@trace
def record_village_usage(storage: StorageBackend, names: Iterable[str]) -> None:
    """Bump the usage counter of each selected village, creating unknown ones."""
    for name in names:
        try:
            village = storage.find_village_by_name(name)
            if village is None or not village.is_active:
                village = storage.add_village(name)
            storage.increment_village_usage(village.id)
        except Exception as exc:
            log_exception("Record Village Usage", exc, context=name)


def _store_trip_advance(storage: StorageBackend, trip: TripEntry, amount: float, advance_type: str, note: str) -> Advance:
    return storage.add_advance(
        Advance(
            advance_amount=amount,
            trip_id=trip.id,
            vehicle_number=trip.vehicle_number,
            trip_date=trip.date,
            advance_type=advance_type,
            note=note,
        )
    )


@trace
def create_trip(storage: StorageBackend, form: Mapping[str, Any]) -> TripEntry:
    """
    Validate and store a new trip with the next SL number.

    A positive advance also gets its own ``initial`` advance record; failing
    to store that record is logged and does not undo the trip.
    """
    cleaned = validate_trip_form(form)
    trip = TripEntry(sl_number=storage.get_next_sl_number(), **cleaned)
    trip = storage.add_trip(trip)

    if trip.advance_amount > 0:
        try:
            _store_trip_advance(storage, trip, trip.advance_amount, ADVANCE_TYPE_INITIAL, INITIAL_ADVANCE_NOTE)
        except Exception as exc:
            log_exception("Create Initial Advance", exc, context=f"trip={trip.id}")

    remember_vehicle(storage, trip)
    record_village_usage(storage, trip.villages)
    return trip


@trace
def edit_trip(storage: StorageBackend, trip: TripEntry, form: Mapping[str, Any]) -> TripEntry:
    """
    Save edits to an existing trip.

    Raising the advance amount records the difference as an ``additional``
    advance; lowering it only changes the trip field. A trip whose advance
    lives only in ``advance_amount`` first gets that amount stored as its
    ``initial`` advance, so the stored records always add up to the new
    amount and reconciliation never synthesizes on top of them.
    """
    cleaned = validate_trip_form(form)
    changes = {name: value for name, value in cleaned.items() if getattr(trip, name) != value}
    if not changes:
        return trip

    old_amount = trip.advance_amount
    increase = cleaned["advance_amount"] - old_amount
    has_initial = False
    if increase > 0:
        # Orphans stop being recovered once the trip has records of its own.
        own = [a for a in storage.get_advances_by_trip(trip.id, trip.vehicle_number) if a.trip_id == trip.id]
        has_initial = calculate_advance_totals(own).initial > 0

    storage.update_trip(trip.id, changes)
    for name, value in changes.items():
        setattr(trip, name, value)

    if increase > 0:
        if not has_initial and old_amount <= 0:
            _store_trip_advance(storage, trip, increase, ADVANCE_TYPE_INITIAL, EDIT_INITIAL_ADVANCE_NOTE)
        else:
            if not has_initial:
                _store_trip_advance(storage, trip, old_amount, ADVANCE_TYPE_INITIAL, CARRIED_INITIAL_ADVANCE_NOTE)
            _store_trip_advance(
                storage,
                trip,
                increase,
                ADVANCE_TYPE_ADDITIONAL,
                f"Advance increased from {format_inr(old_amount)} to {format_inr(trip.advance_amount)}",
            )
    if "villages" in changes:
        record_village_usage(storage, trip.villages)
    return trip


@trace
def add_additional_advance(storage: StorageBackend, trip: TripEntry, amount: Any, note: str = "") -> Advance:
    if trip is None or not trip.id:
        raise ValueError("Trip selection is required.")
    advance = Advance(
        advance_amount=positive_float("Advance amount", amount),
        trip_id=trip.id,
        vehicle_number=trip.vehicle_number,
        trip_date=trip.date,
        advance_type=ADVANCE_TYPE_ADDITIONAL,
        note=optional_text("Note", note, max_len=200),
    )
    return storage.add_advance(advance)


@trace
def apply_str_status_changes(
    storage: StorageBackend,
    trips: Iterable[TripEntry],
    edited_statuses: Mapping[str, str],
) -> int:
    """Persist only the trips whose STR status differs from ``edited_statuses``; returns how many."""
    updated = 0
    for trip in trips:
        if trip.id not in edited_statuses:
            continue
        new_status = str_status(edited_statuses[trip.id])
        if new_status == trip.str_status:
            continue
        storage.update_str_status(trip.id, new_status)
        trip.str_status = new_status
        updated += 1
    return updated


@trace
def delete_trip(storage: StorageBackend, trip_id: str) -> None:
    if not trip_id:
        raise ValueError("Select a trip to delete.")
    storage.delete_trip(trip_id)


@trace
def save_vehicle(storage: StorageBackend, form: Mapping[str, Any]) -> Vehicle:
    vehicle = Vehicle(
        vehicle_number=required_vehicle_number(form.get("vehicle_number", "")),
        driver_name=required_text("Driver name", form.get("driver_name", ""), max_len=80),
        mobile_number=required_mobile(form.get("mobile_number", "")),
        vehicle_type=vehicle_type(form.get("vehicle_type") or ""),
    )
    return storage.upsert_vehicle(vehicle)


@trace
def save_village(storage: StorageBackend, name: str, village_id: str | None = None) -> Village | None:
    """Add a village, or rename ``village_id`` when given."""
    cleaned = required_text("Village name", name, max_len=60)
    if village_id:
        storage.update_village(village_id, cleaned)
        return None
    return storage.add_village(cleaned)
