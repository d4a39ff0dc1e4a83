"""
Storage contract shared by the Firestore and SQLite backends.

The backend is chosen once at startup by ``open_storage``: when the
document store answers a capability probe it is used for the whole
session, otherwise the local SQLite database is. Screens and workflows
only ever see a ``StorageBackend``.
"""

from __future__ import annotations

import abc
import os
from typing import Iterable

from core.app_logging import get_app_logger, trace
from core.config import (
    DB_PATH,
    FIREBASE_CREDENTIALS_ENV,
    FIREBASE_CREDENTIALS_FILE,
    STORAGE_PROBE_TIMEOUT_SECONDS,
)
from data.models import Advance, TripEntry, Vehicle, Village
from utils.validation import normalize_whitespace

logger = get_app_logger()


class StorageUnavailableError(RuntimeError):
    """The configured data store cannot be reached or initialized."""


def sort_newest_first(advances: Iterable[Advance]) -> list[Advance]:
    return sorted(advances, key=lambda a: a.created_at or "", reverse=True)


def rank_villages(villages: Iterable[Village]) -> list[Village]:
    """Most used first; ties broken alphabetically."""
    return sorted(villages, key=lambda v: (-v.usage_count, v.village_name.lower()))


class StorageBackend(abc.ABC):
    """
    Operations every backend provides.

    Trip and village ids are opaque strings; vehicles are keyed by
    ``vehicle_number``.
    """

    name = "storage"

    # ---------------------------------------------------------------- trips
    @abc.abstractmethod
    def list_trips(self) -> list[TripEntry]:
        """All trips, newest ``created_at`` first."""

    @abc.abstractmethod
    def get_trip(self, trip_id: str) -> TripEntry | None: ...

    @abc.abstractmethod
    def add_trip(self, trip: TripEntry) -> TripEntry:
        """Persist ``trip`` and return it with ``id`` and timestamps filled."""

    @abc.abstractmethod
    def update_trip(self, trip_id: str, fields: dict) -> None: ...

    @abc.abstractmethod
    def delete_trip(self, trip_id: str) -> None: ...

    @abc.abstractmethod
    def get_next_sl_number(self) -> int:
        """``max(sl_number) + 1``, or 1 for an empty store."""

    def get_trips_by_vehicle(self, vehicle_number: str) -> list[TripEntry]:
        target = vehicle_number.strip().upper()
        return [t for t in self.list_trips() if t.vehicle_number.upper() == target]

    def get_trips_by_date_range(self, date_from: str, date_to: str) -> list[TripEntry]:
        return [t for t in self.list_trips() if date_from <= t.date <= date_to]

    def update_str_status(self, trip_id: str, status: str) -> None:
        self.update_trip(trip_id, {"str_status": status})

    # ------------------------------------------------------------- vehicles
    @abc.abstractmethod
    def list_vehicles(self, include_inactive: bool = False) -> list[Vehicle]: ...

    @abc.abstractmethod
    def get_vehicle(self, vehicle_number: str) -> Vehicle | None: ...

    @abc.abstractmethod
    def upsert_vehicle(self, vehicle: Vehicle) -> Vehicle:
        """Create or overwrite the vehicle keyed by its number (reactivates it)."""

    @abc.abstractmethod
    def deactivate_vehicle(self, vehicle_number: str) -> None: ...

    # ------------------------------------------------------------- advances
    @abc.abstractmethod
    def add_advance(self, advance: Advance) -> Advance: ...

    @abc.abstractmethod
    def _advances_for_trip(self, trip_id: str) -> list[Advance]: ...

    @abc.abstractmethod
    def _orphan_advances_for_vehicle(self, vehicle_number: str) -> list[Advance]:
        """Advances for the vehicle whose trip reference is empty."""

    @abc.abstractmethod
    def get_advances_by_vehicle(self, vehicle_number: str) -> list[Advance]: ...

    @abc.abstractmethod
    def get_advances_by_created_range(self, start: str, end: str) -> list[Advance]:
        """Advances with ``start <= created_at <= end`` (timestamp text)."""

    @abc.abstractmethod
    def list_advances(self) -> list[Advance]: ...

    @trace
    def get_advances_by_trip(self, trip_id: str, vehicle_number: str = "") -> list[Advance]:
        """
        Advances for a trip, newest first.

        When nothing references the trip directly, advances recorded against
        the same vehicle with an empty trip reference are returned instead.
        """
        advances = self._advances_for_trip(str(trip_id)) if trip_id else []
        if not advances and vehicle_number:
            advances = self._orphan_advances_for_vehicle(vehicle_number)
            if advances:
                logger.info(f"Recovered {len(advances)} orphaned advance(s) for {vehicle_number}")
        return sort_newest_first(advances)

    # ------------------------------------------------------------- villages
    @abc.abstractmethod
    def _all_villages(self) -> list[Village]: ...

    @abc.abstractmethod
    def _insert_village(self, name: str) -> Village: ...

    @abc.abstractmethod
    def _rename_village(self, village_id: str, name: str) -> None: ...

    @abc.abstractmethod
    def _set_village_active(self, village_id: str, active: bool) -> None: ...

    @abc.abstractmethod
    def increment_village_usage(self, village_id: str) -> None:
        """Add one to ``usage_count`` and stamp ``last_used``."""

    @trace
    def add_village(self, name: str) -> Village:
        """Add a village; a soft-deleted one with the same name is reactivated."""
        cleaned = normalize_whitespace(name)
        if not cleaned:
            raise ValueError("Village name is required.")
        existing = self.find_village_by_name(cleaned)
        if existing is not None:
            if existing.is_active:
                raise ValueError(f"Village '{existing.village_name}' already exists.")
            self._set_village_active(existing.id, True)
            existing.is_active = True
            return existing
        return self._insert_village(cleaned)

    @trace
    def update_village(self, village_id: str, name: str) -> None:
        cleaned = normalize_whitespace(name)
        if not cleaned:
            raise ValueError("Village name is required.")
        clash = self.find_village_by_name(cleaned)
        if clash is not None and clash.id != str(village_id):
            raise ValueError(f"Village '{clash.village_name}' already exists.")
        self._rename_village(str(village_id), cleaned)

    @trace
    def deactivate_village(self, village_id: str) -> None:
        self._set_village_active(str(village_id), False)

    def list_villages(self, include_inactive: bool = False) -> list[Village]:
        villages = self._all_villages()
        if not include_inactive:
            villages = [v for v in villages if v.is_active]
        return rank_villages(villages)

    def search_villages(self, term: str) -> list[Village]:
        needle = normalize_whitespace(term).lower()
        return [v for v in self.list_villages() if needle in v.village_name.lower()]

    def find_village_by_name(self, name: str) -> Village | None:
        target = normalize_whitespace(name).lower()
        for village in self.list_villages(include_inactive=True):
            if village.village_name.lower() == target:
                return village
        return None

    # ------------------------------------------------------------ lifecycle
    def close(self) -> None:
        pass

    def describe(self) -> str:
        return self.name


def resolve_credentials(explicit: str | None = None) -> str | None:
    """Credential source: argument, environment variable, then the default key file."""
    for candidate in (explicit, os.environ.get(FIREBASE_CREDENTIALS_ENV)):
        if candidate and candidate.strip():
            return candidate.strip()
    if os.path.exists(FIREBASE_CREDENTIALS_FILE):
        return FIREBASE_CREDENTIALS_FILE
    return None


@trace
def open_storage(
    mode: str = "auto",
    credentials: str | None = None,
    db_path: str = DB_PATH,
    probe_timeout: float = STORAGE_PROBE_TIMEOUT_SECONDS,
) -> StorageBackend:
    """
    Pick the backend for this session.

    ``mode="local"`` always opens SQLite. ``mode="auto"`` connects to
    Firestore and runs a one-document read; any failure there falls back to
    SQLite. No later call switches backends.
    """
    from data.database_service import DatabaseService

    if mode == "auto":
        source = resolve_credentials(credentials)
        if source:
            from data.firestore_service import FirestoreService

            try:
                backend = FirestoreService.connect(source)
                backend.probe(timeout=probe_timeout)
                logger.info("Using Firestore storage")
                return backend
            except StorageUnavailableError as exc:
                logger.warning(f"Firestore unavailable, using local storage: {exc}")
        else:
            logger.info("No Firestore credentials configured, using local storage")
    elif mode != "local":
        raise ValueError(f"Unknown storage mode: {mode}")

    return DatabaseService(db_path)
