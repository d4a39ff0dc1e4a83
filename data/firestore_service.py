from __future__ import annotations

import base64
import binascii
import json
from datetime import datetime
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore

from core.app_logging import get_app_logger, trace
from core.config import COLLECTIONS
from data.models import Advance, TripEntry, Vehicle, Village, document_key
from data.storage import StorageBackend, StorageUnavailableError
from utils.date_utils import now_iso

logger = get_app_logger()

_APP_NAME = "roadline"


def _load_certificate(source: str) -> credentials.Certificate:
    """Service-account credentials from raw JSON, base64-encoded JSON or a key file path."""
    text = source.strip()
    if text.startswith("{"):
        return credentials.Certificate(json.loads(text))
    if not text.lower().endswith(".json"):
        try:
            return credentials.Certificate(json.loads(base64.b64decode(text, validate=True).decode("utf-8")))
        except (binascii.Error, UnicodeDecodeError, ValueError):
            pass
    return credentials.Certificate(text)


def _as_datetime(value: str) -> datetime:
    """Local timestamp text to an aware datetime for createdAt comparisons."""
    return datetime.fromisoformat(value.strip()).astimezone()


class FirestoreService(StorageBackend):
    """Cloud Firestore storage using the camelCase document layout of the web client."""

    name = "firestore"

    def __init__(self, client: Any):
        self.db = client

    @classmethod
    def connect(cls, credential_source: str) -> "FirestoreService":
        try:
            try:
                app = firebase_admin.get_app(_APP_NAME)
            except ValueError:
                app = firebase_admin.initialize_app(_load_certificate(credential_source), name=_APP_NAME)
            return cls(firestore.client(app))
        except Exception as exc:
            raise StorageUnavailableError(f"Firestore initialization failed: {exc}") from exc

    @trace
    def probe(self, timeout: float) -> None:
        """One-document read; raises StorageUnavailableError when the store does not answer."""
        try:
            self._collection("trips").limit(1).get(timeout=timeout)
        except Exception as exc:
            raise StorageUnavailableError(f"Firestore probe failed: {exc}") from exc

    def describe(self) -> str:
        project = getattr(self.db, "project", "")
        return f"firestore ({project})" if project else "firestore"

    def _collection(self, key: str):
        return self.db.collection(COLLECTIONS[key])

    @staticmethod
    def _trips(snapshots) -> list[TripEntry]:
        return [TripEntry.from_record(s.to_dict() or {}, record_id=s.id) for s in snapshots]

    @staticmethod
    def _advances(snapshots) -> list[Advance]:
        return [Advance.from_record(s.to_dict() or {}, record_id=s.id) for s in snapshots]

    # ------------------------------------------------------------------
    # Trips
    # ------------------------------------------------------------------

    @trace
    def list_trips(self) -> list[TripEntry]:
        query = self._collection("trips").order_by("createdAt", direction=firestore.Query.DESCENDING)
        return self._trips(query.stream())

    @trace
    def get_trip(self, trip_id: str) -> TripEntry | None:
        snap = self._collection("trips").document(str(trip_id)).get()
        if not snap.exists:
            return None
        return TripEntry.from_record(snap.to_dict() or {}, record_id=snap.id)

    @trace
    def add_trip(self, trip: TripEntry) -> TripEntry:
        document = trip.to_document()
        document["createdAt"] = firestore.SERVER_TIMESTAMP
        document["updatedAt"] = firestore.SERVER_TIMESTAMP
        _, ref = self._collection("trips").add(document)
        trip.id = ref.id
        trip.created_at = trip.updated_at = now_iso()
        return trip

    @trace
    def update_trip(self, trip_id: str, fields: dict) -> None:
        changes = {document_key(name): value for name, value in fields.items()}
        changes["updatedAt"] = firestore.SERVER_TIMESTAMP
        self._collection("trips").document(str(trip_id)).update(changes)

    @trace
    def delete_trip(self, trip_id: str) -> None:
        self._collection("trips").document(str(trip_id)).delete()

    @trace
    def get_next_sl_number(self) -> int:
        query = self._collection("trips").order_by("slNumber", direction=firestore.Query.DESCENDING).limit(1)
        trips = self._trips(query.get())
        if not trips:
            return 1
        return trips[0].sl_number + 1

    @trace
    def get_trips_by_vehicle(self, vehicle_number: str) -> list[TripEntry]:
        query = self._collection("trips").where("vehicleNumber", "==", vehicle_number.strip().upper())
        return sorted(self._trips(query.stream()), key=lambda t: (t.date, t.sl_number), reverse=True)

    @trace
    def get_trips_by_date_range(self, date_from: str, date_to: str) -> list[TripEntry]:
        query = (
            self._collection("trips")
            .where("date", ">=", date_from)
            .where("date", "<=", date_to)
            .order_by("date", direction=firestore.Query.DESCENDING)
        )
        return self._trips(query.stream())

    # ------------------------------------------------------------------
    # Vehicles
    # ------------------------------------------------------------------

    @trace
    def list_vehicles(self, include_inactive: bool = False) -> list[Vehicle]:
        vehicles = [
            Vehicle.from_record(s.to_dict() or {}, record_id=s.id)
            for s in self._collection("vehicles").stream()
        ]
        if not include_inactive:
            vehicles = [v for v in vehicles if v.is_active]
        return sorted(vehicles, key=lambda v: v.vehicle_number)

    @trace
    def get_vehicle(self, vehicle_number: str) -> Vehicle | None:
        snap = self._collection("vehicles").document(vehicle_number.strip().upper()).get()
        if not snap.exists:
            return None
        return Vehicle.from_record(snap.to_dict() or {}, record_id=snap.id)

    @trace
    def upsert_vehicle(self, vehicle: Vehicle) -> Vehicle:
        vehicle.vehicle_number = vehicle.vehicle_number.strip().upper()
        vehicle.is_active = True
        ref = self._collection("vehicles").document(vehicle.vehicle_number)
        document = vehicle.to_document()
        document["updatedAt"] = firestore.SERVER_TIMESTAMP
        if not ref.get().exists:
            document["createdAt"] = firestore.SERVER_TIMESTAMP
        ref.set(document, merge=True)
        return vehicle

    @trace
    def deactivate_vehicle(self, vehicle_number: str) -> None:
        self._collection("vehicles").document(vehicle_number.strip().upper()).update(
            {"isActive": False, "updatedAt": firestore.SERVER_TIMESTAMP}
        )

    # ------------------------------------------------------------------
    # Advances
    # ------------------------------------------------------------------

    @trace
    def add_advance(self, advance: Advance) -> Advance:
        document = advance.to_document()
        if document.get("advanceType") is None:
            document.pop("advanceType", None)
        document["createdAt"] = firestore.SERVER_TIMESTAMP
        _, ref = self._collection("advances").add(document)
        advance.id = ref.id
        advance.created_at = now_iso()
        return advance

    def _advances_for_trip(self, trip_id: str) -> list[Advance]:
        query = self._collection("advances").where("tripId", "==", trip_id)
        return self._advances(query.stream())

    def _orphan_advances_for_vehicle(self, vehicle_number: str) -> list[Advance]:
        query = (
            self._collection("advances")
            .where("vehicleNumber", "==", vehicle_number)
            .where("tripId", "==", "")
        )
        return self._advances(query.stream())

    @trace
    def get_advances_by_vehicle(self, vehicle_number: str) -> list[Advance]:
        query = self._collection("advances").where("vehicleNumber", "==", vehicle_number)
        return sorted(self._advances(query.stream()), key=lambda a: a.created_at, reverse=True)

    @trace
    def get_advances_by_created_range(self, start: str, end: str) -> list[Advance]:
        query = (
            self._collection("advances")
            .where("createdAt", ">=", _as_datetime(start))
            .where("createdAt", "<=", _as_datetime(end))
        )
        return sorted(self._advances(query.stream()), key=lambda a: a.created_at, reverse=True)

    @trace
    def list_advances(self) -> list[Advance]:
        return sorted(self._advances(self._collection("advances").stream()), key=lambda a: a.created_at, reverse=True)

    # ------------------------------------------------------------------
    # Villages
    # ------------------------------------------------------------------

    def _all_villages(self) -> list[Village]:
        return [Village.from_record(s.to_dict() or {}, record_id=s.id) for s in self._collection("villages").stream()]

    def _insert_village(self, name: str) -> Village:
        _, ref = self._collection("villages").add(
            {
                "villageName": name,
                "isActive": True,
                "usageCount": 0,
                "createdAt": firestore.SERVER_TIMESTAMP,
                "lastUsed": firestore.SERVER_TIMESTAMP,
            }
        )
        return Village(id=ref.id, village_name=name)

    def _rename_village(self, village_id: str, name: str) -> None:
        self._collection("villages").document(village_id).update({"villageName": name})

    def _set_village_active(self, village_id: str, active: bool) -> None:
        self._collection("villages").document(village_id).update({"isActive": active})

    @trace
    def increment_village_usage(self, village_id: str) -> None:
        self._collection("villages").document(str(village_id)).update(
            {"usageCount": firestore.Increment(1), "lastUsed": firestore.SERVER_TIMESTAMP}
        )
