"""
Domain records shared by both storage backends.

Records read from storage may use either the camelCase field names written
by the web client (``vehicleNumber``, ``advanceAmount``) or the snake_case
names used by the local SQLite schema; ``from_record`` accepts both.
``to_document`` produces the camelCase form stored in Firestore.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Mapping

from core.config import DEFAULT_VEHICLE_TYPE, STR_STATUS_NOT_RECEIVED
from utils.currency import to_number


def document_key(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def pick(record: Mapping[str, Any], name: str, default: Any = None) -> Any:
    """Read ``name`` from a record using its snake_case or camelCase spelling."""
    if name in record and record[name] is not None:
        return record[name]
    camel = document_key(name)
    if camel in record and record[camel] is not None:
        return record[camel]
    return default


def timestamp_text(value: Any) -> str:
    """Normalize stored timestamps to ``YYYY-MM-DD HH:MM:SS`` (local time)."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        return value.replace(microsecond=0).isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat() + " 00:00:00"
    return str(value).replace("T", " ")[:19]


def _text(record: Mapping[str, Any], name: str, default: str = "") -> str:
    value = pick(record, name, default)
    return str(value).strip() if value is not None else default


def _flag(record: Mapping[str, Any], name: str, default: bool) -> bool:
    value = pick(record, name, default)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def _to_document(values: dict[str, Any], skip: tuple[str, ...]) -> dict[str, Any]:
    return {document_key(key): value for key, value in values.items() if key not in skip}


@dataclass
class TripEntry:
    id: str = ""
    sl_number: int = 0
    date: str = ""
    vehicle_number: str = ""
    str_number: str = ""
    str_status: str = STR_STATUS_NOT_RECEIVED
    villages: list[str] = field(default_factory=list)
    quantity: float = 0.0
    driver_name: str = ""
    mobile_number: str = ""
    vehicle_type: str = DEFAULT_VEHICLE_TYPE
    advance_amount: float = 0.0
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any], record_id: Any = None) -> "TripEntry":
        villages = pick(record, "villages", [])
        if isinstance(villages, str):
            villages = [v.strip() for v in villages.split(",") if v.strip()]
        return cls(
            id=str(record_id if record_id is not None else pick(record, "id", "")),
            sl_number=int(to_number(pick(record, "sl_number", 0))),
            date=_text(record, "date")[:10],
            vehicle_number=_text(record, "vehicle_number"),
            str_number=_text(record, "str_number"),
            str_status=_text(record, "str_status", STR_STATUS_NOT_RECEIVED) or STR_STATUS_NOT_RECEIVED,
            villages=[str(v) for v in villages],
            quantity=to_number(pick(record, "quantity", 0)),
            driver_name=_text(record, "driver_name"),
            mobile_number=_text(record, "mobile_number"),
            vehicle_type=_text(record, "vehicle_type", DEFAULT_VEHICLE_TYPE) or DEFAULT_VEHICLE_TYPE,
            advance_amount=to_number(pick(record, "advance_amount", 0)),
            created_at=timestamp_text(pick(record, "created_at")),
            updated_at=timestamp_text(pick(record, "updated_at")),
        )

    def to_record(self) -> dict[str, Any]:
        values = asdict(self)
        values.pop("id")
        return values

    def to_document(self) -> dict[str, Any]:
        return _to_document(asdict(self), ("id", "created_at", "updated_at"))


@dataclass
class Advance:
    id: str = ""
    advance_amount: float = 0.0
    trip_id: str = ""
    vehicle_number: str = ""
    trip_date: str = ""
    advance_type: str | None = None
    note: str = ""
    is_settled: bool = False
    created_at: str = ""
    is_synthetic: bool = False

    @classmethod
    def from_record(cls, record: Mapping[str, Any], record_id: Any = None) -> "Advance":
        advance_type = pick(record, "advance_type")
        return cls(
            id=str(record_id if record_id is not None else pick(record, "id", "")),
            advance_amount=to_number(pick(record, "advance_amount", 0)),
            trip_id=_text(record, "trip_id"),
            vehicle_number=_text(record, "vehicle_number"),
            trip_date=_text(record, "trip_date")[:10],
            advance_type=str(advance_type) if advance_type else None,
            note=_text(record, "note"),
            is_settled=_flag(record, "is_settled", False),
            created_at=timestamp_text(pick(record, "created_at")),
            is_synthetic=_flag(record, "is_synthetic", False),
        )

    def to_record(self) -> dict[str, Any]:
        values = asdict(self)
        values.pop("id")
        values.pop("is_synthetic")
        return values

    def to_document(self) -> dict[str, Any]:
        return _to_document(asdict(self), ("id", "created_at", "is_synthetic"))


@dataclass
class Vehicle:
    vehicle_number: str = ""
    driver_name: str = ""
    mobile_number: str = ""
    vehicle_type: str = DEFAULT_VEHICLE_TYPE
    is_active: bool = True
    created_at: str = ""
    updated_at: str = ""

    @property
    def id(self) -> str:
        return self.vehicle_number

    @classmethod
    def from_record(cls, record: Mapping[str, Any], record_id: Any = None) -> "Vehicle":
        number = _text(record, "vehicle_number") or str(record_id or "")
        return cls(
            vehicle_number=number,
            driver_name=_text(record, "driver_name"),
            mobile_number=_text(record, "mobile_number"),
            vehicle_type=_text(record, "vehicle_type", DEFAULT_VEHICLE_TYPE) or DEFAULT_VEHICLE_TYPE,
            is_active=_flag(record, "is_active", True),
            created_at=timestamp_text(pick(record, "created_at")),
            updated_at=timestamp_text(pick(record, "updated_at")),
        )

    def to_record(self) -> dict[str, Any]:
        return asdict(self)

    def to_document(self) -> dict[str, Any]:
        return _to_document(asdict(self), ("created_at", "updated_at"))


@dataclass
class Village:
    id: str = ""
    village_name: str = ""
    is_active: bool = True
    usage_count: int = 0
    last_used: str = ""
    created_at: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any], record_id: Any = None) -> "Village":
        return cls(
            id=str(record_id if record_id is not None else pick(record, "id", "")),
            village_name=_text(record, "village_name"),
            is_active=_flag(record, "is_active", True),
            usage_count=int(to_number(pick(record, "usage_count", 0))),
            last_used=timestamp_text(pick(record, "last_used")),
            created_at=timestamp_text(pick(record, "created_at")),
        )

    def to_record(self) -> dict[str, Any]:
        values = asdict(self)
        values.pop("id")
        return values
