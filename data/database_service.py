from __future__ import annotations

import json
import os
import shutil
import sqlite3
import threading
from typing import Any

from core.app_logging import get_exception_logger, trace
from core.config import (
    ADVANCE_TYPE_ADDITIONAL,
    ADVANCE_TYPE_INITIAL,
    DEFAULT_VEHICLE_TYPE,
    STR_STATUS_NOT_RECEIVED,
)
from data.models import Advance, TripEntry, Vehicle, Village
from data.storage import StorageBackend, StorageUnavailableError
from utils.date_utils import now_iso

_exc_logger = get_exception_logger()


class DatabaseService(StorageBackend):
    """Local SQLite storage. One connection shared by the UI thread and loader threads."""

    name = "local"
    SCHEMA_VERSION = 1
    CORE_TABLES = ("advances", "trips", "vehicles", "villages")
    TRIP_COLUMNS = (
        "sl_number",
        "date",
        "vehicle_number",
        "str_number",
        "str_status",
        "villages",
        "quantity",
        "driver_name",
        "mobile_number",
        "vehicle_type",
        "advance_amount",
    )

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._lock = threading.RLock()
        try:
            self.conn = self._connect()
            self._init_db()
        except sqlite3.Error as exc:
            raise StorageUnavailableError(f"Cannot open local database {db_path}: {exc}") from exc

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _init_db(self) -> None:
        with self._lock:
            current_version = self._get_user_version()
            self._create_schema_v1()
            if current_version < self.SCHEMA_VERSION:
                self._set_user_version(self.SCHEMA_VERSION)
            self.conn.commit()

    def _get_user_version(self) -> int:
        row = self.conn.execute("PRAGMA user_version").fetchone()
        return int(row[0]) if row else 0

    def _set_user_version(self, version: int) -> None:
        self.conn.execute(f"PRAGMA user_version = {int(version)}")

    def _create_schema_v1(self) -> None:
        self.conn.executescript(
            f"""
            CREATE TABLE IF NOT EXISTS trips (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                sl_number INTEGER NOT NULL UNIQUE CHECK (sl_number > 0),
                date TEXT NOT NULL CHECK (LENGTH(TRIM(date)) > 0),
                vehicle_number TEXT NOT NULL CHECK (LENGTH(TRIM(vehicle_number)) > 0),
                str_number TEXT NOT NULL DEFAULT '',
                str_status TEXT NOT NULL DEFAULT '{STR_STATUS_NOT_RECEIVED}',
                villages TEXT NOT NULL DEFAULT '[]',
                quantity REAL NOT NULL DEFAULT 0,
                driver_name TEXT NOT NULL DEFAULT '',
                mobile_number TEXT NOT NULL DEFAULT '',
                vehicle_type TEXT NOT NULL DEFAULT '{DEFAULT_VEHICLE_TYPE}',
                advance_amount REAL NOT NULL DEFAULT 0 CHECK (advance_amount >= 0),
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS vehicles (
                vehicle_number TEXT PRIMARY KEY CHECK (LENGTH(TRIM(vehicle_number)) > 0),
                driver_name TEXT NOT NULL DEFAULT '',
                mobile_number TEXT NOT NULL DEFAULT '',
                vehicle_type TEXT NOT NULL DEFAULT '{DEFAULT_VEHICLE_TYPE}',
                is_active INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0, 1)),
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS advances (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                advance_amount REAL NOT NULL CHECK (advance_amount > 0),
                trip_id TEXT NOT NULL DEFAULT '',
                vehicle_number TEXT NOT NULL DEFAULT '',
                trip_date TEXT NOT NULL DEFAULT '',
                advance_type TEXT CHECK (
                    advance_type IS NULL
                    OR advance_type IN ('{ADVANCE_TYPE_INITIAL}', '{ADVANCE_TYPE_ADDITIONAL}')
                ),
                note TEXT NOT NULL DEFAULT '',
                is_settled INTEGER NOT NULL DEFAULT 0 CHECK (is_settled IN (0, 1)),
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS villages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                village_name TEXT NOT NULL CHECK (LENGTH(TRIM(village_name)) > 0),
                is_active INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0, 1)),
                usage_count INTEGER NOT NULL DEFAULT 0,
                last_used TEXT,
                created_at TEXT NOT NULL
            );

            CREATE UNIQUE INDEX IF NOT EXISTS idx_villages_name_unique ON villages(LOWER(village_name));
            CREATE INDEX IF NOT EXISTS idx_trips_date ON trips(date);
            CREATE INDEX IF NOT EXISTS idx_trips_vehicle ON trips(vehicle_number);
            CREATE INDEX IF NOT EXISTS idx_advances_trip ON advances(trip_id);
            CREATE INDEX IF NOT EXISTS idx_advances_vehicle ON advances(vehicle_number);
            CREATE INDEX IF NOT EXISTS idx_advances_created ON advances(created_at);
            """
        )

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------

    def execute(self, query: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        with self._lock:
            return self.conn.execute(query, params)

    def fetchone(self, query: str, params: tuple[Any, ...] = ()) -> sqlite3.Row | None:
        with self._lock:
            return self.conn.execute(query, params).fetchone()

    def fetchall(self, query: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self.conn.execute(query, params).fetchall()

    def count(self, table: str, where_clause: str = "1=1", params: tuple[Any, ...] = ()) -> int:
        row = self.fetchone(f"SELECT COUNT(*) AS n FROM {self._quote_ident(table)} WHERE {where_clause}", params)
        return int(row["n"]) if row else 0

    def commit(self) -> None:
        with self._lock:
            self.conn.commit()

    def close(self) -> None:
        with self._lock:
            self.conn.close()

    def describe(self) -> str:
        return f"local ({os.path.basename(self.db_path)})"

    def _write(self, query: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        with self._lock:
            cursor = self.conn.execute(query, params)
            self.conn.commit()
            return cursor

    @staticmethod
    def _trip_from_row(row: sqlite3.Row) -> TripEntry:
        record = dict(row)
        try:
            record["villages"] = json.loads(record.get("villages") or "[]")
        except ValueError:
            record["villages"] = []
        return TripEntry.from_record(record, record_id=row["id"])

    @staticmethod
    def _advance_from_row(row: sqlite3.Row) -> Advance:
        return Advance.from_record(dict(row), record_id=row["id"])

    # ------------------------------------------------------------------
    # Trips
    # ------------------------------------------------------------------

    @trace
    def list_trips(self) -> list[TripEntry]:
        rows = self.fetchall("SELECT * FROM trips ORDER BY created_at DESC, id DESC")
        return [self._trip_from_row(r) for r in rows]

    @trace
    def get_trip(self, trip_id: str) -> TripEntry | None:
        row = self.fetchone("SELECT * FROM trips WHERE id=?", (trip_id,))
        return self._trip_from_row(row) if row else None

    @trace
    def add_trip(self, trip: TripEntry) -> TripEntry:
        stamp = now_iso()
        record = trip.to_record()
        record["villages"] = json.dumps(record["villages"], ensure_ascii=False)
        columns = list(self.TRIP_COLUMNS) + ["created_at", "updated_at"]
        values = [record[c] for c in self.TRIP_COLUMNS] + [stamp, stamp]
        cursor = self._write(
            f"INSERT INTO trips ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
            tuple(values),
        )
        trip.id = str(cursor.lastrowid)
        trip.created_at = stamp
        trip.updated_at = stamp
        return trip

    @trace
    def update_trip(self, trip_id: str, fields: dict) -> None:
        unknown = set(fields) - set(self.TRIP_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown trip field(s): {', '.join(sorted(unknown))}")
        if not fields:
            return
        values = dict(fields)
        if "villages" in values:
            values["villages"] = json.dumps(list(values["villages"]), ensure_ascii=False)
        assignments = ", ".join(f"{name}=?" for name in values)
        self._write(
            f"UPDATE trips SET {assignments}, updated_at=? WHERE id=?",
            tuple(values.values()) + (now_iso(), trip_id),
        )

    @trace
    def delete_trip(self, trip_id: str) -> None:
        self._write("DELETE FROM trips WHERE id=?", (trip_id,))

    @trace
    def get_next_sl_number(self) -> int:
        row = self.fetchone("SELECT MAX(sl_number) AS max_sl FROM trips")
        if row is None or row["max_sl"] is None:
            return 1
        return int(row["max_sl"]) + 1

    @trace
    def get_trips_by_vehicle(self, vehicle_number: str) -> list[TripEntry]:
        rows = self.fetchall(
            "SELECT * FROM trips WHERE UPPER(vehicle_number)=UPPER(?) ORDER BY date DESC, sl_number DESC",
            (vehicle_number.strip(),),
        )
        return [self._trip_from_row(r) for r in rows]

    @trace
    def get_trips_by_date_range(self, date_from: str, date_to: str) -> list[TripEntry]:
        rows = self.fetchall(
            "SELECT * FROM trips WHERE date >= ? AND date <= ? ORDER BY date DESC, sl_number DESC",
            (date_from, date_to),
        )
        return [self._trip_from_row(r) for r in rows]

    # ------------------------------------------------------------------
    # Vehicles
    # ------------------------------------------------------------------

    @trace
    def list_vehicles(self, include_inactive: bool = False) -> list[Vehicle]:
        where = "" if include_inactive else "WHERE is_active=1"
        rows = self.fetchall(f"SELECT * FROM vehicles {where} ORDER BY vehicle_number ASC")
        return [Vehicle.from_record(dict(r)) for r in rows]

    @trace
    def get_vehicle(self, vehicle_number: str) -> Vehicle | None:
        row = self.fetchone("SELECT * FROM vehicles WHERE vehicle_number=?", (vehicle_number.strip().upper(),))
        return Vehicle.from_record(dict(row)) if row else None

    @trace
    def upsert_vehicle(self, vehicle: Vehicle) -> Vehicle:
        stamp = now_iso()
        vehicle.vehicle_number = vehicle.vehicle_number.strip().upper()
        self._write(
            """
            INSERT INTO vehicles (vehicle_number, driver_name, mobile_number, vehicle_type, is_active, created_at, updated_at)
            VALUES (?, ?, ?, ?, 1, ?, ?)
            ON CONFLICT(vehicle_number) DO UPDATE SET
                driver_name=excluded.driver_name,
                mobile_number=excluded.mobile_number,
                vehicle_type=excluded.vehicle_type,
                is_active=1,
                updated_at=excluded.updated_at
            """,
            (vehicle.vehicle_number, vehicle.driver_name, vehicle.mobile_number, vehicle.vehicle_type, stamp, stamp),
        )
        return self.get_vehicle(vehicle.vehicle_number) or vehicle

    @trace
    def deactivate_vehicle(self, vehicle_number: str) -> None:
        self._write(
            "UPDATE vehicles SET is_active=0, updated_at=? WHERE vehicle_number=?",
            (now_iso(), vehicle_number.strip().upper()),
        )

    # ------------------------------------------------------------------
    # Advances
    # ------------------------------------------------------------------

    @trace
    def add_advance(self, advance: Advance) -> Advance:
        stamp = now_iso()
        cursor = self._write(
            """
            INSERT INTO advances (advance_amount, trip_id, vehicle_number, trip_date, advance_type, note, is_settled, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                advance.advance_amount,
                advance.trip_id or "",
                advance.vehicle_number,
                advance.trip_date,
                advance.advance_type,
                advance.note,
                1 if advance.is_settled else 0,
                stamp,
            ),
        )
        advance.id = str(cursor.lastrowid)
        advance.created_at = stamp
        return advance

    def _advances_for_trip(self, trip_id: str) -> list[Advance]:
        rows = self.fetchall(
            "SELECT * FROM advances WHERE trip_id=? ORDER BY created_at DESC, id DESC",
            (trip_id,),
        )
        return [self._advance_from_row(r) for r in rows]

    def _orphan_advances_for_vehicle(self, vehicle_number: str) -> list[Advance]:
        rows = self.fetchall(
            """
            SELECT * FROM advances
            WHERE vehicle_number=? AND TRIM(trip_id)=''
            ORDER BY created_at DESC, id DESC
            """,
            (vehicle_number,),
        )
        return [self._advance_from_row(r) for r in rows]

    @trace
    def get_advances_by_vehicle(self, vehicle_number: str) -> list[Advance]:
        rows = self.fetchall(
            "SELECT * FROM advances WHERE vehicle_number=? ORDER BY created_at DESC, id DESC",
            (vehicle_number,),
        )
        return [self._advance_from_row(r) for r in rows]

    @trace
    def get_advances_by_created_range(self, start: str, end: str) -> list[Advance]:
        rows = self.fetchall(
            "SELECT * FROM advances WHERE created_at >= ? AND created_at <= ? ORDER BY created_at DESC, id DESC",
            (start, end),
        )
        return [self._advance_from_row(r) for r in rows]

    @trace
    def list_advances(self) -> list[Advance]:
        rows = self.fetchall("SELECT * FROM advances ORDER BY created_at DESC, id DESC")
        return [self._advance_from_row(r) for r in rows]

    # ------------------------------------------------------------------
    # Villages
    # ------------------------------------------------------------------

    def _all_villages(self) -> list[Village]:
        rows = self.fetchall("SELECT * FROM villages ORDER BY usage_count DESC, village_name ASC")
        return [Village.from_record(dict(r), record_id=r["id"]) for r in rows]

    def _insert_village(self, name: str) -> Village:
        stamp = now_iso()
        try:
            cursor = self._write(
                "INSERT INTO villages (village_name, is_active, usage_count, created_at) VALUES (?, 1, 0, ?)",
                (name, stamp),
            )
        except sqlite3.IntegrityError as exc:
            raise ValueError(f"Village '{name}' already exists.") from exc
        return Village(id=str(cursor.lastrowid), village_name=name, created_at=stamp)

    def _rename_village(self, village_id: str, name: str) -> None:
        self._write("UPDATE villages SET village_name=? WHERE id=?", (name, village_id))

    def _set_village_active(self, village_id: str, active: bool) -> None:
        self._write("UPDATE villages SET is_active=? WHERE id=?", (1 if active else 0, village_id))

    @trace
    def increment_village_usage(self, village_id: str) -> None:
        self._write(
            "UPDATE villages SET usage_count = usage_count + 1, last_used=? WHERE id=?",
            (now_iso(), village_id),
        )

    # ------------------------------------------------------------------
    # Backup / restore
    # ------------------------------------------------------------------

    def _quote_ident(self, name: str) -> str:
        return '"' + str(name).replace('"', '""') + '"'

    def _table_count(self, conn: sqlite3.Connection, table_name: str) -> int:
        row = conn.execute(f"SELECT COUNT(*) AS n FROM {self._quote_ident(table_name)}").fetchone()
        return int(row[0]) if row else 0

    def _user_table_names(self, conn: sqlite3.Connection) -> list[str]:
        rows = conn.execute(
            """
            SELECT name
            FROM sqlite_master
            WHERE type='table' AND name NOT LIKE 'sqlite_%'
            ORDER BY name ASC
            """
        ).fetchall()
        return [str(r[0]) for r in rows]

    def _validate_connection_integrity(self, conn: sqlite3.Connection) -> None:
        integrity_row = conn.execute("PRAGMA integrity_check").fetchone()
        integrity_result = str(integrity_row[0]).lower() if integrity_row else ""
        if integrity_result != "ok":
            raise RuntimeError(f"Integrity check failed: {integrity_result}")

        missing_core = [t for t in self.CORE_TABLES if t not in self._user_table_names(conn)]
        if missing_core:
            raise RuntimeError(f"Missing core tables: {missing_core}")

    def _validate_backup_copy(self, backup_conn: sqlite3.Connection) -> None:
        self._validate_connection_integrity(backup_conn)
        for table_name in self.CORE_TABLES:
            src_count = self._table_count(self.conn, table_name)
            bak_count = self._table_count(backup_conn, table_name)
            if src_count != bak_count:
                raise RuntimeError(
                    "Backup verification failed: row count mismatch for "
                    f"'{table_name}' (source={src_count}, backup={bak_count})"
                )

    @trace
    def validate_backup_file(self, backup_file_path: str) -> None:
        if not backup_file_path or not os.path.exists(backup_file_path):
            raise RuntimeError("Backup file not found")

        backup_conn = sqlite3.connect(backup_file_path)
        try:
            self._validate_connection_integrity(backup_conn)
        except sqlite3.DatabaseError as exc:
            raise RuntimeError(f"Not a valid backup file: {exc}") from exc
        finally:
            backup_conn.close()

    @trace
    def backup_to(self, file_path: str) -> None:
        with self._lock:
            self.conn.commit()
            backup_conn = sqlite3.connect(file_path)
            try:
                self.conn.backup(backup_conn)
                backup_conn.commit()
                self._validate_backup_copy(backup_conn)
            finally:
                backup_conn.close()

    @trace
    def restore_from_backup(self, backup_file_path: str, safety_backup_path: str) -> None:
        if not backup_file_path:
            raise RuntimeError("Backup file path is required")
        if not safety_backup_path:
            raise RuntimeError("Safety backup path is required")

        self.validate_backup_file(backup_file_path)
        self.backup_to(safety_backup_path)

        db_temp_restore = self.db_path + ".restore_tmp"
        with self._lock:
            if os.path.exists(db_temp_restore):
                os.remove(db_temp_restore)
            self.conn.close()
            try:
                shutil.copy2(backup_file_path, db_temp_restore)
                os.replace(db_temp_restore, self.db_path)
                self.conn = self._connect()
                self._init_db()
                self._validate_connection_integrity(self.conn)
            except Exception as exc:
                _exc_logger.error(f"Restore from {backup_file_path} failed: {exc}", exc_info=True)
                if os.path.exists(db_temp_restore):
                    os.remove(db_temp_restore)
                self.conn = self._connect()
                raise
