#!/usr/bin/env python3
"""Tests for backend selection (data/storage.py) and the Firestore document mapping."""

import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

# Add parent directory to path so imports work
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
from data.database_service import DatabaseService
from data.firestore_service import FirestoreService
from data.models import Advance, TripEntry
from data.storage import StorageUnavailableError, open_storage, resolve_credentials


def _snapshot(doc_id, data):
    snap = MagicMock()
    snap.id = doc_id
    snap.exists = True
    snap.to_dict.return_value = data
    return snap


class TestOpenStorage(unittest.TestCase):
    """Startup backend choice."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.tmpdir.name, "roadline.db")

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_local_mode_uses_sqlite(self):
        backend = open_storage(mode="local", db_path=self.db_path)
        try:
            assert isinstance(backend, DatabaseService)
        finally:
            backend.close()

    @patch("data.storage.resolve_credentials", return_value=None)
    def test_auto_without_credentials_falls_back(self, _mock_credentials):
        backend = open_storage(mode="auto", db_path=self.db_path)
        try:
            assert isinstance(backend, DatabaseService)
        finally:
            backend.close()

    @patch("data.storage.resolve_credentials", return_value="key.json")
    @patch("data.firestore_service.FirestoreService.connect")
    def test_auto_uses_firestore_when_probe_succeeds(self, mock_connect, _mock_credentials):
        remote = MagicMock(spec=FirestoreService)
        mock_connect.return_value = remote
        backend = open_storage(mode="auto", db_path=self.db_path, probe_timeout=1.5)
        assert backend is remote
        remote.probe.assert_called_once_with(timeout=1.5)

    @patch("data.storage.resolve_credentials", return_value="key.json")
    @patch("data.firestore_service.FirestoreService.connect")
    def test_auto_falls_back_when_probe_fails(self, mock_connect, _mock_credentials):
        remote = MagicMock(spec=FirestoreService)
        remote.probe.side_effect = StorageUnavailableError("timeout")
        mock_connect.return_value = remote
        backend = open_storage(mode="auto", db_path=self.db_path)
        try:
            assert isinstance(backend, DatabaseService)
        finally:
            backend.close()

    @patch("data.storage.resolve_credentials", return_value="key.json")
    @patch("data.firestore_service.FirestoreService.connect", side_effect=StorageUnavailableError("bad key"))
    def test_auto_falls_back_when_connect_fails(self, _mock_connect, _mock_credentials):
        backend = open_storage(mode="auto", db_path=self.db_path)
        try:
            assert isinstance(backend, DatabaseService)
        finally:
            backend.close()

    def test_unknown_mode(self):
        with self.assertRaises(ValueError):
            open_storage(mode="cloud", db_path=self.db_path)

    def test_resolve_credentials_prefers_argument(self):
        with patch.dict(os.environ, {"ROADLINE_FIREBASE_CREDENTIALS": "env.json"}):
            assert resolve_credentials(" arg.json ") == "arg.json"
            assert resolve_credentials() == "env.json"


class TestFirestoreService(unittest.TestCase):
    """Document mapping with a mocked Firestore client."""

    def setUp(self):
        self.client = MagicMock()
        self.service = FirestoreService(self.client)

    def test_probe_failure_is_storage_unavailable(self):
        self.client.collection.return_value.limit.return_value.get.side_effect = RuntimeError("deadline")
        with self.assertRaises(StorageUnavailableError):
            self.service.probe(timeout=0.1)

    def test_list_trips_reads_camel_case_documents(self):
        query = self.client.collection.return_value.order_by.return_value
        query.stream.return_value = [
            _snapshot("abc", {"slNumber": 3, "date": "2024-03-05", "vehicleNumber": "KA01AB1234", "advanceAmount": 500, "villages": ["Hosur"]}),
        ]
        trips = self.service.list_trips()
        assert trips[0].id == "abc"
        assert trips[0].sl_number == 3
        assert trips[0].advance_amount == 500
        assert trips[0].villages == ["Hosur"]
        self.client.collection.assert_called_with("trips")

    def test_next_sl_number(self):
        query = self.client.collection.return_value.order_by.return_value.limit.return_value
        query.get.return_value = []
        assert self.service.get_next_sl_number() == 1
        query.get.return_value = [_snapshot("x", {"slNumber": 41})]
        assert self.service.get_next_sl_number() == 42

    def test_add_trip_writes_document(self):
        ref = MagicMock()
        ref.id = "new-id"
        self.client.collection.return_value.add.return_value = (None, ref)
        trip = self.service.add_trip(TripEntry(sl_number=1, date="2024-03-05", vehicle_number="KA01AB1234"))
        assert trip.id == "new-id"
        document = self.client.collection.return_value.add.call_args[0][0]
        assert document["slNumber"] == 1
        assert document["vehicleNumber"] == "KA01AB1234"
        assert "createdAt" in document
        assert "id" not in document

    def test_untagged_advance_omits_type(self):
        ref = MagicMock()
        ref.id = "adv-1"
        self.client.collection.return_value.add.return_value = (None, ref)
        self.service.add_advance(Advance(advance_amount=100, trip_id="t1", vehicle_number="KA01"))
        document = self.client.collection.return_value.add.call_args[0][0]
        assert "advanceType" not in document
        assert document["advanceAmount"] == 100
        assert document["tripId"] == "t1"

    def test_orphan_recovery_queries_by_vehicle(self):
        collection = self.client.collection.return_value
        collection.where.return_value.stream.return_value = []
        orphan_query = collection.where.return_value.where.return_value
        orphan_query.stream.return_value = [_snapshot("o1", {"advanceAmount": 300, "vehicleNumber": "KA01", "tripId": ""})]
        advances = self.service.get_advances_by_trip("t9", "KA01")
        assert [a.id for a in advances] == ["o1"]
        collection.where.assert_any_call("tripId", "==", "t9")
        collection.where.assert_any_call("vehicleNumber", "==", "KA01")


if __name__ == "__main__":
    unittest.main()
