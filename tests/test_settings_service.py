#!/usr/bin/env python3
"""Tests for core/settings_service.py."""

import os
import sys
import tempfile
from pathlib import Path

# Add parent directory to path so imports work
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
from core.settings_service import SettingsService


class TestSettingsService(unittest.TestCase):
    """JSON preferences file."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "app_settings.json")
        self.service = SettingsService(self.path)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_missing_or_corrupt_file_loads_empty(self):
        assert self.service.load() == {}
        with open(self.path, "w", encoding="utf-8") as handle:
            handle.write("{not json")
        assert self.service.load() == {}
        with open(self.path, "w", encoding="utf-8") as handle:
            handle.write("[1, 2]")
        assert self.service.load() == {}

    def test_save_and_load(self):
        settings = {}
        export_path = os.path.join(self.tmpdir.name, "exports", "report.csv")
        assert self.service.set_last_export_dir(settings, export_path)
        assert self.service.set_last_backup_dir(settings, os.path.join(self.tmpdir.name, "b.db"))
        self.service.set_storage_mode(settings, "local")
        self.service.save(settings)

        loaded = self.service.load()
        assert self.service.get_last_export_dir(loaded) == os.path.join(self.tmpdir.name, "exports")
        assert self.service.get_last_backup_dir(loaded) == self.tmpdir.name
        assert self.service.get_storage_mode(loaded) == "local"

    def test_bare_filenames_are_not_remembered(self):
        settings = {}
        assert not self.service.set_last_export_dir(settings, "report.csv")
        assert not self.service.set_last_backup_dir(settings, "backup.db")
        assert self.service.get_last_export_dir(settings) is None
        assert self.service.get_last_backup_dir(settings) is None

    def test_storage_mode(self):
        assert self.service.get_storage_mode({"storage_mode": "bogus"}) in ("auto", "local")
        with self.assertRaises(ValueError):
            self.service.set_storage_mode({}, "cloud")


if __name__ == "__main__":
    unittest.main()
