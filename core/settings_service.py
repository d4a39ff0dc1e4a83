from __future__ import annotations

import json
from pathlib import Path

from core.config import DEFAULT_STORAGE_MODE, STORAGE_MODES


class SettingsService:
    """JSON-backed user preferences (last export folder, storage mode)."""

    def __init__(self, settings_path: str):
        self._path = Path(settings_path)

    def load(self) -> dict:
        try:
            with self._path.open("r", encoding="utf-8") as file:
                data = json.load(file)
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, settings: dict) -> None:
        with self._path.open("w", encoding="utf-8") as file:
            json.dump(settings, file, ensure_ascii=False, indent=2)

    def get_last_export_dir(self, settings: dict) -> str | None:
        value = settings.get("last_export_dir")
        return value if isinstance(value, str) and value else None

    def set_last_export_dir(self, settings: dict, file_path: str) -> bool:
        parent = str(Path(str(file_path)).parent)
        if parent in {"", "."}:
            return False
        settings["last_export_dir"] = parent
        return True

    def get_last_backup_dir(self, settings: dict) -> str | None:
        value = settings.get("last_backup_dir")
        return value if isinstance(value, str) and value else None

    def set_last_backup_dir(self, settings: dict, file_path: str) -> bool:
        parent = str(Path(str(file_path)).parent)
        if parent in {"", "."}:
            return False
        settings["last_backup_dir"] = parent
        return True

    def get_storage_mode(self, settings: dict) -> str:
        value = settings.get("storage_mode")
        if value in STORAGE_MODES:
            return value
        return DEFAULT_STORAGE_MODE if DEFAULT_STORAGE_MODE in STORAGE_MODES else "auto"

    def set_storage_mode(self, settings: dict, mode: str) -> None:
        if mode not in STORAGE_MODES:
            raise ValueError(f"Storage mode must be one of: {', '.join(STORAGE_MODES)}")
        settings["storage_mode"] = mode
