from __future__ import annotations

import tkinter as tk
from tkinter import messagebox, ttk

from app.widgets.date_entry import DateEntry
from core.app_logging import get_app_logger
from core.config import APP_TITLE, DB_PATH, HISTORY_LOG_FILE, WINDOW_HEIGHT, WINDOW_WIDTH
from core.runtime_utils import log_action
from data.database_service import DatabaseService
from data.storage import open_storage
from ledger.report_builder import ReportFilters
from tabs import (
    build_add_advance_tab,
    build_add_entry_tab,
    build_dashboard_tab,
    build_reports_tab,
    build_settings_tab,
    build_str_status_tab,
)

logger = get_app_logger()


class StartupLayoutMixin:
    def __init__(self):
        super().__init__()
        self._init_state()
        if not self._init_storage():
            return
        self._build_layout()
        self._bind_events()
        self._initial_loads()

    def _init_state(self):
        self.date_entry_cls = DateEntry
        self._app_settings = self._load_app_settings()
        self._log_action = log_action
        self._vehicle_cache = []
        self._village_cache = []
        self._report_filters = None
        self._report_summary = None
        self._str_edits = {}
        self._last_filled_vehicle = ""
        self._village_search_after_id = None
        self._dashboard_loading = False
        self._current_tab = None
        self.title(APP_TITLE)
        self.geometry(f"{WINDOW_WIDTH}x{WINDOW_HEIGHT}")
        self._set_startup_maximized()
        self._configure_ui_rendering()
        self._ensure_history_log_exists()

    def _set_startup_maximized(self):
        try:
            self.state("zoomed")
        except tk.TclError:
            try:
                self.attributes("-zoomed", True)
            except tk.TclError:
                return

    def _ensure_history_log_exists(self) -> None:
        try:
            with open(HISTORY_LOG_FILE, "a+", encoding="utf-8") as file_handle:
                file_handle.seek(0, 2)
                if file_handle.tell() == 0:
                    file_handle.write("# Suhel Roadline History Log (auto-created)\n")
        except OSError as exc:
            logger.warning(f"Failed to ensure history log exists: {exc}")

    def _init_storage(self) -> bool:
        mode = self._get_storage_mode()
        try:
            self.storage = open_storage(mode=mode, db_path=DB_PATH)
            return True
        except Exception as exc:
            logger.error(f"Failed to open storage in mode {mode}: {exc}", exc_info=True)
            messagebox.showerror(
                "Storage Error",
                "The ledger database could not be opened.\n\n"
                f"Details:\n{exc}",
            )
            self.destroy()
            return False

    def _build_layout(self):
        self.columnconfigure(0, weight=1)
        self.rowconfigure(0, weight=1)

        notebook = ttk.Notebook(self, style="MainTabs.TNotebook")
        notebook.grid(row=0, column=0, sticky="nsew")
        self.main_notebook = notebook

        self.tab_dashboard = ttk.Frame(notebook)
        self.tab_add_entry = ttk.Frame(notebook)
        self.tab_add_advance = ttk.Frame(notebook)
        self.tab_reports = ttk.Frame(notebook)
        self.tab_str = ttk.Frame(notebook)
        self.tab_settings = ttk.Frame(notebook)

        notebook.add(self.tab_dashboard, text="📈 Dashboard")
        notebook.add(self.tab_add_entry, text="🚚 Add Entry")
        notebook.add(self.tab_add_advance, text="💵 Add Advance")
        notebook.add(self.tab_reports, text="📊 Reports")
        notebook.add(self.tab_str, text="📝 STR Status")
        notebook.add(self.tab_settings, text="⚙ Settings")

        build_dashboard_tab(self, self.tab_dashboard)
        build_add_entry_tab(self, self.tab_add_entry)
        build_add_advance_tab(self, self.tab_add_advance)
        build_reports_tab(self, self.tab_reports)
        build_str_status_tab(self, self.tab_str)
        build_settings_tab(self, self.tab_settings)

        self._setup_right_click_menus()
        self._apply_storage_state()

    def _apply_storage_state(self):
        self.storage_backend_var.set(self.storage.describe())
        self.storage_mode_combo.set(self._get_storage_mode())
        if not isinstance(self.storage, DatabaseService):
            self.backup_button.state(["disabled"])
            self.restore_button.state(["disabled"])

    def _bind_events(self):
        self.main_notebook.bind("<<NotebookTabChanged>>", self._on_tab_changed)
        self.protocol("WM_DELETE_WINDOW", self.on_close)
        self._bind_global_shortcuts()

    def _initial_loads(self):
        self.refresh_vehicles()
        self.refresh_villages()
        self._update_next_sl()
        self._set_report_dates(ReportFilters.current_month())
        self.refresh_reports()
        self.refresh_str_status()
        self.refresh_dashboard()
        self._log_action("APP_START", f"Storage: {self.storage.describe()}")
