from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from core.app_logging import get_app_logger

logger = get_app_logger()


class NavigationMixin:
    def _bind_global_shortcuts(self):
        self.bind_all("<Control-f>", self._focus_current_tab_primary_input)
        self.bind_all("<Control-F>", self._focus_current_tab_primary_input)
        self.bind_all("<Control-r>", self._refresh_current_tab)
        self.bind_all("<Control-R>", self._refresh_current_tab)
        self.bind_all("<F5>", self._refresh_current_tab)
        self.bind_all("<Control-s>", self._save_current_tab)
        self.bind_all("<Control-S>", self._save_current_tab)
        self.bind_all("<Control-n>", lambda _event: self._open_tab(self.tab_add_entry))
        self.bind_all("<Control-N>", lambda _event: self._open_tab(self.tab_add_entry))
        self.bind_all("<Control-b>", lambda _event: self.backup_database())
        self.bind_all("<Control-B>", lambda _event: self.backup_database())

    def _open_tab(self, tab):
        self.main_notebook.select(tab)

    def _selected_tab(self) -> str:
        return self.main_notebook.select() if hasattr(self, "main_notebook") else ""

    def _get_primary_entry_for_current_tab(self):
        selected_tab = self._selected_tab()
        if selected_tab == str(self.tab_add_entry):
            return getattr(self, "trip_vehicle_combo", None)
        if selected_tab == str(self.tab_add_advance):
            return getattr(self, "advance_vehicle_combo", None)
        if selected_tab == str(self.tab_reports):
            return getattr(self, "report_vehicle_entry", None)
        if selected_tab == str(self.tab_str):
            return getattr(self, "str_vehicle_entry", None)
        if selected_tab == str(self.tab_settings):
            return getattr(self, "village_search_entry", None)
        return None

    def _focus_current_tab_primary_input(self, _event=None):
        target_widget = self._get_primary_entry_for_current_tab()
        if not target_widget:
            return
        try:
            target_widget.focus_set()
            if isinstance(target_widget, (tk.Entry, ttk.Entry)):
                target_widget.icursor(tk.END)
        except tk.TclError as exc:
            logger.debug(f"Failed to focus primary input for current tab: {exc}")
        return "break"

    def _refresh_tab(self, tab):
        """Reload what ``tab`` shows. Tabs holding unsaved input are left alone."""
        name = str(tab)
        if name == str(self.tab_dashboard):
            self.refresh_dashboard()
        elif name == str(self.tab_add_entry):
            self._update_next_sl()
        elif name == str(self.tab_add_advance):
            if self.advance_vehicle_combo.get().strip() and not self._tab_has_unsaved_data(self.tab_add_advance):
                self.refresh_advance_trips()
        elif name == str(self.tab_reports):
            self.refresh_reports()
        elif name == str(self.tab_str):
            if not self._str_edits:
                self.refresh_str_status()
        elif name == str(self.tab_settings):
            self.refresh_vehicles()
            self.refresh_villages()

    def _refresh_current_tab(self, _event=None):
        selected_tab = self._selected_tab()
        if not selected_tab:
            return "break"
        if selected_tab == str(self.tab_str):
            self.refresh_str_status()
        else:
            self._refresh_tab(selected_tab)
        return "break"

    def _refresh_all_tabs(self):
        self._str_edits = {}
        self.refresh_vehicles()
        self.refresh_villages()
        self._update_next_sl()
        self.refresh_dashboard()
        self.refresh_reports()
        self.refresh_str_status()
        if self.advance_vehicle_combo.get().strip():
            self.refresh_advance_trips()

    def _save_current_tab(self, _event=None):
        selected_tab = self._selected_tab()
        if selected_tab == str(self.tab_add_entry):
            self.add_trip()
        elif selected_tab == str(self.tab_add_advance):
            self.add_advance()
        elif selected_tab == str(self.tab_str):
            self.save_str_changes()
        return "break"
