from __future__ import annotations

import tkinter as tk
from tkinter import ttk


class ContextMenuMixin:
    def _setup_right_click_menus(self):
        self.report_trip_menu = tk.Menu(self, tearoff=0)
        self.report_trip_menu.add_command(label="Edit Trip", command=self.edit_selected_report_trip)
        self.report_trip_menu.add_separator()
        self.report_trip_menu.add_command(label="Refresh", command=self.refresh_reports)

        self.str_menu = tk.Menu(self, tearoff=0)
        self.str_menu.add_command(label="Toggle Status", command=self.toggle_selected_str_status)
        self.str_menu.add_command(label="Edit Trip", command=self.edit_selected_str_trip)
        self.str_menu.add_separator()
        self.str_menu.add_command(label="Delete Trip", command=self.delete_selected_trip)

        self.advance_trip_menu = tk.Menu(self, tearoff=0)
        self.advance_trip_menu.add_command(label="View Advance History", command=self.show_selected_advance_history)
        self.advance_trip_menu.add_separator()
        self.advance_trip_menu.add_command(label="Refresh", command=self.refresh_advance_trips)

        self.vehicle_menu = tk.Menu(self, tearoff=0)
        self.vehicle_menu.add_command(label="Delete Selected", command=self.deactivate_vehicle)
        self.vehicle_menu.add_separator()
        self.vehicle_menu.add_command(label="Refresh", command=self.refresh_vehicles)

        self.village_menu = tk.Menu(self, tearoff=0)
        self.village_menu.add_command(label="Delete Selected", command=self.deactivate_village)
        self.village_menu.add_separator()
        self.village_menu.add_command(label="Refresh", command=self.refresh_villages)

        self.report_trip_tree.bind("<Button-3>", lambda event: self._show_tree_context_menu(event, self.report_trip_tree, self.report_trip_menu))
        self.str_tree.bind("<Button-3>", lambda event: self._show_tree_context_menu(event, self.str_tree, self.str_menu))
        self.advance_trip_tree.bind("<Button-3>", lambda event: self._show_tree_context_menu(event, self.advance_trip_tree, self.advance_trip_menu))
        self.vehicle_tree.bind("<Button-3>", lambda event: self._show_tree_context_menu(event, self.vehicle_tree, self.vehicle_menu))
        self.village_tree.bind("<Button-3>", lambda event: self._show_tree_context_menu(event, self.village_tree, self.village_menu))

    def _show_tree_context_menu(self, event: tk.Event, tree: ttk.Treeview, menu: tk.Menu):
        row_id = tree.identify_row(event.y)
        if row_id and row_id not in tree.selection():
            tree.selection_set(row_id)
            tree.focus(row_id)
        try:
            menu.tk_popup(event.x_root, event.y_root)
        finally:
            menu.grab_release()
