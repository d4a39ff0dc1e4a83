from __future__ import annotations

import tkinter as tk
from tkinter import messagebox

from core.app_logging import get_app_logger, trace
from core.config import DEFAULT_VEHICLE_TYPE, REFRESH_DEBOUNCE_MS, STR_STATUS_NOT_RECEIVED
from dialogs.advance_history_dialog import show_advance_history
from dialogs.trip_edit_dialog import open_trip_edit_dialog
from ledger.report_builder import ReportFilters
from ui.combo_helpers import set_combo_source
from ui.ui_actions import (
    add_advance_action,
    add_trip_action,
    backup_database_action,
    change_storage_mode_action,
    deactivate_vehicle_action,
    deactivate_village_action,
    delete_trip_action,
    edit_trip_action,
    export_contacts_action,
    export_report_action,
    fill_vehicle_details_action,
    read_report_filters,
    refresh_advance_trips_action,
    refresh_reports_action,
    refresh_str_status_action,
    refresh_vehicles_action,
    refresh_villages_action,
    restore_database_action,
    save_str_changes_action,
    save_vehicle_action,
    save_village_action,
    show_advance_history_action,
    toggle_str_status,
    trip_form_defaults,
    village_suggestions,
)
from ui.ui_helpers import (
    clear_inline_errors,
    create_date_input,
    get_entry_value,
    reset_entry,
    set_date_input,
    set_date_input_today,
    set_entry_value,
    show_inline_error,
)
from utils.currency import format_inr
from utils.date_utils import format_display_date, format_timestamp, iso_date
from utils.validation import normalize_whitespace

logger = get_app_logger()


class ActionWrappersMixin:
    # ------------------------------------------------------------------
    # Trip entry
    # ------------------------------------------------------------------
    def _collect_trip_form(self) -> dict:
        return {
            "date": self.trip_date.get().strip(),
            "vehicle_number": self.trip_vehicle_combo.get(),
            "vehicle_type": self.trip_vehicle_type_combo.get(),
            "str_number": get_entry_value(self.trip_str_entry),
            "str_status": self.trip_str_status_combo.get(),
            "villages": list(self._selected_villages),
            "quantity": get_entry_value(self.trip_quantity_entry),
            "driver_name": get_entry_value(self.trip_driver_entry),
            "mobile_number": get_entry_value(self.trip_mobile_entry),
            "advance_amount": get_entry_value(self.trip_advance_entry),
        }

    @trace
    def add_trip(self):
        add_trip_action(
            app=self,
            storage=self.storage,
            collect_trip_form_cb=self._collect_trip_form,
            clear_inline_errors_cb=clear_inline_errors,
            show_inline_error_cb=show_inline_error,
            show_invalid_cb=self._show_invalid,
            reset_trip_form_cb=self.reset_trip_form,
            log_action_cb=self._log_action,
            notify_cb=self._notify,
        )

    @trace
    def reset_trip_form(self):
        clear_inline_errors(self._trip_form)
        set_date_input_today(self.trip_date)
        self.trip_vehicle_combo.set("")
        self.trip_vehicle_type_combo.set(DEFAULT_VEHICLE_TYPE)
        self.trip_str_status_combo.set(STR_STATUS_NOT_RECEIVED)
        for entry in (
            self.trip_str_entry,
            self.trip_quantity_entry,
            self.trip_driver_entry,
            self.trip_mobile_entry,
            self.trip_advance_entry,
        ):
            reset_entry(entry)
        self._selected_villages = []
        self.trip_villages_list.delete(0, tk.END)
        self.trip_village_combo.set("")
        self._refresh_village_suggestions()
        self._update_next_sl()

    def _update_next_sl(self):
        try:
            next_sl = self.storage.get_next_sl_number()
        except Exception as exc:
            logger.warning(f"Failed to read next SL number: {exc}")
            self.trip_next_sl_var.set("Next SL #: -")
            return
        self.trip_next_sl_var.set(f"Next SL #: {next_sl}")

    def _refresh_after_trip_change(self):
        self._update_next_sl()
        self.refresh_vehicles()
        self.refresh_villages()
        self.refresh_dashboard()
        if not self._str_edits:
            self.refresh_str_status()
        if self._report_filters is not None:
            self.refresh_reports()

    def _set_trip_form_vehicle(self, vehicle):
        if vehicle.driver_name and not get_entry_value(self.trip_driver_entry):
            set_entry_value(self.trip_driver_entry, vehicle.driver_name)
        if vehicle.mobile_number and not get_entry_value(self.trip_mobile_entry):
            set_entry_value(self.trip_mobile_entry, vehicle.mobile_number)
        if vehicle.vehicle_type:
            self.trip_vehicle_type_combo.set(vehicle.vehicle_type)

    def _on_trip_vehicle_chosen(self):
        vehicle_number = normalize_whitespace(self.trip_vehicle_combo.get()).upper()
        if not vehicle_number or vehicle_number == self._last_filled_vehicle:
            return
        self._last_filled_vehicle = vehicle_number
        self.trip_vehicle_combo.set(vehicle_number)
        fill_vehicle_details_action(app=self, storage=self.storage, vehicle_number=vehicle_number)

    def _refresh_village_suggestions(self):
        set_combo_source(
            self.trip_village_combo,
            village_suggestions(self._village_cache, "", self._selected_villages),
        )

    def _add_selected_village(self):
        name = normalize_whitespace(self.trip_village_combo.get())
        self.trip_village_combo.set("")
        if not name:
            return
        if name.lower() in {picked.lower() for picked in self._selected_villages}:
            self._notify(f"{name} is already on this trip.", "info")
            return
        self._selected_villages.append(name)
        self.trip_villages_list.insert(tk.END, name)
        self._refresh_village_suggestions()

    def _remove_selected_village(self):
        selection = self.trip_villages_list.curselection()
        if not selection:
            return
        index = selection[0]
        self.trip_villages_list.delete(index)
        del self._selected_villages[index]
        self._refresh_village_suggestions()

    # ------------------------------------------------------------------
    # Advances
    # ------------------------------------------------------------------
    @trace
    def refresh_advance_trips(self):
        vehicle_number = normalize_whitespace(self.advance_vehicle_combo.get()).upper()
        self.advance_vehicle_combo.set(vehicle_number)
        refresh_advance_trips_action(
            app=self,
            storage=self.storage,
            row_stripe_tag_cb=self._row_stripe_tag,
            vehicle_number=vehicle_number,
        )

    def _get_selected_advance_trip(self):
        selection = self.advance_trip_tree.selection()
        if not selection:
            return None
        return self._advance_trip_map.get(selection[0])

    def _on_advance_trip_selected(self):
        selected = self._get_selected_advance_trip()
        if selected is None:
            self._clear_advance_trip_details()
            return
        trip, summary = selected
        self._show_advance_trip_details(trip, summary)

    def _show_advance_trip_details(self, trip, summary):
        detail = self.advance_detail_vars
        detail["trip"].set(f"#{trip.sl_number} | {format_display_date(trip.date)} | STR {trip.str_number}")
        detail["driver"].set(f"{trip.driver_name} ({trip.mobile_number})" if trip.mobile_number else trip.driver_name)
        detail["villages"].set(", ".join(trip.villages) or "-")
        if summary.failed:
            for key in ("initial", "additional", "total"):
                detail[key].set("Unavailable")
            detail["count"].set("-")
        else:
            initial = format_inr(summary.initial_total)
            if summary.has_synthetic_initial:
                initial += " (from trip entry)"
            detail["initial"].set(initial)
            detail["additional"].set(format_inr(summary.additional_total))
            detail["total"].set(format_inr(summary.total_advances))
            detail["count"].set(str(summary.count))

        tree = self.advance_recent_tree
        tree.delete(*tree.get_children())
        for row_index, advance in enumerate(summary.recent_advances):
            tags = [self._row_stripe_tag(row_index)]
            if advance.is_synthetic:
                tags.append("advance_synthetic")
            tree.insert(
                "",
                "end",
                values=(
                    format_timestamp(advance.created_at),
                    (advance.advance_type or "unclassified").title(),
                    format_inr(advance.advance_amount),
                    advance.note,
                ),
                tags=tuple(tags),
            )
        self.advance_save_button.state(["!disabled"])

    def _clear_advance_trip_details(self):
        for key, var in self.advance_detail_vars.items():
            if key in ("initial", "additional", "total"):
                var.set(format_inr(0))
            elif key == "count":
                var.set("0")
            else:
                var.set("-")
        self.advance_recent_tree.delete(*self.advance_recent_tree.get_children())
        self.advance_save_button.state(["disabled"])

    def _update_selected_advance_trip(self, trip, summary):
        selection = self.advance_trip_tree.selection()
        if not selection:
            return
        iid = selection[0]
        self._advance_trip_map[iid] = (trip, summary)
        self.advance_trip_tree.set(iid, "total", format_inr(summary.total_advances))

    @trace
    def add_advance(self):
        add_advance_action(
            app=self,
            storage=self.storage,
            get_entry_value_cb=get_entry_value,
            show_invalid_cb=self._show_invalid,
            reset_entry_cb=reset_entry,
            log_action_cb=self._log_action,
            notify_cb=self._notify,
        )

    @trace
    def show_selected_advance_history(self):
        selected = self._get_selected_advance_trip()
        if selected is None:
            self._show_invalid("Select a trip to view its advances.")
            return
        trip, _summary = selected
        show_advance_history_action(
            app=self,
            storage=self.storage,
            trip=trip,
            show_history_cb=show_advance_history,
        )

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------
    def _read_report_filters(self) -> ReportFilters:
        return read_report_filters(self, get_entry_value)

    @trace
    def refresh_reports(self):
        refresh_reports_action(
            app=self,
            storage=self.storage,
            read_filters_cb=self._read_report_filters,
            show_invalid_cb=self._show_invalid,
            row_stripe_tag_cb=self._row_stripe_tag,
        )

    def _set_report_dates(self, filters: ReportFilters):
        set_date_input(self.report_from, iso_date(filters.date_from) if filters.date_from else None)
        set_date_input(self.report_to, iso_date(filters.date_to) if filters.date_to else None)

    @trace
    def clear_report_filters(self):
        self._set_report_dates(ReportFilters.current_month())
        reset_entry(self.report_vehicle_entry)
        reset_entry(self.report_village_entry)
        self.refresh_reports()

    @trace
    def apply_report_quick_range(self, name: str):
        self._set_report_dates(ReportFilters.quick(name))
        self.refresh_reports()

    @trace
    def export_report(self, fmt: str):
        export_report_action(
            app=self,
            fmt=fmt,
            get_last_export_dir_cb=self._get_last_export_dir,
            set_last_export_dir_cb=self._set_last_export_dir,
            log_action_cb=self._log_action,
            notify_cb=self._notify,
        )

    @trace
    def edit_selected_report_trip(self):
        selection = self.report_trip_tree.selection()
        row = self._report_row_map.get(selection[0]) if selection else None
        if row is None:
            self._show_invalid("Select a trip to edit.")
            return
        self._open_trip_editor(row.trip)

    def _open_trip_editor(self, trip):
        def _save(form: dict) -> bool:
            return edit_trip_action(
                app=self,
                storage=self.storage,
                trip=trip,
                form=form,
                log_action_cb=self._log_action,
                notify_cb=self._notify,
            )

        open_trip_edit_dialog(
            self,
            f"#{trip.sl_number}",
            trip_form_defaults(trip),
            [vehicle.vehicle_number for vehicle in self._vehicle_cache],
            lambda parent, width, default_iso=None: create_date_input(
                parent, width=width, default_iso=default_iso, date_entry_cls=self.date_entry_cls
            ),
            self._make_searchable_combo,
            _save,
        )

    # ------------------------------------------------------------------
    # STR status
    # ------------------------------------------------------------------
    @trace
    def refresh_str_status(self):
        refresh_str_status_action(
            app=self,
            storage=self.storage,
            get_entry_value_cb=get_entry_value,
            show_invalid_cb=self._show_invalid,
            row_stripe_tag_cb=self._row_stripe_tag,
            str_status_tag_cb=self._str_status_tag,
            str_status_badge_cb=self._str_status_badge,
        )

    @trace
    def toggle_selected_str_status(self):
        selection = self.str_tree.selection()
        if not selection:
            return "break"
        for iid in selection:
            trip = self._str_trips.get(iid)
            if trip is None:
                continue
            current = self._str_edits.get(iid, trip.str_status)
            new_status = toggle_str_status(current)
            if new_status == trip.str_status:
                self._str_edits.pop(iid, None)
            else:
                self._str_edits[iid] = new_status
            self.str_tree.set(iid, "status", self._str_status_badge(new_status))
            tags = [tag for tag in self.str_tree.item(iid, "tags") if not tag.startswith("str_")]
            tags.append(self._str_status_tag(new_status))
            self.str_tree.item(iid, tags=tuple(tags))
        self._update_str_pending_label()
        return "break"

    def _update_str_pending_label(self):
        pending = len(self._str_edits)
        self.str_pending_var.set(f"{pending} unsaved change(s)" if pending else "")

    @trace
    def save_str_changes(self):
        save_str_changes_action(
            app=self,
            storage=self.storage,
            log_action_cb=self._log_action,
            notify_cb=self._notify,
        )

    @trace
    def delete_selected_trip(self):
        delete_trip_action(
            app=self,
            storage=self.storage,
            show_invalid_cb=self._show_invalid,
            log_action_cb=self._log_action,
            notify_cb=self._notify,
        )

    @trace
    def edit_selected_str_trip(self):
        selection = self.str_tree.selection()
        trip = self._str_trips.get(selection[0]) if selection else None
        if trip is None:
            self._show_invalid("Select a trip to edit.")
            return
        self._open_trip_editor(trip)

    # ------------------------------------------------------------------
    # Vehicles
    # ------------------------------------------------------------------
    @trace
    def refresh_vehicles(self):
        refresh_vehicles_action(app=self, storage=self.storage, row_stripe_tag_cb=self._row_stripe_tag)

    def _reload_vehicle_dropdowns(self):
        numbers = [vehicle.vehicle_number for vehicle in self._vehicle_cache]
        for combo_name in ("trip_vehicle_combo", "advance_vehicle_combo"):
            if hasattr(self, combo_name):
                set_combo_source(getattr(self, combo_name), numbers)

    @trace
    def save_vehicle(self):
        save_vehicle_action(
            app=self,
            storage=self.storage,
            get_entry_value_cb=get_entry_value,
            show_invalid_cb=self._show_invalid,
            log_action_cb=self._log_action,
            notify_cb=self._notify,
        )

    @trace
    def deactivate_vehicle(self):
        deactivate_vehicle_action(
            app=self,
            storage=self.storage,
            show_invalid_cb=self._show_invalid,
            log_action_cb=self._log_action,
            notify_cb=self._notify,
        )

    def _on_vehicle_selected(self):
        selection = self.vehicle_tree.selection()
        if not selection:
            return
        vehicle = next((v for v in self._vehicle_cache if v.vehicle_number == selection[0]), None)
        if vehicle is None:
            return
        set_entry_value(self.vehicle_number_entry, vehicle.vehicle_number)
        set_entry_value(self.vehicle_driver_entry, vehicle.driver_name)
        set_entry_value(self.vehicle_mobile_entry, vehicle.mobile_number)
        self.vehicle_type_combo.set(vehicle.vehicle_type or DEFAULT_VEHICLE_TYPE)

    def _clear_vehicle_form(self):
        for entry in (self.vehicle_number_entry, self.vehicle_driver_entry, self.vehicle_mobile_entry):
            reset_entry(entry)
        self.vehicle_type_combo.set(DEFAULT_VEHICLE_TYPE)
        self.vehicle_tree.selection_remove(*self.vehicle_tree.selection())

    @trace
    def export_vehicle_contacts(self):
        export_contacts_action(
            app=self,
            storage=self.storage,
            get_last_export_dir_cb=self._get_last_export_dir,
            set_last_export_dir_cb=self._set_last_export_dir,
            log_action_cb=self._log_action,
            notify_cb=self._notify,
        )

    # ------------------------------------------------------------------
    # Villages
    # ------------------------------------------------------------------
    @trace
    def refresh_villages(self):
        refresh_villages_action(
            app=self,
            storage=self.storage,
            get_entry_value_cb=get_entry_value,
            row_stripe_tag_cb=self._row_stripe_tag,
        )

    def _schedule_village_search(self, delay_ms: int = REFRESH_DEBOUNCE_MS):
        if self._village_search_after_id is not None:
            self.after_cancel(self._village_search_after_id)
        self._village_search_after_id = self.after(delay_ms, self._run_village_search)

    def _run_village_search(self):
        self._village_search_after_id = None
        self.refresh_villages()

    def _reload_village_dropdowns(self):
        if hasattr(self, "trip_village_combo"):
            self._refresh_village_suggestions()

    @trace
    def save_village(self):
        save_village_action(
            app=self,
            storage=self.storage,
            get_entry_value_cb=get_entry_value,
            show_invalid_cb=self._show_invalid,
            log_action_cb=self._log_action,
            notify_cb=self._notify,
        )

    @trace
    def deactivate_village(self):
        deactivate_village_action(
            app=self,
            storage=self.storage,
            show_invalid_cb=self._show_invalid,
            log_action_cb=self._log_action,
            notify_cb=self._notify,
        )

    def _on_village_selected(self):
        selection = self.village_tree.selection()
        if not selection:
            return
        self._editing_village_id = selection[0]
        set_entry_value(self.village_name_entry, self.village_tree.set(selection[0], "name"))
        self.village_form_label_var.set("Rename village")

    def _clear_village_form(self):
        self._editing_village_id = None
        reset_entry(self.village_name_entry)
        self.village_form_label_var.set("New village")
        self.village_tree.selection_remove(*self.village_tree.selection())

    # ------------------------------------------------------------------
    # Storage, backup & restore
    # ------------------------------------------------------------------
    @trace
    def change_storage_mode(self):
        mode = self.storage_mode_combo.get().strip()
        if not mode:
            messagebox.showinfo("Storage Mode", "Choose a storage mode first.")
            return
        change_storage_mode_action(
            app=self,
            mode=mode,
            set_storage_mode_cb=self._set_storage_mode,
            log_action_cb=self._log_action,
        )

    @trace
    def backup_database(self):
        backup_database_action(
            app=self,
            storage=self.storage,
            get_last_backup_dir_cb=self._get_last_backup_dir,
            set_last_backup_dir_cb=self._set_last_backup_dir,
            log_action_cb=self._log_action,
        )

    @trace
    def restore_database(self):
        restore_database_action(
            app=self,
            storage=self.storage,
            get_last_backup_dir_cb=self._get_last_backup_dir,
            set_last_backup_dir_cb=self._set_last_backup_dir,
            log_action_cb=self._log_action,
        )
