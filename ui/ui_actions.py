from __future__ import annotations

import os
import threading
import tkinter as tk
from datetime import datetime
from tkinter import filedialog, messagebox
from typing import TYPE_CHECKING, Any, Callable

from core.app_logging import get_app_logger, log_ux_action
from core.config import (
    ADVANCE_TYPE_INITIAL,
    DASHBOARD_TIMEOUT_SECONDS,
    STR_STATUS_NOT_RECEIVED,
    STR_STATUS_RECEIVED,
    VILLAGE_SUGGESTION_LIMIT,
)
from core.error_handler import safe_ui_action, safe_ui_action_returning, wrap_action_with_error_handling
from data.database_service import DatabaseService
from ledger.reconciliation import call_with_timeout, load_trip_summaries, reconcile_trip_advances
from ledger.report_builder import (
    ReportFilters,
    TodayMetrics,
    build_today_metrics,
    load_report,
    sort_trips,
    summarize_report,
)
from ledger.report_export import default_export_filename, write_report_csv, write_report_xlsx, write_vcard
from ledger.report_pdf import generate_report_pdf
from ledger.trip_workflow import (
    add_additional_advance,
    apply_str_status_changes,
    create_trip,
    delete_trip,
    edit_trip,
    save_vehicle,
    save_village,
)
from utils.currency import format_inr, format_quantity
from utils.date_utils import format_display_date, format_timestamp, iso_date, parse_ymd
from utils.validation import normalize_whitespace

if TYPE_CHECKING:
    from data.storage import StorageBackend


logger = get_app_logger()

CONTACTS_FILENAME = "SuhelRoadline_Contacts.vcf"


def run_in_background(
    app: Any,
    loader: Callable[[], Any],
    deliver: Callable[[Any], None],
    action: str,
    thread_name: str,
    show_error_dialog: bool = True,
) -> None:
    """
    Run ``loader`` on a worker thread and hand its result to ``deliver`` on the Tk thread.

    A loader error is raised again inside the delivered callback, so it gets the
    usual logging and error dialog. Results for a closed window are dropped.
    """

    def _worker():
        try:
            result, error = loader(), None
        except Exception as exc:
            result, error = None, exc

        def _deliver():
            try:
                alive = app.winfo_exists()
            except tk.TclError:
                alive = False
            if not alive:
                return
            if error is not None:
                raise error
            deliver(result)

        try:
            app.after(0, wrap_action_with_error_handling(_deliver, action, show_error_dialog=show_error_dialog))
        except (RuntimeError, tk.TclError) as exc:
            # Window closed while loading.
            logger.debug(f"{action} result dropped: {exc}")

    threading.Thread(target=_worker, name=thread_name, daemon=True).start()


# ============================================================================
# TRIP ENTRY
# ============================================================================
@safe_ui_action("Add Trip")
def add_trip_action(
    app: Any,
    storage: "StorageBackend",
    collect_trip_form_cb: Callable[[], dict],
    clear_inline_errors_cb: Callable[[Any], None],
    show_inline_error_cb: Callable[..., Any],
    show_invalid_cb: Callable[[str], None],
    reset_trip_form_cb: Callable[[], None],
    log_action_cb: Callable[[str, str], None],
    notify_cb: Callable[[str, str], None],
) -> None:
    clear_inline_errors_cb(app._trip_form)
    form = collect_trip_form_cb()
    try:
        trip = create_trip(storage, form)
    except ValueError as exc:
        show_invalid_cb(str(exc))
        show_inline_error_cb(app._trip_form, str(exc), row=8, column=0, columnspan=6)
        return

    log_action_cb(
        "ADD_TRIP",
        (
            f"Trip ID: {trip.id}, SL: {trip.sl_number}, Date: {trip.date}, Vehicle: {trip.vehicle_number}, "
            f"STR: {trip.str_number}, Villages: {', '.join(trip.villages)}, Advance: {format_inr(trip.advance_amount)}"
        ),
    )
    reset_trip_form_cb()
    app._refresh_after_trip_change()
    notify_cb(f"Trip #{trip.sl_number} saved for {trip.vehicle_number}.", "success")


@safe_ui_action_returning("Edit Trip", return_on_error=False)
def edit_trip_action(
    app: Any,
    storage: "StorageBackend",
    trip: Any,
    form: dict,
    log_action_cb: Callable[[str, str], None],
    notify_cb: Callable[[str, str], None],
) -> bool:
    old_amount = trip.advance_amount
    updated = edit_trip(storage, trip, form)
    details = f"Trip ID: {updated.id}, SL: {updated.sl_number}, Vehicle: {updated.vehicle_number}"
    if updated.advance_amount != old_amount:
        details += f", Advance: {format_inr(old_amount)} -> {format_inr(updated.advance_amount)}"
    log_action_cb("EDIT_TRIP", details)
    app._refresh_after_trip_change()
    notify_cb(f"Trip #{updated.sl_number} updated.", "success")
    return True


@safe_ui_action("Load Vehicle Details")
def fill_vehicle_details_action(app: Any, storage: "StorageBackend", vehicle_number: str) -> None:
    """Prefill driver, mobile and type for a known vehicle on the entry form."""
    vehicle = storage.get_vehicle(normalize_whitespace(vehicle_number).upper())
    if vehicle is None or not vehicle.is_active:
        return
    app._set_trip_form_vehicle(vehicle)


# ============================================================================
# ADVANCES
# ============================================================================
@safe_ui_action("Load Vehicle Trips")
def refresh_advance_trips_action(
    app: Any,
    storage: "StorageBackend",
    row_stripe_tag_cb: Callable[[int], str],
    vehicle_number: str,
) -> None:
    tree = app.advance_trip_tree
    tree.delete(*tree.get_children())
    app._advance_trip_map = {}
    app._clear_advance_trip_details()

    vehicle_number = normalize_whitespace(vehicle_number).upper()
    request = object()
    app._advance_trips_request = request
    if not vehicle_number:
        return
    app.advance_status_var.set(f"Loading trips for {vehicle_number}...")

    def _load():
        trips = sort_trips(storage.get_trips_by_vehicle(vehicle_number))
        return trips, load_trip_summaries(trips, storage.get_advances_by_trip)

    def _apply(result):
        # A newer vehicle selection replaced this load.
        if getattr(app, "_advance_trips_request", None) is not request:
            return
        _show_advance_trips(app, row_stripe_tag_cb, vehicle_number, *result)

    run_in_background(app, _load, _apply, "Load Vehicle Trips", "advance-trips-loader")


def _show_advance_trips(
    app: Any,
    row_stripe_tag_cb: Callable[[int], str],
    vehicle_number: str,
    trips: list,
    summaries: dict,
) -> None:
    tree = app.advance_trip_tree
    for row_index, trip in enumerate(trips):
        summary = summaries[trip.id]
        tags = [row_stripe_tag_cb(row_index)]
        if summary.failed:
            tags.append("advance_failed")
        iid = tree.insert(
            "",
            "end",
            values=(
                trip.sl_number,
                format_display_date(trip.date),
                trip.str_number,
                ", ".join(trip.villages),
                format_quantity(trip.quantity),
                format_inr(summary.total_advances),
            ),
            tags=tuple(tags),
        )
        app._advance_trip_map[iid] = (trip, summary)

    app._reapply_tree_sort(tree)
    if not trips:
        app.advance_status_var.set(f"No trips found for {vehicle_number}.")
    else:
        app.advance_status_var.set(f"{len(trips)} trip(s) for {vehicle_number}. Select one to add an advance.")


@safe_ui_action("Add Advance")
def add_advance_action(
    app: Any,
    storage: "StorageBackend",
    get_entry_value_cb: Callable[[Any], str],
    show_invalid_cb: Callable[[str], None],
    reset_entry_cb: Callable[[Any], None],
    log_action_cb: Callable[[str, str], None],
    notify_cb: Callable[[str, str], None],
) -> None:
    selected = app._get_selected_advance_trip()
    if selected is None:
        show_invalid_cb("Select a trip to add the advance to.")
        return
    trip, _summary = selected

    try:
        advance = add_additional_advance(
            storage,
            trip,
            get_entry_value_cb(app.advance_amount_entry),
            get_entry_value_cb(app.advance_note_entry),
        )
    except ValueError as exc:
        show_invalid_cb(str(exc))
        app.advance_amount_entry.focus()
        return

    log_action_cb(
        "ADD_ADVANCE",
        f"Advance ID: {advance.id}, Trip ID: {trip.id}, Vehicle: {trip.vehicle_number}, Amount: {format_inr(advance.advance_amount)}",
    )
    reset_entry_cb(app.advance_amount_entry)
    reset_entry_cb(app.advance_note_entry)

    summary = reconcile_trip_advances(trip, storage.get_advances_by_trip)
    app._show_advance_trip_details(trip, summary)
    app._update_selected_advance_trip(trip, summary)
    app._refresh_after_trip_change()
    notify_cb(f"Advance of {format_inr(advance.advance_amount)} added to trip #{trip.sl_number}.", "success")


@safe_ui_action("Show Advance History")
def show_advance_history_action(app: Any, storage: "StorageBackend", trip: Any, show_history_cb: Callable[..., None]) -> None:
    summary = reconcile_trip_advances(trip, storage.get_advances_by_trip)
    show_history_cb(app, trip, summary)


# ============================================================================
# DASHBOARD
# ============================================================================
def _load_dashboard(storage: "StorageBackend") -> tuple[TodayMetrics, dict]:
    metrics = build_today_metrics(storage)
    return metrics, load_trip_summaries(metrics.recent_trips, storage.get_advances_by_trip)


@safe_ui_action("Refresh Dashboard")
def refresh_dashboard_action(
    app: Any,
    storage: "StorageBackend",
    apply_metrics_cb: Callable[[TodayMetrics, dict, bool], None],
    timeout: float = DASHBOARD_TIMEOUT_SECONDS,
) -> None:
    """Load today's metrics off the UI thread; a slow or failing store shows zeros."""
    if getattr(app, "_dashboard_loading", False):
        return
    app._dashboard_loading = True
    app.dash_status_var.set("Loading...")
    failed_default = (TodayMetrics(), {})

    def _load():
        return call_with_timeout(
            lambda: _load_dashboard(storage),
            failed_default,
            timeout=timeout,
            action="Refresh Dashboard",
        )

    def _apply(result):
        app._dashboard_loading = False
        metrics, summaries = result
        apply_metrics_cb(metrics, summaries, result is failed_default)

    run_in_background(app, _load, _apply, "Show Dashboard", "dashboard-loader", show_error_dialog=False)


# ============================================================================
# REPORTS
# ============================================================================
def read_report_filters(app: Any, get_entry_value_cb: Callable[[Any], str]) -> ReportFilters:
    """Filters from the Reports tab inputs; raises ValueError for bad dates."""
    raw_from = normalize_whitespace(app.report_from.get())
    raw_to = normalize_whitespace(app.report_to.get())
    date_from = parse_ymd(raw_from) if raw_from else None
    date_to = parse_ymd(raw_to) if raw_to else None
    if (raw_from and date_from is None) or (raw_to and date_to is None):
        raise ValueError("Report dates must be in YYYY-MM-DD format.")
    if date_from and date_to and date_to < date_from:
        raise ValueError("'To' date cannot be earlier than 'From' date.")
    return ReportFilters(
        date_from=date_from,
        date_to=date_to,
        vehicle_number=normalize_whitespace(get_entry_value_cb(app.report_vehicle_entry)),
        village=normalize_whitespace(get_entry_value_cb(app.report_village_entry)),
    )


@safe_ui_action("Refresh Reports")
def refresh_reports_action(
    app: Any,
    storage: "StorageBackend",
    read_filters_cb: Callable[[], ReportFilters],
    show_invalid_cb: Callable[[str], None],
    row_stripe_tag_cb: Callable[[int], str],
) -> None:
    try:
        filters = read_filters_cb()
    except ValueError as exc:
        show_invalid_cb(str(exc))
        return

    request = object()
    app._report_request = request
    app.report_period_var.set("Loading report...")

    def _apply(rows):
        # A newer refresh replaced this load.
        if getattr(app, "_report_request", None) is not request:
            return
        _show_report(app, row_stripe_tag_cb, filters, rows)

    run_in_background(app, lambda: load_report(storage, filters), _apply, "Refresh Reports", "report-loader")


def _show_report(
    app: Any,
    row_stripe_tag_cb: Callable[[int], str],
    filters: ReportFilters,
    rows: list,
) -> None:
    summary = summarize_report(rows)
    app._report_filters = filters
    app._report_rows = rows
    app._report_summary = summary

    trip_tree = app.report_trip_tree
    trip_tree.delete(*trip_tree.get_children())
    app._report_row_map = {}
    for row_index, row in enumerate(rows):
        trip, trip_summary = row.trip, row.summary
        initial_text = format_inr(trip_summary.initial_total)
        if trip_summary.has_synthetic_initial:
            initial_text += " *"
        tags = [row_stripe_tag_cb(row_index)]
        if trip_summary.failed:
            tags.append("advance_failed")
        iid = trip_tree.insert(
            "",
            "end",
            values=(
                trip.sl_number,
                format_display_date(trip.date),
                trip.vehicle_number,
                trip.str_number,
                ", ".join(trip.villages),
                format_quantity(trip.quantity),
                trip.driver_name,
                initial_text,
                format_inr(trip_summary.additional_total),
                format_inr(trip_summary.total_advances),
            ),
            tags=tuple(tags),
        )
        app._report_row_map[iid] = row
    app._reapply_tree_sort(trip_tree)

    advance_tree = app.report_advance_tree
    advance_tree.delete(*advance_tree.get_children())
    advance_rows = [
        (row.trip, advance)
        for row in rows
        for advance in row.summary.advances
    ]
    advance_rows.sort(key=lambda pair: pair[1].created_at or "", reverse=True)
    for row_index, (trip, advance) in enumerate(advance_rows):
        tags = [row_stripe_tag_cb(row_index)]
        if advance.is_synthetic:
            tags.append("advance_synthetic")
        elif advance.advance_type == ADVANCE_TYPE_INITIAL:
            tags.append("advance_initial")
        advance_tree.insert(
            "",
            "end",
            values=(
                format_timestamp(advance.created_at),
                trip.vehicle_number,
                (advance.advance_type or "unclassified").title(),
                format_inr(advance.advance_amount),
                format_display_date(trip.date),
                advance.note,
            ),
            tags=tuple(tags),
        )
    app._reapply_tree_sort(advance_tree)

    app.report_summary_vars["trips"].set(str(summary.total_trips))
    app.report_summary_vars["advances"].set(format_inr(summary.total_advances))
    app.report_summary_vars["quantity"].set(format_quantity(summary.total_quantity))
    app.report_summary_vars["vehicles"].set(str(summary.unique_vehicles))
    app.report_summary_vars["average"].set(format_inr(summary.avg_advance_per_trip))
    start, end = filters.period_label()
    app.report_period_var.set(f"Period: {start} to {end}")


def _ask_export_path(
    get_last_export_dir_cb: Callable[[], str | None],
    title: str,
    filename: str,
    extension: str,
    filetypes: list[tuple[str, str]],
) -> str:
    return filedialog.asksaveasfilename(
        title=title,
        defaultextension=extension,
        initialfile=filename,
        initialdir=get_last_export_dir_cb(),
        filetypes=filetypes + [("All Files", "*.*")],
    )


@safe_ui_action("Export Report")
def export_report_action(
    app: Any,
    fmt: str,
    get_last_export_dir_cb: Callable[[], str | None],
    set_last_export_dir_cb: Callable[[str], None],
    log_action_cb: Callable[[str, str], None],
    notify_cb: Callable[[str, str], None],
) -> None:
    """Export the rows currently shown on the Reports tab as csv, xlsx or pdf."""
    rows = list(getattr(app, "_report_rows", []))
    if not rows:
        messagebox.showinfo("Nothing to export", "Run a report with at least one trip first.")
        return
    filters = app._report_filters
    summary = app._report_summary

    choices = {
        "csv": ("Export Report to CSV", ".csv", [("CSV", "*.csv")]),
        "xlsx": ("Export Report to Excel", ".xlsx", [("Excel Workbook", "*.xlsx")]),
        "pdf": ("Export Report to PDF", ".pdf", [("PDF", "*.pdf")]),
    }
    if fmt not in choices:
        raise ValueError(f"Unsupported export format: {fmt}")
    title, extension, filetypes = choices[fmt]

    file_path = _ask_export_path(
        get_last_export_dir_cb,
        title,
        default_export_filename(filters, fmt),
        extension,
        filetypes,
    )
    if not file_path:
        return

    if fmt == "csv":
        written = write_report_csv(rows, file_path)
    elif fmt == "xlsx":
        written = write_report_xlsx(rows, summary, file_path, filters)
    else:
        result = generate_report_pdf(file_path, rows, summary, filters)
        if not result.success:
            messagebox.showerror("PDF Export Failed", result.message)
            log_action_cb("EXPORT_REPORT_ERROR", f"PDF export to {file_path} failed: {result.message}")
            return
        written = len(rows)

    set_last_export_dir_cb(file_path)
    log_action_cb("EXPORT_REPORT", f"{fmt.upper()} report with {written} trip(s) saved to {file_path}")
    notify_cb(f"Exported {written} trip(s) to {os.path.basename(file_path)}.", "success")


# ============================================================================
# STR STATUS
# ============================================================================
@safe_ui_action("Refresh STR Status")
def refresh_str_status_action(
    app: Any,
    storage: "StorageBackend",
    get_entry_value_cb: Callable[[Any], str],
    show_invalid_cb: Callable[[str], None],
    row_stripe_tag_cb: Callable[[int], str],
    str_status_tag_cb: Callable[[str], str],
    str_status_badge_cb: Callable[[str], str],
) -> None:
    raw_from = normalize_whitespace(app.str_from.get())
    raw_to = normalize_whitespace(app.str_to.get())
    date_from = parse_ymd(raw_from) if raw_from else None
    date_to = parse_ymd(raw_to) if raw_to else None
    if (raw_from and date_from is None) or (raw_to and date_to is None):
        show_invalid_cb("STR filter dates must be in YYYY-MM-DD format.")
        return

    status_filter = app.str_status_filter.get().strip()
    filters = ReportFilters(
        date_from=date_from,
        date_to=date_to,
        vehicle_number=normalize_whitespace(get_entry_value_cb(app.str_vehicle_entry)),
        str_status="" if status_filter in ("", "All") else status_filter,
    )
    trips = sort_trips(t for t in storage.list_trips() if filters.matches(t))

    tree = app.str_tree
    tree.delete(*tree.get_children())
    app._str_trips = {}
    app._str_edits = {}
    for row_index, trip in enumerate(trips):
        tree.insert(
            "",
            "end",
            iid=trip.id,
            values=(
                trip.sl_number,
                format_display_date(trip.date),
                trip.vehicle_number,
                trip.vehicle_type,
                trip.str_number,
                str_status_badge_cb(trip.str_status),
                trip.driver_name,
            ),
            tags=(row_stripe_tag_cb(row_index), str_status_tag_cb(trip.str_status)),
        )
        app._str_trips[trip.id] = trip
    app._reapply_tree_sort(tree)
    app._update_str_pending_label()


def toggle_str_status(current: str) -> str:
    return STR_STATUS_NOT_RECEIVED if current.strip().lower() == STR_STATUS_RECEIVED.lower() else STR_STATUS_RECEIVED


@safe_ui_action("Save STR Changes")
def save_str_changes_action(
    app: Any,
    storage: "StorageBackend",
    log_action_cb: Callable[[str, str], None],
    notify_cb: Callable[[str, str], None],
) -> None:
    edits = dict(getattr(app, "_str_edits", {}))
    if not edits:
        notify_cb("No STR changes to save.", "info")
        return
    trips = [app._str_trips[trip_id] for trip_id in edits if trip_id in app._str_trips]
    updated = apply_str_status_changes(storage, trips, edits)
    log_action_cb(
        "UPDATE_STR_STATUS",
        "; ".join(f"Trip ID: {trip.id} -> {trip.str_status}" for trip in trips),
    )
    app.refresh_str_status()
    notify_cb(f"Updated STR status for {updated} trip(s).", "success")


@safe_ui_action("Delete Trip")
def delete_trip_action(
    app: Any,
    storage: "StorageBackend",
    show_invalid_cb: Callable[[str], None],
    log_action_cb: Callable[[str, str], None],
    notify_cb: Callable[[str, str], None],
) -> None:
    selected = app.str_tree.selection()
    if not selected:
        show_invalid_cb("Select a trip to delete.")
        return
    trip = app._str_trips.get(selected[0])
    if trip is None:
        return
    if not messagebox.askyesno(
        "Delete Trip",
        f"Delete trip #{trip.sl_number} ({trip.vehicle_number}, {format_display_date(trip.date)})?\n\n"
        "Advances recorded for this trip are kept.",
    ):
        return

    delete_trip(storage, trip.id)
    log_action_cb("DELETE_TRIP", f"Trip ID: {trip.id}, SL: {trip.sl_number}, Vehicle: {trip.vehicle_number}")
    app._refresh_after_trip_change()
    notify_cb(f"Trip #{trip.sl_number} deleted.", "success")


# ============================================================================
# VEHICLES & VILLAGES
# ============================================================================
@safe_ui_action("Refresh Vehicles")
def refresh_vehicles_action(app: Any, storage: "StorageBackend", row_stripe_tag_cb: Callable[[int], str]) -> None:
    vehicles = storage.list_vehicles()
    tree = app.vehicle_tree
    tree.delete(*tree.get_children())
    for row_index, vehicle in enumerate(vehicles):
        tree.insert(
            "",
            "end",
            iid=vehicle.vehicle_number,
            values=(vehicle.vehicle_number, vehicle.driver_name, vehicle.mobile_number, vehicle.vehicle_type),
            tags=(row_stripe_tag_cb(row_index),),
        )
    app._reapply_tree_sort(tree)
    app._vehicle_cache = vehicles
    app._reload_vehicle_dropdowns()


@safe_ui_action("Save Vehicle")
def save_vehicle_action(
    app: Any,
    storage: "StorageBackend",
    get_entry_value_cb: Callable[[Any], str],
    show_invalid_cb: Callable[[str], None],
    log_action_cb: Callable[[str, str], None],
    notify_cb: Callable[[str, str], None],
) -> None:
    form = {
        "vehicle_number": get_entry_value_cb(app.vehicle_number_entry),
        "driver_name": get_entry_value_cb(app.vehicle_driver_entry),
        "mobile_number": get_entry_value_cb(app.vehicle_mobile_entry),
        "vehicle_type": app.vehicle_type_combo.get(),
    }
    try:
        vehicle = save_vehicle(storage, form)
    except ValueError as exc:
        show_invalid_cb(str(exc))
        return
    log_action_cb(
        "SAVE_VEHICLE",
        f"Vehicle: {vehicle.vehicle_number}, Driver: {vehicle.driver_name}, Mobile: {vehicle.mobile_number}, Type: {vehicle.vehicle_type}",
    )
    app._clear_vehicle_form()
    app.refresh_vehicles()
    notify_cb(f"Vehicle {vehicle.vehicle_number} saved.", "success")


@safe_ui_action("Delete Vehicle")
def deactivate_vehicle_action(
    app: Any,
    storage: "StorageBackend",
    show_invalid_cb: Callable[[str], None],
    log_action_cb: Callable[[str, str], None],
    notify_cb: Callable[[str, str], None],
) -> None:
    selected = app.vehicle_tree.selection()
    if not selected:
        show_invalid_cb("Select a vehicle to delete.")
        return
    vehicle_number = selected[0]
    if not messagebox.askyesno("Delete Vehicle", f"Remove vehicle {vehicle_number} from the list?\n\nIts trips are kept."):
        return
    storage.deactivate_vehicle(vehicle_number)
    log_action_cb("DELETE_VEHICLE", f"Vehicle: {vehicle_number}")
    app._clear_vehicle_form()
    app.refresh_vehicles()
    notify_cb(f"Vehicle {vehicle_number} removed.", "success")


@safe_ui_action("Export Contacts")
def export_contacts_action(
    app: Any,
    storage: "StorageBackend",
    get_last_export_dir_cb: Callable[[], str | None],
    set_last_export_dir_cb: Callable[[str], None],
    log_action_cb: Callable[[str, str], None],
    notify_cb: Callable[[str, str], None],
) -> None:
    vehicles = storage.list_vehicles()
    if not any(v.driver_name and v.mobile_number for v in vehicles):
        messagebox.showinfo("No contacts", "No vehicles with a driver name and mobile number to export.")
        return
    file_path = _ask_export_path(
        get_last_export_dir_cb,
        "Export Driver Contacts",
        CONTACTS_FILENAME,
        ".vcf",
        [("vCard", "*.vcf")],
    )
    if not file_path:
        return
    written = write_vcard(vehicles, file_path)
    set_last_export_dir_cb(file_path)
    log_action_cb("EXPORT_CONTACTS", f"{written} contact(s) saved to {file_path}")
    notify_cb(f"Exported {written} contact(s).", "success")


@safe_ui_action("Refresh Villages")
def refresh_villages_action(
    app: Any,
    storage: "StorageBackend",
    get_entry_value_cb: Callable[[Any], str],
    row_stripe_tag_cb: Callable[[int], str],
) -> None:
    term = normalize_whitespace(get_entry_value_cb(app.village_search_entry))
    villages = storage.search_villages(term) if term else storage.list_villages()
    tree = app.village_tree
    tree.delete(*tree.get_children())
    for row_index, village in enumerate(villages):
        tree.insert(
            "",
            "end",
            iid=village.id,
            values=(village.village_name, village.usage_count, format_timestamp(village.last_used) or "Never"),
            tags=(row_stripe_tag_cb(row_index),),
        )
    app._reapply_tree_sort(tree)
    if not term:
        app._village_cache = villages
        app._reload_village_dropdowns()


@safe_ui_action("Save Village")
def save_village_action(
    app: Any,
    storage: "StorageBackend",
    get_entry_value_cb: Callable[[Any], str],
    show_invalid_cb: Callable[[str], None],
    log_action_cb: Callable[[str, str], None],
    notify_cb: Callable[[str, str], None],
) -> None:
    name = get_entry_value_cb(app.village_name_entry)
    village_id = getattr(app, "_editing_village_id", None)
    try:
        save_village(storage, name, village_id)
    except ValueError as exc:
        show_invalid_cb(str(exc))
        return
    cleaned = normalize_whitespace(name)
    if village_id:
        log_action_cb("RENAME_VILLAGE", f"Village ID: {village_id}, Name: {cleaned}")
        notify_cb(f"Village renamed to {cleaned}.", "success")
    else:
        log_action_cb("ADD_VILLAGE", f"Name: {cleaned}")
        notify_cb(f"Village {cleaned} added.", "success")
    app._clear_village_form()
    app.refresh_villages()


@safe_ui_action("Delete Village")
def deactivate_village_action(
    app: Any,
    storage: "StorageBackend",
    show_invalid_cb: Callable[[str], None],
    log_action_cb: Callable[[str, str], None],
    notify_cb: Callable[[str, str], None],
) -> None:
    selected = app.village_tree.selection()
    if not selected:
        show_invalid_cb("Select a village to delete.")
        return
    village_id = selected[0]
    name = app.village_tree.set(village_id, "name")
    if not messagebox.askyesno("Delete Village", f"Remove village '{name}' from suggestions?"):
        return
    storage.deactivate_village(village_id)
    log_action_cb("DELETE_VILLAGE", f"Village ID: {village_id}, Name: {name}")
    app._clear_village_form()
    app.refresh_villages()
    notify_cb(f"Village {name} removed.", "success")


def village_suggestions(villages: list, typed: str, exclude: list[str]) -> list[str]:
    """Most-used village names containing ``typed``, minus those already picked."""
    needle = normalize_whitespace(typed).lower()
    taken = {name.lower() for name in exclude}
    names = [
        v.village_name
        for v in villages
        if v.village_name.lower() not in taken and (not needle or needle in v.village_name.lower())
    ]
    return names[:VILLAGE_SUGGESTION_LIMIT]


# ============================================================================
# STORAGE, BACKUP & RESTORE
# ============================================================================
@safe_ui_action("Change Storage Mode")
def change_storage_mode_action(
    app: Any,
    mode: str,
    set_storage_mode_cb: Callable[[str], None],
    log_action_cb: Callable[[str, str], None],
) -> None:
    set_storage_mode_cb(mode)
    log_action_cb("STORAGE_MODE", f"Storage mode set to {mode}")
    messagebox.showinfo("Storage Mode", f"Storage mode set to '{mode}'.\n\nRestart the app to apply it.")


def _require_local_storage(storage: "StorageBackend") -> DatabaseService | None:
    if isinstance(storage, DatabaseService):
        return storage
    messagebox.showinfo("Local storage only", "Backup and restore are available when using local storage.")
    return None


@safe_ui_action("Backup Database")
def backup_database_action(
    app: Any,
    storage: "StorageBackend",
    get_last_backup_dir_cb: Callable[[], str | None],
    set_last_backup_dir_cb: Callable[[str], None],
    log_action_cb: Callable[[str, str], None],
) -> None:
    db = _require_local_storage(storage)
    if db is None:
        return
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    file_path = filedialog.asksaveasfilename(
        title="Save Database Backup",
        defaultextension=".db",
        initialfile=f"roadline_backup_{timestamp}.db",
        initialdir=get_last_backup_dir_cb(),
        filetypes=[("SQLite Database", "*.db"), ("All Files", "*.*")],
    )
    if not file_path:
        return

    try:
        db.backup_to(file_path)
    except Exception as exc:
        messagebox.showerror("Backup Failed", f"Could not create backup:\n{exc}")
        log_action_cb("BACKUP_DB_ERROR", f"Failed to backup database to {file_path}: {exc}")
        return

    log_action_cb("BACKUP_DB", f"Database backup saved to {file_path}")
    set_last_backup_dir_cb(file_path)
    messagebox.showinfo("Backup Complete", f"Database backup saved to:\n{file_path}")


@safe_ui_action("Restore Database")
def restore_database_action(
    app: Any,
    storage: "StorageBackend",
    get_last_backup_dir_cb: Callable[[], str | None],
    set_last_backup_dir_cb: Callable[[str], None],
    log_action_cb: Callable[[str, str], None],
) -> None:
    db = _require_local_storage(storage)
    if db is None:
        return
    file_path = filedialog.askopenfilename(
        title="Restore Database Backup",
        initialdir=get_last_backup_dir_cb(),
        filetypes=[("SQLite Database", "*.db"), ("All Files", "*.*")],
    )
    if not file_path:
        return

    try:
        db.validate_backup_file(file_path)
    except Exception as exc:
        messagebox.showerror("Invalid Backup", f"The selected file is not a valid backup:\n{exc}")
        log_action_cb("RESTORE_DB_INVALID", f"Rejected backup {file_path}: {exc}")
        return

    if not messagebox.askyesno(
        "Confirm Restore",
        "Replace all current data with the selected backup?\n\n"
        "A safety copy of the current database is saved first.",
    ):
        return

    safety_path = f"{db.db_path}.before_restore_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    db.restore_from_backup(file_path, safety_path)
    set_last_backup_dir_cb(file_path)
    log_action_cb("RESTORE_DB", f"Database restored from {file_path}; safety copy at {safety_path}")
    app._refresh_all_tabs()
    messagebox.showinfo("Restore Complete", f"Database restored from:\n{file_path}")


# ============================================================================
# TAB HANDLING
# ============================================================================
@safe_ui_action_returning("Check Unsaved Data", return_on_error=False)
def tab_has_unsaved_data_action(app: Any, tab: Any, get_entry_value_cb: Callable[[Any], str]) -> bool:
    if tab is getattr(app, "tab_str", None):
        return bool(getattr(app, "_str_edits", {}))
    if tab is getattr(app, "tab_add_entry", None):
        entries = (app.trip_str_entry, app.trip_driver_entry, app.trip_quantity_entry, app.trip_advance_entry)
        return any(normalize_whitespace(get_entry_value_cb(entry)) for entry in entries) or bool(app._selected_villages)
    if tab is getattr(app, "tab_add_advance", None):
        return bool(normalize_whitespace(get_entry_value_cb(app.advance_amount_entry)))
    return False


@safe_ui_action("Handle Tab Change")
def on_tab_changed_action(app: Any, refresh_tab_cb: Callable[[Any], None]) -> None:
    selected = app.nametowidget(app.main_notebook.select())
    previous = getattr(app, "_current_tab", None)
    app._current_tab = selected
    if previous is not None and previous is not selected and app._tab_has_unsaved_data(previous):
        log_ux_action("Leave Tab With Unsaved Data", details=str(previous))
    refresh_tab_cb(selected)



def trip_form_defaults(trip: Any) -> dict:
    """Edit-dialog initial values for ``trip``."""
    return {
        "date": iso_date(parse_ymd(trip.date)) if parse_ymd(trip.date) else trip.date,
        "vehicle_number": trip.vehicle_number,
        "str_number": trip.str_number,
        "str_status": trip.str_status,
        "villages": list(trip.villages),
        "quantity": format_quantity(trip.quantity),
        "driver_name": trip.driver_name,
        "mobile_number": trip.mobile_number,
        "vehicle_type": trip.vehicle_type,
        "advance_amount": format_quantity(trip.advance_amount),
    }
