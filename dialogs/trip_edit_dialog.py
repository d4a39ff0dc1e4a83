from __future__ import annotations

from typing import Callable, Iterable
import tkinter as tk
from tkinter import messagebox, ttk

from core.app_logging import trace
from core.config import STR_STATUSES, VEHICLE_TYPES
from utils.validation import parse_villages


@trace
def open_trip_edit_dialog(
    parent: tk.Misc,
    trip_label: str,
    values: dict,
    vehicle_values: Iterable[str],
    date_input_factory: Callable[..., ttk.Entry],
    make_searchable_combo: Callable[[ttk.Combobox], None],
    on_save: Callable[[dict], bool],
) -> tk.Toplevel:
    """
    Modal editor for one trip.

    ``values`` holds the current form values; ``on_save`` receives the edited
    form and returns True when the trip was stored, which closes the dialog.
    """
    win = tk.Toplevel(parent)
    win.title(f"Edit Trip {trip_label}")
    win.geometry("980x460")
    win.minsize(820, 420)
    win.resizable(True, True)
    win.transient(parent)
    win.grab_set()

    frm = ttk.Frame(win, padding=12)
    frm.pack(fill="both", expand=True)
    frm.columnconfigure(1, weight=1)
    frm.columnconfigure(3, weight=1)

    ttk.Label(frm, text="Date*").grid(row=0, column=0, sticky="w", padx=6, pady=6)
    date_entry = date_input_factory(frm, width=14, default_iso=values.get("date"))
    date_entry.grid(row=0, column=1, sticky="w", padx=6, pady=6)

    ttk.Label(frm, text="Vehicle Number*").grid(row=0, column=2, sticky="w", padx=6, pady=6)
    vehicle_combo = ttk.Combobox(frm, values=list(vehicle_values), width=22)
    vehicle_combo.grid(row=0, column=3, sticky="ew", padx=6, pady=6)
    make_searchable_combo(vehicle_combo)
    vehicle_combo.set(values.get("vehicle_number", ""))

    ttk.Label(frm, text="STR Number*").grid(row=1, column=0, sticky="w", padx=6, pady=6)
    str_entry = ttk.Entry(frm, width=20)
    str_entry.grid(row=1, column=1, sticky="ew", padx=6, pady=6)
    str_entry.insert(0, values.get("str_number", ""))

    ttk.Label(frm, text="STR Status").grid(row=1, column=2, sticky="w", padx=6, pady=6)
    status_combo = ttk.Combobox(frm, values=STR_STATUSES, width=14, state="readonly")
    status_combo.set(values.get("str_status") or STR_STATUSES[0])
    status_combo.grid(row=1, column=3, sticky="w", padx=6, pady=6)

    ttk.Label(frm, text="Villages*").grid(row=2, column=0, sticky="w", padx=6, pady=6)
    villages_entry = ttk.Entry(frm)
    villages_entry.grid(row=2, column=1, columnspan=3, sticky="ew", padx=6, pady=6)
    villages_entry.insert(0, ", ".join(values.get("villages", [])))

    ttk.Label(frm, text="Quantity*").grid(row=3, column=0, sticky="w", padx=6, pady=6)
    quantity_entry = ttk.Entry(frm, width=12)
    quantity_entry.grid(row=3, column=1, sticky="w", padx=6, pady=6)
    quantity_entry.insert(0, values.get("quantity", ""))

    ttk.Label(frm, text="Vehicle Type").grid(row=3, column=2, sticky="w", padx=6, pady=6)
    type_combo = ttk.Combobox(frm, values=VEHICLE_TYPES, width=12, state="readonly")
    type_combo.set(values.get("vehicle_type") or VEHICLE_TYPES[0])
    type_combo.grid(row=3, column=3, sticky="w", padx=6, pady=6)

    ttk.Label(frm, text="Driver Name*").grid(row=4, column=0, sticky="w", padx=6, pady=6)
    driver_entry = ttk.Entry(frm, width=24)
    driver_entry.grid(row=4, column=1, sticky="ew", padx=6, pady=6)
    driver_entry.insert(0, values.get("driver_name", ""))

    ttk.Label(frm, text="Mobile Number*").grid(row=4, column=2, sticky="w", padx=6, pady=6)
    mobile_entry = ttk.Entry(frm, width=16)
    mobile_entry.grid(row=4, column=3, sticky="ew", padx=6, pady=6)
    mobile_entry.insert(0, values.get("mobile_number", ""))

    ttk.Separator(frm, orient="horizontal").grid(row=5, column=0, columnspan=4, sticky="ew", pady=(6, 6))

    original_advance = values.get("advance_amount", "")
    ttk.Label(frm, text="Advance (₹)").grid(row=6, column=0, sticky="w", padx=6, pady=6)
    advance_entry = ttk.Entry(frm, width=12)
    advance_entry.grid(row=6, column=1, sticky="w", padx=6, pady=6)
    advance_entry.insert(0, original_advance)
    ttk.Label(
        frm,
        text="Raising the advance records the difference as an additional advance.",
        style="Muted.TLabel",
    ).grid(row=6, column=2, columnspan=2, sticky="w", padx=6, pady=6)

    def collect() -> dict:
        return {
            "date": date_entry.get().strip(),
            "vehicle_number": vehicle_combo.get(),
            "str_number": str_entry.get(),
            "str_status": status_combo.get(),
            "villages": parse_villages(villages_entry.get()),
            "quantity": quantity_entry.get(),
            "driver_name": driver_entry.get(),
            "mobile_number": mobile_entry.get(),
            "vehicle_type": type_combo.get(),
            "advance_amount": advance_entry.get(),
        }

    def save():
        form = collect()
        if form["advance_amount"].strip() != str(original_advance).strip():
            if not messagebox.askyesno(
                "Change Advance",
                f"Change the trip advance from ₹{original_advance or 0} to ₹{form['advance_amount'] or 0}?",
                parent=win,
            ):
                return
        if on_save(form):
            win.destroy()

    btns = ttk.Frame(frm)
    btns.grid(row=7, column=0, columnspan=4, sticky="e", pady=(12, 0))
    ttk.Button(btns, text="Cancel", command=win.destroy).pack(side="right", padx=(6, 0))
    ttk.Button(btns, text="Save", style="Primary.TButton", command=save).pack(side="right")

    win.bind("<Escape>", lambda _e: win.destroy())
    str_entry.focus_set()
    return win
