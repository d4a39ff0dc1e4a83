import tkinter as tk
from tkinter import ttk

from core.app_logging import trace
from core.config import DEFAULT_VEHICLE_TYPE, STR_STATUSES, STR_STATUS_NOT_RECEIVED, VEHICLE_TYPES
from ui.ui_helpers import add_placeholder, create_date_input
from utils.date_utils import iso_date, today


@trace
def build_add_entry_tab(app, frame):
    frame.columnconfigure(0, weight=1)

    form = ttk.LabelFrame(frame, text="New Trip Entry")
    form.grid(row=0, column=0, sticky="new", padx=18, pady=14)
    app._trip_form = form
    for col in (1, 3, 5):
        form.columnconfigure(col, weight=1)

    app.trip_next_sl_var = tk.StringVar(value="Next SL #: -")
    ttk.Label(form, textvariable=app.trip_next_sl_var, font=("Segoe UI", 12, "bold")).grid(
        row=0, column=0, columnspan=2, sticky="w", padx=6, pady=(6, 10)
    )

    ttk.Label(form, text="Date*").grid(row=1, column=0, sticky="w", padx=6, pady=6)
    app.trip_date = create_date_input(
        form,
        width=14,
        default_iso=iso_date(today()),
        date_entry_cls=getattr(app, "date_entry_cls", None),
    )
    app.trip_date.grid(row=1, column=1, sticky="w", padx=6, pady=6)

    ttk.Label(form, text="Vehicle Number*").grid(row=1, column=2, sticky="w", padx=6, pady=6)
    app.trip_vehicle_combo = ttk.Combobox(form, width=22)
    app.trip_vehicle_combo.grid(row=1, column=3, sticky="ew", padx=6, pady=6)
    app._make_searchable_combo(app.trip_vehicle_combo)
    app.trip_vehicle_combo.bind("<<ComboboxSelected>>", lambda _e: app._on_trip_vehicle_chosen())
    app.trip_vehicle_combo.bind("<FocusOut>", lambda _e: app._on_trip_vehicle_chosen(), add="+")

    ttk.Label(form, text="Vehicle Type").grid(row=1, column=4, sticky="w", padx=6, pady=6)
    app.trip_vehicle_type_combo = ttk.Combobox(form, values=VEHICLE_TYPES, width=12, state="readonly")
    app.trip_vehicle_type_combo.set(DEFAULT_VEHICLE_TYPE)
    app.trip_vehicle_type_combo.grid(row=1, column=5, sticky="w", padx=6, pady=6)

    ttk.Label(form, text="STR Number*").grid(row=2, column=0, sticky="w", padx=6, pady=6)
    app.trip_str_entry = ttk.Entry(form, width=20)
    app.trip_str_entry.grid(row=2, column=1, sticky="ew", padx=6, pady=6)
    add_placeholder(app.trip_str_entry, "STR / permit no.")

    ttk.Label(form, text="STR Status").grid(row=2, column=2, sticky="w", padx=6, pady=6)
    app.trip_str_status_combo = ttk.Combobox(form, values=STR_STATUSES, width=14, state="readonly")
    app.trip_str_status_combo.set(STR_STATUS_NOT_RECEIVED)
    app.trip_str_status_combo.grid(row=2, column=3, sticky="w", padx=6, pady=6)

    ttk.Label(form, text="Quantity*").grid(row=2, column=4, sticky="w", padx=6, pady=6)
    app.trip_quantity_entry = ttk.Entry(form, width=12)
    app.trip_quantity_entry.grid(row=2, column=5, sticky="w", padx=6, pady=6)
    add_placeholder(app.trip_quantity_entry, "0")

    ttk.Label(form, text="Driver Name*").grid(row=3, column=0, sticky="w", padx=6, pady=6)
    app.trip_driver_entry = ttk.Entry(form, width=24)
    app.trip_driver_entry.grid(row=3, column=1, sticky="ew", padx=6, pady=6)
    add_placeholder(app.trip_driver_entry, "Driver name...")

    ttk.Label(form, text="Mobile Number*").grid(row=3, column=2, sticky="w", padx=6, pady=6)
    app.trip_mobile_entry = ttk.Entry(form, width=16)
    app.trip_mobile_entry.grid(row=3, column=3, sticky="ew", padx=6, pady=6)
    add_placeholder(app.trip_mobile_entry, "10-digit mobile")

    ttk.Label(form, text="Advance (₹)").grid(row=3, column=4, sticky="w", padx=6, pady=6)
    app.trip_advance_entry = ttk.Entry(form, width=12)
    app.trip_advance_entry.grid(row=3, column=5, sticky="w", padx=6, pady=6)
    add_placeholder(app.trip_advance_entry, "0")

    ttk.Separator(form, orient="horizontal").grid(row=4, column=0, columnspan=6, sticky="ew", pady=8)

    ttk.Label(form, text="Villages*").grid(row=5, column=0, sticky="nw", padx=6, pady=6)
    village_picker = ttk.Frame(form)
    village_picker.grid(row=5, column=1, columnspan=5, sticky="ew", padx=6, pady=6)
    village_picker.columnconfigure(0, weight=1)

    app.trip_village_combo = ttk.Combobox(village_picker, width=30)
    app.trip_village_combo.grid(row=0, column=0, sticky="ew")
    app._make_searchable_combo(app.trip_village_combo)
    app.trip_village_combo.bind("<Return>", lambda _e: app._add_selected_village())
    app.trip_village_combo.bind("<<ComboboxSelected>>", lambda _e: app._add_selected_village())
    ttk.Button(village_picker, text="Add", command=app._add_selected_village).grid(row=0, column=1, padx=(6, 0))
    ttk.Button(village_picker, text="Remove", command=app._remove_selected_village).grid(row=0, column=2, padx=(6, 0))

    app.trip_villages_list = tk.Listbox(village_picker, height=4, exportselection=False)
    app.trip_villages_list.grid(row=1, column=0, columnspan=3, sticky="ew", pady=(6, 0))
    app.trip_villages_list.bind("<Delete>", lambda _e: app._remove_selected_village())
    app._selected_villages = []
    ttk.Label(
        village_picker,
        text="Type to search; most-used villages are listed first. New names are added automatically.",
        style="Muted.TLabel",
    ).grid(row=2, column=0, columnspan=3, sticky="w", pady=(4, 0))

    buttons = ttk.Frame(form)
    buttons.grid(row=7, column=0, columnspan=6, sticky="e", padx=6, pady=(10, 8))
    ttk.Button(buttons, text="Clear", command=app.reset_trip_form).pack(side="right", padx=(6, 0))
    ttk.Button(buttons, text="Save Trip", style="Primary.TButton", command=app.add_trip).pack(side="right")
