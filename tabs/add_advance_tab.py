import tkinter as tk
from tkinter import ttk

from core.app_logging import trace
from core.config import get_column_config
from ui.ui_helpers import add_placeholder, build_sortable_tree


@trace
def build_add_advance_tab(app, frame):
    frame.columnconfigure(0, weight=3)
    frame.columnconfigure(1, weight=2)
    frame.rowconfigure(1, weight=1)

    picker = ttk.LabelFrame(frame, text="Find Trip")
    picker.grid(row=0, column=0, columnspan=2, sticky="ew", padx=18, pady=(14, 6))
    picker.columnconfigure(1, weight=1)

    ttk.Label(picker, text="Vehicle Number").grid(row=0, column=0, sticky="w", padx=6, pady=8)
    app.advance_vehicle_combo = ttk.Combobox(picker, width=28)
    app.advance_vehicle_combo.grid(row=0, column=1, sticky="w", padx=6, pady=8)
    app._make_searchable_combo(app.advance_vehicle_combo)
    app.advance_vehicle_combo.bind("<<ComboboxSelected>>", lambda _e: app.refresh_advance_trips())
    app.advance_vehicle_combo.bind("<Return>", lambda _e: app.refresh_advance_trips())
    ttk.Button(picker, text="Load Trips", command=app.refresh_advance_trips).grid(row=0, column=2, padx=6, pady=8)
    app.advance_status_var = tk.StringVar(value="Choose a vehicle to list its trips.")
    ttk.Label(picker, textvariable=app.advance_status_var, style="Muted.TLabel").grid(
        row=0, column=3, sticky="w", padx=(12, 6), pady=8
    )

    trips_frame = ttk.LabelFrame(frame, text="Trips")
    trips_frame.grid(row=1, column=0, sticky="nsew", padx=(18, 6), pady=(4, 18))
    app.advance_trip_tree = build_sortable_tree(app, trips_frame, get_column_config("trip_picker"), height=14)
    app.advance_trip_tree.bind("<<TreeviewSelect>>", lambda _e: app._on_advance_trip_selected())
    app._advance_trip_map = {}

    side = ttk.Frame(frame)
    side.grid(row=1, column=1, sticky="nsew", padx=(6, 18), pady=(4, 18))
    side.columnconfigure(0, weight=1)
    side.rowconfigure(1, weight=1)

    details = ttk.LabelFrame(side, text="Selected Trip")
    details.grid(row=0, column=0, sticky="ew")
    details.columnconfigure(1, weight=1)
    app.advance_detail_vars = {
        "trip": tk.StringVar(value="-"),
        "driver": tk.StringVar(value="-"),
        "villages": tk.StringVar(value="-"),
        "initial": tk.StringVar(value="₹0"),
        "additional": tk.StringVar(value="₹0"),
        "total": tk.StringVar(value="₹0"),
        "count": tk.StringVar(value="0"),
    }
    labels = [
        ("Trip", "trip"),
        ("Driver", "driver"),
        ("Villages", "villages"),
        ("Initial", "initial"),
        ("Additional", "additional"),
        ("Total Advances", "total"),
        ("Advance Records", "count"),
    ]
    for row, (label, key) in enumerate(labels):
        ttk.Label(details, text=f"{label}:", font=("Segoe UI", 11, "bold")).grid(row=row, column=0, sticky="w", padx=8, pady=3)
        ttk.Label(details, textvariable=app.advance_detail_vars[key], wraplength=360).grid(
            row=row, column=1, sticky="w", padx=(0, 8), pady=3
        )

    recent = ttk.LabelFrame(side, text="Recent Advances")
    recent.grid(row=1, column=0, sticky="nsew", pady=(10, 0))
    advance_cols = get_column_config("advances")
    app.advance_recent_tree = build_sortable_tree(
        app,
        recent,
        {key: advance_cols[key] for key in ("created", "type", "amount", "note")},
        height=4,
    )
    ttk.Button(recent, text="Full History", command=app.show_selected_advance_history).grid(
        row=1, column=0, sticky="e", padx=6, pady=6
    )

    form = ttk.LabelFrame(side, text="New Advance")
    form.grid(row=2, column=0, sticky="ew", pady=(10, 0))
    form.columnconfigure(1, weight=1)
    app._advance_form = form
    ttk.Label(form, text="Amount (₹)*").grid(row=0, column=0, sticky="w", padx=6, pady=6)
    app.advance_amount_entry = ttk.Entry(form, width=14)
    app.advance_amount_entry.grid(row=0, column=1, sticky="w", padx=6, pady=6)
    add_placeholder(app.advance_amount_entry, "Enter advance amount")
    ttk.Label(form, text="Note").grid(row=1, column=0, sticky="w", padx=6, pady=6)
    app.advance_note_entry = ttk.Entry(form, width=36)
    app.advance_note_entry.grid(row=1, column=1, sticky="ew", padx=6, pady=6)
    add_placeholder(app.advance_note_entry, "Optional note...")
    app.advance_save_button = ttk.Button(form, text="Add Advance", style="Primary.TButton", command=app.add_advance)
    app.advance_save_button.grid(row=2, column=1, sticky="e", padx=6, pady=(4, 8))
    app.advance_save_button.state(["disabled"])
