import tkinter as tk
from tkinter import ttk

from core.app_logging import trace
from core.config import get_column_config
from ui.ui_helpers import build_sortable_tree


@trace
def build_dashboard_tab(app, frame):
    frame.columnconfigure(0, weight=1)
    frame.columnconfigure(1, weight=1)
    frame.columnconfigure(2, weight=1)
    frame.rowconfigure(2, weight=1)

    header = ttk.Frame(frame)
    header.grid(row=0, column=0, columnspan=3, sticky="ew", padx=18, pady=(14, 4))
    header.columnconfigure(0, weight=1)
    ttk.Label(header, text="Today at a glance", font=("Segoe UI", 16, "bold")).grid(row=0, column=0, sticky="w")
    app.dash_status_var = tk.StringVar(value="")
    ttk.Label(header, textvariable=app.dash_status_var, style="Muted.TLabel").grid(row=0, column=1, sticky="e", padx=8)
    ttk.Button(header, text="New Trip", command=lambda: app._open_tab(app.tab_add_entry)).grid(row=0, column=2, padx=4)
    ttk.Button(header, text="Add Advance", command=lambda: app._open_tab(app.tab_add_advance)).grid(row=0, column=3, padx=4)
    ttk.Button(header, text="Reports", command=lambda: app._open_tab(app.tab_reports)).grid(row=0, column=4, padx=4)
    ttk.Button(header, text="Refresh", command=app.refresh_dashboard).grid(row=0, column=5, padx=(4, 0))

    app.dash_today_trips_var = tk.StringVar(value="0")
    app.dash_today_advances_var = tk.StringVar(value="₹0")
    app.dash_active_vehicles_var = tk.StringVar(value="0")

    def add_card(col: int, title: str, value_var: tk.StringVar):
        card = ttk.LabelFrame(frame, text=title, padding=24)
        card.grid(row=1, column=col, sticky="nsew", padx=18, pady=12)
        card.columnconfigure(0, weight=1)
        value_label = ttk.Label(card, textvariable=value_var, anchor="center", style="Card.TLabel")
        value_label.grid(row=0, column=0, sticky="nsew")
        return value_label

    add_card(0, "Today's Trips", app.dash_today_trips_var)
    add_card(1, "Today's Advances", app.dash_today_advances_var)
    vehicles_label = add_card(2, "Active Vehicles", app.dash_active_vehicles_var)
    vehicles_label.bind("<Double-1>", lambda _e: app._open_tab(app.tab_settings))

    recent_trips = ttk.LabelFrame(frame, text="Recent Trips (today)")
    recent_trips.grid(row=2, column=0, columnspan=2, sticky="nsew", padx=(18, 6), pady=(4, 18))
    trip_cols = get_column_config("trips")
    app.dashboard_trip_tree = build_sortable_tree(
        app,
        recent_trips,
        {key: trip_cols[key] for key in ("sl", "date", "vehicle", "villages", "total")},
        height=6,
    )

    recent_advances = ttk.LabelFrame(frame, text="Recent Advances (today)")
    recent_advances.grid(row=2, column=2, sticky="nsew", padx=(6, 18), pady=(4, 18))
    advance_cols = get_column_config("advances")
    app.dashboard_advance_tree = build_sortable_tree(
        app,
        recent_advances,
        {key: advance_cols[key] for key in ("created", "vehicle", "amount")},
        height=6,
    )
