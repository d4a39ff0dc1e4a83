import tkinter as tk
from tkinter import ttk

from core.app_logging import trace
from core.config import STR_STATUSES, get_column_config
from ui.ui_helpers import add_placeholder, build_sortable_tree, create_date_input


@trace
def build_str_status_tab(app, frame):
    frame.columnconfigure(0, weight=1)
    frame.rowconfigure(1, weight=1)

    filters = ttk.LabelFrame(frame, text="Filters")
    filters.grid(row=0, column=0, sticky="ew", padx=18, pady=(14, 6))

    date_entry_cls = getattr(app, "date_entry_cls", None)
    ttk.Label(filters, text="From").grid(row=0, column=0, sticky="w", padx=(8, 4), pady=8)
    app.str_from = create_date_input(filters, width=12, date_entry_cls=date_entry_cls)
    app.str_from.grid(row=0, column=1, sticky="w", padx=4, pady=8)
    ttk.Label(filters, text="To").grid(row=0, column=2, sticky="w", padx=(12, 4), pady=8)
    app.str_to = create_date_input(filters, width=12, date_entry_cls=date_entry_cls)
    app.str_to.grid(row=0, column=3, sticky="w", padx=4, pady=8)

    ttk.Label(filters, text="Vehicle").grid(row=0, column=4, sticky="w", padx=(12, 4), pady=8)
    app.str_vehicle_entry = ttk.Entry(filters, width=16)
    app.str_vehicle_entry.grid(row=0, column=5, sticky="w", padx=4, pady=8)
    add_placeholder(app.str_vehicle_entry, "Any vehicle")
    app.str_vehicle_entry.bind("<Return>", lambda _e: app.refresh_str_status())

    ttk.Label(filters, text="Status").grid(row=0, column=6, sticky="w", padx=(12, 4), pady=8)
    app.str_status_filter = ttk.Combobox(filters, values=("All",) + STR_STATUSES, width=14, state="readonly")
    app.str_status_filter.set("All")
    app.str_status_filter.grid(row=0, column=7, sticky="w", padx=4, pady=8)
    app.str_status_filter.bind("<<ComboboxSelected>>", lambda _e: app.refresh_str_status())

    ttk.Button(filters, text="Apply", command=app.refresh_str_status).grid(row=0, column=8, padx=(12, 8), pady=8)

    table = ttk.Frame(frame)
    table.grid(row=1, column=0, sticky="nsew", padx=18, pady=4)
    app.str_tree = build_sortable_tree(app, table, get_column_config("str_status"), height=16)
    app.str_tree.configure(selectmode="extended")
    app.str_tree.bind("<Double-1>", lambda _e: app.toggle_selected_str_status())
    app.str_tree.bind("<space>", lambda _e: app.toggle_selected_str_status())
    app._str_trips = {}
    app._str_edits = {}

    actions = ttk.Frame(frame)
    actions.grid(row=2, column=0, sticky="ew", padx=18, pady=(6, 18))
    app.str_pending_var = tk.StringVar(value="")
    ttk.Label(actions, textvariable=app.str_pending_var, style="Muted.TLabel").pack(side="left")
    ttk.Button(actions, text="Delete Trip", style="Warning.TButton", command=app.delete_selected_trip).pack(side="right", padx=(6, 0))
    ttk.Button(actions, text="Discard Changes", command=app.refresh_str_status).pack(side="right", padx=(6, 0))
    ttk.Button(actions, text="Save Changes", style="Primary.TButton", command=app.save_str_changes).pack(side="right", padx=(6, 0))
    ttk.Button(actions, text="Toggle Status", command=app.toggle_selected_str_status).pack(side="right", padx=(6, 0))
