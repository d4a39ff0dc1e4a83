import tkinter as tk
from tkinter import ttk

from core.app_logging import trace
from core.config import get_column_config
from ledger.report_pdf import reportlab_available
from ui.ui_helpers import add_placeholder, build_sortable_tree, create_date_input


@trace
def build_reports_tab(app, frame):
    frame.columnconfigure(0, weight=1)
    frame.rowconfigure(2, weight=1)

    filters = ttk.LabelFrame(frame, text="Filters")
    filters.grid(row=0, column=0, sticky="ew", padx=18, pady=(14, 6))

    date_entry_cls = getattr(app, "date_entry_cls", None)
    ttk.Label(filters, text="From").grid(row=0, column=0, sticky="w", padx=(8, 4), pady=8)
    app.report_from = create_date_input(filters, width=12, date_entry_cls=date_entry_cls)
    app.report_from.grid(row=0, column=1, sticky="w", padx=4, pady=8)
    ttk.Label(filters, text="To").grid(row=0, column=2, sticky="w", padx=(12, 4), pady=8)
    app.report_to = create_date_input(filters, width=12, date_entry_cls=date_entry_cls)
    app.report_to.grid(row=0, column=3, sticky="w", padx=4, pady=8)

    ttk.Label(filters, text="Vehicle").grid(row=0, column=4, sticky="w", padx=(12, 4), pady=8)
    app.report_vehicle_entry = ttk.Entry(filters, width=16)
    app.report_vehicle_entry.grid(row=0, column=5, sticky="w", padx=4, pady=8)
    add_placeholder(app.report_vehicle_entry, "Any vehicle")
    ttk.Label(filters, text="Village").grid(row=0, column=6, sticky="w", padx=(12, 4), pady=8)
    app.report_village_entry = ttk.Entry(filters, width=16)
    app.report_village_entry.grid(row=0, column=7, sticky="w", padx=4, pady=8)
    add_placeholder(app.report_village_entry, "Any village")
    for widget in (app.report_vehicle_entry, app.report_village_entry):
        widget.bind("<Return>", lambda _e: app.refresh_reports())

    ttk.Button(filters, text="Apply", style="Primary.TButton", command=app.refresh_reports).grid(row=0, column=8, padx=(12, 4), pady=8)
    ttk.Button(filters, text="Clear", command=app.clear_report_filters).grid(row=0, column=9, padx=4, pady=8)

    quick = ttk.Frame(filters)
    quick.grid(row=1, column=0, columnspan=10, sticky="w", padx=8, pady=(0, 8))
    ttk.Label(quick, text="Quick range:").pack(side="left", padx=(0, 6))
    for label, name in (("Today", "today"), ("Last 7 Days", "week"), ("This Month", "month"), ("This Year", "year")):
        ttk.Button(quick, text=label, command=lambda n=name: app.apply_report_quick_range(n)).pack(side="left", padx=3)

    summary = ttk.Frame(frame)
    summary.grid(row=1, column=0, sticky="ew", padx=18, pady=4)
    app.report_period_var = tk.StringVar(value="")
    ttk.Label(summary, textvariable=app.report_period_var, style="Muted.TLabel").pack(side="left", padx=(0, 18))
    app.report_summary_vars = {
        "trips": tk.StringVar(value="0"),
        "advances": tk.StringVar(value="₹0"),
        "quantity": tk.StringVar(value="0"),
        "vehicles": tk.StringVar(value="0"),
        "average": tk.StringVar(value="₹0"),
    }
    for label, key in (
        ("Trips", "trips"),
        ("Total Advances", "advances"),
        ("Quantity", "quantity"),
        ("Vehicles", "vehicles"),
        ("Avg / Trip", "average"),
    ):
        ttk.Label(summary, text=f"{label}:", font=("Segoe UI", 11, "bold")).pack(side="left", padx=(8, 2))
        ttk.Label(summary, textvariable=app.report_summary_vars[key]).pack(side="left", padx=(0, 10))

    export_bar = ttk.Frame(summary)
    export_bar.pack(side="right")
    ttk.Button(export_bar, text="Export CSV", command=lambda: app.export_report("csv")).pack(side="left", padx=3)
    ttk.Button(export_bar, text="Export Excel", command=lambda: app.export_report("xlsx")).pack(side="left", padx=3)
    pdf_button = ttk.Button(export_bar, text="Export PDF", command=lambda: app.export_report("pdf"))
    pdf_button.pack(side="left", padx=3)
    if not reportlab_available():
        pdf_button.state(["disabled"])

    notebook = ttk.Notebook(frame)
    notebook.grid(row=2, column=0, sticky="nsew", padx=18, pady=(6, 18))
    app.report_notebook = notebook

    trips_page = ttk.Frame(notebook)
    advances_page = ttk.Frame(notebook)
    notebook.add(trips_page, text="Trips")
    notebook.add(advances_page, text="Advances")

    app.report_trip_tree = build_sortable_tree(app, trips_page, get_column_config("trips"), height=14)
    app.report_trip_tree.bind("<Double-1>", lambda _e: app.edit_selected_report_trip())
    app.report_advance_tree = build_sortable_tree(app, advances_page, get_column_config("advances"), height=14)
    ttk.Label(
        trips_page,
        text="* initial advance taken from the trip entry (no separate advance record)",
        style="Muted.TLabel",
    ).grid(row=1, column=0, sticky="w", pady=(4, 0))

    app._report_rows = []
    app._report_row_map = {}
