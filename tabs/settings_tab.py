import tkinter as tk
from tkinter import ttk

from core.app_logging import trace
from core.config import DEFAULT_VEHICLE_TYPE, STORAGE_MODES, VEHICLE_TYPES, get_column_config
from ui.ui_helpers import add_placeholder, build_sortable_tree


def _build_vehicle_section(app, parent):
    section = ttk.LabelFrame(parent, text="Vehicles")
    section.grid(row=0, column=0, sticky="nsew", padx=(18, 6), pady=14)
    section.columnconfigure(0, weight=1)
    section.rowconfigure(1, weight=1)

    form = ttk.Frame(section)
    form.grid(row=0, column=0, sticky="ew", padx=6, pady=6)
    form.columnconfigure(1, weight=1)
    form.columnconfigure(3, weight=1)

    ttk.Label(form, text="Vehicle Number*").grid(row=0, column=0, sticky="w", padx=4, pady=4)
    app.vehicle_number_entry = ttk.Entry(form, width=16)
    app.vehicle_number_entry.grid(row=0, column=1, sticky="ew", padx=4, pady=4)
    add_placeholder(app.vehicle_number_entry, "MH12AB1234")
    ttk.Label(form, text="Type").grid(row=0, column=2, sticky="w", padx=4, pady=4)
    app.vehicle_type_combo = ttk.Combobox(form, values=VEHICLE_TYPES, width=10, state="readonly")
    app.vehicle_type_combo.set(DEFAULT_VEHICLE_TYPE)
    app.vehicle_type_combo.grid(row=0, column=3, sticky="w", padx=4, pady=4)

    ttk.Label(form, text="Driver*").grid(row=1, column=0, sticky="w", padx=4, pady=4)
    app.vehicle_driver_entry = ttk.Entry(form, width=20)
    app.vehicle_driver_entry.grid(row=1, column=1, sticky="ew", padx=4, pady=4)
    add_placeholder(app.vehicle_driver_entry, "Driver name...")
    ttk.Label(form, text="Mobile*").grid(row=1, column=2, sticky="w", padx=4, pady=4)
    app.vehicle_mobile_entry = ttk.Entry(form, width=14)
    app.vehicle_mobile_entry.grid(row=1, column=3, sticky="ew", padx=4, pady=4)
    add_placeholder(app.vehicle_mobile_entry, "10-digit mobile")

    buttons = ttk.Frame(form)
    buttons.grid(row=2, column=0, columnspan=4, sticky="e", pady=(4, 0))
    ttk.Button(buttons, text="Export Contacts", command=app.export_vehicle_contacts).pack(side="left", padx=3)
    ttk.Button(buttons, text="Clear", command=app._clear_vehicle_form).pack(side="left", padx=3)
    ttk.Button(buttons, text="Save Vehicle", style="Primary.TButton", command=app.save_vehicle).pack(side="left", padx=3)

    table = ttk.Frame(section)
    table.grid(row=1, column=0, sticky="nsew", padx=6, pady=6)
    app.vehicle_tree = build_sortable_tree(app, table, get_column_config("vehicles"), height=10)
    app.vehicle_tree.bind("<<TreeviewSelect>>", lambda _e: app._on_vehicle_selected())
    ttk.Button(section, text="Delete Vehicle", style="Warning.TButton", command=app.deactivate_vehicle).grid(
        row=2, column=0, sticky="e", padx=6, pady=(0, 8)
    )


def _build_village_section(app, parent):
    section = ttk.LabelFrame(parent, text="Villages")
    section.grid(row=0, column=1, sticky="nsew", padx=(6, 18), pady=14)
    section.columnconfigure(0, weight=1)
    section.rowconfigure(2, weight=1)

    form = ttk.Frame(section)
    form.grid(row=0, column=0, sticky="ew", padx=6, pady=6)
    form.columnconfigure(1, weight=1)
    app.village_form_label_var = tk.StringVar(value="New village")
    ttk.Label(form, textvariable=app.village_form_label_var).grid(row=0, column=0, sticky="w", padx=4, pady=4)
    app.village_name_entry = ttk.Entry(form, width=24)
    app.village_name_entry.grid(row=0, column=1, sticky="ew", padx=4, pady=4)
    add_placeholder(app.village_name_entry, "Village name...")
    app.village_name_entry.bind("<Return>", lambda _e: app.save_village())
    ttk.Button(form, text="Clear", command=app._clear_village_form).grid(row=0, column=2, padx=3)
    ttk.Button(form, text="Save Village", style="Primary.TButton", command=app.save_village).grid(row=0, column=3, padx=3)
    app._editing_village_id = None

    search = ttk.Frame(section)
    search.grid(row=1, column=0, sticky="ew", padx=6, pady=(0, 6))
    search.columnconfigure(1, weight=1)
    ttk.Label(search, text="Search").grid(row=0, column=0, sticky="w", padx=4)
    app.village_search_entry = ttk.Entry(search, width=24)
    app.village_search_entry.grid(row=0, column=1, sticky="ew", padx=4)
    app.village_search_entry.bind("<KeyRelease>", lambda _e: app._schedule_village_search())

    table = ttk.Frame(section)
    table.grid(row=2, column=0, sticky="nsew", padx=6, pady=6)
    app.village_tree = build_sortable_tree(app, table, get_column_config("villages"), height=10)
    app.village_tree.bind("<<TreeviewSelect>>", lambda _e: app._on_village_selected())
    ttk.Button(section, text="Delete Village", style="Warning.TButton", command=app.deactivate_village).grid(
        row=3, column=0, sticky="e", padx=6, pady=(0, 8)
    )


def _build_storage_section(app, parent):
    section = ttk.LabelFrame(parent, text="Storage & Backup")
    section.grid(row=1, column=0, columnspan=2, sticky="ew", padx=18, pady=(0, 18))

    app.storage_backend_var = tk.StringVar(value="")
    ttk.Label(section, text="Current storage:").grid(row=0, column=0, sticky="w", padx=8, pady=8)
    ttk.Label(section, textvariable=app.storage_backend_var, font=("Segoe UI", 11, "bold")).grid(
        row=0, column=1, sticky="w", padx=4, pady=8
    )

    ttk.Label(section, text="Mode on next start:").grid(row=0, column=2, sticky="w", padx=(24, 4), pady=8)
    app.storage_mode_combo = ttk.Combobox(section, values=STORAGE_MODES, width=8, state="readonly")
    app.storage_mode_combo.grid(row=0, column=3, sticky="w", padx=4, pady=8)
    ttk.Button(section, text="Apply", command=app.change_storage_mode).grid(row=0, column=4, padx=4, pady=8)

    app.backup_button = ttk.Button(section, text="Backup Database", command=app.backup_database)
    app.backup_button.grid(row=0, column=5, padx=(24, 4), pady=8)
    app.restore_button = ttk.Button(section, text="Restore Database", command=app.restore_database)
    app.restore_button.grid(row=0, column=6, padx=4, pady=8)


@trace
def build_settings_tab(app, frame):
    frame.columnconfigure(0, weight=1)
    frame.columnconfigure(1, weight=1)
    frame.rowconfigure(0, weight=1)

    _build_vehicle_section(app, frame)
    _build_village_section(app, frame)
    _build_storage_section(app, frame)
