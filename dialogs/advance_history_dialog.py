from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from core.app_logging import trace
from core.config import ADVANCE_TYPE_INITIAL, TAG_COLORS
from utils.currency import format_inr
from utils.date_utils import format_display_date, format_timestamp


@trace
def show_advance_history(parent: tk.Misc, trip, summary) -> tk.Toplevel:
    win = tk.Toplevel(parent)
    win.title(f"Advance History - Trip #{trip.sl_number}")
    win.resizable(True, True)
    win.geometry("1100x620")
    win.minsize(900, 480)
    win.transient(parent)
    win.grab_set()

    hdr = ttk.LabelFrame(win, text="Trip Details")
    hdr.pack(fill="x", padx=12, pady=(10, 4))
    details = [
        ("SL", str(trip.sl_number)),
        ("Date", format_display_date(trip.date)),
        ("Vehicle", trip.vehicle_number),
        ("STR", trip.str_number),
        ("Driver", trip.driver_name),
        ("Villages", ", ".join(trip.villages)),
    ]
    for col, (label, val) in enumerate(details):
        ttk.Label(hdr, text=f"{label}:", font=("TkDefaultFont", 9, "bold")).grid(
            row=0, column=col * 2, sticky="e", padx=(8, 2), pady=6)
        ttk.Label(hdr, text=val).grid(
            row=0, column=col * 2 + 1, sticky="w", padx=(0, 12), pady=6)

    tbl_frame = ttk.Frame(win)
    tbl_frame.pack(fill="both", expand=True, padx=12, pady=4)

    cols = ("num", "created", "type", "amount", "note")
    headings = {"num": "#", "created": "Recorded", "type": "Type", "amount": "Amount", "note": "Note"}
    widths = {"num": 40, "created": 150, "type": 110, "amount": 110, "note": 420}

    tree = ttk.Treeview(tbl_frame, columns=cols, show="headings", height=14)
    for c in cols:
        tree.heading(c, text=headings[c], anchor="center")
        tree.column(c, width=widths[c], anchor="center")
    tree.column("note", anchor="w")
    tree.tag_configure("advance_synthetic", **TAG_COLORS["advance_synthetic"])
    tree.tag_configure("advance_initial", **TAG_COLORS["advance_initial"])

    vsb = ttk.Scrollbar(tbl_frame, orient="vertical", command=tree.yview)
    tree.configure(yscrollcommand=vsb.set)
    tree.grid(row=0, column=0, sticky="nsew")
    vsb.grid(row=0, column=1, sticky="ns")
    tbl_frame.columnconfigure(0, weight=1)
    tbl_frame.rowconfigure(0, weight=1)

    for idx, advance in enumerate(summary.advances, start=1):
        if advance.is_synthetic:
            tag = "advance_synthetic"
        elif advance.advance_type == ADVANCE_TYPE_INITIAL:
            tag = "advance_initial"
        else:
            tag = ""
        tree.insert(
            "",
            "end",
            values=(
                idx,
                format_timestamp(advance.created_at),
                (advance.advance_type or "unclassified").title(),
                format_inr(advance.advance_amount),
                advance.note,
            ),
            tags=(tag,) if tag else (),
        )

    ftr = ttk.Frame(win)
    ftr.pack(fill="x", padx=12, pady=(4, 10))
    if summary.failed:
        summary_text = "Advances could not be loaded for this trip."
    elif summary.advances:
        summary_text = (
            f"Initial: {format_inr(summary.initial_total)} ({summary.initial_count})     "
            f"Additional: {format_inr(summary.additional_total)} ({summary.additional_count})     "
            f"Total: {format_inr(summary.total_advances)}     Records: {summary.count}"
        )
    else:
        summary_text = "No advances recorded for this trip."
    ttk.Label(ftr, text=summary_text, font=("TkDefaultFont", 10, "bold")).pack(side="left")
    ttk.Button(ftr, text="Close", command=win.destroy).pack(side="right")
    return win
