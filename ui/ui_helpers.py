from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from core.config import FONTS, TOAST_COLORS, TOAST_DURATION_MS
from utils.date_utils import iso_date, parse_ymd, today

_INLINE_ERROR_BG = "#ffebee"


def add_placeholder(entry: ttk.Entry, placeholder_text: str) -> None:
    entry._placeholder_text = placeholder_text
    entry._has_placeholder = True

    def on_focus_in(_event=None):
        if getattr(entry, "_has_placeholder", False):
            entry.delete(0, tk.END)
            entry.configure(foreground="black")
            entry._has_placeholder = False

    def on_focus_out(_event=None):
        if not entry.get():
            entry.insert(0, entry._placeholder_text)
            entry.configure(foreground="gray")
            entry._has_placeholder = True

    entry.delete(0, tk.END)
    entry.insert(0, placeholder_text)
    entry.configure(foreground="gray")
    entry.bind("<FocusIn>", on_focus_in, add="+")
    entry.bind("<FocusOut>", on_focus_out, add="+")


def get_entry_value(entry: ttk.Entry) -> str:
    if getattr(entry, "_has_placeholder", False):
        return ""
    return entry.get()


def set_entry_value(entry: ttk.Entry, value: str) -> None:
    """Replace the entry text, dropping any placeholder state."""
    entry.delete(0, tk.END)
    if getattr(entry, "_has_placeholder", False):
        entry.configure(foreground="black")
        entry._has_placeholder = False
    if value:
        entry.insert(0, value)


def reset_entry(entry: ttk.Entry) -> None:
    placeholder = getattr(entry, "_placeholder_text", None)
    entry.delete(0, tk.END)
    if placeholder:
        entry.insert(0, placeholder)
        entry.configure(foreground="gray")
        entry._has_placeholder = True


def show_inline_error(parent: tk.Widget, message: str, row: int, column: int, columnspan: int = 1) -> tk.Label:
    error_label = tk.Label(
        parent,
        text="⚠️ " + message,
        background=_INLINE_ERROR_BG,
        foreground="#b00020",
        font=FONTS["label_bold"],
        relief="solid",
        borderwidth=1,
        padx=8,
        pady=4,
    )
    error_label.grid(row=row, column=column, columnspan=columnspan, sticky="ew", padx=6, pady=2)
    parent.after(5000, lambda: error_label.grid_forget() if error_label.winfo_exists() else None)
    return error_label


def clear_inline_errors(parent: tk.Widget) -> None:
    for child in parent.winfo_children():
        if isinstance(child, tk.Label) and child.cget("background") == _INLINE_ERROR_BG:
            child.grid_forget()


def show_toast(parent: tk.Misc, message: str, kind: str = "info", duration_ms: int = TOAST_DURATION_MS) -> tk.Label | None:
    """Transient banner pinned to the bottom of ``parent``'s toplevel."""
    try:
        root = parent.winfo_toplevel()
    except tk.TclError:
        return None
    background, foreground = TOAST_COLORS.get(kind, TOAST_COLORS["info"])

    previous = getattr(root, "_active_toast", None)
    if previous is not None and previous.winfo_exists():
        previous.destroy()

    toast = tk.Label(
        root,
        text=message,
        background=background,
        foreground=foreground,
        font=FONTS["toast"],
        padx=16,
        pady=8,
    )
    toast.place(relx=0.5, rely=1.0, anchor="s", y=-24)
    toast.lift()
    root._active_toast = toast

    def _dismiss():
        if toast.winfo_exists():
            toast.destroy()

    root.after(duration_ms, _dismiss)
    return toast


def create_date_input(
    parent: tk.Widget,
    width: int,
    default_iso: str | None = None,
    date_entry_cls: type | None = None,
):
    if date_entry_cls is not None:
        picker = date_entry_cls(parent, width=width, date_pattern="yyyy-mm-dd")
        parsed = parse_ymd(default_iso) if default_iso else None
        if parsed:
            picker.set_date(parsed)
        else:
            picker.delete(0, tk.END)
        return picker

    plain = ttk.Entry(parent, width=width)
    if default_iso:
        plain.insert(0, default_iso)
    return plain


def set_date_input(widget: tk.Widget, value: str | None) -> None:
    parsed = parse_ymd(value) if value else None
    set_date = getattr(widget, "set_date", None)
    if parsed and callable(set_date):
        set_date(parsed)
        return
    widget.delete(0, tk.END)
    if parsed:
        widget.insert(0, iso_date(parsed))


def set_date_input_today(widget: tk.Widget) -> None:
    set_date_input(widget, iso_date(today()))


def build_sortable_tree(app, parent: tk.Widget, columns: dict, height: int = 12) -> ttk.Treeview:
    """Headings-only Treeview with a vertical scrollbar, laid out on ``parent``'s grid."""
    parent.columnconfigure(0, weight=1)
    parent.rowconfigure(0, weight=1)
    col_names = tuple(columns.keys())
    tree = ttk.Treeview(parent, columns=col_names, show="headings", height=height)
    for col, cfg in columns.items():
        tree.heading(col, text=cfg["header"], anchor="center")
        tree.column(col, width=cfg["width"], anchor=cfg["anchor"])
    tree.grid(row=0, column=0, sticky="nsew")
    vsb = ttk.Scrollbar(parent, orient="vertical", command=tree.yview)
    tree.configure(yscrollcommand=vsb.set)
    vsb.grid(row=0, column=1, sticky="ns")
    app._bind_sortable_headings(tree)
    app._init_tree_striping(tree)
    return tree
