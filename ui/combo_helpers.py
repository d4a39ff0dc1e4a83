from __future__ import annotations

from typing import Iterable

from tkinter import ttk

_NAV_KEYS = ("Return", "KP_Enter", "Escape", "Tab", "Up", "Down", "Left", "Right")


def set_combo_source(combo: ttk.Combobox, values: Iterable[str]) -> None:
    """Replace the full suggestion list the combo filters from."""
    values = list(values)
    combo._search_all_values = values
    combo["values"] = values


def make_searchable_combo(combo: ttk.Combobox, strict: bool = False):
    """
    Filter the dropdown by substring as the user types.

    With ``strict`` a value that is not one of the suggestions is cleared on
    focus-out; otherwise free text is kept (new vehicles, new villages).
    """
    combo.configure(state="normal")
    combo._search_all_values = list(combo["values"])

    def _on_key(event):
        if event.keysym in _NAV_KEYS:
            return
        typed = combo.get().strip().lower()
        all_vals = getattr(combo, "_search_all_values", list(combo["values"]))
        filtered = [value for value in all_vals if typed in value.lower()] if typed else all_vals
        combo["values"] = filtered

    def _on_focus_out(_event):
        value = combo.get().strip()
        all_vals = getattr(combo, "_search_all_values", list(combo["values"]))
        combo["values"] = all_vals
        if strict and value and value not in all_vals:
            combo.set("")

    combo.bind("<KeyRelease>", _on_key, add="+")
    combo.bind("<FocusOut>", _on_focus_out, add="+")
