from __future__ import annotations

import re
from datetime import datetime
from tkinter import ttk

from core.config import DISPLAY_DATE_FORMAT
from utils.validation import normalize_whitespace

_ASC_MARKER = " ▲"
_DESC_MARKER = " ▼"
_NUMERIC_RE = re.compile(r"-?\d+(\.\d+)?")


def heading_text_without_sort_marker(text: str) -> str:
    return text.removesuffix(_ASC_MARKER).removesuffix(_DESC_MARKER)


def alphanum_key(value: str) -> tuple:
    """
    Sort key for treeview cells.

    Order: amounts/numbers, then display dates, then natural-sorted text,
    then blanks.
    """
    normalized = normalize_whitespace(value or "")
    if not normalized:
        return (3,)

    numeric = normalized.replace("₹", "").replace(",", "")
    if _NUMERIC_RE.fullmatch(numeric):
        return (0, float(numeric))

    for fmt in (DISPLAY_DATE_FORMAT, "%Y-%m-%d"):
        try:
            return (1, datetime.strptime(normalized, fmt).toordinal())
        except ValueError:
            continue

    key_parts = []
    for part in re.split(r"(\d+)", normalized.lower()):
        if part == "":
            continue
        key_parts.append((0, int(part)) if part.isdigit() else (1, part))
    return (2, tuple(key_parts))


def _order_items(tree: ttk.Treeview, col: str, reverse: bool) -> None:
    items = list(tree.get_children(""))
    items.sort(key=lambda item_id: alphanum_key(tree.set(item_id, col)), reverse=reverse)
    for idx, item_id in enumerate(items):
        tree.move(item_id, "", idx)


def _relabel_headings(tree: ttk.Treeview, labels: dict[str, str], col: str, reverse: bool) -> None:
    for current_col in tree["columns"]:
        label = labels.get(current_col, current_col)
        if current_col == col:
            label += _DESC_MARKER if reverse else _ASC_MARKER
        tree.heading(current_col, text=label)


def sort_tree_column(
    tree: ttk.Treeview,
    col: str,
    tree_sort_state: dict[str, tuple[str, bool]],
    tree_heading_texts: dict[str, dict[str, str]],
):
    tree_key = str(tree)
    if tree_key not in tree_heading_texts:
        tree_heading_texts[tree_key] = {
            current_col: heading_text_without_sort_marker(str(tree.heading(current_col, "text")))
            for current_col in tree["columns"]
        }

    prev_col, prev_rev = tree_sort_state.get(tree_key, ("", False))
    reverse = (not prev_rev) if prev_col == col else False
    tree_sort_state[tree_key] = (col, reverse)

    _order_items(tree, col, reverse)
    _relabel_headings(tree, tree_heading_texts[tree_key], col, reverse)


def reapply_tree_sort(
    tree: ttk.Treeview,
    tree_sort_state: dict[str, tuple[str, bool]],
    tree_heading_texts: dict[str, dict[str, str]],
):
    """Restore the last user-chosen ordering after a tree is repopulated."""
    tree_key = str(tree)
    saved_col, saved_rev = tree_sort_state.get(tree_key, ("", False))
    if not saved_col or saved_col not in tree["columns"]:
        return
    _order_items(tree, saved_col, saved_rev)
    _relabel_headings(tree, tree_heading_texts.get(tree_key, {}), saved_col, saved_rev)
