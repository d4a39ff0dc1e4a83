from __future__ import annotations

from tkinter import ttk

from utils.tree_sort_utils import reapply_tree_sort, sort_tree_column


class TreeSortMixin:
    """Click-to-sort headings shared by every treeview in the app."""

    def _bind_sortable_headings(self, tree: ttk.Treeview):
        for col in tree["columns"]:
            tree.heading(col, command=lambda c=col, t=tree: self._sort_tree_column(t, c))

    def _sort_tree_column(self, tree: ttk.Treeview, col: str):
        if not hasattr(self, "_tree_sort_state"):
            self._tree_sort_state: dict[str, tuple[str, bool]] = {}
        if not hasattr(self, "_tree_heading_texts"):
            self._tree_heading_texts: dict[str, dict[str, str]] = {}
        sort_tree_column(tree, col, self._tree_sort_state, self._tree_heading_texts)

    def _reapply_tree_sort(self, tree: ttk.Treeview):
        if not hasattr(self, "_tree_sort_state"):
            return
        if not hasattr(self, "_tree_heading_texts"):
            self._tree_heading_texts = {}
        reapply_tree_sort(tree, self._tree_sort_state, self._tree_heading_texts)
