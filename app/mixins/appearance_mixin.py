from __future__ import annotations

from tkinter import messagebox, ttk

from core.app_logging import get_app_logger
from core.config import (
    DELETE_BUTTON_FG,
    FONTS,
    PALETTE,
    SELECTION_BG,
    SELECTION_FG,
    TAG_COLORS,
    TREE_ALT_ROW_COLORS,
    TREE_ROW_HEIGHT,
)
from ui.combo_helpers import make_searchable_combo
from ui.ui_helpers import show_toast

logger = get_app_logger()


class AppearanceMixin:
    def _configure_ui_rendering(self):
        try:
            self.tk.call("tk", "scaling", self.winfo_fpixels("1i") / 72.0)
        except Exception as e:
            logger.warning(f"Failed to configure TK scaling: {e}")

        base_font = FONTS["base"]
        heading_font = FONTS["heading"]
        self.option_add("*Font", base_font)
        self.option_add("*TCombobox*Listbox*Font", base_font)
        self.option_add("*TCombobox*Listbox*selectBackground", SELECTION_BG)
        self.option_add("*TCombobox*Listbox*selectForeground", SELECTION_FG)
        self.configure(background=PALETTE["panel_bg"])

        style = ttk.Style(self)
        if "clam" in style.theme_names():
            style.theme_use("clam")
        style.configure(".", font=base_font, background=PALETTE["surface_bg"], foreground=PALETTE["text"])
        style.configure("TLabelframe", background=PALETTE["surface_bg"], bordercolor=PALETTE["border"])
        style.configure("TLabelframe.Label", font=heading_font, background=PALETTE["surface_bg"], foreground=PALETTE["text"])
        style.configure("MainTabs.TNotebook", tabmargins=(8, 4, 8, 0), background=PALETTE["panel_bg"], bordercolor=PALETTE["border"])
        style.configure("MainTabs.TNotebook.Tab", font=base_font, padding=(22, 12, 22, 12), borderwidth=1)
        style.map(
            "MainTabs.TNotebook.Tab",
            background=[("selected", PALETTE["tab_selected_bg"]), ("active", PALETTE["tab_active_bg"]), ("!selected", PALETTE["tab_idle_bg"])],
        )
        style.configure("TEntry", padding=(6, 6, 6, 6))
        style.configure("TCombobox", padding=(6, 4, 6, 4))
        style.configure("TButton", padding=(12, 8))
        style.configure("Treeview", font=base_font, rowheight=TREE_ROW_HEIGHT)
        style.configure("Treeview.Heading", font=heading_font, padding=(8, 8, 8, 8), background=PALETTE["tree_heading_bg"])
        style.map("Treeview", foreground=[("selected", SELECTION_FG)], background=[("selected", SELECTION_BG)])
        style.configure("Muted.TLabel", foreground=PALETTE["muted_text"], font=FONTS["hint_gray"])
        style.configure("Card.TLabel", foreground=PALETTE["card_value"], font=FONTS["dashboard_title"])
        style.configure("Primary.TButton", font=FONTS["label_bold"], padding=(18, 10))
        style.configure("Warning.TButton", font=FONTS["label_bold"], padding=(14, 10), foreground=DELETE_BUTTON_FG)
        style.map("Warning.TButton", foreground=[("active", "#bf360c"), ("pressed", "#a52714")])

    def _init_tree_striping(self, tree: ttk.Treeview):
        even_bg, odd_bg = TREE_ALT_ROW_COLORS
        tree.tag_configure("row_even", background=even_bg)
        tree.tag_configure("row_odd", background=odd_bg)
        for tag, colors in TAG_COLORS.items():
            tree.tag_configure(tag, font=FONTS["tree_bold"] if "foreground" in colors else FONTS["tree_default"], **colors)

    def _row_stripe_tag(self, index: int) -> str:
        return "row_even" if index % 2 == 0 else "row_odd"

    def _str_status_tag(self, status: str) -> str:
        return "str_received" if str(status).strip().lower() == "received" else "str_pending"

    def _str_status_badge(self, status: str) -> str:
        return ("🟢 " if self._str_status_tag(status) == "str_received" else "🔴 ") + status

    def _show_invalid(self, message: str):
        messagebox.showerror("Invalid input", message)

    def _notify(self, message: str, kind: str = "success"):
        show_toast(self, message, kind)

    def _make_searchable_combo(self, combo: ttk.Combobox, strict: bool = False):
        make_searchable_combo(combo, strict=strict)
