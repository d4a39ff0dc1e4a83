#!/usr/bin/env python3

from __future__ import annotations

import tkinter as tk

from app.action_wrappers import ActionWrappersMixin
from app.mixins.appearance_mixin import AppearanceMixin
from app.mixins.context_menu_mixin import ContextMenuMixin
from app.mixins.dashboard_mixin import DashboardMixin
from app.mixins.lifecycle_mixin import LifecycleMixin
from app.mixins.navigation_mixin import NavigationMixin
from app.mixins.settings_mixin import SettingsMixin
from app.mixins.startup_layout_mixin import StartupLayoutMixin
from app.mixins.tree_sort_mixin import TreeSortMixin
from core.app_logging import get_app_logger, setup_all_loggers
from core.runtime_utils import enable_windows_dpi_awareness

logger = get_app_logger()


class App(
    StartupLayoutMixin,
    ActionWrappersMixin,
    DashboardMixin,
    NavigationMixin,
    LifecycleMixin,
    ContextMenuMixin,
    SettingsMixin,
    AppearanceMixin,
    TreeSortMixin,
    tk.Tk,
):
    """Suhel Roadline trip and advance ledger."""


def main() -> None:
    setup_all_loggers()
    enable_windows_dpi_awareness()
    app = App()
    try:
        app.mainloop()
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt received, closing application gracefully.")
        app.on_close(force=True)


if __name__ == "__main__":
    main()
