from .add_advance_tab import build_add_advance_tab
from .add_entry_tab import build_add_entry_tab
from .dashboard_tab import build_dashboard_tab
from .reports_tab import build_reports_tab
from .settings_tab import build_settings_tab
from .str_status_tab import build_str_status_tab

__all__ = [
    "build_add_advance_tab",
    "build_add_entry_tab",
    "build_dashboard_tab",
    "build_reports_tab",
    "build_settings_tab",
    "build_str_status_tab",
]
