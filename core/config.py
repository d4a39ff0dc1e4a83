"""
Configuration constants for Suhel Roadline - Trip & Advance Ledger.
Centralized configuration for easier maintenance and customization.
"""

import os
import re

# ============================================================================
# FILE PATHS
# ============================================================================
APP_TITLE = "Suhel Roadline - Trip & Advance Ledger"
DB_PATH = "roadline.db"
HISTORY_LOG_FILE = "history_log.txt"
SETTINGS_FILE = "app_settings.json"

# Log directory and files (managed by app_logging.py)
LOG_DIR = "log"
LOG_EXCEPTIONS_FILE = "log/exceptions.log"
LOG_UX_ACTIONS_FILE = "log/ux_actions.log"
LOG_TRACE_FILE = "log/trace.log"


# ============================================================================
# STORAGE
# ============================================================================
# Service-account JSON (raw JSON text or a path to the key file).
FIREBASE_CREDENTIALS_ENV = "ROADLINE_FIREBASE_CREDENTIALS"
FIREBASE_CREDENTIALS_FILE = "firebase-auth.json"
# "auto" probes Firestore first; "local" always uses SQLite.
STORAGE_MODE_ENV = "ROADLINE_STORAGE_MODE"
STORAGE_MODES = ("auto", "local")
DEFAULT_STORAGE_MODE = os.environ.get(STORAGE_MODE_ENV, "auto")

COLLECTIONS = {
    "trips": "trips",
    "vehicles": "vehicles",
    "advances": "advances",
    "villages": "villages",
}

# Capability probe and batch loading
STORAGE_PROBE_TIMEOUT_SECONDS = 5.0
DASHBOARD_TIMEOUT_SECONDS = 10.0
ADVANCE_FETCH_WORKERS = 8


# ============================================================================
# DOMAIN VALUES
# ============================================================================
VEHICLE_TYPES = ("lorry", "tempo", "pickup")
DEFAULT_VEHICLE_TYPE = "lorry"

STR_STATUS_NOT_RECEIVED = "not received"
STR_STATUS_RECEIVED = "Received"
STR_STATUSES = (STR_STATUS_NOT_RECEIVED, STR_STATUS_RECEIVED)

ADVANCE_TYPE_INITIAL = "initial"
ADVANCE_TYPE_ADDITIONAL = "additional"
INITIAL_ADVANCE_NOTE = "Initial advance amount set during trip creation"
SYNTHETIC_ADVANCE_NOTE = "Advance recorded on the trip entry"
EDIT_INITIAL_ADVANCE_NOTE = "Initial advance amount set during trip edit"
CARRIED_INITIAL_ADVANCE_NOTE = "Initial advance carried over from the trip entry"
SYNTHETIC_ADVANCE_ID_PREFIX = "initial-"

RECENT_ADVANCES_LIMIT = 3
DASHBOARD_RECENT_LIMIT = 5
VILLAGE_SUGGESTION_LIMIT = 12


# ============================================================================
# VALIDATION PATTERNS
# ============================================================================
MOBILE_PATTERN = re.compile(r"^[6-9][0-9]{9}$")
VEHICLE_NUMBER_PATTERN = re.compile(r"^[A-Z0-9\-\s]{4,15}$")
STR_NUMBER_PATTERN = re.compile(r"^[A-Za-z0-9\-/\s]{1,30}$")


# ============================================================================
# WINDOW & UI GEOMETRY
# ============================================================================
WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 820
TREE_ROW_HEIGHT = 34
TREE_ALT_ROW_COLORS = ("#ffffff", "#eef4ff")
TOAST_DURATION_MS = 3000
REFRESH_DEBOUNCE_MS = 300


# ============================================================================
# FONTS
# ============================================================================
FONTS = {
    "base": ("Segoe UI", 12),
    "heading": ("Segoe UI", 13, "bold"),
    "dashboard_title": ("Segoe UI", 36, "bold"),
    "label_bold": ("Segoe UI", 11, "bold"),
    "label_normal": ("Segoe UI", 11),
    "hint_gray": ("", 10),
    "tree_default": ("TkDefaultFont", 11),
    "tree_bold": ("TkDefaultFont", 11, "bold"),
    "toast": ("Segoe UI", 11, "bold"),
}


# ============================================================================
# COLORS & TAGS
# ============================================================================
TAG_COLORS = {
    "str_received": {
        "foreground": "#1b5e20",
        "background": "#e8f5e9",
    },
    "str_pending": {
        "foreground": "#b00020",
        "background": "#ffe8ea",
    },
    "advance_initial": {
        "background": "#dff0d8",
    },
    "advance_synthetic": {
        "foreground": "#666666",
        "background": "#f5f5f5",
    },
    "advance_failed": {
        "foreground": "#b00020",
    },
}

TOAST_COLORS = {
    "info": ("#1565c0", "#ffffff"),
    "success": ("#2e7d32", "#ffffff"),
    "error": ("#c62828", "#ffffff"),
}

SELECTION_BG = "#1565c0"
SELECTION_FG = "#ffffff"
DELETE_BUTTON_FG = "#c62828"

PALETTE = {
    "surface_bg": "#ffffff",
    "panel_bg": "#f6f8fb",
    "text": "#111111",
    "muted_text": "#666666",
    "border": "#d7dde6",
    "tab_selected_bg": "#ffffff",
    "tab_active_bg": "#f1f5fb",
    "tab_idle_bg": "#e6ebf2",
    "tree_heading_bg": "#e9eef5",
    "card_value": "#0f3d5e",
}

EXCEL_FILL_COLORS = {
    "header": "D9E1F2",
    "summary": "EEEEEE",
}


# ============================================================================
# COLUMN CONFIGURATIONS
# ============================================================================
COLUMN_CONFIGS = {
    "trips": {
        "sl": {"width": 70, "anchor": "center", "header": "SL #"},
        "date": {"width": 120, "anchor": "center", "header": "Date"},
        "vehicle": {"width": 140, "anchor": "center", "header": "Vehicle"},
        "str": {"width": 110, "anchor": "center", "header": "STR"},
        "villages": {"width": 240, "anchor": "w", "header": "Villages"},
        "quantity": {"width": 90, "anchor": "center", "header": "Qty"},
        "driver": {"width": 180, "anchor": "center", "header": "Driver"},
        "initial": {"width": 120, "anchor": "center", "header": "Initial"},
        "additional": {"width": 120, "anchor": "center", "header": "Additional"},
        "total": {"width": 130, "anchor": "center", "header": "Total Advances"},
    },
    "trip_picker": {
        "sl": {"width": 70, "anchor": "center", "header": "SL #"},
        "date": {"width": 120, "anchor": "center", "header": "Date"},
        "str": {"width": 110, "anchor": "center", "header": "STR"},
        "villages": {"width": 240, "anchor": "w", "header": "Villages"},
        "quantity": {"width": 90, "anchor": "center", "header": "Qty"},
        "total": {"width": 130, "anchor": "center", "header": "Total Advances"},
    },
    "advances": {
        "created": {"width": 150, "anchor": "center", "header": "Recorded"},
        "vehicle": {"width": 140, "anchor": "center", "header": "Vehicle"},
        "type": {"width": 110, "anchor": "center", "header": "Type"},
        "amount": {"width": 120, "anchor": "center", "header": "Amount"},
        "trip_date": {"width": 120, "anchor": "center", "header": "Trip Date"},
        "note": {"width": 320, "anchor": "w", "header": "Note"},
    },
    "str_status": {
        "sl": {"width": 70, "anchor": "center", "header": "SL #"},
        "date": {"width": 120, "anchor": "center", "header": "Date"},
        "vehicle": {"width": 140, "anchor": "center", "header": "Vehicle"},
        "vehicle_type": {"width": 100, "anchor": "center", "header": "Type"},
        "str": {"width": 130, "anchor": "center", "header": "STR"},
        "status": {"width": 130, "anchor": "center", "header": "STR Status"},
        "driver": {"width": 180, "anchor": "center", "header": "Driver"},
    },
    "vehicles": {
        "vehicle": {"width": 150, "anchor": "center", "header": "Vehicle"},
        "driver": {"width": 200, "anchor": "center", "header": "Driver"},
        "mobile": {"width": 140, "anchor": "center", "header": "Mobile"},
        "vehicle_type": {"width": 100, "anchor": "center", "header": "Type"},
    },
    "villages": {
        "name": {"width": 220, "anchor": "w", "header": "Village"},
        "usage": {"width": 90, "anchor": "center", "header": "Used"},
        "last_used": {"width": 160, "anchor": "center", "header": "Last Used"},
    },
}


# ============================================================================
# EXPORT
# ============================================================================
CSV_HEADERS = [
    "SL Number",
    "Date",
    "Vehicle Number",
    "STR Number",
    "STR Status",
    "Villages",
    "Quantity",
    "Driver Name",
    "Mobile Number",
    "Vehicle Type",
    "Initial Advances Total",
    "Initial Advances Count",
    "Additional Advances Total",
    "Additional Advances Count",
    "Grand Total Advances",
    "Total Advance Records",
]
EXPORT_FILENAME_PREFIX = "SuhelRoadline_Report"
DISPLAY_DATE_FORMAT = "%b %d, %Y"
VILLAGE_EXPORT_SEPARATOR = "; "


# ============================================================================
# PDF REPORT STYLES
# ============================================================================
PDF_TEXT = {
    "title": "Suhel Roadline - Trip Report",
    "period_prefix": "Period:",
    "section_summary": "Summary",
    "section_trips": "Trips",
    "no_trips": "<i>No trips found for the selected filters.</i>",
    "synthetic_note": "* Initial advance taken from the trip entry (no separate advance record).",
    "footer_prefix": "Generated on",
}

PDF_FONTS = {
    "title_size": 18,
    "subtitle_size": 10,
    "table_header_size": 9,
    "table_body_size": 8,
    "footer_size": 8,
}

PDF_HEADERS = {
    "summary": ["Total Trips", "Total Advances", "Total Quantity", "Unique Vehicles", "Avg Advance / Trip"],
    "trips": ["SL", "Date", "Vehicle", "STR", "Villages", "Qty", "Initial", "Additional", "Total"],
}

PDF_COLORS = {
    "title": "#1a1a1a",
    "subtitle": "#666666",
    "header_bg": "#0f3d5e",
    "header_text": "#ffffff",
    "grid": "#d0d4d8",
    "summary_bg": "#f0f4f8",
    "row_alt": "#f7f8fa",
    "footer": "#808080",
}

PDF_LAYOUT = {
    "margin": 0.5,
    "trips_col_widths": [0.45, 0.95, 1.1, 0.8, 2.2, 0.55, 0.9, 0.9, 0.95],
    "section_spacer": 0.2,
}


# ============================================================================
# HELPER FUNCTION
# ============================================================================
def get_column_config(section: str) -> dict:
    """
    Get complete column configuration for a specific section.

    Args:
        section: Section name (e.g., "trips", "advances", "villages")

    Returns:
        Dictionary with column names and their configuration including headers
    """
    if section not in COLUMN_CONFIGS:
        raise ValueError(f"Unknown section: {section}")
    return {name: dict(cfg) for name, cfg in COLUMN_CONFIGS[section].items()}
