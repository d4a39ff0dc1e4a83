from __future__ import annotations

import ctypes
import sys
from datetime import datetime

from core.app_logging import get_app_logger, log_ux_action
from core.config import HISTORY_LOG_FILE


logger = get_app_logger()


def log_action(event_type: str, details: str, history_file: str = HISTORY_LOG_FILE) -> None:
    """Append immutable action to history log file and UX action log."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    log_ux_action(event_type, details=details)
    try:
        with open(history_file, "a", encoding="utf-8") as file_handle:
            file_handle.write(f"[{timestamp}] {event_type} | {details}\n")
    except OSError as e:
        logger.error(f"Failed to write to history log file: {e}", exc_info=True)


def enable_windows_dpi_awareness() -> None:
    if not sys.platform.startswith("win"):
        return
    try:
        ctypes.windll.shcore.SetProcessDpiAwareness(2)
    except (AttributeError, OSError) as e:
        logger.debug(f"SetProcessDpiAwareness failed, trying SetProcessDPIAware: {e}")
        try:
            ctypes.windll.user32.SetProcessDPIAware()
        except (AttributeError, OSError) as e2:
            logger.debug(f"SetProcessDPIAware also failed: {e2}")
