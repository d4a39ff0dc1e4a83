"""
Centralized error handling for UI actions.

Decorators and helpers that catch unhandled exceptions raised by button
handlers and background callbacks, log them, and show a readable error
dialog instead of letting tkinter print a traceback and carry on silently.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from tkinter import messagebox

from core.app_logging import APP_LOGGER_NAME, log_ux_action_result
from data.storage import StorageUnavailableError

logger = logging.getLogger(APP_LOGGER_NAME)

F = TypeVar("F", bound=Callable[..., Any])

_MAX_MESSAGE_LENGTH = 500


def _report_failure(action: str, exc: Exception, show_error_dialog: bool, log_full_traceback: bool) -> None:
    logger.error(f"Error in {action}: {exc}", exc_info=log_full_traceback)
    log_ux_action_result(action, False, str(exc))
    if not show_error_dialog:
        return
    try:
        messagebox.showerror(f"Error: {action}", _format_error_message(action, str(exc), exc))
    except Exception as dialog_exc:
        # Tk may already be torn down during shutdown.
        logger.exception(f"Failed to show error dialog: {dialog_exc}")


def safe_ui_action(
    action_name: str = "",
    show_error_dialog: bool = True,
    log_full_traceback: bool = True,
) -> Callable[[F], F]:
    """
    Run a button handler so a failure becomes a logged error dialog.

    Args:
        action_name: Title used in the dialog and the UX log; defaults to the
                     function name.
        show_error_dialog: Set False for background refreshes that should fail quietly.
        log_full_traceback: Attach the traceback to the app log entry.

    Example:
        @safe_ui_action("Add Advance")
        def add_advance_action(app, storage, ...):
            ...
    """
    return safe_ui_action_returning(
        action_name,
        return_on_error=None,
        show_error_dialog=show_error_dialog,
        log_full_traceback=log_full_traceback,
    )


def safe_ui_action_returning(
    action_name: str = "",
    return_on_error: Any = False,
    show_error_dialog: bool = True,
    log_full_traceback: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for UI actions that return a value.

    Same as ``safe_ui_action`` but ``return_on_error`` is handed back to the
    caller when the wrapped function raises.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            action = action_name or func.__name__
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                raise
            except Exception as exc:
                _report_failure(action, exc, show_error_dialog, log_full_traceback)
                return return_on_error

        return wrapper  # type: ignore

    return decorator


def wrap_action_with_error_handling(
    func: Callable[..., Any],
    action_name: str = "",
    show_error_dialog: bool = True,
) -> Callable[..., Any]:
    """
    Non-decorator form of ``safe_ui_action``, for ``after()`` callbacks and lambdas bound to widgets.
    """
    return safe_ui_action(action_name or getattr(func, "__name__", "action"), show_error_dialog)(func)


def _format_error_message(action: str, error_msg: str, exc: Exception) -> str:
    """
    Dialog text for a failed action.

    Validation failures (``ValueError``) are shown as-is; an unreachable
    store gets a hint about the local fallback.
    """
    if len(error_msg) > _MAX_MESSAGE_LENGTH:
        error_msg = error_msg[: _MAX_MESSAGE_LENGTH - 3] + "..."

    if isinstance(exc, ValueError):
        return error_msg

    lines = [f"The following error occurred while {action}:", "", error_msg, ""]
    if isinstance(exc, StorageUnavailableError):
        lines.append("The data store could not be reached. Restart the app to use local storage.")
    else:
        lines.append("Please try again or contact support if the problem persists.")
    return "\n".join(lines)


__all__ = [
    "safe_ui_action",
    "safe_ui_action_returning",
    "wrap_action_with_error_handling",
]
