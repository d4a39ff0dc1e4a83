"""
Centralized logging configuration for Suhel Roadline - Trip & Advance Ledger.

Log streams, each written to its own rotating file inside ``log/``:
    1. Exception log   - log/exceptions.log  - failures with full tracebacks
    2. UX Action log   - log/ux_actions.log  - every user-initiated action
    3. Trace log       - log/trace.log       - entry/exit/timing of ``@trace`` functions

The ``roadline_app`` logger is kept for modules that only need a plain
module-level logger (storage backends, error handler).

Usage
-----
    from core.app_logging import setup_all_loggers, trace, log_ux_action

    setup_all_loggers()          # once, in roadline.py

    @trace
    def reconcile_trip_advances(trip, fetcher):
        ...
"""

from __future__ import annotations

import functools
import logging
import logging.handlers
import os
import sys
import time
from typing import Any, Callable, Optional, TypeVar

from core.config import LOG_DIR

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), LOG_DIR)

_MAX_BYTES = 5 * 1024 * 1024  # 5 MB per file
_BACKUP_COUNT = 5

EXCEPTION_LOGGER_NAME = "roadline.exception"
UX_ACTION_LOGGER_NAME = "roadline.ux_action"
TRACE_LOGGER_NAME = "roadline.trace"
APP_LOGGER_NAME = "roadline_app"

_REPR_LIMIT = 120
_ARGS_LIMIT = 500
_RESULT_LIMIT = 200

F = TypeVar("F", bound=Callable[..., Any])

# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------

_EXCEPTION_FMT = logging.Formatter(
    "[%(asctime)s] %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

_UX_ACTION_FMT = logging.Formatter(
    "[%(asctime)s] %(levelname)-8s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

_TRACE_FMT = logging.Formatter(
    "[%(asctime)s.%(msecs)03d] %(levelname)-8s | %(threadName)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

_CONSOLE_FMT = logging.Formatter(
    "[%(asctime)s] %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _rotating_handler(log_dir: str, filename: str, formatter: logging.Formatter, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, filename),
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_CONSOLE_FMT)
    return handler


def _reset_logger(name: str) -> logging.Logger:
    """Return the named logger with every previous handler closed and removed."""
    logger = logging.getLogger(name)
    for handler in logger.handlers[:]:
        try:
            handler.close()
        except OSError:
            pass
        logger.removeHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger


def _short_repr(value: Any, limit: int = _REPR_LIMIT) -> str:
    text = repr(value)
    if len(text) > limit:
        text = text[: limit - 3] + "..."
    return text


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def setup_all_loggers(log_dir: Optional[str] = None, console: bool = True) -> str:
    """
    Initialize all application loggers.  Call once at startup.

    Args:
        log_dir: Override for the log directory (tests pass a temp dir).
        console: Echo errors to stderr as well as the files.

    Returns:
        The directory the log files are written to.
    """
    target = log_dir or _LOG_DIR
    os.makedirs(target, exist_ok=True)

    exc_log = _reset_logger(EXCEPTION_LOGGER_NAME)
    exc_log.addHandler(_rotating_handler(target, "exceptions.log", _EXCEPTION_FMT, logging.WARNING))

    ux_log = _reset_logger(UX_ACTION_LOGGER_NAME)
    ux_log.addHandler(_rotating_handler(target, "ux_actions.log", _UX_ACTION_FMT, logging.INFO))

    trace_log = _reset_logger(TRACE_LOGGER_NAME)
    trace_log.addHandler(_rotating_handler(target, "trace.log", _TRACE_FMT, logging.DEBUG))

    app_log = _reset_logger(APP_LOGGER_NAME)
    app_log.addHandler(_rotating_handler(target, "exceptions.log", _EXCEPTION_FMT, logging.WARNING))

    if console:
        exc_log.addHandler(_console_handler(logging.ERROR))
        app_log.addHandler(_console_handler(logging.WARNING))
    return target


def get_exception_logger() -> logging.Logger:
    return logging.getLogger(EXCEPTION_LOGGER_NAME)


def get_ux_logger() -> logging.Logger:
    return logging.getLogger(UX_ACTION_LOGGER_NAME)


def get_trace_logger() -> logging.Logger:
    return logging.getLogger(TRACE_LOGGER_NAME)


def get_app_logger() -> logging.Logger:
    return logging.getLogger(APP_LOGGER_NAME)


# ---------------------------------------------------------------------------
# UX-action logging helpers
# ---------------------------------------------------------------------------

def log_ux_action(action_name: str, details: str = "", user_context: str = "") -> None:
    """
    Log a user-initiated action to the UX action log.

    Args:
        action_name: Short verb phrase, e.g. "Add Trip", "Add Advance".
        details: Free-form detail string.
        user_context: Optional extra context (e.g. trip id, vehicle number).
    """
    parts = [f"ACTION={action_name}"]
    if user_context:
        parts.append(f"CTX={user_context}")
    if details:
        parts.append(f"DETAILS={details}")
    get_ux_logger().info(" | ".join(parts))


def log_ux_action_result(action_name: str, success: bool, details: str = "") -> None:
    """Log the outcome of an action previously passed to ``log_ux_action``."""
    msg = f"RESULT={'SUCCESS' if success else 'FAILURE'} | ACTION={action_name}"
    if details:
        msg += f" | DETAILS={details}"
    ux = get_ux_logger()
    if success:
        ux.info(msg)
    else:
        ux.warning(msg)


def log_exception(action: str, exc: BaseException, context: str = "") -> None:
    """Log an exception with full traceback to the exception log."""
    msg = f"EXCEPTION in {action}: {exc}"
    if context:
        msg += f" | CTX={context}"
    get_exception_logger().error(msg, exc_info=(type(exc), exc, exc.__traceback__))


# ---------------------------------------------------------------------------
# Trace decorator
# ---------------------------------------------------------------------------

def trace(func: F) -> F:
    """
    Decorator that logs entry and exit with arguments and duration.

    Produces trace entries like::

        [2026-03-02 10:00:00.123] DEBUG | MainThread | ENTER create_trip(<SQLiteStorage>, {...})
        [2026-03-02 10:00:00.131] DEBUG | MainThread | EXIT  create_trip -> TripEntry(id='12', ...)  [0.0080s]
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        tlog = get_trace_logger()
        name = func.__qualname__
        if tlog.isEnabledFor(logging.DEBUG):
            arg_parts = [_short_repr(a) for a in args]
            arg_parts.extend(f"{k}={_short_repr(v)}" for k, v in kwargs.items())
            arg_str = ", ".join(arg_parts)
            if len(arg_str) > _ARGS_LIMIT:
                arg_str = arg_str[: _ARGS_LIMIT - 3] + "..."
            tlog.debug("ENTER %s(%s)", name, arg_str)
        t0 = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            tlog.debug("RAISE %s -> %s: %s  [%.4fs]", name, type(exc).__name__, exc, time.perf_counter() - t0)
            raise
        tlog.debug("EXIT  %s -> %s  [%.4fs]", name, _short_repr(result, _RESULT_LIMIT), time.perf_counter() - t0)
        return result

    return wrapper  # type: ignore

