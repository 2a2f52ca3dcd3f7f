"""Debug tracing utilities for the tag batch editor.

Enable tracing by calling setup_debug_logging(debug=True) at startup, which
sends output to the console. The DEBUG_PERF flag controls whether
performance timing is logged.

Usage:
    from .debug_trace import logger, perf_timer

    logger.debug("Staged %s", key)

    with perf_timer("preview_diff", row_count=len(paths)):
        compute_diff()
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Callable
from contextlib import contextmanager
from functools import wraps
from typing import Any

# Set to True to enable detailed timing logs
DEBUG_PERF = False

# Package logger; modules log through children of this one
logger = logging.getLogger("tagbatch")


def get_logger(name: str) -> logging.Logger:
    """Get a child of the package logger for a module."""
    if name.startswith("tagbatch"):
        return logging.getLogger(name)
    return logger.getChild(name)


def setup_debug_logging(debug: bool | None = None) -> None:
    """Configure logging for debug mode (console output).

    Call this once at startup. When debug is None, debug output is enabled
    only if a console is attached.
    """
    if logger.handlers:
        return

    if debug is None:
        debug = sys.stdout is not None and hasattr(sys.stdout, "write")

    if debug:
        logger.setLevel(logging.DEBUG)
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)
        formatter = logging.Formatter(
            "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    else:
        # In non-debug mode, only log warnings and above
        logger.setLevel(logging.WARNING)


@contextmanager
def perf_timer(operation: str, row_count: int | None = None):
    """Context manager for timing operations.

    Args:
        operation: Name of the operation being timed
        row_count: Optional row count for context
    """
    if not DEBUG_PERF:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        if row_count is not None:
            logger.debug(f"PERF: {operation} ({row_count} rows) took {elapsed_ms:.2f}ms")
        else:
            logger.debug(f"PERF: {operation} took {elapsed_ms:.2f}ms")


def log_perf(func: Callable) -> Callable:
    """Decorator to log function performance."""

    @wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        if not DEBUG_PERF:
            return func(*args, **kwargs)

        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.debug(f"PERF: {func.__qualname__} took {elapsed_ms:.2f}ms")

    return wrapper
