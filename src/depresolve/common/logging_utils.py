"""Centralized logging helpers.

Modules obtain loggers with ``logging.getLogger(__name__)``; this module only
configures the root handler and offers helpers for structured DEBUG traces.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

from depresolve.constants import Constants

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger once for CLI usage.

    Args:
        level: Level name; falls back to ``DEPRESOLVE_LOG_LEVEL`` then INFO.
        log_file: Optional file to log into instead of stderr.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    if level_name not in _LEVELS:
        level_name = "INFO"
    log_file = log_file or os.environ.get(Constants.ENV_LOG_FILE)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name, logging.INFO))


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records of ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` payload, dropping empty values.

    Common keys: event, component, action, outcome, target, duration_ms.
    """
    return {key: value for key, value in fields.items() if value is not None}


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> float:
        """Elapsed milliseconds, live while the block is still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return round((end - self._start) * 1000, 3)
