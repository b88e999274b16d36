"""Logging helpers shared by the resolver modules.

Modules log through ``logging.getLogger(__name__)`` and attach structured
fields with ``extra=extra_context(...)``. Nothing here touches the root logger
unless ``configure_logging`` is called explicitly by the host application.
"""
from __future__ import annotations

import logging
import time
import urllib.parse
from typing import Any, Dict, Optional

from mavenfetch.constants import Constants

# Attributes owned by logging.LogRecord; passing them through ``extra`` raises.
_RESERVED_RECORD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records.

    ``None`` values are dropped and keys that collide with ``LogRecord``
    attributes are prefixed with ``ctx_``.
    """
    context: Dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            continue
        if key in _RESERVED_RECORD_KEYS:
            key = f"ctx_{key}"
        context[key] = value
    return context


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


def safe_url(url: Optional[str]) -> str:
    """Strip credentials, query and fragment from a URL before logging it."""
    if not url:
        return ""
    parsed = urllib.parse.urlsplit(url)
    netloc = parsed.hostname or ""
    if parsed.port:
        netloc = f"{netloc}:{parsed.port}"
    return urllib.parse.urlunsplit((parsed.scheme, netloc, parsed.path, "", ""))


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.monotonic()
        self._end = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.monotonic()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.monotonic()
        return int((end - self._start) * 1000)


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Install a single handler on the ``mavenfetch`` logger.

    Args:
        level: Logging level name, e.g. "DEBUG".
        log_file: Optional path; logs go to stderr when omitted.
    """
    package_logger = logging.getLogger("mavenfetch")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
