"""Logging helpers shared by the resolver, repositories and the CLI.

Provides a single ``configure_logging`` entry point plus the small helpers
used at call sites: structured ``extra`` payloads, a cheap DEBUG guard,
URL redaction and a duration timer.
"""
from __future__ import annotations

import json
import logging
import os
import time
import urllib.parse
from typing import Any, Dict, Optional

from constants import Constants

# Attributes present on every LogRecord; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render records as one JSON object per line, including extra context."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Install a root stream handler.

    Level and format default to the MVNRESOLVE_LOG_LEVEL and
    MVNRESOLVE_LOG_FORMAT environment variables ("human" or "json").
    Calling this twice replaces the handler installed by the first call.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    fmt_name = (fmt or os.environ.get(Constants.ENV_LOG_FORMAT) or "human").lower()

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_mvnresolve", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._mvnresolve = True  # type: ignore[attr-defined]
    if fmt_name == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name, logging.INFO))


def extra_context(**kwargs: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping, dropping keys whose value is None."""
    return {k: v for k, v in kwargs.items() if v is not None}


def is_debug_enabled(logger: logging.Logger) -> bool:
    return logger.isEnabledFor(logging.DEBUG)


def safe_url(url: str) -> str:
    """Strip userinfo and query string from a URL before it is logged."""
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return "<invalid-url>"
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    return urllib.parse.urlunsplit((parts.scheme, netloc, parts.path, "", ""))


class Timer:
    """Context manager measuring wall time in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
