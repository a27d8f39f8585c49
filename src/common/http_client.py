"""Shared HTTP helpers used by the remote repository implementation.

Encapsulates common request/timeout error handling so callers avoid
duplicating try/except blocks. There is no retry here: a failed request is
final for the resolution attempt that issued it.
"""
from __future__ import annotations

import logging
from typing import Any

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from maven.errors import TransportError

logger = logging.getLogger(__name__)


def safe_get(url: str, *, context: str, **kwargs: Any) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g. "maven").
        **kwargs: Passed through to requests.get.

    Returns:
        requests.Response: The HTTP response object, whatever its status.

    Raises:
        TransportError: the request timed out or the connection failed.
    """
    safe_target = safe_url(url)
    kwargs.setdefault("timeout", Constants.REQUEST_TIMEOUT)
    headers = {"User-Agent": Constants.USER_AGENT}
    headers.update(kwargs.pop("headers", None) or {})
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context
                )
            )
        try:
            res = requests.get(url, headers=headers, **kwargs)
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP response",
                    extra=extra_context(
                        event="http_response",
                        component="http_client",
                        action="GET",
                        status_code=res.status_code,
                        duration_ms=t.duration_ms(),
                        target=safe_target,
                        context=context
                    )
                )
            return res
        except requests.Timeout as exc:
            logger.error(
                "%s request to %s timed out after %s seconds",
                context,
                safe_target,
                kwargs["timeout"],
            )
            raise TransportError(f"Timed out fetching {safe_target}", url=safe_target) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error for %s: %s", context, safe_target, exc)
            raise TransportError(f"Connection error fetching {safe_target}: {exc}", url=safe_target) from exc
