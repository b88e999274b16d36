"""Shared HTTP helpers used by the transport.

Wraps ``requests`` with the resolver's timeout, user agent and DEBUG traces.
Network exceptions are left to the caller, which owns the retry policy.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from mavenfetch.constants import Constants
from mavenfetch.common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

# Identity encoding keeps Content-Length comparable with the bytes written.
DEFAULT_HEADERS = {"User-Agent": Constants.USER_AGENT, "Accept": "*/*", "Accept-Encoding": "identity"}


def _headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    merged = dict(DEFAULT_HEADERS)
    if headers:
        merged.update(headers)
    return merged


def probe(url: str, *, headers: Optional[Dict[str, str]] = None, **kwargs: Any) -> int:
    """Return the HTTP status of ``url`` without downloading its body.

    Uses HEAD and falls back to a streamed GET for servers that refuse HEAD.
    """
    safe_target = safe_url(url)
    with Timer() as t:
        res = requests.head(
            url,
            timeout=Constants.REQUEST_TIMEOUT,
            headers=_headers(headers),
            allow_redirects=True,
            **kwargs,
        )
        status = res.status_code
        if status in (405, 501):
            res = requests.get(
                url,
                timeout=Constants.REQUEST_TIMEOUT,
                headers=_headers(headers),
                stream=True,
                **kwargs,
            )
            try:
                status = res.status_code
            finally:
                res.close()
    if is_debug_enabled(logger):
        logger.debug(
            "HTTP probe",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action="HEAD",
                status_code=status,
                duration_ms=t.duration_ms(),
                target=safe_target,
            ),
        )
    return status


def open_stream(url: str, *, headers: Optional[Dict[str, str]] = None, **kwargs: Any) -> requests.Response:
    """Start a streamed GET; the caller must close the returned response."""
    if is_debug_enabled(logger):
        logger.debug(
            "HTTP request",
            extra=extra_context(
                event="http_request",
                component="http_client",
                action="GET",
                target=safe_url(url),
            ),
        )
    return requests.get(
        url,
        timeout=Constants.REQUEST_TIMEOUT,
        headers=_headers(headers),
        stream=True,
        **kwargs,
    )


def content_length(response: requests.Response) -> Optional[int]:
    """Parse the Content-Length header, ignoring absent or malformed values."""
    value = response.headers.get("Content-Length")
    if value is None:
        return None
    value = str(value).strip()
    if not value.isdigit():
        return None
    return int(value)
