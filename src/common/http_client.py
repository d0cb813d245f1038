"""Shared HTTP helpers used by the registry clients.

Encapsulates common request/timeout error handling so modules avoid
duplicating try/except blocks. Transport failures are turned into
``RegistryConnectionError`` so that callers can decide whether to retry.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from registry.errors import RegistryConnectionError

logger = logging.getLogger(__name__)


def new_session(token: Optional[str] = None) -> requests.Session:
    """Create a requests session carrying the default headers.

    Args:
        token: Optional API token sent verbatim in the Authorization header.

    Returns:
        requests.Session: Configured session.
    """
    session = requests.Session()
    session.headers.update(
        {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": Constants.USER_AGENT,
        }
    )
    if token:
        session.headers["Authorization"] = token
    return session


def safe_post(
    session: requests.Session,
    url: str,
    *,
    context: str,
    payload: Optional[Dict[str, Any]] = None,
    **kwargs: Any,
) -> requests.Response:
    """Perform a POST request with consistent error handling and DEBUG traces.

    Args:
        session: Session used to send the request.
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "graphql").
        payload: Optional JSON body.
        **kwargs: Passed through to session.post.

    Returns:
        requests.Response: The HTTP response object.

    Raises:
        RegistryConnectionError: On timeouts and connection failures.
    """
    safe_target = safe_url(url)
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="POST",
                    target=safe_target,
                    context=context,
                ),
            )
        try:
            res = session.post(url, json=payload, timeout=Constants.REQUEST_TIMEOUT, **kwargs)
        except requests.Timeout as exc:
            logger.warning(
                "%s request timed out after %s seconds",
                context,
                Constants.REQUEST_TIMEOUT,
            )
            raise RegistryConnectionError(
                f"{context} request to {safe_target} timed out"
            ) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.warning("%s connection error: %s", context, exc)
            raise RegistryConnectionError(
                f"{context} request to {safe_target} failed: {exc}"
            ) from exc

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="POST",
                    outcome="success" if res.status_code < 400 else "http_error",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context,
                ),
            )
        return res
