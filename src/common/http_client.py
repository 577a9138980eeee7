"""Shared HTTP capability used across registry and repository clients.

Encapsulates common request/timeout error handling so modules avoid
duplicating try/except blocks. An ``HttpClient`` is passed explicitly to
every client so tests can substitute it instead of patching ``requests``.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests

from constants import Constants
from common.errors import TransportError
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


class HttpClient:
    """Thin wrapper around ``requests.Session`` with uniform error mapping.

    404 responses are reported as ``None`` by the ``get_json``/``get_text``
    helpers; every other failure (timeouts, connection errors, non-2xx
    statuses, undecodable bodies) raises ``TransportError``.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        default_headers: Optional[Dict[str, str]] = None,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else Constants.REQUEST_TIMEOUT
        self.user_agent = user_agent or Constants.USER_AGENT
        self.default_headers = dict(default_headers or {})

    def _headers(self, headers: Optional[Dict[str, str]]) -> Dict[str, str]:
        merged = {"User-Agent": self.user_agent}
        merged.update(self.default_headers)
        if headers:
            merged.update(headers)
        return merged

    def get(
        self,
        url: str,
        *,
        context: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """Perform a GET request, mapping network failures to TransportError."""
        safe_target = safe_url(url)
        with Timer() as t:
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request",
                    extra=extra_context(
                        event="http_request",
                        component="http_client",
                        action="GET",
                        target=safe_target,
                        context=context,
                    ),
                )
            try:
                res = self.session.get(
                    url,
                    headers=self._headers(headers),
                    params=params,
                    timeout=self.timeout,
                )
            except requests.Timeout as exc:
                logger.warning(
                    "%s request timed out after %s seconds", context, self.timeout
                )
                raise TransportError(
                    f"{context} request to {safe_target} timed out after {self.timeout} seconds",
                    url=safe_target,
                ) from exc
            except requests.RequestException as exc:  # includes ConnectionError
                logger.warning("%s connection error: %s", context, exc)
                raise TransportError(
                    f"{context} request to {safe_target} failed: {exc}",
                    url=safe_target,
                ) from exc
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
                        context=context,
                    ),
                )
            return res

    def _checked(self, res: requests.Response, url: str, context: str) -> Optional[requests.Response]:
        """Return None for 404, the response for 2xx, raise otherwise."""
        if res.status_code == 404:
            return None
        if not 200 <= res.status_code < 300:
            raise TransportError(
                f"{context} request to {safe_url(url)} failed with HTTP {res.status_code}",
                url=safe_url(url),
                status_code=res.status_code,
            )
        return res

    def get_json(
        self,
        url: str,
        *,
        context: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Optional[Any]:
        """GET ``url`` and decode its JSON body; ``None`` when the server says 404."""
        merged = {"Accept": "application/json"}
        merged.update(headers or {})
        res = self._checked(self.get(url, context=context, headers=merged, params=params), url, context)
        if res is None:
            return None
        try:
            return json.loads(res.text)
        except (json.JSONDecodeError, TypeError) as exc:
            raise TransportError(
                f"{context} response from {safe_url(url)} is not valid JSON",
                url=safe_url(url),
                status_code=res.status_code,
            ) from exc

    def get_text(
        self,
        url: str,
        *,
        context: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        """GET ``url`` and return its body text; ``None`` when the server says 404."""
        res = self._checked(self.get(url, context=context, headers=headers, params=params), url, context)
        if res is None:
            return None
        return res.text
