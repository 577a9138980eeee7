"""Shared fixtures: an in-memory stand-in for ``common.http_client.HttpClient``."""

from types import SimpleNamespace

import pytest

from common.errors import TransportError


class FakeHttp:
    """Routes GET requests to canned bodies.

    Each route is ``(url, body, match)``; ``match`` is an optional callable
    receiving the request params. The first matching route wins. Unmatched
    requests behave like a 404 (``None``). A body that is an exception
    instance is raised instead of returned.
    """

    def __init__(self):
        self.routes = []
        self.calls = []

    def add(self, url, body, match=None, status_code=200):
        self.routes.append((url, body, match, status_code))
        return self

    def _lookup(self, url, params):
        self.calls.append((url, dict(params or {})))
        for route_url, body, match, status_code in self.routes:
            if route_url != url:
                continue
            if match is not None and not match(params or {}):
                continue
            if isinstance(body, Exception):
                raise body
            return body, status_code
        return None, 404

    def urls(self):
        return [url for url, _ in self.calls]

    def get_json(self, url, *, context, headers=None, params=None):
        body, _ = self._lookup(url, params)
        return body

    def get_text(self, url, *, context, headers=None, params=None):
        body, _ = self._lookup(url, params)
        return body

    def get(self, url, *, context, headers=None, params=None):
        body, status_code = self._lookup(url, params)
        if body is None and status_code == 200:
            status_code = 404
        return SimpleNamespace(status_code=status_code, text=body if isinstance(body, str) else "")


@pytest.fixture
def fake_http():
    """Fresh FakeHttp for each test."""
    return FakeHttp()


@pytest.fixture
def transport_error():
    return TransportError("simulated outage", url="https://example.invalid/")
