"""Tests for HttpClient error mapping."""

from unittest.mock import MagicMock

import pytest
import requests

from common.errors import TransportError
from common.http_client import HttpClient


def make_response(status_code=200, text=""):
    res = MagicMock()
    res.status_code = status_code
    res.text = text
    return res


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


class TestHttpClient:
    """404 means absent; every other failure is a TransportError."""

    def test_get_json_success(self, session):
        session.get.return_value = make_response(200, '{"ok": true}')
        assert HttpClient(session=session).get_json("https://x.test/a", context="test") == {"ok": True}

    def test_get_json_404_is_none(self, session):
        session.get.return_value = make_response(404)
        assert HttpClient(session=session).get_json("https://x.test/a", context="test") is None

    def test_get_text_404_is_none(self, session):
        session.get.return_value = make_response(404)
        assert HttpClient(session=session).get_text("https://x.test/a.pom", context="test") is None

    def test_server_error(self, session):
        session.get.return_value = make_response(500, "boom")
        with pytest.raises(TransportError) as exc_info:
            HttpClient(session=session).get_json("https://x.test/a", context="test")
        assert exc_info.value.status_code == 500

    def test_invalid_json(self, session):
        session.get.return_value = make_response(200, "<html>")
        with pytest.raises(TransportError, match="not valid JSON"):
            HttpClient(session=session).get_json("https://x.test/a", context="test")

    def test_timeout(self, session):
        session.get.side_effect = requests.Timeout("slow")
        with pytest.raises(TransportError, match="timed out"):
            HttpClient(session=session, timeout=2).get_text("https://x.test/a", context="test")

    def test_connection_error(self, session):
        session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(TransportError):
            HttpClient(session=session).get("https://x.test/a", context="test")

    def test_headers_and_timeout_sent(self, session):
        session.get.return_value = make_response(200, "{}")
        client = HttpClient(session=session, timeout=7, user_agent="ua/1", default_headers={"X-Default": "1"})
        client.get_json("https://x.test/a", context="test", headers={"X-Extra": "2"}, params={"q": "v"})
        _, kwargs = session.get.call_args
        assert kwargs["timeout"] == 7
        assert kwargs["params"] == {"q": "v"}
        assert kwargs["headers"]["User-Agent"] == "ua/1"
        assert kwargs["headers"]["X-Default"] == "1"
        assert kwargs["headers"]["X-Extra"] == "2"
        assert kwargs["headers"]["Accept"] == "application/json"

    def test_credentials_not_in_error(self, session):
        session.get.return_value = make_response(503)
        with pytest.raises(TransportError) as exc_info:
            HttpClient(session=session).get_text("https://user:pw@x.test/a?token=abc", context="test")
        assert "pw" not in str(exc_info.value)
        assert "abc" not in str(exc_info.value)
