"""Tests for the shared HTTP client with retry logic."""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest
import requests
from urllib3.util.retry import Retry

from occurrence_hotspots.services.http import (
    DEFAULT_RETRY,
    DEFAULT_TIMEOUT,
    create_session,
    get_json,
    session,
)


class TestDefaultRetry:
    """Verify retry strategy configuration."""

    def test_retries_on_server_errors(self) -> None:
        for status in (502, 503, 504):
            assert status in DEFAULT_RETRY.status_forcelist

    def test_retries_on_rate_limit(self) -> None:
        assert 429 in DEFAULT_RETRY.status_forcelist

    def test_only_safe_methods(self) -> None:
        allowed = DEFAULT_RETRY.allowed_methods
        assert "GET" in allowed
        assert "POST" not in allowed

    def test_does_not_raise_on_status(self) -> None:
        assert DEFAULT_RETRY.raise_on_status is False


class TestCreateSession:
    """Verify session factory."""

    def test_adapter_has_retry(self) -> None:
        s = create_session()
        adapter = s.get_adapter("https://api.gbif.org")
        assert adapter.max_retries.total == DEFAULT_RETRY.total

    def test_custom_retry(self) -> None:
        s = create_session(retry=Retry(total=10, backoff_factor=1))
        assert s.get_adapter("https://example.com").max_retries.total == 10

    def test_headers(self) -> None:
        s = create_session()
        assert "occurrence-hotspots" in s.headers["User-Agent"]
        assert s.headers["Accept"] == "application/json"

    def test_default_timeout_injected(self) -> None:
        s = create_session(timeout=42)
        prep = requests.Request("GET", "https://example.com").prepare()
        with patch.object(
            requests.adapters.HTTPAdapter, "send", return_value=requests.Response()
        ) as mock_send:
            s.send(prep)
            _, kwargs = mock_send.call_args
            assert kwargs.get("timeout") == 42

    def test_none_timeout_replaced(self) -> None:
        """Session.request passes timeout=None explicitly; it must still get the default."""
        s = create_session(timeout=42)
        prep = requests.Request("GET", "https://example.com").prepare()
        with patch.object(
            requests.adapters.HTTPAdapter, "send", return_value=requests.Response()
        ) as mock_send:
            s.send(prep, timeout=None)
            _, kwargs = mock_send.call_args
            assert kwargs.get("timeout") == 42

    def test_explicit_timeout_not_overridden(self) -> None:
        s = create_session(timeout=42)
        prep = requests.Request("GET", "https://example.com").prepare()
        with patch.object(
            requests.adapters.HTTPAdapter, "send", return_value=requests.Response()
        ) as mock_send:
            s.send(prep, timeout=99)
            _, kwargs = mock_send.call_args
            assert kwargs.get("timeout") == 99


class TestGetJson:
    """Verify the JSON GET helper."""

    @patch("occurrence_hotspots.services.http.session.get")
    def test_returns_decoded_body(self, mock_get: Mock) -> None:
        mock_get.return_value.json.return_value = {"count": 3}
        assert get_json("https://api.gbif.org/v1/x", {"a": 1}) == {"count": 3}
        mock_get.assert_called_once_with("https://api.gbif.org/v1/x", params={"a": 1})

    @patch("occurrence_hotspots.services.http.session.get")
    def test_raises_http_error(self, mock_get: Mock) -> None:
        mock_get.return_value.raise_for_status.side_effect = requests.HTTPError("500")
        with pytest.raises(requests.HTTPError):
            get_json("https://api.gbif.org/v1/x")


class TestModuleSession:
    """Verify the module-level singleton."""

    def test_session_is_configured(self) -> None:
        adapter = session.get_adapter("https://example.com")
        assert adapter.max_retries.total == DEFAULT_RETRY.total

    def test_default_timeout(self) -> None:
        assert DEFAULT_TIMEOUT == 60
