"""Tests for the shared HTTP client, rate limiter and JSON helper."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests
from urllib3.util.retry import Retry

from flowering_phenology.services.http import (
    DEFAULT_RETRY,
    DEFAULT_TIMEOUT,
    USER_AGENT,
    RateLimiter,
    create_session,
    get_json,
    session,
)


class TestDefaultRetry:
    """Verify retry strategy configuration."""

    def test_total_and_backoff(self) -> None:
        assert DEFAULT_RETRY.total == 4
        assert DEFAULT_RETRY.backoff_factor == 2

    def test_retries_on_rate_limit_and_server_errors(self) -> None:
        assert {429, 502, 503, 504} <= set(DEFAULT_RETRY.status_forcelist)

    def test_only_safe_methods(self) -> None:
        assert "GET" in DEFAULT_RETRY.allowed_methods
        assert "POST" not in DEFAULT_RETRY.allowed_methods


class TestCreateSession:
    """Verify session factory."""

    def test_adapters_carry_retry(self) -> None:
        s = create_session()
        for url in ("https://example.com", "http://example.com"):
            assert s.get_adapter(url).max_retries.total == 4

    def test_custom_retry(self) -> None:
        s = create_session(retry=Retry(total=10, backoff_factor=1))
        assert s.get_adapter("https://example.com").max_retries.total == 10

    def test_user_agent_header(self) -> None:
        assert create_session().headers["User-Agent"] == USER_AGENT
        assert "flowering-phenology" in USER_AGENT
        assert create_session(user_agent="probe/1.0").headers["User-Agent"] == "probe/1.0"

    def test_default_timeout_injected(self) -> None:
        s = create_session(timeout=42)
        prep = requests.Request("GET", "https://example.com").prepare()
        with patch.object(
            requests.adapters.HTTPAdapter, "send", return_value=requests.Response()
        ) as mock_send:
            s.send(prep)
            assert mock_send.call_args.kwargs.get("timeout") == 42

    def test_explicit_timeout_not_overridden(self) -> None:
        s = create_session(timeout=42)
        prep = requests.Request("GET", "https://example.com").prepare()
        with patch.object(
            requests.adapters.HTTPAdapter, "send", return_value=requests.Response()
        ) as mock_send:
            s.send(prep, timeout=99)
            assert mock_send.call_args.kwargs.get("timeout") == 99

    def test_module_session(self) -> None:
        assert session.get_adapter("https://example.com").max_retries.total == 4
        assert DEFAULT_TIMEOUT == 30


class TestRateLimiter:
    """Minimum spacing between calls."""

    def test_first_call_does_not_wait(self) -> None:
        sleep = MagicMock()
        limiter = RateLimiter(1.0, clock=lambda: 100.0, sleep=sleep)
        assert limiter.wait() == 0.0
        sleep.assert_not_called()

    def test_waits_out_the_interval(self) -> None:
        now = [100.0]
        sleep = MagicMock(side_effect=lambda s: now.__setitem__(0, now[0] + s))
        limiter = RateLimiter(1.1, clock=lambda: now[0], sleep=sleep)

        limiter.wait()
        now[0] += 0.4
        slept = limiter.wait()

        assert slept == pytest.approx(0.7)
        sleep.assert_called_once()

    def test_no_wait_after_long_gap(self) -> None:
        now = [100.0]
        sleep = MagicMock()
        limiter = RateLimiter(1.1, clock=lambda: now[0], sleep=sleep)
        limiter.wait()
        now[0] += 5
        assert limiter.wait() == 0.0
        sleep.assert_not_called()


class TestGetJson:
    """JSON GET helper."""

    def _response(self, payload: object, status: int = 200) -> MagicMock:
        resp = MagicMock()
        resp.status_code = status
        resp.url = "https://api.example.org/v1/taxa"
        resp.json.return_value = payload
        if status >= 400:
            resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
        return resp

    def test_returns_object(self) -> None:
        http = MagicMock()
        http.get.return_value = self._response({"results": []})
        assert get_json("https://api.example.org/v1/taxa", {"q": "x"}, http=http) == {
            "results": []
        }
        http.get.assert_called_once_with("https://api.example.org/v1/taxa", params={"q": "x"})

    def test_uses_limiter(self) -> None:
        http = MagicMock()
        http.get.return_value = self._response({})
        limiter = MagicMock()
        get_json("https://api.example.org/v1/taxa", limiter=limiter, http=http)
        limiter.wait.assert_called_once()

    def test_http_error_raised(self) -> None:
        http = MagicMock()
        http.get.return_value = self._response({}, status=503)
        with pytest.raises(requests.HTTPError):
            get_json("https://api.example.org/v1/taxa", http=http)

    def test_non_object_body_rejected(self) -> None:
        http = MagicMock()
        http.get.return_value = self._response([1, 2, 3])
        with pytest.raises(ValueError, match="JSON object"):
            get_json("https://api.example.org/v1/taxa", http=http)
