"""
HTTP plumbing for outbound API calls.

One ``requests.Session`` is shared by every caller. Its adapter retries
transient failures (connection resets, timeouts, 429/502/503/504) with
exponential backoff. Every request gets a default timeout and a
User-Agent naming this project.

APIs with a published request rate get a ``RateLimiter``; ``get_json`` ties
the two together::

    from flowering_phenology.services.http import RateLimiter, get_json

    limiter = RateLimiter(min_interval=1.1)
    payload = get_json("https://api.inaturalist.org/v1/taxa", {"q": name}, limiter=limiter)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from flowering_phenology import __version__

logger = logging.getLogger(__name__)

#: Retry strategy for read-only API calls.
DEFAULT_RETRY = Retry(
    total=4,
    backoff_factor=2,  # 0s, 2s, 4s, 8s
    status_forcelist=[429, 502, 503, 504],
    allowed_methods=["GET", "HEAD", "OPTIONS"],
    raise_on_status=False,  # callers see the final status via raise_for_status()
)

DEFAULT_TIMEOUT = 30  # seconds

USER_AGENT = f"flowering-phenology/{__version__} (python-requests)"


class RateLimiter:
    """Spaces successive calls at least ``min_interval`` seconds apart."""

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None

    def wait(self) -> float:
        """Block until the next call is allowed; returns the seconds slept."""
        slept = 0.0
        if self._last is not None:
            remaining = self.min_interval - (self._clock() - self._last)
            if remaining > 0:
                self._sleep(remaining)
                slept = remaining
        self._last = self._clock()
        return slept


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = USER_AGENT,
) -> requests.Session:
    """
    Build a ``requests.Session`` with the retry adapter mounted.

    Args:
        retry: Retry strategy (defaults to ``DEFAULT_RETRY``).
        timeout: Timeout applied to requests that don't pass their own.
        user_agent: Value for the User-Agent header.
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or DEFAULT_RETRY)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = user_agent

    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


#: Shared session for the whole process.
session: requests.Session = create_session()


def get_json(
    url: str,
    params: dict[str, Any] | None = None,
    *,
    limiter: RateLimiter | None = None,
    http: requests.Session | None = None,
) -> dict[str, Any]:
    """
    GET ``url`` and decode a JSON object body.

    Raises:
        requests.HTTPError: On an error status once retries are exhausted.
        requests.RequestException: On connection failures.
        ValueError: If the body is not a JSON object.
    """
    if limiter is not None:
        limiter.wait()
    resp = (http or session).get(url, params=params or {})
    resp.raise_for_status()
    logger.debug("GET %s -> %s", resp.url, resp.status_code)
    data = resp.json()
    if not isinstance(data, dict):
        msg = f"Expected a JSON object from {url}, got {type(data).__name__}"
        raise ValueError(msg)
    return data
