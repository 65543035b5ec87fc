"""Rate-limited HTTP client for SEC EDGAR."""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from typing import Any, Callable, TypeVar

import requests

from .exceptions import BadStatusError, ConfigurationError, DecodeError, TransportError
from .gate import Clock, Gate
from .session import build_request_headers, create_session

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Slightly less than 10 requests per second, the hard limit documented at
# https://www.sec.gov/about/privacy-information#security
DEFAULT_THROTTLE_SECONDS = 0.105

# EDGAR is suspected to use a token bucket over a ~10 minute window and to ban
# the IP when it is overdrawn. These are conservative guesses, not documented
# limits.
FETCHES_BEFORE_SLEEP = 80
GLOBAL_SLEEP_SECONDS = 12 * 60.0

MAX_REQUESTS_PER_SECOND = 10


def throttle_duration(requests_per_second: int) -> float:
    """Return the pacing period for ``requests_per_second`` in ``[1, 10]``."""
    if requests_per_second < 1:
        raise ConfigurationError("requests_per_second must be in [1, 10]")
    if requests_per_second > MAX_REQUESTS_PER_SECOND:
        raise ConfigurationError(
            "requests_per_second above 10 is not allowed by the SEC guidelines"
        )
    if requests_per_second == MAX_REQUESTS_PER_SECOND:
        # 10 rps is a hard limit, pad it against clock inaccuracies.
        return DEFAULT_THROTTLE_SECONDS
    return 1.0 / requests_per_second


class EdgarClient:
    """Perform paced GET requests against EDGAR and decode their bodies.

    Two gates guard every request: a pacing gate with a single slot per
    throttle period and a volume gate bounding the number of fetches per
    suspected upstream window. A request counts against both gates even when
    it fails.
    """

    def __init__(
        self,
        user_agent: str,
        requests_per_second: int = MAX_REQUESTS_PER_SECOND,
        *,
        session: requests.Session | None = None,
        clock: Clock | None = None,
        fetches_before_sleep: int = FETCHES_BEFORE_SLEEP,
        global_sleep: float = GLOBAL_SLEEP_SECONDS,
        timeout: float = 60,
    ) -> None:
        if not user_agent or not user_agent.strip():
            raise ConfigurationError("A user agent is required to query EDGAR")
        try:
            pacing = Gate(throttle_duration(requests_per_second), 1, clock)
            volume = Gate(global_sleep, fetches_before_sleep, clock)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        self.user_agent = user_agent
        self.requests_per_second = requests_per_second
        self.pacing = pacing
        self.volume = volume
        self.timeout = timeout
        self.headers = build_request_headers(user_agent)
        self.session = session or create_session(user_agent)

    @property
    def remaining_fetches_before_sleep(self) -> int:
        """Fetches left in the current volume window."""
        return self.volume.remaining

    def sleep(self) -> None:
        """Wait out the volume window so the full quota is available again."""
        logger.info(
            "Sleeping %.0fs until the fetch limit resets", self.volume.period
        )
        self.volume.force_wait()
        # The volume period is longer than the pacing one.
        self.pacing.reset()

    def _throttle(self) -> None:
        if self.volume.remaining == 0:
            logger.info(
                "Fetch limit of %d reached, sleeping %.0fs",
                self.volume.capacity,
                self.volume.period,
            )
        if self.volume.try_advance():
            self.pacing.reset()
        self.pacing.try_advance()

    def get(self, url: str) -> bytes:
        """
        Fetch ``url`` and return the response body.

        Args:
            url: Absolute EDGAR URL

        Returns:
            The (decompressed) response body

        Raises:
            BadStatusError: EDGAR answered outside 200-299, redirects included
            TransportError: No response was received
        """
        self._throttle()
        logger.debug("GET %s", url)
        try:
            response = self.session.get(
                url, headers=self.headers, timeout=self.timeout, allow_redirects=False
            )
        except requests.RequestException as exc:
            raise TransportError(f"Error fetching {url}: {exc}", url) from exc

        if not 200 <= response.status_code < 300:
            raise BadStatusError(url, response.status_code)
        return response.content

    def get_json(self, url: str, into: Callable[[Any], T] | None = None) -> Any:
        """Fetch ``url`` and decode it as JSON, optionally mapped with ``into``."""
        body = self.get(url)
        try:
            payload = json.loads(body)
            return into(payload) if into is not None else payload
        except (ValueError, KeyError, TypeError, IndexError) as exc:
            raise DecodeError(f"Invalid JSON document: {exc}", url) from exc

    def get_xml(self, url: str, into: Callable[[ET.Element], T] | None = None) -> Any:
        """Fetch ``url`` and decode it as XML, optionally mapped with ``into``."""
        body = self.get(url)
        try:
            root = ET.fromstring(body)
            return into(root) if into is not None else root
        except (ET.ParseError, ValueError, KeyError, TypeError, IndexError) as exc:
            raise DecodeError(f"Invalid XML document: {exc}", url) from exc

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "EdgarClient":
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()
