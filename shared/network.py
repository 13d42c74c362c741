"""
KeySmith Async Network Client
=============================

httpx-based client for KeySmith's single outbound dependency, the
k-anonymity range API. Requests are guarded three ways:

- bounded retries with exponential backoff and full jitter on transport
  errors and 429/5xx responses;
- a consecutive-failure circuit breaker, so a dead endpoint fails fast;
- an in-memory TTL cache of response bodies, never written to disk.

Every failure surfaces as :class:`KeySmithHTTPError`.

References:
    - Nygard, M. T. (2018). Release It! 2nd ed. Chapter 5: Stability
      Patterns (Circuit Breaker).
    - AWS Architecture Blog (2015). Exponential Backoff and Jitter.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

logger = logging.getLogger("keysmith.network")


class KeySmithHTTPError(Exception):
    """Transport failure, timeout, error status or open-circuit rejection."""


# ========================== Circuit Breaker ================================


class CircuitState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


@dataclass
class CircuitBreaker:
    """Opens after *failure_threshold* consecutive failures.

    While OPEN every request is refused until *recovery_timeout* seconds
    have passed since the last failure; the breaker then goes HALF_OPEN
    and lets traffic through until the next success or failure decides.
    """

    failure_threshold: int = 5
    recovery_timeout: float = 30.0
    state: CircuitState = CircuitState.CLOSED
    fail_count: int = 0
    last_failure_time: float = 0.0

    def record_success(self) -> None:
        self.state = CircuitState.CLOSED
        self.fail_count = 0

    def record_failure(self) -> None:
        self.fail_count += 1
        self.last_failure_time = time.monotonic()
        if self.state is not CircuitState.OPEN and self.fail_count >= self.failure_threshold:
            self.state = CircuitState.OPEN
            logger.warning("Circuit breaker OPEN after %d failures", self.fail_count)

    def allow_request(self) -> bool:
        if self.state is not CircuitState.OPEN:
            return True
        if time.monotonic() - self.last_failure_time < self.recovery_timeout:
            return False
        self.state = CircuitState.HALF_OPEN
        logger.info("Circuit breaker HALF_OPEN, probing upstream")
        return True


# ========================== Response Cache =================================


@dataclass
class ResponseCache:
    """Response bodies keyed by ``(METHOD, url)`` with per-entry expiry.

    Range lookups only ever put the 5-character hash prefix in the URL,
    so the cache never holds anything derived from a full digest.
    """

    default_ttl: float = 300.0
    _store: dict[tuple[str, str], tuple[float, Any]] = field(
        default_factory=dict, repr=False
    )

    def get(self, method: str, url: str) -> Any | None:
        key = (method.upper(), url)
        hit = self._store.get(key)
        if hit is None:
            return None
        expires_at, data = hit
        if time.monotonic() > expires_at:
            del self._store[key]
            return None
        return data

    def put(self, method: str, url: str, data: Any, ttl: float | None = None) -> None:
        """Store *data*; a non-positive TTL means do not cache."""
        lifetime = self.default_ttl if ttl is None else ttl
        if lifetime > 0:
            self._store[(method.upper(), url)] = (time.monotonic() + lifetime, data)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


# ========================== HTTP Client ====================================


class KeySmithHTTP:
    """Async client wrapping :class:`httpx.AsyncClient`.

    Usage::

        async with KeySmithHTTP(base_url="https://api.pwnedpasswords.com") as http:
            body = await http.fetch_text("/range/5BAA6")

    Args:
        base_url:               Prefix for relative request paths.
        timeout:                Per-request timeout in seconds.
        max_retries:            Extra attempts after the first one.
        backoff_base:           First backoff ceiling in seconds; doubles per attempt.
        backoff_max:            Upper bound on any single backoff ceiling.
        cache_ttl:              Body cache lifetime; 0 disables caching.
        cb_failure_threshold:   Consecutive failures that open the circuit.
        cb_recovery_timeout:    Seconds the circuit stays open.
        headers:                Extra default headers.
        user_agent:             ``User-Agent`` sent with every request.
        transport:              Custom httpx transport, e.g. ``MockTransport``.
    """

    RETRYABLE_STATUS: frozenset[int] = frozenset({429, 500, 502, 503, 504})

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout: float = 10.0,
        max_retries: int = 2,
        backoff_base: float = 0.5,
        backoff_max: float = 8.0,
        cache_ttl: float = 300.0,
        cb_failure_threshold: int = 5,
        cb_recovery_timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        user_agent: str = "KeySmith/1.0 (password-strength)",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._max_retries = max(0, max_retries)
        self._backoff_base = backoff_base
        self._backoff_max = backoff_max
        self._cache = ResponseCache(default_ttl=cache_ttl)
        self._breaker = CircuitBreaker(
            failure_threshold=cb_failure_threshold,
            recovery_timeout=cb_recovery_timeout,
        )
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": user_agent, **(headers or {})},
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> KeySmithHTTP:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._breaker

    # ------------------------------------------------------------------ #
    #  Requests
    # ------------------------------------------------------------------ #

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one logical request and return the 2xx response.

        Raises:
            KeySmithHTTPError: Circuit open, retries exhausted (transport
                errors, redirect loops, bad content encoding, 429/5xx), or
                a non-retryable error status.
        """
        if not self._breaker.allow_request():
            raise KeySmithHTTPError(f"Circuit breaker OPEN -- requests to {url} are blocked")

        attempts = self._max_retries + 1
        method = method.upper()
        for attempt in range(1, attempts + 1):
            try:
                response = await self._client.request(method, url, headers=headers)
            except httpx.HTTPError as exc:
                # Transport failures, redirect loops and undecodable bodies
                logger.warning(
                    "%s on %s %s (attempt %d/%d): %s",
                    type(exc).__name__, method, url, attempt, attempts, exc,
                )
                failure: Exception = exc
            else:
                if response.status_code not in self.RETRYABLE_STATUS:
                    if response.is_success:
                        self._breaker.record_success()
                        return response
                    self._breaker.record_failure()
                    raise KeySmithHTTPError(f"HTTP {response.status_code} from {url}")
                logger.warning(
                    "HTTP %d on %s %s (attempt %d/%d)",
                    response.status_code, method, url, attempt, attempts,
                )
                failure = KeySmithHTTPError(f"HTTP {response.status_code} from {url}")

            if attempt < attempts:
                await self._backoff(attempt)

        self._breaker.record_failure()
        raise KeySmithHTTPError(f"All {attempts} attempts failed for {url}") from failure

    async def fetch_text(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        use_cache: bool = True,
        cache_ttl: float | None = None,
    ) -> str:
        """GET *url* and return the body text, serving repeats from cache."""
        if use_cache:
            cached = self._cache.get("GET", url)
            if cached is not None:
                logger.debug("Cache HIT for GET %s", url)
                return cached

        response = await self.fetch(url, headers=headers)
        try:
            body = response.text
        except (httpx.HTTPError, UnicodeDecodeError) as exc:
            self._breaker.record_failure()
            raise KeySmithHTTPError(f"Undecodable body from {url}: {exc}") from exc
        if use_cache:
            self._cache.put("GET", url, body, cache_ttl)
        return body

    async def _backoff(self, attempt: int) -> None:
        # Full jitter: U(0, min(max, base * 2**(attempt-1)))
        ceiling = min(self._backoff_max, self._backoff_base * 2 ** (attempt - 1))
        delay = random.uniform(0.0, ceiling)
        logger.debug("Backing off %.2fs before attempt %d", delay, attempt + 1)
        await asyncio.sleep(delay)
