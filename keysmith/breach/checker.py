"""
k-Anonymity Breach Checker
==========================

Looks a password up in a breached-password corpus without disclosing it.

Procedure:
    1. ``H = SHA-1(password)`` as 40 uppercase hex characters.
    2. ``GET {api_url}/range/{H[:5]}`` with ``Add-Padding: true`` so the
       response size does not reveal the prefix.
    3. Scan the ``SUFFIX:COUNT`` lines for ``H[5:]``. Padding lines carry a
       count of 0 and never count as a match.

Only the 5-character prefix leaves the process. Any failure (transport,
non-2xx, open circuit, unparsable body) is logged and degrades to an
unverified "not breached" result, so ``is_breached=False`` is not proof of
safety unless ``verified`` is also true.

References:
    - Hunt, T. (2018). Pwned Passwords V2, k-Anonymity model.
    - Ali, J. (2018). Validating Leaked Passwords with k-Anonymity.
      Cloudflare Blog.
"""

from __future__ import annotations

import hashlib
from typing import Any

import httpx

from keysmith.core.models import BreachResult
from shared.config import BreachConfig
from shared.logger import KeySmithLogger
from shared.network import KeySmithHTTP, KeySmithHTTPError

PREFIX_LENGTH = 5


def sha1_split(password: str) -> tuple[str, str]:
    """Uppercase SHA-1 hex digest of *password* split into (prefix, suffix).

    Lone surrogates (undecodable argv bytes under ``surrogateescape``) are
    hashed as-is rather than rejected.
    """
    digest = hashlib.sha1(password.encode("utf-8", "surrogatepass")).hexdigest().upper()
    return digest[:PREFIX_LENGTH], digest[PREFIX_LENGTH:]


def parse_range_response(body: str, suffix: str) -> int:
    """Occurrence count for *suffix* in a range response body (0 if absent).

    Raises:
        ValueError: If the matching line's count is not an integer.
    """
    wanted = suffix.upper()
    for line in body.splitlines():
        candidate, sep, count = line.strip().partition(":")
        if sep and candidate.strip().upper() == wanted:
            return int(count.strip())
    return 0


class BreachChecker:
    """Async breach lookup against a Pwned-Passwords-compatible range API.

    Usage::

        async with BreachChecker() as checker:
            result = await checker.check(password)
            if result.is_breached:
                print(f"Seen {result.occurrences} times")

    Args:
        config: Breach settings (endpoint, timeouts, retries, cache TTL).
        logger: Structured logger; a ``breach`` logger is created if omitted.
        transport: Optional httpx transport, used by tests to mock the API.
    """

    def __init__(
        self,
        config: BreachConfig | None = None,
        *,
        logger: KeySmithLogger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or BreachConfig()
        self.logger = logger or KeySmithLogger("breach")
        self._http = KeySmithHTTP(
            base_url=self.config.api_url,
            timeout=self.config.timeout,
            max_retries=self.config.max_retries,
            backoff_base=self.config.backoff_base,
            cache_ttl=self.config.cache_ttl,
            user_agent=self.config.user_agent,
            transport=transport,
        )

    async def __aenter__(self) -> BreachChecker:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.close()

    @property
    def http(self) -> KeySmithHTTP:
        return self._http

    async def check(self, password: str) -> BreachResult:
        """Look *password* up; never raises for network or parse failures."""
        prefix, suffix = sha1_split(password)
        headers = {"Add-Padding": "true"} if self.config.add_padding else None

        with self.logger.operation("range_lookup"):
            try:
                body = await self._http.fetch_text(f"/range/{prefix}", headers=headers)
                occurrences = parse_range_response(body, suffix)
            except (KeySmithHTTPError, httpx.HTTPError, ValueError) as exc:
                self.logger.warning(
                    "Breach lookup failed; result unverified: %s", exc, prefix=prefix
                )
                return BreachResult(is_breached=False, occurrences=0, verified=False)

            self.logger.debug(
                "Range lookup complete", prefix=prefix, breached=occurrences > 0
            )

        return BreachResult(
            is_breached=occurrences > 0, occurrences=occurrences, verified=True
        )


async def check_breach(
    password: str,
    config: BreachConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BreachResult:
    """One-shot lookup with a short-lived :class:`BreachChecker`."""
    async with BreachChecker(config, transport=transport) as checker:
        return await checker.check(password)
