"""
Debounced Breach Monitor
========================

Drives breach lookups from a stream of edits (e.g. a password field being
typed into). Each :meth:`BreachMonitor.submit` cancels the pending lookup,
waits out the debounce delay and then checks the newest value only.

A lookup that finishes after a newer submission is stale: its result is
dropped and never reaches :attr:`BreachMonitor.latest` or the callback.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from keysmith.breach.checker import BreachChecker
from keysmith.core.models import BreachResult
from shared.config import KeySmithConfig

ResultCallback = Callable[[BreachResult], None]


class BreachMonitor:
    """Debounces and serialises breach lookups for a changing password.

    Args:
        checker: Breach checker used for lookups. Not closed by the monitor.
        debounce: Quiet period in seconds before a lookup starts.
        on_result: Called with each fresh (non-stale) result.
    """

    def __init__(
        self,
        checker: BreachChecker,
        debounce: float = 0.8,
        on_result: Optional[ResultCallback] = None,
    ) -> None:
        self._checker = checker
        self._debounce = debounce
        self._on_result = on_result
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._latest: BreachResult | None = None

    @classmethod
    def from_config(
        cls,
        checker: BreachChecker,
        config: KeySmithConfig,
        on_result: Optional[ResultCallback] = None,
    ) -> BreachMonitor:
        """Monitor using ``[breach] debounce_seconds`` from *config*."""
        return cls(checker, debounce=config.breach.debounce_seconds, on_result=on_result)

    @property
    def debounce(self) -> float:
        return self._debounce

    @property
    def latest(self) -> BreachResult | None:
        return self._latest

    @property
    def generation(self) -> int:
        return self._generation

    def submit(self, password: str) -> asyncio.Task:
        """Schedule a lookup for *password*, superseding any pending one.

        Must be called from a running event loop. An empty password only
        cancels the pending lookup and clears :attr:`latest`.
        """
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()

        if not password:
            self._latest = None
            self._task = asyncio.get_running_loop().create_task(asyncio.sleep(0))
            return self._task

        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation, password)
        )
        return self._task

    async def _run(self, generation: int, password: str) -> None:
        await asyncio.sleep(self._debounce)
        result = await self._checker.check(password)

        if generation != self._generation:
            self._checker.logger.debug(
                "Discarding stale breach result",
                generation=generation,
                current=self._generation,
            )
            return

        self._latest = result
        if self._on_result is not None:
            self._on_result(result)

    async def wait(self) -> BreachResult | None:
        """Wait for the pending lookup (if any) and return :attr:`latest`."""
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                if not self._task.cancelled():
                    raise
        return self._latest

    async def aclose(self) -> None:
        """Cancel the pending lookup."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
