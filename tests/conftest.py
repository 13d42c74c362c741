"""Shared fixtures for the KeySmith test suite."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from shared.config import BreachConfig, KeySmithConfig
from keysmith.generators.random_source import seed_pseudo_random


@pytest.fixture
def breach_config() -> BreachConfig:
    """Breach settings with no retries and no backoff delay."""
    return BreachConfig(max_retries=0, backoff_base=0.0, cache_ttl=300.0)


@pytest.fixture
def fast_config(breach_config: BreachConfig) -> KeySmithConfig:
    config = KeySmithConfig()
    config.breach = breach_config
    return config


@pytest.fixture
def range_transport() -> Callable[..., tuple[httpx.MockTransport, list[httpx.Request]]]:
    """Factory for a mock range API returning *body* with *status*.

    Returns the transport and the list that records every request.
    """

    def factory(body: str = "", status: int = 200):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(status, text=body)

        return httpx.MockTransport(handler), seen

    return factory


@pytest.fixture
def seeded_pseudo() -> None:
    seed_pseudo_random(1234)
