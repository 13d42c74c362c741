"""
Random Source Provider
======================

Produces uniform floats in ``[0, 1)`` from one of three sources and picks
elements of a sequence with them. Every generator draws exclusively via
:func:`next_uniform` / :func:`choice`, so switching sources never touches
generator code.

Sources:
    - ``crypto``: 32 bits from :mod:`secrets` (OS CSPRNG), divided by 2**32.
    - ``pseudo``: module-level :class:`random.Random`; seed it with
      :func:`seed_pseudo_random` for reproducible output.
    - ``mixed``: :class:`EntropyMixer` folds timer jitter and caller-fed
      event timings into a 32-byte pool, then whitens it with SHA-256
      together with 32 fresh CSPRNG bytes.

References:
    - NIST SP 800-90A Rev. 1 (2015). Recommendation for Random Number
      Generation Using Deterministic Random Bit Generators.
    - Python ``secrets`` module. https://docs.python.org/3/library/secrets.html
"""

from __future__ import annotations

import hashlib
import math
import random
import secrets
import threading
import time
from types import MappingProxyType
from typing import Any, Callable, Sequence, TypeVar

from keysmith.core.models import RandomSource

T = TypeVar("T")

_TWO_32 = float(2 ** 32)


# ===================================================================== #
#  Entropy Mixer
# ===================================================================== #


class EntropyMixer:
    """Timing-jitter pool whitened with CSPRNG bytes.

    The pool is never used directly as output: every draw is
    ``SHA-256(pool || counter || token_bytes(32))``.
    """

    POOL_SIZE: int = 32

    def __init__(self) -> None:
        self._pool = bytearray(self.POOL_SIZE)
        self._cursor = 0
        self._counter = 0
        self._lock = threading.Lock()

    def feed(self, value: int | float) -> None:
        """Mix an external timing sample (e.g. a keystroke timestamp)."""
        sample = int(value * 1000) if isinstance(value, float) else int(value)
        with self._lock:
            self._fold(sample)

    def _fold(self, sample: int) -> None:
        for byte in (sample & 0xFFFF_FFFF_FFFF_FFFF).to_bytes(8, "little"):
            self._pool[self._cursor] ^= byte
            self._cursor = (self._cursor + 1) % self.POOL_SIZE

    def _sample_jitter(self) -> None:
        self._fold(time.perf_counter_ns() ^ time.time_ns())

    def next_uniform(self) -> float:
        with self._lock:
            self._sample_jitter()
            self._counter += 1
            digest = hashlib.sha256(
                bytes(self._pool)
                + self._counter.to_bytes(8, "little")
                + secrets.token_bytes(32)
            ).digest()
        return int.from_bytes(digest[:4], "big") / _TWO_32


# ===================================================================== #
#  Backends
# ===================================================================== #


_pseudo = random.Random()
_mixer = EntropyMixer()


def _crypto_uniform() -> float:
    return secrets.randbits(32) / _TWO_32


def _pseudo_uniform() -> float:
    return _pseudo.random()


def _mixed_uniform() -> float:
    return _mixer.next_uniform()


_BACKENDS: MappingProxyType[RandomSource, Callable[[], float]] = MappingProxyType(
    {
        RandomSource.CRYPTO: _crypto_uniform,
        RandomSource.PSEUDO: _pseudo_uniform,
        RandomSource.MIXED: _mixed_uniform,
    }
)


# ===================================================================== #
#  Public API
# ===================================================================== #


def next_uniform(source: RandomSource | str = RandomSource.CRYPTO) -> float:
    """Return a uniform float in ``[0, 1)`` from *source*."""
    return _BACKENDS[RandomSource(source)]()


def choice(seq: Sequence[T], source: RandomSource | str = RandomSource.CRYPTO) -> T:
    """Pick one element of *seq* with a draw from *source*.

    Raises:
        ValueError: If *seq* is empty.
    """
    if not seq:
        raise ValueError("Cannot choose from an empty sequence")
    n = len(seq)
    return seq[min(math.floor(next_uniform(source) * n), n - 1)]


def random_bytes(count: int, source: RandomSource | str = RandomSource.CRYPTO) -> bytes:
    """Draw *count* bytes, one ``next_uniform`` call per byte."""
    return bytes(
        min(math.floor(next_uniform(source) * 256), 255) for _ in range(count)
    )


def seed_pseudo_random(seed: Any) -> None:
    """Seed the ``pseudo`` source for reproducible output."""
    _pseudo.seed(seed)


def feed_entropy(value: int | float) -> None:
    """Feed an input-event timing sample into the ``mixed`` source."""
    _mixer.feed(value)


def describe_sources() -> list[dict[str, Any]]:
    """Display metadata for every source, recommended one first."""
    return [
        {
            "source": src.value,
            "label": src.label,
            "description": src.description,
            "is_secure": src.is_secure,
            "recommended": src.recommended,
        }
        for src in sorted(RandomSource, key=lambda s: not s.recommended)
    ]
