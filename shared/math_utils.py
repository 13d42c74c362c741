"""
KeySmith Mathematical Utilities
===============================

Numeric helpers behind the random-source quality tests. Everything works
on raw byte samples drawn from a :class:`keysmith.core.models.RandomSource`
and is vectorised with NumPy where the sample size matters.

References:
    [1] Shannon, C. E. (1948). A Mathematical Theory of Communication.
        Bell System Technical Journal, 27(3), 379-423.
    [2] Pearson, K. (1900). On the Criterion that a Given System of
        Deviations ... Philosophical Magazine, 50(302), 157-175.
    [3] Press, W. H. et al. (2007). Numerical Recipes (3rd ed.).
        Cambridge University Press, Section 6.2.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

FloatArray = NDArray[np.floating]
IntArray = NDArray[np.integer]

_EPS = 1e-15
_FPMIN = 1e-300
_MAX_ITER = 500


# ========================== Sample Shaping =================================


def frequency_distribution(data: bytes) -> FloatArray:
    """256-bin histogram of byte values as float counts."""
    if not data:
        return np.zeros(256, dtype=np.float64)
    sample = np.frombuffer(data, dtype=np.uint8)
    return np.bincount(sample, minlength=256).astype(np.float64)


def bytes_to_bits(data: bytes) -> IntArray:
    """Unpack bytes into a 0/1 array, most significant bit first."""
    return np.unpackbits(np.frombuffer(data, dtype=np.uint8)).astype(np.int64)


def shannon_entropy(data: bytes) -> float:
    """Shannon entropy of *data* in bits per byte (0.0 to 8.0).

    .. math::

        H = -\\sum_{i=0}^{255} p_i \\, \\log_2(p_i)
    """
    if not data:
        return 0.0
    counts = frequency_distribution(data)
    probs = counts[counts > 0] / len(data)
    return float(-(probs * np.log2(probs)).sum()) + 0.0


# ======================== Statistical Tests ================================


def chi_squared_test(
    observed: FloatArray, expected: FloatArray
) -> tuple[float, float]:
    """Pearson goodness-of-fit statistic and its upper-tail p-value.

    With ``k`` bins the statistic is compared against a chi-squared
    distribution with ``k - 1`` degrees of freedom; the tail probability
    is ``Q((k-1)/2, chi2/2)``.

    Raises:
        ValueError: If the arrays differ in shape or *expected* has a
            non-positive bin.
    """
    obs = np.asarray(observed, dtype=np.float64)
    exp = np.asarray(expected, dtype=np.float64)

    if obs.shape != exp.shape:
        raise ValueError("Array shapes must match")
    if (exp <= 0).any():
        raise ValueError("Expected values must be > 0")

    statistic = float(((obs - exp) ** 2 / exp).sum())
    dof = obs.size - 1
    if dof < 1:
        return statistic, 1.0
    return statistic, upper_inc_gamma_reg(0.5 * dof, 0.5 * statistic)


def normal_cdf(x: float) -> float:
    """Standard normal CDF via the complementary error function."""
    return 0.5 * math.erfc(-x / math.sqrt(2.0))


# ----------------- Regularised incomplete gamma -----------------------------


def upper_inc_gamma_reg(a: float, x: float) -> float:
    """Regularised upper incomplete gamma ``Q(a, x)``.

    Uses the power series of ``P(a, x)`` below ``x = a + 1`` and the
    continued fraction for ``Q`` above it, whichever converges faster.
    """
    if a <= 0.0 or x <= 0.0:
        return 1.0
    if x < a + 1.0:
        return max(0.0, 1.0 - _lower_series(a, x))
    return _upper_fraction(a, x)


def _prefactor(a: float, x: float) -> float:
    return math.exp(a * math.log(x) - x - math.lgamma(a))


def _lower_series(a: float, x: float) -> float:
    term = total = 1.0 / a
    denom = a
    for _ in range(_MAX_ITER):
        denom += 1.0
        term *= x / denom
        total += term
        if abs(term) < abs(total) * _EPS:
            break
    return total * _prefactor(a, x)


def _upper_fraction(a: float, x: float) -> float:
    # Modified Lentz evaluation
    b = x + 1.0 - a
    c = 1.0 / _FPMIN
    d = 1.0 / b
    h = d
    for n in range(1, _MAX_ITER):
        an = n * (a - n)
        b += 2.0
        d = b + an * d
        d = 1.0 / (d if abs(d) >= _FPMIN else _FPMIN)
        c = b + an / c
        if abs(c) < _FPMIN:
            c = _FPMIN
        step = d * c
        h *= step
        if abs(step - 1.0) < _EPS:
            break
    return h * _prefactor(a, x)
