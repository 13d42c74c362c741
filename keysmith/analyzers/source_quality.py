"""
Random Source Quality Tester
============================

Draws a byte sample from a :class:`RandomSource` and runs four
statistical tests on it at significance level alpha = 0.01:

    1. Frequency (Monobit) Test -- proportion of ones (SP 800-22, 2.1)
    2. Runs Test -- number of bit transitions (SP 800-22, 2.3)
    3. Cumulative Sums Test -- forward random-walk excursion (SP 800-22, 2.13)
    4. Byte Uniformity -- Pearson chi-squared over 256 byte values

Statistical tests detect bias, not predictability. A seeded Mersenne
Twister passes all four, so the report always carries the source's own
``is_secure`` flag next to the verdict.

References:
    - NIST SP 800-22 Rev. 1a (2010). A Statistical Test Suite for
      Random and Pseudorandom Number Generators for Cryptographic
      Applications.
    - Knuth, D. E. (1997). The Art of Computer Programming, Volume 2:
      Seminumerical Algorithms (3rd ed.), Section 3.3.1.
"""

from __future__ import annotations

import math

import numpy as np

from keysmith.core.models import RandomSource, SourceQualityReport, SourceTestResult
from keysmith.generators.random_source import random_bytes
from shared.math_utils import (
    bytes_to_bits,
    chi_squared_test,
    frequency_distribution,
    normal_cdf,
    shannon_entropy,
)


class SourceQualityTester:
    """Runs the statistical quality suite against a random source.

    Usage::

        report = SourceQualityTester().run(RandomSource.CRYPTO)
        for test in report.tests:
            print(test.test_name, f"{test.p_value:.4f}", test.passed)
    """

    # Significance level (alpha) for every test
    ALPHA: float = 0.01

    # Below this many bytes the byte-uniformity expectation (n / 256) is < 5
    MIN_BYTES: int = 1280

    def run(
        self,
        source: RandomSource = RandomSource.CRYPTO,
        sample_bytes: int = 4096,
    ) -> SourceQualityReport:
        """Sample *sample_bytes* bytes from *source* and test them."""
        return self.evaluate(random_bytes(sample_bytes, source), source)

    def evaluate(self, data: bytes, source: RandomSource) -> SourceQualityReport:
        """Test an already drawn sample attributed to *source*."""
        if len(data) < self.MIN_BYTES:
            return SourceQualityReport(
                source=source,
                sample_bytes=len(data),
                is_secure=source.is_secure,
                assessment=(
                    f"Insufficient data ({len(data)} bytes). "
                    f"Minimum {self.MIN_BYTES} bytes required."
                ),
            )

        bits = bytes_to_bits(data)
        tests = [
            self._frequency_test(bits),
            self._runs_test(bits),
            self._cumulative_sums_test(bits),
            self._byte_uniformity_test(data),
        ]
        failed = sum(1 for t in tests if not t.passed)

        if failed:
            assessment = f"{failed} of {len(tests)} tests failed; output looks biased."
        elif source.is_secure:
            assessment = f"All {len(tests)} tests passed."
        else:
            assessment = (
                f"All {len(tests)} tests passed, but this source is predictable "
                "and must not be used for secrets."
            )

        return SourceQualityReport(
            source=source,
            sample_bytes=len(data),
            bits_per_byte=shannon_entropy(data),
            tests=tests,
            overall_pass=failed == 0,
            is_secure=source.is_secure,
            assessment=assessment,
        )

    # ------------------------------------------------------------------ #
    #  Test 1: Frequency (Monobit)
    # ------------------------------------------------------------------ #

    def _frequency_test(self, bits: np.ndarray) -> SourceTestResult:
        """SP 800-22 Section 2.1.

        ``S_obs = |sum(2*bit - 1)| / sqrt(n)``, ``p = erfc(S_obs / sqrt(2))``.
        """
        n = bits.size
        s_n = int(np.sum(2 * bits - 1))
        s_obs = abs(s_n) / math.sqrt(n)
        p_value = math.erfc(s_obs / math.sqrt(2.0))

        return SourceTestResult(
            test_name="Frequency (Monobit)",
            p_value=p_value,
            passed=p_value >= self.ALPHA,
            statistic=s_obs,
            description=f"Proportion of ones. S_n = {s_n}, S_obs = {s_obs:.4f}.",
        )

    # ------------------------------------------------------------------ #
    #  Test 2: Runs
    # ------------------------------------------------------------------ #

    def _runs_test(self, bits: np.ndarray) -> SourceTestResult:
        """SP 800-22 Section 2.3.

        Not applicable (reported as failed) when ``|pi - 0.5| >= 2/sqrt(n)``.
        """
        n = bits.size
        pi = float(np.mean(bits))
        tau = 2.0 / math.sqrt(n)

        if abs(pi - 0.5) >= tau:
            return SourceTestResult(
                test_name="Runs",
                p_value=0.0,
                passed=False,
                description=(
                    f"Pre-test failed: |pi - 0.5| = {abs(pi - 0.5):.4f} >= tau = {tau:.4f}."
                ),
            )

        v_obs = 1 + int(np.count_nonzero(bits[1:] != bits[:-1]))
        numerator = abs(v_obs - 2.0 * n * pi * (1.0 - pi))
        denominator = 2.0 * math.sqrt(2.0 * n) * pi * (1.0 - pi)
        p_value = math.erfc(numerator / denominator) if denominator else 0.0

        return SourceTestResult(
            test_name="Runs",
            p_value=p_value,
            passed=p_value >= self.ALPHA,
            statistic=float(v_obs),
            description=f"Bit transitions. V_obs = {v_obs}, pi = {pi:.4f}.",
        )

    # ------------------------------------------------------------------ #
    #  Test 3: Cumulative Sums (forward)
    # ------------------------------------------------------------------ #

    def _cumulative_sums_test(self, bits: np.ndarray) -> SourceTestResult:
        """SP 800-22 Section 2.13, forward mode.

        ``z = max |S_k|`` over the partial sums of the +/-1 walk; the
        p-value comes from the maximum of a Brownian bridge.
        """
        n = bits.size
        z = int(np.max(np.abs(np.cumsum(2 * bits - 1))))

        if z == 0:
            p_value = 1.0
        else:
            sqrt_n = math.sqrt(n)
            sum1 = sum(
                normal_cdf((4 * k + 1) * z / sqrt_n) - normal_cdf((4 * k - 1) * z / sqrt_n)
                for k in range(math.floor((-n / z + 1) / 4), math.floor((n / z - 1) / 4) + 1)
            )
            sum2 = sum(
                normal_cdf((4 * k + 3) * z / sqrt_n) - normal_cdf((4 * k + 1) * z / sqrt_n)
                for k in range(math.floor((-n / z - 3) / 4), math.floor((n / z - 1) / 4) + 1)
            )
            p_value = max(0.0, min(1.0, 1.0 - sum1 + sum2))

        return SourceTestResult(
            test_name="Cumulative Sums",
            p_value=p_value,
            passed=p_value >= self.ALPHA,
            statistic=float(z),
            description=f"Maximum random-walk excursion z = {z} over n = {n} bits.",
        )

    # ------------------------------------------------------------------ #
    #  Test 4: Byte Uniformity
    # ------------------------------------------------------------------ #

    def _byte_uniformity_test(self, data: bytes) -> SourceTestResult:
        """Pearson chi-squared of the byte histogram against uniform (255 dof)."""
        observed = frequency_distribution(data)
        expected = np.full(256, len(data) / 256.0)
        chi2, p_value = chi_squared_test(observed, expected)

        return SourceTestResult(
            test_name="Byte Uniformity",
            p_value=p_value,
            passed=p_value >= self.ALPHA,
            statistic=chi2,
            description=f"Chi-squared = {chi2:.2f} over 256 byte values.",
        )
