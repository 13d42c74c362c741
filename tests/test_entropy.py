"""
Tests for the entropy estimator, crack-time formatting and the keyboard
pattern detector.
"""

from __future__ import annotations

import math

import pytest

from keysmith.analyzers.entropy import (
    EntropyEstimator,
    estimate_crack_times,
    find_common_base,
    format_duration,
    has_sequential_run,
)
from keysmith.analyzers.patterns import analyze_patterns, are_adjacent, pattern_feedback
from keysmith.core.models import StrengthLabel

SAMPLES = (
    "a",
    "aaaaaaaa",
    "password",
    "qwerty123",
    "abcabcabc",
    "Tr0ub4dor&3xQ9",
    "correct horse battery staple",
    "zxcvbnm,./",
    "!!!!!!!!!!!!!!!!!!!!!!!!",
)

# =============================================================================
# Entropy Estimator
# =============================================================================


class TestEntropyEstimator:
    @pytest.fixture
    def estimator(self) -> EntropyEstimator:
        return EntropyEstimator()

    @pytest.mark.parametrize("password", SAMPLES)
    def test_bounds(self, estimator: EntropyEstimator, password: str) -> None:
        detail = estimator.estimate(password)
        assert detail.entropy >= 0
        assert detail.effective_length >= 0.5 * len(password)
        assert 0 <= detail.complexity_score <= 100

    @pytest.mark.parametrize("password", SAMPLES)
    def test_idempotent(self, estimator: EntropyEstimator, password: str) -> None:
        assert estimator.estimate(password) == estimator.estimate(password)

    def test_entropy_identity(self, estimator: EntropyEstimator) -> None:
        detail = estimator.estimate("qwerty123")
        expected = max(
            0.0,
            detail.base_entropy
            + detail.length_bonus
            + detail.uniqueness_bonus
            - detail.pattern_penalty,
        )
        assert detail.entropy == pytest.approx(expected)

    def test_empty_password(self, estimator: EntropyEstimator) -> None:
        detail = estimator.estimate("")
        assert detail.entropy == 0
        assert detail.effective_length == 0
        assert detail.penalties == []

    def test_length_bonus_monotone(self) -> None:
        bonuses = [EntropyEstimator.length_bonus(n) for n in range(0, 100)]
        assert all(a <= b for a, b in zip(bonuses, bonuses[1:]))
        assert EntropyEstimator.length_bonus(12) == 24
        assert EntropyEstimator.length_bonus(20) == 32

    def test_password_is_very_weak(self, estimator: EntropyEstimator) -> None:
        detail = estimator.estimate("password")
        assert detail.entropy < 30
        assert "common_base:password" in detail.penalties
        assert StrengthLabel.from_entropy(detail.entropy) in (
            StrengthLabel.VERY_WEAK,
            StrengthLabel.WEAK,
        )

    def test_strong_password_has_no_penalties(self, estimator: EntropyEstimator) -> None:
        detail = estimator.estimate("Tr0ub4dor&3xQ9")
        assert detail.penalties == []
        assert detail.pattern_penalty == 0
        assert StrengthLabel.from_entropy(detail.entropy) in (
            StrengthLabel.STRONG,
            StrengthLabel.VERY_STRONG,
        )

    def test_penalty_flags(self, estimator: EntropyEstimator) -> None:
        detail = estimator.estimate("asdfxyz111")
        assert {"keyboard_row", "sequential", "repeated"} <= set(detail.penalties)
        assert detail.pattern_penalty == 8 + 6 + 4

    def test_longest_common_base_wins(self) -> None:
        assert find_common_base("MyPassword1") == "password"
        assert find_common_base("xadminx") == "admin"
        assert find_common_base("k7#Vq") is None

    @pytest.mark.parametrize(
        "password, expected",
        [("abc", True), ("XYZ", True), ("789", True), ("ab9", False), ("cba", False), ("z01", False)],
    )
    def test_sequential_run(self, password: str, expected: bool) -> None:
        assert has_sequential_run(password) is expected


# =============================================================================
# Labels and Crack Times
# =============================================================================


class TestLabelsAndCrackTimes:
    @pytest.mark.parametrize(
        "bits, label",
        [
            (0, StrengthLabel.VERY_WEAK),
            (27.9, StrengthLabel.VERY_WEAK),
            (28, StrengthLabel.WEAK),
            (36, StrengthLabel.MODERATE),
            (60, StrengthLabel.STRONG),
            (128, StrengthLabel.VERY_STRONG),
        ],
    )
    def test_label_thresholds(self, bits: float, label: StrengthLabel) -> None:
        assert StrengthLabel.from_entropy(bits) is label

    @pytest.mark.parametrize(
        "seconds, text",
        [
            (0.5, "instant"),
            (30, "30 seconds"),
            (120, "2 minutes"),
            (7_200, "2 hours"),
            (172_800, "2 days"),
            (5_184_000, "2 months"),
            (63_072_000, "2 years"),
            (1e12, "centuries"),
            (math.inf, "centuries"),
        ],
    )
    def test_format_duration(self, seconds: float, text: str) -> None:
        assert format_duration(seconds) == text

    def test_crack_times_cover_every_tier(self) -> None:
        estimates = estimate_crack_times(40)
        assert len(estimates) == 5
        speeds = [e.guesses_per_second for e in estimates]
        assert speeds == sorted(speeds)
        times = [e.seconds for e in estimates]
        assert times == sorted(times, reverse=True)

    def test_overflowing_keyspace(self) -> None:
        estimates = estimate_crack_times(5000)
        assert all(math.isinf(e.seconds) for e in estimates)
        assert all(e.display == "centuries" for e in estimates)


# =============================================================================
# Keyboard Pattern Detector
# =============================================================================


class TestPatternDetector:
    def test_horizontal(self) -> None:
        result = analyze_patterns("qwerty")
        assert result.horizontal
        assert result.has_pattern
        assert "qwe" in result.patterns

    def test_diagonal(self) -> None:
        result = analyze_patterns("qaz")
        assert result.diagonal
        assert result.patterns == ["qaz"]

    def test_repeated(self) -> None:
        result = analyze_patterns("aaa")
        assert result.repeated
        assert "aaa" in result.patterns

    def test_sequential_records_both_runs(self) -> None:
        result = analyze_patterns("abc123")
        assert result.sequential
        assert "abc" in result.patterns
        assert "123" in result.patterns

    def test_reverse_sequence(self) -> None:
        assert analyze_patterns("cba").sequential

    def test_case_insensitive(self) -> None:
        assert analyze_patterns("QWE").horizontal

    @pytest.mark.parametrize("password", ["", "ab", "Tr0ub4dor&3xQ9", "x7!"])
    def test_no_pattern(self, password: str) -> None:
        result = analyze_patterns(password)
        assert not result.has_pattern
        assert result.patterns == []

    def test_feedback_order(self) -> None:
        result = analyze_patterns("qwerty111abc")
        assert pattern_feedback(result) == [
            "Avoid using keyboard row patterns (e.g., 'qwerty', 'asdf')",
            "Avoid repeating characters more than twice",
            "Avoid sequential characters (e.g., 'abc', '123')",
        ]

    def test_adjacency(self) -> None:
        assert are_adjacent("q", "w")
        assert are_adjacent("S", "d")
        assert not are_adjacent("q", "p")
        assert not are_adjacent("1", "2")
