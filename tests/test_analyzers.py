"""
Tests for the strength checker, similarity comparator, policy validator
and random source quality tester.
"""

from __future__ import annotations

import random

import pytest

from keysmith.analyzers.policy import PasswordPolicy
from keysmith.analyzers.similarity import (
    VERDICT_SHARED,
    VERDICT_TOO_SIMILAR,
    calculate_similarity,
    compare_passwords,
    longest_common_substring,
)
from keysmith.analyzers.source_quality import SourceQualityTester
from keysmith.analyzers.strength import (
    EMPTY_SUGGESTION,
    StrengthChecker,
    check_strength,
    count_char_types,
    mask_password,
)
from keysmith.core.models import RandomSource, StrengthLabel
from shared.config import KeySmithConfig

# =============================================================================
# Strength Checker
# =============================================================================


class TestStrengthChecker:
    def test_empty_password(self) -> None:
        result = check_strength("")
        assert result.score == 0
        assert result.entropy == 0
        assert result.feedback.suggestions == [EMPTY_SUGGESTION]
        assert result.password_masked == ""

    def test_common_password(self) -> None:
        result = check_strength("password")
        assert result.score == 0
        assert result.label is StrengthLabel.VERY_WEAK
        assert "Only letters" in result.detected_patterns
        assert "Common password pattern" in result.detected_patterns
        assert result.feedback.warning or result.feedback.suggestions

    def test_strong_password(self) -> None:
        result = check_strength("Tr0ub4dor&3xQ9")
        assert result.label in (StrengthLabel.STRONG, StrengthLabel.VERY_STRONG)
        assert result.detected_patterns == []
        assert not result.pattern_analysis.has_pattern
        assert result.length == 14
        assert result.password_masked == "T************9"

    def test_keyboard_and_sequence_labels(self) -> None:
        result = check_strength("qwerty123")
        assert "Keyboard row pattern" in result.detected_patterns
        assert "Sequential characters" in result.detected_patterns
        assert len(result.feedback.suggestions) == len(set(result.feedback.suggestions))

    def test_very_long_password_does_not_raise(self) -> None:
        result = check_strength("Ab1!" * 50)
        assert result.length == 200
        assert 0 <= result.score <= 4

    def test_user_inputs_lower_the_score(self) -> None:
        plain = StrengthChecker().check("keysmithrocks")
        aware = StrengthChecker(user_inputs=["keysmith", "rocks"]).check("keysmithrocks")
        assert aware.score <= plain.score

    def test_crack_times_attached(self) -> None:
        assert len(check_strength("hunter2").crack_times) == 5

    def test_char_type_counts(self) -> None:
        counts = count_char_types("aB3$ x")
        assert (counts.lowercase, counts.uppercase, counts.numbers, counts.symbols) == (2, 1, 1, 2)
        assert counts.classes_present == 4

    @pytest.mark.parametrize(
        "password, masked",
        [("", ""), ("a", "*"), ("ab", "**"), ("abc", "a*c"), ("secret", "s****t")],
    )
    def test_mask_password(self, password: str, masked: str) -> None:
        assert mask_password(password) == masked


# =============================================================================
# Similarity Comparator
# =============================================================================


class TestSimilarity:
    @pytest.mark.parametrize("password", ["", "a", "Summer2024!", "correct horse"])
    def test_identical_is_one(self, password: str) -> None:
        result = compare_passwords(password, password)
        assert result.score == 1.0
        assert result.verdict == VERDICT_TOO_SIMILAR

    def test_empty_against_non_empty(self) -> None:
        assert calculate_similarity("", "abc") == 0.0
        assert calculate_similarity("abc", "") == 0.0

    def test_disjoint_classes_score_below_zero(self) -> None:
        result = compare_passwords("aaaa", "BBBB")
        assert result.type_similarity == pytest.approx(-1.0)
        assert result.score == pytest.approx(-0.1)
        assert result.verdict is None

    def test_dissimilar_passwords(self) -> None:
        result = compare_passwords("abc12345", "xyz99999")
        assert result.score <= 0.5
        assert result.verdict is None

    def test_incremented_password_is_too_similar(self) -> None:
        result = compare_passwords("Summer2023!", "Summer2024!")
        assert result.score > 0.7
        assert result.verdict == VERDICT_TOO_SIMILAR
        assert result.pattern_similarity == 1.0

    def test_shared_patterns_band(self) -> None:
        result = compare_passwords("blue42", "green42x")
        assert 0.5 < result.score <= 0.7
        assert result.verdict == VERDICT_SHARED

    def test_symmetric(self) -> None:
        assert calculate_similarity("Tiger#77", "tiger77") == pytest.approx(
            calculate_similarity("tiger77", "Tiger#77")
        )

    def test_longest_common_substring(self) -> None:
        assert longest_common_substring("Summer2023", "Winter2023") == 6
        assert longest_common_substring("abc", "xyz") == 0


# =============================================================================
# Password Policy
# =============================================================================


class TestPasswordPolicy:
    STRONG = "Vq7#mZ2!pLx9&Rt4"

    def test_valid_password(self) -> None:
        result = PasswordPolicy().validate(self.STRONG)
        assert result.errors == []
        assert result.is_valid
        assert result.score >= 3

    def test_empty_password(self) -> None:
        result = PasswordPolicy().validate("")
        assert not result.is_valid
        assert result.errors == []

    def test_every_rule_reported(self) -> None:
        result = PasswordPolicy().validate("short")
        assert result.errors == [
            "Password must be at least 12 characters long",
            "Password must contain at least one uppercase letter",
            "Password must contain at least one number",
            "Password must contain at least one special character",
        ]
        assert not result.is_valid

    def test_reuse_is_an_error(self) -> None:
        policy = PasswordPolicy()
        policy.remember(self.STRONG)
        result = policy.validate(self.STRONG)
        assert "Password has been used recently" in result.errors
        assert not result.is_valid

    def test_similar_history_is_a_warning(self) -> None:
        policy = PasswordPolicy()
        policy.remember("Summer2023!Beach")
        result = policy.validate("Summer2024!Beach")
        assert "Password is too similar to a recent password" in result.warnings

    def test_history_is_bounded(self) -> None:
        policy = PasswordPolicy(history_size=2)
        for password in ("One#Pass1word", "Two#Pass2word", "Three#Pass3word"):
            policy.remember(password)
        assert policy.history_size == 2
        assert "Password has been used recently" not in policy.validate("One#Pass1word").errors

    def test_from_config(self) -> None:
        config = KeySmithConfig.from_dict({"analyzer": {"min_length": 20}})
        result = PasswordPolicy.from_config(config).validate(self.STRONG)
        assert "Password must be at least 20 characters long" in result.errors


# =============================================================================
# Random Source Quality
# =============================================================================


class TestSourceQuality:
    @pytest.fixture
    def tester(self) -> SourceQualityTester:
        return SourceQualityTester()

    def test_crypto_source_passes(self, tester: SourceQualityTester) -> None:
        # Each test rejects 1% of good samples at alpha = 0.01
        report = tester.run(RandomSource.CRYPTO, 8192)
        assert report.sample_bytes == 8192
        assert len(report.tests) == 4
        assert sum(t.passed for t in report.tests) >= 3
        assert report.is_secure
        assert 7.9 < report.bits_per_byte <= 8.0

    def test_seeded_pseudo_is_flagged_insecure(self, tester: SourceQualityTester) -> None:
        data = random.Random(7).randbytes(8192)
        report = tester.evaluate(data, RandomSource.PSEUDO)
        assert not report.is_secure
        if report.overall_pass:
            assert "predictable" in report.assessment

    def test_constant_data_fails(self, tester: SourceQualityTester) -> None:
        report = tester.evaluate(bytes(4096), RandomSource.CRYPTO)
        assert not report.overall_pass
        assert all(not t.passed for t in report.tests)
        assert "failed" in report.assessment

    def test_alternating_bits_fail_runs(self, tester: SourceQualityTester) -> None:
        report = tester.evaluate(b"\x55" * 4096, RandomSource.CRYPTO)
        by_name = {t.test_name: t for t in report.tests}
        assert by_name["Frequency (Monobit)"].passed
        assert not by_name["Runs"].passed
        assert not by_name["Byte Uniformity"].passed

    def test_insufficient_data(self, tester: SourceQualityTester) -> None:
        report = tester.evaluate(b"\x01" * 100, RandomSource.MIXED)
        assert report.tests == []
        assert not report.overall_pass
        assert "Insufficient data" in report.assessment
