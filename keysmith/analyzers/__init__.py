"""
KeySmith Analyzers
==================

Password scoring: entropy estimation, keyboard pattern detection,
strength checking, similarity comparison, policy validation, and the
random source quality tests.
"""

from keysmith.analyzers.entropy import (
    EntropyEstimator,
    estimate_crack_times,
    estimate_entropy,
    format_duration,
    strength_label,
)
from keysmith.analyzers.patterns import analyze_patterns, are_adjacent, pattern_feedback
from keysmith.analyzers.strength import StrengthChecker, check_strength, mask_password
from keysmith.analyzers.similarity import calculate_similarity, compare_passwords
from keysmith.analyzers.policy import PasswordPolicy
from keysmith.analyzers.source_quality import SourceQualityTester

__all__ = [
    "EntropyEstimator",
    "PasswordPolicy",
    "SourceQualityTester",
    "StrengthChecker",
    "analyze_patterns",
    "are_adjacent",
    "calculate_similarity",
    "check_strength",
    "compare_passwords",
    "estimate_crack_times",
    "estimate_entropy",
    "format_duration",
    "mask_password",
    "pattern_feedback",
    "strength_label",
]
