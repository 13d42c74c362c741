"""
KeySmith Core Module
====================

Data models shared by every KeySmith component. The engine lives in
:mod:`keysmith.core.engine`.
"""

from keysmith.core.models import (
    BreachResult,
    CharTypeCounts,
    CrackTimeEstimate,
    EntropyDetail,
    GenerationMode,
    PassphraseLabel,
    PassphraseOptions,
    PassphraseStrength,
    PasswordOptions,
    PatternAnalysis,
    PolicyResult,
    RandomSource,
    SimilarityResult,
    SourceQualityReport,
    SourceTestResult,
    StrengthFeedback,
    StrengthLabel,
    StrengthResult,
)

__all__ = [
    "BreachResult",
    "CharTypeCounts",
    "CrackTimeEstimate",
    "EntropyDetail",
    "GenerationMode",
    "PassphraseLabel",
    "PassphraseOptions",
    "PassphraseStrength",
    "PasswordOptions",
    "PatternAnalysis",
    "PolicyResult",
    "RandomSource",
    "SimilarityResult",
    "SourceQualityReport",
    "SourceTestResult",
    "StrengthFeedback",
    "StrengthLabel",
    "StrengthResult",
]
