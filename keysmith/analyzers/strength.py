"""
Password Strength Checker
=========================

Combines three views of one password into a :class:`StrengthResult`:

1. A guessability score (0-4) with warning and suggestions from
   ``zxcvbn``, which matches dictionaries, keyboard spatial runs, dates
   and l33t substitutions.
2. The character-class entropy model from
   :mod:`keysmith.analyzers.entropy`, which drives the entropy figure,
   the label and the crack-time table.
3. The keyboard pattern detector from :mod:`keysmith.analyzers.patterns`.

Never raises for any string input; the empty string gets a zero result.

References:
    - Wheeler, D. L. (2016). zxcvbn: Low-Budget Password Strength
      Estimation. USENIX Security Symposium.
    - NIST SP 800-63B (2017), Section 5.1.1.2.
"""

from __future__ import annotations

import re

from zxcvbn import zxcvbn

from keysmith.analyzers.entropy import EntropyEstimator, estimate_crack_times
from keysmith.analyzers.patterns import analyze_patterns, pattern_feedback
from keysmith.core.models import (
    CharTypeCounts,
    PatternAnalysis,
    StrengthFeedback,
    StrengthLabel,
    StrengthResult,
)

# zxcvbn's matchers are super-linear and the library rejects long input.
ZXCVBN_MAX_LENGTH = 72

_PATTERN_LABELS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(.)\1{2,}"), "Repeated characters"),
    (re.compile(r"^[a-zA-Z]+$"), "Only letters"),
    (re.compile(r"^[0-9]+$"), "Only numbers"),
    (re.compile(r"12345|qwerty|password", re.IGNORECASE), "Common password pattern"),
)

EMPTY_SUGGESTION = "Enter a password to check its strength"


def count_char_types(password: str) -> CharTypeCounts:
    return CharTypeCounts(
        lowercase=len(re.findall(r"[a-z]", password)),
        uppercase=len(re.findall(r"[A-Z]", password)),
        numbers=len(re.findall(r"[0-9]", password)),
        symbols=len(re.findall(r"[^a-zA-Z0-9]", password)),
    )


def mask_password(password: str) -> str:
    """First and last character with asterisks in between."""
    if len(password) <= 2:
        return "*" * len(password)
    return password[0] + "*" * (len(password) - 2) + password[-1]


def detected_pattern_labels(password: str, analysis: PatternAnalysis) -> list[str]:
    """Human-readable weakness labels for *password*."""
    labels = [label for regex, label in _PATTERN_LABELS if regex.search(password)]
    if analysis.horizontal:
        labels.append("Keyboard row pattern")
    if analysis.diagonal:
        labels.append("Diagonal keyboard pattern")
    if analysis.sequential:
        labels.append("Sequential characters")
    return labels


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(item for item in items if item))


class StrengthChecker:
    """Produces a :class:`StrengthResult` for a password.

    Usage::

        result = StrengthChecker().check("correct horse battery staple")
        print(result.score, result.label.value, result.feedback.suggestions)

    Args:
        user_inputs: Extra words (user name, site name) that zxcvbn
            should treat as trivially guessable.
    """

    def __init__(self, user_inputs: list[str] | None = None) -> None:
        self._estimator = EntropyEstimator()
        self._user_inputs = list(user_inputs or [])

    def check(self, password: str) -> StrengthResult:
        if not password:
            return StrengthResult(
                feedback=StrengthFeedback(suggestions=[EMPTY_SUGGESTION]),
                crack_times=estimate_crack_times(0.0),
            )

        detail = self._estimator.estimate(password)
        analysis = analyze_patterns(password)
        guess = zxcvbn(password[:ZXCVBN_MAX_LENGTH], user_inputs=self._user_inputs)
        feedback = guess.get("feedback") or {}

        return StrengthResult(
            score=int(guess["score"]),
            entropy=detail.entropy,
            label=StrengthLabel.from_entropy(detail.entropy),
            feedback=StrengthFeedback(
                warning=feedback.get("warning") or "",
                suggestions=_dedupe(
                    list(feedback.get("suggestions") or []) + pattern_feedback(analysis)
                ),
            ),
            char_type_counts=count_char_types(password),
            detected_patterns=detected_pattern_labels(password, analysis),
            entropy_detail=detail,
            pattern_analysis=analysis,
            crack_times=estimate_crack_times(detail.entropy),
            password_masked=mask_password(password),
            length=len(password),
        )


def check_strength(password: str) -> StrengthResult:
    """Module-level convenience wrapper around :class:`StrengthChecker`."""
    return StrengthChecker().check(password)
