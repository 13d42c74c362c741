"""
Password Policy Validator
=========================

Account-style composition policy with an in-memory history of recently
accepted passwords.

Rules (each failure is an error):
    - at least ``min_length`` characters (default 12)
    - at least one uppercase letter, lowercase letter and digit
    - at least one special character from ``!@#$%^&*(),.?":{}|<>``
    - not one of the last ``history_size`` accepted passwords (default 5)

A password is valid when there are no errors and its guessability score
is at least ``min_score`` (default 3). Similarity to any password in
history adds a warning but never an error.

History lives only in this object and is never written anywhere.
"""

from __future__ import annotations

import re
from collections import deque

from keysmith.analyzers.similarity import (
    VERDICT_SHARED,
    VERDICT_TOO_SIMILAR,
    compare_passwords,
)
from keysmith.analyzers.strength import StrengthChecker
from keysmith.core.models import PolicyResult

SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'
_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")


class PasswordPolicy:
    """Validates passwords against the composition and reuse policy.

    Usage::

        policy = PasswordPolicy()
        result = policy.validate(candidate)
        if result.is_valid:
            policy.remember(candidate)

    Args:
        min_length: Minimum number of characters.
        history_size: How many accepted passwords to remember.
        min_score: Minimum guessability score (0-4) for validity.
        checker: Strength checker used for the score.
    """

    def __init__(
        self,
        *,
        min_length: int = 12,
        history_size: int = 5,
        min_score: int = 3,
        checker: StrengthChecker | None = None,
    ) -> None:
        self.min_length = min_length
        self.min_score = min_score
        self._history: deque[str] = deque(maxlen=history_size)
        self._checker = checker or StrengthChecker()

    @classmethod
    def from_config(cls, config) -> PasswordPolicy:
        """Build from a :class:`shared.config.KeySmithConfig`."""
        return cls(
            min_length=config.analyzer.min_length,
            history_size=config.analyzer.history_size,
            min_score=config.analyzer.min_score,
        )

    def validate(self, password: str) -> PolicyResult:
        if not password:
            return PolicyResult(is_valid=False)

        errors: list[str] = []
        if len(password) < self.min_length:
            errors.append(
                f"Password must be at least {self.min_length} characters long"
            )
        if not re.search(r"[A-Z]", password):
            errors.append("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", password):
            errors.append("Password must contain at least one lowercase letter")
        if not re.search(r"\d", password):
            errors.append("Password must contain at least one number")
        if not _SPECIAL_RE.search(password):
            errors.append("Password must contain at least one special character")
        if password in self._history:
            errors.append("Password has been used recently")

        warnings: list[str] = []
        for previous in self._history:
            if previous == password:
                continue
            verdict = compare_passwords(previous, password).verdict
            if verdict == VERDICT_TOO_SIMILAR:
                warnings.append("Password is too similar to a recent password")
            elif verdict == VERDICT_SHARED:
                warnings.append("Password shares patterns with a recent password")

        score = self._checker.check(password).score
        return PolicyResult(
            is_valid=not errors and score >= self.min_score,
            errors=errors,
            warnings=list(dict.fromkeys(warnings)),
            score=score,
        )

    def remember(self, password: str) -> None:
        """Add *password* to history, evicting the oldest beyond capacity."""
        self._history.append(password)

    @property
    def history_size(self) -> int:
        return len(self._history)
