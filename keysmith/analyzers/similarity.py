"""
Password Similarity Comparator
==============================

Scores how close a new password is to a previous one, as a weighted sum
of four components:

=====================  ======  ==========================================
Component              Weight  Definition
=====================  ======  ==========================================
length                 0.2     ``1 - |la - lb| / max(la, lb)``
class profile          0.3     ``1 - sum(|count diff per class|) / max``
common substring       0.3     longest common substring / max length
shared runs            0.2     1 if a digit or letter run (len >= 2) of
                               one string equals or contains a run of
                               the other, else 0
=====================  ======  ==========================================

Verdicts: above 0.7 "too similar", above 0.5 "some shared patterns".
"""

from __future__ import annotations

import re

from keysmith.core.models import SimilarityResult

WEIGHTS: tuple[float, float, float, float] = (0.2, 0.3, 0.3, 0.2)
TOO_SIMILAR = 0.7
SHARED_PATTERNS = 0.5

VERDICT_TOO_SIMILAR = "too similar"
VERDICT_SHARED = "some shared patterns"

_DIGIT_RUN_RE = re.compile(r"\d{2,}")
_LETTER_RUN_RE = re.compile(r"[a-zA-Z]{2,}")
_CLASS_RES = (
    re.compile(r"[a-z]"),
    re.compile(r"[A-Z]"),
    re.compile(r"[0-9]"),
    re.compile(r"[^a-zA-Z0-9]"),
)


def longest_common_substring(a: str, b: str) -> int:
    """Length of the longest common substring (dynamic programming)."""
    best = 0
    prev = [0] * (len(b) + 1)
    for i in range(1, len(a) + 1):
        cur = [0] * (len(b) + 1)
        for j in range(1, len(b) + 1):
            if a[i - 1] == b[j - 1]:
                cur[j] = prev[j - 1] + 1
                best = max(best, cur[j])
        prev = cur
    return best


def _profile(text: str) -> list[int]:
    return [len(regex.findall(text)) for regex in _CLASS_RES]


def _runs(text: str) -> list[str]:
    return _DIGIT_RUN_RE.findall(text) + _LETTER_RUN_RE.findall(text)


def _shares_run(a: str, b: str) -> bool:
    runs_b = _runs(b)
    return any(ra == rb or rb in ra or ra in rb for ra in _runs(a) for rb in runs_b)


def verdict_for(score: float) -> str | None:
    if score > TOO_SIMILAR:
        return VERDICT_TOO_SIMILAR
    if score > SHARED_PATTERNS:
        return VERDICT_SHARED
    return None


def compare_passwords(a: str, b: str) -> SimilarityResult:
    """Full similarity breakdown between *a* and *b*.

    Identical strings (including two empty strings) score 1.0; an empty
    string against a non-empty one scores 0.0.
    """
    if a == b:
        return SimilarityResult(
            score=1.0,
            length_similarity=1.0,
            type_similarity=1.0,
            substring_similarity=1.0,
            pattern_similarity=1.0,
            verdict=VERDICT_TOO_SIMILAR,
        )
    longest = max(len(a), len(b))
    if min(len(a), len(b)) == 0:
        return SimilarityResult(score=0.0)

    length_sim = 1 - abs(len(a) - len(b)) / longest
    type_sim = 1 - sum(
        abs(x - y) for x, y in zip(_profile(a), _profile(b))
    ) / longest
    substring_sim = longest_common_substring(a, b) / longest
    pattern_sim = 1.0 if _shares_run(a, b) else 0.0

    components = (length_sim, type_sim, substring_sim, pattern_sim)
    score = sum(c * w for c, w in zip(components, WEIGHTS))

    return SimilarityResult(
        score=score,
        length_similarity=length_sim,
        type_similarity=type_sim,
        substring_similarity=substring_sim,
        pattern_similarity=pattern_sim,
        verdict=verdict_for(score),
    )


def calculate_similarity(a: str, b: str) -> float:
    return compare_passwords(a, b).score
