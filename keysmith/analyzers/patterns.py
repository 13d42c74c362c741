"""
Keyboard Pattern Detector
=========================

Slides a 3-character window over the lowercased password and flags:

- **horizontal**: all three keys sit on the same QWERTY letter row.
- **diagonal**: each consecutive pair of keys is exactly one row apart.
- **repeated**: a run of three or more identical characters.
- **sequential**: the window occurs in ``abc...z0...9`` or in its reverse.

Matched windows are recorded in ``PatternAnalysis.patterns`` without
de-duplication.

Reference:
    Schweitzer, D. et al. (2009). Visualizing Keyboard Pattern Passwords.
    6th International Workshop on Visualization for Cyber Security.
"""

from __future__ import annotations

import re
import string
from types import MappingProxyType
from typing import NamedTuple

from keysmith.core.models import PatternAnalysis


class KeyPosition(NamedTuple):
    row: int
    col: int
    adjacent: frozenset[str]


def _key(row: int, col: int, adjacent: str) -> KeyPosition:
    return KeyPosition(row, col, frozenset(adjacent))


QWERTY_LAYOUT: MappingProxyType[str, KeyPosition] = MappingProxyType(
    {
        "q": _key(0, 0, "was"),
        "w": _key(0, 1, "qeasd"),
        "e": _key(0, 2, "wrsdf"),
        "r": _key(0, 3, "etdfg"),
        "t": _key(0, 4, "ryfgh"),
        "y": _key(0, 5, "tughj"),
        "u": _key(0, 6, "yihjk"),
        "i": _key(0, 7, "uojkl"),
        "o": _key(0, 8, "ipkl"),
        "p": _key(0, 9, "ol"),
        "a": _key(1, 0, "qwszx"),
        "s": _key(1, 1, "weadzxc"),
        "d": _key(1, 2, "ersfxcv"),
        "f": _key(1, 3, "rtdgcvb"),
        "g": _key(1, 4, "tyfhvbn"),
        "h": _key(1, 5, "yugjbnm"),
        "j": _key(1, 6, "uihknm"),
        "k": _key(1, 7, "iojlm"),
        "l": _key(1, 8, "opk"),
        "z": _key(2, 0, "asx"),
        "x": _key(2, 1, "sdzc"),
        "c": _key(2, 2, "dfxv"),
        "v": _key(2, 3, "fgcb"),
        "b": _key(2, 4, "ghvn"),
        "n": _key(2, 5, "hjbm"),
        "m": _key(2, 6, "jkn"),
    }
)

_SEQUENCE = string.ascii_lowercase + string.digits
_SEQUENCE_REVERSED = _SEQUENCE[::-1]
_REPEATED_RE = re.compile(r"(.)\1{2,}")

_FEEDBACK: tuple[tuple[str, str], ...] = (
    ("horizontal", "Avoid using keyboard row patterns (e.g., 'qwerty', 'asdf')"),
    ("diagonal", "Avoid diagonal keyboard patterns (e.g., 'qaz', 'zxc')"),
    ("repeated", "Avoid repeating characters more than twice"),
    ("sequential", "Avoid sequential characters (e.g., 'abc', '123')"),
)


def _windows(text: str) -> list[str]:
    return [text[i : i + 3] for i in range(len(text) - 2)]


def are_adjacent(a: str, b: str) -> bool:
    """True if keys *a* and *b* neighbour each other on a QWERTY keyboard."""
    pos = QWERTY_LAYOUT.get(a.lower())
    return pos is not None and b.lower() in pos.adjacent


def analyze_patterns(password: str) -> PatternAnalysis:
    """Detect keyboard, repetition and sequence patterns in *password*."""
    lowered = password.lower()
    windows = _windows(lowered)
    patterns: list[str] = []
    horizontal = diagonal = repeated = sequential = False

    for window in windows:
        keys = [QWERTY_LAYOUT.get(ch) for ch in window]
        if None in keys:
            continue
        if keys[0].row == keys[1].row == keys[2].row:
            patterns.append(window)
            horizontal = True

    for window in windows:
        keys = [QWERTY_LAYOUT.get(ch) for ch in window]
        if None in keys:
            continue
        if abs(keys[0].row - keys[1].row) == 1 and abs(keys[1].row - keys[2].row) == 1:
            patterns.append(window)
            diagonal = True

    run = _REPEATED_RE.search(lowered)
    if run is not None:
        patterns.append(run.group(0))
        repeated = True

    for window in windows:
        if window in _SEQUENCE or window in _SEQUENCE_REVERSED:
            patterns.append(window)
            sequential = True

    return PatternAnalysis(
        has_pattern=horizontal or diagonal or repeated or sequential,
        horizontal=horizontal,
        diagonal=diagonal,
        repeated=repeated,
        sequential=sequential,
        patterns=patterns,
    )


def pattern_feedback(analysis: PatternAnalysis) -> list[str]:
    """One suggestion per pattern type flagged in *analysis*."""
    return [text for flag, text in _FEEDBACK if getattr(analysis, flag)]
