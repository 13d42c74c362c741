"""
Passphrase Generator
====================

Builds multi-word passphrases that cycle adjective, noun, verb (word
index ``i % 3``), with optional casing, number suffixes and symbol
suffixes, joined by a separator.

A word already used in the same passphrase is redrawn, up to ten draws
in total; after that the duplicate is kept.

Reference:
    Reinhold, A. G. (1995). The Diceware Passphrase Home Page.
"""

from __future__ import annotations

import math
import re

from keysmith.core.models import (
    PassphraseLabel,
    PassphraseOptions,
    PassphraseStrength,
    RandomSource,
)
from keysmith.generators import pools
from keysmith.generators.random_source import choice, next_uniform

_MAX_ATTEMPTS = 10
_NOUN_INDEX = 1

_WORD_SPLIT_RE = re.compile(r"[-_\s]")
_UPPER_RE = re.compile(r"[A-Z]")
_DIGIT_RE = re.compile(r"\d")
_SYMBOL_RE = re.compile(r"[^A-Za-z0-9\s\-_]")


class PassphraseGenerator:
    """Generates passphrases from :class:`PassphraseOptions`.

    Usage::

        gen = PassphraseGenerator()
        phrase = gen.generate(PassphraseOptions(word_count=5, separator="_"))
    """

    def __init__(self, source: RandomSource = RandomSource.CRYPTO) -> None:
        self.source = source

    def generate(self, options: PassphraseOptions | None = None) -> str:
        options = options or PassphraseOptions(source=self.source)
        source = options.source
        used: set[str] = set()
        words: list[str] = []

        for i in range(options.word_count):
            pattern = i % 3
            pool = pools.PASSPHRASE_POOLS[pattern]

            attempts = 0
            while True:
                word = choice(pool, source)
                attempts += 1
                if word.lower() not in used or attempts >= _MAX_ATTEMPTS:
                    break
            used.add(word.lower())

            if options.include_casing and (
                next_uniform(source) > 0.5 or pattern == _NOUN_INDEX
            ):
                word = word[0].upper() + word[1:]

            if options.include_numbers and next_uniform(source) > 0.7:
                word += f"{math.floor(next_uniform(source) * 1000):02d}"

            if options.include_symbols and next_uniform(source) > 0.7:
                word += choice(pools.PASSPHRASE_SYMBOLS, source)

            words.append(word)

        return options.separator.join(words)

    def generate_many(self, options: PassphraseOptions | None, count: int) -> list[str]:
        if count < 1:
            raise ValueError("count must be at least 1")
        return [self.generate(options) for _ in range(count)]


# ===================================================================== #
#  Strength heuristics
# ===================================================================== #


def estimate_passphrase_strength(passphrase: str) -> PassphraseStrength:
    """Score a passphrase with the word/length heuristic.

    ``score = min(len * 4, 40) + words * 10`` plus 10 each for an
    uppercase letter, a digit and a symbol. Labels: < 50 weak, < 70
    moderate, < 90 strong, otherwise very-strong.
    """
    score = min(len(passphrase) * 4, 40)
    score += len(_WORD_SPLIT_RE.split(passphrase)) * 10
    score += 10 if _UPPER_RE.search(passphrase) else 0
    score += 10 if _DIGIT_RE.search(passphrase) else 0
    score += 10 if _SYMBOL_RE.search(passphrase) else 0

    if score >= 90:
        label = PassphraseLabel.VERY_STRONG
    elif score >= 70:
        label = PassphraseLabel.STRONG
    elif score >= 50:
        label = PassphraseLabel.MODERATE
    else:
        label = PassphraseLabel.WEAK

    return PassphraseStrength(
        score=score,
        label=label,
        suggestions=suggest_passphrase_improvements(passphrase, label),
    )


def suggest_passphrase_improvements(
    passphrase: str, label: PassphraseLabel | None = None
) -> list[str]:
    """Concrete tips for weak or moderate passphrases; empty otherwise."""
    if label is None:
        label = estimate_passphrase_strength(passphrase).label
    if label not in (PassphraseLabel.WEAK, PassphraseLabel.MODERATE):
        return []

    suggestions: list[str] = []
    if "-" not in passphrase:
        suggestions.append("Add separators between words (e.g., use hyphens)")
    if not _DIGIT_RE.search(passphrase):
        suggestions.append("Add numbers to increase complexity")
    if not re.search(r"[!@#$%^&*]", passphrase):
        suggestions.append("Include special characters")
    if len(_WORD_SPLIT_RE.split(passphrase)) < 4:
        suggestions.append("Use at least 4 words for better security")
    return suggestions


def generate_passphrase(options: PassphraseOptions | None = None) -> str:
    """Module-level convenience wrapper around :class:`PassphraseGenerator`."""
    return PassphraseGenerator().generate(options)
