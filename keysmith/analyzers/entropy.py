"""
Password Entropy Estimator
==========================

Character-class entropy model with length and uniqueness bonuses and
flag-style pattern penalties, plus brute-force crack-time estimates.

Model::

    base        = sum over classes of distinct_chars(class) * log2(alphabet(class))
    length      = 2 * len                 if len <= 12
                  24 + (len - 12)         otherwise
    uniqueness  = distinct / len * 10
    penalty     = 8  keyboard row (qwert | asdf | zxcv)
                + 6  ascending run of 3 letters or digits
                + 4  3+ identical characters in a row
                + 4 * len(base word)  for the longest common base word
    entropy     = max(0, base + length + uniqueness - penalty)

Each penalty applies at most once, however many times its pattern
occurs. Alphabet sizes are 26 (upper), 26 (lower), 10 (digits) and
33 (symbols, i.e. anything outside ``[A-Za-z0-9]``).

Crack times assume an average-case brute force over ``2**entropy``
candidates: ``seconds = 2**entropy / (rate * 2)``.

References:
    - NIST SP 800-63B (2017). Digital Identity Guidelines, Appendix A --
      Strength of Memorized Secrets.
    - Bonneau, J. (2012). The Science of Guessing: Analyzing an
      Anonymized Corpus of 70 Million Passwords. IEEE S&P.
"""

from __future__ import annotations

import math
import re
from types import MappingProxyType

from keysmith.core.models import CrackTimeEstimate, EntropyDetail, StrengthLabel


# ===================================================================== #
#  Static tables
# ===================================================================== #

_CLASS_BITS: MappingProxyType[str, float] = MappingProxyType(
    {
        "uppercase": math.log2(26),
        "lowercase": math.log2(26),
        "numbers": math.log2(10),
        "symbols": math.log2(33),
    }
)

_CLASS_RE: MappingProxyType[str, re.Pattern[str]] = MappingProxyType(
    {
        "uppercase": re.compile(r"[A-Z]"),
        "lowercase": re.compile(r"[a-z]"),
        "numbers": re.compile(r"[0-9]"),
        "symbols": re.compile(r"[^A-Za-z0-9]"),
    }
)

_KEYBOARD_ROW_RE = re.compile(r"qwert|asdf|zxcv", re.IGNORECASE)
_REPEATED_RE = re.compile(r"(.)\1{2,}")

# Penalty flags: (name, bits)
KEYBOARD_PENALTY = ("keyboard_row", 8.0)
SEQUENTIAL_PENALTY = ("sequential", 6.0)
REPEATED_PENALTY = ("repeated", 4.0)
COMMON_BASE_BITS_PER_CHAR = 4.0

COMMON_BASES: tuple[str, ...] = (
    "password", "letmein", "admin", "welcome", "monkey", "dragon",
    "master", "football", "baseball", "qwerty", "123456", "abc123",
)

# (scenario, guesses per second)
ATTACK_TIERS: tuple[tuple[str, float], ...] = (
    ("Online attack (throttled)", 1e2),
    ("Online attack (unthrottled)", 1e3),
    ("Offline attack (slow hash)", 1e6),
    ("Offline attack (fast hash)", 1e8),
    ("Theoretical quantum attack", 1e12),
)

# (upper bound in seconds, divisor, unit)
_DURATION_BUCKETS: tuple[tuple[float, float, str], ...] = (
    (60, 1, "seconds"),
    (3_600, 60, "minutes"),
    (86_400, 3_600, "hours"),
    (2_592_000, 86_400, "days"),
    (31_536_000, 2_592_000, "months"),
    (315_360_000, 31_536_000, "years"),
)


# ===================================================================== #
#  Helpers
# ===================================================================== #


def has_sequential_run(password: str, run: int = 3) -> bool:
    """True if *password* holds *run* ascending consecutive letters or digits.

    Letters compare case-insensitively; letters and digits never mix.
    """
    lowered = password.lower()
    for i in range(len(lowered) - run + 1):
        window = lowered[i : i + run]
        if not (window.isascii() and (window.isalpha() or window.isdigit())):
            continue
        if all(ord(window[k + 1]) - ord(window[k]) == 1 for k in range(run - 1)):
            return True
    return False


def find_common_base(password: str) -> str | None:
    """Longest well-known base word contained in *password*, if any."""
    lowered = password.lower()
    matches = [base for base in COMMON_BASES if base in lowered]
    return max(matches, key=len) if matches else None


def format_duration(seconds: float) -> str:
    """Render a crack time: "instant", "N <unit>" or "centuries"."""
    if seconds < 1:
        return "instant"
    for bound, divisor, unit in _DURATION_BUCKETS:
        if seconds < bound:
            return f"{round(seconds / divisor)} {unit}"
    return "centuries"


def strength_label(entropy_bits: float) -> StrengthLabel:
    return StrengthLabel.from_entropy(entropy_bits)


def estimate_crack_times(entropy_bits: float) -> list[CrackTimeEstimate]:
    """Average-case brute-force time for every attack tier.

    Keyspaces too large for a float are reported as ``inf`` seconds.
    """
    try:
        combinations = 2.0 ** entropy_bits
    except OverflowError:
        combinations = math.inf

    return [
        CrackTimeEstimate(
            scenario=scenario,
            guesses_per_second=rate,
            seconds=combinations / (rate * 2),
            display=format_duration(combinations / (rate * 2)),
        )
        for scenario, rate in ATTACK_TIERS
    ]


# ===================================================================== #
#  Estimator
# ===================================================================== #


class EntropyEstimator:
    """Computes :class:`EntropyDetail` for a password.

    Pure and stateless: the same input always yields the same detail.

    Usage::

        detail = EntropyEstimator().estimate("Tr0ub4dor&3xQ9")
        print(f"{detail.entropy:.1f} bits")
    """

    def estimate(self, password: str) -> EntropyDetail:
        length = len(password)
        if length == 0:
            return EntropyDetail()

        distinct_per_class = {
            name: len(set(regex.findall(password)))
            for name, regex in _CLASS_RE.items()
        }
        base = sum(
            distinct_per_class[name] * bits for name, bits in _CLASS_BITS.items()
        )
        length_bonus = self.length_bonus(length)
        uniqueness_bonus = len(set(password)) / length * 10

        penalty, penalties = self._penalties(password)

        entropy = max(0.0, base + length_bonus + uniqueness_bonus - penalty)
        effective_length = max(
            length * (1 - penalty / (base + length_bonus)),
            length * 0.5,
        )
        classes_present = sum(1 for n in distinct_per_class.values() if n)

        return EntropyDetail(
            entropy=entropy,
            base_entropy=base,
            length_bonus=length_bonus,
            uniqueness_bonus=uniqueness_bonus,
            pattern_penalty=penalty,
            effective_length=effective_length,
            bits_per_char=entropy / length,
            complexity_score=classes_present / 4 * 100,
            penalties=penalties,
        )

    @staticmethod
    def length_bonus(length: int) -> float:
        """``2 * length`` up to 12 characters, then +1 per extra character."""
        if length <= 12:
            return float(length * 2)
        return float(24 + (length - 12))

    @staticmethod
    def _penalties(password: str) -> tuple[float, list[str]]:
        total = 0.0
        fired: list[str] = []

        if _KEYBOARD_ROW_RE.search(password):
            total += KEYBOARD_PENALTY[1]
            fired.append(KEYBOARD_PENALTY[0])
        if has_sequential_run(password):
            total += SEQUENTIAL_PENALTY[1]
            fired.append(SEQUENTIAL_PENALTY[0])
        if _REPEATED_RE.search(password):
            total += REPEATED_PENALTY[1]
            fired.append(REPEATED_PENALTY[0])

        base_word = find_common_base(password)
        if base_word is not None:
            total += COMMON_BASE_BITS_PER_CHAR * len(base_word)
            fired.append(f"common_base:{base_word}")

        return total, fired


def estimate_entropy(password: str) -> EntropyDetail:
    """Module-level convenience wrapper around :class:`EntropyEstimator`."""
    return EntropyEstimator().estimate(password)
