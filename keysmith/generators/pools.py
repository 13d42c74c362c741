"""
Character and Word Pools
========================

Static tables shared by the password and passphrase generators. All
tables are immutable module constants.
"""

from __future__ import annotations

import string
from types import MappingProxyType

# ---------------------------------------------------------------------------
# Character classes
# ---------------------------------------------------------------------------
UPPERCASE: str = string.ascii_uppercase
LOWERCASE: str = string.ascii_lowercase
DIGITS: str = string.digits
SYMBOLS: str = string.punctuation  # 32 printable ASCII symbols
AMBIGUOUS: frozenset[str] = frozenset("Il1O0")

# ---------------------------------------------------------------------------
# Memorable mode
# ---------------------------------------------------------------------------
MEMORABLE_ADJECTIVES: tuple[str, ...] = (
    "happy", "brave", "swift", "quiet", "wise", "bold", "calm", "kind",
)
MEMORABLE_NOUNS: tuple[str, ...] = (
    "tiger", "river", "cloud", "star", "eagle", "moon", "tree", "wave",
)
MEMORABLE_NUMBERS: tuple[str, ...] = (
    "123", "456", "789", "234", "567", "890", "345", "678",
)
MEMORABLE_SYMBOLS: tuple[str, ...] = (
    "!@#", "@#$", "#$%", "$%^", "%^&", "^&*", "&*(", "*()",
)

# ---------------------------------------------------------------------------
# Recipe mode
# ---------------------------------------------------------------------------
_RECIPE_WORDS: tuple[str, ...] = (
    "HAPPY", "BRAVE", "SWIFT", "QUIET", "WISE", "BOLD", "CALM",
    "KIND", "QUICK", "BRIGHT", "STRONG", "FREE", "PURE", "NOBLE",
)
_RECIPE_NOUNS: tuple[str, ...] = (
    "tiger", "river", "cloud", "star", "eagle", "moon", "tree",
    "wave", "mountain", "ocean", "forest", "storm", "crystal", "phoenix",
)
_RECIPE_COLOURS: tuple[str, ...] = (
    "RED", "BLUE", "GREEN", "GOLD", "SILVER", "BLACK", "WHITE", "PURPLE",
)

RECIPE_TOKENS: MappingProxyType[str, tuple[str, ...]] = MappingProxyType(
    {
        "A": tuple(UPPERCASE),
        "a": tuple(LOWERCASE),
        "0": tuple(DIGITS),
        "#": tuple("!@#$%^&*"),
        "W": _RECIPE_WORDS,
        "w": _RECIPE_NOUNS,
        "C": _RECIPE_COLOURS,
        "c": tuple(c.lower() for c in _RECIPE_COLOURS),
        "Y": tuple(str(y) for y in range(2024, 2029)),
        "M": tuple(f"{m:02d}" for m in range(1, 13)),
        "D": ("01", "02", "03", "04", "05", "06", "07", "08", "09", "10", "15", "20", "25", "30"),
    }
)

RECIPE_TOKEN_HELP: MappingProxyType[str, str] = MappingProxyType(
    {
        "A": "uppercase letter",
        "a": "lowercase letter",
        "0": "digit",
        "#": "symbol",
        "W": "uppercase word",
        "w": "lowercase word",
        "C": "uppercase colour",
        "c": "lowercase colour",
        "Y": "year (2024-2028)",
        "M": "month (01-12)",
        "D": "day",
    }
)

# ---------------------------------------------------------------------------
# Passphrase mode (36 words per pool)
# ---------------------------------------------------------------------------
PASSPHRASE_ADJECTIVES: tuple[str, ...] = (
    "happy", "brave", "bright", "calm", "clever", "eager", "fair", "gentle", "kind",
    "lively", "proud", "wise", "swift", "bold", "quick", "sharp", "strong", "warm",
    "wild", "young", "free", "pure", "rich", "safe", "deep", "dark", "light", "soft",
    "loud", "quiet", "sweet", "tall", "tiny", "vast", "keen", "cool",
)
PASSPHRASE_NOUNS: tuple[str, ...] = (
    "tiger", "river", "mountain", "forest", "ocean", "desert", "island", "garden",
    "castle", "valley", "eagle", "dragon", "crystal", "diamond", "emerald", "falcon",
    "harbor", "jungle", "knight", "lotus", "meteor", "nebula", "oasis", "pearl",
    "phoenix", "rainbow", "shadow", "thunder", "unicorn", "volcano", "warrior",
    "wizard", "zenith", "horizon", "storm", "star",
)
PASSPHRASE_VERBS: tuple[str, ...] = (
    "jumps", "flows", "glows", "flies", "grows", "leads", "runs", "sings", "walks",
    "swims", "dances", "shines", "soars", "races", "leaps", "rides", "glides",
    "floats", "climbs", "dives", "dreams", "guards", "rules", "seeks", "sparks",
    "waves", "burns", "calls", "falls", "rises", "spins", "turns", "moves", "plays",
    "stays", "wins",
)
PASSPHRASE_POOLS: tuple[tuple[str, ...], ...] = (
    PASSPHRASE_ADJECTIVES,
    PASSPHRASE_NOUNS,
    PASSPHRASE_VERBS,
)
PASSPHRASE_SYMBOLS: tuple[str, ...] = ("!", "@", "#", "$", "%", "&", "*", "?", "+", "=")
