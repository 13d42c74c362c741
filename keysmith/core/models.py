"""
KeySmith Core Data Models
=========================

Pydantic models for everything the KeySmith engine computes: entropy
breakdowns, keyboard-pattern analysis, strength results, breach lookups,
similarity comparisons, generator options, policy checks and random
source quality reports.

Every result model is built fresh per computation and never mutated
afterwards. All models serialise to JSON for the CLI's ``--output json``
mode.

References:
    - NIST SP 800-63B (2017). Digital Identity Guidelines --
      Authentication and Lifecycle Management.
    - Wheeler, D. L. (2016). zxcvbn: Low-Budget Password Strength
      Estimation. USENIX Security Symposium.
    - NIST SP 800-22 Rev. 1a (2010). A Statistical Test Suite for
      Random and Pseudorandom Number Generators.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ===================================================================== #
#  Enumerations
# ===================================================================== #


class RandomSource(str, enum.Enum):
    """Where generator draws come from.

    ``CRYPTO`` is the default and the only recommended source. ``PSEUDO``
    is a seedable Mersenne Twister: reproducible, and unfit for secrets.
    ``MIXED`` whitens timing jitter together with OS CSPRNG bytes.
    """

    CRYPTO = "crypto"
    PSEUDO = "pseudo"
    MIXED = "mixed"

    @property
    def label(self) -> str:
        return {
            "crypto": "Cryptographic (OS CSPRNG)",
            "pseudo": "Pseudo-random (Mersenne Twister)",
            "mixed": "Mixed entropy (timing jitter + CSPRNG)",
        }[self.value]

    @property
    def description(self) -> str:
        return {
            "crypto": "Operating-system cryptographically secure generator.",
            "pseudo": (
                "Deterministic, seedable generator. Predictable output: "
                "not suitable for security-sensitive generation."
            ),
            "mixed": (
                "Timer jitter and input-event timings hashed with SHA-256 "
                "together with fresh CSPRNG bytes."
            ),
        }[self.value]

    @property
    def is_secure(self) -> bool:
        return self is not RandomSource.PSEUDO

    @property
    def recommended(self) -> bool:
        return self is RandomSource.CRYPTO


class GenerationMode(str, enum.Enum):
    """Password generator modes."""

    RANDOM = "random"
    MEMORABLE = "memorable"
    RECIPE = "recipe"


class StrengthLabel(str, enum.Enum):
    """Qualitative strength rating derived from total entropy bits."""

    VERY_WEAK = "Very Weak"
    WEAK = "Weak"
    MODERATE = "Moderate"
    STRONG = "Strong"
    VERY_STRONG = "Very Strong"

    @classmethod
    def from_entropy(cls, bits: float) -> StrengthLabel:
        """Map entropy bits onto a label.

        Thresholds:
          - < 28  : Very Weak
          - < 36  : Weak
          - < 60  : Moderate
          - < 128 : Strong
          - else  : Very Strong
        """
        if bits < 28:
            return cls.VERY_WEAK
        if bits < 36:
            return cls.WEAK
        if bits < 60:
            return cls.MODERATE
        if bits < 128:
            return cls.STRONG
        return cls.VERY_STRONG


class PassphraseLabel(str, enum.Enum):
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"
    VERY_STRONG = "very-strong"


# ===================================================================== #
#  Analysis Models
# ===================================================================== #


class CharTypeCounts(BaseModel):
    """Occurrences of each character class in a password."""

    lowercase: int = 0
    uppercase: int = 0
    numbers: int = 0
    symbols: int = 0

    @property
    def classes_present(self) -> int:
        return sum(
            1 for n in (self.lowercase, self.uppercase, self.numbers, self.symbols) if n
        )


class EntropyDetail(BaseModel):
    """Full entropy breakdown for one password.

    ``entropy`` always equals
    ``max(0, base_entropy + length_bonus + uniqueness_bonus - pattern_penalty)``.

    Attributes:
        entropy: Total estimated entropy in bits.
        base_entropy: Sum over classes of distinct chars x log2(alphabet).
        length_bonus: Bonus that grows with password length.
        uniqueness_bonus: ``distinct / length * 10``.
        pattern_penalty: Total bits removed for detected weaknesses.
        effective_length: Length discounted by the pattern penalty.
        bits_per_char: ``entropy / length``.
        complexity_score: Percentage of the four classes present.
        penalties: Names of the penalty flags that fired.
    """

    entropy: float = 0.0
    base_entropy: float = 0.0
    length_bonus: float = 0.0
    uniqueness_bonus: float = 0.0
    pattern_penalty: float = 0.0
    effective_length: float = 0.0
    bits_per_char: float = 0.0
    complexity_score: float = 0.0
    penalties: list[str] = Field(default_factory=list)


class PatternAnalysis(BaseModel):
    """Keyboard and character-run patterns found in a password.

    ``patterns`` keeps every matched window in detection order; the same
    3-gram can appear more than once.
    """

    has_pattern: bool = False
    horizontal: bool = False
    diagonal: bool = False
    repeated: bool = False
    sequential: bool = False
    patterns: list[str] = Field(default_factory=list)


class CrackTimeEstimate(BaseModel):
    """Password crack time estimate at a given attack speed.

    Attributes:
        scenario: Description of the attack scenario.
        guesses_per_second: Attack speed in guesses per second.
        seconds: Estimated average time in seconds (may be ``inf``).
        display: Human-readable time string.
    """

    scenario: str
    guesses_per_second: float
    seconds: float
    display: str = ""


class StrengthFeedback(BaseModel):
    warning: str = ""
    suggestions: list[str] = Field(default_factory=list)


class StrengthResult(BaseModel):
    """Complete strength assessment of one password.

    Attributes:
        score: Guessability score from 0 (trivial) to 4 (very unguessable).
        entropy: Estimated entropy in bits.
        label: Qualitative label derived from ``entropy``.
        feedback: Warning and ordered, de-duplicated suggestions.
        char_type_counts: Occurrences of each character class.
        detected_patterns: Human-readable weakness labels.
        entropy_detail: Full entropy breakdown.
        pattern_analysis: Keyboard-pattern flags and matches.
        crack_times: Crack time per attack tier.
        password_masked: Masked form of the password, safe to display.
        length: Password length in characters.
    """

    score: int = Field(default=0, ge=0, le=4)
    entropy: float = 0.0
    label: StrengthLabel = StrengthLabel.VERY_WEAK
    feedback: StrengthFeedback = Field(default_factory=StrengthFeedback)
    char_type_counts: CharTypeCounts = Field(default_factory=CharTypeCounts)
    detected_patterns: list[str] = Field(default_factory=list)
    entropy_detail: EntropyDetail = Field(default_factory=EntropyDetail)
    pattern_analysis: PatternAnalysis = Field(default_factory=PatternAnalysis)
    crack_times: list[CrackTimeEstimate] = Field(default_factory=list)
    password_masked: str = ""
    length: int = 0


class BreachResult(BaseModel):
    """Outcome of a k-anonymity breach lookup.

    ``verified`` is ``False`` when the lookup could not complete and the
    result fell back to "not breached".
    """

    is_breached: bool = False
    occurrences: int = 0
    verified: bool = True


class SimilarityResult(BaseModel):
    """Weighted similarity between two passwords, nominally in [0, 1].

    Not clamped: the class-profile component goes negative when the two
    passwords use disjoint character classes, so ``score`` can dip below 0.
    """

    score: float = 0.0
    length_similarity: float = 0.0
    type_similarity: float = 0.0
    substring_similarity: float = 0.0
    pattern_similarity: float = 0.0
    verdict: Optional[str] = None


class PassphraseStrength(BaseModel):
    score: int = 0
    label: PassphraseLabel = PassphraseLabel.WEAK
    suggestions: list[str] = Field(default_factory=list)


class PolicyResult(BaseModel):
    """Result of validating a password against the account policy."""

    is_valid: bool = False
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    score: int = 0


# ===================================================================== #
#  Generator Options
# ===================================================================== #


class PasswordOptions(BaseModel):
    """Options for :class:`keysmith.generators.PasswordGenerator`.

    ``length`` applies to ``random`` mode only. With every class disabled
    the pool falls back to lowercase letters.
    """

    model_config = ConfigDict(validate_assignment=True)

    mode: GenerationMode = GenerationMode.RANDOM
    length: int = Field(default=16, ge=4, le=96)
    uppercase: bool = True
    lowercase: bool = True
    numbers: bool = True
    symbols: bool = True
    exclude_ambiguous: bool = False
    recipe: str = Field(default="Ww00##", max_length=256)
    source: RandomSource = RandomSource.CRYPTO


class PassphraseOptions(BaseModel):
    """Options for :class:`keysmith.generators.PassphraseGenerator`."""

    model_config = ConfigDict(validate_assignment=True)

    word_count: int = Field(default=4, ge=3, le=8)
    include_casing: bool = True
    include_numbers: bool = True
    include_symbols: bool = True
    separator: str = Field(default="-", min_length=1, max_length=8)
    source: RandomSource = RandomSource.CRYPTO


# ===================================================================== #
#  Random Source Quality Models
# ===================================================================== #


class SourceTestResult(BaseModel):
    """Result of a single statistical test on a random source.

    Attributes:
        test_name: Name of the statistical test.
        p_value: Computed p-value.
        passed: Whether ``p_value >= alpha``.
        statistic: The raw test statistic value.
        description: Human-readable description of what was tested.
    """

    test_name: str
    p_value: float = 0.0
    passed: bool = False
    statistic: float = 0.0
    description: str = ""


class SourceQualityReport(BaseModel):
    """Aggregated statistical quality of one random source.

    Passing every test does not make a source unpredictable; ``is_secure``
    is copied from the source itself.
    """

    source: RandomSource
    sample_bytes: int = 0
    bits_per_byte: float = 0.0
    tests: list[SourceTestResult] = Field(default_factory=list)
    overall_pass: bool = False
    is_secure: bool = False
    assessment: str = ""
