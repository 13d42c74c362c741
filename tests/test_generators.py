"""
Tests for the random source provider and the password and passphrase
generators.
"""

from __future__ import annotations

import re

import pytest
from pydantic import ValidationError

from keysmith.core.models import (
    GenerationMode,
    PassphraseLabel,
    PassphraseOptions,
    PasswordOptions,
    RandomSource,
)
from keysmith.generators import pools
from keysmith.generators.passphrase import (
    PassphraseGenerator,
    estimate_passphrase_strength,
    suggest_passphrase_improvements,
)
from keysmith.generators.password import PasswordGenerator
from keysmith.generators.random_source import (
    EntropyMixer,
    choice,
    describe_sources,
    feed_entropy,
    next_uniform,
    random_bytes,
    seed_pseudo_random,
)

# =============================================================================
# Random Source Provider
# =============================================================================


class TestRandomSource:
    @pytest.mark.parametrize("source", list(RandomSource))
    def test_uniform_range(self, source: RandomSource) -> None:
        for _ in range(200):
            assert 0.0 <= next_uniform(source) < 1.0

    def test_accepts_source_value_strings(self) -> None:
        assert 0.0 <= next_uniform("mixed") < 1.0

    def test_choice_empty_raises(self) -> None:
        with pytest.raises(ValueError):
            choice([])

    def test_choice_returns_member(self) -> None:
        seq = ("x", "y", "z")
        for source in RandomSource:
            assert choice(seq, source) in seq

    def test_pseudo_is_reproducible(self) -> None:
        seed_pseudo_random(42)
        first = [next_uniform(RandomSource.PSEUDO) for _ in range(5)]
        seed_pseudo_random(42)
        second = [next_uniform(RandomSource.PSEUDO) for _ in range(5)]
        assert first == second

    def test_random_bytes_length(self) -> None:
        assert len(random_bytes(64, RandomSource.MIXED)) == 64

    def test_describe_sources_recommended_first(self) -> None:
        listing = describe_sources()
        assert listing[0]["source"] == "crypto"
        assert listing[0]["recommended"] is True
        assert sum(1 for s in listing if s["recommended"]) == 1
        assert {s["source"]: s["is_secure"] for s in listing}["pseudo"] is False

    def test_mixer_accepts_any_timing_sample(self) -> None:
        mixer = EntropyMixer()
        mixer.feed(12.345)
        mixer.feed(-7)
        mixer.feed(2 ** 80)
        assert 0.0 <= mixer.next_uniform() < 1.0
        feed_entropy(1_700_000_000.25)


# =============================================================================
# Password Generator
# =============================================================================


class TestPasswordGenerator:
    @pytest.mark.parametrize("length", [4, 16, 96])
    def test_random_mode_length_and_pool(self, length: int) -> None:
        options = PasswordOptions(length=length, symbols=False)
        allowed = set(pools.UPPERCASE + pools.LOWERCASE + pools.DIGITS)
        for _ in range(20):
            password = PasswordGenerator().generate(options)
            assert len(password) == length
            assert set(password) <= allowed

    def test_digits_only(self) -> None:
        options = PasswordOptions(uppercase=False, lowercase=False, symbols=False)
        assert PasswordGenerator().generate(options).isdigit()

    def test_all_classes_disabled_falls_back_to_lowercase(self) -> None:
        options = PasswordOptions(
            uppercase=False, lowercase=False, numbers=False, symbols=False, length=32
        )
        password = PasswordGenerator().generate(options)
        assert len(password) == 32
        assert set(password) <= set(pools.LOWERCASE)

    def test_exclude_ambiguous(self) -> None:
        options = PasswordOptions(length=96, exclude_ambiguous=True)
        for _ in range(10):
            assert not set(PasswordGenerator().generate(options)) & pools.AMBIGUOUS

    @pytest.mark.parametrize("length", [3, 97, 0])
    def test_length_out_of_range_rejected(self, length: int) -> None:
        with pytest.raises(ValidationError):
            PasswordOptions(length=length)

    def test_memorable_shape(self) -> None:
        options = PasswordOptions(mode=GenerationMode.MEMORABLE)
        password = PasswordGenerator().generate(options)
        assert re.fullmatch(r"[A-Z][a-z]+[A-Z][a-z]+\d{3}\S{3}", password)

    def test_recipe_tokens(self) -> None:
        options = PasswordOptions(mode=GenerationMode.RECIPE, recipe="Aa0#")
        password = PasswordGenerator().generate(options)
        assert len(password) == 4
        assert password[0].isupper()
        assert password[1].islower()
        assert password[2].isdigit()
        assert password[3] in "!@#$%^&*"

    def test_recipe_words_and_literals(self) -> None:
        options = PasswordOptions(mode=GenerationMode.RECIPE, recipe="W-Y")
        word, year = PasswordGenerator().generate(options).split("-")
        assert word in pools.RECIPE_TOKENS["W"]
        assert 2024 <= int(year) <= 2028

    def test_empty_recipe_gives_empty_password(self) -> None:
        options = PasswordOptions(mode=GenerationMode.RECIPE, recipe="")
        assert PasswordGenerator().generate(options) == ""

    def test_pseudo_source_reproducible(self) -> None:
        options = PasswordOptions(source=RandomSource.PSEUDO)
        seed_pseudo_random("fixed")
        first = PasswordGenerator().generate(options)
        seed_pseudo_random("fixed")
        assert PasswordGenerator().generate(options) == first

    def test_generate_many(self) -> None:
        passwords = PasswordGenerator().generate_many(PasswordOptions(length=12), 5)
        assert len(passwords) == 5
        assert all(len(p) == 12 for p in passwords)
        with pytest.raises(ValueError):
            PasswordGenerator().generate_many(None, 0)


# =============================================================================
# Passphrase Generator
# =============================================================================


class TestPassphraseGenerator:
    @pytest.mark.parametrize("word_count", range(3, 9))
    def test_word_count(self, word_count: int) -> None:
        options = PassphraseOptions(word_count=word_count)
        phrase = PassphraseGenerator().generate(options)
        assert len(phrase.split("-")) == word_count

    def test_plain_words_follow_adjective_noun_verb(self) -> None:
        options = PassphraseOptions(
            word_count=6,
            include_casing=False,
            include_numbers=False,
            include_symbols=False,
            separator="_",
        )
        words = PassphraseGenerator().generate(options).split("_")
        for index, word in enumerate(words):
            assert word in pools.PASSPHRASE_POOLS[index % 3]

    def test_nouns_capitalised_when_casing_enabled(self) -> None:
        options = PassphraseOptions(
            word_count=3, include_numbers=False, include_symbols=False
        )
        for _ in range(10):
            words = PassphraseGenerator().generate(options).split("-")
            assert words[1][0].isupper()

    @pytest.mark.parametrize("word_count", [2, 9])
    def test_word_count_out_of_range_rejected(self, word_count: int) -> None:
        with pytest.raises(ValidationError):
            PassphraseOptions(word_count=word_count)

    def test_empty_separator_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PassphraseOptions(separator="")


class TestPassphraseStrength:
    def test_strong_passphrase(self) -> None:
        result = estimate_passphrase_strength("correct-horse-battery-staple")
        assert result.score == 80
        assert result.label is PassphraseLabel.STRONG
        assert result.suggestions == []

    def test_weak_passphrase_suggestions(self) -> None:
        result = estimate_passphrase_strength("cat dog")
        assert result.label is PassphraseLabel.WEAK
        assert result.suggestions == [
            "Add separators between words (e.g., use hyphens)",
            "Add numbers to increase complexity",
            "Include special characters",
            "Use at least 4 words for better security",
        ]

    def test_very_strong_passphrase(self) -> None:
        result = estimate_passphrase_strength("Brave-Tiger-runs42!-Calm")
        assert result.label is PassphraseLabel.VERY_STRONG
        assert suggest_passphrase_improvements("Brave-Tiger-runs42!-Calm") == []
