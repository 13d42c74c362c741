"""
Password Generator
==================

Builds passwords in three modes:

- **random**: ``length`` characters drawn from the union of the enabled
  character classes (upper, lower, digits, 32 ASCII symbols), optionally
  without the look-alike characters ``I l 1 O 0``.
- **memorable**: ``Adjective`` + ``Noun`` + 3-digit group + 3-symbol group.
- **recipe**: a template whose characters are substitution tokens
  (see :data:`keysmith.generators.pools.RECIPE_TOKENS`) or literals.

All draws go through :func:`keysmith.generators.random_source.choice`.

Reference:
    NIST SP 800-63B (2017), Section 5.1.1.2 -- Memorized Secret Verifiers.
"""

from __future__ import annotations

import logging

from keysmith.core.models import GenerationMode, PasswordOptions, RandomSource
from keysmith.generators import pools
from keysmith.generators.random_source import choice

logger = logging.getLogger("keysmith.generators")


class PasswordGenerator:
    """Generates passwords from :class:`PasswordOptions`.

    Usage::

        gen = PasswordGenerator()
        pw = gen.generate(PasswordOptions(length=20, symbols=False))
        memorable = gen.generate(PasswordOptions(mode="memorable"))
        templated = gen.generate(PasswordOptions(mode="recipe", recipe="Cw0000"))

    Args:
        source: Default random source when options do not override it.
    """

    def __init__(self, source: RandomSource = RandomSource.CRYPTO) -> None:
        self.source = source

    def generate(self, options: PasswordOptions | None = None) -> str:
        """Generate one password.

        Args:
            options: Generation options; defaults to a 16-char random password.

        Returns:
            The generated password.
        """
        options = options or PasswordOptions(source=self.source)
        if options.mode is GenerationMode.MEMORABLE:
            return self._memorable(options.source)
        if options.mode is GenerationMode.RECIPE:
            return self._recipe(options.recipe, options.source)
        return self._random(options)

    def generate_many(self, options: PasswordOptions | None, count: int) -> list[str]:
        """Generate *count* independent passwords with the same options."""
        if count < 1:
            raise ValueError("count must be at least 1")
        return [self.generate(options) for _ in range(count)]

    # ------------------------------------------------------------------ #
    #  Modes
    # ------------------------------------------------------------------ #

    @staticmethod
    def build_pool(options: PasswordOptions) -> str:
        """Character pool for random mode.

        With no class enabled the pool degrades to lowercase letters.
        """
        pool = ""
        if options.uppercase:
            pool += pools.UPPERCASE
        if options.lowercase:
            pool += pools.LOWERCASE
        if options.numbers:
            pool += pools.DIGITS
        if options.symbols:
            pool += pools.SYMBOLS

        if not pool:
            logger.debug("No character class enabled; falling back to lowercase")
            pool = pools.LOWERCASE

        if options.exclude_ambiguous:
            pool = "".join(c for c in pool if c not in pools.AMBIGUOUS)
        return pool

    def _random(self, options: PasswordOptions) -> str:
        pool = self.build_pool(options)
        return "".join(choice(pool, options.source) for _ in range(options.length))

    @staticmethod
    def _memorable(source: RandomSource) -> str:
        adjective = choice(pools.MEMORABLE_ADJECTIVES, source)
        noun = choice(pools.MEMORABLE_NOUNS, source)
        return (
            adjective.capitalize()
            + noun.capitalize()
            + choice(pools.MEMORABLE_NUMBERS, source)
            + choice(pools.MEMORABLE_SYMBOLS, source)
        )

    @staticmethod
    def _recipe(recipe: str, source: RandomSource) -> str:
        """Resolve *recipe* left to right; unknown characters pass through."""
        out: list[str] = []
        for token in recipe:
            options = pools.RECIPE_TOKENS.get(token)
            out.append(choice(options, source) if options else token)
        return "".join(out)


def generate_password(options: PasswordOptions | None = None) -> str:
    """Module-level convenience wrapper around :class:`PasswordGenerator`."""
    return PasswordGenerator().generate(options)
