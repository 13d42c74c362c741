"""
KeySmith Generators
===================

Password and passphrase construction on top of a pluggable random
source provider.
"""

from keysmith.generators.random_source import (
    EntropyMixer,
    choice,
    describe_sources,
    feed_entropy,
    next_uniform,
    random_bytes,
    seed_pseudo_random,
)
from keysmith.generators.password import PasswordGenerator, generate_password
from keysmith.generators.passphrase import (
    PassphraseGenerator,
    estimate_passphrase_strength,
    generate_passphrase,
    suggest_passphrase_improvements,
)

__all__ = [
    "EntropyMixer",
    "PassphraseGenerator",
    "PasswordGenerator",
    "choice",
    "describe_sources",
    "estimate_passphrase_strength",
    "feed_entropy",
    "generate_passphrase",
    "generate_password",
    "next_uniform",
    "random_bytes",
    "seed_pseudo_random",
    "suggest_passphrase_improvements",
]
