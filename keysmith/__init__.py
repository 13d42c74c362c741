"""
KeySmith -- Password Strength & Generation Toolkit
==================================================

Estimates password strength (entropy, keyboard patterns, guessability),
generates passwords and passphrases from a choice of random sources,
checks breaches through a k-anonymity range API, compares passwords for
similarity and tests random source quality.

Modules:
    - keysmith.core.engine: Central orchestrator
    - keysmith.core.models: Pydantic data models
    - keysmith.generators: Random sources, passwords and passphrases
    - keysmith.analyzers: Entropy, patterns, strength, similarity, policy
    - keysmith.breach: Breach checker and debounced monitor
    - keysmith.output: Console output
    - keysmith.cli: Click-based command-line interface

References:
    - NIST SP 800-63B (2017). Digital Identity Guidelines.
    - Wheeler, D. L. (2016). zxcvbn: Low-Budget Password Strength
      Estimation. USENIX Security Symposium.
"""

__version__ = "1.0.0"
__tool_name__ = "keysmith"
