"""
KeySmith Configuration Management
=================================

Centralised, read-only configuration for the KeySmith password toolkit
using Python dataclasses and a TOML source file.

Configuration is kept apart from code (Wiggins, 2011). Nothing here is
ever written back to disk: the file is an input, and in-memory state
ends with the process.

References:
    - Wiggins, A. (2011). The Twelve-Factor App. https://12factor.net/
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any


_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "keysmith.toml"


# ========================== Component Configs ==============================


@dataclass(frozen=False, slots=True)
class GeneratorConfig:
    """Defaults for the password and passphrase generators.

    ``default_source`` names a :class:`keysmith.generators.RandomSource`
    value (``crypto``, ``pseudo`` or ``mixed``).
    """

    default_length: int = 16
    default_source: str = "crypto"
    default_recipe: str = "Ww00##"
    passphrase_words: int = 4
    separator: str = "-"


@dataclass(frozen=False, slots=True)
class AnalyzerConfig:
    """Thresholds for the policy validator and similarity comparator."""

    min_length: int = 12
    history_size: int = 5
    min_score: int = 3
    similarity_warn: float = 0.5
    similarity_block: float = 0.7


@dataclass(frozen=False, slots=True)
class BreachConfig:
    """Settings for the k-anonymity breach lookup.

    Only the first five hex characters of the SHA-1 digest are ever sent
    to ``api_url``.

    Reference:
        Hunt, T. (2018). I've Just Launched "Pwned Passwords" V2 With Half
        a Billion Passwords for Download. https://www.troyhunt.com/
    """

    api_url: str = "https://api.pwnedpasswords.com"
    timeout: float = 10.0
    max_retries: int = 2
    backoff_base: float = 0.5
    cache_ttl: float = 300.0
    debounce_seconds: float = 0.8
    add_padding: bool = True
    user_agent: str = "KeySmith/1.0 (password-strength)"


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Global settings: logging verbosity and general preferences."""

    log_level: str = "WARNING"
    log_file: str | None = None
    log_json: bool = False
    debug: bool = False


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class KeySmithConfig:
    """Master configuration aggregating all component and global settings.

    Usage:
        >>> config = KeySmithConfig.load()                 # from default path
        >>> config = KeySmithConfig.load("custom.toml")    # from custom path
        >>> config.generator.default_length
        16
        >>> config.breach.debounce_seconds
        0.8
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    breach: BreachConfig = field(default_factory=BreachConfig)

    # ------------------------------------------------------------------ #
    #  TOML Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def load(cls, path: str | Path | None = None) -> KeySmithConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``keysmith.toml`` in the
        project root. Missing keys fall back to dataclass defaults.

        Args:
            path: Filesystem path to a TOML configuration file.

        Returns:
            A fully-populated :class:`KeySmithConfig` instance.

        Raises:
            FileNotFoundError: If an explicitly provided path does not exist.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> KeySmithConfig:
        """Build a config from an already-parsed TOML mapping."""
        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            generator=cls._build_section(GeneratorConfig, raw.get("generator", {})),
            analyzer=cls._build_section(AnalyzerConfig, raw.get("analyzer", {})),
            breach=cls._build_section(BreachConfig, raw.get("breach", {})),
        )

    # ------------------------------------------------------------------ #
    #  Serialisation helpers
    # ------------------------------------------------------------------ #

    def to_dict(self) -> dict[str, Any]:
        """Serialise the entire configuration tree to a plain dictionary."""
        return asdict(self)

    # ------------------------------------------------------------------ #
    #  Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _build_section(section: type, data: dict[str, Any]) -> Any:
        """Instantiate *section* from *data*, dropping keys it does not declare."""
        known = {f.name for f in fields(section)}
        return section(**{k: v for k, v in data.items() if k in known})


# ========================= Module-level convenience ========================

def get_config(path: str | Path | None = None) -> KeySmithConfig:
    """Module-level convenience wrapper around :meth:`KeySmithConfig.load`.

    Caches the result so that repeated callers share one instance.
    """
    if not hasattr(get_config, "_cached") or path is not None:
        get_config._cached = KeySmithConfig.load(path)  # type: ignore[attr-defined]
    return get_config._cached  # type: ignore[attr-defined]
