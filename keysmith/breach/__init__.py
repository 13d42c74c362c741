"""
KeySmith Breach Lookup
======================

k-anonymity lookups against the Pwned Passwords range API, plus a
debounced monitor for interactive use.
"""

from keysmith.breach.checker import (
    BreachChecker,
    check_breach,
    parse_range_response,
    sha1_split,
)
from keysmith.breach.monitor import BreachMonitor

__all__ = [
    "BreachChecker",
    "BreachMonitor",
    "check_breach",
    "parse_range_response",
    "sha1_split",
]
