"""
KeySmith Shared Module
======================

Configuration, structured logging, console presentation, result models,
the async HTTP client and numeric helpers used by the KeySmith tool.
"""

from shared.config import KeySmithConfig, get_config

__all__ = ["KeySmithConfig", "get_config"]
