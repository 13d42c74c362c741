"""
KeySmith Output Module
======================

Console display for KeySmith results.
"""

from keysmith.output.console import KeySmithConsoleOutput

__all__ = ["KeySmithConsoleOutput"]
