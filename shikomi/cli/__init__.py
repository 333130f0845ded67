"""
CLI module for Shikomi.

Provides the ``shikomi`` entry point that is installed as a console script.
"""

from .commands import main

__all__ = ["main"]
