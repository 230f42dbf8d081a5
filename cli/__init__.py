"""
CLI module for rowsnap.

The command-line interface providing list, show, diff, and verify commands.
"""

from cli.main import app

__all__ = ["app"]
