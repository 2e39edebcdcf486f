"""
Command-line interface for SeqHMM.
"""

from .main import app, cli_main

__all__ = [
    "app",
    "cli_main"
]
