"""
Main module for ChromaGen - imports from __main__ for compatibility.

This module provides a standard import path for the command-line entry
point, which is actually defined in __main__.py.
"""

from .__main__ import main, run_command, setup_logging

__all__ = [
    "main",
    "run_command",
    "setup_logging",
]
