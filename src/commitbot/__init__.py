"""
Top-level package for commitbot.

This package exposes the main CLI entry point via the
``commitbot.cli`` module.
"""

__all__ = ["__version__"]

__version__ = "0.3.0"
