"""
Configuration loading for commitbot.

See :mod:`commitbot.config.loader` for the file locations and merge
order.
"""

from .loader import ConfigError, load_config  # noqa: F401
