"""
Utilities for collecting staged diffs.

See :func:`commitbot.diff.diff_collector.collect_staged_files`.
"""

from .diff_collector import collect_staged_files  # noqa: F401
