"""
Classification and grouping logic.

This package assigns intent categories to staged files
(:mod:`commitbot.grouping.file_classifier`), walks commit ranges
(:mod:`commitbot.grouping.commit_range_walker`) and groups their commits
by referenced number (:mod:`commitbot.grouping.pr_grouper`).
"""

from .group_model import Classification, CommitRecord, PRGroup, StagedFile  # noqa: F401
from .file_classifier import FileClassifier, classify_automatically, classify_interactively  # noqa: F401
from .pr_grouper import group_commits  # noqa: F401
from .commit_range_walker import walk_commit_range  # noqa: F401
