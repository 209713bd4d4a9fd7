"""
Version control integrations.

:class:`VersionControlRepository` is the read-only capability the
pipeline depends on; :class:`GitClient` implements it on top of the
``git`` executable.
"""

from .base import VersionControlRepository  # noqa: F401
from .git_client import GitClient, GitError  # noqa: F401
