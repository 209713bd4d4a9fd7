"""
Abstract repository capability consumed by the pipeline.

The pipeline only needs read access: the staged change set, the commits
of a range and reference resolution. :class:`GitClient` is the shipped
implementation; tests substitute an in-memory double.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple


class VersionControlRepository(ABC):
    """Read-only view of a repository."""

    @abstractmethod
    def staged_files(self) -> List[Tuple[str, str]]:
        """Return ``(path, diff_text)`` for every staged file, in repository order."""

    @abstractmethod
    def commits_between(self, base: str, feature: str) -> List[Tuple[str, str, str]]:
        """Return ``(hash, subject, body)`` of commits in ``base..feature``, oldest first."""

    @abstractmethod
    def resolve_ref(self, name: str) -> Optional[str]:
        """Return the commit id ``name`` points to, or ``None`` if it does not resolve."""

    @abstractmethod
    def current_branch(self) -> str:
        """Return the name of the checked-out branch."""
