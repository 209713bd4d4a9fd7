"""
Data models shared by the commit and PR pipelines.

A :class:`StagedFile` is produced by the diff collector and receives its
:class:`Classification` from the file classifier. On the PR side a
:class:`CommitRecord` describes one commit of the walked range and a
:class:`PRGroup` collects the commits that reference the same number.
All models are created fresh per run and never persisted.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


class Classification(enum.Enum):
    """Intent category of a staged file."""

    MAIN = "main"
    SUPPORTING = "supporting"
    CONSEQUENTIAL = "consequential"
    IGNORED = "ignored"

    @property
    def label(self) -> str:
        return self.value.capitalize()


#: Order in which classified files are serialized into prompts.
PROMPT_ORDER: Tuple[Classification, ...] = (
    Classification.MAIN,
    Classification.SUPPORTING,
    Classification.CONSEQUENTIAL,
)


@dataclass(frozen=True)
class StagedFile:
    """A single staged file and its unified diff.

    Attributes
    ----------
    path : str
        Path relative to the repository root.
    diff_text : str
        Unified diff against ``HEAD``. Mode-only changes carry an empty
        string here, never ``None``.
    classification : Classification, optional
        ``None`` until the classifier has assigned a kind.
    """

    path: str
    diff_text: str = ""
    classification: Optional[Classification] = None

    @property
    def is_classified(self) -> bool:
        return self.classification is not None


@dataclass(frozen=True)
class CommitRecord:
    """One commit of a walked range."""

    hash: str
    subject_line: str
    body: str = ""
    referenced_numbers: Tuple[int, ...] = ()
    position: int = 0

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def group_number(self) -> Optional[int]:
        """The number deciding this commit's group, or ``None``."""
        return self.referenced_numbers[0] if self.referenced_numbers else None


@dataclass
class PRGroup:
    """Commits sharing a referenced number; ``number=None`` is the ungrouped bucket."""

    number: Optional[int]
    commits: List[CommitRecord] = field(default_factory=list)

    @property
    def is_ungrouped(self) -> bool:
        return self.number is None
