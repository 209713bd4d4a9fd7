"""
Staged diff collection.

This module turns the repository's staged change set into an ordered list
of :class:`~commitbot.grouping.group_model.StagedFile` records. The
caller provides any :class:`~commitbot.vcs.base.VersionControlRepository`
implementation; nothing is written to the repository.
"""

from __future__ import annotations

import logging
from typing import List, Set

from commitbot.errors import NoStagedChanges
from commitbot.grouping.group_model import StagedFile
from commitbot.vcs.base import VersionControlRepository


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


def collect_staged_files(repository: VersionControlRepository) -> List[StagedFile]:
    """Collect every staged file with its unified diff.

    Parameters
    ----------
    repository : VersionControlRepository
        Source of the staged change set.

    Returns
    -------
    List[StagedFile]
        One unclassified record per staged path, in repository order.

    Raises
    ------
    NoStagedChanges
        If nothing is staged. This is an expected terminal condition.
    """
    files: List[StagedFile] = []
    seen: Set[str] = set()
    for path, diff_text in repository.staged_files():
        if path in seen:
            logger.debug("Skipping duplicate staged entry for %s", path)
            continue
        seen.add(path)
        # Mode-only changes may come back without any diff text; keep an
        # empty string so every staged file is still represented.
        files.append(StagedFile(path=path, diff_text=diff_text or ""))

    if not files:
        raise NoStagedChanges()

    logger.debug("Collected %d staged file(s)", len(files))
    return files
