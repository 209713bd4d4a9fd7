"""
Walking a commit range for the PR summary path.

:func:`walk_commit_range` resolves both ends of ``base..feature`` and
returns the commits in between as :class:`CommitRecord` objects, oldest
first, with their referenced numbers already extracted.
"""

from __future__ import annotations

import logging
from typing import List

from commitbot.errors import EmptyRange, InvalidRange
from commitbot.grouping.group_model import CommitRecord
from commitbot.grouping.pr_grouper import find_referenced_numbers
from commitbot.vcs.base import VersionControlRepository


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


def walk_commit_range(
    repository: VersionControlRepository,
    base: str,
    feature: str,
) -> List[CommitRecord]:
    """Return the commits reachable from ``feature`` but not from ``base``.

    Raises
    ------
    InvalidRange
        If either reference cannot be resolved.
    EmptyRange
        If the feature reference has no commits beyond the base.
    """
    base_id = repository.resolve_ref(base)
    if base_id is None:
        raise InvalidRange(base, "base reference not found")
    feature_id = repository.resolve_ref(feature)
    if feature_id is None:
        raise InvalidRange(feature, "feature reference not found")

    logger.debug("Walking %s (%s) .. %s (%s)", base, base_id[:7], feature, feature_id[:7])
    if base_id == feature_id:
        raise EmptyRange(base, feature)

    records: List[CommitRecord] = []
    for position, (commit_hash, subject, body) in enumerate(repository.commits_between(base, feature)):
        records.append(
            CommitRecord(
                hash=commit_hash,
                subject_line=subject,
                body=body,
                referenced_numbers=find_referenced_numbers(subject, body),
                position=position,
            )
        )

    if not records:
        raise EmptyRange(base, feature)
    logger.debug("Found %d commit(s) in range", len(records))
    return records
