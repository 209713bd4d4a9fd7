"""
Grouping of a commit range by referenced PR/issue number.

Every commit is scanned for ``#<digits>`` tokens, subject first and body
second. The first token decides the commit's group; a commit without any
token lands in the ungrouped bucket. Groups come out in the order their
number first appears in the walk, and the ungrouped bucket, when it has
members, is always last.
"""

from __future__ import annotations

import re
from typing import Dict, List, Sequence, Tuple

from commitbot.grouping.group_model import CommitRecord, PRGroup


_REFERENCE_RE = re.compile(r"#(\d+)")


def find_referenced_numbers(subject: str, body: str = "") -> Tuple[int, ...]:
    """Return the distinct ``#numbers`` of a commit in left-to-right order."""
    numbers: List[int] = []
    for text in (subject, body):
        for match in _REFERENCE_RE.finditer(text or ""):
            number = int(match.group(1))
            if number not in numbers:
                numbers.append(number)
    return tuple(numbers)


def group_commits(commits: Sequence[CommitRecord]) -> List[PRGroup]:
    """Partition ``commits`` into PR groups.

    Parameters
    ----------
    commits : Sequence[CommitRecord]
        Commits in walk order. The order is kept inside every group.

    Returns
    -------
    List[PRGroup]
        Numbered groups by first appearance, then the ungrouped bucket
        if any commit referenced no number.
    """
    groups: Dict[int, PRGroup] = {}
    ungrouped = PRGroup(number=None)
    for commit in commits:
        number = commit.group_number
        if number is None:
            ungrouped.commits.append(commit)
            continue
        if number not in groups:
            groups[number] = PRGroup(number=number)
        groups[number].commits.append(commit)

    result = list(groups.values())
    if ungrouped.commits:
        result.append(ungrouped)
    return result


def distinct_numbers(groups: Sequence[PRGroup]) -> int:
    """Count the numbered groups, ignoring the ungrouped bucket."""
    return sum(1 for group in groups if not group.is_ungrouped)
