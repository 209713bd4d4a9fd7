"""
Prompt composition and parsing for pull request summaries.

The payload is the ordered :class:`~commitbot.grouping.group_model.PRGroup`
list. In ``prs`` mode every group is rendered as a cluster of commit
subjects under its ``PR #n`` label, with the ungrouped bucket last. In
``commits`` mode the same commits are listed oldest first, each tagged
with its PR number. Replies go through the shared response parser.
"""

from __future__ import annotations

import enum
from typing import List, Optional, Sequence

from commitbot.grouping.group_model import CommitRecord, PRGroup
from commitbot.grouping.pr_grouper import distinct_numbers
from commitbot.llm import prompts
from commitbot.llm.message_model import PRSummary, Prompt, ResponseSchema
from commitbot.llm.prompt_composer import DEFAULT_SUBJECT_MAX_LENGTH, render_format_block, with_ticket
from commitbot.llm.response_parser import parse_response


PR_SECTION_LABELS = ("Overview", "Changes", "Testing / Validation", "Notes / Risks")


class PRSummaryMode(enum.Enum):
    COMMITS = "commits"
    PRS = "prs"


def choose_mode(groups: Sequence[PRGroup], force_prs: bool = False, force_commits: bool = False) -> PRSummaryMode:
    """Pick the rendering mode; PR clusters when two or more numbers are referenced."""
    if force_prs:
        return PRSummaryMode.PRS
    if force_commits:
        return PRSummaryMode.COMMITS
    return PRSummaryMode.PRS if distinct_numbers(groups) >= 2 else PRSummaryMode.COMMITS


def build_pr_schema(subject_max_length: int = DEFAULT_SUBJECT_MAX_LENGTH) -> ResponseSchema:
    return ResponseSchema(subject_max_length=subject_max_length, section_labels=PR_SECTION_LABELS)


def _render_by_prs(groups: Sequence[PRGroup]) -> List[str]:
    lines = ["Pull requests contributing to this branch (oldest commits first):"]
    for group in groups:
        if group.is_ungrouped:
            lines.append("")
            lines.append("Commits without associated PR numbers (may be small fixes or direct pushes):")
        else:
            lines.append("")
            lines.append(f"PR #{group.number}:")
        for commit in group.commits:
            lines.append(f"- {commit.short_hash}: {commit.subject_line.strip()}")
    return lines


def _render_by_commits(groups: Sequence[PRGroup]) -> List[str]:
    commits: List[CommitRecord] = [commit for group in groups for commit in group.commits]
    commits.sort(key=lambda commit: commit.position)
    lines = ["Commit history (oldest first):"]
    for commit in commits:
        tag = f" (PR #{commit.group_number})" if commit.group_number is not None else ""
        lines.append(f"- {commit.short_hash}{tag}: {commit.subject_line.strip()}")
        if commit.body.strip():
            lines.append("  Body:")
            lines.extend(f"  {body_line}" for body_line in commit.body.strip().splitlines())
    return lines


def compose_pr_prompt(
    groups: Sequence[PRGroup],
    base: str,
    feature: str,
    mode: PRSummaryMode = PRSummaryMode.PRS,
    ticket_summary: Optional[str] = None,
    subject_max_length: int = DEFAULT_SUBJECT_MAX_LENGTH,
) -> Prompt:
    """Compose the PR description prompt for grouped commits."""
    schema = build_pr_schema(subject_max_length)
    header = [f"Base branch: {base}", f"Feature branch: {feature}", f"Summary mode: {mode.value}", ""]
    body = _render_by_prs(groups) if mode is PRSummaryMode.PRS else _render_by_commits(groups)
    system = with_ticket(f"{prompts.PR_INSTRUCTIONS}\n\n{render_format_block(schema)}", ticket_summary)
    return Prompt(system=system, user="\n".join(header + body), schema=schema)


def parse_pr_summary(raw: str, schema: ResponseSchema) -> PRSummary:
    """Parse a PR description reply; fails like :func:`parse_response`."""
    return parse_response(raw, schema, PRSummary)
