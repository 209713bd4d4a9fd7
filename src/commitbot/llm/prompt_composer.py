"""
Prompt composition for commit messages.

:func:`compose_commit_prompt` serializes classified staged files into a
:class:`~commitbot.llm.message_model.Prompt`. Ignored files are left out
entirely and the rest are grouped Main, Supporting, Consequential, each
group keeping the original file order. The same input always yields the
same prompt text. The accompanying :class:`ResponseSchema` lists the
headings the reply may use; its format block is embedded in the system
instructions so the model and the parser agree on the shape.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from commitbot.errors import NoStagedChanges
from commitbot.grouping.group_model import PROMPT_ORDER, Classification, StagedFile
from commitbot.llm import prompts
from commitbot.llm.message_model import Prompt, ResponseSchema


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


DEFAULT_SUBJECT_MAX_LENGTH = 72

SUMMARY_LABEL = "Summary"
NOTES_LABEL = "Notes"
SECTION_LABELS: Dict[Classification, str] = {
    Classification.MAIN: "Main changes",
    Classification.SUPPORTING: "Supporting changes",
    Classification.CONSEQUENTIAL: "Consequential changes",
}

#: Schema for free-text replies such as per-file summaries.
FREE_TEXT_SCHEMA = ResponseSchema(subject_max_length=0, section_labels=())


FileGroups = List[Tuple[Classification, List[StagedFile]]]


def group_files(files: Sequence[StagedFile]) -> FileGroups:
    """Group classified files in prompt order, dropping ignored ones.

    Raises
    ------
    ValueError
        If a file has not been classified.
    """
    buckets: Dict[Classification, List[StagedFile]] = {kind: [] for kind in PROMPT_ORDER}
    for staged in files:
        if staged.classification is None:
            raise ValueError(f"File '{staged.path}' has not been classified")
        if staged.classification is Classification.IGNORED:
            logger.debug("Leaving ignored file out of the prompt: %s", staged.path)
            continue
        buckets[staged.classification].append(staged)
    return [(kind, buckets[kind]) for kind in PROMPT_ORDER if buckets[kind]]


def build_commit_schema(groups: FileGroups, subject_max_length: int = DEFAULT_SUBJECT_MAX_LENGTH) -> ResponseSchema:
    labels = [SUMMARY_LABEL] + [SECTION_LABELS[kind] for kind, _ in groups] + [NOTES_LABEL]
    return ResponseSchema(subject_max_length=subject_max_length, section_labels=tuple(labels))


def render_format_block(schema: ResponseSchema) -> str:
    """Describe the reply shape the parser will enforce."""
    headings = "\n".join(f"  ## {label}" for label in schema.section_labels)
    return (
        "RESPONSE FORMAT (strict):\n"
        f"- Line 1: the subject line, plain text, at most {schema.subject_max_length} characters.\n"
        "- Line 2: blank.\n"
        "- Then sections, each introduced by one of these markdown headings, in this order:\n"
        f"{headings}\n"
        "- Use no other headings. Omit a section that would be empty.\n"
        "- Use bullet points (-) inside sections."
    )


def with_ticket(system: str, ticket_summary: Optional[str]) -> str:
    if ticket_summary:
        return f"{system}\nOverall ticket goal: {ticket_summary}"
    return system


def _render_file(staged: StagedFile, summary: Optional[str]) -> str:
    if summary is not None:
        return f"File: {staged.path}\nSummary:\n{summary.strip()}"
    if not staged.diff_text.strip():
        return f"File: {staged.path}\n(no textual changes, e.g. a mode change)"
    return f"File: {staged.path}\nDiff:\n```diff\n{staged.diff_text.rstrip()}\n```"


def compose_commit_prompt(
    files: Sequence[StagedFile],
    branch: Optional[str] = None,
    ticket_summary: Optional[str] = None,
    summaries: Optional[Mapping[str, str]] = None,
    subject_max_length: int = DEFAULT_SUBJECT_MAX_LENGTH,
) -> Prompt:
    """Compose the commit message prompt for classified files.

    Parameters
    ----------
    files : Sequence[StagedFile]
        Classified files in their original order.
    branch : str, optional
        Current branch name, given to the model as context.
    ticket_summary : str, optional
        Human description of the ticket, appended to the instructions.
    summaries : Mapping[str, str], optional
        Per-file summaries keyed by path; used in place of the diff.
    subject_max_length : int
        Subject ceiling declared in the response schema.

    Raises
    ------
    NoStagedChanges
        If every file was classified as ignored.
    """
    groups = group_files(files)
    if not groups:
        raise NoStagedChanges("All staged files were ignored; nothing to describe.")

    schema = build_commit_schema(groups, subject_max_length)
    summaries = summaries or {}

    parts: List[str] = []
    if branch:
        parts.append(f"Branch: {branch}")
    for kind, members in groups:
        rendered = "\n\n".join(_render_file(staged, summaries.get(staged.path)) for staged in members)
        parts.append(f"{kind.label} files:\n\n{rendered}")

    system = with_ticket(f"{prompts.COMMIT_INSTRUCTIONS}\n\n{render_format_block(schema)}", ticket_summary)
    return Prompt(system=system, user="\n\n".join(parts), schema=schema)


def compose_file_summary_prompt(
    staged: StagedFile,
    branch: Optional[str] = None,
    ticket_summary: Optional[str] = None,
) -> Prompt:
    """Compose the prompt asking for a summary of a single file."""
    category = staged.classification.value if staged.classification else "unclassified"
    header = [f"Branch: {branch}"] if branch else []
    header += [f"File: {staged.path}", f"Category: {category}"]
    diff = staged.diff_text.rstrip() or "(no textual changes)"
    user = "\n".join(header) + f"\n\nDiff:\n```diff\n{diff}\n```"
    return Prompt(system=with_ticket(prompts.FILE_SUMMARY, ticket_summary), user=user, schema=FREE_TEXT_SCHEMA)
