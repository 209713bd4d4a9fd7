"""
Commit message and PR summary generation.

The :class:`CommitMessageGenerator` runs the two pipelines end to end:

* commit path: collect staged files, classify them (automatically, or
  interactively when an ``ask`` callback is supplied), optionally
  summarize each file, compose the prompt, send it, parse the reply;
* PR path: walk ``base..feature``, group the commits by referenced
  number, compose the summary prompt, send it, parse the reply.

Every stage finishes before the next begins and exactly one model request
is in flight at a time. Errors from the model client are not retried or
masked; they propagate to the caller unchanged.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from commitbot.diff.diff_collector import collect_staged_files
from commitbot.grouping.commit_range_walker import walk_commit_range
from commitbot.grouping.file_classifier import AskFunc, classify_automatically, classify_interactively
from commitbot.grouping.group_model import Classification, CommitRecord, StagedFile
from commitbot.grouping.pr_grouper import group_commits
from commitbot.llm.base import LanguageModelClient
from commitbot.llm.message_model import CommitMessage, PRSummary, Prompt
from commitbot.llm.prompt_composer import (
    DEFAULT_SUBJECT_MAX_LENGTH,
    compose_commit_prompt,
    compose_file_summary_prompt,
)
from commitbot.llm.response_parser import parse_file_summary, parse_response
from commitbot.llm.summary_composer import PRSummaryMode, choose_mode, compose_pr_prompt, parse_pr_summary
from commitbot.vcs.base import VersionControlRepository


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class CommitMessageGenerator:
    """Generate commit messages and PR summaries with a language model."""

    def __init__(
        self,
        llm_client: LanguageModelClient,
        timeout: Optional[float] = None,
        subject_max_length: int = DEFAULT_SUBJECT_MAX_LENGTH,
    ) -> None:
        self.llm_client = llm_client
        self.timeout = timeout
        self.subject_max_length = subject_max_length

    def _send(self, prompt: Prompt) -> str:
        logger.debug("System prompt:\n%s", prompt.system)
        logger.debug("User prompt:\n%s", prompt.user)
        raw = self.llm_client.request(prompt, prompt.schema, self.timeout)
        logger.debug("Model response:\n%s", raw)
        return raw

    # ------------------------------------------------------------------
    # Commit path
    # ------------------------------------------------------------------
    def summarize_files(
        self,
        files: Sequence[StagedFile],
        branch: Optional[str] = None,
        ticket_summary: Optional[str] = None,
        on_progress: Optional[Callable[[StagedFile, int, int], None]] = None,
    ) -> Dict[str, str]:
        """Summarize every non-ignored file, one request at a time."""
        targets = [f for f in files if f.classification is not Classification.IGNORED]
        summaries: Dict[str, str] = {}
        for index, staged in enumerate(targets, start=1):
            if on_progress is not None:
                on_progress(staged, index, len(targets))
            raw = self._send(compose_file_summary_prompt(staged, branch, ticket_summary))
            summaries[staged.path] = parse_file_summary(raw)
        return summaries

    def generate_commit_message(
        self,
        files: Sequence[StagedFile],
        branch: Optional[str] = None,
        ticket_summary: Optional[str] = None,
        summaries: Optional[Dict[str, str]] = None,
    ) -> CommitMessage:
        """Compose, send and parse the commit message prompt for classified files."""
        prompt = compose_commit_prompt(
            files,
            branch=branch,
            ticket_summary=ticket_summary,
            summaries=summaries,
            subject_max_length=self.subject_max_length,
        )
        return parse_response(self._send(prompt), prompt.schema)

    def generate_for_staged_changes(
        self,
        repository: VersionControlRepository,
        ask: Optional[AskFunc] = None,
        on_invalid: Optional[Callable[[str], None]] = None,
        summarize: bool = False,
        branch: Optional[str] = None,
        ticket_summary: Optional[str] = None,
        on_progress: Optional[Callable[[StagedFile, int, int], None]] = None,
        ask_ticket: Optional[Callable[[], Optional[str]]] = None,
    ) -> CommitMessage:
        """Run the whole commit path against ``repository``.

        ``ask_ticket`` is called once the staged set is known to be
        non-empty, and only when no ``ticket_summary`` was given.

        Raises
        ------
        NoStagedChanges
            Before any model request when nothing is staged.
        UserAborted
            If the operator cancels interactive classification.
        """
        files = collect_staged_files(repository)
        if ticket_summary is None and ask_ticket is not None:
            ticket_summary = ask_ticket()
        if ask is None:
            classified = classify_automatically(files)
        else:
            classified = classify_interactively(files, ask, on_invalid)

        ignored = [f.path for f in classified if f.classification is Classification.IGNORED]
        if ignored:
            logger.info("Ignored %d file(s): %s", len(ignored), ", ".join(ignored))

        summaries = self.summarize_files(classified, branch, ticket_summary, on_progress) if summarize else None
        return self.generate_commit_message(classified, branch, ticket_summary, summaries)

    # ------------------------------------------------------------------
    # PR path
    # ------------------------------------------------------------------
    def generate_pr_summary(
        self,
        commits: Sequence[CommitRecord],
        base: str,
        feature: str,
        force_prs: bool = False,
        force_commits: bool = False,
        ticket_summary: Optional[str] = None,
    ) -> PRSummary:
        """Group ``commits`` and produce a PR description."""
        groups = group_commits(commits)
        mode: PRSummaryMode = choose_mode(groups, force_prs, force_commits)
        logger.debug("PR mode: base=%s, feature=%s, mode=%s", base, feature, mode.value)
        prompt = compose_pr_prompt(
            groups,
            base,
            feature,
            mode=mode,
            ticket_summary=ticket_summary,
            subject_max_length=self.subject_max_length,
        )
        return parse_pr_summary(self._send(prompt), prompt.schema)

    def generate_for_range(
        self,
        repository: VersionControlRepository,
        base: str,
        feature: str,
        force_prs: bool = False,
        force_commits: bool = False,
        ticket_summary: Optional[str] = None,
    ) -> PRSummary:
        """Run the whole PR path for ``base..feature``.

        Raises
        ------
        InvalidRange
            If either reference does not resolve.
        EmptyRange
            If there is nothing between the references.
        """
        commits: List[CommitRecord] = walk_commit_range(repository, base, feature)
        return self.generate_pr_summary(commits, base, feature, force_prs, force_commits, ticket_summary)
