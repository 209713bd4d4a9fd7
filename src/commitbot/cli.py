"""
Command line interface for the commitbot tool.

This module defines the ``main`` click group used as the entry point of
the ``commitbot`` command. Without a subcommand it generates a commit
message for the staged changes (``--ask`` switches to interactive
classification); ``commitbot pr <base> [feature]`` summarizes a commit
range as a pull request description. The finished message is the only
thing written to stdout; progress, prompts and diagnostics go to stderr.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import click
from click.core import ParameterSource

from commitbot import __version__
from commitbot.config.loader import ConfigError, load_config
from commitbot.errors import CommitbotError, InvalidRange, MalformedResponse, UserAborted
from commitbot.grouping.file_classifier import MENU
from commitbot.grouping.group_model import StagedFile
from commitbot.llm.base import LanguageModelClient, LLMError
from commitbot.llm.commit_message_generator import CommitMessageGenerator
from commitbot.llm.message_model import CommitMessage
from commitbot.llm.noop_client import NoopClient
from commitbot.llm.ollama_client import OllamaClient
from commitbot.llm.openai_client import OpenAIClient
from commitbot.vcs.git_client import GitClient, GitError

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_NO_REPO = 3
EXIT_INVALID_RANGE = 4
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_LLM_FAILURE = 7
EXIT_MALFORMED_RESPONSE = 8


# ---------------------------------------------------------------------------
# Status display utilities (stderr only)
# ---------------------------------------------------------------------------

def print_info(message: str, indent: int = 0) -> None:
    """Print an info message."""
    click.echo(f"{'  ' * indent}ℹ {message}", err=True)


def print_success(message: str, indent: int = 0) -> None:
    """Print a success message."""
    click.echo(f"{'  ' * indent}✓ {message}", err=True)


def print_warning(message: str, indent: int = 0) -> None:
    """Print a warning message."""
    click.echo(f"{'  ' * indent}⚠ {message}", err=True)


def print_error(message: str, indent: int = 0) -> None:
    """Print an error message."""
    click.echo(f"{'  ' * indent}✗ {message}", err=True)


def configure_logging(debug: bool) -> None:
    # force=True so repeated invocations (tests) reconfigure handlers
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )


# ---------------------------------------------------------------------------
# Setup helpers
# ---------------------------------------------------------------------------

@dataclass
class Options:
    """Global options shared by the commit and PR commands."""

    ask: bool = False
    apply: bool = False
    debug: bool = False
    model: Optional[str] = None
    no_model: bool = False
    api_key: Optional[str] = None
    ticket_summary: Optional[str] = None
    timeout: Optional[float] = None


def detect_repo(start_dir: Path) -> Path:
    """Return the Git repository root containing ``start_dir``.

    Raises
    ------
    click.exceptions.Exit
        With ``EXIT_NO_REPO`` if no repository is found.
    """
    repo_root = GitClient.find_repo_root(start_dir)
    if repo_root is None:
        print_error("No Git repository found in current directory or parent directories.")
        raise click.exceptions.Exit(EXIT_NO_REPO)
    logger.debug("Repository root: %s", repo_root)
    return repo_root


def build_llm_client(config: Dict[str, Any], options: Options) -> LanguageModelClient:
    """Build the language model client selected by config and flags.

    Raises
    ------
    ConfigError
        If the OpenAI provider is selected without an API key.
    """
    model = options.model or config["model"]
    provider = config["provider"]
    if options.no_model or provider == "none" or model.lower() == "none":
        logger.debug("Using NoopClient (no model calls)")
        return NoopClient()

    timeout = float(options.timeout or config["request_timeout"])
    if provider == "ollama":
        logger.debug("Using OllamaClient with model: %s", model)
        return OllamaClient(
            base_url=config["base_url"],
            port=config["port"],
            model=model,
            request_timeout=timeout,
            max_tokens=config.get("max_tokens"),
            stream=bool(config.get("stream")),
            on_chunk=lambda chunk: click.echo(chunk, nl=False, err=True),
        )

    if not options.api_key:
        raise ConfigError("OPENAI_API_KEY (or --api-key) is required unless --no-model or model=none is used")
    logger.debug("Using OpenAIClient with model: %s", model)
    return OpenAIClient(
        api_key=options.api_key,
        model=model,
        request_timeout=timeout,
        max_tokens=config.get("max_tokens"),
    )


def setup(options: Options) -> Tuple[GitClient, CommitMessageGenerator]:
    """Locate the repository, load configuration and build the generator."""
    repo_root = detect_repo(Path.cwd())
    try:
        config = load_config(repo_root)
        llm_client = build_llm_client(config, options)
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

    generator = CommitMessageGenerator(
        llm_client,
        timeout=options.timeout or float(config["request_timeout"]),
        subject_max_length=config["max_subject_length"],
    )
    return GitClient(repo_root), generator


def run_guarded(action: Callable[[], None]) -> None:
    """Run ``action`` and translate pipeline errors into exit codes."""
    try:
        action()
    except click.exceptions.Exit:
        raise
    except CommitbotError as exc:
        if exc.clean_exit:
            print_info(str(exc))
            raise click.exceptions.Exit(EXIT_SUCCESS)
        if isinstance(exc, MalformedResponse):
            print_error(str(exc))
            click.echo(exc.raw_model_text)
            raise click.exceptions.Exit(EXIT_MALFORMED_RESPONSE)
        if isinstance(exc, InvalidRange):
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_INVALID_RANGE)
        print_error(str(exc))
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)
    except LLMError as exc:
        print_error(f"LLM error: {exc}")
        raise click.exceptions.Exit(EXIT_LLM_FAILURE)
    except GitError as exc:
        print_error(f"VCS error: {exc}")
        raise click.exceptions.Exit(EXIT_VCS_FAILURE)
    except Exception as exc:
        logger.debug("Unhandled error: %s", exc, exc_info=True)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)


# ---------------------------------------------------------------------------
# Interactive prompts
# ---------------------------------------------------------------------------

def ask_classification(staged: StagedFile, index: int, total: int) -> Optional[str]:
    """Show one staged file and return the operator's answer, or ``None`` to cancel."""
    click.echo(f"\n[{index} / {total}] {click.style(staged.path, fg='cyan', bold=True)}", err=True)
    if staged.diff_text.strip():
        click.echo(staged.diff_text.rstrip(), err=True)
    else:
        click.echo("   (no textual changes)", err=True)
    click.echo("How does this file relate to the ticket?", err=True)
    for key, description in MENU:
        click.echo(f"  {key}) {description}", err=True)
    try:
        return click.prompt("Enter choice [1-4, q to quit]", default="", show_default=False, err=True)
    except click.Abort:
        return None


def report_invalid_answer(answer: str) -> None:
    print_warning(f"Invalid choice '{answer}'. Please enter 1, 2, 3, or 4.")


def report_summary_progress(staged: StagedFile, index: int, total: int) -> None:
    print_info(f"Summarizing [{index}/{total}] {staged.path}")


def ask_ticket_summary() -> Optional[str]:
    try:
        answer = click.prompt(
            "Optional: brief ticket summary (enter to skip)",
            default="",
            show_default=False,
            err=True,
        )
    except click.Abort:
        raise UserAborted()
    return answer.strip() or None


def emit_message(message: CommitMessage) -> str:
    """Write the finished message to stdout and return its text."""
    text = message.render()
    click.echo(text)
    return text



# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def global_options(func: Callable) -> Callable:
    """Attach the options accepted both before and after a subcommand."""
    decorators = [
        click.option("--ask", is_flag=True, help="Classify each staged file interactively and summarize it per file."),
        click.option("--apply", is_flag=True, help="Write the message into .git/COMMIT_EDITMSG (no commit is created)."),
        click.option("--debug", is_flag=True, help="Log prompts, responses and token usage."),
        click.option("--model", help="Model name to use. 'none' acts like --no-model."),
        click.option("--no-model", "no_model", is_flag=True, help="Disable model calls and return dummy responses."),
        click.option("--api-key", "api_key", envvar="OPENAI_API_KEY", help="OpenAI API key (default: $OPENAI_API_KEY)."),
        click.option("--ticket-summary", "ticket_summary", help="Brief description of the ticket for extra context."),
        click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Model request timeout in seconds."),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def merge_options(ctx: click.Context, options: Options, **given: Any) -> Options:
    """Overlay options repeated after a subcommand onto the group's options.

    Values the subcommand only picked up from the environment do not
    replace one already given to the group.
    """
    for name, value in given.items():
        from_env = ctx.get_parameter_source(name) is ParameterSource.ENVIRONMENT
        if value and not (from_env and getattr(options, name)):
            setattr(options, name, value)
    return options


def check_options(options: Options) -> None:
    if options.model and options.no_model:
        print_error("--model and --no-model are mutually exclusive.")
        raise click.exceptions.Exit(EXIT_INVALID_USAGE)


@click.group(invoke_without_command=True)
@global_options
@click.version_option(version=__version__, prog_name="commitbot")
@click.pass_context
def main(
    ctx: click.Context,
    ask: bool,
    apply: bool,
    debug: bool,
    model: Optional[str],
    no_model: bool,
    api_key: Optional[str],
    ticket_summary: Optional[str],
    timeout: Optional[float],
) -> None:
    """LLM-assisted Git commit message and PR description generator.

    Without a subcommand, generates a commit message for the staged changes.
    """
    configure_logging(debug)
    options = Options(
        ask=ask,
        apply=apply,
        debug=debug,
        model=model,
        no_model=no_model,
        api_key=api_key,
        ticket_summary=ticket_summary,
        timeout=timeout,
    )
    ctx.obj = options
    if ctx.invoked_subcommand is not None:
        return

    check_options(options)
    repository, generator = setup(options)

    def commit_action() -> None:
        branch = repository.current_branch()
        message = generator.generate_for_staged_changes(
            repository,
            ask=ask_classification if options.ask else None,
            on_invalid=report_invalid_answer,
            summarize=options.ask,
            branch=branch,
            ticket_summary=options.ticket_summary,
            on_progress=report_summary_progress,
            ask_ticket=ask_ticket_summary if options.ask else None,
        )
        text = emit_message(message)
        if options.apply:
            path = repository.write_commit_editmsg(text)
            print_success(f"Wrote commit message to {path}")

    run_guarded(commit_action)


@main.command("pr")
@click.argument("base")
@click.argument("feature", required=False)
@click.option("--pr", "force_prs", is_flag=True, help="Group the summary by referenced PR numbers.")
@click.option("--commit", "force_commits", is_flag=True, help="Summarize commit by commit.")
@global_options
@click.pass_context
def pr_command(
    ctx: click.Context,
    base: str,
    feature: Optional[str],
    force_prs: bool,
    force_commits: bool,
    **given: Any,
) -> None:
    """Generate a pull request description for BASE..FEATURE.

    FEATURE defaults to the currently checked-out branch.
    """
    options = merge_options(ctx, ctx.obj, **given)
    configure_logging(options.debug)
    check_options(options)
    if force_prs and force_commits:
        print_error("--pr and --commit are mutually exclusive.")
        raise click.exceptions.Exit(EXIT_INVALID_USAGE)

    repository, generator = setup(options)

    def pr_action() -> None:
        feature_ref = feature or repository.current_branch()
        summary = generator.generate_for_range(
            repository,
            base,
            feature_ref,
            force_prs=force_prs,
            force_commits=force_commits,
            ticket_summary=options.ticket_summary,
        )
        emit_message(summary)

    run_guarded(pr_action)
