"""
Error taxonomy for the commitbot pipeline.

Three of these errors are clean terminations rather than failures:
:class:`NoStagedChanges`, :class:`EmptyRange` and :class:`UserAborted`
mean there is simply nothing to do, and the CLI reports them plainly
without a traceback. :class:`InvalidRange` and :class:`MalformedResponse`
carry enough context for the caller to correct the input or fall back to
the raw model text. Transport level failures live in
:mod:`commitbot.llm.base`.
"""

from __future__ import annotations

from typing import Optional


class CommitbotError(Exception):
    """Base class for all errors raised by the pipeline."""

    #: Clean terminations are reported without stack detail and exit 0.
    clean_exit = False


class NoStagedChanges(CommitbotError):
    """Raised when the index holds no staged changes."""

    clean_exit = True

    def __init__(self, message: str = "No staged changes found.") -> None:
        super().__init__(message)


class EmptyRange(CommitbotError):
    """Raised when the feature reference has no commits beyond the base."""

    clean_exit = True

    def __init__(self, base: str, feature: str) -> None:
        self.base = base
        self.feature = feature
        super().__init__(f"No commits found between {base} and {feature}.")


class UserAborted(CommitbotError):
    """Raised when the operator cancels interactive classification."""

    clean_exit = True

    def __init__(self, message: str = "Aborted by user; no message generated.") -> None:
        super().__init__(message)


class InvalidRange(CommitbotError):
    """Raised when a reference of a commit range cannot be resolved."""

    def __init__(self, reference: str, detail: Optional[str] = None) -> None:
        self.reference = reference
        message = f"Cannot resolve reference '{reference}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class MalformedResponse(CommitbotError):
    """Raised when the model reply violates the expected response schema.

    Attributes
    ----------
    rule : str
        Short name of the violated rule, e.g. ``"subject-too-long"``.
    raw_model_text : str
        The unparsed reply, kept so callers can display it as-is.
    """

    def __init__(self, rule: str, message: str, raw_model_text: str) -> None:
        self.rule = rule
        self.raw_model_text = raw_model_text
        super().__init__(f"Malformed model response ({rule}): {message}")
