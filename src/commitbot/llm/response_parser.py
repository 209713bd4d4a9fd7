"""
Validation and decoding of model replies.

:func:`parse_response` checks a raw reply against a
:class:`~commitbot.llm.message_model.ResponseSchema` and turns it into a
:class:`~commitbot.llm.message_model.CommitMessage` (or a subclass such as
:class:`~commitbot.llm.message_model.PRSummary`). The subject is
the first non-blank line after reasoning tags and a wrapping code fence
are removed, taken exactly as written. A missing, heading-shaped or too
long subject raises :class:`~commitbot.errors.MalformedResponse` and is
never truncated. Body headings are lenient: labels the schema does not
declare are dropped with a warning.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Type, TypeVar

from commitbot.errors import MalformedResponse
from commitbot.llm.message_model import BodySection, CommitMessage, ResponseSchema


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


_THINKING_PATTERNS = [
    r"<think>.*?</think>",
    r"<thinking>.*?</thinking>",
    r"<thought>.*?</thought>",
    r"<reasoning>.*?</reasoning>",
]
_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\n(.*?)\n?```\s*$", re.DOTALL)
_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s+(.+?)\s*#*\s*$")

M = TypeVar("M", bound=CommitMessage)


def strip_thinking_tags(text: str) -> str:
    """Remove thinking process tags from LLM responses.

    Many reasoning models emit their thinking in XML-like tags such as
    ``<think>`` or ``<reasoning>``. The tags and their contents are removed.

    Examples
    --------
    >>> strip_thinking_tags("<think>reasoning...</think>Answer")
    'Answer'
    """
    result = text
    for pattern in _THINKING_PATTERNS:
        result = re.sub(pattern, "", result, flags=re.DOTALL | re.IGNORECASE)
    return result.strip()


def unwrap_code_fence(text: str) -> str:
    """Return the inside of a reply that is wrapped in a single code fence."""
    match = _FENCE_RE.match(text.strip())
    return match.group(1) if match else text


def _heading_label(line: str) -> Optional[str]:
    match = _HEADING_RE.match(line)
    return match.group(1) if match else None


def parse_response(raw: str, schema: ResponseSchema, message_cls: Type[M] = CommitMessage) -> M:  # type: ignore[assignment]
    """Parse a raw reply into a message.

    Parameters
    ----------
    raw : str
        Text returned by the language model.
    schema : ResponseSchema
        Subject ceiling and the section labels the body may use.
    message_cls : type
        :class:`CommitMessage` or a subclass to instantiate.

    Raises
    ------
    MalformedResponse
        If the subject is missing, empty, a heading, or longer than
        ``schema.subject_max_length``.
    """
    cleaned = unwrap_code_fence(strip_thinking_tags(raw or ""))
    lines = cleaned.splitlines()

    subject_index = next((i for i, line in enumerate(lines) if line.strip()), None)
    if subject_index is None:
        raise MalformedResponse("missing-subject", "the reply is empty", raw)

    # Kept verbatim: whitespace around the subject is not trimmed
    subject = lines[subject_index]
    if _heading_label(subject) is not None:
        raise MalformedResponse(
            "missing-subject",
            f"the reply starts with the heading '{subject}' instead of a subject line",
            raw,
        )
    if schema.subject_max_length and len(subject) > schema.subject_max_length:
        raise MalformedResponse(
            "subject-too-long",
            f"subject is {len(subject)} characters, the limit is {schema.subject_max_length}",
            raw,
        )

    sections: Dict[str, List[str]] = {}
    current: Optional[str] = schema.preamble_label or None
    dropped: List[str] = []
    for line in lines[subject_index + 1:]:
        label = _heading_label(line)
        if label is None:
            if current is not None:
                sections.setdefault(current, []).append(line)
            continue
        current = schema.match_label(label)
        if current is None and label not in dropped:
            dropped.append(label)
            logger.warning("Dropping section '%s' not declared in the response schema", label)

    body = []
    for label, section_lines in sections.items():
        text = "\n".join(section_lines).strip()
        if text:
            body.append(BodySection(label=label, text=text))

    return message_cls(subject=subject, body=body, raw_model_text=raw)


def parse_file_summary(raw: str) -> str:
    """Return a per-file summary reply with reasoning tags removed.

    Raises
    ------
    MalformedResponse
        If nothing remains.
    """
    summary = unwrap_code_fence(strip_thinking_tags(raw or "")).strip()
    if not summary:
        raise MalformedResponse("empty-summary", "the file summary is empty", raw)
    return summary
