"""
Data models flowing into and out of the language model.

A :class:`Prompt` pairs the system instructions and the user payload with
the :class:`ResponseSchema` the reply must satisfy. Parsed replies become
a :class:`CommitMessage` or a :class:`PRSummary`; both keep the raw model
text for fallback display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class ResponseSchema:
    """Machine-checkable shape of an expected model reply.

    Attributes
    ----------
    subject_max_length : int
        Ceiling for the first line of the reply.
    section_labels : Tuple[str, ...]
        Headings allowed in the body, in presentation order. The first
        label also receives any text between the subject and the first
        heading.
    """

    subject_max_length: int
    section_labels: Tuple[str, ...]

    @property
    def preamble_label(self) -> str:
        return self.section_labels[0] if self.section_labels else ""

    def match_label(self, label: str) -> Optional[str]:
        """Return the schema spelling of ``label``, or ``None`` if it is not declared."""
        wanted = label.strip().rstrip(":").strip().lower()
        for known in self.section_labels:
            if known.lower() == wanted:
                return known
        return None

    def to_dict(self) -> Dict[str, object]:
        return {
            "subject_max_length": self.subject_max_length,
            "sections": list(self.section_labels),
        }


@dataclass(frozen=True)
class Prompt:
    """System instructions, user payload and the expected reply schema."""

    system: str
    user: str
    schema: ResponseSchema


@dataclass(frozen=True)
class BodySection:
    label: str
    text: str


@dataclass
class CommitMessage:
    """A parsed commit message.

    Attributes
    ----------
    subject : str
        Single, non-empty line within the configured ceiling.
    body : List[BodySection]
        Sections in the order the model produced them.
    raw_model_text : str
        The unparsed reply.
    """

    subject: str
    body: List[BodySection] = field(default_factory=list)
    raw_model_text: str = ""

    def section(self, label: str) -> Optional[BodySection]:
        for section in self.body:
            if section.label == label:
                return section
        return None

    def render(self) -> str:
        """Render the message as plain commit text."""
        parts = [self.subject]
        for section in self.body:
            parts.append(f"## {section.label}\n{section.text}")
        return "\n\n".join(parts)


@dataclass
class PRSummary(CommitMessage):
    """A parsed pull request description; ``title`` aliases ``subject``."""

    @property
    def title(self) -> str:
        return self.subject
