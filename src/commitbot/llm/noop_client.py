"""
Offline client returning deterministic dummy replies.

Selected with ``--no-model`` or ``model = "none"``. Replies follow the
requested schema so the whole pipeline can be exercised without a model.
"""

from __future__ import annotations

from typing import List, Optional

from commitbot.llm.base import LanguageModelClient
from commitbot.llm.message_model import Prompt, ResponseSchema


class NoopClient(LanguageModelClient):
    """Language model stand-in that never leaves the process."""

    def __init__(self) -> None:
        self.calls: List[Prompt] = []

    @property
    def name(self) -> str:
        return "none"

    def request(self, prompt: Prompt, schema: ResponseSchema, timeout: Optional[float] = None) -> str:
        self.calls.append(prompt)
        if not schema.section_labels:
            first_line = prompt.user.splitlines()[0] if prompt.user else ""
            return f"[DUMMY SUMMARY] {first_line}"

        subject = "Dummy message (LLM disabled)"[: schema.subject_max_length]
        sections = [f"## {label}\n- [dummy {label.lower()}]" for label in schema.section_labels]
        return "\n\n".join([subject] + sections)
