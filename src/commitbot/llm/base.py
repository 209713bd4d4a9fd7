"""
Language model capability consumed by the pipeline.

The pipeline treats the model as an opaque request/response function:
:meth:`LanguageModelClient.request` takes a composed prompt, the schema
the reply should follow and a timeout, and returns the raw reply text.
Implementations never retry on their own; a timeout or transport failure
is raised to the caller immediately.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from commitbot.llm.message_model import Prompt, ResponseSchema


class LLMError(Exception):
    """Raised when communication with the language model fails."""

    pass


class LLMTimeoutError(LLMError):
    """Raised when the model does not answer within the timeout."""

    pass


class TransportError(LLMError):
    """Raised when the request cannot be delivered or the server rejects it."""

    pass


class LanguageModelClient(ABC):
    """Abstract base for language model clients."""

    @abstractmethod
    def request(self, prompt: Prompt, schema: ResponseSchema, timeout: Optional[float] = None) -> str:
        """Send one prompt and return the raw reply text.

        Raises
        ------
        LLMTimeoutError
            If no reply arrives within ``timeout`` seconds.
        TransportError
            On connection failures, HTTP errors or undecodable replies.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable provider/model name for diagnostics."""
