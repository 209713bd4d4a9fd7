"""
Language model integration for commitbot.

This package contains the :class:`LanguageModelClient` capability with
its Ollama, OpenAI and offline implementations, the prompt composers,
the response parser and the :class:`CommitMessageGenerator` tying them
together.
"""

from .base import LanguageModelClient, LLMError, LLMTimeoutError, TransportError  # noqa: F401
from .commit_message_generator import CommitMessageGenerator  # noqa: F401
from .message_model import BodySection, CommitMessage, PRSummary, Prompt, ResponseSchema  # noqa: F401
from .noop_client import NoopClient  # noqa: F401
from .ollama_client import OllamaClient  # noqa: F401
from .openai_client import OpenAIClient  # noqa: F401
