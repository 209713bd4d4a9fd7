"""
Client for the OpenAI Chat Completions API.

Requests are plain ``requests`` calls with bearer authentication. Token
usage reported by the API is logged at debug level. As with every
:class:`LanguageModelClient`, no retry is attempted here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from commitbot.llm.base import LanguageModelClient, LLMTimeoutError, TransportError
from commitbot.llm.message_model import Prompt, ResponseSchema


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"


@dataclass
class OpenAIClient(LanguageModelClient):
    """OpenAI based implementation of :class:`LanguageModelClient`."""

    api_key: str
    model: str
    request_timeout: float = 90.0
    max_tokens: Optional[int] = None
    api_url: str = DEFAULT_API_URL

    @property
    def name(self) -> str:
        return f"openai:{self.model}"

    def request(self, prompt: Prompt, schema: ResponseSchema, timeout: Optional[float] = None) -> str:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
        }
        if self.max_tokens is not None:
            payload["max_completion_tokens"] = self.max_tokens
        timeout = timeout if timeout is not None else self.request_timeout

        logger.info("Calling OpenAI model %s", self.model)
        logger.debug("Expected response schema: %s", schema.to_dict())
        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=timeout,
            )
        except requests.Timeout as exc:
            logger.debug("OpenAI request timed out after %ss", timeout)
            raise LLMTimeoutError(f"OpenAI did not answer within {timeout}s") from exc
        except requests.RequestException as exc:
            logger.debug("Failed to send request to OpenAI: %s", exc)
            raise TransportError(f"Failed to send request to OpenAI: {exc}") from exc

        if response.status_code != 200:
            logger.debug("OpenAI API error %s: %s", response.status_code, response.text)
            raise TransportError(f"OpenAI API error: HTTP {response.status_code} - {response.text}")

        try:
            data = response.json()
        except ValueError as exc:
            raise TransportError("Failed to parse OpenAI response") from exc

        choices = data.get("choices") or []
        if not choices:
            raise TransportError("No choices returned from OpenAI")
        content = (choices[0].get("message") or {}).get("content") or ""

        usage = data.get("usage")
        if usage:
            logger.debug(
                "Token usage: prompt=%s, completion=%s, total=%s",
                usage.get("prompt_tokens"),
                usage.get("completion_tokens"),
                usage.get("total_tokens"),
            )
        logger.debug("OpenAI raw response: %s", content)
        return content
