"""
Client for interacting with an Ollama LLM server.

This client wraps HTTP requests to the Ollama REST API, using the
``/api/chat`` endpoint with a system and a user message. Streaming
replies are read as newline-delimited JSON and handed chunk by chunk to
an optional callback. A timeout raises :class:`LLMTimeoutError`; every
other failure raises :class:`TransportError`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

from commitbot.llm.base import LanguageModelClient, LLMTimeoutError, TransportError
from commitbot.llm.message_model import Prompt, ResponseSchema


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass
class OllamaClient(LanguageModelClient):
    """Client for interacting with an Ollama server.

    Parameters
    ----------
    base_url : str
        Base URL of the Ollama server, e.g. ``"http://localhost"``.
    port : int
        Port number of the Ollama server, e.g. ``11434``.
    model : str
        Name of the model to use for generation, e.g. ``"llama3"``.
    request_timeout : float, optional
        Default timeout in seconds when the caller passes none.
    max_tokens : int, optional
        Maximum number of tokens to generate, passed as ``num_predict``.
    stream : bool, optional
        Request a streaming reply and feed chunks to ``on_chunk``.
    on_chunk : callable, optional
        Called with every streamed text chunk as it arrives.
    """

    base_url: str
    port: int
    model: str
    request_timeout: float = 90.0
    max_tokens: Optional[int] = None
    stream: bool = False
    on_chunk: Optional[Callable[[str], None]] = None

    @property
    def name(self) -> str:
        return f"ollama:{self.model}"

    def _endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}:{self.port}/api/chat"

    def _payload(self, prompt: Prompt) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "stream": self.stream,
            "messages": [
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
        }
        if self.max_tokens is not None:
            payload["options"] = {"num_predict": self.max_tokens}
        return payload

    def request(self, prompt: Prompt, schema: ResponseSchema, timeout: Optional[float] = None) -> str:
        """Send one chat request and return the reply text.

        Raises
        ------
        LLMTimeoutError
            If the server does not answer in time.
        TransportError
            If the request fails or the server returns an error.
        """
        url = self._endpoint()
        timeout = timeout if timeout is not None else self.request_timeout
        logger.debug("Sending request to Ollama at %s (schema: %s)", url, schema.to_dict())
        try:
            response = requests.post(url, json=self._payload(prompt), timeout=timeout, stream=self.stream)
        except requests.Timeout as exc:
            logger.debug("Ollama request timed out after %ss", timeout)
            raise LLMTimeoutError(f"Ollama did not answer within {timeout}s") from exc
        except requests.RequestException as exc:
            logger.debug("Failed to connect to Ollama: %s", exc)
            raise TransportError(f"Error calling Ollama at {url}: {exc}") from exc

        if response.status_code != 200:
            logger.debug("Ollama returned non-200 status %s: %s", response.status_code, response.text)
            raise TransportError(f"Ollama returned status {response.status_code}: {response.text}")

        if self.stream:
            raw = self._read_stream(response)
        else:
            raw = self._read_body(response)
        logger.debug("Ollama raw response: %s", raw)
        return raw

    def _read_body(self, response: requests.Response) -> str:
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.debug("Failed to parse Ollama response: %s", exc)
            raise TransportError("Failed to parse Ollama response") from exc
        # /api/chat answers with 'message'; /api/generate style servers use 'response'
        if isinstance(data.get("message"), dict):
            return data["message"].get("content", "")
        if "response" in data:
            return data.get("response", "")
        raise TransportError("Unexpected response structure from Ollama")

    def _read_stream(self, response: requests.Response) -> str:
        chunks = []
        try:
            for line in response.iter_lines(decode_unicode=True):
                if not line or not line.strip():
                    continue
                data = json.loads(line)
                if data.get("done"):
                    break
                content = (data.get("message") or {}).get("content", "")
                if content:
                    chunks.append(content)
                    if self.on_chunk is not None:
                        self.on_chunk(content)
        except requests.Timeout as exc:
            raise LLMTimeoutError("Ollama stream stalled") from exc
        except (requests.RequestException, json.JSONDecodeError, ValueError) as exc:
            logger.debug("Failed to read Ollama stream: %s", exc)
            raise TransportError(f"Failed to decode Ollama stream: {exc}") from exc
        return "".join(chunks)
