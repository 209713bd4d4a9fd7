import unittest
from unittest.mock import Mock, patch

import requests

from commitbot.errors import MalformedResponse
from commitbot.llm.base import LLMTimeoutError, TransportError
from commitbot.llm.message_model import Prompt, ResponseSchema
from commitbot.llm.openai_client import DEFAULT_API_URL, OpenAIClient
from commitbot.llm.response_parser import parse_response


SCHEMA = ResponseSchema(subject_max_length=72, section_labels=("Summary",))
PROMPT = Prompt(system="sys", user="usr", schema=SCHEMA)


def make_response(status_code=200, payload=None, text=""):
    response = Mock(status_code=status_code, text=text)
    response.json.return_value = payload
    return response


class TestOpenAIClient(unittest.TestCase):
    def test_request_success(self) -> None:
        payload = {
            "choices": [{"message": {"content": "Fixed parser\n\n## Summary\nx"}}],
            "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
        }
        with patch("requests.post", return_value=make_response(payload=payload)) as mock_post:
            client = OpenAIClient(api_key="sk-test", model="gpt-test", max_tokens=100)
            result = client.request(PROMPT, SCHEMA, timeout=30)
        self.assertEqual(result, "Fixed parser\n\n## Summary\nx")
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], DEFAULT_API_URL)
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer sk-test")
        self.assertEqual(kwargs["timeout"], 30)
        self.assertEqual(kwargs["json"]["model"], "gpt-test")
        self.assertEqual(kwargs["json"]["max_completion_tokens"], 100)
        self.assertEqual([m["role"] for m in kwargs["json"]["messages"]], ["system", "user"])

    def test_reply_keeps_reasoning_tags(self) -> None:
        content = "<think>draft</think>\n## Summary\nno subject"
        payload = {"choices": [{"message": {"content": content}}]}
        with patch("requests.post", return_value=make_response(payload=payload)):
            result = OpenAIClient(api_key="k", model="m").request(PROMPT, SCHEMA)
        self.assertEqual(result, content)
        with self.assertRaises(MalformedResponse) as ctx:
            parse_response(result, SCHEMA)
        self.assertEqual(ctx.exception.raw_model_text, content)

    def test_http_error(self) -> None:
        with patch("requests.post", return_value=make_response(status_code=401, text="bad key")):
            with self.assertRaises(TransportError) as ctx:
                OpenAIClient(api_key="k", model="m").request(PROMPT, SCHEMA)
        self.assertIn("401", str(ctx.exception))

    def test_no_choices(self) -> None:
        with patch("requests.post", return_value=make_response(payload={"choices": []})):
            with self.assertRaises(TransportError):
                OpenAIClient(api_key="k", model="m").request(PROMPT, SCHEMA)

    def test_undecodable_body(self) -> None:
        response = make_response()
        response.json.side_effect = ValueError("no json")
        with patch("requests.post", return_value=response):
            with self.assertRaises(TransportError):
                OpenAIClient(api_key="k", model="m").request(PROMPT, SCHEMA)

    def test_timeout_is_not_retried(self) -> None:
        with patch("requests.post", side_effect=requests.Timeout("slow")) as mock_post:
            with self.assertRaises(LLMTimeoutError):
                OpenAIClient(api_key="k", model="m").request(PROMPT, SCHEMA, timeout=1)
        self.assertEqual(mock_post.call_count, 1)

    def test_connection_error(self) -> None:
        with patch("requests.post", side_effect=requests.ConnectionError("down")):
            with self.assertRaises(TransportError):
                OpenAIClient(api_key="k", model="m").request(PROMPT, SCHEMA)


if __name__ == "__main__":
    unittest.main()
