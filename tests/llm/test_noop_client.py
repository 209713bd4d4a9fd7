"""Tests for the offline language model client."""

import unittest

from commitbot.llm.message_model import Prompt, ResponseSchema
from commitbot.llm.noop_client import NoopClient
from commitbot.llm.prompt_composer import FREE_TEXT_SCHEMA
from commitbot.llm.response_parser import parse_file_summary, parse_response


class TestNoopClient(unittest.TestCase):
    def test_reply_satisfies_schema(self) -> None:
        schema = ResponseSchema(subject_max_length=20, section_labels=("Summary", "Notes"))
        client = NoopClient()
        raw = client.request(Prompt(system="s", user="u", schema=schema), schema)
        message = parse_response(raw, schema)
        self.assertLessEqual(len(message.subject), 20)
        self.assertEqual([s.label for s in message.body], ["Summary", "Notes"])
        self.assertEqual(len(client.calls), 1)

    def test_free_text_reply(self) -> None:
        client = NoopClient()
        raw = client.request(Prompt(system="s", user="File: a.py\nmore", schema=FREE_TEXT_SCHEMA), FREE_TEXT_SCHEMA)
        self.assertEqual(parse_file_summary(raw), "[DUMMY SUMMARY] File: a.py")
        self.assertEqual(client.name, "none")


if __name__ == "__main__":
    unittest.main()
