import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from click.testing import CliRunner

import commitbot.cli as cli
from commitbot.config.loader import DEFAULTS
from commitbot.llm.base import LanguageModelClient, LLMTimeoutError
from commitbot.vcs.base import VersionControlRepository
from commitbot.vcs.git_client import GitError


class DummyGitClient(VersionControlRepository):
    def __init__(self, root=Path("/repo")):
        self.root = root
        self.staged = []
        self.refs = {}
        self.commits = []
        self.branch = "feature/login"
        self.written = []

    def staged_files(self):
        return list(self.staged)

    def commits_between(self, base, feature):
        return list(self.commits)

    def resolve_ref(self, name):
        return self.refs.get(name)

    def current_branch(self):
        return self.branch

    def write_commit_editmsg(self, message):
        self.written.append(message)
        return self.root / ".git" / "COMMIT_EDITMSG"


class CLITestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        self.git = DummyGitClient()
        for target, value in (
            ("detect_repo", Path("/repo")),
            ("load_config", dict(DEFAULTS)),
            ("GitClient", self.git),
        ):
            patcher = patch.object(cli, target, return_value=value)
            patcher.start()
            self.addCleanup(patcher.stop)

    def invoke(self, args, **kwargs):
        return self.runner.invoke(cli.main, args, **kwargs)


class TestCommitCommand(CLITestCase):
    def test_no_staged_changes_is_clean_exit(self) -> None:
        result = self.invoke(["--no-model"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("No staged changes", result.output)

    def test_no_model_prints_dummy_message(self) -> None:
        self.git.staged = [("a.py", "+def foo():\n")]
        result = self.invoke(["--no-model"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("Dummy message (LLM disabled)", result.output)
        self.assertIn("## Main changes", result.output)
        self.assertEqual(self.git.written, [])

    def test_model_none_acts_like_no_model(self) -> None:
        self.git.staged = [("a.py", "+def foo():\n")]
        result = self.invoke(["--model", "none"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("Dummy message (LLM disabled)", result.output)

    def test_apply_writes_commit_editmsg(self) -> None:
        self.git.staged = [("a.py", "+def foo():\n")]
        result = self.invoke(["--no-model", "--apply"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertEqual(len(self.git.written), 1)
        self.assertTrue(self.git.written[0].startswith("Dummy message (LLM disabled)"))

    def test_ask_flow_classifies_and_summarizes(self) -> None:
        self.git.staged = [("a.py", "+a\n"), ("b.py", "+b\n")]
        llm = Mock(spec=LanguageModelClient)
        llm.request.side_effect = ["- a summary", "Added a\n\n## Summary\nAdds a."]
        with patch.object(cli, "build_llm_client", return_value=llm):
            # ticket summary, invalid answer, a -> main, b -> ignore
            result = self.invoke(["--ask"], input="Login throttling\nx\n1\n4\n")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("Invalid choice 'x'", result.output)
        self.assertIn("Summarizing [1/1] a.py", result.output)
        self.assertIn("Added a", result.output)
        self.assertEqual(llm.request.call_count, 2)
        final_prompt = llm.request.call_args_list[1][0][0]
        self.assertIn("Login throttling", final_prompt.system)
        self.assertNotIn("b.py", final_prompt.user)

    def test_ask_quit_is_clean_exit(self) -> None:
        self.git.staged = [("a.py", "+a\n")]
        result = self.invoke(["--ask", "--no-model"], input="\nq\n")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("Aborted", result.output)

    def test_missing_api_key_is_config_error(self) -> None:
        self.git.staged = [("a.py", "+a\n")]
        result = self.invoke([])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)
        self.assertIn("OPENAI_API_KEY", result.output)

    def test_llm_timeout_exit_code(self) -> None:
        self.git.staged = [("a.py", "+a\n")]
        llm = Mock(spec=LanguageModelClient)
        llm.request.side_effect = LLMTimeoutError("timed out after 1s")
        with patch.object(cli, "build_llm_client", return_value=llm):
            result = self.invoke([])
        self.assertEqual(result.exit_code, cli.EXIT_LLM_FAILURE)
        self.assertEqual(llm.request.call_count, 1)

    def test_malformed_response_echoes_raw_text(self) -> None:
        self.git.staged = [("a.py", "+a\n")]
        llm = Mock(spec=LanguageModelClient)
        llm.request.return_value = "## Summary\nno subject here"
        with patch.object(cli, "build_llm_client", return_value=llm):
            result = self.invoke([])
        self.assertEqual(result.exit_code, cli.EXIT_MALFORMED_RESPONSE)
        self.assertIn("missing-subject", result.output)
        self.assertIn("no subject here", result.output)

    def test_git_failure_exit_code(self) -> None:
        self.git.staged_files = Mock(side_effect=GitError("fatal: index locked"))
        result = self.invoke(["--no-model"])
        self.assertEqual(result.exit_code, cli.EXIT_VCS_FAILURE)

    def test_model_and_no_model_conflict(self) -> None:
        self.git.staged = [("a.py", "+a\n")]
        result = self.invoke(["--model", "llama3", "--no-model"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)
        self.assertIn("mutually exclusive", result.output)

    def test_ask_checks_staged_set_before_ticket_prompt(self) -> None:
        result = self.invoke(["--ask", "--no-model"], input="\n")
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("No staged changes", result.output)
        self.assertNotIn("ticket summary", result.output)


class TestPRCommand(CLITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.git.refs = {"main": "aaa", "feature/login": "bbb"}
        self.git.commits = [
            ("1111111aaaa", "fix #42 login", ""),
            ("2222222bbbb", "#7 docs", ""),
        ]

    def test_pr_defaults_feature_to_current_branch(self) -> None:
        llm = Mock(spec=LanguageModelClient)
        llm.request.return_value = "Login work\n\n## Overview\nTwo PRs."
        with patch.object(cli, "build_llm_client", return_value=llm):
            result = self.invoke(["pr", "main"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("Login work", result.output)
        prompt = llm.request.call_args[0][0]
        self.assertIn("Feature branch: feature/login", prompt.user)
        self.assertIn("Summary mode: prs", prompt.user)

    def test_pr_commit_flag_forces_commit_mode(self) -> None:
        llm = Mock(spec=LanguageModelClient)
        llm.request.return_value = "Login work"
        with patch.object(cli, "build_llm_client", return_value=llm):
            result = self.invoke(["pr", "main", "feature/login", "--commit"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("Summary mode: commits", llm.request.call_args[0][0].user)

    def test_pr_and_commit_flags_conflict(self) -> None:
        result = self.invoke(["--no-model", "pr", "main", "--pr", "--commit"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)

    def test_unknown_reference(self) -> None:
        result = self.invoke(["--no-model", "pr", "nope", "feature/login"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_RANGE)
        self.assertIn("nope", result.output)

    def test_empty_range_is_clean_exit(self) -> None:
        self.git.commits = []
        result = self.invoke(["--no-model", "pr", "main", "feature/login"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("No commits found", result.output)

    def test_global_options_after_subcommand(self) -> None:
        result = self.invoke(["pr", "main", "--no-model", "--debug"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("Dummy message (LLM disabled)", result.output)

    def test_ticket_summary_after_subcommand(self) -> None:
        llm = Mock(spec=LanguageModelClient)
        llm.request.return_value = "Login work"
        with patch.object(cli, "build_llm_client", return_value=llm):
            result = self.invoke(["pr", "main", "--ticket-summary", "Rework login"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("Rework login", llm.request.call_args[0][0].system)

    def test_explicit_api_key_beats_environment_on_subcommand(self) -> None:
        llm = Mock(spec=LanguageModelClient)
        llm.request.return_value = "Login work"
        with patch.object(cli, "build_llm_client", return_value=llm) as build:
            result = self.invoke(["--api-key", "sk-cli", "pr", "main"], env={"OPENAI_API_KEY": "sk-env"})
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(build.call_args[0][1].api_key, "sk-cli")

    def test_model_and_no_model_conflict_on_subcommand(self) -> None:
        result = self.invoke(["pr", "main", "--model", "llama3", "--no-model"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)


@unittest.skipUnless(shutil.which("git"), "git executable not available")
class TestUnbornBranch(unittest.TestCase):
    def test_first_commit_in_fresh_repository(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            subprocess.run(["git", "init", "-q"], cwd=root, check=True)
            (root / "a.py").write_text("print('a')\n", encoding="utf-8")
            subprocess.run(["git", "add", "a.py"], cwd=root, check=True)
            with patch.object(cli, "detect_repo", return_value=root):
                result = CliRunner().invoke(cli.main, ["--no-model"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("Dummy message (LLM disabled)", result.output)


class TestDetectRepo(unittest.TestCase):
    def test_no_repository(self) -> None:
        with patch.object(cli.GitClient, "find_repo_root", return_value=None):
            result = CliRunner().invoke(cli.main, ["--no-model"])
        self.assertEqual(result.exit_code, cli.EXIT_NO_REPO)


class TestBuildLLMClient(unittest.TestCase):
    def test_ollama_provider(self) -> None:
        config = dict(DEFAULTS, provider="ollama", model="llama3")
        client = cli.build_llm_client(config, cli.Options())
        self.assertIsInstance(client, cli.OllamaClient)
        self.assertEqual(client.model, "llama3")

    def test_openai_provider_with_key(self) -> None:
        client = cli.build_llm_client(dict(DEFAULTS), cli.Options(api_key="sk-test", timeout=5.0))
        self.assertIsInstance(client, cli.OpenAIClient)
        self.assertEqual(client.request_timeout, 5.0)

    def test_no_model_flag_wins(self) -> None:
        client = cli.build_llm_client(dict(DEFAULTS), cli.Options(no_model=True))
        self.assertIsInstance(client, cli.NoopClient)


if __name__ == "__main__":
    unittest.main()
