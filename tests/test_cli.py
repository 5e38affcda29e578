"""Tests for diffscribe.cli module."""

import json

import httpx
import pytest
from typer.testing import CliRunner

from diffscribe import global_config
from diffscribe.cli import app
from diffscribe.config import LLMProvider, OutputStyle
from diffscribe.git import ChangeSet, GitError, NoChangesError
from diffscribe.llm import get_provider

runner = CliRunner()

CHANGES = ChangeSet(
    diff="diff --git a/src/api/a.py b/src/api/a.py\n+def handler():\n",
    files=("src/api/a.py",),
    branch="main",
    source="staged",
)


def _sse(*tokens: str) -> httpx.Response:
    body = "".join(
        f"data: {json.dumps({'choices': [{'delta': {'content': t}}]})}\n\n" for t in tokens
    )
    return httpx.Response(200, headers={"content-type": "text/event-stream"}, content=(body + "data: [DONE]\n\n").encode())


class QueueList(list):
    """List that also records the requests it answered."""

    requests: list


@pytest.fixture
def repo(mocker, temp_dir, config_dir, clean_env, monkeypatch):
    """A repository with staged changes and an OpenAI key."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-123456789")
    mocker.patch("diffscribe.cli.main.get_repo_root", return_value=temp_dir)
    mocker.patch("diffscribe.cli.main.collect_changes", return_value=CHANGES)
    return temp_dir


@pytest.fixture
def responses(mocker):
    """Queue of HTTP responses served to the generate command."""
    queue = QueueList()
    requests = []

    def handler(request):
        requests.append(request)
        return queue.pop(0)

    transport = httpx.MockTransport(handler)
    mocker.patch(
        "diffscribe.cli.main.get_provider",
        side_effect=lambda provider, settings: get_provider(provider, settings, transport=transport),
    )
    queue.requests = requests
    return queue


class TestMainCommand:
    """Tests for the generate command."""

    def test_shows_help(self):
        """Test that --help lists the options."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "--max-diff-length" in result.output
        assert "config" in result.output

    def test_version(self):
        """Test --version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "diffscribe" in result.output

    def test_generates_message(self, repo, responses):
        """Test the happy path prints the normalized message."""
        responses.append(_sse("Commit message: feat(api):", " add handler", "\n\n\n\nBody line"))

        result = runner.invoke(app, [])

        assert result.exit_code == 0, result.output
        assert "feat(api): add handler\n\nBody line" in result.output

    def test_prompt_contains_change_set(self, repo, responses):
        """Test that the request carries the diff, files and hints."""
        responses.append(_sse("feat: x"))

        runner.invoke(app, [])

        prompt = json.loads(responses.requests[0].content)["messages"][0]["content"]
        assert "+def handler():" in prompt
        assert "src/api/a.py" in prompt
        assert "Likely scope: api" in prompt

    def test_header_only_style(self, repo, responses):
        """Test --style header_only."""
        responses.append(_sse("fix: one line\n", "ignored body"))

        result = runner.invoke(app, ["--style", "header_only"])

        assert result.exit_code == 0, result.output
        assert "fix: one line" in result.output
        assert "ignored body" not in result.output

    def test_invalid_style(self, repo):
        """Test style validation."""
        result = runner.invoke(app, ["--style", "poem"])

        assert result.exit_code == 1
        assert "Invalid style" in result.output

    def test_invalid_provider(self, repo):
        """Test provider validation."""
        result = runner.invoke(app, ["--provider", "skynet"])

        assert result.exit_code == 1
        assert "Invalid provider" in result.output

    def test_no_changes(self, mocker, config_dir, temp_dir):
        """Test a clean working tree."""
        mocker.patch("diffscribe.cli.main.get_repo_root", return_value=temp_dir)
        mocker.patch("diffscribe.cli.main.collect_changes", side_effect=NoChangesError("No changes found."))

        result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "No changes found" in result.output

    def test_git_error(self, mocker, config_dir):
        """Test running outside a repository."""
        mocker.patch("diffscribe.cli.main.get_repo_root", side_effect=GitError("Not in a git repository."))

        result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "Git error" in result.output

    def test_missing_api_key(self, repo, responses, monkeypatch):
        """Test that missing credentials stop before any request."""
        monkeypatch.delenv("OPENAI_API_KEY")

        result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "API key not found" in result.output
        assert responses.requests == []

    def test_failure_then_quit(self, repo, responses):
        """Test giving up after a server error."""
        responses.append(httpx.Response(500, text="upstream exploded"))

        result = runner.invoke(app, [], input="q\n")

        assert result.exit_code == 1
        assert "Server error" in result.output
        assert "upstream exploded" not in result.output

    def test_failure_then_retry(self, repo, responses):
        """Test a retry after an error."""
        responses.append(httpx.Response(429, text="slow down"))
        responses.append(_sse("feat: second try"))

        result = runner.invoke(app, [], input="r\n")

        assert result.exit_code == 0, result.output
        assert "Rate limited" in result.output
        assert "feat: second try" in result.output
        assert len(responses.requests) == 2

    def test_reconfigure_then_retry(self, repo, responses, config_dir):
        """Test reconfiguring the provider before retrying."""
        responses.append(httpx.Response(404, text="nope"))
        responses.append(_sse("feat: fixed"))

        result = runner.invoke(app, [], input="c\n\nhttps://proxy.example.com/v1\ngpt-4o\nr\n")

        assert result.exit_code == 0, result.output
        assert str(responses.requests[1].url) == "https://proxy.example.com/v1/chat/completions"
        assert global_config.get_provider_section(LLMProvider.OPENAI)["base_url"] == "https://proxy.example.com/v1"

    def test_commit_flag(self, repo, responses, mocker):
        """Test committing with the generated message."""
        responses.append(_sse("feat: commit me"))
        mock_commit = mocker.patch("diffscribe.cli.main.commit_with_message", return_value="[main 1] feat")

        result = runner.invoke(app, ["--commit"])

        assert result.exit_code == 0, result.output
        mock_commit.assert_called_once_with("feat: commit me", repo, include_unstaged=False)
        assert "Commit successful" in result.output

    def test_commit_failure(self, repo, responses, mocker):
        """Test a failing git commit."""
        responses.append(_sse("feat: commit me"))
        mocker.patch("diffscribe.cli.main.commit_with_message", side_effect=GitError("hook failed"))

        result = runner.invoke(app, ["-c"])

        assert result.exit_code == 1
        assert "hook failed" in result.output


class TestConfigCommands:
    """Tests for diffscribe config commands."""

    def test_show_not_configured(self, config_dir):
        """Test show without a config file."""
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "No configuration found" in result.output

    def test_show_configuration(self, config_dir, clean_env):
        """Test show with a provider and key."""
        global_config.set_provider_settings(LLMProvider.GROQ, model="llama-3.1-8b-instant")
        global_config.save_credential("GROQ_API_KEY", "gsk-abcdefghijklmnop")

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "Provider: groq" in result.output
        assert "Model: llama-3.1-8b-instant" in result.output
        assert "Base URL: https://api.groq.com/openai/v1" in result.output
        assert "gsk-abcd...mnop" in result.output
        assert "gsk-abcdefghijklmnop" not in result.output

    def test_set_key(self, config_dir):
        """Test storing an API key."""
        result = runner.invoke(app, ["config", "set-key", "anthropic"], input="sk-ant-1\n")

        assert result.exit_code == 0
        assert global_config.get_credential("ANTHROPIC_API_KEY") == "sk-ant-1"

    def test_set_key_invalid_provider(self, config_dir):
        """Test an unknown provider name."""
        result = runner.invoke(app, ["config", "set-key", "skynet"])

        assert result.exit_code == 1
        assert "Invalid provider" in result.output

    def test_set_provider_with_options(self, config_dir):
        """Test a custom endpoint."""
        result = runner.invoke(
            app,
            ["config", "set-provider", "custom", "--model", "llama3", "--base-url", "http://localhost:11434/v1"],
        )

        assert result.exit_code == 0, result.output
        assert global_config.get_active_provider() == LLMProvider.CUSTOM
        assert global_config.get_provider_section(LLMProvider.CUSTOM) == {
            "model": "llama3",
            "base_url": "http://localhost:11434/v1",
        }

    def test_set_provider_prompts_for_model(self, config_dir):
        """Test choosing from the known models."""
        result = runner.invoke(app, ["config", "set-provider", "openai"], input="2\n")

        assert result.exit_code == 0, result.output
        assert global_config.get_provider_section(LLMProvider.OPENAI)["model"] == "gpt-4o-mini"

    def test_set_style(self, config_dir):
        """Test the output style."""
        result = runner.invoke(app, ["config", "set-style", "header_only"])

        assert result.exit_code == 0
        assert global_config.get_output_style() == OutputStyle.HEADER_ONLY

    def test_set_style_invalid(self, config_dir):
        """Test an unknown style."""
        result = runner.invoke(app, ["config", "set-style", "sonnet"])
        assert result.exit_code == 1

    def test_set_language(self, config_dir):
        """Test the language."""
        result = runner.invoke(app, ["config", "set-language", "zh-CN"])

        assert result.exit_code == 0
        assert global_config.get_language() == "zh-CN"

    def test_set_language_invalid(self, config_dir):
        """Test an unknown language code."""
        result = runner.invoke(app, ["config", "set-language", "xx"])
        assert result.exit_code == 1

    def test_list_providers(self):
        """Test listing providers."""
        result = runner.invoke(app, ["config", "list-providers"])

        assert result.exit_code == 0
        for provider in LLMProvider:
            assert provider.value in result.output

    def test_connection_ok(self, config_dir, clean_env, monkeypatch, mocker):
        """Test a working provider."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        transport = httpx.MockTransport(lambda request: _sse("OK"))
        mocker.patch(
            "diffscribe.cli.config.get_provider",
            side_effect=lambda provider, settings: get_provider(provider, settings, transport=transport),
        )

        result = runner.invoke(app, ["config", "test"])

        assert result.exit_code == 0, result.output
        assert "Connection OK" in result.output

    def test_connection_missing_key(self, config_dir, clean_env):
        """Test a provider without credentials."""
        result = runner.invoke(app, ["config", "test", "mistral"])

        assert result.exit_code == 1
        assert "MISTRAL_API_KEY" in result.output
