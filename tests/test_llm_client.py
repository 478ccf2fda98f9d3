"""Tests for tweetcurator.llm.client."""

from __future__ import annotations

import subprocess
from types import SimpleNamespace

import pytest

from tweetcurator.config import CuratorConfig
from tweetcurator.llm import client as client_mod
from tweetcurator.llm.client import (
    AnthropicAPIClient,
    ClaudeCodeClient,
    LLMError,
    LLMResponse,
    complete_json,
    complete_with_retry,
    create_client,
    extract_json,
)


class FlakyClient:
    def __init__(self, failures, content="ok"):
        self.failures = failures
        self.content = content
        self.calls = 0

    def complete(self, system, user, max_tokens=None):
        self.calls += 1
        if self.calls <= self.failures:
            raise LLMError("overloaded")
        return LLMResponse(content=self.content, model="fake")


@pytest.fixture
def no_sleep(monkeypatch):
    waits = []
    monkeypatch.setattr(client_mod.time, "sleep", waits.append)
    return waits


@pytest.fixture
def config():
    return CuratorConfig(model="some-model", llm_timeout=42, llm_max_tokens=777)


class TestCreateClient:
    def test_auto_without_key_uses_cli(self, monkeypatch, config):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        client = create_client("auto", config)
        assert isinstance(client, ClaudeCodeClient)
        assert client.timeout == 42

    def test_auto_with_key_uses_api(self, monkeypatch, config):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        client = create_client("auto", config)
        assert isinstance(client, AnthropicAPIClient)
        assert client.model == "some-model"
        assert client.max_tokens == 777

    def test_default_config(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        assert create_client().model == CuratorConfig().model

    def test_api_requires_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            create_client("api")

    def test_claude_code(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        assert isinstance(create_client("claude-code"), ClaudeCodeClient)

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown LLM mode"):
            create_client("carrier-pigeon")


class TestAnthropicAPIClient:
    def test_joins_text_blocks(self, config):
        client = AnthropicAPIClient("sk-test", config)
        seen = {}

        def create(**kwargs):
            seen.update(kwargs)
            return SimpleNamespace(
                content=[
                    SimpleNamespace(type="text", text='{"a": '),
                    SimpleNamespace(type="tool_use"),
                    SimpleNamespace(type="text", text="1}"),
                ],
                usage=SimpleNamespace(input_tokens=5, output_tokens=2),
            )

        client.client = SimpleNamespace(messages=SimpleNamespace(create=create))
        response = client.complete("sys", "user")
        assert response.content == '{"a": 1}'
        assert response.input_tokens == 5
        assert seen["max_tokens"] == 777
        assert seen["system"] == "sys"
        assert seen["messages"] == [{"role": "user", "content": "user"}]


class TestClaudeCodeClient:
    def test_prompt_on_stdin_without_nested_marker(self, monkeypatch, config):
        seen = {}

        def fake_run(args, **kwargs):
            seen["args"] = args
            seen.update(kwargs)
            return subprocess.CompletedProcess(args, 0, stdout=" tagged \n", stderr="")

        monkeypatch.setenv("CLAUDECODE", "1")
        monkeypatch.setattr(client_mod.subprocess, "run", fake_run)
        response = ClaudeCodeClient(config).complete("sys", "user")
        assert response.content == "tagged"
        assert seen["args"] == [
            "claude", "--print", "--model", "some-model", "--system-prompt", "sys",
        ]
        assert seen["input"] == "user"
        assert seen["timeout"] == 42
        assert "CLAUDECODE" not in seen["env"]

    def test_failure_raises(self, monkeypatch, config):
        monkeypatch.setattr(
            client_mod.subprocess, "run",
            lambda args, **kw: subprocess.CompletedProcess(args, 1, stdout="", stderr="boom"),
        )
        with pytest.raises(LLMError, match="boom"):
            ClaudeCodeClient(config).complete("s", "u")

    def test_timeout_raises(self, monkeypatch, config):
        def slow(args, **kwargs):
            raise subprocess.TimeoutExpired(args, kwargs["timeout"])

        monkeypatch.setattr(client_mod.subprocess, "run", slow)
        with pytest.raises(LLMError, match="timed out after 42s"):
            ClaudeCodeClient(config).complete("s", "u")

    def test_missing_cli_raises(self, monkeypatch, config):
        def missing(args, **kwargs):
            raise FileNotFoundError("claude")

        monkeypatch.setattr(client_mod.subprocess, "run", missing)
        with pytest.raises(LLMError, match="not found"):
            ClaudeCodeClient(config).complete("s", "u")


class TestCompleteWithRetry:
    def test_recovers(self, no_sleep):
        client = FlakyClient(failures=2)
        assert complete_with_retry(client, "s", "u").content == "ok"
        assert client.calls == 3
        assert no_sleep == [1.0, 2.0]

    def test_gives_up(self, no_sleep):
        client = FlakyClient(failures=5)
        with pytest.raises(LLMError, match="overloaded"):
            complete_with_retry(client, "s", "u", retries=2)
        assert client.calls == 2

    def test_other_errors_not_retried(self, no_sleep):
        class Broken:
            calls = 0

            def complete(self, system, user, max_tokens=None):
                self.calls += 1
                raise KeyError("bug")

        client = Broken()
        with pytest.raises(KeyError):
            complete_with_retry(client, "s", "u")
        assert client.calls == 1


class TestExtractJson:
    def test_fenced(self):
        assert extract_json('```json\n{"results": []}\n```') == {"results": []}

    def test_surrounding_chatter(self):
        assert extract_json('Here you go: {"a": {"b": 1}} hope it helps') == {"a": {"b": 1}}

    @pytest.mark.parametrize("reply", ["no json here", "} backwards {", '{"a": 1,,}'])
    def test_unusable_reply(self, reply):
        with pytest.raises(LLMError):
            extract_json(reply)

    def test_complete_json(self, no_sleep):
        client = FlakyClient(failures=1, content='```\n{"search": "cats"}\n```')
        assert complete_json(client, "s", "u") == {"search": "cats"}
