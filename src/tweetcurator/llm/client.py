"""Claude access for tagging and natural-language search.

Two backends share one `complete(system, user, max_tokens)` call: the
Anthropic SDK when an API key is available, or the local `claude` CLI in
print mode. Both are configured from `CuratorConfig` (model, timeout and
token budget) and raise `LLMError` on failure so callers can retry or skip
without knowing which backend ran.
"""

from __future__ import annotations

import json
import logging
import os
import re
import subprocess
import time
from dataclasses import dataclass

from tweetcurator.config import CuratorConfig

logger = logging.getLogger(__name__)

LLM_MODES = ("auto", "api", "claude-code")

API_KEY_ENV = "ANTHROPIC_API_KEY"

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?```\s*$")


class LLMError(Exception):
    """A model call failed or returned something unusable."""


@dataclass
class LLMResponse:
    content: str
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0


class AnthropicAPIClient:
    """Messages API through the anthropic SDK.

    SDK retries are disabled; `complete_with_retry` owns the retry policy.
    """

    def __init__(self, api_key: str, config: CuratorConfig):
        import anthropic

        self._api_error = anthropic.APIError
        self.client = anthropic.Anthropic(
            api_key=api_key, timeout=config.llm_timeout, max_retries=0
        )
        self.model = config.model
        self.max_tokens = config.llm_max_tokens

    def complete(self, system: str, user: str, max_tokens: int | None = None) -> LLMResponse:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens or self.max_tokens,
                system=system,
                messages=[{"role": "user", "content": user}],
            )
        except self._api_error as e:
            raise LLMError(f"Anthropic API error: {e}") from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        return LLMResponse(
            content=text,
            model=self.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )


class ClaudeCodeClient:
    """Runs prompts through `claude --print`, with the tweets on stdin.

    CLAUDECODE is dropped from the child environment so the CLI can be
    nested inside another claude session. The CLI has no token limit flag,
    so `max_tokens` is accepted and ignored.
    """

    def __init__(self, config: CuratorConfig):
        self.model = config.model
        self.timeout = config.llm_timeout

    def command(self, system: str) -> list[str]:
        return ["claude", "--print", "--model", self.model, "--system-prompt", system]

    def complete(self, system: str, user: str, max_tokens: int | None = None) -> LLMResponse:
        env = {k: v for k, v in os.environ.items() if k != "CLAUDECODE"}
        try:
            result = subprocess.run(
                self.command(system),
                input=user,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env,
            )
        except FileNotFoundError as e:
            raise LLMError("claude CLI not found on PATH") from e
        except subprocess.TimeoutExpired as e:
            raise LLMError(f"claude CLI timed out after {self.timeout}s") from e

        if result.returncode != 0:
            raise LLMError(f"claude CLI exited {result.returncode}: {result.stderr.strip()}")
        return LLMResponse(content=result.stdout.strip(), model=self.model)


def create_client(
    mode: str = "auto", config: CuratorConfig | None = None
) -> AnthropicAPIClient | ClaudeCodeClient:
    """Build an LLM client for the configured model.

    mode="auto": the API when ANTHROPIC_API_KEY is set, else the claude CLI.
    mode="api": require ANTHROPIC_API_KEY.
    mode="claude-code": always the claude CLI.
    """
    if mode not in LLM_MODES:
        raise ValueError(f"Unknown LLM mode: {mode}")
    if config is None:
        config = CuratorConfig()

    api_key = os.environ.get(API_KEY_ENV)
    if mode == "api" and not api_key:
        raise ValueError(f"{API_KEY_ENV} environment variable not set")
    if mode != "claude-code" and api_key:
        logger.debug(f"Using Anthropic API with {config.model}")
        return AnthropicAPIClient(api_key, config)
    logger.debug(f"Using claude CLI with {config.model}")
    return ClaudeCodeClient(config)


def complete_with_retry(
    client,
    system: str,
    user: str,
    max_tokens: int | None = None,
    retries: int = 3,
    backoff: float = 2.0,
) -> LLMResponse:
    """Call the LLM, retrying LLMError with exponential backoff."""
    for attempt in range(retries):
        try:
            return client.complete(system, user, max_tokens)
        except LLMError as e:
            if attempt == retries - 1:
                raise
            wait = backoff ** attempt
            logger.warning(f"LLM call failed (attempt {attempt + 1}): {e}. Retrying in {wait}s...")
            time.sleep(wait)


def extract_json(text: str) -> dict:
    """The JSON object in a model reply.

    Code fences and chatter around the outermost braces are ignored.
    """
    text = _FENCE_CLOSE_RE.sub("", _FENCE_OPEN_RE.sub("", text.strip()))
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise LLMError(f"No JSON object in reply: {text[:200]}")
    try:
        data = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise LLMError(f"Malformed JSON in reply: {e}") from e
    return data


def complete_json(
    client,
    system: str,
    user: str,
    max_tokens: int | None = None,
    retries: int = 3,
) -> dict:
    """complete_with_retry, then extract_json on the reply."""
    response = complete_with_retry(client, system, user, max_tokens, retries=retries)
    return extract_json(response.content)
