"""Tests for the text-generation client."""

import asyncio
from types import SimpleNamespace

import pytest

from insights_mcp.config import InsightsSettings
from insights_mcp.data import llm_client
from insights_mcp.data.llm_client import OpenAITextClient, _calculate_backoff, _is_retryable_error
from insights_mcp.errors import GenerationError


class TransientError(Exception):
    pass


def _completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeCompletions:
    """Stands in for client.chat.completions, replaying queued outcomes."""

    def __init__(self, outcomes: list):
        self.outcomes = list(outcomes)
        self.requests: list[dict] = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return _completion(outcome)


def _client(outcomes: list, max_retries: int = 2) -> tuple[OpenAITextClient, FakeCompletions]:
    completions = FakeCompletions(outcomes)
    fake = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    settings = InsightsSettings(llm_model="test-model", llm_max_tokens=200)
    return OpenAITextClient(settings, client=fake, max_retries=max_retries), completions


class TestRetryHelpers:
    """Tests for retry classification and backoff."""

    def test_plain_errors_not_retryable(self) -> None:
        """Test programming errors are not retried."""
        assert not _is_retryable_error(ValueError("bad prompt"))
        assert not _is_retryable_error(GenerationError("Empty completion"))

    def test_backoff_bounds(self) -> None:
        """Test backoff grows with jitter and is capped."""
        first = _calculate_backoff(0)
        assert 0.75 * llm_client._base_delay <= first <= 1.25 * llm_client._base_delay
        assert _calculate_backoff(20) <= llm_client._max_delay


class TestOpenAITextClient:
    """Tests for OpenAITextClient with a fake SDK client."""

    def test_generate(self) -> None:
        """Test the completion text is returned stripped."""
        client, completions = _client(["  Your best week yet.  "])

        assert asyncio.run(client.generate("prompt", 0.7)) == "Your best week yet."
        request = completions.requests[0]
        assert request["model"] == "test-model"
        assert request["temperature"] == 0.7
        assert request["max_tokens"] == 200
        assert request["messages"] == [{"role": "user", "content": "prompt"}]

    def test_empty_completion(self) -> None:
        """Test empty completions raise GenerationError without retrying."""
        client, completions = _client(["   ", "never used"])

        with pytest.raises(GenerationError, match="Empty completion"):
            asyncio.run(client.generate("prompt", 0.5))
        assert len(completions.requests) == 1

    def test_non_retryable_error(self) -> None:
        """Test non-transient errors fail immediately."""
        error = ValueError("bad request")
        client, completions = _client([error])

        with pytest.raises(GenerationError) as exc_info:
            asyncio.run(client.generate("prompt", 0.5))
        assert exc_info.value.last_error is error
        assert len(completions.requests) == 1

    def test_retries_transient_errors(self, monkeypatch) -> None:
        """Test transient errors are retried until success."""
        monkeypatch.setattr(llm_client, "_is_retryable_error", lambda e: isinstance(e, TransientError))
        monkeypatch.setattr(llm_client, "_calculate_backoff", lambda attempt: 0)
        client, completions = _client([TransientError("busy"), "Recovered."])

        assert asyncio.run(client.generate("prompt", 0.5)) == "Recovered."
        assert len(completions.requests) == 2

    def test_gives_up_after_max_retries(self, monkeypatch) -> None:
        """Test the last error is kept after retries run out."""
        monkeypatch.setattr(llm_client, "_is_retryable_error", lambda e: isinstance(e, TransientError))
        monkeypatch.setattr(llm_client, "_calculate_backoff", lambda attempt: 0)
        client, completions = _client([TransientError("busy")] * 2, max_retries=1)

        with pytest.raises(GenerationError, match="Failed after 2 attempts"):
            asyncio.run(client.generate("prompt", 0.5))
        assert len(completions.requests) == 2
