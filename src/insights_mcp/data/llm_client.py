"""Async text-generation client with bounded concurrency and retry logic."""

import asyncio
import logging
import os
import random
from typing import Protocol

import openai
from openai import AsyncOpenAI

from insights_mcp.config import InsightsSettings
from insights_mcp.errors import GenerationError

logger = logging.getLogger(__name__)

# Bounded concurrency for generation calls
_max_concurrency = int(os.environ.get("INSIGHTS_LLM_MAX_CONCURRENCY", "4"))
_generation_semaphore = asyncio.Semaphore(_max_concurrency)

# Retry configuration
_max_retries = int(os.environ.get("INSIGHTS_LLM_MAX_RETRIES", "2"))
_base_delay = float(os.environ.get("INSIGHTS_LLM_BASE_DELAY", "1.0"))  # seconds
_max_delay = float(os.environ.get("INSIGHTS_LLM_MAX_DELAY", "10.0"))  # seconds


class TextGenerationClient(Protocol):
    """Anything that turns a prompt into text. May raise on failure."""

    async def generate(self, prompt: str, temperature: float) -> str: ...


def _is_retryable_error(error: Exception) -> bool:
    """Rate limits, timeouts, connection problems and 5xx responses are transient."""
    if isinstance(error, (openai.RateLimitError, openai.APITimeoutError, openai.APIConnectionError)):
        return True
    if isinstance(error, openai.APIStatusError):
        return 500 <= error.status_code < 600
    return False


def _calculate_backoff(attempt: int) -> float:
    """Calculate delay with exponential backoff and jitter."""
    delay = _base_delay * (2**attempt)
    jitter = delay * 0.25 * (2 * random.random() - 1)
    return min(delay + jitter, _max_delay)


class OpenAITextClient:
    """
    TextGenerationClient backed by the OpenAI chat completions API.

    The SDK's own retries are disabled so retry policy lives in one place.
    """

    def __init__(
        self,
        settings: InsightsSettings | None = None,
        client: AsyncOpenAI | None = None,
        max_retries: int = _max_retries,
    ):
        self.settings = settings or InsightsSettings.from_env()
        # Reads OPENAI_API_KEY from the environment
        self.client = client or AsyncOpenAI(max_retries=0, timeout=self.settings.llm_timeout_seconds)
        self.max_retries = max_retries

    async def _complete(self, prompt: str, temperature: float) -> str:
        response = await self.client.chat.completions.create(
            model=self.settings.llm_model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_tokens=self.settings.llm_max_tokens,
        )
        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise GenerationError("Empty completion")
        return content.strip()

    async def generate(self, prompt: str, temperature: float) -> str:
        """
        Generate text for a prompt.

        Raises:
            GenerationError: If the call fails after all retries
        """
        last_error: Exception | None = None

        async with _generation_semaphore:
            for attempt in range(self.max_retries + 1):
                try:
                    return await self._complete(prompt, temperature)
                except GenerationError:
                    raise
                except Exception as e:
                    last_error = e

                    if not _is_retryable_error(e):
                        raise GenerationError(f"Generation failed: {e}", last_error=e) from e

                    if attempt >= self.max_retries:
                        logger.warning(
                            f"generate({self.settings.llm_model}): Failed after {attempt + 1} attempts. "
                            f"Last error: {e}"
                        )
                        raise GenerationError(
                            f"Failed after {attempt + 1} attempts: {e}", last_error=e
                        ) from e

                    delay = _calculate_backoff(attempt)
                    logger.info(
                        f"generate({self.settings.llm_model}): Attempt {attempt + 1} failed ({e}). "
                        f"Retrying in {delay:.1f}s..."
                    )
                    await asyncio.sleep(delay)

        # Should never reach here, but just in case
        raise GenerationError(f"Failed after {self.max_retries + 1} attempts", last_error=last_error)
