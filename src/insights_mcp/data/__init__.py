"""Data layer for text generation and caching."""

from insights_mcp.data.cache import TeamCurrencyCache
from insights_mcp.data.llm_client import OpenAITextClient, TextGenerationClient

__all__ = [
    # Cache
    "TeamCurrencyCache",
    # Text generation
    "OpenAITextClient",
    "TextGenerationClient",
]
