"""Insight generation tool."""

import logging
from time import perf_counter
from typing import Any

from insights_mcp.config import InsightsSettings
from insights_mcp.content.generator import ContentGenerator
from insights_mcp.data.llm_client import OpenAITextClient
from insights_mcp.service import compute_insight
from insights_mcp.utils.normalize import facts_hash, to_jsonable
from insights_mcp.utils.provenance import build_error_response, build_meta
from insights_mcp.utils.validators import InsightRequest

logger = logging.getLogger(__name__)

_generator: ContentGenerator | None = None


def get_content_generator() -> ContentGenerator:
    """Shared generator, created on first use so the server starts without an API key."""
    global _generator
    if _generator is None:
        settings = InsightsSettings.from_env()
        _generator = ContentGenerator(
            OpenAITextClient(settings),
            timeout_seconds=settings.llm_timeout_seconds,
        )
    return _generator


async def generate_insight_content(
    payload: str | dict[str, Any],
    generator: ContentGenerator | None = None,
) -> dict[str, Any]:
    """
    Generate title, summary, story, actions and audio script for one period.

    Args:
        payload: Insight request JSON
        generator: Content generator (default: shared OpenAI-backed one)

    Returns:
        Dict with content, facts hash and week type. Content is fallback
        text (is_fallback true) when any generation call failed.
    """
    start_time = perf_counter()

    try:
        request = InsightRequest.from_payload(payload)
    except ValueError as e:
        return build_error_response(error_type="invalid_request", message=str(e))

    computation = compute_insight(request)
    generator = generator or get_content_generator()
    content = await generator.generate(computation.slots, computation.facts, request.activity)
    duration_ms = (perf_counter() - start_time) * 1000

    if content.is_fallback:
        logger.info(f"Returning fallback content for {request.period_label}")

    return {
        "meta": build_meta("generate_insight", duration_ms, is_fallback=content.is_fallback),
        "period_label": request.period_label,
        "week_type": computation.slots.week_type,
        "mood": computation.facts.mood,
        "facts_hash": facts_hash(computation.facts),
        "content": to_jsonable(content),
    }
