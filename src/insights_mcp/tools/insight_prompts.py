"""Insight prompts tool."""

from time import perf_counter
from typing import Any

from insights_mcp.prompts.templates import build_all_prompts
from insights_mcp.service import compute_insight
from insights_mcp.utils.normalize import facts_hash
from insights_mcp.utils.provenance import build_error_response, build_meta
from insights_mcp.utils.validators import InsightRequest


async def insight_prompts(payload: str | dict[str, Any]) -> dict[str, Any]:
    """
    Build the five generation prompts for one period.

    Every prompt is built from the same facts. The actions prompt is
    null when the period has nothing actionable.

    Args:
        payload: Insight request JSON

    Returns:
        Dict with title, summary, story, actions and audio prompts
    """
    start_time = perf_counter()

    try:
        request = InsightRequest.from_payload(payload)
    except ValueError as e:
        return build_error_response(error_type="invalid_request", message=str(e))

    computation = compute_insight(request)
    prompts = build_all_prompts(computation.slots, computation.facts)
    duration_ms = (perf_counter() - start_time) * 1000

    return {
        "meta": build_meta("insight_prompts", duration_ms),
        "period_label": request.period_label,
        "week_type": computation.slots.week_type,
        "facts_hash": facts_hash(computation.facts),
        "prompts": prompts,
    }
