"""Insight facts tool."""

from time import perf_counter
from typing import Any

from insights_mcp.service import compute_insight
from insights_mcp.utils.normalize import facts_hash, to_jsonable
from insights_mcp.utils.provenance import build_error_response, build_meta
from insights_mcp.utils.validators import InsightRequest


async def insight_facts(payload: str | dict[str, Any]) -> dict[str, Any]:
    """
    Compute slots and facts for one period without generating any text.

    Args:
        payload: Insight request JSON

    Returns:
        Dict with selected metrics, anomalies, slots, facts and a facts hash
    """
    start_time = perf_counter()

    try:
        request = InsightRequest.from_payload(payload)
    except ValueError as e:
        return build_error_response(error_type="invalid_request", message=str(e))

    computation = compute_insight(request)
    duration_ms = (perf_counter() - start_time) * 1000

    return {
        "meta": build_meta("insight_facts", duration_ms),
        "period_label": request.period_label,
        "currency": request.currency,
        "selected_metrics": to_jsonable(computation.selected_metrics),
        "anomalies": to_jsonable(computation.anomalies),
        "expense_anomalies": to_jsonable(computation.expense_anomalies),
        "slots": to_jsonable(computation.slots),
        "facts": to_jsonable(computation.facts),
        "facts_hash": facts_hash(computation.facts),
    }
