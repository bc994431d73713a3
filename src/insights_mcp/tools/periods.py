"""Period tools."""

from datetime import date, datetime
from typing import Any

from insights_mcp.config import InsightsSettings
from insights_mcp.content.profit_change import compute_profit_change_description
from insights_mcp.utils.period import (
    calculate_next_insight_time,
    format_date_for_query,
    get_period_label,
    get_previous_complete_period,
    get_previous_period,
    get_timezone,
)
from insights_mcp.utils.provenance import build_error_response, build_meta


async def insight_period(period_type: str, reference_date: str | None = None) -> dict[str, Any]:
    """
    Describe the period the next insight would report on.

    Args:
        period_type: weekly, monthly, quarterly or yearly
        reference_date: Date to evaluate from (YYYY-MM-DD, default: today)

    Returns:
        Dict with the period, the comparison period and the next delivery time
    """
    period_type = period_type.lower().strip()
    settings = InsightsSettings.from_env()

    try:
        reference = date.fromisoformat(reference_date) if reference_date else None
        period = get_previous_complete_period(period_type, reference)
    except ValueError as e:
        return build_error_response(error_type="invalid_request", message=str(e))

    previous = get_previous_period(period_type, period)
    now = None
    if reference is not None:
        tz = get_timezone(settings.timezone)
        now = tz.localize(datetime(reference.year, reference.month, reference.day))

    return {
        "meta": build_meta("insight_period"),
        "period_type": period_type,
        "period_label": get_period_label(period_type, period.period_year, period.period_number),
        "period": {
            "label": period.period_label,
            "start": format_date_for_query(period.period_start),
            "end": format_date_for_query(period.period_end),
        },
        "previous_period": {
            "label": previous.period_label,
            "start": format_date_for_query(previous.period_start),
            "end": format_date_for_query(previous.period_end),
        },
        "timezone": settings.timezone,
        "next_insight_at": calculate_next_insight_time(period_type, settings.timezone, reference=now).isoformat(),
    }


async def profit_change(current: float, previous: float, pct_change: float) -> dict[str, Any]:
    """
    Describe a profit change between two periods.

    Args:
        current: Profit this period
        previous: Profit last period
        pct_change: Percentage change as reported upstream

    Returns:
        Dict with the description
    """
    return {
        "meta": build_meta("profit_change"),
        "current": current,
        "previous": previous,
        "pct_change": pct_change,
        "description": compute_profit_change_description(current, previous, pct_change),
    }
