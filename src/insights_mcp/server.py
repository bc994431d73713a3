"""Period Insights MCP Server using FastMCP."""

import json
import logging
import os

from fastmcp import FastMCP

from insights_mcp import SCHEMA_VERSION, SERVER_VERSION
from insights_mcp.prompts.templates import get_prompt, list_prompts
from insights_mcp.service import compute_insight
from insights_mcp.tools import (
    generate_insight_content,
    insight_facts,
    insight_period,
    insight_prompts,
    profit_change,
)
from insights_mcp.utils.validators import InsightRequest

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

# Create FastMCP server instance
mcp = FastMCP(
    name="period-insights",
)


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool
async def compute_insight_facts(payload: str) -> str:
    """
    Compute the slots and facts behind a period insight.

    Numbers, statuses and change descriptions are computed once here. Every
    piece of generated text is built from these facts.

    Args:
        payload: JSON with currency, period_label, period_type, current,
                 previous, activity and optionally previous_activity, context,
                 locale, historical_context.
                 Example: {"currency": "SEK", "period_label": "Week 2, 2025",
                 "period_type": "weekly", "current": {"revenue": 50000,
                 "expenses": 20000, "net_profit": 30000}, "previous": {...},
                 "activity": {...}}

    Returns:
        JSON with selected metrics, anomalies, slots, facts and facts_hash
    """
    result = await insight_facts(payload=payload)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def build_insight_prompts(payload: str) -> str:
    """
    Build the title, summary, story, actions and audio prompts for a period.

    Args:
        payload: Insight request JSON (same shape as compute_insight_facts)

    Returns:
        JSON with one prompt per fragment (actions is null when nothing is actionable)
    """
    result = await insight_prompts(payload=payload)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def generate_insight(payload: str) -> str:
    """
    Generate the full insight content for a period.

    Falls back to deterministic content if any generation call fails.

    Args:
        payload: Insight request JSON (same shape as compute_insight_facts)

    Returns:
        JSON with title, summary, story, actions, audio_script and is_fallback
    """
    result = await generate_insight_content(payload=payload)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def describe_profit_change(current: float, previous: float, pct_change: float) -> str:
    """
    Describe a profit change in words that never contradict the numbers.

    Args:
        current: Profit this period
        previous: Profit last period
        pct_change: Percentage change (e.g. 96 for +96%)

    Returns:
        JSON with the description, e.g. "loss decreased 96% vs last week"
    """
    result = await profit_change(current=current, previous=previous, pct_change=pct_change)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_insight_period(period_type: str, reference_date: str | None = None) -> str:
    """
    Get the period the next insight reports on, and when it is delivered.

    Args:
        period_type: weekly, monthly, quarterly or yearly
        reference_date: Date to evaluate from (YYYY-MM-DD, default: today)

    Returns:
        JSON with period dates, comparison period and next delivery time
    """
    result = await insight_period(period_type=period_type, reference_date=reference_date)
    return json.dumps(result, indent=2, default=str)


# ============================================================================
# RESOURCES
# ============================================================================


@mcp.resource("prompts://insights")
def get_prompt_catalog() -> str:
    """List the content prompts and what each one produces."""
    return json.dumps(list_prompts(), indent=2)


# ============================================================================
# PROMPTS
# ============================================================================


def _content_prompt(name: str, payload: str) -> str:
    try:
        request = InsightRequest.from_payload(payload)
    except ValueError as e:
        return f"Cannot build the {name} prompt: {e}"

    computation = compute_insight(request)
    result = get_prompt(name, computation.slots, computation.facts)
    if result:
        return result
    return f"Nothing actionable in {request.period_label}. Use compute_insight_facts for the numbers."


@mcp.prompt
def insight_title(payload: str) -> str:
    """Write a headline for a period insight."""
    return _content_prompt("title", payload)


@mcp.prompt
def insight_summary(payload: str) -> str:
    """Write a short summary paragraph for a period insight."""
    return _content_prompt("summary", payload)


@mcp.prompt
def insight_story(payload: str) -> str:
    """Write the story behind a period's highlight."""
    return _content_prompt("story", payload)


@mcp.prompt
def insight_actions(payload: str) -> str:
    """Suggest next steps tied to overdue invoices, drafts and unbilled work."""
    return _content_prompt("actions", payload)


@mcp.prompt
def insight_audio(payload: str) -> str:
    """Write a spoken script for a period insight."""
    return _content_prompt("audio", payload)


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Period Insights MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    mcp.run()


if __name__ == "__main__":
    main()
