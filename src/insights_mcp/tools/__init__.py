"""Insight tools."""

from insights_mcp.tools.generate import generate_insight_content
from insights_mcp.tools.insight_facts import insight_facts
from insights_mcp.tools.insight_prompts import insight_prompts
from insights_mcp.tools.periods import insight_period, profit_change

__all__ = [
    "generate_insight_content",
    "insight_facts",
    "insight_period",
    "insight_prompts",
    "profit_change",
]
