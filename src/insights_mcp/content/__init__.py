"""Slots, facts and generated content for insights."""

from insights_mcp.content.facts import (
    BANNED_WORDS,
    CRITICAL_RUNWAY_BANNED_WORDS,
    InsightFacts,
    banned_words_for,
    compute_mood,
    extract_facts,
    get_headline_fact,
    get_primary_action,
    validate_fact_invariants,
)
from insights_mcp.content.fallback import get_fallback_content
from insights_mcp.content.profit_change import compute_profit_change_description
from insights_mcp.content.slots import (
    InsightSlots,
    compute_highlight,
    compute_slots,
    determine_week_type,
)

__all__ = [
    # Slots
    "InsightSlots",
    "compute_highlight",
    "compute_slots",
    "determine_week_type",
    "compute_profit_change_description",
    # Facts
    "BANNED_WORDS",
    "CRITICAL_RUNWAY_BANNED_WORDS",
    "InsightFacts",
    "banned_words_for",
    "compute_mood",
    "extract_facts",
    "get_headline_fact",
    "get_primary_action",
    "validate_fact_invariants",
    # Fallback
    "get_fallback_content",
]
