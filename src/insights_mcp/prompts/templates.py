"""Prompt registry for insight content generation."""

import re
from collections.abc import Callable
from typing import Any

from insights_mcp.content.facts import InsightFacts, banned_words_for
from insights_mcp.content.slots import InsightSlots
from insights_mcp.prompts.actions import build_actions_prompt
from insights_mcp.prompts.audio import build_audio_prompt
from insights_mcp.prompts.story import build_story_prompt
from insights_mcp.prompts.summary import build_summary_prompt
from insights_mcp.prompts.title import build_title_prompt

PromptBuilder = Callable[[InsightSlots, InsightFacts], "str | None"]

# Prompt definitions
PROMPTS = {
    "title": {
        "description": "12-35 word headline that leads with context",
        "builder": build_title_prompt,
    },
    "summary": {
        "description": "40-60 word paragraph with profit, revenue, margin, runway and overdue",
        "builder": build_summary_prompt,
    },
    "story": {
        "description": "2-3 sentences built around the period's highlight",
        "builder": build_story_prompt,
    },
    "actions": {
        "description": "JSON array of next steps tied to invoices and projects",
        "builder": build_actions_prompt,
    },
    "audio": {
        "description": "60-80 word spoken script using spoken numbers",
        "builder": build_audio_prompt,
    },
}

PROMPT_BUILDERS: dict[str, PromptBuilder] = {name: info["builder"] for name, info in PROMPTS.items()}


def list_prompts() -> list[dict[str, Any]]:
    """List available prompts."""
    return [{"name": name, "description": info["description"]} for name, info in PROMPTS.items()]


def get_prompt(name: str, slots: InsightSlots, facts: InsightFacts) -> str | None:
    """Build a single prompt by name. Unknown names and non-actionable periods give None."""
    if name not in PROMPT_BUILDERS:
        return None
    return PROMPT_BUILDERS[name](slots, facts)


def build_all_prompts(slots: InsightSlots, facts: InsightFacts) -> dict[str, str | None]:
    """Build every prompt from the same facts."""
    return {name: builder(slots, facts) for name, builder in PROMPT_BUILDERS.items()}


def check_generated_text(text: str, facts: InsightFacts) -> list[str]:
    """
    List banned words present in a generated fragment.

    Matching is case-insensitive on word boundaries, so "strongly" does not match "strong".
    """
    lowered = text.lower()
    return [
        word
        for word in banned_words_for(facts)
        if re.search(rf"\b{re.escape(word)}\b", lowered)
    ]
