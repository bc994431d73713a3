"""Audio prompt: a short spoken script for text-to-speech."""

from insights_mcp.content.facts import (
    InsightFacts,
    get_headline_fact,
    get_primary_action,
    get_profit_description_spoken,
    get_revenue_description_spoken,
    get_runway_description,
    get_tone_guidance_from_facts,
)
from insights_mcp.content.slots import InsightSlots
from insights_mcp.prompts.shared import build_facts_block, build_rules_block, build_runway_warning
from insights_mcp.utils.speech import format_number_for_speech


def build_audio_prompt(slots: InsightSlots, facts: InsightFacts) -> str:
    """Build the audio script prompt (60-80 words, spoken numbers)."""
    lines = [
        build_facts_block(slots, facts),
        "",
        "spoken forms (use these, not the written amounts):",
        f"  headline: {get_headline_fact(facts)}",
        f"  profit: {get_profit_description_spoken(facts)}",
        f"  revenue: {get_revenue_description_spoken(facts)}",
        f"  runway: {get_runway_description(facts)}",
    ]
    if facts.overdue.has_overdue:
        lines.append(
            f"  overdue: {format_number_for_speech(facts.overdue.total_raw)} {facts.currency_word} "
            f"across {facts.overdue.count} invoice{'s' if facts.overdue.count != 1 else ''}"
        )
    if action := get_primary_action(facts):
        lines.append(f"  priority: {action.description}")

    data = "\n".join(lines)

    return f"""<role>
You write a short audio script that is read aloud to a business owner.
</role>

<voice>
{get_tone_guidance_from_facts(facts)}
</voice>

<data>
{build_runway_warning(facts)}{data}
</data>

{build_rules_block(facts)}

<constraints>
Word count: 60-80 words.
Open with the period: "{facts.period_label}".
Use the spoken forms: say "46 thousand {facts.currency_word}", never symbols, codes or digits with separators.
Say the currency as "{facts.currency_word}".
No lists, no markdown, no emojis. Short sentences that sound natural when spoken.
</constraints>

<output>
Write the script. Begin directly, no preamble. ONLY output the script text itself.
</output>"""
