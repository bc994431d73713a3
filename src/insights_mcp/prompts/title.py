"""Title prompt: one headline for widget cards and notifications."""

from insights_mcp.content.facts import InsightFacts, get_primary_action, get_tone_guidance_from_facts
from insights_mcp.content.slots import InsightSlots, get_notable_context
from insights_mcp.prompts.shared import build_facts_block, build_rules_block, build_runway_warning


def build_title_prompt(slots: InsightSlots, facts: InsightFacts) -> str:
    """Build the title prompt (12-35 words, context first, addresses the owner)."""
    lines = [build_facts_block(slots, facts)]

    if not facts.is_first_insight and (notable := get_notable_context(slots)):
        lines.append(f"notable: {notable}")
    if facts.runway.months > 0:
        lines.append(f"runway: {facts.runway.months} months")
    if action := get_primary_action(facts):
        lines.append(f"priority: {action.description}")

    data = "\n".join(lines)

    return f"""<role>
You write the headline for a weekly business insight. It is the first thing the owner reads.
</role>

<voice>
{get_tone_guidance_from_facts(facts)}
</voice>

<data>
{build_runway_warning(facts)}{data}
</data>

{build_rules_block(facts)}

<constraints>
Word count: 12-35 words.
Lead with context (the headline fact or what changed), not a bare number.
Address the owner directly with "you" and "your".
Use full amounts exactly as written in the data ("260,000 kr", not "260k").
Only use customer names that appear in the data.
</constraints>

<examples>
<example>Your best profit week since October - 117,061 kr on 120,200 kr revenue, and 8 months of runway behind you.</example>
<example>No payments landed this week, just timing. Lost Island AB still owes you 750 kr.</example>
</examples>

<output>
Write ONE headline. No quotes, no preamble. ONLY output the headline text itself.
</output>"""
