"""Story prompt: two or three sentences built around the period's highlight."""

from insights_mcp.content.facts import InsightFacts, get_tone_guidance_from_facts
from insights_mcp.content.slots import (
    BigPaymentHighlight,
    InsightSlots,
    NoHighlight,
    ProfitMultiplierHighlight,
    WeekHighlight,
)
from insights_mcp.prompts.shared import build_facts_block, build_rules_block, build_runway_warning


def describe_highlight(highlight: WeekHighlight) -> str | None:
    if isinstance(highlight, NoHighlight):
        return None
    if isinstance(highlight, ProfitMultiplierHighlight):
        return f"Profit is {highlight.multiplier}x last week"
    if isinstance(highlight, BigPaymentHighlight):
        return f"Largest payment: {highlight.amount} from {highlight.customer}"
    return highlight.description


def build_story_prompt(slots: InsightSlots, facts: InsightFacts) -> str:
    """Build the story prompt (2-3 sentences, adds context the summary lacks)."""
    lines = [build_facts_block(slots, facts)]

    if highlight := describe_highlight(slots.highlight):
        lines.append(f"highlight ({slots.highlight.type}): {highlight}")
    if slots.momentum:
        lines.append(f"momentum: {slots.momentum}")
    if facts.yoy_revenue:
        lines.append(f"revenue vs last year: {facts.yoy_revenue}")
    if facts.quarter_pace:
        lines.append(f"quarter projection: {facts.quarter_pace}")
    if slots.next_week_invoices_due:
        due = slots.next_week_invoices_due
        lines.append(f"next week: {due.count} invoice(s) due totaling {due.amount}")
    if slots.concentration_warning:
        warning = slots.concentration_warning
        lines.append(f"concentration: {warning.percentage:.0f}% of revenue from {warning.customer_name}")
    for inv in facts.overdue.invoices:
        if inv.is_unusual and inv.unusual_reason:
            lines.append(f"payment pattern: {inv.company} {inv.unusual_reason}")

    data = "\n".join(lines)

    return f"""<role>
You write the story for a weekly business insight. The summary already gave the numbers.
The story adds the context that makes the week make sense.
</role>

<voice>
{get_tone_guidance_from_facts(facts)}
</voice>

<data>
{build_runway_warning(facts)}{data}
</data>

{build_rules_block(facts)}

<constraints>
Length: 2-3 sentences.
Build the story around the highlight when there is one.
Do NOT repeat the revenue, expense or profit amounts from the summary.
Do NOT repeat actions like "send a reminder", those are listed separately.
Only use customer names that appear in the data.
</constraints>

<output>
Write the story. Begin directly, no preamble. ONLY output the story text itself.
</output>"""
