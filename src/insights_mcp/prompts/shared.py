"""Blocks embedded in every prompt so all fragments agree on the same facts."""

from insights_mcp.content.facts import (
    BANNED_WORDS,
    CRITICAL_RUNWAY_BANNED_WORDS,
    InsightFacts,
    get_headline_fact,
    get_profit_description,
    get_revenue_description,
    get_runway_description,
)
from insights_mcp.content.slots import InsightSlots


def build_runway_warning(facts: InsightFacts) -> str:
    """Warning placed at the top of the data section. Empty when runway is fine."""
    if facts.runway.is_critical:
        return (
            "CRITICAL RUNWAY WARNING\n"
            f"{get_runway_description(facts)}\n"
            f"NEVER use words like: {', '.join(CRITICAL_RUNWAY_BANNED_WORDS)}\n"
            "MUST frame as: urgent, priority, tight, limited time, needs immediate attention\n"
        )
    if facts.runway.is_low:
        return (
            "LOW RUNWAY WARNING\n"
            f"Runway is {facts.runway.months} months - avoid overly reassuring language.\n"
        )
    return ""


def build_facts_block(slots: InsightSlots, facts: InsightFacts) -> str:
    """Headline, profit, revenue and change lines shared by every builder."""
    lines = [
        f"currency: {facts.currency} (use same format as amounts below, e.g. \"{slots.profit}\")",
        f"headline: {get_headline_fact(facts)}",
        f"profit: {get_profit_description(facts)}",
        f"revenue: {get_revenue_description(facts)}",
    ]
    if facts.profit_change and not facts.is_first_insight:
        lines.append(f"change: {facts.profit_change}")
    if facts.revenue_change and not facts.is_first_insight:
        lines.append(f"revenue change: {facts.revenue_change}")
    return "\n".join(lines)


def build_rules_block(facts: InsightFacts) -> str:
    """Banned words plus the short-runway rules when they apply."""
    block = f"""<banned_words>
{", ".join(BANNED_WORDS)}
WHY: These are filler words. Plain language sounds more genuine and trustworthy.
</banned_words>"""

    if facts.runway.is_low:
        block += f"""

<runway_rules>
Runway is {facts.runway.months} months. NEVER use reassuring language like:
{", ".join(CRITICAL_RUNWAY_BANNED_WORDS)}
Emphasize urgency instead: "only {facts.runway.months} months", "cash is tight", "collecting overdue is urgent".
</runway_rules>"""

    return block


# Accuracy rules for negative and zero profit
ACCURACY_RULES = """<accuracy>
- All figures must match the data exactly
- If profit is negative, expenses MUST be mentioned
- Profit of 0 is "no activity" or "break-even", NOT a loss
- If profit is NEGATIVE, never say it "improved", "doubled", or "grew" even if the loss decreased
  Say "loss decreased" or "loss shrank" instead
- If revenue is 0, margin is meaningless - don't emphasize margin changes
</accuracy>"""
