"""Summary prompt: the full financial picture in flowing prose."""

from insights_mcp.content.facts import (
    InsightFacts,
    ProfitStatusNoActivity,
    ProfitStatusProfit,
    get_tone_guidance_from_facts,
)
from insights_mcp.content.slots import InsightSlots, get_notable_context
from insights_mcp.prompts.shared import (
    ACCURACY_RULES,
    build_facts_block,
    build_rules_block,
    build_runway_warning,
)

# Pattern examples keyed by situation
EXAMPLES = {
    "milestone": {
        "input": (
            "notable: Best profit week since October\n\nprofit: 117,061 kr, revenue: 120,200 kr, "
            "expenses: 3,139 kr, margin: 97.4%, runway: 8 months, overdue: [Company] 24,300 kr"
        ),
        "output": (
            "Your best profit week since October, 117,061 kr on 120,200 kr revenue with margin "
            "holding at 97%. Expenses stayed minimal, and you have 8 months of runway. "
            "[Company] still owes 24,300 kr worth chasing."
        ),
    },
    "streak": {
        "input": (
            "notable: 3 consecutive profitable weeks\n\nprofit: 117,061 kr, revenue: 120,200 kr, "
            "expenses: 3,139 kr, margin: 97.4%, runway: 8 months"
        ),
        "output": (
            "Third straight profitable week with 117,061 kr profit at 97% margin, continuing the "
            "momentum. Revenue came in at 120,200 kr with minimal expenses, and your 8-month "
            "runway keeps you covered."
        ),
    },
    "recovery": {
        "input": (
            "notable: Recovery after 2 down weeks\n\nprofit: 85,000 kr, revenue: 90,000 kr, "
            "expenses: 5,000 kr, margin: 94.4%, runway: 6 months, overdue: [Company] 12,000 kr"
        ),
        "output": (
            "Back in the black after two tough weeks with 85,000 kr profit on 90,000 kr revenue. "
            "Margin recovered to 94%, and your 6-month runway held. [Company] still owes "
            "12,000 kr from before."
        ),
    },
    "standard": {
        "input": (
            "profit: 75,000 kr, revenue: 80,000 kr, expenses: 5,000 kr, margin: 93.8%, "
            "runway: 10 months, overdue: [Company] 8,000 kr"
        ),
        "output": (
            "A good week with 75,000 kr profit on 80,000 kr revenue, margin at 94% with low "
            "expenses. Your 10-month runway gives you room to operate. [Company] owes 8,000 kr "
            "that's worth following up on."
        ),
    },
    "challenging": {
        "input": (
            "profit: -22,266 kr, revenue: 0 kr, expenses: 22,266 kr, "
            "runway: 2 months (cash lasts until March 15, 2026), overdue: [Company] 750 kr"
        ),
        "output": (
            "No revenue landed this week, with 22,266 kr in expenses creating a gap. Your cash "
            "lasts until March 15, so collecting the 750 kr from [Company] and landing new work "
            "should be top priority."
        ),
    },
    "zero_activity": {
        "input": (
            "profit: 0 kr, revenue: 0 kr, expenses: 0 kr, margin: 0%, "
            "runway: 1 months (cash lasts until February 10, 2026), overdue: [Company] 5,000 kr"
        ),
        "output": (
            "No financial activity this week. With cash lasting until February 10, collecting "
            "the 5,000 kr overdue from [Company] should be a priority to extend your runway."
        ),
    },
    "low_runway_profitable": {
        "input": (
            "CRITICAL RUNWAY WARNING\nRunway is only 1 months (until February 24, 2026).\n\n"
            "profit: 5,644 kr, revenue: 7,500 kr, expenses: 1,856 kr, margin: 75.3%, "
            "runway: 1 months (cash lasts until February 24, 2026), overdue: [Company A] 7,500 kr, "
            "[Company B] 7,500 kr, [Company C] 7,500 kr"
        ),
        "output": (
            "Profit reached 5,644 kr on 7,500 kr revenue with a 75% margin, but with only 1 month "
            "of runway until February 24, cash is tight. The 22,500 kr overdue from three clients "
            "needs urgent attention to extend your runway."
        ),
    },
}

FIRST_INSIGHT_EXAMPLES = {
    "great": {
        "input": (
            "profit: 260,340 kr, revenue: 268,000 kr, expenses: 7,660 kr, margin: 97%, "
            "runway: 14 months, overdue: [Company] 750 kr"
        ),
        "output": (
            "Welcome to your weekly insights. This week brought 260,340 kr profit on 268,000 kr "
            "revenue, a 97% margin with minimal expenses. Your 14-month runway gives you plenty "
            "of room. One thing to chase: 750 kr overdue from [Company]."
        ),
    },
    "good": {
        "input": (
            "profit: 85,000 kr, revenue: 95,000 kr, expenses: 10,000 kr, margin: 89%, "
            "runway: 8 months, overdue: [Company] 5,000 kr"
        ),
        "output": (
            "Welcome to your weekly insights. You're starting with 85,000 kr profit on 95,000 kr "
            "revenue, 89% margin after 10,000 kr in expenses. Your 8-month runway is in place. "
            "[Company] owes 5,000 kr worth following up on."
        ),
    },
    "quiet": {
        "input": (
            "profit: 12,000 kr, revenue: 15,000 kr, expenses: 3,000 kr, margin: 80%, runway: 6 months"
        ),
        "output": (
            "Welcome to your weekly insights. Quieter start with 12,000 kr profit on 15,000 kr "
            "revenue, 80% margin with low expenses. Your 6-month runway covers you. "
            "No overdue invoices to worry about."
        ),
    },
    "challenging": {
        "input": (
            "profit: -15,000 kr, revenue: 0 kr, expenses: 15,000 kr, runway: 10 months, "
            "overdue: [Company] 8,000 kr"
        ),
        "output": (
            "Welcome to your weekly insights. No revenue this week with 15,000 kr in expenses, "
            "often just payment timing when invoices cross weeks. Your 10-month runway covers the "
            "gap. [Company] owes 8,000 kr that's worth collecting."
        ),
    },
    "zero_activity": {
        "input": (
            "profit: 0 kr, revenue: 0 kr, expenses: 0 kr, "
            "runway: 1 months (cash lasts until February 10, 2026), overdue: [Company] 3,000 kr"
        ),
        "output": (
            "Welcome to your weekly insights. No financial activity recorded this week. With cash "
            "lasting until February 10, collecting the 3,000 kr from [Company] should be a priority."
        ),
    },
}

CONCRETE_EXAMPLE = {
    "input": (
        "currency: SEK\n\nnotable: 3 consecutive profitable weeks\n\nprofit: 117,061 kr, "
        "revenue: 120,200 kr, expenses: 3,139 kr, margin: 97.4%, runway: 8 months, "
        "overdue: [Company] 24,300 kr"
    ),
    "output": (
        "Third straight profitable week with 117,061 kr on 120,200 kr revenue and margin holding "
        "at 97%. Expenses stayed minimal at 3,139 kr, and your 8-month runway keeps you "
        "covered. [Company] owes 24,300 kr worth chasing."
    ),
}


def select_example_key(slots: InsightSlots, facts: InsightFacts) -> str:
    """Pick the pattern example. Short runway with profit beats every other situation."""
    if facts.is_first_insight:
        if isinstance(facts.profit_status, ProfitStatusNoActivity):
            return "zero_activity"
        return slots.week_type if slots.week_type in FIRST_INSIGHT_EXAMPLES else "good"

    if facts.runway.is_critical and isinstance(facts.profit_status, ProfitStatusProfit):
        return "low_runway_profitable"
    if isinstance(facts.profit_status, ProfitStatusNoActivity):
        return "zero_activity"
    if slots.is_personal_best and slots.historical_context:
        return "milestone"
    if slots.is_recovery and slots.recovery_description:
        return "recovery"
    if slots.streak and slots.streak.count >= 3:
        return "streak"
    if slots.week_type == "challenging":
        return "challenging"
    return "standard"


def _build_data_section(slots: InsightSlots, facts: InsightFacts) -> str:
    lines = [build_facts_block(slots, facts), ""]

    if facts.alerts:
        lines.append("ALERTS (mention these):")
        lines.extend(f"  - {alert}" for alert in facts.alerts)
        lines.append("")
    if facts.warnings:
        lines.append("warnings (weave in naturally if relevant):")
        lines.extend(f"  - {warning}" for warning in facts.warnings)
        lines.append("")

    if not facts.is_first_insight and (notable := get_notable_context(slots)):
        lines.append(f"notable: {notable}")
        lines.append("")

    lines.append(f"expenses: {slots.expenses}")
    lines.append(f"margin: {slots.margin}%")

    if slots.invoices_sent_change:
        lines.append(f"invoices sent: {slots.invoices_sent_change}")
    elif slots.invoices_sent == 0:
        lines.append("invoices sent: no new invoices this week")

    if facts.runway.exhaustion_date:
        lines.append(f"runway: {facts.runway.months} months (cash lasts until {facts.runway.exhaustion_date})")
    else:
        lines.append(f"runway: {facts.runway.months} months")

    if slots.cash_flow_explanation:
        lines.append(f"cash flow: {slots.cash_flow} ({slots.cash_flow_explanation})")

    if facts.overdue.has_overdue:
        lines.append("")
        lines.append("overdue:")
        for inv in facts.overdue.invoices:
            line = f"  - {inv.company}: {inv.amount} ({inv.days_overdue} days)"
            if inv.is_unusual and inv.unusual_reason:
                line += f" UNUSUAL - {inv.unusual_reason}"
            lines.append(line)

    if facts.yoy_revenue or facts.yoy_profit:
        lines.append("")
        lines.append("vs last year:")
        if facts.yoy_revenue:
            lines.append(f"  revenue: {facts.yoy_revenue}")
        if facts.yoy_profit:
            lines.append(f"  profit: {facts.yoy_profit}")

    if facts.quarter_pace:
        lines.append("")
        lines.append(f"quarter projection: {facts.quarter_pace}")

    return "\n".join(lines)


def build_summary_prompt(slots: InsightSlots, facts: InsightFacts) -> str:
    """Build the summary prompt (40-60 words of prose)."""
    key = select_example_key(slots, facts)
    example = FIRST_INSIGHT_EXAMPLES[key] if facts.is_first_insight else EXAMPLES[key]

    if facts.is_first_insight:
        constraints = """<constraints>
This is their FIRST insight: welcome them briefly.
Word count: EXACTLY 40-60 words.
Include profit, revenue, margin, runway, woven together naturally.
Connect facts with flow words: "with", "while", "and your", "giving you".
Never say "this period".
Match currency format exactly as written in the data.
</constraints>"""
    else:
        constraints = """<constraints>
Word count: EXACTLY 40-60 words.
Include profit, revenue, margin, runway, woven together naturally.
Connect facts with flow words: "with", "while", "and your", "giving you".
Never say "this period". Say "this week" or nothing.
Match currency format exactly as written in the data.
Mention overdue receivables at the end if any exist.
Include the runway exhaustion date when the data shows one.
</constraints>"""

    return f"""<role>
You write the summary paragraph for a weekly business insight.
This follows the headline and gives the full financial picture in flowing prose.
Sound like a knowledgeable colleague giving a verbal debrief, not a report generator.
</role>

<voice>
{get_tone_guidance_from_facts(facts)}
</voice>

<data>
{build_runway_warning(facts)}{_build_data_section(slots, facts)}
</data>

{build_rules_block(facts)}

{constraints}

{ACCURACY_RULES}

<examples>
<concrete_example>
<input>{CONCRETE_EXAMPLE["input"]}</input>
<output>{CONCRETE_EXAMPLE["output"]}</output>
</concrete_example>
<pattern_example>
<input>{example["input"]}</input>
<output>{example["output"]}</output>
</pattern_example>
</examples>

<verify>
Before responding, silently verify (DO NOT include this in your response):
- Word count between 40-60?
- Facts connected, not listed?
- Amounts match the data format?
</verify>

<output>
Write ONE summary (40-60 words). Begin directly, no preamble or meta-commentary.
ONLY output the summary text itself.
</output>"""
