"""Actions prompt: concrete next steps tied to real invoices and projects."""

from insights_mcp.content.facts import InsightFacts
from insights_mcp.content.slots import InsightSlots
from insights_mcp.prompts.shared import build_facts_block, build_rules_block


def has_actionable_items(slots: InsightSlots, facts: InsightFacts) -> bool:
    return bool(
        facts.overdue.has_overdue
        or facts.drafts.has_drafts
        or slots.has_expense_spikes
        or slots.concentration_warning
        or facts.runway.is_low
        or slots.unbilled_hours > 0
    )


def build_candidate_actions(slots: InsightSlots, facts: InsightFacts) -> list[str]:
    """Candidate actions in priority order, each tagged with its entity where one exists."""
    candidates = []

    for inv in facts.overdue.invoices:
        candidates.append(
            f'- overdue: {inv.company} owes {inv.amount} ({inv.days_overdue} days) '
            f'[entityType="invoice", entityId="{inv.id}"]'
        )

    for draft in facts.drafts.drafts:
        candidates.append(
            f'- draft: invoice to {draft.company} for {draft.amount} is ready to send '
            f'[entityType="invoice", entityId="{draft.id}"]'
        )

    for work in slots.unbilled_work:
        project = f"{work.project_name} ({work.customer_name})" if work.customer_name else work.project_name
        candidates.append(
            f'- unbilled: {project} has {work.hours:g}h worth {work.amount} not invoiced '
            f'[entityType="project", entityId="{work.project_id}"]'
        )
    if not slots.unbilled_work and slots.unbilled_hours > 0:
        worth = f" worth {slots.billable_amount}" if slots.billable_amount else ""
        candidates.append(f"- unbilled: {slots.unbilled_hours:g} hours{worth} not yet invoiced")

    for spike in slots.expense_spikes:
        tip = f" Tip: {spike.tip}" if spike.tip else ""
        candidates.append(f"- expense: {spike.category} up {spike.change}% to {spike.amount}.{tip}")

    if slots.concentration_warning:
        warning = slots.concentration_warning
        candidates.append(
            f"- concentration: {warning.percentage:.0f}% of revenue from {warning.customer_name}"
        )

    if facts.runway.is_low:
        candidates.append(f"- runway: {facts.runway.months} months left, focus on collecting cash")

    return candidates


def build_actions_prompt(slots: InsightSlots, facts: InsightFacts) -> str | None:
    """
    Build the actions prompt.

    Returns:
        Prompt text, or None when nothing is actionable
    """
    if not has_actionable_items(slots, facts):
        return None

    candidates = "\n".join(build_candidate_actions(slots, facts))

    return f"""<role>
You pick the next steps for a business owner reading their weekly insight.
</role>

<data>
{build_facts_block(slots, facts)}

candidate actions:
{candidates}
</data>

{build_rules_block(facts)}

<constraints>
Return 1-2 actions. If an overdue invoice exists, the FIRST action MUST be about it.
Each action is one short imperative sentence with the customer name and exact amount.
Only use names, amounts and entity ids that appear in the candidate actions.
Never invent an entityId. Omit entityType and entityId when the candidate has none.
</constraints>

<output>
Respond with ONLY a JSON array, no prose:
[{{"text": "...", "type": "overdue|draft|unbilled|expense|concentration|runway", "entityType": "invoice|project", "entityId": "..."}}]
</output>"""
