"""Deterministic content used when text generation fails."""

from insights_mcp.models import InsightAction, InsightActivity, InsightContent, PeriodType


def get_fallback_content(
    period_label: str,
    period_type: PeriodType,
    activity: InsightActivity | None = None,
) -> InsightContent:
    """
    Build generic content that needs no text generation.

    Money on the table is still surfaced so the owner is pointed at it.

    Args:
        period_label: Label of the period
        period_type: weekly, monthly, quarterly or yearly
        activity: Optional activity, used only for money on the table

    Returns:
        InsightContent with is_fallback set
    """
    money_on_table = activity.money_on_table if activity else None

    if money_on_table and money_on_table.total_amount > 0:
        top_overdue = (
            max(money_on_table.overdue_invoices, key=lambda inv: inv.amount)
            if money_on_table.overdue_invoices
            else None
        )

        if top_overdue:
            title = f"{top_overdue.customer_name} owes you - check your summary."
            summary = (
                f"You have outstanding invoices to follow up on. {top_overdue.customer_name} "
                f"owes you - check your {period_label} summary for details."
            )
            actions = (InsightAction(text="Review overdue invoices", type="overdue"),)
        else:
            title = f"{period_label} summary ready."
            summary = f"{period_label} summary is ready. Check the dashboard for your detailed metrics."
            actions = (InsightAction(text="Review your dashboard"),)

        story = (
            f"Your {period_type} numbers are ready for review. Check the dashboard for "
            "detailed metrics and any items needing attention."
        )
        return InsightContent(
            title=title,
            summary=summary,
            story=story,
            actions=actions,
            audio_script=f"{title} {summary}",
            is_fallback=True,
        )

    title = f"{period_label} summary ready."
    summary = (
        f"Your {period_label} summary is ready. Check the dashboard for detailed numbers "
        "and any items needing attention."
    )
    return InsightContent(
        title=title,
        summary=summary,
        story="Check your dashboard for the detailed numbers and any items needing attention.",
        actions=(),
        audio_script=f"{title} {summary}",
        is_fallback=True,
    )
