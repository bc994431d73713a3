"""Canonical facts shared by every prompt builder.

Facts are derived once from slots. Builders read facts (and the
pre-formatted slot strings they came from) and never recompute profit,
revenue, or runway status from raw numbers.
"""

from dataclasses import dataclass
from typing import Literal, Union

from insights_mcp.content.profit_change import round_half_up
from insights_mcp.content.slots import (
    DraftSlot,
    InsightSlots,
    LargestPaymentSlot,
    OverdueSlot,
    WeekType,
)
from insights_mcp.errors import InsightsLogicError
from insights_mcp.utils.speech import format_number_for_speech, get_currency_word

Mood = Literal["celebratory", "positive", "neutral", "supportive"]


@dataclass(frozen=True)
class ProfitStatusProfit:
    amount: str
    raw_amount: float
    type: Literal["profit"] = "profit"


@dataclass(frozen=True)
class ProfitStatusLoss:
    # Magnitude, no sign
    amount: str
    raw_amount: float
    type: Literal["loss"] = "loss"


@dataclass(frozen=True)
class ProfitStatusBreakEven:
    type: Literal["break-even"] = "break-even"


@dataclass(frozen=True)
class ProfitStatusNoActivity:
    type: Literal["no-activity"] = "no-activity"


ProfitStatus = Union[ProfitStatusProfit, ProfitStatusLoss, ProfitStatusBreakEven, ProfitStatusNoActivity]


@dataclass(frozen=True)
class RevenueStatusRevenue:
    amount: str
    raw_amount: float
    type: Literal["revenue"] = "revenue"


@dataclass(frozen=True)
class RevenueStatusNone:
    type: Literal["no-revenue"] = "no-revenue"


RevenueStatus = Union[RevenueStatusRevenue, RevenueStatusNone]


@dataclass(frozen=True)
class RunwayStatus:
    months: int
    exhaustion_date: str | None
    is_critical: bool  # < 2 months
    is_low: bool  # < 3 months


@dataclass(frozen=True)
class OverdueStatus:
    has_overdue: bool
    count: int
    total: str
    total_raw: float
    largest: OverdueSlot | None
    invoices: tuple[OverdueSlot, ...]


@dataclass(frozen=True)
class DraftStatus:
    has_drafts: bool
    count: int
    total: str
    total_raw: float
    drafts: tuple[DraftSlot, ...]


@dataclass(frozen=True)
class StreakFact:
    count: int
    description: str


@dataclass(frozen=True)
class InsightFacts:
    """Single source of truth for every generated fragment."""

    period_label: str
    currency: str
    currency_word: str

    week_type: WeekType
    mood: Mood

    profit_status: ProfitStatus
    revenue_status: RevenueStatus
    expenses_amount: str | None
    expenses_raw: float
    margin_percent: float | None

    runway: RunwayStatus

    profit_change: str | None
    revenue_change: str | None

    overdue: OverdueStatus
    drafts: DraftStatus

    historical_context: str | None
    is_personal_best: bool
    is_recovery: bool
    recovery_description: str | None
    streak: StreakFact | None

    yoy_revenue: str | None
    yoy_profit: str | None
    quarter_pace: str | None

    largest_payment: LargestPaymentSlot | None

    has_alerts: bool
    has_warnings: bool
    alerts: tuple[str, ...]
    warnings: tuple[str, ...]

    is_first_insight: bool


def compute_mood(slots: InsightSlots) -> Mood:
    # Challenging always wins
    if slots.week_type == "challenging":
        return "supportive"
    if slots.is_personal_best or slots.week_type == "great":
        return "celebratory"
    if slots.is_recovery or (slots.profit_change > 20 and slots.profit_raw > 0) or slots.week_type == "good":
        return "positive"
    if slots.week_type == "quiet":
        return "supportive"
    return "neutral"


def _profit_status(slots: InsightSlots) -> ProfitStatus:
    if slots.revenue_raw == 0 and slots.expenses_raw == 0:
        return ProfitStatusNoActivity()
    if slots.profit_raw == 0:
        return ProfitStatusBreakEven()
    if slots.profit_raw > 0:
        return ProfitStatusProfit(amount=slots.profit, raw_amount=slots.profit_raw)
    return ProfitStatusLoss(amount=slots.profit.replace("-", "", 1), raw_amount=abs(slots.profit_raw))


def extract_facts(slots: InsightSlots) -> InsightFacts:
    """
    Extract canonical facts from slots.

    Pure and idempotent: identical slots always produce equal facts.
    """
    revenue_status: RevenueStatus = (
        RevenueStatusRevenue(amount=slots.revenue, raw_amount=slots.revenue_raw)
        if slots.revenue_raw > 0
        else RevenueStatusNone()
    )

    runway = RunwayStatus(
        months=slots.runway,
        exhaustion_date=slots.runway_exhaustion_date,
        is_critical=slots.runway < 2,
        is_low=slots.runway < 3,
    )

    overdue = OverdueStatus(
        has_overdue=slots.has_overdue,
        count=slots.overdue_count,
        total=slots.overdue_total,
        total_raw=sum(inv.raw_amount for inv in slots.overdue),
        largest=slots.largest_overdue,
        invoices=slots.overdue,
    )

    drafts = DraftStatus(
        has_drafts=slots.has_drafts,
        count=slots.drafts_count,
        total=slots.drafts_total,
        total_raw=sum(d.raw_amount for d in slots.drafts),
        drafts=slots.drafts,
    )

    profit_change = None
    if abs(slots.profit_change) >= 5 and slots.profit_change_description != "flat vs last week":
        profit_change = slots.profit_change_description

    revenue_change = None
    if slots.revenue_raw == 0:
        revenue_change = "no revenue this week"
    elif abs(slots.revenue_change) >= 15:
        direction = "up" if slots.revenue_change > 0 else "down"
        revenue_change = f"{direction} {round_half_up(abs(slots.revenue_change))}%"

    return InsightFacts(
        period_label=slots.period_label,
        currency=slots.currency,
        currency_word=get_currency_word(slots.currency),
        week_type=slots.week_type,
        mood=compute_mood(slots),
        profit_status=_profit_status(slots),
        revenue_status=revenue_status,
        expenses_amount=slots.expenses if slots.expenses_raw > 0 else None,
        expenses_raw=slots.expenses_raw,
        margin_percent=slots.margin_raw if slots.revenue_raw > 0 else None,
        runway=runway,
        profit_change=profit_change,
        revenue_change=revenue_change,
        overdue=overdue,
        drafts=drafts,
        historical_context=slots.historical_context or None,
        is_personal_best=slots.is_personal_best,
        is_recovery=slots.is_recovery,
        recovery_description=slots.recovery_description or None,
        streak=StreakFact(count=slots.streak.count, description=slots.streak.description)
        if slots.streak
        else None,
        yoy_revenue=slots.yoy_revenue,
        yoy_profit=slots.yoy_profit,
        quarter_pace=slots.quarter_pace,
        largest_payment=slots.largest_payment,
        has_alerts=slots.has_alerts,
        has_warnings=slots.has_warnings,
        alerts=tuple(a.message for a in slots.anomalies if a.severity == "alert"),
        warnings=tuple(a.message for a in slots.anomalies if a.severity == "warning"),
        is_first_insight=slots.is_first_insight,
    )


GROWTH_WORDS: tuple[str, ...] = ("up ", "doubled", "grew", "returned to profit")


def validate_fact_invariants(slots: InsightSlots, facts: InsightFacts) -> None:
    """
    Check the facts layer's contract.

    Raises:
        InsightsLogicError: If an invariant is violated
    """
    if facts.week_type == "challenging" and facts.mood != "supportive":
        raise InsightsLogicError(f"Challenging week with mood '{facts.mood}'")

    status = facts.profit_status
    if isinstance(status, ProfitStatusProfit) and not slots.profit_raw > 0:
        raise InsightsLogicError(f"Profit status for non-positive profit {slots.profit_raw}")
    if isinstance(status, ProfitStatusLoss) and not slots.profit_raw < 0:
        raise InsightsLogicError(f"Loss status for non-negative profit {slots.profit_raw}")
    if isinstance(status, ProfitStatusBreakEven) and slots.profit_raw != 0:
        raise InsightsLogicError(f"Break-even status for profit {slots.profit_raw}")
    if isinstance(status, ProfitStatusNoActivity) and (slots.revenue_raw != 0 or slots.expenses_raw != 0):
        raise InsightsLogicError("No-activity status with revenue or expenses present")

    if isinstance(status, ProfitStatusLoss) and facts.profit_change:
        if any(word in facts.profit_change for word in GROWTH_WORDS):
            raise InsightsLogicError(f"Loss paired with growth phrase '{facts.profit_change}'")


# ============================================================================
# Shared helpers for prompt builders
# ============================================================================

BANNED_WORDS: tuple[str, ...] = (
    "solid",
    "healthy",
    "strong",
    "great",
    "robust",
    "excellent",
    "remarkable",
    "impressive",
    "amazing",
    "outstanding",
    "significant",
)

# Reassuring language is forbidden when runway is short
CRITICAL_RUNWAY_BANNED_WORDS: tuple[str, ...] = (
    "reassuring",
    "comfortable",
    "steady",
    "stable",
    "flexibility",
    "buffer",
    "cushion",
    "gives you time",
    "no rush",
)


def banned_words_for(facts: InsightFacts) -> tuple[str, ...]:
    if facts.runway.is_low:
        return BANNED_WORDS + CRITICAL_RUNWAY_BANNED_WORDS
    return BANNED_WORDS


def get_headline_fact(facts: InsightFacts) -> str:
    """The fact every fragment leads with."""
    if facts.is_personal_best and facts.historical_context:
        return facts.historical_context
    if facts.is_recovery and facts.recovery_description:
        return facts.recovery_description
    if facts.streak and facts.streak.count >= 3:
        return facts.streak.description

    status = facts.profit_status
    if isinstance(status, ProfitStatusNoActivity):
        return "No financial activity this week"
    if isinstance(status, ProfitStatusBreakEven):
        return "Break-even this week"
    if isinstance(status, ProfitStatusLoss):
        return f"{status.amount} loss this week"
    if isinstance(status, ProfitStatusProfit):
        return f"{status.amount} profit this week"
    return facts.period_label


@dataclass(frozen=True)
class FactAction:
    description: str
    amount: str
    company: str | None = None


def get_primary_action(facts: InsightFacts) -> FactAction | None:
    if facts.overdue.has_overdue and facts.overdue.largest:
        largest = facts.overdue.largest
        return FactAction(
            description=f"Collect {largest.amount} overdue from {largest.company}",
            amount=largest.amount,
            company=largest.company,
        )
    if facts.drafts.has_drafts and facts.drafts.drafts:
        top = max(facts.drafts.drafts, key=lambda d: d.raw_amount)
        return FactAction(
            description=f"Send the {top.amount} draft to {top.company}",
            amount=top.amount,
            company=top.company,
        )
    return None


MOOD_GUIDANCE: dict[str, str] = {
    "celebratory": "Sound confident and pleased, but understated. Let the numbers speak for themselves.",
    "positive": "Sound calm and assured. Acknowledge progress without overstating.",
    "supportive": "Sound steady and pragmatic. Focus on actionable next steps.",
    "neutral": "Sound clear and informative.",
}


def get_tone_guidance_from_facts(facts: InsightFacts) -> str:
    return MOOD_GUIDANCE[facts.mood]


def get_profit_description(facts: InsightFacts) -> str:
    status = facts.profit_status
    if isinstance(status, ProfitStatusProfit):
        return f"{status.amount} profit"
    if isinstance(status, ProfitStatusLoss):
        return f"{status.amount} loss"
    if isinstance(status, ProfitStatusBreakEven):
        return "break-even (no profit or loss)"
    return "no financial activity"


def get_profit_description_spoken(facts: InsightFacts) -> str:
    status = facts.profit_status
    if isinstance(status, ProfitStatusProfit):
        return f"{format_number_for_speech(status.raw_amount)} {facts.currency_word} profit"
    if isinstance(status, ProfitStatusLoss):
        return f"{format_number_for_speech(status.raw_amount)} {facts.currency_word} loss"
    if isinstance(status, ProfitStatusBreakEven):
        return "break-even, no profit or loss"
    return "no financial activity"


def get_revenue_description(facts: InsightFacts) -> str:
    status = facts.revenue_status
    if isinstance(status, RevenueStatusRevenue):
        return f"{status.amount} revenue"
    return "no revenue"


def get_revenue_description_spoken(facts: InsightFacts) -> str:
    status = facts.revenue_status
    if isinstance(status, RevenueStatusRevenue):
        return f"{format_number_for_speech(status.raw_amount)} {facts.currency_word} in revenue"
    return "no revenue"


def get_runway_description(facts: InsightFacts) -> str:
    months = facts.runway.months
    date = facts.runway.exhaustion_date
    if facts.runway.is_critical and date:
        return f"only {months} month{'' if months == 1 else 's'} of runway until {date}"
    if date:
        return f"{months} months of runway (until {date})"
    return f"{months} months of runway"
