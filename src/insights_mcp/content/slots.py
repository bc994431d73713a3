"""Prompt-ready slots computed from metrics, activity, and context.

Every currency amount here goes through format_metric_value exactly once.
Downstream code copies these strings, it never reformats raw numbers.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal, Union

from insights_mcp.content.profit_change import compute_profit_change_description, round_half_up
from insights_mcp.metrics.calculator import format_metric_value
from insights_mcp.models import (
    AnomalySeverity,
    ChangeDirection,
    InsightActivity,
    InsightMetric,
    MetricType,
    PeriodType,
    SlotContext,
    Streak,
)

logger = logging.getLogger(__name__)

WeekType = Literal["great", "good", "quiet", "challenging"]
Momentum = Literal["accelerating", "steady", "decelerating"]


# ============================================================================
# Highlight (exactly one variant per period)
# ============================================================================


@dataclass(frozen=True)
class PersonalBestHighlight:
    description: str
    type: Literal["personal_best"] = "personal_best"


@dataclass(frozen=True)
class RecoveryHighlight:
    description: str
    type: Literal["recovery"] = "recovery"


@dataclass(frozen=True)
class StreakHighlight:
    description: str
    type: Literal["streak"] = "streak"


@dataclass(frozen=True)
class BigPaymentHighlight:
    customer: str
    amount: str
    type: Literal["big_payment"] = "big_payment"


@dataclass(frozen=True)
class YoyGrowthHighlight:
    description: str
    type: Literal["yoy_growth"] = "yoy_growth"


@dataclass(frozen=True)
class MilestoneHighlight:
    description: str
    type: Literal["milestone"] = "milestone"


@dataclass(frozen=True)
class ProfitMultiplierHighlight:
    multiplier: int
    type: Literal["profit_multiplier"] = "profit_multiplier"


@dataclass(frozen=True)
class VsAverageHighlight:
    description: str
    type: Literal["vs_average"] = "vs_average"


@dataclass(frozen=True)
class NoHighlight:
    type: Literal["none"] = "none"


WeekHighlight = Union[
    PersonalBestHighlight,
    RecoveryHighlight,
    StreakHighlight,
    BigPaymentHighlight,
    YoyGrowthHighlight,
    MilestoneHighlight,
    ProfitMultiplierHighlight,
    VsAverageHighlight,
    NoHighlight,
]


# ============================================================================
# Slot records
# ============================================================================


@dataclass(frozen=True)
class OverdueSlot:
    id: str
    company: str
    amount: str
    raw_amount: float
    days_overdue: int
    is_unusual: bool = False
    unusual_reason: str | None = None


@dataclass(frozen=True)
class DraftSlot:
    id: str
    company: str
    amount: str
    raw_amount: float


@dataclass(frozen=True)
class UnbilledWorkSlot:
    project_id: str
    project_name: str
    hours: float
    amount: str
    raw_amount: float
    customer_name: str | None = None


@dataclass(frozen=True)
class ExpenseSpikeSlot:
    category: str
    amount: str
    raw_amount: float
    change: int
    tip: str | None = None


@dataclass(frozen=True)
class ConcentrationWarning:
    customer_name: str
    percentage: float
    amount: str


@dataclass(frozen=True)
class AnomalySlot:
    type: str
    severity: AnomalySeverity
    message: str


@dataclass(frozen=True)
class LargestPaymentSlot:
    customer: str
    amount: str
    raw_amount: float


@dataclass(frozen=True)
class InvoicesDueSlot:
    count: int
    amount: str


@dataclass(frozen=True)
class InsightSlots:
    """Flattened, pre-formatted snapshot of one period."""

    week_type: WeekType
    highlight: WeekHighlight

    # Core financials
    profit: str
    profit_raw: float
    previous_profit_raw: float
    revenue: str
    revenue_raw: float
    expenses: str
    expenses_raw: float
    margin: str
    margin_raw: float
    runway: int
    cash_flow: str
    cash_flow_raw: float

    # Changes vs last period
    profit_change: float
    profit_direction: ChangeDirection
    profit_change_description: str
    revenue_change: float
    revenue_direction: ChangeDirection

    currency: str
    locale: str
    period_label: str
    period_type: PeriodType

    runway_exhaustion_date: str | None = None
    cash_flow_explanation: str | None = None

    historical_context: str | None = None
    is_personal_best: bool = False

    # Money on the table
    has_overdue: bool = False
    overdue_total: str = ""
    overdue_count: int = 0
    overdue: tuple[OverdueSlot, ...] = ()
    largest_overdue: OverdueSlot | None = None

    has_drafts: bool = False
    drafts_total: str = ""
    drafts_count: int = 0
    drafts: tuple[DraftSlot, ...] = ()

    unbilled_work: tuple[UnbilledWorkSlot, ...] = ()

    has_expense_spikes: bool = False
    expense_spikes: tuple[ExpenseSpikeSlot, ...] = ()

    concentration_warning: ConcentrationWarning | None = None

    anomalies: tuple[AnomalySlot, ...] = ()
    has_alerts: bool = False
    has_warnings: bool = False

    # Activity
    invoices_paid: int = 0
    invoices_sent: int = 0
    invoices_sent_change: str | None = None
    hours_tracked: float = 0.0
    unbilled_hours: float = 0.0
    billable_amount: str | None = None
    new_customers: int = 0
    largest_payment: LargestPaymentSlot | None = None

    # Context
    streak: Streak | None = None
    momentum: Momentum | None = None
    is_recovery: bool = False
    recovery_description: str | None = None
    vs_average: str | None = None

    yoy_revenue: str | None = None
    yoy_profit: str | None = None
    quarter_pace: str | None = None
    next_week_invoices_due: InvoicesDueSlot | None = None

    key_metrics: tuple[InsightMetric, ...] = ()

    is_first_insight: bool = False


# ============================================================================
# Classification
# ============================================================================


def determine_week_type(
    profit: float,
    profit_change: float,
    revenue: float,
    revenue_change: float,
    is_personal_best: bool,
) -> WeekType:
    """Classify the period. First matching rule wins."""
    if is_personal_best or (profit_change > 50 and profit > 0):
        return "great"
    if profit < 0 or revenue == 0 or revenue_change < -30:
        return "challenging"
    if revenue > 0 and abs(revenue_change) < 10 and profit >= 0:
        return "quiet"
    return "good"


def compute_highlight(
    is_personal_best: bool,
    historical_context: str | None,
    is_recovery: bool,
    recovery_description: str | None,
    streak: Streak | None,
    profit_raw: float,
    previous_profit_raw: float,
    yoy_profit: str | None,
    largest_payment: LargestPaymentSlot | None,
    vs_average: str | None,
) -> WeekHighlight:
    """Pick the single most interesting thing about the period. Priority order matters."""
    if is_personal_best and historical_context:
        return PersonalBestHighlight(description=historical_context)

    if is_recovery and recovery_description:
        return RecoveryHighlight(description=recovery_description)

    if streak and streak.count >= 3:
        return StreakHighlight(description=streak.description)

    # Loss-to-profit transitions are not multipliers
    if previous_profit_raw > 0 and profit_raw > 0:
        multiplier = profit_raw / previous_profit_raw
        if multiplier >= 3:
            return ProfitMultiplierHighlight(multiplier=round_half_up(multiplier))

    if yoy_profit and "up" in yoy_profit:
        return YoyGrowthHighlight(description=f"Profit {yoy_profit}")

    if largest_payment:
        return BigPaymentHighlight(customer=largest_payment.customer, amount=largest_payment.amount)

    if vs_average:
        return VsAverageHighlight(description=vs_average)

    return NoHighlight()


def _format_long_date(value: date) -> str:
    # "September 15, 2026"
    return f"{value:%B} {value.day}, {value.year}"


def _yoy_phrase(change_percent: float) -> str | None:
    if change_percent == 0:
        return None
    direction = "up" if change_percent > 0 else "down"
    return f"{direction} {abs(change_percent):.0f}% vs last year"


# ============================================================================
# Slot computation
# ============================================================================


def compute_slots(
    metrics: Mapping[MetricType, InsightMetric],
    activity: InsightActivity,
    currency: str,
    period_label: str,
    period_type: PeriodType,
    context: SlotContext | None = None,
    locale: str = "en-US",
    selected_metrics: Iterable[InsightMetric] = (),
) -> InsightSlots:
    """
    Compute all prompt slots for one period.

    Args:
        metrics: Every computed metric, keyed by type
        activity: Activity summary for the period
        currency: ISO 4217 code
        period_label: Free-text period label
        period_type: weekly, monthly, quarterly or yearly
        context: Optional momentum, YoY, runway, anomaly and history context
        locale: Locale for amount formatting
        selected_metrics: Metrics chosen for display, passed through for prompts

    Returns:
        InsightSlots snapshot
    """
    context = context or SlotContext()

    def money(value: float) -> str:
        return format_metric_value(value, "currency", currency, locale)

    profit_metric = metrics.get(MetricType.NET_PROFIT)
    revenue_metric = metrics.get(MetricType.REVENUE)
    expenses_metric = metrics.get(MetricType.EXPENSES)
    margin_metric = metrics.get(MetricType.PROFIT_MARGIN)
    cash_flow_metric = metrics.get(MetricType.CASH_FLOW)
    runway_metric = metrics.get(MetricType.RUNWAY_MONTHS)

    profit_raw = profit_metric.value if profit_metric else 0.0
    revenue_raw = revenue_metric.value if revenue_metric else 0.0
    expenses_raw = expenses_metric.value if expenses_metric else 0.0

    # profit = revenue - expenses must hold
    implied_expenses = revenue_raw - profit_raw
    if expenses_raw == 0 and implied_expenses > 0:
        logger.warning(
            f"Data fix: expenses derived in slots "
            f"(revenue={revenue_raw}, profit={profit_raw}, derived={implied_expenses})"
        )
        expenses_raw = implied_expenses

    implied_revenue = profit_raw + expenses_raw
    if revenue_raw == 0 and implied_revenue > 0 and profit_raw > 0:
        logger.warning(
            f"Data fix: revenue derived in slots "
            f"(profit={profit_raw}, expenses={expenses_raw}, derived={implied_revenue})"
        )
        revenue_raw = implied_revenue

    if margin_metric is not None:
        margin_raw = margin_metric.value
    else:
        margin_raw = profit_raw / revenue_raw * 100 if revenue_raw > 0 else 0.0
    cash_flow_raw = cash_flow_metric.value if cash_flow_metric else 0.0

    if context.runway_months is not None:
        runway = context.runway_months
    else:
        runway = runway_metric.value if runway_metric else 0.0

    runway_exhaustion_date = None
    if 0 < runway < 24:
        base_date = context.period_end or date.today()
        runway_exhaustion_date = _format_long_date(base_date + timedelta(days=round(runway * 30)))

    cash_flow_explanation = None
    threshold = max(abs(profit_raw) * 0.2, 500)
    if abs(cash_flow_raw - profit_raw) > threshold and profit_raw != 0:
        if cash_flow_raw > profit_raw:
            cash_flow_explanation = (
                "Cash flow exceeds profit due to collected receivables from previous periods"
            )
        else:
            cash_flow_explanation = (
                "Cash flow is lower than profit because some revenue hasn't been collected yet"
            )

    profit_change = profit_metric.change if profit_metric else 0.0
    profit_direction: ChangeDirection = profit_metric.change_direction if profit_metric else "flat"
    revenue_change = revenue_metric.change if revenue_metric else 0.0
    revenue_direction: ChangeDirection = revenue_metric.change_direction if revenue_metric else "flat"
    previous_profit_raw = profit_metric.previous_value if profit_metric else 0.0

    profit_change_description = compute_profit_change_description(
        profit_raw, previous_profit_raw, profit_change
    )

    historical_context = (profit_metric.historical_context if profit_metric else None) or (
        revenue_metric.historical_context if revenue_metric else None
    )
    is_personal_best = bool(
        historical_context and ("best" in historical_context or "ever" in historical_context)
    )

    week_type = determine_week_type(
        profit_raw, profit_change, revenue_raw, revenue_change, is_personal_best
    )

    money_on_table = activity.money_on_table
    overdue = tuple(
        OverdueSlot(
            id=inv.id,
            company=inv.customer_name,
            amount=money(inv.amount),
            raw_amount=inv.amount,
            days_overdue=inv.days_overdue,
            is_unusual=inv.is_unusual,
            unusual_reason=inv.unusual_reason,
        )
        for inv in (money_on_table.overdue_invoices if money_on_table else ())
    )
    largest_overdue = max(overdue, key=lambda inv: inv.raw_amount) if overdue else None

    drafts = tuple(
        DraftSlot(id=inv.id, company=inv.customer_name, amount=money(inv.amount), raw_amount=inv.amount)
        for inv in (money_on_table.draft_invoices if money_on_table else ())
    )

    unbilled_work = tuple(
        UnbilledWorkSlot(
            project_id=work.project_id,
            project_name=work.project_name,
            hours=work.hours,
            amount=money(work.billable_amount),
            raw_amount=work.billable_amount,
            customer_name=work.customer_name,
        )
        for work in (money_on_table.unbilled_work if money_on_table else ())
    )

    yoy_revenue = yoy_profit = None
    yoy = context.year_over_year
    if yoy and yoy.has_comparison:
        yoy_revenue = _yoy_phrase(yoy.revenue_change_percent)
        yoy_profit = _yoy_phrase(yoy.profit_change_percent)

    quarter_pace = None
    pace = context.quarter_pace
    if pace and pace.projected_revenue > 0:
        projected = money(pace.projected_revenue)
        quarter = pace.current_quarter
        if pace.has_comparison and pace.vs_last_year_percent != 0:
            relation = "ahead of" if pace.vs_last_year_percent > 0 else "behind"
            quarter_pace = (
                f"On pace for {projected} this Q{quarter}, "
                f"{abs(pace.vs_last_year_percent):.0f}% {relation} Q{quarter} last year"
            )
        else:
            quarter_pace = f"On pace for {projected} this Q{quarter}"

    expense_spikes = tuple(
        ExpenseSpikeSlot(
            category=anomaly.category_name,
            amount=money(anomaly.current_amount),
            raw_amount=anomaly.current_amount,
            change=round_half_up(anomaly.change),
            tip=anomaly.tip,
        )
        for anomaly in context.expense_anomalies
        if (anomaly.type == "category_spike" and anomaly.change >= 50) or anomaly.type == "new_category"
    )[:2]

    concentration_warning = None
    concentration = context.revenue_concentration
    if concentration and concentration.is_concentrated and concentration.top_customer:
        top = concentration.top_customer
        concentration_warning = ConcentrationWarning(
            customer_name=top.name, percentage=top.percentage, amount=money(top.revenue)
        )

    largest_payment = None
    if activity.largest_payment:
        largest_payment = LargestPaymentSlot(
            customer=activity.largest_payment.customer,
            amount=money(activity.largest_payment.amount),
            raw_amount=activity.largest_payment.amount,
        )

    activity_context = activity.context
    streak = activity_context.streak if activity_context else None
    vs_average = activity_context.comparison_description if activity_context else None
    momentum_context = context.momentum
    recovery = momentum_context.recovery if momentum_context else None
    is_recovery = bool(recovery and recovery.is_recovery)
    recovery_description = recovery.description if recovery else None

    highlight = compute_highlight(
        is_personal_best=is_personal_best,
        historical_context=historical_context,
        is_recovery=is_recovery,
        recovery_description=recovery_description,
        streak=streak,
        profit_raw=profit_raw,
        previous_profit_raw=previous_profit_raw,
        yoy_profit=yoy_profit,
        largest_payment=largest_payment,
        vs_average=vs_average,
    )

    anomalies = tuple(
        AnomalySlot(type=a.type, severity=a.severity, message=a.message) for a in context.anomalies
    )

    billable_raw = activity.billable_amount
    if billable_raw is None and unbilled_work:
        billable_raw = sum(work.raw_amount for work in unbilled_work)

    invoices_sent_metric = metrics.get(MetricType.INVOICES_SENT)

    next_week_invoices_due = None
    due = context.invoices_due_next_period or activity.upcoming_invoices
    if due and due.count > 0:
        next_week_invoices_due = InvoicesDueSlot(count=due.count, amount=money(due.total_amount))

    return InsightSlots(
        week_type=week_type,
        highlight=highlight,
        profit=money(profit_raw),
        profit_raw=profit_raw,
        previous_profit_raw=previous_profit_raw,
        revenue=money(revenue_raw),
        revenue_raw=revenue_raw,
        expenses=money(expenses_raw),
        expenses_raw=expenses_raw,
        margin=f"{margin_raw:.1f}",
        margin_raw=margin_raw,
        runway=round_half_up(runway),
        cash_flow=money(cash_flow_raw),
        cash_flow_raw=cash_flow_raw,
        profit_change=profit_change,
        profit_direction=profit_direction,
        profit_change_description=profit_change_description,
        revenue_change=revenue_change,
        revenue_direction=revenue_direction,
        currency=currency,
        locale=locale,
        period_label=period_label,
        period_type=period_type,
        runway_exhaustion_date=runway_exhaustion_date,
        cash_flow_explanation=cash_flow_explanation,
        historical_context=historical_context,
        is_personal_best=is_personal_best,
        has_overdue=bool(overdue),
        overdue_total=money(sum(inv.raw_amount for inv in overdue)),
        overdue_count=len(overdue),
        overdue=overdue,
        largest_overdue=largest_overdue,
        has_drafts=bool(drafts),
        drafts_total=money(sum(d.raw_amount for d in drafts)),
        drafts_count=len(drafts),
        drafts=drafts,
        unbilled_work=unbilled_work,
        has_expense_spikes=bool(expense_spikes),
        expense_spikes=expense_spikes,
        concentration_warning=concentration_warning,
        anomalies=anomalies,
        has_alerts=any(a.severity == "alert" for a in anomalies),
        has_warnings=any(a.severity == "warning" for a in anomalies),
        invoices_paid=activity.invoices_paid,
        invoices_sent=activity.invoices_sent,
        invoices_sent_change=invoices_sent_metric.change_description if invoices_sent_metric else None,
        hours_tracked=activity.hours_tracked,
        unbilled_hours=activity.unbilled_hours,
        billable_amount=money(billable_raw) if billable_raw else None,
        new_customers=activity.new_customers,
        largest_payment=largest_payment,
        streak=streak,
        momentum=momentum_context.momentum if momentum_context else None,
        is_recovery=is_recovery,
        recovery_description=recovery_description,
        vs_average=vs_average,
        yoy_revenue=yoy_revenue,
        yoy_profit=yoy_profit,
        quarter_pace=quarter_pace,
        next_week_invoices_due=next_week_invoices_due,
        key_metrics=tuple(selected_metrics),
        is_first_insight=context.weeks_of_history == 0,
    )


# ============================================================================
# Slot helpers shared by prompt builders
# ============================================================================


def get_notable_context(slots: InsightSlots) -> str | None:
    """Notable context to lead with (personal best, recovery, streak, vs average)."""
    if slots.is_personal_best and slots.historical_context:
        return slots.historical_context
    if slots.is_recovery and slots.recovery_description:
        return slots.recovery_description
    if slots.streak and slots.streak.count >= 3:
        return slots.streak.description
    if slots.vs_average:
        return slots.vs_average
    return None
