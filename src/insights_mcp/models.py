"""Data model for period insights.

Inputs (MetricData, InsightActivity) arrive from the database collaborator;
outputs (InsightContent) leave for persistence. Everything in between is
created per request and discarded.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Literal

ChangeDirection = Literal["up", "down", "flat"]
AnomalySeverity = Literal["info", "warning", "alert"]
PeriodType = Literal["weekly", "monthly", "quarterly", "yearly"]

PERIOD_TYPES: tuple[str, ...] = ("weekly", "monthly", "quarterly", "yearly")


class MetricType(str, Enum):
    """Closed set of metrics. Declaration order is the tie-break order."""

    REVENUE = "revenue"
    EXPENSES = "expenses"
    NET_PROFIT = "net_profit"
    PROFIT_MARGIN = "profit_margin"
    CASH_FLOW = "cash_flow"
    RUNWAY_MONTHS = "runway_months"
    CASH_BALANCE = "cash_balance"
    INVOICES_SENT = "invoices_sent"
    INVOICES_PAID = "invoices_paid"
    INVOICES_OVERDUE = "invoices_overdue"
    OVERDUE_AMOUNT = "overdue_amount"
    HOURS_TRACKED = "hours_tracked"
    UNBILLED_HOURS = "unbilled_hours"
    NEW_CUSTOMERS = "new_customers"
    RECEIPTS_MATCHED = "receipts_matched"
    TRANSACTIONS_CATEGORIZED = "transactions_categorized"


class MetricCategory(str, Enum):
    FINANCIAL = "financial"
    CASH = "cash"
    INVOICING = "invoicing"
    TIME = "time"
    CUSTOMERS = "customers"
    OPERATIONS = "operations"


@dataclass(frozen=True)
class InsightMetric:
    """One metric for one period comparison."""

    type: MetricType
    label: str
    value: float
    previous_value: float
    change: float
    change_direction: ChangeDirection
    unit: str | None = None
    currency: str | None = None
    historical_context: str | None = None
    # Activity metrics only: "no new invoices this week", "+2", "-50%"
    change_description: str | None = None


@dataclass(frozen=True)
class InsightAnomaly:
    type: str
    severity: AnomalySeverity
    message: str
    metric_type: MetricType | None = None


@dataclass(frozen=True)
class ExpenseAnomaly:
    type: Literal["category_spike", "new_category", "category_decrease"]
    severity: AnomalySeverity
    category_name: str
    category_slug: str
    current_amount: float
    previous_amount: float
    change: float
    currency: str
    message: str
    tip: str | None = None


@dataclass(frozen=True)
class CategorySpending:
    name: str
    slug: str
    amount: float


@dataclass(frozen=True)
class MetricData:
    """Aggregated financial values for one period."""

    revenue: float = 0.0
    expenses: float = 0.0
    net_profit: float = 0.0
    cash_flow: float = 0.0
    profit_margin: float = 0.0
    runway_months: float = 0.0
    cash_balance: float | None = None
    category_spending: tuple[CategorySpending, ...] = ()


@dataclass(frozen=True)
class OverdueInvoice:
    id: str
    customer_name: str
    amount: float
    days_overdue: int
    is_unusual: bool = False
    unusual_reason: str | None = None


@dataclass(frozen=True)
class DraftInvoice:
    id: str
    customer_name: str
    amount: float


@dataclass(frozen=True)
class UnbilledWork:
    project_id: str
    project_name: str
    hours: float
    billable_amount: float
    customer_name: str | None = None


@dataclass(frozen=True)
class MoneyOnTable:
    overdue_invoices: tuple[OverdueInvoice, ...] = ()
    draft_invoices: tuple[DraftInvoice, ...] = ()
    unbilled_work: tuple[UnbilledWork, ...] = ()

    @property
    def total_amount(self) -> float:
        return (
            sum(inv.amount for inv in self.overdue_invoices)
            + sum(inv.amount for inv in self.draft_invoices)
            + sum(work.billable_amount for work in self.unbilled_work)
        )


@dataclass(frozen=True)
class Streak:
    type: str
    count: int
    description: str


@dataclass(frozen=True)
class ActivityContext:
    streak: Streak | None = None
    comparison_description: str | None = None


@dataclass(frozen=True)
class LargestPayment:
    customer: str
    amount: float


@dataclass(frozen=True)
class UpcomingInvoices:
    count: int
    total_amount: float


@dataclass(frozen=True)
class InsightActivity:
    invoices_sent: int = 0
    invoices_paid: int = 0
    invoices_overdue: int = 0
    overdue_amount: float = 0.0
    hours_tracked: float = 0.0
    unbilled_hours: float = 0.0
    billable_amount: float | None = None
    largest_payment: LargestPayment | None = None
    new_customers: int = 0
    receipts_matched: int = 0
    transactions_categorized: int = 0
    money_on_table: MoneyOnTable | None = None
    context: ActivityContext | None = None
    upcoming_invoices: UpcomingInvoices | None = None


@dataclass(frozen=True)
class Recovery:
    is_recovery: bool
    description: str | None = None


@dataclass(frozen=True)
class MomentumContext:
    momentum: Literal["accelerating", "steady", "decelerating"] | None = None
    recovery: Recovery | None = None


@dataclass(frozen=True)
class YearOverYear:
    has_comparison: bool
    revenue_change_percent: float = 0.0
    profit_change_percent: float = 0.0


@dataclass(frozen=True)
class QuarterPace:
    current_quarter: int
    projected_revenue: float
    has_comparison: bool = False
    vs_last_year_percent: float = 0.0


@dataclass(frozen=True)
class TopCustomer:
    name: str
    revenue: float
    percentage: float


@dataclass(frozen=True)
class RevenueConcentration:
    is_concentrated: bool
    top_customer: TopCustomer | None = None


@dataclass(frozen=True)
class SlotContext:
    """Optional enrichment passed to slot computation."""

    momentum: MomentumContext | None = None
    year_over_year: YearOverYear | None = None
    quarter_pace: QuarterPace | None = None
    runway_months: float | None = None
    period_end: date | None = None
    weeks_of_history: int = 0
    expense_anomalies: tuple[ExpenseAnomaly, ...] = ()
    revenue_concentration: RevenueConcentration | None = None
    anomalies: tuple[InsightAnomaly, ...] = ()
    invoices_due_next_period: UpcomingInvoices | None = None


@dataclass(frozen=True)
class InsightAction:
    text: str
    type: str | None = None
    entity_type: str | None = None
    entity_id: str | None = None


@dataclass(frozen=True)
class InsightContent:
    title: str
    summary: str
    story: str
    actions: tuple[InsightAction, ...]
    audio_script: str
    is_fallback: bool = False


# ============================================================================
# Payload parsing (JSON documents from the MCP surface)
# ============================================================================


def _opt(data: dict[str, Any] | None, key: str, default: Any = None) -> Any:
    if not data:
        return default
    value = data.get(key)
    return default if value is None else value


def metric_data_from_dict(data: dict[str, Any] | None) -> MetricData:
    data = data or {}
    spending = tuple(
        CategorySpending(
            name=str(item.get("name", item.get("slug", ""))),
            slug=str(item.get("slug", "")),
            amount=float(item.get("amount", 0) or 0),
        )
        for item in data.get("category_spending", []) or []
    )
    cash_balance = data.get("cash_balance")
    return MetricData(
        revenue=float(_opt(data, "revenue", 0)),
        expenses=float(_opt(data, "expenses", 0)),
        net_profit=float(_opt(data, "net_profit", 0)),
        cash_flow=float(_opt(data, "cash_flow", 0)),
        profit_margin=float(_opt(data, "profit_margin", 0)),
        runway_months=float(_opt(data, "runway_months", 0)),
        cash_balance=float(cash_balance) if cash_balance is not None else None,
        category_spending=spending,
    )


def activity_from_dict(data: dict[str, Any] | None) -> InsightActivity:
    data = data or {}

    largest = data.get("largest_payment")
    largest_payment = (
        LargestPayment(customer=str(largest["customer"]), amount=float(largest["amount"]))
        if largest
        else None
    )

    mot = data.get("money_on_table")
    money_on_table = None
    if mot:
        money_on_table = MoneyOnTable(
            overdue_invoices=tuple(
                OverdueInvoice(
                    id=str(inv["id"]),
                    customer_name=str(inv.get("customer_name", "Unknown")),
                    amount=float(inv.get("amount", 0)),
                    days_overdue=int(inv.get("days_overdue", 0)),
                    is_unusual=bool(inv.get("is_unusual", False)),
                    unusual_reason=inv.get("unusual_reason"),
                )
                for inv in mot.get("overdue_invoices", []) or []
            ),
            draft_invoices=tuple(
                DraftInvoice(
                    id=str(inv["id"]),
                    customer_name=str(inv.get("customer_name", "Unknown")),
                    amount=float(inv.get("amount", 0)),
                )
                for inv in mot.get("draft_invoices", []) or []
            ),
            unbilled_work=tuple(
                UnbilledWork(
                    project_id=str(work["project_id"]),
                    project_name=str(work.get("project_name", "")),
                    hours=float(work.get("hours", 0)),
                    billable_amount=float(work.get("billable_amount", 0)),
                    customer_name=work.get("customer_name"),
                )
                for work in mot.get("unbilled_work", []) or []
            ),
        )

    ctx = data.get("context")
    context = None
    if ctx:
        streak = ctx.get("streak")
        comparison = ctx.get("comparison") or {}
        context = ActivityContext(
            streak=Streak(
                type=str(streak.get("type", "")),
                count=int(streak.get("count", 0)),
                description=str(streak.get("description", "")),
            )
            if streak
            else None,
            comparison_description=comparison.get("description"),
        )

    upcoming = data.get("upcoming_invoices")
    upcoming_invoices = (
        UpcomingInvoices(
            count=int(upcoming.get("count", 0)),
            total_amount=float(upcoming.get("total_amount", 0)),
        )
        if upcoming
        else None
    )

    billable = data.get("billable_amount")
    return InsightActivity(
        invoices_sent=int(_opt(data, "invoices_sent", 0)),
        invoices_paid=int(_opt(data, "invoices_paid", 0)),
        invoices_overdue=int(_opt(data, "invoices_overdue", 0)),
        overdue_amount=float(_opt(data, "overdue_amount", 0)),
        hours_tracked=float(_opt(data, "hours_tracked", 0)),
        unbilled_hours=float(_opt(data, "unbilled_hours", 0)),
        billable_amount=float(billable) if billable is not None else None,
        largest_payment=largest_payment,
        new_customers=int(_opt(data, "new_customers", 0)),
        receipts_matched=int(_opt(data, "receipts_matched", 0)),
        transactions_categorized=int(_opt(data, "transactions_categorized", 0)),
        money_on_table=money_on_table,
        context=context,
        upcoming_invoices=upcoming_invoices,
    )


def slot_context_from_dict(data: dict[str, Any] | None) -> SlotContext:
    data = data or {}

    momentum = None
    if mom := data.get("momentum"):
        recovery = mom.get("recovery")
        momentum = MomentumContext(
            momentum=mom.get("momentum"),
            recovery=Recovery(
                is_recovery=bool(recovery.get("is_recovery", False)),
                description=recovery.get("description"),
            )
            if recovery
            else None,
        )

    yoy = None
    if raw_yoy := data.get("year_over_year"):
        yoy = YearOverYear(
            has_comparison=bool(raw_yoy.get("has_comparison", False)),
            revenue_change_percent=float(raw_yoy.get("revenue_change_percent", 0)),
            profit_change_percent=float(raw_yoy.get("profit_change_percent", 0)),
        )

    pace = None
    if raw_pace := data.get("quarter_pace"):
        pace = QuarterPace(
            current_quarter=int(raw_pace["current_quarter"]),
            projected_revenue=float(raw_pace.get("projected_revenue", 0)),
            has_comparison=bool(raw_pace.get("has_comparison", False)),
            vs_last_year_percent=float(raw_pace.get("vs_last_year_percent", 0)),
        )

    concentration = None
    if raw_conc := data.get("revenue_concentration"):
        top = raw_conc.get("top_customer")
        concentration = RevenueConcentration(
            is_concentrated=bool(raw_conc.get("is_concentrated", False)),
            top_customer=TopCustomer(
                name=str(top["name"]),
                revenue=float(top.get("revenue", 0)),
                percentage=float(top.get("percentage", 0)),
            )
            if top
            else None,
        )

    due = None
    if raw_due := data.get("invoices_due_next_period"):
        due = UpcomingInvoices(
            count=int(raw_due.get("count", 0)),
            total_amount=float(raw_due.get("total_amount", 0)),
        )

    period_end = data.get("period_end")
    runway = data.get("runway_months")
    return SlotContext(
        momentum=momentum,
        year_over_year=yoy,
        quarter_pace=pace,
        runway_months=float(runway) if runway is not None else None,
        period_end=date.fromisoformat(period_end) if period_end else None,
        weeks_of_history=int(data.get("weeks_of_history", 0) or 0),
        revenue_concentration=concentration,
        invoices_due_next_period=due,
    )


@dataclass(frozen=True)
class InsightGenerationResult:
    """Everything computed for one (team, period) request."""

    selected_metrics: tuple[InsightMetric, ...]
    all_metrics: dict[MetricType, InsightMetric]
    anomalies: tuple[InsightAnomaly, ...]
    expense_anomalies: tuple[ExpenseAnomaly, ...]
    activity: InsightActivity
    content: InsightContent
    extras: dict[str, Any] = field(default_factory=dict)
