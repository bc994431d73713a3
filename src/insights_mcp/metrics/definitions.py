"""Metric definitions, scoring weights, and detection thresholds."""

from dataclasses import dataclass

from insights_mcp.models import MetricCategory, MetricType


@dataclass(frozen=True)
class MetricDefinition:
    type: MetricType
    label: str
    category: MetricCategory
    priority: int  # 1 = most important
    unit: str = "currency"


METRIC_DEFINITIONS: dict[MetricType, MetricDefinition] = {
    MetricType.REVENUE: MetricDefinition(MetricType.REVENUE, "Revenue", MetricCategory.FINANCIAL, 1),
    MetricType.EXPENSES: MetricDefinition(MetricType.EXPENSES, "Expenses", MetricCategory.FINANCIAL, 2),
    MetricType.NET_PROFIT: MetricDefinition(
        MetricType.NET_PROFIT, "Net Profit", MetricCategory.FINANCIAL, 1
    ),
    MetricType.PROFIT_MARGIN: MetricDefinition(
        MetricType.PROFIT_MARGIN, "Profit Margin", MetricCategory.FINANCIAL, 3, unit="percentage"
    ),
    MetricType.CASH_FLOW: MetricDefinition(MetricType.CASH_FLOW, "Cash Flow", MetricCategory.CASH, 2),
    MetricType.RUNWAY_MONTHS: MetricDefinition(
        MetricType.RUNWAY_MONTHS, "Runway", MetricCategory.CASH, 2, unit="months"
    ),
    MetricType.CASH_BALANCE: MetricDefinition(
        MetricType.CASH_BALANCE, "Cash Balance", MetricCategory.CASH, 2
    ),
    MetricType.INVOICES_SENT: MetricDefinition(
        MetricType.INVOICES_SENT, "Invoices Sent", MetricCategory.INVOICING, 3, unit="count"
    ),
    MetricType.INVOICES_PAID: MetricDefinition(
        MetricType.INVOICES_PAID, "Invoices Paid", MetricCategory.INVOICING, 3, unit="count"
    ),
    MetricType.INVOICES_OVERDUE: MetricDefinition(
        MetricType.INVOICES_OVERDUE, "Overdue Invoices", MetricCategory.INVOICING, 2, unit="count"
    ),
    MetricType.OVERDUE_AMOUNT: MetricDefinition(
        MetricType.OVERDUE_AMOUNT, "Overdue Amount", MetricCategory.INVOICING, 2
    ),
    MetricType.HOURS_TRACKED: MetricDefinition(
        MetricType.HOURS_TRACKED, "Hours Tracked", MetricCategory.TIME, 3, unit="hours"
    ),
    MetricType.UNBILLED_HOURS: MetricDefinition(
        MetricType.UNBILLED_HOURS, "Unbilled Hours", MetricCategory.TIME, 3, unit="hours"
    ),
    MetricType.NEW_CUSTOMERS: MetricDefinition(
        MetricType.NEW_CUSTOMERS, "New Customers", MetricCategory.CUSTOMERS, 3, unit="count"
    ),
    MetricType.RECEIPTS_MATCHED: MetricDefinition(
        MetricType.RECEIPTS_MATCHED, "Receipts Matched", MetricCategory.OPERATIONS, 4, unit="count"
    ),
    MetricType.TRANSACTIONS_CATEGORIZED: MetricDefinition(
        MetricType.TRANSACTIONS_CATEGORIZED,
        "Transactions Categorized",
        MetricCategory.OPERATIONS,
        4,
        unit="count",
    ),
}

CORE_FINANCIAL_METRICS: frozenset[MetricType] = frozenset(
    {MetricType.REVENUE, MetricType.NET_PROFIT, MetricType.CASH_FLOW, MetricType.EXPENSES}
)

# Metrics where an increase is bad news
EXPENSE_METRICS: frozenset[MetricType] = frozenset({MetricType.EXPENSES})

# Point-in-time values, meaningful even when zero
STATE_METRICS: tuple[MetricType, ...] = (
    MetricType.CASH_BALANCE,
    MetricType.OVERDUE_AMOUNT,
    MetricType.RUNWAY_MONTHS,
)

DEFAULT_TOP_METRICS_COUNT = 4
MAX_METRICS_PER_CATEGORY = 2

# Scoring weights
BASE_PRIORITY = 25
PRIORITY_DECREMENT = 5
MIN_PRIORITY_SCORE = 10
HAS_MEANINGFUL_DATA = 25
SIGNIFICANT_CHANGE_BONUS = 20
MODERATE_CHANGE_BONUS = 12
MINOR_CHANGE_BONUS = 6
ANOMALY_BOOST = 15
CORE_METRIC_BOOST = 10

# Anomaly thresholds (percent / months)
SIGNIFICANT_CHANGE = 20
MODERATE_CHANGE = 10
MINOR_CHANGE = 5
RUNWAY_WARNING = 6
RUNWAY_CRITICAL = 3
RUNWAY_URGENT = 2
OVERDUE_ALERT_COUNT = 5

# Expense-category thresholds (percent / absolute currency units)
LARGE_SPIKE_PERCENT = 50
LARGE_SPIKE_ABSOLUTE = 100
MODERATE_SPIKE_PERCENT = 30
MODERATE_SPIKE_ABSOLUTE = 50
NEW_CATEGORY_MAJOR = 500
NEW_CATEGORY_MINOR = 50
MAX_EXPENSE_ANOMALIES = 3


def get_metric_definition(metric_type: MetricType) -> MetricDefinition:
    return METRIC_DEFINITIONS[metric_type]


def is_core_financial_metric(metric_type: MetricType) -> bool:
    return metric_type in CORE_FINANCIAL_METRICS
