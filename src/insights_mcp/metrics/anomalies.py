"""Metric-level and expense-category anomaly detection."""

import re
from collections.abc import Iterable, Mapping

import pandas as pd

from insights_mcp.metrics.definitions import (
    EXPENSE_METRICS,
    LARGE_SPIKE_ABSOLUTE,
    LARGE_SPIKE_PERCENT,
    MAX_EXPENSE_ANOMALIES,
    MODERATE_SPIKE_ABSOLUTE,
    MODERATE_SPIKE_PERCENT,
    NEW_CATEGORY_MAJOR,
    NEW_CATEGORY_MINOR,
    OVERDUE_ALERT_COUNT,
    RUNWAY_CRITICAL,
    RUNWAY_URGENT,
    RUNWAY_WARNING,
    SIGNIFICANT_CHANGE,
)
from insights_mcp.models import (
    AnomalySeverity,
    CategorySpending,
    ExpenseAnomaly,
    InsightAnomaly,
    InsightMetric,
    MetricType,
)

SEVERITY_ORDER: dict[str, int] = {"alert": 0, "warning": 1, "info": 2}


def _metric_list(metrics: Mapping[MetricType, InsightMetric] | Iterable[InsightMetric]) -> list[InsightMetric]:
    if isinstance(metrics, Mapping):
        return [metrics[t] for t in MetricType if t in metrics]
    return list(metrics)


def _low_runway(metric: InsightMetric) -> InsightAnomaly:
    months = metric.value
    severity: AnomalySeverity
    if months < RUNWAY_URGENT:
        severity = "alert"
        message = (
            f"URGENT: Only {months:.1f} months of runway remaining. "
            "Prioritize collecting receivables and securing new revenue"
        )
    elif months < RUNWAY_CRITICAL:
        severity = "alert"
        message = f"Runway is {months:.1f} months. Focus on cash collection and revenue"
    else:
        severity = "warning"
        message = f"Runway is {months:.1f} months"
    return InsightAnomaly(type="low_runway", severity=severity, message=message, metric_type=metric.type)


def detect_anomalies(
    metrics: Mapping[MetricType, InsightMetric] | Iterable[InsightMetric],
) -> list[InsightAnomaly]:
    """
    Flag threshold-crossing metrics.

    Several anomalies may fire for one metric; nothing is deduplicated.
    """
    anomalies: list[InsightAnomaly] = []

    for metric in _metric_list(metrics):
        is_expense = metric.type in EXPENSE_METRICS

        if metric.change > SIGNIFICANT_CHANGE:
            anomalies.append(
                InsightAnomaly(
                    type="significant_expense_increase" if is_expense else "significant_increase",
                    severity="warning" if is_expense else "info",
                    message=f"{metric.label} increased by {abs(metric.change):.0f}%",
                    metric_type=metric.type,
                )
            )

        if metric.change < -SIGNIFICANT_CHANGE:
            anomalies.append(
                InsightAnomaly(
                    type="significant_expense_decrease" if is_expense else "significant_decrease",
                    severity="info" if is_expense else "warning",
                    message=f"{metric.label} decreased by {abs(metric.change):.0f}%",
                    metric_type=metric.type,
                )
            )

        if metric.type == MetricType.RUNWAY_MONTHS and metric.value < RUNWAY_WARNING:
            anomalies.append(_low_runway(metric))

        if metric.type == MetricType.NET_PROFIT and metric.value < 0:
            anomalies.append(
                InsightAnomaly(
                    type="negative_profit",
                    severity="warning",
                    message="Business is currently unprofitable",
                    metric_type=metric.type,
                )
            )

        if metric.type == MetricType.CASH_FLOW and metric.value < 0:
            anomalies.append(
                InsightAnomaly(
                    type="negative_cash_flow",
                    severity="warning",
                    message="Negative cash flow this period",
                    metric_type=metric.type,
                )
            )

        if metric.type == MetricType.INVOICES_OVERDUE and metric.value > 0:
            count = int(metric.value)
            anomalies.append(
                InsightAnomaly(
                    type="overdue_invoices",
                    severity="alert" if metric.value > OVERDUE_ALERT_COUNT else "warning",
                    message=f"{count} overdue invoice{'s' if count > 1 else ''} need attention",
                    metric_type=metric.type,
                )
            )

    return anomalies


# Spending here varies on billing cycles, so swings are expected
PERIODIC_EXPENSE_CATEGORIES: frozenset[str] = frozenset(
    {
        "payroll",
        "payroll_tax",
        "payroll_tax_remittances",
        "taxes",
        "tax",
        "income_tax",
        "sales_tax",
        "insurance",
        "capital_insurance",
        "health_insurance",
        "liability_insurance",
        "subscriptions",
        "memberships",
        "software",
        "saas",
        "telephone",
        "phone",
        "internet",
        "internet_and_telephone",
        "communications",
        "fees",
        "bank_fees",
        "transaction_fees",
        "payment_processing",
        "rent",
        "utilities",
        "uncategorized",
    }
)

CATEGORY_TIPS: dict[str, str] = {
    "office": "Verify office supply orders are necessary.",
    "travel": "Review travel bookings and reimbursements.",
    "meals": "Check team meal and entertainment expenses.",
    "marketing": "Review campaign spending and ROI.",
    "advertising": "Evaluate ad performance vs spend increase.",
    "equipment": "Verify equipment purchases were approved.",
    "professional": "Verify consulting or legal fees.",
    "contractors": "Check contractor invoices against agreed scope.",
}

NEW_CATEGORY_TIP = "Review this new expense category to ensure it's expected."
DEFAULT_TIP = "Review recent transactions in this category."


def get_tip_for_category(slug: str, is_new: bool) -> str:
    if is_new:
        return NEW_CATEGORY_TIP
    return CATEGORY_TIPS.get(slug, DEFAULT_TIP)


def _normalize_slug(text: str) -> str:
    return re.sub(r"[-_\s]", "_", text.lower())


def is_periodic_category(slug: str, name: str | None = None) -> bool:
    """Match a category against the periodic list by slug or name, including partial matches."""
    norm_slug = _normalize_slug(slug)
    norm_name = _normalize_slug(name) if name else ""
    if norm_slug in PERIODIC_EXPENSE_CATEGORIES:
        return True
    for periodic in PERIODIC_EXPENSE_CATEGORIES:
        if norm_slug and (periodic in norm_slug or norm_slug in periodic):
            return True
        if norm_name and (periodic in norm_name or norm_name in periodic):
            return True
    return False


def _spending_frame(spending: Iterable[CategorySpending]) -> pd.DataFrame:
    frame = pd.DataFrame(
        [{"slug": s.slug, "name": s.name, "amount": s.amount} for s in spending],
        columns=["slug", "name", "amount"],
    )
    # One row per slug
    return frame.groupby("slug", sort=False, as_index=False).agg({"name": "first", "amount": "sum"})


def detect_expense_anomalies(
    current_spending: Iterable[CategorySpending],
    previous_spending: Iterable[CategorySpending],
    currency: str,
) -> list[ExpenseAnomaly]:
    """
    Detect notable changes in per-category spending.

    Rules:
    - Large spike: >= 50% and >= 100 absolute increase (warning)
    - Moderate spike: >= 30% and >= 50 absolute increase (info)
    - New category: >= 500 (warning), >= 50 (info)
    - Decrease: <= -50% and >= 100 absolute (info)
    - Periodic categories (payroll, insurance, rent, ...) are skipped

    Args:
        current_spending: Spending per category this period
        previous_spending: Spending per category last period
        currency: ISO 4217 code carried on each anomaly

    Returns:
        At most 3 anomalies, most severe and largest absolute change first
    """
    current = _spending_frame(current_spending)
    previous = _spending_frame(previous_spending).rename(
        columns={"name": "previous_name", "amount": "previous_amount"}
    )
    if current.empty:
        return []

    joined = current.merge(previous, on="slug", how="left", indicator="source")

    anomalies: list[ExpenseAnomaly] = []
    for row in joined.itertuples(index=False):
        slug = str(row.slug)
        name = str(row.name)
        amount = float(row.amount)
        if is_periodic_category(slug, name):
            continue

        if row.source == "left_only":
            severity: AnomalySeverity | None = None
            if amount >= NEW_CATEGORY_MAJOR:
                severity = "warning"
            elif amount >= NEW_CATEGORY_MINOR:
                severity = "info"
            if severity:
                anomalies.append(
                    ExpenseAnomaly(
                        type="new_category",
                        severity=severity,
                        category_name=name,
                        category_slug=slug,
                        current_amount=amount,
                        previous_amount=0.0,
                        change=100.0,
                        currency=currency,
                        message=f"New expense category: {name}",
                        tip=get_tip_for_category(slug, is_new=True),
                    )
                )
            continue

        previous_amount = float(row.previous_amount)
        absolute_change = amount - previous_amount
        if previous_amount > 0:
            percent_change = absolute_change / previous_amount * 100
        else:
            percent_change = 100.0 if amount > 0 else 0.0
        rounded = float(round(percent_change))

        if percent_change >= LARGE_SPIKE_PERCENT and absolute_change >= LARGE_SPIKE_ABSOLUTE:
            spike_severity: AnomalySeverity = "warning"
        elif percent_change >= MODERATE_SPIKE_PERCENT and absolute_change >= MODERATE_SPIKE_ABSOLUTE:
            spike_severity = "info"
        elif percent_change <= -LARGE_SPIKE_PERCENT and abs(absolute_change) >= LARGE_SPIKE_ABSOLUTE:
            anomalies.append(
                ExpenseAnomaly(
                    type="category_decrease",
                    severity="info",
                    category_name=name,
                    category_slug=slug,
                    current_amount=amount,
                    previous_amount=previous_amount,
                    change=rounded,
                    currency=currency,
                    message=f"{name} decreased {abs(rounded):.0f}%",
                )
            )
            continue
        else:
            continue

        anomalies.append(
            ExpenseAnomaly(
                type="category_spike",
                severity=spike_severity,
                category_name=name,
                category_slug=slug,
                current_amount=amount,
                previous_amount=previous_amount,
                change=rounded,
                currency=currency,
                message=f"{name} increased {rounded:.0f}%",
                tip=get_tip_for_category(slug, is_new=False),
            )
        )

    anomalies.sort(
        key=lambda a: (SEVERITY_ORDER[a.severity], -abs(a.current_amount - a.previous_amount))
    )
    return anomalies[:MAX_EXPENSE_ANOMALIES]
