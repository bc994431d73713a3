"""Tests for metric scoring and selection."""

from collections import Counter

import pytest

from insights_mcp.metrics.calculator import add_activity_metrics, calculate_all_metrics, create_metric
from insights_mcp.metrics.definitions import (
    MAX_METRICS_PER_CATEGORY,
    get_metric_definition,
    is_core_financial_metric,
)
from insights_mcp.metrics.selector import score_metric, select_top_metrics
from insights_mcp.models import InsightActivity, InsightMetric, MetricData, MetricType


@pytest.fixture
def busy_week_metrics() -> dict[MetricType, InsightMetric]:
    """Every metric populated with noticeable changes."""
    current = MetricData(
        revenue=50000,
        expenses=30000,
        net_profit=20000,
        cash_flow=-5000,
        profit_margin=40,
        runway_months=4,
        cash_balance=120000,
    )
    previous = MetricData(
        revenue=30000,
        expenses=10000,
        net_profit=20000,
        cash_flow=8000,
        profit_margin=66,
        runway_months=6,
        cash_balance=100000,
    )
    activity = InsightActivity(
        invoices_sent=10,
        invoices_paid=7,
        invoices_overdue=3,
        overdue_amount=15000,
        hours_tracked=40,
        unbilled_hours=12,
        new_customers=2,
        receipts_matched=30,
        transactions_categorized=80,
    )
    previous_activity = InsightActivity(invoices_sent=4, invoices_paid=2, hours_tracked=20, receipts_matched=5)
    metrics = calculate_all_metrics(current, previous, "USD")
    return add_activity_metrics(metrics, activity, previous_activity, "USD")


def _categories(metrics: list[InsightMetric]) -> Counter:
    return Counter(get_metric_definition(m.type).category for m in metrics)


class TestSelectTopMetrics:
    """Tests for select_top_metrics."""

    @pytest.mark.parametrize("count", [1, 2, 4, 6, 10])
    def test_selection_bounds(self, busy_week_metrics: dict[MetricType, InsightMetric], count: int) -> None:
        """Test length, per-category limit and core metric presence."""
        selected = select_top_metrics(busy_week_metrics, count=count)

        assert len(selected) <= count
        assert max(_categories(selected).values()) <= MAX_METRICS_PER_CATEGORY
        assert any(is_core_financial_metric(m.type) for m in selected)
        assert len({m.type for m in selected}) == len(selected)

    def test_bookkeeping_and_overdue_count_excluded(
        self, busy_week_metrics: dict[MetricType, InsightMetric]
    ) -> None:
        """Test operations metrics and overdue counts are never selected."""
        selected = {m.type for m in select_top_metrics(busy_week_metrics, count=16)}
        assert MetricType.RECEIPTS_MATCHED not in selected
        assert MetricType.TRANSACTIONS_CATEGORIZED not in selected
        assert MetricType.INVOICES_OVERDUE not in selected

    def test_zero_count(self, busy_week_metrics: dict[MetricType, InsightMetric]) -> None:
        """Test a non-positive count selects nothing."""
        assert select_top_metrics(busy_week_metrics, count=0) == []

    def test_deterministic(self, busy_week_metrics: dict[MetricType, InsightMetric]) -> None:
        """Test mapping insertion order does not change the result."""
        reordered = dict(reversed(list(busy_week_metrics.items())))
        assert [m.type for m in select_top_metrics(reordered)] == [
            m.type for m in select_top_metrics(busy_week_metrics)
        ]

    def test_core_metric_forced_in(self) -> None:
        """Test a core metric is inserted even when others outscore it."""
        metrics = [
            create_metric(MetricType.RUNWAY_MONTHS, 1, 5, "USD"),
            create_metric(MetricType.CASH_BALANCE, 5000, 20000, "USD"),
            create_metric(MetricType.EXPENSES, 0, 0, "USD"),
        ]
        selected = select_top_metrics(metrics, count=2)
        assert len(selected) == 2
        assert selected[0].type == MetricType.EXPENSES

    def test_no_core_metric_available(self) -> None:
        """Test selection without any core metric in the input."""
        metrics = [create_metric(MetricType.HOURS_TRACKED, 30, 20, "USD")]
        selected = select_top_metrics(metrics)
        assert [m.type for m in selected] == [MetricType.HOURS_TRACKED]


class TestScoreMetric:
    """Tests for score_metric."""

    def test_negative_profit_boosted(self) -> None:
        """Test negative profit scores above the same positive profit."""
        loss = create_metric(MetricType.NET_PROFIT, -1000, -1000, "USD")
        profit = create_metric(MetricType.NET_PROFIT, 1000, 1000, "USD")
        assert score_metric(loss) > score_metric(profit)

    def test_large_change_beats_small_change(self) -> None:
        """Test change tiers raise the score."""
        big = create_metric(MetricType.REVENUE, 200, 100, "USD")
        small = create_metric(MetricType.REVENUE, 101, 100, "USD")
        assert score_metric(big) > score_metric(small)
