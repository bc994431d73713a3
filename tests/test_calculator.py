"""Tests for metric calculation and amount formatting."""

import math

import pytest

from insights_mcp.metrics.calculator import (
    add_activity_metrics,
    calculate_all_metrics,
    calculate_percentage_change,
    describe_activity_change,
    format_metric_value,
    get_change_direction,
    parse_metric_value,
)
from insights_mcp.models import InsightActivity, MetricData, MetricType


class TestFormatMetricValue:
    """Tests for format_metric_value."""

    def test_usd_grouping(self) -> None:
        """Test dollars use a prefix symbol and comma grouping."""
        assert format_metric_value(1200, "currency", "USD") == "$1,200"

    def test_fraction_kept_when_nonzero(self) -> None:
        """Test a non-zero fraction keeps both minor digits."""
        assert format_metric_value(1200.5, "currency", "USD") == "$1,200.50"

    def test_sek_swedish_locale(self) -> None:
        """Test kronor use a suffix and space grouping in sv-SE."""
        assert format_metric_value(338958, "currency", "SEK", "sv-SE") == "338 958 kr"

    def test_sek_english_locale(self) -> None:
        """Test kronor in en-US keep the suffix with comma grouping."""
        assert format_metric_value(117061, "currency", "SEK") == "117,061 kr"

    def test_negative_amount(self) -> None:
        """Test negative amounts carry a leading minus."""
        assert format_metric_value(-7148, "currency", "SEK") == "-7,148 kr"
        assert format_metric_value(-50, "currency", "USD") == "-$50"

    def test_euro_german_locale(self) -> None:
        """Test German grouping and decimal separators."""
        assert format_metric_value(1234.5, "currency", "EUR", "de-DE") == "€1.234,50"

    def test_yen_has_no_minor_digits(self) -> None:
        """Test yen rounds to whole units."""
        assert format_metric_value(1234.6, "currency", "JPY") == "¥1,235"

    def test_unknown_currency_uses_code(self) -> None:
        """Test unknown currencies fall back to the ISO code prefix."""
        assert format_metric_value(100, "currency", "ISK") == "ISK 100"

    def test_non_currency_units(self) -> None:
        """Test percentage, months, hours and count units."""
        assert format_metric_value(97.44, "percentage", "USD") == "97.4%"
        assert format_metric_value(8, "months", "USD") == "8.0 months"
        assert format_metric_value(12.5, "hours", "USD") == "12.5h"
        assert format_metric_value(2.5, "count", "USD") == "3"

    def test_unknown_locale_uses_en_us(self) -> None:
        """Test unknown locales use en-US separators."""
        assert format_metric_value(1200, "currency", "USD", "xx-XX") == "$1,200"

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    @pytest.mark.parametrize("unit", ["currency", "percentage", "count"])
    def test_non_finite_values_are_not_available(self, value: float, unit: str) -> None:
        """Test NaN and infinite values format as n/a instead of raising."""
        assert format_metric_value(value, unit, "USD") == "n/a"

    def test_very_large_amounts_keep_every_digit(self) -> None:
        """Test amounts beyond the default decimal precision still round exactly."""
        assert format_metric_value(1e30, "currency", "USD") == "$1" + ",000" * 10
        assert format_metric_value(1e30, "count", "USD") == "1" + "0" * 30


class TestParseMetricValue:
    """Tests for parse_metric_value."""

    @pytest.mark.parametrize(
        "value,currency,locale",
        [
            (1234.57, "USD", "en-US"),
            (338958, "SEK", "sv-SE"),
            (-7148.25, "SEK", "en-US"),
            (1234.5, "EUR", "de-DE"),
            (98765, "JPY", "en-US"),
        ],
    )
    def test_parses_formatted_amounts(self, value: float, currency: str, locale: str) -> None:
        """Test parsing a formatted amount recovers the rounded value."""
        text = format_metric_value(value, "currency", currency, locale)
        assert parse_metric_value(text, currency, locale) == pytest.approx(value)

    def test_unparseable_raises(self) -> None:
        """Test text without an amount raises ValueError."""
        with pytest.raises(ValueError, match="Cannot parse amount"):
            parse_metric_value("lots", "USD")

    @pytest.mark.parametrize("text", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_text_raises(self, text: str) -> None:
        """Test NaN and infinity spellings are rejected rather than parsed."""
        with pytest.raises(ValueError, match="Cannot parse amount"):
            parse_metric_value(text, "USD")


class TestPercentageChange:
    """Tests for calculate_percentage_change and get_change_direction."""

    def test_regular_change(self) -> None:
        """Test change relative to the previous value."""
        assert calculate_percentage_change(120, 100) == pytest.approx(20.0)

    def test_change_uses_previous_magnitude(self) -> None:
        """Test a shrinking loss is a positive change."""
        assert calculate_percentage_change(-7148, -189376) == pytest.approx(96.225, abs=0.01)

    def test_zero_previous(self) -> None:
        """Test zero baselines."""
        assert calculate_percentage_change(0, 0) == 0.0
        assert calculate_percentage_change(50, 0) == 100.0

    def test_direction_thresholds(self) -> None:
        """Test the flat band is +/-0.5%."""
        assert get_change_direction(0.6) == "up"
        assert get_change_direction(-0.6) == "down"
        assert get_change_direction(0.5) == "flat"


class TestCalculateAllMetrics:
    """Tests for calculate_all_metrics and add_activity_metrics."""

    def test_financial_metrics(self) -> None:
        """Test every financial metric is built with the currency."""
        current = MetricData(revenue=1000, expenses=400, net_profit=600, runway_months=8)
        previous = MetricData(revenue=800, expenses=400, net_profit=400, runway_months=7)
        metrics = calculate_all_metrics(current, previous, "USD")

        assert MetricType.CASH_BALANCE not in metrics
        revenue = metrics[MetricType.REVENUE]
        assert revenue.value == 1000
        assert revenue.change == pytest.approx(25.0)
        assert revenue.change_direction == "up"
        assert revenue.currency == "USD"
        assert metrics[MetricType.RUNWAY_MONTHS].currency is None

    def test_cash_balance_included_when_present(self) -> None:
        """Test cash balance is only a metric when the current period has one."""
        current = MetricData(cash_balance=50000)
        metrics = calculate_all_metrics(current, MetricData(), "USD")
        assert metrics[MetricType.CASH_BALANCE].value == 50000

    def test_historical_context_attached(self) -> None:
        """Test historical context lands on the matching metric."""
        metrics = calculate_all_metrics(
            MetricData(net_profit=100),
            MetricData(net_profit=50),
            "USD",
            {MetricType.NET_PROFIT: "Best profit week since October"},
        )
        assert metrics[MetricType.NET_PROFIT].historical_context == "Best profit week since October"
        assert metrics[MetricType.REVENUE].historical_context is None

    def test_activity_metrics_keep_enum_order(self) -> None:
        """Test activity metrics are added in declaration order."""
        metrics = calculate_all_metrics(MetricData(), MetricData(), "USD")
        combined = add_activity_metrics(metrics, InsightActivity(invoices_sent=2), None, "USD")

        assert list(combined) == [t for t in MetricType if t in combined]
        assert combined[MetricType.INVOICES_SENT].change_description == "+2"
        assert MetricType.INVOICES_SENT not in metrics


class TestDescribeActivityChange:
    """Tests for describe_activity_change."""

    def test_drop_to_zero_is_not_a_percentage(self) -> None:
        """Test a drop to zero reads as none this week."""
        assert describe_activity_change(MetricType.INVOICES_SENT, 0, 3) == "no new invoices this week"

    def test_no_activity(self) -> None:
        """Test zero in both periods."""
        assert describe_activity_change(MetricType.INVOICES_SENT, 0, 0) == "no activity"

    def test_same(self) -> None:
        """Test unchanged counts."""
        assert describe_activity_change(MetricType.INVOICES_PAID, 3, 3) == "same as last week"

    def test_small_count_difference(self) -> None:
        """Test small count changes read as signed differences."""
        assert describe_activity_change(MetricType.INVOICES_SENT, 5, 3) == "+2"
        assert describe_activity_change(MetricType.INVOICES_SENT, 2, 3) == "-1"

    def test_large_count_difference(self) -> None:
        """Test large count changes read as percentages."""
        assert describe_activity_change(MetricType.INVOICES_SENT, 20, 10) == "+100%"

    def test_hours_from_zero(self) -> None:
        """Test hours appearing from zero read as a signed hour difference."""
        assert describe_activity_change(MetricType.HOURS_TRACKED, 12.5, 0) == "+12.5h"
