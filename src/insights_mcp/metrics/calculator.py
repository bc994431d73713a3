"""Metric calculation and the single amount formatter."""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

from insights_mcp.metrics.definitions import get_metric_definition
from insights_mcp.models import ChangeDirection, InsightActivity, InsightMetric, MetricData, MetricType


@dataclass(frozen=True)
class CurrencyFormat:
    symbol: str
    suffix: bool = False
    minor_digits: int = 2


CURRENCY_FORMATS: dict[str, CurrencyFormat] = {
    "USD": CurrencyFormat("$"),
    "CAD": CurrencyFormat("CA$"),
    "AUD": CurrencyFormat("A$"),
    "EUR": CurrencyFormat("€"),
    "GBP": CurrencyFormat("£"),
    "CHF": CurrencyFormat("CHF ", minor_digits=2),
    "SEK": CurrencyFormat("kr", suffix=True),
    "NOK": CurrencyFormat("kr", suffix=True),
    "DKK": CurrencyFormat("kr", suffix=True),
    "PLN": CurrencyFormat("zł", suffix=True),
    "JPY": CurrencyFormat("¥", minor_digits=0),
}

# Largest float has 309 integer digits
QUANTIZE_PRECISION = 330

# Shown for NaN and infinite values
NOT_AVAILABLE = "n/a"

# locale -> (group separator, decimal separator)
LOCALE_SEPARATORS: dict[str, tuple[str, str]] = {
    "en-US": (",", "."),
    "en-GB": (",", "."),
    "sv-SE": (" ", ","),
    "nb-NO": (" ", ","),
    "da-DK": (".", ","),
    "de-DE": (".", ","),
    "fr-FR": (" ", ","),
}


def _currency_format(currency: str) -> CurrencyFormat:
    code = currency.upper()
    if fmt := CURRENCY_FORMATS.get(code):
        return fmt
    return CurrencyFormat(f"{code} ")


def _separators(locale: str) -> tuple[str, str]:
    return LOCALE_SEPARATORS.get(locale, LOCALE_SEPARATORS["en-US"])


def _quantize(value: float | Decimal, quantum: Decimal) -> Decimal:
    """Round half up to quantum with enough precision for any finite float."""
    with localcontext() as ctx:
        ctx.prec = QUANTIZE_PRECISION
        return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def calculate_percentage_change(current: float, previous: float) -> float:
    """Percentage change, measured against the magnitude of the previous value."""
    if previous == 0:
        return 0.0 if current == 0 else 100.0
    return (current - previous) / abs(previous) * 100


def get_change_direction(change: float) -> ChangeDirection:
    if change > 0.5:
        return "up"
    if change < -0.5:
        return "down"
    return "flat"


def format_metric_value(
    value: float,
    unit: str | None,
    currency: str,
    locale: str = "en-US",
) -> str:
    """
    Format a metric value for display.

    This is the only place amounts are turned into text. Currency amounts
    use the currency's symbol and position plus locale digit grouping, and
    drop an all-zero fraction ("$1,200", "338 958 kr", "$1,200.50").

    Args:
        value: Raw numeric value
        unit: "currency", "percentage", "months", "hours" or "count"
            (None is treated as currency)
        currency: ISO 4217 code
        locale: BCP 47 locale tag for digit grouping

    Returns:
        Display string ("n/a" for NaN or infinite values)
    """
    if not math.isfinite(value):
        return NOT_AVAILABLE
    if unit == "percentage":
        return f"{value:.1f}%"
    if unit == "months":
        return f"{value:.1f} months"
    if unit == "hours":
        return f"{value:.1f}h"
    if unit == "count":
        return str(int(_quantize(value, Decimal(1))))

    fmt = _currency_format(currency)
    group_sep, decimal_sep = _separators(locale)

    quantum = Decimal(1).scaleb(-fmt.minor_digits)
    amount = _quantize(value, quantum)
    negative = amount < 0
    amount = abs(amount)

    whole, _, fraction = f"{amount:f}".partition(".")
    groups = []
    while len(whole) > 3:
        groups.insert(0, whole[-3:])
        whole = whole[:-3]
    groups.insert(0, whole)
    number = group_sep.join(groups)
    if fraction and fraction.strip("0"):
        number = f"{number}{decimal_sep}{fraction}"

    sign = "-" if negative else ""
    if fmt.suffix:
        return f"{sign}{number} {fmt.symbol}"
    return f"{sign}{fmt.symbol}{number}"


def parse_metric_value(text: str, currency: str, locale: str = "en-US") -> float:
    """
    Parse a currency amount produced by format_metric_value.

    Raises:
        ValueError: If the text holds no parseable amount
    """
    fmt = _currency_format(currency)
    group_sep, decimal_sep = _separators(locale)

    cleaned = text.replace(fmt.symbol.strip(), "").strip()
    negative = cleaned.startswith("-")
    cleaned = cleaned.lstrip("-").replace(" ", "").replace("\u00a0", "")
    if group_sep.strip():
        cleaned = cleaned.replace(group_sep, "")
    cleaned = cleaned.replace(decimal_sep, ".")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Cannot parse amount '{text}' for {currency}") from None
    if not amount.is_finite():
        raise ValueError(f"Cannot parse amount '{text}' for {currency}")

    amount = _quantize(amount, Decimal(1).scaleb(-fmt.minor_digits))
    return float(-amount if negative else amount)


def create_metric(
    metric_type: MetricType,
    current: float,
    previous: float,
    currency: str,
    historical_context: str | None = None,
    change_description: str | None = None,
) -> InsightMetric:
    definition = get_metric_definition(metric_type)
    change = calculate_percentage_change(current, previous)
    return InsightMetric(
        type=metric_type,
        label=definition.label,
        value=current,
        previous_value=previous,
        change=change,
        change_direction=get_change_direction(change),
        unit=definition.unit,
        currency=currency if definition.unit == "currency" else None,
        historical_context=historical_context,
        change_description=change_description,
    )


def calculate_all_metrics(
    current: MetricData,
    previous: MetricData,
    currency: str,
    historical_context: dict[MetricType, str] | None = None,
) -> dict[MetricType, InsightMetric]:
    """Build the financial metrics for a (current, previous) period pair."""
    history = historical_context or {}
    pairs = {
        MetricType.REVENUE: (current.revenue, previous.revenue),
        MetricType.EXPENSES: (current.expenses, previous.expenses),
        MetricType.NET_PROFIT: (current.net_profit, previous.net_profit),
        MetricType.PROFIT_MARGIN: (current.profit_margin, previous.profit_margin),
        MetricType.CASH_FLOW: (current.cash_flow, previous.cash_flow),
        MetricType.RUNWAY_MONTHS: (current.runway_months, previous.runway_months),
    }
    if current.cash_balance is not None:
        pairs[MetricType.CASH_BALANCE] = (current.cash_balance, previous.cash_balance or 0.0)

    return {
        metric_type: create_metric(
            metric_type, cur, prev, currency, historical_context=history.get(metric_type)
        )
        for metric_type, (cur, prev) in pairs.items()
    }


# What to say when an activity count drops to zero
NO_ACTIVITY_DESCRIPTIONS: dict[MetricType, str] = {
    MetricType.INVOICES_SENT: "no new invoices this week",
    MetricType.INVOICES_PAID: "no invoices paid this week",
    MetricType.INVOICES_OVERDUE: "no overdue invoices",
    MetricType.OVERDUE_AMOUNT: "nothing overdue",
    MetricType.HOURS_TRACKED: "no hours tracked this week",
    MetricType.UNBILLED_HOURS: "no unbilled hours",
    MetricType.NEW_CUSTOMERS: "no new customers this week",
    MetricType.RECEIPTS_MATCHED: "no receipts matched this week",
    MetricType.TRANSACTIONS_CATEGORIZED: "no transactions categorized this week",
}


def describe_activity_change(metric_type: MetricType, current: float, previous: float) -> str:
    """
    Describe an activity change without alarming percentages.

    A drop to zero reads as "no new invoices this week" rather than
    "down 100%". Small count differences read as "+2" / "-1".
    """
    if current == 0 and previous == 0:
        return "no activity"
    if current == 0:
        return NO_ACTIVITY_DESCRIPTIONS.get(metric_type, "none this week")
    if current == previous:
        return "same as last week"

    unit = get_metric_definition(metric_type).unit
    diff = current - previous
    if previous == 0 or (unit == "count" and abs(diff) <= 5):
        if unit == "count":
            return f"{int(diff):+d}"
        if unit == "hours":
            return f"{diff:+.1f}h"
        return f"{diff:+,.0f}"

    pct = calculate_percentage_change(current, previous)
    return f"{int(_quantize(pct, Decimal(1))):+d}%"


def add_activity_metrics(
    metrics: dict[MetricType, InsightMetric],
    current_activity: InsightActivity,
    previous_activity: InsightActivity | None,
    currency: str,
) -> dict[MetricType, InsightMetric]:
    """Return a new mapping with activity metrics added."""
    previous_activity = previous_activity or InsightActivity()
    pairs = {
        MetricType.INVOICES_SENT: (current_activity.invoices_sent, previous_activity.invoices_sent),
        MetricType.INVOICES_PAID: (current_activity.invoices_paid, previous_activity.invoices_paid),
        MetricType.INVOICES_OVERDUE: (
            current_activity.invoices_overdue,
            previous_activity.invoices_overdue,
        ),
        MetricType.OVERDUE_AMOUNT: (current_activity.overdue_amount, previous_activity.overdue_amount),
        MetricType.HOURS_TRACKED: (current_activity.hours_tracked, previous_activity.hours_tracked),
        MetricType.UNBILLED_HOURS: (current_activity.unbilled_hours, previous_activity.unbilled_hours),
        MetricType.NEW_CUSTOMERS: (current_activity.new_customers, previous_activity.new_customers),
        MetricType.RECEIPTS_MATCHED: (
            current_activity.receipts_matched,
            previous_activity.receipts_matched,
        ),
        MetricType.TRANSACTIONS_CATEGORIZED: (
            current_activity.transactions_categorized,
            previous_activity.transactions_categorized,
        ),
    }

    result = dict(metrics)
    for metric_type, (cur, prev) in pairs.items():
        result[metric_type] = create_metric(
            metric_type,
            float(cur),
            float(prev),
            currency,
            change_description=describe_activity_change(metric_type, float(cur), float(prev)),
        )
    # Keep enum declaration order so downstream ties are deterministic
    return {metric_type: result[metric_type] for metric_type in MetricType if metric_type in result}
