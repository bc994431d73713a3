"""Period date utilities.

Weeks are ISO weeks (Monday to Sunday). "Now" is evaluated in the
configured insights timezone, so a Monday-morning run in Stockholm
reports on the week that just ended there.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

import pytz

from insights_mcp.config import InsightsSettings
from insights_mcp.models import PERIOD_TYPES, PeriodType

logger = logging.getLogger(__name__)

PERIOD_NAMES: dict[str, str] = {
    "weekly": "week",
    "monthly": "month",
    "quarterly": "quarter",
    "yearly": "year",
}

# Default delivery hour in the team's local time
DEFAULT_INSIGHT_HOUR = 7


@dataclass(frozen=True)
class PeriodInfo:
    period_start: date
    period_end: date
    period_label: str
    period_year: int
    period_number: int


def _check_period_type(period_type: str) -> None:
    if period_type not in PERIOD_TYPES:
        raise ValueError(f"Unknown period type: {period_type}")


def get_period_name(period_type: PeriodType) -> str:
    """Noun for the period ("week", "month", ...)."""
    _check_period_type(period_type)
    return PERIOD_NAMES[period_type]


def get_timezone(name: str) -> pytz.BaseTzInfo:
    """Timezone by name, falling back to UTC for unknown names."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone '{name}', using UTC")
        return pytz.utc


def today_in_timezone(timezone: str | None = None) -> date:
    tz = get_timezone(timezone or InsightsSettings.from_env().timezone)
    return datetime.now(tz).date()


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def _quarter_of(value: date) -> int:
    return (value.month - 1) // 3 + 1


def _shift_months(value: date, months: int) -> date:
    index = value.year * 12 + value.month - 1 + months
    return date(index // 12, index % 12 + 1, 1)


def get_period_info(period_type: PeriodType, year: int, number: int) -> PeriodInfo:
    """
    Period boundaries for a specific period.

    Args:
        period_type: weekly, monthly, quarterly or yearly
        year: Calendar year (ISO year for weeks)
        number: ISO week 1-53, month 1-12, quarter 1-4, or the year itself

    Returns:
        PeriodInfo with inclusive start and end dates
    """
    _check_period_type(period_type)

    if period_type == "weekly":
        start = date.fromisocalendar(year, number, 1)
        return PeriodInfo(start, start + timedelta(days=6), f"Week {number}, {year}", year, number)

    if period_type == "monthly":
        start = date(year, number, 1)
        return PeriodInfo(start, _month_end(year, number), f"{start:%B} {year}", year, number)

    if period_type == "quarterly":
        first_month = (number - 1) * 3 + 1
        start = date(year, first_month, 1)
        return PeriodInfo(start, _month_end(year, first_month + 2), f"Q{number} {year}", year, number)

    return PeriodInfo(date(year, 1, 1), date(year, 12, 31), f"{year} Year in Review", year, year)


def get_current_period(period_type: PeriodType, reference_date: date | None = None) -> PeriodInfo:
    """The period containing reference_date (not yet complete)."""
    _check_period_type(period_type)
    reference = reference_date or today_in_timezone()

    if period_type == "weekly":
        iso_year, iso_week, _ = reference.isocalendar()
        return get_period_info("weekly", iso_year, iso_week)
    if period_type == "monthly":
        return get_period_info("monthly", reference.year, reference.month)
    if period_type == "quarterly":
        return get_period_info("quarterly", reference.year, _quarter_of(reference))
    return get_period_info("yearly", reference.year, reference.year)


def get_previous_complete_period(
    period_type: PeriodType, reference_date: date | None = None
) -> PeriodInfo:
    """
    The last complete period before reference_date.

    Used when generating insights, e.g. on Monday morning for the previous week.
    """
    _check_period_type(period_type)
    reference = reference_date or today_in_timezone()

    if period_type == "weekly":
        return get_current_period("weekly", reference - timedelta(weeks=1))
    if period_type == "monthly":
        return get_current_period("monthly", _shift_months(reference, -1))
    if period_type == "quarterly":
        return get_current_period("quarterly", _shift_months(reference, -3))
    return get_current_period("yearly", date(reference.year - 1, 1, 1))


def get_previous_period(period_type: PeriodType, current: PeriodInfo) -> PeriodInfo:
    """The period before current, for comparison."""
    return get_previous_complete_period(period_type, current.period_start)


def get_period_label(period_type: PeriodType, year: int, number: int) -> str:
    """
    Human-readable period label.

    Examples:
        weekly: "Weekly Summary — November 10-16, 2024"
        weekly across months: "Weekly Summary — December 30 - January 5, 2025"
        monthly: "Monthly Summary — November 2024"
        quarterly: "Quarterly Summary — Q4 2024"
        yearly: "Yearly Summary — 2024"
    """
    info = get_period_info(period_type, year, number)
    start, end = info.period_start, info.period_end

    if period_type == "weekly":
        if start.month == end.month:
            date_range = f"{start:%B} {start.day}-{end.day}, {end.year}"
        else:
            date_range = f"{start:%B} {start.day} - {end:%B} {end.day}, {end.year}"
        return f"Weekly Summary — {date_range}"
    if period_type == "monthly":
        return f"Monthly Summary — {start:%B} {end.year}"
    if period_type == "quarterly":
        return f"Quarterly Summary — Q{number} {year}"
    return f"Yearly Summary — {year}"


def format_date_for_query(value: date) -> str:
    """YYYY-MM-DD for data source queries."""
    return f"{value:%Y-%m-%d}"


def calculate_next_insight_time(
    period_type: PeriodType,
    timezone: str = "UTC",
    target_hour: int = DEFAULT_INSIGHT_HOUR,
    reference: datetime | None = None,
) -> datetime:
    """
    Next delivery time for a period type, as an aware UTC datetime.

    Weekly runs go out next Monday, monthly on the 1st of next month,
    quarterly on the 1st of next quarter, yearly on January 1st, each at
    target_hour in the given timezone.
    """
    _check_period_type(period_type)
    tz = get_timezone(timezone)
    now = reference or datetime.now(pytz.utc)
    local_today = now.astimezone(tz).date()

    if period_type == "weekly":
        next_date = local_today + timedelta(days=7 - local_today.weekday())
    elif period_type == "monthly":
        next_date = _shift_months(local_today, 1)
    elif period_type == "quarterly":
        quarter_start = date(local_today.year, (_quarter_of(local_today) - 1) * 3 + 1, 1)
        next_date = _shift_months(quarter_start, 3)
    else:
        next_date = date(local_today.year + 1, 1, 1)

    local = tz.localize(datetime(next_date.year, next_date.month, next_date.day, target_hour))
    return local.astimezone(pytz.utc)
