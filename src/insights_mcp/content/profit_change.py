"""Period-over-period profit change wording.

A shrinking loss is numerically a positive percentage change, so the phrase
is chosen from the signs of both periods, never from the percentage alone.
"""

import math

FLAT = "flat vs last week"
FLAT_THRESHOLD = 5


def round_half_up(value: float) -> int:
    """Round .5 away from zero on the upper side, like Math.round. NaN and infinity give 0."""
    if not math.isfinite(value):
        return 0
    return int(math.floor(value + 0.5))


def compute_profit_change_description(current: float, previous: float, pct_change: float) -> str:
    """
    Classify a profit change into one canonical phrase.

    Rules are checked in order and the first match wins:
    flat, profit to profit, loss to loss, loss to profit, profit to loss,
    from zero, to zero. Anything else (including NaN or infinite changes)
    reads as flat.

    Args:
        current: Profit this period
        previous: Profit last period
        pct_change: Percentage change between the two

    Returns:
        Phrase such as "up 12% vs last week" or "loss decreased 96% vs last week"
    """
    magnitude = abs(pct_change)
    if not math.isfinite(magnitude) or magnitude < FLAT_THRESHOLD:
        return FLAT

    pct = round_half_up(magnitude)

    if previous > 0 and current > 0:
        direction = "up" if pct_change > 0 else "down"
        return f"{direction} {pct}% vs last week"

    if previous < 0 and current < 0:
        trend = "decreased" if abs(current) < abs(previous) else "increased"
        return f"loss {trend} {pct}% vs last week"

    if previous < 0 and current > 0:
        return "returned to profit"

    if previous > 0 and current < 0:
        return "turned to loss"

    if previous == 0 and current > 0:
        return "profit this week"

    if previous == 0 and current < 0:
        return "loss this week"

    if current == 0 and previous != 0:
        return "break-even this week"

    return FLAT
