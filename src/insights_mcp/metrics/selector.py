"""Metric scoring and top-N selection."""

from collections.abc import Iterable, Mapping

from insights_mcp.metrics.definitions import (
    ANOMALY_BOOST,
    BASE_PRIORITY,
    CORE_METRIC_BOOST,
    DEFAULT_TOP_METRICS_COUNT,
    HAS_MEANINGFUL_DATA,
    MAX_METRICS_PER_CATEGORY,
    MIN_PRIORITY_SCORE,
    MINOR_CHANGE,
    MINOR_CHANGE_BONUS,
    MODERATE_CHANGE,
    MODERATE_CHANGE_BONUS,
    PRIORITY_DECREMENT,
    RUNWAY_WARNING,
    SIGNIFICANT_CHANGE,
    SIGNIFICANT_CHANGE_BONUS,
    STATE_METRICS,
    get_metric_definition,
    is_core_financial_metric,
)
from insights_mcp.models import InsightMetric, MetricCategory, MetricType

# Bookkeeping metrics, not business KPIs
EXCLUDED_CATEGORIES: frozenset[MetricCategory] = frozenset({MetricCategory.OPERATIONS})

# Point-in-time status, surfaced in actions instead
EXCLUDED_TYPES: frozenset[MetricType] = frozenset({MetricType.INVOICES_OVERDUE})


def score_metric(metric: InsightMetric) -> int:
    """
    Score a metric for display relevance.

    Components: priority base (floor 10), has-data bonus, tiered change
    bonus, anomaly boost, and a boost for core financial metrics.
    """
    priority = get_metric_definition(metric.type).priority
    score = max(MIN_PRIORITY_SCORE, BASE_PRIORITY - priority * PRIORITY_DECREMENT)

    if metric.value != 0 or metric.previous_value != 0:
        score += HAS_MEANINGFUL_DATA

    change = abs(metric.change)
    if change > SIGNIFICANT_CHANGE:
        score += SIGNIFICANT_CHANGE_BONUS
    elif change > MODERATE_CHANGE:
        score += MODERATE_CHANGE_BONUS
    elif change > MINOR_CHANGE:
        score += MINOR_CHANGE_BONUS

    if metric.type == MetricType.RUNWAY_MONTHS and metric.value < RUNWAY_WARNING:
        score += ANOMALY_BOOST
    if metric.type == MetricType.NET_PROFIT and metric.value < 0:
        score += ANOMALY_BOOST
    if metric.type == MetricType.CASH_FLOW and metric.value < 0:
        score += ANOMALY_BOOST

    if is_core_financial_metric(metric.type):
        score += CORE_METRIC_BOOST

    return score


def _as_list(metrics: Mapping[MetricType, InsightMetric] | Iterable[InsightMetric]) -> list[InsightMetric]:
    if isinstance(metrics, Mapping):
        # Enum declaration order, independent of insertion order
        return [metrics[t] for t in MetricType if t in metrics]
    return list(metrics)


def _is_candidate(metric: InsightMetric) -> bool:
    if metric.type in EXCLUDED_TYPES:
        return False
    if metric.value == 0 and metric.previous_value == 0 and metric.type not in STATE_METRICS:
        return False
    return get_metric_definition(metric.type).category not in EXCLUDED_CATEGORIES


def _category(metric: InsightMetric) -> MetricCategory:
    return get_metric_definition(metric.type).category


def select_top_metrics(
    metrics: Mapping[MetricType, InsightMetric] | Iterable[InsightMetric],
    count: int = DEFAULT_TOP_METRICS_COUNT,
) -> list[InsightMetric]:
    """
    Select the most relevant metrics for display.

    Strategy:
    - Drop bookkeeping metrics, overdue counts, and empty non-state metrics
    - Sort by score (stable, so ties keep enum order)
    - Accept at most 2 metrics per category
    - Guarantee one core financial metric when the input has one
    - Fill any remaining room with state metrics

    Args:
        metrics: Metric mapping or sequence
        count: Maximum number of metrics to return

    Returns:
        Selected metrics, highest relevance first
    """
    if count <= 0:
        return []

    all_metrics = _as_list(metrics)
    candidates = [m for m in all_metrics if _is_candidate(m)]
    scores = {m.type: score_metric(m) for m in all_metrics}
    ranked = sorted(candidates, key=lambda m: scores[m.type], reverse=True)

    selected: list[InsightMetric] = []
    category_counts: dict[MetricCategory, int] = {}
    for metric in ranked:
        if len(selected) >= count:
            break
        category = _category(metric)
        if category_counts.get(category, 0) >= MAX_METRICS_PER_CATEGORY:
            continue
        selected.append(metric)
        category_counts[category] = category_counts.get(category, 0) + 1

    if not any(is_core_financial_metric(m.type) for m in selected):
        core = sorted(
            (m for m in all_metrics if is_core_financial_metric(m.type)),
            key=lambda m: scores[m.type],
            reverse=True,
        )
        if core:
            best = core[0]
            best_category = _category(best)
            if len(selected) >= count or category_counts.get(best_category, 0) >= MAX_METRICS_PER_CATEGORY:
                same_category = [m for m in selected if _category(m) == best_category]
                pool = (
                    same_category
                    if category_counts.get(best_category, 0) >= MAX_METRICS_PER_CATEGORY
                    else selected
                )
                evicted = min(reversed(pool), key=lambda m: scores[m.type])
                selected.remove(evicted)
                evicted_category = _category(evicted)
                category_counts[evicted_category] -= 1
            selected.insert(0, best)
            category_counts[best_category] = category_counts.get(best_category, 0) + 1

    if len(selected) < count:
        selected_types = {m.type for m in selected}
        by_type = {m.type: m for m in all_metrics}
        for metric_type in STATE_METRICS:
            if len(selected) >= count:
                break
            if metric_type in selected_types or metric_type not in by_type:
                continue
            category = get_metric_definition(metric_type).category
            if category_counts.get(category, 0) >= MAX_METRICS_PER_CATEGORY:
                continue
            selected.append(by_type[metric_type])
            selected_types.add(metric_type)
            category_counts[category] = category_counts.get(category, 0) + 1

    return selected
