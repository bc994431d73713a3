"""Metric calculation, selection, and anomaly detection."""

from insights_mcp.metrics.anomalies import detect_anomalies, detect_expense_anomalies
from insights_mcp.metrics.calculator import (
    add_activity_metrics,
    calculate_all_metrics,
    calculate_percentage_change,
    create_metric,
    format_metric_value,
    get_change_direction,
    parse_metric_value,
)
from insights_mcp.metrics.definitions import (
    CORE_FINANCIAL_METRICS,
    METRIC_DEFINITIONS,
    get_metric_definition,
    is_core_financial_metric,
)
from insights_mcp.metrics.selector import score_metric, select_top_metrics

__all__ = [
    # Calculator
    "add_activity_metrics",
    "calculate_all_metrics",
    "calculate_percentage_change",
    "create_metric",
    "format_metric_value",
    "get_change_direction",
    "parse_metric_value",
    # Definitions
    "CORE_FINANCIAL_METRICS",
    "METRIC_DEFINITIONS",
    "get_metric_definition",
    "is_core_financial_metric",
    # Selection
    "score_metric",
    "select_top_metrics",
    # Anomalies
    "detect_anomalies",
    "detect_expense_anomalies",
]
