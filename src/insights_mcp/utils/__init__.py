"""Utility modules."""

from insights_mcp.utils.normalize import canonical_dumps, facts_hash, to_jsonable
from insights_mcp.utils.period import (
    PeriodInfo,
    format_date_for_query,
    get_period_info,
    get_period_label,
    get_period_name,
    get_previous_complete_period,
    get_previous_period,
)
from insights_mcp.utils.provenance import build_error_response, build_meta
from insights_mcp.utils.sanitize import clean_generated_text, sanitize_text
from insights_mcp.utils.speech import format_number_for_speech, get_currency_word
from insights_mcp.utils.validators import InsightRequest

__all__ = [
    "canonical_dumps",
    "facts_hash",
    "to_jsonable",
    "PeriodInfo",
    "format_date_for_query",
    "get_period_info",
    "get_period_label",
    "get_period_name",
    "get_previous_complete_period",
    "get_previous_period",
    "build_error_response",
    "build_meta",
    "clean_generated_text",
    "sanitize_text",
    "format_number_for_speech",
    "get_currency_word",
    "InsightRequest",
]
