"""Response metadata utilities."""

from typing import Any

from insights_mcp import SCHEMA_VERSION, SERVER_VERSION


def build_meta(tool: str, duration_ms: float | None = None, **kwargs: Any) -> dict[str, Any]:
    """
    Build standard metadata block for responses.

    Args:
        tool: Name of the tool producing this response
        duration_ms: Execution time in milliseconds (optional)
        **kwargs: Additional metadata fields (model, is_fallback, ...)

    Returns:
        Metadata dict with version info
    """
    meta: dict[str, Any] = {
        "server_version": SERVER_VERSION,
        "schema_version": SCHEMA_VERSION,
        "tool": tool,
    }
    if duration_ms is not None:
        meta["duration_ms"] = round(duration_ms, 1)
    meta.update(kwargs)
    return meta


def build_error_response(
    error_type: str,
    message: str,
    period_label: str | None = None,
) -> dict[str, Any]:
    """
    Build standardized error response.

    Args:
        error_type: Type of error (invalid_request, data_unavailable)
        message: Human-readable error message
        period_label: Period the request was for (if known)

    Returns:
        Error response dict
    """
    response: dict[str, Any] = {
        "error": True,
        "error_type": error_type,
        "message": message,
        "meta": build_meta("error"),
    }

    if period_label is not None:
        response["period_label"] = period_label

    return response
