"""Validation utilities and request classes."""

import json
import math
import re
from dataclasses import dataclass
from typing import Any

from insights_mcp.models import (
    PERIOD_TYPES,
    InsightActivity,
    MetricData,
    MetricType,
    SlotContext,
    activity_from_dict,
    metric_data_from_dict,
    slot_context_from_dict,
)
from insights_mcp.utils.sanitize import sanitize_text

CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


def _check_finite(value: Any, path: str) -> None:
    """Reject NaN and infinity anywhere in a decoded payload."""
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Invalid payload: non-finite number at {path}")
    if isinstance(value, dict):
        for key, item in value.items():
            _check_finite(item, f"{path}.{key}")
    elif isinstance(value, list):
        for index, item in enumerate(value):
            _check_finite(item, f"{path}[{index}]")


@dataclass(frozen=True)
class InsightRequest:
    """Immutable insight request. Used for every tool entry point."""

    currency: str
    period_label: str
    period_type: str
    current: MetricData
    previous: MetricData
    activity: InsightActivity
    previous_activity: InsightActivity | None = None
    context: SlotContext | None = None
    locale: str = "en-US"
    # e.g. {MetricType.NET_PROFIT: "Your best week ever"}
    historical_context: dict[MetricType, str] | None = None

    def __post_init__(self) -> None:
        # Normalize currency: uppercase, strip whitespace
        currency = self.currency.upper().strip()
        if not CURRENCY_PATTERN.match(currency):
            raise ValueError(f"Invalid currency '{self.currency}'. Must be a 3-letter ISO 4217 code")

        period_type = self.period_type.lower().strip()
        if period_type not in PERIOD_TYPES:
            raise ValueError(
                f"Invalid period type '{self.period_type}'. Must be one of: {PERIOD_TYPES}"
            )

        object.__setattr__(self, "currency", currency)
        object.__setattr__(self, "period_type", period_type)
        object.__setattr__(self, "period_label", sanitize_text(self.period_label, max_length=120) or "")

    @classmethod
    def from_payload(cls, payload: str | dict[str, Any], locale: str = "en-US") -> "InsightRequest":
        """
        Build a request from the JSON payload accepted by the MCP tools.

        Args:
            payload: JSON text or already-decoded dict with keys currency,
                period_label, period_type, current, previous, activity and
                optionally previous_activity, context, locale,
                historical_context
            locale: Locale used when the payload does not name one

        Raises:
            ValueError: If the payload is not a JSON object, holds NaN or
                infinite numbers, has sections of the wrong shape, or fails
                validation
        """
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid payload: {e}") from e
        if not isinstance(payload, dict):
            raise ValueError("Invalid payload: expected a JSON object")

        for key in ("currency", "period_type"):
            if not payload.get(key):
                raise ValueError(f"Invalid payload: missing '{key}'")
        _check_finite(payload, "payload")

        try:
            history = payload.get("historical_context") or {}
            historical_context = {MetricType(key): str(text) for key, text in history.items()}

            raw_previous_activity = payload.get("previous_activity")
            raw_context = payload.get("context")
            current = metric_data_from_dict(payload.get("current"))
            previous = metric_data_from_dict(payload.get("previous"))
            activity = activity_from_dict(payload.get("activity"))
            previous_activity = activity_from_dict(raw_previous_activity) if raw_previous_activity else None
            context = slot_context_from_dict(raw_context) if raw_context else None
        except KeyError as e:
            raise ValueError(f"Invalid payload: missing field {e}") from e
        except (ValueError, TypeError, AttributeError) as e:
            raise ValueError(f"Invalid payload: {e}") from e

        return cls(
            currency=str(payload["currency"]),
            period_label=str(payload.get("period_label", "")),
            period_type=str(payload["period_type"]),
            current=current,
            previous=previous,
            activity=activity,
            previous_activity=previous_activity,
            context=context,
            locale=str(payload.get("locale") or locale),
            historical_context=historical_context or None,
        )
