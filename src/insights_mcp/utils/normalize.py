"""Normalization utilities for stable JSON output.

Slots and facts are frozen dataclasses holding enums, dates and tuples.
Tool responses need plain JSON, and two runs over the same input must
serialize byte-for-byte identically so a facts hash can detect changes.

The normalization contract:
1. Dataclasses become dicts, tuples become lists
2. Enums become their values, dates become ISO strings
3. Dict keys are sorted by canonical_dumps
4. NaN/inf become null, -0.0 becomes 0.0
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import math
from datetime import date
from enum import Enum
from typing import Any


def canonical_dumps(obj: Any) -> str:
    """Produce canonical JSON string with sorted keys and minimal separators.

    Uses allow_nan=False to fail fast if NaN/inf values slip through
    sanitization. This ensures JSON validity across all parsers.
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def _is_nan_or_inf(x: Any) -> bool:
    if not isinstance(x, float):
        return False
    return math.isnan(x) or math.isinf(x)


def _is_negative_zero(x: Any) -> bool:
    return isinstance(x, float) and x == 0.0 and math.copysign(1.0, x) < 0


def to_jsonable(obj: Any) -> Any:
    """Recursively convert dataclasses, enums, dates and tuples to JSON-safe values."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    if isinstance(obj, date):
        return obj.isoformat()
    if _is_nan_or_inf(obj):
        return None
    if _is_negative_zero(obj):
        return 0.0
    return obj


def facts_hash(facts: Any) -> str:
    """Short SHA-256 of the canonical JSON of facts, for change detection."""
    canonical_json = canonical_dumps(to_jsonable(facts))
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()[:16]
