"""
Helper functions for the normalization boundary.

Utilities for reading loosely-typed upstream records: field aliases,
numeric coercion and timestamp parsing. Nothing here raises on bad input.
"""

import hashlib
import json
import math

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

# Epoch values above this are taken to be milliseconds
EPOCH_MS_CUTOFF = 1e11


def first_present(data: Mapping[str, Any], *keys: str) -> Any:
    """
    Return the first non-empty value among several field aliases.

    Upstream systems disagree on naming (orgId, org_id, claimantId, ...),
    so every read goes through the alias list.
    """
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


def coerce_float(value: Any, default: float = 0.0) -> float:
    """
    Convert a value to a finite float.

    Booleans, non-numeric strings, NaN and infinities fall back to default.
    """
    if isinstance(value, bool) or value is None:
        return default
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(result):
        return default
    return result


def coerce_unit(value: Any, default: float = 0.0) -> float:
    """Convert a value to a float clamped into [0, 1]."""
    return float(min(1.0, max(0.0, coerce_float(value, default))))


def coerce_str(value: Any) -> str | None:
    """Convert ids and labels to stripped strings; empty becomes None."""
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return None
    text = str(value).strip()
    return text or None


def coerce_bool(value: Any) -> bool:
    """Read a truthy flag, accepting common string spellings."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    return bool(value)


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a timestamp into a timezone-aware UTC datetime.

    Handles:
    - datetime objects (naive values are taken as UTC)
    - ISO-8601 strings, including a trailing "Z"
    - epoch numbers in seconds or milliseconds

    Returns:
        Parsed datetime, or None if the value cannot be read
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            if not math.isfinite(value):
                return None
            seconds = value / 1000.0 if abs(value) >= EPOCH_MS_CUTOFF else float(value)
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return parse_timestamp(datetime.fromisoformat(text))
        except ValueError:
            numeric = coerce_float(text, default=math.nan)
            return parse_timestamp(numeric) if math.isfinite(numeric) else None

    return None


def content_id(prefix: str, data: Mapping[str, Any]) -> str:
    """
    Derive a deterministic id from a record's content.

    Used when an upstream record carries no id, so repeated normalization
    of the same payload yields the same ids.
    """
    # JSON object keys must be strings and sortable against each other
    keyed = {str(key): value for key, value in data.items()}
    try:
        data_str = json.dumps(keyed, sort_keys=True, default=str)
    except (TypeError, ValueError):
        # nested mappings with mixed keys, or self-referencing values
        data_str = repr(sorted((key, repr(value)) for key, value in keyed.items()))
    return f"{prefix}-{hashlib.sha256(data_str.encode('utf-8')).hexdigest()[:12]}"
