"""Normalization helpers.

Centralizes lenient parsing of telemetry payload values.  Traccar and
the devices reporting to it are not consistent about numeric types, so
every model coerces through these helpers.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a Traccar timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings (``2024-05-01T10:00:00.000+00:00`` and the
    ``Z`` suffix), epoch seconds or milliseconds, and datetimes.  Returns
    ``None`` for anything unparseable, including non-finite or
    out-of-range epoch values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            ts = float(value)
        except OverflowError:
            return None
        if not math.isfinite(ts) or ts <= 0:
            return None
        # Treat values above 1e11 as milliseconds.
        if ts > 1e11:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    return None


def is_valid_coordinate(lat: float | None, lng: float | None) -> bool:
    """Return True when *lat*/*lng* are present and within WGS84 range."""
    if lat is None or lng is None:
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0
