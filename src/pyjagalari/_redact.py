"""Helpers for safe debug logging.

The telemetry client sends Basic credentials on every request, and the
operator's own position is personal data.  Payloads pass through
:func:`redact_for_log` before they reach DEBUG logs: secrets are masked and
coordinates are coarsened to roughly one kilometre.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "email",
        "token",
        "authorization",
        "cookie",
        "set-cookie",
        "phone",
    }
)

_COORDINATE_KEYS: frozenset[str] = frozenset({"lat", "lng", "lon", "latitude", "longitude"})

_COORDINATE_DIGITS = 2


def _coarsen(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    return round(float(value), _COORDINATE_DIGITS)


def redact_for_log(value: Any, *, max_string: int = 512, coarsen_coordinates: bool = True, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            lowered = key.lower()
            if lowered in _SENSITIVE_VALUE_KEYS:
                redacted[key] = "<redacted>"
            elif coarsen_coordinates and lowered in _COORDINATE_KEYS:
                redacted[key] = _coarsen(v)
            else:
                redacted[key] = redact_for_log(
                    v,
                    max_string=max_string,
                    coarsen_coordinates=coarsen_coordinates,
                    _depth=_depth + 1,
                )
        return redacted

    if isinstance(value, Sequence):
        return [
            redact_for_log(v, max_string=max_string, coarsen_coordinates=coarsen_coordinates, _depth=_depth + 1)
            for v in value
        ]

    return repr(value)
