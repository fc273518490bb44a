"""Device model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import field_validator

from pyjagalari.ingestion.normalize import parse_timestamp, safe_int, safe_str
from pyjagalari.models._base import TraccarModel


class Device(TraccarModel):
    """A tracked device registered on the Traccar server.

    Fields are mapped from the ``GET /api/devices`` response.  Identity
    is ``id``; the list is refreshed wholesale on every poll.
    """

    id: int
    """Server-side device identifier."""
    name: str = ""
    """Display name (e.g. ``"Ambulance 1"``).  Drives classification."""
    unique_id: str = ""
    """Hardware identifier reported by the tracker (IMEI etc.)."""
    status: str = "unknown"
    """Connection status as reported: ``"online"``, ``"offline"`` or ``"unknown"``."""
    last_update: datetime | None = None
    """Last time the server heard from the device."""
    position_id: int | None = None
    """Identifier of the device's latest position, if any."""

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> int:
        parsed = safe_int(value)
        if parsed is None:
            raise ValueError("device id must be an integer")
        return parsed

    @field_validator("name", "unique_id", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return safe_str(value) or ""

    @field_validator("position_id", mode="before")
    @classmethod
    def _coerce_position_id(cls, value: Any) -> int | None:
        parsed = safe_int(value)
        # Traccar reports 0 for "no position yet".
        return parsed or None

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> str:
        return str(value) if value is not None else "unknown"

    @field_validator("last_update", mode="before")
    @classmethod
    def _coerce_last_update(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

