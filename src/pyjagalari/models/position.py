"""Position model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pyjagalari.ingestion.normalize import is_valid_coordinate, parse_timestamp, safe_float, safe_int
from pyjagalari.models._base import TraccarModel
from pyjagalari.models.geo import Coordinate


class Position(TraccarModel):
    """Latest reported fix for a device.

    Fields are mapped from ``GET /api/positions``.  Numeric fields fall
    back to ``0.0`` when the value is absent or unparseable; latitude and
    longitude fall back to ``None`` so that an unusable fix is never
    drawn at (0, 0).

    Parameters
    ----------
    id : int
        Server-side position identifier.
    device_id : int
        Owning device.  Positions whose device is missing from the same
        snapshot are ignored by the engine.
    latitude, longitude : float or None
        Degrees.
    speed : float
        Speed in knots, as Traccar reports it.
    course : float
        Heading in degrees.
    altitude : float
        Metres.
    accuracy : float
        Horizontal accuracy in metres.
    timestamp : datetime or None
        GNSS fix time (``fixTime``), falling back to ``deviceTime``.
    """

    id: int = 0
    device_id: int
    latitude: float | None = None
    longitude: float | None = None
    speed: float = 0.0
    course: float = 0.0
    altitude: float = 0.0
    accuracy: float = 0.0
    timestamp: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("fixTime", "timestamp", "deviceTime", "serverTime"),
    )

    @field_validator("id", "device_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> int:
        parsed = safe_int(value)
        if parsed is None:
            raise ValueError("position ids must be integers")
        return parsed

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_coordinates(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("speed", "course", "altitude", "accuracy", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float:
        parsed = safe_float(value)
        return parsed if parsed is not None else 0.0

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    @property
    def coordinate(self) -> Coordinate | None:
        """The fix as a :class:`Coordinate`, or ``None`` when out of range."""
        if self.latitude is None or self.longitude is None:
            return None
        if not is_valid_coordinate(self.latitude, self.longitude):
            return None
        return Coordinate(lat=self.latitude, lng=self.longitude)
