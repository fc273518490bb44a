"""Self-location models: platform fixes, live state and the persisted record."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyjagalari._constants import GEOLOCATION_MAX_AGE_SECONDS, GEOLOCATION_TIMEOUT_SECONDS, LOCATED_ZOOM
from pyjagalari.ingestion.normalize import parse_timestamp
from pyjagalari.models.geo import Coordinate


class LocationErrorKind(StrEnum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class GeolocationOptions(BaseModel):
    """Options for a single-shot platform position request."""

    model_config = ConfigDict(frozen=True)

    enable_high_accuracy: bool = True
    timeout: float = GEOLOCATION_TIMEOUT_SECONDS
    maximum_age: float = GEOLOCATION_MAX_AGE_SECONDS


class GeolocationFix(BaseModel):
    """A successful platform position result."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    accuracy_m: float | None = None
    timestamp: datetime | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.latitude, lng=self.longitude)


class SelfLocationState(BaseModel):
    """Live self-location state owned by the self-location manager."""

    model_config = ConfigDict(extra="forbid")

    coordinate: Coordinate | None = None
    accuracy_m: float | None = None
    captured_at: datetime | None = None
    acquisition_in_flight: bool = False
    last_error: LocationErrorKind | None = None
    error_message: str | None = None


class PersistedLocation(BaseModel):
    """Self-location record written to durable client storage.

    Serialized with the short camelCase keys used by the dashboard:
    ``{"lat", "lng", "zoomHint", "capturedAt", "accuracyMeters"}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)
    zoom_hint: int = Field(default=LOCATED_ZOOM, alias="zoomHint")
    captured_at: datetime = Field(alias="capturedAt")
    accuracy_m: float | None = Field(default=None, alias="accuracyMeters")

    @field_validator("captured_at", mode="before")
    @classmethod
    def _coerce_captured_at(cls, value: Any) -> datetime:
        parsed = parse_timestamp(value)
        if parsed is None:
            raise ValueError("capturedAt must be a timestamp")
        return parsed

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)

    @classmethod
    def from_state(cls, state: SelfLocationState, *, zoom_hint: int = LOCATED_ZOOM) -> PersistedLocation:
        if state.coordinate is None or state.captured_at is None:
            raise ValueError("self-location state has no fix to persist")
        return cls(
            lat=state.coordinate.lat,
            lng=state.coordinate.lng,
            zoom_hint=zoom_hint,
            captured_at=state.captured_at,
            accuracy_m=state.accuracy_m,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
