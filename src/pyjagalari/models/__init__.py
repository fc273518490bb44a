"""Data models for Traccar API responses and engine state."""

from pyjagalari.models._base import TraccarModel
from pyjagalari.models.device import Device
from pyjagalari.models.geo import Bounds, Coordinate
from pyjagalari.models.location import (
    GeolocationFix,
    GeolocationOptions,
    LocationErrorKind,
    PersistedLocation,
    SelfLocationState,
)
from pyjagalari.models.position import Position
from pyjagalari.models.track import ParsedTrack, TrackOverlayState, TrackStatus

__all__ = [
    "Bounds",
    "Coordinate",
    "Device",
    "GeolocationFix",
    "GeolocationOptions",
    "LocationErrorKind",
    "ParsedTrack",
    "PersistedLocation",
    "Position",
    "SelfLocationState",
    "TrackOverlayState",
    "TrackStatus",
    "TraccarModel",
]
