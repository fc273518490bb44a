"""Operator self-location: acquisition, persistence and restore.

Only one platform position request may be outstanding at a time; a
second :meth:`SelfLocationManager.acquire` while one is in flight is
rejected, not queued.  A failed acquisition keeps the last good fix.

The last fix is persisted to durable storage and restored at startup,
seeding both the viewport and the self-location marker before any live
fix arrives.  Restored fixes never expire.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol

from pydantic import ValidationError

from pyjagalari._constants import LOCATED_ZOOM, STORAGE_SELF_LOCATION
from pyjagalari.engine.markers import MarkerReconciler
from pyjagalari.engine.surface import MapSurface
from pyjagalari.exceptions import GeolocationError
from pyjagalari.models.location import (
    GeolocationFix,
    GeolocationOptions,
    LocationErrorKind,
    PersistedLocation,
    SelfLocationState,
)
from pyjagalari.storage import KeyValueStore

_logger = logging.getLogger(__name__)


class Geolocator(Protocol):
    """Platform location service: one position per call."""

    async def request_position(self, options: GeolocationOptions) -> GeolocationFix:
        ...


_CODE_TO_KIND: dict[int, LocationErrorKind] = {
    1: LocationErrorKind.PERMISSION_DENIED,
    2: LocationErrorKind.POSITION_UNAVAILABLE,
    3: LocationErrorKind.TIMEOUT,
}

_MESSAGES: dict[LocationErrorKind, str] = {
    LocationErrorKind.PERMISSION_DENIED: "Location permission denied. Allow location access and try again.",
    LocationErrorKind.POSITION_UNAVAILABLE: "Your location is currently unavailable.",
    LocationErrorKind.TIMEOUT: "Timed out while getting your location.",
    LocationErrorKind.UNKNOWN: "An unknown error occurred while getting your location.",
}


def classify_geolocation_error(exc: BaseException) -> LocationErrorKind:
    if isinstance(exc, GeolocationError):
        return _CODE_TO_KIND.get(exc.code, LocationErrorKind.UNKNOWN)
    if isinstance(exc, TimeoutError):
        return LocationErrorKind.TIMEOUT
    return LocationErrorKind.UNKNOWN


def error_message(kind: LocationErrorKind) -> str:
    return _MESSAGES[kind]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SelfLocationManager:
    def __init__(
        self,
        geolocator: Geolocator | None,
        storage: KeyValueStore,
        surface: MapSurface,
        markers: MarkerReconciler,
        *,
        options: GeolocationOptions | None = None,
        located_zoom: int = LOCATED_ZOOM,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._geolocator = geolocator
        self._storage = storage
        self._surface = surface
        self._markers = markers
        self._options = options or GeolocationOptions()
        self._located_zoom = located_zoom
        self._clock = clock
        self._state = SelfLocationState()

    @property
    def state(self) -> SelfLocationState:
        return self._state

    async def acquire(self) -> bool:
        """Request one fix from the platform.

        Returns ``True`` when a new fix was applied.  Returns ``False``
        without touching the platform if a request is already in flight,
        and ``False`` after recording the classified error on failure.
        """
        if self._state.acquisition_in_flight:
            _logger.debug("Location request already in flight; ignoring")
            return False

        if self._geolocator is None:
            self._fail(LocationErrorKind.POSITION_UNAVAILABLE, "Location services are not available.")
            return False

        self._state.acquisition_in_flight = True
        try:
            fix = await self._geolocator.request_position(self._options)
        except Exception as exc:
            kind = classify_geolocation_error(exc)
            self._fail(kind, error_message(kind))
            _logger.warning("Location request failed (%s): %s", kind, exc)
            return False
        finally:
            self._state.acquisition_in_flight = False

        self._state.coordinate = fix.coordinate
        self._state.accuracy_m = fix.accuracy_m
        self._state.captured_at = fix.timestamp or self._clock()
        self._state.last_error = None
        self._state.error_message = None

        self.persist(self._state)
        self._surface.set_view(fix.coordinate, self._located_zoom)
        self._markers.place_self_marker(fix.coordinate, fix.accuracy_m)
        return True

    def _fail(self, kind: LocationErrorKind, message: str) -> None:
        self._state.last_error = kind
        self._state.error_message = message

    def persist(self, state: SelfLocationState) -> None:
        """Write *state*'s fix to durable storage; storage errors are logged."""
        try:
            record = PersistedLocation.from_state(state, zoom_hint=self._located_zoom)
        except ValueError:
            _logger.debug("No fix to persist")
            return
        try:
            self._storage.set(STORAGE_SELF_LOCATION, record.to_json())
        except OSError:
            _logger.warning("Could not persist self location", exc_info=True)

    def restore(self) -> SelfLocationState | None:
        """Seed state, viewport and marker from the persisted fix, if any."""
        raw = self._storage.get(STORAGE_SELF_LOCATION)
        if raw is None:
            return None
        try:
            record = PersistedLocation.model_validate_json(raw)
        except ValidationError:
            _logger.warning("Ignoring corrupt persisted self location")
            return None

        self._state.coordinate = record.coordinate
        self._state.accuracy_m = record.accuracy_m
        self._state.captured_at = record.captured_at
        self._surface.set_view(record.coordinate, record.zoom_hint)
        self._markers.place_self_marker(record.coordinate, record.accuracy_m)
        _logger.debug("Restored self location captured at %s", record.captured_at.isoformat())
        return self._state

    def forget(self) -> None:
        """Drop the persisted fix and the self-location marker."""
        self._storage.remove(STORAGE_SELF_LOCATION)
        self._markers.remove_self_marker()
        self._state = SelfLocationState(acquisition_in_flight=self._state.acquisition_in_flight)
