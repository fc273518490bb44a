"""Tracking session: the owning object for all live engine state.

One :class:`TrackingSession` per map.  It owns the snapshot store and the
engine components, drives the poll loop, and applies the error policy:

* authentication failure: banner flag set, last good snapshot kept
* transport failure: logged, last good snapshot kept
* malformed track document: rejected, no state change
* track render failure: counted by the track overlay's circuit breaker
* location failure: classified on the location state, last fix kept

No failure in one component reaches another, and none ends the session.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime
from typing import Any, Protocol

from pyjagalari._constants import STORAGE_TRACK_DATA, STORAGE_TRACK_FILENAME
from pyjagalari.config import TrackerConfig
from pyjagalari.engine.classify import FleetSummary, summarize_fleet
from pyjagalari.engine.location import Geolocator, SelfLocationManager
from pyjagalari.engine.markers import MarkerReconciler, ReconcileResult
from pyjagalari.engine.surface import MapSurface
from pyjagalari.engine.track import TrackLoader, TrackOverlayManager, load_in_thread
from pyjagalari.engine.trails import TrailOverlayManager
from pyjagalari.exceptions import TelemetryAuthenticationError, TelemetryTransportError, TrackDocumentError
from pyjagalari.models.device import Device
from pyjagalari.models.position import Position
from pyjagalari.models.track import TrackStatus
from pyjagalari.state.snapshot import Snapshot
from pyjagalari.state.store import SnapshotStore
from pyjagalari.storage import KeyValueStore, MemoryStore

_logger = logging.getLogger(__name__)


class SnapshotSource(Protocol):
    async def fetch_snapshot(self) -> tuple[list[Device], list[Position]]:
        ...


class TrackingSession:
    """Live map session with explicit ``init``/``dispose`` lifecycle.

    Usage::

        async with TraccarClient(config) as client:
            async with TrackingSession(client, surface, storage, config=config) as session:
                ...
    """

    def __init__(
        self,
        source: SnapshotSource,
        surface: MapSurface,
        storage: KeyValueStore | None = None,
        geolocator: Geolocator | None = None,
        *,
        config: TrackerConfig | None = None,
        track_loader: TrackLoader = load_in_thread,
    ) -> None:
        self._source = source
        self._storage: KeyValueStore = storage if storage is not None else MemoryStore()
        self._config = config or TrackerConfig()
        self._store = SnapshotStore()
        self.markers = MarkerReconciler(surface)
        self.trails = TrailOverlayManager(surface)
        self.track = TrackOverlayManager(surface, loader=track_loader)
        self.location = SelfLocationManager(geolocator, self._storage, surface, self.markers)
        self._poll_task: asyncio.Task[None] | None = None
        self._auth_error = False
        self._last_result: ReconcileResult | None = None
        self._disposed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TrackingSession:
        await self.init()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.dispose()

    async def init(self, *, start_polling: bool = True) -> None:
        """Restore persisted state, then start the poll loop."""
        if self._disposed:
            raise RuntimeError("session already disposed")

        self.location.restore()

        saved_track = self._storage.get(STORAGE_TRACK_DATA)
        if saved_track:
            await self.track.set_document(saved_track, self._storage.get(STORAGE_TRACK_FILENAME))

        if start_polling and self._poll_task is None:
            self._poll_task = asyncio.create_task(self._poll_loop(), name="pyjagalari-poll")

    async def dispose(self) -> None:
        """Stop polling and release every rendered handle."""
        self._disposed = True
        task = self._poll_task
        self._poll_task = None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self.trails.clear()
        self.track.clear()
        self.markers.clear()

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def _poll_loop(self) -> None:
        # Each poll completes before the next sleep starts, so polls never overlap.
        while True:
            try:
                await self.poll_once()
            except Exception:
                _logger.exception("Unexpected error during telemetry poll")
            await asyncio.sleep(self._config.poll_interval)

    async def poll_once(self) -> bool:
        """Fetch one snapshot and reconcile it; returns whether the map changed state."""
        sequence = self._store.next_sequence()
        try:
            devices, positions = await self._source.fetch_snapshot()
        except TelemetryAuthenticationError as exc:
            if not self._auth_error:
                _logger.error("Telemetry authentication failed; keeping last snapshot: %s", exc)
            self._auth_error = True
            return False
        except TelemetryTransportError as exc:
            _logger.warning("Telemetry poll failed; keeping last snapshot: %s", exc)
            return False

        self._auth_error = False
        snapshot = self._store.build(sequence, devices, positions)
        if not self._store.apply(snapshot):
            return False
        self._render(snapshot)
        return True

    def _render(self, snapshot: Snapshot) -> None:
        self._last_result = self.markers.reconcile(snapshot.devices, snapshot.positions)
        try:
            self.trails.refresh(snapshot.devices, snapshot.positions)
        except Exception:
            _logger.warning("Trail refresh failed", exc_info=True)

    # ------------------------------------------------------------------
    # Trails
    # ------------------------------------------------------------------

    def set_trails_enabled(self, enabled: bool) -> None:
        self.trails.set_enabled(enabled, self._store.devices(), self._store.positions())

    # ------------------------------------------------------------------
    # Track overlay
    # ------------------------------------------------------------------

    async def upload_track(self, raw: str, filename: str) -> TrackStatus:
        """Load an uploaded GPX file and persist it for the next start.

        Raises :class:`TrackDocumentError` for a file without a ``.gpx``
        extension; the overlay is left untouched.
        """
        if not filename.lower().endswith(".gpx"):
            raise TrackDocumentError(f"{filename!r} is not a GPX file", reason="extension")

        status = await self.track.set_document(raw, filename)
        if self.track.state.raw == raw:
            try:
                self._storage.set(STORAGE_TRACK_DATA, raw)
                self._storage.set(STORAGE_TRACK_FILENAME, filename)
            except OSError:
                _logger.warning("Could not persist track document", exc_info=True)
        return status

    def clear_track(self) -> None:
        self.track.clear()
        try:
            self._storage.remove(STORAGE_TRACK_DATA)
            self._storage.remove(STORAGE_TRACK_FILENAME)
        except OSError:
            _logger.warning("Could not remove persisted track document", exc_info=True)

    def fit_to_track(self) -> bool:
        return self.track.fit_to_track()

    def reset_track_breaker(self) -> None:
        self.track.reset_error_count()

    # ------------------------------------------------------------------
    # Self location
    # ------------------------------------------------------------------

    async def locate_me(self) -> bool:
        return await self.location.acquire()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def auth_error(self) -> bool:
        """True while the telemetry service rejects our credentials."""
        return self._auth_error

    @property
    def snapshot(self) -> Snapshot | None:
        return self._store.current

    @property
    def last_update(self) -> datetime | None:
        return self._store.last_update

    @property
    def last_result(self) -> ReconcileResult | None:
        return self._last_result

    @property
    def summary(self) -> FleetSummary:
        return summarize_fleet(self._store.devices())

    @property
    def track_filename(self) -> str | None:
        return self.track.state.filename or self._storage.get(STORAGE_TRACK_FILENAME)

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()
