"""Externally supplied track overlay (GPX) with a failure circuit breaker.

State machine::

    EMPTY -> RENDERING -> LOADED
                       -> FAILED
    any   -> EMPTY                  (explicit clear)
    any   -> DISABLED               (consecutive_error_count reached threshold)

Once disabled, new documents are stored but never rendered until the
hosting session resets the counter.  Clearing the overlay does not reset
the counter: it tracks how reliable uploads have been over the session.

The overlay is never fitted on load; the viewport only moves through
:meth:`TrackOverlayManager.fit_to_track`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from io import StringIO

import gpxpy
import gpxpy.gpx

from pyjagalari._constants import (
    DEFAULT_ZOOM,
    TRACK_ERROR_THRESHOLD,
    TRACK_LINE_COLOR,
    TRACK_MIN_DOCUMENT_LENGTH,
    TRACK_ROOT_TOKEN,
)
from pyjagalari.engine.surface import CircleShape, MapSurface, PolylineShape
from pyjagalari.exceptions import TrackDocumentError, TrackRenderError
from pyjagalari.models.geo import Bounds, Coordinate
from pyjagalari.models.track import ParsedTrack, TrackOverlayState, TrackStatus

_logger = logging.getLogger(__name__)

_SINGLE_POINT_RADIUS_M = 25.0

TrackLoader = Callable[[str], Awaitable[ParsedTrack]]


def validate_track_document(raw: str) -> None:
    """Cheap structural check run before any parse attempt.

    Raises :class:`TrackDocumentError` when the document is too short or
    lacks the ``<gpx`` root element.
    """
    text = raw.strip()
    if len(text) < TRACK_MIN_DOCUMENT_LENGTH:
        raise TrackDocumentError(
            f"track document too short ({len(text)} < {TRACK_MIN_DOCUMENT_LENGTH} characters)",
            reason="too_short",
        )
    if TRACK_ROOT_TOKEN not in text.lower():
        raise TrackDocumentError("track document has no <gpx> root element", reason="missing_root")


def parse_track_document(raw: str) -> ParsedTrack:
    """Extract line geometry from a GPX document.

    Track segments are preferred; documents without tracks fall back to
    routes, then to waypoints.  A document with no coordinates at all is
    a render failure.
    """
    try:
        gpx = gpxpy.parse(StringIO(raw))
    except gpxpy.gpx.GPXException as exc:
        raise TrackRenderError(f"invalid GPX: {exc}") from exc

    lines: list[list[Coordinate]] = []
    for track in gpx.tracks:
        for segment in track.segments:
            points = [Coordinate(lat=p.latitude, lng=p.longitude) for p in segment.points]
            if points:
                lines.append(points)

    if not lines:
        for route in gpx.routes:
            points = [Coordinate(lat=p.latitude, lng=p.longitude) for p in route.points]
            if points:
                lines.append(points)

    if not lines and gpx.waypoints:
        lines.append([Coordinate(lat=w.latitude, lng=w.longitude) for w in gpx.waypoints])

    if not lines:
        raise TrackRenderError("no coordinates found in GPX")

    name = gpx.name or next((track.name for track in gpx.tracks if track.name), None)
    return ParsedTrack(name=name, lines=lines)


async def load_in_thread(raw: str) -> ParsedTrack:
    return await asyncio.to_thread(parse_track_document, raw)


class TrackOverlayManager:
    """Owns the single track overlay layer on the map surface."""

    def __init__(
        self,
        surface: MapSurface,
        *,
        loader: TrackLoader = load_in_thread,
        error_threshold: int = TRACK_ERROR_THRESHOLD,
    ) -> None:
        self._surface = surface
        self._loader = loader
        self._error_threshold = error_threshold
        self._state = TrackOverlayState()
        # Bumped on every new document or clear; stale loads are dropped.
        self._generation = 0

    @property
    def state(self) -> TrackOverlayState:
        return self._state

    @property
    def status(self) -> TrackStatus:
        return self._state.status

    @property
    def bounds(self) -> Bounds | None:
        return self._state.bounds

    async def set_document(self, raw: str | None, filename: str | None = None) -> TrackStatus:
        """Replace the overlay with *raw*; ``None`` or blank clears it."""
        if raw is None or not raw.strip():
            self.clear()
            return self._state.status

        try:
            validate_track_document(raw)
        except TrackDocumentError as exc:
            self._state.last_rejection = exc.reason
            _logger.warning("Rejected track document %s: %s", filename or "<unnamed>", exc)
            return self._state.status

        self._teardown()
        self._generation += 1
        generation = self._generation
        self._state.raw = raw
        self._state.filename = filename
        self._state.bounds = None
        self._state.last_rejection = None

        if self._state.consecutive_error_count >= self._error_threshold:
            self._state.status = TrackStatus.DISABLED
            _logger.warning(
                "Track overlay disabled after %d failures; not rendering %s",
                self._state.consecutive_error_count,
                filename or "<unnamed>",
            )
            return self._state.status

        self._state.status = TrackStatus.RENDERING
        try:
            parsed = await self._loader(raw)
        except Exception as exc:
            if generation != self._generation:
                return self._state.status
            return self._record_failure(exc)

        if generation != self._generation:
            _logger.debug("Discarding superseded track load (generation %d)", generation)
            return self._state.status

        try:
            self._render(parsed)
        except Exception as exc:
            self._teardown()
            return self._record_failure(exc)

        self._state.bounds = Bounds.from_points(parsed.points())
        self._state.status = TrackStatus.LOADED
        _logger.debug(
            "Track %s loaded: %d lines, %d points",
            filename or parsed.name or "<unnamed>",
            len(parsed.lines),
            parsed.point_count,
        )
        return self._state.status

    def _render(self, parsed: ParsedTrack) -> None:
        for line in parsed.lines:
            if len(line) == 1:
                shape: CircleShape | PolylineShape = CircleShape(
                    center=line[0], radius_m=_SINGLE_POINT_RADIUS_M, color=TRACK_LINE_COLOR
                )
            else:
                shape = PolylineShape(points=tuple(line), color=TRACK_LINE_COLOR)
            self._state.handles.append(self._surface.add_shape(shape))

    def _record_failure(self, exc: Exception) -> TrackStatus:
        self._state.consecutive_error_count += 1
        count = self._state.consecutive_error_count
        if count >= self._error_threshold:
            self._state.status = TrackStatus.DISABLED
        else:
            self._state.status = TrackStatus.FAILED
        _logger.warning(
            "Track render failed (%d/%d): %s",
            count,
            self._error_threshold,
            exc,
            exc_info=not isinstance(exc, TrackRenderError),
        )
        return self._state.status

    def fit_to_track(self) -> bool:
        """Fit the viewport to the loaded track; returns False if nothing to fit."""
        bounds = self._state.bounds
        if bounds is None:
            return False
        if bounds.is_degenerate:
            self._surface.set_view(bounds.center, DEFAULT_ZOOM)
            return True
        try:
            self._surface.fit_bounds(bounds)
        except Exception:
            _logger.warning("Fitting track failed; centering on its centroid", exc_info=True)
            self._surface.set_view(bounds.center, DEFAULT_ZOOM)
        return True

    def _teardown(self) -> None:
        handles = self._state.handles
        self._state.handles = []
        for handle in handles:
            self._surface.remove_shape(handle)

    def clear(self) -> None:
        """Remove the overlay; the error counter is kept."""
        self._generation += 1
        self._teardown()
        self._state.raw = None
        self._state.filename = None
        self._state.bounds = None
        self._state.status = TrackStatus.EMPTY

    def reset_error_count(self) -> None:
        """Re-arm the circuit breaker.

        Only the hosting session calls this.  The status is left alone; the
        next :meth:`set_document` renders normally.
        """
        self._state.consecutive_error_count = 0
