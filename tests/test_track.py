from __future__ import annotations

import asyncio

import pytest

from pyjagalari._constants import DEFAULT_ZOOM, TRACK_ERROR_THRESHOLD
from pyjagalari.engine.surface import CircleShape, InMemorySurface, PolylineShape, Shape
from pyjagalari.engine.track import TrackOverlayManager, parse_track_document, validate_track_document
from pyjagalari.exceptions import TrackDocumentError, TrackRenderError
from pyjagalari.models.geo import Bounds, Coordinate
from pyjagalari.models.track import ParsedTrack, TrackStatus

_GPX = """<gpx version="1.1" creator="pyjagalari-tests" xmlns="http://www.topografix.com/GPX/1/1">
  <trk>
    <name>Patrol route</name>
    <trkseg>
      <trkpt lat="-6.20" lon="106.80"></trkpt>
      <trkpt lat="-6.25" lon="106.85"></trkpt>
      <trkpt lat="-6.30" lon="106.90"></trkpt>
    </trkseg>
  </trk>
</gpx>
"""

_WAYPOINT_GPX = """<gpx version="1.1" creator="pyjagalari-tests" xmlns="http://www.topografix.com/GPX/1/1">
  <wpt lat="-6.1" lon="106.7"><name>Depot</name></wpt>
</gpx>
"""

# Structurally plausible (long enough, has the root token) but not XML.
_BROKEN_GPX = "<gpx version='1.1'>" + "<trkpt lat='-6.2' lon='106.8'" * 5


class _FakeLoader:
    def __init__(self, track: ParsedTrack | None = None, error: Exception | None = None) -> None:
        self.track = track
        self.error = error
        self.calls = 0

    async def __call__(self, raw: str) -> ParsedTrack:
        self.calls += 1
        if self.error is not None:
            raise self.error
        assert self.track is not None
        return self.track


class _BlockingLoader:
    def __init__(self, track: ParsedTrack) -> None:
        self.track = track
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def __call__(self, raw: str) -> ParsedTrack:
        self.started.set()
        await self.release.wait()
        return self.track


class _FailingShapeSurface(InMemorySurface):
    def add_shape(self, shape: Shape) -> int:
        raise RuntimeError("renderer rejected geometry")


class _FailingFitSurface(InMemorySurface):
    def fit_bounds(self, bounds: Bounds) -> None:
        raise RuntimeError("renderer refused bounds")


def _line_track() -> ParsedTrack:
    return ParsedTrack(
        name="Patrol",
        lines=[[Coordinate(lat=-6.2, lng=106.8), Coordinate(lat=-6.3, lng=106.9)]],
    )


def _point_track() -> ParsedTrack:
    return ParsedTrack(lines=[[Coordinate(lat=-6.2, lng=106.8)]])


class TestValidation:
    def test_short_document_rejected(self) -> None:
        with pytest.raises(TrackDocumentError) as exc_info:
            validate_track_document("<gpx></gpx>")
        assert exc_info.value.reason == "too_short"

    def test_missing_root_rejected(self) -> None:
        with pytest.raises(TrackDocumentError) as exc_info:
            validate_track_document("<kml>" + "x" * 200 + "</kml>")
        assert exc_info.value.reason == "missing_root"

    def test_valid_document_passes(self) -> None:
        validate_track_document(_GPX)


class TestParsing:
    def test_parse_track_segments(self) -> None:
        parsed = parse_track_document(_GPX)

        assert parsed.name == "Patrol route"
        assert parsed.point_count == 3
        assert parsed.lines[0][0] == Coordinate(lat=-6.2, lng=106.8)

    def test_waypoint_only_document(self) -> None:
        parsed = parse_track_document(_WAYPOINT_GPX)

        assert parsed.points() == [Coordinate(lat=-6.1, lng=106.7)]

    def test_malformed_xml_is_render_error(self) -> None:
        with pytest.raises(TrackRenderError):
            parse_track_document(_BROKEN_GPX)


class TestOverlay:
    @pytest.mark.asyncio
    async def test_load_with_real_parser(self) -> None:
        surface = InMemorySurface()
        overlay = TrackOverlayManager(surface)

        status = await overlay.set_document(_GPX, "patrol.gpx")

        assert status == TrackStatus.LOADED
        assert overlay.state.filename == "patrol.gpx"
        assert len(overlay.state.handles) == 1
        assert isinstance(surface.shapes[overlay.state.handles[0]], PolylineShape)
        assert overlay.bounds == Bounds(south=-6.3, west=106.8, north=-6.2, east=106.9)
        # Loading never moves the viewport.
        assert surface.count("fit_bounds") == 0
        assert surface.count("set_view") == 0

    @pytest.mark.asyncio
    async def test_single_point_line_drawn_as_circle(self) -> None:
        surface = InMemorySurface()
        overlay = TrackOverlayManager(surface, loader=_FakeLoader(_point_track()))

        await overlay.set_document(_GPX)

        assert isinstance(surface.shapes[overlay.state.handles[0]], CircleShape)

    @pytest.mark.asyncio
    async def test_new_document_replaces_previous_layer(self) -> None:
        surface = InMemorySurface()
        overlay = TrackOverlayManager(surface, loader=_FakeLoader(_line_track()))
        await overlay.set_document(_GPX, "a.gpx")
        first_handles = list(overlay.state.handles)

        await overlay.set_document(_GPX, "b.gpx")

        assert all(handle not in surface.shapes for handle in first_handles)
        assert len(surface.shapes) == 1
        assert overlay.state.filename == "b.gpx"

    @pytest.mark.asyncio
    async def test_blank_document_clears(self) -> None:
        surface = InMemorySurface()
        overlay = TrackOverlayManager(surface, loader=_FakeLoader(_line_track()))
        await overlay.set_document(_GPX)

        status = await overlay.set_document("   ")

        assert status == TrackStatus.EMPTY
        assert surface.shapes == {}
        assert overlay.state.raw is None

    @pytest.mark.asyncio
    async def test_structural_rejection_changes_nothing(self) -> None:
        surface = InMemorySurface()
        loader = _FakeLoader(_line_track())
        overlay = TrackOverlayManager(surface, loader=loader)
        await overlay.set_document(_GPX, "good.gpx")

        status = await overlay.set_document("<gpx/>", "tiny.gpx")

        assert status == TrackStatus.LOADED
        assert overlay.state.filename == "good.gpx"
        assert overlay.state.consecutive_error_count == 0
        assert overlay.state.last_rejection == "too_short"
        assert loader.calls == 1
        assert len(surface.shapes) == 1

    @pytest.mark.asyncio
    async def test_render_failure_is_counted_and_torn_down(self) -> None:
        surface = _FailingShapeSurface()
        overlay = TrackOverlayManager(surface, loader=_FakeLoader(_line_track()))

        status = await overlay.set_document(_GPX)

        assert status == TrackStatus.FAILED
        assert overlay.state.consecutive_error_count == 1
        assert overlay.state.handles == []
        assert overlay.bounds is None


class TestCircuitBreaker:
    @pytest.mark.asyncio
    async def test_trips_after_threshold_and_stops_rendering(self) -> None:
        surface = InMemorySurface()
        loader = _FakeLoader(error=TrackRenderError("bad geometry"))
        overlay = TrackOverlayManager(surface, loader=loader)

        statuses = [await overlay.set_document(_GPX) for _ in range(TRACK_ERROR_THRESHOLD)]

        assert statuses == [TrackStatus.FAILED, TrackStatus.FAILED, TrackStatus.DISABLED]

        loader.error = None
        loader.track = _line_track()
        status = await overlay.set_document(_GPX, "fourth.gpx")

        assert status == TrackStatus.DISABLED
        assert overlay.state.raw == _GPX
        assert overlay.state.filename == "fourth.gpx"
        assert loader.calls == TRACK_ERROR_THRESHOLD
        assert surface.shapes == {}

    @pytest.mark.asyncio
    async def test_real_parse_failures_count(self) -> None:
        overlay = TrackOverlayManager(InMemorySurface())

        status = await overlay.set_document(_BROKEN_GPX)

        assert status == TrackStatus.FAILED
        assert overlay.state.consecutive_error_count == 1

    @pytest.mark.asyncio
    async def test_clear_keeps_error_count(self) -> None:
        loader = _FakeLoader(error=TrackRenderError("bad geometry"))
        overlay = TrackOverlayManager(InMemorySurface(), loader=loader)
        await overlay.set_document(_GPX)
        await overlay.set_document(_GPX)

        overlay.clear()

        assert overlay.status == TrackStatus.EMPTY
        assert overlay.state.consecutive_error_count == 2
        assert await overlay.set_document(_GPX) == TrackStatus.DISABLED

    @pytest.mark.asyncio
    async def test_success_does_not_reset_count(self) -> None:
        loader = _FakeLoader(error=TrackRenderError("bad geometry"))
        overlay = TrackOverlayManager(InMemorySurface(), loader=loader)
        await overlay.set_document(_GPX)

        loader.error = None
        loader.track = _line_track()
        assert await overlay.set_document(_GPX) == TrackStatus.LOADED

        assert overlay.state.consecutive_error_count == 1

    @pytest.mark.asyncio
    async def test_reset_rearms_breaker(self) -> None:
        loader = _FakeLoader(error=TrackRenderError("bad geometry"))
        overlay = TrackOverlayManager(InMemorySurface(), loader=loader, error_threshold=1)
        assert await overlay.set_document(_GPX) == TrackStatus.DISABLED

        overlay.reset_error_count()
        loader.error = None
        loader.track = _line_track()

        assert await overlay.set_document(_GPX) == TrackStatus.LOADED


class TestSupersededLoads:
    @pytest.mark.asyncio
    async def test_clear_during_load_discards_result(self) -> None:
        surface = InMemorySurface()
        loader = _BlockingLoader(_line_track())
        overlay = TrackOverlayManager(surface, loader=loader)

        task = asyncio.create_task(overlay.set_document(_GPX))
        await loader.started.wait()
        assert overlay.status == TrackStatus.RENDERING

        overlay.clear()
        loader.release.set()
        status = await task

        assert status == TrackStatus.EMPTY
        assert surface.shapes == {}
        assert overlay.state.consecutive_error_count == 0


class TestFitToTrack:
    def test_nothing_loaded(self) -> None:
        surface = InMemorySurface()
        overlay = TrackOverlayManager(surface)

        assert overlay.fit_to_track() is False
        assert surface.operations == []

    @pytest.mark.asyncio
    async def test_fits_loaded_bounds(self) -> None:
        surface = InMemorySurface()
        overlay = TrackOverlayManager(surface, loader=_FakeLoader(_line_track()))
        await overlay.set_document(_GPX)

        assert overlay.fit_to_track() is True
        assert surface.viewport.bounds == overlay.bounds

    @pytest.mark.asyncio
    async def test_single_point_track_centers(self) -> None:
        surface = InMemorySurface()
        overlay = TrackOverlayManager(surface, loader=_FakeLoader(_point_track()))
        await overlay.set_document(_GPX)

        assert overlay.fit_to_track() is True
        assert surface.count("fit_bounds") == 0
        assert surface.viewport.center == Coordinate(lat=-6.2, lng=106.8)
        assert surface.viewport.zoom == DEFAULT_ZOOM

    @pytest.mark.asyncio
    async def test_fit_failure_centers_on_centroid(self) -> None:
        surface = _FailingFitSurface()
        overlay = TrackOverlayManager(surface, loader=_FakeLoader(_line_track()))
        await overlay.set_document(_GPX)

        assert overlay.fit_to_track() is True
        center = surface.viewport.center
        assert center is not None
        assert center.lat == pytest.approx(-6.25)
        assert center.lng == pytest.approx(106.85)
        assert surface.viewport.zoom == DEFAULT_ZOOM
