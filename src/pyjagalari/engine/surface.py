"""Abstract map rendering surface.

The engine never talks to a mapping library directly.  It drives a
:class:`MapSurface`: add/update/remove markers, add/remove shapes, fit or
set the viewport.  Handles returned by ``add_*`` are opaque to the engine
and are only ever passed back to the surface by the component that
created them.

:class:`InMemorySurface` is a complete implementation that keeps the
rendered scene as plain data; it backs headless sessions and the tests.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Protocol

from pyjagalari.models.geo import Bounds, Coordinate


@dataclass(frozen=True, slots=True)
class MarkerIcon:
    """Visual description of a marker."""

    glyph: str
    color: str


@dataclass(frozen=True, slots=True)
class CircleShape:
    center: Coordinate
    radius_m: float
    color: str
    fill_opacity: float = 0.2


@dataclass(frozen=True, slots=True)
class PolylineShape:
    points: tuple[Coordinate, ...]
    color: str
    weight: int = 4


Shape = CircleShape | PolylineShape


class MapSurface(Protocol):
    """Structural interface of a map renderer."""

    def add_marker(self, coordinate: Coordinate, icon: MarkerIcon, label: str) -> Any:
        ...

    def update_marker(self, handle: Any, coordinate: Coordinate, icon: MarkerIcon, label: str) -> None:
        ...

    def remove_marker(self, handle: Any) -> None:
        ...

    def add_shape(self, shape: Shape) -> Any:
        ...

    def remove_shape(self, handle: Any) -> None:
        ...

    def fit_bounds(self, bounds: Bounds) -> None:
        ...

    def set_view(self, center: Coordinate, zoom: int) -> None:
        ...

    def get_bounds(self) -> Bounds | None:
        ...


@dataclass
class RenderedMarker:
    coordinate: Coordinate
    icon: MarkerIcon
    label: str


@dataclass
class Viewport:
    center: Coordinate | None = None
    zoom: int | None = None
    bounds: Bounds | None = None


@dataclass
class InMemorySurface:
    """Map surface that records the rendered scene and an operation log.

    ``operations`` lists ``(name, handle)`` tuples in call order, which is
    what ordering assertions (removal before creation) inspect.
    """

    markers: dict[int, RenderedMarker] = field(default_factory=dict)
    shapes: dict[int, Shape] = field(default_factory=dict)
    viewport: Viewport = field(default_factory=Viewport)
    operations: list[tuple[str, int | None]] = field(default_factory=list)
    _handles: itertools.count = field(default_factory=lambda: itertools.count(1), repr=False)

    def add_marker(self, coordinate: Coordinate, icon: MarkerIcon, label: str) -> int:
        handle = next(self._handles)
        self.markers[handle] = RenderedMarker(coordinate=coordinate, icon=icon, label=label)
        self.operations.append(("add_marker", handle))
        return handle

    def update_marker(self, handle: int, coordinate: Coordinate, icon: MarkerIcon, label: str) -> None:
        marker = self.markers.get(handle)
        if marker is None:
            raise KeyError(f"unknown marker handle {handle}")
        marker.coordinate = coordinate
        marker.icon = icon
        marker.label = label
        self.operations.append(("update_marker", handle))

    def remove_marker(self, handle: int) -> None:
        self.markers.pop(handle, None)
        self.operations.append(("remove_marker", handle))

    def add_shape(self, shape: Shape) -> int:
        handle = next(self._handles)
        self.shapes[handle] = shape
        self.operations.append(("add_shape", handle))
        return handle

    def remove_shape(self, handle: int) -> None:
        self.shapes.pop(handle, None)
        self.operations.append(("remove_shape", handle))

    def fit_bounds(self, bounds: Bounds) -> None:
        self.viewport = Viewport(center=bounds.center, zoom=None, bounds=bounds)
        self.operations.append(("fit_bounds", None))

    def set_view(self, center: Coordinate, zoom: int) -> None:
        self.viewport = Viewport(center=center, zoom=zoom, bounds=None)
        self.operations.append(("set_view", None))

    def get_bounds(self) -> Bounds | None:
        return self.viewport.bounds

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.operations if name == operation)

    def reset_log(self) -> None:
        self.operations.clear()
