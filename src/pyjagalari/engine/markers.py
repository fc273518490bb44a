"""Marker reconciliation.

:class:`MarkerReconciler` owns the mapping from device id to rendered
marker.  Each snapshot is diffed against that mapping by device id:

* ids only in the current mapping are removed (handle released),
* ids only in the snapshot are created,
* ids in both are updated in place, keeping the render handle so that
  popups and other interaction state attached to it survive.

Removals are always applied before creations within one pass, so the
surface never shows two markers for the same device.  The viewport is
recomputed afterwards; a failure there only degrades the viewport, never
the marker set.

The reconciler also renders the operator's own location as a sentinel
marker keyed by :data:`SELF_LOCATION_ID`, outside the device id space.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from pyjagalari._constants import (
    BOUNDS_PADDING,
    DEFAULT_CENTER,
    DEFAULT_ZOOM,
    SELF_LOCATION_COLOR,
    SELF_LOCATION_ID,
    SINGLE_POINT_ZOOM,
)
from pyjagalari.engine.classify import DeviceCategory, classify, is_online, marker_icon, marker_label
from pyjagalari.engine.surface import MapSurface, MarkerIcon
from pyjagalari.models.device import Device
from pyjagalari.models.geo import Bounds, Coordinate
from pyjagalari.models.position import Position
from pyjagalari.state.snapshot import resolve_pairs

_logger = logging.getLogger(__name__)

SELF_LOCATION_ICON = MarkerIcon(glyph="🧍", color=SELF_LOCATION_COLOR)


@dataclass
class MarkerEntry:
    """A rendered marker and the state it was last rendered from."""

    device_id: int
    category: DeviceCategory | None
    online: bool
    coordinate: Coordinate
    label: str
    handle: Any


class ViewportMode(StrEnum):
    FIT = "fit"
    CENTER = "center"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ViewportDecision:
    mode: ViewportMode
    center: Coordinate | None = None
    zoom: int | None = None
    bounds: Bounds | None = None


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """What one reconciliation pass did, by device id."""

    created: tuple[int, ...]
    updated: tuple[int, ...]
    removed: tuple[int, ...]
    viewport: ViewportDecision


@dataclass(frozen=True, slots=True)
class _Desired:
    category: DeviceCategory
    online: bool
    coordinate: Coordinate
    label: str


def _desired_markers(devices: Sequence[Device], positions: Sequence[Position]) -> dict[int, _Desired]:
    desired: dict[int, _Desired] = {}
    for device, position in resolve_pairs(devices, positions):
        coordinate = position.coordinate
        if coordinate is None:
            _logger.debug("Device %d has no usable coordinate; skipping", device.id)
            continue
        desired[device.id] = _Desired(
            category=classify(device.name),
            online=is_online(device.status),
            coordinate=coordinate,
            label=marker_label(device.name),
        )
    return desired


class MarkerReconciler:
    """Diff-and-apply owner of device markers and the self-location sentinel."""

    def __init__(
        self,
        surface: MapSurface,
        *,
        padding: float = BOUNDS_PADDING,
        single_point_zoom: int = SINGLE_POINT_ZOOM,
        default_center: tuple[float, float] = DEFAULT_CENTER,
        default_zoom: int = DEFAULT_ZOOM,
    ) -> None:
        self._surface = surface
        self._padding = padding
        self._single_point_zoom = single_point_zoom
        self._default_center = Coordinate(lat=default_center[0], lng=default_center[1])
        self._default_zoom = default_zoom
        self._entries: dict[int, MarkerEntry] = {}
        self._self_entry: MarkerEntry | None = None

    @property
    def entries(self) -> Mapping[int, MarkerEntry]:
        """Read-only view of device markers keyed by device id."""
        return MappingProxyType(self._entries)

    @property
    def self_marker(self) -> MarkerEntry | None:
        return self._self_entry

    def reconcile(self, devices: Sequence[Device], positions: Sequence[Position]) -> ReconcileResult:
        """Bring the rendered markers in line with one snapshot."""
        desired = _desired_markers(devices, positions)

        removed: list[int] = []
        for device_id in [key for key in self._entries if key not in desired]:
            entry = self._entries.pop(device_id)
            self._surface.remove_marker(entry.handle)
            removed.append(device_id)

        created: list[int] = []
        updated: list[int] = []
        for device_id, want in desired.items():
            icon = marker_icon(want.category, want.online)
            entry = self._entries.get(device_id)
            if entry is None:
                handle = self._surface.add_marker(want.coordinate, icon, want.label)
                self._entries[device_id] = MarkerEntry(
                    device_id=device_id,
                    category=want.category,
                    online=want.online,
                    coordinate=want.coordinate,
                    label=want.label,
                    handle=handle,
                )
                created.append(device_id)
                continue
            self._surface.update_marker(entry.handle, want.coordinate, icon, want.label)
            entry.category = want.category
            entry.online = want.online
            entry.coordinate = want.coordinate
            entry.label = want.label
            updated.append(device_id)

        viewport = self._update_viewport([want.coordinate for want in desired.values()])

        if created or removed:
            _logger.debug(
                "Reconciled markers: created=%s removed=%s updated=%d",
                created,
                removed,
                len(updated),
            )
        return ReconcileResult(
            created=tuple(created),
            updated=tuple(updated),
            removed=tuple(removed),
            viewport=viewport,
        )

    def _update_viewport(self, coordinates: list[Coordinate]) -> ViewportDecision:
        if not coordinates:
            self._surface.set_view(self._default_center, self._default_zoom)
            return ViewportDecision(ViewportMode.DEFAULT, center=self._default_center, zoom=self._default_zoom)

        first = coordinates[0]
        try:
            bounds = Bounds.from_points(coordinates).pad(self._padding)
            if not bounds.is_degenerate:
                self._surface.fit_bounds(bounds)
                return ViewportDecision(ViewportMode.FIT, bounds=bounds)
        except Exception:
            _logger.warning("Fitting markers failed; centering on first marker", exc_info=True)

        self._surface.set_view(first, self._single_point_zoom)
        return ViewportDecision(ViewportMode.CENTER, center=first, zoom=self._single_point_zoom)

    # ------------------------------------------------------------------
    # Self-location sentinel
    # ------------------------------------------------------------------

    def place_self_marker(self, coordinate: Coordinate, accuracy_m: float | None = None) -> MarkerEntry:
        """Create the sentinel marker once, then update it in place."""
        label = "You" if accuracy_m is None else f"You (±{accuracy_m:.0f} m)"
        entry = self._self_entry
        if entry is None:
            handle = self._surface.add_marker(coordinate, SELF_LOCATION_ICON, label)
            entry = MarkerEntry(
                device_id=SELF_LOCATION_ID,
                category=None,
                online=True,
                coordinate=coordinate,
                label=label,
                handle=handle,
            )
            self._self_entry = entry
            return entry
        self._surface.update_marker(entry.handle, coordinate, SELF_LOCATION_ICON, label)
        entry.coordinate = coordinate
        entry.label = label
        return entry

    def remove_self_marker(self) -> None:
        entry = self._self_entry
        self._self_entry = None
        if entry is not None:
            self._surface.remove_marker(entry.handle)

    def clear(self) -> None:
        """Release every handle this reconciler owns."""
        for entry in self._entries.values():
            self._surface.remove_marker(entry.handle)
        self._entries.clear()
        self.remove_self_marker()
