"""Per-device "recently here" indicators.

Only the latest position of each device is known, so a trail is a
fixed-radius disc at that position rather than a path.  Each device keeps
the same color for the whole session: ``palette[device_id % len(palette)]``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pyjagalari._constants import TRAIL_PALETTE, TRAIL_RADIUS_METERS
from pyjagalari.engine.surface import CircleShape, MapSurface
from pyjagalari.models.device import Device
from pyjagalari.models.position import Position
from pyjagalari.state.snapshot import resolve_pairs

_logger = logging.getLogger(__name__)


@dataclass
class TrailEntry:
    device_id: int
    color_index: int
    handle: Any


class TrailOverlayManager:
    """Owns trail shapes; toggled globally on or off."""

    def __init__(
        self,
        surface: MapSurface,
        *,
        palette: Sequence[str] = TRAIL_PALETTE,
        radius_m: float = TRAIL_RADIUS_METERS,
    ) -> None:
        if not palette:
            raise ValueError("trail palette must not be empty")
        self._surface = surface
        self._palette = tuple(palette)
        self._radius_m = radius_m
        self._enabled = False
        self._entries: dict[int, TrailEntry] = {}

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def entries(self) -> Mapping[int, TrailEntry]:
        return MappingProxyType(self._entries)

    def color_index(self, device_id: int) -> int:
        return device_id % len(self._palette)

    def set_enabled(
        self,
        enabled: bool,
        devices: Sequence[Device] = (),
        positions: Sequence[Position] = (),
    ) -> None:
        """Toggle trails; enabling draws from the given snapshot."""
        if enabled == self._enabled:
            return
        self._enabled = enabled
        if enabled:
            _logger.debug("Trails enabled")
            self.refresh(devices, positions)
        else:
            _logger.debug("Trails disabled; removing %d", len(self._entries))
            self.clear()

    def refresh(self, devices: Sequence[Device], positions: Sequence[Position]) -> None:
        """Redraw each device's indicator at its latest position.

        Each entry is replaced individually.  Devices missing from the
        snapshot lose their indicator.  No-op while disabled.
        """
        if not self._enabled:
            return

        seen: set[int] = set()
        for device, position in resolve_pairs(devices, positions):
            coordinate = position.coordinate
            if coordinate is None:
                continue
            seen.add(device.id)
            self._remove(device.id)
            index = self.color_index(device.id)
            handle = self._surface.add_shape(
                CircleShape(center=coordinate, radius_m=self._radius_m, color=self._palette[index])
            )
            self._entries[device.id] = TrailEntry(device_id=device.id, color_index=index, handle=handle)

        for device_id in [key for key in self._entries if key not in seen]:
            self._remove(device_id)

    def _remove(self, device_id: int) -> None:
        entry = self._entries.pop(device_id, None)
        if entry is not None:
            self._surface.remove_shape(entry.handle)

    def clear(self) -> None:
        for entry in self._entries.values():
            self._surface.remove_shape(entry.handle)
        self._entries.clear()
