"""Device classification: category from display name, online flag from status."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from pyjagalari._constants import LABEL_MAX_CHARS, OFFLINE_COLOR, ONLINE_COLOR
from pyjagalari.engine.surface import MarkerIcon
from pyjagalari.models.device import Device


class DeviceCategory(StrEnum):
    AMBULANCE = "ambulance"
    MOTORBIKE = "motorbike"
    GENERIC = "generic"


# Ordered; first match wins.
_CATEGORY_RULES: tuple[tuple[str, DeviceCategory], ...] = (
    ("ambulance", DeviceCategory.AMBULANCE),
    ("motor mobile", DeviceCategory.MOTORBIKE),
    ("motor", DeviceCategory.MOTORBIKE),
)

_GLYPHS: dict[DeviceCategory, str] = {
    DeviceCategory.AMBULANCE: "🚑",
    DeviceCategory.MOTORBIKE: "🏍️",
    DeviceCategory.GENERIC: "📍",
}


def classify(name: str) -> DeviceCategory:
    lowered = name.lower()
    for needle, category in _CATEGORY_RULES:
        if needle in lowered:
            return category
    return DeviceCategory.GENERIC


def is_online(status: str) -> bool:
    return status == "online"


def marker_icon(category: DeviceCategory, online: bool) -> MarkerIcon:
    return MarkerIcon(glyph=_GLYPHS[category], color=ONLINE_COLOR if online else OFFLINE_COLOR)


def marker_label(name: str) -> str:
    """Marker caption: the display name, truncated to twelve characters."""
    if len(name) > LABEL_MAX_CHARS:
        return name[:LABEL_MAX_CHARS] + "..."
    return name


@dataclass(frozen=True, slots=True)
class FleetSummary:
    """Headline fleet counters shown next to the map."""

    total: int = 0
    ambulance: int = 0
    motorbike: int = 0
    online: int = 0
    offline: int = 0


def summarize_fleet(devices: Iterable[Device]) -> FleetSummary:
    """Count devices per name keyword and status.

    The headline counters are keyword tallies, not marker categories:
    a device is an ambulance when its name contains "ambulance" and a
    motorbike when it contains "motor", so "Ambulance Motor 1" counts
    under both while its marker still classifies as an ambulance.

    ``offline`` counts only devices reporting ``"offline"``; a device in
    ``"unknown"`` state is neither online nor offline here even though
    its marker is drawn with the offline color.
    """
    total = ambulance = motorbike = online = offline = 0
    for device in devices:
        total += 1
        name = device.name.lower()
        if "ambulance" in name:
            ambulance += 1
        if "motor" in name:
            motorbike += 1
        if is_online(device.status):
            online += 1
        elif device.status == "offline":
            offline += 1
    return FleetSummary(total=total, ambulance=ambulance, motorbike=motorbike, online=online, offline=offline)
