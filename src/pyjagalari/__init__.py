"""pyjagalari - Live fleet map reconciliation for Traccar telemetry."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyjagalari")
except PackageNotFoundError:
    __version__ = "0+local"
from pyjagalari.client import TraccarClient
from pyjagalari.config import TrackerConfig
from pyjagalari.engine import (
    DeviceCategory,
    FleetSummary,
    InMemorySurface,
    MapSurface,
    MarkerReconciler,
    SelfLocationManager,
    TrackOverlayManager,
    TrailOverlayManager,
)
from pyjagalari.exceptions import (
    GeolocationError,
    JagalariConfigError,
    JagalariError,
    TelemetryAuthenticationError,
    TelemetryTransportError,
    TrackDocumentError,
    TrackRenderError,
)
from pyjagalari.models import (
    Bounds,
    Coordinate,
    Device,
    GeolocationFix,
    LocationErrorKind,
    Position,
    TrackStatus,
)
from pyjagalari.session import TrackingSession
from pyjagalari.storage import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "__version__",
    "Bounds",
    "Coordinate",
    "Device",
    "DeviceCategory",
    "FleetSummary",
    "GeolocationError",
    "GeolocationFix",
    "InMemorySurface",
    "JagalariConfigError",
    "JagalariError",
    "JsonFileStore",
    "KeyValueStore",
    "LocationErrorKind",
    "MapSurface",
    "MarkerReconciler",
    "MemoryStore",
    "Position",
    "SelfLocationManager",
    "TelemetryAuthenticationError",
    "TelemetryTransportError",
    "TrackDocumentError",
    "TrackRenderError",
    "TrackStatus",
    "TraccarClient",
    "TrackerConfig",
    "TrackOverlayManager",
    "TrackingSession",
    "TrailOverlayManager",
]
