"""Live geospatial state reconciliation engine.

Components, each owning its own handles on the shared map surface:

* :mod:`~pyjagalari.engine.classify` - category and online flag per device
* :mod:`~pyjagalari.engine.markers` - device markers and the self-location sentinel
* :mod:`~pyjagalari.engine.trails` - per-device "recently here" indicators
* :mod:`~pyjagalari.engine.track` - uploaded GPX overlay with a circuit breaker
* :mod:`~pyjagalari.engine.location` - operator location acquisition and persistence
"""

from pyjagalari.engine.classify import DeviceCategory, FleetSummary, classify, is_online, summarize_fleet
from pyjagalari.engine.location import Geolocator, SelfLocationManager
from pyjagalari.engine.markers import MarkerEntry, MarkerReconciler, ReconcileResult, ViewportDecision, ViewportMode
from pyjagalari.engine.surface import CircleShape, InMemorySurface, MapSurface, MarkerIcon, PolylineShape
from pyjagalari.engine.track import TrackOverlayManager
from pyjagalari.engine.trails import TrailEntry, TrailOverlayManager

__all__ = [
    "CircleShape",
    "DeviceCategory",
    "FleetSummary",
    "Geolocator",
    "InMemorySurface",
    "MapSurface",
    "MarkerEntry",
    "MarkerIcon",
    "MarkerReconciler",
    "PolylineShape",
    "ReconcileResult",
    "SelfLocationManager",
    "TrackOverlayManager",
    "TrailEntry",
    "TrailOverlayManager",
    "ViewportDecision",
    "ViewportMode",
    "classify",
    "is_online",
    "summarize_fleet",
]
