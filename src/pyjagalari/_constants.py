"""Internal constants shared across the library."""

BASE_URL = "https://demo.traccar.org"
USER_AGENT = "pyjagalari/0.1"
AUTH_FAILURE_STATUSES: frozenset[int] = frozenset({401, 403})

#: Telemetry poll cadence in seconds.
POLL_INTERVAL_SECONDS: float = 30.0

# ------------------------------------------------------------------
# Viewport
# ------------------------------------------------------------------

DEFAULT_CENTER: tuple[float, float] = (-6.2088, 106.8456)
DEFAULT_ZOOM = 13
SINGLE_POINT_ZOOM = 15
LOCATED_ZOOM = 16
BOUNDS_PADDING = 0.2

# ------------------------------------------------------------------
# Markers
# ------------------------------------------------------------------

SELF_LOCATION_ID = -1
ONLINE_COLOR = "#10b981"
OFFLINE_COLOR = "#ef4444"
SELF_LOCATION_COLOR = "#3b82f6"
LABEL_MAX_CHARS = 12

# ------------------------------------------------------------------
# Trails
# ------------------------------------------------------------------

TRAIL_RADIUS_METERS = 150.0
TRAIL_PALETTE: tuple[str, ...] = (
    "#ef4444",
    "#f97316",
    "#eab308",
    "#22c55e",
    "#06b6d4",
    "#3b82f6",
    "#8b5cf6",
    "#ec4899",
)

# ------------------------------------------------------------------
# Track overlay
# ------------------------------------------------------------------

TRACK_MIN_DOCUMENT_LENGTH = 100
TRACK_ROOT_TOKEN = "<gpx"
TRACK_ERROR_THRESHOLD = 3
TRACK_LINE_COLOR = "#2563eb"

# ------------------------------------------------------------------
# Geolocation
# ------------------------------------------------------------------

GEOLOCATION_TIMEOUT_SECONDS = 10.0
GEOLOCATION_MAX_AGE_SECONDS = 60.0

# ------------------------------------------------------------------
# Durable storage keys
# ------------------------------------------------------------------

STORAGE_TRACK_DATA = "jagalari-gpx-data"
STORAGE_TRACK_FILENAME = "jagalari-gpx-filename"
STORAGE_SELF_LOCATION = "jagalari-self-location"
