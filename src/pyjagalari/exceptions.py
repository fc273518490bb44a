"""Custom exception hierarchy for pyjagalari."""

from __future__ import annotations


class JagalariError(Exception):
    """Base exception for all pyjagalari errors."""


class JagalariConfigError(JagalariError):
    """Invalid or missing configuration."""


class TelemetryTransportError(JagalariError):
    """HTTP-level failure talking to the telemetry service (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class TelemetryAuthenticationError(TelemetryTransportError):
    """Credentials rejected by the telemetry service (HTTP 401/403).

    The session surfaces this as a banner and keeps operating on the
    last good snapshot.
    """


class TrackDocumentError(JagalariError):
    """Track document rejected by structural validation before rendering.

    Structural rejections do not count toward the track overlay's
    circuit breaker; only parse/render failures do.
    """

    def __init__(self, message: str, *, reason: str = "") -> None:
        self.reason = reason
        super().__init__(message)


class GeolocationError(JagalariError):
    """Platform geolocation request failed.

    ``code`` follows the platform convention: ``1`` permission denied,
    ``2`` position unavailable, ``3`` timeout.  Anything else is
    classified as unknown.
    """

    def __init__(self, message: str = "", *, code: int = 0) -> None:
        self.code = code
        super().__init__(message)


class TrackRenderError(JagalariError):
    """Track document passed structural validation but could not be parsed or drawn.

    Counts toward the track overlay's circuit breaker.
    """
