"""HTTP transport for the Traccar REST API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyjagalari._constants import AUTH_FAILURE_STATUSES, USER_AGENT
from pyjagalari._redact import redact_for_log
from pyjagalari.config import TrackerConfig
from pyjagalari.exceptions import TelemetryAuthenticationError, TelemetryTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        ...


class HttpTransport:
    """Authenticated JSON-over-HTTP transport using HTTP Basic credentials."""

    def __init__(self, config: TrackerConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._auth = aiohttp.BasicAuth(config.email, config.password)
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        """GET ``{api_root}{endpoint}`` and return the decoded JSON body.

        Raises
        ------
        TelemetryAuthenticationError
            The server rejected the credentials (401/403).
        TelemetryTransportError
            Network failure, any other non-200 status, or a body that is
            not JSON.
        """
        url = f"{self._config.api_root}{endpoint}"
        headers = {"accept": "application/json", "user-agent": USER_AGENT}

        _logger.debug("GET %s params=%s", url, dict(params or {}))

        try:
            async with self._http.get(
                url,
                params=dict(params or {}),
                headers=headers,
                auth=self._auth,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if resp.status in AUTH_FAILURE_STATUSES:
                    raise TelemetryAuthenticationError(
                        f"HTTP {resp.status} from {endpoint}: credentials rejected",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
                if resp.status != 200:
                    raise TelemetryTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except TelemetryTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise TelemetryTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TelemetryTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug("Response %s: %s", endpoint, redact_for_log(body, max_string=128))
        return body
