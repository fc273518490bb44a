"""High-level async client for the Traccar telemetry API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from pyjagalari._api.devices import fetch_devices
from pyjagalari._api.positions import fetch_latest_positions
from pyjagalari._transport import HttpTransport, Transport
from pyjagalari.config import TrackerConfig
from pyjagalari.exceptions import JagalariError
from pyjagalari.models.device import Device
from pyjagalari.models.position import Position

_logger = logging.getLogger(__name__)


class TraccarClient:
    """Async client for the Traccar REST API.

    Usage::

        async with TraccarClient(config) as client:
            devices, positions = await client.fetch_snapshot()

    A ready-made :class:`Transport` may be injected instead of an HTTP
    session (tests, alternative backends).
    """

    def __init__(
        self,
        config: TrackerConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None

    @property
    def config(self) -> TrackerConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TraccarClient:
        if self._external_transport:
            return self
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._external_transport:
            return
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise JagalariError("Client not initialized. Use 'async with TraccarClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_devices(self) -> list[Device]:
        return await fetch_devices(self._require_transport())

    async def list_latest_positions(self, *, device_id: int | None = None) -> list[Position]:
        return await fetch_latest_positions(self._require_transport(), device_id=device_id)

    async def fetch_snapshot(self) -> tuple[list[Device], list[Position]]:
        """Fetch devices and latest positions concurrently.

        Both requests must succeed; the first failure is raised as is.
        """
        devices, positions = await asyncio.gather(self.list_devices(), self.list_latest_positions())
        _logger.debug("Fetched %d devices, %d positions", len(devices), len(positions))
        return devices, positions
