from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import aiohttp
import pytest

from pyjagalari._transport import HttpTransport
from pyjagalari.client import TraccarClient
from pyjagalari.config import TrackerConfig
from pyjagalari.exceptions import JagalariError, TelemetryAuthenticationError, TelemetryTransportError


class _FakeResponse:
    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self._body = body

    async def text(self) -> str:
        return self._body

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _FakeHttpSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self._response = response
        self._error = error
        self.requests: list[tuple[str, dict[str, Any]]] = []

    def get(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.requests.append((url, kwargs))
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response


class _StaticTransport:
    def __init__(self, payloads: Mapping[str, Any]) -> None:
        self._payloads = payloads
        self.calls: list[tuple[str, Mapping[str, str] | None]] = []

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        self.calls.append((endpoint, params))
        payload = self._payloads[endpoint]
        if isinstance(payload, Exception):
            raise payload
        return payload


def _transport(session: _FakeHttpSession) -> HttpTransport:
    config = TrackerConfig(base_url="https://traccar.example.com/", email="ops@example.com", password="pw")
    return HttpTransport(config, session)  # type: ignore[arg-type]


class TestHttpTransport:
    @pytest.mark.asyncio
    async def test_success_decodes_json_and_sends_basic_auth(self) -> None:
        session = _FakeHttpSession(_FakeResponse(200, '[{"id": 1}]'))

        body = await _transport(session).get_json("/devices")

        assert body == [{"id": 1}]
        url, kwargs = session.requests[0]
        assert url == "https://traccar.example.com/api/devices"
        assert kwargs["auth"] == aiohttp.BasicAuth("ops@example.com", "pw")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_statuses_raise_authentication_error(self, status: int) -> None:
        session = _FakeHttpSession(_FakeResponse(status, "Unauthorized"))

        with pytest.raises(TelemetryAuthenticationError) as exc_info:
            await _transport(session).get_json("/positions")

        assert exc_info.value.status_code == status
        assert exc_info.value.endpoint == "/positions"

    @pytest.mark.asyncio
    async def test_server_error_raises_transport_error(self) -> None:
        session = _FakeHttpSession(_FakeResponse(502, "Bad gateway"))

        with pytest.raises(TelemetryTransportError) as exc_info:
            await _transport(session).get_json("/devices")

        assert not isinstance(exc_info.value, TelemetryAuthenticationError)
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_network_error_is_wrapped(self) -> None:
        session = _FakeHttpSession(error=aiohttp.ClientConnectionError("connection refused"))

        with pytest.raises(TelemetryTransportError) as exc_info:
            await _transport(session).get_json("/devices")

        assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)

    @pytest.mark.asyncio
    async def test_timeout_is_wrapped(self) -> None:
        session = _FakeHttpSession(error=TimeoutError())

        with pytest.raises(TelemetryTransportError):
            await _transport(session).get_json("/devices")

    @pytest.mark.asyncio
    async def test_invalid_json_raises_transport_error(self) -> None:
        session = _FakeHttpSession(_FakeResponse(200, "<html>login</html>"))

        with pytest.raises(TelemetryTransportError):
            await _transport(session).get_json("/devices")


class TestClient:
    @pytest.mark.asyncio
    async def test_fetch_snapshot_validates_items(self) -> None:
        transport = _StaticTransport(
            {
                "/devices": [
                    {"id": 1, "name": "Ambulance 1", "status": "online"},
                    {"name": "no id, skipped"},
                ],
                "/positions": [{"id": 9, "deviceId": 1, "latitude": -6.2, "longitude": 106.8}],
            }
        )

        async with TraccarClient(TrackerConfig(), transport=transport) as client:
            devices, positions = await client.fetch_snapshot()

        assert [d.id for d in devices] == [1]
        assert [p.device_id for p in positions] == [1]

    @pytest.mark.asyncio
    async def test_non_list_payload_raises(self) -> None:
        transport = _StaticTransport({"/devices": {"error": "nope"}, "/positions": []})

        async with TraccarClient(TrackerConfig(), transport=transport) as client:
            with pytest.raises(TelemetryTransportError):
                await client.list_devices()

    @pytest.mark.asyncio
    async def test_auth_failure_propagates_from_snapshot(self) -> None:
        transport = _StaticTransport(
            {
                "/devices": TelemetryAuthenticationError("denied", status_code=401, endpoint="/devices"),
                "/positions": [],
            }
        )

        async with TraccarClient(TrackerConfig(), transport=transport) as client:
            with pytest.raises(TelemetryAuthenticationError):
                await client.fetch_snapshot()

    @pytest.mark.asyncio
    async def test_single_device_positions_sends_filter(self) -> None:
        transport = _StaticTransport({"/positions": []})

        async with TraccarClient(TrackerConfig(), transport=transport) as client:
            await client.list_latest_positions(device_id=4)

        assert transport.calls == [("/positions", {"deviceId": "4"})]

    @pytest.mark.asyncio
    async def test_use_outside_context_manager_raises(self) -> None:
        client = TraccarClient(TrackerConfig())

        with pytest.raises(JagalariError):
            await client.list_devices()
