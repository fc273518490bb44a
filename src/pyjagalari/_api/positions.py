"""Position endpoints.

Endpoints:
  - GET /api/positions (latest position of every device)
  - GET /api/positions?deviceId=N (latest position of one device)
"""

from __future__ import annotations

import logging

from pyjagalari._api._common import validate_items
from pyjagalari._transport import Transport
from pyjagalari.models.position import Position

_logger = logging.getLogger(__name__)

ENDPOINT = "/positions"


def _latest_per_device(positions: list[Position]) -> list[Position]:
    """Collapse to one position per device, keeping the newest fix.

    The endpoint normally returns one entry per device already; servers
    behind some proxies return duplicates, and the engine relies on
    zero-or-one position per device within a snapshot.
    """
    latest: dict[int, Position] = {}
    for position in positions:
        current = latest.get(position.device_id)
        if current is None:
            latest[position.device_id] = position
            continue
        if position.timestamp is not None and (current.timestamp is None or position.timestamp > current.timestamp):
            latest[position.device_id] = position
    if len(latest) != len(positions):
        _logger.debug("Collapsed %d positions to %d devices", len(positions), len(latest))
    return list(latest.values())


async def fetch_latest_positions(transport: Transport, *, device_id: int | None = None) -> list[Position]:
    """Fetch the latest known position for every device (or one device)."""
    params = {"deviceId": str(device_id)} if device_id is not None else None
    decoded = await transport.get_json(ENDPOINT, params)
    return _latest_per_device(validate_items(ENDPOINT, decoded, Position))
