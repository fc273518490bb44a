"""Device endpoints.

Endpoints:
  - GET /api/devices
"""

from __future__ import annotations

from pyjagalari._api._common import validate_items
from pyjagalari._transport import Transport
from pyjagalari.models.device import Device

ENDPOINT = "/devices"


async def fetch_devices(transport: Transport) -> list[Device]:
    """Fetch every device visible to the authenticated user."""
    decoded = await transport.get_json(ENDPOINT)
    return validate_items(ENDPOINT, decoded, Device)
