"""Telemetry snapshot: one paired (devices, positions) result of a poll."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyjagalari.models.device import Device
from pyjagalari.models.position import Position


class Snapshot(BaseModel):
    """A complete poll result.

    ``sequence`` is assigned when the poll *starts*, so a slow poll that
    completes after a newer one still carries the older sequence.
    """

    model_config = ConfigDict(frozen=True)

    sequence: int = Field(..., ge=0)
    devices: tuple[Device, ...] = ()
    positions: tuple[Position, ...] = ()
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("fetched_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


def resolve_pairs(devices: Sequence[Device], positions: Sequence[Position]) -> list[tuple[Device, Position]]:
    """(Device, Position) pairs, dropping positions whose device is absent.

    Devices may be missing from one endpoint but present in the other
    because the two are fetched independently; dangling positions are
    ignored, not an error.
    """
    by_id = {device.id: device for device in devices}
    pairs: list[tuple[Device, Position]] = []
    for position in positions:
        device = by_id.get(position.device_id)
        if device is None:
            continue
        pairs.append((device, position))
    return pairs
