"""Last-good snapshot store.

This is the only component allowed to decide which snapshot the engine
renders.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from pyjagalari.models.device import Device
from pyjagalari.models.position import Position
from pyjagalari.state.policy import should_accept_snapshot
from pyjagalari.state.snapshot import Snapshot

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SnapshotStore:
    """In-memory holder for the latest accepted snapshot.

    Failures never touch the store: after an authentication or transport
    error the previously accepted snapshot stays current until the next
    successful poll.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._sequence = itertools.count(1)
        self._current: Snapshot | None = None

    def next_sequence(self) -> int:
        """Reserve a sequence number for a poll that is about to start."""
        return next(self._sequence)

    def build(self, sequence: int, devices: list[Device], positions: list[Position]) -> Snapshot:
        return Snapshot(
            sequence=sequence,
            devices=tuple(devices),
            positions=tuple(positions),
            fetched_at=self._clock(),
        )

    def apply(self, snapshot: Snapshot) -> bool:
        """Make *snapshot* current if the policy allows; return whether it did."""
        current_sequence = self._current.sequence if self._current is not None else None
        if not should_accept_snapshot(current_sequence=current_sequence, incoming_sequence=snapshot.sequence):
            _logger.debug(
                "Discarding stale snapshot seq=%d (current seq=%s)",
                snapshot.sequence,
                current_sequence,
            )
            return False
        self._current = snapshot
        return True

    @property
    def current(self) -> Snapshot | None:
        return self._current

    @property
    def last_update(self) -> datetime | None:
        return self._current.fetched_at if self._current is not None else None

    def devices(self) -> tuple[Device, ...]:
        return self._current.devices if self._current is not None else ()

    def positions(self) -> tuple[Position, ...]:
        return self._current.positions if self._current is not None else ()
