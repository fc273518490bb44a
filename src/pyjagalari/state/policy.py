"""Deterministic snapshot acceptance policy."""

from __future__ import annotations


def should_accept_snapshot(*, current_sequence: int | None, incoming_sequence: int) -> bool:
    """Decide whether an incoming snapshot may replace the current one.

    Policy:
    - Nothing applied yet: accept.
    - Otherwise accept only strictly newer poll sequences, so a slow poll
      finishing late can never roll the map back.
    """
    if current_sequence is None:
        return True
    return incoming_sequence > current_sequence
