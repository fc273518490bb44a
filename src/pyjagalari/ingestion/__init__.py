"""Ingestion layer.

Helpers that turn raw telemetry payloads into normalized values before the
models and the snapshot store see them.
"""

__all__: list[str] = []
