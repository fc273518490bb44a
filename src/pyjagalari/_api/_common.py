"""Shared helpers for Traccar endpoint modules.

Traccar list endpoints return JSON arrays of objects.  Individual items
that fail validation are skipped and logged rather than failing the whole
poll: one misconfigured tracker must not blank the map.

It is internal to pyjagalari and may change at any time.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from pyjagalari.exceptions import TelemetryTransportError

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def validate_items(endpoint: str, decoded: Any, model: type[M]) -> list[M]:
    """Validate a decoded JSON array into *model* instances."""
    if not isinstance(decoded, list):
        raise TelemetryTransportError(
            f"{endpoint} returned {type(decoded).__name__}, expected a list",
            endpoint=endpoint,
        )

    items: list[M] = []
    for index, item in enumerate(decoded):
        try:
            items.append(model.model_validate(item))
        except ValidationError as exc:
            _logger.debug(
                "Skipping invalid %s item #%d from %s: %s",
                model.__name__,
                index,
                endpoint,
                exc.errors(include_url=False),
            )
    return items
