"""Track overlay models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pyjagalari.models.geo import Bounds, Coordinate


class TrackStatus(StrEnum):
    EMPTY = "empty"
    RENDERING = "rendering"
    LOADED = "loaded"
    FAILED = "failed"
    DISABLED = "disabled"


class ParsedTrack(BaseModel):
    """Geometry extracted from a track document.

    ``lines`` holds one coordinate list per track segment or route;
    waypoint-only documents produce a single line of waypoints.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    lines: list[list[Coordinate]] = Field(default_factory=list)

    @property
    def point_count(self) -> int:
        return sum(len(line) for line in self.lines)

    def points(self) -> list[Coordinate]:
        return [point for line in self.lines for point in line]


class TrackOverlayState(BaseModel):
    """Session-wide track overlay state.

    ``consecutive_error_count`` only ever grows; clearing the overlay
    keeps it, replacing the manager resets it.
    """

    model_config = ConfigDict(extra="forbid")

    raw: str | None = None
    filename: str | None = None
    handles: list[Any] = Field(default_factory=list)
    bounds: Bounds | None = None
    consecutive_error_count: int = 0
    status: TrackStatus = TrackStatus.EMPTY
    last_rejection: str | None = None
