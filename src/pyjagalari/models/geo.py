"""Geographic value types shared by the engine and the map surface."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A WGS84 point in degrees."""

    lat: float
    lng: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lng)


@dataclass(frozen=True, slots=True)
class Bounds:
    """Axis-aligned lat/lng bounding region.

    Mirrors the usual web-map ``LatLngBounds`` semantics: ``pad`` grows
    each side by a fraction of the current span, so a region with zero
    span stays zero after padding.
    """

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_points(cls, points: Iterable[Coordinate]) -> Bounds:
        """Smallest region covering *points*.

        Raises :class:`ValueError` when *points* is empty.
        """
        iterator = iter(points)
        try:
            first = next(iterator)
        except StopIteration:
            raise ValueError("cannot compute bounds of an empty point set") from None
        south = north = first.lat
        west = east = first.lng
        for point in iterator:
            south = min(south, point.lat)
            north = max(north, point.lat)
            west = min(west, point.lng)
            east = max(east, point.lng)
        return cls(south=south, west=west, north=north, east=east)

    def pad(self, ratio: float) -> Bounds:
        lat_buffer = (self.north - self.south) * ratio
        lng_buffer = (self.east - self.west) * ratio
        return Bounds(
            south=self.south - lat_buffer,
            west=self.west - lng_buffer,
            north=self.north + lat_buffer,
            east=self.east + lng_buffer,
        )

    @property
    def center(self) -> Coordinate:
        return Coordinate(lat=(self.south + self.north) / 2.0, lng=(self.west + self.east) / 2.0)

    @property
    def is_degenerate(self) -> bool:
        """True when the region collapses to a single point."""
        return self.north == self.south and self.east == self.west
