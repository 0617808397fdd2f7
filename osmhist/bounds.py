"""Geographic bounds of osm data."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol


class _Located(Protocol):
    lat: float
    lon: float


def _tile_lon(x: int, n: int) -> float:
    return x / n * 360.0 - 180.0


def _tile_lat(y: int, n: int) -> float:
    return math.degrees(math.atan(math.sinh(math.pi * (1.0 - 2.0 * y / n))))


@dataclass
class Bounds:
    """A latitude/longitude bounding box."""

    min_lat: float = 0.0
    max_lat: float = 0.0
    min_lon: float = 0.0
    max_lon: float = 0.0

    @classmethod
    def from_tile(cls, x: int, y: int, z: int) -> Bounds:
        """Create the bounds of a web map tile; raises ValueError if out of range."""
        n = 1 << z
        if x < 0 or x >= n:
            raise ValueError("osm: x index out of range for this zoom")
        if y < 0 or y >= n:
            raise ValueError("osm: y index out of range for this zoom")

        return cls(
            min_lat=_tile_lat(y + 1, n),
            max_lat=_tile_lat(y, n),
            min_lon=_tile_lon(x, n),
            max_lon=_tile_lon(x + 1, n),
        )

    def contains_node(self, node: _Located) -> bool:
        """Return True if the node is within the bounds, boundary included."""
        if node.lat < self.min_lat or node.lat > self.max_lat:
            return False
        if node.lon < self.min_lon or node.lon > self.max_lon:
            return False
        return True