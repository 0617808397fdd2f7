"""Children of parents being annotated, and the updates they produce."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ..feature import FeatureID

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

# From this moment on, the commit time of osm data is known.
COMMIT_INFO_START = datetime(2012, 9, 12, 9, 30, 3, tzinfo=timezone.utc)


@dataclass
class Update:
    """A minor change of a child between two versions of its parent."""

    index: int = 0
    version: int = 0
    timestamp: datetime = ZERO_TIME
    changeset_id: int = 0
    lat: float = 0.0
    lon: float = 0.0
    reverse: bool = False


def _update_timestamp(timestamp: datetime, committed: datetime | None) -> datetime:
    if timestamp < COMMIT_INFO_START or committed is None:
        return timestamp
    return committed


@dataclass
class Child:
    """A node, way or relation that a way or relation depends on."""

    id: FeatureID = FeatureID(0)
    version: int = 0
    changeset_id: int = 0
    # Index of the version when sorted from lowest to highest.
    version_index: int = 0
    timestamp: datetime = ZERO_TIME
    committed: datetime | None = None
    lon: float = 0.0
    lat: float = 0.0
    way: Any = None
    reverse_of_previous: bool = False
    visible: bool = False

    def update(self) -> Update:
        """Return the update this child version represents."""
        return Update(
            version=self.version,
            timestamp=_update_timestamp(self.timestamp, self.committed),
            changeset_id=self.changeset_id,
            lat=self.lat,
            lon=self.lon,
            reverse=self.reverse_of_previous,
        )