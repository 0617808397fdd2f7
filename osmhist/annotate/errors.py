"""Errors raised while annotating ways and relations."""

from __future__ import annotations

from datetime import datetime

from ..feature import FeatureID
from .childlist import ChildNoHistoryError, ChildNoVisibleError


class NoHistoryError(Exception):
    """There is no history for a specific child."""

    def __init__(self, id: int = FeatureID(0)) -> None:
        self.id = FeatureID(id)
        super().__init__(f"element history not found for {self.id}")


class NoVisibleChildError(Exception):
    """No child is visible for a parent at a given time."""

    def __init__(self, id: int = FeatureID(0), timestamp: datetime | None = None) -> None:
        self.id = FeatureID(id)
        self.timestamp = timestamp
        super().__init__(f"no visible child for {self.id} at {timestamp}")


class UnsupportedMemberTypeError(Exception):
    """A relation member is not a node, way or relation."""

    def __init__(
        self, relation_id: int = 0, member_type: object = None, index: int = 0
    ) -> None:
        self.relation_id = relation_id
        self.member_type = member_type
        self.index = index
        super().__init__(
            f"unsupported member type {member_type} "
            f"for relation {relation_id} at {index}"
        )


def map_errors(err: BaseException) -> BaseException:
    """Convert matching errors to their public form; others pass through."""
    if isinstance(err, ChildNoHistoryError):
        return NoHistoryError(err.child_id)
    if isinstance(err, ChildNoVisibleError):
        return NoVisibleChildError(err.child_id, err.timestamp)
    return err