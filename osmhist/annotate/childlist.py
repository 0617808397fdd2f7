"""Version histories of children and the parents that refer to them."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol

from ..feature import FeatureID
from .child import COMMIT_INFO_START, Child


class ChildNoHistoryError(Exception):
    """There is no history for a child."""

    def __init__(self, child_id: FeatureID = FeatureID(0)) -> None:
        self.child_id = FeatureID(child_id)
        super().__init__(f"element history not found for {self.child_id}")


class ChildNoVisibleError(Exception):
    """No version of a child is visible for a parent at a given time."""

    def __init__(
        self, child_id: FeatureID = FeatureID(0), timestamp: datetime | None = None
    ) -> None:
        self.child_id = FeatureID(child_id)
        self.timestamp = timestamp
        super().__init__(f"no visible child for {self.child_id} at {timestamp}")


class Parent(Protocol):
    """Something that holds children, e.g. a way holding nodes."""

    @property
    def id(self) -> FeatureID: ...

    @property
    def changeset_id(self) -> int: ...

    @property
    def version(self) -> int: ...

    @property
    def visible(self) -> bool: ...

    @property
    def timestamp(self) -> datetime: ...

    @property
    def committed(self) -> datetime | None: ...

    def refs(self) -> tuple[list[FeatureID], list[bool]]:
        """Return the child feature ids and whether each is already annotated."""
        ...

    def set_child(self, idx: int, child: Child | None) -> None:
        """Set the child found for the reference at the given index."""
        ...


def _early(committed: datetime | None) -> bool:
    return committed is None or committed < COMMIT_INFO_START


def _time_threshold(c: Child, eps: timedelta = timedelta(0)) -> datetime:
    if _early(c.committed):
        return c.timestamp + eps
    return c.committed  # type: ignore[return-value]


def _time_threshold_parent(p: Parent, eps: timedelta = timedelta(0)) -> datetime:
    committed = p.committed
    if _early(committed):
        return p.timestamp + eps
    return committed  # type: ignore[return-value]


class ChildList(list):
    """The versions of one child, sorted from lowest to highest."""

    def find_visible(self, cid: int, at: datetime, eps: timedelta) -> Child | None:
        """Return the child version visible at the given time, or None.

        For data with commit information the committed time decides.
        For earlier data the closest visible version within eps of 'at'
        is chosen, or else the previous version if visible. Versions after
        'at' must belong to the changeset cid.
        """
        diff: timedelta | None = None
        nearest: Child | None = None
        zero = timedelta(0)

        start = at - eps
        for c in self:
            if _early(c.committed):
                offset = c.timestamp - start
                visible = c.visible

                if offset > 2 * eps:
                    break

                if offset < zero:
                    nearest = c if visible else None
                    continue

                d = abs(offset - eps)
                if diff is None or d <= diff:
                    if diff is None and not visible and offset == zero:
                        nearest = None

                    if visible:
                        if offset <= eps or c.changeset_id == cid:
                            nearest = c
                        else:
                            continue

                    diff = d
            else:
                if c.committed > at:
                    break
                nearest = c if c.visible else None

        return nearest

    def version_before(self, end: datetime) -> Child | None:
        """Return the last child version before the given time, or None."""
        latest: Child | None = None
        for c in self:
            if not _time_threshold(c) < end:
                break
            latest = c
        return latest