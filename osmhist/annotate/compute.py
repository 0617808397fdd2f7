"""Matching of child versions to parent versions, and the updates between them."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from itertools import groupby
from operator import attrgetter
from typing import Protocol

from ..feature import FeatureID
from .child import Child, Update
from .childlist import (
    ChildList,
    ChildNoHistoryError,
    ChildNoVisibleError,
    Parent,
    _time_threshold,
    _time_threshold_parent,
)
from .options import Options


class _Datasourcer(Protocol):
    def get(self, id: FeatureID) -> ChildList: ...

    def not_found(self, err: BaseException) -> bool: ...


@dataclass(frozen=True)
class ChildLoc:
    """The location of a child: the parent's index and the index within it."""

    parent: int
    index: int


def group_by_parent(locs: Sequence[ChildLoc]) -> list[list[ChildLoc]]:
    """Split the locations into runs that share the same parent."""
    return [list(run) for _, run in groupby(locs, key=attrgetter("parent"))]


def _map_child_locs(
    parents: Sequence[Parent], filter: Callable[[FeatureID], bool] | None
) -> dict[FeatureID, list[ChildLoc]]:
    result: dict[FeatureID, list[ChildLoc]] = {}
    for i, parent in enumerate(parents):
        refs, annotated = parent.refs()
        for j, (fid, done) in enumerate(zip(refs, annotated)):
            if done and filter is not None and not filter(fid):
                continue
            result.setdefault(fid, []).append(ChildLoc(parent=i, index=j))
    return result


def _next_version_index(
    current: Child | None,
    child: ChildList,
    next_parent: Parent | None,
    opts: Options,
) -> int:
    if next_parent is None:
        # No later parent version: include every future version of the child.
        return child[-1].version_index + 1

    nxt = child.find_visible(
        next_parent.changeset_id,
        _time_threshold_parent(next_parent),
        opts.threshold,
    )
    if nxt is not None:
        # A child updated well before the next parent is a minor version.
        if _time_threshold(nxt) < _time_threshold_parent(next_parent, -opts.threshold):
            return nxt.version_index + 1
        return nxt.version_index

    # The child is missing from the next parent, the next parent is deleted,
    # or the data is inconsistent: use the last version before the next parent.
    ts = _time_threshold_parent(next_parent, -opts.threshold)
    if current is not None and not ts > _time_threshold(current):
        return 0

    nxt = child.version_before(ts)
    if nxt is None:
        return 0
    return nxt.version_index + 1


def compute(
    parents: Sequence[Parent],
    histories: _Datasourcer,
    opts: Options | None = None,
) -> list[list[Update]]:
    """Set the matching child version on every parent and return their updates.

    The result holds one list of updates per parent, sorted by child index.
    """
    if opts is None:
        opts = Options()

    results: list[list[Update]] = [[] for _ in parents]
    for fid, locations in _map_child_locs(parents, opts.child_filter).items():
        try:
            child = histories.get(fid)
        except Exception as err:
            if not histories.not_found(err):
                raise
            if opts.ignore_missing_children:
                continue
            raise ChildNoHistoryError(fid) from err

        for locs in group_by_parent(locations):
            parent_index = locs[0].parent
            parent = parents[parent_index]
            if not parent.visible:
                continue

            next_parent = (
                parents[parent_index + 1] if parent_index < len(parents) - 1 else None
            )

            at = _time_threshold_parent(parent)
            current = child.find_visible(parent.changeset_id, at, opts.threshold)
            if current is None and not opts.ignore_inconsistency:
                raise ChildNoVisibleError(fid, at)

            for loc in locs:
                parent.set_child(loc.index, current)

            next_version = _next_version_index(current, child, next_parent, opts)

            if current is not None:
                start = current.version_index + 1
            else:
                before = child.version_before(at)
                start = 0 if before is None else before.version_index + 1

            for version in child[start:next_version]:
                if version.visible:
                    update = version.update()
                    results[parent_index].extend(
                        replace(update, index=loc.index) for loc in locs
                    )
                elif not opts.ignore_inconsistency:
                    # Happens in old data, e.g. before element versioning.
                    raise ValueError(
                        f"{parent.id}: {fid}: child deleted between parent versions"
                    )

    for updates in results:
        updates.sort(key=attrgetter("index"))

    return results