from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest

from osmhist.annotate.child import Child, Update
from osmhist.annotate.childlist import ChildList, ChildNoHistoryError, ChildNoVisibleError
from osmhist.annotate.compute import ChildLoc, compute, group_by_parent
from osmhist.annotate.options import Options
from osmhist.feature import FeatureID, Type

START = datetime(2016, 1, 1, tzinfo=timezone.utc)
CHILD1 = Type.NODE.feature_id(1)
CHILD2 = Type.NODE.feature_id(2)
MINUTE = timedelta(minutes=1)


def _hours(h: float) -> datetime:
    return START + timedelta(hours=h)


class _NotFound(Exception):
    pass


class _DS:
    def __init__(self) -> None:
        self.data: dict[FeatureID, ChildList] = {}

    def get(self, fid: FeatureID) -> ChildList:
        try:
            return self.data[fid]
        except KeyError:
            raise _NotFound() from None

    def not_found(self, err: BaseException) -> bool:
        return isinstance(err, _NotFound)


class _BrokenDS:
    def get(self, fid: FeatureID) -> ChildList:
        raise RuntimeError("boom")

    def not_found(self, err: BaseException) -> bool:
        return False


@dataclass
class _Parent:
    version: int
    visible: bool
    timestamp: datetime
    child_ids: list = field(default_factory=list)
    id: FeatureID = FeatureID(0)
    changeset_id: int = 0
    committed: datetime | None = None
    children: list | None = None

    def refs(self):
        return list(self.child_ids), [True] * len(self.child_ids)

    def set_child(self, idx, child):
        if self.children is None:
            self.children = []
        if idx >= len(self.children):
            self.children.extend([None] * (idx + 1 - len(self.children)))
        self.children[idx] = child


def _history(fid, *offsets, hidden=()):
    return ChildList(
        Child(
            id=fid,
            version=i,
            version_index=i,
            timestamp=START + offset,
            visible=i not in hidden,
        )
        for i, offset in enumerate(offsets)
    )


def _assert_children(parents, expected):
    for parent, exp in zip(parents, expected):
        if exp is None:
            assert parent.children is None
        else:
            assert parent.children is not None
            assert parent.children[0] is exp


def test_compute_basic():
    ds = _DS()
    history = _history(CHILD1, *(timedelta(hours=h) for h in range(4)))
    ds.data[CHILD1] = history

    parents = [
        _Parent(1, True, _hours(0), [CHILD1]),
        _Parent(2, True, _hours(2), [CHILD1]),
        _Parent(3, True, _hours(3), [CHILD1]),
        _Parent(4, True, _hours(4), [CHILD1]),
    ]

    updates = compute(parents, ds, None)

    _assert_children(parents, [history[0], history[2], history[3], history[3]])
    assert updates == [[Update(index=0, version=1, timestamp=_hours(1))], [], [], []]


def test_compute_missing_children():
    ds = _DS()
    history = _history(CHILD1, timedelta(0))
    ds.data[CHILD1] = history

    parents = [_Parent(0, True, _hours(0), [CHILD1, FeatureID(0)])]
    opts = Options(threshold=MINUTE, ignore_missing_children=True)
    updates = compute(parents, ds, opts)

    assert parents[0].children[0] is history[0]
    assert updates == [[]]


def test_compute_deleted_parent():
    ds = _DS()
    history = _history(CHILD1, *(timedelta(hours=h) for h in range(6)))
    ds.data[CHILD1] = history

    parents = [
        _Parent(0, True, _hours(0), [CHILD1]),
        _Parent(1, False, _hours(2), [CHILD1]),
        _Parent(2, True, _hours(4), [CHILD1]),
        _Parent(3, True, _hours(6), [CHILD1]),
    ]

    updates = compute(parents, ds, Options(threshold=MINUTE))

    _assert_children(parents, [history[0], None, history[4], history[5]])
    assert updates == [
        [Update(index=0, version=1, timestamp=_hours(1))],
        [],
        [Update(index=0, version=5, timestamp=_hours(5))],
        [],
    ]


def test_compute_child_update_after_last_parent_version():
    ds = _DS()
    history = _history(CHILD1, *(timedelta(hours=h) for h in range(3)))
    ds.data[CHILD1] = history

    parents = [_Parent(0, True, _hours(0), [CHILD1])]
    updates = compute(parents, ds, Options(threshold=MINUTE))

    _assert_children(parents, [history[0]])
    assert updates == [
        [
            Update(index=0, version=1, timestamp=_hours(1)),
            Update(index=0, version=2, timestamp=_hours(2)),
        ]
    ]


@pytest.mark.parametrize(
    "first",
    [timedelta(0), timedelta(seconds=-1), timedelta(seconds=1)],
)
def test_compute_child_update_right_before_parent_delete(first):
    ds = _DS()
    history = _history(CHILD1, first, timedelta(seconds=30))
    ds.data[CHILD1] = history

    parents = [
        _Parent(0, True, START, [CHILD1]),
        _Parent(1, False, START + MINUTE - timedelta(seconds=1)),
    ]

    updates = compute(parents, ds, Options(threshold=MINUTE))

    _assert_children(parents, [history[0], None])
    assert updates == [[], []]


def test_compute_child_update_right_before_parent_updated():
    ds = _DS()
    history = _history(CHILD1, timedelta(0), timedelta(hours=1) - MINUTE)
    ds.data[CHILD1] = history

    parents = [
        _Parent(0, True, _hours(0), [CHILD1]),
        _Parent(1, True, _hours(1), [CHILD1]),
    ]

    updates = compute(parents, ds, Options(threshold=MINUTE))

    _assert_children(parents, [history[0], history[1]])
    assert updates == [[], []]


def test_compute_multiple_children():
    ds = _DS()
    h1 = _history(CHILD1, *(timedelta(hours=h) for h in (0, 1, 5)))
    h2 = _history(CHILD2, *(timedelta(hours=h) for h in (0, 2, 4)))
    ds.data[CHILD1] = h1
    ds.data[CHILD2] = h2

    parents = [
        _Parent(0, True, _hours(0), [CHILD1, CHILD2]),
        _Parent(1, True, _hours(3), [CHILD1, CHILD2]),
    ]

    updates = compute(parents, ds, Options(threshold=MINUTE))

    assert parents[0].children == [h1[0], h2[0]]
    assert parents[1].children == [h1[1], h2[1]]
    assert updates == [
        [
            Update(index=0, version=1, timestamp=_hours(1)),
            Update(index=1, version=1, timestamp=_hours(2)),
        ],
        [
            Update(index=0, version=2, timestamp=_hours(5)),
            Update(index=1, version=2, timestamp=_hours(4)),
        ],
    ]


def test_compute_changed_child_list():
    ds = _DS()
    h1 = _history(CHILD1, *(timedelta(hours=h) for h in (0, 1, 4)))
    h2 = _history(CHILD2, *(timedelta(hours=h) for h in (0, 2, 3)))
    ds.data[CHILD1] = h1
    ds.data[CHILD2] = h2

    parents = [
        _Parent(0, True, _hours(0), [CHILD1, CHILD2]),
        _Parent(1, True, _hours(2), [CHILD2]),
        _Parent(2, True, _hours(5), [CHILD1]),
    ]

    updates = compute(parents, ds, Options(threshold=MINUTE))

    _assert_children(parents, [h1[0], h2[1], h1[2]])
    assert updates == [
        [Update(index=0, version=1, timestamp=_hours(1))],
        [Update(index=0, version=2, timestamp=_hours(3))],
        [],
    ]


def test_compute_major_children_and_errors():
    ds = _DS()
    history = _history(
        CHILD1, *(timedelta(hours=h) for h in (0, 1, 3, 5)), hidden={2}
    )
    ds.data[CHILD1] = history

    parents = [
        _Parent(1, True, _hours(0), [CHILD1]),
        _Parent(2, False, _hours(3), [CHILD1]),
        _Parent(3, True, _hours(6), [CHILD1]),
    ]

    compute(parents, ds, Options(threshold=MINUTE))
    _assert_children(parents, [history[0], None, history[3]])

    # child not visible at this parent's timestamp
    parents[0].timestamp = START - timedelta(hours=1)
    with pytest.raises(ChildNoVisibleError) as info:
        compute(parents, ds, Options(threshold=MINUTE))
    assert info.value.child_id == CHILD1

    # the child's history is missing
    parents[0].timestamp = START
    ds.data[CHILD2] = ds.data.pop(CHILD1)
    with pytest.raises(ChildNoHistoryError) as info:
        compute(parents, ds, Options(threshold=MINUTE))
    assert info.value.child_id == CHILD1


def test_compute_child_deleted_between_parents():
    ds = _DS()
    history = _history(
        CHILD1, *(timedelta(hours=h) for h in (0, 1, 2)), hidden={1}
    )
    ds.data[CHILD1] = history

    parents = [
        _Parent(0, True, _hours(0), [CHILD1]),
        _Parent(1, True, _hours(3), [CHILD1]),
    ]

    with pytest.raises(ValueError, match="child deleted between parent versions"):
        compute(parents, ds, Options(threshold=MINUTE))

    updates = compute(
        parents, ds, Options(threshold=MINUTE, ignore_inconsistency=True)
    )
    assert updates == [[Update(index=0, version=2, timestamp=_hours(2))], []]


def test_compute_other_datasource_errors_propagate():
    parents = [_Parent(0, True, _hours(0), [CHILD1])]
    with pytest.raises(RuntimeError, match="boom"):
        compute(parents, _BrokenDS(), Options())


def test_group_by_parent():
    locs = [
        ChildLoc(parent=1, index=1),
        ChildLoc(parent=2, index=2),
        ChildLoc(parent=4, index=3),
        ChildLoc(parent=4, index=3),
        ChildLoc(parent=4, index=4),
        ChildLoc(parent=3, index=6),
        ChildLoc(parent=3, index=6),
        ChildLoc(parent=7, index=8),
    ]

    assert group_by_parent(locs) == [
        locs[0:1],
        locs[1:2],
        locs[2:5],
        locs[5:7],
        locs[7:8],
    ]


def test_group_by_parent_empty():
    assert group_by_parent([]) == []