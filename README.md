# osmhist

A library for working with the edit history of OpenStreetMap data. It covers
identifiers, tile bounds and in-memory histories. It can also work out which
version of each child belonged to each version of its parent, such as which
node versions made up each version of a way.

## Installation

```
pip install .
```

The package has no runtime dependencies.

## Modules

### `osmhist.feature`

- `Type` is a string enum of object types: `NODE`, `WAY`, `RELATION`,
  `CHANGESET`, `NOTE`, `USER` and `BOUNDS`.
  - `Type.feature_id(ref)` builds a `FeatureID` for nodes, ways and relations.
  - For any other type it raises `ValueError`.
- `FeatureID` is an `int` that stands for every version of a node, way or
  relation.
  - Methods: `type()`, which returns `None` for an unknown type, `ref()` and
    `element_id(version)`.
  - `node_id()`, `way_id()` and `relation_id()` return the reference. They
    raise `ValueError` when the id is of the wrong type.
  - `str()` gives `"type/ref"`, or `"unknown/ref"` when the type is unknown.
- `parse_feature_id(s)` parses `"way/10"`. It raises `ValueError` on bad
  input.
- `feature_id_counts(ids)` returns `(nodes, ways, relations)`.

### `osmhist.element`

- `ElementID` is an `int` that also carries a version.
  - Methods: `type()`, `ref()`, `version()`, `feature_id()`, `node_id()`,
    `way_id()` and `relation_id()`.
  - `str()` gives `"type/ref:version"`. A version of 0 is written as `-`.
- `parse_element_id(s)` parses `"node/3:2"`, `"node/3:-"` and `"node/3"`.
  It raises `ValueError` on bad input.
- `element_id_counts(ids)` returns `(nodes, ways, relations)`.

Both id types pack the type, the reference and the version into one integer.
Sorting them therefore orders by type (node, way, relation), then by
reference, then by version.

### `osmhist.bounds`

- `Bounds(min_lat, max_lat, min_lon, max_lon)` is a dataclass.
- `Bounds.from_tile(x, y, z)` gives the bounds of a web-map tile. It raises
  `ValueError` when `x` or `y` is out of range for the zoom.
- `Bounds.contains_node(node)` takes any object with `lat` and `lon`. Points
  on the boundary count as inside.

### `osmhist.datasource`

- `HistoryDatasource` keeps version histories in three dicts: `nodes`, `ways`
  and `relations`. Each is keyed by id.
  - `add(nodes=(), ways=(), relations=(), visible=None)` appends elements to
    their histories in order. Elements are any objects with `id`, `version`
    and `visible`. When `visible` is given, it is set on each element that is
    added.
  - `node_history(id)`, `way_history(id)` and `relation_history(id)` return a
    history. When the id is unknown they raise `NotFoundError`, which is a
    `LookupError`.
  - `not_found(err)` tells whether an error is such a not-found error.

### `osmhist.annotate`

- **`child`**
  - `Child` holds one version of a child: id, version, changeset, version
    index, timestamp, optional committed time, lat/lon, way, whether it
    reverses the previous version, and visibility.
  - `Child.update()` returns an `Update`.
  - `COMMIT_INFO_START` is the moment from which commit times are known.
- **`childlist`**
  - `ChildList` is a list of the versions of one child, sorted by version.
  - `find_visible(cid, at, eps)` returns the version visible at time `at`,
    or `None`. Versions after `at` but within `eps` are only chosen when they
    belong to changeset `cid`.
  - `version_before(end)` returns the last version before `end`.
  - `Parent` is the protocol that `compute` expects. It has the attributes
    `id`, `changeset_id`, `version`, `visible`, `timestamp` and `committed`,
    and the methods `refs()` and `set_child(idx, child)`.
  - `ChildNoHistoryError` and `ChildNoVisibleError` are the matching errors.
- **`options`**
  - `Options` is a dataclass with `threshold`, `ignore_inconsistency`,
    `ignore_missing_children` and `child_filter`.
  - The option functions are `threshold(t)`, `ignore_inconsistency(yes)`,
    `ignore_missing_children(yes)` and `child_filter(filter)`.
  - `build_options(opts, default_threshold)` combines them.
  - `DEFAULT_THRESHOLD` is 30 minutes.
- **`compute`**
  - `compute(parents, histories, opts=None)` looks up each child's history
    with `histories.get(fid)`. A lookup error for which
    `histories.not_found(err)` is true counts as a missing history.
  - For each visible parent it calls `set_child` with the matching version.
  - It returns one list of `Update`s per parent, sorted by child index.
  - It raises `ChildNoHistoryError`, `ChildNoVisibleError`, or `ValueError`
    when a child was deleted between two parent versions, unless the options
    say to ignore these cases.
  - `ChildLoc` and `group_by_parent(locs)` are the helpers it uses.
- **`errors`**
  - The public errors are `NoHistoryError`, `NoVisibleChildError` and
    `UnsupportedMemberTypeError`.
  - `map_errors(err)` turns the matching errors into their public form.
    Other errors pass through unchanged.
- **`order`**
  - `ChildFirstOrdering(ids, ds)` is an iterator over relation ids. Member
    relations come before their parents, and cycles are allowed. `ds` needs
    `relation_history` and `not_found`.
  - `completed_index` tracks progress through `ids`.
  - `close()` stops the walk early. It can also be used as a context manager.

## Examples

Working with ids:

```python
from osmhist.feature import parse_feature_id
from osmhist.element import parse_element_id

fid = parse_feature_id("way/10")
print(fid.type(), fid.ref())           # way 10
print(str(fid.element_id(3)))          # way/10:3
print(parse_element_id("node/100"))    # node/100:-
```

Matching the versions of a node to two versions of a way:

```python
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from osmhist.annotate.child import Child
from osmhist.annotate.childlist import ChildList
from osmhist.annotate.compute import compute
from osmhist.annotate.options import build_options, threshold
from osmhist.feature import Type

node = Type.NODE.feature_id(1)
t0 = datetime(2016, 1, 1, tzinfo=timezone.utc)
history = ChildList([
    Child(id=node, version=1, version_index=0, timestamp=t0, visible=True),
    Child(id=node, version=2, version_index=1,
          timestamp=t0 + timedelta(hours=1), visible=True),
])


@dataclass
class WayVersion:
    version: int
    timestamp: datetime
    id: int = Type.WAY.feature_id(7)
    changeset_id: int = 0
    visible: bool = True
    committed: datetime | None = None
    children: dict = field(default_factory=dict)

    def refs(self):
        return [node], [False]

    def set_child(self, idx, child):
        self.children[idx] = child


class Histories:
    def get(self, fid):
        return {node: history}[fid]

    def not_found(self, err):
        return isinstance(err, KeyError)


ways = [WayVersion(1, t0), WayVersion(2, t0 + timedelta(hours=2))]
updates = compute(ways, Histories(), build_options([threshold(timedelta(minutes=1))]))
print(ways[0].children[0].version)     # 1
print([u.version for u in updates[0]]) # [2]  node changed between way versions
print(updates[1])                      # []
```

## What this package does not do

- It does not read or write OpenStreetMap XML or any other file format.
- It has no node, way, relation, changeset or diff classes of its own. The
  datasource and the ordering work with any objects that have the attributes
  they use.
- It has no ready-made functions to annotate ways or relations. `compute`
  works on whatever parent objects and child histories the caller supplies,
  so the adapters that turn ways or relations into `Parent`s, and histories
  into `ChildList`s, must be written by the caller.
- There is no command-line tool. It is used as a library only.

## Running the tests

```
pip install .[test]
pytest
```