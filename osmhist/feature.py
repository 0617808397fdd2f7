"""Feature identifiers: the type and reference of an object, without a version."""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .element import ElementID

VERSION_BITS = 16
VERSION_MASK = 0x000000000000FFFF

REF_MASK = 0x00FFFFFFFFFF0000
FEATURE_MASK = 0x7FFFFFFFFFFF0000
TYPE_MASK = 0x7F00000000000000

BOUNDS_MASK = 0x0800000000000000
NODE_MASK = 0x1000000000000000
WAY_MASK = 0x2000000000000000
RELATION_MASK = 0x3000000000000000
CHANGESET_MASK = 0x4000000000000000
NOTE_MASK = 0x5000000000000000
USER_MASK = 0x6000000000000000

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def _parse_int64(text: str) -> int:
    """Parse a base 10 signed 64 bit integer, rejecting anything else."""
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError(f"invalid syntax: {text!r}")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"value out of range: {text!r}")
    return value


class Type(str, Enum):
    """The type of an osm object."""

    NODE = "node"
    WAY = "way"
    RELATION = "relation"
    CHANGESET = "changeset"
    NOTE = "note"
    USER = "user"
    BOUNDS = "bounds"

    def __str__(self) -> str:
        return self.value

    def feature_id(self, ref: int) -> FeatureID:
        """Return the feature id of the given reference for this type.

        Only nodes, ways and relations are features; other types raise ValueError.
        """
        mask = _FEATURE_TYPE_MASKS.get(self)
        if mask is None:
            raise ValueError(f"unknown type: {self.value}")
        return FeatureID(mask | (ref << VERSION_BITS))


_FEATURE_TYPE_MASKS = {
    Type.NODE: NODE_MASK,
    Type.WAY: WAY_MASK,
    Type.RELATION: RELATION_MASK,
}

_MASK_FEATURE_TYPES = {mask: t for t, mask in _FEATURE_TYPE_MASKS.items()}


def _feature_type(value: int) -> Type | None:
    return _MASK_FEATURE_TYPES.get(value & TYPE_MASK)


class FeatureID(int):
    """An identifier for all the versions of a node, way or relation."""

    __slots__ = ()

    def type(self) -> Type | None:
        """Return the type of the feature, or None if it is not a valid type."""
        return _feature_type(self)

    def ref(self) -> int:
        """Return the reference of the feature; not unique without the type."""
        return (self & REF_MASK) >> VERSION_BITS

    def element_id(self, version: int) -> ElementID:
        """Return the element id of the given version of this feature."""
        from .element import ElementID

        return ElementID(int(self) | (VERSION_MASK & version))

    def node_id(self) -> int:
        """Return the reference as a node id; raises ValueError if not a node."""
        if self & NODE_MASK != NODE_MASK:
            raise ValueError(f"not a node: {self}")
        return self.ref()

    def way_id(self) -> int:
        """Return the reference as a way id; raises ValueError if not a way."""
        if self & WAY_MASK != WAY_MASK:
            raise ValueError(f"not a way: {self}")
        return self.ref()

    def relation_id(self) -> int:
        """Return the reference as a relation id; raises ValueError if not a relation."""
        if self & RELATION_MASK != RELATION_MASK:
            raise ValueError(f"not a relation: {self}")
        return self.ref()

    def __str__(self) -> str:
        t = self.type()
        name = t.value if t is not None else "unknown"
        return f"{name}/{self.ref()}"

    def __repr__(self) -> str:
        return f"FeatureID({str(self)!r})"


def parse_feature_id(s: str) -> FeatureID:
    """Parse a string of the form "type/ref" into a feature id."""
    parts = s.split("/")
    if len(parts) != 2:
        raise ValueError(f"invalid feature id: {s}")

    try:
        ref = _parse_int64(parts[1])
    except ValueError as err:
        raise ValueError(f"invalid feature id: {s}: {err}") from err

    try:
        return Type(parts[0]).feature_id(ref)
    except ValueError as err:
        raise ValueError(f"invalid feature id: {s}: {err}") from err


def feature_id_counts(ids: Iterable[int]) -> tuple[int, int, int]:
    """Return the number of node, way and relation ids in the collection."""
    nodes = ways = relations = 0
    for fid in ids:
        t = _feature_type(fid)
        if t is Type.NODE:
            nodes += 1
        elif t is Type.WAY:
            ways += 1
        elif t is Type.RELATION:
            relations += 1
    return nodes, ways, relations