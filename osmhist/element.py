"""Element identifiers: type, reference and version of an osm element."""

from __future__ import annotations

from collections.abc import Iterable

from .feature import (
    FEATURE_MASK,
    NODE_MASK,
    REF_MASK,
    RELATION_MASK,
    TYPE_MASK,
    VERSION_BITS,
    VERSION_MASK,
    WAY_MASK,
    FeatureID,
    Type,
    _parse_int64,
)

_MASK_TYPES = {
    NODE_MASK: Type.NODE,
    WAY_MASK: Type.WAY,
    RELATION_MASK: Type.RELATION,
}


class ElementID(int):
    """A unique key for one version of a node, way or relation."""

    __slots__ = ()

    def type(self) -> Type:
        """Return the type of the element; raises ValueError for unknown types."""
        t = _MASK_TYPES.get(self & TYPE_MASK)
        if t is None:
            raise ValueError("unknown type")
        return t

    def ref(self) -> int:
        """Return the reference of the element; not unique without the type."""
        return (self & REF_MASK) >> VERSION_BITS

    def version(self) -> int:
        """Return the version of the element."""
        return self & VERSION_MASK

    def feature_id(self) -> FeatureID:
        """Return the feature id, i.e. this id without the version."""
        return FeatureID(self & FEATURE_MASK)

    def node_id(self) -> int:
        """Return the reference as a node id; raises ValueError if not a node."""
        if self & NODE_MASK != NODE_MASK:
            raise ValueError(f"not a node: {int(self)}")
        return self.ref()

    def way_id(self) -> int:
        """Return the reference as a way id; raises ValueError if not a way."""
        if self & WAY_MASK != WAY_MASK:
            raise ValueError(f"not a way: {int(self)}")
        return self.ref()

    def relation_id(self) -> int:
        """Return the reference as a relation id; raises ValueError if not a relation."""
        if self & RELATION_MASK != RELATION_MASK:
            raise ValueError(f"not a relation: {int(self)}")
        return self.ref()

    def __str__(self) -> str:
        version = self.version()
        suffix = "-" if version == 0 else str(version)
        return f"{self.type().value}/{self.ref()}:{suffix}"

    def __repr__(self) -> str:
        try:
            return f"ElementID({str(self)!r})"
        except ValueError:
            return f"ElementID({int(self)})"


def parse_element_id(s: str) -> ElementID:
    """Parse a string of the form "type/ref:version" into an element id.

    The version may be "-" or left out, both meaning version 0.
    """
    parts = s.split("/")
    if len(parts) != 2:
        raise ValueError(f"invalid element id: {s}")

    ref_parts = parts[1].split(":")
    if len(ref_parts) not in (1, 2):
        raise ValueError(f"invalid element id: {s}")

    try:
        ref = _parse_int64(ref_parts[0])
    except ValueError as err:
        raise ValueError(f"invalid element id: {s}: {err}") from err

    version = 0
    if len(ref_parts) == 2 and ref_parts[1] != "-":
        try:
            version = _parse_int64(ref_parts[1])
        except ValueError as err:
            raise ValueError(f"invalid element id: {s}: {err}") from err

    try:
        fid = Type(parts[0]).feature_id(ref)
    except ValueError as err:
        raise ValueError(f"invalid element id: {s}: {err}") from err

    return fid.element_id(version)


def element_id_counts(ids: Iterable[int]) -> tuple[int, int, int]:
    """Return the number of node, way and relation ids in the collection."""
    nodes = ways = relations = 0
    for eid in ids:
        t = _MASK_TYPES.get(eid & TYPE_MASK)
        if t is Type.NODE:
            nodes += 1
        elif t is Type.WAY:
            ways += 1
        elif t is Type.RELATION:
            relations += 1
    return nodes, ways, relations