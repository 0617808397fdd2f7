"""In-memory history of nodes, ways and relations, keyed by id."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol


class NotFoundError(LookupError):
    """Raised when a datasource has no history for the requested feature."""

    def __init__(self, message: str = "osm: feature not found") -> None:
        super().__init__(message)


class _Versioned(Protocol):
    id: int
    version: int
    visible: bool


@dataclass
class HistoryDatasource:
    """Histories of nodes, ways and relations held in dictionaries."""

    nodes: dict[int, list[Any]] = field(default_factory=dict)
    ways: dict[int, list[Any]] = field(default_factory=dict)
    relations: dict[int, list[Any]] = field(default_factory=dict)

    def add(
        self,
        nodes: Iterable[_Versioned] = (),
        ways: Iterable[_Versioned] = (),
        relations: Iterable[_Versioned] = (),
        visible: bool | None = None,
    ) -> None:
        """Append elements to their histories, in order.

        If visible is given, it is set on every added element.
        """
        for store, elements in (
            (self.nodes, nodes),
            (self.ways, ways),
            (self.relations, relations),
        ):
            for element in elements:
                if visible is not None:
                    element.visible = visible
                store.setdefault(element.id, []).append(element)

    @staticmethod
    def _lookup(store: dict[int, list[Any]], id: int) -> list[Any]:
        history = store.get(id)
        if history is None:
            raise NotFoundError()
        return history

    def node_history(self, id: int) -> list[Any]:
        """Return the history of the node; raises NotFoundError if unknown."""
        return self._lookup(self.nodes, id)

    def way_history(self, id: int) -> list[Any]:
        """Return the history of the way; raises NotFoundError if unknown."""
        return self._lookup(self.ways, id)

    def relation_history(self, id: int) -> list[Any]:
        """Return the history of the relation; raises NotFoundError if unknown."""
        return self._lookup(self.relations, id)

    def not_found(self, err: BaseException | None) -> bool:
        """Return True if the error is a not found error of this datasource."""
        return isinstance(err, NotFoundError)