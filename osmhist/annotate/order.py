"""Child-before-parent ordering of relations."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, Protocol

from ..feature import Type


class _RelationHistorySource(Protocol):
    def relation_history(self, id: int) -> list[Any]: ...

    def not_found(self, err: BaseException | None) -> bool: ...


class ChildFirstOrdering:
    """Iterates relation ids so that member relations come before their parents.

    Circular references are allowed; a relation already being walked higher
    up is not descended into again. Datasource errors other than not found
    are raised from iteration.
    """

    def __init__(self, ids: Iterable[int], ds: _RelationHistorySource) -> None:
        # Index of the last id in the input whose walk is complete;
        # a good restart position.
        self.completed_index = 0
        self._ds = ds
        self._visited: set[int] = set()
        self._closed = False
        self._walker = self._walk_all(list(ids))

    @property
    def closed(self) -> bool:
        """True once close() has been called."""
        return self._closed

    def __iter__(self) -> ChildFirstOrdering:
        return self

    def __next__(self) -> int:
        return next(self._walker)

    def close(self) -> None:
        """Stop the walk before all ids have been produced."""
        self._closed = True
        self._walker.close()

    def __enter__(self) -> ChildFirstOrdering:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _walk_all(self, ids: list[int]) -> Iterator[int]:
        for i, rid in enumerate(ids):
            yield from self._walk(rid, [])
            self.completed_index = i

    def _walk(self, rid: int, path: list[int]) -> Iterator[int]:
        if rid in self._visited:
            return

        try:
            relations = self._ds.relation_history(rid)
        except Exception as err:
            if self._ds.not_found(err):
                return
            raise

        for relation in relations:
            for member in relation.members:
                if member.type != Type.RELATION:
                    continue

                mid = member.ref
                if mid in path:
                    # Already being walked higher up the stack.
                    return

                yield from self._walk(mid, [*path, mid])

        self._visited.add(rid)
        yield rid