"""Insertion-ordered set used for deterministic dependency output."""
from __future__ import annotations

from collections.abc import MutableSet
from typing import Dict, Generic, Iterable, Iterator, List, TypeVar

T = TypeVar("T")


class OrderedSet(MutableSet, Generic[T]):
    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: Dict[T, None] = {}
        self.update(items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: T) -> None:
        self._items.setdefault(item, None)

    def discard(self, item: T) -> None:
        self._items.pop(item, None)

    def update(self, items: Iterable[T]) -> None:
        for item in items:
            self.add(item)

    def to_list(self) -> List[T]:
        return list(self._items)

    def __repr__(self) -> str:
        return f"OrderedSet({list(self._items)!r})"


__all__ = ["OrderedSet"]
