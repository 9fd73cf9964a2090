"""Doubly linked queue with O(1) requeue, after Cormen et al.

Entries are linked intrusively: anything queued must derive from
``ListEntry``. ``enqueue`` inserts at the front, unlinking the entry first
if it is already queued; ``dequeue`` removes from the back.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Generic, TypeVar


class ListEntry:
    _prev: ListEntry | None = None
    _next: ListEntry | None = None


T = TypeVar("T", bound=ListEntry)


class DoublyLinkedList(Generic[T]):
    def __init__(self) -> None:
        sentinel = ListEntry()
        sentinel._prev = sentinel
        sentinel._next = sentinel
        self._sentinel = sentinel

    def dequeue(self) -> T | None:
        entry = self._sentinel._prev
        if entry is None or entry is self._sentinel:
            return None
        _unlink(entry)
        return entry  # type: ignore[return-value]

    def enqueue(self, entry: T) -> None:
        if entry._prev is not None and entry._next is not None:
            _unlink(entry)
        sentinel = self._sentinel
        entry._next = sentinel._next
        sentinel._next._prev = entry  # type: ignore[union-attr]
        sentinel._next = entry
        entry._prev = sentinel

    def __iter__(self) -> Iterator[T]:
        """Iterate from the back (next to dequeue) to the front."""
        curr = self._sentinel._prev
        while curr is not None and curr is not self._sentinel:
            yield curr  # type: ignore[misc]
            curr = curr._prev

    def __bool__(self) -> bool:
        return self._sentinel._prev is not self._sentinel

    def __repr__(self) -> str:
        return "[" + ", ".join(repr(entry) for entry in self) + "]"


def _unlink(entry: ListEntry) -> None:
    entry._prev._next = entry._next  # type: ignore[union-attr]
    entry._next._prev = entry._prev  # type: ignore[union-attr]
    entry._prev = None
    entry._next = None
