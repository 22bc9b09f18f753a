"""
rill.pds.cons - Persistent singly linked list

Cons cells are immutable: cons(x, lst) shares lst. EMPTY_LIST is the single
empty list; every list ends with it. Because cells never change, an Enum
over a list just holds a pointer into it and clones in O(1).
"""

from typing import Any, Iterable

from rill.core import Cursor, Enum, IndexedCursor
from rill.types import EXHAUSTED


class Cons:
    """An immutable list cell with a first element and the rest of the list."""

    __slots__ = ("first", "rest", "_len")

    def __init__(self, first: Any, rest: "Cons"):
        self.first = first
        self.rest = rest
        self._len = rest._len + 1

    def __len__(self):
        return self._len

    def __iter__(self):
        node = self
        while node._len:
            yield node.first
            node = node.rest

    def __eq__(self, other):
        if not isinstance(other, Cons):
            return NotImplemented
        if self._len != other._len:
            return False
        a, b = self, other
        while a._len:
            if a is b:
                return True
            if a.first != b.first:
                return False
            a, b = a.rest, b.rest
        return True

    def __hash__(self):
        return hash(("Cons", tuple(self)))

    def __repr__(self):
        return f"plist({', '.join(repr(x) for x in self)})"

    def enum(self) -> Enum:
        return Enum(ConsCursor(self))

    def backwards(self) -> Enum:
        # Singly linked: reverse order needs a snapshot of the items
        items = tuple(self)
        return Enum(IndexedCursor(items, range(len(items) - 1, -1, -1)))

    @classmethod
    def of_enum(cls, e: Any) -> "Cons":
        return plist(*e)

    @classmethod
    def of_backwards(cls, e: Any) -> "Cons":
        result = EMPTY_LIST
        for item in e:
            result = Cons(item, result)
        return result


class _Empty(Cons):
    __slots__ = ()

    def __init__(self):
        self.first = None
        self.rest = self
        self._len = 0


EMPTY_LIST = _Empty()


class ConsCursor(Cursor):
    """Cursor holding a pointer into an immutable list."""

    __slots__ = ("_node",)

    def __init__(self, node: Cons):
        self._node = node

    def next(self):
        node = self._node
        if not node._len:
            return EXHAUSTED
        self._node = node.rest
        return node.first

    def count(self) -> int:
        return self._node._len

    def clone(self) -> "ConsCursor":
        return ConsCursor(self._node)


def cons(first: Any, rest: Cons = EMPTY_LIST) -> Cons:
    """Prepend first to rest."""
    return Cons(first, rest)


def plist(*items: Any) -> Cons:
    """Build a list holding items in order."""
    return of_iterable(items)


def of_iterable(items: Iterable) -> Cons:
    result = EMPTY_LIST
    for item in reversed(list(items)):
        result = Cons(item, result)
    return result


__all__ = ["Cons", "ConsCursor", "EMPTY_LIST", "cons", "plist", "of_iterable"]
