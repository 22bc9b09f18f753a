"""
rill.pds.reflist - Mutable reference to a persistent list

A RefList is a mutable cell holding a Cons list. Updates swap the cell's
contents; enumerations capture the list that was current when they were
created, so pushing while enumerating never disturbs the traversal.
"""

from typing import Any, Iterable

from rill.core import Enum
from rill.pds.cons import EMPTY_LIST, Cons, of_iterable


class RefList:
    """A mutable list built on an immutable one."""

    __slots__ = ("_list",)

    def __init__(self, items: Iterable = ()):
        self._list = items if isinstance(items, Cons) else of_iterable(items)

    @classmethod
    def empty(cls) -> "RefList":
        return cls()

    @property
    def value(self) -> Cons:
        """The current immutable list."""
        return self._list

    def push(self, item: Any) -> None:
        """Add item at the front."""
        self._list = Cons(item, self._list)

    def pop(self) -> Any:
        """Remove and return the first item.

        Raises:
            IndexError: If the list is empty.
        """
        node = self._list
        if not node:
            raise IndexError("pop from an empty RefList")
        self._list = node.rest
        return node.first

    def first(self) -> Any:
        """Return the first item.

        Raises:
            IndexError: If the list is empty.
        """
        if not self._list:
            raise IndexError("first of an empty RefList")
        return self._list.first

    def add(self, item: Any) -> None:
        """Add item at the end. O(n)."""
        self._list = of_iterable([*self._list, item])

    def clear(self) -> None:
        self._list = EMPTY_LIST

    def is_empty(self) -> bool:
        return not self._list

    def to_list(self) -> list:
        return list(self._list)

    def enum(self) -> Enum:
        """Enumerate the current contents front to back."""
        return self._list.enum()

    def backwards(self) -> Enum:
        """Enumerate the current contents back to front."""
        return self._list.backwards()

    @classmethod
    def of_enum(cls, e: Any) -> "RefList":
        return cls(Cons.of_enum(e))

    @classmethod
    def of_backwards(cls, e: Any) -> "RefList":
        return cls(Cons.of_backwards(e))

    def __len__(self):
        return len(self._list)

    def __iter__(self):
        return self.enum()

    def __eq__(self, other):
        if not isinstance(other, RefList):
            return NotImplemented
        return self._list == other._list

    __hash__ = None

    def __repr__(self):
        return f"RefList({list(self._list)!r})"


__all__ = ["RefList"]
