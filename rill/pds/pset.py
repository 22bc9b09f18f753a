"""
rill.pds.pset - Persistent ordered set

PSet shares the AVL tree of PMap, storing elements as keys. It is also a
read-only collections.abc.Set, so the usual set operators work and return
PSets with the same ordering.
"""

from collections.abc import Set
from typing import Any, Callable, Optional

from rill.core import Enum
from rill.pds import tree
from rill.pds.tree import natural_compare


def _element(node):
    return node.key


class PSet(Set):
    """An immutable set ordered by a comparison function."""

    __slots__ = ("_root", "_cmp")

    def __init__(self, cmp: Optional[Callable[[Any, Any], int]] = None, root: Optional[tree.Node] = None):
        self._cmp = cmp if cmp is not None else natural_compare
        self._root = root

    @classmethod
    def empty(cls, cmp: Optional[Callable[[Any, Any], int]] = None) -> "PSet":
        return cls(cmp)

    def _from_iterable(self, it):
        # Results of the Set operators keep this set's ordering
        return PSet.of_enum(it, self._cmp)

    def _with_root(self, root):
        if root is self._root:
            return self
        return PSet(self._cmp, root)

    def add(self, element: Any) -> "PSet":
        """Return a set that also contains element."""
        return self._with_root(tree.add(self._root, element, None, self._cmp))

    def remove(self, element: Any) -> "PSet":
        """Return a set without element. Missing elements return self."""
        return self._with_root(tree.remove(self._root, element, self._cmp))

    def mem(self, element: Any) -> bool:
        return tree.find(self._root, element, self._cmp) is not None

    def union(self, other: Any) -> "PSet":
        """Return a set holding the elements of both sets."""
        root = self._root
        for element in other:
            root = tree.add(root, element, None, self._cmp)
        return self._with_root(root)

    def min_elt(self) -> Any:
        node = tree.min_node(self._root)
        if node is None:
            raise KeyError("min_elt of an empty set")
        return node.key

    def max_elt(self) -> Any:
        node = tree.max_node(self._root)
        if node is None:
            raise KeyError("max_elt of an empty set")
        return node.key

    def enum(self) -> Enum:
        """Enumerate the elements in increasing order."""
        return Enum(tree.TreeCursor(self._root, _element))

    def backwards(self) -> Enum:
        """Enumerate the elements in decreasing order."""
        return Enum(tree.TreeCursor(self._root, _element, reverse=True))

    @classmethod
    def of_enum(cls, e: Any, cmp: Optional[Callable[[Any, Any], int]] = None) -> "PSet":
        """Build a set from a sequence. A later equal element replaces an earlier one."""
        cmp = cmp if cmp is not None else natural_compare
        root = None
        for element in e:
            root = tree.add(root, element, None, cmp)
        return cls(cmp, root)

    def __contains__(self, element):
        return self.mem(element)

    def __len__(self):
        return tree.size(self._root)

    def __iter__(self):
        return self.enum()

    def __repr__(self):
        return f"PSet({{{', '.join(repr(x) for x in self.enum())}}})"


__all__ = ["PSet"]
