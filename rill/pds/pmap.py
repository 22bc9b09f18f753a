"""
rill.pds.pmap - Persistent ordered map

PMap is an immutable balanced binary tree map with a pluggable three-way
comparison function. Updates return new maps sharing structure with the
old ones. Traversal is in key order; enum() walks a frozen version so it
is unaffected by later updates.

Example:
    >>> m = PMap.empty().add(2, "b").add(1, "a")
    >>> list(m.enum())
    [(1, 'a'), (2, 'b')]
"""

from collections.abc import Mapping
from typing import Any, Callable, Optional

from rill.core import Enum
from rill.pds import tree
from rill.pds.tree import natural_compare
from rill.types import _MISSING, EXHAUSTED


def _item(node):
    return (node.key, node.value)


def _key(node):
    return node.key


def _value(node):
    return node.value


class PMap(Mapping):
    """
    An immutable map ordered by a comparison function.

    Also a read-only collections.abc.Mapping, so it supports m[k], len(m),
    `k in m`, keys(), values() and items() like a dict.
    """

    __slots__ = ("_root", "_cmp")

    def __init__(self, cmp: Optional[Callable[[Any, Any], int]] = None, root: Optional[tree.Node] = None):
        self._cmp = cmp if cmp is not None else natural_compare
        self._root = root

    @classmethod
    def empty(cls, cmp: Optional[Callable[[Any, Any], int]] = None) -> "PMap":
        """Return an empty map using cmp (default: natural ordering)."""
        return cls(cmp)

    def _with_root(self, root: Optional[tree.Node]) -> "PMap":
        if root is self._root:
            return self
        return PMap(self._cmp, root)

    # -- updates --------------------------------------------------------------

    def add(self, key: Any, value: Any) -> "PMap":
        """Return a map with key bound to value. An existing binding is replaced."""
        return self._with_root(tree.add(self._root, key, value, self._cmp))

    def remove(self, key: Any) -> "PMap":
        """Return a map without key. Removing a missing key returns self."""
        return self._with_root(tree.remove(self._root, key, self._cmp))

    def update(self, key: Any, f: Callable[[Any], Any], default: Any = _MISSING) -> "PMap":
        """Return a map where key is bound to f(old value).

        Raises:
            KeyError: If key is absent and no default was given.
        """
        node = tree.find(self._root, key, self._cmp)
        if node is None:
            if default is _MISSING:
                raise KeyError(key)
            return self.add(key, f(default))
        return self.add(key, f(node.value))

    # -- lookups --------------------------------------------------------------

    def find(self, key: Any) -> Any:
        """Return the value bound to key.

        Raises:
            KeyError: If key is absent.
        """
        node = tree.find(self._root, key, self._cmp)
        if node is None:
            raise KeyError(key)
        return node.value

    def get(self, key: Any, default: Any = None) -> Any:
        node = tree.find(self._root, key, self._cmp)
        return default if node is None else node.value

    def mem(self, key: Any) -> bool:
        """Return True if key is bound."""
        return tree.find(self._root, key, self._cmp) is not None

    def min_binding(self) -> tuple:
        """Return the (key, value) pair with the smallest key.

        Raises:
            KeyError: If the map is empty.
        """
        node = tree.min_node(self._root)
        if node is None:
            raise KeyError("min_binding of an empty map")
        return _item(node)

    def max_binding(self) -> tuple:
        """Return the (key, value) pair with the largest key.

        Raises:
            KeyError: If the map is empty.
        """
        node = tree.max_node(self._root)
        if node is None:
            raise KeyError("max_binding of an empty map")
        return _item(node)

    # -- traversals -----------------------------------------------------------

    def iter(self, f: Callable[[Any, Any], Any]) -> None:
        """Call f(key, value) on every binding in key order."""
        tree.walk(self._root, lambda node: f(node.key, node.value))

    def map(self, f: Callable[[Any], Any]) -> "PMap":
        """Return a map with the same keys and f(value) as values."""
        return PMap(self._cmp, tree.map_values(self._root, lambda k, v: f(v)))

    def mapi(self, f: Callable[[Any, Any], Any]) -> "PMap":
        """Return a map with the same keys and f(key, value) as values."""
        return PMap(self._cmp, tree.map_values(self._root, f))

    def fold(self, f: Callable[[Any, Any, Any], Any], init: Any) -> Any:
        """Fold f(acc, key, value) over the bindings in key order."""
        e = self.enum()
        acc = init
        while True:
            item = e.next()
            if item is EXHAUSTED:
                return acc
            acc = f(acc, item[0], item[1])

    def enum(self) -> Enum:
        """Enumerate (key, value) pairs in increasing key order."""
        return Enum(tree.TreeCursor(self._root, _item))

    def backwards(self) -> Enum:
        """Enumerate (key, value) pairs in decreasing key order."""
        return Enum(tree.TreeCursor(self._root, _item, reverse=True))

    def keys_enum(self) -> Enum:
        """Enumerate the keys in increasing order."""
        return Enum(tree.TreeCursor(self._root, _key))

    def values_enum(self) -> Enum:
        """Enumerate the values in increasing key order."""
        return Enum(tree.TreeCursor(self._root, _value))

    @classmethod
    def of_enum(cls, e: Any, cmp: Optional[Callable[[Any, Any], int]] = None) -> "PMap":
        """Build a map from (key, value) pairs. The last binding of a key wins."""
        cmp = cmp if cmp is not None else natural_compare
        root = None
        for key, value in e:
            root = tree.add(root, key, value, cmp)
        return cls(cmp, root)

    # -- Mapping protocol -----------------------------------------------------

    def __getitem__(self, key):
        return self.find(key)

    def __contains__(self, key):
        return self.mem(key)

    def __len__(self):
        return tree.size(self._root)

    def __iter__(self):
        return self.keys_enum()

    def __repr__(self):
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self.enum())
        return f"PMap({{{items}}})"


__all__ = ["PMap"]
