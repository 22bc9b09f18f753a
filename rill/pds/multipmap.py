"""
rill.pds.multipmap - Persistent multimap

A MultiPMap binds each key to a PSet of values. A key is present exactly
when it has at least one value: removing the last value of a key removes
the key itself, so there is never an empty-but-present entry.
"""

from typing import Any, Callable, Optional

from rill.combinators import map as enum_map
from rill.combinators import mapcat
from rill.core import Enum
from rill.pds.pmap import PMap
from rill.pds.pset import PSet


class MultiPMap:
    """An immutable map from keys to sets of values."""

    __slots__ = ("_map", "_value_cmp")

    def __init__(
        self,
        key_cmp: Optional[Callable[[Any, Any], int]] = None,
        value_cmp: Optional[Callable[[Any, Any], int]] = None,
        _map: Optional[PMap] = None,
    ):
        self._map = _map if _map is not None else PMap.empty(key_cmp)
        self._value_cmp = value_cmp

    @classmethod
    def empty(cls, key_cmp=None, value_cmp=None) -> "MultiPMap":
        return cls(key_cmp, value_cmp)

    def _with_map(self, new_map: PMap) -> "MultiPMap":
        if new_map is self._map:
            return self
        return MultiPMap(value_cmp=self._value_cmp, _map=new_map)

    def add(self, key: Any, value: Any) -> "MultiPMap":
        """Return a multimap where value is one of the values of key."""
        values = self._map.get(key)
        if values is None:
            values = PSet.empty(self._value_cmp)
        return self._with_map(self._map.add(key, values.add(value)))

    def remove(self, key: Any, value: Any) -> "MultiPMap":
        """Return a multimap without the binding key -> value.

        When value was the last value of key, key is removed as well.
        """
        values = self._map.get(key)
        if values is None:
            return self
        remaining = values.remove(value)
        if remaining is values:
            return self
        if len(remaining) == 0:
            return self._with_map(self._map.remove(key))
        return self._with_map(self._map.add(key, remaining))

    def remove_all(self, key: Any) -> "MultiPMap":
        """Return a multimap without key and any of its values."""
        return self._with_map(self._map.remove(key))

    def find(self, key: Any) -> PSet:
        """Return the values of key, an empty PSet when key is absent."""
        values = self._map.get(key)
        if values is None:
            return PSet.empty(self._value_cmp)
        return values

    def mem(self, key: Any) -> bool:
        return self._map.mem(key)

    def enum(self) -> Enum:
        """Enumerate (key, value) pairs, keys in order then values in order."""
        return mapcat(
            lambda kv: enum_map(lambda v: (kv[0], v), kv[1].enum()), self._map.enum()
        )

    def keys(self) -> Enum:
        return self._map.keys_enum()

    @classmethod
    def of_enum(cls, e: Any, key_cmp=None, value_cmp=None) -> "MultiPMap":
        """Build a multimap from (key, value) pairs."""
        result = cls(key_cmp, value_cmp)
        for key, value in e:
            result = result.add(key, value)
        return result

    def __contains__(self, key):
        return self.mem(key)

    def __len__(self):
        # Number of keys
        return len(self._map)

    def __eq__(self, other):
        if not isinstance(other, MultiPMap):
            return NotImplemented
        return self._map == other._map

    __hash__ = None

    def __repr__(self):
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self._map.enum())
        return f"MultiPMap({{{items}}})"


__all__ = ["MultiPMap"]
