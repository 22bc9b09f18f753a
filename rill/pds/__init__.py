"""
rill.pds - Persistent data structures

Pure-Python persistent containers that plug into the sequence core:
- Cons / plist: immutable singly linked list
- PMap: ordered map on a balanced tree
- PSet: ordered set on the same tree
- MultiPMap: map from keys to sets of values
- RefList: mutable cell holding a Cons list

Every structure here has enum() / of_enum() and is registered with the
bridge registry by rill.bridges.
"""

from rill.pds.cons import EMPTY_LIST, Cons, cons, plist
from rill.pds.multipmap import MultiPMap
from rill.pds.pmap import PMap
from rill.pds.pset import PSet
from rill.pds.reflist import RefList

__all__ = [
    "Cons",
    "EMPTY_LIST",
    "cons",
    "plist",
    "PMap",
    "PSet",
    "MultiPMap",
    "RefList",
]
