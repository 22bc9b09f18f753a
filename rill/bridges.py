"""
rill.bridges - Bridges for built-in and persistent containers

Registers enum/of_enum (and where order makes sense backwards/of_backwards)
for the containers the package knows about. Importing rill does this once.

Snapshot policy, per container kind:
- Mutable containers (list, deque, array, bytearray, dict, set) are copied
  when the Enum is created, so later mutation is never observed.
- Immutable random-access containers (tuple, str, bytes, range) and the
  persistent structures in rill.pds are shared as they are.
- frozenset is immutable but not indexable; it is copied into a tuple.
"""

import array
from collections import OrderedDict, deque

from rill.core import Enum, IndexedCursor
from rill.pds import Cons, MultiPMap, PMap, PSet, RefList
from rill.protocols import register_bridge

# =============================================================================
# Ordered sequences and growable buffers
# =============================================================================


def _forward(items) -> Enum:
    return Enum(IndexedCursor(items))


def _reverse(items) -> Enum:
    return Enum(IndexedCursor(items, range(len(items) - 1, -1, -1)))


def _snapshot_forward(container) -> Enum:
    return _forward(tuple(container))


def _snapshot_reverse(container) -> Enum:
    return _reverse(tuple(container))


def _reversed_list(e) -> list:
    items = list(e)
    items.reverse()
    return items


register_bridge(
    list,
    enum=_snapshot_forward,
    backwards=_snapshot_reverse,
    of_enum=lambda e: list(e),
    of_backwards=_reversed_list,
)

register_bridge(
    tuple,
    enum=_forward,
    backwards=_reverse,
    of_enum=lambda e: tuple(e),
    of_backwards=lambda e: tuple(_reversed_list(e)),
)

register_bridge(
    deque,
    enum=_snapshot_forward,
    backwards=_snapshot_reverse,
    of_enum=lambda e, maxlen=None: deque(e, maxlen),
    of_backwards=lambda e, maxlen=None: deque(_reversed_list(e), maxlen),
)

register_bridge(
    range,
    enum=_forward,
    backwards=_reverse,
)

register_bridge(
    str,
    enum=_forward,
    backwards=_reverse,
    of_enum=lambda e: "".join(e),
    of_backwards=lambda e: "".join(_reversed_list(e)),
)

register_bridge(
    bytes,
    enum=_forward,
    backwards=_reverse,
    of_enum=lambda e: bytes(e),
    of_backwards=lambda e: bytes(_reversed_list(e)),
)

register_bridge(
    bytearray,
    enum=lambda b: _forward(bytes(b)),
    backwards=lambda b: _reverse(bytes(b)),
    of_enum=lambda e: bytearray(e),
    of_backwards=lambda e: bytearray(_reversed_list(e)),
)


_TEXT_TYPECODE = "w" if "w" in array.typecodes else "u"


def _infer_typecode(e) -> str:
    first = e.peek()
    if isinstance(first, float):
        return "d"
    if isinstance(first, str):
        return _TEXT_TYPECODE
    return "q"


def _array_of_enum(e, typecode=None):
    if typecode is None:
        typecode = _infer_typecode(e)
    return array.array(typecode, e)


def _array_of_backwards(e, typecode=None):
    if typecode is None:
        typecode = _infer_typecode(e)
    return array.array(typecode, _reversed_list(e))


register_bridge(
    array.array,
    enum=lambda a: _forward(a.tolist()),
    backwards=lambda a: _reverse(a.tolist()),
    of_enum=_array_of_enum,
    of_backwards=_array_of_backwards,
)

# =============================================================================
# Hash-keyed maps and sets
# =============================================================================


def _unique_last_wins(kind):
    def build(e):
        items = set()
        for x in e:
            # Replace an equal element already present
            items.discard(x)
            items.add(x)
        return kind(items) if kind is not set else items

    return build


def _mapping_last_wins(kind):
    def build(e):
        result = kind()
        for key, value in e:
            # Drop the earlier binding so the later key object is kept too
            result.pop(key, None)
            result[key] = value
        return result

    return build


register_bridge(
    dict,
    enum=lambda d: _forward(tuple(d.items())),
    backwards=lambda d: _reverse(tuple(d.items())),
    of_enum=_mapping_last_wins(dict),
)

register_bridge(
    OrderedDict,
    of_enum=_mapping_last_wins(OrderedDict),
    of_backwards=lambda e: _mapping_last_wins(OrderedDict)(_reversed_list(e)),
)

register_bridge(
    set,
    enum=_snapshot_forward,
    of_enum=_unique_last_wins(set),
)

register_bridge(
    frozenset,
    enum=_snapshot_forward,
    of_enum=_unique_last_wins(frozenset),
)

# =============================================================================
# Persistent structures
# =============================================================================

register_bridge(
    Cons,
    enum=Cons.enum,
    backwards=Cons.backwards,
    of_enum=Cons.of_enum,
    of_backwards=Cons.of_backwards,
)

register_bridge(
    PMap,
    enum=PMap.enum,
    backwards=PMap.backwards,
    of_enum=PMap.of_enum,
)

register_bridge(
    PSet,
    enum=PSet.enum,
    backwards=PSet.backwards,
    of_enum=PSet.of_enum,
)

register_bridge(
    MultiPMap,
    enum=MultiPMap.enum,
    of_enum=MultiPMap.of_enum,
)

register_bridge(
    RefList,
    enum=RefList.enum,
    backwards=RefList.backwards,
    of_enum=RefList.of_enum,
    of_backwards=RefList.of_backwards,
)
