"""
rill.core - The lazy sequence engine

This module contains Enum, the pull-based lazy sequence that every container
in the package converts to and from, and the cursors that feed it.

An Enum is an explicit state machine: its state is either Pending(cursor) or
EXHAUSTED. The cursor supplies the four operations every sequence has:

- next(): the next element, or EXHAUSTED
- count(): remaining elements if known without consuming, else None
- clone(): an independent cursor at the same position
- fast_forward(n): skip up to n elements, returning how many were skipped

Categories:
- Cursors: IndexedCursor, IterableCursor, FunctionCursor, UnfoldCursor, ...
- The Enum type itself
- Constructors: make, from_iterable, from_indexed, empty, singleton, init,
  repeat, count_from, irange, iterate, unfold, seq
- Module-level accessors: next_, count, clone, fast_forward, nth, to_list
"""

import array
from abc import ABC, abstractmethod
from collections.abc import MappingView, MutableMapping, MutableSequence, MutableSet
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence

from rill.config import get_config
from rill.types import _MISSING, EXHAUSTED, Pending

# =============================================================================
# Cursors
# =============================================================================


class Cursor(ABC):
    """
    Source of elements behind a pending Enum.

    Subclasses must implement next() and clone(). count() defaults to
    unknown and fast_forward() to sequential pulls.
    """

    __slots__ = ()

    @abstractmethod
    def next(self) -> Any:
        """Return the next element, or EXHAUSTED."""

    @abstractmethod
    def clone(self) -> "Cursor":
        """Return an independent cursor positioned like this one."""

    def count(self) -> Optional[int]:
        """Return the number of remaining elements, or None if unknown."""
        return None

    def fast_forward(self, n: int) -> int:
        """Skip up to n elements. Returns the number actually skipped."""
        skipped = 0
        while skipped < n:
            if self.next() is EXHAUSTED:
                break
            skipped += 1
        return skipped


class IndexedCursor(Cursor):
    """
    Cursor over a random-access sequence (list, tuple, str, range, ...).

    The cursor walks a range of indices, so count() and fast_forward() are
    O(1) and clone() is a field copy. Callers that hand in a mutable
    sequence are responsible for passing a snapshot.
    """

    __slots__ = ("_items", "_indices", "_pos")

    def __init__(self, items: Sequence, indices: Optional[range] = None, pos: int = 0):
        self._items = items
        self._indices = indices if indices is not None else range(len(items))
        self._pos = pos

    def next(self):
        pos = self._pos
        if pos >= len(self._indices):
            return EXHAUSTED
        self._pos = pos + 1
        return self._items[self._indices[pos]]

    def count(self) -> int:
        return max(0, len(self._indices) - self._pos)

    def clone(self) -> "IndexedCursor":
        return IndexedCursor(self._items, self._indices, self._pos)

    def fast_forward(self, n: int) -> int:
        skipped = min(n, self.count())
        self._pos += skipped
        return skipped


class _Link:
    """
    One lazily realized position of a memoized iterator.

    Links form a chain: realizing a link pulls one element from the shared
    iterator and creates the link after it. Every cursor pointing into the
    chain sees the same elements, which is what makes iterators cloneable.
    Links that no cursor references any more are garbage collected.
    """

    __slots__ = ("_iterator", "_value", "_next", "_realized")

    def __init__(self, iterator: Iterator):
        self._iterator = iterator
        self._value = _MISSING
        self._next = None
        self._realized = False

    def _realize(self):
        """Realize this position from the iterator."""
        if self._realized:
            return
        try:
            self._value = next(self._iterator)
        except StopIteration:
            self._value = _MISSING
        else:
            self._next = _Link(self._iterator)
        self._realized = True
        self._iterator = None


class IterableCursor(Cursor):
    """
    Cursor over an arbitrary Python iterator.

    Elements are memoized in a chain of links so that clones replay the
    remaining elements without pulling the iterator twice.
    """

    __slots__ = ("_link",)

    def __init__(self, iterable: Optional[Iterable] = None, link: Optional[_Link] = None):
        if link is None:
            link = _Link(iter(iterable))
        self._link = link

    def next(self):
        link = self._link
        link._realize()
        if link._value is _MISSING:
            return EXHAUSTED
        self._link = link._next
        return link._value

    def clone(self) -> "IterableCursor":
        return IterableCursor(link=self._link)


class EnumCursor(Cursor):
    """Cursor that delegates to another Enum."""

    __slots__ = ("_enum",)

    def __init__(self, enum: "Enum"):
        self._enum = enum

    def next(self):
        return self._enum.next()

    def count(self) -> Optional[int]:
        return self._enum.count()

    def clone(self) -> "EnumCursor":
        return EnumCursor(self._enum.clone())

    def fast_forward(self, n: int) -> int:
        return self._enum.fast_forward(n)


def _pull_all(next_fn: Callable[[], Any]) -> Iterator:
    while True:
        value = next_fn()
        if value is EXHAUSTED:
            return
        yield value


class FunctionCursor(Cursor):
    """
    Cursor built from user supplied functions.

    next_fn returns an element or EXHAUSTED. count_fn, when given, returns
    the remaining count or None. clone_fn, when given, returns a new Enum.
    Without clone_fn the first clone switches this cursor to a memoized
    chain, so both sides replay the same elements and next_fn is still
    called once per element.
    """

    __slots__ = ("_next_fn", "_count_fn", "_clone_fn", "_memo")

    def __init__(
        self,
        next_fn: Callable[[], Any],
        count_fn: Optional[Callable[[], Optional[int]]] = None,
        clone_fn: Optional[Callable[[], "Enum"]] = None,
    ):
        self._next_fn = next_fn
        self._count_fn = count_fn
        self._clone_fn = clone_fn
        self._memo: Optional[IterableCursor] = None

    def next(self):
        if self._memo is not None:
            return self._memo.next()
        return self._next_fn()

    def count(self) -> Optional[int]:
        if self._memo is None and self._count_fn is not None:
            return self._count_fn()
        return None

    def clone(self) -> Cursor:
        if self._memo is None and self._clone_fn is not None:
            return EnumCursor(self._clone_fn())
        if self._memo is None:
            self._memo = IterableCursor(_pull_all(self._next_fn))
        return self._memo.clone()


class UnfoldCursor(Cursor):
    """
    Cursor driven by an immutable seed.

    step(seed) returns None to stop or a (value, next_seed) pair. Cloning
    copies the seed, so it never replays side effects of step.
    """

    __slots__ = ("_seed", "_step", "_done")

    def __init__(self, seed: Any, step: Callable[[Any], Optional[tuple]]):
        self._seed = seed
        self._step = step
        self._done = False

    def next(self):
        if self._done:
            return EXHAUSTED
        result = self._step(self._seed)
        if result is None:
            self._done = True
            return EXHAUSTED
        value, self._seed = result
        return value

    def clone(self) -> "UnfoldCursor":
        other = UnfoldCursor(self._seed, self._step)
        other._done = self._done
        return other


class RepeatCursor(Cursor):
    """Cursor producing the same value, a fixed number of times or forever."""

    __slots__ = ("_value", "_remaining")

    def __init__(self, value: Any, remaining: Optional[int] = None):
        self._value = value
        self._remaining = remaining

    def next(self):
        if self._remaining is None:
            return self._value
        if self._remaining <= 0:
            return EXHAUSTED
        self._remaining -= 1
        return self._value

    def count(self) -> Optional[int]:
        return self._remaining

    def clone(self) -> "RepeatCursor":
        return RepeatCursor(self._value, self._remaining)

    def fast_forward(self, n: int) -> int:
        if self._remaining is None:
            return n
        skipped = min(n, self._remaining)
        self._remaining -= skipped
        return skipped


class StepCursor(Cursor):
    """Cursor over the unbounded arithmetic progression start, start+step, ..."""

    __slots__ = ("_current", "_step")

    def __init__(self, start: Any, step: Any = 1):
        self._current = start
        self._step = step

    def next(self):
        value = self._current
        self._current = value + self._step
        return value

    def clone(self) -> "StepCursor":
        return StepCursor(self._current, self._step)

    def fast_forward(self, n: int) -> int:
        self._current = self._current + self._step * n
        return n


# =============================================================================
# Enum
# =============================================================================


class Enum:
    """
    A single-pass, possibly infinite, lazily evaluated sequence.

    Pulling with next() advances the sequence. clone() is the only way to
    obtain an independent cursor over the same remaining elements. Once
    next() has returned EXHAUSTED the cursor is dropped and every later
    pull returns EXHAUSTED as well.

    Enum is also a Python iterator, so it works with for loops, list(),
    itertools and friends.
    """

    __slots__ = ("_state", "_pushed", "__weakref__")

    def __init__(self, cursor: Optional[Cursor] = None):
        self._state = Pending(cursor) if cursor is not None else EXHAUSTED
        self._pushed: Optional[list] = None

    # -- the four slots -------------------------------------------------------

    def next(self) -> Any:
        """Return the next element, or EXHAUSTED when there are no more."""
        if self._pushed:
            return self._pushed.pop()
        state = self._state
        if state is EXHAUSTED:
            return EXHAUSTED
        value = state.cursor.next()
        if value is EXHAUSTED:
            self._state = EXHAUSTED
        return value

    def count(self) -> Optional[int]:
        """Return the number of remaining elements, or None if unknown.

        Never consumes the sequence.
        """
        pushed = len(self._pushed) if self._pushed else 0
        state = self._state
        if state is EXHAUSTED:
            return pushed
        remaining = state.cursor.count()
        if remaining is None:
            return None
        return pushed + remaining

    def clone(self) -> "Enum":
        """Return an independent sequence over the same remaining elements."""
        other = Enum.__new__(Enum)
        state = self._state
        other._state = EXHAUSTED if state is EXHAUSTED else Pending(state.cursor.clone())
        other._pushed = list(self._pushed) if self._pushed else None
        return other

    def fast_forward(self, n: int) -> int:
        """Skip up to n elements, stopping early at exhaustion.

        Returns the number of elements actually skipped.
        """
        if n < 0:
            raise ValueError(f"Cannot skip a negative number of elements: {n}")
        skipped = 0
        while skipped < n and self._pushed:
            self._pushed.pop()
            skipped += 1
        state = self._state
        if skipped == n or state is EXHAUSTED:
            return skipped
        wanted = n - skipped
        done = state.cursor.fast_forward(wanted)
        if done < wanted:
            self._state = EXHAUSTED
        return skipped + done

    # -- conveniences over the slots -----------------------------------------

    def push(self, value: Any) -> None:
        """Put an element back in front of the sequence."""
        if self._pushed is None:
            self._pushed = []
        self._pushed.append(value)

    def peek(self) -> Any:
        """Return the next element without consuming it, or EXHAUSTED."""
        value = self.next()
        if value is not EXHAUSTED:
            self.push(value)
        return value

    def get(self, default: Any = None) -> Any:
        """Return the next element, or default when exhausted."""
        value = self.next()
        return default if value is EXHAUSTED else value

    def junk(self) -> None:
        """Discard the next element, if any."""
        self.next()

    def is_empty(self) -> bool:
        """Return True if no elements remain."""
        return self.peek() is EXHAUSTED

    def hard_count(self) -> int:
        """Return the number of remaining elements, counting a clone if needed."""
        n = self.count()
        if n is not None:
            return n
        ahead = self.clone()
        n = 0
        while ahead.next() is not EXHAUSTED:
            n += 1
        return n

    def force(self) -> "Enum":
        """Materialize the remaining elements in place.

        Afterwards count() is known and clones are field copies.
        """
        items = tuple(self)
        self._pushed = None
        self._state = Pending(IndexedCursor(items)) if items else EXHAUSTED
        return self

    @property
    def exhausted(self) -> bool:
        """True once the sequence has observed exhaustion and has nothing pushed back."""
        return self._state is EXHAUSTED and not self._pushed

    # -- Python protocols ----------------------------------------------------

    def __iter__(self):
        return self

    def __next__(self):
        value = self.next()
        if value is EXHAUSTED:
            raise StopIteration
        return value

    def __length_hint__(self):
        n = self.count()
        return NotImplemented if n is None else n

    def __repr__(self):
        # Render from a clone so printing never advances the sequence
        limit = get_config().repr_limit
        ahead = self.clone()
        items = []
        while len(items) < limit:
            value = ahead.next()
            if value is EXHAUSTED:
                break
            items.append(repr(value))
        if len(items) == limit and ahead.next() is not EXHAUSTED:
            items.append("...")
        return f"Enum({', '.join(items)})"


# =============================================================================
# Constructors
# =============================================================================


def make(
    next_fn: Callable[[], Any],
    count_fn: Optional[Callable[[], Optional[int]]] = None,
    clone_fn: Optional[Callable[[], Enum]] = None,
) -> Enum:
    """Build an Enum from explicit next/count/clone functions.

    next_fn must return EXHAUSTED once there are no more elements.
    """
    return Enum(FunctionCursor(next_fn, count_fn, clone_fn))


_MUTABLE_CONTAINERS = (MutableSequence, MutableSet, MutableMapping, MappingView, array.array)


def from_iterable(iterable: Iterable) -> Enum:
    """Wrap any Python iterable.

    Immutable random-access sequences are shared, O(1). Mutable containers
    (and live dict views) are copied into a tuple, so later mutation is never
    observed. Anything else is memoized as it is pulled so the result can
    be cloned.
    """
    if isinstance(iterable, Enum):
        return iterable
    if isinstance(iterable, (tuple, str, bytes, range)):
        return Enum(IndexedCursor(iterable))
    if isinstance(iterable, _MUTABLE_CONTAINERS):
        return Enum(IndexedCursor(tuple(iterable)))
    return Enum(IterableCursor(iterable))


def from_indexed(items: Sequence, start: int = 0, stop: Optional[int] = None, step: int = 1) -> Enum:
    """Enumerate items[start:stop:step] without copying.

    The caller guarantees items is not mutated while the Enum is alive.
    """
    return Enum(IndexedCursor(items, range(len(items))[start:stop:step]))


def empty() -> Enum:
    """Return an exhausted Enum."""
    return Enum()


def singleton(value: Any) -> Enum:
    """Return an Enum of exactly one element."""
    return Enum(RepeatCursor(value, 1))


def init(n: int, f: Callable[[int], Any]) -> Enum:
    """Return f(0), f(1), ..., f(n - 1), computed lazily."""
    if n < 0:
        raise ValueError(f"init requires a non-negative length, got {n}")
    return Enum(IndexedCursor(_Computed(n, f)))


class _Computed:
    """Read-only sequence whose items are computed from their index."""

    __slots__ = ("_n", "_f")

    def __init__(self, n: int, f: Callable[[int], Any]):
        self._n = n
        self._f = f

    def __len__(self):
        return self._n

    def __getitem__(self, index: int):
        return self._f(index)


def repeat(value: Any, times: Optional[int] = None) -> Enum:
    """Repeat value, times times or forever if times is None."""
    if times is not None and times < 0:
        raise ValueError(f"repeat requires a non-negative count, got {times}")
    return Enum(RepeatCursor(value, times))


def count_from(start: Any = 0, step: Any = 1) -> Enum:
    """Return the infinite sequence start, start + step, start + 2*step, ..."""
    return Enum(StepCursor(start, step))


def irange(start: int, stop: Optional[int] = None, step: int = 1) -> Enum:
    """Enumerate range(start, stop, step), or range(start) with one argument."""
    if stop is None:
        start, stop = 0, start
    return Enum(IndexedCursor(range(start, stop, step)))


def iterate(f: Callable[[Any], Any], x: Any) -> Enum:
    """Return the infinite sequence x, f(x), f(f(x)), ...

    f is applied when the element it produces is pulled.
    """

    def step(s):
        value, pending = s
        if pending:
            value = f(value)
        return (value, (value, True))

    return Enum(UnfoldCursor((x, False), step))


def unfold(seed: Any, step: Callable[[Any], Optional[tuple]]) -> Enum:
    """Build a sequence from a seed.

    step(seed) returns None to stop or a (value, next_seed) pair.
    """
    return Enum(UnfoldCursor(seed, step))


def seq(x: Any, f: Callable[[Any], Any], cond: Callable[[Any], bool]) -> Enum:
    """Return x, f(x), f(f(x)), ... for as long as cond holds."""

    def step(s):
        value, pending = s
        if pending:
            value = f(value)
        if not cond(value):
            return None
        return (value, (value, True))

    return Enum(UnfoldCursor((x, False), step))


# =============================================================================
# Module-level accessors
# =============================================================================


def next_(e: Enum) -> Any:
    """Return the next element of e, or EXHAUSTED."""
    return e.next()


def count(e: Enum) -> Optional[int]:
    """Return the remaining count of e, or None if unknown."""
    return e.count()


def clone(e: Enum) -> Enum:
    """Return an independent copy of e."""
    return e.clone()


def fast_forward(e: Enum, n: int) -> int:
    """Skip up to n elements of e. Returns the number skipped."""
    return e.fast_forward(n)


def nth(e: Enum, index: int) -> Any:
    """Return the element index positions ahead without consuming e.

    Raises:
        IndexError: If index is negative or past the end.
    """
    if index < 0:
        raise IndexError(f"Index {index} out of range")
    ahead = e.clone()
    if ahead.fast_forward(index) < index:
        raise IndexError(f"Index {index} out of range")
    value = ahead.next()
    if value is EXHAUSTED:
        raise IndexError(f"Index {index} out of range")
    return value


def to_list(e: Enum) -> list:
    """Consume e into a new list."""
    return list(e)


__all__ = [
    # Cursors
    "Cursor",
    "IndexedCursor",
    "IterableCursor",
    "EnumCursor",
    "FunctionCursor",
    "UnfoldCursor",
    "RepeatCursor",
    "StepCursor",
    # Sequence
    "Enum",
    # Constructors
    "make",
    "from_iterable",
    "from_indexed",
    "empty",
    "singleton",
    "init",
    "repeat",
    "count_from",
    "irange",
    "iterate",
    "unfold",
    "seq",
    # Accessors
    "next_",
    "count",
    "clone",
    "fast_forward",
    "nth",
    "to_list",
]
