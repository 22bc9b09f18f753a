"""
rill.combinators - Sequence combinators

Everything here is built on the public contract of rill.core.Enum. Lazy
combinators return a new Enum whose cursor holds the input Enums; cloning
the result clones the inputs, so derived sequences keep every guarantee of
the sequences they are built from.

A combinator takes ownership of the Enums passed to it. Pull from the
result, not from the inputs, or clone the inputs first.

Categories:
- Transformations: map, mapi, filter, filter_map, mapcat, scan
- Slicing: take, drop, take_while, drop_while, span
- Joining: concat, append, flatten, interleave, interpose
- Zipping: zip_, combine (strict)
- Windowing and grouping: window, group, dedupe, uniq
- Replay: cycle, Replay, replay
- Reducers (eager): fold, fold2, reduce, iter, iteri, exists, for_all,
  find, find_map, sum_, last, compare, equal
"""

from typing import Any, Callable, Iterable, Optional

from rill.core import Cursor, Enum, from_iterable
from rill.types import _MISSING, EXHAUSTED, ShapeMismatchError


def _as_enum(source: Any) -> Enum:
    if isinstance(source, Enum):
        return source
    return from_iterable(source)


def _known_sum(counts) -> Optional[int]:
    total = 0
    for c in counts:
        if c is None:
            return None
        total += c
    return total


# =============================================================================
# Transformations
# =============================================================================


class _MapCursor(Cursor):
    __slots__ = ("_f", "_source")

    def __init__(self, f: Callable, source: Enum):
        self._f = f
        self._source = source

    def next(self):
        value = self._source.next()
        if value is EXHAUSTED:
            return EXHAUSTED
        return self._f(value)

    def count(self):
        return self._source.count()

    def clone(self):
        return _MapCursor(self._f, self._source.clone())

    def fast_forward(self, n):
        # Skipped elements are never mapped
        return self._source.fast_forward(n)


def map(f: Callable[[Any], Any], e: Any) -> Enum:
    """Lazily apply f to each element.

    f runs exactly once per element, at the moment that element is pulled
    from the result.
    """
    return Enum(_MapCursor(f, _as_enum(e)))


class _MapiCursor(Cursor):
    __slots__ = ("_f", "_source", "_index")

    def __init__(self, f: Callable, source: Enum, index: int = 0):
        self._f = f
        self._source = source
        self._index = index

    def next(self):
        value = self._source.next()
        if value is EXHAUSTED:
            return EXHAUSTED
        index = self._index
        self._index = index + 1
        return self._f(index, value)

    def count(self):
        return self._source.count()

    def clone(self):
        return _MapiCursor(self._f, self._source.clone(), self._index)

    def fast_forward(self, n):
        skipped = self._source.fast_forward(n)
        self._index += skipped
        return skipped


def mapi(f: Callable[[int, Any], Any], e: Any) -> Enum:
    """Lazily apply f(index, element) to each element."""
    return Enum(_MapiCursor(f, _as_enum(e)))


class _FilterCursor(Cursor):
    __slots__ = ("_pred", "_source")

    def __init__(self, pred: Callable, source: Enum):
        self._pred = pred
        self._source = source

    def next(self):
        source = self._source
        pred = self._pred
        while True:
            value = source.next()
            if value is EXHAUSTED or pred(value):
                return value

    def clone(self):
        return _FilterCursor(self._pred, self._source.clone())


def filter(pred: Callable[[Any], bool], e: Any) -> Enum:
    """Lazily keep the elements satisfying pred.

    pred is evaluated once per source element. The count of the result is
    unknown.
    """
    return Enum(_FilterCursor(pred, _as_enum(e)))


class _FilterMapCursor(Cursor):
    __slots__ = ("_f", "_source")

    def __init__(self, f: Callable, source: Enum):
        self._f = f
        self._source = source

    def next(self):
        while True:
            value = self._source.next()
            if value is EXHAUSTED:
                return EXHAUSTED
            result = self._f(value)
            if result is not None:
                return result

    def clone(self):
        return _FilterMapCursor(self._f, self._source.clone())


def filter_map(f: Callable[[Any], Any], e: Any) -> Enum:
    """Lazily keep the non-None results of f."""
    return Enum(_FilterMapCursor(f, _as_enum(e)))


def mapcat(f: Callable[[Any], Any], e: Any) -> Enum:
    """Lazily map f over e and concatenate the resulting sequences."""
    return flatten(map(f, e))


class _ScanCursor(Cursor):
    __slots__ = ("_f", "_source", "_acc", "_emit_init")

    def __init__(self, f: Callable, source: Enum, acc: Any, emit_init: bool):
        self._f = f
        self._source = source
        self._acc = acc
        self._emit_init = emit_init

    def next(self):
        if self._emit_init:
            self._emit_init = False
            return self._acc
        value = self._source.next()
        if value is EXHAUSTED:
            return EXHAUSTED
        if self._acc is _MISSING:
            self._acc = value
        else:
            self._acc = self._f(self._acc, value)
        return self._acc

    def count(self):
        n = self._source.count()
        if n is None:
            return None
        return n + 1 if self._emit_init else n

    def clone(self):
        return _ScanCursor(self._f, self._source.clone(), self._acc, self._emit_init)


def scan(f: Callable[[Any, Any], Any], e: Any, init: Any = _MISSING) -> Enum:
    """Lazily yield the intermediate values of a left fold.

    With init the first element is init itself; without it the first
    element of e starts the accumulation.
    """
    emit_init = init is not _MISSING
    return Enum(_ScanCursor(f, _as_enum(e), init, emit_init))


reductions = scan


# =============================================================================
# Slicing
# =============================================================================


class _TakeCursor(Cursor):
    __slots__ = ("_source", "_remaining")

    def __init__(self, source: Enum, remaining: int):
        self._source = source
        self._remaining = remaining

    def next(self):
        if self._remaining <= 0:
            return EXHAUSTED
        value = self._source.next()
        if value is EXHAUSTED:
            self._remaining = 0
            return EXHAUSTED
        self._remaining -= 1
        return value

    def count(self):
        n = self._source.count()
        if n is None:
            return None
        return min(n, self._remaining)

    def clone(self):
        return _TakeCursor(self._source.clone(), self._remaining)

    def fast_forward(self, n):
        skipped = self._source.fast_forward(min(n, self._remaining))
        self._remaining -= skipped
        return skipped


def take(n: int, e: Any) -> Enum:
    """Lazily take at most n elements."""
    if n < 0:
        raise ValueError(f"take requires a non-negative count, got {n}")
    return Enum(_TakeCursor(_as_enum(e), n))


class _DropCursor(Cursor):
    __slots__ = ("_source", "_pending")

    def __init__(self, source: Enum, pending: int):
        self._source = source
        self._pending = pending

    def _settle(self):
        if self._pending:
            self._source.fast_forward(self._pending)
            self._pending = 0

    def next(self):
        self._settle()
        return self._source.next()

    def count(self):
        n = self._source.count()
        if n is None:
            return None
        return max(0, n - self._pending)

    def clone(self):
        return _DropCursor(self._source.clone(), self._pending)

    def fast_forward(self, n):
        self._settle()
        return self._source.fast_forward(n)


def drop(n: int, e: Any) -> Enum:
    """Lazily drop the first n elements. The skip happens on first pull."""
    if n < 0:
        raise ValueError(f"drop requires a non-negative count, got {n}")
    return Enum(_DropCursor(_as_enum(e), n))


class _TakeWhileCursor(Cursor):
    __slots__ = ("_pred", "_source", "_done")

    def __init__(self, pred: Callable, source: Enum, done: bool = False):
        self._pred = pred
        self._source = source
        self._done = done

    def next(self):
        if self._done:
            return EXHAUSTED
        value = self._source.next()
        if value is EXHAUSTED:
            self._done = True
            return EXHAUSTED
        if self._pred(value):
            return value
        # Hand the first rejected element back to the source
        self._source.push(value)
        self._done = True
        return EXHAUSTED

    def clone(self):
        return _TakeWhileCursor(self._pred, self._source.clone(), self._done)


def take_while(pred: Callable[[Any], bool], e: Any) -> Enum:
    """Lazily take elements while pred holds.

    The first element failing pred is pushed back onto e, so e resumes
    exactly after the taken prefix.
    """
    return Enum(_TakeWhileCursor(pred, _as_enum(e)))


class _DropWhileCursor(Cursor):
    __slots__ = ("_pred", "_source", "_dropping")

    def __init__(self, pred: Callable, source: Enum, dropping: bool = True):
        self._pred = pred
        self._source = source
        self._dropping = dropping

    def next(self):
        if self._dropping:
            self._dropping = False
            while True:
                value = self._source.next()
                if value is EXHAUSTED or not self._pred(value):
                    return value
        return self._source.next()

    def count(self):
        if self._dropping:
            return None
        return self._source.count()

    def clone(self):
        return _DropWhileCursor(self._pred, self._source.clone(), self._dropping)

    def fast_forward(self, n):
        if self._dropping:
            return super().fast_forward(n)
        return self._source.fast_forward(n)


def drop_while(pred: Callable[[Any], bool], e: Any) -> Enum:
    """Lazily drop elements while pred holds, then yield the rest."""
    return Enum(_DropWhileCursor(pred, _as_enum(e)))


def span(pred: Callable[[Any], bool], e: Any) -> tuple:
    """Return (take_while(pred, e), drop_while(pred, clone of e)).

    The two halves are independent; pred runs once per prefix element on
    each side that is pulled.
    """
    e = _as_enum(e)
    rest = e.clone()
    return take_while(pred, e), drop_while(pred, rest)


# =============================================================================
# Joining
# =============================================================================


class _ConcatCursor(Cursor):
    __slots__ = ("_parts", "_index")

    def __init__(self, parts: list, index: int = 0):
        self._parts = parts
        self._index = index

    def next(self):
        parts = self._parts
        while self._index < len(parts):
            value = parts[self._index].next()
            if value is not EXHAUSTED:
                return value
            parts[self._index] = None
            self._index += 1
        return EXHAUSTED

    def count(self):
        return _known_sum(p.count() for p in self._parts[self._index :])

    def clone(self):
        return _ConcatCursor([p.clone() for p in self._parts[self._index :]])

    def fast_forward(self, n):
        skipped = 0
        parts = self._parts
        while skipped < n and self._index < len(parts):
            skipped += parts[self._index].fast_forward(n - skipped)
            if skipped < n:
                parts[self._index] = None
                self._index += 1
        return skipped


def concat(e1: Any, e2: Any) -> Enum:
    """Lazily yield every element of e1, then every element of e2."""
    return Enum(_ConcatCursor([_as_enum(e1), _as_enum(e2)]))


def append(*enums: Any) -> Enum:
    """Lazily concatenate any number of sequences."""
    return Enum(_ConcatCursor([_as_enum(e) for e in enums]))


def _private(inner: Any) -> Enum:
    # The outer sequence may hand the same inner Enum to several clones
    if isinstance(inner, Enum):
        return inner.clone()
    return from_iterable(inner)


class _FlattenCursor(Cursor):
    __slots__ = ("_outer", "_current")

    def __init__(self, outer: Enum, current: Optional[Enum] = None):
        self._outer = outer
        self._current = current

    def next(self):
        while True:
            if self._current is not None:
                value = self._current.next()
                if value is not EXHAUSTED:
                    return value
                self._current = None
            inner = self._outer.next()
            if inner is EXHAUSTED:
                return EXHAUSTED
            self._current = _private(inner)

    def clone(self):
        current = self._current.clone() if self._current is not None else None
        return _FlattenCursor(self._outer.clone(), current)


def flatten(e: Any) -> Enum:
    """Lazily concatenate a sequence of sequences."""
    return Enum(_FlattenCursor(_as_enum(e)))


concat_all = flatten


class _InterleaveCursor(Cursor):
    __slots__ = ("_sources", "_turn", "_done")

    def __init__(self, sources: list, turn: int = 0, done: bool = False):
        self._sources = sources
        self._turn = turn
        self._done = done

    def next(self):
        if self._done or not self._sources:
            return EXHAUSTED
        value = self._sources[self._turn].next()
        if value is EXHAUSTED:
            self._done = True
            return EXHAUSTED
        self._turn = (self._turn + 1) % len(self._sources)
        return value

    def clone(self):
        return _InterleaveCursor(
            [s.clone() for s in self._sources], self._turn, self._done
        )


def interleave(*enums: Any) -> Enum:
    """Lazily take one element from each sequence in turn.

    Stops as soon as the sequence whose turn it is runs out.
    """
    return Enum(_InterleaveCursor([_as_enum(e) for e in enums]))


class _InterposeCursor(Cursor):
    __slots__ = ("_sep", "_source", "_started", "_held")

    def __init__(self, sep: Any, source: Enum, started: bool = False, held: Any = _MISSING):
        self._sep = sep
        self._source = source
        self._started = started
        self._held = held

    def next(self):
        if self._held is not _MISSING:
            value = self._held
            self._held = _MISSING
            return value
        value = self._source.next()
        if value is EXHAUSTED:
            return EXHAUSTED
        if not self._started:
            self._started = True
            return value
        self._held = value
        return self._sep

    def count(self):
        n = self._source.count()
        if n is None:
            return None
        held = 1 if self._held is not _MISSING else 0
        if not self._started:
            return max(0, 2 * n - 1)
        return 2 * n + held

    def clone(self):
        return _InterposeCursor(
            self._sep, self._source.clone(), self._started, self._held
        )


def interpose(sep: Any, e: Any) -> Enum:
    """Lazily put sep between consecutive elements."""
    return Enum(_InterposeCursor(sep, _as_enum(e)))


# =============================================================================
# Zipping
# =============================================================================


class _ZipCursor(Cursor):
    __slots__ = ("_sources",)

    def __init__(self, sources: list):
        self._sources = sources

    def next(self):
        if not self._sources:
            return EXHAUSTED
        values = []
        for source in self._sources:
            value = source.next()
            if value is EXHAUSTED:
                return EXHAUSTED
            values.append(value)
        return tuple(values)

    def count(self):
        counts = [s.count() for s in self._sources]
        if not counts or None in counts:
            return None
        return min(counts)

    def clone(self):
        return _ZipCursor([s.clone() for s in self._sources])


def zip_(*enums: Any) -> Enum:
    """Lazily zip sequences into tuples, stopping at the shortest."""
    return Enum(_ZipCursor([_as_enum(e) for e in enums]))


class _CombineCursor(Cursor):
    __slots__ = ("_left", "_right")

    def __init__(self, left: Enum, right: Enum):
        self._left = left
        self._right = right

    def next(self):
        a = self._left.next()
        b = self._right.next()
        if a is EXHAUSTED and b is EXHAUSTED:
            return EXHAUSTED
        if a is EXHAUSTED or b is EXHAUSTED:
            side = "first" if a is EXHAUSTED else "second"
            raise ShapeMismatchError(f"combine: {side} sequence ended early")
        return (a, b)

    def count(self):
        a = self._left.count()
        b = self._right.count()
        # Only a length both sides agree on is known
        return a if a is not None and a == b else None

    def clone(self):
        return _CombineCursor(self._left.clone(), self._right.clone())

    def fast_forward(self, n):
        a = self._left.fast_forward(n)
        b = self._right.fast_forward(n)
        if a != b:
            raise ShapeMismatchError(
                f"combine: sequences have different lengths ({a} vs {b} skipped)"
            )
        return a


def _check_same_length(name: str, left: Enum, right: Enum) -> None:
    a = left.count()
    b = right.count()
    if a is not None and b is not None and a != b:
        raise ShapeMismatchError(
            f"{name}: sequences have different lengths ({a} vs {b})", a, b
        )


def combine(e1: Any, e2: Any) -> Enum:
    """Lazily pair up two sequences that must have the same length.

    Raises:
        ShapeMismatchError: Immediately when both lengths are known and
            differ, otherwise on the first pull where one side runs out
            before the other.
    """
    left = _as_enum(e1)
    right = _as_enum(e2)
    _check_same_length("combine", left, right)
    return Enum(_CombineCursor(left, right))


# =============================================================================
# Windowing and grouping
# =============================================================================


class _WindowCursor(Cursor):
    __slots__ = ("_source", "_size", "_step", "_partial", "_buffer", "_done")

    def __init__(self, source, size, step, partial, buffer=None, done=False):
        self._source = source
        self._size = size
        self._step = step
        self._partial = partial
        self._buffer = buffer if buffer is not None else []
        self._done = done

    def next(self):
        if self._done:
            return EXHAUSTED
        buffer = self._buffer
        while len(buffer) < self._size:
            value = self._source.next()
            if value is EXHAUSTED:
                break
            buffer.append(value)
        if len(buffer) < self._size and (not self._partial or not buffer):
            self._done = True
            buffer.clear()
            return EXHAUSTED
        window = tuple(buffer)
        if self._step <= len(buffer):
            del buffer[: self._step]
        else:
            gap = self._step - len(buffer)
            buffer.clear()
            self._source.fast_forward(gap)
        return window

    def clone(self):
        return _WindowCursor(
            self._source.clone(),
            self._size,
            self._step,
            self._partial,
            list(self._buffer),
            self._done,
        )


def window(n: int, e: Any, step: Optional[int] = None, partial: bool = False) -> Enum:
    """Lazily yield tuples of n consecutive elements, advancing by step.

    step defaults to n (non-overlapping chunks). Incomplete trailing
    windows are dropped unless partial is True. Each source element is
    pulled once.
    """
    if n <= 0:
        raise ValueError(f"window size must be positive, got {n}")
    if step is None:
        step = n
    if step <= 0:
        raise ValueError(f"window step must be positive, got {step}")
    return Enum(_WindowCursor(_as_enum(e), n, step, partial))


partition = window


class _GroupCursor(Cursor):
    __slots__ = ("_key", "_source")

    def __init__(self, key: Callable, source: Enum):
        self._key = key
        self._source = source

    def next(self):
        first = self._source.next()
        if first is EXHAUSTED:
            return EXHAUSTED
        k = self._key(first)
        run = [first]
        while True:
            value = self._source.next()
            if value is EXHAUSTED:
                break
            if self._key(value) != k:
                self._source.push(value)
                break
            run.append(value)
        return tuple(run)

    def clone(self):
        return _GroupCursor(self._key, self._source.clone())


def group(key: Callable[[Any], Any], e: Any) -> Enum:
    """Lazily split e into tuples of consecutive elements with equal keys."""
    return Enum(_GroupCursor(key, _as_enum(e)))


class _DedupeCursor(Cursor):
    __slots__ = ("_source", "_prev")

    def __init__(self, source: Enum, prev: Any = _MISSING):
        self._source = source
        self._prev = prev

    def next(self):
        while True:
            value = self._source.next()
            if value is EXHAUSTED:
                return EXHAUSTED
            if self._prev is _MISSING or value != self._prev:
                self._prev = value
                return value

    def clone(self):
        return _DedupeCursor(self._source.clone(), self._prev)


def dedupe(e: Any) -> Enum:
    """Lazily drop consecutive duplicates."""
    return Enum(_DedupeCursor(_as_enum(e)))


class _UniqCursor(Cursor):
    __slots__ = ("_source", "_seen", "_unhashable")

    def __init__(self, source: Enum, seen=None, unhashable=None):
        self._source = source
        self._seen = seen if seen is not None else set()
        self._unhashable = unhashable if unhashable is not None else []

    def _first_time(self, value) -> bool:
        try:
            if value in self._seen:
                return False
            self._seen.add(value)
            return True
        except TypeError:
            # Unhashable, fall back to equality
            if value in self._unhashable:
                return False
            self._unhashable.append(value)
            return True

    def next(self):
        while True:
            value = self._source.next()
            if value is EXHAUSTED or self._first_time(value):
                return value

    def clone(self):
        return _UniqCursor(
            self._source.clone(), set(self._seen), list(self._unhashable)
        )


def uniq(e: Any) -> Enum:
    """Lazily drop every element already seen, keeping first occurrences."""
    return Enum(_UniqCursor(_as_enum(e)))


distinct = uniq


# =============================================================================
# Replay
# =============================================================================


class _CycleCursor(Cursor):
    __slots__ = ("_proto", "_current", "_remaining")

    def __init__(self, proto: Enum, current: Enum, remaining: Optional[int]):
        self._proto = proto
        self._current = current
        self._remaining = remaining

    def next(self):
        if self._remaining is not None and self._remaining <= 0:
            return EXHAUSTED
        value = self._current.next()
        if value is not EXHAUSTED:
            return value
        if self._remaining is not None:
            self._remaining -= 1
            if self._remaining <= 0:
                return EXHAUSTED
        self._current = self._proto.clone()
        value = self._current.next()
        if value is EXHAUSTED:
            # Empty prototype
            self._remaining = 0
        return value

    def count(self):
        if self._remaining is not None and self._remaining <= 0:
            return 0
        current = self._current.count()
        per_round = self._proto.count()
        if current is None or per_round is None:
            return None
        if self._remaining is None:
            return 0 if per_round == 0 else None
        return current + per_round * (self._remaining - 1)

    def clone(self):
        return _CycleCursor(self._proto, self._current.clone(), self._remaining)


def cycle(e: Any, times: Optional[int] = None) -> Enum:
    """Lazily repeat the elements of e, times times or forever.

    e is never pulled directly: each round runs over a fresh clone, so the
    source is only realized once even when it is an iterator.
    """
    if times is not None and times < 0:
        raise ValueError(f"cycle requires a non-negative count, got {times}")
    proto = _as_enum(e)
    if times == 0:
        return Enum()
    return Enum(_CycleCursor(proto, proto.clone(), times))


class Replay:
    """
    A restartable view of a single-pass sequence.

    Every call to enum() (and every for loop over the Replay) gets an
    independent clone of the source, which itself is never advanced.
    Iterator-backed sources are realized once and memoized.
    """

    __slots__ = ("_proto",)

    def __init__(self, e: Any):
        self._proto = _as_enum(e)

    def enum(self) -> Enum:
        """Return a fresh traversal from the start."""
        return self._proto.clone()

    def count(self) -> Optional[int]:
        return self._proto.count()

    def __iter__(self):
        return self.enum()

    def __repr__(self):
        return f"Replay({self._proto!r})"


def replay(e: Any) -> Replay:
    """Wrap e so that it can be traversed any number of times."""
    return Replay(e)


# =============================================================================
# Reducers (eager)
# =============================================================================


def fold(f: Callable[[Any, Any], Any], init: Any, e: Any) -> Any:
    """Strict left fold. Consumes e; must not be given an infinite sequence."""
    e = _as_enum(e)
    acc = init
    while True:
        value = e.next()
        if value is EXHAUSTED:
            return acc
        acc = f(acc, value)


def fold2(f: Callable[[Any, Any, Any], Any], init: Any, e1: Any, e2: Any) -> Any:
    """Strict left fold over two sequences of equal length.

    Raises:
        ShapeMismatchError: If the sequences have different lengths.
    """
    return fold(lambda acc, pair: f(acc, pair[0], pair[1]), init, combine(e1, e2))


def reduce(f: Callable[[Any, Any], Any], e: Any) -> Any:
    """Fold without an initial value.

    Raises:
        ValueError: If e is empty.
    """
    e = _as_enum(e)
    first = e.next()
    if first is EXHAUSTED:
        raise ValueError("reduce of an empty sequence")
    return fold(f, first, e)


def iter(f: Callable[[Any], Any], e: Any) -> None:
    """Call f on every element, for side effects."""
    e = _as_enum(e)
    while True:
        value = e.next()
        if value is EXHAUSTED:
            return
        f(value)


def iteri(f: Callable[[int, Any], Any], e: Any) -> None:
    """Call f(index, element) on every element."""
    e = _as_enum(e)
    index = 0
    while True:
        value = e.next()
        if value is EXHAUSTED:
            return
        f(index, value)
        index += 1


def exists(pred: Callable[[Any], bool], e: Any) -> bool:
    """Return True if some element satisfies pred. Stops at the first match."""
    return find_map(lambda x: True if pred(x) else None, e) is not None


def for_all(pred: Callable[[Any], bool], e: Any) -> bool:
    """Return True if every element satisfies pred."""
    return not exists(lambda x: not pred(x), e)


def find(pred: Callable[[Any], bool], e: Any, default: Any = _MISSING) -> Any:
    """Return the first element satisfying pred.

    Elements before the match are consumed; so is the match itself.

    Raises:
        LookupError: If nothing matches and no default was given.
    """
    e = _as_enum(e)
    while True:
        value = e.next()
        if value is EXHAUSTED:
            if default is _MISSING:
                raise LookupError("No element satisfies the predicate")
            return default
        if pred(value):
            return value


def find_map(f: Callable[[Any], Any], e: Any) -> Any:
    """Return the first non-None f(x), or None."""
    e = _as_enum(e)
    while True:
        value = e.next()
        if value is EXHAUSTED:
            return None
        result = f(value)
        if result is not None:
            return result


def sum_(e: Any, start: Any = 0) -> Any:
    """Add up the elements of e."""
    return fold(lambda acc, x: acc + x, start, e)


def last(e: Any) -> Any:
    """Return the last element, consuming e.

    Raises:
        LookupError: If e is empty.
    """
    e = _as_enum(e)
    result = _MISSING
    while True:
        value = e.next()
        if value is EXHAUSTED:
            break
        result = value
    if result is _MISSING:
        raise LookupError("last of an empty sequence")
    return result


def _natural_compare(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def compare(e1: Any, e2: Any, cmp: Optional[Callable[[Any, Any], int]] = None) -> int:
    """Compare two sequences lexicographically. Returns -1, 0 or 1.

    A sequence that ends first is the smaller one.
    """
    if cmp is None:
        cmp = _natural_compare
    a = _as_enum(e1)
    b = _as_enum(e2)
    while True:
        x = a.next()
        y = b.next()
        if x is EXHAUSTED:
            return 0 if y is EXHAUSTED else -1
        if y is EXHAUSTED:
            return 1
        c = cmp(x, y)
        if c != 0:
            return -1 if c < 0 else 1


def equal(e1: Any, e2: Any, eq: Optional[Callable[[Any, Any], bool]] = None) -> bool:
    """Return True if both sequences yield equal elements in the same order."""
    a = _as_enum(e1)
    b = _as_enum(e2)
    while True:
        x = a.next()
        y = b.next()
        if x is EXHAUSTED or y is EXHAUSTED:
            return x is y
        if not (eq(x, y) if eq is not None else x == y):
            return False


__all__ = [
    # Transformations
    "map",
    "mapi",
    "filter",
    "filter_map",
    "mapcat",
    "scan",
    "reductions",
    # Slicing
    "take",
    "drop",
    "take_while",
    "drop_while",
    "span",
    # Joining
    "concat",
    "append",
    "flatten",
    "concat_all",
    "interleave",
    "interpose",
    # Zipping
    "zip_",
    "combine",
    # Windowing and grouping
    "window",
    "partition",
    "group",
    "dedupe",
    "uniq",
    "distinct",
    # Replay
    "cycle",
    "Replay",
    "replay",
    # Reducers
    "fold",
    "fold2",
    "reduce",
    "iter",
    "iteri",
    "exists",
    "for_all",
    "find",
    "find_map",
    "sum_",
    "last",
    "compare",
    "equal",
]
