"""
rill.protocols - Container bridge registry

Every container kind talks to the sequence core through a bridge: a pair of
conversions to and from Enum, plus optional reverse-order variants.

    enum(container)          -> Enum in container order
    backwards(container)     -> Enum in reverse order
    of_enum(kind, e)         -> new container of type kind
    of_backwards(kind, e)    -> new container, order reversed

Bridges are registered per Python type. Dispatch looks for an exact type
match, then walks the MRO, then falls back to structural duck typing (an
object with its own enum()/backwards() method, or a kind with an of_enum()
classmethod).
"""

from typing import Any, Callable, Optional

from rill.core import Enum, from_iterable
from rill.types import _MISSING

BRIDGE_OPERATIONS = ("enum", "backwards", "of_enum", "of_backwards")

# Global registry of bridge implementations
_BRIDGES: dict[type, dict[str, Callable]] = {
    # py_type: {
    #   "enum": callable(container) -> Enum,
    #   "of_enum": callable(e, **options) -> container,
    #   "backwards": callable(container) -> Enum,
    #   "of_backwards": callable(e, **options) -> container,
    # }
}


def register_bridge(
    py_type: type,
    enum: Optional[Callable] = None,
    of_enum: Optional[Callable] = None,
    backwards: Optional[Callable] = None,
    of_backwards: Optional[Callable] = None,
) -> None:
    """
    Register bridge operations for a container type.

    Args:
        py_type: The container type
        enum: container -> Enum, forward order
        of_enum: (Enum, **options) -> container
        backwards: container -> Enum, reverse order
        of_backwards: (Enum, **options) -> container, reverse order

    Raises:
        TypeError: If neither enum nor of_enum is supplied.
    """
    if enum is None and of_enum is None:
        raise TypeError(f"Bridge for {py_type.__name__} needs enum or of_enum")
    entry = _BRIDGES.setdefault(py_type, {})
    for name, fn in (
        ("enum", enum),
        ("of_enum", of_enum),
        ("backwards", backwards),
        ("of_backwards", of_backwards),
    ):
        if fn is not None:
            entry[name] = fn


def unregister_bridge(py_type: type) -> None:
    """Remove every bridge operation registered for py_type."""
    _BRIDGES.pop(py_type, None)


def _lookup(py_type: type, operation: str) -> Optional[Callable]:
    # 1. Exact type match, 2. walk the MRO for supertype implementations
    for base in py_type.__mro__:
        entry = _BRIDGES.get(base)
        if entry is not None:
            fn = entry.get(operation)
            if fn is not None:
                return fn
    return None


def bridge_dispatch(operation: str, container: Any) -> Enum:
    """
    Dispatch an enum/backwards bridge call on a container.

    Raises:
        TypeError: If no bridge supports the operation for this type
    """
    t = type(container)
    fn = _lookup(t, operation)
    if fn is not None:
        return fn(container)

    # 3. Structural duck typing
    method = getattr(container, operation, None)
    if callable(method):
        return method()

    raise TypeError(f"No implementation of {operation} for type {t.__name__}")


def _build(operation: str, kind: type, e: Any, options: dict) -> Any:
    if not isinstance(e, Enum):
        e = from_iterable(e)
    fn = _lookup(kind, operation)
    if fn is not None:
        return fn(e, **options)

    factory = getattr(kind, operation, None)
    if callable(factory):
        return factory(e, **options)

    raise TypeError(f"No implementation of {operation} for type {kind.__name__}")


def enum(container: Any) -> Enum:
    """Return an Enum over container in container order."""
    return bridge_dispatch("enum", container)


def backwards(container: Any) -> Enum:
    """Return an Enum over container in reverse order."""
    return bridge_dispatch("backwards", container)


def of_enum(kind: type, e: Any, **options: Any) -> Any:
    """Build a container of type kind by consuming e.

    For kinds with unique keys the last occurrence of a key wins.
    """
    return _build("of_enum", kind, e, options)


def of_backwards(kind: type, e: Any, **options: Any) -> Any:
    """Build a container of type kind whose order is the reverse of e."""
    return _build("of_backwards", kind, e, options)


def has_bridge(kind_or_obj: Any, operation: str = _MISSING) -> bool:
    """
    Check whether a type (or the type of an object) has a bridge.

    This checks:
    1. Registered implementations for the type or a supertype
    2. Structural enum()/of_enum() methods
    """
    kind = kind_or_obj if isinstance(kind_or_obj, type) else type(kind_or_obj)
    operations = BRIDGE_OPERATIONS if operation is _MISSING else (operation,)
    for op in operations:
        if _lookup(kind, op) is not None:
            return True
        if callable(getattr(kind, op, None)):
            return True
    return False


__all__ = [
    "BRIDGE_OPERATIONS",
    "register_bridge",
    "unregister_bridge",
    "bridge_dispatch",
    "enum",
    "backwards",
    "of_enum",
    "of_backwards",
    "has_bridge",
]
