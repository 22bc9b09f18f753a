"""
rill.types - Core type definitions for rill

This module contains the small shared types used across the package:
- EXHAUSTED: The terminal signal returned by a sequence with no more elements
- Pending: The state of a sequence that still has a cursor to pull from
- ChannelState / ClosePolicy: Lifecycle tags for buffered channels
- ShapeMismatchError: Raised when strict zipping gets unequal lengths
- ChannelClosedError: Raised by any operation on a closed channel
- ResourceReleaseError: Raised when releasing a channel's resource fails

Exhaustion is deliberately not an exception. A sequence that has run out
answers every pull with the EXHAUSTED singleton.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

# Sentinel for missing values
_MISSING = object()


class _Exhausted:
    """Type of the EXHAUSTED singleton."""

    _instance = None

    __slots__ = ()

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "EXHAUSTED"

    def __bool__(self):
        return False

    def __reduce__(self):
        return (_Exhausted, ())


EXHAUSTED = _Exhausted()


@dataclass
class Pending:
    """
    State of a sequence that can still produce elements.

    Attributes:
        cursor: The cursor supplying next/count/clone/fast_forward
    """

    cursor: Any

    def __repr__(self):
        return f"Pending({type(self.cursor).__name__})"


class ChannelState(Enum):
    """Lifecycle of a channel handle."""

    OPEN = "open"
    CLOSED = "closed"


class ClosePolicy(Enum):
    """Who releases the raw object behind a channel endpoint.

    OWNED: the endpoint closes the raw object once its last handle is gone.
    BORROWED: the caller keeps the raw object; the endpoint only flushes.
    """

    OWNED = "owned"
    BORROWED = "borrowed"


class ShapeMismatchError(ValueError):
    """Raised when a combinator that needs equal-length inputs gets unequal ones."""

    def __init__(self, message: str, left: Any = None, right: Any = None):
        super().__init__(message)
        self.left = left
        self.right = right


class ChannelClosedError(ValueError):
    """Raised when an operation is attempted on a closed channel."""

    def __init__(self, operation: str, name: str = "channel"):
        super().__init__(f"{operation} on closed {name}")
        self.operation = operation
        self.name = name


class ResourceReleaseError(OSError):
    """Raised when releasing a channel fails (for example a flush on close).

    The channel is already closed when this is raised.
    """

    pass


# Type exports
__all__ = [
    "EXHAUSTED",
    "Pending",
    "ChannelState",
    "ClosePolicy",
    "ShapeMismatchError",
    "ChannelClosedError",
    "ResourceReleaseError",
    "_MISSING",
]
