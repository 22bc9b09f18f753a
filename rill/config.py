"""
rill.config - Runtime configuration

This module holds the few knobs the library exposes. Values come from the
environment the first time the configuration is needed:

    RILL_BUFFER_SIZE   chunk size for channel reads and output flushing
    RILL_ENCODING      text encoding used by channels
    RILL_REPR_LIMIT    number of elements shown by repr() of a sequence

Example:
    >>> from rill.config import RuntimeConfig, set_config
    >>> set_config(RuntimeConfig(buffer_size=1024))
"""

import codecs
import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

# Default configuration values
DEFAULT_BUFFER_SIZE = 8192
DEFAULT_ENCODING = "utf-8"
DEFAULT_REPR_LIMIT = 10
ENV_PREFIX = "RILL_"


def _parse_positive_int(raw: str, name: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def check_encoding(encoding: str) -> str:
    """Return encoding unchanged, or raise ValueError if Python does not know it."""
    try:
        codecs.lookup(encoding)
    except LookupError:
        raise ValueError(f"Unknown encoding: {encoding!r}") from None
    return encoding


@dataclass
class RuntimeConfig:
    """
    Runtime configuration for sequences and channels.

    Fields:
        buffer_size: Bytes read per refill and output flush threshold
        encoding: Text encoding for str reads and writes on channels
        repr_limit: Maximum elements rendered by repr() of an Enum
    """

    buffer_size: int = DEFAULT_BUFFER_SIZE
    encoding: str = DEFAULT_ENCODING
    repr_limit: int = DEFAULT_REPR_LIMIT

    # Store the raw environment values for any additional fields
    _raw: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        if not isinstance(self.buffer_size, int) or self.buffer_size <= 0:
            raise ValueError(
                f"buffer_size must be a positive integer, got {self.buffer_size!r}"
            )
        if not isinstance(self.repr_limit, int) or self.repr_limit <= 0:
            raise ValueError(
                f"repr_limit must be a positive integer, got {self.repr_limit!r}"
            )
        check_encoding(self.encoding)

    @classmethod
    def load(cls, environ: Optional[Mapping[str, str]] = None) -> "RuntimeConfig":
        """
        Load a RuntimeConfig from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            Loaded RuntimeConfig instance.

        Raises:
            ValueError: If a variable is present but invalid.
        """
        if environ is None:
            environ = os.environ

        raw = {k: v for k, v in environ.items() if k.startswith(ENV_PREFIX)}

        buffer_size = DEFAULT_BUFFER_SIZE
        if "RILL_BUFFER_SIZE" in raw:
            buffer_size = _parse_positive_int(
                raw["RILL_BUFFER_SIZE"], "RILL_BUFFER_SIZE"
            )

        repr_limit = DEFAULT_REPR_LIMIT
        if "RILL_REPR_LIMIT" in raw:
            repr_limit = _parse_positive_int(raw["RILL_REPR_LIMIT"], "RILL_REPR_LIMIT")

        encoding = raw.get("RILL_ENCODING", DEFAULT_ENCODING)

        return cls(
            buffer_size=buffer_size,
            encoding=encoding,
            repr_limit=repr_limit,
            _raw=raw,
        )


_current: Optional[RuntimeConfig] = None


def load_config(environ: Optional[Mapping[str, str]] = None) -> RuntimeConfig:
    """Convenience function to load a RuntimeConfig from the environment."""
    return RuntimeConfig.load(environ)


def get_config() -> RuntimeConfig:
    """Return the active configuration, loading it on first use."""
    global _current
    if _current is None:
        _current = load_config()
    return _current


def set_config(config: Optional[RuntimeConfig]) -> None:
    """Replace the active configuration. None reloads from the environment."""
    global _current
    _current = config


__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_ENCODING",
    "DEFAULT_REPR_LIMIT",
    "RuntimeConfig",
    "check_encoding",
    "load_config",
    "get_config",
    "set_config",
]
