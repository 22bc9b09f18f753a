"""
rill.channels - Buffered channels over raw byte sources and sinks

A channel is a handle on an endpoint. The endpoint owns the raw object
(a file, a BytesIO, a socket file, ...), its buffer and a reference count;
the handle only tracks whether it is open. Several handles may share one
endpoint (share(), and the lines()/chars()/bytes_() views do this), and the
raw object is released exactly once, when the last handle goes away.

Handles go away either explicitly (close(), or leaving a with block) or when
they are garbage collected. Both paths run the same one-shot release.

Lifecycle of a handle:

    OPEN --close()--> CLOSED

Any operation other than close() on a CLOSED handle raises
ChannelClosedError. close() on a CLOSED handle does nothing.

End of input is not an error: read() returns b"", read_line(), read_char()
and read_byte() return None, and the views simply end.
"""

import codecs
import io
import logging
import weakref
from typing import Any, Callable, Optional, Union

from rill.config import check_encoding, get_config
from rill.core import Enum, make
from rill.types import (
    EXHAUSTED,
    ChannelClosedError,
    ChannelState,
    ClosePolicy,
    ResourceReleaseError,
)

_LOGGER = logging.getLogger(__name__)

# =============================================================================
# Endpoints
# =============================================================================


class _Endpoint:
    """The physical side of a channel, shared by all of its handles."""

    def __init__(
        self,
        raw: Any,
        name: str,
        policy: ClosePolicy,
        encoding: Optional[str],
        buffer_size: Optional[int],
    ):
        config = get_config()
        self.raw = raw
        self.name = name
        self.policy = policy
        self.encoding = encoding or config.encoding
        self.buffer_size = buffer_size or config.buffer_size
        self.released = False
        self._refs = 0
        check_encoding(self.encoding)
        _LOGGER.debug("Opened %s (%s)", name, policy.value)

    def acquire(self) -> None:
        self._refs += 1

    def release(self) -> None:
        """Drop one reference; the last one shuts the endpoint down."""
        self._refs -= 1
        if self._refs > 0 or self.released:
            return
        self.released = True
        try:
            self._shutdown()
        finally:
            if self.policy is ClosePolicy.OWNED:
                close = getattr(self.raw, "close", None)
                if close is not None:
                    close()
            _LOGGER.debug("Released %s", self.name)

    def _shutdown(self) -> None:
        pass

    def has_pending_output(self) -> bool:
        return False

    def _require(self, method: str) -> Callable:
        fn = getattr(self.raw, method, None)
        if fn is None:
            raise io.UnsupportedOperation(f"{self.name} does not support {method}")
        return fn


class _Source(_Endpoint):
    """Buffered reading side."""

    def __init__(self, raw, name, policy, encoding=None, buffer_size=None):
        super().__init__(raw, name, policy, encoding, buffer_size)
        self._buf = bytearray()
        self._pos = 0
        self._eof = False

    def _available(self) -> int:
        return len(self._buf) - self._pos

    def _fill(self) -> bool:
        """Read one more chunk. Returns False at end of input."""
        if self._eof:
            return False
        chunk = self.raw.read(self.buffer_size)
        if not chunk:
            self._eof = True
            return False
        if self._pos:
            del self._buf[: self._pos]
            self._pos = 0
        self._buf += chunk
        return True

    def _take(self, n: int) -> bytes:
        start = self._pos
        self._pos = start + n
        return bytes(self._buf[start : self._pos])

    def read(self, n: int) -> bytes:
        if n < 0:
            while self._fill():
                pass
            return self._take(self._available())
        while self._available() < n and self._fill():
            pass
        return self._take(min(n, self._available()))

    def read_byte(self) -> Optional[int]:
        if not self._available() and not self._fill():
            return None
        value = self._buf[self._pos]
        self._pos += 1
        return value

    def read_line(self) -> Optional[bytes]:
        searched = self._pos
        while True:
            index = self._buf.find(b"\n", searched)
            if index >= 0:
                line = self._take(index + 1 - self._pos)
                return line[:-1]
            searched = len(self._buf)
            base = self._pos
            if not self._fill():
                break
            # _fill may have compacted the buffer
            searched -= base - self._pos
        if not self._available():
            return None
        return self._take(self._available())

    def read_char(self) -> Optional[str]:
        decoder = codecs.getincrementaldecoder(self.encoding)()
        while True:
            byte = self.read_byte()
            if byte is None:
                # Raises on a truncated multi-byte sequence
                tail = decoder.decode(b"", final=True)
                return tail or None
            text = decoder.decode(bytes((byte,)))
            if text:
                return text

    def seek(self, pos: int) -> None:
        self._require("seek")(pos)
        self._buf = bytearray()
        self._pos = 0
        self._eof = False

    def tell(self) -> int:
        return self._require("tell")() - self._available()


class _Sink(_Endpoint):
    """Buffered writing side."""

    def __init__(self, raw, name, policy, encoding=None, buffer_size=None):
        super().__init__(raw, name, policy, encoding, buffer_size)
        self._buf = bytearray()
        self.final_contents: Optional[bytes] = None

    def write(self, data: bytes) -> None:
        self._buf += data
        if len(self._buf) >= self.buffer_size:
            self.flush()

    def flush(self) -> None:
        # Bytes leave the buffer only once raw has accepted them
        while self._buf:
            written = self.raw.write(bytes(self._buf))
            if written is None:
                written = len(self._buf)
            elif written <= 0:
                raise OSError(f"{self.name}: write accepted no bytes")
            del self._buf[:written]
        flush = getattr(self.raw, "flush", None)
        if flush is not None:
            flush()

    def has_pending_output(self) -> bool:
        return bool(self._buf)

    def contents(self) -> bytes:
        if self.final_contents is not None:
            return self.final_contents
        getvalue = self._require("getvalue")
        return getvalue() + bytes(self._buf)

    def seek(self, pos: int) -> None:
        self.flush()
        self._require("seek")(pos)

    def tell(self) -> int:
        return self._require("tell")() + len(self._buf)

    def _shutdown(self) -> None:
        self.flush()
        getvalue = getattr(self.raw, "getvalue", None)
        if getvalue is not None:
            self.final_contents = getvalue()


def _release_on_collect(endpoint: _Endpoint, kind: str) -> None:
    # Runs from the garbage collector or at interpreter exit: nobody can
    # receive an exception here, so report it instead
    if endpoint.has_pending_output():
        _LOGGER.warning(
            "%s on %s collected with unflushed output", kind, endpoint.name
        )
    try:
        endpoint.release()
    except Exception:
        _LOGGER.exception("Failed to release %s", endpoint.name)


# =============================================================================
# Handles
# =============================================================================


class _Channel:
    """Common lifecycle of input and output handles."""

    _kind = "channel"

    def __init__(self, endpoint: _Endpoint):
        endpoint.acquire()
        self._endpoint = endpoint
        self._state = ChannelState.OPEN
        self._finalizer = weakref.finalize(
            self, _release_on_collect, endpoint, self._kind
        )

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is ChannelState.CLOSED

    @property
    def name(self) -> str:
        return self._endpoint.name

    @property
    def encoding(self) -> str:
        return self._endpoint.encoding

    def _check_open(self, operation: str) -> None:
        if self._state is ChannelState.CLOSED:
            raise ChannelClosedError(operation, self._kind)

    def close(self) -> None:
        """Close this handle. Closing twice is a no-op.

        Raises:
            ResourceReleaseError: If releasing the endpoint failed (for
                example, the final flush). The handle is closed anyway.
        """
        if self._state is ChannelState.CLOSED:
            return
        self._state = ChannelState.CLOSED
        self._finalizer.detach()
        try:
            self._endpoint.release()
        except Exception as e:
            raise ResourceReleaseError(f"Failed to release {self.name}: {e}") from e

    def share(self):
        """Return another handle on the same endpoint.

        The raw object stays open until every handle is closed.
        """
        self._check_open("share")
        return type(self)(self._endpoint)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __repr__(self):
        return f"<{type(self).__name__} {self.name!r} {self._state.value}>"


class InputChannel(_Channel):
    """A readable handle."""

    _kind = "input channel"

    def read(self, n: int = -1) -> bytes:
        """Read up to n bytes (all remaining bytes if n < 0). b"" at end of input."""
        self._check_open("read")
        return self._endpoint.read(n)

    def read_all(self) -> bytes:
        return self.read(-1)

    def read_byte(self) -> Optional[int]:
        """Read one byte as an int, or None at end of input."""
        self._check_open("read_byte")
        return self._endpoint.read_byte()

    def read_line(self) -> Optional[str]:
        """Read one line without its newline, or None at end of input."""
        self._check_open("read_line")
        line = self._endpoint.read_line()
        if line is None:
            return None
        return line.decode(self._endpoint.encoding)

    def read_char(self) -> Optional[str]:
        """Read one character, or None at end of input."""
        self._check_open("read_char")
        return self._endpoint.read_char()

    def seek(self, pos: int) -> None:
        self._check_open("seek")
        self._endpoint.seek(pos)

    def tell(self) -> int:
        self._check_open("tell")
        return self._endpoint.tell()

    def _view(self, operation: str, read: Callable[["InputChannel"], Any]) -> Enum:
        self._check_open(operation)
        view = self.share()

        def next_item():
            if view.closed:
                return EXHAUSTED
            item = read(view)
            if item is None:
                view.close()
                return EXHAUSTED
            return item

        return make(next_item)

    def lines(self) -> Enum:
        """Enumerate the remaining lines.

        The Enum holds its own handle, released at the end of input or when
        the Enum is collected, so closing this channel does not cut it off.
        """
        return self._view("lines", InputChannel.read_line)

    def chars(self) -> Enum:
        """Enumerate the remaining characters."""
        return self._view("chars", InputChannel.read_char)

    def bytes_(self) -> Enum:
        """Enumerate the remaining bytes as ints."""
        return self._view("bytes", InputChannel.read_byte)

    def __iter__(self):
        return self.lines()


class OutputChannel(_Channel):
    """A writable handle."""

    _kind = "output channel"

    def write(self, data: Union[bytes, bytearray, str]) -> int:
        """Buffer data for writing. str is encoded with the channel encoding.

        Returns the number of bytes buffered.
        """
        self._check_open("write")
        if isinstance(data, str):
            data = data.encode(self._endpoint.encoding)
        self._endpoint.write(data)
        return len(data)

    def write_line(self, text: str = "") -> int:
        return self.write(text + "\n")

    def flush(self) -> None:
        self._check_open("flush")
        self._endpoint.flush()

    def seek(self, pos: int) -> None:
        self._check_open("seek")
        self._endpoint.seek(pos)

    def tell(self) -> int:
        self._check_open("tell")
        return self._endpoint.tell()

    def contents(self) -> bytes:
        """Everything written to an in-memory sink, including unflushed bytes.

        Still available after the channel is closed.

        Raises:
            io.UnsupportedOperation: If the sink is not in memory.
        """
        return self._endpoint.contents()

    def text(self) -> str:
        """contents() decoded with the channel encoding."""
        return self.contents().decode(self._endpoint.encoding)


# =============================================================================
# Constructors
# =============================================================================


def _open_owned(path, mode, endpoint_cls, encoding, buffer_size):
    encoding = check_encoding(encoding or get_config().encoding)
    raw = open(path, mode, buffering=0)
    try:
        return endpoint_cls(raw, str(path), ClosePolicy.OWNED, encoding, buffer_size)
    except Exception:
        raw.close()
        raise


def open_in(path: str, encoding: Optional[str] = None, buffer_size: Optional[int] = None) -> InputChannel:
    """Open a file for reading. The channel owns the file."""
    return InputChannel(_open_owned(path, "rb", _Source, encoding, buffer_size))


def open_out(
    path: str,
    append: bool = False,
    encoding: Optional[str] = None,
    buffer_size: Optional[int] = None,
) -> OutputChannel:
    """Open a file for writing (truncating unless append). The channel owns the file."""
    mode = "ab" if append else "wb"
    return OutputChannel(_open_owned(path, mode, _Sink, encoding, buffer_size))


def input_bytes(data: bytes, buffer_size: Optional[int] = None) -> InputChannel:
    """Read from an in-memory byte string."""
    return InputChannel(
        _Source(io.BytesIO(data), "<bytes>", ClosePolicy.OWNED, None, buffer_size)
    )


def input_string(text: str, encoding: Optional[str] = None, buffer_size: Optional[int] = None) -> InputChannel:
    """Read from an in-memory string, encoded with encoding."""
    encoding = check_encoding(encoding or get_config().encoding)
    return InputChannel(
        _Source(
            io.BytesIO(text.encode(encoding)),
            "<string>",
            ClosePolicy.OWNED,
            encoding,
            buffer_size,
        )
    )


def output_buffer(encoding: Optional[str] = None, buffer_size: Optional[int] = None) -> OutputChannel:
    """Write to memory. Use contents() or text() to get the result."""
    return OutputChannel(
        _Sink(io.BytesIO(), "<buffer>", ClosePolicy.OWNED, encoding, buffer_size)
    )


def wrap_in(
    raw: Any,
    policy: ClosePolicy = ClosePolicy.BORROWED,
    name: Optional[str] = None,
    encoding: Optional[str] = None,
    buffer_size: Optional[int] = None,
) -> InputChannel:
    """Wrap an object with read(n) as an input channel.

    With the default BORROWED policy the caller stays responsible for
    closing raw.
    """
    name = name or getattr(raw, "name", None) or repr(raw)
    return InputChannel(_Source(raw, str(name), policy, encoding, buffer_size))


def wrap_out(
    raw: Any,
    policy: ClosePolicy = ClosePolicy.BORROWED,
    name: Optional[str] = None,
    encoding: Optional[str] = None,
    buffer_size: Optional[int] = None,
) -> OutputChannel:
    """Wrap an object with write(b) as an output channel.

    Buffered bytes are flushed to raw when the last handle is released,
    whatever the policy.
    """
    name = name or getattr(raw, "name", None) or repr(raw)
    return OutputChannel(_Sink(raw, str(name), policy, encoding, buffer_size))


def copy(src: InputChannel, dst: OutputChannel, chunk_size: Optional[int] = None) -> int:
    """Pump everything left in src into dst. Returns the number of bytes copied."""
    chunk_size = chunk_size or get_config().buffer_size
    total = 0
    while True:
        chunk = src.read(chunk_size)
        if not chunk:
            return total
        dst.write(chunk)
        total += len(chunk)


__all__ = [
    "InputChannel",
    "OutputChannel",
    "open_in",
    "open_out",
    "input_bytes",
    "input_string",
    "output_buffer",
    "wrap_in",
    "wrap_out",
    "copy",
]
