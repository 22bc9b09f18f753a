"""
Test suite for buffered channels.

This module tests:
- Reading bytes, lines and characters across buffer refills
- Buffered writing and in-memory contents
- Close semantics: idempotent, every other operation fails afterwards
- Shared handles: the raw object is released exactly once, by the last one
- Views (lines/chars/bytes_) that outlive the channel they came from
- Release failures and garbage-collected handles
"""

import gc
import io
import os
import tempfile
import unittest

import rill
from rill.config import RuntimeConfig, set_config
from rill.types import (
    ChannelClosedError,
    ChannelState,
    ClosePolicy,
    ResourceReleaseError,
)


class CountingRaw(io.BytesIO):
    """BytesIO that counts how often it is closed."""

    def __init__(self, data=b""):
        super().__init__(data)
        self.close_calls = 0

    def close(self):
        self.close_calls += 1
        super().close()


class BrokenSink:
    """A sink whose writes always fail."""

    def __init__(self):
        self.close_calls = 0

    def write(self, data):
        raise OSError("disk full")

    def close(self):
        self.close_calls += 1


class FlakySink:
    """A sink whose first write fails and later writes succeed."""

    def __init__(self):
        self.data = b""
        self.failures = 1

    def write(self, data):
        if self.failures:
            self.failures -= 1
            raise OSError("interrupted")
        self.data += data
        return len(data)


class TrickleSink:
    """A sink that accepts at most three bytes per write."""

    def __init__(self):
        self.data = b""

    def write(self, data):
        self.data += data[:3]
        return min(len(data), 3)


class TestReading(unittest.TestCase):
    def test_read_sizes(self):
        ch = rill.input_bytes(b"abcdef", buffer_size=4)
        self.assertEqual(ch.read(2), b"ab")
        self.assertEqual(ch.read(3), b"cde")
        self.assertEqual(ch.read(10), b"f")
        self.assertEqual(ch.read(1), b"")

    def test_read_all(self):
        ch = rill.input_bytes(b"x" * 100, buffer_size=7)
        ch.read(1)
        self.assertEqual(ch.read_all(), b"x" * 99)

    def test_read_byte(self):
        ch = rill.input_bytes(b"\x01\xff")
        self.assertEqual(ch.read_byte(), 1)
        self.assertEqual(ch.read_byte(), 255)
        self.assertIsNone(ch.read_byte())

    def test_read_line_across_refills(self):
        ch = rill.input_bytes(b"hello\nworld\n\nlast", buffer_size=2)
        self.assertEqual(ch.read_line(), "hello")
        self.assertEqual(ch.read_line(), "world")
        self.assertEqual(ch.read_line(), "")
        self.assertEqual(ch.read_line(), "last")
        self.assertIsNone(ch.read_line())

    def test_read_char_multibyte(self):
        ch = rill.input_string("héllo ✓", buffer_size=1)
        chars = []
        while True:
            c = ch.read_char()
            if c is None:
                break
            chars.append(c)
        self.assertEqual("".join(chars), "héllo ✓")

    def test_truncated_character(self):
        ch = rill.input_bytes(b"\xc3")
        with self.assertRaises(UnicodeDecodeError):
            ch.read_char()

    def test_seek_and_tell(self):
        ch = rill.input_bytes(b"abcdef", buffer_size=4)
        ch.read(3)
        self.assertEqual(ch.tell(), 3)
        ch.seek(1)
        self.assertEqual(ch.read(2), b"bc")
        self.assertEqual(ch.tell(), 3)

    def test_seek_unsupported(self):
        class Pipe:
            def read(self, n):
                return b""

        ch = rill.wrap_in(Pipe(), name="pipe")
        with self.assertRaises(io.UnsupportedOperation):
            ch.seek(0)

    def test_iteration_yields_lines(self):
        ch = rill.input_string("a\nb\n")
        self.assertEqual(list(ch), ["a", "b"])

    def test_configured_encoding(self):
        set_config(RuntimeConfig(encoding="latin-1"))
        try:
            ch = rill.input_bytes(b"caf\xe9\n")
            self.assertEqual(ch.encoding, "latin-1")
            self.assertEqual(ch.read_line(), "café")
        finally:
            set_config(None)


class TestWriting(unittest.TestCase):
    def test_output_buffer(self):
        out = rill.output_buffer()
        self.assertEqual(out.write("ab"), 2)
        out.write(b"c")
        out.write_line("d")
        self.assertEqual(out.contents(), b"abcd\n")
        self.assertEqual(out.text(), "abcd\n")

    def test_contents_after_close(self):
        out = rill.output_buffer()
        out.write("kept")
        out.close()
        self.assertEqual(out.contents(), b"kept")

    def test_writes_are_buffered(self):
        raw = io.BytesIO()
        out = rill.wrap_out(raw, buffer_size=4)
        out.write(b"abc")
        self.assertEqual(raw.getvalue(), b"")
        out.write(b"de")
        self.assertEqual(raw.getvalue(), b"abcde")
        out.write(b"f")
        out.flush()
        self.assertEqual(raw.getvalue(), b"abcdef")

    def test_close_flushes_borrowed(self):
        raw = io.BytesIO()
        out = rill.wrap_out(raw)
        out.write(b"tail")
        out.close()
        self.assertFalse(raw.closed)
        self.assertEqual(raw.getvalue(), b"tail")

    def test_tell_counts_buffered_bytes(self):
        out = rill.output_buffer()
        out.write(b"abc")
        self.assertEqual(out.tell(), 3)

    def test_contents_of_file_sink(self):
        with tempfile.TemporaryDirectory() as tmp:
            with rill.open_out(os.path.join(tmp, "f")) as out:
                with self.assertRaises(io.UnsupportedOperation):
                    out.contents()


class TestFiles(unittest.TestCase):
    def test_round_trip(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "data.txt")
            with rill.open_out(path) as out:
                out.write_line("one")
                out.write_line("two")
            with rill.open_out(path, append=True) as out:
                out.write_line("three")
            with rill.open_in(path) as ch:
                self.assertEqual(list(ch.lines()), ["one", "two", "three"])

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            rill.open_in("/nonexistent/definitely/missing")

    def test_copy(self):
        src = rill.input_bytes(b"z" * 50)
        dst = rill.output_buffer()
        self.assertEqual(rill.copy(src, dst, chunk_size=8), 50)
        self.assertEqual(dst.contents(), b"z" * 50)


class TestClose(unittest.TestCase):
    def test_close_is_idempotent(self):
        ch = rill.input_bytes(b"abc")
        ch.close()
        ch.close()
        self.assertTrue(ch.closed)
        self.assertIs(ch.state, ChannelState.CLOSED)

    def test_input_operations_after_close(self):
        ch = rill.input_bytes(b"abc")
        ch.close()
        for name, call in [
            ("read", lambda: ch.read(1)),
            ("read_all", ch.read_all),
            ("read_byte", ch.read_byte),
            ("read_line", ch.read_line),
            ("read_char", ch.read_char),
            ("seek", lambda: ch.seek(0)),
            ("tell", ch.tell),
            ("share", ch.share),
            ("lines", ch.lines),
            ("chars", ch.chars),
            ("bytes_", ch.bytes_),
        ]:
            with self.subTest(operation=name):
                with self.assertRaises(ChannelClosedError):
                    call()

    def test_output_operations_after_close(self):
        out = rill.output_buffer()
        out.close()
        for name, call in [
            ("write", lambda: out.write(b"x")),
            ("write_line", lambda: out.write_line("x")),
            ("flush", out.flush),
            ("seek", lambda: out.seek(0)),
            ("tell", out.tell),
            ("share", out.share),
        ]:
            with self.subTest(operation=name):
                with self.assertRaises(ChannelClosedError):
                    call()

    def test_closed_error_is_not_end_of_input(self):
        ch = rill.input_bytes(b"")
        self.assertEqual(ch.read(1), b"")
        ch.close()
        with self.assertRaises(ChannelClosedError) as ctx:
            ch.read(1)
        self.assertIn("read on closed input channel", str(ctx.exception))
        self.assertIsInstance(ctx.exception, ValueError)

    def test_context_manager(self):
        with rill.input_string("x") as ch:
            self.assertFalse(ch.closed)
        self.assertTrue(ch.closed)

    def test_owned_raw_is_closed(self):
        raw = CountingRaw(b"abc")
        rill.wrap_in(raw, ClosePolicy.OWNED).close()
        self.assertEqual(raw.close_calls, 1)

    def test_borrowed_raw_stays_open(self):
        raw = CountingRaw(b"abc")
        rill.wrap_in(raw).close()
        self.assertEqual(raw.close_calls, 0)
        self.assertFalse(raw.closed)


class TestSharing(unittest.TestCase):
    def test_released_once_by_last_handle(self):
        raw = CountingRaw(b"abcdef")
        ch = rill.wrap_in(raw, ClosePolicy.OWNED)
        a = ch.share()
        b = a.share()
        ch.close()
        a.close()
        self.assertEqual(raw.close_calls, 0)
        self.assertEqual(b.read(2), b"ab")
        b.close()
        b.close()
        self.assertEqual(raw.close_calls, 1)

    def test_shared_handles_share_position(self):
        ch = rill.input_bytes(b"abcd")
        other = ch.share()
        self.assertEqual(ch.read(1), b"a")
        self.assertEqual(other.read(1), b"b")

    def test_view_outlives_channel(self):
        raw = CountingRaw(b"x\ny\n")
        ch = rill.wrap_in(raw, ClosePolicy.OWNED)
        lines = ch.lines()
        ch.close()
        self.assertEqual(raw.close_calls, 0)
        self.assertEqual(list(lines), ["x", "y"])
        self.assertEqual(raw.close_calls, 1)

    def test_chars_and_bytes_views(self):
        self.assertEqual(list(rill.input_string("añb").chars()), ["a", "ñ", "b"])
        self.assertEqual(list(rill.input_bytes(b"\x00\x07").bytes_()), [0, 7])

    def test_view_is_clonable(self):
        lines = rill.input_string("1\n2\n3\n").lines()
        self.assertEqual(lines.next(), "1")
        again = lines.clone()
        self.assertEqual(list(lines), ["2", "3"])
        self.assertEqual(list(again), ["2", "3"])

    def test_dropped_view_releases(self):
        raw = CountingRaw(b"a\nb\n")
        ch = rill.wrap_in(raw, ClosePolicy.OWNED)
        lines = ch.lines()
        lines.next()
        ch.close()
        del lines
        gc.collect()
        self.assertEqual(raw.close_calls, 1)

    def test_collected_handle_releases(self):
        raw = CountingRaw(b"abc")
        ch = rill.wrap_in(raw, ClosePolicy.OWNED)
        del ch
        gc.collect()
        self.assertEqual(raw.close_calls, 1)


class TestReleaseFailures(unittest.TestCase):
    def test_flush_failure_on_close(self):
        raw = BrokenSink()
        out = rill.wrap_out(raw, ClosePolicy.OWNED, name="broken")
        out.write(b"data")
        with self.assertRaises(ResourceReleaseError) as ctx:
            out.close()
        self.assertIsInstance(ctx.exception.__cause__, OSError)
        self.assertTrue(out.closed)
        self.assertEqual(raw.close_calls, 1)
        out.close()
        self.assertEqual(raw.close_calls, 1)

    def test_flush_failure_is_reported_by_flush(self):
        out = rill.wrap_out(BrokenSink(), name="broken")
        out.write(b"data")
        with self.assertRaises(OSError):
            out.flush()
        with self.assertRaises(ResourceReleaseError):
            out.close()

    def test_failed_flush_keeps_buffered_bytes(self):
        raw = FlakySink()
        out = rill.wrap_out(raw, name="flaky")
        out.write(b"important")
        with self.assertRaises(OSError):
            out.flush()
        self.assertEqual(raw.data, b"")
        out.close()
        self.assertEqual(raw.data, b"important")

    def test_short_writes_are_retried(self):
        raw = TrickleSink()
        out = rill.wrap_out(raw, buffer_size=4)
        out.write(b"abcdefghij")
        self.assertEqual(raw.data, b"abcdefghij")
        out.write(b"xy")
        out.close()
        self.assertEqual(raw.data, b"abcdefghijxy")

    def test_unknown_encoding_does_not_open_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "f")
            with open(path, "wb"):
                pass
            with self.assertRaises(ValueError):
                rill.open_in(path, encoding="no-such-codec")
            with self.assertRaises(ValueError):
                rill.open_out(os.path.join(tmp, "g"), encoding="no-such-codec")
            self.assertFalse(os.path.exists(os.path.join(tmp, "g")))
        with self.assertRaises(ValueError):
            rill.wrap_in(io.BytesIO(), encoding="no-such-codec")
        with self.assertRaises(ValueError):
            rill.input_string("x", encoding="no-such-codec")


class TestLogging(unittest.TestCase):
    def test_open_and_release_are_logged(self):
        with self.assertLogs("rill.channels", level="DEBUG") as logs:
            ch = rill.input_bytes(b"")
            ch.close()
        output = "\n".join(logs.output)
        self.assertIn("Opened <bytes>", output)
        self.assertIn("Released <bytes>", output)

    def test_collected_with_pending_output_warns(self):
        raw = io.BytesIO()
        with self.assertLogs("rill.channels", level="WARNING") as logs:
            out = rill.wrap_out(raw, name="sink")
            out.write(b"late")
            del out
            gc.collect()
        self.assertIn("unflushed output", "\n".join(logs.output))
        self.assertEqual(raw.getvalue(), b"late")


if __name__ == "__main__":
    unittest.main()
