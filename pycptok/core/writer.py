"""Buffered writer over a `ByteSink`."""

import logging
from typing import Any

from .streams import ByteSink

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 8192


class Writer:
    """Buffers text output and hands it to a `ByteSink` in submission order.

    Bytes reach the sink on `flush()`, on `close()`, or as soon as the buffer
    grows past `buffer_size`. Flushing is comparatively expensive; avoid
    calling it once per iteration of a tight loop. Like the token reader, a
    writer must not be shared between threads or tasks.

    Attributes:
        sink (ByteSink): The destination for buffered bytes.
        buffer_size (int): Automatic flush threshold in bytes.
    """

    def __init__(self, sink: ByteSink, buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        self.sink = sink
        self.buffer_size = max(1, buffer_size)
        self._buf = bytearray()
        self._closed = False

    def _append(self, text: str) -> None:
        self._buf += text.encode("utf-8")
        if len(self._buf) >= self.buffer_size:
            self._drain()

    def _drain(self) -> None:
        if self._buf:
            self.sink.write_bytes(bytes(self._buf))
            self._buf.clear()

    def write(self, value: Any) -> None:
        """Appends the display form (`str`) of `value` without flushing."""
        self._append(str(value))

    def write_debug(self, value: Any) -> None:
        """Appends the structural form (`repr`) of `value` without flushing."""
        self._append(repr(value))

    def write_line(self, value: Any = "") -> None:
        """Writes `value`, then a line feed, then flushes."""
        self.write(value)
        self.newline()
        self.flush()

    def write_debug_line(self, value: Any) -> None:
        """Writes `repr(value)`, then a line feed, then flushes."""
        self.write_debug(value)
        self.newline()
        self.flush()

    def newline(self) -> None:
        self._append("\n")

    def flush(self) -> None:
        """Forces every buffered byte into the sink now."""
        self._drain()
        self.sink.flush()

    def pending(self) -> int:
        """Number of bytes buffered but not yet handed to the sink."""
        return len(self._buf)

    def close(self) -> None:
        """Flushes pending output and closes the sink. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        logger.debug(f"Closing writer with {len(self._buf)} pending bytes")
        try:
            self._drain()
        finally:
            self.sink.close()

    def __enter__(self) -> "Writer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
