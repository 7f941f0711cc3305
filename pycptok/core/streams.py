"""Byte sources and byte sinks.

A `ByteSource` produces bytes front to back, exactly once. A `ByteSink`
accepts bytes in order. Standard input and output, files, and in-memory
buffers are all adapted to these two interfaces so that the token reader and
the writer never need to know where their bytes come from or go to.
"""

import io
import logging
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Union

from .errors import IoError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ByteSource(ABC):
    """Abstract producer of a byte sequence."""

    @abstractmethod
    def read_chunk(self, size: int) -> bytes:
        """Returns up to `size` bytes, or an empty bytes object once exhausted.

        Raises:
            IoError: If the underlying stream fails.
        """
        raise NotImplementedError("Subclasses must implement read_chunk()")

    def close(self) -> None:
        """Releases any OS handle held by the source."""


class ByteSink(ABC):
    """Abstract consumer of a byte sequence."""

    @abstractmethod
    def write_bytes(self, data: bytes) -> None:
        """Accepts `data`, in order after everything previously written.

        Raises:
            IoError: If the underlying stream fails.
        """
        raise NotImplementedError("Subclasses must implement write_bytes()")

    def flush(self) -> None:
        """Pushes anything the sink itself buffers down to the OS."""

    def close(self) -> None:
        """Flushes and releases any OS handle held by the sink."""
        self.flush()


class StreamSource(ByteSource):
    """Adapts any binary stream (stdin, an open file, `io.BytesIO`).

    When the stream supports `read1`, a refill returns whatever is already
    available instead of blocking until a full chunk arrives. This keeps an
    interactive console usable one line at a time.

    Args:
        stream (BinaryIO): The binary stream to read from.
        owns (bool): Whether `close()` should close the stream.
        name (str): A label used in log and error messages.
    """

    def __init__(self, stream: BinaryIO, owns: bool = False, name: str = "<stream>") -> None:
        self.stream = stream
        self.owns = owns
        self.name = name
        self._read = getattr(stream, "read1", stream.read)

    def read_chunk(self, size: int) -> bytes:
        try:
            return self._read(size)
        except (OSError, ValueError) as e:
            raise IoError(f"{self.name}: {e}", "read") from e

    def close(self) -> None:
        if self.owns and not self.stream.closed:
            logger.debug(f"Closing source {self.name}")
            self.stream.close()


class MemorySource(StreamSource):
    """An in-memory source over text (encoded as UTF-8) or raw bytes."""

    def __init__(self, data: Union[str, bytes]) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        super().__init__(io.BytesIO(data), owns=True, name="<memory>")


class StreamSink(ByteSink):
    """Adapts any binary stream (stdout, an open file).

    Args:
        stream (BinaryIO): The binary stream to write to.
        owns (bool): Whether `close()` should close the stream.
        name (str): A label used in log and error messages.
    """

    def __init__(self, stream: BinaryIO, owns: bool = False, name: str = "<stream>") -> None:
        self.stream = stream
        self.owns = owns
        self.name = name

    def write_bytes(self, data: bytes) -> None:
        try:
            self.stream.write(data)
        except (OSError, ValueError) as e:
            raise IoError(f"{self.name}: {e}", "write") from e

    def flush(self) -> None:
        if self.stream.closed:
            return
        try:
            self.stream.flush()
        except OSError as e:
            raise IoError(f"{self.name}: {e}", "flush") from e

    def close(self) -> None:
        self.flush()
        if self.owns and not self.stream.closed:
            logger.debug(f"Closing sink {self.name}")
            self.stream.close()


class MemorySink(ByteSink):
    """Collects written bytes in memory; mostly useful for tests and pipelines."""

    def __init__(self) -> None:
        self._data = bytearray()

    def write_bytes(self, data: bytes) -> None:
        self._data += data

    def getvalue(self) -> bytes:
        return bytes(self._data)

    def text(self) -> str:
        return self._data.decode("utf-8")


def console_source() -> StreamSource:
    """Returns a source reading the process's standard input."""
    return StreamSource(sys.stdin.buffer, owns=False, name="<stdin>")


class ConsoleSink(StreamSink):
    """Writes to the binary layer of standard output.

    Text already printed through `sys.stdout` (by `print` or a rich console)
    is flushed first so the two layers never interleave out of order.
    """

    def __init__(self) -> None:
        super().__init__(sys.stdout.buffer, owns=False, name="<stdout>")
        self._text_stream = sys.stdout

    def write_bytes(self, data: bytes) -> None:
        self._text_stream.flush()
        super().write_bytes(data)


def console_sink() -> StreamSink:
    """Returns a sink writing to the process's standard output."""
    return ConsoleSink()


def file_source(path: PathLike) -> StreamSource:
    """Opens `path` for reading.

    Raises:
        IoError: If the file is missing or cannot be opened.
    """
    logger.debug(f"Opening {path} for reading")
    try:
        stream = open(path, "rb")
    except OSError as e:
        raise IoError(f"cannot open '{path}' for reading: {e}", "open") from e
    return StreamSource(stream, owns=True, name=str(path))


def file_sink(path: PathLike) -> StreamSink:
    """Creates or truncates `path` for writing.

    Raises:
        IoError: If the file cannot be opened.
    """
    logger.debug(f"Opening {path} for writing")
    try:
        stream = open(path, "wb")
    except OSError as e:
        raise IoError(f"cannot open '{path}' for writing: {e}", "open") from e
    return StreamSink(stream, owns=True, name=str(path))
