"""The I/O context: one token reader paired with one writer.

This is the object applications talk to. Every typed, vector, tuple, and
character read is built on `TokenReader.read_token`, so tokenization behaves
identically everywhere.
"""

import logging
import re
from typing import Any, Callable, Iterator, List, Optional, Tuple

from .errors import PreconditionViolation
from .parsers import Unsigned, parse_token
from .reader import TokenReader
from .streams import ByteSink, MemorySource, console_sink
from .writer import Writer

logger = logging.getLogger(__name__)

_INTEGER_PATTERN = re.compile(r"-?[0-9]+")

MIN_TUPLE_ARITY = 2
MAX_TUPLE_ARITY = 6


def split_lines(text: str) -> List[str]:
    """Splits on line feeds, dropping a trailing carriage return per line.

    A trailing newline does not produce a final empty line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class IoContext:
    """Pairs a `TokenReader` with a `Writer`.

    The context owns both; closing it flushes the writer and releases the
    underlying handles. It is not safe to use one context from more than one
    thread or task at a time.

    Example:
        >>> from pycptok import Unsigned, from_string
        >>> io = from_string("1, hello -5.1\\n-9")
        >>> io.read_tuple(Unsigned, str, float)
        (1, 'hello', -5.1)
        >>> io.read(int)
        -9
    """

    def __init__(self, reader: TokenReader, writer: Writer) -> None:
        self.reader = reader
        self.writer = writer

    # Reading

    def read(self, tp: Any = str) -> Any:
        """Reads one token parsed as `tp` (see `TokenReader.read_token`)."""
        return self.reader.read_token(tp)

    def read_line(self) -> str:
        return self.reader.read_line()

    def read_char(self) -> str:
        return self.reader.read_char()

    def read_all(self) -> str:
        return self.reader.read_all()

    def at_end(self) -> bool:
        return self.reader.at_end()

    def read_index(self) -> int:
        """Reads a 1-based index and returns it 0-based.

        Raises:
            PreconditionViolation: If the token is 0.
        """
        value = self.read(Unsigned)
        if value == 0:
            raise PreconditionViolation("index token is 0; 1-based indices must be at least 1")
        return value - 1

    def read_vector(self, tp: Any, n: int) -> List[Any]:
        """Reads exactly `n` tokens of type `tp`, in order."""
        if n < 0:
            raise PreconditionViolation(f"cannot read a vector of negative length {n}")
        return [self.read(tp) for _ in range(n)]

    def read_tuple(self, *types: Any) -> Tuple[Any, ...]:
        """Reads one token per type, left to right.

        Raises:
            PreconditionViolation: Unless 2 to 6 types are given.
        """
        if not MIN_TUPLE_ARITY <= len(types) <= MAX_TUPLE_ARITY:
            raise PreconditionViolation(
                f"tuples of {MIN_TUPLE_ARITY} to {MAX_TUPLE_ARITY} elements are supported, got {len(types)}"
            )
        return tuple(self.read(tp) for tp in types)

    def read_chars(self) -> List[str]:
        """Reads one token and splits it into its characters."""
        return list(self.read(str))

    def lines(self) -> List[str]:
        """Drains the remaining input and returns it split into lines."""
        return split_lines(self.read_all())

    def line_contexts(self, sink_factory: Optional[Callable[[], ByteSink]] = None) -> Iterator["IoContext"]:
        """Drains the remaining input and yields one context per line.

        The drain happens immediately, not on first iteration. Each child
        reads from its own in-memory copy of the line and writes to a fresh
        sink from `sink_factory` (standard output by default). A child's output
        is flushed when iteration moves past it; the child stays readable, so
        children collected up front can each be read to completion.

        Returns:
            Iterator[IoContext]: A one-shot iterator; it cannot be restarted.
        """
        make_sink = sink_factory or console_sink
        lines = self.lines()
        chunk_size = self.reader.chunk_size
        buffer_size = self.writer.buffer_size
        logger.debug(f"Splitting input into {len(lines)} line contexts")

        def generate() -> Iterator[IoContext]:
            for line in lines:
                child = IoContext(
                    TokenReader(MemorySource(line), chunk_size=chunk_size),
                    Writer(make_sink(), buffer_size=buffer_size),
                )
                try:
                    yield child
                finally:
                    child.flush()

        return generate()

    def extract_integers(self, tp: Any = int) -> List[Any]:
        """Drains the input and parses every `-?[0-9]+` match as `tp`.

        Example:
            >>> from pycptok import from_string
            >>> from_string("a: 12, b: -1 and d = 2").extract_integers()
            [12, -1, 2]
        """
        return [parse_token(match.group(0), tp) for match in _INTEGER_PATTERN.finditer(self.read_all())]

    # Writing

    def write(self, value: Any) -> None:
        self.writer.write(value)

    def write_debug(self, value: Any) -> None:
        self.writer.write_debug(value)

    def write_line(self, value: Any = "") -> None:
        self.writer.write_line(value)

    def write_debug_line(self, value: Any) -> None:
        self.writer.write_debug_line(value)

    def newline(self) -> None:
        self.writer.newline()

    def flush(self) -> None:
        self.writer.flush()

    # Lifecycle

    def close(self) -> None:
        """Flushes pending output and releases both ends."""
        try:
            self.writer.close()
        finally:
            self.reader.close()

    def __enter__(self) -> "IoContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
