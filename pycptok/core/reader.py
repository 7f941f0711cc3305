"""Buffered, delimiter-skipping token reader.

Tokens are maximal runs of bytes that contain none of the delimiters
space, tab, carriage return, line feed, and comma. Every other byte,
punctuation included, belongs to a token.
"""

import logging
import re
from typing import Any

from .errors import ParseError
from .parsers import parse_token
from .streams import ByteSource

logger = logging.getLogger(__name__)

DELIMITERS = b" \t\r\n,"

_DELIMITER_RUN = re.compile(rb"[ \t\r\n,]*")
_TOKEN_RUN = re.compile(rb"[^ \t\r\n,]*")
_LINE_BODY = re.compile(rb"[^\r\n]*")

DEFAULT_CHUNK_SIZE = 65536


def decode(data: bytes) -> str:
    """Decodes UTF-8 strictly.

    Raises:
        ParseError: If `data` is not valid UTF-8.
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"data is not valid UTF-8: {e}") from e


class TokenReader:
    """Reads tokens, lines, and characters from a `ByteSource`.

    The reader owns the source exclusively. Its cursor only makes sense if no
    one else reads from the source, and it must not be shared between threads
    or tasks.

    Attributes:
        source (ByteSource): The source being drained.
        chunk_size (int): How many bytes each refill asks the source for.
    """

    def __init__(self, source: ByteSource, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.source = source
        self.chunk_size = max(1, chunk_size)
        self._buf = bytearray()
        self._pos = 0
        self._exhausted = False

    def _fill(self) -> bool:
        """Pulls the next chunk from the source into the buffer.

        Consumed bytes are discarded first, so the buffer never holds more
        than the unread tail plus one chunk.

        Returns:
            bool: False once the source has nothing more to give.
        """
        if self._exhausted:
            return False
        del self._buf[:self._pos]
        self._pos = 0
        chunk = self.source.read_chunk(self.chunk_size)
        if not chunk:
            self._exhausted = True
            return False
        self._buf += chunk
        return True

    def _skip_delimiters(self) -> bool:
        """Advances past delimiters; returns False if the input ran out."""
        while True:
            self._pos = _DELIMITER_RUN.match(self._buf, self._pos).end()
            if self._pos < len(self._buf):
                return True
            if not self._fill():
                return False

    def _take_run(self, pattern: "re.Pattern[bytes]") -> bytes:
        """Collects bytes matching `pattern`, refilling across chunk boundaries."""
        parts = []
        while True:
            end = pattern.match(self._buf, self._pos).end()
            parts.append(bytes(self._buf[self._pos:end]))
            self._pos = end
            if end < len(self._buf) or not self._fill():
                return b"".join(parts)

    def _peek_byte(self) -> int:
        """Returns the next unread byte without consuming it, or -1 at the end."""
        if self._pos >= len(self._buf) and not self._fill():
            return -1
        return self._buf[self._pos]

    def next_token_bytes(self) -> bytes:
        """Returns the raw bytes of the next token, or b"" at the end of input.

        The single delimiter byte that ends the token is consumed as well.
        """
        if not self._skip_delimiters():
            return b""
        token = self._take_run(_TOKEN_RUN)
        if self._pos < len(self._buf):
            self._pos += 1
        return token

    def read_token(self, tp: Any = str) -> Any:
        """Reads the next token and parses it as `tp`.

        Args:
            tp: A type registered in `pycptok.core.parsers`. Defaults to `str`.

        Returns:
            The parsed value. At the end of input the token is empty, which
            only parses as `str`.

        Raises:
            ParseError: If the token is not UTF-8 or does not parse as `tp`.
            IoError: If the source fails.
        """
        return parse_token(decode(self.next_token_bytes()), tp)

    def read_line(self) -> str:
        """Reads up to the next line feed or carriage return.

        Leading delimiters are kept. Exactly one terminator byte is consumed
        and dropped, so a carriage return and line feed pair ends one line and
        then an empty one.
        """
        line = self._take_run(_LINE_BODY)
        terminator = self._peek_byte()
        if terminator != -1:
            self._pos += 1
        return decode(line)

    def read_char(self) -> str:
        """Skips delimiters and returns exactly the next byte as a character.

        Raises:
            ParseError: If the input is exhausted.
        """
        if not self._skip_delimiters():
            raise ParseError("no character left to read", token="", type_name="Char")
        byte = self._buf[self._pos]
        self._pos += 1
        return chr(byte)

    def read_all(self) -> str:
        """Drains everything left in the source and returns it verbatim."""
        parts = [bytes(self._buf[self._pos:])]
        self._buf.clear()
        self._pos = 0
        while not self._exhausted:
            chunk = self.source.read_chunk(self.chunk_size)
            if not chunk:
                self._exhausted = True
            else:
                parts.append(chunk)
        data = b"".join(parts)
        logger.debug(f"Drained {len(data)} bytes from source")
        return decode(data)

    def at_end(self) -> bool:
        """Returns True when nothing but delimiters remains.

        The delimiters looked past are consumed, so a following `read_line`
        starts at the next token rather than at the current position.
        """
        return not self._skip_delimiters()

    def close(self) -> None:
        self.source.close()

    def __enter__(self) -> "TokenReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
