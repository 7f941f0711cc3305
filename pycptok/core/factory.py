"""Construction strategies for `IoContext`.

`open_context` is the one generic constructor; the named factories bind the
common source and sink pairs:

=================  ===============  ===============
Factory            Source           Sink
=================  ===============  ===============
interactive        console input    console output
from_file          named file       console output
file_to_file       named file A     named file B
console_to_file    console input    named file
from_string        in-memory text   console output
=================  ===============  ===============
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .config import Config
from .context import IoContext
from .errors import PreconditionViolation
from .reader import TokenReader
from .streams import (
    ByteSink,
    ByteSource,
    MemorySource,
    PathLike,
    console_sink,
    console_source,
    file_sink,
    file_source,
)
from .writer import Writer

logger = logging.getLogger(__name__)


def open_context(source: ByteSource, sink: ByteSink, config: Optional[Config] = None) -> IoContext:
    """Builds a context over any source and sink.

    Args:
        source (ByteSource): Where tokens are read from.
        sink (ByteSink): Where written output goes.
        config (Optional[Config]): Supplies buffer sizes. When omitted, the
            built-in defaults are used without touching any config file.

    Returns:
        IoContext: A context owning both ends.
    """
    config = config or Config(load_files=False)
    return IoContext(
        TokenReader(source, chunk_size=config.read_chunk_size()),
        Writer(sink, buffer_size=config.write_buffer_size()),
    )


def interactive(config: Optional[Config] = None) -> IoContext:
    """Console input to console output."""
    return open_context(console_source(), console_sink(), config)


def from_file(path: PathLike, config: Optional[Config] = None) -> IoContext:
    """Reads from the file at `path` and writes to the console.

    Raises:
        IoError: If the file cannot be opened.
    """
    return open_context(file_source(path), console_sink(), config)


def file_to_file(path_in: PathLike, path_out: PathLike, config: Optional[Config] = None) -> IoContext:
    """Reads from `path_in` and writes to `path_out`, which is truncated.

    Raises:
        PreconditionViolation: If both paths name the same file.
        IoError: If either file cannot be opened.
    """
    if Path(path_in).resolve() == Path(path_out).resolve():
        raise PreconditionViolation(
            f"cannot read from and write to the same file: '{path_in}'"
        )
    source = file_source(path_in)
    try:
        sink = file_sink(path_out)
    except Exception:
        source.close()
        raise
    logger.debug(f"Opened {path_in} -> {path_out}")
    return open_context(source, sink, config)


def console_to_file(path: PathLike, config: Optional[Config] = None) -> IoContext:
    """Reads from the console and writes to the file at `path`."""
    return open_context(console_source(), file_sink(path), config)


def from_string(text: Union[str, bytes], config: Optional[Config] = None) -> IoContext:
    """Reads from in-memory text and writes to the console."""
    return open_context(MemorySource(text), console_sink(), config)
