"""pycptok: tokenizing I/O for batch and contest-style programs.

This package reads delimiter-separated tokens from standard input, files, or
strings, parses each one into the type the caller asks for, and writes
buffered output to the console or a file.
"""

from .core.context import IoContext
from .core.errors import CptokError, IoError, ParseError, PreconditionViolation
from .core.factory import console_to_file, file_to_file, from_file, from_string, interactive, open_context
from .core.parsers import Char, Unsigned, register_parser
from .core.runner import batch_main, run_batch

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = [
    "__version__",
    "__license__",
    "IoContext",
    "CptokError",
    "IoError",
    "ParseError",
    "PreconditionViolation",
    "open_context",
    "interactive",
    "from_file",
    "file_to_file",
    "console_to_file",
    "from_string",
    "Char",
    "Unsigned",
    "register_parser",
    "run_batch",
    "batch_main",
]
