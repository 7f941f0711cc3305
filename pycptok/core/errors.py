"""Error hierarchy for pycptok.

Every failure raised by the library derives from `CptokError` and falls into
one of three categories:

-   `IoError`: an underlying source or sink failed to open, read, or write.
-   `ParseError`: token bytes are not valid UTF-8 or do not parse into the
    requested type.
-   `PreconditionViolation`: the caller misused the API.

None of these are retried or recovered internally. The batch runner and the
CLI are the only places that turn them into process termination.
"""

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    """High-level error categories."""
    IO = "io"
    PARSE = "parse"
    PRECONDITION = "precondition"


class CptokError(Exception):
    """Base exception for all pycptok errors."""

    def __init__(self, message: str, code: str, category: ErrorCategory) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category

    def to_dict(self) -> dict:
        """Returns a serializable summary of the error."""
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
        }


class IoError(CptokError):
    """A byte source or sink failed."""

    def __init__(self, message: str, operation: str) -> None:
        super().__init__(
            f"I/O {operation} failed: {message}",
            "IO_ERROR", ErrorCategory.IO,
        )
        self.operation = operation


class ParseError(CptokError):
    """Token text could not be decoded or parsed into the requested type."""

    def __init__(self, message: str, token: Optional[str] = None, type_name: Optional[str] = None) -> None:
        super().__init__(message, "PARSE_ERROR", ErrorCategory.PARSE)
        self.token = token
        self.type_name = type_name


class PreconditionViolation(CptokError):
    """The caller asked for something that would corrupt state or underflow."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "PRECONDITION_VIOLATION", ErrorCategory.PRECONDITION)
