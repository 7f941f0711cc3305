"""Batch entry point that turns library errors into process termination.

The core operations raise typed errors and never exit. Short-lived batch
programs usually want the opposite: stop at the first failure with a clear
message. `run_batch` and `batch_main` provide that at the outermost layer.
"""

import functools
import logging
from typing import Any, Callable, Optional

from rich.console import Console
from rich.markup import escape

from .config import Config
from .context import IoContext
from .errors import CptokError
from .factory import interactive

logger = logging.getLogger(__name__)

error_console = Console(stderr=True)

ContextFactory = Callable[[], IoContext]


def run_batch(
    solve: Callable[[IoContext], Any],
    factory: Optional[ContextFactory] = None,
    config: Optional[Config] = None,
) -> Any:
    """Runs `solve` against a fresh context and always closes it.

    Args:
        solve: The program body. It receives the context.
        factory: Builds the context; defaults to the interactive console.
        config: Supplies the exit code used on failure.

    Returns:
        Whatever `solve` returns.

    Raises:
        SystemExit: If a `CptokError` escapes `solve` or closing the context.
    """
    config = config or Config(load_files=False)
    try:
        io = factory() if factory else interactive(config)
        with io:
            return solve(io)
    except CptokError as e:
        logger.error(f"{e.code}: {e.message}")
        error_console.print(f"[red]error[/red]: {escape(e.message)}", highlight=False, soft_wrap=True)
        raise SystemExit(config.exit_code()) from e


def batch_main(factory: Optional[ContextFactory] = None, config: Optional[Config] = None):
    """Decorator form of `run_batch`.

    Example:
        >>> @batch_main()
        ... def main(io):
        ...     n = io.read(int)
        ...     io.write_line(sum(io.read_vector(int, n)))
    """
    def decorator(solve: Callable[[IoContext], Any]) -> Callable[[], Any]:
        @functools.wraps(solve)
        def wrapper() -> Any:
            return run_batch(solve, factory=factory, config=config)
        return wrapper
    return decorator
