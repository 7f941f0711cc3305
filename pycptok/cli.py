"""Defines the command-line interface for pycptok.

This module uses the `click` library to expose the token reader and writer as
a small set of text-processing commands: dumping tokens, extracting integers,
splitting input into lines, converting numbers between radices, hashing input,
and re-tokenizing one file into another.
"""
import json
import logging
import sys
from typing import Any, Dict, Optional

import click
from halo import Halo
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .core.config import Config
from .core.context import IoContext
from .core.errors import CptokError
from .core.factory import file_to_file, from_file, interactive
from .core.parsers import Char, Unsigned
from .utils.digest import md5_hex
from .utils.radix import format_radix

console = Console(emoji=False, highlight=False)
error_console = Console(stderr=True, highlight=False)

logger = logging.getLogger(__name__)

TOKEN_TYPES: Dict[str, Any] = {
    "str": str,
    "int": int,
    "unsigned": Unsigned,
    "float": float,
    "char": Char,
    "bool": bool,
}


class AliasedGroup(click.Group):
    """A custom click Group that supports command aliases and case-insensitivity."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._aliases: Dict[str, str] = {}

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        """Gets a command by name, checking for aliases and prefixes.

        Args:
            ctx: The click context.
            cmd_name: The command name entered by the user.

        Returns:
            The matched click command, or None.
        """
        cmd_name = cmd_name.lower()
        rv = super().get_command(ctx, cmd_name)
        if rv is not None:
            return rv
        if cmd_name in self._aliases:
            return super().get_command(ctx, self._aliases[cmd_name])
        matches = [x for x in self.list_commands(ctx) if x.startswith(cmd_name)]
        if not matches:
            return None
        if len(matches) == 1:
            return super().get_command(ctx, matches[0])
        ctx.fail(f"Ambiguous command: '{cmd_name}'. Matches: {', '.join(sorted(matches))}")
        return None

    def add_alias(self, alias: str, command_name: str) -> None:
        self._aliases[alias.lower()] = command_name.lower()


def _open_input(path: Optional[str], config: Config) -> IoContext:
    """Opens FILE, or standard input when FILE is omitted or '-'."""
    if path is None or path == "-":
        return interactive(config)
    return from_file(path, config)


def _fail(error: CptokError, config: Config) -> None:
    """Reports a library error and exits with the configured status."""
    logger.debug(f"Command failed: {error.to_dict()}")
    error_console.print(f"[red]Error: {escape(error.message)}[/red]", soft_wrap=True)
    sys.exit(config.exit_code())


def _unescape(separator: str) -> str:
    """Allows separators like '\\t' and '\\n' to be typed on the command line."""
    return separator.encode("utf-8").decode("unicode_escape")


@click.group(cls=AliasedGroup, invoke_without_command=True, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="pycptok")
@click.option("--verbose", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to a custom config file.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, debug: bool, config_path: Optional[str]) -> None:
    """Tokenizing I/O for batch and contest-style input.

    Tokens are runs of characters separated by spaces, tabs, line breaks, or
    commas. Every command reads FILE, or standard input when FILE is omitted
    or '-'.
    """
    config_obj = Config(config_path=config_path)
    verbose = verbose or config_obj.get("verbose", False)
    log_level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    logger.debug("Debug mode enabled.")
    if not config_obj.get("colors", True):
        console.no_color = True
        error_console.no_color = True
    ctx.obj = config_obj

    if ctx.invoked_subcommand is None:
        console.print("Use 'cptok tokens <file>' to list tokens, or 'cptok --help' for more commands.")


@main.command()
@click.argument("file", required=False)
@click.option("--type", "type_name", type=click.Choice(sorted(TOKEN_TYPES)), default="str", help="Parse every token as this type.")
@click.option("--table", "as_table", is_flag=True, help="Show tokens in a table.")
@click.option("--separator", default=None, help="Text written between tokens (default from config).")
@click.pass_obj
def tokens(config: Config, file: Optional[str], type_name: str, as_table: bool, separator: Optional[str]) -> None:
    """List the tokens of FILE, parsed as --type."""
    tp = TOKEN_TYPES[type_name]
    sep = _unescape(separator) if separator is not None else config.get("cli.separator", "\n")
    try:
        with _open_input(file, config) as io:
            values = []
            while not io.at_end():
                values.append(io.read(tp))
            if as_table:
                table = Table(title=f"Tokens ({type_name})")
                table.add_column("#", style="cyan", justify="right")
                table.add_column("Value")
                for index, value in enumerate(values, start=1):
                    table.add_row(str(index), escape(str(value)))
                console.print(table)
                return
            for value in values:
                io.write(value)
                io.write(sep)
            io.flush()
    except CptokError as e:
        _fail(e, config)


@main.command()
@click.argument("file", required=False)
@click.option("--sum", "total", is_flag=True, help="Print only the sum of the integers.")
@click.pass_obj
def nums(config: Config, file: Optional[str], total: bool) -> None:
    """Extract every integer (optionally negative) from FILE."""
    try:
        with _open_input(file, config) as io:
            numbers = io.extract_integers(int)
            logger.info(f"Extracted {len(numbers)} integers")
            if total:
                io.write_line(sum(numbers))
                return
            for number in numbers:
                io.write(number)
                io.newline()
            io.flush()
    except CptokError as e:
        _fail(e, config)


@main.command()
@click.argument("file", required=False)
@click.pass_obj
def lines(config: Config, file: Optional[str]) -> None:
    """Show each line of FILE with its tokens."""
    table = Table(title="Lines")
    table.add_column("Line", style="cyan", justify="right")
    table.add_column("Tokens", justify="right")
    table.add_column("Values")
    try:
        with _open_input(file, config) as io:
            for number, line_io in enumerate(io.line_contexts(), start=1):
                values = []
                while not line_io.at_end():
                    values.append(line_io.read())
                table.add_row(str(number), str(len(values)), escape(" | ".join(values)))
    except CptokError as e:
        _fail(e, config)
    console.print(table)


@main.command()
@click.argument("file", required=False)
@click.pass_obj
def radix(config: Config, file: Optional[str]) -> None:
    """Convert numbers between bases.

    Each line of FILE holds a number and a target base, for example '255 16'.
    """
    try:
        with _open_input(file, config) as io:
            for line_io in io.line_contexts():
                if line_io.at_end():
                    continue
                number, base = line_io.read_tuple(int, Unsigned)
                line_io.write_line(format_radix(number, base))
    except CptokError as e:
        _fail(e, config)


@main.command()
@click.argument("file", required=False)
@click.pass_obj
def digest(config: Config, file: Optional[str]) -> None:
    """Print the MD5 digest of FILE's contents."""
    try:
        with _open_input(file, config) as io:
            io.write_line(md5_hex(io.read_all()))
    except CptokError as e:
        _fail(e, config)


@main.command()
@click.argument("source", type=click.Path(dir_okay=False))
@click.argument("destination", type=click.Path(dir_okay=False))
@click.option("--separator", default=None, help="Text written between tokens (default from config).")
@click.pass_obj
def convert(config: Config, source: str, destination: str, separator: Optional[str]) -> None:
    """Re-tokenize SOURCE into DESTINATION, one token per separator."""
    sep = _unescape(separator) if separator is not None else config.get("cli.separator", "\n")
    with Halo(text=f"Converting {source}...", spinner="dots", stream=sys.stderr) as spinner:
        try:
            with file_to_file(source, destination, config) as io:
                count = 0
                while not io.at_end():
                    io.write(io.read())
                    io.write(sep)
                    count += 1
            spinner.succeed(f"Wrote {count} tokens to {destination}")
        except CptokError as e:
            spinner.fail(f"Conversion failed: {e.message}")
            _fail(e, config)


@main.command()
@click.argument("action", type=click.Choice(['get', 'set', 'list', 'reset']), required=True)
@click.argument("key", type=str, required=False)
@click.argument("value", type=str, required=False)
@click.pass_obj
def config(config_obj: Config, action: str, key: Optional[str], value: Optional[str]) -> None:
    """Manage the pycptok configuration.

    This command allows you to view, set, and reset configuration values
    that are stored in the user-level configuration file.

    \b
    ACTION:
        get <key>         Get a configuration value.
        set <key> <value> Set a configuration value.
        list              List all current configuration values.
        reset             Reset the configuration to its default state.
    """
    if action == "list":
        console.print(Panel(json.dumps(config_obj.config, indent=2), title="Current Configuration"))
    elif action == "get":
        if not key:
            error_console.print("[red]Error: 'get' action requires a key.[/red]")
            sys.exit(1)
        console.print(repr(config_obj.get(key)))
    elif action == "set":
        if not key or value is None:
            error_console.print("[red]Error: 'set' action requires a key and a value.[/red]")
            sys.exit(1)
        if value.lower() in ('true', 'false'):
            processed_value: Any = value.lower() == 'true'
        elif value.isdigit():
            processed_value = int(value)
        else:
            processed_value = _unescape(value)
        config_obj.set(key, processed_value)
        try:
            config_obj.save_user_config()
            console.print(f"[green]'{key}' set to {processed_value!r} and saved to user config.[/green]")
        except IOError as e:
            error_console.print(f"[red]Error saving configuration: {e}[/red]")
            sys.exit(1)
    elif action == "reset":
        if Config.reset_user_config():
            console.print("[green]Configuration reset to defaults.[/green]")
        else:
            console.print("[yellow]No user configuration file to reset.[/yellow]")


main.add_alias('tok', 'tokens')
main.add_alias('ints', 'nums')
main.add_alias('md5', 'digest')

if __name__ == "__main__":
    main()
