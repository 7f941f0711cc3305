"""The "parseable from token text" capability.

A parser is a plain callable taking the decoded token text and returning a
value. Parsers are looked up by the type object the caller asks for, in a
fixed registry; nothing inspects the requested type at runtime. New types are
added with `register_parser`.

Two marker types cover requests that have no natural Python class:
`Unsigned` for non-negative integers and `Char` for single characters.
"""

import re
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Any, Callable, Dict

from .errors import ParseError

Parser = Callable[[str], Any]

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_RE = re.compile(r"\+?[0-9]+")


class Unsigned:
    """Marker requesting a non-negative integer token."""


class Char:
    """Marker requesting a single-character token."""


def _parse_str(text: str) -> str:
    return text


def _parse_int(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError("not an integer")
    return int(text)


def _parse_unsigned(text: str) -> int:
    if not _UNSIGNED_RE.fullmatch(text):
        raise ValueError("not an unsigned integer")
    return int(text)


def _no_underscores(text: str) -> str:
    # Python's numeric constructors accept digit separators; token syntax does not.
    if "_" in text:
        raise ValueError("digit separators are not allowed")
    return text


def _parse_float(text: str) -> float:
    return float(_no_underscores(text))


def _parse_char(text: str) -> str:
    if len(text) != 1:
        raise ValueError("expected exactly one character")
    return text


def _parse_bool(text: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError("expected 'true' or 'false'")


def _parse_fraction(text: str) -> Fraction:
    return Fraction(_no_underscores(text))


def _parse_decimal(text: str) -> Decimal:
    try:
        return Decimal(_no_underscores(text))
    except InvalidOperation as e:
        raise ValueError("not a decimal number") from e


_REGISTRY: Dict[Any, Parser] = {
    str: _parse_str,
    int: _parse_int,
    Unsigned: _parse_unsigned,
    float: _parse_float,
    Char: _parse_char,
    bool: _parse_bool,
    Fraction: _parse_fraction,
    Decimal: _parse_decimal,
}

_DEFAULTS = dict(_REGISTRY)


def type_name(tp: Any) -> str:
    return getattr(tp, "__name__", repr(tp))


def register_parser(tp: Any, parser: Parser) -> None:
    """Registers (or replaces) the parser used when `tp` is requested.

    Args:
        tp: The key callers pass to `read`, usually a class.
        parser: Callable turning token text into a value. It signals bad
            input by raising `ValueError` or `TypeError`.
    """
    _REGISTRY[tp] = parser


def unregister_parser(tp: Any) -> None:
    """Removes a parser; built-in parsers are restored instead of removed."""
    if tp in _DEFAULTS:
        _REGISTRY[tp] = _DEFAULTS[tp]
    else:
        _REGISTRY.pop(tp, None)


def get_parser(tp: Any) -> Parser:
    """Returns the parser registered for `tp`.

    Raises:
        ParseError: If no parser is registered for `tp`.
    """
    try:
        return _REGISTRY[tp]
    except (KeyError, TypeError):
        raise ParseError(f"no parser registered for type {type_name(tp)}", type_name=type_name(tp)) from None


def parse_token(text: str, tp: Any = str) -> Any:
    """Parses decoded token text as `tp`.

    Raises:
        ParseError: If the text does not parse as `tp`.
    """
    parser = get_parser(tp)
    try:
        return parser(text)
    except (ValueError, TypeError, ArithmeticError) as e:
        raise ParseError(
            f"could not parse {text!r} as {type_name(tp)}: {e}",
            token=text,
            type_name=type_name(tp),
        ) from e
