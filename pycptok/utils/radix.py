"""Formats integers in an arbitrary radix between 2 and 36."""

import string

from ..core.errors import PreconditionViolation

DIGITS = string.digits + string.ascii_lowercase


def format_radix(n: int, base: int) -> str:
    """Returns `n` written in `base`, using digits 0-9 then a-z.

    Negative numbers get a leading minus sign.

    Args:
        n (int): The number to format.
        base (int): The radix, from 2 to 36.

    Raises:
        PreconditionViolation: If `base` is outside 2..36.
    """
    if not 2 <= base <= len(DIGITS):
        raise PreconditionViolation(f"radix must be between 2 and {len(DIGITS)}, got {base}")
    if n == 0:
        return "0"
    sign = "-" if n < 0 else ""
    n = abs(n)
    digits = []
    while n:
        n, rem = divmod(n, base)
        digits.append(DIGITS[rem])
    return sign + "".join(reversed(digits))
