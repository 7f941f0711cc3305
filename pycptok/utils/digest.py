"""Content digests over bytes or text."""

import hashlib
from typing import Union


def md5_hex(data: Union[str, bytes]) -> str:
    """Returns the hex MD5 digest of `data`; text is hashed as UTF-8."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.md5(data).hexdigest()
