"""Search key normalization matching the documentation generator.

The generator stores each key lowercased, with every character outside
``[a-z0-9]`` (and below U+0080) replaced by ``_`` plus its two-digit hex code.
The search widget applies the same encoding to what the user types, so a
prefix such as ``SearchDescription.hpp`` matches the stored key
``searchdescription_2ehpp``.

Examples
--------
>>> encode_search_id("SearchDescription.hpp")
'searchdescription_2ehpp'
>>> decode_search_id("_7esearchresult")
'~searchresult'
"""

from __future__ import annotations

import re
from typing import Final

__all__ = [
    "decode_search_id",
    "encode_search_id",
    "normalize_key",
]

_ESCAPE_RE: Final = re.compile(r"_([0-9a-f]{2})")


def normalize_key(text: str) -> str:
    """Strip surrounding whitespace and lowercase ``text``.

    Idempotent; applying it to a key the generator wrote returns the key
    unchanged.
    """
    return text.strip().lower()


def _is_id_char(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("0" <= ch <= "9") or ord(ch) >= 0x80


def encode_search_id(text: str) -> str:
    """Normalize ``text`` and escape it into the generator's key alphabet.

    Parameters
    ----------
    text : str
        Symbol name or prefix as a user would type it.

    Returns
    -------
    str
        Encoded key; ``""`` for blank input.
    """
    return "".join(
        ch if _is_id_char(ch) else f"_{ord(ch):02x}" for ch in normalize_key(text)
    )


def decode_search_id(key: str) -> str:
    """Reverse :func:`encode_search_id` (the lowercasing is not recoverable)."""
    return _ESCAPE_RE.sub(lambda match: chr(int(match.group(1), 16)), key)
