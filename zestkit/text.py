"""Unicode-aware string helpers.

Python strings are sequences of code points, so lengths, offsets and
case conversions here count characters rather than bytes. Functions that
take an `encoding` also accept `bytes`, decoded with that encoding (or the
configured default).
"""
from __future__ import annotations

import base64
import binascii
import random
import re
from typing import Optional, Union

from .config import get_settings

StrOrBytes = Union[str, bytes]

_BASE64_RE = re.compile(r"^[a-zA-Z0-9/\r\n+]*={0,2}$")
TRIM_CHARS = " \t\n\r\0\x0b"


def _decode(value: StrOrBytes, encoding: Optional[str] = None) -> str:
    if isinstance(value, bytes):
        return value.decode(encoding or get_settings().text_encoding)
    return value


def reverse(value: StrOrBytes, encoding: Optional[str] = None) -> str:
    return _decode(value, encoding)[::-1]


def concat(glue: str, *parts) -> str:
    """Join `parts` with `glue`, converting each part with str()."""
    return glue.join(str(p) for p in parts)


def count(value: StrOrBytes, encoding: Optional[str] = None) -> int:
    return len(_decode(value, encoding))


def has_upper_case(value: StrOrBytes, encoding: Optional[str] = None) -> bool:
    """True if at least one character changes when lowercased."""
    value = _decode(value, encoding)
    return value.lower() != value


def has_lower_case(value: StrOrBytes, encoding: Optional[str] = None) -> bool:
    """True if at least one character changes when uppercased."""
    value = _decode(value, encoding)
    return value.upper() != value


def convert_case(value: StrOrBytes, encoding: Optional[str] = None) -> str:
    """Swap the case of every character ("Hello" -> "hELLO")."""
    chars = []
    for char in _decode(value, encoding):
        lowered = char.lower()
        chars.append(lowered if lowered != char else char.upper())
    return "".join(chars)


def is_base64(value: str) -> bool:
    """Return True if `value` is canonical base64.

    The string must only use the base64 alphabet, decode strictly and
    encode back to exactly the same text.
    """
    if not _BASE64_RE.match(value):
        return False
    try:
        decoded = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return base64.b64encode(decoded).decode("ascii") == value


def substring(value: str, start: int, length: Optional[int] = None) -> str:
    """Return part of `value`.

    A negative `start` counts from the end. A negative `length` leaves that
    many characters off the end; None runs to the end of the string.
    """
    size = len(value)
    begin = start if start >= 0 else max(size + start, 0)
    if length is None:
        return value[begin:]
    if length < 0:
        return value[begin:max(size + length, 0)]
    return value[begin:begin + length]


def strip_whitespaces(value: str) -> str:
    return value.strip(TRIM_CHARS)


def repeat(value: str, amount: int = 1) -> str:
    if amount < 0:
        raise ValueError(f"amount must be >= 0, got {amount}")
    return value * amount


def slice(value: str, start: int, length: Optional[int] = None) -> Optional[str]:
    """Extract a section of `value`.

    Negative `start` and `length` are offset by the string length first.
    Returns None when the resulting `length` is smaller than `start`; a zero
    `length` reads to the end of the string.
    """
    if start < 0:
        start += len(value)
    if length is not None and length < 0:
        length += len(value)

    if length is not None and length < start:
        return None

    return substring(value, start, length or None)


def shuffle(value: str, rng: Optional[random.Random] = None) -> str:
    chars = list(value)
    (rng or random).shuffle(chars)
    return "".join(chars)
