"""Identicon generation utilities.

An identicon is a small symmetric pixel pattern derived from a text seed
(e.g. a username or an e-mail address). This module only computes the
logical pattern: an MD5 digest of the seed, a sparse row -> column -> bool
grid and a foreground color. Turning that into pixels is up to the caller,
which can scale each cell by `pixel_ratio` and paint `True` cells with the
foreground color and everything else with the background color.

Two entry points are provided:

    generate("hello", IdenticonOptions(block_count=2))

is a pure function returning an `IdenticonResult`, while

    IdenticonGenerator().set_size(100).set_input_string("hello")

keeps the chained-setter style for callers that build their configuration
step by step.
"""
from __future__ import annotations

import hashlib
import logging
import math
import string
from dataclasses import dataclass, replace
from numbers import Real
from typing import Dict, List, Optional, Tuple

from .config import Settings, get_settings
from .text import TRIM_CHARS

logger = logging.getLogger(__name__)

Color = Tuple[int, ...]
Grid = Dict[int, Dict[int, bool]]

DEFAULT_BLOCK_COUNT = 3
MIN_BLOCK_COUNT = 1
MAX_BLOCK_COUNT = 4
HASH_LENGTH = 32
GRID_COLUMNS = 9

# hash position % block_count -> the pair of columns that receive its bit
COLUMN_TABLE = {
    0: (0, 2),
    1: (1, 4),
    2: (2, 6),
    3: (3, 8),
}


def _round_half_up(value: float) -> int:
    # only ever called with non-negative values
    return int(math.floor(value + 0.5))


def _parse_hex(digits: str) -> int:
    digits = "".join(c for c in digits if c in string.hexdigits)
    return int(digits, 16) if digits else 0


def convert_color(hex_value: str, alpha: Optional[int] = None) -> Color:
    """Convert a hex color code ("#ff8800", "f80", ...) to an RGB tuple.

    Codes that are neither 3 nor 6 digits long convert to (0, 0, 0).

    Args:
        hex_value: Color code, with or without "#".
        alpha:     When truthy, replaces the blue channel. No fourth
                   channel is ever appended.

    Returns:
        A 3-tuple of channel values.
    """
    h = hex_value.replace("#", "")
    if len(h) == 6:
        parts = [h[0:2], h[2:4], h[4:6]]
    elif len(h) == 3:
        parts = [c * 2 for c in h]
    else:
        parts = ["0", "0", "0"]

    rgb = [_parse_hex(p) for p in parts]
    if alpha:
        rgb[2] = alpha
    return tuple(rgb)


def is_valid_block_count(value) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and MIN_BLOCK_COUNT <= value <= MAX_BLOCK_COUNT
    )


def is_valid_size(value) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )


def pixel_ratio_for(size: float) -> int:
    return _round_half_up(size / 5)


def row_count(block_count: int) -> int:
    return math.ceil(HASH_LENGTH / block_count)


def hash_string(text: str) -> str:
    return hashlib.md5(text.encode("utf-8", "surrogatepass"), usedforsecurity=False).hexdigest()


def hex_to_bool(char: str) -> bool:
    """0-4 -> False, 5-f -> True (5 / 10 rounds half up to 1)."""
    return _round_half_up(int(char, 16) / 10) != 0


def build_grid(digest: str, block_count: int) -> Grid:
    grid: Grid = {}
    for i, char in enumerate(digest):
        row = grid.setdefault(i // block_count, {})
        bit = hex_to_bool(char)
        for column in COLUMN_TABLE[i % block_count]:
            row[column] = bit
    return {index: dict(sorted(cells.items())) for index, cells in grid.items()}


def derive_foreground(digest: str) -> Color:
    """Pick the color channels out of a digest.

    Scans for a decimal digit followed by any character; each match
    consumes both characters. The collected digits are reversed and
    scaled by 16. The number of channels depends on the digest.
    """
    digits: List[int] = []
    i = 0
    while i < len(digest) - 1:
        if digest[i] in string.digits:
            digits.append(int(digest[i]))
            i += 2
        else:
            i += 1
    return tuple(d * 16 for d in reversed(digits))


@dataclass(frozen=True)
class IdenticonOptions:
    """Configuration for a single identicon.

    The `with_*` methods return an updated copy. Invalid values are
    ignored and the current options are returned unchanged; invalid values
    passed to the constructor fall back to the defaults. `pixel_ratio` is
    always derived from `size`.
    """

    block_count: int = DEFAULT_BLOCK_COUNT
    size: Optional[float] = None
    pixel_ratio: Optional[int] = None
    foreground: Optional[Color] = None
    background: Optional[Color] = None

    def __post_init__(self):
        if not is_valid_block_count(self.block_count):
            logger.debug("Ignoring block count %r", self.block_count)
            object.__setattr__(self, "block_count", DEFAULT_BLOCK_COUNT)
        if self.size is not None and not is_valid_size(self.size):
            logger.debug("Ignoring size %r", self.size)
            object.__setattr__(self, "size", None)
        ratio = pixel_ratio_for(self.size) if self.size is not None else None
        object.__setattr__(self, "pixel_ratio", ratio)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "IdenticonOptions":
        settings = settings or get_settings()
        return (
            cls()
            .with_block_count(settings.identicon_block_count)
            .with_size(settings.identicon_size)
            .with_foreground(settings.identicon_foreground)
            .with_background(settings.identicon_background)
        )

    def with_block_count(self, block_count) -> "IdenticonOptions":
        if not is_valid_block_count(block_count):
            logger.debug("Ignoring block count %r", block_count)
            return self
        return replace(self, block_count=block_count)

    def with_size(self, size) -> "IdenticonOptions":
        if not is_valid_size(size):
            logger.debug("Ignoring size %r", size)
            return self
        return replace(self, size=size)

    def with_foreground(self, color: Optional[str], alpha: Optional[int] = None) -> "IdenticonOptions":
        if not color:
            return self
        return replace(self, foreground=convert_color(color, alpha))

    def with_background(self, color: Optional[str], alpha: Optional[int] = None) -> "IdenticonOptions":
        if not color:
            return self
        return replace(self, background=convert_color(color, alpha))


@dataclass(frozen=True)
class IdenticonResult:
    hash: str
    grid: Grid
    foreground: Optional[Color]
    background: Optional[Color]
    block_count: int
    size: Optional[float] = None
    pixel_ratio: Optional[int] = None

    @property
    def row_count(self) -> int:
        return row_count(self.block_count)

    def cell(self, row: int, column: int) -> bool:
        return self.grid.get(row, {}).get(column, False)

    def rows(self) -> List[List[bool]]:
        """Dense `row_count x GRID_COLUMNS` matrix, unset cells are False."""
        return [
            [self.cell(r, c) for c in range(GRID_COLUMNS)]
            for r in range(self.row_count)
        ]


def generate(
    text: str,
    options: Optional[IdenticonOptions] = None,
    *,
    override_foreground_with_derived: bool = True,
) -> Optional[IdenticonResult]:
    """Compute the identicon for `text`.

    Args:
        text:    Seed string. Blank seeds produce no identicon.
        options: Block count, size and colors. Defaults to `IdenticonOptions()`.
        override_foreground_with_derived:
                 When False, an explicit `options.foreground` is kept instead
                 of the color derived from the hash.

    Returns:
        An `IdenticonResult`, or None when `text` is empty or whitespace.
    """
    if not text or not text.strip(TRIM_CHARS):
        logger.debug("Ignoring blank identicon seed")
        return None

    options = options or IdenticonOptions()
    digest = hash_string(text)

    foreground = derive_foreground(digest)
    if not override_foreground_with_derived and options.foreground is not None:
        foreground = options.foreground

    return IdenticonResult(
        hash=digest,
        grid=build_grid(digest, options.block_count),
        foreground=foreground,
        background=options.background,
        block_count=options.block_count,
        size=options.size,
        pixel_ratio=options.pixel_ratio,
    )


class IdenticonGenerator:
    """Chained-setter front end over `generate`.

    Setting the input string computes the grid with the options current at
    that moment and replaces the foreground color with the derived one.
    Instances are not meant to be shared between threads.
    """

    def __init__(self, options: Optional[IdenticonOptions] = None):
        self._options = options or IdenticonOptions()
        self._result: Optional[IdenticonResult] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "IdenticonGenerator":
        return cls(IdenticonOptions.from_settings(settings))

    def set_foreground_color(self, color: Optional[str], alpha: Optional[int] = None) -> "IdenticonGenerator":
        self._options = self._options.with_foreground(color, alpha)
        return self

    def set_background_color(self, color: Optional[str], alpha: Optional[int] = None) -> "IdenticonGenerator":
        self._options = self._options.with_background(color, alpha)
        return self

    def set_block_count(self, block_count) -> "IdenticonGenerator":
        self._options = self._options.with_block_count(block_count)
        return self

    def set_size(self, size) -> "IdenticonGenerator":
        self._options = self._options.with_size(size)
        return self

    def set_input_string(self, text: str) -> "IdenticonGenerator":
        result = generate(text, self._options)
        if result is not None:
            self._result = result
            self._options = replace(self._options, foreground=result.foreground)
        return self

    def get_options(self) -> IdenticonOptions:
        return self._options

    def get_result(self) -> Optional[IdenticonResult]:
        """Snapshot taken by the last successful `set_input_string`."""
        return self._result

    def get_hash(self) -> Optional[str]:
        return self._result.hash if self._result else None

    def get_grid(self) -> Optional[Grid]:
        return self._result.grid if self._result else None

    def get_foreground_color(self) -> Optional[Color]:
        return self._options.foreground

    def get_background_color(self) -> Optional[Color]:
        return self._options.background

    def get_block_count(self) -> int:
        return self._options.block_count

    def get_size(self) -> Optional[float]:
        return self._options.size

    def get_pixel_ratio(self) -> Optional[int]:
        return self._options.pixel_ratio
