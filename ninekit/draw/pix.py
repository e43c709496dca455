"""Colours and pixel channel descriptors."""

from __future__ import annotations

import enum

__all__ = [
    "Color",
    "Chan",
    "Pix",
    "make_pix",
    "parse_pix",
    "NCHAN",
    "OPAQUE",
    "TRANSPARENT",
    "BLACK",
    "WHITE",
    "RED",
    "GREEN",
    "BLUE",
    "CYAN",
    "MAGENTA",
    "YELLOW",
    "PALEYELLOW",
    "DARKYELLOW",
    "DARKGREEN",
    "PALEGREEN",
    "MEDGREEN",
    "DARKBLUE",
    "PALEBLUEGREEN",
    "PALEBLUE",
    "BLUEGREEN",
    "GREYGREEN",
    "PALEGREYGREEN",
    "YELLOWGREEN",
    "MEDBLUE",
    "GREYBLUE",
    "PALEGREYBLUE",
    "PURPLEBLUE",
    "NOTACOLOR",
    "NOFILL",
    "GREY1",
    "GREY2",
    "GREY4",
    "GREY8",
    "CMAP8",
    "RGB15",
    "RGB16",
    "RGB24",
    "BGR24",
    "RGBA32",
    "ARGB32",
    "ABGR32",
    "XRGB32",
    "XBGR32",
]

_U32 = 0xFFFFFFFF


class Color(int):
    """An RGBA value, 8 bits per element, red in the high byte."""

    def __new__(cls, value: int) -> "Color":
        if not 0 <= value <= _U32:
            raise ValueError(f"color {value} out of range")
        return super().__new__(cls, value)

    @property
    def red(self) -> int:
        return (self >> 24) & 0xFF

    @property
    def green(self) -> int:
        return (self >> 16) & 0xFF

    @property
    def blue(self) -> int:
        return (self >> 8) & 0xFF

    @property
    def alpha(self) -> int:
        return self & 0xFF

    def __repr__(self) -> str:
        return f"Color(0x{int(self):08X})"


OPAQUE = Color(0xFFFFFFFF)
TRANSPARENT = Color(0x00000000)
BLACK = Color(0x000000FF)
WHITE = Color(0xFFFFFFFF)
RED = Color(0xFF0000FF)
GREEN = Color(0x00FF00FF)
BLUE = Color(0x0000FFFF)
CYAN = Color(0x00FFFFFF)
MAGENTA = Color(0xFF00FFFF)
YELLOW = Color(0xFFFF00FF)
PALEYELLOW = Color(0xFFFFAAFF)
DARKYELLOW = Color(0xEEEE9EFF)
DARKGREEN = Color(0x448844FF)
PALEGREEN = Color(0xAAFFAAFF)
MEDGREEN = Color(0x88CC88FF)
DARKBLUE = Color(0x000055FF)
PALEBLUEGREEN = Color(0xAAFFFFFF)
PALEBLUE = Color(0x0000BBFF)
BLUEGREEN = Color(0x008888FF)
GREYGREEN = Color(0x55AAAAFF)
PALEGREYGREEN = Color(0x9EEEEEFF)
YELLOWGREEN = Color(0x99994CFF)
MEDBLUE = Color(0x000099FF)
GREYBLUE = Color(0x005DBBFF)
PALEGREYBLUE = Color(0x4993DDFF)
PURPLEBLUE = Color(0x8888CCFF)
NOTACOLOR = Color(0xFFFFFF00)
NOFILL = NOTACOLOR


class Chan(enum.IntEnum):
    """Channel specifiers used in pixel descriptors."""

    RED = 0
    GREEN = 1
    BLUE = 2
    GREY = 3
    ALPHA = 4
    MAP = 5
    IGNORE = 6


NCHAN = 7

_CHAN_LETTERS = "rgbkamxzzzzzzzzz"
_HEX_DIGITS = "0123456789abcdef"
_LETTER_CHAN = {
    ord("r"): Chan.RED,
    ord("g"): Chan.GREEN,
    ord("b"): Chan.BLUE,
    ord("a"): Chan.ALPHA,
    ord("k"): Chan.GREY,
    ord("m"): Chan.MAP,
    ord("x"): Chan.IGNORE,
}


class Pix(int):
    """A pixel format: one byte per channel, specifier high nibble, bits low."""

    def __new__(cls, value: int = 0) -> "Pix":
        return super().__new__(cls, value & _U32)

    def __str__(self) -> str:
        p = int(self)
        if p == 0:
            return "0"
        parts = []
        while p > 0:
            parts.append(_CHAN_LETTERS[(p >> 4) & 15] + _HEX_DIGITS[p & 15])
            p >>= 8
        return "".join(reversed(parts))

    def __repr__(self) -> str:
        return f"Pix({str(self)!r})"

    def depth(self) -> int:
        """Total bits per pixel."""
        p = int(self)
        n = 0
        while p > 0:
            n += p & 15
            p >>= 8
        return n


def make_pix(*args: int) -> Pix:
    """Pack the integers into successive 4-bit nibbles, the last one lowest."""
    p = 0
    for x in args:
        p = ((p << 4) | int(x)) & _U32
    return Pix(p)


def parse_pix(s: str) -> Pix:
    """Turn a descriptor such as "r8g8b8" into a Pix; raise ValueError if malformed."""
    raw = s.encode("utf-8", "surrogateescape")
    error = ValueError(f"malformed pix descriptor {s!r}")
    if len(raw) > 8 or len(raw) % 2:
        raise error
    p = 0
    for letter, digit in zip(raw[0::2], raw[1::2]):
        chan = _LETTER_CHAN.get(letter)
        if chan is None or not ord("1") <= digit <= ord("8"):
            raise error
        p = (p << 8) | (chan << 4) | (digit - ord("0"))
    return Pix(p)


GREY1 = make_pix(Chan.GREY, 1)
GREY2 = make_pix(Chan.GREY, 2)
GREY4 = make_pix(Chan.GREY, 4)
GREY8 = make_pix(Chan.GREY, 8)
CMAP8 = make_pix(Chan.MAP, 8)
RGB15 = make_pix(Chan.IGNORE, 1, Chan.RED, 5, Chan.GREEN, 5, Chan.BLUE, 5)
RGB16 = make_pix(Chan.RED, 5, Chan.GREEN, 6, Chan.BLUE, 5)
RGB24 = make_pix(Chan.RED, 8, Chan.GREEN, 8, Chan.BLUE, 8)
BGR24 = make_pix(Chan.BLUE, 8, Chan.GREEN, 8, Chan.RED, 8)
RGBA32 = make_pix(Chan.RED, 8, Chan.GREEN, 8, Chan.BLUE, 8, Chan.ALPHA, 8)
ARGB32 = make_pix(Chan.ALPHA, 8, Chan.RED, 8, Chan.GREEN, 8, Chan.BLUE, 8)
ABGR32 = make_pix(Chan.ALPHA, 8, Chan.BLUE, 8, Chan.GREEN, 8, Chan.RED, 8)
XRGB32 = make_pix(Chan.IGNORE, 8, Chan.RED, 8, Chan.GREEN, 8, Chan.BLUE, 8)
XBGR32 = make_pix(Chan.IGNORE, 8, Chan.BLUE, 8, Chan.GREEN, 8, Chan.RED, 8)