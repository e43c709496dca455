"""Little-endian primitives of the 9P wire format."""

from __future__ import annotations

import struct

__all__ = [
    "ProtocolError",
    "Decoder",
    "put_u8",
    "put_u16",
    "put_u32",
    "put_u64",
    "put_string",
]

_STRING_ENCODING = "utf-8"
_STRING_ERRORS = "surrogateescape"


class ProtocolError(ValueError):
    """Raised when a 9P message cannot be encoded or decoded."""


def _pack(fmt: str, bits: int, x: int) -> bytes:
    if not 0 <= x < (1 << bits):
        raise ProtocolError(f"value {x} out of range for u{bits}")
    return struct.pack(fmt, x)


def put_u8(x: int) -> bytes:
    """Encode an unsigned 8-bit integer."""
    return _pack("<B", 8, x)


def put_u16(x: int) -> bytes:
    """Encode an unsigned 16-bit little-endian integer."""
    return _pack("<H", 16, x)


def put_u32(x: int) -> bytes:
    """Encode an unsigned 32-bit little-endian integer."""
    return _pack("<I", 32, x)


def put_u64(x: int) -> bytes:
    """Encode an unsigned 64-bit little-endian integer."""
    return _pack("<Q", 64, x)


def put_string(s: str) -> bytes:
    """Encode a string as a 16-bit byte count followed by its bytes."""
    raw = s.encode(_STRING_ENCODING, _STRING_ERRORS)
    if len(raw) >= 1 << 16:
        raise ProtocolError("string too long")
    return put_u16(len(raw)) + raw


class Decoder:
    """Reads 9P primitives sequentially from a byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def take(self, n: int) -> bytes:
        """Consume and return exactly ``n`` bytes."""
        if n < 0 or self._pos + n > len(self._data):
            raise ProtocolError("short buffer")
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def _unpack(self, fmt: str, size: int) -> int:
        return struct.unpack(fmt, self.take(size))[0]

    def u8(self) -> int:
        return self._unpack("<B", 1)

    def u16(self) -> int:
        return self._unpack("<H", 2)

    def u32(self) -> int:
        return self._unpack("<I", 4)

    def u64(self) -> int:
        return self._unpack("<Q", 8)

    def string(self) -> str:
        """Read a 16-bit counted string."""
        n = self.u16()
        return self.take(n).decode(_STRING_ENCODING, _STRING_ERRORS)

    def rest(self) -> bytes:
        """Consume and return everything that is left."""
        chunk = self._data[self._pos:]
        self._pos = len(self._data)
        return chunk

    def remaining(self) -> int:
        """Number of bytes not yet consumed."""
        return len(self._data) - self._pos