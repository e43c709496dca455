"""Messages for the plumber: encoding, decoding and opening plumb ports."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import BinaryIO, Optional

from ninekit.client import Fid, Fsys
from ninekit.dial import mount_service

__all__ = [
    "PlumbError",
    "AttributeSyntaxError",
    "QuoteError",
    "Attribute",
    "Message",
    "quote_attribute",
    "unquote_attribute",
    "open_port",
]

_QUOTE = "'"
_QUOTE_BYTE = ord(_QUOTE)
_SPACE = ord(" ")
_NEWLINE = ord("\n")
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class PlumbError(Exception):
    """A plumb message could not be decoded."""


class AttributeSyntaxError(PlumbError):
    """An attribute lacks the name=value form."""

    def __init__(self, text: str = "bad attribute syntax") -> None:
        super().__init__(text)


class QuoteError(PlumbError):
    """An attribute value is not correctly quoted."""

    def __init__(self, text: str = "bad attribute quoting") -> None:
        super().__init__(text)


@dataclass
class Attribute:
    """One name=value attribute of a message."""

    name: str
    value: str = ""


@dataclass
class Message:
    """A message to or from the plumber."""

    src: str = ""
    dst: str = ""
    dir: str = ""
    type: str = ""
    attr: list[Attribute] = field(default_factory=list)
    data: bytes = b""

    def __post_init__(self) -> None:
        self.data = bytes(self.data)

    def to_bytes(self) -> bytes:
        attrs = " ".join(f"{a.name}={quote_attribute(a.value)}" for a in self.attr)
        header = f"{self.src}\n{self.dst}\n{self.dir}\n{self.type}\n{attrs}\n{len(self.data)}\n"
        return header.encode(_ENCODING, _ERRORS) + self.data

    def send(self, w: BinaryIO) -> None:
        """Write the encoded message to ``w`` in a single write call."""
        w.write(self.to_bytes())

    @classmethod
    def recv(cls, r: BinaryIO) -> "Message":
        """Read one message from ``r`` without consuming anything beyond it."""
        reader = _Reader(r)
        src = reader.line()
        dst = reader.line()
        wdir = reader.line()
        mtype = reader.line()
        attrs = reader.attrs()
        count_text = reader.line()
        try:
            n = int(count_text)
        except ValueError as exc:
            raise PlumbError(f"bad data length {count_text!r}") from exc
        if n < 0:
            raise PlumbError(f"bad data length {count_text!r}")
        data = reader.read(n)
        return cls(src=src, dst=dst, dir=wdir, type=mtype, attr=attrs, data=data)

    def lookup_attr(self, name: str) -> str:
        """Return the value of the first attribute called ``name``, or ""."""
        for a in self.attr:
            if a.name == name:
                return a.value
        return ""


def quote_attribute(s: str) -> str:
    """Quote an attribute value if it holds a space, quote, '=' or tab."""
    if not any(c in s for c in " '=\t"):
        return s
    return _QUOTE + s.replace(_QUOTE, _QUOTE * 2) + _QUOTE


def unquote_attribute(s: str) -> str:
    """Undo quote_attribute; raise QuoteError if the quoting is malformed."""
    if _QUOTE not in s:
        return s
    if len(s) < 2 or s[0] != _QUOTE or s[-1] != _QUOTE:
        raise QuoteError()
    inner = s[1:-1]
    out = []
    i = 0
    while i < len(inner):
        c = inner[i]
        if c == _QUOTE:
            if i == len(inner) - 1 or inner[i + 1] != _QUOTE:
                raise QuoteError()
            i += 1
        out.append(c)
        i += 1
    return "".join(out)


class _Reader:
    """Byte-at-a-time reader so that nothing past the message is consumed."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def byte(self) -> int:
        b = self._stream.read(1)
        if not b:
            raise EOFError("unexpected end of plumb message")
        return b[0]

    def line(self) -> str:
        buf = bytearray()
        while (c := self.byte()) != _NEWLINE:
            buf.append(c)
        return buf.decode(_ENCODING, _ERRORS)

    def read(self, n: int) -> bytes:
        chunks = []
        got = 0
        while got < n:
            chunk = self._stream.read(n - got)
            if not chunk:
                raise EOFError("unexpected end of plumb message")
            chunks.append(chunk)
            got += len(chunk)
        return b"".join(chunks)

    def attrs(self) -> list[Attribute]:
        attrs: list[Attribute] = []
        buf = bytearray()
        quoting = False
        while True:
            c = self.byte()
            if quoting and c == _QUOTE_BYTE:
                buf.append(c)
                c = self.byte()
                if c != _QUOTE_BYTE:
                    quoting = False
            if not quoting:
                if c == _NEWLINE:
                    break
                if c == _QUOTE_BYTE:
                    quoting = True
                elif c == _SPACE:
                    attrs.append(_parse_attr(buf))
                    buf.clear()
                    continue
            buf.append(c)
        if buf:
            attrs.append(_parse_attr(buf))
        return attrs


def _parse_attr(buf: bytearray) -> Attribute:
    text = buf.decode(_ENCODING, _ERRORS)
    name, sep, value = text.partition("=")
    if not sep:
        raise AttributeSyntaxError()
    return Attribute(name=name, value=unquote_attribute(value))


class _PlumbMount:
    """Mounts the plumb service once and remembers the outcome."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = False
        self._fsys: Optional[Fsys] = None
        self._error: Optional[BaseException] = None

    def get(self) -> Fsys:
        with self._lock:
            if not self._done:
                try:
                    self._fsys = mount_service("plumb")
                except Exception as exc:
                    self._error = exc
                self._done = True
        if self._error is not None:
            raise self._error
        assert self._fsys is not None
        return self._fsys


_plumb_mount = _PlumbMount()


def open_port(name: str, mode: int) -> Fid:
    """Open the plumbing file ``name`` with the given open mode."""
    return _plumb_mount.get().open(name, mode)