"""9P2000 protocol messages: encoding, decoding and stream I/O."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import BinaryIO

from ninekit.dir import MAXWELEM, Perm, Qid, decode_qid, unmarshal_dir
from ninekit.wire import (
    Decoder,
    ProtocolError,
    put_string,
    put_u8,
    put_u16,
    put_u32,
    put_u64,
)

__all__ = [
    "IOHDRSIZE",
    "FcallType",
    "Fcall",
    "unmarshal_fcall",
    "read_fcall",
    "write_fcall",
    "dumpsome",
]

IOHDRSIZE = 24


class FcallType(enum.IntEnum):
    """Message type codes."""

    Tversion = 100
    Rversion = 101
    Tauth = 102
    Rauth = 103
    Tattach = 104
    Rattach = 105
    Terror = 106  # illegal
    Rerror = 107
    Tflush = 108
    Rflush = 109
    Twalk = 110
    Rwalk = 111
    Topen = 112
    Ropen = 113
    Tcreate = 114
    Rcreate = 115
    Tread = 116
    Rread = 117
    Twrite = 118
    Rwrite = 119
    Tclunk = 120
    Rclunk = 121
    Tremove = 122
    Rremove = 123
    Tstat = 124
    Rstat = 125
    Twstat = 126
    Rwstat = 127
    Tmax = 128


T = FcallType


@dataclass
class Fcall:
    """A single 9P message; only the fields its type uses are meaningful."""

    type: int = 0
    fid: int = 0
    tag: int = 0
    msize: int = 0
    version: str = ""
    oldtag: int = 0
    ename: str = ""
    qid: Qid = field(default_factory=Qid)
    iounit: int = 0
    aqid: Qid = field(default_factory=Qid)
    afid: int = 0
    uname: str = ""
    aname: str = ""
    perm: Perm = Perm(0)
    name: str = ""
    mode: int = 0
    newfid: int = 0
    wname: list[str] = field(default_factory=list)
    wqid: list[Qid] = field(default_factory=list)
    offset: int = 0
    count: int = 0
    data: bytes = b""
    stat: bytes = b""
    errno: int = 0
    uid: int = 0
    extension: str = ""

    def __post_init__(self) -> None:
        try:
            self.type = FcallType(self.type)
        except ValueError:
            pass
        self.perm = Perm(self.perm)
        self.data = bytes(self.data)
        self.stat = bytes(self.stat)

    def _body(self) -> list[bytes]:
        t = self.type
        if t in (T.Tversion, T.Rversion):
            return [put_u32(self.msize), put_string(self.version)]
        if t == T.Tflush:
            return [put_u16(self.oldtag)]
        if t == T.Tauth:
            return [put_u32(self.afid), put_string(self.uname), put_string(self.aname)]
        if t == T.Tattach:
            return [
                put_u32(self.fid),
                put_u32(self.afid),
                put_string(self.uname),
                put_string(self.aname),
            ]
        if t == T.Twalk:
            if len(self.wname) > MAXWELEM:
                raise ProtocolError("too many names in walk")
            return [
                put_u32(self.fid),
                put_u32(self.newfid),
                put_u16(len(self.wname)),
                *(put_string(w) for w in self.wname),
            ]
        if t == T.Topen:
            return [put_u32(self.fid), put_u8(self.mode)]
        if t == T.Tcreate:
            return [
                put_u32(self.fid),
                put_string(self.name),
                put_u32(self.perm),
                put_u8(self.mode),
            ]
        if t == T.Tread:
            return [put_u32(self.fid), put_u64(self.offset), put_u32(self.count)]
        if t == T.Twrite:
            return [
                put_u32(self.fid),
                put_u64(self.offset),
                put_u32(len(self.data)),
                self.data,
            ]
        if t in (T.Tclunk, T.Tremove, T.Tstat):
            return [put_u32(self.fid)]
        if t == T.Twstat:
            return [put_u32(self.fid), put_u16(len(self.stat)), self.stat]
        if t == T.Rerror:
            return [put_string(self.ename)]
        if t in (T.Rflush, T.Rclunk, T.Rremove, T.Rwstat):
            return []
        if t == T.Rauth:
            return [self.aqid.to_bytes()]
        if t == T.Rattach:
            return [self.qid.to_bytes()]
        if t == T.Rwalk:
            if len(self.wqid) > MAXWELEM:
                raise ProtocolError("too many qid in walk")
            return [put_u16(len(self.wqid)), *(q.to_bytes() for q in self.wqid)]
        if t in (T.Ropen, T.Rcreate):
            return [self.qid.to_bytes(), put_u32(self.iounit)]
        if t == T.Rread:
            return [put_u32(len(self.data)), self.data]
        if t == T.Rwrite:
            return [put_u32(self.count)]
        if t == T.Rstat:
            return [put_u16(len(self.stat)), self.stat]
        raise ProtocolError("invalid type")

    def to_bytes(self) -> bytes:
        """Encode the message, including its leading 32-bit size."""
        body = b"".join([put_u8(self.type), put_u16(self.tag), *self._body()])
        return put_u32(len(body) + 4) + body

    def __str__(self) -> str:
        t = self.type
        tag = self.tag
        if t == T.Tversion:
            return f"Tversion tag {tag} msize {self.msize} version '{self.version}'"
        if t == T.Rversion:
            return f"Rversion tag {tag} msize {self.msize} version '{self.version}'"
        if t == T.Tauth:
            return (
                f"Tauth tag {tag} afid {self.afid} uname {self.uname} "
                f"aname {self.aname}"
            )
        if t == T.Rauth:
            return f"Rauth tag {tag} qid {self.qid}"
        if t == T.Tattach:
            return (
                f"Tattach tag {tag} fid {self.fid} afid {self.afid} "
                f"uname {self.uname} aname {self.aname}"
            )
        if t == T.Rattach:
            return f"Rattach tag {tag} qid {self.qid}"
        if t == T.Rerror:
            return f"Rerror tag {tag} ename {self.ename}"
        if t == T.Tflush:
            return f"Tflush tag {tag} oldtag {self.oldtag}"
        if t == T.Rflush:
            return f"Rflush tag {tag}"
        if t == T.Twalk:
            names = " ".join(self.wname)
            return (
                f"Twalk tag {tag} fid {self.fid} newfid {self.newfid} "
                f"wname [{names}]"
            )
        if t == T.Rwalk:
            qids = " ".join(str(q) for q in self.wqid)
            return f"Rwalk tag {tag} wqid [{qids}]"
        if t == T.Topen:
            return f"Topen tag {tag} fid {self.fid} mode {self.mode}"
        if t == T.Ropen:
            return f"Ropen tag {tag} qid {self.qid} iouint {self.iounit}"
        if t == T.Tcreate:
            return (
                f"Tcreate tag {tag} fid {self.fid} name {self.name} "
                f"perm {self.perm} mode {self.mode}"
            )
        if t == T.Rcreate:
            return f"Rcreate tag {tag} qid {self.qid} iouint {self.iounit}"
        if t == T.Tread:
            return (
                f"Tread tag {tag} fid {self.fid} offset {self.offset} "
                f"count {self.count}"
            )
        if t == T.Rread:
            return f"Rread tag {tag} count {len(self.data)} {dumpsome(self.data)}"
        if t == T.Twrite:
            return (
                f"Twrite tag {tag} fid {self.fid} offset {self.offset} "
                f"count {len(self.data)} {dumpsome(self.data)}"
            )
        if t == T.Rwrite:
            return f"Rwrite tag {tag} count {self.count}"
        if t == T.Tclunk:
            return f"Tclunk tag {tag} fid {self.fid}"
        if t == T.Rclunk:
            return f"Rclunk tag {tag}"
        if t == T.Tremove:
            return f"Tremove tag {tag} fid {self.fid}"
        if t == T.Rremove:
            return f"Rremove tag {tag}"
        if t == T.Tstat:
            return f"Tstat tag {tag} fid {self.fid}"
        if t == T.Rstat:
            if _stat_ok(self.stat):
                return f"Rstat tag {tag} stat({len(self.stat)} bytes)"
            return f"Rstat tag {tag} stat <nil>"
        if t == T.Twstat:
            if _stat_ok(self.stat):
                return f"Twstat tag {tag} fid {self.fid} stat({len(self.stat)} bytes)"
            return f"Twstat tag {tag} fid {self.fid} stat <nil>"
        if t == T.Rwstat:
            return f"FidRwstat tag {tag}"
        return f"unknown type {int(t)}"


def _stat_ok(stat: bytes) -> bool:
    try:
        unmarshal_dir(stat)
    except ProtocolError:
        return False
    return True


def _exact(dec: Decoder, n: int) -> bytes:
    if dec.remaining() != n:
        raise ProtocolError("count mismatch")
    return dec.rest()


def _decode_body(f: Fcall, dec: Decoder) -> None:
    t = f.type
    if t in (T.Tversion, T.Rversion):
        f.msize = dec.u32()
        f.version = dec.string()
    elif t == T.Tflush:
        f.oldtag = dec.u16()
    elif t == T.Tauth:
        f.afid = dec.u32()
        f.uname = dec.string()
        f.aname = dec.string()
    elif t == T.Tattach:
        f.fid = dec.u32()
        f.afid = dec.u32()
        f.uname = dec.string()
        f.aname = dec.string()
    elif t == T.Twalk:
        f.fid = dec.u32()
        f.newfid = dec.u32()
        n = dec.u16()
        if n > MAXWELEM:
            raise ProtocolError("too many names in walk")
        f.wname = [dec.string() for _ in range(n)]
    elif t == T.Topen:
        f.fid = dec.u32()
        f.mode = dec.u8()
    elif t == T.Tcreate:
        f.fid = dec.u32()
        f.name = dec.string()
        f.perm = Perm(dec.u32())
        f.mode = dec.u8()
    elif t == T.Tread:
        f.fid = dec.u32()
        f.offset = dec.u64()
        f.count = dec.u32()
    elif t == T.Twrite:
        f.fid = dec.u32()
        f.offset = dec.u64()
        f.data = _exact(dec, dec.u32())
    elif t in (T.Tclunk, T.Tremove, T.Tstat):
        f.fid = dec.u32()
    elif t == T.Twstat:
        f.fid = dec.u32()
        f.stat = _exact(dec, dec.u16())
    elif t == T.Rerror:
        f.ename = dec.string()
    elif t in (T.Rflush, T.Rclunk, T.Rremove, T.Rwstat):
        pass
    elif t == T.Rauth:
        f.aqid = decode_qid(dec)
    elif t == T.Rattach:
        f.qid = decode_qid(dec)
    elif t == T.Rwalk:
        n = dec.u16()
        if n > MAXWELEM:
            raise ProtocolError("too many qid in walk")
        f.wqid = [decode_qid(dec) for _ in range(n)]
    elif t in (T.Ropen, T.Rcreate):
        f.qid = decode_qid(dec)
        f.iounit = dec.u32()
    elif t == T.Rread:
        f.data = _exact(dec, dec.u32())
    elif t == T.Rwrite:
        f.count = dec.u32()
    elif t == T.Rstat:
        f.stat = _exact(dec, dec.u16())
    else:
        raise ProtocolError("invalid type")


def unmarshal_fcall(data: bytes) -> Fcall:
    """Decode one complete message; ``data`` must hold exactly that message."""
    try:
        dec = Decoder(data)
        n = dec.u32()
        if dec.remaining() != n - 4:
            raise ProtocolError("length mismatch")
        f = Fcall(type=dec.u8(), tag=dec.u16())
        _decode_body(f, dec)
        if dec.remaining() != 0:
            raise ProtocolError("trailing data")
    except ProtocolError as exc:
        raise ProtocolError("malformed Fcall") from exc
    return f


def _read_full(stream: BinaryIO, n: int) -> bytes:
    chunks = []
    got = 0
    while got < n:
        chunk = stream.read(n - got)
        if not chunk:
            if got == 0:
                raise EOFError("end of stream")
            raise EOFError("unexpected end of stream")
        chunks.append(chunk)
        got += len(chunk)
    return b"".join(chunks)


def read_fcall(stream: BinaryIO) -> Fcall:
    """Read and decode one message from a binary stream."""
    header = _read_full(stream, 4)
    n = Decoder(header).u32()
    if n < 4:
        raise ProtocolError("invalid length")
    rest = _read_full(stream, n - 4) if n > 4 else b""
    return unmarshal_fcall(header + rest)


def write_fcall(stream: BinaryIO, fcall: Fcall) -> None:
    """Encode a message and write it to a binary stream in one call."""
    stream.write(fcall.to_bytes())


def _go_quote(data: bytes) -> str:
    out = ['"']
    for c in data:
        if c == 0x22:
            out.append('\\"')
        elif c == 0x5C:
            out.append("\\\\")
        elif c < 0x20 or c == 0x7F:
            out.append(f"\\x{c:02x}")
        else:
            out.append(chr(c))
    out.append('"')
    return "".join(out)


def dumpsome(data: bytes) -> str:
    """Render up to 64 bytes as a quoted string, or as hex if not printable."""
    data = bytes(data[:64])
    printable = all(not ((c != 0 and c < 32) or c > 127) for c in data)
    if printable:
        return _go_quote(data)
    return data.hex()