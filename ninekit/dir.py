"""9P protocol constants, qids, permissions and directory entries."""

from __future__ import annotations

from dataclasses import dataclass, field

from ninekit.wire import (
    Decoder,
    ProtocolError,
    put_string,
    put_u8,
    put_u16,
    put_u32,
    put_u64,
)

VERSION9P = "9P2000"
MAXWELEM = 16

OREAD = 0
OWRITE = 1
ORDWR = 2
OEXEC = 3
OTRUNC = 16
OCEXEC = 32
ORCLOSE = 64
ODIRECT = 128
ONONBLOCK = 256
OEXCL = 0x1000
OLOCK = 0x2000
OAPPEND = 0x4000

AEXIST = 0
AEXEC = 1
AWRITE = 2
AREAD = 4

QTDIR = 0x80
QTAPPEND = 0x40
QTEXCL = 0x20
QTMOUNT = 0x10
QTAUTH = 0x08
QTTMP = 0x04
QTSYMLINK = 0x02
QTFILE = 0x00

DMDIR = 0x80000000
DMAPPEND = 0x40000000
DMEXCL = 0x20000000
DMMOUNT = 0x10000000
DMAUTH = 0x08000000
DMTMP = 0x04000000
DMSYMLINK = 0x02000000
DMDEVICE = 0x00800000
DMNAMEDPIPE = 0x00200000
DMSOCKET = 0x00100000
DMSETUID = 0x00080000
DMSETGID = 0x00040000
DMREAD = 0x4
DMWRITE = 0x2
DMEXEC = 0x1

NOTAG = 0xFFFF
NOFID = 0xFFFFFFFF
NOUID = 0xFFFFFFFF
IOHDRSZ = 24

STATMAX = 65535


@dataclass(frozen=True)
class Qid:
    """Server-unique identification of a file."""

    path: int = 0
    vers: int = 0
    type: int = 0

    def __str__(self) -> str:
        flags = "".join(
            c
            for bit, c in ((QTDIR, "d"), (QTAPPEND, "a"), (QTEXCL, "l"), (QTAUTH, "A"))
            if self.type & bit
        )
        return f"({self.path:016x} {self.vers} {flags})"

    def to_bytes(self) -> bytes:
        return put_u8(self.type) + put_u32(self.vers) + put_u64(self.path)


def decode_qid(dec: Decoder) -> Qid:
    """Read a qid from a decoder."""
    qtype = dec.u8()
    vers = dec.u32()
    path = dec.u64()
    return Qid(path=path, vers=vers, type=qtype)


_PERM_CHARS = (
    (DMDIR, "d"),
    (DMAPPEND, "a"),
    (DMAUTH, "A"),
    (DMDEVICE, "D"),
    (DMSOCKET, "S"),
    (DMNAMEDPIPE, "P"),
    (0, "-"),
    (DMEXCL, "l"),
    (DMSYMLINK, "L"),
    (0, "-"),
    (0o400, "r"),
    (0, "-"),
    (0o200, "w"),
    (0, "-"),
    (0o100, "x"),
    (0, "-"),
    (0o040, "r"),
    (0, "-"),
    (0o020, "w"),
    (0, "-"),
    (0o010, "x"),
    (0, "-"),
    (0o004, "r"),
    (0, "-"),
    (0o002, "w"),
    (0, "-"),
    (0o001, "x"),
    (0, "-"),
)


class Perm(int):
    """File mode and permission bits."""

    def __str__(self) -> str:
        out = []
        did = False
        for bit, c in _PERM_CHARS:
            if self & bit:
                did = True
                out.append(c)
            if bit == 0:
                if not did:
                    out.append(c)
                did = False
        return "".join(out)

    def __repr__(self) -> str:
        return f"Perm(0o{int(self):o})"


def _octal(n: int) -> str:
    return "0" if n == 0 else f"0{n:o}"


@dataclass
class Dir:
    """A directory entry as carried in stat messages."""

    type: int = 0
    dev: int = 0
    qid: Qid = field(default_factory=Qid)
    mode: Perm = Perm(0)
    atime: int = 0
    mtime: int = 0
    length: int = 0
    name: str = ""
    uid: str = ""
    gid: str = ""
    muid: str = ""

    def __post_init__(self) -> None:
        self.mode = Perm(self.mode)

    def to_bytes(self) -> bytes:
        """Encode the entry with its leading 16-bit size."""
        body = b"".join(
            (
                put_u16(self.type),
                put_u32(self.dev),
                self.qid.to_bytes(),
                put_u32(self.mode),
                put_u32(self.atime),
                put_u32(self.mtime),
                put_u64(self.length),
                put_string(self.name),
                put_string(self.uid),
                put_string(self.gid),
                put_string(self.muid),
            )
        )
        if len(body) > 0xFFFF:
            raise ProtocolError("stat entry too long")
        return put_u16(len(body)) + body

    def __str__(self) -> str:
        return (
            f"'{self.name}' '{self.uid}' '{self.gid}' '{self.muid}' "
            f"q {self.qid} m {_octal(self.mode)} at {self.atime} mt {self.mtime} "
            f"l {self.length} t {self.type} d {self.dev}"
        )


def null_dir() -> Dir:
    """A Dir whose fields all mean "don't change" in a wstat."""
    return Dir(
        type=0xFFFF,
        dev=0xFFFFFFFF,
        qid=Qid(path=0xFFFFFFFFFFFFFFFF, vers=0xFFFFFFFF, type=0xFF),
        mode=Perm(0xFFFFFFFF),
        atime=0xFFFFFFFF,
        mtime=0xFFFFFFFF,
        length=0xFFFFFFFFFFFFFFFF,
    )


def unmarshal_dir(data: bytes) -> Dir:
    """Decode one size-prefixed directory entry, which must fill ``data``."""
    try:
        dec = Decoder(data)
        n = dec.u16()
        if n != dec.remaining():
            raise ProtocolError("length mismatch")
        d = Dir(
            type=dec.u16(),
            dev=dec.u32(),
            qid=decode_qid(dec),
            mode=Perm(dec.u32()),
            atime=dec.u32(),
            mtime=dec.u32(),
            length=dec.u64(),
            name=dec.string(),
            uid=dec.string(),
            gid=dec.string(),
            muid=dec.string(),
        )
        if dec.remaining() != 0:
            raise ProtocolError("trailing data")
    except ProtocolError as exc:
        raise ProtocolError("malformed Dir") from exc
    return d