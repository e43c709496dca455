"""A 9P2000 client: connections, fids and attached file systems."""

from __future__ import annotations

import os
import threading
from typing import Optional

from ninekit.dir import (
    AEXIST,
    IOHDRSZ,
    MAXWELEM,
    NOFID,
    NOTAG,
    OEXEC,
    ORDWR,
    OREAD,
    OWRITE,
    STATMAX,
    VERSION9P,
    Dir,
    Perm,
    Qid,
    unmarshal_dir,
)
from ninekit.fcall import IOHDRSIZE, Fcall, FcallType, read_fcall, write_fcall
from ninekit.wire import ProtocolError

__all__ = ["ClientError", "Conn", "Fid", "Fsys", "dir_unpack"]

_DEFAULT_MSIZE = 131072


class ClientError(Exception):
    """An error reported by the server or detected by the client."""


class Conn:
    """A 9P connection over a binary stream with read, write and close."""

    def __init__(self, rwc) -> None:
        self._rwc = rwc
        self._err: Optional[BaseException] = None
        self._cond = threading.Condition()
        self._wlock = threading.Lock()
        self._replies: dict[int, Fcall] = {}
        self._outstanding: set[int] = set()
        self._reading = False
        self._freetag: set[int] = set()
        self._freefid: set[int] = set()
        self._nexttag = 1
        self._nextfid = 1
        self.msize = _DEFAULT_MSIZE
        self.version = VERSION9P

        rx = self.rpc(
            Fcall(type=FcallType.Tversion, msize=self.msize, version=self.version)
        )
        if rx.msize > self.msize:
            raise ProtocolError(f"invalid msize {rx.msize} in Rversion")
        self.msize = rx.msize
        if rx.version != VERSION9P:
            raise ProtocolError(f"invalid version {rx.version} in Rversion")

    # identifiers

    def _newfid(self) -> "Fid":
        with self._cond:
            if self._freefid:
                num = self._freefid.pop()
            else:
                if self._nextfid == NOFID:
                    raise ProtocolError("out of fids")
                num = self._nextfid
                self._nextfid += 1
        return Fid(self, num)

    def _putfid(self, fid: "Fid") -> None:
        with self._cond:
            if fid._fid not in (0, NOFID):
                self._freefid.add(fid._fid)
                fid._fid = NOFID

    def _newtag(self) -> int:
        with self._cond:
            if self._freetag:
                tag = self._freetag.pop()
            else:
                if self._nexttag == NOTAG:
                    raise ProtocolError("out of tags")
                tag = self._nexttag
                self._nexttag += 1
            self._outstanding.add(tag)
            return tag

    def _puttag(self, tag: int) -> None:
        with self._cond:
            self._outstanding.discard(tag)
            self._replies.pop(tag, None)
            self._freetag.add(tag)

    # transport

    def _fail(self, exc: BaseException) -> None:
        with self._cond:
            self._err = exc
            self._cond.notify_all()

    def _write(self, tx: Fcall) -> None:
        with self._cond:
            if self._err is not None:
                raise self._err
        try:
            write_fcall(self._rwc, tx)
            flush = getattr(self._rwc, "flush", None)
            if flush is not None:
                flush()
        except Exception as exc:
            self._fail(exc)
            raise

    def _await(self, tag: int) -> Fcall:
        while True:
            with self._cond:
                while (
                    tag not in self._replies
                    and self._reading
                    and self._err is None
                ):
                    self._cond.wait()
                if tag in self._replies:
                    return self._replies.pop(tag)
                if self._err is not None:
                    raise self._err
                self._reading = True
            try:
                rx = read_fcall(self._rwc)
            except Exception as exc:
                with self._cond:
                    self._reading = False
                    self._err = exc
                    self._cond.notify_all()
                raise
            with self._cond:
                self._reading = False
                if rx.tag in self._outstanding:
                    self._replies[rx.tag] = rx
                self._cond.notify_all()

    def rpc(self, tx: Fcall) -> Fcall:
        """Send a request and wait for its reply."""
        tx.tag = self._newtag()
        try:
            with self._wlock:
                self._write(tx)
            rx = self._await(tx.tag)
        finally:
            self._puttag(tx.tag)
        if rx.type == FcallType.Rerror:
            raise ClientError(rx.ename)
        if rx.type != tx.type + 1:
            raise ProtocolError("packet type mismatch")
        return rx

    # sessions

    def auth(self, uname: str, aname: str) -> "Fid":
        """Open an authentication fid."""
        afid = self._newfid()
        tx = Fcall(type=FcallType.Tauth, afid=afid._fid, uname=uname, aname=aname)
        try:
            rx = self.rpc(tx)
        except Exception:
            self._putfid(afid)
            raise
        afid._qid = rx.aqid
        return afid

    def attach(self, afid: Optional["Fid"], user: str, aname: str) -> "Fsys":
        """Attach to the file tree named ``aname`` as ``user``."""
        fid = self._newfid()
        tx = Fcall(
            type=FcallType.Tattach,
            afid=NOFID if afid is None else afid._fid,
            fid=fid._fid,
            uname=user,
            aname=aname,
        )
        try:
            rx = self.rpc(tx)
        except Exception:
            self._putfid(fid)
            raise
        fid._qid = rx.qid
        return Fsys(fid)

    def close(self) -> None:
        self._rwc.close()

    def __enter__(self) -> "Conn":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def dir_unpack(data: bytes) -> list[Dir]:
    """Split a buffer of concatenated stat entries into Dirs."""
    data = bytes(data)
    dirs: list[Dir] = []
    pos = 0
    while pos < len(data):
        if len(data) - pos < 2:
            raise ProtocolError("unexpected EOF")
        n = data[pos] | data[pos + 1] << 8
        if len(data) - pos < n + 2:
            raise ProtocolError("unexpected EOF")
        dirs.append(unmarshal_dir(data[pos:pos + n + 2]))
        pos += n + 2
    return dirs


class Fid:
    """A handle on a file on the server."""

    def __init__(self, conn: Conn, fid: int) -> None:
        self._conn = conn
        self._fid = fid
        self._qid = Qid()
        self.mode = 0
        self._offset = 0
        self._lock = threading.Lock()

    def __enter__(self) -> "Fid":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def qid(self) -> Qid:
        return self._qid

    def close(self) -> None:
        """Clunk the fid, releasing it on the server."""
        try:
            self._conn.rpc(Fcall(type=FcallType.Tclunk, fid=self._fid))
        finally:
            self._conn._putfid(self)

    def create(self, name: str, mode: int, perm: int) -> None:
        """Create ``name`` in this directory; the fid then refers to it, opened."""
        rx = self._conn.rpc(
            Fcall(type=FcallType.Tcreate, fid=self._fid, name=name, mode=mode, perm=Perm(perm))
        )
        self.mode = mode
        self._qid = rx.qid

    def open(self, mode: int) -> None:
        self._conn.rpc(Fcall(type=FcallType.Topen, fid=self._fid, mode=mode))
        self.mode = mode

    def _read(self, size: int, offset: Optional[int]) -> bytes:
        n = min(size, self._conn.msize - IOHDRSZ)
        if offset is None:
            with self._lock:
                o = self._offset
        else:
            o = offset
        rx = self._conn.rpc(Fcall(type=FcallType.Tread, fid=self._fid, offset=o, count=n))
        data = rx.data
        if offset is None and data:
            with self._lock:
                self._offset += len(data)
        return data

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes at the current offset; b"" at end of file."""
        return self._read(size, None)

    def read_at(self, size: int, offset: int) -> bytes:
        """Read up to ``size`` bytes at ``offset`` without moving the offset."""
        return self._read(size, offset)

    def read_full(self, size: int) -> bytes:
        """Read exactly ``size`` bytes or raise EOFError."""
        chunks = []
        got = 0
        while got < size:
            chunk = self.read(size - got)
            if not chunk:
                if got == 0:
                    raise EOFError("end of file")
                raise EOFError("unexpected end of file")
            chunks.append(chunk)
            got += len(chunk)
        return b"".join(chunks)

    def dirread(self) -> list[Dir]:
        """Read one batch of directory entries."""
        return dir_unpack(self.read(STATMAX))

    def dirreadall(self) -> list[Dir]:
        """Read all remaining directory entries."""
        chunks = []
        while chunk := self.read(STATMAX):
            chunks.append(chunk)
        return dir_unpack(b"".join(chunks))

    def remove(self) -> None:
        """Remove the file; the fid is released either way."""
        try:
            self._conn.rpc(Fcall(type=FcallType.Tremove, fid=self._fid))
        finally:
            self._conn._putfid(self)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Set the offset used by read and write; return the new offset."""
        if whence == os.SEEK_SET:
            with self._lock:
                self._offset = offset
            return offset
        if whence == os.SEEK_CUR:
            with self._lock:
                n = self._offset + offset
                if n < 0:
                    raise ClientError("negative offset")
                self._offset = n
            return n
        if whence == os.SEEK_END:
            n = self.stat().length + offset
            if n < 0:
                raise ClientError("negative offset")
            with self._lock:
                self._offset = n
            return n
        raise ClientError("bad whence in seek")

    def stat(self) -> Dir:
        rx = self._conn.rpc(Fcall(type=FcallType.Tstat, fid=self._fid))
        return unmarshal_dir(rx.stat)

    def walk(self, name: str) -> "Fid":
        """Return a new fid for the slash-separated path relative to this one."""
        wfid = self._conn._newfid()
        elems = [e for e in name.split("/") if e not in ("", ".")]
        nwalk = 0
        while True:
            batch = elems[:MAXWELEM]
            tx = Fcall(
                type=FcallType.Twalk,
                fid=self._fid if nwalk == 0 else wfid._fid,
                newfid=wfid._fid,
                wname=batch,
            )
            try:
                rx = self._conn.rpc(tx)
                if len(rx.wqid) != len(batch):
                    raise ClientError(f"file '{name}' not found")
            except Exception:
                if nwalk > 0:
                    try:
                        wfid.close()
                    except Exception:
                        pass
                else:
                    self._conn._putfid(wfid)
                raise
            wfid._qid = rx.wqid[-1] if batch else self._qid
            elems = elems[len(batch):]
            nwalk += 1
            if not elems:
                return wfid

    def _write_once(self, data: bytes, offset: Optional[int]) -> int:
        if offset is None:
            with self._lock:
                o = self._offset
        else:
            o = offset
        rx = self._conn.rpc(Fcall(type=FcallType.Twrite, fid=self._fid, offset=o, data=data))
        if offset is None and rx.count > 0:
            with self._lock:
                self._offset += rx.count
        return rx.count

    def _write(self, data: bytes, offset: Optional[int]) -> int:
        data = bytes(data)
        limit = self._conn.msize - IOHDRSIZE
        tot = 0
        first = True
        while tot < len(data) or first:
            chunk = data[tot:tot + limit]
            got = self._write_once(chunk, offset)
            if got == 0 and chunk:
                raise ClientError("short write")
            tot += got
            if offset is not None:
                offset += got
            first = False
        return tot

    def write(self, data: bytes) -> int:
        """Write at the current offset and advance it; return bytes written."""
        return self._write(data, None)

    def write_at(self, data: bytes, offset: int) -> int:
        """Write at ``offset`` without moving the current offset."""
        return self._write(data, offset)

    def wstat(self, d: Dir) -> None:
        self._conn.rpc(Fcall(type=FcallType.Twstat, fid=self._fid, stat=d.to_bytes()))


_ACCESS_OMODE = (0, OEXEC, OWRITE, ORDWR, OREAD, OEXEC, ORDWR, ORDWR)


class Fsys:
    """An attached file tree, addressed by path names."""

    def __init__(self, root: Fid) -> None:
        self.root = root

    def access(self, name: str, mode: int) -> None:
        """Raise unless ``name`` exists (AEXIST) or can be opened in ``mode``."""
        if mode == AEXIST:
            self.stat(name)
            return
        fid = self.open(name, _ACCESS_OMODE[mode & 7])
        fid.close()

    def create(self, name: str, mode: int, perm: int) -> Fid:
        dirname, sep, elem = name.rpartition("/")
        if not sep:
            dirname, elem = "", name
        fid = self.root.walk(dirname)
        try:
            fid.create(elem, mode, perm)
        except Exception:
            fid.close()
            raise
        return fid

    def open(self, name: str, mode: int) -> Fid:
        fid = self.root.walk(name)
        try:
            fid.open(mode)
        except Exception:
            fid.close()
            raise
        return fid

    def remove(self, name: str) -> None:
        self.root.walk(name).remove()

    def stat(self, name: str) -> Dir:
        fid = self.root.walk(name)
        try:
            return fid.stat()
        finally:
            fid.close()

    def wstat(self, name: str, d: Dir) -> None:
        fid = self.root.walk(name)
        try:
            fid.wstat(d)
        finally:
            fid.close()