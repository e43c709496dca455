import io

import pytest

from ninekit.dir import Dir, Perm, Qid
from ninekit.fcall import (
    Fcall,
    FcallType,
    dumpsome,
    read_fcall,
    unmarshal_fcall,
    write_fcall,
)
from ninekit.wire import ProtocolError


QID = Qid(path=0x1234, vers=7, type=0x80)

SAMPLES = [
    Fcall(type=FcallType.Tversion, tag=0xFFFF, msize=8192, version="9P2000"),
    Fcall(type=FcallType.Rversion, tag=0xFFFF, msize=4096, version="9P2000"),
    Fcall(type=FcallType.Tauth, tag=1, afid=5, uname="glenda", aname=""),
    Fcall(type=FcallType.Rauth, tag=1, aqid=QID),
    Fcall(type=FcallType.Tattach, tag=2, fid=1, afid=0xFFFFFFFF, uname="glenda", aname="main"),
    Fcall(type=FcallType.Rattach, tag=2, qid=QID),
    Fcall(type=FcallType.Rerror, tag=3, ename="file not found"),
    Fcall(type=FcallType.Tflush, tag=4, oldtag=3),
    Fcall(type=FcallType.Rflush, tag=4),
    Fcall(type=FcallType.Twalk, tag=5, fid=1, newfid=2, wname=["usr", "glenda"]),
    Fcall(type=FcallType.Rwalk, tag=5, wqid=[QID, Qid(path=9)]),
    Fcall(type=FcallType.Topen, tag=6, fid=2, mode=1),
    Fcall(type=FcallType.Ropen, tag=6, qid=QID, iounit=8168),
    Fcall(type=FcallType.Tcreate, tag=7, fid=2, name="new", perm=Perm(0o644), mode=2),
    Fcall(type=FcallType.Rcreate, tag=7, qid=QID, iounit=100),
    Fcall(type=FcallType.Tread, tag=8, fid=2, offset=1 << 40, count=512),
    Fcall(type=FcallType.Rread, tag=8, data=b"hello"),
    Fcall(type=FcallType.Twrite, tag=9, fid=2, offset=10, data=b"\x00\x01\x02"),
    Fcall(type=FcallType.Rwrite, tag=9, count=3),
    Fcall(type=FcallType.Tclunk, tag=10, fid=2),
    Fcall(type=FcallType.Rclunk, tag=10),
    Fcall(type=FcallType.Tremove, tag=11, fid=2),
    Fcall(type=FcallType.Rremove, tag=11),
    Fcall(type=FcallType.Tstat, tag=12, fid=2),
    Fcall(type=FcallType.Rstat, tag=12, stat=Dir(name="x").to_bytes()),
    Fcall(type=FcallType.Twstat, tag=13, fid=2, stat=Dir(name="y").to_bytes()),
    Fcall(type=FcallType.Rwstat, tag=13),
]


@pytest.mark.parametrize("msg", SAMPLES, ids=lambda m: m.type.name)
def test_round_trip(msg):
    raw = msg.to_bytes()
    assert unmarshal_fcall(raw) == msg


@pytest.mark.parametrize("msg", SAMPLES, ids=lambda m: m.type.name)
def test_size_prefix_matches_length(msg):
    raw = msg.to_bytes()
    assert int.from_bytes(raw[:4], "little") == len(raw)
    assert raw[4] == int(msg.type)
    assert int.from_bytes(raw[5:7], "little") == msg.tag
    decoded = unmarshal_fcall(raw)
    assert decoded.type == msg.type
    assert decoded.tag == msg.tag


def test_tversion_wire_bytes():
    raw = Fcall(type=FcallType.Tversion, tag=0xFFFF, msize=8192, version="9P2000").to_bytes()
    assert raw == (
        b"\x13\x00\x00\x00" + b"\x64" + b"\xff\xff" + b"\x00\x20\x00\x00" + b"\x06\x00" + b"9P2000"
    )


def test_invalid_type_rejected():
    with pytest.raises(ProtocolError, match="invalid type"):
        Fcall(type=FcallType.Terror).to_bytes()
    with pytest.raises(ProtocolError, match="invalid type"):
        Fcall(type=FcallType.Tmax).to_bytes()


def test_too_many_walk_names():
    with pytest.raises(ProtocolError, match="too many names in walk"):
        Fcall(type=FcallType.Twalk, wname=["a"] * 17).to_bytes()
    with pytest.raises(ProtocolError, match="too many qid in walk"):
        Fcall(type=FcallType.Rwalk, wqid=[Qid()] * 17).to_bytes()


def test_sixteen_walk_names_allowed():
    msg = Fcall(type=FcallType.Twalk, tag=1, wname=[str(i) for i in range(16)])
    assert unmarshal_fcall(msg.to_bytes()).wname == msg.wname


def test_unmarshal_truncated():
    raw = SAMPLES[0].to_bytes()
    with pytest.raises(ProtocolError, match="malformed Fcall"):
        unmarshal_fcall(raw[:-1])


def test_unmarshal_trailing_data():
    raw = Fcall(type=FcallType.Tclunk, tag=1, fid=2).to_bytes()
    extended = (len(raw) + 1).to_bytes(4, "little") + raw[4:] + b"\x00"
    with pytest.raises(ProtocolError, match="malformed Fcall"):
        unmarshal_fcall(extended)


def test_unmarshal_unknown_type():
    raw = Fcall(type=FcallType.Rflush, tag=1).to_bytes()
    bad = raw[:4] + bytes([FcallType.Terror]) + raw[5:]
    with pytest.raises(ProtocolError):
        unmarshal_fcall(bad)


def test_unmarshal_data_count_mismatch():
    raw = bytearray(Fcall(type=FcallType.Rread, tag=1, data=b"abc").to_bytes())
    raw[7] = 2  # claimed count smaller than payload
    with pytest.raises(ProtocolError):
        unmarshal_fcall(bytes(raw))


def test_read_write_stream():
    buf = io.BytesIO()
    for msg in SAMPLES[:5]:
        write_fcall(buf, msg)
    buf.seek(0)
    got = [read_fcall(buf) for _ in range(5)]
    assert got == SAMPLES[:5]
    with pytest.raises(EOFError):
        read_fcall(buf)


def test_read_large_message():
    msg = Fcall(type=FcallType.Rread, tag=1, data=bytes(range(256)) * 4)
    assert read_fcall(io.BytesIO(msg.to_bytes())) == msg


def test_read_invalid_length():
    with pytest.raises(ProtocolError, match="invalid length"):
        read_fcall(io.BytesIO(b"\x03\x00\x00\x00"))


def test_read_short_stream():
    raw = SAMPLES[0].to_bytes()
    with pytest.raises(EOFError):
        read_fcall(io.BytesIO(raw[:-2]))


def test_str_version():
    msg = Fcall(type=FcallType.Tversion, tag=65535, msize=8192, version="9P2000")
    assert str(msg) == "Tversion tag 65535 msize 8192 version '9P2000'"


def test_str_rwstat_and_unknown():
    assert str(Fcall(type=FcallType.Rwstat, tag=3)) == "FidRwstat tag 3"
    assert str(Fcall(type=99, tag=1)) == "unknown type 99"


def test_str_rstat_good_and_bad():
    stat = Dir(name="x").to_bytes()
    good = Fcall(type=FcallType.Rstat, tag=4, stat=stat)
    assert str(good) == f"Rstat tag 4 stat({len(stat)} bytes)"
    bad = Fcall(type=FcallType.Rstat, tag=4, stat=b"\x01")
    assert str(bad) == "Rstat tag 4 stat <nil>"


def test_str_twalk_lists_names():
    msg = Fcall(type=FcallType.Twalk, tag=1, fid=2, newfid=3, wname=["a", "b"])
    assert str(msg) == "Twalk tag 1 fid 2 newfid 3 wname [a b]"


def test_dumpsome_printable_quoted():
    assert dumpsome(b"hello") == '"hello"'
    assert dumpsome(b'a"b') == '"a\\"b"'


def test_dumpsome_binary_hex():
    assert dumpsome(b"\x01\xff") == "01ff"


def test_dumpsome_truncates():
    assert dumpsome(b"a" * 100) == '"' + "a" * 64 + '"'


def test_rread_str_uses_dumpsome():
    msg = Fcall(type=FcallType.Rread, tag=2, data=b"hi")
    assert str(msg) == f"Rread tag 2 count 2 {dumpsome(b'hi')}"