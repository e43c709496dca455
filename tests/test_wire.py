import pytest

from ninekit.wire import (
    Decoder,
    ProtocolError,
    put_string,
    put_u8,
    put_u16,
    put_u32,
    put_u64,
)


def test_u16_is_little_endian():
    assert put_u16(0x1234) == b"\x34\x12"


def test_u32_is_little_endian():
    assert put_u32(0x01020304) == b"\x04\x03\x02\x01"


@pytest.mark.parametrize(
    "encode, method, value",
    [
        (put_u8, "u8", 0xAB),
        (put_u16, "u16", 0xFFFF),
        (put_u32, "u32", 0xDEADBEEF),
        (put_u64, "u64", 0x0123456789ABCDEF),
    ],
)
def test_integer_round_trip(encode, method, value):
    dec = Decoder(encode(value))
    assert getattr(dec, method)() == value
    assert dec.remaining() == 0


def test_u64_low_word_first():
    encoded = put_u64((7 << 32) | 9)
    dec = Decoder(encoded)
    assert dec.u32() == 9
    assert dec.u32() == 7


@pytest.mark.parametrize("encode", [put_u8, put_u16, put_u32, put_u64])
def test_negative_rejected(encode):
    with pytest.raises(ProtocolError):
        encode(-1)


def test_u8_overflow_rejected():
    with pytest.raises(ProtocolError):
        put_u8(256)


def test_string_round_trip():
    data = put_string("hello") + put_string("") + put_string("wörld")
    dec = Decoder(data)
    assert dec.string() == "hello"
    assert dec.string() == ""
    assert dec.string() == "wörld"
    assert dec.remaining() == 0


def test_string_prefix_is_byte_count():
    encoded = put_string("abc")
    assert Decoder(encoded).u16() == 3
    assert encoded[2:] == b"abc"


def test_string_too_long():
    with pytest.raises(ProtocolError, match="string too long"):
        put_string("x" * (1 << 16))


def test_string_just_fits():
    s = "y" * ((1 << 16) - 1)
    assert Decoder(put_string(s)).string() == s


def test_short_read_raises():
    dec = Decoder(b"\x01\x02")
    with pytest.raises(ProtocolError):
        dec.u32()


def test_short_string_body_raises():
    dec = Decoder(put_u16(10) + b"abc")
    with pytest.raises(ProtocolError):
        dec.string()


def test_take_and_rest():
    dec = Decoder(b"abcdef")
    assert dec.take(2) == b"ab"
    assert dec.remaining() == 4
    assert dec.rest() == b"cdef"
    assert dec.remaining() == 0
    assert dec.rest() == b""


def test_take_negative_raises():
    with pytest.raises(ProtocolError):
        Decoder(b"abc").take(-1)