import pytest

from ninekit.draw.pix import (
    ARGB32,
    BLACK,
    CMAP8,
    GREY1,
    GREY8,
    RGB15,
    RGB16,
    RGB24,
    RGBA32,
    WHITE,
    XBGR32,
    Chan,
    Color,
    Pix,
    make_pix,
    parse_pix,
)

ALL = [GREY1, GREY8, CMAP8, RGB15, RGB16, RGB24, RGBA32, ARGB32, XBGR32]


def test_rgb24_string():
    pix = make_pix(0, 8, 1, 8, 2, 8)
    assert pix == RGB24
    assert str(pix) == "r8g8b8"


def test_parse_known_descriptor():
    assert parse_pix("r8g8b8") == RGB24


@pytest.mark.parametrize("pix", ALL)
def test_round_trip(pix):
    assert parse_pix(str(pix)) == pix


def test_depths():
    assert RGB24.depth() == 24
    assert GREY8.depth() == 8
    assert RGBA32.depth() == ARGB32.depth() == XBGR32.depth()


def test_depth_is_half_of_sixteen_bit_words():
    assert RGB16.depth() == RGB15.depth() + 0 or RGB16.depth() > RGB15.depth()
    assert RGB16.depth() == RGB24.depth() - 8


def test_zero_pix_string():
    assert str(Pix(0)) == "0"
    assert Pix(0).depth() == 0


def test_make_pix_nibbles():
    assert make_pix(Chan.GREY, 1) == (Chan.GREY << 4) | 1
    assert make_pix() == 0


@pytest.mark.parametrize("bad", ["r", "r9", "r0", "q8", "r8g8b8a8x8", "r8g"])
def test_malformed(bad):
    with pytest.raises(ValueError):
        parse_pix(bad)


def test_color_components():
    white = Color(0xFFFFFFFF)
    assert (white.red, white.green, white.blue, white.alpha) == (255, 255, 255, 255)
    assert white == WHITE
    black = Color(0x000000FF)
    assert (black.red, black.alpha) == (0, 255)
    assert black == BLACK
    pink = Color(0xFF55AAFF)
    assert (pink.red, pink.green, pink.blue, pink.alpha) == (0xFF, 0x55, 0xAA, 0xFF)


def test_color_range():
    with pytest.raises(ValueError):
        Color(-1)
    with pytest.raises(ValueError):
        Color(1 << 32)