import pytest

from ninekit.draw.pix import BLACK, WHITE
from ninekit.draw.rgb import cmap2rgb, cmap2rgba, rgb2cmap


def test_extremes():
    assert cmap2rgb(0) == (0, 0, 0)
    assert cmap2rgb(255) == (255, 255, 255)


def test_rgba_extremes():
    assert cmap2rgba(0) == BLACK
    assert cmap2rgba(255) == WHITE


@pytest.mark.parametrize("c", range(0, 256, 7))
def test_round_trip_colour(c):
    assert cmap2rgb(rgb2cmap(*cmap2rgb(c))) == cmap2rgb(c)


@pytest.mark.parametrize("c", range(256))
def test_components_in_range(c):
    assert all(0 <= x <= 255 for x in cmap2rgb(c))


def test_rgba_is_opaque_and_matches_rgb():
    for c in (1, 64, 130, 200):
        col = cmap2rgba(c)
        assert col.alpha == 0xFF
        assert (col.red, col.green, col.blue) == cmap2rgb(c)


def test_nearest_for_out_of_range_input():
    assert cmap2rgb(rgb2cmap(-50, -50, -50)) == cmap2rgb(0)
    assert cmap2rgb(rgb2cmap(999, 999, 999)) == cmap2rgb(255)