import pytest

from ninekit.draw.fontname import parse_font_scale, subfont_name


@pytest.mark.parametrize(
    "name,expected",
    [
        ("2*/lib/font/bit/x.font", (2, "/lib/font/bit/x.font")),
        ("12*f", (12, "f")),
        ("0*f", (1, "0*f")),
        ("abc", (1, "abc")),
        ("12x", (1, "12x")),
        ("*x", (1, "*x")),
    ],
)
def test_parse_font_scale(name, expected):
    assert parse_font_scale(name) == expected


def test_default_passes_through(tmp_path):
    assert subfont_name("*default*", str(tmp_path / "f.font"), 8) == "*default*"


def test_finds_grey_variant(tmp_path):
    (tmp_path / "sub.2").write_bytes(b"")
    font = str(tmp_path / "f.font")
    assert subfont_name("sub", font, 8) == str(tmp_path / "sub") + ".2"


def test_prefers_deepest_variant(tmp_path):
    (tmp_path / "sub.1").write_bytes(b"")
    (tmp_path / "sub.3").write_bytes(b"")
    font = str(tmp_path / "f.font")
    assert subfont_name("sub", font, 8) == str(tmp_path / "sub") + ".3"
    assert subfont_name("sub", font, 4) == str(tmp_path / "sub") + ".1"


def test_depth_limit_excludes_variant(tmp_path):
    (tmp_path / "sub.2").write_bytes(b"")
    assert subfont_name("sub", str(tmp_path / "f.font"), 1) is None


def test_plain_file_with_scale(tmp_path):
    (tmp_path / "sub").write_bytes(b"")
    font = "2*" + str(tmp_path / "f.font")
    assert subfont_name("sub", font, 8) == "2*" + str(tmp_path / "sub")


def test_absolute_name_ignores_font_dir(tmp_path):
    target = tmp_path / "abs"
    target.write_bytes(b"")
    assert subfont_name(str(target), "/elsewhere/f.font", 8) == str(target)


def test_mnt_font_assumed_present():
    assert subfont_name("/mnt/font/Go/10a/x", "3*f", 8) == "3*/mnt/font/Go/10a/x"


def test_missing(tmp_path):
    assert subfont_name("nothing", str(tmp_path / "f.font"), 8) is None