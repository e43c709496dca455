from ninekit.draw.rect import (
    Point,
    Rectangle,
    combine_rect,
    rect_clip,
    rect_in_rect,
    rect_x_rect,
)


def R(x0, y0, x1, y1):
    return Rectangle(Point(x0, y0), Point(x1, y1))


def test_clip_overlap():
    assert rect_clip(R(0, 0, 10, 10), R(5, 5, 20, 20)) == R(5, 5, 10, 10)


def test_clip_result_inside_both():
    r, b = R(-3, 2, 8, 40), R(0, 0, 6, 6)
    c = rect_clip(r, b)
    assert rect_in_rect(c, b)
    assert rect_in_rect(c, r)


def test_clip_disjoint_returns_none():
    assert rect_clip(R(0, 0, 5, 5), R(5, 0, 10, 5)) is None


def test_x_rect_touching_edges_do_not_cross():
    assert not rect_x_rect(R(0, 0, 5, 5), R(0, 5, 5, 10))
    assert rect_x_rect(R(0, 0, 5, 5), R(4, 4, 10, 10))


def test_in_rect_zero_width():
    assert rect_in_rect(R(3, 3, 3, 3), R(0, 0, 5, 5))
    assert not rect_in_rect(R(3, 3, 6, 4), R(0, 0, 5, 5))


def test_combine_encloses_both():
    a, b = R(0, 0, 2, 2), R(5, -1, 6, 1)
    c = combine_rect(a, b)
    assert c == R(0, -1, 6, 2)
    assert rect_in_rect(a, c) and rect_in_rect(b, c)


def test_combine_with_zero_sized():
    assert combine_rect(R(1, 1, 2, 2), R(7, 7, 7, 7)) == R(1, 1, 7, 7)