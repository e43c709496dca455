"""Integer approximations of the cosine and sine of a direction."""

from __future__ import annotations

__all__ = ["ICOSSCALE", "int_cos_sin2"]

ICOSSCALE = 1024

# sin(atan(i/100)) and cos(atan(i/100)) scaled by 1024, for i in 0..101.
_SINUS = (
    0, 10, 20, 31, 41, 51, 61, 72, 82, 92,
    102, 112, 122, 132, 142, 152, 162, 172, 181, 191,
    201, 210, 220, 230, 239, 248, 258, 267, 276, 285,
    294, 303, 312, 321, 330, 338, 347, 355, 364, 372,
    380, 388, 397, 405, 412, 420, 428, 436, 443, 451,
    458, 465, 472, 480, 487, 493, 500, 507, 514, 520,
    527, 533, 540, 546, 552, 558, 564, 570, 576, 582,
    587, 593, 598, 604, 609, 614, 620, 625, 630, 635,
    640, 645, 649, 654, 659, 663, 668, 672, 676, 681,
    685, 689, 693, 697, 701, 705, 709, 713, 717, 720,
    724, 728,
)

_COSINUS = (
    1024, 1024, 1024, 1024, 1023, 1023, 1022, 1022, 1021, 1020,
    1019, 1018, 1017, 1015, 1014, 1013, 1011, 1010, 1008, 1006,
    1004, 1002, 1000, 998, 996, 993, 991, 989, 986, 983,
    981, 978, 975, 972, 969, 967, 963, 960, 957, 954,
    951, 947, 944, 941, 937, 934, 930, 927, 923, 920,
    916, 912, 909, 905, 901, 897, 893, 890, 886, 882,
    878, 874, 870, 866, 862, 859, 855, 851, 847, 843,
    839, 835, 831, 827, 823, 819, 815, 811, 807, 804,
    800, 796, 792, 788, 784, 780, 776, 773, 769, 765,
    761, 757, 754, 750, 746, 742, 739, 735, 731, 728,
    724, 720,
)


def _quo(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // b
    return -q if a < 0 else q


def _interp(table: tuple[int, ...], index: int, rem: int) -> int:
    lo, hi = table[index], table[index + 1]
    return lo + _quo((hi - lo) * rem, 10)


def int_cos_sin2(x: int, y: int) -> tuple[int, int]:
    """Return (cos, sin) of the direction (x, y), each scaled by ICOSSCALE."""
    if x == 0:
        return 0, ICOSSCALE if y >= 0 else -ICOSSCALE
    cossign = -1 if x < 0 else 1
    sinsign = -1 if y < 0 else 1
    x, y = abs(x), abs(y)
    if y > x:
        tan = 1000 * x // y
        stab, ctab = _COSINUS, _SINUS
    else:
        tan = 1000 * y // x
        stab, ctab = _SINUS, _COSINUS
    tan10 = tan // 10
    rem = tan - tan10 * 10
    return cossign * _interp(ctab, tan10, rem), sinsign * _interp(stab, tan10, rem)