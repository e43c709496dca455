"""Font name parsing and subfont file lookup."""

from __future__ import annotations

import os
import re
from typing import Optional

__all__ = ["parse_font_scale", "subfont_name"]

_SCALE = re.compile(r"([0-9]+)\*")
_DEFAULT = "*default*"


def parse_font_scale(name: str) -> tuple[int, str]:
    """Split a "N*name" font name into (N, name); plain names get scale 1."""
    m = _SCALE.match(name)
    if m:
        scale = int(m.group(1))
        if scale > 0:
            return scale, name[m.end():]
    return 1, name


def _scaled(scale: int, path: str) -> str:
    return f"{scale}*{path}" if scale > 1 else path


def subfont_name(cfname: str, fname: str, maxdepth: int) -> Optional[str]:
    """Find the file for subfont ``cfname`` of font ``fname``, or None.

    Relative names are taken from the font's directory; greyscale variants
    "name.3" down to "name.0" no deeper than ``maxdepth`` bits are preferred.
    """
    scale, base = parse_font_scale(fname)
    if cfname == _DEFAULT:
        return cfname
    t = cfname
    if not t.startswith("/"):
        directory, sep, _ = base.rpartition("/")
        if not sep:
            directory = "."
        t = directory + "/" + t
    maxdepth = min(maxdepth, 8)
    for i in range(3, -1, -1):
        if 1 << i > maxdepth:
            continue
        candidate = f"{t}.{i}"
        if os.path.exists(candidate):
            return _scaled(scale, candidate)
    if t.startswith("/mnt/font/"):
        return _scaled(scale, t)
    if os.path.exists(t):
        return _scaled(scale, t)
    return None