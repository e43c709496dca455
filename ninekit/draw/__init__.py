"""Pixel formats, colours, rectangles, colour maps, integer trig and font names."""

__all__ = ["pix", "rect", "rgb", "icossin", "fontname"]