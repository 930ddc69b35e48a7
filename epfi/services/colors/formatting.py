"""
Palette text formatting (RGB, HSV and HEX lines).
"""

from enum import Enum
from typing import List, Sequence, Tuple

from .pixels import Color


class ColorFormatting(str, Enum):
    RGB = "RGB"
    HSV = "HSV"
    HEX = "HEX"


def _number(value: float) -> str:
    """Round to two decimals and drop trailing zeros (120.0 -> '120', 0.5 -> '0.5')."""
    return f"{round(value, 2):.2f}".rstrip("0").rstrip(".")


def color_to_hsv(color: Color) -> Tuple[float, float, float]:
    """Hue in degrees, saturation and value in [0, 1], each rounded to 2 places."""
    h, s, v = color.hsv
    return (round(h, 2), round(s, 2), round(v, 2))


def format_color(color: Color, mode: ColorFormatting = ColorFormatting.RGB) -> str:
    if not isinstance(mode, ColorFormatting):
        mode = ColorFormatting(mode.upper())

    if mode is ColorFormatting.RGB:
        return f"R: {color.r:03d} | G: {color.g:03d} | B: {color.b:03d}"

    if mode is ColorFormatting.HSV:
        h, s, v = color_to_hsv(color)
        return f"H: {_number(h).zfill(6)} | S: {_number(s).zfill(6)} | V: {_number(v).zfill(6)}"

    return color.hex


def format_palette(colors: Sequence[Color], mode: ColorFormatting = ColorFormatting.RGB) -> List[str]:
    """One formatted line per palette color."""
    return [format_color(color, mode) for color in colors]
