"""
Color frequency extraction.

Builds the color -> occurrence table for every opaque pixel of a buffer.
The scan runs on a single thread in row-major order so the table (and the
first-seen order used for tie-breaks) is reproducible run to run.
"""

from typing import Dict, Iterable, List, Optional

import numpy as np
from loguru import logger

from .pixels import OPAQUE, Color, PixelBuffer

ColorFrequencyTable = Dict[Color, int]


def _pack_rgb(pixels_bgr: np.ndarray) -> np.ndarray:
    """Pack (N, 3) BGR uint8 rows into 0xRRGGBB integer keys."""
    b = pixels_bgr[:, 0].astype(np.uint32)
    g = pixels_bgr[:, 1].astype(np.uint32)
    r = pixels_bgr[:, 2].astype(np.uint32)
    return (r << 16) | (g << 8) | b


def _unpack_rgb(key: int) -> Color:
    return Color((key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF)


def opaque_pixels(buffer: PixelBuffer,
                  excluded: Optional[Iterable[Color]] = None) -> np.ndarray:
    """
    Return the (N, 3) BGR rows of every fully opaque pixel, row-major.

    Pixels with alpha below 255 are skipped in 4-byte formats; 3-byte formats
    have no transparency and keep every pixel. Pixels matching an `excluded`
    color are dropped as well.
    """
    image = buffer.as_array()
    if buffer.has_alpha:
        keep = image[:, :, 3] == OPAQUE
        pixels = image[:, :, :3][keep]
    else:
        pixels = image[:, :, :3].reshape(-1, 3)

    if excluded:
        banned = np.array([(c.r << 16) | (c.g << 8) | c.b for c in excluded], dtype=np.uint32)
        pixels = pixels[~np.isin(_pack_rgb(pixels), banned)]
    return pixels


def extract_color_frequencies(buffer: PixelBuffer,
                              excluded: Optional[Iterable[Color]] = None) -> ColorFrequencyTable:
    """
    Count occurrences of each distinct opaque color.

    Args:
        buffer: Source pixels
        excluded: Colors to leave out of the table entirely (none by default)

    Returns:
        Mapping of Color to count, in first-seen scan order
    """
    pixels = opaque_pixels(buffer, excluded)
    total = buffer.width * buffer.height
    logger.debug(f"Frequency scan: {len(pixels)}/{total} opaque pixels")

    if len(pixels) == 0:
        return {}

    keys = _pack_rgb(pixels)
    unique_keys, first_index, counts = np.unique(keys, return_index=True, return_counts=True)

    # np.unique sorts by key; restore scan order so ties resolve by first sighting
    scan_order = np.argsort(first_index, kind="stable")

    table: ColorFrequencyTable = {}
    for idx in scan_order:
        table[_unpack_rgb(int(unique_keys[idx]))] = int(counts[idx])

    logger.debug(f"Frequency scan found {len(table)} distinct colors")
    return table


def order_by_frequency(table: ColorFrequencyTable) -> List[Color]:
    """
    Order colors rarest first.

    Equal counts keep the table's insertion (first-seen) order, since
    `sorted` is stable.
    """
    return sorted(table, key=table.__getitem__)


def get_colors_in_image(buffer: PixelBuffer,
                        excluded: Optional[Iterable[Color]] = None) -> List[Color]:
    """Distinct opaque colors of the buffer, rarest first."""
    return order_by_frequency(extract_color_frequencies(buffer, excluded))
