"""
Similarity deduplication.

Greedy, order-dependent removal of colors that sit closer than a tolerance
(Euclidean RGB distance) to an earlier surviving color. The result is a
maximal, not minimum, set of pairwise-separated colors.
"""

import math
from typing import List, Sequence

import numpy as np
from loguru import logger

from .errors import InvalidRequestError
from .pixels import Color

# Largest possible Euclidean distance between two 8-bit RGB colors (~441.67)
MAX_COLOR_DISTANCE = math.sqrt(3 * 255 ** 2)


def color_distance(c1: Color, c2: Color) -> float:
    """Euclidean distance between two colors in RGB space."""
    dr = c1[0] - c2[0]
    dg = c1[1] - c2[1]
    db = c1[2] - c2[2]
    return math.sqrt(dr * dr + dg * dg + db * db)


def validate_tolerance(tolerance: float) -> None:
    if not (0.0 <= tolerance <= MAX_COLOR_DISTANCE):
        raise InvalidRequestError(
            f"Tolerance {tolerance} outside [0, {MAX_COLOR_DISTANCE:.2f}]"
        )


def remove_similar_colors(colors: Sequence[Color], tolerance: float) -> List[Color]:
    """
    Drop colors within `tolerance` of an earlier kept color.

    Each kept color, in input order, eliminates every other still-kept color
    closer than `tolerance`. A dropped color never eliminates anything, so the
    outcome depends on the input order.

    Args:
        colors: Candidate colors in priority order
        tolerance: Minimum distance two kept colors must have

    Returns:
        Surviving colors, relative order preserved
    """
    validate_tolerance(tolerance)

    n = len(colors)
    if n == 0:
        return []

    rgb = np.asarray(colors, dtype=np.float64).reshape(n, 3)
    kept = np.ones(n, dtype=bool)

    for i in range(n):
        if not kept[i]:
            continue
        distances = np.sqrt(np.sum((rgb - rgb[i]) ** 2, axis=1))
        close = distances < tolerance
        close[i] = False
        kept[close] = False

    result = [colors[i] for i in np.flatnonzero(kept)]
    logger.debug(f"Dedupe at tolerance {tolerance:.2f}: {n} -> {len(result)} colors")
    return result


def min_pairwise_distance(colors: Sequence[Color]) -> float:
    """Smallest distance between any two colors (inf for fewer than two)."""
    best = math.inf
    for i in range(len(colors)):
        for j in range(i + 1, len(colors)):
            best = min(best, color_distance(colors[i], colors[j]))
    return best
