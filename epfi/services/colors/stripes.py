"""
Stripe Rendering Module

Synthesizes a swatch image of equal-width vertical color bands. Each band is
filled by its own task; bands own disjoint column ranges of the output buffer
so no locking is needed.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

import numpy as np
from loguru import logger

from epfi.config import config

from .errors import InvalidRequestError
from .pixels import OPAQUE, Color, PixelBuffer


def _fill_stripe(pixels: np.ndarray, x_start: int, x_end: int, color: Color) -> None:
    # Channel order matches the buffer layout: B, G, R, A
    pixels[:, x_start:x_end] = (color.b, color.g, color.r, OPAQUE)


def create_striped_image(stripe_width: int,
                         height: int,
                         colors: Sequence[Color],
                         max_workers: Optional[int] = None) -> PixelBuffer:
    """
    Render colors as vertical stripes into a new BGRA buffer.

    Args:
        stripe_width: Pixel width of each band
        height: Pixel height of the image
        colors: Band colors, left to right
        max_workers: Thread count for the fills (default from config)

    Returns:
        PixelBuffer of size (stripe_width * len(colors), height), fully opaque

    Raises:
        InvalidRequestError: Empty color list or non-positive dimensions
    """
    if not colors:
        raise InvalidRequestError("There must be at least one color when creating a striped image")
    if not config.validate_stripe_size(stripe_width, height):
        raise InvalidRequestError(
            f"Stripe width and height must be positive, got {stripe_width}x{height}"
        )

    width = stripe_width * len(colors)
    logger.debug(f"Rendering {len(colors)} stripes into {width}x{height} image")

    image = PixelBuffer.allocate(width, height, bytes_per_pixel=4)
    pixels = image.as_array()

    if max_workers is None:
        max_workers = config.stripe_workers()

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(_fill_stripe, pixels, stripe_width * i, stripe_width * (i + 1), color)
            for i, color in enumerate(colors)
        ]
        for future in futures:
            future.result()

    return image
