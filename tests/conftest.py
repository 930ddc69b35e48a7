"""
Test configuration and fixtures for EPFI palette tests.
"""
import io
from typing import List, Optional, Sequence

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from epfi.main import app
from epfi.services.colors.pixels import Color, PixelBuffer

RED = Color(255, 0, 0)
GREEN = Color(0, 255, 0)
BLUE = Color(0, 0, 255)
WHITE = Color(255, 255, 255)
BLACK = Color(0, 0, 0)


def bgr_array(rows: Sequence[Sequence[Color]],
              alpha: Optional[Sequence[Sequence[int]]] = None) -> np.ndarray:
    """Build an (H, W, 3|4) BGR(A) array from rows of colors."""
    height, width = len(rows), len(rows[0])
    channels = 3 if alpha is None else 4
    image = np.zeros((height, width, channels), dtype=np.uint8)
    for y, row in enumerate(rows):
        for x, color in enumerate(row):
            image[y, x, :3] = color.bgr
            if alpha is not None:
                image[y, x, 3] = alpha[y][x]
    return image


def png_bytes(rows: Sequence[Sequence[Color]],
              alpha: Optional[Sequence[Sequence[int]]] = None) -> bytes:
    """Encode rows of colors as a PNG (RGBA when alpha is given)."""
    height, width = len(rows), len(rows[0])
    mode = "RGB" if alpha is None else "RGBA"
    image = Image.new(mode, (width, height))
    for y, row in enumerate(rows):
        for x, color in enumerate(row):
            pixel = tuple(color) if alpha is None else tuple(color) + (alpha[y][x],)
            image.putpixel((x, y), pixel)
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def make_buffer():
    """Factory for PixelBuffers built from rows of colors."""
    def _make(rows: List[List[Color]], alpha: Optional[List[List[int]]] = None) -> PixelBuffer:
        return PixelBuffer.from_array(bgr_array(rows, alpha))
    return _make


@pytest.fixture
def two_by_two_rows():
    """The {red, red, blue, green} 2x2 image used across end-to-end tests."""
    return [[RED, RED], [BLUE, GREEN]]


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from epfi.utils.metrics import reset_metrics
    reset_metrics()
