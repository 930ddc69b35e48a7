"""
Pixel Buffer View

Read access over a decoded image's raw byte layout. Pixels are stored in
B, G, R[, A] order, rows are `row_stride` bytes apart and may carry padding.
"""

import colorsys
from typing import Iterator, NamedTuple, Optional, Tuple, Union

import numpy as np

from .errors import InvalidRequestError, OutOfBoundsError

ByteSource = Union[bytes, bytearray, memoryview]

OPAQUE = 255


class Color(NamedTuple):
    """8-bit RGB color. Alpha is never part of a palette color."""
    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    @property
    def bgr(self) -> Tuple[int, int, int]:
        return (self.b, self.g, self.r)

    @property
    def hue(self) -> float:
        """Hue in degrees [0, 360); grays report 0."""
        h, _, _ = colorsys.rgb_to_hsv(self.r / 255.0, self.g / 255.0, self.b / 255.0)
        return h * 360.0

    @property
    def hsv(self) -> Tuple[float, float, float]:
        """(hue degrees, saturation 0-1, value 0-1)."""
        h, s, v = colorsys.rgb_to_hsv(self.r / 255.0, self.g / 255.0, self.b / 255.0)
        return (h * 360.0, s, v)


class PixelBuffer:
    """
    Bounds-checked view over raw BGR(A) pixel bytes.

    The buffer borrows `data`; callers must keep the source alive for as long
    as the view (and any array obtained from `as_array`) is in use.
    """

    def __init__(self, data: ByteSource, width: int, height: int,
                 bytes_per_pixel: int, row_stride: Optional[int] = None):
        if width <= 0 or height <= 0:
            raise InvalidRequestError(f"Invalid buffer dimensions: {width}x{height}")
        if bytes_per_pixel not in (3, 4):
            raise InvalidRequestError(
                f"Unsupported bytes per pixel: {bytes_per_pixel} (expected 3 or 4)"
            )
        if row_stride is None:
            row_stride = width * bytes_per_pixel
        if row_stride < width * bytes_per_pixel:
            raise InvalidRequestError(
                f"Row stride {row_stride} smaller than row size {width * bytes_per_pixel}"
            )

        view = memoryview(data).cast("B")
        if len(view) < row_stride * height:
            raise InvalidRequestError(
                f"Buffer holds {len(view)} bytes, layout requires {row_stride * height}"
            )

        self._data = view
        self.width = width
        self.height = height
        self.bytes_per_pixel = bytes_per_pixel
        self.row_stride = row_stride

    @classmethod
    def from_array(cls, image: np.ndarray) -> "PixelBuffer":
        """Wrap an (H, W, 3|4) uint8 BGR(A) array without copying when possible."""
        if image.ndim != 3 or image.shape[2] not in (3, 4):
            raise InvalidRequestError(f"Expected (H, W, 3|4) image, got shape {image.shape}")
        if image.dtype != np.uint8:
            raise InvalidRequestError(f"Expected uint8 image, got {image.dtype}")
        image = np.ascontiguousarray(image)
        height, width, channels = image.shape
        return cls(image.data, width, height, channels)

    @classmethod
    def allocate(cls, width: int, height: int, bytes_per_pixel: int = 4) -> "PixelBuffer":
        """Fresh zeroed, writable buffer owned by the returned view."""
        if width <= 0 or height <= 0:
            raise InvalidRequestError(f"Invalid buffer dimensions: {width}x{height}")
        return cls(bytearray(width * height * bytes_per_pixel), width, height, bytes_per_pixel)

    @property
    def has_alpha(self) -> bool:
        return self.bytes_per_pixel == 4

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def _offset(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfBoundsError(
                f"Pixel ({x}, {y}) outside {self.width}x{self.height} buffer"
            )
        return x * self.bytes_per_pixel + y * self.row_stride

    def color_at(self, x: int, y: int) -> Color:
        offset = self._offset(x, y)
        data = self._data
        return Color(data[offset + 2], data[offset + 1], data[offset])

    def alpha_at(self, x: int, y: int) -> int:
        offset = self._offset(x, y)
        if not self.has_alpha:
            return OPAQUE
        return self._data[offset + 3]

    def iter_pixels(self) -> Iterator[Tuple[int, int, Color, int]]:
        """Yield (x, y, color, alpha) in row-major order."""
        for y in range(self.height):
            for x in range(self.width):
                yield x, y, self.color_at(x, y), self.alpha_at(x, y)

    def as_array(self) -> np.ndarray:
        """
        (H, W, bpp) uint8 array sharing memory with the buffer.

        Row padding is sliced away. The array is writable only when the
        underlying bytes are.
        """
        rows = np.frombuffer(self._data, dtype=np.uint8, count=self.row_stride * self.height)
        rows = rows.reshape(self.height, self.row_stride)
        packed = rows[:, :self.width * self.bytes_per_pixel]
        return packed.reshape(self.height, self.width, self.bytes_per_pixel)

    def tobytes(self) -> bytes:
        """Tightly packed pixel bytes (no row padding)."""
        return self.as_array().tobytes()

    def __repr__(self) -> str:
        return (f"PixelBuffer(width={self.width}, height={self.height}, "
                f"bytes_per_pixel={self.bytes_per_pixel}, row_stride={self.row_stride})")
