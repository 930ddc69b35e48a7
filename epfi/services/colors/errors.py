"""
Palette Extraction Errors

Error kinds raised by the palette core. Every error is terminal for the
current extraction request; the caller decides how to present it.
"""
from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories surfaced to API and CLI callers."""
    INVALID_REQUEST = "invalid_request"
    SIZE_TOO_LARGE = "size_too_large"
    REFINEMENT_EXHAUSTED = "refinement_exhausted"
    OUT_OF_BOUNDS = "out_of_bounds"


class PaletteError(Exception):
    """Base class for palette extraction failures."""
    kind: ErrorKind = ErrorKind.INVALID_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(PaletteError, ValueError):
    """Palette size of zero, empty color sequence or malformed arguments."""
    kind = ErrorKind.INVALID_REQUEST


class SizeTooLargeError(PaletteError, ValueError):
    """Requested palette size exceeds the image's distinct opaque colors."""
    kind = ErrorKind.SIZE_TOO_LARGE

    def __init__(self, requested: int, available: int):
        if available == 0:
            message = "Image has no opaque colors to build a palette from"
        else:
            message = (
                f"Requested palette size {requested} exceeds the {available} "
                f"distinct colors in the image"
            )
        super().__init__(message)
        self.requested = requested
        self.available = available


class RefinementExhaustedError(PaletteError, RuntimeError):
    """Relaxation loop ran out of attempts (or time) before reaching the size."""
    kind = ErrorKind.REFINEMENT_EXHAUSTED

    def __init__(self, message: str, attempts: int, best_size: int):
        super().__init__(message)
        self.attempts = attempts
        self.best_size = best_size


class OutOfBoundsError(PaletteError, IndexError):
    """Pixel coordinates outside the buffer dimensions."""
    kind = ErrorKind.OUT_OF_BOUNDS
