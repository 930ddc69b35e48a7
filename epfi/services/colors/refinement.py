"""
Palette refinement controller.

Runs extraction and deduplication, relaxing the tolerance (and, with a
quantizer, asking for more candidates) until the palette reaches the requested size.
The relaxation loop is bounded by an attempt budget and an optional deadline;
running out of either is an explicit failure, never a short palette.
"""

import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from epfi.config import config

from .dedupe import remove_similar_colors, validate_tolerance
from .errors import InvalidRequestError, RefinementExhaustedError, SizeTooLargeError
from .frequency import extract_color_frequencies, opaque_pixels, order_by_frequency
from .pixels import Color, PixelBuffer
from .quantize import Quantizer

MODE_DIRECT = "direct"
MODE_QUANTIZED = "quantized"


@dataclass(frozen=True)
class PaletteResult:
    """Accepted palette plus the parameters of the pass that produced it."""
    colors: Tuple[Color, ...]
    requested_size: int
    effective_tolerance: float
    attempts: int
    mode: str
    distinct_colors: int

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self):
        return iter(self.colors)

    @property
    def relaxed(self) -> bool:
        return self.attempts > 1


@dataclass
class _RefinementState:
    tolerance: float
    attempt: int = 0
    offset: int = 0
    can_grow: bool = False


def _sort_by_hue(colors: Sequence[Color]) -> Tuple[Color, ...]:
    return tuple(sorted(colors, key=lambda c: c.hue))


def _merge_weighted(weighted: Iterable[Tuple[Color, float]]) -> List[Color]:
    """Collapse identical quantizer colors and order them lightest weight first."""
    merged = {}
    for color, weight in weighted:
        merged[color] = merged.get(color, 0.0) + weight
    return sorted(merged, key=merged.__getitem__)


def extract_palette(buffer: PixelBuffer,
                    size: int,
                    tolerance: Optional[float] = None,
                    *,
                    quantizer: Optional[Quantizer] = None,
                    strict: Optional[bool] = None,
                    max_attempts: Optional[int] = None,
                    relax_step: Optional[float] = None,
                    timeout: Optional[float] = None,
                    excluded: Optional[Iterable[Color]] = None) -> PaletteResult:
    """
    Extract a palette of exactly `size` colors from a pixel buffer.

    Args:
        buffer: Source pixels
        size: Requested palette size (> 0)
        tolerance: Starting minimum distance between kept colors
        quantizer: Optional candidate source; switches to quantized mode
        strict: Reject sizes above the distinct color count instead of clamping
        max_attempts: Upper bound on dedupe passes
        relax_step: Tolerance decrease per relaxation
        timeout: Wall-clock budget in seconds for the relaxation loop
        excluded: Colors never allowed into the palette

    Returns:
        PaletteResult with `min(size, distinct)` colors sorted by hue

    Raises:
        InvalidRequestError: size <= 0 or out-of-range parameters
        SizeTooLargeError: no opaque colors, or size above distinct count in strict mode
        RefinementExhaustedError: attempt budget or deadline exhausted
    """
    tolerance = config.DEFAULT_TOLERANCE if tolerance is None else tolerance
    strict = config.STRICT_SIZE if strict is None else strict
    max_attempts = config.MAX_ATTEMPTS if max_attempts is None else max_attempts
    relax_step = config.RELAX_STEP if relax_step is None else relax_step
    timeout = config.refine_timeout() if timeout is None else timeout

    if size <= 0:
        raise InvalidRequestError(f"Cannot create a palette of size {size}")
    validate_tolerance(tolerance)
    if max_attempts < 1:
        raise InvalidRequestError(f"max_attempts must be at least 1, got {max_attempts}")
    if relax_step <= 0:
        raise InvalidRequestError(f"relax_step must be positive, got {relax_step}")

    excluded = list(excluded or ())
    ordered = order_by_frequency(extract_color_frequencies(buffer, excluded))
    distinct = len(ordered)

    requested = size
    if distinct == 0:
        raise SizeTooLargeError(size, 0)
    if size > distinct:
        if strict:
            raise SizeTooLargeError(size, distinct)
        logger.info(f"Clamping palette size {size} to {distinct} distinct colors")
        size = distinct

    if quantizer is None:
        mode = MODE_DIRECT

        def candidates(state: _RefinementState) -> List[Color]:
            return ordered
    else:
        mode = MODE_QUANTIZED
        pixels = opaque_pixels(buffer, excluded)

        def candidates(state: _RefinementState) -> List[Color]:
            k = min(size + state.offset, distinct)
            state.can_grow = k < distinct
            if not state.can_grow:
                # k-means can fold rare colors into a dominant cluster; full k means exact colors
                return ordered
            return _merge_weighted(quantizer(pixels, k))

    logger.info(f"Refining palette: size={size}, tolerance={tolerance}, mode={mode}, "
                f"distinct={distinct}")

    colors, state = _refine(candidates, size, tolerance, max_attempts, relax_step, timeout)

    return PaletteResult(
        colors=colors,
        requested_size=requested,
        effective_tolerance=state.tolerance,
        attempts=state.attempt,
        mode=mode,
        distinct_colors=distinct
    )


def _refine(candidates: Callable[[_RefinementState], List[Color]],
            size: int,
            tolerance: float,
            max_attempts: int,
            relax_step: float,
            timeout: Optional[float]) -> Tuple[Tuple[Color, ...], _RefinementState]:
    state = _RefinementState(tolerance=float(tolerance))
    deadline = time.monotonic() + timeout if timeout else None
    best = 0

    while state.attempt < max_attempts:
        if deadline is not None and time.monotonic() > deadline:
            raise RefinementExhaustedError(
                f"Palette refinement timed out after {timeout}s "
                f"({state.attempt} attempts, best {best}/{size} colors)",
                attempts=state.attempt, best_size=best
            )

        state.attempt += 1
        kept = remove_similar_colors(candidates(state), state.tolerance)
        best = max(best, len(kept))

        if len(kept) >= size:
            logger.info(f"Palette accepted on attempt {state.attempt} "
                        f"at tolerance {state.tolerance:.2f}")
            return _sort_by_hue(kept[:size]), state

        # Quantized passes grow k and lower the tolerance together
        if state.can_grow:
            state.offset += 1
        state.tolerance = max(0.0, state.tolerance - relax_step)

        logger.debug(f"Relaxing after attempt {state.attempt}: {len(kept)}/{size} colors, "
                     f"tolerance={state.tolerance:.2f}, offset={state.offset}")

    raise RefinementExhaustedError(
        f"Palette refinement exhausted {max_attempts} attempts "
        f"with {best}/{size} colors",
        attempts=state.attempt, best_size=best
    )
