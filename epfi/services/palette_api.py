"""
Palette API Orchestrator

Coordinates the full pipeline for palette requests: upload decoding, palette
extraction and refinement, text formatting and swatch rendering, with
request-scoped logging and metrics.
"""

import time
from typing import Any, Dict, Optional, Tuple

from fastapi import UploadFile

from epfi.config import config
from epfi.schemas import PaletteColor, PaletteDebug, PaletteResponse
from epfi.services.colors.errors import PaletteError
from epfi.services.colors.formatting import ColorFormatting, color_to_hsv, format_palette
from epfi.services.colors.pixels import PixelBuffer
from epfi.services.colors.quantize import KMeansQuantizer
from epfi.services.colors.refinement import PaletteResult, extract_palette
from epfi.services.colors.stripes import create_striped_image
from epfi.services.imaging import encode_png, read_upload
from epfi.utils.ids import generate_request_id
from epfi.utils.logging import get_logger
from epfi.utils.metrics import get_metrics


def build_palette(buffer: PixelBuffer, params: Dict[str, Any],
                  request_id: Optional[str] = None) -> Tuple[PaletteResult, float]:
    """
    Run palette extraction for one request with metrics and logging.

    Args:
        buffer: Decoded source image
        params: size, tolerance, strict, quantize
        request_id: Tracking id for log correlation

    Returns:
        Tuple of (PaletteResult, refinement duration in ms)

    Raises:
        PaletteError: Any palette failure, after being counted
    """
    logger = get_logger()
    metrics = get_metrics()
    extra = {"request_id": request_id} if request_id else None

    quantizer = KMeansQuantizer() if params.get('quantize', False) else None

    start = time.time()
    try:
        result = extract_palette(
            buffer,
            params['size'],
            params.get('tolerance', config.DEFAULT_TOLERANCE),
            quantizer=quantizer,
            strict=params.get('strict', config.STRICT_SIZE)
        )
    except PaletteError as e:
        metrics.increment_failure_count(e.kind.value)
        logger.warning(f"Palette extraction failed ({e.kind.value}): {e.message}", extra=extra)
        raise
    refine_ms = (time.time() - start) * 1000

    metrics.increment_mode_count(result.mode)
    metrics.record_attempts(result.attempts)
    metrics.record_timing("palette_refine", refine_ms)

    logger.info(
        f"Palette ready: {len(result)} colors after {result.attempts} attempts "
        f"(tolerance {result.effective_tolerance:.2f})",
        extra=extra
    )
    return result, refine_ms


async def handle_palette(file: UploadFile, params: Dict[str, Any]) -> PaletteResponse:
    """
    Extract a palette from an uploaded image.

    Args:
        file: Uploaded image
        params: size, tolerance, strict, quantize, formatting

    Returns:
        PaletteResponse with colors, formatted lines and refinement details
    """
    request_id = generate_request_id("pal")
    metrics = get_metrics()
    metrics.increment_request_count("palette")

    start_time = time.time()
    buffer = await read_upload(file)
    decode_ms = (time.time() - start_time) * 1000
    metrics.record_timing("decode", decode_ms)

    result, refine_ms = build_palette(buffer, params, request_id)

    formatting = ColorFormatting(params.get('formatting', ColorFormatting.RGB))
    palette = [
        PaletteColor(hex=color.hex, rgb=list(color), hsv=list(color_to_hsv(color)))
        for color in result
    ]

    return PaletteResponse(
        request_id=request_id,
        width=buffer.width,
        height=buffer.height,
        size=len(result),
        palette=palette,
        formatted=format_palette(result.colors, formatting),
        debug=PaletteDebug(
            requested_size=result.requested_size,
            requested_tolerance=params.get('tolerance', config.DEFAULT_TOLERANCE),
            effective_tolerance=result.effective_tolerance,
            attempts=result.attempts,
            mode=result.mode,
            distinct_colors=result.distinct_colors,
            ms_decode=decode_ms,
            ms_refine=refine_ms
        )
    )


async def handle_swatch(file: UploadFile, params: Dict[str, Any]) -> Tuple[bytes, PaletteResult]:
    """
    Extract a palette and render it as a striped PNG.

    Args:
        file: Uploaded image
        params: size, tolerance, strict, quantize, stripe_width, height

    Returns:
        Tuple of (PNG bytes, PaletteResult)
    """
    request_id = generate_request_id("swt")
    metrics = get_metrics()
    metrics.increment_request_count("swatch")

    buffer = await read_upload(file)
    result, _ = build_palette(buffer, params, request_id)

    render_start = time.time()
    striped = create_striped_image(
        params.get('stripe_width', config.STRIPE_WIDTH),
        params.get('height', config.STRIPE_HEIGHT),
        result.colors
    )
    png = encode_png(striped)
    metrics.record_timing("swatch_render", (time.time() - render_start) * 1000)

    get_logger().info(f"Swatch rendered: {striped.width}x{striped.height}",
                      extra={"request_id": request_id})
    return png, result
