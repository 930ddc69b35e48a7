"""
EPFI API Schemas
Pydantic models for palette extraction request/response validation.
"""
from typing import List, Optional
from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("epfi-palette", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")
    kind: Optional[str] = Field(
        None,
        description="Palette error kind: invalid_request, size_too_large, "
                    "refinement_exhausted or out_of_bounds"
    )


class PaletteColor(BaseModel):
    """Single palette color in every supported notation."""
    hex: str = Field(
        ...,
        pattern=r"^#[0-9A-Fa-f]{6}$",
        description="Hex color code in format #RRGGBB"
    )
    rgb: List[int] = Field(..., min_length=3, max_length=3, description="[R, G, B] 0-255")
    hsv: List[float] = Field(
        ...,
        min_length=3,
        max_length=3,
        description="[hue degrees, saturation 0-1, value 0-1], rounded to 2 places"
    )


class PaletteDebug(BaseModel):
    """Parameters of the accepted refinement pass."""
    requested_size: int = Field(..., description="Palette size asked for")
    requested_tolerance: float = Field(..., description="Tolerance asked for")
    effective_tolerance: float = Field(
        ...,
        description="Tolerance of the accepted pass (lower when relaxation occurred)"
    )
    attempts: int = Field(..., ge=1, description="Deduplication passes run")
    mode: str = Field(..., description="'direct' or 'quantized'")
    distinct_colors: int = Field(..., ge=0, description="Distinct opaque colors in the image")
    ms_decode: float = Field(..., description="Image decode time in ms")
    ms_refine: float = Field(..., description="Extraction and refinement time in ms")


class PaletteResponse(BaseModel):
    """Main palette extraction response."""
    request_id: str = Field(..., description="Request tracking id")
    width: int = Field(..., description="Source image width in pixels")
    height: int = Field(..., description="Source image height in pixels")
    size: int = Field(..., description="Number of colors returned")
    palette: List[PaletteColor] = Field(..., description="Palette colors sorted by hue")
    formatted: List[str] = Field(..., description="Palette rendered in the requested formatting")
    debug: PaletteDebug = Field(..., description="Refinement details")
