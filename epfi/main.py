from fastapi import FastAPI, File, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from dotenv import load_dotenv

from epfi import __version__
from epfi.config import config
from epfi.schemas import ErrorResponse, HealthResponse, PaletteResponse
from epfi.services.colors.dedupe import MAX_COLOR_DISTANCE
from epfi.services.colors.errors import ErrorKind, PaletteError
from epfi.services.palette_api import handle_palette, handle_swatch
from epfi.utils.logging import get_logger
from epfi.utils.metrics import get_metrics

# Load environment variables
load_dotenv()

app = FastAPI(
    title="EPFI - Extract Palette From Image",
    description="Palette extraction and striped swatch rendering",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

_STATUS_BY_KIND = {
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.SIZE_TOO_LARGE: 422,
    ErrorKind.REFINEMENT_EXHAUSTED: 500,
    ErrorKind.OUT_OF_BOUNDS: 500,
}


@app.exception_handler(PaletteError)
async def palette_error_handler(request: Request, exc: PaletteError):
    """Translate palette failures into JSON errors with their kind."""
    get_logger().error(f"{request.url.path} failed: {exc.message}", extra={"kind": exc.kind.value})
    return JSONResponse(
        status_code=_STATUS_BY_KIND.get(exc.kind, 500),
        content=ErrorResponse(detail=exc.message, kind=exc.kind.value).model_dump()
    )


@app.get("/healthz", response_model=HealthResponse)
def health_check():
    """Palette service health check."""
    return HealthResponse(ok=True, version=__version__, service="epfi-palette")


@app.get("/metrics")
def get_service_metrics():
    """Get palette service metrics."""
    return get_metrics().get_summary()


@app.post("/palette", response_model=PaletteResponse,
          responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse},
                     500: {"model": ErrorResponse}})
async def extract_palette_endpoint(
    file: UploadFile = File(..., description="Image to extract the palette from"),
    size: int = Query(..., ge=1, description="Number of palette colors"),
    tolerance: float = Query(config.DEFAULT_TOLERANCE, ge=0.0, le=MAX_COLOR_DISTANCE,
                             description="Minimum Euclidean RGB distance between colors"),
    strict: bool = Query(config.STRICT_SIZE, description="Reject sizes above the distinct color count"),
    quantize: bool = Query(False, description="Pre-reduce candidates with k-means"),
    formatting: str = Query("RGB", pattern="^(RGB|HSV|HEX)$", description="Text formatting mode")
):
    """
    Extract a palette of `size` colors.

    **Parameters:**
    - **size**: Palette size; clamped to the distinct color count unless `strict`
    - **tolerance**: Starting similarity tolerance (0-441.67), relaxed if needed
    - **quantize**: Use k-means candidates instead of every distinct color
    - **formatting**: RGB, HSV or HEX lines in `formatted`
    """
    params = {
        'size': size,
        'tolerance': tolerance,
        'strict': strict,
        'quantize': quantize,
        'formatting': formatting
    }
    return await handle_palette(file, params)


@app.post("/palette/swatch",
          response_class=Response,
          responses={200: {"content": {"image/png": {}}}, 400: {"model": ErrorResponse},
                     422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
async def palette_swatch_endpoint(
    file: UploadFile = File(..., description="Image to extract the palette from"),
    size: int = Query(..., ge=1, description="Number of palette colors"),
    tolerance: float = Query(config.DEFAULT_TOLERANCE, ge=0.0, le=MAX_COLOR_DISTANCE,
                             description="Minimum Euclidean RGB distance between colors"),
    strict: bool = Query(config.STRICT_SIZE, description="Reject sizes above the distinct color count"),
    quantize: bool = Query(False, description="Pre-reduce candidates with k-means"),
    stripe_width: int = Query(config.STRIPE_WIDTH, ge=1, le=1000, description="Pixel width of each stripe"),
    height: int = Query(config.STRIPE_HEIGHT, ge=1, le=4096, description="Pixel height of the swatch")
):
    """Extract a palette and return it as a striped PNG swatch."""
    params = {
        'size': size,
        'tolerance': tolerance,
        'strict': strict,
        'quantize': quantize,
        'stripe_width': stripe_width,
        'height': height
    }
    png, result = await handle_swatch(file, params)
    return Response(
        content=png,
        media_type="image/png",
        headers={
            "X-Palette-Size": str(len(result)),
            "X-Palette-Colors": ",".join(color.hex for color in result)
        }
    )
