"""
EPFI Imaging Utilities
Handles image I/O, validation and output path resolution around the
palette core.
"""
import io
from pathlib import Path
from typing import Union

import cv2
import numpy as np
from fastapi import HTTPException, UploadFile
from loguru import logger
from PIL import Image, UnidentifiedImageError

from epfi.config import config
from epfi.services.colors.pixels import PixelBuffer

PathLike = Union[str, Path]

_MAGIC_BYTES = (
    (b'\x89PNG\r\n\x1a\n', "image/png"),
    (b'\xff\xd8\xff', "image/jpeg"),
    (b'BM', "image/bmp"),
    (b'GIF87a', "image/gif"),
    (b'GIF89a', "image/gif"),
)


def detect_mime_type(file_bytes: bytes) -> str:
    """
    Identify the image container from its magic bytes.

    Raises:
        ValueError: File too small or not a supported image format
    """
    if len(file_bytes) < 8:
        raise ValueError("File too small or corrupt")

    for magic, mime in _MAGIC_BYTES:
        if file_bytes.startswith(magic):
            return mime
    if file_bytes[:4] == b'RIFF' and file_bytes[8:12] == b'WEBP':
        return "image/webp"

    raise ValueError("Invalid image file. Magic bytes don't match supported formats.")


def _has_transparency(pil_image: Image.Image) -> bool:
    return pil_image.mode in ("RGBA", "LA", "PA") or "transparency" in pil_image.info


def decode_image(file_bytes: bytes) -> PixelBuffer:
    """
    Decode image bytes into a BGR or BGRA pixel buffer.

    Images carrying an alpha channel (or palette transparency) decode to
    4 bytes per pixel so transparent pixels can be filtered; everything else
    decodes to 3. Only the first frame of multi-frame files is read.

    Raises:
        ValueError: Unsupported or corrupt image data
    """
    mime = detect_mime_type(file_bytes)

    try:
        pil_image = Image.open(io.BytesIO(file_bytes))
        pil_image.seek(0)

        if _has_transparency(pil_image):
            rgba = np.array(pil_image.convert("RGBA"))
            pixels = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA)
        else:
            rgb = np.array(pil_image.convert("RGB"))
            pixels = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
    except (UnidentifiedImageError, OSError, SyntaxError, EOFError) as e:
        raise ValueError(f"Failed to decode image: {str(e)}")

    height, width = pixels.shape[:2]
    logger.debug(f"Decoded {mime} image: {width}x{height}, {pixels.shape[2]} channels")
    return PixelBuffer.from_array(pixels)


def load_image(path: PathLike) -> PixelBuffer:
    """
    Read and decode an image file.

    Raises:
        FileNotFoundError: Path does not exist
        ValueError: File is not a decodable image
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File specified does not exist: {path}")
    return decode_image(path.read_bytes())


async def read_upload(file: UploadFile) -> PixelBuffer:
    """
    Safely read and decode an uploaded image.

    Raises:
        HTTPException: 400 for oversized, unreadable or undecodable files
    """
    try:
        file_bytes = await file.read()
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to read file: {str(e)}")

    if len(file_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    try:
        return decode_image(file_bytes)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def encode_png(buffer: PixelBuffer) -> bytes:
    """
    Encode a BGR(A) pixel buffer as PNG bytes.

    Raises:
        RuntimeError: OpenCV failed to encode
    """
    success, encoded = cv2.imencode(".png", np.ascontiguousarray(buffer.as_array()))
    if not success:
        raise RuntimeError("Failed to encode image as PNG")
    return encoded.tobytes()


def resolve_output_path(path: PathLike) -> Path:
    """
    Pick a free `.png` output path.

    The extension is replaced with `.png`. When that file already exists,
    `(n)` is appended to the stem using the smallest free n >= 1.
    """
    path = Path(path)
    base = path.with_suffix(config.SAVE_EXT)

    if not path.exists() and not base.exists():
        return base

    counter = 1
    while True:
        candidate = base.with_name(f"{base.stem}({counter}){config.SAVE_EXT}")
        if not candidate.exists():
            return candidate
        counter += 1


def save_png(buffer: PixelBuffer, path: PathLike) -> Path:
    """Write a buffer as PNG to a collision-free path and return that path."""
    target = resolve_output_path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(encode_png(buffer))
    logger.info(f"Saved {buffer.width}x{buffer.height} image to {target}")
    return target
