"""
Image decoding and encoding for EditSight
Turns encoded images (files, bytes, data URLs) into RGBA pixel buffers and back
"""

import base64
import binascii
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import DecodeError, RenderError
from ..processing.models import PixelBuffer

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ('JPEG', 'PNG', 'WEBP', 'HEIF')
MAX_FILE_SIZE_MB = 20

ImageSource = Union[bytes, bytearray, str, Path]


@dataclass
class FileValidationResult:
    """Outcome of validating an upload candidate."""
    valid: bool
    error: Optional[str] = None
    path: Optional[Path] = None


def validate_image_file(path: Union[str, Path],
                        max_size_mb: float = MAX_FILE_SIZE_MB,
                        supported_formats: Iterable[str] = SUPPORTED_FORMATS) -> FileValidationResult:
    """
    Validate image file format and size

    Args:
        path: File to check
        max_size_mb: Upper size limit in megabytes
        supported_formats: Pillow format names that are accepted

    Returns:
        FileValidationResult describing the outcome
    """
    path = Path(path)
    formats = {fmt.upper() for fmt in supported_formats}

    if not path.is_file():
        return FileValidationResult(valid=False, error=f"File not found: {path}")

    try:
        with Image.open(path) as img:
            image_format = (img.format or '').upper()
    except (UnidentifiedImageError, OSError):
        image_format = ''

    if image_format not in formats:
        return FileValidationResult(
            valid=False,
            error=f"Invalid file format. Supported: {', '.join(sorted(formats))}"
        )

    size_mb = path.stat().st_size / 1024 / 1024
    if size_mb > max_size_mb:
        return FileValidationResult(
            valid=False,
            error=f"File size exceeds {max_size_mb:g}MB limit ({size_mb:.1f}MB)"
        )

    return FileValidationResult(valid=True, path=path)


def _read_data_url(data_url: str) -> bytes:
    header, sep, payload = data_url.partition(',')
    if not sep or ';base64' not in header:
        raise DecodeError("Unsupported data URL; expected base64 image data")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 payload in data URL: {e}") from e


def open_image(source: ImageSource) -> Image.Image:
    """
    Open and fully load an encoded image with Pillow

    Raises:
        DecodeError: If the source cannot be read or is not an image
    """
    try:
        if isinstance(source, (bytes, bytearray)):
            img = Image.open(io.BytesIO(bytes(source)))
        elif isinstance(source, str) and source.startswith('data:'):
            img = Image.open(io.BytesIO(_read_data_url(source)))
        else:
            img = Image.open(Path(source))
        img.load()
    except DecodeError:
        raise
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError, SyntaxError) as e:
        logger.error(f"Failed to decode image: {e}")
        raise DecodeError(f"Failed to load image: {e}") from e

    return img


def rasterize(img: Image.Image) -> PixelBuffer:
    """
    Rasterize a Pillow image into an RGBA8 pixel buffer

    Raises:
        RenderError: If the image has no drawable area or cannot be converted
    """
    width, height = img.size
    if width == 0 or height == 0:
        raise RenderError(f"Cannot render image with no area ({width}x{height})")

    try:
        rgba = np.asarray(img.convert('RGBA'), dtype=np.uint8)
    except (ValueError, OSError) as e:
        logger.error(f"Failed to rasterize {img.mode} image: {e}")
        raise RenderError(f"Failed to get drawable surface: {e}") from e

    return PixelBuffer(width, height, rgba)


def decode_image(source: ImageSource) -> PixelBuffer:
    """
    Decode bytes, a file path, or a data URL into a pixel buffer

    Raises:
        DecodeError: Unreadable or corrupt input
        RenderError: No drawable surface could be obtained
    """
    img = open_image(source)
    try:
        buffer = rasterize(img)
    finally:
        img.close()

    logger.debug(f"Decoded {buffer.width}x{buffer.height} image")
    return buffer


def to_pil(buffer: PixelBuffer) -> Image.Image:
    """Wrap a pixel buffer as a Pillow RGBA image."""
    return Image.fromarray(np.ascontiguousarray(buffer.data))


def encode_image(buffer: PixelBuffer, image_format: str = 'PNG') -> bytes:
    """
    Encode a pixel buffer

    Formats without alpha support (e.g. JPEG) are written as RGB.
    """
    img = to_pil(buffer)
    if image_format.upper() in ('JPEG', 'JPG'):
        img = img.convert('RGB')
        image_format = 'JPEG'

    out = io.BytesIO()
    img.save(out, format=image_format.upper())
    return out.getvalue()


def encode_data_url(buffer: PixelBuffer, image_format: str = 'PNG') -> str:
    """Encode a pixel buffer as a base64 data URL."""
    mime = 'jpeg' if image_format.upper() in ('JPEG', 'JPG') else image_format.lower()
    payload = base64.b64encode(encode_image(buffer, image_format)).decode('ascii')
    return f"data:image/{mime};base64,{payload}"


def save_image(buffer: PixelBuffer, path: Union[str, Path],
               image_format: Optional[str] = None) -> Path:
    """
    Save a pixel buffer to disk

    Args:
        buffer: Pixels to write
        path: Destination; the format is inferred from the suffix if not given
        image_format: Explicit Pillow format name

    Returns:
        The written path
    """
    path = Path(path)
    if image_format is None:
        image_format = Image.registered_extensions().get(path.suffix.lower(), 'PNG')

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_image(buffer, image_format))
    logger.info(f"Saved {buffer.width}x{buffer.height} image to {path}")
    return path
