"""
Image input/output for EditSight.
"""

from .image_io import (
    FileValidationResult,
    validate_image_file,
    decode_image,
    rasterize,
    encode_image,
    encode_data_url,
    save_image,
)

__all__ = [
    'FileValidationResult',
    'validate_image_file',
    'decode_image',
    'rasterize',
    'encode_image',
    'encode_data_url',
    'save_image',
]
