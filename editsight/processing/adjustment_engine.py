"""
Adjustment engine for EditSight.

Runs the channel operators and the clarity filter over a full pixel
buffer in a fixed order. Every call works from the buffer it is given,
which callers keep as the unmodified original upload, so repeated slider
changes never compound rounding or clamping error.
"""

import time
from typing import Union
from pathlib import Path

import numpy as np

from .models import PixelBuffer, AdjustmentVector
from .clarity import ClarityFilter, DEFAULT_MIN_FACTOR
from .color.channel_ops import CHANNEL_OPERATORS
from ..utils.logging import StructuredLogger

logger = StructuredLogger(__name__)

# temperature -> ... -> saturation, then clarity
OPERATION_ORDER = tuple(CHANNEL_OPERATORS) + ('clarity',)


class AdjustmentEngine:
    """
    Pure, deterministic color-adjustment pipeline.

    Stages with a parameter of exactly zero are skipped, so a neutral
    vector returns the input byte-for-byte. Alpha is never modified.
    """

    def __init__(self, clarity_min_factor: float = DEFAULT_MIN_FACTOR):
        """
        Initialize the engine

        Args:
            clarity_min_factor: Clarity strengths below this are ignored
        """
        self.clarity_filter = ClarityFilter(min_factor=clarity_min_factor)

    @classmethod
    def from_config(cls, config: dict) -> 'AdjustmentEngine':
        engine_config = config.get('engine', {}) if config else {}
        return cls(clarity_min_factor=engine_config.get('clarity_min_factor', DEFAULT_MIN_FACTOR))

    def apply(self, source: PixelBuffer, adjustments: AdjustmentVector) -> PixelBuffer:
        """
        Apply adjustments to a pixel buffer

        Args:
            source: Original pixel buffer (never modified)
            adjustments: Adjustment parameters

        Returns:
            New pixel buffer of the same dimensions
        """
        if adjustments.is_neutral():
            return source.copy()

        start = time.perf_counter()
        rgba = self.apply_channel_ops(source.data, adjustments)

        if adjustments.clarity != 0:
            rgba = self.clarity_filter.apply(rgba, adjustments.clarity)

        logger.debug(
            "Applied adjustments",
            width=source.width,
            height=source.height,
            active={k: v for k, v in adjustments.to_dict().items() if v != 0},
            elapsed_ms=round((time.perf_counter() - start) * 1000, 2)
        )
        return PixelBuffer(source.width, source.height, rgba)

    def apply_channel_ops(self, rgba: np.ndarray, adjustments: AdjustmentVector) -> np.ndarray:
        """
        Run every non-zero channel stage and quantize back to 8 bits.

        Returns:
            New ``(H, W, 4)`` uint8 array
        """
        rgb = rgba[:, :, :3].astype(np.float64)

        for name, operator in CHANNEL_OPERATORS.items():
            amount = getattr(adjustments, name)
            if amount != 0:
                rgb = operator(rgb, amount)

        result = np.array(rgba, dtype=np.uint8, copy=True)
        result[:, :, :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
        return result

    def apply_encoded(self, source: Union[bytes, str, Path],
                      adjustments: AdjustmentVector) -> PixelBuffer:
        """
        Decode an encoded image and apply adjustments to it.

        Raises:
            DecodeError: The input is not a readable image
            RenderError: The decoded image cannot be rasterized
        """
        from ..io.image_io import decode_image

        return self.apply(decode_image(source), adjustments)
