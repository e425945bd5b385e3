"""
Clarity (local contrast) filter for EditSight.

Edge enhancement against the 4-neighbor average (up, down, left, right).
The 1-pixel border is left untouched and diagonal neighbors are ignored.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_MIN_FACTOR = 0.01


class ClarityFilter:
    """
    Spatial clarity operator applied after the channel stages.

    For each interior pixel and each RGB channel:
    ``out = center + (center - neighbor_avg) * t`` clamped to [0, 255],
    where every center and neighbor value is read from the pre-clarity
    image, never from pixels already written in the same pass.
    """

    def __init__(self, min_factor: float = DEFAULT_MIN_FACTOR):
        """
        Args:
            min_factor: |t| below this is treated as no-op
        """
        self.min_factor = min_factor

    def is_active(self, amount: float) -> bool:
        return abs(amount / 100.0) >= self.min_factor

    def apply(self, rgba: np.ndarray, amount: float) -> np.ndarray:
        """
        Apply clarity to an ``(H, W, 4)`` uint8 image.

        Args:
            rgba: Quantized image; it is not modified
            amount: Clarity slider value in [-100, 100]

        Returns:
            New uint8 image with alpha unchanged
        """
        factor = amount / 100.0
        result = rgba.copy()

        if not self.is_active(amount):
            return result

        height, width = rgba.shape[:2]
        if height < 3 or width < 3:
            logger.debug(f"Clarity skipped for {width}x{height} image (no interior pixels)")
            return result

        # Separate read-only source for every center and neighbor sample
        source = rgba[:, :, :3].astype(np.float64)
        center = source[1:-1, 1:-1]
        neighbor_avg = (
            source[:-2, 1:-1] +
            source[2:, 1:-1] +
            source[1:-1, :-2] +
            source[1:-1, 2:]
        ) / 4

        enhanced = np.clip(center + (center - neighbor_avg) * factor, 0, 255)
        result[1:-1, 1:-1, :3] = np.rint(enhanced).astype(np.uint8)

        return result
