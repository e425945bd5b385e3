"""
Shared fixtures for EditSight tests.
"""

import numpy as np
import pytest

from editsight.processing.models import PixelBuffer


def solid_buffer(width, height, rgba=(100, 100, 100, 255)):
    """Buffer where every pixel has the same color."""
    return PixelBuffer.filled(width, height, rgba)


def pixel_buffer(*pixels):
    """1-pixel-high buffer from RGB or RGBA tuples."""
    data = np.array([p if len(p) == 4 else (*p, 255) for p in pixels], dtype=np.uint8)
    return PixelBuffer(len(pixels), 1, data)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def random_buffer(rng):
    """Random 24x16 RGBA buffer with varied alpha."""
    data = rng.integers(0, 256, size=(16, 24, 4), dtype=np.uint8)
    return PixelBuffer(24, 16, data)
