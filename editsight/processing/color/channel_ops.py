"""
Per-pixel channel operators for EditSight.

Each operator takes an ``(..., 3)`` float RGB array and the raw slider
value ``n`` in [-100, 100] and returns a new array. Every stage clamps its
output to [0, 255], so later stages always see clamped values.
"""

from typing import Callable, Dict

import numpy as np

from .colorspace import rgb_to_hsl_array, hsl_to_rgb_array

ChannelOperator = Callable[[np.ndarray, float], np.ndarray]

HIGHLIGHTS_THRESHOLD = 180
SHADOWS_THRESHOLD = 75
WHITES_THRESHOLD = 200
BLACKS_THRESHOLD = 50
MIDPOINT = 128


def _clamp(values: np.ndarray) -> np.ndarray:
    return np.clip(values, 0.0, 255.0)


def apply_temperature(rgb: np.ndarray, amount: float) -> np.ndarray:
    """Warm (red up, blue down) or cool (red down, blue up)."""
    factor = amount / 100.0
    result = rgb.copy()

    if factor > 0:
        result[..., 0] = _clamp(rgb[..., 0] + factor * 50)
        result[..., 2] = _clamp(rgb[..., 2] - factor * 25)
    else:
        result[..., 0] = _clamp(rgb[..., 0] + factor * 25)
        result[..., 2] = _clamp(rgb[..., 2] - factor * 50)

    return result


def apply_tint(rgb: np.ndarray, amount: float) -> np.ndarray:
    """Green tint for positive values, magenta for negative."""
    factor = amount / 100.0
    result = rgb.copy()

    if factor > 0:
        result[..., 1] = _clamp(rgb[..., 1] + factor * 30)
    else:
        result[..., 0] = _clamp(rgb[..., 0] - factor * 15)
        result[..., 2] = _clamp(rgb[..., 2] - factor * 15)

    return result


def apply_exposure(rgb: np.ndarray, amount: float) -> np.ndarray:
    """Scale all channels by 2^(n/100)."""
    return _clamp(rgb * 2.0 ** (amount / 100.0))


def apply_contrast(rgb: np.ndarray, amount: float) -> np.ndarray:
    factor = (259.0 * (amount + 255.0)) / (255.0 * (259.0 - amount))
    return _clamp(factor * (rgb - MIDPOINT) + MIDPOINT)


def apply_highlights(rgb: np.ndarray, amount: float) -> np.ndarray:
    factor = amount / 100.0
    adjusted = _clamp(rgb + (rgb - HIGHLIGHTS_THRESHOLD) * factor)
    return np.where(rgb > HIGHLIGHTS_THRESHOLD, adjusted, rgb)


def apply_shadows(rgb: np.ndarray, amount: float) -> np.ndarray:
    factor = amount / 100.0
    adjusted = _clamp(rgb + (SHADOWS_THRESHOLD - rgb) * factor)
    return np.where(rgb < SHADOWS_THRESHOLD, adjusted, rgb)


def apply_whites(rgb: np.ndarray, amount: float) -> np.ndarray:
    factor = amount / 100.0
    return np.where(rgb > WHITES_THRESHOLD, _clamp(rgb + factor * 20), rgb)


def apply_blacks(rgb: np.ndarray, amount: float) -> np.ndarray:
    factor = amount / 100.0
    return np.where(rgb < BLACKS_THRESHOLD, _clamp(rgb + factor * 15), rgb)


def apply_dehaze(rgb: np.ndarray, amount: float) -> np.ndarray:
    """Contrast-style pull around the midpoint with factor 1 + 0.5t."""
    factor = 1.0 + (amount / 100.0) * 0.5
    return _clamp((rgb - MIDPOINT) * factor + MIDPOINT)


def apply_vibrance(rgb: np.ndarray, amount: float) -> np.ndarray:
    """
    Smart saturation: less saturated pixels are pushed harder.

    new S = S + 30t * (1 - S/100), clamped to [0, 100].
    """
    hsl = rgb_to_hsl_array(rgb)
    factor = amount / 100.0
    saturation = hsl[..., 1]
    hsl[..., 1] = np.clip(saturation + factor * 30.0 * (1.0 - saturation / 100.0), 0.0, 100.0)
    return hsl_to_rgb_array(hsl)


def apply_saturation(rgb: np.ndarray, amount: float) -> np.ndarray:
    """Linear saturation: the raw slider value is added to S."""
    hsl = rgb_to_hsl_array(rgb)
    hsl[..., 1] = np.clip(hsl[..., 1] + amount, 0.0, 100.0)
    return hsl_to_rgb_array(hsl)


# Stage order is part of the engine contract; clarity runs afterwards.
CHANNEL_OPERATORS: Dict[str, ChannelOperator] = {
    'temperature': apply_temperature,
    'tint': apply_tint,
    'exposure': apply_exposure,
    'contrast': apply_contrast,
    'highlights': apply_highlights,
    'shadows': apply_shadows,
    'whites': apply_whites,
    'blacks': apply_blacks,
    'dehaze': apply_dehaze,
    'vibrance': apply_vibrance,
    'saturation': apply_saturation,
}
