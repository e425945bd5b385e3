"""
RGB <-> HSL conversion for EditSight.

Hue is expressed in degrees [0, 360), saturation and lightness in
percent [0, 100]. RGB channels are 0-255 and may be fractional on input;
``hsl_to_rgb`` always returns whole channel values (rounded half-up).
"""

from typing import Tuple

import numpy as np


def rgb_to_hsl(r: float, g: float, b: float) -> Tuple[float, float, float]:
    """
    Convert one RGB triple to HSL.

    When several channels share the maximum the hue is taken from red,
    then green, then blue.
    """
    r, g, b = r / 255.0, g / 255.0, b / 255.0
    high = max(r, g, b)
    low = min(r, g, b)
    diff = high - low

    h = 0.0
    s = 0.0
    l = (high + low) / 2.0

    if diff != 0:
        s = diff / (2.0 - high - low) if l > 0.5 else diff / (high + low)

        if high == r:
            h = ((g - b) / diff + (6.0 if g < b else 0.0)) / 6.0
        elif high == g:
            h = ((b - r) / diff + 2.0) / 6.0
        else:
            h = ((r - g) / diff + 4.0) / 6.0

    return (h * 360.0, s * 100.0, l * 100.0)


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def _round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[int, int, int]:
    """Convert one HSL triple back to whole RGB channel values."""
    h, s, l = h / 360.0, s / 100.0, l / 100.0

    if s == 0:
        r = g = b = l
    else:
        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        r = _hue_to_channel(p, q, h + 1 / 3)
        g = _hue_to_channel(p, q, h)
        b = _hue_to_channel(p, q, h - 1 / 3)

    return (_round_half_up(r * 255), _round_half_up(g * 255), _round_half_up(b * 255))


def rgb_to_hsl_array(rgb: np.ndarray) -> np.ndarray:
    """
    Vectorized ``rgb_to_hsl`` over an ``(..., 3)`` float array.

    Returns an array of the same shape holding (h, s, l).
    """
    rgb = np.asarray(rgb, dtype=np.float64) / 255.0
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    high = np.max(rgb, axis=-1)
    low = np.min(rgb, axis=-1)
    diff = high - low
    l = (high + low) / 2.0

    chromatic = diff != 0
    safe_diff = np.where(chromatic, diff, 1.0)

    denom = np.where(l > 0.5, 2.0 - high - low, high + low)
    s = np.where(chromatic, diff / np.where(chromatic, denom, 1.0), 0.0)

    h_red = ((g - b) / safe_diff + np.where(g < b, 6.0, 0.0)) / 6.0
    h_green = ((b - r) / safe_diff + 2.0) / 6.0
    h_blue = ((r - g) / safe_diff + 4.0) / 6.0

    h = np.where(high == r, h_red, np.where(high == g, h_green, h_blue))
    h = np.where(chromatic, h, 0.0)

    return np.stack([h * 360.0, s * 100.0, l * 100.0], axis=-1)


def _hue_to_channel_array(p: np.ndarray, q: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.where(t < 0, t + 1, t)
    t = np.where(t > 1, t - 1, t)
    return np.where(
        t < 1 / 6, p + (q - p) * 6 * t,
        np.where(
            t < 1 / 2, q,
            np.where(t < 2 / 3, p + (q - p) * (2 / 3 - t) * 6, p)
        )
    )


def hsl_to_rgb_array(hsl: np.ndarray) -> np.ndarray:
    """
    Vectorized ``hsl_to_rgb`` over an ``(..., 3)`` array.

    Returns float64 channel values that are already whole numbers.
    """
    hsl = np.asarray(hsl, dtype=np.float64)
    h = hsl[..., 0] / 360.0
    s = hsl[..., 1] / 100.0
    l = hsl[..., 2] / 100.0

    q = np.where(l < 0.5, l * (1 + s), l + s - l * s)
    p = 2 * l - q

    r = _hue_to_channel_array(p, q, h + 1 / 3)
    g = _hue_to_channel_array(p, q, h)
    b = _hue_to_channel_array(p, q, h - 1 / 3)

    achromatic = s == 0
    r = np.where(achromatic, l, r)
    g = np.where(achromatic, l, g)
    b = np.where(achromatic, l, b)

    return np.floor(np.stack([r, g, b], axis=-1) * 255 + 0.5)
