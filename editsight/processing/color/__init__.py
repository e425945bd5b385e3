"""
Color processing modules for EditSight

Includes HSL conversion, the per-pixel channel operators and preset looks.
"""

from .colorspace import rgb_to_hsl, hsl_to_rgb, rgb_to_hsl_array, hsl_to_rgb_array
from .channel_ops import CHANNEL_OPERATORS
from .presets import PresetName, PRESETS, preset_for, preset_names, apply_preset

__all__ = [
    "rgb_to_hsl",
    "hsl_to_rgb",
    "rgb_to_hsl_array",
    "hsl_to_rgb_array",
    "CHANNEL_OPERATORS",
    "PresetName",
    "PRESETS",
    "preset_for",
    "preset_names",
    "apply_preset",
]
