"""
Preset looks for EditSight.

Each preset maps to a partial adjustment vector that is merged over the
caller's current values. All shipped presets list every field.
"""

from enum import Enum
import logging
from typing import Dict, List, Union

from ..models import AdjustmentPatch, AdjustmentVector

logger = logging.getLogger(__name__)


class PresetName(Enum):
    """Available preset looks"""
    NATURAL = "Natural"
    VIVID = "Vivid"
    WARM = "Warm"
    COOL = "Cool"
    DRAMATIC = "Dramatic"
    SOFT = "Soft"
    BRIGHT = "Bright"


PRESETS: Dict[PresetName, AdjustmentPatch] = {
    PresetName.NATURAL: AdjustmentPatch(
        temperature=0, tint=0, exposure=0, contrast=5,
        highlights=0, shadows=0, whites=0, blacks=0,
        clarity=10, dehaze=0, vibrance=5, saturation=0
    ),
    PresetName.VIVID: AdjustmentPatch(
        temperature=0, tint=0, exposure=5, contrast=20,
        highlights=-10, shadows=10, whites=0, blacks=0,
        clarity=20, dehaze=15, vibrance=30, saturation=15
    ),
    PresetName.WARM: AdjustmentPatch(
        temperature=30, tint=5, exposure=5, contrast=10,
        highlights=-5, shadows=5, whites=0, blacks=0,
        clarity=10, dehaze=0, vibrance=10, saturation=5
    ),
    PresetName.COOL: AdjustmentPatch(
        temperature=-30, tint=-5, exposure=0, contrast=10,
        highlights=0, shadows=0, whites=5, blacks=-5,
        clarity=10, dehaze=5, vibrance=10, saturation=0
    ),
    PresetName.DRAMATIC: AdjustmentPatch(
        temperature=0, tint=0, exposure=-5, contrast=40,
        highlights=-20, shadows=-15, whites=10, blacks=-20,
        clarity=30, dehaze=25, vibrance=20, saturation=10
    ),
    PresetName.SOFT: AdjustmentPatch(
        temperature=10, tint=5, exposure=10, contrast=-10,
        highlights=10, shadows=15, whites=0, blacks=10,
        clarity=-20, dehaze=0, vibrance=0, saturation=-5
    ),
    PresetName.BRIGHT: AdjustmentPatch(
        temperature=5, tint=0, exposure=20, contrast=10,
        highlights=10, shadows=20, whites=15, blacks=10,
        clarity=15, dehaze=10, vibrance=15, saturation=5
    ),
}


def preset_names() -> List[str]:
    """Preset identifiers in display order."""
    return [preset.value for preset in PresetName]


def preset_for(name: Union[str, PresetName]) -> AdjustmentPatch:
    """
    Get the partial adjustment vector for a preset.

    Unknown names yield an empty patch, which is a no-op when applied.
    """
    try:
        preset = name if isinstance(name, PresetName) else PresetName(name)
    except ValueError:
        logger.debug(f"Unknown preset '{name}', returning empty patch")
        return AdjustmentPatch()
    return PRESETS[preset]


def apply_preset(current: AdjustmentVector, name: Union[str, PresetName]) -> AdjustmentVector:
    """Merge a preset over the current adjustment vector."""
    return preset_for(name).apply_to(current)
