"""
EditSight - Photo color adjustment and edit history toolkit
"""

__version__ = "0.1.0"

from .errors import EditSightError, DecodeError, RenderError, EmptyHistoryError
from .processing import (
    PixelBuffer,
    AdjustmentVector,
    AdjustmentPatch,
    ImageSnapshot,
    AdjustmentEngine,
    HistoryStore,
    ExportCompositor,
)
from .processing.color import preset_for
from .session import EditorSession

__all__ = [
    "EditSightError",
    "DecodeError",
    "RenderError",
    "EmptyHistoryError",
    "PixelBuffer",
    "AdjustmentVector",
    "AdjustmentPatch",
    "ImageSnapshot",
    "AdjustmentEngine",
    "HistoryStore",
    "ExportCompositor",
    "preset_for",
    "EditorSession",
]
