"""
Image processing core for EditSight

Includes the adjustment engine, clarity filter, edit history and export compositing.
"""

from .models import (
    PixelBuffer,
    AdjustmentVector,
    AdjustmentPatch,
    ImageSnapshot,
    ADJUSTMENT_FIELDS,
)
from .adjustment_engine import AdjustmentEngine, OPERATION_ORDER
from .clarity import ClarityFilter
from .history import HistoryStore
from .export import ExportCompositor, compute_placement, export_snapshot

__all__ = [
    "PixelBuffer",
    "AdjustmentVector",
    "AdjustmentPatch",
    "ImageSnapshot",
    "ADJUSTMENT_FIELDS",
    "AdjustmentEngine",
    "OPERATION_ORDER",
    "ClarityFilter",
    "HistoryStore",
    "ExportCompositor",
    "compute_placement",
    "export_snapshot",
]
