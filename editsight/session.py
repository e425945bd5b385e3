"""
Editor session for EditSight.

Owns the history together with the per-tab settings and galleries, so
compound operations such as reset touch all of them consistently. One
session per open image; pass it around explicitly.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import UnknownFieldError
from .processing.adjustment_engine import AdjustmentEngine
from .processing.color.presets import PresetName, preset_for
from .processing.history import HistoryStore
from .processing.models import (
    AdjustmentPatch, AdjustmentVector, ImageSnapshot, PixelBuffer, settings_field_names
)

logger = logging.getLogger(__name__)


class EditorTab(Enum):
    """Editing tabs"""
    RETOUCH = "retouch"
    ADJUST = "adjust"
    RESTORE = "restore"


class GalleryItemType(Enum):
    PROP = "prop"
    IMAGE = "image"


@dataclass(frozen=True)
class RetouchSettings:
    """Inputs for the external generative retouch service."""
    prop_image: Optional[PixelBuffer] = None
    remove_background: bool = False
    illumination_matching: bool = False
    shadow_consistency: bool = False
    perspective_correction: bool = False
    prompt: str = ""


@dataclass(frozen=True)
class RestoreSettings:
    """Inputs for the external restoration service; strokes are opaque."""
    brush_size: int = 50
    brush_opacity: int = 100
    strokes: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class GalleryItem:
    """Gallery entry holding pixels by value."""
    item_id: str
    buffer: PixelBuffer
    item_type: GalleryItemType
    created_at: float = field(default_factory=time.time)
    source_snapshot_id: Optional[str] = None


def _update_settings(settings, changes: Dict[str, Any]):
    unknown = set(changes) - set(settings_field_names(type(settings)))
    if unknown:
        raise UnknownFieldError(f"Unknown {type(settings).__name__} fields: {sorted(unknown)}")
    return replace(settings, **changes)


class EditorSession:
    """
    History plus settings aggregate.

    The history is the single source of truth for the current image.
    """

    def __init__(self, max_snapshots: Optional[int] = None):
        self.history = HistoryStore(max_snapshots=max_snapshots)
        self.adjustments = AdjustmentVector()
        self.retouch_settings = RetouchSettings()
        self.restore_settings = RestoreSettings()
        self.active_tab = EditorTab.RETOUCH
        self.compare_mode = False
        self.props_gallery: List[GalleryItem] = []
        self.images_gallery: List[GalleryItem] = []

    @classmethod
    def from_config(cls, config: dict) -> 'EditorSession':
        history_config = config.get('history', {}) if config else {}
        return cls(max_snapshots=history_config.get('max_snapshots'))

    # Image state

    def load_original(self, buffer: PixelBuffer, description: str = "Original upload") -> ImageSnapshot:
        """Start a new history from an uploaded image."""
        snapshot = ImageSnapshot.create(buffer, description)
        self.history.init(snapshot)
        return snapshot

    @property
    def original_image(self) -> Optional[ImageSnapshot]:
        return None if self.history.is_empty() else self.history.original

    @property
    def current_image(self) -> Optional[ImageSnapshot]:
        return None if self.history.is_empty() else self.history.current()

    def commit(self, buffer: PixelBuffer, description: str = "") -> ImageSnapshot:
        """Append a new snapshot and make it current."""
        snapshot = ImageSnapshot.create(buffer, description)
        self.history.append(snapshot)
        return snapshot

    def commit_external(self, buffer: PixelBuffer, description: str = "External edit") -> ImageSnapshot:
        """Append a replacement image produced outside the engine (AI result, restored composite)."""
        return self.commit(buffer, description)

    def undo(self) -> Optional[ImageSnapshot]:
        return self.history.undo()

    def redo(self) -> Optional[ImageSnapshot]:
        return self.history.redo()

    # Adjustments

    def update_adjustments(self, patch: Optional[AdjustmentPatch] = None, **values) -> AdjustmentVector:
        """
        Merge a patch (or keyword values) into the current adjustments.

        Example:
            session.update_adjustments(exposure=20)
        """
        if patch is None:
            patch = AdjustmentPatch.from_dict(values)
        elif values:
            patch = replace(patch, **AdjustmentPatch.from_dict(values).to_dict())

        self.adjustments = patch.apply_to(self.adjustments)
        return self.adjustments

    def apply_preset(self, name: Union[str, PresetName]) -> AdjustmentVector:
        """Merge a preset into the current adjustments; unknown names are a no-op."""
        return self.update_adjustments(preset_for(name))

    def reset_adjustments(self) -> AdjustmentVector:
        self.adjustments = AdjustmentVector()
        return self.adjustments

    def render_adjustments(self, engine: AdjustmentEngine) -> Optional[ImageSnapshot]:
        """
        Recompute the current adjustments from the original upload and commit.

        Returns:
            The new snapshot, or None when the adjustments are all neutral
        """
        if self.history.is_empty():
            logger.debug("No image loaded; nothing to adjust")
            return None
        if self.adjustments.is_neutral():
            return None

        result = engine.apply(self.history.original.buffer, self.adjustments)
        return self.commit(result, "Adjustments")

    # Retouch and restore settings

    def update_retouch_settings(self, **changes) -> RetouchSettings:
        self.retouch_settings = _update_settings(self.retouch_settings, changes)
        return self.retouch_settings

    def update_restore_settings(self, **changes) -> RestoreSettings:
        if 'strokes' in changes:
            changes['strokes'] = tuple(changes['strokes'])
        self.restore_settings = _update_settings(self.restore_settings, changes)
        return self.restore_settings

    def set_active_tab(self, tab: Union[str, EditorTab]) -> None:
        self.active_tab = EditorTab(tab)

    def set_compare_mode(self, enabled: bool) -> None:
        self.compare_mode = enabled

    # Galleries

    def add_prop(self, buffer: PixelBuffer) -> GalleryItem:
        item = GalleryItem(uuid.uuid4().hex, buffer.copy(), GalleryItemType.PROP)
        self.props_gallery.append(item)
        return item

    def remove_prop(self, item_id: str) -> None:
        self.props_gallery = [item for item in self.props_gallery if item.item_id != item_id]

    def save_to_gallery(self) -> Optional[GalleryItem]:
        """Store a copy of the current snapshot's pixels in the images gallery."""
        snapshot = self.current_image
        if snapshot is None:
            return None

        item = GalleryItem(
            uuid.uuid4().hex,
            snapshot.buffer.copy(),
            GalleryItemType.IMAGE,
            source_snapshot_id=snapshot.snapshot_id,
        )
        self.images_gallery.append(item)
        return item

    def remove_image(self, item_id: str) -> None:
        self.images_gallery = [item for item in self.images_gallery if item.item_id != item_id]

    # Session lifecycle

    def reset(self) -> None:
        """Back to the original snapshot with neutral adjustment, retouch and restore settings."""
        if self.history.is_empty():
            return

        self.history.reset()
        self.adjustments = AdjustmentVector()
        self.retouch_settings = RetouchSettings()
        self.restore_settings = RestoreSettings()
        logger.info("Session reset to original image")

    def clear(self) -> None:
        """Drop the loaded image and every per-session setting. Galleries are kept."""
        self.history.clear()
        self.adjustments = AdjustmentVector()
        self.retouch_settings = RetouchSettings()
        self.restore_settings = RestoreSettings()
        self.active_tab = EditorTab.RETOUCH
        self.compare_mode = False
        logger.info("Session cleared")
