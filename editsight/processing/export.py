"""
Export compositing for EditSight

Produces fixed-size output by cover-fitting a snapshot onto an opaque
black canvas: the aspect ratio is preserved, the drawn image is centered
and any overflow is clipped to the target frame.
"""

import math
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from .models import PixelBuffer, ImageSnapshot
from ..utils.logging import StructuredLogger

logger = StructuredLogger(__name__)

EXPORT_WIDTH = 1350
EXPORT_HEIGHT = 1080
DEFAULT_FILENAME_PREFIX = "editsight-edit"


@dataclass(frozen=True)
class Placement:
    """Where the scaled source lands on the target canvas."""
    draw_width: float
    draw_height: float
    offset_x: float
    offset_y: float


def compute_placement(source_width: int, source_height: int,
                      target_width: int, target_height: int) -> Placement:
    """
    Compute cover-fit placement

    A source wider than the target is scaled to the target height and
    centered horizontally; otherwise it is scaled to the target width
    and centered vertically.
    """
    source_aspect = source_width / source_height
    target_aspect = target_width / target_height

    if source_aspect > target_aspect:
        draw_height = float(target_height)
        draw_width = draw_height * source_aspect
        return Placement(draw_width, draw_height, (target_width - draw_width) / 2, 0.0)

    draw_width = float(target_width)
    draw_height = draw_width / source_aspect
    return Placement(draw_width, draw_height, 0.0, (target_height - draw_height) / 2)


def _source_span(visible_start: int, visible_end: int,
                 source_length: int, scaled_length: int) -> Tuple[int, int, int, int]:
    """
    Map a visible span of the scaled image back onto the source.

    Returns the source pixel range to crop and where that crop starts and
    ends in scaled coordinates. The crop carries a margin so interpolation
    near its edges matches resizing the whole image.
    """
    scale = scaled_length / source_length
    margin = int(math.ceil(1.0 / scale)) + 1

    src_start = max(int(math.floor(visible_start / scale)) - margin, 0)
    src_end = min(int(math.ceil(visible_end / scale)) + margin, source_length)

    scaled_start = int(round(src_start * scale))
    scaled_end = scaled_length if src_end == source_length else int(round(src_end * scale))
    return src_start, src_end, scaled_start, max(scaled_end, scaled_start + 1)


class ExportCompositor:
    """Cover-fit resize to an exact canvas size."""

    def __init__(self, background=(0, 0, 0)):
        """
        Args:
            background: Opaque RGB fill for any exposed margin
        """
        self.background = np.array(background, dtype=np.float64)

    def compose(self, source: PixelBuffer, target_width: int = EXPORT_WIDTH,
                target_height: int = EXPORT_HEIGHT) -> PixelBuffer:
        """
        Compose ``source`` onto a ``target_width`` x ``target_height`` canvas

        Returns:
            Opaque pixel buffer of exactly the target size
        """
        if target_width <= 0 or target_height <= 0:
            raise ValueError(f"Invalid export size {target_width}x{target_height}")
        if source.width == 0 or source.height == 0:
            raise ValueError("Cannot export an empty image")

        start = time.perf_counter()
        placement = compute_placement(source.width, source.height, target_width, target_height)

        scaled_width = max(1, int(round(placement.draw_width)))
        scaled_height = max(1, int(round(placement.draw_height)))
        shrinking = scaled_width * scaled_height < source.width * source.height
        interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR

        canvas = np.empty((target_height, target_width, 3), dtype=np.float64)
        canvas[:, :] = self.background

        offset_x = int(round(placement.offset_x))
        offset_y = int(round(placement.offset_y))

        # Visible window of the scaled image on the canvas
        dst_x0, dst_y0 = max(offset_x, 0), max(offset_y, 0)
        dst_x1 = min(offset_x + scaled_width, target_width)
        dst_y1 = min(offset_y + scaled_height, target_height)

        if dst_x1 > dst_x0 and dst_y1 > dst_y0:
            # Only the part of the source that lands in the frame is resized
            src_x0, src_x1, crop_x0, crop_x1 = _source_span(
                dst_x0 - offset_x, dst_x1 - offset_x, source.width, scaled_width)
            src_y0, src_y1, crop_y0, crop_y1 = _source_span(
                dst_y0 - offset_y, dst_y1 - offset_y, source.height, scaled_height)

            crop = np.ascontiguousarray(source.data[src_y0:src_y1, src_x0:src_x1])
            scaled = cv2.resize(crop, (crop_x1 - crop_x0, crop_y1 - crop_y0),
                                interpolation=interpolation)

            left = offset_x + crop_x0
            top = offset_y + crop_y0
            src = scaled[dst_y0 - top:dst_y1 - top, dst_x0 - left:dst_x1 - left].astype(np.float64)
            alpha = src[:, :, 3:4] / 255.0
            region = canvas[dst_y0:dst_y1, dst_x0:dst_x1]
            canvas[dst_y0:dst_y1, dst_x0:dst_x1] = src[:, :, :3] * alpha + region * (1.0 - alpha)

        output = np.empty((target_height, target_width, 4), dtype=np.uint8)
        output[:, :, :3] = np.clip(np.rint(canvas), 0, 255).astype(np.uint8)
        output[:, :, 3] = 255

        logger.debug(
            "Composed export",
            source=f"{source.width}x{source.height}",
            target=f"{target_width}x{target_height}",
            drawn=f"{scaled_width}x{scaled_height}",
            offset=(offset_x, offset_y),
            elapsed_ms=round((time.perf_counter() - start) * 1000, 2)
        )
        return PixelBuffer(target_width, target_height, output)


def default_export_filename(prefix: str = DEFAULT_FILENAME_PREFIX,
                            extension: str = "png") -> str:
    """``<prefix>-<epoch milliseconds>.<extension>``"""
    return f"{prefix}-{int(time.time() * 1000)}.{extension}"


def export_snapshot(snapshot: Union[ImageSnapshot, PixelBuffer],
                    destination: Union[str, Path],
                    width: int = EXPORT_WIDTH, height: int = EXPORT_HEIGHT,
                    image_format: Optional[str] = None,
                    compositor: Optional[ExportCompositor] = None,
                    filename_prefix: str = DEFAULT_FILENAME_PREFIX) -> Path:
    """
    Compose a snapshot to the export size and write it to disk

    Args:
        snapshot: Snapshot (or raw buffer) to export
        destination: Output file, or a directory to receive a timestamped file
        width: Target width
        height: Target height
        image_format: Pillow format name; inferred from the file suffix when
            not given, PNG for directory destinations
        filename_prefix: Prefix for timestamped names in a directory

    Returns:
        Path of the written file
    """
    from ..io.image_io import save_image

    buffer = snapshot.buffer if isinstance(snapshot, ImageSnapshot) else snapshot
    compositor = compositor or ExportCompositor()

    destination = Path(destination)
    if destination.is_dir():
        image_format = image_format or "PNG"
        destination = destination / default_export_filename(filename_prefix, image_format.lower())

    composed = compositor.compose(buffer, width, height)
    path = save_image(composed, destination, image_format)
    logger.info("Exported image", path=str(path), size=f"{width}x{height}")
    return path
