"""
Data models for the EditSight processing core.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Dict, Any, Optional, Tuple
import time
import uuid

import numpy as np

from ..errors import UnknownFieldError


# Adjustment fields in the order the engine applies them.
ADJUSTMENT_FIELDS: Tuple[str, ...] = (
    'temperature',
    'tint',
    'exposure',
    'contrast',
    'highlights',
    'shadows',
    'whites',
    'blacks',
    'clarity',
    'dehaze',
    'vibrance',
    'saturation',
)

ADJUSTMENT_MIN = -100.0
ADJUSTMENT_MAX = 100.0


def _clamp_adjustment(value: float) -> float:
    return float(min(max(value, ADJUSTMENT_MIN), ADJUSTMENT_MAX))


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    RGBA8 image data, row-major, top-to-bottom.

    The pixels are held as a read-only ``(height, width, 4)`` uint8 array.
    Core operators never write into a buffer; they build new ones.
    """
    width: int
    height: int
    data: np.ndarray

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Invalid dimensions {self.width}x{self.height}")

        data = np.asarray(self.data)
        expected = self.width * self.height * 4
        if data.size != expected:
            raise ValueError(
                f"Pixel data has {data.size} samples, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )

        data = np.array(data, dtype=np.uint8, copy=True).reshape(self.height, self.width, 4)
        data.setflags(write=False)
        object.__setattr__(self, 'data', data)

    @classmethod
    def from_bytes(cls, width: int, height: int, raw: bytes) -> 'PixelBuffer':
        """Create a buffer from a flat RGBA byte sequence."""
        return cls(width, height, np.frombuffer(bytes(raw), dtype=np.uint8))

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'PixelBuffer':
        """Create a buffer from an ``(H, W, 4)`` array."""
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] != 4:
            raise ValueError(f"Expected an (H, W, 4) array, got shape {array.shape}")
        if array.dtype != np.uint8:
            array = np.clip(np.rint(array), 0, 255).astype(np.uint8)
        return cls(array.shape[1], array.shape[0], array)

    @classmethod
    def filled(cls, width: int, height: int,
               rgba: Tuple[int, int, int, int] = (0, 0, 0, 255)) -> 'PixelBuffer':
        """Create a buffer where every pixel has the same color."""
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[:, :] = rgba
        return cls(width, height, data)

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def rgb(self) -> np.ndarray:
        return self.data[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.data[:, :, 3]

    def to_bytes(self) -> bytes:
        """Flat RGBA byte sequence (length == width * height * 4)."""
        return self.data.tobytes()

    def copy(self) -> 'PixelBuffer':
        return PixelBuffer(self.width, self.height, self.data)

    def __eq__(self, other):
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (self.width == other.width and self.height == other.height
                and np.array_equal(self.data, other.data))

    def __hash__(self):
        return hash((self.width, self.height, self.data.tobytes()))

    def __repr__(self):
        return f"PixelBuffer({self.width}x{self.height})"


@dataclass(frozen=True)
class AdjustmentVector:
    """The twelve adjustment parameters, each in [-100, 100]; 0 is neutral."""
    temperature: float = 0.0
    tint: float = 0.0
    exposure: float = 0.0
    contrast: float = 0.0
    highlights: float = 0.0
    shadows: float = 0.0
    whites: float = 0.0
    blacks: float = 0.0
    clarity: float = 0.0
    dehaze: float = 0.0
    vibrance: float = 0.0
    saturation: float = 0.0

    def __post_init__(self):
        # Out-of-range values are clamped, not rejected
        for name in ADJUSTMENT_FIELDS:
            object.__setattr__(self, name, _clamp_adjustment(getattr(self, name)))

    def is_neutral(self) -> bool:
        """True when every field is zero."""
        return all(getattr(self, name) == 0 for name in ADJUSTMENT_FIELDS)

    def merge(self, patch: 'AdjustmentPatch') -> 'AdjustmentVector':
        """Return a new vector with the patch's set fields overriding ours."""
        return patch.apply_to(self)

    def to_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in ADJUSTMENT_FIELDS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AdjustmentVector':
        unknown = set(data) - set(ADJUSTMENT_FIELDS)
        if unknown:
            raise UnknownFieldError(f"Unknown adjustment fields: {sorted(unknown)}")
        return cls(**{key: float(value) for key, value in data.items()})


@dataclass(frozen=True)
class AdjustmentPatch:
    """
    Partial adjustment vector.

    Fields left as ``None`` are not part of the patch and keep the
    caller's current value when applied.
    """
    temperature: Optional[float] = None
    tint: Optional[float] = None
    exposure: Optional[float] = None
    contrast: Optional[float] = None
    highlights: Optional[float] = None
    shadows: Optional[float] = None
    whites: Optional[float] = None
    blacks: Optional[float] = None
    clarity: Optional[float] = None
    dehaze: Optional[float] = None
    vibrance: Optional[float] = None
    saturation: Optional[float] = None

    def is_empty(self) -> bool:
        return not self.to_dict()

    def apply_to(self, vector: AdjustmentVector) -> AdjustmentVector:
        """Field-wise override of ``vector`` with every set field."""
        return replace(vector, **self.to_dict())

    def to_dict(self) -> Dict[str, float]:
        """Only the fields present in the patch."""
        return {
            name: getattr(self, name)
            for name in ADJUSTMENT_FIELDS
            if getattr(self, name) is not None
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AdjustmentPatch':
        unknown = set(data) - set(ADJUSTMENT_FIELDS)
        if unknown:
            raise UnknownFieldError(f"Unknown adjustment fields: {sorted(unknown)}")
        return cls(**{
            key: float(value) for key, value in data.items() if value is not None
        })


@dataclass(frozen=True)
class ImageSnapshot:
    """An immutable, fully-resolved image state stored in history."""
    snapshot_id: str
    buffer: PixelBuffer
    created_at: float = field(default_factory=time.time)
    description: str = ""

    @classmethod
    def create(cls, buffer: PixelBuffer, description: str = "") -> 'ImageSnapshot':
        """Create a snapshot with a fresh identifier."""
        return cls(
            snapshot_id=uuid.uuid4().hex,
            buffer=buffer,
            description=description,
        )

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    def summary(self) -> Dict[str, Any]:
        return {
            'snapshot_id': self.snapshot_id,
            'description': self.description,
            'width': self.width,
            'height': self.height,
            'created_at': self.created_at,
        }


def settings_field_names(settings_cls) -> Tuple[str, ...]:
    """Names of the dataclass fields of a settings class."""
    return tuple(f.name for f in fields(settings_cls))
