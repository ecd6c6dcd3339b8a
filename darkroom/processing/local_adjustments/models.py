"""
Data models for edit settings and local (masked) adjustments.

All models are frozen dataclasses. Edits produce new instances via
``dataclasses.replace`` so unchanged parts are shared between history
snapshots instead of deep-copied.
"""

import uuid
from dataclasses import dataclass, field, fields, asdict, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

from ..color.color_mixer import ColorMixer


LOCAL_SETTING_NAMES: Tuple[str, ...] = (
    'exposure', 'contrast', 'highlights', 'shadows', 'texture',
    'clarity', 'saturation', 'temperature', 'tint',
)


def _new_mask_id() -> str:
    return uuid.uuid4().hex[:12]


class MaskType(Enum):
    """Available mask variants."""
    COLOR = "color"
    LINEAR = "linear"


@dataclass(frozen=True)
class LocalSettings:
    """The nine tone sliders, usable globally and per mask."""
    exposure: float = 0.0
    contrast: float = 0.0  # 259/255 formula input, must stay below 255
    highlights: float = 0.0
    shadows: float = 0.0
    texture: float = 0.0
    clarity: float = 0.0
    saturation: float = 0.0
    temperature: float = 0.0
    tint: float = 0.0

    def is_neutral(self) -> bool:
        return all(getattr(self, name) == 0 for name in LOCAL_SETTING_NAMES)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LocalSettings':
        return cls(**{
            name: float(data[name]) for name in LOCAL_SETTING_NAMES if name in data
        })


@dataclass(frozen=True)
class HslColor:
    """An HSL triple, each component in [0, 1]."""
    h: float
    s: float
    l: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HslColor':
        return cls(h=float(data['h']), s=float(data['s']), l=float(data['l']))


@dataclass(frozen=True)
class CropRect:
    """Crop rectangle normalized to the original, uncropped image."""
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.x < 0 or self.y < 0:
            raise ValueError(f"Crop origin must be non-negative, got ({self.x}, {self.y})")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Crop size must be positive, got {self.width}x{self.height}")
        # Small tolerance for slider round-off
        if self.x + self.width > 1.0 + 1e-9 or self.y + self.height > 1.0 + 1e-9:
            raise ValueError(
                f"Crop rectangle ({self.x}, {self.y}, {self.width}, {self.height}) "
                f"extends past the image bounds"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CropRect':
        return cls(
            x=float(data['x']), y=float(data['y']),
            width=float(data['width']), height=float(data['height'])
        )


@dataclass(frozen=True)
class MaskBase:
    """Fields shared by every mask variant."""
    type: ClassVar[MaskType]

    id: str = field(default_factory=_new_mask_id)
    name: str = ""
    invert: bool = False
    opacity: float = 100.0  # 0-100
    settings: LocalSettings = field(default_factory=LocalSettings)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['type'] = self.type.value
        return result


@dataclass(frozen=True)
class LinearMask(MaskBase):
    """Linear gradient: a directed line through (x, y) with a soft edge."""
    type: ClassVar[MaskType] = MaskType.LINEAR

    x: float = 0.5  # centre, original-image space
    y: float = 0.5
    feather: float = 20.0  # 0-100, width of the transition zone
    rotation: float = 0.0  # degrees

    def __post_init__(self):
        if not self.name:
            object.__setattr__(self, 'name', 'Linear')


@dataclass(frozen=True)
class ColorMask(MaskBase):
    """Selects pixels whose source hue is close to a target colour."""
    type: ClassVar[MaskType] = MaskType.COLOR

    target_color: Optional[HslColor] = None
    color_range: float = 10.0  # 0-100, hue tolerance in percent of the wheel

    def __post_init__(self):
        if not self.name:
            object.__setattr__(self, 'name', 'Color')


Mask = Union[LinearMask, ColorMask]

_MASK_CLASSES = {MaskType.LINEAR: LinearMask, MaskType.COLOR: ColorMask}


def create_mask(mask_type: MaskType, **kwargs) -> Mask:
    """Create a mask of the given variant with default geometry."""
    return _MASK_CLASSES[MaskType(mask_type)](**kwargs)


def mask_from_dict(data: Dict[str, Any]) -> Mask:
    """Build a mask from its dict form, dispatching on ``type``."""
    mask_type = MaskType(data['type'])
    kwargs = {
        'name': data.get('name', ''),
        'invert': bool(data.get('invert', False)),
        'opacity': float(data.get('opacity', 100.0)),
        'settings': LocalSettings.from_dict(data.get('settings') or {}),
    }
    if data.get('id'):
        kwargs['id'] = str(data['id'])

    if mask_type is MaskType.LINEAR:
        kwargs.update(
            x=float(data.get('x', 0.5)),
            y=float(data.get('y', 0.5)),
            feather=float(data.get('feather', 20.0)),
            rotation=float(data.get('rotation') or 0.0),
        )
    else:
        target = data.get('target_color')
        kwargs.update(
            target_color=HslColor.from_dict(target) if target else None,
            color_range=float(data.get('color_range', 10.0)),
        )
    return create_mask(mask_type, **kwargs)


@dataclass(frozen=True)
class EditSettings:
    """
    Complete per-photo edit state.

    The global tone sliders are flattened onto this record; use
    ``global_settings()`` to get them as a ``LocalSettings``.
    """
    # White balance
    temperature: float = 0.0
    tint: float = 0.0

    # Tone
    exposure: float = 0.0
    contrast: float = 0.0
    highlights: float = 0.0
    shadows: float = 0.0

    # Presence
    texture: float = 0.0
    clarity: float = 0.0
    saturation: float = 0.0

    color_mixer: ColorMixer = field(default_factory=ColorMixer)

    lut_id: Optional[str] = None
    lut_intensity: float = 100.0  # 0-100

    masks: Tuple[Mask, ...] = ()

    crop: Optional[CropRect] = None
    is_mirrored: bool = False

    def __post_init__(self):
        if not isinstance(self.masks, tuple):
            object.__setattr__(self, 'masks', tuple(self.masks))

    def global_settings(self) -> LocalSettings:
        return LocalSettings(**{name: getattr(self, name) for name in LOCAL_SETTING_NAMES})

    def find_mask(self, mask_id: str) -> Optional[Mask]:
        for mask in self.masks:
            if mask.id == mask_id:
                return mask
        return None

    def with_changes(self, **changes) -> 'EditSettings':
        return replace(self, **changes)

    @staticmethod
    def field_names() -> Tuple[str, ...]:
        return tuple(f.name for f in fields(EditSettings))

    def to_dict(self) -> Dict[str, Any]:
        result = {name: getattr(self, name) for name in LOCAL_SETTING_NAMES}
        result.update({
            'color_mixer': self.color_mixer.to_dict(),
            'lut_id': self.lut_id,
            'lut_intensity': self.lut_intensity,
            'masks': [mask.to_dict() for mask in self.masks],
            'crop': asdict(self.crop) if self.crop else None,
            'is_mirrored': self.is_mirrored,
        })
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EditSettings':
        """Create from a plain dict; missing keys keep their defaults."""
        kwargs: Dict[str, Any] = {
            name: float(data[name]) for name in LOCAL_SETTING_NAMES if name in data
        }
        if data.get('color_mixer'):
            kwargs['color_mixer'] = ColorMixer.from_dict(data['color_mixer'])
        if 'lut_id' in data:
            kwargs['lut_id'] = data['lut_id']
        if 'lut_intensity' in data:
            kwargs['lut_intensity'] = float(data['lut_intensity'])
        kwargs['masks'] = tuple(mask_from_dict(m) for m in data.get('masks') or [])
        if data.get('crop'):
            kwargs['crop'] = CropRect.from_dict(data['crop'])
        kwargs['is_mirrored'] = bool(data.get('is_mirrored', False))
        return cls(**kwargs)
