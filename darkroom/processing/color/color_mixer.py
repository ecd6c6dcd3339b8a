"""
Hue-banded HSL color mixer.

Six overlapping bands (red, orange, yellow, aqua, blue, magenta) each carry
hue/saturation/luminance deltas. A pixel picks up a triangular weight from
every band whose centre is within the band width of its hue, so neighbouring
bands blend smoothly.
"""

from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, NamedTuple, Tuple

import numpy as np

from .color_space import rgb_to_hsl, hsl_to_rgb
from ...utils.arrays import unwrap, clamp_channel


# (band name, ((centre degrees, width degrees), ...))
MIXER_BANDS: Tuple[Tuple[str, Tuple[Tuple[float, float], ...]], ...] = (
    ("red", ((0.0, 45.0), (360.0, 45.0))),  # covers both ends of the wheel
    ("orange", ((30.0, 30.0),)),
    ("yellow", ((60.0, 35.0),)),
    ("aqua", ((180.0, 50.0),)),
    ("blue", ((240.0, 50.0),)),
    ("magenta", ((300.0, 50.0),)),
)


@dataclass(frozen=True)
class ColorMixerChannel:
    """Per-band HSL deltas, each -100 to +100."""
    hue: float = 0.0
    saturation: float = 0.0
    luminance: float = 0.0

    def is_neutral(self) -> bool:
        return self.hue == 0 and self.saturation == 0 and self.luminance == 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColorMixerChannel":
        return cls(
            hue=float(data.get("hue", 0.0)),
            saturation=float(data.get("saturation", 0.0)),
            luminance=float(data.get("luminance", 0.0)),
        )


@dataclass(frozen=True)
class ColorMixer:
    """The six mixer bands."""
    red: ColorMixerChannel = field(default_factory=ColorMixerChannel)
    orange: ColorMixerChannel = field(default_factory=ColorMixerChannel)
    yellow: ColorMixerChannel = field(default_factory=ColorMixerChannel)
    aqua: ColorMixerChannel = field(default_factory=ColorMixerChannel)
    blue: ColorMixerChannel = field(default_factory=ColorMixerChannel)
    magenta: ColorMixerChannel = field(default_factory=ColorMixerChannel)

    def channel(self, name: str) -> ColorMixerChannel:
        if name not in self.band_names():
            raise ValueError(f"Unknown mixer band '{name}'")
        return getattr(self, name)

    def is_neutral(self) -> bool:
        return all(getattr(self, f.name).is_neutral() for f in fields(self))

    @staticmethod
    def band_names() -> Tuple[str, ...]:
        return tuple(name for name, _ in MIXER_BANDS)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColorMixer":
        return cls(**{
            name: ColorMixerChannel.from_dict(data.get(name) or {})
            for name in cls.band_names()
        })


class MixerDelta(NamedTuple):
    """Weighted mixer adjustment for a hue: degrees, percent, percent."""
    dh: Any
    ds: Any
    dl: Any


def band_weight(hue_degrees, center: float, width: float):
    """Triangular weight of a band, with the angular distance wrapped at 360."""
    diff = np.abs(np.asarray(hue_degrees, dtype=np.float64) - center)
    diff = np.where(diff > 180.0, 360.0 - diff, diff)
    return np.maximum(0.0, 1.0 - diff / width)


def mixer_adjust(hue, mixer: ColorMixer) -> MixerDelta:
    """
    Compute the mixer delta for a normalized hue.

    Args:
        hue: Hue in [0, 1] (float or array)
        mixer: Band settings

    Returns:
        MixerDelta with the weighted sum of every band's deltas
    """
    hue_degrees = np.asarray(hue, dtype=np.float64) * 360.0
    dh = np.zeros_like(hue_degrees)
    ds = np.zeros_like(hue_degrees)
    dl = np.zeros_like(hue_degrees)

    for name, segments in MIXER_BANDS:
        channel = mixer.channel(name)
        if channel.is_neutral():
            continue
        weight = sum(band_weight(hue_degrees, center, width) for center, width in segments)
        dh = dh + channel.hue * weight
        ds = ds + channel.saturation * weight
        dl = dl + channel.luminance * weight

    return MixerDelta(unwrap(dh), unwrap(ds), unwrap(dl))


def apply_color_mixer(r, g, b, mixer: ColorMixer) -> Tuple:
    """
    Apply the color mixer to RGB channels.

    Pixels the mixer does not touch keep their (possibly out of range) input
    values; touched pixels go through a clamped HSL round trip.
    """
    if mixer.is_neutral():
        return r, g, b

    h, s, l = rgb_to_hsl(clamp_channel(r), clamp_channel(g), clamp_channel(b))
    delta = mixer_adjust(h, mixer)
    changed = (np.asarray(delta.dh) != 0) | (np.asarray(delta.ds) != 0) | (np.asarray(delta.dl) != 0)

    new_h = np.mod(h + delta.dh / 360.0, 1.0)
    new_s = np.clip(s * (1.0 + delta.ds / 100.0), 0.0, 1.0)
    new_l = np.clip(l * (1.0 + delta.dl / 100.0), 0.0, 1.0)
    mr, mg, mb = hsl_to_rgb(new_h, new_s, new_l)

    return (
        unwrap(np.where(changed, mr, r)),
        unwrap(np.where(changed, mg, g)),
        unwrap(np.where(changed, mb, b)),
    )
