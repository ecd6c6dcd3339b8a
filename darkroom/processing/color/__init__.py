"""
Color modules for Darkroom

Colour-space conversion and the hue-banded color mixer.
"""

from .color_space import rgb_to_hsl, hsl_to_rgb
from .color_mixer import (
    ColorMixer, ColorMixerChannel, MixerDelta, MIXER_BANDS,
    mixer_adjust, apply_color_mixer
)

__all__ = [
    'rgb_to_hsl',
    'hsl_to_rgb',
    'ColorMixer',
    'ColorMixerChannel',
    'MixerDelta',
    'MIXER_BANDS',
    'mixer_adjust',
    'apply_color_mixer',
]
