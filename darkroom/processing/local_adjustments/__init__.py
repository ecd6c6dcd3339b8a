"""
Local Adjustments Framework for Darkroom

Edit settings, mask variants and mask alpha computation.
"""

from .models import (
    LocalSettings, HslColor, CropRect, MaskType, LinearMask, ColorMask,
    Mask, EditSettings, LOCAL_SETTING_NAMES, create_mask, mask_from_dict
)
from .mask_generator import MaskGenerator, mask_alpha

__all__ = [
    'LocalSettings',
    'HslColor',
    'CropRect',
    'MaskType',
    'LinearMask',
    'ColorMask',
    'Mask',
    'EditSettings',
    'LOCAL_SETTING_NAMES',
    'create_mask',
    'mask_from_dict',
    'MaskGenerator',
    'mask_alpha',
]
