"""
Mask alpha computation for local adjustments.
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from .models import Mask, MaskType, LinearMask, ColorMask, HslColor
from ..geometry.view_transform import uv_grid
from ...utils.arrays import unwrap

logger = logging.getLogger(__name__)

# Hue fraction over which a color mask fades out past its range
COLOR_FEATHER = 0.1
# Saturation difference tolerated before a color mask is attenuated
SATURATION_TOLERANCE = 0.3
SATURATION_FALLOFF = 5.0
# Targets at or below this saturation skip the saturation penalty
MIN_TARGET_SATURATION = 0.1


def mask_alpha(u, v, image_width: int, image_height: int, mask: Mask,
               sample_hsl: Optional[Tuple] = None):
    """
    Compute a mask's opacity at original-image coordinates.

    Args:
        u, v: Original-image UV in [0, 1] (floats or arrays)
        image_width, image_height: Dimensions of the processed view, used
            for the aspect correction of linear masks
        mask: Linear or color mask
        sample_hsl: (h, s, l) of the unprocessed source pixel, required by
            color masks

    Returns:
        Alpha in [0, 1] after invert and opacity
    """
    if mask.type is MaskType.LINEAR:
        alpha = _linear_alpha(u, v, image_width, image_height, mask)
    elif mask.type is MaskType.COLOR:
        alpha = _color_alpha(mask, sample_hsl)
    else:
        raise ValueError(f"Unsupported mask type: {mask.type}")

    if mask.invert:
        alpha = 1.0 - alpha

    return unwrap(alpha * (mask.opacity / 100.0))


def _linear_alpha(u, v, width: int, height: int, mask: LinearMask):
    angle = math.radians(mask.rotation or 0.0)

    # Normal of the separating line
    nx = math.sin(angle)
    ny = -math.cos(angle)

    # Scale v so rotation looks isotropic whatever the aspect ratio
    aspect = width / height
    dx = np.asarray(u, dtype=np.float64) - mask.x
    dy = (np.asarray(v, dtype=np.float64) - mask.y) * aspect

    dist = dx * nx + dy * ny
    f = max(0.001, mask.feather / 100.0)

    # dist <= -f/2 is fully masked, dist >= f/2 untouched
    return np.clip(0.5 - dist / f, 0.0, 1.0)


def _color_alpha(mask: ColorMask, sample_hsl: Optional[Tuple]):
    if mask.target_color is None or sample_hsl is None:
        return 0.0

    if isinstance(sample_hsl, HslColor):
        h, s = sample_hsl.h, sample_hsl.s
    else:
        h, s = sample_hsl[0], sample_hsl[1]
    h = np.asarray(h, dtype=np.float64)
    s = np.asarray(s, dtype=np.float64)
    target = mask.target_color

    hue_diff = np.abs(h - target.h)
    diff = np.minimum(hue_diff, 1.0 - hue_diff)
    hue_range = mask.color_range / 100.0

    alpha = np.where(
        diff < hue_range,
        1.0,
        np.where(diff < hue_range + COLOR_FEATHER, 1.0 - (diff - hue_range) / COLOR_FEATHER, 0.0),
    )

    if target.s > MIN_TARGET_SATURATION:
        sat_diff = np.abs(s - target.s)
        penalty = np.maximum(0.0, 1.0 - (sat_diff - SATURATION_TOLERANCE) * SATURATION_FALLOFF)
        alpha = np.where(sat_diff > SATURATION_TOLERANCE, alpha * penalty, alpha)

    return alpha


class MaskGenerator:
    """Generates full alpha planes for masks."""

    @staticmethod
    def generate_mask(image_shape: Tuple[int, int], mask: Mask,
                      uv: Optional[Tuple[np.ndarray, np.ndarray]] = None,
                      source_hsl: Optional[Tuple] = None) -> np.ndarray:
        """
        Generate a mask plane.

        Args:
            image_shape: (height, width) of the processed view
            mask: Mask to evaluate
            uv: Original-image (u, v) planes; defaults to the plain view grid
            source_hsl: (h, s, l) planes of the unprocessed source, for
                color masks

        Returns:
            Alpha plane as float32 array (0-1) of shape image_shape
        """
        height, width = image_shape
        if uv is None:
            uv = uv_grid(width, height)
        alpha = mask_alpha(uv[0], uv[1], width, height, mask, source_hsl)
        return np.broadcast_to(np.asarray(alpha, dtype=np.float32), (height, width)).copy()
