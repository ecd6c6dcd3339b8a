"""
Texture filter for Darkroom.

A 3x3 local-contrast pass: every interior pixel is pushed away from (or
toward) its neighbourhood mean. Positive texture is damped by half, negative
texture is applied at full strength.
"""

import logging

import numpy as np
from scipy import ndimage

from ..utils.arrays import to_bytes

logger = logging.getLogger(__name__)


def texture_amount(texture: float) -> float:
    """Effective detail multiplier for a texture slider value."""
    amount = texture / 100.0
    return amount * 0.5 if amount > 0 else amount


def apply_texture(buffer: np.ndarray, texture: float) -> np.ndarray:
    """
    Apply the texture filter to an RGBA byte buffer.

    The 1-pixel border and the alpha channel are left untouched; every
    neighbourhood mean is read from the pre-filter snapshot.

    Args:
        buffer: uint8 array of shape (height, width, 4)
        texture: Texture slider, roughly -100 to +100

    Returns:
        New filtered buffer
    """
    output = buffer.copy()
    height, width = buffer.shape[:2]
    if texture == 0 or height < 3 or width < 3:
        return output

    snapshot = buffer[:, :, :3].astype(np.float64)
    mean = ndimage.uniform_filter(snapshot, size=(3, 3, 1), mode='nearest')

    amount = texture_amount(texture)
    center = snapshot[1:-1, 1:-1]
    detail = center - mean[1:-1, 1:-1]
    output[1:-1, 1:-1, :3] = to_bytes(center + detail * amount)

    logger.debug(f"Applied texture {texture} (amount {amount:.3f}) to {width}x{height} buffer")
    return output
