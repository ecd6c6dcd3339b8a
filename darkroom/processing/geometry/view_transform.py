"""
Crop/mirror view geometry.

Mask geometry is authored in the original, uncropped and unmirrored image
space. The pipeline works on an already extracted view, so every local
coordinate is mapped back to original-image UV before a mask is evaluated.
"""

import logging
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np

from ...utils.arrays import unwrap

if TYPE_CHECKING:
    from ..local_adjustments.models import CropRect, EditSettings

logger = logging.getLogger(__name__)


def uv_grid(width: int, height: int, row_start: int = 0,
            row_stop: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Local (u, v) coordinates for a band of rows of a width x height view.

    ``u = x / width`` and ``v = y / height`` always use the full view
    dimensions, so a band produces the same coordinates as the whole frame.

    Returns:
        (u, v) arrays of shape (row_stop - row_start, width)
    """
    if row_stop is None:
        row_stop = height
    xs = np.arange(width, dtype=np.float64) / width
    ys = np.arange(row_start, row_stop, dtype=np.float64) / height
    u, v = np.meshgrid(xs, ys)
    return u, v


def remap_uv(u, v, settings: 'EditSettings') -> Tuple:
    """
    Map view-local UV to original-image UV.

    Mirroring is undone first, then the crop:
    ``u = crop.x + u * crop.width``, ``v = crop.y + v * crop.height``.
    """
    u = np.asarray(u, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)

    if settings.is_mirrored:
        u = 1.0 - u

    crop = settings.crop
    if crop is not None:
        u = crop.x + u * crop.width
        v = crop.y + v * crop.height

    return unwrap(u), unwrap(v)


def crop_bounds(crop: 'CropRect', width: int, height: int) -> Tuple[int, int, int, int]:
    """
    Pixel bounds (left, top, right, bottom) of a normalized crop.

    Always at least one pixel wide and tall.
    """
    left = min(int(crop.x * width), width - 1)
    top = min(int(crop.y * height), height - 1)
    right = min(max(left + 1, left + int(crop.width * width)), width)
    bottom = min(max(top + 1, top + int(crop.height * height)), height)
    return left, top, right, bottom


def extract_view(image: np.ndarray, crop: Optional['CropRect'] = None,
                 is_mirrored: bool = False) -> np.ndarray:
    """
    Extract the view buffer the pipeline consumes from an original image.

    The crop rectangle is taken in original-image space and the result is
    flipped horizontally when mirrored, so view pixel u=0 shows the crop's
    right edge. This is the inverse of ``remap_uv``.

    Args:
        image: Original image, shape (height, width, channels)
        crop: Optional normalized crop rectangle
        is_mirrored: Flip the view horizontally

    Returns:
        A new contiguous array holding the view
    """
    view = image
    if crop is not None:
        height, width = image.shape[:2]
        left, top, right, bottom = crop_bounds(crop, width, height)
        view = view[top:bottom, left:right]
        logger.debug(f"Extracted crop {right - left}x{bottom - top} at ({left}, {top})")

    if is_mirrored:
        view = view[:, ::-1]

    return view.copy()
