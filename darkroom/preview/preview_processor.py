"""
Preview Processor for interactive editing.

Renders downscaled previews, the active-mask overlay and before/after
comparisons on top of the frame compositor.
"""

import logging
import time
from typing import Optional

import cv2
import numpy as np

from .models import PreviewConfig
from ..processing.color.color_space import rgb_to_hsl
from ..processing.frame_compositor import FrameCompositor, LutSource, validate_buffer
from ..processing.geometry.view_transform import extract_view, uv_grid, remap_uv
from ..processing.local_adjustments.mask_generator import MaskGenerator
from ..processing.local_adjustments.models import EditSettings, Mask, MaskType

logger = logging.getLogger(__name__)


class PreviewProcessor:
    """
    Renders views of an original image for display.

    Images are cropped/mirrored and downscaled before the pipeline runs, so
    interactive renders stay cheap.
    """

    def __init__(self, config: Optional[PreviewConfig] = None):
        self.config = config or PreviewConfig()
        self.compositor = FrameCompositor(workers=self.config.workers,
                                          band_height=self.config.band_height)
        logger.info("PreviewProcessor initialized")

    def prepare_view(self, image: np.ndarray, settings: EditSettings,
                     max_dimension: Optional[int] = None) -> np.ndarray:
        """
        Extract the crop/mirror view and downscale it for display.

        Args:
            image: Original RGBA image
            settings: Settings providing crop and mirror
            max_dimension: Longest side in pixels; falls back to the config

        Returns:
            View buffer, never upscaled
        """
        validate_buffer(image)
        view = extract_view(image, settings.crop, settings.is_mirrored)
        limit = max_dimension or self.config.max_dimension
        if not limit:
            return view

        height, width = view.shape[:2]
        scale = limit / max(height, width)
        if scale >= 1.0:
            return view

        size = (max(1, int(round(width * scale))), max(1, int(round(height * scale))))
        return cv2.resize(view, size, interpolation=cv2.INTER_AREA)

    def render(self, image: np.ndarray, settings: EditSettings, lut: LutSource = None,
               max_dimension: Optional[int] = None) -> np.ndarray:
        """Render the edited view of an original image."""
        start_time = time.time()
        view = self.prepare_view(image, settings, max_dimension)
        result = self.compositor.process(view, settings, lut)
        logger.debug(f"Preview render completed in {time.time() - start_time:.3f}s")
        return result

    def render_before(self, image: np.ndarray, settings: EditSettings,
                      max_dimension: Optional[int] = None) -> np.ndarray:
        """Render with default settings, keeping only crop and mirror."""
        before = EditSettings(crop=settings.crop, is_mirrored=settings.is_mirrored)
        return self.render(image, before, None, max_dimension)

    def render_compare(self, image: np.ndarray, settings: EditSettings,
                       lut: LutSource = None, split: float = 0.5,
                       max_dimension: Optional[int] = None) -> np.ndarray:
        """
        Before/after split view.

        Columns left of ``split * width`` show the unedited view, the rest
        the edited one.
        """
        before = self.render_before(image, settings, max_dimension)
        after = self.render(image, settings, lut, max_dimension)
        split_x = int(round(after.shape[1] * min(max(split, 0.0), 1.0)))
        result = after.copy()
        result[:, :split_x] = before[:, :split_x]
        return result

    def mask_overlay(self, view: np.ndarray, settings: EditSettings, mask: Mask) -> np.ndarray:
        """
        RGBA overlay visualising a mask over a raw (unedited) view.

        Pixels with alpha > 0 get the overlay colour with opacity
        ``alpha * overlay_alpha``; the rest stay transparent.
        """
        validate_buffer(view)
        height, width = view.shape[:2]
        uv = remap_uv(*uv_grid(width, height), settings)

        source_hsl = None
        if mask.type is MaskType.COLOR:
            source = view[:, :, :3].astype(np.float64)
            source_hsl = rgb_to_hsl(source[..., 0], source[..., 1], source[..., 2])

        alpha = MaskGenerator.generate_mask((height, width), mask, uv, source_hsl)
        overlay = np.zeros((height, width, 4), dtype=np.uint8)
        covered = alpha > 0
        overlay[covered, :3] = self.config.overlay_color
        overlay[..., 3] = np.where(covered, alpha * self.config.overlay_alpha, 0).astype(np.uint8)
        return overlay

    def render_mask_overlay(self, image: np.ndarray, settings: EditSettings, mask_id: str,
                            lut: LutSource = None,
                            max_dimension: Optional[int] = None) -> np.ndarray:
        """
        Edited view with the overlay of one mask composited on top.

        Raises:
            KeyError: If the mask does not exist
        """
        mask = settings.find_mask(mask_id)
        if mask is None:
            raise KeyError(f"Mask '{mask_id}' not found")

        raw_view = self.prepare_view(image, settings, max_dimension)
        rendered = self.compositor.process(raw_view, settings, lut)
        return composite_over(rendered, self.mask_overlay(raw_view, settings, mask))


def composite_over(base: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    """Source-over composite of an RGBA overlay onto a buffer; base alpha is kept."""
    weight = overlay[..., 3:4].astype(np.float64) / 255.0
    blended = overlay[..., :3] * weight + base[..., :3] * (1.0 - weight)
    result = base.copy()
    result[..., :3] = np.rint(blended).astype(np.uint8)
    return result
