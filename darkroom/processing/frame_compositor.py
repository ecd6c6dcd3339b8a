"""
Frame compositor: runs the full edit pipeline over an RGBA buffer.

Per pixel: global tone, color mixer, masks in declaration order (each
blended over the result of the previous ones), then the LUT. The texture
filter runs once over the finished frame.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Mapping, Optional, Tuple, Union

import numpy as np

from .color.color_space import rgb_to_hsl
from .color.color_mixer import apply_color_mixer
from .geometry.view_transform import uv_grid, remap_uv
from .local_adjustments.models import EditSettings, MaskType
from .local_adjustments.mask_generator import mask_alpha
from .lut import Lut, sample_lut
from .sharpening import apply_texture
from .tone.tone_engine import apply_tone
from ..utils.arrays import to_bytes

logger = logging.getLogger(__name__)

LutSource = Union[Lut, Mapping[str, Lut], None]


def validate_buffer(buffer: np.ndarray) -> None:
    """Raise ValueError unless ``buffer`` is an (H, W, 4) uint8 array."""
    if not isinstance(buffer, np.ndarray):
        raise ValueError(f"Pixel buffer must be a numpy array, got {type(buffer).__name__}")
    if buffer.dtype != np.uint8 or buffer.ndim != 3 or buffer.shape[2] != 4:
        raise ValueError(
            f"Pixel buffer must be uint8 with shape (height, width, 4), "
            f"got {buffer.dtype} {buffer.shape}"
        )


class FrameCompositor:
    """
    Applies ``EditSettings`` to a cropped/mirrored view buffer.

    Rows can be split into bands rendered on a thread pool. Every band reads
    the same immutable settings and LUT, so the result does not depend on the
    band layout.
    """

    def __init__(self, workers: int = 1, band_height: Optional[int] = None):
        """
        Args:
            workers: Thread count for band rendering (1 renders inline)
            band_height: Rows per band; defaults to an even split across workers
        """
        self.workers = max(1, int(workers or 1))
        self.band_height = band_height

    def process(self, buffer: np.ndarray, settings: EditSettings,
                lut: LutSource = None) -> np.ndarray:
        """
        Render a frame.

        Args:
            buffer: Source view, uint8 (height, width, 4) RGBA
            settings: Edit settings for the photo
            lut: The active LUT, or a mapping of LUT id to LUT resolved
                through ``settings.lut_id``

        Returns:
            New buffer of the same shape; alpha is passed through
        """
        validate_buffer(buffer)
        start_time = time.time()

        active_lut = self._resolve_lut(settings, lut)
        height, width = buffer.shape[:2]
        output = buffer.copy()

        if height and width:
            bands = self._bands(height)
            if self.workers > 1 and len(bands) > 1:
                with ThreadPoolExecutor(max_workers=self.workers) as executor:
                    futures = [
                        executor.submit(self._process_band, buffer, output, settings,
                                        active_lut, start, stop)
                        for start, stop in bands
                    ]
                    for future in futures:
                        future.result()
            else:
                for start, stop in bands:
                    self._process_band(buffer, output, settings, active_lut, start, stop)

        if settings.texture != 0:
            output = apply_texture(output, settings.texture)

        duration = time.time() - start_time
        logger.debug(
            f"Rendered {width}x{height} frame with {len(settings.masks)} masks "
            f"in {duration:.3f}s"
        )
        return output

    def _resolve_lut(self, settings: EditSettings, lut: LutSource) -> Optional[Lut]:
        if lut is None or isinstance(lut, Lut):
            return lut
        if settings.lut_id is None:
            return None
        resolved = lut.get(settings.lut_id)
        if resolved is None:
            logger.warning(f"LUT '{settings.lut_id}' not found, rendering without it")
        return resolved

    def _bands(self, height: int) -> List[Tuple[int, int]]:
        band_height = self.band_height or -(-height // self.workers)
        band_height = max(1, band_height)
        return [(start, min(start + band_height, height))
                for start in range(0, height, band_height)]

    def _process_band(self, buffer: np.ndarray, output: np.ndarray,
                      settings: EditSettings, lut: Optional[Lut],
                      row_start: int, row_stop: int) -> None:
        height, width = buffer.shape[:2]
        source = buffer[row_start:row_stop, :, :3].astype(np.float64)
        orig_r, orig_g, orig_b = source[..., 0], source[..., 1], source[..., 2]

        with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
            r, g, b = apply_tone(orig_r, orig_g, orig_b, settings.global_settings())
            r, g, b = apply_color_mixer(r, g, b, settings.color_mixer)

            if settings.masks:
                u, v = uv_grid(width, height, row_start, row_stop)
                u, v = remap_uv(u, v, settings)
                source_hsl = None

                for mask in settings.masks:
                    if mask.opacity == 0:
                        continue

                    sample_hsl = None
                    if mask.type is MaskType.COLOR:
                        # Source pixels keep color masks stable while editing
                        if source_hsl is None:
                            source_hsl = rgb_to_hsl(orig_r, orig_g, orig_b)
                        sample_hsl = source_hsl

                    alpha = mask_alpha(u, v, width, height, mask, sample_hsl)
                    covered = np.asarray(alpha) > 0
                    if not np.any(covered):
                        continue

                    mr, mg, mb = apply_tone(r, g, b, mask.settings)
                    r = np.where(covered, r * (1.0 - alpha) + mr * alpha, r)
                    g = np.where(covered, g * (1.0 - alpha) + mg * alpha, g)
                    b = np.where(covered, b * (1.0 - alpha) + mb * alpha, b)

            if lut is not None and settings.lut_intensity > 0:
                r, g, b = sample_lut(r, g, b, lut, settings.lut_intensity / 100.0)

            output[row_start:row_stop, :, :3] = to_bytes(np.stack([r, g, b], axis=-1))


def process_image(buffer: np.ndarray, settings: EditSettings,
                  lut: LutSource = None) -> np.ndarray:
    """Render a frame with a single-threaded compositor."""
    return FrameCompositor().process(buffer, settings, lut)
