"""
Tone engine: white balance, exposure, contrast, shadows/highlights,
clarity and saturation applied to RGB channels.

Values stay unclamped between stages; clamping only happens when the frame
is written back to bytes.
"""

from typing import Tuple

import numpy as np

from ..local_adjustments.models import LocalSettings
from ...utils.arrays import unwrap


MIDPOINT = 128.0

# Rec. 601 luma weights
LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114


def contrast_factor(contrast: float) -> float:
    """259/255 contrast-stretch factor. Undefined at contrast >= 255."""
    return (259.0 * (contrast + 255.0)) / (255.0 * (259.0 - contrast))


def apply_tone(r, g, b, cfg: LocalSettings) -> Tuple:
    """
    Apply a LocalSettings tone adjustment to RGB channels.

    Stage order is significant: white balance, exposure, contrast, then
    shadows/highlights/clarity weighted by the post-contrast luma, and
    saturation last.

    Args:
        r, g, b: Channel values in the 0..255 scale (floats or arrays)
        cfg: Tone settings

    Returns:
        Adjusted (r, g, b), unclamped
    """
    r = np.asarray(r, dtype=np.float64)
    g = np.asarray(g, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)

    # White balance
    r = r * (1.0 + cfg.temperature / 100.0 + cfg.tint / 100.0)
    g = g * (1.0 - cfg.tint / 200.0)
    b = b * (1.0 - cfg.temperature / 100.0)

    # Exposure
    exposure = 2.0 ** (cfg.exposure / 50.0)
    r, g, b = r * exposure, g * exposure, b * exposure

    # Contrast
    factor = contrast_factor(cfg.contrast)
    r = factor * (r - MIDPOINT) + MIDPOINT
    g = factor * (g - MIDPOINT) + MIDPOINT
    b = factor * (b - MIDPOINT) + MIDPOINT

    luma = (LUMA_R * r + LUMA_G * g + LUMA_B * b) / 255.0

    if cfg.shadows != 0:
        shift = cfg.shadows * (1.0 - luma) ** 3 * 0.6
        r, g, b = r + shift, g + shift, b + shift

    if cfg.highlights != 0:
        shift = cfg.highlights * luma ** 3 * 0.6
        r, g, b = r + shift, g + shift, b + shift

    if cfg.clarity != 0:
        # Negative clarity falls off softer
        sigma = 0.5 if cfg.clarity < 0 else 0.2
        midtones = np.exp(-((luma - 0.5) ** 2) / (2.0 * sigma * sigma))
        clarity = 1.0 + (cfg.clarity / 150.0) * midtones
        r = (r - MIDPOINT) * clarity + MIDPOINT
        g = (g - MIDPOINT) * clarity + MIDPOINT
        b = (b - MIDPOINT) * clarity + MIDPOINT

    saturation = 1.0 + cfg.saturation / 100.0
    gray = LUMA_R * r + LUMA_G * g + LUMA_B * b
    r = gray + (r - gray) * saturation
    g = gray + (g - gray) * saturation
    b = gray + (b - gray) * saturation

    return unwrap(r), unwrap(g), unwrap(b)
