"""
RGB <-> HSL conversion primitives.

Both directions broadcast over numpy arrays, so a whole frame converts in one
call. Achromatic input maps to h=0, s=0.
"""

from typing import Tuple

import numpy as np

from ...utils.arrays import unwrap


def rgb_to_hsl(r, g, b) -> Tuple:
    """
    Convert RGB channels in 0..255 to HSL in [0, 1].

    Args:
        r, g, b: Channel values (floats or arrays), 0..255

    Returns:
        (h, s, l) tuple, each in [0, 1]
    """
    r = np.asarray(r, dtype=np.float64) / 255.0
    g = np.asarray(g, dtype=np.float64) / 255.0
    b = np.asarray(b, dtype=np.float64) / 255.0

    maxc = np.maximum(np.maximum(r, g), b)
    minc = np.minimum(np.minimum(r, g), b)
    l = (maxc + minc) / 2.0

    d = maxc - minc
    chromatic = d > 0
    safe_d = np.where(chromatic, d, 1.0)

    denom = np.where(l > 0.5, 2.0 - maxc - minc, maxc + minc)
    s = np.where(chromatic, d / np.where(chromatic, denom, 1.0), 0.0)

    # Red wins ties, then green
    hue_r = (g - b) / safe_d + np.where(g < b, 6.0, 0.0)
    hue_g = (b - r) / safe_d + 2.0
    hue_b = (r - g) / safe_d + 4.0
    h = np.select([maxc == r, maxc == g], [hue_r, hue_g], default=hue_b)
    h = np.where(chromatic, h / 6.0, 0.0)

    return unwrap(h), unwrap(s), unwrap(l)


def _hue_to_channel(p, q, t):
    t = np.where(t < 0, t + 1.0, t)
    t = np.where(t > 1, t - 1.0, t)
    return np.select(
        [t < 1.0 / 6.0, t < 0.5, t < 2.0 / 3.0],
        [p + (q - p) * 6.0 * t, q, p + (q - p) * (2.0 / 3.0 - t) * 6.0],
        default=p,
    )


def hsl_to_rgb(h, s, l) -> Tuple:
    """
    Convert HSL in [0, 1] back to RGB channels in 0..255.

    Args:
        h, s, l: Hue, saturation, lightness (floats or arrays)

    Returns:
        (r, g, b) tuple of floats in [0, 255]
    """
    h = np.asarray(h, dtype=np.float64)
    s = np.asarray(s, dtype=np.float64)
    l = np.asarray(l, dtype=np.float64)

    q = np.where(l < 0.5, l * (1.0 + s), l + s - l * s)
    p = 2.0 * l - q

    achromatic = s == 0
    r = np.where(achromatic, l, _hue_to_channel(p, q, h + 1.0 / 3.0))
    g = np.where(achromatic, l, _hue_to_channel(p, q, h))
    b = np.where(achromatic, l, _hue_to_channel(p, q, h - 1.0 / 3.0))

    return unwrap(r * 255.0), unwrap(g * 255.0), unwrap(b * 255.0)
