"""
Small helpers shared by the per-pixel kernels.

Every kernel accepts plain floats or broadcastable numpy arrays, so the same
code runs a single pixel or a whole frame.
"""

import numpy as np


def unwrap(value):
    """Return numpy 0-d results as numpy scalars, leave arrays untouched."""
    if isinstance(value, np.ndarray) and value.ndim == 0:
        return value[()]
    return value


def clamp_channel(value):
    """Clamp a colour channel to the byte range [0, 255]."""
    return np.clip(value, 0.0, 255.0)


def to_bytes(value: np.ndarray) -> np.ndarray:
    """
    Clamp and round float channels into uint8.

    NaN becomes 0 and infinities saturate, matching a clamped byte store.
    """
    value = np.nan_to_num(np.asarray(value, dtype=np.float64), nan=0.0)
    return np.rint(np.clip(value, 0.0, 255.0)).astype(np.uint8)
