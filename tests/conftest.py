"""
Shared fixtures for the Darkroom test suite.
"""

import numpy as np
import pytest


def make_buffer(height, width, rgb, alpha=255):
    """Solid RGBA uint8 buffer."""
    buffer = np.empty((height, width, 4), dtype=np.uint8)
    buffer[..., :3] = rgb
    buffer[..., 3] = alpha
    return buffer


@pytest.fixture
def gray_buffer():
    """2x2 mid-gray opaque image."""
    return make_buffer(2, 2, (128, 128, 128))


@pytest.fixture
def random_buffer():
    """Seeded random 12x16 image with varying alpha."""
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(12, 16, 4), dtype=np.uint8)
