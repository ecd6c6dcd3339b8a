"""
Darkroom utilities module.

Array helpers for the pixel kernels and logging setup.
"""

from .arrays import unwrap, clamp_channel, to_bytes

__all__ = [
    'unwrap',
    'clamp_channel',
    'to_bytes',
]
