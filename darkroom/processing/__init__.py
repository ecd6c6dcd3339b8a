"""
Pixel processing modules for Darkroom

Tone, color mixer, masks, LUT grading and texture, orchestrated by the
frame compositor; plus the editing session with undo history.
"""

from .frame_compositor import FrameCompositor, process_image
from .lut import Lut, sample_lut
from .session import EditSession

__all__ = [
    "FrameCompositor",
    "process_image",
    "Lut",
    "sample_lut",
    "EditSession",
]
