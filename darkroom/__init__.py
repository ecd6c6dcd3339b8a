"""
Darkroom: photo edit rendering pipeline

Turns per-photo edit settings (tone sliders, color mixer, local masks and
LUT grading) into a transformed RGBA raster.
"""

__version__ = "0.1.0"

from .config import load_config, load_edit_settings
from .processing import FrameCompositor, process_image, Lut, EditSession
from .processing.local_adjustments import EditSettings, LocalSettings

__all__ = [
    "load_config",
    "load_edit_settings",
    "FrameCompositor",
    "process_image",
    "Lut",
    "EditSession",
    "EditSettings",
    "LocalSettings",
]
