"""
Darkroom Interactive Preview System

Downscaled renders, mask overlays and before/after comparison.
"""

from .models import PreviewConfig
from .preview_processor import PreviewProcessor, composite_over

__all__ = [
    'PreviewConfig',
    'PreviewProcessor',
    'composite_over',
]
