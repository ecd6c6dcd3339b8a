"""
Tone adjustment modules for Darkroom
"""

from .tone_engine import apply_tone, contrast_factor

__all__ = ['apply_tone', 'contrast_factor']
