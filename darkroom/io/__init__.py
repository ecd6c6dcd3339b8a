"""
Image input/output for Darkroom.
"""

from .images import load_image, save_image, buffer_from_bytes, buffer_to_bytes

__all__ = ['load_image', 'save_image', 'buffer_from_bytes', 'buffer_to_bytes']
