"""
Geometry helpers: crop/mirror view extraction and UV remapping.
"""

from .view_transform import uv_grid, remap_uv, crop_bounds, extract_view

__all__ = ['uv_grid', 'remap_uv', 'crop_bounds', 'extract_view']
