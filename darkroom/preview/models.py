"""
Data models for the Darkroom preview system.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass
class PreviewConfig:
    """Preview rendering options."""
    max_dimension: Optional[int] = 1600  # None renders at full resolution
    overlay_color: Tuple[int, int, int] = (255, 0, 0)
    overlay_alpha: float = 130.0  # overlay alpha at full mask strength (0-255)
    workers: int = 1
    band_height: Optional[int] = None  # rows per render band, None splits evenly

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'PreviewConfig':
        """Build from the ``preview``/``pipeline`` sections of the app config."""
        preview = config.get('preview', {}) or {}
        pipeline = config.get('pipeline', {}) or {}
        return cls(
            max_dimension=preview.get('max_dimension', cls.max_dimension),
            overlay_color=tuple(preview.get('overlay_color', cls.overlay_color)),
            overlay_alpha=float(preview.get('overlay_alpha', cls.overlay_alpha)),
            workers=int(pipeline.get('workers', cls.workers)),
            band_height=pipeline.get('band_height'),
        )
