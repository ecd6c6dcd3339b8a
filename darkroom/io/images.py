"""
Image decode/encode for the pipeline's RGBA buffers.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

# Formats without an alpha channel
_OPAQUE_FORMATS = {'.jpg', '.jpeg', '.bmp'}


def load_image(path: Union[str, Path]) -> np.ndarray:
    """
    Load an image file as an RGBA uint8 buffer.

    Args:
        path: Image file path

    Returns:
        Array of shape (height, width, 4)
    """
    path = Path(path)
    with Image.open(path) as img:
        buffer = np.asarray(img.convert('RGBA'), dtype=np.uint8).copy()
    logger.debug(f"Loaded {path.name}: {buffer.shape[1]}x{buffer.shape[0]}")
    return buffer


def save_image(buffer: np.ndarray, path: Union[str, Path],
               quality: Optional[int] = None) -> Path:
    """
    Save an RGBA buffer; alpha is dropped for formats that cannot store it.

    Args:
        buffer: uint8 array of shape (height, width, 4)
        path: Output path, format chosen from the suffix
        quality: JPEG/WebP quality

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    img = Image.fromarray(np.ascontiguousarray(buffer, dtype=np.uint8))
    if path.suffix.lower() in _OPAQUE_FORMATS:
        img = img.convert('RGB')

    save_kwargs = {}
    if quality is not None and path.suffix.lower() in {'.jpg', '.jpeg', '.webp'}:
        save_kwargs['quality'] = int(quality)

    img.save(path, **save_kwargs)
    logger.debug(f"Saved {path}")
    return path


def buffer_from_bytes(data: bytes, width: int, height: int) -> np.ndarray:
    """
    Wrap raw row-major RGBA bytes as a pipeline buffer.

    Raises:
        ValueError: If the byte count does not match width x height x 4
    """
    expected = width * height * 4
    if len(data) != expected:
        raise ValueError(f"Expected {expected} bytes for {width}x{height} RGBA, got {len(data)}")
    return np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4).copy()


def buffer_to_bytes(buffer: np.ndarray) -> bytes:
    """Raw row-major RGBA bytes of a buffer."""
    return np.ascontiguousarray(buffer, dtype=np.uint8).tobytes()
