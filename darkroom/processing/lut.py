"""
3-D color lookup table resource and nearest-neighbour sampler.

The lattice is a flat array of N^3 RGB triples addressed as
``(r_i + g_i*N + b_i*N^2) * 3`` (red varies fastest, as in .cube files).
Parsing .cube text is left to the caller; this module consumes the parsed
lattice.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np

from ..utils.arrays import unwrap, clamp_channel

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Lut:
    """Immutable LUT lattice: edge ``size`` and flat float32 ``data``."""
    size: int
    data: np.ndarray
    id: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        data = np.asarray(self.data, dtype=np.float32).reshape(-1)
        data.setflags(write=False)
        object.__setattr__(self, 'data', data)
        object.__setattr__(self, 'size', int(self.size))

    @classmethod
    def from_array(cls, array: np.ndarray, size: Optional[int] = None,
                   lut_id: Optional[str] = None, name: Optional[str] = None) -> 'Lut':
        """
        Build a LUT from a flat array or an (N, N, N, 3) array indexed [b][g][r].

        Args:
            array: Lattice values in [0, 1]
            size: Lattice edge length; inferred when omitted

        Raises:
            ValueError: If the array shape does not describe a cubic lattice
        """
        array = np.asarray(array, dtype=np.float32)
        if array.ndim == 4:
            if array.shape[3] != 3 or not (array.shape[0] == array.shape[1] == array.shape[2]):
                raise ValueError(f"Expected an (N, N, N, 3) lattice, got {array.shape}")
            size = array.shape[0]
        else:
            flat = array.reshape(-1)
            if size is None:
                size = int(round((flat.size / 3) ** (1.0 / 3.0)))
            if size < 1 or flat.size != 3 * size ** 3:
                raise ValueError(
                    f"LUT data of length {flat.size} does not match a lattice of size {size}"
                )
        return cls(size=size, data=array.reshape(-1), id=lut_id, name=name)

    @classmethod
    def identity(cls, size: int, lut_id: Optional[str] = None) -> 'Lut':
        """Lattice whose value at (i, j, k) is (i, j, k) / (size - 1)."""
        steps = np.linspace(0.0, 1.0, size, dtype=np.float32)
        b, g, r = np.meshgrid(steps, steps, steps, indexing='ij')
        return cls(size=size, data=np.stack([r, g, b], axis=-1), id=lut_id, name='Identity')

    @classmethod
    def load(cls, path: Union[str, Path], lut_id: Optional[str] = None) -> 'Lut':
        """Load a lattice saved with ``numpy.save``."""
        path = Path(path)
        lut = cls.from_array(np.load(path), lut_id=lut_id or path.stem, name=path.stem)
        logger.info(f"Loaded LUT '{lut.name}' (size {lut.size}) from {path}")
        return lut


def sample_lut(r, g, b, lut: Lut, intensity: float) -> Tuple:
    """
    Grade RGB channels through a LUT with nearest-neighbour lookup.

    ``out = orig * (1 - intensity) + lut_value * 255 * intensity``. Pixels
    whose flat index would read past the lattice are returned unchanged.

    Args:
        r, g, b: Channels in 0..255 (floats or arrays)
        lut: Lattice
        intensity: Blend amount in [0, 1]

    Returns:
        Graded (r, g, b)
    """
    r = np.asarray(r, dtype=np.float64)
    g = np.asarray(g, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if lut.data.size < 3 or lut.size < 1:
        return unwrap(r), unwrap(g), unwrap(b)

    n = lut.size
    scale = n - 1

    def _index(channel):
        # Round half up
        return np.floor(clamp_channel(channel) / 255.0 * scale + 0.5).astype(np.int64)

    flat = (_index(r) + _index(g) * n + _index(b) * n * n) * 3
    valid = flat < lut.data.size - 2
    safe = np.where(valid, flat, 0)

    data = lut.data
    lut_r = data[safe].astype(np.float64) * 255.0
    lut_g = data[safe + 1].astype(np.float64) * 255.0
    lut_b = data[safe + 2].astype(np.float64) * 255.0

    keep = 1.0 - intensity
    return (
        unwrap(np.where(valid, r * keep + lut_r * intensity, r)),
        unwrap(np.where(valid, g * keep + lut_g * intensity, g)),
        unwrap(np.where(valid, b * keep + lut_b * intensity, b)),
    )
