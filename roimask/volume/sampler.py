"""Volume samplers consumed by mask construction.

Volumes follow the (D, H, W) array layout used throughout the package, so the
voxel at mask index (x, y, z) is ``volume[z, y, x]``.
"""

from typing import Optional, Protocol, Tuple, runtime_checkable

import numpy as np


@runtime_checkable
class VolumeSampler(Protocol):
    """Read-only source of per-voxel intensities."""

    @property
    def extent(self) -> Tuple[int, int, int]:
        """(width, height, depth) of the sampled volume."""
        ...

    def sample(self, x: int, y: int, z: int) -> float:
        ...


class ArrayVolumeSampler:
    """Volume sampler backed by a 3D numpy array of shape (D, H, W).

    Args:
        volume: 3D intensity volume, e.g. CT in HU
        spacing: Optional (sx, sy, sz) voxel spacing in mm, carried as metadata
    """

    def __init__(
        self,
        volume: np.ndarray,
        spacing: Optional[Tuple[float, float, float]] = None
    ):
        volume = np.asarray(volume)
        if volume.ndim != 3:
            raise ValueError(f"Expected a 3D volume (D, H, W), got shape {volume.shape}")
        # Own a read-only copy so callers cannot change samples under a mask
        self._volume = np.array(volume, dtype=np.float32, copy=True)
        self._volume.setflags(write=False)
        self.spacing = spacing

    @property
    def extent(self) -> Tuple[int, int, int]:
        d, h, w = self._volume.shape
        return w, h, d

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self._volume.shape

    @property
    def volume(self) -> np.ndarray:
        return self._volume

    def sample(self, x: int, y: int, z: int) -> float:
        return float(self._volume[z, y, x])

    def row(self, y: int, z: int) -> np.ndarray:
        """All samples of row (y, z) along the width axis."""
        return self._volume[z, y, :]


def row_samples(sampler: VolumeSampler, y: int, z: int) -> np.ndarray:
    """Samples of row (y, z), using the sampler's ``row`` fast path if present."""
    row = getattr(sampler, 'row', None)
    if row is not None:
        return np.asarray(row(y, z), dtype=np.float32)
    width = sampler.extent[0]
    return np.array([sampler.sample(x, y, z) for x in range(width)], dtype=np.float32)
