"""Run-length encoded 3D region-of-interest masks for volumetric images."""

from .mask import (
    ROIMask,
    MaskRun,
    MaskIndex,
    MaskValue,
    ROIMaskError,
    ConstructionInvariantViolation,
    CoordinateRangeError,
    IncompatibleOperands
)
from .hull import MaskHull, convex_hull
from .volume import VolumeSampler, ArrayVolumeSampler

__version__ = "0.1.0"

__all__ = [
    'ROIMask',
    'MaskRun',
    'MaskIndex',
    'MaskValue',
    'ROIMaskError',
    'ConstructionInvariantViolation',
    'CoordinateRangeError',
    'IncompatibleOperands',
    'MaskHull',
    'convex_hull',
    'VolumeSampler',
    'ArrayVolumeSampler'
]
