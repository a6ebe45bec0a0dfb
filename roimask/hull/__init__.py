"""Convex hull boundaries of voxel sets."""

from .convex_hull import HULL_TOLERANCE, MaskHull, affine_rank, convex_hull

__all__ = [
    'HULL_TOLERANCE',
    'MaskHull',
    'affine_rank',
    'convex_hull'
]
