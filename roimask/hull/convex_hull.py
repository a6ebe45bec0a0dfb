"""Convex hull of voxel index sets, including degenerate inputs.

Points are first classified by their affine rank (point, segment, plane or
solid) using an SVD with a relative tolerance. Solids go through Quickhull;
lower-rank inputs are solved in their own subspace so that coplanar or
collinear masks return a polygon or segment instead of failing.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np
from scipy.spatial import ConvexHull, QhullError

logger = logging.getLogger(__name__)

# Singular values below this fraction of the largest one count as zero
HULL_TOLERANCE = 1e-9


@dataclass(eq=False)
class MaskHull:
    """Boundary of a convex hull.

    Attributes:
        points: (N, 3) hull vertices, taken from the input points
        facets: Boundary polygons as lists of indices into ``points``. A solid
            has one polygon per face, ordered counter-clockwise seen from
            outside; a planar hull has one polygon; a segment has [0, 1]; a
            point has [0].
        dimension: -1 for an empty hull, otherwise 0 to 3
    """

    points: np.ndarray
    facets: List[List[int]]
    dimension: int
    _origin: np.ndarray = field(repr=False)
    _basis: np.ndarray = field(repr=False)
    _equations: np.ndarray = field(repr=False)
    _scale: float = field(default=1.0, repr=False)

    @classmethod
    def empty(cls) -> 'MaskHull':
        return cls(
            points=np.zeros((0, 3), dtype=np.int64),
            facets=[],
            dimension=-1,
            _origin=np.zeros(3),
            _basis=np.zeros((0, 3)),
            _equations=np.zeros((0, 1)),
        )

    @property
    def vertex_count(self) -> int:
        return len(self.points)

    def contains(self, point, eps: float = 1e-7) -> bool:
        """True if ``point`` lies inside or on the hull.

        Args:
            point: (x, y, z) coordinate
            eps: Tolerance relative to the extent of the hull
        """
        if self.dimension < 0:
            return False
        tol = eps * self._scale
        offset = np.asarray(point, dtype=np.float64) - self._origin
        coords = offset @ self._basis.T
        # Reject points that leave the hull's affine subspace
        if np.linalg.norm(offset - coords @ self._basis) > tol:
            return False
        if len(self._equations) == 0:
            return True
        distances = self._equations[:, :-1] @ coords + self._equations[:, -1]
        return bool(np.all(distances <= tol))


def affine_rank(
    points: np.ndarray,
    tolerance: float = HULL_TOLERANCE
) -> Tuple[int, np.ndarray, np.ndarray]:
    """Affine rank of a point set.

    Args:
        points: (N, 3) array, N >= 1
        tolerance: Relative singular value cutoff

    Returns:
        rank: 0 to 3
        origin: Centroid of the points
        basis: (min(N, 3), 3) orthonormal rows, principal directions first
    """
    origin = points.mean(axis=0)
    centered = points - origin
    _, singular, vt = np.linalg.svd(centered, full_matrices=False)
    if singular.size == 0 or singular[0] == 0:
        return 0, origin, vt
    rank = int(np.sum(singular > tolerance * singular[0]))
    return rank, origin, vt


def convex_hull(points, tolerance: float = HULL_TOLERANCE) -> MaskHull:
    """Compute the convex hull of a set of 3D points.

    Args:
        points: (N, 3) array-like of coordinates; duplicates are allowed
        tolerance: Relative tolerance for detecting degenerate inputs

    Returns:
        MaskHull describing the boundary; degenerate inputs give a polygon,
        segment or point rather than raising
    """
    points = np.asarray(points)
    if points.size == 0:
        return MaskHull.empty()
    unique = np.unique(points.reshape(-1, 3), axis=0)
    coords = unique.astype(np.float64)

    rank, origin, basis = affine_rank(coords, tolerance)
    scale = max(1.0, float(np.abs(coords - origin).max()))
    logger.debug("Convex hull of %d unique points, affine rank %d", len(unique), rank)

    if rank == 3:
        try:
            return _solid_hull(unique, coords, scale)
        except QhullError as exc:
            logger.debug("Quickhull rejected input as degenerate, using planar hull: %s", exc)
            rank = 2
    if rank == 2:
        try:
            return _planar_hull(unique, coords, origin, basis[:2], scale)
        except QhullError as exc:
            logger.debug("Planar hull failed, using segment hull: %s", exc)
            rank = 1
    if rank == 1:
        return _segment_hull(unique, coords, origin, basis[:1], scale)
    return MaskHull(
        points=unique[:1],
        facets=[[0]],
        dimension=0,
        _origin=coords[0],
        _basis=np.zeros((0, 3)),
        _equations=np.zeros((0, 1)),
        _scale=scale,
    )


def _solid_hull(unique: np.ndarray, coords: np.ndarray, scale: float) -> MaskHull:
    hull = ConvexHull(coords)
    remap = {int(old): new for new, old in enumerate(hull.vertices)}
    hull_coords = coords[hull.vertices]

    # Quickhull triangulates faces; triangles sharing a plane form one facet
    groups: Dict[Tuple[float, ...], List[int]] = {}
    normals: Dict[Tuple[float, ...], np.ndarray] = {}
    for simplex, equation in zip(hull.simplices, hull.equations):
        key = tuple(np.round(equation, 6))
        members = groups.setdefault(key, [])
        normals.setdefault(key, equation[:3])
        for vertex in simplex:
            new = remap[int(vertex)]
            if new not in members:
                members.append(new)

    facets = [
        _order_facet(members, hull_coords, normals[key])
        for key, members in groups.items()
    ]
    return MaskHull(
        points=unique[hull.vertices],
        facets=facets,
        dimension=3,
        _origin=np.zeros(3),
        _basis=np.eye(3),
        _equations=hull.equations,
        _scale=scale,
    )


def _order_facet(members: List[int], coords: np.ndarray, normal: np.ndarray) -> List[int]:
    """Order facet vertices counter-clockwise around the outward normal."""
    facet_coords = coords[members]
    center = facet_coords.mean(axis=0)
    u = facet_coords[0] - center
    u /= np.linalg.norm(u)
    w = np.cross(normal, u)
    relative = facet_coords - center
    angles = np.arctan2(relative @ w, relative @ u)
    return [members[i] for i in np.argsort(angles, kind='stable')]


def _planar_hull(
    unique: np.ndarray,
    coords: np.ndarray,
    origin: np.ndarray,
    basis: np.ndarray,
    scale: float
) -> MaskHull:
    projected = (coords - origin) @ basis.T
    hull = ConvexHull(projected)
    # 2D hull vertices come back in counter-clockwise order
    return MaskHull(
        points=unique[hull.vertices],
        facets=[list(range(len(hull.vertices)))],
        dimension=2,
        _origin=origin,
        _basis=basis,
        _equations=hull.equations,
        _scale=scale,
    )


def _segment_hull(
    unique: np.ndarray,
    coords: np.ndarray,
    origin: np.ndarray,
    basis: np.ndarray,
    scale: float
) -> MaskHull:
    t = (coords - origin) @ basis[0]
    lo, hi = int(np.argmin(t)), int(np.argmax(t))
    equations = np.array([[-1.0, t[lo]], [1.0, -t[hi]]])
    return MaskHull(
        points=unique[[lo, hi]],
        facets=[[0, 1]],
        dimension=1,
        _origin=origin,
        _basis=basis,
        _equations=equations,
        _scale=scale,
    )
