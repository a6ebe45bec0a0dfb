"""Run-length encoded 3D region-of-interest masks.

A mask is stored as width-direction runs sorted by (slice, row, start). Masks
are immutable: construction validates the run invariants, and every algebra
operation returns a new canonical mask.
"""

import logging
import operator
from bisect import bisect_right
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from tqdm import tqdm

from ..hull.convex_hull import HULL_TOLERANCE, MaskHull, convex_hull
from ..volume.sampler import VolumeSampler, row_samples
from .canonical import canonicalize, is_canonical, iter_rows, rows_by_key, validate_runs
from .errors import CoordinateRangeError, IncompatibleOperands
from .run import MaskIndex, MaskRun, index_in_run
from .run_buffer import runs_from_buffer, runs_to_buffer

logger = logging.getLogger(__name__)

# Evaluated as predicate(value, x, y, z) for every candidate voxel
MaskPredicate = Callable[[float, int, int, int], bool]


class ROIMask:
    """Immutable run-length encoded voxel mask.

    Args:
        runs: Runs already sorted by (slice, row, start). They are validated
            but never reordered or merged; use ``canonicalized()`` to merge
            abutting runs of equal value.

    Raises:
        ConstructionInvariantViolation: On unsorted, zero-width or
            overlapping runs, or NaN values
        CoordinateRangeError: On coordinates outside [0, MAX_COORDINATE]
    """

    def __init__(self, runs: Iterable[MaskRun] = ()):
        runs = tuple(runs)
        validate_runs(runs)
        self._runs = runs
        self._keys = [(run.slice_index, run.row_index, run.start) for run in runs]
        self._voxel_count = sum(run.width for run in runs)
        self._canonical = is_canonical(runs)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls) -> 'ROIMask':
        return cls(())

    @classmethod
    def from_volume(
        cls,
        sampler: VolumeSampler,
        tolerance: float = 0.0,
        progress: bool = False
    ) -> 'ROIMask':
        """Build a mask covering the whole volume, keeping its intensities.

        Every row is scanned along the width axis and split into maximal runs
        whose samples stay within ``tolerance`` of the run's first sample.

        Args:
            sampler: Volume to sample
            tolerance: Largest absolute difference still treated as the same
                value (0.0 means exact equality)
            progress: Show a progress bar over rows

        Returns:
            Canonical mask with one or more runs per row
        """
        if tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {tolerance}")
        width, height, depth = sampler.extent
        rows = [(y, z) for z in range(depth) for y in range(height)]
        iterator = tqdm(rows, desc="Sampling volume") if progress else rows

        runs: List[MaskRun] = []
        for y, z in iterator:
            values = row_samples(sampler, y, z)
            runs.extend(_row_runs(values[:width], y, z, tolerance))

        logger.debug("Sampled %dx%dx%d volume into %d runs", width, height, depth, len(runs))
        return cls(runs)

    @classmethod
    def from_buffer(cls, data: Union[bytes, bytearray, memoryview]) -> 'ROIMask':
        """Rebuild a mask from ``mask_runs_data()`` output, validating it."""
        return cls(runs_from_buffer(data))

    def canonicalized(self) -> 'ROIMask':
        """Return this mask with abutting runs of equal value merged."""
        if self._canonical:
            return self
        return ROIMask(canonicalize(self._runs))

    def filtered(
        self,
        predicate: MaskPredicate,
        sampler: Optional[VolumeSampler] = None
    ) -> 'ROIMask':
        """Keep the voxels for which ``predicate(value, x, y, z)`` holds.

        Args:
            predicate: Side-effect free test, called once per voxel in
                slice-major, row-major, ascending-x order
            sampler: If given, ``value`` is the sampler's intensity at the
                voxel; otherwise it is the run's value

        Returns:
            Canonical mask; surviving voxels keep their run's value
        """
        runs: List[MaskRun] = []
        for run in self._runs:
            y, z = run.row_index, run.slice_index
            start = None
            for x in range(run.start, run.end):
                value = run.value if sampler is None else sampler.sample(x, y, z)
                if predicate(value, x, y, z):
                    if start is None:
                        start = x
                elif start is not None:
                    runs.append(run.with_range(start, x))
                    start = None
            if start is not None:
                runs.append(run.with_range(start, run.end))

        logger.debug("Filtered %d voxels down to %d runs", self._voxel_count, len(runs))
        return ROIMask(canonicalize(runs))

    def relabeled(self, value: float = 1.0) -> 'ROIMask':
        """Same voxels with every run set to ``value``, merged to canonical form."""
        return ROIMask(canonicalize(
            MaskRun(run.start, run.end, run.row_index, run.slice_index, value)
            for run in self._runs
        ))

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------

    def translated(self, dx: int, dy: int, dz: int) -> 'ROIMask':
        """Return the mask shifted by (dx, dy, dz) voxels.

        Raises:
            CoordinateRangeError: If any voxel would leave [0, MAX_COORDINATE]
        """
        _check_operand(self, 'Translated')
        dx, dy, dz = operator.index(dx), operator.index(dy), operator.index(dz)
        if not self._runs:
            return self

        min_x = min(run.start for run in self._runs)
        min_y = min(run.row_index for run in self._runs)
        min_z = self._runs[0].slice_index
        if min_x + dx < 0 or min_y + dy < 0 or min_z + dz < 0:
            raise CoordinateRangeError(
                f"Translating by ({dx}, {dy}, {dz}) moves the mask starting at "
                f"({min_x}, {min_y}, {min_z}) below zero"
            )

        runs = [
            MaskRun(run.start + dx, run.end + dx, run.row_index + dy, run.slice_index + dz, run.value)
            for run in self._runs
        ]
        return ROIMask(canonicalize(runs))

    def intersection(self, other: 'ROIMask') -> 'ROIMask':
        """Voxels present in both masks, with this mask's values."""
        _check_operand(self, 'Left')
        _check_operand(other, 'Right')

        other_rows = rows_by_key(other._runs)
        runs: List[MaskRun] = []
        for key, row in iter_rows(self._runs):
            other_row = other_rows.get(key)
            if other_row:
                runs.extend(_intersect_row(row, other_row))

        logger.debug("Intersected %d and %d runs into %d", self.run_count, other.run_count, len(runs))
        return ROIMask(canonicalize(runs))

    def union(self, other: 'ROIMask') -> 'ROIMask':
        """Voxels present in either mask.

        This mask's runs pass through unchanged. Voxels only ``other`` covers
        keep ``other``'s values, so where both masks cover a voxel this mask's
        value wins. Abutting results of equal value are merged afterwards.
        """
        _check_operand(self, 'Left')
        _check_operand(other, 'Right')

        left_rows = rows_by_key(self._runs)
        right_rows = rows_by_key(other._runs)
        runs: List[MaskRun] = []
        for key in sorted(left_rows.keys() | right_rows.keys()):
            runs.extend(_union_row(left_rows.get(key, []), right_rows.get(key, [])))

        logger.debug("United %d and %d runs into %d", self.run_count, other.run_count, len(runs))
        return ROIMask(canonicalize(runs))

    def subtraction(self, other: 'ROIMask') -> 'ROIMask':
        """Voxels of this mask that are not in ``other``."""
        _check_operand(self, 'Left')
        _check_operand(other, 'Right')

        other_rows = rows_by_key(other._runs)
        runs: List[MaskRun] = []
        for key, row in iter_rows(self._runs):
            other_row = other_rows.get(key)
            if other_row:
                runs.extend(_subtract_row(row, other_row))
            else:
                runs.extend(row)

        logger.debug("Subtracted %d runs from %d, leaving %d", other.run_count, self.run_count, len(runs))
        return ROIMask(canonicalize(runs))

    def __and__(self, other):
        if not isinstance(other, ROIMask):
            return NotImplemented
        return self.intersection(other)

    def __or__(self, other):
        if not isinstance(other, ROIMask):
            return NotImplemented
        return self.union(other)

    def __sub__(self, other):
        if not isinstance(other, ROIMask):
            return NotImplemented
        return self.subtraction(other)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def mask_runs(self) -> Tuple[MaskRun, ...]:
        return self._runs

    @property
    def run_count(self) -> int:
        return len(self._runs)

    @property
    def voxel_count(self) -> int:
        return self._voxel_count

    @property
    def is_canonical(self) -> bool:
        return self._canonical

    def mask_runs_data(self) -> bytes:
        """The runs as a contiguous buffer of fixed-size records."""
        return runs_to_buffer(self._runs)

    def index_in_mask(self, index: MaskIndex) -> bool:
        """True if ``index`` is one of the mask's voxels. O(log n) in runs."""
        position = bisect_right(self._keys, (index.z, index.y, index.x)) - 1
        if position < 0:
            return False
        return index_in_run(index, self._runs[position])

    def iter_indexes(self) -> Iterator[MaskIndex]:
        """Lazily yield every voxel index in run order."""
        for run in self._runs:
            for x in range(run.start, run.end):
                yield MaskIndex(x, run.row_index, run.slice_index)

    def mask_indexes(self) -> List[MaskIndex]:
        return list(self.iter_indexes())

    def bounding_box(self) -> Optional[Tuple[MaskIndex, MaskIndex]]:
        """Inclusive (min, max) voxel indexes, or None for an empty mask."""
        if not self._runs:
            return None
        lower = MaskIndex(
            min(run.start for run in self._runs),
            min(run.row_index for run in self._runs),
            self._runs[0].slice_index,
        )
        upper = MaskIndex(
            max(run.end for run in self._runs) - 1,
            max(run.row_index for run in self._runs),
            self._runs[-1].slice_index,
        )
        return lower, upper

    def to_array(
        self,
        shape: Optional[Tuple[int, int, int]] = None,
        values: bool = False
    ) -> np.ndarray:
        """Rasterize the mask into a dense (D, H, W) array.

        Args:
            shape: Output shape; defaults to the bounding box extent from 0
            values: If True, fill with run values (float32), else booleans

        Returns:
            Dense array indexed as ``array[z, y, x]``
        """
        if shape is None:
            box = self.bounding_box()
            shape = (0, 0, 0) if box is None else (box[1].z + 1, box[1].y + 1, box[1].x + 1)
        array = np.zeros(shape, dtype=np.float32 if values else bool)

        d, h, w = shape
        for run in self._runs:
            if run.slice_index >= d or run.row_index >= h or run.end > w:
                raise ValueError(f"Run {run} does not fit in shape {shape}")
            array[run.slice_index, run.row_index, run.start:run.end] = run.value if values else True
        return array

    def convex_hull(self, tolerance: float = HULL_TOLERANCE) -> MaskHull:
        """Convex hull of the mask's voxels.

        Only the first and last voxel of each run are passed to the hull, as
        the voxels in between lie on the segment joining them.
        """
        if not self._runs:
            return MaskHull.empty()
        points = np.array(
            [(run.start, run.row_index, run.slice_index) for run in self._runs]
            + [(run.end - 1, run.row_index, run.slice_index) for run in self._runs],
            dtype=np.int64,
        )
        return convex_hull(points, tolerance)

    # ------------------------------------------------------------------
    # Protocols
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._runs)

    def __contains__(self, index) -> bool:
        if not isinstance(index, MaskIndex):
            index = MaskIndex(*index)
        return self.index_in_mask(index)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ROIMask):
            return NotImplemented
        return self._runs == other._runs

    def __hash__(self) -> int:
        return hash(self._runs)

    def __repr__(self) -> str:
        return f"ROIMask(run_count={self.run_count}, voxel_count={self.voxel_count})"


def _check_operand(mask, role: str) -> None:
    if not isinstance(mask, ROIMask):
        raise IncompatibleOperands(f"{role} operand is a {type(mask).__name__}, not an ROIMask")
    if not mask.is_canonical:
        raise IncompatibleOperands(
            f"{role} operand is not canonical; call canonicalized() before combining masks"
        )


def _row_runs(values: np.ndarray, y: int, z: int, tolerance: float) -> List[MaskRun]:
    """Split one row of samples into runs of (nearly) equal value."""
    n = len(values)
    if n == 0:
        return []

    if tolerance == 0.0:
        breaks = np.flatnonzero(values[1:] != values[:-1]) + 1
        starts = np.concatenate(([0], breaks))
        ends = np.concatenate((breaks, [n]))
        return [MaskRun(s, e, y, z, values[s]) for s, e in zip(starts, ends)]

    runs = []
    start = 0
    for x in range(1, n + 1):
        if x == n or not abs(values[x] - values[start]) <= tolerance:
            runs.append(MaskRun(start, x, y, z, values[start]))
            start = x
    return runs


def _intersect_row(left: Sequence[MaskRun], right: Sequence[MaskRun]) -> List[MaskRun]:
    runs = []
    i = j = 0
    while i < len(left) and j < len(right):
        a, b = left[i], right[j]
        start, end = max(a.start, b.start), min(a.end, b.end)
        if start < end:
            runs.append(a.with_range(start, end))
        if a.end <= b.end:
            i += 1
        else:
            j += 1
    return runs


def _union_row(left: Sequence[MaskRun], right: Sequence[MaskRun]) -> List[MaskRun]:
    # Left runs pass through; right runs only fill the voxels left leaves uncovered
    runs = list(left) + _subtract_row(right, left)
    runs.sort(key=lambda run: run.start)
    return runs


def _subtract_row(left: Sequence[MaskRun], right: Sequence[MaskRun]) -> List[MaskRun]:
    runs = []
    j = 0
    for run in left:
        while j < len(right) and right[j].end <= run.start:
            j += 1
        cursor = run.start
        k = j
        while k < len(right) and right[k].start < run.end:
            cut = right[k]
            if cut.start > cursor:
                runs.append(run.with_range(cursor, cut.start))
            cursor = max(cursor, cut.end)
            k += 1
        if cursor < run.end:
            runs.append(run.with_range(cursor, run.end))
    return runs
