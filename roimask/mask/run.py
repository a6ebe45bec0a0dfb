"""Run-length mask primitives: runs, indexes and interval predicates.

A run covers the half-open interval ``[start, end)`` along the width (x) axis
at a fixed row (y) and slice (z) and carries one representative sample value.
"""

from dataclasses import dataclass
from functools import total_ordering
from typing import List, Literal, Tuple, Union

import numpy as np


def _as_float32(value: float) -> float:
    # Samples are stored with float32 precision, matching the raw run buffer
    return float(np.float32(value))


@dataclass(frozen=True)
class MaskRun:
    """A single run of voxels along the width axis."""

    start: int
    end: int
    row_index: int
    slice_index: int
    value: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'start', int(self.start))
        object.__setattr__(self, 'end', int(self.end))
        object.__setattr__(self, 'row_index', int(self.row_index))
        object.__setattr__(self, 'slice_index', int(self.slice_index))
        object.__setattr__(self, 'value', _as_float32(self.value))

    @classmethod
    def zero(cls) -> 'MaskRun':
        """Return the all-zero run (zero width, never valid inside a mask)."""
        return cls(0, 0, 0, 0, 0.0)

    @property
    def width(self) -> int:
        return self.end - self.start

    @property
    def width_range(self) -> Tuple[int, int]:
        return self.start, self.end

    @property
    def row_key(self) -> Tuple[int, int]:
        """(slice_index, row_index) identifying the row this run lives in."""
        return self.slice_index, self.row_index

    def with_range(self, start: int, end: int) -> 'MaskRun':
        """Return a copy of this run covering ``[start, end)`` instead."""
        return MaskRun(start, end, self.row_index, self.slice_index, self.value)

    def first_index(self) -> 'MaskIndex':
        return MaskIndex(self.start, self.row_index, self.slice_index)

    def last_index(self) -> 'MaskIndex':
        return MaskIndex(self.end - 1, self.row_index, self.slice_index)


@dataclass(frozen=True)
class MaskIndex:
    """A single voxel coordinate."""

    x: int
    y: int
    z: int

    def __post_init__(self):
        object.__setattr__(self, 'x', int(self.x))
        object.__setattr__(self, 'y', int(self.y))
        object.__setattr__(self, 'z', int(self.z))

    def as_tuple(self) -> Tuple[int, int, int]:
        return self.x, self.y, self.z


def run_sort_key(run: MaskRun) -> Tuple[int, int, int, int, float]:
    """Sort key giving the canonical run order.

    Lexicographic on (slice, row, start); ties broken by width and value so
    that sorting is deterministic.
    """
    return run.slice_index, run.row_index, run.start, run.width, run.value


def compare_runs(run1: MaskRun, run2: MaskRun) -> int:
    """Compare two runs in canonical order.

    Returns:
        -1 if ``run1`` sorts before ``run2``, 1 if after, 0 if equal
    """
    key1 = run_sort_key(run1)
    key2 = run_sort_key(run2)
    if key1 < key2:
        return -1
    if key1 > key2:
        return 1
    return 0


def runs_overlap(run1: MaskRun, run2: MaskRun) -> bool:
    """True if both runs share a row and their width ranges intersect."""
    if run1.row_key != run2.row_key:
        return False
    return run1.start < run2.end and run2.start < run1.end


def runs_abut(run1: MaskRun, run2: MaskRun) -> bool:
    """True if both runs share a row and touch end-to-start without overlap."""
    if run1.row_key != run2.row_key or runs_overlap(run1, run2):
        return False
    return run1.end == run2.start or run2.end == run1.start


def index_in_run(index: MaskIndex, run: MaskRun) -> bool:
    """True if the voxel ``index`` lies within ``run``."""
    return (
        index.y == run.row_index
        and index.z == run.slice_index
        and run.start <= index.x < run.end
    )


def indexes_in_run(run: MaskRun) -> List[MaskIndex]:
    """Expand a run into its voxel indexes, in ascending x."""
    return [MaskIndex(x, run.row_index, run.slice_index) for x in range(run.start, run.end)]


@total_ordering
@dataclass(frozen=True)
class MaskValue:
    """Boxed run or index for storage in generic containers.

    Equality and hashing cover the kind tag and every field of the payload, so
    a boxed run never compares equal to a boxed index. Boxed values order like
    their payloads: runs by ``run_sort_key``, indexes by (z, y, x). Indexes
    sort before runs.
    """

    kind: Literal['run', 'index']
    payload: Union[MaskRun, MaskIndex]

    @classmethod
    def from_run(cls, run: MaskRun) -> 'MaskValue':
        return cls('run', run)

    @classmethod
    def from_index(cls, index: MaskIndex) -> 'MaskValue':
        return cls('index', index)

    def run_value(self) -> MaskRun:
        if self.kind != 'run':
            raise TypeError(f"Boxed value holds a {self.kind}, not a run")
        return self.payload

    def index_value(self) -> MaskIndex:
        if self.kind != 'index':
            raise TypeError(f"Boxed value holds a {self.kind}, not an index")
        return self.payload

    def sort_key(self) -> Tuple:
        if self.kind == 'run':
            return (1,) + run_sort_key(self.payload)
        index = self.payload
        return 0, index.z, index.y, index.x

    def __lt__(self, other):
        if not isinstance(other, MaskValue):
            return NotImplemented
        return self.sort_key() < other.sort_key()


def compare_run_values(value1: MaskValue, value2: MaskValue) -> int:
    """Compare two boxed runs in canonical order, like ``compare_runs``.

    Raises:
        TypeError: If either value does not hold a run
    """
    return compare_runs(value1.run_value(), value2.run_value())
