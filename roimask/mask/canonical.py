"""Validation and canonicalization of sorted run sequences.

A valid run sequence is sorted by (slice, row, start), has positive-width
runs with in-range coordinates and non-NaN values, and has no overlaps within
a row. A canonical sequence is additionally minimal: no two abutting runs in a
row carry the same value.
"""

import math
from itertools import groupby
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

from .errors import ConstructionInvariantViolation, CoordinateRangeError
from .run import MaskRun, runs_abut

RowKey = Tuple[int, int]

# Largest coordinate a run can reach and still fit the 64-bit buffer record
MAX_COORDINATE = 2 ** 64 - 1


def check_coordinates(run: MaskRun) -> None:
    """Raise CoordinateRangeError if ``run`` leaves [0, MAX_COORDINATE]."""
    if run.start < 0 or run.row_index < 0 or run.slice_index < 0:
        raise CoordinateRangeError(
            f"Run {run} has a negative coordinate; voxel indexes must be >= 0"
        )
    if max(run.end, run.row_index, run.slice_index) > MAX_COORDINATE:
        raise CoordinateRangeError(f"Run {run} has a coordinate above {MAX_COORDINATE}")


def validate_runs(runs: Sequence[MaskRun]) -> None:
    """Check that ``runs`` form a valid (not necessarily canonical) sequence.

    Args:
        runs: Runs in the order they will be stored

    Raises:
        ConstructionInvariantViolation: On zero-width, unsorted or
            overlapping runs, or NaN values
        CoordinateRangeError: On coordinates outside [0, MAX_COORDINATE]
    """
    previous = None
    for position, run in enumerate(runs):
        if not isinstance(run, MaskRun):
            raise ConstructionInvariantViolation(
                f"Item {position} is a {type(run).__name__}, expected MaskRun"
            )
        if run.width <= 0:
            raise ConstructionInvariantViolation(
                f"Run {position} has non-positive width: {run}"
            )
        if math.isnan(run.value):
            raise ConstructionInvariantViolation(
                f"Run {position} has a NaN value: {run}"
            )
        check_coordinates(run)

        if previous is not None:
            prev_key = (previous.slice_index, previous.row_index, previous.start)
            key = (run.slice_index, run.row_index, run.start)
            if key <= prev_key:
                raise ConstructionInvariantViolation(
                    f"Runs are not sorted at position {position}: {previous} then {run}"
                )
            if previous.row_key == run.row_key and previous.end > run.start:
                raise ConstructionInvariantViolation(
                    f"Runs overlap at position {position}: {previous} and {run}"
                )
        previous = run


def is_canonical(runs: Sequence[MaskRun]) -> bool:
    """True if no two consecutive runs abut while carrying the same value.

    Assumes ``runs`` is already valid.
    """
    for previous, run in zip(runs, runs[1:]):
        if previous.value == run.value and runs_abut(previous, run):
            return False
    return True


def canonicalize(runs: Iterable[MaskRun]) -> List[MaskRun]:
    """Merge abutting runs that carry the same value.

    Args:
        runs: Valid runs in canonical order

    Returns:
        New list of runs in canonical form
    """
    merged: List[MaskRun] = []
    for run in runs:
        if merged:
            last = merged[-1]
            if (
                last.row_key == run.row_key
                and last.end == run.start
                and last.value == run.value
            ):
                merged[-1] = last.with_range(last.start, run.end)
                continue
        merged.append(run)
    return merged


def iter_rows(runs: Iterable[MaskRun]) -> Iterator[Tuple[RowKey, List[MaskRun]]]:
    """Group sorted runs into rows, yielding ``(row_key, runs)`` in order."""
    for key, group in groupby(runs, key=lambda run: run.row_key):
        yield key, list(group)


def rows_by_key(runs: Iterable[MaskRun]) -> Dict[RowKey, List[MaskRun]]:
    """Map each row key to its runs (insertion ordered, like the input)."""
    return dict(iter_rows(runs))
