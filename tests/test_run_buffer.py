"""Tests for the raw run buffer export and import."""

import struct

import pytest

from conftest import labels_to_mask
from roimask.mask.canonical import MAX_COORDINATE
from roimask.mask.errors import ConstructionInvariantViolation, IncompatibleOperands
from roimask.mask.roi_mask import ROIMask
from roimask.mask.run import MaskRun
from roimask.mask.run_buffer import RUN_RECORD_DTYPE, runs_from_buffer, runs_to_buffer


def test_record_layout():
    """Records are (location, length, height, depth) uint64 plus float32 intensity."""
    assert RUN_RECORD_DTYPE.itemsize == 36

    data = runs_to_buffer([MaskRun(5, 9, 2, 3, -12.5)])

    assert struct.unpack('<QQQQf', data) == (5, 4, 2, 3, -12.5)


def test_buffer_round_trip(random_labels):
    mask = labels_to_mask(random_labels(num_labels=4))

    data = mask.mask_runs_data()
    restored = ROIMask.from_buffer(data)

    assert len(data) == mask.run_count * RUN_RECORD_DTYPE.itemsize
    assert restored == mask
    assert restored.mask_runs == mask.mask_runs
    assert restored.is_canonical


def test_round_trip_preserves_fractional_values():
    mask = ROIMask([MaskRun(0, 2, 0, 0, 0.1), MaskRun(2, 3, 0, 0, -1024.3)])

    assert ROIMask.from_buffer(bytearray(mask.mask_runs_data())) == mask


def test_truncated_buffer_is_rejected():
    data = runs_to_buffer([MaskRun(0, 1, 0, 0)])

    with pytest.raises(ConstructionInvariantViolation):
        runs_from_buffer(data[:-1])


def test_unsorted_buffer_is_rejected():
    data = runs_to_buffer([MaskRun(0, 1, 1, 0), MaskRun(0, 1, 0, 0)])

    with pytest.raises(ConstructionInvariantViolation):
        ROIMask.from_buffer(data)


def test_non_canonical_buffer_cannot_enter_algebra():
    data = runs_to_buffer([MaskRun(0, 2, 0, 0), MaskRun(2, 4, 0, 0)])
    loaded = ROIMask.from_buffer(data)

    assert not loaded.is_canonical
    with pytest.raises(IncompatibleOperands):
        loaded.union(ROIMask.empty())


def test_round_trip_at_largest_coordinate():
    top = MAX_COORDINATE
    mask = ROIMask([MaskRun(top - 2, top, top, top, 1.5)])

    data = mask.mask_runs_data()

    assert struct.unpack('<QQQQf', data) == (top - 2, 2, top, top, 1.5)
    assert ROIMask.from_buffer(data) == mask


def test_nan_record_is_rejected():
    data = struct.pack('<QQQQf', 0, 1, 0, 0, float('nan'))

    with pytest.raises(ConstructionInvariantViolation):
        ROIMask.from_buffer(data)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
