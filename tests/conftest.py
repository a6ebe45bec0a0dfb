"""Shared fixtures for the roimask test suite.

Random masks are built from dense label volumes so that every algebra result
can be checked against the equivalent numpy boolean operation.
"""

import numpy as np
import pytest

from roimask.mask.roi_mask import ROIMask
from roimask.volume.sampler import ArrayVolumeSampler


def labels_to_mask(labels: np.ndarray) -> ROIMask:
    """Mask of the non-zero voxels of a (D, H, W) label volume, valued by label."""
    return ROIMask.from_volume(ArrayVolumeSampler(labels)).filtered(
        lambda value, x, y, z: value != 0
    )


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def random_labels(rng):
    """Factory for random label volumes with labels 1..num_labels and 0 background."""
    def make(shape=(3, 5, 16), density=0.6, num_labels=2):
        labels = rng.integers(1, num_labels + 1, size=shape).astype(np.float32)
        labels[rng.random(shape) >= density] = 0
        return labels
    return make


@pytest.fixture
def check_invariants():
    """Assert that a mask is sorted, non-overlapping, positive-width and canonical."""
    def check(mask: ROIMask):
        runs = mask.mask_runs
        for run in runs:
            assert run.width > 0
            assert run.start >= 0 and run.row_index >= 0 and run.slice_index >= 0
        for prev, run in zip(runs, runs[1:]):
            prev_key = (prev.slice_index, prev.row_index, prev.start)
            assert prev_key < (run.slice_index, run.row_index, run.start)
            if prev.row_key == run.row_key:
                assert prev.end <= run.start
                assert not (prev.end == run.start and prev.value == run.value)
        assert mask.is_canonical
    return check
