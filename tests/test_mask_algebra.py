"""Tests for translation, intersection, union and subtraction of masks."""

import numpy as np
import pytest

from conftest import labels_to_mask
from roimask.mask.errors import CoordinateRangeError, IncompatibleOperands
from roimask.mask.roi_mask import ROIMask
from roimask.mask.run import MaskRun
from roimask.volume.sampler import ArrayVolumeSampler


@pytest.fixture
def mask_a():
    return ROIMask([MaskRun(0, 3, 0, 0)])


@pytest.fixture
def mask_b():
    return ROIMask([MaskRun(2, 5, 0, 0)])


def test_overlapping_runs_scenario(mask_a, mask_b):
    assert mask_a.intersection(mask_b).mask_runs == (MaskRun(2, 3, 0, 0),)
    assert mask_a.union(mask_b).mask_runs == (MaskRun(0, 5, 0, 0),)
    assert mask_a.subtraction(mask_b).mask_runs == (MaskRun(0, 2, 0, 0),)


def test_operators_match_methods(mask_a, mask_b):
    assert (mask_a & mask_b) == mask_a.intersection(mask_b)
    assert (mask_a | mask_b) == mask_a.union(mask_b)
    assert (mask_a - mask_b) == mask_a.subtraction(mask_b)
    with pytest.raises(TypeError):
        mask_a & 3


def test_translate_below_zero_fails(mask_a):
    with pytest.raises(CoordinateRangeError):
        mask_a.translated(-5, 0, 0)
    with pytest.raises(CoordinateRangeError):
        mask_a.translated(0, -1, 0)
    with pytest.raises(CoordinateRangeError):
        mask_a.translated(0, 0, -1)


def test_translate_past_record_range_fails(mask_a):
    with pytest.raises(CoordinateRangeError):
        mask_a.translated(2 ** 64, 0, 0)
    with pytest.raises(CoordinateRangeError):
        mask_a.translated(0, 2 ** 64, 0)
    with pytest.raises(CoordinateRangeError):
        mask_a.translated(0, 0, 2 ** 64)


def test_translate_shifts_every_run():
    mask = ROIMask([MaskRun(2, 4, 1, 0, 1.0), MaskRun(3, 5, 3, 2, 2.0)])

    moved = mask.translated(-2, 1, 5)

    assert moved.mask_runs == (MaskRun(0, 2, 2, 5, 1.0), MaskRun(1, 3, 4, 7, 2.0))


def test_translate_identity_and_composition(random_labels):
    mask = labels_to_mask(random_labels())

    assert mask.translated(0, 0, 0) == mask
    assert mask.translated(1, 2, 0).translated(2, -1, 1) == mask.translated(3, 1, 1)
    assert mask.translated(4, 4, 4).translated(-4, -4, -4) == mask


def test_translate_empty_mask():
    assert ROIMask.empty().translated(-3, -3, -3) == ROIMask.empty()


def test_translate_rejects_fractional_offsets(mask_a):
    with pytest.raises(TypeError):
        mask_a.translated(0.5, 0, 0)


def test_intersection_takes_left_values():
    a = ROIMask([MaskRun(0, 3, 0, 0, 1.0)])
    b = ROIMask([MaskRun(2, 5, 0, 0, 2.0)])

    assert a.intersection(b).mask_runs == (MaskRun(2, 3, 0, 0, 1.0),)
    assert b.intersection(a).mask_runs == (MaskRun(2, 3, 0, 0, 2.0),)


def test_intersection_pieces_are_merged():
    """Pieces cut from one left run by abutting right runs are merged back."""
    a = ROIMask([MaskRun(0, 10, 0, 0, 1.0)])
    b = ROIMask([MaskRun(0, 3, 0, 0, 1.0), MaskRun(3, 6, 0, 0, 2.0)])

    assert a.intersection(b).mask_runs == (MaskRun(0, 6, 0, 0, 1.0),)


def test_intersection_of_disjoint_rows_is_empty():
    a = ROIMask([MaskRun(0, 3, 0, 0)])
    b = ROIMask([MaskRun(0, 3, 1, 0)])

    assert a.intersection(b).run_count == 0


def test_union_value_policy():
    """The left operand's value wins where both masks cover a voxel."""
    a = ROIMask([MaskRun(3, 6, 0, 0, 1.0)])
    b = ROIMask([MaskRun(0, 4, 0, 0, 2.0)])

    assert a.union(b).mask_runs == (MaskRun(0, 3, 0, 0, 2.0), MaskRun(3, 6, 0, 0, 1.0))
    assert b.union(a).mask_runs == (MaskRun(0, 4, 0, 0, 2.0), MaskRun(4, 6, 0, 0, 1.0))


def test_union_merges_only_equal_abutting_runs():
    a = ROIMask([MaskRun(0, 2, 0, 0, 1.0), MaskRun(8, 9, 0, 0, 1.0)])
    b = ROIMask([
        MaskRun(2, 4, 0, 0, 1.0), MaskRun(5, 7, 0, 0, 2.0), MaskRun(7, 8, 0, 0, 3.0),
        MaskRun(0, 1, 1, 0, 2.0),
    ])

    assert a.union(b).mask_runs == (
        MaskRun(0, 4, 0, 0, 1.0),
        MaskRun(5, 7, 0, 0, 2.0),
        MaskRun(7, 8, 0, 0, 3.0),
        MaskRun(8, 9, 0, 0, 1.0),
        MaskRun(0, 1, 1, 0, 2.0),
    )


def test_union_keeps_values_of_multi_valued_mask():
    volume = np.array([[[1.0, 1.0, 2.0, 2.0], [3.0, 4.0, 4.0, 5.0]]], dtype=np.float32)
    mask = ROIMask.from_volume(ArrayVolumeSampler(volume))

    assert mask.run_count == 5
    assert mask.union(ROIMask.empty()) == mask
    assert ROIMask.empty().union(mask) == mask
    assert mask.union(mask) == mask


def test_union_values_match_dense_priority(rng):
    shape = (3, 5, 16)
    for _ in range(20):
        volume_a = rng.integers(1, 6, size=shape).astype(np.float32)
        volume_b = rng.integers(1, 6, size=shape).astype(np.float32)
        keep_a = rng.random(shape) < 0.5
        keep_b = rng.random(shape) < 0.5
        mask_a = ROIMask.from_volume(ArrayVolumeSampler(volume_a)).filtered(
            lambda value, x, y, z: keep_a[z, y, x]
        )
        mask_b = ROIMask.from_volume(ArrayVolumeSampler(volume_b)).filtered(
            lambda value, x, y, z: keep_b[z, y, x]
        )

        expected = np.where(keep_a, volume_a, np.where(keep_b, volume_b, 0.0))
        np.testing.assert_array_equal(mask_a.union(mask_b).to_array(shape, values=True), expected)
        assert mask_a.intersection(mask_a.union(mask_b)) == mask_a


def test_subtraction_splits_runs():
    a = ROIMask([MaskRun(0, 10, 0, 0, 3.0)])
    b = ROIMask([MaskRun(2, 4, 0, 0), MaskRun(6, 7, 0, 0)])

    assert a.subtraction(b).mask_runs == (
        MaskRun(0, 2, 0, 0, 3.0),
        MaskRun(4, 6, 0, 0, 3.0),
        MaskRun(7, 10, 0, 0, 3.0),
    )


def test_subtraction_across_several_left_runs():
    a = ROIMask([MaskRun(0, 3, 0, 0, 1.0), MaskRun(3, 6, 0, 0, 2.0), MaskRun(8, 10, 0, 0, 1.0)])
    b = ROIMask([MaskRun(2, 9, 0, 0)])

    assert a.subtraction(b).mask_runs == (MaskRun(0, 2, 0, 0, 1.0), MaskRun(9, 10, 0, 0, 1.0))


def test_subtraction_passes_unmatched_rows_through():
    a = ROIMask([MaskRun(0, 3, 0, 0), MaskRun(0, 3, 1, 0)])
    b = ROIMask([MaskRun(0, 3, 1, 0)])

    assert a.subtraction(b).mask_runs == (MaskRun(0, 3, 0, 0),)


def test_non_canonical_operands_are_rejected(mask_a):
    loose = ROIMask([MaskRun(0, 3, 0, 0), MaskRun(3, 5, 0, 0)])

    with pytest.raises(IncompatibleOperands):
        mask_a.union(loose)
    with pytest.raises(IncompatibleOperands):
        loose.intersection(mask_a)
    with pytest.raises(IncompatibleOperands):
        mask_a.subtraction(loose)
    with pytest.raises(IncompatibleOperands):
        loose.translated(1, 0, 0)
    with pytest.raises(IncompatibleOperands):
        mask_a.intersection("not a mask")

    # Canonicalizing first makes the same operation valid
    assert mask_a.union(loose.canonicalized()).mask_runs == (MaskRun(0, 5, 0, 0),)


def test_algebra_matches_dense_boolean_ops(random_labels):
    for _ in range(20):
        labels_a = random_labels()
        labels_b = random_labels()
        a, b = labels_a != 0, labels_b != 0
        mask_a, mask_b = labels_to_mask(labels_a), labels_to_mask(labels_b)
        shape = labels_a.shape

        np.testing.assert_array_equal(mask_a.intersection(mask_b).to_array(shape), a & b)
        np.testing.assert_array_equal(mask_a.union(mask_b).to_array(shape), a | b)
        np.testing.assert_array_equal(mask_a.subtraction(mask_b).to_array(shape), a & ~b)

        # Intersection and subtraction keep the left operand's samples
        both = a & b
        np.testing.assert_array_equal(
            mask_a.intersection(mask_b).to_array(shape, values=True)[both], labels_a[both]
        )
        left_only = a & ~b
        np.testing.assert_array_equal(
            mask_a.subtraction(mask_b).to_array(shape, values=True)[left_only], labels_a[left_only]
        )


def test_set_algebra_laws(random_labels):
    for _ in range(20):
        mask_a = labels_to_mask(random_labels())
        mask_b = labels_to_mask(random_labels())
        shape = (3, 5, 16)

        np.testing.assert_array_equal(
            mask_a.union(mask_b).to_array(shape), mask_b.union(mask_a).to_array(shape)
        )
        np.testing.assert_array_equal(
            mask_a.intersection(mask_b).to_array(shape), mask_b.intersection(mask_a).to_array(shape)
        )
        assert mask_a.subtraction(mask_a).run_count == 0
        assert mask_a.intersection(mask_a.union(mask_b)) == mask_a


def test_random_operation_sequences_keep_invariants(rng, random_labels, check_invariants):
    mask = labels_to_mask(random_labels())
    for _ in range(60):
        other = labels_to_mask(random_labels(density=rng.uniform(0.2, 0.9)))
        op = rng.integers(0, 5)
        if op == 0:
            mask = mask.union(other)
        elif op == 1:
            mask = mask.intersection(other.union(mask))
        elif op == 2:
            mask = mask.subtraction(other)
        elif op == 3:
            mask = mask.translated(*(int(v) for v in rng.integers(0, 2, size=3)))
        else:
            mask = mask.filtered(lambda value, x, y, z: (x + y + z) % 3 != 0).union(other)
        check_invariants(mask)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
