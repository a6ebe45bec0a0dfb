"""HU threshold masks built from volume samplers."""

import logging
from typing import Optional

from ..mask.roi_mask import MaskPredicate, ROIMask
from ..volume.sampler import VolumeSampler

logger = logging.getLogger(__name__)


def threshold_predicate(lower: Optional[float] = None, upper: Optional[float] = None) -> MaskPredicate:
    """Build a predicate keeping voxels with ``lower <= value <= upper``.

    Either bound may be None to leave that side open.
    """
    if lower is not None and upper is not None and lower > upper:
        raise ValueError(f"Empty threshold window [{lower}, {upper}]")

    def predicate(value: float, x: int, y: int, z: int) -> bool:
        if lower is not None and value < lower:
            return False
        if upper is not None and value > upper:
            return False
        return True

    return predicate


def create_threshold_mask(
    sampler: VolumeSampler,
    lower: Optional[float] = None,
    upper: Optional[float] = None,
    tolerance: float = 0.0,
    progress: bool = False
) -> ROIMask:
    """Mask of the voxels whose intensity lies in a HU window.

    Args:
        sampler: Volume to threshold
        lower: Lowest kept HU value (inclusive), None for no lower bound
        upper: Highest kept HU value (inclusive), None for no upper bound
        tolerance: Sample difference merged into one run while scanning
        progress: Show a progress bar while sampling

    Returns:
        Mask whose runs keep the sampled intensities
    """
    volume_mask = ROIMask.from_volume(sampler, tolerance=tolerance, progress=progress)
    # Runs merged under a tolerance no longer carry each voxel's own sample
    source = sampler if tolerance > 0 else None
    mask = volume_mask.filtered(threshold_predicate(lower, upper), sampler=source)
    logger.debug(
        "Threshold [%s, %s] kept %d of %d voxels",
        lower, upper, mask.voxel_count, volume_mask.voxel_count
    )
    return mask


def create_body_mask(
    sampler: VolumeSampler,
    threshold_hu: float = -500.0,
    progress: bool = False
) -> ROIMask:
    """Binary mask of body voxels, excluding air and background.

    Args:
        sampler: CT volume in HU
        threshold_hu: HU threshold for body vs. air (default -500)
        progress: Show a progress bar while sampling

    Returns:
        Mask of voxels above the threshold, every run labeled 1.0
    """
    volume_mask = ROIMask.from_volume(sampler, progress=progress)
    body = volume_mask.filtered(lambda value, x, y, z: value > threshold_hu)
    return body.relabeled(1.0)
