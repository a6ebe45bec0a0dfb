"""NIfTI volumes as mask sources and rasterized mask output."""

import logging
from typing import Optional, Tuple, TYPE_CHECKING

import nibabel as nib
import numpy as np

from ..volume.sampler import ArrayVolumeSampler

if TYPE_CHECKING:
    from ..mask.roi_mask import ROIMask

logger = logging.getLogger(__name__)


def read_nifti(nifti_path: str) -> Tuple[np.ndarray, Tuple[float, float, float], np.ndarray]:
    """Read a NIfTI file as a (D, H, W) float32 volume.

    NIfTI stores voxels as (x, y, z); the array is transposed into the
    (D, H, W) layout used by the samplers.

    Args:
        nifti_path: Path to .nii or .nii.gz file

    Returns:
        volume: 3D float32 array, shape (D, H, W)
        spacing: (sx, sy, sz) in mm from the header zooms
        affine: 4x4 affine matrix
    """
    img = nib.load(nifti_path)
    data = np.asarray(img.dataobj).astype(np.float32)
    if data.ndim != 3:
        raise ValueError(f"Expected a 3D NIfTI volume, got shape {data.shape} in {nifti_path}")

    volume = np.ascontiguousarray(data.transpose(2, 1, 0))
    spacing = tuple(float(s) for s in img.header.get_zooms()[:3])
    logger.debug("Read %s with shape %s, spacing %s", nifti_path, volume.shape, spacing)
    return volume, spacing, img.affine


def write_nifti(
    volume: np.ndarray,
    output_path: str,
    spacing: Tuple[float, float, float],
    affine: Optional[np.ndarray] = None
) -> None:
    """Write a (D, H, W) volume to NIfTI with the given spacing.

    Args:
        volume: 3D array, shape (D, H, W)
        output_path: Output path for .nii or .nii.gz
        spacing: (sx, sy, sz) voxel spacing in mm
        affine: Optional 4x4 affine; if None, built from spacing
    """
    if affine is None:
        affine = np.diag([spacing[0], spacing[1], spacing[2], 1.0])

    img = nib.Nifti1Image(volume.transpose(2, 1, 0).astype(np.float32), affine)
    img.header.set_zooms(spacing)
    nib.save(img, output_path)


def read_nifti_sampler(nifti_path: str) -> ArrayVolumeSampler:
    """Open a NIfTI file as a volume sampler."""
    volume, spacing, _ = read_nifti(nifti_path)
    return ArrayVolumeSampler(volume, spacing=spacing)


def write_mask_nifti(
    mask: 'ROIMask',
    output_path: str,
    shape: Tuple[int, int, int],
    spacing: Tuple[float, float, float] = (1.0, 1.0, 1.0),
    affine: Optional[np.ndarray] = None,
    values: bool = False
) -> None:
    """Write a rasterized mask as NIfTI.

    Args:
        mask: Mask to rasterize
        output_path: Output path for .nii or .nii.gz
        shape: (D, H, W) of the reference volume
        spacing: (sx, sy, sz) voxel spacing in mm
        affine: Optional 4x4 affine; if None, built from spacing
        values: Write run values instead of a 0/1 label map
    """
    if affine is None:
        affine = np.diag([spacing[0], spacing[1], spacing[2], 1.0])

    dense = mask.to_array(shape, values=values)
    dtype = np.float32 if values else np.uint8
    img = nib.Nifti1Image(dense.transpose(2, 1, 0).astype(dtype), affine)
    img.header.set_zooms(spacing)
    nib.save(img, output_path)
    logger.debug("Wrote %d-voxel mask to %s", mask.voxel_count, output_path)
