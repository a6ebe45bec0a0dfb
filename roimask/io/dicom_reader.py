"""DICOM series reading with HU calibration, exposed as a volume sampler."""

import logging
from pathlib import Path
from typing import Tuple

import numpy as np
import pydicom

from ..volume.sampler import ArrayVolumeSampler

logger = logging.getLogger(__name__)


def read_dicom_series(dicom_dir: str) -> Tuple[np.ndarray, Tuple[float, float, float]]:
    """Read a DICOM series and convert it to HU.

    Slices are sorted by ImagePositionPatient and calibrated with
    RescaleSlope/RescaleIntercept.

    Args:
        dicom_dir: Directory containing the .dcm files of one series

    Returns:
        volume: 3D float32 array in HU, shape (D, H, W)
        spacing: (sx, sy, sz) in mm

    Raises:
        ValueError: If the directory holds no usable slices
    """
    dicom_dir = Path(dicom_dir)
    dcm_files = sorted(dicom_dir.glob("*.dcm"))
    if not dcm_files:
        raise ValueError(f"No DICOM files found in {dicom_dir}")

    slices = []
    for f in dcm_files:
        ds = pydicom.dcmread(f)
        if not hasattr(ds, 'ImagePositionPatient'):
            logger.debug("Skipping %s without ImagePositionPatient", f.name)
            continue
        slices.append(ds)
    if not slices:
        raise ValueError(f"No valid DICOM slices with ImagePositionPatient in {dicom_dir}")

    slices.sort(key=lambda s: float(s.ImagePositionPatient[2]))

    ref_slice = slices[0]
    pixel_spacing = ref_slice.PixelSpacing  # [row_spacing, col_spacing]
    sx, sy = float(pixel_spacing[1]), float(pixel_spacing[0])
    if len(slices) > 1:
        positions = np.array([float(s.ImagePositionPatient[2]) for s in slices])
        sz = float(np.median(np.diff(positions)))
    else:
        sz = float(getattr(ref_slice, 'SliceThickness', 1.0))

    hu_slices = []
    for s in slices:
        slope = float(getattr(s, 'RescaleSlope', 1.0))
        intercept = float(getattr(s, 'RescaleIntercept', 0.0))
        hu_slices.append(s.pixel_array.astype(np.float32) * slope + intercept)

    volume = np.stack(hu_slices, axis=0)
    logger.debug("Read %d DICOM slices from %s", len(slices), dicom_dir)
    return volume, (sx, sy, sz)


def read_dicom_sampler(dicom_dir: str) -> ArrayVolumeSampler:
    """Open a DICOM series directory as a volume sampler."""
    volume, spacing = read_dicom_series(dicom_dir)
    return ArrayVolumeSampler(volume, spacing=spacing)
