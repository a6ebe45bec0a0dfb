"""Volume readers and mask writers for NIfTI and DICOM."""

from .dicom_reader import read_dicom_series, read_dicom_sampler
from .nifti_io import read_nifti, write_nifti, read_nifti_sampler, write_mask_nifti

__all__ = [
    'read_dicom_series',
    'read_dicom_sampler',
    'read_nifti',
    'write_nifti',
    'read_nifti_sampler',
    'write_mask_nifti'
]
