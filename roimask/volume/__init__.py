"""Volume samplers feeding mask construction."""

from .sampler import VolumeSampler, ArrayVolumeSampler, row_samples
from .phantom import generate_phantom

__all__ = [
    'VolumeSampler',
    'ArrayVolumeSampler',
    'row_samples',
    'generate_phantom'
]
