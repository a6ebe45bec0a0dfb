"""Threshold-based mask creation for CT volumes."""

from .masking import threshold_predicate, create_threshold_mask, create_body_mask

__all__ = [
    'threshold_predicate',
    'create_threshold_mask',
    'create_body_mask'
]
