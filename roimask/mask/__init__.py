"""Run-length encoded ROI masks and their set algebra."""

from .errors import (
    ROIMaskError,
    ConstructionInvariantViolation,
    CoordinateRangeError,
    IncompatibleOperands
)
from .run import (
    MaskRun,
    MaskIndex,
    MaskValue,
    compare_runs,
    compare_run_values,
    run_sort_key,
    runs_overlap,
    runs_abut,
    index_in_run,
    indexes_in_run
)
from .canonical import MAX_COORDINATE
from .run_buffer import RUN_RECORD_DTYPE, runs_to_buffer, runs_from_buffer
from .roi_mask import ROIMask, MaskPredicate

__all__ = [
    'ROIMaskError',
    'ConstructionInvariantViolation',
    'CoordinateRangeError',
    'IncompatibleOperands',
    'MaskRun',
    'MaskIndex',
    'MaskValue',
    'compare_runs',
    'compare_run_values',
    'run_sort_key',
    'runs_overlap',
    'runs_abut',
    'index_in_run',
    'indexes_in_run',
    'MAX_COORDINATE',
    'RUN_RECORD_DTYPE',
    'runs_to_buffer',
    'runs_from_buffer',
    'ROIMask',
    'MaskPredicate'
]
