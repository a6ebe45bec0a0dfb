"""Raw byte-buffer encoding of mask runs.

Each run is a fixed 36-byte little-endian record::

    location  uint64   first x of the run
    length    uint64   number of voxels
    height    uint64   row (y) index
    depth     uint64   slice (z) index
    intensity float32  representative sample value
"""

from typing import List, Sequence, Union

import numpy as np

from .canonical import check_coordinates
from .errors import ConstructionInvariantViolation
from .run import MaskRun

RUN_RECORD_DTYPE = np.dtype([
    ('location', '<u8'),
    ('length', '<u8'),
    ('height', '<u8'),
    ('depth', '<u8'),
    ('intensity', '<f4'),
])


def runs_to_records(runs: Sequence[MaskRun]) -> np.ndarray:
    """Pack runs into a structured array of RUN_RECORD_DTYPE."""
    records = np.zeros(len(runs), dtype=RUN_RECORD_DTYPE)
    for i, run in enumerate(runs):
        check_coordinates(run)
        records[i] = (run.start, run.width, run.row_index, run.slice_index, run.value)
    return records


def runs_to_buffer(runs: Sequence[MaskRun]) -> bytes:
    """Encode runs as a contiguous buffer of fixed-size records."""
    return runs_to_records(runs).tobytes()


def runs_from_buffer(data: Union[bytes, bytearray, memoryview]) -> List[MaskRun]:
    """Decode a buffer produced by ``runs_to_buffer``.

    The runs are returned in buffer order and are not validated; pass them to
    ``ROIMask`` to check the mask invariants.

    Raises:
        ConstructionInvariantViolation: If the buffer is not a whole number of
            records
    """
    data = bytes(data)
    if len(data) % RUN_RECORD_DTYPE.itemsize:
        raise ConstructionInvariantViolation(
            f"Buffer of {len(data)} bytes is not a multiple of the "
            f"{RUN_RECORD_DTYPE.itemsize}-byte run record"
        )
    records = np.frombuffer(data, dtype=RUN_RECORD_DTYPE)
    return [
        MaskRun(
            int(record['location']),
            int(record['location']) + int(record['length']),
            int(record['height']),
            int(record['depth']),
            float(record['intensity']),
        )
        for record in records
    ]
