#!/usr/bin/env python3
"""Build a run-length ROI mask from a NIfTI volume and report on it.

Thresholds the volume to a HU window, prints run and voxel counts, the
bounding box and the convex hull size, and optionally exports the raw run
buffer and a rasterized NIfTI label map.
"""

import argparse
import logging
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from roimask.config import load_config
from roimask.io.nifti_io import read_nifti_sampler, write_mask_nifti
from roimask.logging_config import setup_logging
from roimask.preprocessing.masking import create_threshold_mask

logger = logging.getLogger("roimask.scripts.build_mask")


def main():
    parser = argparse.ArgumentParser(description='Build an ROI mask from a NIfTI volume')
    parser.add_argument('input', type=str, help='Input NIfTI volume')
    parser.add_argument('--config', type=str, default=None,
                        help='YAML config overriding the defaults')
    parser.add_argument('--lower', type=float, default=None,
                        help='Lowest kept HU value (overrides config)')
    parser.add_argument('--upper', type=float, default=None,
                        help='Highest kept HU value (overrides config)')
    parser.add_argument('--runs-out', type=str, default=None,
                        help='Write the raw run buffer to this file')
    parser.add_argument('--mask-out', type=str, default=None,
                        help='Write the rasterized mask as NIfTI')
    parser.add_argument('--no-hull', action='store_true',
                        help='Skip the convex hull computation')

    args = parser.parse_args()

    config = load_config(args.config)
    setup_logging(config['logging']['level'], config['logging']['file'])

    lower = args.lower if args.lower is not None else config['threshold']['lower_hu']
    upper = args.upper if args.upper is not None else config['threshold']['upper_hu']

    print("=" * 60)
    print("ROI Mask Builder")
    print("=" * 60)
    print(f"Input:      {args.input}")
    print(f"HU window:  [{lower}, {upper}]")
    print("=" * 60)

    sampler = read_nifti_sampler(args.input)
    logger.info("Loaded volume with shape %s", sampler.shape)

    mask = create_threshold_mask(
        sampler,
        lower=lower,
        upper=upper,
        tolerance=config['mask']['value_tolerance'],
        progress=config['mask']['progress'],
    )
    mask = mask.relabeled(1.0)

    print(f"  Runs:          {mask.run_count:,}")
    print(f"  Voxels:        {mask.voxel_count:,}")
    box = mask.bounding_box()
    if box is None:
        print("  Mask is empty")
    else:
        print(f"  Bounding box:  {box[0].as_tuple()} - {box[1].as_tuple()}")
        if not args.no_hull:
            hull = mask.convex_hull(config['hull']['tolerance'])
            print(f"  Hull:          {hull.vertex_count} vertices, "
                  f"{len(hull.facets)} facets, dimension {hull.dimension}")

    if args.runs_out:
        Path(args.runs_out).write_bytes(mask.mask_runs_data())
        print(f"  Run buffer saved to {args.runs_out}")

    if args.mask_out:
        write_mask_nifti(mask, args.mask_out, sampler.shape, spacing=sampler.spacing)
        print(f"  Mask saved to {args.mask_out}")


if __name__ == '__main__':
    main()
