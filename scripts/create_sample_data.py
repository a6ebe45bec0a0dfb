#!/usr/bin/env python3
"""Create synthetic CT phantoms for trying out mask building without real data."""

import argparse
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from roimask.io.nifti_io import write_nifti
from roimask.volume.phantom import generate_phantom


def main():
    parser = argparse.ArgumentParser(description='Create synthetic CT phantoms')
    parser.add_argument('--output-dir', type=str, default='./data/phantoms',
                        help='Output directory for NIfTI files')
    parser.add_argument('--num-samples', type=int, default=3,
                        help='Number of phantoms to generate')
    parser.add_argument('--shape', type=int, nargs=3, default=[40, 96, 96],
                        help='Volume shape (D H W)')
    parser.add_argument('--spacing', type=float, nargs=3, default=[0.7, 0.7, 2.5],
                        help='Voxel spacing (sx sy sz) in mm')
    parser.add_argument('--noise-hu', type=float, default=0.0,
                        help='Gaussian noise added to body tissue (HU)')

    args = parser.parse_args()

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    print("=" * 60)
    print("Synthetic Phantom Generator")
    print("=" * 60)
    print(f"Output directory:  {output_dir}")
    print(f"Number of samples: {args.num_samples}")
    print(f"Volume shape:      {args.shape}")
    print(f"Spacing:           {args.spacing} mm")
    print("=" * 60)

    for i in range(args.num_samples):
        volume = generate_phantom(tuple(args.shape), seed=i, noise_hu=args.noise_hu)
        output_path = output_dir / f"PHANTOM-{i + 1:04d}.nii.gz"
        write_nifti(volume, str(output_path), tuple(args.spacing))
        print(f"  Saved {output_path}  HU range [{volume.min():.1f}, {volume.max():.1f}]")

    print("\nBuild a lung mask with:")
    print(f"  python scripts/build_mask.py {output_dir}/PHANTOM-0001.nii.gz --lower -900 --upper -700")


if __name__ == '__main__':
    main()
