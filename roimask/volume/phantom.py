"""Synthetic CT phantoms for demos and tests."""

from typing import Optional, Tuple

import numpy as np


def generate_phantom(
    shape: Tuple[int, int, int] = (40, 96, 96),
    seed: Optional[int] = 0,
    noise_hu: float = 0.0
) -> np.ndarray:
    """Generate a small synthetic CT volume with piecewise-constant HU.

    The phantom holds an air background, an ellipsoidal soft-tissue body, two
    lungs, a spine block and one spherical nodule. With ``noise_hu == 0``
    every tissue has a single HU value, which keeps run-length masks compact.

    Args:
        shape: Volume shape (D, H, W)
        seed: Seed for the noise and nodule placement
        noise_hu: Standard deviation of Gaussian noise added to the body

    Returns:
        volume: float32 HU volume, shape (D, H, W)
    """
    rng = np.random.default_rng(seed)
    d, h, w = shape
    volume = np.full(shape, -1000.0, dtype=np.float32)

    z, y, x = np.ogrid[:d, :h, :w]
    body = (
        ((z - d / 2) / (d / 2.2)) ** 2
        + ((y - h / 2) / (h / 2.5)) ** 2
        + ((x - w / 2) / (w / 2.5)) ** 2
    ) < 1
    volume[body] = 40.0

    lung_z = slice(int(d * 0.25), int(d * 0.75))
    lung_y = slice(int(h * 0.35), int(h * 0.65))
    volume[lung_z, lung_y, int(w * 0.28):int(w * 0.45)] = -800.0
    volume[lung_z, lung_y, int(w * 0.55):int(w * 0.72)] = -800.0

    volume[int(d * 0.2):int(d * 0.8), int(h * 0.68):int(h * 0.78), int(w * 0.46):int(w * 0.54)] = 700.0

    # Nodule inside the left lung
    radius = max(1, min(shape) // 12)
    center = (
        int(rng.integers(lung_z.start + radius, lung_z.stop - radius)),
        int(rng.integers(lung_y.start + radius, lung_y.stop - radius)),
        int(w * 0.365),
    )
    nodule = (
        (z - center[0]) ** 2 + (y - center[1]) ** 2 + (x - center[2]) ** 2
    ) <= radius ** 2
    volume[nodule] = -50.0

    if noise_hu > 0:
        volume[body] += rng.normal(0.0, noise_hu, size=int(body.sum())).astype(np.float32)

    return np.clip(volume, -1024, 3071)
