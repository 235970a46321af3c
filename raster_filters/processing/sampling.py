# Bilinear sampling shared by rotation and resize
"""
Bilinear interpolation with edge replication.

``x0 = floor(fx)``, ``x1 = x0 + 1`` (same for y), the fractional weights are
taken *before* the corner indices are clamped into the image, and the blended
value is rounded half-up and clamped to [0, 255]. Sampling never fails: any
coordinate produces a pixel.
"""

from typing import Tuple

import numpy as np

from .pixel_buffer import PixelBuffer


def round_to_uint8(values: np.ndarray) -> np.ndarray:
    """Round half-up and clamp float samples into uint8."""
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


def sample_bilinear(buffer: PixelBuffer, fx: float, fy: float) -> Tuple[int, ...]:
    """Interpolated pixel of *buffer* at fractional coordinate (fx, fy)."""
    fx_arr = np.array([[fx]], dtype=np.float64)
    fy_arr = np.array([[fy]], dtype=np.float64)
    sampled = sample_bilinear_grid(buffer.pixels, fx_arr, fy_arr)
    return tuple(int(v) for v in sampled[0, 0])


def sample_bilinear_grid(pixels: np.ndarray, fx: np.ndarray, fy: np.ndarray) -> np.ndarray:
    """Vectorised :func:`sample_bilinear`.

    Args:
        pixels: Source ``(H, W, C)`` uint8 array.
        fx, fy: Same-shaped float arrays of source coordinates.

    Returns:
        uint8 array of shape ``fx.shape + (C,)``.
    """
    height, width = pixels.shape[:2]

    x0 = np.floor(fx)
    y0 = np.floor(fy)
    dx = (fx - x0)[..., np.newaxis]
    dy = (fy - y0)[..., np.newaxis]

    x0 = x0.astype(np.intp)
    y0 = y0.astype(np.intp)
    x1 = np.clip(x0 + 1, 0, width - 1)
    y1 = np.clip(y0 + 1, 0, height - 1)
    x0 = np.clip(x0, 0, width - 1)
    y0 = np.clip(y0, 0, height - 1)

    p00 = pixels[y0, x0].astype(np.float64)
    p10 = pixels[y0, x1].astype(np.float64)
    p01 = pixels[y1, x0].astype(np.float64)
    p11 = pixels[y1, x1].astype(np.float64)

    top = p00 * (1.0 - dx) + p10 * dx
    bottom = p01 * (1.0 - dx) + p11 * dx
    return round_to_uint8(top * (1.0 - dy) + bottom * dy)
