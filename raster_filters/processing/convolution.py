# Neighbourhood filters: Gaussian blur and Sobel edges
"""
Convolution-style filters.

Both filters read from an edge-replicated copy of the source (so every
window is in bounds) and write into a freshly allocated destination. The
source is released only after all workers have joined; if anything fails
the destination is dropped and the source is left as it was.
"""

import numpy as np

from ..config import settings
from ..utils.logger import get_logger
from .dispatch import RowRange, dispatch_rows
from .kernels import Kernel, build_gaussian_kernel
from .pixel_buffer import PixelBuffer
from .sampling import round_to_uint8

logger = get_logger(__name__)


def pad_replicate(pixels: np.ndarray, radius: int) -> np.ndarray:
    """Pad rows and columns by *radius*, repeating the nearest edge sample."""
    return np.pad(pixels, ((radius, radius), (radius, radius), (0, 0)), mode="edge")


def correlate_rows(padded: np.ndarray, weights: np.ndarray, rows: RowRange, width: int) -> np.ndarray:
    """
    Weighted window sum for output rows ``rows``.

    ``padded`` must already be padded by ``weights.shape[0] // 2`` on every
    side; output row ``y`` column ``x`` then reads ``padded[y + ky, x + kx]``.
    Returns float64 with the same trailing dimensions as ``padded``.
    """
    size = weights.shape[0]
    acc = np.zeros((len(rows), width) + padded.shape[2:], dtype=np.float64)
    for ky in range(size):
        band = padded[rows.start + ky:rows.end + ky]
        for kx in range(size):
            weight = weights[ky, kx]
            if weight == 0.0:
                continue
            acc += weight * band[:, kx:kx + width]
    return acc


def gaussian_blur(
    buffer: PixelBuffer,
    kernel_size: int = None,
    sigma: float = None,
    num_threads: int = None,
) -> PixelBuffer:
    """
    Blur *buffer* with a normalised Gaussian kernel.

    Takes ownership of *buffer*: on success it is released and the blurred
    replacement (same dimensions and channels) is returned.

    Args:
        buffer: Source image.
        kernel_size: Odd, >= 3. Defaults to the configured kernel size.
        sigma: Spread; values <= 0 are replaced by the configured default.
        num_threads: Requested worker count.

    Raises:
        InvalidKernelSizeError: kernel_size is even or < 3.
        AllocationError: destination could not be allocated.
        ProcessingError: a worker failed.
    """
    defaults = settings.ENGINE_DEFAULTS
    if kernel_size is None:
        kernel_size = defaults["default_kernel_size"]
    if sigma is None or sigma <= 0:
        if sigma is not None:
            logger.warning("Invalid sigma %s, using %.1f", sigma, defaults["default_sigma"])
        sigma = defaults["default_sigma"]
    if num_threads is None:
        num_threads = defaults["default_threads"]

    kernel: Kernel = build_gaussian_kernel(kernel_size, sigma)
    height, width, channels = buffer.shape

    logger.info(
        "Applying Gaussian blur (kernel %dx%d, sigma=%.2f) to %dx%d image (%d threads requested)",
        kernel_size, kernel_size, sigma, width, height, num_threads,
    )

    destination = PixelBuffer.allocate(width, height, channels)
    padded = pad_replicate(buffer.pixels, kernel.radius)
    out = destination.pixels

    def blur_rows(rows: RowRange):
        out[rows.as_slice()] = round_to_uint8(correlate_rows(padded, kernel.weights, rows, width))

    try:
        report = dispatch_rows(height, num_threads, blur_rows, step="gaussian_blur")
    except Exception:
        destination.release()
        raise

    buffer.release()
    logger.info("Gaussian blur applied (%d threads used)", report.workers_started)
    return destination


def luminance(pixels: np.ndarray) -> np.ndarray:
    """Float luma of an ``(..., C)`` array: weighted RGB for 3 channels, the raw value for 1."""
    if pixels.shape[-1] >= 3:
        r_w, g_w, b_w = settings.LUMINANCE_WEIGHTS
        rgb = pixels.astype(np.float64)
        return r_w * rgb[..., 0] + g_w * rgb[..., 1] + b_w * rgb[..., 2]
    return pixels[..., 0].astype(np.float64)


def sobel_edges(buffer: PixelBuffer, num_threads: int = None) -> PixelBuffer:
    """
    Sobel gradient magnitude of *buffer* as a single-channel image.

    Takes ownership of *buffer*: on success it is released and a 1-channel
    buffer of the same width and height is returned, whatever the source's
    channel count.
    """
    if num_threads is None:
        num_threads = settings.ENGINE_DEFAULTS["default_threads"]

    height, width, channels = buffer.shape
    logger.info(
        "Detecting edges (Sobel) on %dx%d image with %d channel(s) (%d threads requested)",
        width, height, channels, num_threads,
    )

    destination = PixelBuffer.allocate(width, height, 1)
    padded = pad_replicate(buffer.pixels, 1)
    kernel_x = settings.SOBEL_KERNELS["x"]
    kernel_y = settings.SOBEL_KERNELS["y"]
    out = destination.pixels

    def sobel_rows(rows: RowRange):
        # Luma for this band plus one replicated row above and below
        band = luminance(padded[rows.start:rows.end + 2])
        local = RowRange(0, len(rows))
        gx = correlate_rows(band, kernel_x, local, width)
        gy = correlate_rows(band, kernel_y, local, width)
        out[rows.as_slice(), :, 0] = round_to_uint8(np.sqrt(gx * gx + gy * gy))

    try:
        report = dispatch_rows(height, num_threads, sobel_rows, step="sobel")
    except Exception:
        destination.release()
        raise

    buffer.release()
    logger.info("Edge detection complete (%d threads used); output is grayscale", report.workers_started)
    return destination
