# Convolution kernels
import math
from dataclasses import dataclass

import numpy as np

from ..utils.errors import AllocationError, InvalidKernelSizeError, InvalidParameterError
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Kernel:
    """Square, odd-sized convolution kernel. ``weights[ky, kx]`` sums to 1."""
    size: int
    weights: np.ndarray

    @property
    def radius(self) -> int:
        return self.size // 2

    def total(self) -> float:
        return float(self.weights.sum())

    @classmethod
    def identity(cls, size: int) -> 'Kernel':
        """Single centre weight of 1, everything else 0."""
        _validate_size(size)
        weights = np.zeros((size, size), dtype=np.float64)
        weights[size // 2, size // 2] = 1.0
        return cls(size, weights)


def _validate_size(size: int) -> None:
    if size < 3 or size % 2 == 0:
        raise InvalidKernelSizeError(
            f"Kernel size must be odd and >= 3 (got {size})",
            size=size,
            user_message="Kernel size must be an odd number of at least 3.",
        )


def build_gaussian_kernel(size: int, sigma: float) -> Kernel:
    """
    Build a normalised ``size x size`` Gaussian kernel.

    Each raw weight is ``exp(-(dx^2 + dy^2) / (2 sigma^2)) / (2 pi sigma^2)``
    for offsets in ``[-size//2, size//2]``. The weights are divided by their
    sum; when the sum underflows to zero (or cannot be represented) the
    identity kernel is returned instead.

    Args:
        size: Odd kernel edge length, at least 3.
        sigma: Spread, must be > 0. Filters substitute a default for
               non-positive values before calling this.

    Returns:
        Kernel whose weights sum to 1.
    """
    _validate_size(size)
    if not sigma > 0 or not math.isfinite(sigma):
        raise InvalidParameterError(f"Sigma must be a positive number (got {sigma})", name="sigma", value=sigma)

    radius = size // 2
    two_sigma_sq = 2.0 * sigma * sigma
    if two_sigma_sq == 0.0:
        logger.warning("Sigma %g underflows; using identity kernel", sigma)
        return Kernel.identity(size)

    offsets = np.arange(-radius, radius + 1, dtype=np.float64)
    try:
        dist_sq = offsets[np.newaxis, :] ** 2 + offsets[:, np.newaxis] ** 2
        with np.errstate(over='ignore', under='ignore', divide='ignore', invalid='ignore'):
            weights = np.exp(-dist_sq / two_sigma_sq) / (math.pi * two_sigma_sq)
            total = weights.sum()
    except MemoryError as e:
        raise AllocationError(f"Could not allocate {size}x{size} kernel", shape=(size, size), original_error=e) from e

    if not (total > 0.0) or not math.isfinite(total):
        logger.debug("Gaussian weights degenerate (sum=%r); using identity kernel", total)
        return Kernel.identity(size)

    return Kernel(size, weights / total)
