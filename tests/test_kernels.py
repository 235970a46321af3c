import numpy as np
import pytest

from raster_filters.processing.kernels import Kernel, build_gaussian_kernel
from raster_filters.utils.errors import InvalidKernelSizeError, InvalidParameterError


@pytest.mark.parametrize("size", [3, 5, 7, 9, 15])
@pytest.mark.parametrize("sigma", [0.3, 1.0, 2.5, 10.0])
def test_weights_sum_to_one(size, sigma):
    """Normalised kernels sum to 1 within 1e-4."""
    kernel = build_gaussian_kernel(size, sigma)
    assert kernel.weights.shape == (size, size)
    assert kernel.total() == pytest.approx(1.0, abs=1e-4)


def test_kernel_is_symmetric_and_peaked():
    kernel = build_gaussian_kernel(5, 1.0)
    w = kernel.weights
    assert np.allclose(w, w.T)
    assert np.allclose(w, w[::-1, ::-1])
    assert w[2, 2] == w.max()
    assert kernel.radius == 2


def test_matches_closed_form():
    """Weights follow exp(-(dx^2+dy^2) / 2 sigma^2), normalised."""
    sigma = 1.3
    kernel = build_gaussian_kernel(3, sigma)
    d = np.array([-1.0, 0.0, 1.0])
    raw = np.exp(-(d[None, :] ** 2 + d[:, None] ** 2) / (2 * sigma ** 2))
    assert np.allclose(kernel.weights, raw / raw.sum())


@pytest.mark.parametrize("size", [1, 2, 4, 0, -3])
def test_rejects_bad_sizes(size):
    with pytest.raises(InvalidKernelSizeError) as exc_info:
        build_gaussian_kernel(size, 1.0)
    assert exc_info.value.size == size


@pytest.mark.parametrize("sigma", [0.0, -1.0, float("nan"), float("inf")])
def test_rejects_bad_sigma(sigma):
    with pytest.raises(InvalidParameterError):
        build_gaussian_kernel(3, sigma)


@pytest.mark.parametrize("sigma", [1e-3, 1e-200])
def test_tiny_sigma_degrades_to_identity(sigma):
    """When all off-centre weights vanish the kernel is the identity."""
    kernel = build_gaussian_kernel(5, sigma)
    assert np.array_equal(kernel.weights, Kernel.identity(5).weights)


def test_identity_kernel():
    kernel = Kernel.identity(3)
    assert kernel.total() == 1.0
    assert kernel.weights[1, 1] == 1.0
