import numpy as np
import pytest

from raster_filters.processing.pixel_buffer import PixelBuffer
from raster_filters.processing.sampling import round_to_uint8, sample_bilinear, sample_bilinear_grid


@pytest.fixture
def two_by_two():
    """2x2 grayscale: 0 10 / 20 30."""
    return PixelBuffer.from_bytes(bytes([0, 10, 20, 30]), 2, 2, 1)


def test_integer_coordinates_return_exact_samples(two_by_two):
    """Sampling on a pixel centre returns that pixel."""
    assert sample_bilinear(two_by_two, 0, 0) == (0,)
    assert sample_bilinear(two_by_two, 1, 0) == (10,)
    assert sample_bilinear(two_by_two, 0, 1) == (20,)
    assert sample_bilinear(two_by_two, 1, 1) == (30,)


def test_midpoint_blend(two_by_two):
    """Centre of the four samples is their average."""
    assert sample_bilinear(two_by_two, 0.5, 0.5) == (15,)
    assert sample_bilinear(two_by_two, 0.5, 0.0) == (5,)


def test_rounds_half_up():
    buf = PixelBuffer.from_bytes(bytes([0, 1]), 2, 1, 1)
    # 0.5 * 0 + 0.5 * 1 = 0.5 -> 1
    assert sample_bilinear(buf, 0.5, 0) == (1,)


def test_edges_are_replicated(two_by_two):
    """Coordinates outside the image clamp to the nearest edge rather than reading zero."""
    assert sample_bilinear(two_by_two, -3.0, -3.0) == (0,)
    assert sample_bilinear(two_by_two, 5.0, 5.0) == (30,)
    assert sample_bilinear(two_by_two, 1.5, 0.0) == (10,)


def test_rgb_channels_independent():
    raw = bytes([0, 100, 200, 100, 200, 0])
    buf = PixelBuffer.from_bytes(raw, 2, 1, 3)
    assert sample_bilinear(buf, 0.5, 0) == (50, 150, 100)


def test_grid_matches_scalar(gray_gradient_buffer):
    """Vectorised sampler agrees with the scalar one."""
    fx = np.array([[0.25, 3.7, 11.9], [-1.0, 5.5, 20.0]])
    fy = np.array([[0.0, 2.2, 8.5], [4.4, -0.3, 1.0]])
    grid = sample_bilinear_grid(gray_gradient_buffer.pixels, fx, fy)
    assert grid.shape == (2, 3, 1)
    for idx in np.ndindex(fx.shape):
        assert tuple(grid[idx]) == sample_bilinear(gray_gradient_buffer, fx[idx], fy[idx])


def test_round_to_uint8_clamps():
    values = np.array([-4.0, 0.49, 0.5, 254.6, 300.0])
    assert list(round_to_uint8(values)) == [0, 0, 1, 255, 255]
