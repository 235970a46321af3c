import pytest
import numpy as np

from raster_filters.processing.pixel_buffer import PixelBuffer


@pytest.fixture
def sample_image_uint8():
    """Returns a simple 40x40 uint8 RGB image."""
    img = np.zeros((40, 40, 3), dtype=np.uint8)
    img[:20, :20] = [255, 0, 0]    # Red quadrant
    img[:20, 20:] = [0, 255, 0]    # Green quadrant
    img[20:, :20] = [0, 0, 255]    # Blue quadrant
    img[20:, 20:] = [255, 255, 0]  # Yellow quadrant
    return img


@pytest.fixture
def rgb_buffer(sample_image_uint8):
    """The quadrant image as a PixelBuffer."""
    return PixelBuffer.from_array(sample_image_uint8)


@pytest.fixture
def gray_gradient_buffer():
    """12x9 grayscale buffer with a horizontal ramp."""
    ramp = np.tile(np.arange(0, 240, 20, dtype=np.uint8), (9, 1))
    return PixelBuffer.from_array(ramp)


@pytest.fixture
def uniform_gray_buffer():
    """4x4 single-channel buffer, every sample 100."""
    return PixelBuffer.from_bytes(bytes([100] * 16), 4, 4, 1)


def make_uniform(width, height, channels, value):
    """Helper: buffer of one repeated sample value."""
    return PixelBuffer.from_bytes(bytes([value] * (width * height * channels)), width, height, channels)


@pytest.fixture
def uniform_factory():
    return make_uniform
