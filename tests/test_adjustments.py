import numpy as np
import pytest

from raster_filters.processing.adjustments import adjust_brightness, brightness_lut
from raster_filters.utils.errors import InvalidParameterError


def test_brightness_raises_uniform_image(uniform_gray_buffer):
    """4x4 of 100 with +50 becomes all 150."""
    result = adjust_brightness(uniform_gray_buffer, 50, num_threads=2)
    assert np.all(result.data == 150)


def test_brightness_clamps_at_zero(uniform_gray_buffer):
    result = adjust_brightness(uniform_gray_buffer, -150)
    assert np.all(result.data == 0)


def test_brightness_clamps_at_255(uniform_factory):
    buf = uniform_factory(3, 3, 3, 250)
    adjust_brightness(buf, 20)
    assert np.all(buf.data == 255)


def test_brightness_zero_is_noop(rgb_buffer, sample_image_uint8):
    """Brightness of 0 should be a no-op."""
    adjust_brightness(rgb_buffer, 0)
    assert np.array_equal(rgb_buffer.pixels, sample_image_uint8)


def test_brightness_is_in_place(rgb_buffer):
    """The same buffer comes back and stays usable."""
    result = adjust_brightness(rgb_buffer, 10)
    assert result is rgb_buffer
    assert not rgb_buffer.released


@pytest.mark.parametrize("delta", [-255, -37, 1, 128, 255])
@pytest.mark.parametrize("threads", [1, 3, 32])
def test_every_sample_follows_clamp_law(sample_image_uint8, delta, threads):
    """out = clamp(in + delta, 0, 255) for every sample, whatever the thread count."""
    from raster_filters.processing.pixel_buffer import PixelBuffer

    buf = PixelBuffer.from_array(sample_image_uint8)
    adjust_brightness(buf, delta, num_threads=threads)
    expected = np.clip(sample_image_uint8.astype(np.int32) + delta, 0, 255).astype(np.uint8)
    assert np.array_equal(buf.pixels, expected)


@pytest.mark.parametrize("delta", [256, -256, 1000])
def test_out_of_range_delta_rejected(uniform_gray_buffer, delta):
    with pytest.raises(InvalidParameterError) as exc_info:
        adjust_brightness(uniform_gray_buffer, delta)
    assert exc_info.value.name == "delta"
    # Untouched
    assert np.all(uniform_gray_buffer.data == 100)


def test_lut_shape():
    lut = brightness_lut(-10)
    assert lut.dtype == np.uint8
    assert lut.shape == (256,)
    assert lut[0] == 0 and lut[10] == 0 and lut[255] == 245


def test_failed_worker_leaves_buffer_untouched(sample_image_uint8, monkeypatch):
    """A pass where one band fails commits nothing, even for bands that succeeded."""
    import threading

    from raster_filters.processing import adjustments
    from raster_filters.processing.pixel_buffer import PixelBuffer
    from raster_filters.utils.errors import ProcessingError

    real_lut = adjustments.cv2.LUT
    calls = []
    lock = threading.Lock()

    def lut_failing_after_first(src, lut):
        with lock:
            calls.append(src.shape)
            first = len(calls) == 1
        if not first:
            raise RuntimeError("band failed")
        return real_lut(src, lut)

    monkeypatch.setattr(adjustments.cv2, "LUT", lut_failing_after_first)

    buf = PixelBuffer.from_array(sample_image_uint8)
    with pytest.raises(ProcessingError):
        adjust_brightness(buf, 40, num_threads=2)
    assert len(calls) == 2
    assert np.array_equal(buf.pixels, sample_image_uint8)
