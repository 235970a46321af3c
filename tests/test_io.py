"""Tests for image I/O functionality."""

import numpy as np
import pytest
from PIL import Image

from raster_filters.io import SUPPORTED_EXTENSIONS, load_image, save_image
from raster_filters.processing.pixel_buffer import PixelBuffer
from raster_filters.utils.errors import FileIOError


class TestImageLoader:
    """Tests for image loading functionality."""

    def test_load_nonexistent_file(self, tmp_path):
        """Loading a missing file raises FileIOError."""
        missing = tmp_path / "nope.png"
        with pytest.raises(FileIOError) as exc_info:
            load_image(str(missing))
        assert exc_info.value.file_path == str(missing)

    @pytest.mark.parametrize("bad_path", ["", None])
    def test_load_invalid_path(self, bad_path):
        with pytest.raises(FileIOError):
            load_image(bad_path)

    def test_load_garbage_file(self, tmp_path):
        """A file Pillow cannot identify is a FileIOError."""
        junk = tmp_path / "junk.png"
        junk.write_bytes(b"this is not an image")
        with pytest.raises(FileIOError) as exc_info:
            load_image(str(junk))
        assert "could not identify" in str(exc_info.value)

    def test_load_rgba_becomes_rgb(self, tmp_path):
        """Alpha is dropped so the buffer has 3 channels."""
        path = tmp_path / "rgba.png"
        arr = np.zeros((3, 4, 4), dtype=np.uint8)
        arr[..., 0] = 200
        arr[..., 3] = 255
        Image.fromarray(arr).save(path)

        buf = load_image(path)
        assert (buf.width, buf.height, buf.channels) == (4, 3, 3)
        assert buf.pixel(0, 0) == (200, 0, 0)

    def test_supported_extensions(self):
        assert '.png' in SUPPORTED_EXTENSIONS
        assert '.jpg' in SUPPORTED_EXTENSIONS


class TestImageSaver:
    """Tests for image saving functionality."""

    def test_grayscale_png_round_trip(self, tmp_path, gray_gradient_buffer):
        path = tmp_path / "gray.png"
        written = save_image(gray_gradient_buffer, str(path))
        assert written == str(path)

        loaded = load_image(written)
        assert loaded.channels == 1
        assert loaded == gray_gradient_buffer

    def test_rgb_png_round_trip(self, tmp_path, rgb_buffer):
        path = tmp_path / "rgb.png"
        save_image(rgb_buffer, str(path))
        with Image.open(path) as img:
            assert img.mode == "RGB"
            assert img.size == (40, 40)
        assert load_image(str(path)) == rgb_buffer

    def test_unknown_extension_defaults_to_png(self, tmp_path, uniform_gray_buffer):
        path = tmp_path / "image.rasterout"
        save_image(uniform_gray_buffer, str(path))
        with Image.open(path) as img:
            assert img.format == "PNG"

    def test_save_released_buffer(self, tmp_path):
        buf = PixelBuffer.allocate(2, 2, 1)
        buf.release()
        with pytest.raises(FileIOError):
            save_image(buf, str(tmp_path / "x.png"))

    def test_save_none(self, tmp_path):
        with pytest.raises(FileIOError):
            save_image(None, str(tmp_path / "x.png"))

    def test_save_to_missing_directory(self, tmp_path, uniform_gray_buffer):
        """Pillow's failure is reported as FileIOError with the path attached."""
        path = tmp_path / "no_such_dir" / "x.png"
        with pytest.raises(FileIOError) as exc_info:
            save_image(uniform_gray_buffer, str(path))
        assert exc_info.value.file_path == str(path)
