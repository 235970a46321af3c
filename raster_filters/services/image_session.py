from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from ..config import settings
from ..io import image_loader, image_saver
from ..processing import adjustments, convolution, geometry
from ..processing.dispatch import clamp_thread_count
from ..processing.pixel_buffer import PixelBuffer
from ..utils.errors import AppError, InvalidDimensionsError, ProcessingError, format_user_error
from ..utils.logger import get_logger

logger = get_logger(__name__)

PreviewCell = Union[int, tuple]


@dataclass(frozen=True)
class ImageSummary:
    """Dimensions and footprint of the current image."""

    width: int
    height: int
    channels: int
    color_mode: str  # "grayscale" | "rgb"
    memory_mb: float


class ImageSession:
    """Owns the current image and routes filter calls through the engine.

    Replacing filters hand the current buffer over and get the new one back;
    the session only swaps its reference once the filter has returned, so a
    failed call leaves the previous image in place.
    """

    def __init__(self, num_threads: Optional[int] = None) -> None:
        if num_threads is None:
            num_threads = settings.ENGINE_DEFAULTS["default_threads"]
        self.num_threads = num_threads
        self._buffer: Optional[PixelBuffer] = None

    # --- Ownership ---

    @property
    def has_image(self) -> bool:
        return self._buffer is not None

    @property
    def buffer(self) -> PixelBuffer:
        if self._buffer is None:
            raise ProcessingError("No image loaded", step="session")
        return self._buffer

    def _replace(self, new_buffer: PixelBuffer) -> None:
        old, self._buffer = self._buffer, new_buffer
        if old is not None and old is not new_buffer:
            old.release()

    def _run(self, description: str, op: Callable[[PixelBuffer], PixelBuffer]) -> PixelBuffer:
        current = self.buffer
        try:
            result = op(current)
        except AppError as e:
            logger.error("%s failed: %s", description, format_user_error(e, description))
            raise
        self._buffer = result
        return result

    def close(self) -> None:
        """Release the current image, if any."""
        if self._buffer is not None:
            self._buffer.release()
            self._buffer = None

    # --- Intake / output ---

    def load(self, file_path: str) -> PixelBuffer:
        self._replace(image_loader.load_image(file_path))
        return self._buffer

    def load_bytes(self, raw: bytes, width: int, height: int, channels: int) -> PixelBuffer:
        self._replace(PixelBuffer.from_bytes(raw, width, height, channels))
        return self._buffer

    def save(self, file_path: str, image_format: Optional[str] = None) -> str:
        return image_saver.save_image(self.buffer, file_path, image_format)

    # --- Filters ---

    @property
    def effective_threads(self) -> int:
        """Thread count the next filter call will use for the current image."""
        return clamp_thread_count(self.num_threads, self.buffer.height)

    def adjust_brightness(self, delta: int) -> PixelBuffer:
        if delta == 0:
            logger.info("Brightness delta is 0; nothing to do")
            return self.buffer
        return self._run(
            "adjusting brightness",
            lambda buf: adjustments.adjust_brightness(buf, delta, self.num_threads),
        )

    def blur(self, kernel_size: int = None, sigma: float = None) -> PixelBuffer:
        return self._run(
            "applying blur",
            lambda buf: convolution.gaussian_blur(buf, kernel_size, sigma, self.num_threads),
        )

    def detect_edges(self) -> PixelBuffer:
        return self._run(
            "detecting edges",
            lambda buf: convolution.sobel_edges(buf, self.num_threads),
        )

    def rotate(self, angle_degrees: float) -> PixelBuffer:
        return self._run(
            "rotating",
            lambda buf: geometry.rotate(buf, angle_degrees, self.num_threads),
        )

    def resize(self, new_width: int, new_height: int) -> PixelBuffer:
        limit = settings.ENGINE_DEFAULTS["max_resize_dimension"]
        if new_width > limit or new_height > limit:
            raise InvalidDimensionsError(
                f"Resize target {new_width}x{new_height} exceeds {limit}x{limit}",
                width=new_width,
                height=new_height,
                user_message=f"Width and height must be at most {limit}.",
            )
        return self._run(
            "resizing",
            lambda buf: geometry.resize(buf, new_width, new_height, self.num_threads),
        )

    # --- Inspection ---

    def describe(self) -> ImageSummary:
        buf = self.buffer
        return ImageSummary(
            width=buf.width,
            height=buf.height,
            channels=buf.channels,
            color_mode="grayscale" if buf.channels == 1 else "rgb",
            memory_mb=buf.memory_mb,
        )

    def preview_matrix(self, max_rows: int = None, max_cols: int = None) -> List[List[PreviewCell]]:
        """Top-left corner of the image: ints for grayscale, tuples for RGB."""
        if max_rows is None:
            max_rows = settings.ENGINE_DEFAULTS["preview_rows"]
        if max_cols is None:
            max_cols = settings.ENGINE_DEFAULTS["preview_cols"]
        buf = self.buffer
        corner = buf.pixels[: min(max_rows, buf.height), : min(max_cols, buf.width)]
        if buf.channels == 1:
            return [[int(v) for v in row[:, 0]] for row in corner]
        return [[tuple(int(c) for c in px) for px in row] for row in corner]
