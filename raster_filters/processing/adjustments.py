# Tonal adjustments applied in place
import numpy as np
import cv2

from ..config import settings
from ..utils.errors import AllocationError, InvalidParameterError
from ..utils.logger import get_logger
from .dispatch import RowRange, dispatch_rows
from .pixel_buffer import PixelBuffer

logger = get_logger(__name__)


def brightness_lut(delta):
    """256-entry uint8 table mapping ``v -> clamp(v + delta, 0, 255)``."""
    return np.clip(np.arange(256, dtype=np.int32) + int(delta), 0, 255).astype(np.uint8)


def adjust_brightness(buffer: PixelBuffer, delta: int, num_threads: int = None) -> PixelBuffer:
    """Shift every sample of *buffer* by *delta*, clamped to [0, 255], in place.

    Rows are split across workers; each worker pushes its rows of a staging
    copy through a lookup table with ``cv2.LUT``. The copy is written back
    only after all workers have joined, so a failed pass leaves *buffer*
    untouched. Returns the same buffer.

    Raises:
        InvalidParameterError: delta is outside [-255, 255].
        AllocationError: the staging copy could not be allocated.
        ProcessingError: a worker failed; the buffer is left as it was.
    """
    limit = settings.ENGINE_DEFAULTS["brightness_limit"]
    if not -limit <= delta <= limit:
        raise InvalidParameterError(
            f"Brightness delta {delta} outside [-{limit}, {limit}]", name="delta", value=delta
        )
    if num_threads is None:
        num_threads = settings.ENGINE_DEFAULTS["default_threads"]

    pixels = buffer.pixels
    height, width, channels = buffer.shape
    lut = brightness_lut(delta)
    try:
        staged = pixels.copy()
    except MemoryError as e:
        raise AllocationError(
            f"Could not stage {width}x{height}x{channels} brightness pass",
            shape=buffer.shape, original_error=e,
        ) from e

    logger.info("Adjusting brightness %+d on %dx%d image (%d threads requested)", delta, width, height, num_threads)

    def brighten_rows(rows: RowRange):
        # 2-D view so cv2 sees a single-channel matrix regardless of channel count
        block = staged[rows.as_slice()].reshape(len(rows), width * channels)
        staged[rows.as_slice()] = cv2.LUT(block, lut).reshape(len(rows), width, channels)

    report = dispatch_rows(height, num_threads, brighten_rows, step="brightness")
    # Committed only once every worker has joined
    np.copyto(pixels, staged)
    logger.info("Brightness adjusted (%d threads used)", report.workers_started)
    return buffer
