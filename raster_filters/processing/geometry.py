# Geometric transforms: rotate and resize
"""
Rotation and resizing, both driven by bilinear sampling.

Each transform allocates a destination with the new dimensions, maps every
destination pixel back into source space and samples there. Workers split the
destination rows. The source is released after all workers have joined.
"""

import math
from typing import NamedTuple, Tuple

import numpy as np

from ..config import settings
from ..utils.errors import InvalidDimensionsError, InvalidParameterError
from ..utils.logger import get_logger
from .dispatch import RowRange, dispatch_rows
from .pixel_buffer import PixelBuffer
from .sampling import sample_bilinear_grid

logger = get_logger(__name__)


class RotationBounds(NamedTuple):
    """Bounding box of a rotated image, in the source's coordinate frame."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float
    width: int
    height: int


def rotation_bounds(width: int, height: int, angle_degrees: float) -> RotationBounds:
    """
    Rotate the four corner pixel centres about the image centre and return the
    extents. The output size is ``floor(max - min) + 1`` on each axis, at
    least 1.
    """
    angle = math.radians(angle_degrees)
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    cx, cy = (width - 1) / 2.0, (height - 1) / 2.0

    corners = ((0.0, 0.0), (width - 1.0, 0.0), (0.0, height - 1.0), (width - 1.0, height - 1.0))
    xs, ys = [], []
    for x, y in corners:
        xs.append(cos_a * (x - cx) - sin_a * (y - cy) + cx)
        ys.append(sin_a * (x - cx) + cos_a * (y - cy) + cy)

    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)
    out_w = max(1, int(math.floor(max_x - min_x)) + 1)
    out_h = max(1, int(math.floor(max_y - min_y)) + 1)
    return RotationBounds(min_x, min_y, max_x, max_y, out_w, out_h)


def rotate(buffer: PixelBuffer, angle_degrees: float, num_threads: int = None) -> PixelBuffer:
    """
    Rotate *buffer* by *angle_degrees* about its centre, growing the canvas to
    fit.

    Destination pixels whose inverse-rotated position falls outside the source
    are black; the rest are bilinearly sampled. Takes ownership of *buffer*
    and returns the rotated replacement (same channel count).
    """
    if not math.isfinite(angle_degrees):
        raise InvalidParameterError(f"Rotation angle must be finite (got {angle_degrees})", name="angle", value=angle_degrees)
    if num_threads is None:
        num_threads = settings.ENGINE_DEFAULTS["default_threads"]

    src_h, src_w, channels = buffer.shape
    bounds = rotation_bounds(src_w, src_h, angle_degrees)
    logger.info(
        "Rotating %dx%d image %.2f deg -> %dx%d (%d threads requested)",
        src_w, src_h, angle_degrees, bounds.width, bounds.height, num_threads,
    )

    angle = math.radians(angle_degrees)
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    cx, cy = (src_w - 1) / 2.0, (src_h - 1) / 2.0

    destination = PixelBuffer.allocate(bounds.width, bounds.height, channels)
    src = buffer.pixels
    out = destination.pixels
    dest_x = np.arange(bounds.width, dtype=np.float64) + bounds.min_x

    def rotate_rows(rows: RowRange):
        dest_y = np.arange(rows.start, rows.end, dtype=np.float64)[:, np.newaxis] + bounds.min_y
        rel_x = dest_x[np.newaxis, :] - cx
        rel_y = dest_y - cy
        sx = cos_a * rel_x + sin_a * rel_y + cx
        sy = -sin_a * rel_x + cos_a * rel_y + cy

        inside = (sx >= 0.0) & (sx < src_w) & (sy >= 0.0) & (sy < src_h)
        block = np.zeros((len(rows), bounds.width, channels), dtype=np.uint8)
        if inside.any():
            block[inside] = sample_bilinear_grid(src, sx[inside], sy[inside])
        out[rows.as_slice()] = block

    try:
        report = dispatch_rows(bounds.height, num_threads, rotate_rows, step="rotate")
    except Exception:
        destination.release()
        raise

    buffer.release()
    logger.info("Rotation complete (%d threads used)", report.workers_started)
    return destination


def resize_scale(src_size: Tuple[int, int], dst_size: Tuple[int, int]) -> Tuple[float, float]:
    """``(src_w / dst_w, src_h / dst_h)``."""
    return src_size[0] / dst_size[0], src_size[1] / dst_size[1]


def resize(buffer: PixelBuffer, new_width: int, new_height: int, num_threads: int = None) -> PixelBuffer:
    """
    Resample *buffer* to ``new_width x new_height`` with pixel-centre aligned
    bilinear sampling.

    Takes ownership of *buffer* and returns the resized replacement (same
    channel count).

    Raises:
        InvalidDimensionsError: a target dimension is <= 0.
    """
    if new_width <= 0 or new_height <= 0:
        raise InvalidDimensionsError(
            f"Invalid dimensions ({new_width}x{new_height})",
            width=new_width, height=new_height,
            user_message="Width and height must be positive.",
        )
    if num_threads is None:
        num_threads = settings.ENGINE_DEFAULTS["default_threads"]

    src_h, src_w, channels = buffer.shape
    scale_x, scale_y = resize_scale((src_w, src_h), (new_width, new_height))
    logger.info(
        "Resizing %dx%d -> %dx%d (%d threads requested)",
        src_w, src_h, new_width, new_height, num_threads,
    )

    destination = PixelBuffer.allocate(new_width, new_height, channels)
    src = buffer.pixels
    out = destination.pixels
    fx_row = (np.arange(new_width, dtype=np.float64) + 0.5) * scale_x - 0.5

    def resize_rows(rows: RowRange):
        fy = (np.arange(rows.start, rows.end, dtype=np.float64) + 0.5) * scale_y - 0.5
        fx_grid, fy_grid = np.meshgrid(fx_row, fy)
        out[rows.as_slice()] = sample_bilinear_grid(src, fx_grid, fy_grid)

    try:
        report = dispatch_rows(new_height, num_threads, resize_rows, step="resize")
    except Exception:
        destination.release()
        raise

    buffer.release()
    logger.info("Resize complete (%d threads used)", report.workers_started)
    return destination
