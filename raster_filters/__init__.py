# Concurrent raster filtering engine
"""
Row-parallel raster filters over an in-memory pixel buffer.

Typical use goes through :class:`ImageSession`, which owns the current image::

    session = ImageSession(num_threads=8)
    session.load("photo.png")
    session.blur(kernel_size=5, sigma=1.5)
    session.save("blurred.png")
"""

from .processing import (
    PixelBuffer,
    adjust_brightness,
    gaussian_blur,
    sobel_edges,
    rotate,
    resize,
)
from .services.image_session import ImageSession, ImageSummary

__version__ = "0.1.0"

__all__ = [
    'PixelBuffer',
    'adjust_brightness',
    'gaussian_blur',
    'sobel_edges',
    'rotate',
    'resize',
    'ImageSession',
    'ImageSummary',
]
