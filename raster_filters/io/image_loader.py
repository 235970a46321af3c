# Image decoding using Pillow
import os

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..processing.pixel_buffer import PixelBuffer
from ..utils.errors import ErrorCategory, FileIOError, handle_errors
from ..utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.bmp', '.tga', '.tif', '.tiff', '.gif', '.webp')

# Pillow modes that already match the buffer layout, with their channel counts
NATIVE_MODES = {'L': 1, 'RGB': 3}


@handle_errors(FileIOError, category=ErrorCategory.FILE_IO)
def _decode(file_path):
    """Return ``(samples, width, height, channels)`` for the image at *file_path*."""
    with Image.open(file_path) as img:
        img.load()
        if img.mode in NATIVE_MODES:
            decoded = img
        else:
            # Anything else (RGBA, LA, P, I;16, CMYK...) is re-decoded as RGB
            logger.info("Converting image from mode '%s' to 'RGB'.", img.mode)
            decoded = img.convert('RGB')
        channels = NATIVE_MODES[decoded.mode]
        samples = np.asarray(decoded, dtype=np.uint8)
        return samples, decoded.width, decoded.height, channels


def load_image(file_path):
    """Decode *file_path* into a new :class:`PixelBuffer` (1 or 3 channels).

    Args:
        file_path (str): The path to the image file.

    Returns:
        PixelBuffer: Row-major copy of the decoded samples.

    Raises:
        FileIOError: the file is missing or Pillow cannot decode it.
    """
    if not isinstance(file_path, (str, os.PathLike)) or not str(file_path):
        raise FileIOError("Invalid file path provided.", file_path=file_path)

    file_path = os.fspath(file_path)
    if not os.path.isfile(file_path):
        raise FileIOError(f"File not found at '{file_path}'", file_path=file_path,
                          user_message="File not found")

    logger.info("Loading image: %s", file_path)
    try:
        samples, width, height, channels = _decode(file_path)
    except FileIOError as e:
        if isinstance(e.original_error, UnidentifiedImageError):
            raise FileIOError(
                f"Pillow could not identify image file format or file is corrupted: '{file_path}'",
                file_path=file_path,
                original_error=e.original_error,
            ) from e.original_error
        e.file_path = file_path
        raise

    buffer = PixelBuffer.from_bytes(samples, width, height, channels)
    logger.info("Loaded %dx%d image with %d channel(s)", width, height, channels)
    return buffer
