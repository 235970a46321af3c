# Image encoding using Pillow
import os
from typing import Optional

from PIL import Image

from ..config import settings
from ..processing.pixel_buffer import PixelBuffer
from ..utils.errors import ErrorCategory, FileIOError, handle_errors
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Buffer channel count -> Pillow mode
CHANNEL_MODES = {1: 'L', 3: 'RGB'}


@handle_errors(FileIOError, category=ErrorCategory.FILE_IO, log_level="error")
def _encode(encoded, file_path, image_format):
    img = Image.frombytes(
        CHANNEL_MODES[encoded.channels],
        (encoded.width, encoded.height),
        encoded.data,
        'raw',
        CHANNEL_MODES[encoded.channels],
        encoded.row_stride,
    )
    save_kwargs = {}
    if image_format == 'PNG':
        save_kwargs['compress_level'] = settings.CODEC_DEFAULTS["png_compression"]
    img.save(file_path, format=image_format, **save_kwargs)


def save_image(buffer: PixelBuffer, file_path: str, image_format: Optional[str] = None) -> str:
    """Encode *buffer* to *file_path*.

    Args:
        buffer: Image to write.
        file_path: Destination path; the extension picks the format.
        image_format: Explicit Pillow format name. Defaults to the extension's
                      format, or PNG when the extension is unknown.

    Returns:
        str: The path written.

    Raises:
        FileIOError: the buffer is empty or Pillow failed to write the file.
    """
    if not isinstance(file_path, (str, os.PathLike)) or not str(file_path):
        raise FileIOError("Invalid file path provided for saving.", file_path=file_path)
    file_path = os.fspath(file_path)

    if buffer is None or buffer.released:
        raise FileIOError("No image loaded to save", file_path=file_path)

    if image_format is None:
        ext = os.path.splitext(file_path)[1].lower()
        image_format = Image.registered_extensions().get(ext, settings.CODEC_DEFAULTS["default_format"])

    encoded = buffer.to_bytes()
    logger.info("Saving %dx%d image (%d channel(s)) to %s as %s",
                encoded.width, encoded.height, encoded.channels, file_path, image_format)
    try:
        _encode(encoded, file_path, image_format)
    except FileIOError as e:
        e.file_path = file_path
        raise
    return file_path
