# Pixel buffer: one contiguous uint8 store plus width/height/channel metadata
"""
Row-major pixel storage shared by every filter.

A :class:`PixelBuffer` owns exactly one flat ``numpy.uint8`` array of length
``width * height * channels``. The sample at (row ``y``, column ``x``,
channel ``c``) lives at ``y * width * channels + x * channels + c``.
:attr:`PixelBuffer.pixels` exposes the same storage as an
``(height, width, channels)`` view so filters can work on whole row slices.
"""

from typing import NamedTuple, Optional, Tuple, Union

import numpy as np

from ..utils.errors import AllocationError, InvalidDimensionsError, ProcessingError
from ..utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_CHANNELS = (1, 3)


class EncodedImage(NamedTuple):
    """Flat bytes plus the metadata an encoder needs."""
    data: bytes
    width: int
    height: int
    channels: int
    row_stride: int


def _validate_dimensions(width: int, height: int, channels: int) -> None:
    if width <= 0 or height <= 0:
        raise InvalidDimensionsError(
            f"Invalid dimensions ({width}x{height})",
            width=width, height=height, channels=channels,
        )
    if channels not in SUPPORTED_CHANNELS:
        raise InvalidDimensionsError(
            f"Unsupported channel count {channels}; expected 1 or 3",
            width=width, height=height, channels=channels,
        )


class PixelBuffer:
    """Exclusively owned pixel store.

    Use :meth:`allocate`, :meth:`from_bytes` or :meth:`from_array` rather than
    the constructor.
    """

    __slots__ = ("_width", "_height", "_channels", "_data")

    def __init__(self, width: int, height: int, channels: int, data: np.ndarray):
        self._width = int(width)
        self._height = int(height)
        self._channels = int(channels)
        self._data: Optional[np.ndarray] = data

    # --- Construction ---

    @classmethod
    def allocate(cls, width: int, height: int, channels: int) -> "PixelBuffer":
        """Return a zero-initialised buffer.

        Raises:
            InvalidDimensionsError: a dimension is <= 0 or channels is not 1 or 3.
            AllocationError: the backing store could not be reserved.
        """
        _validate_dimensions(width, height, channels)
        try:
            data = np.zeros(width * height * channels, dtype=np.uint8)
        except (MemoryError, ValueError, OverflowError) as e:
            # numpy raises ValueError or OverflowError for sizes it cannot index
            raise AllocationError(
                f"Could not allocate {width}x{height}x{channels} buffer",
                shape=(height, width, channels),
                original_error=e,
                user_message="Not enough memory to complete this operation. Try with a smaller image.",
            ) from e
        return cls(width, height, channels, data)

    @classmethod
    def from_bytes(
        cls,
        raw: Union[bytes, bytearray, memoryview, np.ndarray],
        width: int,
        height: int,
        channels: int,
    ) -> "PixelBuffer":
        """Copy decoded row-major samples into a new buffer.

        The decoder's layout matches ours, so this is a straight copy. Array
        input must already be uint8; wider types are refused rather than wrapped.
        """
        if isinstance(raw, np.ndarray) and raw.dtype != np.uint8:
            raise ValueError(f"Expected uint8 samples, got {raw.dtype}")
        buffer = cls.allocate(width, height, channels)
        source = np.frombuffer(raw, dtype=np.uint8) if not isinstance(raw, np.ndarray) else raw.reshape(-1)
        if source.size != buffer._data.size:
            buffer.release()
            raise InvalidDimensionsError(
                f"Decoded data has {source.size} samples, expected {width}*{height}*{channels}",
                width=width, height=height, channels=channels,
            )
        np.copyto(buffer._data, source)
        return buffer

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Copy an ``(H, W)`` or ``(H, W, C)`` uint8 array into a new buffer."""
        if array.ndim == 2:
            height, width = array.shape
            channels = 1
        elif array.ndim == 3:
            height, width, channels = array.shape
        else:
            raise InvalidDimensionsError(f"Expected a 2-D or 3-D array, got shape {array.shape}")
        if array.dtype != np.uint8:
            raise ValueError(f"Expected uint8 samples, got {array.dtype}")
        return cls.from_bytes(np.ascontiguousarray(array), width, height, channels)

    # --- Metadata ---

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def shape(self) -> Tuple[int, int, int]:
        """``(height, width, channels)``, matching :attr:`pixels`."""
        return (self._height, self._width, self._channels)

    @property
    def row_stride(self) -> int:
        return self._width * self._channels

    @property
    def nbytes(self) -> int:
        return self._height * self.row_stride

    @property
    def memory_mb(self) -> float:
        return self.nbytes / (1024.0 * 1024.0)

    @property
    def released(self) -> bool:
        return self._data is None

    # --- Storage access ---

    def _storage(self) -> np.ndarray:
        if self._data is None:
            raise ProcessingError("Pixel buffer has been released", step="access")
        return self._data

    @property
    def data(self) -> np.ndarray:
        """The flat backing array (not a copy)."""
        return self._storage()

    @property
    def pixels(self) -> np.ndarray:
        """``(height, width, channels)`` view over the backing array."""
        return self._storage().reshape(self._height, self._width, self._channels)

    def index_of(self, x: int, y: int, c: int = 0) -> int:
        """Flat offset of sample (x, y, c)."""
        if not (0 <= x < self._width and 0 <= y < self._height and 0 <= c < self._channels):
            raise IndexError(
                f"Sample ({x}, {y}, {c}) outside {self._width}x{self._height}x{self._channels} buffer"
            )
        return y * self.row_stride + x * self._channels + c

    def get(self, x: int, y: int, c: int = 0) -> int:
        return int(self._storage()[self.index_of(x, y, c)])

    def set(self, x: int, y: int, c: int, value: int) -> None:
        if not 0 <= value <= 255:
            raise ValueError(f"Sample value {value} outside [0, 255]")
        self._storage()[self.index_of(x, y, c)] = value

    def get_clamped(self, x: int, y: int, c: int = 0) -> int:
        """Like :meth:`get` but replicates the nearest edge for outside coordinates."""
        x = min(max(x, 0), self._width - 1)
        y = min(max(y, 0), self._height - 1)
        return self.get(x, y, c)

    def pixel(self, x: int, y: int) -> Tuple[int, ...]:
        """All channels of one pixel."""
        start = self.index_of(x, y, 0)
        return tuple(int(v) for v in self._storage()[start:start + self._channels])

    # --- Lifecycle ---

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self._width, self._height, self._channels, self._storage().copy())

    def release(self) -> None:
        """Drop the backing store. The buffer is unusable afterwards."""
        if self._data is not None:
            logger.debug("Releasing %dx%dx%d buffer", self._width, self._height, self._channels)
        self._data = None

    def to_bytes(self) -> EncodedImage:
        """Flatten for an encoder: ``len(data) == height * row_stride``."""
        return EncodedImage(
            data=self._storage().tobytes(),
            width=self._width,
            height=self._height,
            channels=self._channels,
            row_stride=self.row_stride,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        if self.shape != other.shape or self.released or other.released:
            return False
        return bool(np.array_equal(self._data, other._data))

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self.memory_mb:.2f} MB"
        return f"PixelBuffer({self._width}x{self._height}, channels={self._channels}, {state})"
