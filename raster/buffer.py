"""
Pixel buffer descriptor.

A PixelBuffer owns a flat uint8 array together with the geometry needed to
address it: width and height in pixels, stride in bytes per row (which may
include alignment padding, and whose sign marks bottom-up row order) and the
pixel format that fixes how many bytes make up one pixel.

Engines read and write ``buffer.data`` directly. The sign of ``stride`` is
preserved but never interpreted; all addressing uses ``abs(stride)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from config import PIXEL_DEPTH_RGB


class PixelFormat(str, Enum):
    """Supported in-memory pixel layouts.

    Color layouts store channels blue-green-red from low to high address.
    MONO1 is packed 8 pixels per byte in the backing image and expanded to one
    byte (0 or 1) per pixel inside an edit session.
    """

    GRAY8 = "gray8"
    BGR24 = "bgr24"
    BGRA32 = "bgra32"
    MONO1 = "mono1"

    @property
    def pixel_depth(self) -> int:
        """Bytes per pixel once the buffer is in editable form."""
        return {
            PixelFormat.GRAY8: 1,
            PixelFormat.BGR24: 3,
            PixelFormat.BGRA32: 4,
            PixelFormat.MONO1: 1,
        }[self]

    @classmethod
    def for_depth(cls, pixel_depth: int) -> PixelFormat:
        """Return the byte-per-pixel format with the given depth."""
        formats = {1: cls.GRAY8, 3: cls.BGR24, 4: cls.BGRA32}
        if pixel_depth not in formats:
            raise ValueError(
                f"Unsupported pixel depth: {pixel_depth}. Expected 1, 3 or 4."
            )
        return formats[pixel_depth]


def aligned_stride(width: int, pixel_depth: int, alignment: int = 1) -> int:
    """Bytes per row for ``width`` pixels, rounded up to ``alignment``."""
    row_length = width * pixel_depth
    return ((row_length + alignment - 1) // alignment) * alignment


def as_uint8_array(data) -> np.ndarray:
    """Flat uint8 view of an array, or a new array holding the given bytes."""
    if isinstance(data, np.ndarray):
        if data.dtype != np.uint8:
            raise TypeError(f"Buffer data must be uint8, got {data.dtype}")
        return data.reshape(-1)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return np.frombuffer(bytes(data), dtype=np.uint8).copy()
    return np.array(data, dtype=np.uint8).reshape(-1)


@dataclass
class PixelBuffer:
    """Raw pixel memory plus the geometry that describes it.

    Attributes:
        data: Flat uint8 array of ``abs(stride) * height`` bytes. Numpy arrays
              are used as-is (no copy) so in-place operations reach the
              caller's memory; bytes and sequences are copied.
        width: Image width in pixels.
        height: Image height in pixels.
        stride: Bytes per row including padding. Negative for bottom-up rows.
        pixel_format: Layout of each pixel.
    """

    data: np.ndarray
    width: int
    height: int
    stride: int
    pixel_format: PixelFormat = PixelFormat.GRAY8

    def __post_init__(self) -> None:
        self.data = as_uint8_array(self.data)
        self.pixel_format = PixelFormat(self.pixel_format)

        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if abs(self.stride) < self.row_length:
            raise ValueError(
                f"Stride {self.stride} is shorter than a row of "
                f"{self.width} pixels at depth {self.pixel_depth}"
            )
        if self.data.size != self.byte_count:
            raise ValueError(
                f"Buffer holds {self.data.size} bytes, expected "
                f"|stride| * height = {self.byte_count}"
            )

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @property
    def pixel_depth(self) -> int:
        return self.pixel_format.pixel_depth

    @property
    def is_color(self) -> bool:
        return self.pixel_depth >= PIXEL_DEPTH_RGB

    @property
    def is_monochrome(self) -> bool:
        return self.pixel_format is PixelFormat.MONO1

    @property
    def channels(self) -> int:
        """Channels that are processed (alpha is never touched)."""
        return min(self.pixel_depth, PIXEL_DEPTH_RGB)

    @property
    def byte_count(self) -> int:
        return abs(self.stride) * self.height

    @property
    def row_length(self) -> int:
        """Bytes of pixel data per row, excluding padding."""
        return self.width * self.pixel_depth

    @property
    def padding(self) -> int:
        return abs(self.stride) - self.row_length

    @property
    def safe_limit(self) -> int:
        """Exclusive upper bound for flat per-pixel loops.

        Color buffers stop short of a partial trailing pixel.
        """
        return safe_limit(self.data.size, self.pixel_depth)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def rows(self) -> np.ndarray:
        """Writable (height, |stride|) view of the data."""
        return self.data.reshape(self.height, abs(self.stride))

    def pixels(self) -> np.ndarray:
        """Writable (height, width, pixel_depth) view, padding excluded."""
        return self.rows()[:, : self.row_length].reshape(
            self.height, self.width, self.pixel_depth
        )

    def packed(self) -> np.ndarray:
        """Contiguous copy of the pixel bytes with row padding removed."""
        return np.ascontiguousarray(self.rows()[:, : self.row_length]).reshape(-1)

    def unpack(self, data: np.ndarray) -> None:
        """Write bytes laid out as by ``packed()`` back into the rows."""
        self.rows()[:, : self.row_length] = np.asarray(data, dtype=np.uint8).reshape(
            self.height, self.row_length
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def copy(self) -> PixelBuffer:
        """Return a buffer with the same geometry and a private copy of the data."""
        return self.with_data(self.data.copy())

    def with_data(self, data: np.ndarray) -> PixelBuffer:
        """Return a buffer with the same geometry wrapping ``data``."""
        return PixelBuffer(
            data=data,
            width=self.width,
            height=self.height,
            stride=self.stride,
            pixel_format=self.pixel_format,
        )

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        pixel_format: PixelFormat = PixelFormat.GRAY8,
        alignment: int = 1,
    ) -> PixelBuffer:
        """Create a zero-filled buffer."""
        stride = aligned_stride(width, PixelFormat(pixel_format).pixel_depth, alignment)
        return cls(
            data=np.zeros(stride * height, dtype=np.uint8),
            width=width,
            height=height,
            stride=stride,
            pixel_format=pixel_format,
        )

    @classmethod
    def from_array(cls, array: np.ndarray, alignment: int = 1) -> PixelBuffer:
        """Build a buffer from an (H, W) or (H, W, C) uint8 array.

        Color arrays are taken to be in blue-green-red(-alpha) order.

        Args:
            array: Pixel array, copied into the new buffer.
            alignment: Row alignment in bytes (1 = no padding).

        Raises:
            TypeError: If array is not a numpy array.
            ValueError: If the array shape is not a supported image layout.
        """
        if not isinstance(array, np.ndarray):
            raise TypeError(f"Expected numpy.ndarray, got {type(array).__name__}")
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        if array.ndim != 3 or array.size == 0:
            raise ValueError(
                f"Image must be a non-empty 2D or 3D array, got shape {array.shape}"
            )

        height, width, depth = array.shape
        buffer = cls.blank(width, height, PixelFormat.for_depth(depth), alignment)
        buffer.pixels()[:] = array
        return buffer


def safe_limit(length: int, pixel_depth: int) -> int:
    """Exclusive upper bound for stepping through ``length`` bytes by pixel.

    Buffers decoded from some containers carry a stray trailing byte, so
    color loops stop ``pixel_depth - 1`` bytes early to never read a partial
    pixel.
    """
    if pixel_depth >= PIXEL_DEPTH_RGB:
        return max(0, length - (pixel_depth - 1))
    return length
