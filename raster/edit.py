"""
Edit session protocol around a backing image.

``EditSession.begin`` hands out a private PixelBuffer copy of an image's
pixel memory and ``EditSession.end`` writes a (possibly modified) buffer
back. 1-bit monochrome images are expanded to one byte per pixel while
editing, with the stride multiplied by 8, and repacked on release.

Usage:
    with EditSession(image) as buffer:
        threshold.apply_otsu_method_direct(buffer.data, buffer.pixel_depth)

An image may have at most one outstanding session at a time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from config import BITS_PER_BYTE
from .bits import bits_to_bytes, bytes_to_bits
from .buffer import PixelBuffer, PixelFormat
from .errors import EditSessionError

logger = logging.getLogger(__name__)


@dataclass
class RasterImage:
    """Decoded image whose pixel memory is edited through sessions.

    This is the in-process stand-in for a platform bitmap: it owns the raw
    pixel bytes exactly as the decoder produced them (1-bit images stay
    packed) and is the object edit sessions lock.

    Attributes:
        pixels: Raw pixel memory, ``abs(stride) * height`` bytes.
        width: Width in pixels.
        height: Height in pixels.
        stride: Bytes per row as stored (packed bytes for MONO1).
        pixel_format: Layout of the stored pixels.
    """

    pixels: bytearray
    width: int
    height: int
    stride: int
    pixel_format: PixelFormat = PixelFormat.GRAY8
    _editing: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.pixels = bytearray(self.pixels)
        self.pixel_format = PixelFormat(self.pixel_format)
        expected = abs(self.stride) * self.height
        if len(self.pixels) != expected:
            raise ValueError(
                f"Image holds {len(self.pixels)} bytes, expected "
                f"|stride| * height = {expected}"
            )

    @property
    def is_locked(self) -> bool:
        return self._editing

    def copy(self) -> RasterImage:
        """Return an unlocked image with a private copy of the pixel memory."""
        return RasterImage(
            pixels=bytearray(self.pixels),
            width=self.width,
            height=self.height,
            stride=self.stride,
            pixel_format=self.pixel_format,
        )

    @classmethod
    def from_buffer(cls, buffer: PixelBuffer) -> RasterImage:
        """Create an image holding the pixels of an editable buffer.

        Expanded MONO1 buffers are packed back to 8 pixels per byte.
        """
        data = buffer.data
        stride = buffer.stride
        if buffer.pixel_format is PixelFormat.MONO1:
            data = bits_to_bytes(data)
            stride //= BITS_PER_BYTE
        return cls(
            pixels=bytearray(data.tobytes()),
            width=buffer.width,
            height=buffer.height,
            stride=stride,
            pixel_format=buffer.pixel_format,
        )


def _expand(image: RasterImage) -> PixelBuffer:
    data = np.frombuffer(bytes(image.pixels), dtype=np.uint8).copy()
    stride = image.stride

    if image.pixel_format is PixelFormat.MONO1:
        data = bytes_to_bits(data)
        stride *= BITS_PER_BYTE

    return PixelBuffer(
        data=data,
        width=image.width,
        height=image.height,
        stride=stride,
        pixel_format=image.pixel_format,
    )


def read_buffer(image: RasterImage) -> PixelBuffer:
    """Return an editable copy of the image without taking the edit lock.

    Changes to the returned buffer never reach the image.
    """
    return _expand(image)


class EditSession:
    """Acquire/release protocol for direct pixel access to a RasterImage.

    The explicit ``begin``/``end`` pair mirrors a lock/unlock API. Used as a
    context manager the session always releases the image, and writes the
    buffer back only when the block exits without an exception.
    """

    def __init__(self, image: RasterImage):
        self.image = image
        self.buffer: PixelBuffer | None = None

    @staticmethod
    def begin(image: RasterImage) -> PixelBuffer:
        """Lock ``image`` and return a private, editable copy of its pixels.

        Raises:
            EditSessionError: If the image already has an open session.
        """
        if image.is_locked:
            raise EditSessionError("Image is already being edited")

        buffer = _expand(image)
        image._editing = True
        logger.debug(
            "Edit session opened: %dx%d %s stride=%d",
            buffer.width, buffer.height, buffer.pixel_format.value, buffer.stride,
        )
        return buffer

    @staticmethod
    def end(image: RasterImage, buffer: PixelBuffer | None = None) -> None:
        """Write ``buffer`` back to ``image`` and release the lock.

        Passing no buffer just releases the image.

        Raises:
            EditSessionError: If the image has no open session.
            ValueError: If the buffer does not fit the image's pixel memory.
        """
        if not image.is_locked:
            raise EditSessionError("Image has no open edit session")

        try:
            if buffer is not None:
                data = buffer.data
                stride = buffer.stride
                if image.pixel_format is PixelFormat.MONO1:
                    data = bits_to_bytes(data)
                    stride //= BITS_PER_BYTE

                if data.size != len(image.pixels):
                    raise ValueError(
                        f"Buffer of {data.size} bytes does not fit image "
                        f"memory of {len(image.pixels)} bytes"
                    )
                image.pixels[:] = data.tobytes()
                image.stride = stride
        finally:
            image._editing = False
            logger.debug("Edit session closed")

    def __enter__(self) -> PixelBuffer:
        self.buffer = self.begin(self.image)
        return self.buffer

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.end(self.image, self.buffer)
        else:
            self.end(self.image)
        self.buffer = None


def copy_pixels(source: RasterImage, destination: RasterImage) -> None:
    """Copy the pixel memory of ``source`` into ``destination``.

    Both images must share pixel format and byte count.

    Raises:
        ValueError: If the images are not layout compatible.
    """
    if source.pixel_format is not destination.pixel_format:
        raise ValueError(
            f"Cannot copy {source.pixel_format.value} pixels into "
            f"{destination.pixel_format.value} image"
        )
    if len(source.pixels) != len(destination.pixels):
        raise ValueError(
            f"Cannot copy {len(source.pixels)} bytes into image of "
            f"{len(destination.pixels)} bytes"
        )

    with EditSession(destination) as buffer:
        buffer.data[:] = read_buffer(source).data
