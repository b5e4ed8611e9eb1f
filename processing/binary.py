"""Binary (0/1 per pixel) conversion."""

from __future__ import annotations

import numpy as np

from config import BITS_PER_BYTE, BLACK_AND_WHITE_THRESHOLD, STRIDE_ALIGNMENT
from raster.buffer import PixelBuffer, PixelFormat, aligned_stride
from .statistics import intensity_plane


def to_binary(buffer: PixelBuffer, threshold: int = BLACK_AND_WHITE_THRESHOLD) -> np.ndarray:
    """Return 0 or 1 per pixel depending on ``threshold``.

    Color buffers yield ``width * height`` values from the average of blue,
    green and red, skipping row padding. Gray buffers map every byte,
    padding included.
    """
    if buffer.is_color:
        plane = intensity_plane(buffer).reshape(-1)
    else:
        plane = buffer.data
    return (plane >= threshold).astype(np.uint8)


def to_monochrome(buffer: PixelBuffer, threshold: int = BLACK_AND_WHITE_THRESHOLD) -> PixelBuffer:
    """Build an expanded MONO1 buffer (one 0/1 byte per pixel).

    The stride is sized so the buffer repacks into rows of whole bytes padded
    to STRIDE_ALIGNMENT, ready to be written back through an edit session.
    """
    bits = (intensity_plane(buffer) >= threshold).astype(np.uint8)
    packed_stride = aligned_stride(-(-buffer.width // BITS_PER_BYTE), 1, STRIDE_ALIGNMENT)
    stride = packed_stride * BITS_PER_BYTE
    result = PixelBuffer(
        data=np.zeros(stride * buffer.height, dtype=np.uint8),
        width=buffer.width,
        height=buffer.height,
        stride=stride,
        pixel_format=PixelFormat.MONO1,
    )
    result.pixels()[:, :, 0] = bits
    return result
