"""
Color transforms: grayscale, black & white, negative, channel masks, sepia.

Color bytes are stored blue, green, red from low to high address.
"""

from __future__ import annotations

import numpy as np

from config import BLACK_AND_WHITE_THRESHOLD, PIXEL_DEPTH_RGB, SEPIA_WEIGHTS, STRIDE_ALIGNMENT
from raster.buffer import PixelBuffer, as_uint8_array

# Offsets of each channel within a pixel
BLUE, GREEN, RED = 0, 1, 2


def _require_color(buffer: PixelBuffer, operation: str) -> None:
    if not buffer.is_color:
        raise ValueError(
            f"Buffer is not color ({buffer.pixel_format.value}), {operation} cannot be applied"
        )


def to_grayscale(rgb_bytes) -> np.ndarray:
    """Average every 3 bytes into one gray byte.

    Args:
        rgb_bytes: Tightly packed 3-byte pixels.

    Raises:
        ValueError: If the length is not a multiple of 3.
    """
    data = as_uint8_array(rgb_bytes)
    if data.size % PIXEL_DEPTH_RGB != 0:
        raise ValueError(f"Array length {data.size} is not divisible by 3")
    triples = data.reshape(-1, PIXEL_DEPTH_RGB).astype(np.int32)
    return (triples.sum(axis=1) // PIXEL_DEPTH_RGB).astype(np.uint8)


def to_black_and_white(data, threshold: int = BLACK_AND_WHITE_THRESHOLD) -> np.ndarray:
    """Map each byte to 0 below ``threshold`` and to 255 otherwise."""
    values = as_uint8_array(data)
    return np.where(values < threshold, 0, 255).astype(np.uint8)


def to_negative_direct(data: np.ndarray) -> None:
    """Invert every byte in place."""
    np.bitwise_not(data, out=data)


def to_negative(data) -> np.ndarray:
    result = as_uint8_array(data).copy()
    to_negative_direct(result)
    return result


def monochrome_to_negative_direct(bits: np.ndarray) -> None:
    """Flip the low bit of every byte of an expanded monochrome buffer."""
    np.bitwise_xor(bits, 1, out=bits)


def monochrome_to_negative(bits) -> np.ndarray:
    result = as_uint8_array(bits).copy()
    monochrome_to_negative_direct(result)
    return result


def negative_direct(buffer: PixelBuffer) -> None:
    """Invert ``buffer`` in place; expanded monochrome buffers flip their bits."""
    if buffer.is_monochrome:
        # Engines that ran on the expanded bits may have left 0/255
        buffer.data[:] = buffer.data > 0
        monochrome_to_negative_direct(buffer.data)
    else:
        to_negative_direct(buffer.data)


def negative(buffer: PixelBuffer) -> PixelBuffer:
    result = buffer.copy()
    negative_direct(result)
    return result


def apply_filter_rgb_direct(buffer: PixelBuffer, r: int, g: int, b: int) -> None:
    """AND the red, green and blue bytes of every pixel with a mask.

    Row padding and alpha are left alone.

    Raises:
        ValueError: If the buffer is not color.
    """
    _require_color(buffer, "RGB filter")
    pixels = buffer.pixels()
    for channel, mask in ((BLUE, b), (GREEN, g), (RED, r)):
        np.bitwise_and(pixels[:, :, channel], mask & 0xFF, out=pixels[:, :, channel])


def apply_filter_rgb(buffer: PixelBuffer, r: int, g: int, b: int) -> PixelBuffer:
    result = buffer.copy()
    apply_filter_rgb_direct(result, r, g, b)
    return result


def to_red(buffer: PixelBuffer) -> PixelBuffer:
    return apply_filter_rgb(buffer, 0xFF, 0x00, 0x00)


def to_green(buffer: PixelBuffer) -> PixelBuffer:
    return apply_filter_rgb(buffer, 0x00, 0xFF, 0x00)


def to_blue(buffer: PixelBuffer) -> PixelBuffer:
    return apply_filter_rgb(buffer, 0x00, 0x00, 0xFF)


def to_grayscale_buffer(buffer: PixelBuffer) -> PixelBuffer:
    """Convert a color buffer into a new 8-bit gray buffer.

    Each gray pixel is the integer average of blue, green and red. The new
    rows are padded to STRIDE_ALIGNMENT bytes.

    Raises:
        ValueError: If the buffer is not color.
    """
    _require_color(buffer, "grayscale conversion")
    channels = buffer.pixels()[:, :, :PIXEL_DEPTH_RGB].astype(np.int32)
    gray = (channels.sum(axis=2) // PIXEL_DEPTH_RGB).astype(np.uint8)
    return PixelBuffer.from_array(gray, alignment=STRIDE_ALIGNMENT)


def to_sepia_direct(buffer: PixelBuffer) -> None:
    """Apply a sepia tone to a color buffer in place.

    Raises:
        ValueError: If the buffer is not color.
    """
    _require_color(buffer, "sepia filter")
    pixels = buffer.pixels()
    source = pixels[:, :, :PIXEL_DEPTH_RGB].astype(np.float64)
    red, green, blue = source[:, :, RED], source[:, :, GREEN], source[:, :, BLUE]

    for channel, (wr, wg, wb) in zip((RED, GREEN, BLUE), SEPIA_WEIGHTS):
        toned = wr * red + wg * green + wb * blue
        pixels[:, :, channel] = np.where(toned < 255, np.rint(toned), 255).astype(np.uint8)


def to_sepia(buffer: PixelBuffer) -> PixelBuffer:
    result = buffer.copy()
    to_sepia_direct(result)
    return result
