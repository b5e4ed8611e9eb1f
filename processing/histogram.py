"""
Intensity histograms and histogram equalization.

Buffers are sampled flat, one sample per pixel step. Color samples are the
integer average of the blue, green and red bytes; a partial trailing pixel
is never read.
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

from config import HISTOGRAM_SIZE, PIXEL_DEPTH_RGB
from raster.buffer import PixelBuffer, safe_limit

logger = logging.getLogger(__name__)


def pixel_starts(length: int, pixel_depth: int) -> np.ndarray:
    """Byte offsets of every whole pixel in a flat buffer of ``length`` bytes."""
    return np.arange(0, safe_limit(length, pixel_depth), pixel_depth)


def pixel_intensities(data: np.ndarray, pixel_depth: int) -> np.ndarray:
    """Per-pixel intensity of a flat buffer as an int array.

    Color pixels (depth >= 3) average their first three bytes; alpha is not
    part of the intensity.
    """
    data = np.asarray(data, dtype=np.uint8).reshape(-1)
    starts = pixel_starts(data.size, pixel_depth)
    if pixel_depth >= PIXEL_DEPTH_RGB:
        total = (
            data[starts].astype(np.int32)
            + data[starts + 1]
            + data[starts + 2]
        )
        return total // PIXEL_DEPTH_RGB
    return data[starts].astype(np.int32)


def get_histogram_values(data: np.ndarray, pixel_depth: int) -> np.ndarray:
    """Count pixels at each of the 256 intensity levels.

    Args:
        data: Flat pixel bytes.
        pixel_depth: Bytes per pixel.

    Returns:
        int64 array of length 256.
    """
    intensities = pixel_intensities(data, pixel_depth)
    return np.bincount(intensities, minlength=HISTOGRAM_SIZE).astype(np.int64)


def equalization_map(histogram: np.ndarray) -> np.ndarray | None:
    """Lookup table mapping each intensity to its equalized value.

    Returns None for an empty histogram.
    """
    histogram = np.asarray(histogram, dtype=np.int64)
    total = int(histogram.sum())
    if total == 0:
        return None

    cumulative = np.cumsum(histogram)
    # np.rint rounds half to even
    mapped = np.rint(HISTOGRAM_SIZE * cumulative / total).astype(np.int64) - 1
    return np.clip(mapped, 0, 255).astype(np.uint8)


def histogram_equalization_direct(buffer: PixelBuffer) -> None:
    """Equalize the intensity distribution of ``buffer`` in place.

    Color pixels receive the mapped value of their average intensity on all
    three channels, so the result is gray. Row padding is not sampled.
    """
    depth = buffer.pixel_depth
    data = buffer.packed()
    lookup = equalization_map(get_histogram_values(data, depth))
    if lookup is None:
        return

    starts = pixel_starts(data.size, depth)
    values = lookup[pixel_intensities(data, depth)]
    for channel in range(buffer.channels):
        data[starts + channel] = values
    buffer.unpack(data)

    logger.debug("Equalized histogram over %d pixels", starts.size)


def histogram_equalization(buffer: PixelBuffer) -> PixelBuffer:
    """Return an equalized copy of ``buffer``."""
    result = buffer.copy()
    histogram_equalization_direct(result)
    return result


def render_histogram(
    histogram: np.ndarray,
    width: int = 256,
    height: int = 100,
    background: int = 0,
    foreground: int = 255,
) -> PixelBuffer:
    """Draw a histogram as a grayscale bar chart.

    Bars are scaled so the tallest bin fills the chart height. Any non-empty
    bin gets a bar at least one pixel tall.

    Args:
        histogram: Bin counts.
        width: Chart width in pixels.
        height: Chart height in pixels.
        background: Gray level of the background.
        foreground: Gray level of the bars.

    Raises:
        ValueError: If the chart size is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Histogram size must be positive, got {width}x{height}")

    histogram = np.asarray(histogram, dtype=np.int64)
    canvas = np.full((height, width), background, dtype=np.uint8)
    peak = int(histogram.max()) if histogram.size else 0
    if peak == 0:
        return PixelBuffer.from_array(canvas)

    scale_x = width / histogram.size
    scale_y = height / peak
    bar_width = max(1, round(scale_x))

    for level, count in enumerate(histogram):
        bar_height = min(height, int(np.ceil(count * scale_y)))
        if bar_height <= 0:
            continue
        x = int(level * scale_x)
        cv2.rectangle(
            canvas,
            (x, height - bar_height),
            (x + bar_width - 1, height - 1),
            int(foreground),
            thickness=-1,
        )

    return PixelBuffer.from_array(canvas)
