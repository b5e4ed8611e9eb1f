"""
Contrast correction: linear stretch, histogram equalization and a heuristic
that picks between them.
"""

from __future__ import annotations

import logging

import numpy as np

from config import ENHANCE_HEADROOM_THRESHOLD, STRETCH_MAX, STRETCH_MIN
from raster.buffer import PixelBuffer
from raster.errors import DegenerateRangeError
from .histogram import (
    histogram_equalization,
    histogram_equalization_direct,
    pixel_intensities,
    pixel_starts,
)
from .statistics import get_min_max_value

logger = logging.getLogger(__name__)


def _check_bounds(min_value: int, max_value: int) -> None:
    for name, value in (("min_value", min_value), ("max_value", max_value)):
        if not 0 <= value <= 255:
            raise ValueError(f"{name} must be between 0 and 255, got {value}")
    if max_value < min_value:
        raise ValueError(
            f"max_value ({max_value}) cannot be less than min_value ({min_value})"
        )


def stretch_values(
    data: np.ndarray,
    pixel_depth: int,
    min_value: int = STRETCH_MIN,
    max_value: int = STRETCH_MAX,
) -> tuple[int, int]:
    """Linearly stretch flat pixel bytes in place onto ``[min_value, max_value]``.

    The source range is the lowest and highest pixel intensity. Each channel
    value ``v`` becomes ``round((v - lowest) * (max - min) / (highest - lowest))
    + min``; results below ``lowest`` are set to ``min_value`` and results
    above ``highest`` to ``max_value``. Note the clamp compares against the
    source range.

    Returns:
        The source range (lowest, highest).

    Raises:
        ValueError: If the bounds are out of byte range or inverted.
        DegenerateRangeError: If every pixel has the same intensity.
    """
    _check_bounds(min_value, max_value)

    intensities = pixel_intensities(data, pixel_depth)
    if intensities.size == 0:
        return 0, 0
    lowest = int(intensities.min())
    highest = int(intensities.max())
    if highest == lowest:
        raise DegenerateRangeError(lowest)

    starts = pixel_starts(data.size, pixel_depth)
    scale = (max_value - min_value) / (highest - lowest)
    for channel in range(min(pixel_depth, 3)):
        index = starts + channel
        values = np.rint((data[index].astype(np.int64) - lowest) * scale).astype(np.int64) + min_value
        values = np.where(values < lowest, min_value, values)
        values = np.where(values > highest, max_value, values)
        data[index] = values

    return lowest, highest


def stretch_direct(
    buffer: PixelBuffer,
    min_value: int = STRETCH_MIN,
    max_value: int = STRETCH_MAX,
) -> None:
    """Stretch the contrast of ``buffer`` in place.

    See ``stretch_values`` for the mapping. Row padding is skipped.
    """
    data = buffer.packed()
    lowest, highest = stretch_values(data, buffer.pixel_depth, min_value, max_value)
    buffer.unpack(data)
    logger.debug(
        "Stretched contrast %d..%d onto %d..%d", lowest, highest, min_value, max_value
    )


def stretch(
    buffer: PixelBuffer,
    min_value: int = STRETCH_MIN,
    max_value: int = STRETCH_MAX,
) -> PixelBuffer:
    """Return a contrast-stretched copy of ``buffer``."""
    result = buffer.copy()
    stretch_direct(result, min_value, max_value)
    return result


def headroom(min_value: int, max_value: int) -> float:
    """Unused share of the 0..255 range outside ``[min_value, max_value]``."""
    return (min_value + (255 - max_value)) / 255


def should_stretch(min_value: int, max_value: int) -> bool:
    """Whether enhance picks a stretch (True) or equalization (False)."""
    return headroom(min_value, max_value) > ENHANCE_HEADROOM_THRESHOLD


def enhance(buffer: PixelBuffer) -> PixelBuffer:
    """Return a contrast-enhanced copy of ``buffer``.

    Images that leave much of the intensity range unused are stretched to the
    full range; the rest are histogram equalized. Uniform images come back
    unchanged.
    """
    lowest, highest = get_min_max_value(buffer)
    if lowest == highest:
        logger.debug("Enhance skipped: uniform intensity %d", lowest)
        return buffer.copy()

    if should_stretch(lowest, highest):
        logger.debug(
            "Enhance: stretch (range %d..%d, headroom %.3f)",
            lowest, highest, headroom(lowest, highest),
        )
        return stretch(buffer)

    logger.debug(
        "Enhance: equalize (range %d..%d, headroom %.3f)",
        lowest, highest, headroom(lowest, highest),
    )
    return histogram_equalization(buffer)


__all__ = [
    "enhance",
    "headroom",
    "histogram_equalization",
    "histogram_equalization_direct",
    "should_stretch",
    "stretch",
    "stretch_direct",
    "stretch_values",
]
