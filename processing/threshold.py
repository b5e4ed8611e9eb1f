"""
Thresholding: fixed level, min/max clamping, Otsu's method and zoned variants.

Flat operations take ``(data, pixel_depth)`` where ``data`` is a 1D uint8
array that is modified in place by the ``*_direct`` functions; the plain
variants work on a copy and return it. Zoned operations take a PixelBuffer
since they need the image geometry.

Usage:
    threshold = get_by_otsu_method(get_histogram_values(data, 3))
    apply_direct(data, 3, threshold)
"""

from __future__ import annotations

import logging

import numpy as np

from config import (
    CHOW_KANEKO_NEAREST_ZONES,
    DEFAULT_HORIZONTAL_ZONES,
    DEFAULT_VERTICAL_ZONES,
    PIXEL_DEPTH_RGB,
)
from raster.buffer import PixelBuffer
from .histogram import get_histogram_values
from .zones import WeightedZone, Zone, partition, read_zone, write_zone

logger = logging.getLogger(__name__)


def _check_level(name: str, value: int) -> int:
    if not 0 <= value <= 255:
        raise ValueError(f"{name} must be between 0 and 255, got {value}")
    return int(value)


def _as_data(data) -> np.ndarray:
    if not isinstance(data, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray, got {type(data).__name__}")
    if data.dtype != np.uint8:
        raise TypeError(f"Pixel data must be uint8, got {data.dtype}")
    return data.reshape(-1)


# ----------------------------------------------------------------------
# Fixed threshold
# ----------------------------------------------------------------------


def apply_direct(data: np.ndarray, pixel_depth: int, threshold: int) -> None:
    """Binarize pixels to 0 or 255 by comparing them to ``threshold``.

    Color pixels compare the integer average of their channel bytes (alpha
    excluded) and set every channel. A partial trailing pixel averages the
    bytes it has over the full channel count.
    """
    data = _as_data(data)
    threshold = _check_level("Threshold", threshold)

    if pixel_depth <= 1:
        data[:] = np.where(data < threshold, 0, 255)
        return

    channels = min(pixel_depth, PIXEL_DEPTH_RGB)
    starts = np.arange(0, data.size, pixel_depth)
    total = np.zeros(starts.size, dtype=np.int64)
    for channel in range(channels):
        index = starts + channel
        present = index < data.size
        total[present] += data[index[present]]

    values = np.where(total // channels < threshold, 0, 255).astype(np.uint8)
    for channel in range(channels):
        index = starts + channel
        present = index < data.size
        data[index[present]] = values[present]


def apply(data: np.ndarray, pixel_depth: int, threshold: int) -> np.ndarray:
    """Return a thresholded copy of ``data``."""
    result = _as_data(data).copy()
    apply_direct(result, pixel_depth, threshold)
    return result


# ----------------------------------------------------------------------
# Min / max clamping
# ----------------------------------------------------------------------


def _clamp_direct(data: np.ndarray, pixel_depth: int, lower: int, upper: int) -> None:
    data = _as_data(data)
    starts = np.arange(0, data.size, pixel_depth)
    indexes = [starts]
    if pixel_depth >= PIXEL_DEPTH_RGB:
        # Green and red only for pixels that have them
        whole = starts[starts < data.size - 2]
        indexes += [whole + 1, whole + 2]
    for index in indexes:
        data[index] = np.clip(data[index], lower, upper)


def apply_min_direct(data: np.ndarray, pixel_depth: int, min_value: int) -> None:
    """Raise every channel value below ``min_value`` to ``min_value``."""
    _clamp_direct(data, pixel_depth, _check_level("Min value", min_value), 255)


def apply_max_direct(data: np.ndarray, pixel_depth: int, max_value: int) -> None:
    """Lower every channel value above ``max_value`` to ``max_value``."""
    _clamp_direct(data, pixel_depth, 0, _check_level("Max value", max_value))


def apply_min_max_direct(
    data: np.ndarray, pixel_depth: int, min_value: int, max_value: int
) -> None:
    """Clamp every channel value into ``[min_value, max_value]``.

    Raises:
        ValueError: If min_value > max_value.
    """
    min_value = _check_level("Min value", min_value)
    max_value = _check_level("Max value", max_value)
    if min_value > max_value:
        raise ValueError(
            f"Min value ({min_value}) must not exceed max value ({max_value})"
        )
    _clamp_direct(data, pixel_depth, min_value, max_value)


def apply_min(data: np.ndarray, pixel_depth: int, min_value: int) -> np.ndarray:
    result = _as_data(data).copy()
    apply_min_direct(result, pixel_depth, min_value)
    return result


def apply_max(data: np.ndarray, pixel_depth: int, max_value: int) -> np.ndarray:
    result = _as_data(data).copy()
    apply_max_direct(result, pixel_depth, max_value)
    return result


def apply_min_max(
    data: np.ndarray, pixel_depth: int, min_value: int, max_value: int
) -> np.ndarray:
    result = _as_data(data).copy()
    apply_min_max_direct(result, pixel_depth, min_value, max_value)
    return result


# ----------------------------------------------------------------------
# Otsu's method
# ----------------------------------------------------------------------


def get_by_otsu_method(histogram: np.ndarray) -> int:
    """Pick the threshold that maximizes between-class variance.

    A threshold ``t`` splits the levels into a background ``[0, t)`` and a
    foreground ``[t, 255]``, matching ``apply``, which sends values below
    the threshold to 0. Splits with an empty class are skipped and ties keep
    the lowest ``t``.

    Args:
        histogram: Pixel counts per intensity level.

    Returns:
        Threshold level, or 0 if no level separates two classes.
    """
    histogram = np.asarray(histogram, dtype=np.float64)
    levels = np.arange(histogram.size, dtype=np.float64)

    pixel_count = histogram.sum()
    total_weighted = (levels * histogram).sum()

    # Index i describes the split with background [0, i]
    weight_background = np.cumsum(histogram)
    sum_background = np.cumsum(levels * histogram)
    weight_foreground = pixel_count - weight_background

    valid = (weight_background > 0) & (weight_foreground > 0)
    variance = np.zeros_like(histogram)
    mean_background = sum_background[valid] / weight_background[valid]
    mean_foreground = (total_weighted - sum_background[valid]) / weight_foreground[valid]
    variance[valid] = (
        (mean_background - mean_foreground) ** 2
        * weight_background[valid]
        * weight_foreground[valid]
    )

    if variance.size == 0:
        return 0
    best = int(np.argmax(variance))
    return best + 1 if variance[best] > 0 else 0


def get_by_otsu_method_for(data: np.ndarray, pixel_depth: int) -> int:
    """Otsu threshold of a flat pixel buffer."""
    return get_by_otsu_method(get_histogram_values(data, pixel_depth))


def apply_otsu_method_direct(data: np.ndarray, pixel_depth: int) -> int:
    """Threshold ``data`` in place at its Otsu level and return the level."""
    threshold = get_by_otsu_method_for(data, pixel_depth)
    logger.debug("Otsu threshold: %d", threshold)
    apply_direct(data, pixel_depth, threshold)
    return threshold


def apply_otsu_method(data: np.ndarray, pixel_depth: int) -> np.ndarray:
    result = _as_data(data).copy()
    apply_otsu_method_direct(result, pixel_depth)
    return result


def apply_buffer_direct(buffer: PixelBuffer, threshold: int | None = None) -> int:
    """Threshold the pixels of ``buffer`` in place, skipping row padding.

    Args:
        buffer: Buffer to threshold.
        threshold: Fixed level; the Otsu level of the buffer when None.

    Returns:
        The level that was applied.
    """
    data = buffer.packed()
    if threshold is None:
        threshold = apply_otsu_method_direct(data, buffer.pixel_depth)
    else:
        apply_direct(data, buffer.pixel_depth, threshold)
    buffer.unpack(data)
    return threshold


def apply_default(buffer: PixelBuffer) -> PixelBuffer:
    """Threshold a copy of ``buffer`` with the default method (Otsu)."""
    result = buffer.copy()
    apply_buffer_direct(result)
    return result


# ----------------------------------------------------------------------
# Zoned variants
# ----------------------------------------------------------------------


def apply_otsu_localized_direct(
    buffer: PixelBuffer,
    horizontal_zones: int = DEFAULT_HORIZONTAL_ZONES,
    vertical_zones: int = DEFAULT_VERTICAL_ZONES,
) -> list[Zone]:
    """Threshold each grid zone of ``buffer`` independently with Otsu.

    Every zone is copied out into a contiguous buffer, thresholded on its own
    histogram and copied back. No blending happens across zone borders.

    Returns:
        The zones with their thresholds, row-major.

    Raises:
        ValueError: If either zone count is less than 1.
    """
    zones = partition(buffer.width, buffer.height, horizontal_zones, vertical_zones)
    depth = buffer.pixel_depth

    for zone in zones:
        region = read_zone(buffer, zone.rect)
        zone.threshold = apply_otsu_method_direct(region, depth)
        write_zone(buffer, zone.rect, region)

    logger.debug(
        "Localized Otsu over %d zones (%dx%d grid)",
        len(zones), horizontal_zones, vertical_zones,
    )
    return zones


def apply_otsu_localized(
    buffer: PixelBuffer,
    horizontal_zones: int = DEFAULT_HORIZONTAL_ZONES,
    vertical_zones: int = DEFAULT_VERTICAL_ZONES,
) -> PixelBuffer:
    result = buffer.copy()
    apply_otsu_localized_direct(result, horizontal_zones, vertical_zones)
    return result


def _blended_thresholds(
    zones: list[WeightedZone], xs: np.ndarray, y: int
) -> np.ndarray:
    """Per-pixel thresholds for one image row, blended from nearby zones."""
    thresholds = np.array([zone.threshold for zone in zones], dtype=np.float64)
    if len(zones) == 1:
        return np.full(xs.size, thresholds[0])

    distances = np.stack([zone.calculate_distance(xs, y) for zone in zones], axis=1)

    nearest = np.argsort(distances, axis=1, kind="stable")[:, :CHOW_KANEKO_NEAREST_ZONES]
    near_distances = np.take_along_axis(distances, nearest, axis=1)
    near_thresholds = thresholds[nearest]
    count = nearest.shape[1]

    total = near_distances.sum(axis=1, keepdims=True)
    # Zero total only when every center sits on the pixel
    total[total == 0] = 1.0
    weights = (1.0 - near_distances / total) / (count - 1)
    return np.floor((weights * near_thresholds).sum(axis=1))


def apply_chow_kaneko_direct(
    buffer: PixelBuffer,
    horizontal_zones: int = DEFAULT_HORIZONTAL_ZONES,
    vertical_zones: int = DEFAULT_VERTICAL_ZONES,
) -> list[WeightedZone]:
    """Threshold ``buffer`` with distance-blended zone thresholds.

    An Otsu threshold is computed for each zone. Every pixel is then compared
    to a blend of the thresholds of its nearest zones, weighted so that
    closer zone centers count more.

    Returns:
        The zones with their Otsu thresholds.

    Raises:
        ValueError: If either zone count is less than 1.
    """
    zones = partition(
        buffer.width, buffer.height, horizontal_zones, vertical_zones, WeightedZone
    )
    depth = buffer.pixel_depth
    for zone in zones:
        zone.threshold = get_by_otsu_method_for(read_zone(buffer, zone.rect), depth)

    pixels = buffer.pixels()
    channels = buffer.channels
    xs = np.arange(buffer.width, dtype=np.float64)

    for y in range(buffer.height):
        row_thresholds = _blended_thresholds(zones, xs, y)
        row = pixels[y, :, :channels]
        average = row.astype(np.int64).sum(axis=1) // channels
        values = np.where(average < row_thresholds, 0, 255).astype(np.uint8)
        row[:] = values[:, np.newaxis]

    logger.debug(
        "Chow & Kaneko thresholding over %d zones (%dx%d grid)",
        len(zones), horizontal_zones, vertical_zones,
    )
    return zones


def apply_chow_kaneko(
    buffer: PixelBuffer,
    horizontal_zones: int = DEFAULT_HORIZONTAL_ZONES,
    vertical_zones: int = DEFAULT_VERTICAL_ZONES,
) -> PixelBuffer:
    result = buffer.copy()
    apply_chow_kaneko_direct(result, horizontal_zones, vertical_zones)
    return result
