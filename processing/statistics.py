"""Intensity statistics over the pixels of a buffer (row padding excluded)."""

from __future__ import annotations

import numpy as np

from raster.buffer import PixelBuffer


def intensity_plane(buffer: PixelBuffer) -> np.ndarray:
    """(height, width) int array of pixel intensities.

    Color pixels use the integer average of blue, green and red.
    """
    pixels = buffer.pixels()
    if buffer.is_color:
        return pixels[:, :, :3].astype(np.int64).sum(axis=2) // 3
    return pixels[:, :, 0].astype(np.int64)


def get_min_max_value(buffer: PixelBuffer) -> tuple[int, int]:
    """Lowest and highest pixel intensity."""
    plane = intensity_plane(buffer)
    return int(plane.min()), int(plane.max())


def get_min_value(buffer: PixelBuffer) -> int:
    return get_min_max_value(buffer)[0]


def get_max_value(buffer: PixelBuffer) -> int:
    return get_min_max_value(buffer)[1]


def get_average_value(buffer: PixelBuffer, min_value: int = 0, max_value: int = 255) -> int:
    """Rounded mean intensity of the pixels within ``[min_value, max_value]``.

    Returns 0 when no pixel falls in the range.

    Raises:
        ValueError: If max_value < min_value.
    """
    if max_value < min_value:
        raise ValueError(
            f"Max value ({max_value}) cannot be less than min value ({min_value})"
        )

    plane = intensity_plane(buffer)
    selected = plane[(plane >= min_value) & (plane <= max_value)]
    if selected.size == 0:
        return 0
    return int(np.rint(selected.mean()))
