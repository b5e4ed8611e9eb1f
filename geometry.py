"""Shared geometry utilities for rectangular image regions."""

from __future__ import annotations

import math

import numpy as np

from raster.errors import RegionOutOfRangeError

# Rectangle as (x1, y1, x2, y2) in pixels; x2/y2 are exclusive
Rect = tuple[int, int, int, int]


def rect_size(rect: Rect) -> tuple[int, int]:
    """Return (width, height) of a rectangle."""
    x1, y1, x2, y2 = rect
    return max(0, x2 - x1), max(0, y2 - y1)


def rect_center(rect: Rect) -> tuple[int, int]:
    """Return the integer center point of a rectangle."""
    x1, y1, _, _ = rect
    w, h = rect_size(rect)
    return x1 + w // 2, y1 + h // 2


def clip_rect(rect: Rect, width: int, height: int) -> Rect:
    """Trim a rectangle to the image area.

    Raises:
        RegionOutOfRangeError: If nothing of the rectangle lies inside the image.
    """
    x1, y1, x2, y2 = rect
    clipped = (max(0, x1), max(0, y1), min(width, x2), min(height, y2))
    w, h = rect_size(clipped)
    if w <= 0 or h <= 0:
        raise RegionOutOfRangeError(
            f"Region {rect} lies outside of image area {width}x{height}"
        )
    return clipped


def grid_rects(
    width: int,
    height: int,
    columns: int,
    rows: int,
) -> list[tuple[int, int, Rect]]:
    """Partition an image into a grid of non-overlapping rectangles.

    Cell size is rounded up so every pixel is covered; cells on the right and
    bottom edges are clipped to the image, and cells that fall entirely
    outside are left out.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        columns: Number of cells across.
        rows: Number of cells down.

    Returns:
        List of (column, row, rect) in row-major order.

    Raises:
        ValueError: If columns or rows is less than 1.
    """
    if columns < 1 or rows < 1:
        raise ValueError(
            f"Grid requires at least one column and row, got {columns}x{rows}"
        )

    cell_width = math.ceil(width / columns)
    cell_height = math.ceil(height / rows)

    cells = []
    for row in range(rows):
        for column in range(columns):
            rect = (
                column * cell_width,
                row * cell_height,
                (column + 1) * cell_width,
                (row + 1) * cell_height,
            )
            try:
                cells.append((column, row, clip_rect(rect, width, height)))
            except RegionOutOfRangeError:
                continue
    return cells


def point_distance(ax, ay, bx, by):
    """Euclidean distance between two points; coordinates may be arrays."""
    return np.hypot(ax - bx, ay - by)
