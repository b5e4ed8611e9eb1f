"""
Zone records for localized thresholding.

A Zone is one cell of a grid partition together with the threshold computed
for it. WeightedZone adds the zone center and a scratch distance used when
thresholds are blended between neighbouring zones.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from geometry import Rect, grid_rects, point_distance, rect_center, rect_size
from raster.buffer import PixelBuffer


@dataclass
class Zone:
    """Grid cell with its own threshold.

    Attributes:
        column: Grid column index.
        row: Grid row index.
        rect: Cell area in pixels, (x1, y1, x2, y2) with exclusive ends.
        threshold: Threshold computed for the cell.
    """

    column: int
    row: int
    rect: Rect
    threshold: int = 0

    @property
    def width(self) -> int:
        return rect_size(self.rect)[0]

    @property
    def height(self) -> int:
        return rect_size(self.rect)[1]


@dataclass
class WeightedZone(Zone):
    """Zone whose threshold is blended by distance to its center."""

    distance: float = 0.0

    @property
    def center(self) -> tuple[int, int]:
        return rect_center(self.rect)

    def calculate_distance(self, x, y):
        """Store and return the distance from (x, y) to the zone center.

        ``x`` may be an array of columns, giving one distance per column.
        """
        cx, cy = self.center
        self.distance = point_distance(x, y, cx, cy)
        return self.distance


def partition(
    width: int,
    height: int,
    horizontal_zones: int,
    vertical_zones: int,
    zone_type: type[Zone] = Zone,
) -> list[Zone]:
    """Split an image area into a grid of zones.

    Cell sizes are ``ceil(width / horizontal_zones)`` by
    ``ceil(height / vertical_zones)``; edge cells are clipped and cells that
    fall outside the image are dropped.

    Raises:
        ValueError: If either zone count is less than 1.
    """
    return [
        zone_type(column=column, row=row, rect=rect)
        for column, row, rect in grid_rects(width, height, horizontal_zones, vertical_zones)
    ]


def read_zone(buffer: PixelBuffer, rect: Rect) -> np.ndarray:
    """Copy the bytes of ``rect`` into a new contiguous flat array."""
    x1, y1, x2, y2 = rect
    depth = buffer.pixel_depth
    region = buffer.rows()[y1:y2, x1 * depth:x2 * depth]
    return np.ascontiguousarray(region).reshape(-1)


def write_zone(buffer: PixelBuffer, rect: Rect, data: np.ndarray) -> None:
    """Copy contiguous zone bytes back into ``rect`` of ``buffer``."""
    x1, y1, x2, y2 = rect
    depth = buffer.pixel_depth
    buffer.rows()[y1:y2, x1 * depth:x2 * depth] = data.reshape(y2 - y1, (x2 - x1) * depth)
