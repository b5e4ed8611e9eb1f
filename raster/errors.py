"""Error types raised by the raster and processing packages.

Invalid arguments are reported with the built-in ``ValueError`` / ``TypeError``
wherever a dedicated subclass adds nothing. The classes here cover the cases
callers are expected to tell apart.
"""

from __future__ import annotations


class EditSessionError(RuntimeError):
    """Raised when the begin/end edit protocol is violated for an image."""


class DegenerateRangeError(ValueError):
    """Raised when a contrast stretch is requested over a flat intensity range."""

    def __init__(self, value: int):
        super().__init__(
            f"Cannot stretch contrast: every pixel has intensity {value} "
            "(highest == lowest)"
        )
        self.value = value


class RegionOutOfRangeError(ValueError):
    """Raised when a zone or region lies outside the image area."""
