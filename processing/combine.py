"""
Additive combination of same-shaped pixel buffers.

How two channel bytes merge is a swappable policy. The default,
MaskedAdditivePolicy, keeps the historical ``(a + b) & 0xFFF0`` arithmetic
stored as a byte; it does not saturate, so sums above 255 wrap.
SaturatingAdditivePolicy is the corrected variant.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable

import numpy as np

from raster.buffer import PixelBuffer, safe_limit

logger = logging.getLogger(__name__)


class AdditiveCombinePolicy(ABC):
    """How two channel values are merged when combining buffers."""

    @abstractmethod
    def combine(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """Merge two uint8 arrays of equal shape into a new uint8 array."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass


class MaskedAdditivePolicy(AdditiveCombinePolicy):
    """Add and mask to a multiple of 16, keeping the low byte."""

    def combine(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        total = a.astype(np.int32) + b.astype(np.int32)
        return ((total & 0xFFF0) & 0xFF).astype(np.uint8)

    @property
    def name(self) -> str:
        return "masked_additive"


class SaturatingAdditivePolicy(AdditiveCombinePolicy):
    """Add and clamp at 255."""

    def combine(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        total = a.astype(np.int32) + b.astype(np.int32)
        return np.minimum(total, 255).astype(np.uint8)

    @property
    def name(self) -> str:
        return "saturating_additive"


class BitwiseOrPolicy(AdditiveCombinePolicy):
    """Bitwise OR of the two values."""

    def combine(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        return np.bitwise_or(a, b)

    @property
    def name(self) -> str:
        return "bitwise_or"


def combine_all(
    buffers: Iterable[PixelBuffer],
    policy: AdditiveCombinePolicy | None = None,
) -> PixelBuffer | None:
    """Combine buffers channel by channel into a new buffer.

    The first buffer is cloned as accumulator and every further buffer is
    merged into it with ``policy``. Alpha bytes are left as in the first
    buffer. Buffers of different size are combined over the smaller safe
    byte range.

    Args:
        buffers: Buffers to combine.
        policy: Merge policy, MaskedAdditivePolicy when omitted.

    Returns:
        Combined buffer, a copy of the only buffer for one input, or None
        for no input.

    Raises:
        ValueError: If color and non-color buffers are mixed.
    """
    buffers = list(buffers)
    if not buffers:
        return None

    policy = policy or MaskedAdditivePolicy()
    combined = buffers[0].copy()
    depth = combined.pixel_depth

    for other in buffers[1:]:
        if other.is_color != combined.is_color:
            raise ValueError(
                "Cannot combine color and non-color buffers: "
                f"{combined.pixel_format.value} vs {other.pixel_format.value}"
            )

        limit = min(
            safe_limit(combined.data.size, depth),
            safe_limit(other.data.size, depth),
        )
        starts = np.arange(0, limit, depth)
        for channel in range(combined.channels):
            index = starts + channel
            combined.data[index] = policy.combine(
                combined.data[index], other.data[index]
            )

    logger.debug("Combined %d buffers with %s", len(buffers), policy.name)
    return combined
