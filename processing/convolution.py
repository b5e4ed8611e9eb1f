"""
Kernel convolution over pixel buffers.

For a kernel of M x N (indexed [x, y]) the anchor on each axis is
``(length - 1) // 2``. At every scan position (x, y) whose window
``[x, x+M) x [y, y+N)`` lies inside the image, the clamped sum is written to
``(x + anchor_x, y + anchor_y)``. Scan positions whose window leaves the image
are written as 0 at (x, y) itself, which blanks an M-1 wide band at the right
and an N-1 tall band at the bottom. For odd kernels this is a centered
convolution; even kernels write forward of their window.

Each color channel is convolved separately. Alpha and row padding in the
output are left 0.
"""

from __future__ import annotations

import logging
from typing import Sequence, Union

import numpy as np

from raster.buffer import PixelBuffer
from raster.edit import EditSession, RasterImage
from .combine import AdditiveCombinePolicy, combine_all
from .kernels import ConvolutionType, get_convolution_matrix

logger = logging.getLogger(__name__)

KernelLike = Union[ConvolutionType, str, Sequence[Sequence[int]], np.ndarray]


def as_kernel(kernel: KernelLike) -> np.ndarray:
    """Resolve a ConvolutionType name or matrix into a 2D int array.

    Raises:
        ValueError: If the matrix is not a non-empty 2D array.
    """
    if isinstance(kernel, (ConvolutionType, str)):
        return get_convolution_matrix(kernel)

    matrix = np.asarray(kernel, dtype=np.int64)
    if matrix.ndim != 2 or matrix.size == 0:
        raise ValueError(
            f"Kernel must be a non-empty 2D matrix, got shape {matrix.shape}"
        )
    return matrix


def _convolve_plane(plane: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """Convolve one (height, width) channel plane into a new uint8 plane."""
    height, width = plane.shape
    kernel_width, kernel_height = kernel.shape
    out = np.zeros((height, width), dtype=np.uint8)

    # Number of scan positions whose window fits inside the image
    valid_x = width - kernel_width + 1
    valid_y = height - kernel_height + 1
    if valid_x <= 0 or valid_y <= 0:
        return out

    source = plane.astype(np.int64)
    sums = np.zeros((valid_y, valid_x), dtype=np.int64)
    for mx in range(kernel_width):
        for my in range(kernel_height):
            weight = int(kernel[mx, my])
            if weight:
                sums += weight * source[my:my + valid_y, mx:mx + valid_x]

    anchor_x = (kernel_width - 1) // 2
    anchor_y = (kernel_height - 1) // 2
    out[anchor_y:anchor_y + valid_y, anchor_x:anchor_x + valid_x] = np.clip(sums, 0, 255)

    # Blanked scan positions come later in scan order, so they win
    out[:, valid_x:] = 0
    out[valid_y:, :] = 0
    return out


def apply_kernel(buffer: PixelBuffer, kernel: KernelLike) -> PixelBuffer:
    """Convolve ``buffer`` with ``kernel`` into a new buffer of the same layout.

    Args:
        buffer: Source buffer (left untouched).
        kernel: ConvolutionType (or its value) or an integer matrix [x, y].

    Returns:
        New buffer; bytes outside the processed channels are 0.
    """
    matrix = as_kernel(kernel)
    result = buffer.with_data(np.zeros_like(buffer.data))

    source = buffer.pixels()
    target = result.pixels()
    for channel in range(buffer.channels):
        target[:, :, channel] = _convolve_plane(source[:, :, channel], matrix)

    logger.debug(
        "Applied %dx%d kernel to %dx%d buffer (%d channels)",
        matrix.shape[0], matrix.shape[1], buffer.width, buffer.height, buffer.channels,
    )
    return result


def apply_kernel_direct(buffer: PixelBuffer, kernel: KernelLike) -> None:
    """Convolve ``buffer`` with ``kernel`` in place."""
    buffer.data[:] = apply_kernel(buffer, kernel).data


def apply_kernels_in_sequence(buffer: PixelBuffer, *kernels: KernelLike) -> PixelBuffer:
    """Apply kernels one after another, each to the previous result."""
    result = buffer.copy()
    for kernel in kernels:
        result = apply_kernel(result, kernel)
    return result


def apply_kernels_then_combine(
    buffer: PixelBuffer,
    *kernels: KernelLike,
    policy: AdditiveCombinePolicy | None = None,
) -> PixelBuffer:
    """Apply every kernel to the same source and combine the results.

    With no kernels the result is a copy of ``buffer``.
    """
    if not kernels:
        return buffer.copy()
    return combine_all((apply_kernel(buffer, kernel) for kernel in kernels), policy)


def apply_kernel_to_image(image: RasterImage, kernel: KernelLike) -> None:
    """Convolve a backing image in place through an edit session."""
    with EditSession(image) as buffer:
        apply_kernel_direct(buffer, kernel)
