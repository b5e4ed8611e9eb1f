"""
Convolution kernel definitions.

Each ConvolutionType maps to a fixed integer matrix. Matrices are indexed
``[x, y]``: axis 0 runs along image columns and axis 1 along rows, so the
literal nesting below is column-major when read as rows of text.
"""

from __future__ import annotations

from enum import Enum

import numpy as np


class ConvolutionType(str, Enum):
    """Predefined 2D convolution kernels."""

    EDGE = "edge"
    SMOOTHING = "smoothing"
    SMOOTHING_WITH_HIGH_PEAK = "smoothing_with_high_peak"
    NOISE_REDUCTION = "noise_reduction"
    SMOOTHING_MEXICAN_HAT = "smoothing_mexican_hat"
    SHARPEN = "sharpen"
    EDGE_LAPLACIAN_WITH_PEAK_4 = "edge_laplacian_with_peak_4"
    EDGE_LAPLACIAN_WITH_PEAK_8 = "edge_laplacian_with_peak_8"
    EDGE_LAPLACIAN_OF_GAUSSIAN = "edge_laplacian_of_gaussian"
    EDGE_SOBEL_VERTICAL = "edge_sobel_vertical"
    EDGE_SOBEL_HORIZONTAL = "edge_sobel_horizontal"
    EMBOSS = "emboss"

    @property
    def description(self) -> str:
        """Human-readable name, falling back to the enum value."""
        return _DESCRIPTIONS.get(self, self.value)


_DESCRIPTIONS = {
    ConvolutionType.EDGE: "Edge",
    ConvolutionType.SMOOTHING: "Smoothing",
    ConvolutionType.SMOOTHING_WITH_HIGH_PEAK: "Smoothing (with high peak)",
    ConvolutionType.NOISE_REDUCTION: "Noise Reduction",
    ConvolutionType.SHARPEN: "Sharpen",
    ConvolutionType.EDGE_LAPLACIAN_WITH_PEAK_4: "Edge Laplacian (with peak 4)",
    ConvolutionType.EDGE_LAPLACIAN_WITH_PEAK_8: "Edge Laplacian (with peak 8)",
    ConvolutionType.EDGE_LAPLACIAN_OF_GAUSSIAN: "Edge Laplacian of Gaussian",
    ConvolutionType.EDGE_SOBEL_VERTICAL: "Sobel Vertical Edge",
    ConvolutionType.EDGE_SOBEL_HORIZONTAL: "Sobel Horizontal Edge",
    ConvolutionType.EMBOSS: "Emboss",
}

_LAPLACIAN_PEAK_4 = (
    (0, -1, 0),
    (-1, 4, -1),
    (0, -1, 0),
)

_ALL_ONES = (
    (1, 1, 1),
    (1, 1, 1),
    (1, 1, 1),
)

# Gaussian sigma = 1.4
_LAPLACIAN_OF_GAUSSIAN = (
    (0, 1, 1, 2, 2, 2, 1, 1, 0),
    (1, 2, 4, 5, 5, 5, 4, 2, 1),
    (1, 4, 5, 3, 0, 3, 5, 4, 1),
    (2, 5, 3, -12, -24, -12, 3, 5, 2),
    (2, 5, 0, -24, -40, -24, 0, 5, 2),
    (2, 5, 3, -12, -24, -12, 3, 5, 2),
    (1, 4, 5, 3, 0, 3, 5, 4, 1),
    (1, 2, 4, 5, 5, 5, 4, 2, 1),
    (0, 1, 1, 2, 2, 2, 1, 1, 0),
)

_MATRICES: dict[ConvolutionType, tuple[tuple[int, ...], ...]] = {
    # Laplacian doubles as the default edge and sharpen kernel
    ConvolutionType.EDGE: _LAPLACIAN_PEAK_4,
    ConvolutionType.SHARPEN: _LAPLACIAN_PEAK_4,
    ConvolutionType.EDGE_LAPLACIAN_WITH_PEAK_4: _LAPLACIAN_PEAK_4,
    ConvolutionType.EDGE_LAPLACIAN_WITH_PEAK_8: (
        (-1, -1, -1),
        (-1, 8, -1),
        (-1, -1, -1),
    ),
    ConvolutionType.EDGE_SOBEL_HORIZONTAL: (
        (1, 2, 1),
        (0, 0, 0),
        (-1, -2, -1),
    ),
    ConvolutionType.EDGE_SOBEL_VERTICAL: (
        (-1, 0, 1),
        (-2, 0, 2),
        (-1, 0, 1),
    ),
    ConvolutionType.SMOOTHING: _ALL_ONES,
    ConvolutionType.NOISE_REDUCTION: _ALL_ONES,
    ConvolutionType.SMOOTHING_WITH_HIGH_PEAK: (
        (1, 3, 1),
        (3, 16, 3),
        (1, 3, 1),
    ),
    ConvolutionType.SMOOTHING_MEXICAN_HAT: (
        (1, 2, 1),
        (2, 4, 2),
        (1, 2, 1),
    ),
    ConvolutionType.EMBOSS: (
        (-2, -1, 0),
        (-1, 1, 1),
        (0, 1, 2),
    ),
    ConvolutionType.EDGE_LAPLACIAN_OF_GAUSSIAN: _LAPLACIAN_OF_GAUSSIAN,
}


def get_convolution_matrix(convolution_type: ConvolutionType | str) -> np.ndarray:
    """Return the kernel matrix for a convolution type.

    The returned array is a fresh, read-only int32 matrix indexed [x, y].

    Args:
        convolution_type: ConvolutionType member or its string value.

    Raises:
        ValueError: If the string does not name a ConvolutionType.
        NotImplementedError: If the type has no matrix defined.
    """
    convolution_type = ConvolutionType(convolution_type)
    if convolution_type not in _MATRICES:
        raise NotImplementedError(
            f"Matrix not implemented for {convolution_type.name}"
        )
    matrix = np.array(_MATRICES[convolution_type], dtype=np.int32)
    matrix.setflags(write=False)
    return matrix
