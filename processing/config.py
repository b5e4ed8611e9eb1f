"""
Configuration for the processing pipeline.

Every pipeline step is parameterized through ProcessConfig so a run can be
reproduced from its settings alone (see cli/recipe.py for the YAML form).
"""

from dataclasses import dataclass
from typing import Optional

from config import (
    BLACK_AND_WHITE_THRESHOLD,
    DEFAULT_HORIZONTAL_ZONES,
    DEFAULT_VERTICAL_ZONES,
    STRETCH_MAX,
    STRETCH_MIN,
)
from .kernels import ConvolutionType

KERNEL_MODES = ("sequence", "combine")
COMBINE_POLICIES = ("masked", "saturating", "or")
THRESHOLD_METHODS = ("none", "fixed", "otsu", "localized", "chow_kaneko")
CONTRAST_MODES = ("none", "stretch", "equalize", "enhance")


@dataclass(frozen=True)
class ProcessConfig:
    """Configuration for all processing steps.

    Steps run in a fixed order: RGB filter, grayscale, kernels, contrast,
    threshold, negative. Anything left at its default is skipped.

    Attributes:
        rgb_filter: (r, g, b) byte masks ANDed into color pixels, or None.
        grayscale: Convert color buffers to 8-bit gray.
        kernels: ConvolutionType values to apply.
        kernel_mode: "sequence" chains the kernels, "combine" applies each to
                     the same source and adds the results.
        combine_policy: How "combine" adds results: "masked", "saturating"
                        or "or".
        contrast_mode: "none", "stretch", "equalize" or "enhance".
        stretch_min: Lower bound of the stretched range.
        stretch_max: Upper bound of the stretched range.
        threshold_method: "none", "fixed", "otsu", "localized" or
                          "chow_kaneko".
        threshold_value: Level used by the "fixed" method.
        horizontal_zones: Zone columns for zoned methods.
        vertical_zones: Zone rows for zoned methods.
        negative: Invert the result.
    """

    # Color
    rgb_filter: Optional[tuple[int, int, int]] = None
    grayscale: bool = False

    # Convolution
    kernels: tuple[str, ...] = ()
    kernel_mode: str = "sequence"
    combine_policy: str = "masked"

    # Contrast
    contrast_mode: str = "none"
    stretch_min: int = STRETCH_MIN
    stretch_max: int = STRETCH_MAX

    # Threshold
    threshold_method: str = "none"
    threshold_value: int = BLACK_AND_WHITE_THRESHOLD
    horizontal_zones: int = DEFAULT_HORIZONTAL_ZONES
    vertical_zones: int = DEFAULT_VERTICAL_ZONES

    negative: bool = False

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ValueError: If any parameter is invalid.
        """
        if self.rgb_filter is not None:
            if len(self.rgb_filter) != 3 or any(
                not 0 <= mask <= 255 for mask in self.rgb_filter
            ):
                raise ValueError(
                    f"rgb_filter must be three values in 0..255, got {self.rgb_filter}"
                )

        for kernel in self.kernels:
            try:
                ConvolutionType(kernel)
            except ValueError:
                raise ValueError(
                    f"Unknown kernel '{kernel}'. "
                    f"Expected one of: {', '.join(t.value for t in ConvolutionType)}"
                ) from None

        if self.kernel_mode not in KERNEL_MODES:
            raise ValueError(
                f"kernel_mode must be one of {KERNEL_MODES}, got '{self.kernel_mode}'"
            )
        if self.combine_policy not in COMBINE_POLICIES:
            raise ValueError(
                f"combine_policy must be one of {COMBINE_POLICIES}, "
                f"got '{self.combine_policy}'"
            )

        if self.contrast_mode not in CONTRAST_MODES:
            raise ValueError(
                f"contrast_mode must be one of {CONTRAST_MODES}, got '{self.contrast_mode}'"
            )
        for name in ("stretch_min", "stretch_max"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"{name} must be between 0 and 255, got {value}")
        if self.stretch_max < self.stretch_min:
            raise ValueError(
                f"stretch_max ({self.stretch_max}) cannot be less than "
                f"stretch_min ({self.stretch_min})"
            )

        if self.threshold_method not in THRESHOLD_METHODS:
            raise ValueError(
                f"threshold_method must be one of {THRESHOLD_METHODS}, "
                f"got '{self.threshold_method}'"
            )
        if not 0 <= self.threshold_value <= 255:
            raise ValueError(
                f"threshold_value must be between 0 and 255, got {self.threshold_value}"
            )
        if self.horizontal_zones < 1 or self.vertical_zones < 1:
            raise ValueError(
                "Zone counts must be at least 1, "
                f"got {self.horizontal_zones}x{self.vertical_zones}"
            )
