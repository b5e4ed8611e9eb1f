"""
Pixel processing engines for raster buffers.

Every engine works directly on PixelBuffer memory. ``*_direct`` functions
modify their input in place; the plain variants copy first and return the
copy.

Key components:
- kernels: ConvolutionType enum and its fixed kernel matrices
- convolution: Kernel application, chained or combined
- histogram: 256-bin histograms, equalization and histogram charts
- threshold: Fixed, min/max, Otsu, localized Otsu and Chow & Kaneko
- zones: Grid partitioning for the zoned threshold methods
- contrast: Stretch, equalize and the enhance heuristic
- color: Grayscale, black & white, negative, RGB masks and sepia
- binary: 0/1 conversion
- combine: Buffer combination with swappable merge policies
- statistics: Min/max/average intensity
- config / steps / pipeline: Composable step layer over the engines

Two APIs are available:
1. Function-based: call engine functions on a PixelBuffer
2. Class-based: run_pipeline(image, config) or Pipeline(steps=[...]).run(buffer)
"""

from .config import ProcessConfig
from .combine import (
    AdditiveCombinePolicy,
    BitwiseOrPolicy,
    MaskedAdditivePolicy,
    SaturatingAdditivePolicy,
    combine_all,
)
from .convolution import (
    apply_kernel,
    apply_kernel_direct,
    apply_kernel_to_image,
    apply_kernels_in_sequence,
    apply_kernels_then_combine,
)
from .kernels import ConvolutionType, get_convolution_matrix
from .pipeline import ProcessResult, build_pipeline, run_pipeline
from .steps import (
    ChowKanekoStep,
    EnhanceStep,
    EqualizeStep,
    FilterRGBStep,
    GrayscaleStep,
    KernelStep,
    LocalizedOtsuStep,
    NegativeStep,
    OtsuStep,
    Pipeline,
    PipelineStepResults,
    PixelStep,
    StepResult,
    StretchStep,
    ThresholdStep,
)
from .zones import WeightedZone, Zone

__all__ = [
    # Config and results
    "ProcessConfig",
    "ProcessResult",
    # Function API
    "run_pipeline",
    "build_pipeline",
    "apply_kernel",
    "apply_kernel_direct",
    "apply_kernel_to_image",
    "apply_kernels_in_sequence",
    "apply_kernels_then_combine",
    "combine_all",
    "get_convolution_matrix",
    # Types
    "AdditiveCombinePolicy",
    "BitwiseOrPolicy",
    "ConvolutionType",
    "MaskedAdditivePolicy",
    "SaturatingAdditivePolicy",
    "WeightedZone",
    "Zone",
    # Class-based API
    "PixelStep",
    "FilterRGBStep",
    "GrayscaleStep",
    "KernelStep",
    "StretchStep",
    "EqualizeStep",
    "EnhanceStep",
    "ThresholdStep",
    "OtsuStep",
    "LocalizedOtsuStep",
    "ChowKanekoStep",
    "NegativeStep",
    "Pipeline",
    "PipelineStepResults",
    "StepResult",
]
