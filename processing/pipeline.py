"""
Processing pipeline that applies configured steps in order.

This module provides two APIs:
1. run_pipeline() - builds the standard pipeline from a ProcessConfig and
   runs it on a RasterImage through an edit session
2. Pipeline class - composable step sequences over PixelBuffers

Step order: RGB filter -> grayscale -> kernels -> contrast -> threshold ->
negative. Steps whose setting is left at its default are not added.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from raster.edit import EditSession, RasterImage
from .combine import (
    AdditiveCombinePolicy,
    BitwiseOrPolicy,
    MaskedAdditivePolicy,
    SaturatingAdditivePolicy,
)
from .config import ProcessConfig
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
    StretchStep,
    ThresholdStep,
)

logger = logging.getLogger(__name__)

_COMBINE_POLICIES: dict[str, type[AdditiveCombinePolicy]] = {
    "masked": MaskedAdditivePolicy,
    "saturating": SaturatingAdditivePolicy,
    "or": BitwiseOrPolicy,
}


@dataclass
class ProcessResult:
    """Result of running the processing pipeline on an image.

    Attributes:
        original: The input image (never modified).
        image: Processed image. Shares the input's layout unless a step
               changed the pixel format (e.g. grayscale conversion).
        steps: Per-step buffers and metadata.
        config: The configuration used.
    """

    original: RasterImage
    image: RasterImage
    steps: PipelineStepResults
    config: ProcessConfig
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def artifact_paths(self) -> dict[str, str]:
        return self.steps.artifact_paths


def build_pipeline(config: ProcessConfig) -> Pipeline:
    """Build a Pipeline from a ProcessConfig.

    Args:
        config: Processing configuration.

    Returns:
        Pipeline configured according to the config.
    """
    steps: list[PixelStep] = []

    if config.rgb_filter is not None:
        r, g, b = config.rgb_filter
        steps.append(FilterRGBStep(r=r, g=g, b=b))

    if config.grayscale:
        steps.append(GrayscaleStep())

    if config.kernels:
        steps.append(
            KernelStep(
                kernels=tuple(config.kernels),
                combine=config.kernel_mode == "combine",
                policy=_COMBINE_POLICIES[config.combine_policy](),
            )
        )

    if config.contrast_mode == "stretch":
        steps.append(StretchStep(min_value=config.stretch_min, max_value=config.stretch_max))
    elif config.contrast_mode == "equalize":
        steps.append(EqualizeStep())
    elif config.contrast_mode == "enhance":
        steps.append(EnhanceStep())

    if config.threshold_method == "fixed":
        steps.append(ThresholdStep(threshold=config.threshold_value))
    elif config.threshold_method == "otsu":
        steps.append(OtsuStep())
    elif config.threshold_method == "localized":
        steps.append(LocalizedOtsuStep(config.horizontal_zones, config.vertical_zones))
    elif config.threshold_method == "chow_kaneko":
        steps.append(ChowKanekoStep(config.horizontal_zones, config.vertical_zones))

    if config.negative:
        steps.append(NegativeStep())

    return Pipeline(steps=steps)


def run_pipeline(
    image: RasterImage,
    config: ProcessConfig | None = None,
    artifact_dir: str | Path | None = None,
) -> ProcessResult:
    """Apply the configured processing pipeline to an image.

    The input image is left untouched: a copy is opened in an edit session,
    the pipeline runs on the session buffer and the final buffer is written
    back to the copy. When a step changes the pixel layout the result is a
    new image built from the final buffer instead.

    Args:
        image: Input image.
        config: Processing configuration. If None, uses default settings
                (which apply no steps).
        artifact_dir: Optional directory to save every step's output.

    Returns:
        ProcessResult with the processed image and per-step results.

    Raises:
        ValueError: If the configuration is invalid or a step rejects the
                    image (e.g. an RGB filter on a gray image).
        TypeError: If image is not a RasterImage.
    """
    if config is None:
        config = ProcessConfig()
    config.validate()

    if not isinstance(image, RasterImage):
        raise TypeError(f"Expected RasterImage, got {type(image).__name__}")

    original = image.copy()
    working = image.copy()
    pipeline = build_pipeline(config)

    with EditSession(working) as buffer:
        results = pipeline.run(buffer, artifact_dir=artifact_dir)
        final = results.final
        same_layout = (
            final.pixel_format is buffer.pixel_format
            and final.stride == buffer.stride
            and final.data.size == buffer.data.size
        )
        if same_layout:
            buffer.data[:] = final.data

    output = working if same_layout else RasterImage.from_buffer(final)
    logger.debug(
        "Pipeline ran %d steps on %dx%d %s image",
        len(pipeline), image.width, image.height, image.pixel_format.value,
    )

    return ProcessResult(
        original=original,
        image=output,
        steps=results,
        config=config,
        metadata=results.all_metadata,
    )
