"""
Processing step classes with a common interface.

Each step is a dataclass that implements the PixelStep interface. Steps are
pure: they take a buffer and return a new buffer without mutating the input.

Usage:
    from processing.steps import KernelStep, OtsuStep, Pipeline

    pipeline = Pipeline(steps=[
        KernelStep(kernels=("smoothing",)),
        OtsuStep(),
    ])
    result = pipeline.run(buffer)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import numpy as np

from raster.buffer import PixelBuffer
from raster.codec import write_array
from . import color, contrast
from . import threshold as thresholding
from .combine import AdditiveCombinePolicy
from .convolution import apply_kernels_in_sequence, apply_kernels_then_combine
from .kernels import ConvolutionType
from .statistics import get_min_max_value

logger = logging.getLogger(__name__)


class PixelStep(ABC):
    """Base class for processing steps.

    Steps must never mutate the buffer they are given. Steps can optionally
    report metadata (like the threshold they picked) about their last run.
    """

    @abstractmethod
    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        """Apply this step to a buffer.

        Must be pure: never mutates the input buffer.

        Args:
            buffer: Input pixel buffer.

        Returns:
            Processed buffer (a new object).
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging and debugging."""
        pass

    def get_metadata(self) -> dict[str, Any]:
        """Return any metadata produced by the last ``apply``.

        Returns:
            Dictionary of metadata. Empty by default.
        """
        return {}


@dataclass(frozen=True)
class FilterRGBStep(PixelStep):
    """Mask the red, green and blue bytes of a color buffer."""

    r: int = 0xFF
    g: int = 0xFF
    b: int = 0xFF

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return color.apply_filter_rgb(buffer, self.r, self.g, self.b)

    @property
    def name(self) -> str:
        return f"filter_rgb({self.r:02x}{self.g:02x}{self.b:02x})"


@dataclass(frozen=True)
class GrayscaleStep(PixelStep):
    """Convert color buffers to 8-bit gray. Gray buffers pass through."""

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        if not buffer.is_color:
            return buffer.copy()
        return color.to_grayscale_buffer(buffer)

    @property
    def name(self) -> str:
        return "grayscale"


@dataclass(frozen=True)
class KernelStep(PixelStep):
    """Apply convolution kernels, chained or combined.

    Attributes:
        kernels: ConvolutionType values (or matrices) to apply.
        combine: Apply every kernel to the same source and add the results
                 instead of chaining them.
        policy: Combine policy, the masked additive default when None.
    """

    kernels: tuple = ()
    combine: bool = False
    policy: Optional[AdditiveCombinePolicy] = None

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        if self.combine:
            return apply_kernels_then_combine(buffer, *self.kernels, policy=self.policy)
        return apply_kernels_in_sequence(buffer, *self.kernels)

    @property
    def name(self) -> str:
        labels = ",".join(
            ConvolutionType(k).value if isinstance(k, str) else "matrix"
            for k in self.kernels
        )
        mode = "combine" if self.combine else "sequence"
        return f"kernel({mode}:{labels})"


@dataclass(frozen=True)
class StretchStep(PixelStep):
    """Linear contrast stretch onto ``[min_value, max_value]``."""

    min_value: int = 0
    max_value: int = 255

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return contrast.stretch(buffer, self.min_value, self.max_value)

    @property
    def name(self) -> str:
        return f"stretch({self.min_value},{self.max_value})"


@dataclass(frozen=True)
class EqualizeStep(PixelStep):
    """Histogram equalization."""

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return contrast.histogram_equalization(buffer)

    @property
    def name(self) -> str:
        return "equalize"


@dataclass(frozen=True)
class EnhanceStep(PixelStep):
    """Stretch or equalize, whichever suits the buffer's intensity range."""

    _method: str = field(default="", init=False, repr=False)

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        lowest, highest = get_min_max_value(buffer)
        if lowest == highest:
            method = "skipped"
        elif contrast.should_stretch(lowest, highest):
            method = "stretch"
        else:
            method = "equalize"
        object.__setattr__(self, "_method", method)
        return contrast.enhance(buffer)

    @property
    def name(self) -> str:
        return "enhance"

    def get_metadata(self) -> dict[str, Any]:
        return {"enhance_method": self._method}


@dataclass(frozen=True)
class ThresholdStep(PixelStep):
    """Binarize at a fixed level."""

    threshold: int = 0x80

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        result = buffer.copy()
        thresholding.apply_buffer_direct(result, self.threshold)
        return result

    @property
    def name(self) -> str:
        return f"threshold({self.threshold})"

    def get_metadata(self) -> dict[str, Any]:
        return {"threshold": self.threshold}


@dataclass(frozen=True)
class OtsuStep(PixelStep):
    """Binarize at the global Otsu level."""

    _threshold: Optional[int] = field(default=None, init=False, repr=False)

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        result = buffer.copy()
        level = thresholding.apply_buffer_direct(result)
        object.__setattr__(self, "_threshold", level)
        return result

    @property
    def name(self) -> str:
        return "otsu"

    def get_metadata(self) -> dict[str, Any]:
        return {"threshold": self._threshold}


@dataclass(frozen=True)
class LocalizedOtsuStep(PixelStep):
    """Binarize every grid zone at its own Otsu level."""

    horizontal_zones: int = 3
    vertical_zones: int = 3
    _zone_thresholds: tuple = field(default=(), init=False, repr=False)

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        result = buffer.copy()
        zones = thresholding.apply_otsu_localized_direct(
            result, self.horizontal_zones, self.vertical_zones
        )
        object.__setattr__(self, "_zone_thresholds", tuple(z.threshold for z in zones))
        return result

    @property
    def name(self) -> str:
        return f"localized_otsu({self.horizontal_zones}x{self.vertical_zones})"

    def get_metadata(self) -> dict[str, Any]:
        return {"zone_thresholds": list(self._zone_thresholds)}


@dataclass(frozen=True)
class ChowKanekoStep(PixelStep):
    """Binarize with zone thresholds blended by distance."""

    horizontal_zones: int = 3
    vertical_zones: int = 3
    _zone_thresholds: tuple = field(default=(), init=False, repr=False)

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        result = buffer.copy()
        zones = thresholding.apply_chow_kaneko_direct(
            result, self.horizontal_zones, self.vertical_zones
        )
        object.__setattr__(self, "_zone_thresholds", tuple(z.threshold for z in zones))
        return result

    @property
    def name(self) -> str:
        return f"chow_kaneko({self.horizontal_zones}x{self.vertical_zones})"

    def get_metadata(self) -> dict[str, Any]:
        return {"zone_thresholds": list(self._zone_thresholds)}


@dataclass(frozen=True)
class NegativeStep(PixelStep):
    """Invert the buffer (bit flip for monochrome)."""

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return color.negative(buffer)

    @property
    def name(self) -> str:
        return "negative"


@dataclass
class StepResult:
    """Result of applying a single processing step.

    Attributes:
        name: Name of the step that produced this result.
        buffer: Output buffer from the step.
        metadata: Any metadata produced by the step.
        artifact_path: Path where the buffer was saved (if artifact saving enabled).
    """

    name: str
    buffer: PixelBuffer
    metadata: dict[str, Any] = field(default_factory=dict)
    artifact_path: str | None = None


@dataclass
class PipelineStepResults:
    """Results from running a processing pipeline.

    Attributes:
        original: Copy of the input buffer.
        steps: StepResult for each step in order.
    """

    original: PixelBuffer
    steps: list[StepResult] = field(default_factory=list)

    @property
    def final(self) -> PixelBuffer:
        """The buffer produced by the last step."""
        if not self.steps:
            return self.original
        return self.steps[-1].buffer

    def get_intermediate(self, step_name: str) -> PixelBuffer | None:
        """Get an intermediate buffer by step name, or None if not found."""
        for step in self.steps:
            if step.name == step_name:
                return step.buffer
        return None

    def get_metadata(self, key: str) -> Any | None:
        """Get a metadata value from the first step that reports it."""
        for step in self.steps:
            if key in step.metadata:
                return step.metadata[key]
        return None

    @property
    def all_metadata(self) -> dict[str, Any]:
        """All step metadata merged; later steps win on conflicts."""
        result = {}
        for step in self.steps:
            result.update(step.metadata)
        return result

    @property
    def artifact_paths(self) -> dict[str, str]:
        """Map of normalized step name to saved artifact path."""
        return {
            step.name.split("(")[0]: step.artifact_path
            for step in self.steps
            if step.artifact_path
        }


def _save_buffer(buffer: PixelBuffer, path: str) -> None:
    """Save a buffer as an image file (monochrome is written as 0/255)."""
    array = buffer.pixels()
    if buffer.pixel_depth == 1:
        array = array[:, :, 0]
    if buffer.is_monochrome:
        array = array * np.uint8(255)
    write_array(np.ascontiguousarray(array), path)


@dataclass
class Pipeline:
    """A sequence of processing steps.

    The pipeline runs each step in order, passing the output of one step as
    the input to the next. All intermediate results are preserved.

    Attributes:
        steps: PixelStep instances to apply in order.
    """

    steps: list[PixelStep]

    def run(
        self,
        buffer: PixelBuffer,
        artifact_dir: str | Path | None = None,
    ) -> PipelineStepResults:
        """Run the pipeline on a buffer.

        Args:
            buffer: Input buffer (not modified).
            artifact_dir: Optional directory to save each step's output as PNG.

        Returns:
            PipelineStepResults with every intermediate buffer and metadata.
        """
        result = PipelineStepResults(original=buffer.copy())
        current = result.original

        for index, step in enumerate(self.steps, start=1):
            output = step.apply(current)
            if output.is_monochrome:
                # Expanded 1-bit buffers must hold only 0/1 per bit
                output = output.with_data((output.data > 0).astype(np.uint8))
            metadata = step.get_metadata()
            logger.debug("Step %s done %s", step.name, metadata or "")

            artifact_path = None
            if artifact_dir:
                step_key = step.name.split("(")[0]
                artifact_path = str(Path(artifact_dir) / f"{index:02d}_{step_key}.png")
                _save_buffer(output, artifact_path)

            result.steps.append(
                StepResult(
                    name=step.name,
                    buffer=output,
                    metadata=metadata,
                    artifact_path=artifact_path,
                )
            )
            current = output

        return result

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)
