"""YAML processing recipes.

A recipe is the file form of a ProcessConfig, so a run can be repeated over
many images (``rasterkit batch``) or shared between people::

    grayscale: true
    kernels: [smoothing, edge]
    kernel_mode: combine
    combine_policy: or
    contrast:
      mode: stretch
      min: 16
      max: 240
    threshold:
      method: chow_kaneko
      zones: [4, 3]
    negative: false
    rgb_filter: "ff0000"     # or [255, 0, 0]

Every key is optional; an empty file means "change nothing".
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import BLACK_AND_WHITE_THRESHOLD, DEFAULT_HORIZONTAL_ZONES, DEFAULT_VERTICAL_ZONES
from processing.config import (
    COMBINE_POLICIES,
    CONTRAST_MODES,
    KERNEL_MODES,
    THRESHOLD_METHODS,
    ProcessConfig,
)
from processing.kernels import ConvolutionType


def _one_of(value: str, allowed: tuple[str, ...], what: str) -> str:
    if value not in allowed:
        raise ValueError(f"Invalid {what}: {value!r} (expected one of {', '.join(allowed)})")
    return value


class ContrastRecipe(BaseModel):
    """Contrast section: ``mode`` plus the stretch bounds."""

    mode: str = "none"
    min: int = Field(default=0, ge=0, le=255)
    max: int = Field(default=255, ge=0, le=255)

    model_config = ConfigDict(extra="forbid")

    @field_validator("mode")
    @classmethod
    def _validate_mode(cls, v: str) -> str:
        return _one_of(v, CONTRAST_MODES, "contrast mode")


class ThresholdRecipe(BaseModel):
    """Threshold section: ``method``, fixed ``value`` and zone grid."""

    method: str = "none"
    value: int = Field(default=BLACK_AND_WHITE_THRESHOLD, ge=0, le=255)
    zones: tuple[int, int] = (DEFAULT_HORIZONTAL_ZONES, DEFAULT_VERTICAL_ZONES)

    model_config = ConfigDict(extra="forbid")

    @field_validator("method")
    @classmethod
    def _validate_method(cls, v: str) -> str:
        return _one_of(v, THRESHOLD_METHODS, "threshold method")

    @field_validator("zones")
    @classmethod
    def _validate_zones(cls, v: tuple[int, int]) -> tuple[int, int]:
        if v[0] < 1 or v[1] < 1:
            raise ValueError(f"Zone counts must be at least 1, got {v[0]}x{v[1]}")
        return v


class Recipe(BaseModel):
    """A complete processing recipe."""

    rgb_filter: Optional[tuple[int, int, int]] = None
    grayscale: bool = False
    kernels: list[str] = Field(default_factory=list)
    kernel_mode: str = "sequence"
    combine_policy: str = "masked"
    contrast: ContrastRecipe = Field(default_factory=ContrastRecipe)
    threshold: ThresholdRecipe = Field(default_factory=ThresholdRecipe)
    negative: bool = False

    model_config = ConfigDict(extra="forbid")

    @field_validator("rgb_filter", mode="before")
    @classmethod
    def _parse_hex_filter(cls, v):
        """Accept "rrggbb" strings as well as [r, g, b] lists."""
        if isinstance(v, str):
            text = v.lstrip("#")
            if len(text) != 6:
                raise ValueError(f"RGB filter must be 6 hex digits, got {v!r}")
            try:
                return tuple(int(text[i:i + 2], 16) for i in (0, 2, 4))
            except ValueError:
                raise ValueError(f"RGB filter must be 6 hex digits, got {v!r}") from None
        return v

    @field_validator("rgb_filter")
    @classmethod
    def _validate_filter_range(cls, v):
        if v is not None and any(not 0 <= mask <= 255 for mask in v):
            raise ValueError(f"RGB filter values must be in 0..255, got {v}")
        return v

    @field_validator("kernels")
    @classmethod
    def _validate_kernels(cls, v: list[str]) -> list[str]:
        known = tuple(t.value for t in ConvolutionType)
        for name in v:
            _one_of(name, known, "kernel")
        return v

    @field_validator("kernel_mode")
    @classmethod
    def _validate_kernel_mode(cls, v: str) -> str:
        return _one_of(v, KERNEL_MODES, "kernel mode")

    @field_validator("combine_policy")
    @classmethod
    def _validate_policy(cls, v: str) -> str:
        return _one_of(v, COMBINE_POLICIES, "combine policy")

    def to_config(self) -> ProcessConfig:
        """Convert to a validated ProcessConfig."""
        config = ProcessConfig(
            rgb_filter=self.rgb_filter,
            grayscale=self.grayscale,
            kernels=tuple(self.kernels),
            kernel_mode=self.kernel_mode,
            combine_policy=self.combine_policy,
            contrast_mode=self.contrast.mode,
            stretch_min=self.contrast.min,
            stretch_max=self.contrast.max,
            threshold_method=self.threshold.method,
            threshold_value=self.threshold.value,
            horizontal_zones=self.threshold.zones[0],
            vertical_zones=self.threshold.zones[1],
            negative=self.negative,
        )
        config.validate()
        return config


def parse_recipe(text: str) -> Recipe:
    """Parse recipe YAML text.

    Raises:
        ValueError: If the YAML is malformed or a value is invalid
                    (pydantic's ValidationError is a ValueError).
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Recipe is not valid YAML: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Recipe must be a mapping, got {type(data).__name__}")
    return Recipe.model_validate(data)


def load_recipe(path: str | Path) -> Recipe:
    """Load a recipe from a YAML file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the content is not a valid recipe.
    """
    with open(path) as f:
        return parse_recipe(f.read())
