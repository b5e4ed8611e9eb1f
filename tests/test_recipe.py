"""Tests for YAML processing recipes."""

import textwrap

import pytest
from pydantic import ValidationError

from cli.recipe import Recipe, load_recipe, parse_recipe
from processing import ProcessConfig


class TestParseRecipe:
    """Tests for parse_recipe."""

    def test_empty_recipe_is_default_config(self):
        assert parse_recipe("").to_config() == ProcessConfig()

    def test_full_recipe(self):
        recipe = parse_recipe(textwrap.dedent(
            """
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
            negative: true
            rgb_filter: "ff0000"
            """)
        )
        config = recipe.to_config()
        assert config.grayscale
        assert config.kernels == ("smoothing", "edge")
        assert config.kernel_mode == "combine"
        assert config.combine_policy == "or"
        assert (config.contrast_mode, config.stretch_min, config.stretch_max) == ("stretch", 16, 240)
        assert config.threshold_method == "chow_kaneko"
        assert (config.horizontal_zones, config.vertical_zones) == (4, 3)
        assert config.negative
        assert config.rgb_filter == (255, 0, 0)

    def test_rgb_filter_as_list(self):
        assert parse_recipe("rgb_filter: [1, 2, 3]").rgb_filter == (1, 2, 3)

    def test_invalid_yaml_raises_value_error(self):
        with pytest.raises(ValueError, match="not valid YAML"):
            parse_recipe("kernels: [smoothing")

    def test_non_mapping_raises(self):
        with pytest.raises(ValueError, match="must be a mapping"):
            parse_recipe("- smoothing")


class TestRecipeValidation:
    """Tests for Recipe field validators."""

    def test_unknown_kernel(self):
        with pytest.raises(ValidationError, match="Invalid kernel"):
            Recipe(kernels=["blur"])

    def test_unknown_threshold_method(self):
        with pytest.raises(ValidationError, match="Invalid threshold method"):
            parse_recipe("threshold: {method: adaptive}")

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            parse_recipe("sharpen: true")

    def test_value_out_of_range(self):
        with pytest.raises(ValidationError):
            parse_recipe("threshold: {value: 300}")

    def test_bad_hex_filter(self):
        with pytest.raises(ValidationError, match="6 hex digits"):
            Recipe(rgb_filter="fff")

    def test_zero_zones(self):
        with pytest.raises(ValidationError, match="at least 1"):
            parse_recipe("threshold: {zones: [0, 2]}")

    def test_inverted_stretch_fails_on_conversion(self):
        recipe = parse_recipe("contrast: {mode: stretch, min: 200, max: 100}")
        with pytest.raises(ValueError, match="cannot be less than"):
            recipe.to_config()

    def test_validation_error_is_value_error(self):
        assert issubclass(ValidationError, ValueError)


def test_load_recipe(tmp_path):
    path = tmp_path / "recipe.yaml"
    path.write_text("threshold:\n  method: otsu\n")
    assert load_recipe(path).to_config().threshold_method == "otsu"


def test_load_missing_recipe_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        load_recipe(tmp_path / "missing.yaml")
