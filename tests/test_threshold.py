"""Tests for fixed, clamping, Otsu and zoned thresholding."""

import numpy as np
import pytest

from conftest import make_gray
from processing.threshold import (
    apply,
    apply_buffer_direct,
    apply_chow_kaneko,
    apply_chow_kaneko_direct,
    apply_default,
    apply_direct,
    apply_max,
    apply_min,
    apply_min_direct,
    apply_min_max,
    apply_otsu_localized,
    apply_otsu_localized_direct,
    apply_otsu_method,
    get_by_otsu_method,
    get_by_otsu_method_for,
)
from processing.zones import WeightedZone
from raster.buffer import PixelBuffer


def u8(values):
    return np.array(values, dtype=np.uint8)


class TestApply:
    """Tests for fixed-level thresholding."""

    def test_gray(self):
        assert apply(u8([10, 127, 128, 200]), 1, 128).tolist() == [0, 0, 255, 255]

    def test_color_uses_average(self):
        data = u8([10, 20, 30, 200, 210, 220])
        assert apply(data, 3, 128).tolist() == [0, 0, 0, 255, 255, 255]

    def test_alpha_untouched(self):
        assert apply(u8([10, 10, 10, 77]), 4, 128).tolist() == [0, 0, 0, 77]

    def test_partial_trailing_pixel_averages_what_it_has(self):
        data = u8([200, 200, 200, 90, 90])
        # Trailing pixel sums 180 over 3 channels = 60
        assert apply(data, 3, 60).tolist() == [255] * 5
        assert apply(data, 3, 61).tolist() == [255, 255, 255, 0, 0]

    def test_direct_modifies_in_place(self):
        data = u8([1, 250])
        apply_direct(data, 1, 128)
        assert data.tolist() == [0, 255]

    def test_cloning_leaves_input(self):
        data = u8([1, 250])
        apply(data, 1, 128)
        assert data.tolist() == [1, 250]

    def test_level_out_of_range_raises(self):
        with pytest.raises(ValueError, match="Threshold must be between 0 and 255"):
            apply(u8([1]), 1, 256)

    def test_non_array_raises(self):
        with pytest.raises(TypeError, match="Expected numpy.ndarray"):
            apply([1, 2], 1, 128)


class TestMinMax:
    """Tests for min/max clamping."""

    def test_min(self):
        assert apply_min(u8([5, 50, 200]), 1, 20).tolist() == [20, 50, 200]

    def test_max(self):
        assert apply_max(u8([5, 50, 200]), 1, 100).tolist() == [5, 50, 100]

    def test_min_max(self):
        assert apply_min_max(u8([5, 50, 200]), 1, 20, 100).tolist() == [20, 50, 100]

    def test_color_clamps_every_channel(self):
        data = u8([0, 128, 255, 30, 40, 50])
        assert apply_min_max(data, 3, 35, 100).tolist() == [35, 100, 100, 35, 40, 50]

    def test_trailing_bytes_only_first_channel(self):
        data = u8([1, 1, 1, 1, 1])
        apply_min_direct(data, 3, 10)
        assert data.tolist() == [10, 10, 10, 10, 1]

    def test_min_above_max_raises(self):
        with pytest.raises(ValueError, match="must not exceed"):
            apply_min_max(u8([1]), 1, 200, 100)

    def test_value_out_of_range_raises(self):
        with pytest.raises(ValueError, match="Min value"):
            apply_min(u8([1]), 1, -1)


class TestOtsu:
    """Tests for Otsu's method."""

    def test_two_spikes_split_between(self):
        histogram = np.zeros(256, dtype=np.int64)
        histogram[10] = 50
        histogram[200] = 50
        assert get_by_otsu_method(histogram) == 11

    def test_bimodal_threshold_strictly_between_clusters(self, bimodal_gray):
        threshold = get_by_otsu_method_for(bimodal_gray.data, 1)
        assert 23 < threshold < 200

    def test_uniform_returns_zero(self):
        histogram = np.zeros(256, dtype=np.int64)
        histogram[90] = 10
        assert get_by_otsu_method(histogram) == 0

    def test_empty_histogram_returns_zero(self):
        assert get_by_otsu_method(np.zeros(256)) == 0

    def test_ties_keep_lowest_level(self):
        histogram = np.zeros(256, dtype=np.int64)
        histogram[0] = 1
        histogram[255] = 1
        assert get_by_otsu_method(histogram) == 1

    def test_otsu_separates_bimodal_image(self, bimodal_gray):
        result = apply_otsu_method(bimodal_gray.data, 1).reshape(8, 8)
        assert np.all(result[:, :4] == 0)
        assert np.all(result[:, 4:] == 255)


class TestBufferThreshold:
    """Tests for stride-aware buffer thresholding."""

    def test_fixed_level_skips_padding(self):
        buffer = make_gray([10, 200, 10, 200], width=2, height=2, stride=3)
        buffer.rows()[:, 2] = 77
        assert apply_buffer_direct(buffer, 100) == 100
        assert buffer.pixels()[:, :, 0].tolist() == [[0, 255], [0, 255]]
        assert buffer.rows()[:, 2].tolist() == [77, 77]

    def test_none_uses_otsu(self):
        buffer = make_gray([10, 200, 10, 200], width=2, height=2, stride=3)
        assert apply_buffer_direct(buffer) == 11

    def test_color_pixels_stay_aligned_with_padding(self, padded_color):
        apply_buffer_direct(padded_color, 100)
        pixels = padded_color.pixels()
        assert pixels[0].tolist() == [[0, 0, 0], [0, 0, 0], [0, 0, 0]]
        assert pixels[1].tolist() == [[255] * 3] * 3

    def test_default_is_cloning_otsu(self, bimodal_gray):
        before = bimodal_gray.data.copy()
        result = apply_default(bimodal_gray)
        assert np.array_equal(bimodal_gray.data, before)
        assert set(np.unique(result.data)) == {0, 255}


def split_image():
    """8x1 gray image whose halves need different thresholds."""
    return make_gray([10, 10, 50, 50, 100, 100, 200, 200], width=8, height=1)


class TestLocalizedOtsu:
    """Tests for per-zone Otsu thresholding."""

    def test_each_zone_uses_own_threshold(self):
        buffer = split_image()
        zones = apply_otsu_localized_direct(buffer, 2, 1)
        assert [zone.threshold for zone in zones] == [11, 101]
        assert [zone.rect for zone in zones] == [(0, 0, 4, 1), (4, 0, 8, 1)]
        assert buffer.data.tolist() == [0, 0, 255, 255, 0, 0, 255, 255]

    def test_padding_untouched(self):
        buffer = make_gray([10, 200, 10, 200], width=2, height=2, stride=4)
        buffer.rows()[:, 2:] = 33
        apply_otsu_localized_direct(buffer, 1, 2)
        assert np.all(buffer.rows()[:, 2:] == 33)

    def test_single_zone_matches_global(self, bimodal_gray):
        local = apply_otsu_localized(bimodal_gray, 1, 1)
        assert np.array_equal(local.data, apply_default(bimodal_gray).data)

    def test_default_grid_is_3x3(self, bimodal_gray):
        assert len(apply_otsu_localized_direct(bimodal_gray.copy())) == 9

    def test_invalid_zone_count_raises(self, bimodal_gray):
        with pytest.raises(ValueError, match="at least one column"):
            apply_otsu_localized(bimodal_gray, 0, 3)


class TestChowKaneko:
    """Tests for distance-blended zone thresholding."""

    def test_blends_between_zone_thresholds(self):
        buffer = split_image()
        zones = apply_chow_kaneko_direct(buffer, 2, 1)
        assert all(isinstance(zone, WeightedZone) for zone in zones)
        assert [zone.threshold for zone in zones] == [11, 101]
        # x=4 sits halfway: threshold (11 + 101) / 2 = 56, so 100 turns white
        assert buffer.data.tolist() == [0, 0, 255, 255, 255, 255, 255, 255]

    def test_single_zone_matches_global(self, bimodal_gray):
        result = apply_chow_kaneko(bimodal_gray, 1, 1)
        assert np.array_equal(result.data, apply_default(bimodal_gray).data)

    def test_alpha_untouched(self):
        array = np.zeros((2, 2, 4), dtype=np.uint8)
        array[0, :, :3] = 10
        array[1, :, :3] = 220
        array[..., 3] = 99
        result = apply_chow_kaneko(PixelBuffer.from_array(array), 1, 1)
        pixels = result.pixels()
        assert np.all(pixels[..., 3] == 99)
        assert np.all(pixels[0, :, :3] == 0)
        assert np.all(pixels[1, :, :3] == 255)

    def test_cloning_leaves_input(self):
        buffer = split_image()
        apply_chow_kaneko(buffer, 2, 1)
        assert buffer.data.tolist() == [10, 10, 50, 50, 100, 100, 200, 200]
