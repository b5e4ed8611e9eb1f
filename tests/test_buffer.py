"""Tests for the PixelBuffer descriptor."""

import numpy as np
import pytest

from raster.buffer import PixelBuffer, PixelFormat, aligned_stride, safe_limit


class TestPixelFormat:
    """Tests for PixelFormat depth mapping."""

    @pytest.mark.parametrize(
        "pixel_format, depth",
        [
            (PixelFormat.GRAY8, 1),
            (PixelFormat.BGR24, 3),
            (PixelFormat.BGRA32, 4),
            (PixelFormat.MONO1, 1),
        ],
    )
    def test_pixel_depth(self, pixel_format, depth):
        assert pixel_format.pixel_depth == depth

    def test_for_depth(self):
        assert PixelFormat.for_depth(3) is PixelFormat.BGR24

    def test_for_unsupported_depth_raises(self):
        with pytest.raises(ValueError, match="Unsupported pixel depth"):
            PixelFormat.for_depth(2)


class TestGeometry:
    """Tests for stride and size helpers."""

    def test_aligned_stride_rounds_up(self):
        assert aligned_stride(3, 3, 4) == 12
        assert aligned_stride(4, 1, 4) == 4
        assert aligned_stride(5, 1) == 5

    def test_safe_limit_color_stops_before_partial_pixel(self):
        assert safe_limit(10, 3) == 8
        assert safe_limit(10, 4) == 7

    def test_safe_limit_gray_is_length(self):
        assert safe_limit(10, 1) == 10

    def test_properties(self, padded_color):
        assert padded_color.stride == 12
        assert padded_color.row_length == 9
        assert padded_color.padding == 3
        assert padded_color.byte_count == 24
        assert padded_color.is_color
        assert not padded_color.is_monochrome
        assert padded_color.channels == 3

    def test_alpha_is_not_a_processed_channel(self):
        buffer = PixelBuffer.blank(2, 2, PixelFormat.BGRA32)
        assert buffer.pixel_depth == 4
        assert buffer.channels == 3


class TestValidation:
    """Tests for PixelBuffer construction checks."""

    def test_wrong_length_raises(self):
        with pytest.raises(ValueError, match="expected"):
            PixelBuffer(np.zeros(5, dtype=np.uint8), 2, 2, 2)

    def test_short_stride_raises(self):
        with pytest.raises(ValueError, match="shorter than a row"):
            PixelBuffer(np.zeros(12, dtype=np.uint8), 2, 2, 3, PixelFormat.BGR24)

    def test_non_positive_size_raises(self):
        with pytest.raises(ValueError, match="positive"):
            PixelBuffer(np.zeros(0, dtype=np.uint8), 0, 1, 0)

    def test_non_uint8_array_raises(self):
        with pytest.raises(TypeError, match="uint8"):
            PixelBuffer(np.zeros(4, dtype=np.int32), 2, 2, 2)

    def test_negative_stride_uses_absolute_value(self):
        buffer = PixelBuffer(np.zeros(8, dtype=np.uint8), 4, 2, -4)
        assert buffer.byte_count == 8
        assert buffer.rows().shape == (2, 4)

    def test_bytes_are_copied(self):
        raw = bytearray(4)
        buffer = PixelBuffer(raw, 2, 2, 2)
        buffer.data[0] = 9
        assert raw[0] == 0


class TestViews:
    """Tests for rows, pixels and packed views."""

    def test_pixels_excludes_padding(self, padded_color):
        pixels = padded_color.pixels()
        assert pixels.shape == (2, 3, 3)
        assert pixels[1, 2].tolist() == [160, 170, 180]

    def test_pixels_is_writable_view(self, padded_color):
        padded_color.pixels()[0, 0, 0] = 255
        assert padded_color.data[0] == 255

    def test_packed_drops_padding(self, padded_color):
        packed = padded_color.packed()
        assert packed.size == 18
        assert packed[9:12].tolist() == [100, 110, 120]

    def test_unpack_leaves_padding_alone(self, padded_color):
        padded_color.rows()[:, 9:] = 7
        padded_color.unpack(np.full(18, 1, dtype=np.uint8))
        assert np.all(padded_color.rows()[:, :9] == 1)
        assert np.all(padded_color.rows()[:, 9:] == 7)

    def test_copy_is_independent(self, padded_color):
        clone = padded_color.copy()
        clone.data[:] = 0
        assert padded_color.data[0] == 10

    def test_from_array_gray(self):
        buffer = PixelBuffer.from_array(np.arange(6, dtype=np.uint8).reshape(2, 3), alignment=4)
        assert buffer.pixel_format is PixelFormat.GRAY8
        assert buffer.stride == 4
        assert buffer.data.tolist() == [0, 1, 2, 0, 3, 4, 5, 0]

    def test_from_array_bad_shape_raises(self):
        with pytest.raises(ValueError, match="2D or 3D"):
            PixelBuffer.from_array(np.zeros((1, 1, 1, 1), dtype=np.uint8))
