"""Tests for binary (0/1) conversion."""

import numpy as np

from conftest import make_gray
from processing.binary import to_binary, to_monochrome
from raster.buffer import PixelFormat
from raster.edit import RasterImage


class TestToBinary:
    """Tests for to_binary."""

    def test_gray_elementwise(self):
        buffer = make_gray([0, 127, 128, 255], width=2, height=2)
        assert to_binary(buffer).tolist() == [0, 0, 1, 1]

    def test_color_one_value_per_pixel(self, padded_color):
        # Averages 20, 50, 80 / 110, 140, 170; padding bytes are skipped
        assert to_binary(padded_color).tolist() == [0, 0, 0, 0, 1, 1]

    def test_custom_threshold(self):
        buffer = make_gray([10, 20], width=2, height=1)
        assert to_binary(buffer, threshold=15).tolist() == [0, 1]


class TestToMonochrome:
    """Tests for to_monochrome."""

    def test_expanded_layout(self):
        buffer = make_gray([0, 200, 200], width=3, height=1)
        mono = to_monochrome(buffer)
        assert mono.pixel_format is PixelFormat.MONO1
        assert mono.stride == 32
        assert mono.data[:3].tolist() == [0, 1, 1]

    def test_repacks_into_image(self):
        buffer = make_gray([200] * 10, width=10, height=1)
        image = RasterImage.from_buffer(to_monochrome(buffer))
        assert image.stride == 4
        assert bytes(image.pixels) == bytes([0xFF, 0xC0, 0, 0])
