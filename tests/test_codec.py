"""Tests for the Pillow/OpenCV adapters."""

import numpy as np
import pytest
from PIL import Image

from raster.buffer import PixelFormat
from raster.codec import from_array, from_pil, load_image, save_image, to_array, to_pil, write_array
from raster.edit import read_buffer


class TestFromArray:
    """Tests for from_array/to_array."""

    def test_gray_rows_are_padded(self):
        image = from_array(np.arange(6, dtype=np.uint8).reshape(2, 3))
        assert image.pixel_format is PixelFormat.GRAY8
        assert image.stride == 4
        assert bytes(image.pixels) == bytes([0, 1, 2, 0, 3, 4, 5, 0])

    def test_bgr_round_trip(self):
        array = np.random.default_rng(1).integers(0, 256, (5, 7, 3), dtype=np.uint8)
        image = from_array(array)
        assert image.stride == 24
        assert np.array_equal(to_array(image), array)

    def test_bgra_format(self):
        image = from_array(np.zeros((2, 2, 4), dtype=np.uint8))
        assert image.pixel_format is PixelFormat.BGRA32

    def test_invalid_type_raises(self):
        with pytest.raises(TypeError, match="Expected numpy.ndarray"):
            from_array([[1, 2], [3, 4]])

    def test_empty_array_raises(self):
        with pytest.raises(ValueError, match="empty"):
            from_array(np.zeros((0, 3), dtype=np.uint8))

    def test_non_uint8_raises(self):
        with pytest.raises(ValueError, match="uint8"):
            from_array(np.zeros((2, 2), dtype=np.float32))

    def test_negative_stride_is_bottom_up(self):
        image = from_array(np.array([[1, 2, 3, 4], [5, 6, 7, 8]], dtype=np.uint8))
        image.stride = -image.stride
        assert to_array(image).tolist() == [[5, 6, 7, 8], [1, 2, 3, 4]]


class TestPillow:
    """Tests for from_pil/to_pil."""

    def test_rgb_is_stored_as_bgr(self):
        image = from_pil(Image.new("RGB", (1, 1), (10, 20, 30)))
        assert image.pixel_format is PixelFormat.BGR24
        assert bytes(image.pixels[:3]) == bytes([30, 20, 10])

    def test_rgb_round_trip(self):
        source = Image.new("RGB", (3, 2), (10, 20, 30))
        assert to_pil(from_pil(source)).tobytes() == source.tobytes()

    def test_monochrome_stays_packed(self):
        source = Image.new("1", (10, 2), 0)
        source.putpixel((0, 0), 1)
        image = from_pil(source)
        assert image.pixel_format is PixelFormat.MONO1
        assert image.stride == 4
        assert image.pixels[0] == 0x80

    def test_monochrome_round_trip(self):
        source = Image.new("1", (10, 3), 0)
        for x in range(0, 10, 3):
            source.putpixel((x, 1), 255)
        result = to_pil(from_pil(source))
        assert result.mode == "1"
        assert result.tobytes() == source.tobytes()

    def test_palette_is_converted(self):
        image = from_pil(Image.new("P", (2, 2)))
        assert image.pixel_format is PixelFormat.BGR24


class TestFiles:
    """Tests for load_image/save_image/write_array."""

    def test_png_round_trip(self, tmp_path):
        array = np.random.default_rng(3).integers(0, 256, (4, 5, 3), dtype=np.uint8)
        path = tmp_path / "out" / "image.png"
        save_image(from_array(array), path)
        assert np.array_equal(to_array(load_image(path)), array)

    def test_monochrome_edit_through_file(self, tmp_path):
        path = tmp_path / "mono.png"
        Image.new("1", (9, 2), 1).save(path)
        buffer = read_buffer(load_image(path))
        assert buffer.is_monochrome
        assert buffer.pixels()[:, :, 0].tolist() == [[1] * 9, [1] * 9]

    def test_missing_file_raises_oserror(self, tmp_path):
        with pytest.raises(OSError):
            load_image(tmp_path / "missing.png")

    def test_write_array_unknown_suffix_raises_oserror(self, tmp_path):
        with pytest.raises(OSError, match="Could not write"):
            write_array(np.zeros((2, 2), dtype=np.uint8), tmp_path / "chart.unknownext")
