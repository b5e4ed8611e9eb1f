"""Pytest configuration and shared pixel buffer fixtures.

Slow tests (large images, full CLI round trips through files) are skipped
unless --slow is passed.
Run the full suite:   pytest --slow
Run fast tests only:  pytest          (default)
"""
import numpy as np
import pytest

from raster.buffer import PixelBuffer, PixelFormat


def pytest_addoption(parser):
    parser.addoption(
        "--slow",
        action="store_true",
        default=False,
        help="Run slow tests (large images, file based CLI runs)",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--slow"):
        return  # run everything
    skip_slow = pytest.mark.skip(reason="slow test skipped (pass --slow to include)")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def make_gray(values, width, height, stride=None):
    """Gray buffer from row-major values, optionally padded to ``stride``."""
    stride = stride or width
    rows = np.zeros((height, stride), dtype=np.uint8)
    rows[:, :width] = np.asarray(values, dtype=np.uint8).reshape(height, width)
    return PixelBuffer(rows.reshape(-1), width, height, stride, PixelFormat.GRAY8)


@pytest.fixture
def kernel_fixture_buffer():
    """5x4 gray buffer used by the 2x2 kernel reference case."""
    return make_gray(
        [1, 1, 3, 3, 4,
         1, 1, 4, 4, 3,
         2, 1, 3, 3, 3,
         1, 1, 1, 4, 4],
        width=5,
        height=4,
    )


@pytest.fixture
def bimodal_gray():
    """8x8 gray buffer: left half dark (20..23), right half bright (200..203)."""
    array = np.zeros((8, 8), dtype=np.uint8)
    array[:, :4] = 20 + np.arange(4)
    array[:, 4:] = 200 + np.arange(4)
    return PixelBuffer.from_array(array)


@pytest.fixture
def padded_color():
    """3x2 BGR buffer with rows padded to 12 bytes (3 padding bytes per row)."""
    array = np.array(
        [
            [[10, 20, 30], [40, 50, 60], [70, 80, 90]],
            [[100, 110, 120], [130, 140, 150], [160, 170, 180]],
        ],
        dtype=np.uint8,
    )
    return PixelBuffer.from_array(array, alignment=4)
