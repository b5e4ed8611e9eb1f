"""
Adapters between decoded images and RasterImage pixel memory.

Decoding and encoding compressed containers is delegated to Pillow (files,
including 1-bit images) and OpenCV (numpy arrays in BGR order, which is
already the native color layout of RasterImage). Rows are padded to
STRIDE_ALIGNMENT bytes, like device-independent bitmaps.
"""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np
from PIL import Image

from config import STRIDE_ALIGNMENT
from .buffer import PixelFormat, aligned_stride
from .edit import RasterImage

logger = logging.getLogger(__name__)

# Pillow modes that map directly onto a PixelFormat
_PIL_MODES = {
    "1": PixelFormat.MONO1,
    "L": PixelFormat.GRAY8,
    "RGB": PixelFormat.BGR24,
    "RGBA": PixelFormat.BGRA32,
}


def _pad_rows(rows: np.ndarray, stride: int) -> bytearray:
    """Pad a (height, row_length) array to ``stride`` bytes per row."""
    height, row_length = rows.shape
    padded = np.zeros((height, stride), dtype=np.uint8)
    padded[:, :row_length] = rows
    return bytearray(padded.tobytes())


def _top_down_rows(image: RasterImage) -> np.ndarray:
    rows = np.frombuffer(bytes(image.pixels), dtype=np.uint8).reshape(
        image.height, abs(image.stride)
    )
    # Negative stride means the first stored row is the bottom of the image
    return rows[::-1] if image.stride < 0 else rows


def from_array(array: np.ndarray, alignment: int = STRIDE_ALIGNMENT) -> RasterImage:
    """Create a RasterImage from an OpenCV-style array.

    Args:
        array: (H, W) grayscale, (H, W, 3) BGR or (H, W, 4) BGRA uint8 array.
        alignment: Row alignment in bytes.

    Raises:
        TypeError: If array is not a numpy array.
        ValueError: If the array is empty, not uint8 or has an unsupported shape.
    """
    if not isinstance(array, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray, got {type(array).__name__}")
    if array.size == 0:
        raise ValueError("Image array is empty")
    if array.dtype != np.uint8:
        raise ValueError(f"Image array must be uint8, got {array.dtype}")

    if array.ndim == 2:
        depth = 1
    elif array.ndim == 3:
        depth = array.shape[2]
    else:
        raise ValueError(
            f"Image must be 2D or 3D array, got {array.ndim}D array with shape {array.shape}"
        )

    pixel_format = PixelFormat.for_depth(depth)
    height, width = array.shape[:2]
    stride = aligned_stride(width, depth, alignment)
    pixels = _pad_rows(array.reshape(height, width * depth), stride)
    return RasterImage(pixels, width, height, stride, pixel_format)


def to_array(image: RasterImage) -> np.ndarray:
    """Return the image as an OpenCV-style array (padding removed).

    Monochrome images come back as 0/255 grayscale.
    """
    rows = _top_down_rows(image)
    width, height = image.width, image.height

    if image.pixel_format is PixelFormat.MONO1:
        bits = np.unpackbits(rows, axis=1, bitorder="big")[:, :width]
        return (bits * 255).astype(np.uint8)

    depth = image.pixel_format.pixel_depth
    array = rows[:, : width * depth].reshape(height, width, depth)
    if depth == 1:
        array = array[:, :, 0]
    return np.ascontiguousarray(array)


def from_pil(image: Image.Image, alignment: int = STRIDE_ALIGNMENT) -> RasterImage:
    """Create a RasterImage from a Pillow image.

    Modes 1, L, RGB and RGBA are taken as-is; palette and other modes are
    converted to RGB (or RGBA when they carry transparency).
    """
    if image.mode not in _PIL_MODES:
        target = "RGBA" if "A" in image.getbands() or "transparency" in image.info else "RGB"
        logger.debug("Converting Pillow mode %s to %s", image.mode, target)
        image = image.convert(target)

    pixel_format = _PIL_MODES[image.mode]
    width, height = image.size

    if pixel_format is PixelFormat.MONO1:
        packed = np.packbits(np.asarray(image, dtype=bool), axis=1, bitorder="big")
        stride = aligned_stride(packed.shape[1], 1, alignment)
        return RasterImage(_pad_rows(packed, stride), width, height, stride, pixel_format)

    array = np.asarray(image, dtype=np.uint8)
    if pixel_format is PixelFormat.BGR24:
        array = cv2.cvtColor(array, cv2.COLOR_RGB2BGR)
    elif pixel_format is PixelFormat.BGRA32:
        array = cv2.cvtColor(array, cv2.COLOR_RGBA2BGRA)
    return from_array(array, alignment)


def to_pil(image: RasterImage) -> Image.Image:
    """Return a Pillow image with the same pixels."""
    if image.pixel_format is PixelFormat.MONO1:
        rows = _top_down_rows(image)
        bits = np.unpackbits(rows, axis=1, bitorder="big")[:, : image.width]
        return Image.fromarray(bits.astype(bool))

    array = to_array(image)
    if image.pixel_format is PixelFormat.BGR24:
        return Image.fromarray(cv2.cvtColor(array, cv2.COLOR_BGR2RGB))
    if image.pixel_format is PixelFormat.BGRA32:
        return Image.fromarray(cv2.cvtColor(array, cv2.COLOR_BGRA2RGBA))
    return Image.fromarray(array)


def load_image(path: str | Path) -> RasterImage:
    """Decode an image file into a RasterImage.

    Raises:
        OSError: If the file cannot be read or decoded.
    """
    with Image.open(path) as image:
        image.load()
        return from_pil(image)


def save_image(image: RasterImage, path: str | Path) -> None:
    """Encode a RasterImage to ``path``; the container follows the suffix."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    to_pil(image).save(path)


def write_array(array: np.ndarray, path: str | Path) -> None:
    """Write an OpenCV-style array to disk.

    Raises:
        OSError: If OpenCV cannot encode the file.
    """
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    try:
        written = cv2.imwrite(str(path), np.ascontiguousarray(array))
    except cv2.error as exc:
        raise OSError(f"Could not write image to {path}: {exc}") from exc
    if not written:
        raise OSError(f"Could not write image to {path}")
