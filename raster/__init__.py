"""
Raster pixel memory model.

This package describes decoded pixel memory and how processing code gets
access to it. Nothing here transforms pixel values.

Key components:
- buffer: PixelBuffer descriptor (data, width, height, stride, format)
- edit: RasterImage backing store and the EditSession begin/end protocol
- bits: 1-bit monochrome pack/unpack helpers
- encoding: Container type detection by magic bytes
- codec: Pillow/OpenCV adapters (decode/encode happen outside the engine)
- errors: Error types shared with the processing package
"""

from .bits import bits_to_bytes, bytes_to_bits
from .buffer import PixelBuffer, PixelFormat, aligned_stride, safe_limit
from .edit import EditSession, RasterImage, copy_pixels, read_buffer
from .encoding import ImageType, get_encoding_bytes, is_image_type, try_get_image_type
from .errors import DegenerateRangeError, EditSessionError, RegionOutOfRangeError

__all__ = [
    # Buffer model
    "PixelBuffer",
    "PixelFormat",
    "aligned_stride",
    "safe_limit",
    # Edit protocol
    "EditSession",
    "RasterImage",
    "copy_pixels",
    "read_buffer",
    # Bits
    "bits_to_bytes",
    "bytes_to_bits",
    # Encoding
    "ImageType",
    "get_encoding_bytes",
    "is_image_type",
    "try_get_image_type",
    # Errors
    "DegenerateRangeError",
    "EditSessionError",
    "RegionOutOfRangeError",
]
