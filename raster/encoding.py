"""Container type detection from header (magic) bytes.

Only classifies byte buffers that are already loaded; no decoding happens
here.
"""

from __future__ import annotations

from enum import Enum


class ImageType(str, Enum):
    """Container formats recognised by their leading bytes."""

    UNKNOWN = "unknown"
    BITMAP = "bmp"
    TIFF = "tiff"
    JPEG = "jpeg"
    PNG = "png"


_ENCODING_BYTES = {
    ImageType.BITMAP: bytes((0x42, 0x4D)),
    ImageType.TIFF: bytes((0x49, 0x49, 0x2A)),
    ImageType.JPEG: bytes((0xFF, 0xD8, 0xFF, 0xF4, 0x00, 0x10)) + b"JFIF",
    ImageType.PNG: bytes((0x89,)) + b"PNG",
}


def get_encoding_bytes(image_type: ImageType) -> bytes:
    """Return the header signature for ``image_type``.

    Raises:
        NotImplementedError: For ImageType.UNKNOWN, which has no signature.
    """
    image_type = ImageType(image_type)
    try:
        return _ENCODING_BYTES[image_type]
    except KeyError:
        raise NotImplementedError(
            f"Encoding not implemented for '{image_type.value}'"
        ) from None


def is_image_type(image_bytes: bytes, image_type: ImageType) -> bool:
    """Check whether ``image_bytes`` starts with the signature of ``image_type``.

    ImageType.UNKNOWN matches buffers that match no known signature.
    """
    if image_type is ImageType.UNKNOWN:
        return try_get_image_type(image_bytes) is ImageType.UNKNOWN
    signature = get_encoding_bytes(image_type)
    return bytes(image_bytes[: len(signature)]) == signature


def try_get_image_type(image_bytes: bytes) -> ImageType:
    """Return the first container type whose signature matches, else UNKNOWN."""
    for image_type in _ENCODING_BYTES:
        if is_image_type(image_bytes, image_type):
            return image_type
    return ImageType.UNKNOWN
