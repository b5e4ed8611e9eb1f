"""Bit packing helpers for 1-bit monochrome buffers.

Bits are ordered most significant first: bit ``k`` of byte ``i`` maps to
index ``i * 8 + k`` of the expanded array.
"""

import numpy as np


def bytes_to_bits(byte_values) -> np.ndarray:
    """Expand every bit of ``byte_values`` into its own byte (0 or 1).

    Args:
        byte_values: Packed bytes (bytes, bytearray or uint8 array).

    Returns:
        uint8 array eight times the input length.

    Examples:
        >>> bytes_to_bits(b"\\xa0").tolist()
        [1, 0, 1, 0, 0, 0, 0, 0]
    """
    if isinstance(byte_values, np.ndarray):
        packed = byte_values.astype(np.uint8, copy=False)
    else:
        packed = np.frombuffer(bytes(byte_values), dtype=np.uint8)
    return np.unpackbits(packed, bitorder="big")


def bits_to_bytes(bit_values) -> np.ndarray:
    """Pack one-value-per-byte bits back into bytes.

    Any non-zero value counts as a set bit. Trailing values that do not fill
    a whole byte are dropped.

    Args:
        bit_values: Expanded bits (sequence or uint8 array).

    Returns:
        uint8 array of ``len(bit_values) // 8`` packed bytes.
    """
    bits = np.asarray(bit_values, dtype=np.uint8)
    whole = (bits.size // 8) * 8
    return np.packbits(bits[:whole] > 0, bitorder="big")
