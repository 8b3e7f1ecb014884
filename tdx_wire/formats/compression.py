"""
Response payload compression.

A response stores its payload deflated (zlib stream) whenever the two
length fields in its header differ. Equal lengths mean the payload is
stored as-is.
"""

import zlib

from ..core.errors import DecompressionError, DecompressionLengthMismatch


def reverse(payload: bytes, zip_length: int, raw_length: int) -> bytes:
    """
    Undo response compression.

    Args:
        payload: Payload bytes as carried by the frame
        zip_length: Declared on-wire length
        raw_length: Declared decompressed length

    Returns:
        The decompressed payload (``payload`` itself if not compressed)

    Raises:
        DecompressionError: payload is not a valid zlib stream
        DecompressionLengthMismatch: inflated size differs from raw_length
    """
    if zip_length == raw_length:
        return payload

    try:
        data = zlib.decompress(payload)
    except zlib.error as e:
        raise DecompressionError(
            str(e),
            {'zip_length': zip_length, 'raw_length': raw_length},
        ) from e

    if len(data) != raw_length:
        raise DecompressionLengthMismatch(
            context={'expected': raw_length, 'actual': len(data)},
        )

    return data


def compress(payload: bytes, level: int = 6) -> bytes:
    """Deflate a payload the way servers do."""
    return zlib.compress(payload, level)
