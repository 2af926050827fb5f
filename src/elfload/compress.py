#!/usr/bin/env python3
"""
Compressed image support
========================

Pre-stage run before ELF detection: recognizes gzip and raw-deflate images
by their magic bytes and inflates them into a plain buffer.

Recognized formats:
- gzip:    1f 8b, followed by the rest of a standard gzip member
- deflate: 1f 08 marker, followed by a raw deflate stream
"""

import zlib
from typing import Optional

from .exceptions import DecompressionError

ALGORITHM_GZIP = 'gzip'
ALGORITHM_DEFLATE = 'deflate'

DEFLATE_MARKER_SIZE = 2


def detect_compression(buf) -> Optional[str]:
    """Return the compression algorithm name for buf, or None"""
    if len(buf) < 2 or buf[0] != 0x1f:
        return None

    if buf[1] == 0x8b:
        return ALGORITHM_GZIP
    elif buf[1] == 0x08:
        return ALGORITHM_DEFLATE
    return None


def is_compressed(buf) -> bool:
    return detect_compression(buf) is not None


def decompress(buf, max_size: int) -> bytes:
    """
    Inflate a gzip or raw-deflate image.

    Args:
        buf: compressed image
        max_size: largest inflated size the caller accepts

    Returns:
        The inflated bytes; their length is the exact inflated size

    Raises:
        DecompressionError: unknown format, corrupt or truncated stream, or
            an inflated size above max_size
    """
    if max_size <= 0:
        raise ValueError(f"max_size must be positive, got {max_size}")

    algorithm = detect_compression(buf)
    if algorithm == ALGORITHM_GZIP:
        decoder = zlib.decompressobj(zlib.MAX_WBITS | 16)
        stream = bytes(buf)
    elif algorithm == ALGORITHM_DEFLATE:
        decoder = zlib.decompressobj(-zlib.MAX_WBITS)
        stream = bytes(buf[DEFLATE_MARKER_SIZE:])
    else:
        raise DecompressionError("Unknown compression format")

    try:
        data = decoder.decompress(stream, max_size)
        # output full: one more byte tells an exact fit from an overflow
        if not decoder.eof and len(data) == max_size:
            if decoder.decompress(decoder.unconsumed_tail, 1):
                raise DecompressionError(
                    f"Inflated {algorithm} image exceeds {max_size} bytes")
    except zlib.error as e:
        raise DecompressionError(f"inflate failed: {e}") from e

    if not decoder.eof:
        raise DecompressionError(f"Truncated {algorithm} stream")

    return data
