# python/hdrcodec/errors.py
# Typed decode failures for Radiance HDR streams
# Exists so callers can tell a bad header from a bad body without parsing messages
# RELEVANT FILES: python/hdrcodec/header.py, python/hdrcodec/scanline.py, python/hdrcodec/hdr.py
from __future__ import annotations

from typing import Optional


class HdrDecodeError(ValueError):
    """Base class for every terminal Radiance decode failure."""

    kind = "decode_error"


class MalformedHeader(HdrDecodeError):
    """Header terminator missing or resolution line unusable."""

    kind = "malformed_header"


class UnsupportedFormat(HdrDecodeError):
    """FORMAT= line missing or not ``32-bit_rle_rgbe``."""

    kind = "unsupported_format"

    def __init__(self, message: str, format: Optional[str] = None):
        super().__init__(message)
        self.format = format


class ScanlineWidthMismatch(HdrDecodeError):
    """New-style scanline declares a width different from the header."""

    kind = "scanline_width_mismatch"

    def __init__(self, scanline: int, expected: int, found: int):
        super().__init__(
            f"scanline {scanline}: RLE width {found} does not match image width {expected}"
        )
        self.scanline = scanline
        self.expected = expected
        self.found = found


class TruncatedData(HdrDecodeError):
    """Pixel data ended before the last scanline was complete."""

    kind = "truncated_data"


class CorruptScanline(HdrDecodeError):
    """Scanline bytes that no encoder could have produced."""

    kind = "corrupt_scanline"


__all__ = [
    "HdrDecodeError",
    "MalformedHeader",
    "UnsupportedFormat",
    "ScanlineWidthMismatch",
    "TruncatedData",
    "CorruptScanline",
]
