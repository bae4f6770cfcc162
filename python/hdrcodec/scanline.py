"""
Radiance scanline run-length coding.

Two mutually exclusive encodings exist for a scanline:

* new-style: signature ``2, 2, hi, lo`` (``hi`` high bit clear, ``hi<<8|lo``
  equal to the width) followed by the R, G, B and E planes, each coded as
  runs (``128+n, value``) and literal dumps (``n, v0 .. vn-1``);
* old-style/flat: plain RGBE quads where ``(1, 1, 1, n)`` repeats the
  previous pixel ``n << shift`` times, ``shift`` growing by 8 for each
  consecutive marker.

Decoders work on a ``bytes`` object and a read position and return the
position after the consumed bytes.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .errors import CorruptScanline, ScanlineWidthMismatch, TruncatedData

RLE_MIN_WIDTH = 8
RLE_MAX_WIDTH = 0x7FFF
MIN_RUN = 4
MAX_RUN = 127
MAX_LITERAL = 128


def _byte(data: bytes, pos: int) -> int:
    if pos >= len(data):
        raise TruncatedData(f"Unexpected end of HDR data at byte {pos}")
    return data[pos]


def _take(data: bytes, pos: int, count: int) -> bytes:
    end = pos + count
    if end > len(data):
        raise TruncatedData(f"Unexpected end of HDR data: needed {count} bytes at {pos}")
    return data[pos:end]


def is_new_style(signature: bytes) -> bool:
    """True when four leading bytes announce a new-style RLE scanline."""
    return signature[0] == 2 and signature[1] == 2 and not (signature[2] & 0x80)


def decode_rle_channel(data: bytes, pos: int, out: np.ndarray) -> int:
    """Decode one colour plane of a new-style scanline into ``out`` (uint8, shape (width,))."""
    width = out.shape[0]
    x = 0
    while x < width:
        control = _byte(data, pos)
        pos += 1
        if control > 128:
            # run
            count = control - 128
            value = _byte(data, pos)
            pos += 1
            n = min(count, width - x)
            out[x:x + n] = value
        else:
            # literal dump; control == 0 consumes nothing more
            count = control
            chunk = _take(data, pos, count)
            pos += count
            n = min(count, width - x)
            if n:
                out[x:x + n] = np.frombuffer(chunk, dtype=np.uint8, count=n)
        x += n
    return pos


def decode_flat_scanline(
    data: bytes,
    pos: int,
    out_row: np.ndarray,
    prev_pixel: Optional[Sequence[int]] = None,
) -> int:
    """
    Decode an old-style scanline with ``(1,1,1,n)`` repeat markers.

    Args:
        data: Stream bytes.
        pos: Offset of the first pixel.
        out_row: (width, 4) uint8 destination.
        prev_pixel: Last pixel emitted before this row, if any.

    Returns:
        Offset just past the consumed bytes.
    """
    width = out_row.shape[0]
    prev = None if prev_pixel is None else tuple(int(c) for c in prev_pixel)
    x = 0
    shift = 0
    while x < width:
        px = _take(data, pos, 4)
        pos += 4
        if px[0] == 1 and px[1] == 1 and px[2] == 1:
            if prev is None:
                raise CorruptScanline("repeat marker with no preceding pixel")
            count = min(px[3] << shift, width - x)
            out_row[x:x + count] = prev
            x += count
            shift += 8
        else:
            prev = (px[0], px[1], px[2], px[3])
            out_row[x] = prev
            x += 1
            shift = 0
    return pos


def decode_scanline(
    data: bytes,
    pos: int,
    width: int,
    out_row: np.ndarray,
    prev_pixel: Optional[Sequence[int]] = None,
    index: int = 0,
) -> int:
    """
    Decode one scanline of ``width`` RGBE pixels starting at ``pos``.

    ``index`` is only used to label a width mismatch.
    """
    signature = _take(data, pos, 4)
    if not is_new_style(signature):
        return decode_flat_scanline(data, pos, out_row, prev_pixel)

    declared = (signature[2] << 8) | signature[3]
    if declared != width:
        raise ScanlineWidthMismatch(index, width, declared)

    pos += 4
    planes = np.empty((4, width), dtype=np.uint8)
    for channel in range(4):
        pos = decode_rle_channel(data, pos, planes[channel])
    out_row[:] = planes.T
    return pos


def encode_rle_channel(channel: bytes) -> bytes:
    """Run-length code one colour plane (runs of at least MIN_RUN equal bytes)."""
    out = bytearray()
    n = len(channel)
    cur = 0
    while cur < n:
        beg_run = cur
        run_count = 0
        old_run_count = 0
        while run_count < MIN_RUN and beg_run < n:
            beg_run += run_count
            old_run_count = run_count
            run_count = 1
            while (
                beg_run + run_count < n
                and run_count < MAX_RUN
                and channel[beg_run] == channel[beg_run + run_count]
            ):
                run_count += 1

        # a short run right before the long one is cheaper as a run
        if old_run_count > 1 and old_run_count == beg_run - cur:
            out += bytes((128 + old_run_count, channel[cur]))
            cur = beg_run

        while cur < beg_run:
            count = min(MAX_LITERAL, beg_run - cur)
            out.append(count)
            out += channel[cur:cur + count]
            cur += count

        if run_count >= MIN_RUN:
            out += bytes((128 + run_count, channel[beg_run]))
            cur += run_count
    return bytes(out)


def encode_scanline(row: np.ndarray, rle: bool = True) -> bytes:
    """
    Encode a (width, 4) uint8 RGBE row.

    New-style RLE is used when ``rle`` is set and the width is within
    [RLE_MIN_WIDTH, RLE_MAX_WIDTH]; otherwise pixels are written flat.
    """
    row = np.ascontiguousarray(row, dtype=np.uint8)
    width = row.shape[0]
    if rle and RLE_MIN_WIDTH <= width <= RLE_MAX_WIDTH:
        parts = [bytes((2, 2, width >> 8, width & 0xFF))]
        for channel in range(4):
            parts.append(encode_rle_channel(row[:, channel].tobytes()))
        return b"".join(parts)

    markers = (row[:, 0] == 1) & (row[:, 1] == 1) & (row[:, 2] == 1)
    if markers.any():
        x = int(np.argmax(markers))
        raise ValueError(f"pixel {x} is (1,1,1,E) and would read back as a repeat marker")
    if is_new_style(row[0].tobytes()):
        raise ValueError("first pixel looks like a new-style RLE signature")
    return row.tobytes()


__all__ = [
    "RLE_MIN_WIDTH",
    "RLE_MAX_WIDTH",
    "is_new_style",
    "decode_rle_channel",
    "decode_flat_scanline",
    "decode_scanline",
    "encode_rle_channel",
    "encode_scanline",
]
