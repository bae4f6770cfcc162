"""
Shared-exponent pixel format conversions (RGBE, RGB9_E5, linear float).

All functions are pure: the input is never modified, and the result goes
either to a fresh array or to the caller supplied ``out`` buffer, which is
returned. Buffers may be flat or keep an image shape; the leading
(pixel) dimensions of the input carry over to the output.

    >>> import numpy as np
    >>> from hdrcodec.convert import rgbe_to_float
    >>> rgbe_to_float(np.array([128, 64, 0, 129], dtype=np.uint8))
    array([[1. , 0.5, 0. ]], dtype=float32)
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ._validate import output_rows, pixel_rows

RGBE_BIAS = 128
RGBE_MANTISSA_BITS = 8
RGB9E5_BIAS = 16
RGB9E5_MANTISSA_BITS = 9
RGB9E5_MAX = 32768.0


def rgbe_to_float(rgbe, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Expand RGBE quads to linear float32 triples.

    channel = mantissa * 2**(E - 136)
    """
    lead, src = pixel_rows(rgbe, "rgbe", 4, np.uint8)
    result, dst = output_rows(out, "out", lead, 3, np.float32)

    scale = np.ldexp(1.0, src[:, 3].astype(np.int32) - (RGBE_BIAS + RGBE_MANTISSA_BITS))
    dst[:] = src[:, :3] * scale[:, None]
    return result


def float_to_rgbe(floats, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Pack linear float triples into RGBE quads.

    The shared exponent is ``ceil(log2(max))`` and mantissas are truncated,
    not rounded. A maximum of exactly 0.5 uses exponent 0; more generally a
    maximum whose mantissa would truncate to 256 (any power of two) is moved
    up one exponent step. Non-positive or NaN maxima encode as black, and
    exponents beyond the 8-bit range saturate.
    """
    lead, src = pixel_rows(floats, "floats", 3)
    result, dst = output_rows(out, "out", lead, 4, np.uint8)

    rgb = np.nan_to_num(src.astype(np.float64), nan=0.0, posinf=np.finfo(np.float64).max)
    rgb = np.maximum(rgb, 0.0)
    v = rgb.max(axis=1)
    black = v <= 0.0
    v_safe = np.where(black, 1.0, v)

    e = np.ceil(np.log2(v_safe))
    e = np.where(v_safe == 0.5, 0.0, e).astype(np.int32)

    # exact powers of two land on mantissa 256; renormalise once
    carry = np.floor(np.ldexp(v_safe, RGBE_MANTISSA_BITS - e)) >= 256
    e = e + carry.astype(np.int32)

    black |= e + RGBE_BIAS < 1
    saturate = e + RGBE_BIAS > 255
    e = np.clip(e, -RGBE_BIAS + 1, 255 - RGBE_BIAS).astype(np.int32)

    mant = np.floor(np.ldexp(rgb, (RGBE_MANTISSA_BITS - e)[:, None]))
    mant = np.where(saturate[:, None], np.minimum(mant, 255.0), mant)

    dst[:, :3] = mant.astype(np.uint8)
    dst[:, 3] = (e + RGBE_BIAS).astype(np.uint8)
    dst[black] = 0
    return result


def float_to_rgb9_e5(floats, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Pack linear float triples into RGB9_E5 words.

    Channels are clamped to [0, 32768]. The shared exponent is
    ``max(-16, floor(log2(max))) + 16``; when the maximum channel rounds to a
    mantissa of 511 or more the exponent is bumped once.
    """
    lead, src = pixel_rows(floats, "floats", 3)
    result, dst = output_rows(out, "out", lead, 1, np.uint32)

    rgb = np.clip(np.nan_to_num(src.astype(np.float64), nan=0.0, posinf=RGB9E5_MAX), 0.0, RGB9E5_MAX)
    max_c = rgb.max(axis=1)

    with np.errstate(divide="ignore"):
        exp_shared = np.maximum(-RGB9E5_BIAS, np.floor(np.log2(max_c))) + RGB9E5_BIAS
    exp_shared = exp_shared.astype(np.int64)
    denom = np.ldexp(1.0, (exp_shared - (RGB9E5_BIAS + 8)).astype(np.int32))

    overflow = np.floor(max_c / denom + 0.5) >= (1 << RGB9E5_MANTISSA_BITS) - 1
    denom = np.where(overflow, denom * 2.0, denom)
    exp_shared = exp_shared + overflow

    mant = np.floor(rgb / denom[:, None] + 0.5).astype(np.uint32)
    dst[:] = (
        (mant[:, 0] << np.uint32(23))
        | (mant[:, 1] << np.uint32(14))
        | (mant[:, 2] << np.uint32(5))
        | exp_shared.astype(np.uint32)
    )
    return result


def rgb9_e5_to_float(words, out: Optional[np.ndarray] = None) -> np.ndarray:
    """Unpack RGB9_E5 words into linear float32 triples."""
    lead, src = pixel_rows(words, "words", 1, np.uint32)
    result, dst = output_rows(out, "out", lead, 3, np.float32)

    scale = np.ldexp(1.0, (src & 31).astype(np.int32) - (RGB9E5_BIAS + 8))
    dst[:, 0] = (src >> 23) * scale
    dst[:, 1] = ((src >> 14) & 511) * scale
    dst[:, 2] = ((src >> 5) & 511) * scale
    return result


__all__ = [
    "rgbe_to_float",
    "float_to_rgbe",
    "float_to_rgb9_e5",
    "rgb9_e5_to_float",
]
