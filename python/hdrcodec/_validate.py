from __future__ import annotations
from pathlib import Path
from typing import Optional, Tuple

import numpy as np


def _as_int(name: str, v) -> int:
    try:
        i = int(v)
    except Exception as e:
        raise ValueError(f"{name} must be an integer, got {type(v).__name__}") from e
    return i

def size_wh(width, height) -> Tuple[int, int]:
    w = _as_int("width", width)
    h = _as_int("height", height)
    if w <= 0 or h <= 0:
        raise ValueError("width and height must be > 0")
    return w, h

def png_path(p: str | Path) -> str:
    s = str(p)
    if not s.lower().endswith(".png"):
        raise ValueError("path must end with .png")
    parent = Path(s).resolve().parent
    if not parent.exists():
        raise ValueError(f"directory does not exist: {parent}")
    return s


def pixel_rows(arr, name: str, stride: int, dtype=None) -> Tuple[Tuple[int, ...], np.ndarray]:
    """
    Normalise a pixel buffer to a 2D ``(N, stride)`` array.

    A buffer whose last axis already equals ``stride`` keeps its leading
    dimensions as the pixel shape; anything else is treated as a flat run of
    interleaved channels. ``stride == 1`` is used for packed one-word formats
    and yields a 1D ``(N,)`` array instead.

    Returns:
        (pixel_shape, rows)
    """
    a = np.asarray(arr) if dtype is None else np.asarray(arr, dtype=dtype)

    if stride == 1:
        return a.shape, a.reshape(-1)

    if a.ndim >= 2 and a.shape[-1] == stride:
        lead = a.shape[:-1]
    else:
        if a.size % stride != 0:
            raise ValueError(
                f"{name} size {a.size} is not a multiple of {stride} channels per pixel"
            )
        lead = (a.size // stride,)
    return lead, a.reshape(-1, stride)


def output_rows(
    out: Optional[np.ndarray],
    name: str,
    pixel_shape: Tuple[int, ...],
    stride: int,
    dtype,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Allocate or check a destination buffer.

    Returns ``(result, rows)`` where ``result`` is what the conversion hands
    back to its caller and ``rows`` is a writable ``(N, stride)`` (or ``(N,)``)
    view into the same memory.
    """
    shape = tuple(pixel_shape) + ((stride,) if stride > 1 else ())
    if out is None:
        result = np.empty(shape, dtype=dtype)
    else:
        if not isinstance(out, np.ndarray):
            raise TypeError(f"{name} must be numpy.ndarray, got {type(out).__name__}")
        if out.dtype != np.dtype(dtype):
            raise ValueError(f"{name} has dtype {out.dtype}, expected {np.dtype(dtype)}")
        expected = int(np.prod(shape, dtype=np.int64))
        if out.size != expected:
            raise ValueError(f"{name} holds {out.size} elements, expected {expected}")
        if not out.flags['C_CONTIGUOUS']:
            raise ValueError(f"{name} must be C-contiguous (row-major)")
        if not out.flags['WRITEABLE']:
            raise ValueError(f"{name} is read-only")
        result = out

    rows = result.reshape(-1, stride) if stride > 1 else result.reshape(-1)
    return result, rows


def positive_float(name: str, value) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a number, got {value!r}") from e
    if not np.isfinite(v) or v <= 0.0:
        raise ValueError(f"{name} must be positive: {v}")
    return v
