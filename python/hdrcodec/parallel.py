"""
Striped multi-threaded pixel conversion.

Every conversion in :mod:`hdrcodec.convert` and :mod:`hdrcodec.tonemap` is
pixel-local, so the pixel range can be cut into disjoint stripes and each
stripe converted on a worker thread straight into its own slice of the
output buffer. numpy releases the GIL inside the vectorised kernels, which
is where the time goes.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, NamedTuple, Optional

import numpy as np

from ._validate import output_rows, pixel_rows
from .convert import float_to_rgb9_e5, float_to_rgbe, rgb9_e5_to_float, rgbe_to_float
from .tonemap import float_to_ldr, rgbe_to_ldr

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_PIXELS = 1 << 16


class _Layout(NamedTuple):
    func: Callable
    in_stride: int
    in_dtype: Optional[type]
    out_stride: int
    out_dtype: type


CONVERSIONS: Dict[str, _Layout] = {
    "rgbe_to_float": _Layout(rgbe_to_float, 4, np.uint8, 3, np.float32),
    "float_to_rgbe": _Layout(float_to_rgbe, 3, None, 4, np.uint8),
    "float_to_rgb9_e5": _Layout(float_to_rgb9_e5, 3, None, 1, np.uint32),
    "rgb9_e5_to_float": _Layout(rgb9_e5_to_float, 1, np.uint32, 3, np.float32),
    "rgbe_to_ldr": _Layout(rgbe_to_ldr, 4, np.uint8, 4, np.uint8),
    "float_to_ldr": _Layout(float_to_ldr, 3, None, 4, np.uint8),
}


def default_workers() -> int:
    return max(1, os.cpu_count() or 1)


def convert_parallel(
    name: str,
    src,
    *args,
    out: Optional[np.ndarray] = None,
    workers: Optional[int] = None,
    chunk_pixels: int = DEFAULT_CHUNK_PIXELS,
) -> np.ndarray:
    """
    Run a named conversion over ``src`` using a pool of worker threads.

    Args:
        name: One of ``CONVERSIONS`` (e.g. ``"rgbe_to_float"``).
        src: Input pixel buffer, same forms the serial function accepts.
        *args: Extra positional arguments (exposure, gamma for the LDR paths).
        out: Optional destination buffer, checked like the serial path.
        workers: Thread count; defaults to the CPU count.
        chunk_pixels: Pixels per stripe.

    Returns:
        The converted buffer, identical to the serial function's result.
    """
    if name not in CONVERSIONS:
        raise ValueError(f"Unknown conversion '{name}'. Expected one of {tuple(CONVERSIONS)}.")
    if chunk_pixels < 1:
        raise ValueError(f"chunk_pixels must be >= 1: {chunk_pixels}")
    workers = default_workers() if workers is None else int(workers)
    if workers < 1:
        raise ValueError(f"workers must be >= 1: {workers}")

    layout = CONVERSIONS[name]
    lead, rows = pixel_rows(src, "src", layout.in_stride, layout.in_dtype)
    result, dst = output_rows(out, "out", lead, layout.out_stride, layout.out_dtype)

    n = rows.shape[0]
    bounds = [(start, min(start + chunk_pixels, n)) for start in range(0, n, chunk_pixels)]
    if workers == 1 or len(bounds) <= 1:
        layout.func(rows, *args, out=dst)
        return result

    logger.debug("%s: %d pixels in %d stripes on %d threads", name, n, len(bounds), workers)

    def run(bound):
        lo, hi = bound
        layout.func(rows[lo:hi], *args, out=dst[lo:hi])

    with ThreadPoolExecutor(max_workers=workers) as pool:
        # list() re-raises the first worker exception
        list(pool.map(run, bounds))
    return result


__all__ = ["CONVERSIONS", "DEFAULT_CHUNK_PIXELS", "convert_parallel", "default_workers"]
