"""
Exposure/gamma display mapping for RGBE and linear float buffers.

Produces RGBA8 buffers (alpha 255) for presentation:

    channel = clamp(255 * (value * 2**exposure / 2) ** (1 / gamma), 0, 255)

``exposure=1`` is neutral, each extra unit doubles brightness, and
``gamma=1`` keeps the mapping linear. Quantisation rounds half to even;
negative and NaN radiance map to 0.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ._validate import output_rows, pixel_rows, positive_float
from .convert import RGBE_BIAS, RGBE_MANTISSA_BITS

DEFAULT_EXPOSURE = 1.0
DEFAULT_GAMMA = 2.2


def exposure_factor(exposure: float) -> float:
    """Linear multiplier for an exposure value (1.0 at ``exposure=1``)."""
    with np.errstate(over="ignore"):
        return float(np.exp2(float(exposure))) / 2.0


def _encode_display(values: np.ndarray, scale, gamma: float, dst: np.ndarray) -> None:
    # scale may be inf for huge exposures; 0 * inf is NaN and maps to 0
    with np.errstate(invalid="ignore", over="ignore"):
        linear = values * scale
        encoded = 255.0 * np.power(np.maximum(linear, 0.0), 1.0 / gamma)
    encoded = np.clip(np.nan_to_num(encoded, nan=0.0), 0.0, 255.0)
    dst[:, :3] = np.rint(encoded)
    dst[:, 3] = 255


def rgbe_to_ldr(
    rgbe,
    exposure: float = DEFAULT_EXPOSURE,
    gamma: float = DEFAULT_GAMMA,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Tone map RGBE quads straight to RGBA8 without a float intermediate buffer."""
    gamma = positive_float("gamma", gamma)
    lead, src = pixel_rows(rgbe, "rgbe", 4, np.uint8)
    result, dst = output_rows(out, "out", lead, 4, np.uint8)

    with np.errstate(invalid="ignore", over="ignore"):
        scale = exposure_factor(exposure) * np.ldexp(
            1.0, src[:, 3].astype(np.int32) - (RGBE_BIAS + RGBE_MANTISSA_BITS)
        )
    _encode_display(src[:, :3], scale[:, None], gamma, dst)
    return result


def float_to_ldr(
    floats,
    exposure: float = DEFAULT_EXPOSURE,
    gamma: float = DEFAULT_GAMMA,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Tone map linear float triples to RGBA8."""
    gamma = positive_float("gamma", gamma)
    lead, src = pixel_rows(floats, "floats", 3)
    result, dst = output_rows(out, "out", lead, 4, np.uint8)

    _encode_display(src.astype(np.float64), exposure_factor(exposure), gamma, dst)
    return result


__all__ = [
    "DEFAULT_EXPOSURE",
    "DEFAULT_GAMMA",
    "exposure_factor",
    "rgbe_to_ldr",
    "float_to_ldr",
]
