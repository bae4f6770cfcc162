# python/hdrcodec/png.py
# HDR payloads carried in ordinary 8-bit RGBA PNG files
# Exists so RGBE and RGB9_E5 buffers can travel through tools that only understand PNG
# RELEVANT FILES: python/hdrcodec/image.py, python/hdrcodec/cli.py, tests/test_png_containers.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from ._validate import png_path

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _check_rgba8(array: np.ndarray, name: str) -> np.ndarray:
    if not isinstance(array, np.ndarray):
        raise TypeError(f"{name} must be numpy.ndarray, got {type(array).__name__}")
    if array.dtype != np.uint8:
        raise ValueError(f"unsupported {name}; expected uint8 (H,W,4), got {array.dtype}")
    if array.ndim != 3 or array.shape[2] != 4:
        raise ValueError(f"{name} must have shape (H,W,4), got {array.shape}")
    return np.ascontiguousarray(array)


def _write_rgba(path: PathLike, array: np.ndarray) -> None:
    target = png_path(path)
    Image.fromarray(array).save(target, format="PNG")
    logger.debug("Wrote %dx%d RGBA PNG: %s", array.shape[1], array.shape[0], target)


def _read_rgba(path: PathLike) -> np.ndarray:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"PNG file not found: {path}")
    with Image.open(path) as img:
        if img.mode != "RGBA":
            raise ValueError(f"HDR payload PNG must be RGBA, got mode {img.mode}: {path}")
        return np.array(img, dtype=np.uint8)


def save_rgbe_png(path: PathLike, rgbe: np.ndarray) -> None:
    """Store an RGBE (H, W, 4) buffer byte-for-byte in the RGBA channels of a PNG."""
    _write_rgba(path, _check_rgba8(rgbe, "rgbe"))


def load_rgbe_png(path: PathLike) -> np.ndarray:
    """Read an RGBE buffer written by :func:`save_rgbe_png`."""
    return _read_rgba(path)


def save_rgb9_e5_png(path: PathLike, words: np.ndarray) -> None:
    """Store RGB9_E5 words (H, W) as their little-endian bytes in the RGBA channels."""
    words = np.asarray(words)
    if words.dtype != np.uint32 or words.ndim != 2:
        raise ValueError(f"RGB9_E5 image must be uint32 (H, W), got {words.dtype} {words.shape}")
    payload = np.ascontiguousarray(words, dtype="<u4").view(np.uint8).reshape(words.shape + (4,))
    _write_rgba(path, payload)


def load_rgb9_e5_png(path: PathLike) -> np.ndarray:
    """Read RGB9_E5 words written by :func:`save_rgb9_e5_png` as uint32 (H, W)."""
    rgba = _read_rgba(path)
    words = np.ascontiguousarray(rgba).view("<u4").reshape(rgba.shape[:2])
    return words.astype(np.uint32)


def save_ldr_png(path: PathLike, ldr: np.ndarray) -> None:
    """Write a tone-mapped RGBA8 buffer as a display PNG."""
    _write_rgba(path, _check_rgba8(ldr, "ldr"))


__all__ = [
    "save_rgbe_png",
    "load_rgbe_png",
    "save_rgb9_e5_png",
    "load_rgb9_e5_png",
    "save_ldr_png",
]
