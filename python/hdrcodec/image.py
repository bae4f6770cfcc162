"""HDR image object with explicit exposure/gamma display mapping."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np

from . import png
from ._validate import positive_float
from .convert import float_to_rgb9_e5, float_to_rgbe, rgb9_e5_to_float, rgbe_to_float
from .header import HdrHeader
from .hdr import decode_hdr, encode_hdr
from .tonemap import DEFAULT_EXPOSURE, DEFAULT_GAMMA, rgbe_to_ldr

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

KIND_HDR = "hdr"
KIND_RGBE_PNG = "rgbe_png"
KIND_RGB9_E5_PNG = "rgb9_e5_png"


def container_kind(path: PathLike) -> str:
    """Map a file name to its container: ``.hdr``, ``.hdr.png``/``.rgbe.png`` or ``.rgb9_e5.png``."""
    name = Path(path).name.lower()
    if name.endswith(".rgb9_e5.png"):
        return KIND_RGB9_E5_PNG
    if name.endswith(".hdr.png") or name.endswith(".rgbe.png"):
        return KIND_RGBE_PNG
    if name.endswith(".hdr"):
        return KIND_HDR
    raise ValueError(
        f"Unsupported HDR container: {path} (expected .hdr, .hdr.png, .rgbe.png or .rgb9_e5.png)"
    )


class HdrImage:
    """
    Decoded HDR image held as an RGBE buffer.

    ``exposure`` and ``gamma`` are plain attributes: changing them does not
    redraw anything. Call :meth:`to_ldr` whenever a new display buffer is
    needed, optionally passing the previous buffer back as ``out``.
    """

    def __init__(
        self,
        rgbe: np.ndarray,
        header: Optional[HdrHeader] = None,
        exposure: float = DEFAULT_EXPOSURE,
        gamma: float = DEFAULT_GAMMA,
    ):
        """
        Initialize from an RGBE buffer.

        Args:
            rgbe: uint8 array of shape (height, width, 4)
            header: Parsed header when the image came from a .hdr stream
            exposure: Default exposure for :meth:`to_ldr`
            gamma: Default display gamma for :meth:`to_ldr`
        """
        rgbe = np.asarray(rgbe)
        if rgbe.dtype != np.uint8 or rgbe.ndim != 3 or rgbe.shape[2] != 4:
            raise ValueError(f"RGBE image must be uint8 (H, W, 4), got {rgbe.dtype} {rgbe.shape}")
        if rgbe.shape[0] <= 0 or rgbe.shape[1] <= 0:
            raise ValueError(f"Invalid dimensions: {rgbe.shape[1]}x{rgbe.shape[0]}")

        self._rgbe = rgbe
        self.header = header
        self.exposure = float(exposure)
        self.gamma = positive_float("gamma", gamma)
        self.rgb9_e5: Optional[np.ndarray] = None

    @property
    def width(self) -> int:
        return int(self._rgbe.shape[1])

    @property
    def height(self) -> int:
        return int(self._rgbe.shape[0])

    @property
    def data_rgbe(self) -> np.ndarray:
        return self._rgbe

    @property
    def data_float(self) -> np.ndarray:
        return self.to_float()

    def __repr__(self) -> str:
        return f"HdrImage({self.width}x{self.height}, exposure={self.exposure}, gamma={self.gamma})"

    # construction

    @classmethod
    def from_bytes(cls, data, **kwargs) -> "HdrImage":
        decoded = decode_hdr(data)
        return cls(decoded.rgbe, header=decoded.header, **kwargs)

    @classmethod
    def from_float(cls, floats: np.ndarray, **kwargs) -> "HdrImage":
        floats = np.asarray(floats)
        if floats.ndim != 3 or floats.shape[2] != 3:
            raise ValueError("HDR image must have shape (H, W, 3)")
        return cls(float_to_rgbe(floats), **kwargs)

    @classmethod
    def from_rgb9_e5(cls, words: np.ndarray, **kwargs) -> "HdrImage":
        words = np.asarray(words, dtype=np.uint32)
        if words.ndim != 2:
            raise ValueError(f"RGB9_E5 image must have shape (H, W), got {words.shape}")
        image = cls(float_to_rgbe(rgb9_e5_to_float(words)), **kwargs)
        image.rgb9_e5 = words
        return image

    @classmethod
    def open(cls, path: PathLike, **kwargs) -> "HdrImage":
        """Load any supported container, chosen by file suffix."""
        path = Path(path)
        kind = container_kind(path)
        if not path.exists():
            raise FileNotFoundError(f"HDR file not found: {path}")
        if kind == KIND_HDR:
            image = cls.from_bytes(path.read_bytes(), **kwargs)
        elif kind == KIND_RGB9_E5_PNG:
            image = cls.from_rgb9_e5(png.load_rgb9_e5_png(path), **kwargs)
        else:
            image = cls(png.load_rgbe_png(path), **kwargs)
        logger.info(f"Loaded {kind} image {path}: {image.width}x{image.height}")
        return image

    # conversion

    def to_float(self, out: Optional[np.ndarray] = None) -> np.ndarray:
        return rgbe_to_float(self._rgbe, out=out)

    def to_rgb9_e5(self, out: Optional[np.ndarray] = None) -> np.ndarray:
        return float_to_rgb9_e5(self.to_float(), out=out)

    def to_ldr(
        self,
        exposure: Optional[float] = None,
        gamma: Optional[float] = None,
        out: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """
        Tone map to an RGBA8 (H, W, 4) display buffer.

        Args:
            exposure: Overrides ``self.exposure`` for this call
            gamma: Overrides ``self.gamma`` for this call
            out: Buffer from a previous call to reuse

        Returns:
            The display buffer (``out`` when given)
        """
        exposure = self.exposure if exposure is None else exposure
        gamma = self.gamma if gamma is None else gamma
        return rgbe_to_ldr(self._rgbe, exposure, gamma, out=out)

    def update(self, **kwargs) -> None:
        """Update display parameters (``exposure``, ``gamma``)."""
        for key, value in kwargs.items():
            if key == "exposure":
                self.exposure = float(value)
            elif key == "gamma":
                self.gamma = positive_float("gamma", value)
            else:
                raise ValueError(f"Unknown display parameter: {key}")
            logger.debug(f"Updated display parameter: {key} = {value}")

    def statistics(self) -> Dict[str, float]:
        """Luminance statistics of the linear radiance."""
        rgb = self.to_float()
        luminance = 0.299 * rgb[:, :, 0] + 0.587 * rgb[:, :, 1] + 0.114 * rgb[:, :, 2]

        return {
            'min_luminance': float(np.min(luminance)),
            'max_luminance': float(np.max(luminance)),
            'mean_luminance': float(np.mean(luminance)),
            'median_luminance': float(np.median(luminance)),
            'dynamic_range': float(np.max(luminance) / max(np.min(luminance), 1e-6)),
            'pixels_above_1': int(np.sum(luminance > 1.0)),
        }

    # output

    def to_bytes(self, rle: bool = True) -> bytes:
        variables: Dict[str, Any] = dict(self.header.variables) if self.header else {}
        return encode_hdr(self._rgbe, variables=variables, rle=rle)

    def save(self, path: PathLike, rle: bool = True) -> None:
        """Write the image to any supported container, chosen by file suffix."""
        path = Path(path)
        kind = container_kind(path)
        if kind == KIND_HDR:
            path.write_bytes(self.to_bytes(rle=rle))
        elif kind == KIND_RGB9_E5_PNG:
            png.save_rgb9_e5_png(path, self.to_rgb9_e5())
        else:
            png.save_rgbe_png(path, self._rgbe)
        logger.info(f"Saved {kind} image: {path}")

    def save_ldr(self, path: PathLike, exposure: Optional[float] = None, gamma: Optional[float] = None) -> None:
        png.save_ldr_png(path, self.to_ldr(exposure, gamma))


__all__ = ["HdrImage", "container_kind", "KIND_HDR", "KIND_RGBE_PNG", "KIND_RGB9_E5_PNG"]
