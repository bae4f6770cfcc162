"""Radiance HDR (.hdr) decoding, encoding, and file helpers."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np

from .convert import float_to_rgbe, rgbe_to_float
from .errors import HdrDecodeError
from .header import HdrHeader, format_header, parse_header
from .scanline import decode_scanline, encode_scanline, is_new_style
from .tonemap import DEFAULT_EXPOSURE, DEFAULT_GAMMA, rgbe_to_ldr

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class DecodedImage:
    """Result of a successful decode; the arrays belong to the caller."""

    width: int
    height: int
    rgbe: np.ndarray
    header: Optional[HdrHeader] = None

    def to_float(self) -> np.ndarray:
        """Linear radiance as float32 (H, W, 3)."""
        return rgbe_to_float(self.rgbe)


def _as_bytes(data) -> bytes:
    if isinstance(data, bytes):
        return data
    if isinstance(data, np.ndarray):
        if data.dtype != np.uint8:
            raise TypeError(f"HDR data array must be uint8, got {data.dtype}")
        return data.tobytes()
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"HDR data must be bytes-like, got {type(data).__name__}")


def decode_hdr(data) -> DecodedImage:
    """
    Decode a complete Radiance RGBE stream held in memory.

    Parameters
    ----------
    data : bytes, bytearray, memoryview or uint8 ndarray
        The full file contents.

    Returns
    -------
    DecodedImage
        ``rgbe`` is a uint8 array of shape (height, width, 4), top row first.

    Raises
    ------
    MalformedHeader, UnsupportedFormat, ScanlineWidthMismatch, TruncatedData, CorruptScanline
        Decoding is all-or-nothing; no partial image is returned.

    Examples
    --------
    >>> image = decode_hdr(Path("environment.hdr").read_bytes())
    >>> image.rgbe.shape
    (512, 1024, 4)
    """
    buf = _as_bytes(data)
    try:
        header = parse_header(buf)
        width, height = header.width, header.height

        rgbe = np.empty((height, width, 4), dtype=np.uint8)
        pos = header.data_offset
        rle_lines = 0
        for y in range(height):
            signature = buf[pos:pos + 4]
            if len(signature) == 4 and is_new_style(signature):
                rle_lines += 1
            prev = rgbe[y - 1, -1] if y > 0 else None
            pos = decode_scanline(buf, pos, width, rgbe[y], prev_pixel=prev, index=y)
    except HdrDecodeError as e:
        logger.debug("HDR decode failed (%s): %s", e.kind, e)
        raise

    logger.debug(
        "Decoded HDR %dx%d: %d RLE scanlines, %d flat, %d trailing bytes",
        width, height, rle_lines, height - rle_lines, len(buf) - pos,
    )
    return DecodedImage(width=width, height=height, rgbe=rgbe, header=header)


def load_hdr(path: PathLike) -> DecodedImage:
    """Read and decode a Radiance HDR file.

    Raises
    ------
    FileNotFoundError
        If the HDR file cannot be found
    HdrDecodeError
        If the file is not a valid RGBE stream
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"HDR file not found: {path}")

    return decode_hdr(path.read_bytes())


def load_hdr_float(path: PathLike) -> np.ndarray:
    """Load a Radiance HDR file as linear float32 (H, W, 3).

    Examples
    --------
    >>> hdr_image = load_hdr_float("environment.hdr")
    >>> print(f"Value range: {hdr_image.min():.3f} to {hdr_image.max():.3f}")
    """
    return load_hdr(path).to_float()


def encode_hdr(
    rgbe: np.ndarray,
    variables: Optional[Mapping[str, Any]] = None,
    rle: bool = True,
) -> bytes:
    """
    Encode an RGBE image as a Radiance HDR stream.

    Parameters
    ----------
    rgbe : np.ndarray
        uint8 array of shape (height, width, 4).
    variables : mapping, optional
        Extra header variables (e.g. ``{"EXPOSURE": 1.0}``).
    rle : bool, default True
        Use new-style RLE where the width allows it.
    """
    rgbe = np.asarray(rgbe)
    if rgbe.dtype != np.uint8 or rgbe.ndim != 3 or rgbe.shape[2] != 4:
        raise ValueError(f"RGBE image must be uint8 (H, W, 4), got {rgbe.dtype} {rgbe.shape}")
    height, width = rgbe.shape[:2]

    parts = [format_header(width, height, variables)]
    for y in range(height):
        parts.append(encode_scanline(rgbe[y], rle=rle))
    return b"".join(parts)


def save_hdr(
    path: PathLike,
    rgbe: np.ndarray,
    variables: Optional[Mapping[str, Any]] = None,
    rle: bool = True,
) -> None:
    """Write an RGBE image to a Radiance HDR file."""
    path = Path(path)
    path.write_bytes(encode_hdr(rgbe, variables=variables, rle=rle))
    logger.info(f"Saved HDR image: {path}")


def save_hdr_float(
    path: PathLike,
    floats: np.ndarray,
    variables: Optional[Mapping[str, Any]] = None,
    rle: bool = True,
) -> None:
    """Encode linear float32 (H, W, 3) radiance to RGBE and write it."""
    floats = np.asarray(floats)
    if floats.ndim != 3 or floats.shape[2] != 3:
        raise ValueError("HDR image must have shape (H, W, 3)")
    save_hdr(path, float_to_rgbe(floats), variables=variables, rle=rle)


def save_hdr_as_ldr(
    hdr_path: PathLike,
    output_path: PathLike,
    exposure: float = DEFAULT_EXPOSURE,
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Load HDR file and save as LDR PNG.

    Examples
    --------
    >>> save_hdr_as_ldr("env.hdr", "env_ldr.png", exposure=0.5)
    """
    from .png import save_ldr_png

    image = load_hdr(hdr_path)
    save_ldr_png(output_path, rgbe_to_ldr(image.rgbe, exposure, gamma))


def get_hdr_info(path: PathLike) -> Dict[str, Any]:
    """Get information about an HDR file without decoding the pixel data.

    Returns
    -------
    dict
        width, height, pixel_count, format, program, variables, orientation,
        data_offset, file_size and estimated_size_mb (float32 RGB).

    Examples
    --------
    >>> info = get_hdr_info("large_env.hdr")
    >>> print(f"HDR size: {info['width']}x{info['height']}")
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"HDR file not found: {path}")

    # headers are short; read a prefix first and fall back to the whole file
    with open(path, 'rb') as f:
        head = f.read(64 * 1024)
        try:
            header = parse_header(head)
        except HdrDecodeError:
            header = parse_header(head + f.read())

    info = header.to_dict()
    info.pop("comments")
    pixel_count = header.pixel_count
    info.update({
        'pixel_count': pixel_count,
        'file_size': path.stat().st_size,
        'estimated_size_mb': (pixel_count * 3 * 4) / (1024 * 1024),
    })
    return info


__all__ = [
    "DecodedImage",
    "decode_hdr",
    "load_hdr",
    "load_hdr_float",
    "encode_hdr",
    "save_hdr",
    "save_hdr_float",
    "save_hdr_as_ldr",
    "get_hdr_info",
]
