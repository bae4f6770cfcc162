# python/hdrcodec/__init__.py
# Public API for the Radiance HDR codec and shared-exponent pixel conversions
# Exists to give callers one flat import surface over the codec modules
# RELEVANT FILES: python/hdrcodec/hdr.py, python/hdrcodec/convert.py, python/hdrcodec/tonemap.py, tests/test_hdr_decode.py
from .errors import (
    HdrDecodeError,
    MalformedHeader,
    UnsupportedFormat,
    ScanlineWidthMismatch,
    TruncatedData,
    CorruptScanline,
)
from .header import RGBE_FORMAT, HdrHeader, parse_header, format_header
from .convert import rgbe_to_float, float_to_rgbe, float_to_rgb9_e5, rgb9_e5_to_float
from .tonemap import rgbe_to_ldr, float_to_ldr, exposure_factor
from .parallel import convert_parallel
from .hdr import (
    DecodedImage,
    decode_hdr,
    load_hdr,
    load_hdr_float,
    encode_hdr,
    save_hdr,
    save_hdr_float,
    save_hdr_as_ldr,
    get_hdr_info,
)
from .png import save_rgbe_png, load_rgbe_png, save_rgb9_e5_png, load_rgb9_e5_png, save_ldr_png
from .image import HdrImage
from .config import ToneSettings, CodecConfig, load_codec_config

__version__ = "0.1.0"

__all__ = [
    "HdrDecodeError",
    "MalformedHeader",
    "UnsupportedFormat",
    "ScanlineWidthMismatch",
    "TruncatedData",
    "CorruptScanline",
    "RGBE_FORMAT",
    "HdrHeader",
    "parse_header",
    "format_header",
    "rgbe_to_float",
    "float_to_rgbe",
    "float_to_rgb9_e5",
    "rgb9_e5_to_float",
    "rgbe_to_ldr",
    "float_to_ldr",
    "exposure_factor",
    "convert_parallel",
    "DecodedImage",
    "decode_hdr",
    "load_hdr",
    "load_hdr_float",
    "encode_hdr",
    "save_hdr",
    "save_hdr_float",
    "save_hdr_as_ldr",
    "get_hdr_info",
    "save_rgbe_png",
    "load_rgbe_png",
    "save_rgb9_e5_png",
    "load_rgb9_e5_png",
    "save_ldr_png",
    "HdrImage",
    "ToneSettings",
    "CodecConfig",
    "load_codec_config",
    "__version__",
]
