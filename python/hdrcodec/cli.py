#!/usr/bin/env python3
"""
Command-line front end for hdrcodec.

Usage:
    python -m hdrcodec info image.hdr [--json] [--stats]
    python -m hdrcodec ldr image.hdr out.png [--exposure 2] [--gamma 2.2] [--config cfg.json]
    python -m hdrcodec convert image.hdr image.rgb9_e5.png
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import load_codec_config
from .errors import HdrDecodeError
from .hdr import get_hdr_info
from .image import KIND_HDR, HdrImage, container_kind
from .parallel import convert_parallel
from .png import save_ldr_png

logger = logging.getLogger("hdrcodec.cli")


def _cmd_info(args: argparse.Namespace) -> int:
    path = Path(args.input)
    image = None
    if container_kind(path) == KIND_HDR:
        info = get_hdr_info(path)
    else:
        image = HdrImage.open(path)
        info = {"width": image.width, "height": image.height, "pixel_count": image.width * image.height}
    if args.stats:
        if image is None:
            image = HdrImage.open(path)
        info["statistics"] = image.statistics()

    if args.json:
        print(json.dumps(info, indent=2, sort_keys=True))
    else:
        for key, value in info.items():
            print(f"{key}: {value}")
    return 0


def _cmd_ldr(args: argparse.Namespace) -> int:
    cfg = load_codec_config(
        args.config,
        overrides={"exposure": args.exposure, "gamma": args.gamma, "workers": args.workers},
    )
    image = HdrImage.open(args.input)
    ldr = convert_parallel(
        "rgbe_to_ldr",
        image.data_rgbe,
        cfg.tone.exposure,
        cfg.tone.gamma,
        workers=cfg.workers,
        chunk_pixels=cfg.chunk_pixels,
    )
    save_ldr_png(args.output, ldr)
    print(f"Saved {args.output} ({image.width}x{image.height}, exposure={cfg.tone.exposure}, gamma={cfg.tone.gamma})")
    return 0


def _cmd_convert(args: argparse.Namespace) -> int:
    cfg = load_codec_config(args.config, overrides={"rle": False if args.flat else None})
    container_kind(args.output)
    image = HdrImage.open(args.input)
    image.save(args.output, rle=cfg.rle)
    print(f"Converted {args.input} -> {args.output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hdrcodec",
        description="Decode, convert and tone map Radiance HDR images",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_info = sub.add_parser("info", help="Print header information")
    p_info.add_argument("input", help="Input .hdr / .hdr.png / .rgbe.png / .rgb9_e5.png")
    p_info.add_argument("--json", action="store_true", help="Emit JSON")
    p_info.add_argument("--stats", action="store_true", help="Decode and add luminance statistics")
    p_info.set_defaults(func=_cmd_info)

    p_ldr = sub.add_parser("ldr", help="Tone map to an 8-bit PNG")
    p_ldr.add_argument("input")
    p_ldr.add_argument("output", help="Output .png path")
    p_ldr.add_argument("--exposure", type=float, default=None, help="Exposure (1 = neutral)")
    p_ldr.add_argument("--gamma", type=float, default=None, help="Display gamma (default 2.2)")
    p_ldr.add_argument("--workers", type=int, default=None, help="Conversion threads")
    p_ldr.add_argument("--config", default=None, help="JSON codec config")
    p_ldr.set_defaults(func=_cmd_ldr)

    p_conv = sub.add_parser("convert", help="Re-encode between HDR containers")
    p_conv.add_argument("input")
    p_conv.add_argument("output", help="Output .hdr / .hdr.png / .rgbe.png / .rgb9_e5.png")
    p_conv.add_argument("--flat", action="store_true", help="Write .hdr scanlines without RLE")
    p_conv.add_argument("--config", default=None, help="JSON codec config")
    p_conv.set_defaults(func=_cmd_convert)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except HdrDecodeError as e:
        print(f"error: failed to decode {args.input}: {e}", file=sys.stderr)
    except (FileNotFoundError, ValueError, TypeError) as e:
        print(f"error: {e}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
