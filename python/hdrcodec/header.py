"""Radiance HDR header parsing and writing."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Union

from .errors import MalformedHeader, UnsupportedFormat
from ._validate import size_wh

logger = logging.getLogger(__name__)

RGBE_FORMAT = "32-bit_rle_rgbe"

# blank line, resolution line, newline
_HEADER_END = re.compile(rb"\n\n[^\n]+\n")
_FORMAT_LINE = re.compile(r"^FORMAT=(.*)$", re.MULTILINE)

BytesLike = Union[bytes, bytearray, memoryview]


@dataclass
class HdrHeader:
    """Parsed header of a Radiance RGBE stream."""

    width: int
    height: int
    data_offset: int
    format: str = RGBE_FORMAT
    program: Optional[str] = None
    variables: Dict[str, str] = field(default_factory=dict)
    comments: List[str] = field(default_factory=list)
    orientation: str = "-Y +X"

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "data_offset": self.data_offset,
            "format": self.format,
            "program": self.program,
            "variables": dict(self.variables),
            "comments": list(self.comments),
            "orientation": self.orientation,
        }


def _find_header_end(data: BytesLike) -> int:
    match = _HEADER_END.search(bytes(data))
    if match is None:
        raise MalformedHeader("HDR header terminator (blank line + resolution line) not found")
    return match.end()


def _parse_resolution(line: str):
    parts = line.split()
    if len(parts) != 4:
        raise MalformedHeader(f"Invalid HDR resolution line: {line!r}")
    try:
        height = int(parts[1])
        width = int(parts[3])
    except ValueError:
        raise MalformedHeader(f"Invalid HDR dimensions in: {line!r}") from None
    if width <= 0 or height <= 0:
        raise MalformedHeader(f"Invalid HDR dimensions: {width}x{height}")
    return width, height, f"{parts[0]} {parts[2]}"


def parse_header(data: BytesLike) -> HdrHeader:
    """
    Parse the ASCII header at the start of a Radiance HDR stream.

    Args:
        data: Raw file bytes (only the header portion is inspected).

    Returns:
        HdrHeader with dimensions and the byte offset of the first scanline.

    Raises:
        MalformedHeader: terminator not found or resolution line unusable.
        UnsupportedFormat: FORMAT= missing or not ``32-bit_rle_rgbe``.
    """
    end = _find_header_end(data)
    text = bytes(data[:end]).decode("latin-1")

    match = _FORMAT_LINE.search(text)
    if match is None:
        raise UnsupportedFormat("HDR file missing FORMAT specification")
    fmt = match.group(1)
    if fmt != RGBE_FORMAT:
        raise UnsupportedFormat(f"Unsupported HDR format: {fmt}", format=fmt)

    lines = text.split("\n")
    non_empty = [ln for ln in lines if ln.strip()]
    width, height, orientation = _parse_resolution(non_empty[-1])
    if orientation != "-Y +X":
        logger.warning(
            "HDR orientation %r is not '-Y +X'; pixels are kept in file order", orientation
        )

    program = None
    variables: Dict[str, str] = {}
    comments: List[str] = []
    body = non_empty[:-1]
    if body and body[0].startswith("#?"):
        program = body[0][2:].strip()
        body = body[1:]
    else:
        logger.warning("HDR header has no '#?' magic line")

    for line in body:
        if line.startswith("#"):
            comments.append(line[1:].strip())
        elif "=" in line:
            key, value = line.split("=", 1)
            if key != "FORMAT":
                variables[key.strip()] = value.strip()

    return HdrHeader(
        width=width,
        height=height,
        data_offset=end,
        format=fmt,
        program=program,
        variables=variables,
        comments=comments,
        orientation=orientation,
    )


def format_header(
    width: int,
    height: int,
    variables: Optional[Mapping[str, object]] = None,
    program: str = "RADIANCE",
) -> bytes:
    """Build a header for a top-down, left-to-right RGBE image."""
    w, h = size_wh(width, height)
    lines = [f"#?{program}", f"FORMAT={RGBE_FORMAT}"]
    for key, value in (variables or {}).items():
        if key == "FORMAT":
            continue
        lines.append(f"{key}={value}")
    text = "\n".join(lines) + f"\n\n-Y {h} +X {w}\n"
    return text.encode("ascii")


__all__ = ["RGBE_FORMAT", "HdrHeader", "parse_header", "format_header"]
