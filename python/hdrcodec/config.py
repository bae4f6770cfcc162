# python/hdrcodec/config.py
# Codec and tone mapping configuration parsing utilities
# Exists to give the CLI and library callers one validated settings object
# RELEVANT FILES: python/hdrcodec/cli.py, python/hdrcodec/image.py, tests/test_config.py
from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .parallel import DEFAULT_CHUNK_PIXELS
from .tonemap import DEFAULT_EXPOSURE, DEFAULT_GAMMA

logger = logging.getLogger(__name__)

ConfigSource = Union["CodecConfig", Mapping[str, Any], str, Path, None]


def _to_bool(value: Any, label: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    if isinstance(value, (int, float)):
        return bool(value)
    raise ValueError(f"{label} must be a boolean, got {value!r}")


@dataclass
class ToneSettings:
    exposure: float = DEFAULT_EXPOSURE
    gamma: float = DEFAULT_GAMMA

    def to_dict(self) -> dict:
        return {"exposure": self.exposure, "gamma": self.gamma}

    def validate(self) -> None:
        if not (self.gamma > 0.0):
            raise ValueError(f"tone.gamma must be positive: {self.gamma}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: Optional["ToneSettings"] = None) -> "ToneSettings":
        base = copy.deepcopy(default) if default is not None else cls()
        if "exposure" in data:
            base.exposure = float(data["exposure"])
        if "gamma" in data:
            base.gamma = float(data["gamma"])
        return base


@dataclass
class CodecConfig:
    tone: ToneSettings = field(default_factory=ToneSettings)
    workers: Optional[int] = None
    chunk_pixels: int = DEFAULT_CHUNK_PIXELS
    rle: bool = True

    def to_dict(self) -> dict:
        return {
            "tone": self.tone.to_dict(),
            "workers": self.workers,
            "chunk_pixels": self.chunk_pixels,
            "rle": self.rle,
        }

    def copy(self) -> "CodecConfig":
        return copy.deepcopy(self)

    def validate(self) -> None:
        self.tone.validate()
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be >= 1 or null: {self.workers}")
        if self.chunk_pixels < 1:
            raise ValueError(f"chunk_pixels must be >= 1: {self.chunk_pixels}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: Optional["CodecConfig"] = None) -> "CodecConfig":
        base = copy.deepcopy(default) if default is not None else cls()
        if "tone" in data:
            if isinstance(data["tone"], Mapping):
                base.tone = ToneSettings.from_mapping(data["tone"], base.tone)
            else:
                raise TypeError("tone must be a mapping")
        if "workers" in data:
            base.workers = None if data["workers"] is None else int(data["workers"])
        if "chunk_pixels" in data:
            base.chunk_pixels = int(data["chunk_pixels"])
        if "rle" in data:
            base.rle = _to_bool(data["rle"], "rle")
        return base


def _load_from_path(path: Path) -> Mapping[str, Any]:
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in {".json", ""}:
        return json.loads(text)
    raise ValueError(f"Unsupported codec config file format: {path}")


def _build_override_mapping(overrides: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            # unset CLI flags arrive as None
            continue
        if key in {"exposure", "gamma"}:
            out.setdefault("tone", {})[key] = value
        elif key in {"workers", "threads"}:
            out["workers"] = value
        elif key in {"chunk_pixels", "chunk"}:
            out["chunk_pixels"] = value
        elif key == "rle":
            out["rle"] = value
        else:
            raise ValueError(f"Unknown codec override: {key!r}")
    return out


def load_codec_config(config: ConfigSource = None, overrides: Optional[Mapping[str, Any]] = None) -> CodecConfig:
    if isinstance(config, CodecConfig):
        cfg = config.copy()
    elif isinstance(config, Mapping):
        cfg = CodecConfig.from_mapping(config)
    elif isinstance(config, (str, Path)):
        cfg = CodecConfig.from_mapping(_load_from_path(Path(config)))
    elif config is None:
        cfg = CodecConfig()
    else:
        raise TypeError("config must be CodecConfig, mapping, path, or None")

    if overrides:
        merged = _build_override_mapping(overrides)
        if merged:
            cfg = CodecConfig.from_mapping(merged, cfg)
            logger.debug("Applied codec overrides: %s", merged)
    cfg.validate()
    return cfg


__all__ = ["ToneSettings", "CodecConfig", "load_codec_config"]
