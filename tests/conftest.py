# Ensure `import hdrcodec` works from a fresh clone:
# put repo/python on sys.path so the package is importable without prior install.
# Set HDRCODEC_NO_BOOTSTRAP=1 to test an installed wheel instead.
import os
import sys
from pathlib import Path

import numpy as np
import pytest


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _ensure_python_path():
    repo = _repo_root()
    pkg_dir = repo / "python"
    if str(pkg_dir) not in sys.path:
        sys.path.insert(0, str(pkg_dir))


if os.environ.get("HDRCODEC_NO_BOOTSTRAP") != "1":
    _ensure_python_path()


def pytest_configure(config):
    config.addinivalue_line("markers", "cli: tests that drive the command-line interface")


RGBE_HEADER = "#?RADIANCE\nFORMAT=32-bit_rle_rgbe\n\n-Y {height} +X {width}\n"


@pytest.fixture
def make_hdr():
    """Build an in-memory Radiance stream from a header template and raw body bytes."""

    def _make(width, height, body=b"", header=RGBE_HEADER):
        return header.format(width=width, height=height).encode("ascii") + bytes(body)

    return _make


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def normalized_rgbe(rng):
    """RGBE pixels whose largest mantissa is >= 128, as any encoder produces."""

    def _make(height, width):
        rgbe = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
        rgbe[..., 0] = rng.integers(128, 256, size=(height, width), dtype=np.uint8)
        rgbe[..., 3] = rng.integers(100, 160, size=(height, width), dtype=np.uint8)
        return rgbe

    return _make
