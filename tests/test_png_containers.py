"""
PNG container tests

RGBE and RGB9_E5 payloads carried losslessly in 8-bit RGBA PNG files.
"""

import numpy as np
import pytest
from PIL import Image

from hdrcodec.convert import float_to_rgb9_e5
from hdrcodec.png import (
    load_rgb9_e5_png,
    load_rgbe_png,
    save_ldr_png,
    save_rgb9_e5_png,
    save_rgbe_png,
)


def test_rgbe_payload_is_lossless(tmp_path, normalized_rgbe):
    rgbe = normalized_rgbe(5, 7)
    path = tmp_path / "img.hdr.png"

    save_rgbe_png(path, rgbe)

    np.testing.assert_array_equal(load_rgbe_png(path), rgbe)


def test_rgbe_payload_is_stored_top_down(tmp_path):
    rgbe = np.zeros((2, 1, 4), dtype=np.uint8)
    rgbe[0, 0] = [10, 20, 30, 129]
    path = tmp_path / "rows.rgbe.png"

    save_rgbe_png(path, rgbe)

    with Image.open(path) as img:
        assert img.mode == "RGBA"
        assert img.size == (1, 2)
        assert img.getpixel((0, 0)) == (10, 20, 30, 129)


def test_rgb9_e5_payload_is_lossless(tmp_path, rng):
    words = float_to_rgb9_e5(rng.uniform(0.0, 100.0, size=(4, 6, 3)))
    path = tmp_path / "img.rgb9_e5.png"

    save_rgb9_e5_png(path, words)
    loaded = load_rgb9_e5_png(path)

    assert loaded.dtype == np.uint32
    np.testing.assert_array_equal(loaded, words)


def test_rgb9_e5_bytes_are_little_endian(tmp_path):
    path = tmp_path / "word.rgb9_e5.png"

    save_rgb9_e5_png(path, np.array([[0x04030201]], dtype=np.uint32))

    with Image.open(path) as img:
        assert img.getpixel((0, 0)) == (1, 2, 3, 4)


def test_rgb9_e5_requires_words(tmp_path):
    with pytest.raises(ValueError, match="uint32"):
        save_rgb9_e5_png(tmp_path / "bad.png", np.zeros((2, 2, 3), dtype=np.float32))


def test_ldr_png(tmp_path):
    ldr = np.full((3, 4, 4), [255, 128, 0, 255], dtype=np.uint8)
    path = tmp_path / "ldr.png"

    save_ldr_png(path, ldr)

    with Image.open(path) as img:
        assert img.size == (4, 3)
        assert np.array_equal(np.array(img), ldr)


@pytest.mark.parametrize(
    "array,err",
    [
        (np.zeros((2, 2, 3), dtype=np.uint8), ValueError),
        (np.zeros((2, 2, 4), dtype=np.float32), ValueError),
        ([[0, 0, 0, 0]], TypeError),
    ],
)
def test_rgbe_payload_validation(tmp_path, array, err):
    with pytest.raises(err):
        save_rgbe_png(tmp_path / "bad.png", array)


def test_path_must_be_png(tmp_path, normalized_rgbe):
    with pytest.raises(ValueError, match=".png"):
        save_rgbe_png(tmp_path / "img.hdr", normalized_rgbe(1, 1))


def test_missing_directory(tmp_path, normalized_rgbe):
    with pytest.raises(ValueError, match="directory does not exist"):
        save_rgbe_png(tmp_path / "nope" / "img.png", normalized_rgbe(1, 1))


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rgbe_png(tmp_path / "missing.png")


def test_rgb_png_is_rejected(tmp_path):
    path = tmp_path / "rgb.png"
    Image.new("RGB", (2, 2)).save(path)

    with pytest.raises(ValueError, match="RGBA"):
        load_rgbe_png(path)
