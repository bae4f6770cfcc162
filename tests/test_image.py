"""
HdrImage tests

Construction from every container, display parameters, statistics and saving.
"""

import numpy as np
import pytest

from hdrcodec.convert import float_to_rgb9_e5, rgbe_to_float
from hdrcodec.hdr import encode_hdr
from hdrcodec.image import (
    KIND_HDR,
    KIND_RGB9_E5_PNG,
    KIND_RGBE_PNG,
    HdrImage,
    container_kind,
)
from hdrcodec.tonemap import rgbe_to_ldr


@pytest.mark.parametrize(
    "name,kind",
    [
        ("a.hdr", KIND_HDR),
        ("A.HDR", KIND_HDR),
        ("a.hdr.png", KIND_RGBE_PNG),
        ("a.rgbe.png", KIND_RGBE_PNG),
        ("a.rgb9_e5.png", KIND_RGB9_E5_PNG),
    ],
)
def test_container_kind(name, kind):
    assert container_kind(name) == kind


@pytest.mark.parametrize("name", ["a.png", "a.exr", "hdr"])
def test_unsupported_container(name):
    with pytest.raises(ValueError, match="Unsupported HDR container"):
        container_kind(name)


class TestConstruction:
    def test_from_rgbe(self, normalized_rgbe):
        rgbe = normalized_rgbe(3, 5)
        image = HdrImage(rgbe)

        assert (image.width, image.height) == (5, 3)
        assert image.data_rgbe is rgbe
        assert image.header is None
        assert image.exposure == 1.0
        assert image.gamma == 2.2

    @pytest.mark.parametrize(
        "array",
        [
            np.zeros((2, 2, 3), dtype=np.uint8),
            np.zeros((2, 2, 4), dtype=np.float32),
            np.zeros((0, 2, 4), dtype=np.uint8),
        ],
    )
    def test_rejects_bad_buffers(self, array):
        with pytest.raises(ValueError):
            HdrImage(array)

    def test_rejects_bad_gamma(self, normalized_rgbe):
        with pytest.raises(ValueError, match="gamma"):
            HdrImage(normalized_rgbe(1, 1), gamma=0.0)

    def test_from_bytes_keeps_header(self, normalized_rgbe):
        rgbe = normalized_rgbe(2, 9)
        image = HdrImage.from_bytes(encode_hdr(rgbe, variables={"EXPOSURE": 1.0}))

        np.testing.assert_array_equal(image.data_rgbe, rgbe)
        assert image.header.variables == {"EXPOSURE": "1.0"}

    def test_from_float(self):
        image = HdrImage.from_float(np.ones((2, 3, 3), dtype=np.float32), exposure=2.0)

        assert (image.width, image.height) == (3, 2)
        assert image.exposure == 2.0
        np.testing.assert_array_equal(image.data_float, np.ones((2, 3, 3)))

    def test_from_float_rejects_flat(self):
        with pytest.raises(ValueError, match=r"\(H, W, 3\)"):
            HdrImage.from_float(np.ones((6, 3)))

    def test_from_rgb9_e5_keeps_words(self):
        words = float_to_rgb9_e5(np.full((2, 2, 3), 0.5, dtype=np.float32))

        image = HdrImage.from_rgb9_e5(words)

        assert image.rgb9_e5 is not None
        np.testing.assert_array_equal(image.rgb9_e5, words)
        np.testing.assert_array_equal(image.to_float(), np.full((2, 2, 3), 0.5))


class TestDisplay:
    def test_to_ldr_uses_attributes(self, normalized_rgbe):
        rgbe = normalized_rgbe(4, 4)
        image = HdrImage(rgbe, exposure=3.0, gamma=1.5)

        np.testing.assert_array_equal(image.to_ldr(), rgbe_to_ldr(rgbe, 3.0, 1.5))

    def test_to_ldr_overrides(self, normalized_rgbe):
        rgbe = normalized_rgbe(4, 4)
        image = HdrImage(rgbe)

        np.testing.assert_array_equal(image.to_ldr(exposure=0.0, gamma=1.0), rgbe_to_ldr(rgbe, 0.0, 1.0))
        assert image.exposure == 1.0

    def test_to_ldr_reuses_buffer(self, normalized_rgbe):
        image = HdrImage(normalized_rgbe(4, 4))
        first = image.to_ldr()

        image.update(exposure=4.0)
        second = image.to_ldr(out=first)

        assert second is first
        np.testing.assert_array_equal(second, rgbe_to_ldr(image.data_rgbe, 4.0))

    def test_update(self, normalized_rgbe):
        image = HdrImage(normalized_rgbe(1, 1))

        image.update(exposure=-1, gamma=1.0)

        assert image.exposure == -1.0
        assert image.gamma == 1.0

    def test_update_rejects_unknown(self, normalized_rgbe):
        with pytest.raises(ValueError, match="Unknown display parameter"):
            HdrImage(normalized_rgbe(1, 1)).update(brightness=2.0)

    def test_update_rejects_bad_gamma(self, normalized_rgbe):
        image = HdrImage(normalized_rgbe(1, 1))
        with pytest.raises(ValueError):
            image.update(gamma=-1.0)
        assert image.gamma == 2.2

    def test_statistics(self):
        rgbe = np.zeros((1, 2, 4), dtype=np.uint8)
        rgbe[0, 0] = [128, 128, 128, 130]  # 2.0 grey
        rgbe[0, 1] = [128, 128, 128, 128]  # 0.5 grey

        stats = HdrImage(rgbe).statistics()

        assert stats["min_luminance"] == pytest.approx(0.5)
        assert stats["max_luminance"] == pytest.approx(2.0)
        assert stats["mean_luminance"] == pytest.approx(1.25)
        assert stats["median_luminance"] == pytest.approx(1.25)
        assert stats["dynamic_range"] == pytest.approx(4.0)
        assert stats["pixels_above_1"] == 1


class TestFiles:
    @pytest.mark.parametrize("name", ["img.hdr", "img.hdr.png", "img.rgbe.png"])
    def test_lossless_containers(self, tmp_path, normalized_rgbe, name):
        rgbe = normalized_rgbe(3, 10)
        path = tmp_path / name

        HdrImage(rgbe).save(path)
        loaded = HdrImage.open(path)

        np.testing.assert_array_equal(loaded.data_rgbe, rgbe)

    def test_flat_hdr_file(self, tmp_path, normalized_rgbe):
        rgbe = normalized_rgbe(2, 16)
        path = tmp_path / "flat.hdr"

        HdrImage(rgbe).save(path, rle=False)

        assert path.stat().st_size == len(encode_hdr(rgbe, rle=False))
        np.testing.assert_array_equal(HdrImage.open(path).data_rgbe, rgbe)

    def test_rgb9_e5_container(self, tmp_path, normalized_rgbe):
        rgbe = normalized_rgbe(3, 4)
        rgbe[..., 3] = 130  # inside the RGB9_E5 range
        image = HdrImage(rgbe)
        path = tmp_path / "img.rgb9_e5.png"

        image.save(path)
        loaded = HdrImage.open(path)

        np.testing.assert_array_equal(loaded.rgb9_e5, image.to_rgb9_e5())
        floats = rgbe_to_float(image.data_rgbe)
        max_c = floats.max(axis=-1, keepdims=True)
        assert np.all(np.abs(loaded.to_float() - floats) <= max_c / 64)

    def test_open_keeps_display_parameters(self, tmp_path, normalized_rgbe):
        path = tmp_path / "img.hdr"
        HdrImage(normalized_rgbe(2, 2)).save(path)

        image = HdrImage.open(path, exposure=2.5, gamma=1.0)

        assert (image.exposure, image.gamma) == (2.5, 1.0)

    def test_open_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            HdrImage.open(tmp_path / "missing.hdr")

    def test_save_ldr(self, tmp_path):
        rgbe = np.full((2, 3, 4), [128, 64, 0, 129], dtype=np.uint8)
        path = tmp_path / "view.png"

        HdrImage(rgbe, gamma=1.0).save_ldr(path)

        from hdrcodec.png import load_rgbe_png

        np.testing.assert_array_equal(load_rgbe_png(path)[0, 0], [255, 128, 0, 255])
