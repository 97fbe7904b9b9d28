"""
Unit tests for the resampling module.

Covers the three algorithms on every pixel format, the dispatch layer and
argument validation.
"""

import math

import numpy as np
import pytest

from pyantialias.buffer import Color, PixelBuffer
from pyantialias.errors import BufferReleasedError, SizeMismatchError
from pyantialias.rastermanip import (
    ResamplingMethod,
    bicubic,
    bilinear,
    nearest_neighbor,
    resample,
    resample_into,
)

ALL_METHODS = list(ResamplingMethod)


def _bicubic_weight(t):
    a = abs(t)
    if a <= 1.0:
        return (1.5 * a - 2.5) * a * a + 1.0
    if a < 2.0:
        return ((-0.5 * a + 2.5) * a - 4.0) * a + 2.0
    return 0.0


def _bicubic_reference(values, dst_w, dst_h, channel_max):
    """Straightforward per-pixel evaluation on a (h, w, c) array."""
    src_h, src_w, n_ch = values.shape
    xf, yf = src_w / dst_w, src_h / dst_h
    out = np.zeros((dst_h, dst_w, n_ch), dtype=np.int64)
    for y in range(dst_h):
        oy = y * yf - 0.5
        oy1 = math.floor(oy)
        dy = oy - oy1
        for x in range(dst_w):
            ox = x * xf - 0.5
            ox1 = math.floor(ox)
            dx = ox - ox1
            for c in range(n_ch):
                acc = 0.0
                for n in range(-1, 3):
                    sy = min(max(oy1 + n, 0), src_h - 1)
                    wy = _bicubic_weight(n - dy)
                    for m in range(-1, 3):
                        sx = min(max(ox1 + m, 0), src_w - 1)
                        acc += wy * _bicubic_weight(m - dx) * float(values[sy, sx, c])
                out[y, x, c] = int(min(max(acc, 0.0), channel_max))
    return out


class TestNearestNeighbor:

    def test_downscale_picks_floor(self):
        src = PixelBuffer.allocate(4, 1, "gray8")
        src.write_channels(np.array([[10, 20, 30, 40]]))
        dst = resample(src, 2, 1, ResamplingMethod.NEAREST_NEIGHBOR)
        assert list(dst.channels()[0, :, 0]) == [10, 30]

    def test_upscale_duplicates(self):
        src = PixelBuffer.allocate(2, 1, "gray8")
        src.write_channels(np.array([[10, 20]]))
        dst = resample(src, 4, 1, "nearest_neighbor")
        assert list(dst.channels()[0, :, 0]) == [10, 10, 20, 20]

    def test_copies_raw_bytes(self, test_data_manager):
        src = test_data_manager.gradient(6, 4, "argb64")
        dst = PixelBuffer.allocate(3, 2, "argb64")
        nearest_neighbor(src, dst)
        np.testing.assert_array_equal(dst.channels(), src.channels()[::2, ::2])


class TestBilinear:

    def test_interpolates_and_replicates_edge(self):
        src = PixelBuffer.allocate(2, 1, "gray8")
        src.write_channels(np.array([[0, 100]]))
        dst = resample(src, 4, 1, ResamplingMethod.BILINEAR)
        assert list(dst.channels()[0, :, 0]) == [0, 50, 100, 100]

    def test_truncates(self):
        src = PixelBuffer.allocate(2, 1, "gray8")
        src.write_channels(np.array([[0, 3]]))
        dst = resample(src, 4, 1, "bilinear")
        # 0.5 * 3 = 1.5 -> 1
        assert dst.channels()[0, 1, 0] == 1

    def test_convexity(self, test_data_manager):
        """Every output byte lies between the four source bytes it samples."""
        src = test_data_manager.gradient(7, 5, "rgb24", seed=3)
        dst = PixelBuffer.allocate(11, 9, "rgb24")
        bilinear(src, dst)

        s = src.channels().astype(np.int64)
        d = dst.channels().astype(np.int64)
        xf, yf = 7 / 11, 5 / 9
        for y in range(9):
            oy1 = min(math.floor(y * yf), 4)
            oy2 = min(oy1 + 1, 4)
            for x in range(11):
                ox1 = min(math.floor(x * xf), 6)
                ox2 = min(ox1 + 1, 6)
                quad = np.stack([s[oy1, ox1], s[oy1, ox2], s[oy2, ox1], s[oy2, ox2]])
                assert np.all(d[y, x] >= quad.min(axis=0))
                assert np.all(d[y, x] <= quad.max(axis=0))

    def test_alpha_bytes_are_interpolated(self):
        src = PixelBuffer.allocate(2, 1, "argb32")
        src.set_pixel(0, 0, 0, 0, 0, 0)
        src.set_pixel(1, 0, 0, 0, 0, 200)
        dst = resample(src, 4, 1, "bilinear")
        assert dst.get_pixel(1, 0).a == 100


class TestBicubic:

    def test_matches_reference_with_edge_clamping(self):
        """A corner impulse exercises indices clamped to 0 and dim - 1."""
        src = PixelBuffer.allocate(4, 4, "gray8")
        src.set_pixel(0, 0, 255, 255, 255)
        src.set_pixel(3, 3, 255, 255, 255)
        dst = resample(src, 7, 6, ResamplingMethod.BICUBIC)

        expected = _bicubic_reference(src.channels(), 7, 6, 255)
        diff = np.abs(dst.channels().astype(np.int64) - expected)
        assert diff.max() <= 1

    def test_matches_reference_rgb(self, test_data_manager):
        src = test_data_manager.gradient(6, 5, "rgb24", seed=11)
        dst = PixelBuffer.allocate(4, 8, "rgb24")
        bicubic(src, dst)
        expected = _bicubic_reference(src.channels(), 4, 8, 255)
        assert np.abs(dst.channels().astype(np.int64) - expected).max() <= 1

    def test_overshoot_is_clamped(self):
        src = PixelBuffer.allocate(4, 1, "gray8")
        src.write_channels(np.array([[0, 0, 255, 255]]))
        dst = resample(src, 9, 1, "bicubic")
        values = dst.channels()[0, :, 0]
        assert values.min() == 0
        assert values.max() == 255

    def test_alpha_is_interpolated(self):
        src = PixelBuffer.allocate(4, 4, "argb32")
        values = np.zeros((4, 4, 4), dtype=np.int64)
        values[:, :, 2] = np.arange(4)[None, :] * 60
        values[:, :, 3] = 128
        src.write_channels(values)

        dst = resample(src, 2, 2, "bicubic")
        assert (dst.channels()[:, :, 3] == 128).all()

    def test_16bit_channels(self):
        src = PixelBuffer.allocate(4, 4, "rgb48")
        src.write_channels(np.full((4, 4, 3), 40000))
        dst = resample(src, 8, 8, "bicubic")
        assert (dst.channels() == 40000).all()

    @pytest.mark.slow
    @pytest.mark.parametrize("fmt, value", [("gray8", 200), ("gray8", 255), ("gray16", 65535), ("rgb24", 250)])
    @pytest.mark.parametrize("src_size, dst_size", [(5, 3), (3, 7), (10, 3), (6, 5)])
    def test_uniform_any_factor_is_exact(self, fmt, value, src_size, dst_size, test_data_manager):
        src = test_data_manager.uniform(src_size, src_size, fmt, value)
        dst = resample(src, dst_size, dst_size, "bicubic")
        assert (dst.channels() == value).all()

    def test_single_pixel_upscale_keeps_colour(self):
        src = PixelBuffer.allocate(1, 1, "argb32")
        src.set_pixel(0, 0, 10, 20, 30, 40)
        dst = resample(src, 3, 2, "bicubic")
        for y in range(2):
            for x in range(3):
                assert dst.get_pixel(x, y) == Color(10, 20, 30, 40)

    def test_repeated_resampling_does_not_drift(self, test_data_manager):
        buf = test_data_manager.uniform(9, 9, "gray8", 180)
        for size in (5, 7, 3, 9):
            buf = resample(buf, size, size, "bicubic")
        assert (buf.channels() == 180).all()

    def test_ramp_is_near_identity(self):
        """Sampling is offset by half a pixel, so a ramp shifts by half a step."""
        src = PixelBuffer.allocate(8, 3, "gray8")
        src.write_channels(np.tile(np.arange(8) * 10, (3, 1)))
        dst = resample(src, 8, 3, "bicubic")
        diff = np.abs(dst.channels().astype(np.int64) - src.channels().astype(np.int64))
        assert diff.max() <= 10


class TestDispatch:

    @pytest.mark.slow
    @pytest.mark.parametrize("method", ALL_METHODS)
    def test_uniform_downscale(self, method, any_format, test_data_manager):
        src = test_data_manager.uniform(4, 4, any_format, 10)
        dst = resample(src, 2, 2, method)
        assert dst.size == (2, 2)
        assert dst.pixel_format == src.pixel_format
        assert (dst.channels() == 10).all()

    @pytest.mark.slow
    @pytest.mark.parametrize("method", [ResamplingMethod.NEAREST_NEIGHBOR, ResamplingMethod.BILINEAR])
    def test_same_size_is_identity(self, method, any_format, test_data_manager):
        src = test_data_manager.gradient(5, 4, any_format)
        dst = resample(src, 5, 4, method)
        np.testing.assert_array_equal(dst.channels(), src.channels())

    def test_uniform_bicubic_same_size_is_identity(self, any_format, test_data_manager):
        src = test_data_manager.uniform(5, 3, any_format, 77)
        dst = resample(src, 5, 3, "bicubic")
        np.testing.assert_array_equal(dst.channels(), src.channels())

    def test_format_mismatch(self):
        src = PixelBuffer.allocate(4, 4, "rgb24")
        dst = PixelBuffer.allocate(2, 2, "argb32")
        with pytest.raises(SizeMismatchError):
            resample_into(src, dst, "bilinear")

    def test_bad_target_size(self):
        src = PixelBuffer.allocate(4, 4, "gray8")
        with pytest.raises(SizeMismatchError):
            resample(src, 0, 2)

    def test_released_source(self):
        src = PixelBuffer.allocate(4, 4, "gray8")
        src.release()
        with pytest.raises(BufferReleasedError):
            resample(src, 2, 2)

    def test_method_names(self):
        assert ResamplingMethod.parse("BICUBIC") is ResamplingMethod.BICUBIC
        with pytest.raises(ValueError):
            ResamplingMethod.parse("lanczos")
        with pytest.raises(TypeError):
            ResamplingMethod.parse(2)

    def test_resample_into_keeps_destination_padding(self):
        src = PixelBuffer.allocate(4, 4, "rgb24")
        src.set_pixel(0, 0, 1, 2, 3)
        raw = np.full(2 * 8, 77, dtype=np.uint8)
        dst = PixelBuffer.wrap(raw, 2, 2, 8, "rgb24")
        result = resample_into(src, dst, "nearest_neighbor")
        assert result is dst
        assert dst.get_pixel(0, 0) == Color(1, 2, 3)
        assert raw[6] == 77 and raw[7] == 77
        assert raw[14] == 77 and raw[15] == 77

    def test_pool_fields_returned(self, fresh_pool):
        src = PixelBuffer.allocate(6, 6, "gray8")
        for method in ALL_METHODS:
            resample(src, 3, 3, method)
        stats = fresh_pool.stats()
        assert stats["free"] == stats["allocated"]
        assert stats["reused"] > 0
