"""
Pytest configuration and fixtures for the PyAntialias test suite.

Taichi is initialised once for the whole session on the CPU backend. Test
modules must not call ``ti.init`` again: a new runtime invalidates every
field cached in the pool.
"""
import os
import sys

import numpy as np
import pytest
import taichi as ti


def pytest_configure(config):
    """Configure pytest with custom settings."""
    # Add the package root to Python path for testing
    package_root = os.path.dirname(os.path.dirname(__file__))
    if package_root not in sys.path:
        sys.path.insert(0, package_root)

    config.addinivalue_line("markers", "unit: fast tests of a single module")
    config.addinivalue_line("markers", "integration: end-to-end workflows")
    config.addinivalue_line("markers", "importtest: module import checks")
    config.addinivalue_line("markers", "slow: long-running tests (largest kernels, every pixel format)")

    ti.init(arch=ti.cpu, offline_cache=False)

    from pyantialias import pool

    pool.taipool.clear()


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        path = str(item.fspath)
        # Mark import tests for easy selection
        if "test_imports.py" in path:
            item.add_marker("importtest")
        elif os.sep + "integration" + os.sep in path:
            item.add_marker("integration")
        elif os.sep + "unit" + os.sep in path:
            item.add_marker("unit")


class TestDataManager:
    """Helper class for building test images."""

    @staticmethod
    def uniform(width, height, pixel_format, value):
        """Buffer whose every channel holds ``value``."""
        from pyantialias.buffer import PixelBuffer

        buf = PixelBuffer.allocate(width, height, pixel_format)
        desc = buf.descriptor
        buf.write_channels(np.full((height, width, desc.channel_count), value))
        return buf

    @staticmethod
    def bright_pixel(width=5, height=5, x=2, y=2, pixel_format="gray8"):
        """Black buffer with a single full-intensity pixel at ``(x, y)``."""
        from pyantialias.buffer import PixelBuffer

        buf = PixelBuffer.allocate(width, height, pixel_format)
        values = np.zeros((height, width, buf.descriptor.channel_count), dtype=np.int64)
        values[y, x, :] = buf.descriptor.channel_max
        buf.write_channels(values)
        return buf

    @staticmethod
    def gradient(width=16, height=12, pixel_format="rgb24", seed=42):
        """Random-textured buffer with a smooth horizontal ramp underneath."""
        from pyantialias.buffer import PixelBuffer

        rng = np.random.default_rng(seed)
        buf = PixelBuffer.allocate(width, height, pixel_format)
        desc = buf.descriptor
        ramp = np.linspace(0, desc.channel_max, width)[None, :, None]
        noise = rng.integers(0, desc.channel_max // 8 + 1, size=(height, width, desc.channel_count))
        values = np.clip(ramp * 0.8 + noise, 0, desc.channel_max).astype(np.int64)
        buf.write_channels(values)
        return buf

    @staticmethod
    def checkerboard(width=8, height=8, pixel_format="gray8"):
        """Alternating black and full-intensity pixels."""
        from pyantialias.buffer import PixelBuffer

        buf = PixelBuffer.allocate(width, height, pixel_format)
        desc = buf.descriptor
        yy, xx = np.mgrid[0:height, 0:width]
        board = ((xx + yy) % 2 * desc.channel_max).astype(np.int64)
        buf.write_channels(np.repeat(board[:, :, None], desc.channel_count, axis=2))
        return buf


@pytest.fixture
def test_data_manager():
    """Provide access to test data creation utilities."""
    return TestDataManager()


@pytest.fixture
def fresh_pool():
    """The global field pool, emptied before and after the test."""
    from pyantialias import pool

    pool.taipool.clear()
    yield pool.taipool
    pool.taipool.clear()


@pytest.fixture(params=["gray8", "gray16", "rgb24", "rgb32", "argb32", "rgb48", "argb64"])
def any_format(request):
    """Every supported pixel format name."""
    return request.param
