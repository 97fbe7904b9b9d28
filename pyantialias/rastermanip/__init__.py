"""Raster resampling module for PyAntialias.

Provides Taichi-accelerated nearest-neighbour, bilinear and bicubic
resampling of PixelBuffers of any supported pixel format. Working memory is
taken from the shared field pool.
"""

from .bicubic import bicubic, bicubic_kernel, bicubic_weight
from .bilinear import bilinear, bilinear_kernel
from .nearest import nearest_neighbor, nearest_neighbor_kernel
from .resizing import ResamplingMethod, resample, resample_into

__all__ = [
    "ResamplingMethod",
    "resample",
    "resample_into",
    "nearest_neighbor",
    "nearest_neighbor_kernel",
    "bilinear",
    "bilinear_kernel",
    "bicubic",
    "bicubic_kernel",
    "bicubic_weight",
]
