"""
PyAntialias: format-aware raster resampling and blur detection with Taichi.

Modules:
    buffer: PixelBuffer, the pixel format table and Pillow/NumPy adapters
    rastermanip: nearest-neighbour, bilinear and bicubic resampling
    convolution: generic square-kernel convolution
    edges: Laplacian-based blur and aliasing detection
    pool: Taichi field pool shared by every kernel launch
    constants: Taichi types and default parameters
    errors: exception hierarchy

Taichi must be initialised by the application (``ti.init(...)``) before any
kernel-backed function is called.

Usage:
    import taichi as ti
    import pyantialias as paa

    ti.init(arch=ti.cpu)
    with paa.PixelBuffer.allocate(64, 64, "rgb24") as src:
        small = paa.resample(src, 32, 32, method="bicubic")
        print(paa.detect_blur(small))
"""

import logging

from . import buffer, constants, convolution, edges, errors, general_algorithms, pool, rastermanip
from .buffer import Color, PixelBuffer, PixelFormat, from_array, from_pillow, to_array, to_pillow
from .convolution import Kernel, convolve, convolve_into, convolve_response
from .edges import BlurReport, GradientMode, detect_blur, has_aliasing
from .errors import (
    BufferReleasedError,
    InvalidDivisorError,
    InvalidKernelError,
    OutOfRangeError,
    PixelBufferError,
    SizeMismatchError,
    UnsupportedFormatError,
)
from .rastermanip import ResamplingMethod, resample, resample_into

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "buffer",
    "constants",
    "convolution",
    "edges",
    "errors",
    "general_algorithms",
    "pool",
    "rastermanip",
    "PixelBuffer",
    "PixelFormat",
    "Color",
    "from_array",
    "to_array",
    "from_pillow",
    "to_pillow",
    "ResamplingMethod",
    "resample",
    "resample_into",
    "Kernel",
    "convolve",
    "convolve_into",
    "convolve_response",
    "GradientMode",
    "BlurReport",
    "detect_blur",
    "has_aliasing",
    "PixelBufferError",
    "OutOfRangeError",
    "UnsupportedFormatError",
    "InvalidKernelError",
    "InvalidDivisorError",
    "SizeMismatchError",
    "BufferReleasedError",
]
