"""
Pixel buffer module for PyAntialias.

Provides the raw, format-aware pixel memory that every algorithm reads and
writes, the closed table of supported pixel formats, transfer helpers to
Taichi fields, and Pillow/NumPy adapters.

Usage:
    from pyantialias.buffer import PixelBuffer, PixelFormat

    with PixelBuffer.allocate(320, 240, PixelFormat.ARGB32) as buf:
        buf.set_pixel(10, 10, 255, 128, 0, 200)
        print(buf.get_pixel(10, 10))
"""

from . import fields, interop
from .formats import FormatDescriptor, PixelFormat, aligned_stride, min_stride
from .interop import from_array, from_pillow, to_array, to_pillow
from .pixel_buffer import Color, PixelBuffer, luma

__all__ = [
    "PixelBuffer",
    "PixelFormat",
    "FormatDescriptor",
    "Color",
    "luma",
    "aligned_stride",
    "min_stride",
    "fields",
    "interop",
    "from_array",
    "to_array",
    "from_pillow",
    "to_pillow",
]
