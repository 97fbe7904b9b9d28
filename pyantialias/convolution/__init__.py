"""
Convolution module for PyAntialias.

Applies square integer kernels to PixelBuffers of any supported format with
Taichi kernels. See ``engine`` for the boundary and normalisation policy.

Usage:
    from pyantialias.convolution import Kernel, convolve

    box = Kernel([[1, 1, 1], [1, 1, 1], [1, 1, 1]], dynamic_divisor_at_edges=True)
    smoothed = convolve(buffer, box)
"""

from .engine import (
    convolve,
    convolve_into,
    convolve_response,
    convolve_response_kernel,
    convolved_channels,
    pack_response_kernel,
)
from .kernel import Kernel, as_kernel

__all__ = [
    "Kernel",
    "as_kernel",
    "convolve",
    "convolve_into",
    "convolve_response",
    "convolved_channels",
    "convolve_response_kernel",
    "pack_response_kernel",
]
