"""
General-purpose Taichi helpers used by the PyAntialias kernels.
"""

from . import util_taichi
from .util_taichi import (
    clamp_channel,
    clamp_index,
    read_channel,
    trunc_div,
    write_channel,
)

__all__ = [
    "util_taichi",
    "clamp_index",
    "read_channel",
    "write_channel",
    "clamp_channel",
    "trunc_div",
]
