"""
Taichi helper functions shared by the resampling and convolution kernels.

Buffers live in flat ``u8`` fields laid out exactly like the host memory
(row ``y`` starts at byte ``y * stride``). 16-bit channels are stored
little-endian and are assembled from / split into two bytes here, so the
kernels only ever see whole channel values.
"""

import taichi as ti

from .. import constants as cte


@ti.func
def clamp_index(i: ti.i32, n: ti.i32) -> ti.i32:
    """Replicate edge pixels: clamp ``i`` into ``[0, n - 1]``."""
    return ti.min(ti.max(i, 0), n - 1)


@ti.func
def read_channel(buf: ti.template(), offset: ti.i32, channel_bytes: ti.i32) -> cte.ACC_TYPE_TI:
    """Read an 8- or 16-bit little-endian channel value starting at ``offset``."""
    value = ti.cast(buf[offset], cte.ACC_TYPE_TI)
    if channel_bytes == 2:
        value += ti.cast(buf[offset + 1], cte.ACC_TYPE_TI) << 8
    return value


@ti.func
def write_channel(buf: ti.template(), offset: ti.i32, channel_bytes: ti.i32, value: cte.ACC_TYPE_TI):
    """Store ``value`` as an 8- or 16-bit little-endian channel at ``offset``."""
    buf[offset] = ti.cast(value & 0xFF, cte.BYTE_TYPE_TI)
    if channel_bytes == 2:
        buf[offset + 1] = ti.cast((value >> 8) & 0xFF, cte.BYTE_TYPE_TI)


@ti.func
def clamp_channel(value: cte.ACC_TYPE_TI, channel_max: cte.ACC_TYPE_TI) -> cte.ACC_TYPE_TI:
    return ti.min(ti.max(value, 0), channel_max)


@ti.func
def trunc_div(a: cte.ACC_TYPE_TI, b: cte.ACC_TYPE_TI) -> cte.ACC_TYPE_TI:
    """Integer division rounding toward zero (C semantics, not Python's floor)."""
    q = ti.abs(a) // ti.abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return q


__all__ = [
    "clamp_index",
    "read_channel",
    "write_channel",
    "clamp_channel",
    "trunc_div",
]
