"""
Bicubic resampling.

Uses the two-part cubic convolution kernel (a = -0.5):

    k(t) = (1.5|t| - 2.5)|t|^2 + 1           for |t| <= 1
    k(t) = ((-0.5|t| + 2.5)|t| - 4)|t| + 2   for 1 < |t| < 2
    k(t) = 0                                 otherwise

The kernel has negative lobes, so unlike bilinear it cannot work on raw
bytes: each channel is assembled (8 or 16 bit), accumulated as a signed
float and clamped to the channel range. Every channel of the format's
channel table is processed, alpha and padding slots included.
"""

import logging

import taichi as ti

from .. import constants as cte
from ..general_algorithms import util_taichi as ut
from .common import check_pair, run_on_fields, scale_factors

logger = logging.getLogger(__name__)


@ti.func
def bicubic_weight(t: cte.FLOAT_TYPE_TI) -> cte.FLOAT_TYPE_TI:
    a = ti.abs(t)
    w = ti.cast(0.0, cte.FLOAT_TYPE_TI)
    if a <= 1.0:
        w = (1.5 * a - 2.5) * a * a + 1.0
    elif a < 2.0:
        w = ((-0.5 * a + 2.5) * a - 4.0) * a + 2.0
    return w


@ti.kernel
def bicubic_kernel(
    source_field: ti.template(),
    target_field: ti.template(),
    src_w: ti.i32,
    src_h: ti.i32,
    src_stride: ti.i32,
    dst_w: ti.i32,
    dst_h: ti.i32,
    dst_stride: ti.i32,
    bpp: ti.i32,
    channel_bytes: ti.i32,
    n_channels: ti.i32,
    channel_max: cte.ACC_TYPE_TI,
    x_factor: cte.FLOAT_TYPE_TI,
    y_factor: cte.FLOAT_TYPE_TI,
):
    """
    Cubic convolution over the 4x4 neighbourhood of
    ``(x * x_factor - 0.5, y * y_factor - 0.5)``.

    Neighbour indices are clamped to ``[0, dim - 1]``.

    Args:
        source_field: Flat u8 source bytes (src_stride * src_h)
        target_field: Flat u8 destination bytes (dst_stride * dst_h)
        channel_bytes: 1 or 2
        n_channels: Channels per pixel, all of them resampled
        channel_max: 255 or 65535
    """
    for y, x in ti.ndrange(dst_h, dst_w):
        oy = ti.cast(y, cte.FLOAT_TYPE_TI) * y_factor - 0.5
        ox = ti.cast(x, cte.FLOAT_TYPE_TI) * x_factor - 0.5
        oy1 = ti.floor(oy, dtype=cte.INT_TYPE_TI)
        ox1 = ti.floor(ox, dtype=cte.INT_TYPE_TI)
        dy = oy - ti.cast(oy1, cte.FLOAT_TYPE_TI)
        dx = ox - ti.cast(ox1, cte.FLOAT_TYPE_TI)

        dst_base = y * dst_stride + x * bpp
        upper = ti.cast(channel_max, cte.FLOAT_TYPE_TI)

        for c in range(n_channels):
            acc = ti.cast(0.0, cte.FLOAT_TYPE_TI)
            wsum = ti.cast(0.0, cte.FLOAT_TYPE_TI)
            for n in range(-1, 3):
                wy = bicubic_weight(ti.cast(n, cte.FLOAT_TYPE_TI) - dy)
                sy = ut.clamp_index(oy1 + n, src_h)
                for m in range(-1, 3):
                    wx = bicubic_weight(ti.cast(m, cte.FLOAT_TYPE_TI) - dx)
                    sx = ut.clamp_index(ox1 + m, src_w)
                    offset = sy * src_stride + sx * bpp + c * channel_bytes
                    value = ut.read_channel(source_field, offset, channel_bytes)
                    acc += wy * wx * ti.cast(value, cte.FLOAT_TYPE_TI)
                    wsum += wy * wx

            # The weights sum to one up to rounding; normalise so that a
            # uniform neighbourhood does not truncate one level down.
            acc = acc / wsum + cte.TRUNCATION_EPSILON
            acc = ti.min(ti.max(acc, 0.0), upper)
            ut.write_channel(
                target_field,
                dst_base + c * channel_bytes,
                channel_bytes,
                ti.cast(acc, cte.ACC_TYPE_TI),
            )


def bicubic(source, destination):
    """
    Resample ``source`` into ``destination`` by bicubic interpolation.

    Raises:
        SizeMismatchError: pixel formats differ
    """
    check_pair(source, destination)
    x_factor, y_factor = scale_factors(source, destination)
    desc = source.descriptor
    logger.debug(
        "Bicubic %dx%d -> %dx%d (%d channels)", source.width, source.height,
        destination.width, destination.height, desc.channel_count,
    )

    def launch(src, dst):
        bicubic_kernel(
            src,
            dst,
            source.width,
            source.height,
            source.stride,
            destination.width,
            destination.height,
            destination.stride,
            desc.bytes_per_pixel,
            desc.channel_bytes,
            desc.channel_count,
            desc.channel_max,
            x_factor,
            y_factor,
        )

    run_on_fields(launch, source, destination)


__all__ = ["bicubic", "bicubic_kernel", "bicubic_weight"]
