"""
Bilinear resampling.

Interpolation runs on raw bytes rather than on channels: every byte of a
destination pixel is the weighted average of the same byte position in the
four neighbouring source pixels. The weights are non-negative and sum to one,
so the result stays within the range of its four inputs for any channel
layout and no per-format branching is needed.
"""

import logging

import taichi as ti

from .. import constants as cte
from .common import check_pair, run_on_fields, scale_factors

logger = logging.getLogger(__name__)


@ti.kernel
def bilinear_kernel(
    source_field: ti.template(),
    target_field: ti.template(),
    src_w: ti.i32,
    src_h: ti.i32,
    src_stride: ti.i32,
    dst_w: ti.i32,
    dst_h: ti.i32,
    dst_stride: ti.i32,
    bpp: ti.i32,
    x_factor: cte.FLOAT_TYPE_TI,
    y_factor: cte.FLOAT_TYPE_TI,
):
    """
    Bilinear interpolation over the 2x2 neighbourhood of
    ``(x * x_factor, y * y_factor)``.

    The second neighbour is clamped to the last row/column, so edge pixels
    are replicated. The weighted sum is truncated, not rounded.

    Args:
        source_field: Flat u8 source bytes (src_stride * src_h)
        target_field: Flat u8 destination bytes (dst_stride * dst_h)
        x_factor: src_w / dst_w
        y_factor: src_h / dst_h
    """
    for y, x in ti.ndrange(dst_h, dst_w):
        oy = ti.cast(y, cte.FLOAT_TYPE_TI) * y_factor
        ox = ti.cast(x, cte.FLOAT_TYPE_TI) * x_factor

        oy1 = ti.min(ti.floor(oy, dtype=cte.INT_TYPE_TI), src_h - 1)
        ox1 = ti.min(ti.floor(ox, dtype=cte.INT_TYPE_TI), src_w - 1)
        oy2 = ti.min(oy1 + 1, src_h - 1)
        ox2 = ti.min(ox1 + 1, src_w - 1)

        dy1 = oy - ti.cast(oy1, cte.FLOAT_TYPE_TI)
        dx1 = ox - ti.cast(ox1, cte.FLOAT_TYPE_TI)
        dy2 = 1.0 - dy1
        dx2 = 1.0 - dx1

        # p1 p2 on the upper row, p3 p4 on the lower row
        base1 = oy1 * src_stride + ox1 * bpp
        base2 = oy1 * src_stride + ox2 * bpp
        base3 = oy2 * src_stride + ox1 * bpp
        base4 = oy2 * src_stride + ox2 * bpp
        dst_base = y * dst_stride + x * bpp

        for b in range(bpp):
            p1 = ti.cast(source_field[base1 + b], cte.FLOAT_TYPE_TI)
            p2 = ti.cast(source_field[base2 + b], cte.FLOAT_TYPE_TI)
            p3 = ti.cast(source_field[base3 + b], cte.FLOAT_TYPE_TI)
            p4 = ti.cast(source_field[base4 + b], cte.FLOAT_TYPE_TI)

            value = dy2 * (dx2 * p1 + dx1 * p2) + dy1 * (dx2 * p3 + dx1 * p4)
            byte = ti.min(ti.cast(value, cte.INT_TYPE_TI), 255)
            target_field[dst_base + b] = ti.cast(byte, cte.BYTE_TYPE_TI)


def bilinear(source, destination):
    """
    Resample ``source`` into ``destination`` by bilinear interpolation.

    Valid for every pixel format; 16-bit formats are interpolated byte by
    byte like all others.

    Raises:
        SizeMismatchError: pixel formats differ
    """
    check_pair(source, destination)
    x_factor, y_factor = scale_factors(source, destination)
    logger.debug(
        "Bilinear %dx%d -> %dx%d", source.width, source.height,
        destination.width, destination.height,
    )

    def launch(src, dst):
        bilinear_kernel(
            src,
            dst,
            source.width,
            source.height,
            source.stride,
            destination.width,
            destination.height,
            destination.stride,
            source.bytes_per_pixel,
            x_factor,
            y_factor,
        )

    run_on_fields(launch, source, destination)


__all__ = ["bilinear", "bilinear_kernel"]
