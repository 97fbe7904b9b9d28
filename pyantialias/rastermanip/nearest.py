"""
Nearest-neighbour resampling.

Each destination pixel copies the raw bytes of one source pixel. No
interpolation and no channel-aware conversion take place, which makes this
the fastest and lowest quality method and valid for every pixel format.
"""

import logging

import taichi as ti

from .. import constants as cte
from .common import check_pair, run_on_fields, scale_factors

logger = logging.getLogger(__name__)


@ti.kernel
def nearest_neighbor_kernel(
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
    Copy ``bpp`` bytes per destination pixel from the source pixel at
    ``(floor(x * x_factor), floor(y * y_factor))``.

    Args:
        source_field: Flat u8 source bytes (src_stride * src_h)
        target_field: Flat u8 destination bytes (dst_stride * dst_h)
        x_factor: src_w / dst_w
        y_factor: src_h / dst_h
    """
    for y, x in ti.ndrange(dst_h, dst_w):
        sy = ti.min(ti.floor(ti.cast(y, cte.FLOAT_TYPE_TI) * y_factor, dtype=cte.INT_TYPE_TI), src_h - 1)
        sx = ti.min(ti.floor(ti.cast(x, cte.FLOAT_TYPE_TI) * x_factor, dtype=cte.INT_TYPE_TI), src_w - 1)

        src_base = sy * src_stride + sx * bpp
        dst_base = y * dst_stride + x * bpp
        for b in range(bpp):
            target_field[dst_base + b] = source_field[src_base + b]


def nearest_neighbor(source, destination):
    """
    Resample ``source`` into ``destination`` by nearest neighbour.

    Args:
        source: PixelBuffer to read
        destination: PixelBuffer of the target size, same pixel format

    Raises:
        SizeMismatchError: pixel formats differ
    """
    check_pair(source, destination)
    x_factor, y_factor = scale_factors(source, destination)
    logger.debug(
        "Nearest-neighbour %dx%d -> %dx%d", source.width, source.height,
        destination.width, destination.height,
    )

    def launch(src, dst):
        nearest_neighbor_kernel(
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


__all__ = ["nearest_neighbor", "nearest_neighbor_kernel"]
