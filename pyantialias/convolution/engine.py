"""
Generic N x N convolution over PixelBuffers.

The work is split in two kernels. ``convolve_response_kernel`` computes the
signed, unclamped response of every convolved channel into an ``i64`` field
(weighted sum over in-bounds cells, division truncated toward zero, plus the
threshold). ``pack_response_kernel`` clamps those responses to the channel
range and writes them into the destination bytes, copying the fourth slot
through from the source when it is not convolved.

Boundary policy: cells of the kernel window outside the image are skipped.
With ``dynamic_divisor_at_edges`` a clipped window divides by the sum of
the weights it actually used, so edge pixels keep the same normalisation as
interior ones.
"""

import logging

import numpy as np
import taichi as ti

from .. import constants as cte
from .. import pool
from ..buffer import PixelBuffer, fields
from ..errors import BufferReleasedError, SizeMismatchError
from ..general_algorithms import util_taichi as ut
from .kernel import as_kernel

logger = logging.getLogger(__name__)


@ti.kernel
def convolve_response_kernel(
    source_field: ti.template(),
    weights: ti.template(),
    response: ti.template(),
    width: ti.i32,
    height: ti.i32,
    stride: ti.i32,
    bpp: ti.i32,
    channel_bytes: ti.i32,
    n_channels: ti.i32,
    size: ti.i32,
    divisor: cte.ACC_TYPE_TI,
    threshold: cte.ACC_TYPE_TI,
    dynamic_divisor: ti.i32,
):
    """
    Signed convolution responses of the first ``n_channels`` channels.

    Args:
        source_field: Flat u8 source bytes (stride * height)
        weights: Flat i64 kernel weights, row-major (size * size)
        response: i64 output, index ``(y * width + x) * n_channels + c``
        divisor: Divisor used for unclipped windows
        threshold: Added after division
        dynamic_divisor: Non-zero to divide clipped windows by their
            in-bounds weight sum
    """
    radius = size // 2
    full = size * size

    for y, x in ti.ndrange(height, width):
        for c in range(n_channels):
            acc = ti.cast(0, cte.ACC_TYPE_TI)
            weight_sum = ti.cast(0, cte.ACC_TYPE_TI)
            processed = 0

            for i in range(size):
                sy = y + i - radius
                for j in range(size):
                    sx = x + j - radius
                    if 0 <= sy < height and 0 <= sx < width:
                        w = weights[i * size + j]
                        offset = sy * stride + sx * bpp + c * channel_bytes
                        acc += w * ut.read_channel(source_field, offset, channel_bytes)
                        weight_sum += w
                        processed += 1

            div = divisor
            if processed != full and dynamic_divisor != 0:
                div = weight_sum
            if div != 0:
                acc = ut.trunc_div(acc, div)

            response[(y * width + x) * n_channels + c] = acc + threshold


@ti.kernel
def pack_response_kernel(
    response: ti.template(),
    source_field: ti.template(),
    target_field: ti.template(),
    width: ti.i32,
    height: ti.i32,
    src_stride: ti.i32,
    dst_stride: ti.i32,
    bpp: ti.i32,
    channel_bytes: ti.i32,
    n_channels: ti.i32,
    channel_max: cte.ACC_TYPE_TI,
    copy_slot: ti.i32,
    slot_offset: ti.i32,
):
    """Clamp responses into the destination; optionally copy the slot bytes."""
    for y, x in ti.ndrange(height, width):
        dst_base = y * dst_stride + x * bpp
        for c in range(n_channels):
            value = ut.clamp_channel(response[(y * width + x) * n_channels + c], channel_max)
            ut.write_channel(target_field, dst_base + c * channel_bytes, channel_bytes, value)

        if copy_slot != 0:
            src_base = y * src_stride + x * bpp
            for b in range(channel_bytes):
                target_field[dst_base + slot_offset + b] = source_field[src_base + slot_offset + b]


def convolved_channels(descriptor, kernel):
    """Number of leading channels a kernel convolves for this format."""
    if descriptor.has_slot and kernel.process_alpha:
        return descriptor.channel_count
    return descriptor.color_channels


def _compute_response(source, kernel, source_field):
    """
    Run ``convolve_response_kernel`` on an uploaded source.

    Returns:
        TPField: checked-out i64 response field; the caller releases it
    """
    desc = source.descriptor
    n_channels = convolved_channels(desc, kernel)

    weights = pool.get_temp_field(cte.ACC_TYPE_TI, (kernel.size * kernel.size,))
    try:
        weights.field.from_numpy(kernel.as_array().reshape(-1))
        response = pool.get_temp_field(
            cte.ACC_TYPE_TI, (source.width * source.height * n_channels,)
        )
        try:
            convolve_response_kernel(
                source_field.field,
                weights.field,
                response.field,
                source.width,
                source.height,
                source.stride,
                desc.bytes_per_pixel,
                desc.channel_bytes,
                n_channels,
                kernel.size,
                kernel.divisor,
                kernel.threshold,
                1 if kernel.dynamic_divisor_at_edges else 0,
            )
        except Exception:
            response.release()
            raise
    finally:
        weights.release()
    return response


def _check_source(source):
    if source.released:
        raise BufferReleasedError("Cannot convolve a released buffer")


def convolve_response(source, kernel):
    """
    Signed per-channel convolution responses, before clamping.

    Args:
        source: PixelBuffer to convolve
        kernel: Kernel or weight matrix

    Returns:
        numpy.ndarray: ``int64`` array of shape ``(height, width, channels)``
        where ``channels`` are the convolved channels in native order
    """
    kernel = as_kernel(kernel)
    _check_source(source)
    n_channels = convolved_channels(source.descriptor, kernel)

    source_field = fields.upload(source)
    try:
        response = _compute_response(source, kernel, source_field)
        try:
            values = response.field.to_numpy()
        finally:
            response.release()
    finally:
        source_field.release()
    return values.astype(np.int64, copy=False).reshape(source.height, source.width, n_channels)


def convolve_into(source, destination, kernel):
    """
    Convolve ``source`` with ``kernel`` into ``destination``.

    Args:
        source: PixelBuffer to read
        destination: PixelBuffer of identical size and format
        kernel: Kernel or weight matrix

    Returns:
        PixelBuffer: ``destination``

    Raises:
        SizeMismatchError: size or format differ
        BufferReleasedError: either buffer was released
    """
    kernel = as_kernel(kernel)
    _check_source(source)
    if destination.released:
        raise BufferReleasedError("Cannot convolve into a released buffer")
    if not source.same_shape(destination):
        raise SizeMismatchError("Destination image has different size or pixel format")

    desc = source.descriptor
    n_channels = convolved_channels(desc, kernel)
    copy_slot = desc.has_slot and not kernel.process_alpha
    logger.debug(
        "Convolving %dx%d %s with %dx%d kernel (divisor %d, %d channels)",
        source.width, source.height, source.pixel_format.name,
        kernel.size, kernel.size, kernel.divisor, n_channels,
    )

    source_field = fields.upload(source)
    try:
        response = _compute_response(source, kernel, source_field)
        try:
            target_field = fields.upload(destination)
            try:
                pack_response_kernel(
                    response.field,
                    source_field.field,
                    target_field.field,
                    source.width,
                    source.height,
                    source.stride,
                    destination.stride,
                    desc.bytes_per_pixel,
                    desc.channel_bytes,
                    n_channels,
                    desc.channel_max,
                    1 if copy_slot else 0,
                    desc.slot_offset or 0,
                )
                fields.download(target_field, destination)
            finally:
                target_field.release()
        finally:
            response.release()
    finally:
        source_field.release()
    return destination


def convolve(source, kernel):
    """
    Convolve ``source`` with ``kernel`` into a newly allocated buffer.

    Returns:
        PixelBuffer: same size and format as ``source``
    """
    destination = PixelBuffer.allocate(source.width, source.height, source.pixel_format)
    try:
        convolve_into(source, destination, kernel)
    except Exception:
        destination.release()
        raise
    return destination


__all__ = [
    "convolve",
    "convolve_into",
    "convolve_response",
    "convolved_channels",
    "convolve_response_kernel",
    "pack_response_kernel",
]
