"""
Adapters between PixelBuffer and decoded images.

Decoding and encoding image files is left to Pillow; these helpers only move
pixel data between a ``PIL.Image.Image`` (or a NumPy array) and the raw
B,G,R[,A] byte layout of a PixelBuffer.

Supported Pillow modes:
    L      <-> GRAY8
    I;16   <-> GRAY16
    RGB    <-> RGB24 (RGB32 exports as RGB, dropping the padding byte)
    RGBA   <-> ARGB32
"""

import numpy as np
from PIL import Image

from ..errors import SizeMismatchError, UnsupportedFormatError
from .formats import PixelFormat
from .pixel_buffer import PixelBuffer

_MODE_TO_FORMAT = {
    "L": PixelFormat.GRAY8,
    "I;16": PixelFormat.GRAY16,
    "RGB": PixelFormat.RGB24,
    "RGBA": PixelFormat.ARGB32,
}

# RGB(A) order -> native B,G,R(,A) order; the permutation is its own inverse
_SWAP_RGB = [2, 1, 0]
_SWAP_RGBA = [2, 1, 0, 3]


def from_array(array, pixel_format):
    """
    Build an owning PixelBuffer from channel values in native order.

    Args:
        array: ``(height, width)`` for grey formats or
            ``(height, width, channel_count)`` with channels B, G, R[, slot]
        pixel_format: PixelFormat member or its name

    Returns:
        PixelBuffer

    Raises:
        ValueError: a value lies outside the format's channel range
    """
    pixel_format = PixelFormat.parse(pixel_format)
    array = np.asarray(array)
    if array.ndim not in (2, 3):
        raise SizeMismatchError("Input array must be 2D or 3D")
    height, width = array.shape[:2]
    buffer = PixelBuffer.allocate(width, height, pixel_format)
    buffer.write_channels(array)
    return buffer


def to_array(buffer):
    """
    Channel values of ``buffer`` in native order.

    Returns:
        ``(height, width)`` array for grey formats, otherwise
        ``(height, width, channel_count)``
    """
    values = buffer.channels()
    if buffer.descriptor.is_gray:
        return values[:, :, 0]
    return values


def from_pillow(image):
    """
    Convert a Pillow image to an owning PixelBuffer.

    Raises:
        UnsupportedFormatError: the image mode has no matching pixel format
    """
    pixel_format = _MODE_TO_FORMAT.get(image.mode)
    if pixel_format is None:
        raise UnsupportedFormatError(image.mode, "from_pillow")

    pixels = np.asarray(image)
    if image.mode == "RGB":
        pixels = pixels[:, :, _SWAP_RGB]
    elif image.mode == "RGBA":
        pixels = pixels[:, :, _SWAP_RGBA]
    return from_array(pixels, pixel_format)


def to_pillow(buffer):
    """
    Convert a PixelBuffer to a new Pillow image.

    Raises:
        UnsupportedFormatError: RGB48 and ARGB64 have no Pillow equivalent
    """
    fmt = buffer.pixel_format
    values = to_array(buffer)

    if fmt is PixelFormat.GRAY8:
        return Image.fromarray(np.ascontiguousarray(values, dtype=np.uint8))
    if fmt is PixelFormat.GRAY16:
        return Image.fromarray(np.ascontiguousarray(values, dtype=np.uint16))
    if fmt in (PixelFormat.RGB24, PixelFormat.RGB32):
        return Image.fromarray(np.ascontiguousarray(values[:, :, _SWAP_RGB]))
    if fmt is PixelFormat.ARGB32:
        return Image.fromarray(np.ascontiguousarray(values[:, :, _SWAP_RGBA]))
    raise UnsupportedFormatError(fmt, "to_pillow")


__all__ = ["from_array", "to_array", "from_pillow", "to_pillow"]
