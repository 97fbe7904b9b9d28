"""
Pixel format table.

Every supported layout is described once by a ``FormatDescriptor``; kernels
and accessors derive byte offsets from it instead of special-casing formats.
Channels are ordered blue, green, red, then the optional fourth slot (alpha
for the ARGB formats, an unused padding byte for RGB32). 16-bit channels are
little-endian.
"""

from dataclasses import dataclass
from enum import Enum

from .. import constants as cte
from ..errors import UnsupportedFormatError


@dataclass(frozen=True)
class FormatDescriptor:
    """
    Byte layout of a pixel format.

    Attributes:
        bytes_per_pixel: Size of one pixel in bytes
        channel_bytes: Size of one channel (1 or 2)
        color_channels: 1 for grey formats, 3 for B,G,R formats
        has_slot: True when a fourth channel follows the colour channels
        has_alpha: True when that fourth channel carries alpha
    """

    bytes_per_pixel: int
    channel_bytes: int
    color_channels: int
    has_slot: bool = False
    has_alpha: bool = False

    @property
    def channel_count(self):
        return self.color_channels + (1 if self.has_slot else 0)

    @property
    def channel_max(self):
        return (1 << (8 * self.channel_bytes)) - 1

    @property
    def slot_offset(self):
        """Byte offset of the fourth channel, or None when there is none."""
        if not self.has_slot:
            return None
        return self.color_channels * self.channel_bytes

    @property
    def is_gray(self):
        return self.color_channels == 1

    def channel_offset(self, channel):
        """Byte offset of ``channel`` (``cte.BLUE``..``cte.ALPHA``) inside a pixel."""
        if not 0 <= channel < self.channel_count:
            raise IndexError(f"Channel {channel} does not exist in this format")
        return channel * self.channel_bytes

    @property
    def numpy_dtype(self):
        return "<u2" if self.channel_bytes == 2 else "u1"


_DESCRIPTORS = {
    "gray8": FormatDescriptor(1, 1, 1),
    "gray16": FormatDescriptor(2, 2, 1),
    "rgb24": FormatDescriptor(3, 1, 3),
    "rgb32": FormatDescriptor(4, 1, 3, has_slot=True),
    "argb32": FormatDescriptor(4, 1, 3, has_slot=True, has_alpha=True),
    "rgb48": FormatDescriptor(6, 2, 3),
    "argb64": FormatDescriptor(8, 2, 3, has_slot=True, has_alpha=True),
}


class PixelFormat(Enum):
    """Closed set of pixel formats understood by the core."""

    GRAY8 = "gray8"
    GRAY16 = "gray16"
    RGB24 = "rgb24"
    RGB32 = "rgb32"
    ARGB32 = "argb32"
    RGB48 = "rgb48"
    ARGB64 = "argb64"

    @property
    def descriptor(self):
        return _DESCRIPTORS[self.value]

    @property
    def bytes_per_pixel(self):
        return self.descriptor.bytes_per_pixel

    @property
    def channel_bytes(self):
        return self.descriptor.channel_bytes

    @property
    def channel_count(self):
        return self.descriptor.channel_count

    @property
    def channel_max(self):
        return self.descriptor.channel_max

    @classmethod
    def parse(cls, value):
        """
        Coerce a ``PixelFormat`` or its name (case-insensitive) to a member.

        Raises:
            UnsupportedFormatError: unknown format name
            TypeError: value is neither a PixelFormat nor a string
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                raise UnsupportedFormatError(value) from None
        raise TypeError(f"pixel_format must be a PixelFormat or str, got {type(value).__name__}")


def min_stride(width, pixel_format):
    """Smallest legal stride for ``width`` pixels."""
    return width * PixelFormat.parse(pixel_format).bytes_per_pixel


def aligned_stride(width, pixel_format, alignment=cte.STRIDE_ALIGNMENT):
    """Row length rounded up to ``alignment`` bytes, as used by ``allocate``."""
    stride = min_stride(width, pixel_format)
    remainder = stride % alignment
    if remainder:
        stride += alignment - remainder
    return stride


__all__ = ["FormatDescriptor", "PixelFormat", "min_stride", "aligned_stride"]
