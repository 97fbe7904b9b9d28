"""
Raw pixel buffer with format metadata.

A ``PixelBuffer`` is a flat ``numpy.uint8`` array plus ``width``, ``height``,
``stride`` and ``PixelFormat``. Row ``y`` starts at byte ``y * stride``;
pixel ``x`` of that row starts ``x * bytes_per_pixel`` bytes further. Every
public accessor bounds-checks its coordinates before touching memory.

Buffers are created either owning zero-filled memory (``allocate``) or as a
non-owning view over caller memory (``wrap``). ``release()`` is idempotent and
a view never frees what it wraps. Buffers are context managers:

    with PixelBuffer.allocate(64, 48, PixelFormat.RGB24) as buf:
        buf.set_pixel(0, 0, 255, 0, 0)
"""

import logging
from typing import NamedTuple

import numpy as np

from .. import constants as cte
from ..errors import (
    BufferReleasedError,
    OutOfRangeError,
    SizeMismatchError,
    UnsupportedFormatError,
)
from .formats import PixelFormat, aligned_stride, min_stride

logger = logging.getLogger(__name__)


class Color(NamedTuple):
    r: int
    g: int
    b: int
    a: int = 255


def luma(r, g, b):
    """Grey level of an RGB triple, truncated to an integer."""
    return int(cte.LUMA_RED * r + cte.LUMA_GREEN * g + cte.LUMA_BLUE * b)


def _check_byte(name, value):
    if not 0 <= value <= 255:
        raise ValueError(f"{name} must be in [0, 255], got {value}")
    return int(value)


class PixelBuffer:
    """
    Bounds-checked raw image memory.

    Use ``PixelBuffer.allocate`` or ``PixelBuffer.wrap`` rather than the
    constructor.
    """

    def __init__(self, data, width, height, stride, pixel_format, owns_data=True):
        pixel_format = PixelFormat.parse(pixel_format)
        width = int(width)
        height = int(height)
        stride = int(stride)

        if width <= 0 or height <= 0:
            raise SizeMismatchError(f"Invalid image size {width}x{height}")
        if stride < min_stride(width, pixel_format):
            raise SizeMismatchError(
                f"Stride {stride} is smaller than {width} x {pixel_format.bytes_per_pixel} bytes"
            )
        if data.size < stride * height:
            raise SizeMismatchError(
                f"Buffer holds {data.size} bytes, {stride * height} required"
            )

        self._data = data
        self.width = width
        self.height = height
        self.stride = stride
        self.pixel_format = pixel_format
        self.owns_data = owns_data

    # ------------------------------------------------------------------
    # Construction and lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def allocate(cls, width, height, pixel_format):
        """
        Allocate a zero-filled buffer with a 4-byte aligned stride.

        Args:
            width: Width in pixels (> 0)
            height: Height in pixels (> 0)
            pixel_format: PixelFormat member or its name

        Returns:
            PixelBuffer: owning buffer

        Raises:
            SizeMismatchError: width or height <= 0
        """
        pixel_format = PixelFormat.parse(pixel_format)
        if width <= 0 or height <= 0:
            raise SizeMismatchError(f"Invalid image size {width}x{height}")
        stride = aligned_stride(width, pixel_format)
        data = np.zeros(stride * height, dtype=np.uint8)
        logger.debug(
            "Allocated %dx%d %s buffer (stride %d)", width, height, pixel_format.name, stride
        )
        return cls(data, width, height, stride, pixel_format, owns_data=True)

    @classmethod
    def wrap(cls, data, width, height, stride, pixel_format):
        """
        Create a non-owning view over existing memory.

        Args:
            data: C-contiguous ``uint8`` ndarray, or any object exposing the
                buffer protocol (``bytearray``, ``memoryview``, ``bytes``).
                Read-only objects give a read-only view.
            width, height: Image size in pixels
            stride: Bytes per row, at least ``width * bytes_per_pixel``
            pixel_format: PixelFormat member or its name

        Returns:
            PixelBuffer: view sharing memory with ``data``
        """
        if isinstance(data, np.ndarray):
            if data.dtype != np.uint8:
                raise TypeError(f"Wrapped arrays must be uint8, got {data.dtype}")
            if not data.flags.c_contiguous:
                raise TypeError("Wrapped arrays must be C-contiguous")
            flat = data.reshape(-1)
        else:
            flat = np.frombuffer(data, dtype=np.uint8)
        return cls(flat, width, height, stride, pixel_format, owns_data=False)

    def release(self):
        """Drop the memory. Safe to call any number of times."""
        if self._data is None:
            return
        if self.owns_data:
            logger.debug("Released %dx%d %s buffer", self.width, self.height, self.pixel_format.name)
        self._data = None

    @property
    def released(self):
        return self._data is None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def __repr__(self):
        state = "released" if self.released else ("owned" if self.owns_data else "view")
        return (
            f"PixelBuffer({self.width}x{self.height}, {self.pixel_format.name}, "
            f"stride={self.stride}, {state})"
        )

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @property
    def data(self):
        """Underlying flat byte array. Raises once the buffer is released."""
        if self._data is None:
            raise BufferReleasedError("Buffer memory has been released")
        return self._data

    @property
    def bytes_per_pixel(self):
        return self.pixel_format.bytes_per_pixel

    @property
    def descriptor(self):
        return self.pixel_format.descriptor

    @property
    def nbytes(self):
        return self.stride * self.height

    @property
    def size(self):
        return (self.width, self.height)

    def same_shape(self, other):
        return (
            self.width == other.width
            and self.height == other.height
            and self.pixel_format == other.pixel_format
        )

    def contains(self, x, y):
        return 0 <= x < self.width and 0 <= y < self.height

    def _check_bounds(self, x, y):
        if not self.contains(x, y):
            raise OutOfRangeError(x, y, self.width, self.height)

    def pixel_offset(self, x, y):
        """Byte offset of pixel ``(x, y)``. Bounds-checked."""
        self._check_bounds(x, y)
        return y * self.stride + x * self.bytes_per_pixel

    def rows(self):
        """2-D ``(height, stride)`` view of the buffer rows, padding included."""
        return self.data[: self.nbytes].reshape(self.height, self.stride)

    # ------------------------------------------------------------------
    # Pixel access
    # ------------------------------------------------------------------

    def get_pixel(self, x, y):
        """
        Read pixel ``(x, y)`` as a ``Color``.

        Defined for GRAY8 (index expanded to grey), RGB24, RGB32 and ARGB32.

        Raises:
            OutOfRangeError: coordinates outside the image
            UnsupportedFormatError: 16-bit formats
        """
        offset = self.pixel_offset(x, y)
        data = self.data
        fmt = self.pixel_format

        if fmt is PixelFormat.GRAY8:
            v = int(data[offset])
            return Color(v, v, v)
        if fmt in (PixelFormat.RGB24, PixelFormat.RGB32):
            return Color(
                int(data[offset + cte.RED]),
                int(data[offset + cte.GREEN]),
                int(data[offset + cte.BLUE]),
            )
        if fmt is PixelFormat.ARGB32:
            return Color(
                int(data[offset + cte.RED]),
                int(data[offset + cte.GREEN]),
                int(data[offset + cte.BLUE]),
                int(data[offset + cte.ALPHA]),
            )
        raise UnsupportedFormatError(fmt, "get_pixel")

    def _native_pixel(self, r, g, b, a):
        """Encode an RGBA colour as the channel values written by set_pixel."""
        fmt = self.pixel_format
        if fmt in (PixelFormat.GRAY8, PixelFormat.GRAY16):
            grey = luma(r, g, b)
            return [grey << 8 if fmt is PixelFormat.GRAY16 else grey]

        shift = 8 if fmt.channel_bytes == 2 else 0
        values = [b << shift, g << shift, r << shift]
        if fmt.descriptor.has_alpha:
            values.append(a << shift)
        return values

    def _store(self, offset, values):
        data = self.data
        if self.pixel_format.channel_bytes == 1:
            for c, v in enumerate(values):
                data[offset + c] = v
        else:
            for c, v in enumerate(values):
                data[offset + 2 * c] = v & 0xFF
                data[offset + 2 * c + 1] = (v >> 8) & 0xFF

    def set_pixel(self, x, y, r, g, b, a=255):
        """
        Write an RGBA colour at ``(x, y)``, converted to the native format.

        Grey formats store the luma of the colour (shifted to the high byte
        for GRAY16). 16-bit colour formats store each 8-bit value shifted left
        by 8. Alpha is written only by formats that carry it.

        Raises:
            OutOfRangeError: coordinates outside the image
            ValueError: a channel value outside [0, 255]
        """
        offset = self.pixel_offset(x, y)
        values = self._native_pixel(
            _check_byte("r", r), _check_byte("g", g), _check_byte("b", b), _check_byte("a", a)
        )
        self._store(offset, values)

    def set_pixels(self, points, r, g, b, a=255):
        """
        Write one colour at many coordinates.

        Points outside the image are skipped rather than rejected.

        Args:
            points: iterable of ``(x, y)`` pairs
        """
        values = self._native_pixel(
            _check_byte("r", r), _check_byte("g", g), _check_byte("b", b), _check_byte("a", a)
        )
        bpp = self.bytes_per_pixel
        for x, y in points:
            if self.contains(x, y):
                self._store(y * self.stride + x * bpp, values)

    # ------------------------------------------------------------------
    # Bulk access
    # ------------------------------------------------------------------

    def channels(self):
        """
        Copy of the pixel data as a ``(height, width, channel_count)`` array.

        Channels are in native order (B, G, R, slot); dtype is ``uint8`` or
        little-endian ``uint16`` depending on the format.
        """
        desc = self.descriptor
        packed = np.ascontiguousarray(self.rows()[:, : self.width * desc.bytes_per_pixel])
        values = packed.view(desc.numpy_dtype)
        return values.reshape(self.height, self.width, desc.channel_count)

    def write_channels(self, values):
        """
        Overwrite the pixel data from a ``(height, width, channel_count)`` array.

        Row padding is left untouched.

        Raises:
            SizeMismatchError: array shape does not match the buffer
            ValueError: a value lies outside [0, channel_max]
        """
        desc = self.descriptor
        values = np.asarray(values)
        expected = (self.height, self.width, desc.channel_count)
        if values.ndim == 2 and desc.channel_count == 1:
            values = values[:, :, None]
        if values.shape != expected:
            raise SizeMismatchError(f"Expected channel array of shape {expected}, got {values.shape}")
        if values.size and (values.min() < 0 or values.max() > desc.channel_max):
            raise ValueError(
                f"Channel values must be in [0, {desc.channel_max}], "
                f"got [{values.min()}, {values.max()}]"
            )
        packed = np.ascontiguousarray(values.astype(desc.numpy_dtype, copy=False))
        row_bytes = self.width * desc.bytes_per_pixel
        self.rows()[:, :row_bytes] = packed.view(np.uint8).reshape(self.height, row_bytes)

    def collect_active_pixels(self, rect=None):
        """
        Coordinates of pixels whose colour channels are not all zero.

        Args:
            rect: optional ``(x, y, width, height)`` region, intersected with
                the image

        Returns:
            list of ``(x, y)`` tuples in row-major order
        """
        x0, y0, x1, y1 = 0, 0, self.width, self.height
        if rect is not None:
            rx, ry, rw, rh = rect
            x0, y0 = max(rx, 0), max(ry, 0)
            x1, y1 = min(rx + rw, self.width), min(ry + rh, self.height)
            if x0 >= x1 or y0 >= y1:
                return []

        colour = self.channels()[y0:y1, x0:x1, : self.descriptor.color_channels]
        ys, xs = np.nonzero(colour.any(axis=2))
        return [(int(x) + x0, int(y) + y0) for y, x in zip(ys, xs)]

    def collect_pixel_values(self, points):
        """
        Gather channel values at ``points``.

        Grey formats yield one value per point; colour formats yield R, G, B
        per point (the fourth slot is not included). 8-bit formats return a
        ``uint8`` array, 16-bit formats a ``uint16`` array.
        """
        desc = self.descriptor
        dtype = np.uint16 if desc.channel_bytes == 2 else np.uint8
        points = list(points)
        for x, y in points:
            self._check_bounds(x, y)

        chans = self.channels()
        if desc.is_gray:
            return np.array([chans[y, x, 0] for x, y in points], dtype=dtype)

        out = np.empty(len(points) * 3, dtype=dtype)
        for i, (x, y) in enumerate(points):
            out[3 * i] = chans[y, x, cte.RED]
            out[3 * i + 1] = chans[y, x, cte.GREEN]
            out[3 * i + 2] = chans[y, x, cte.BLUE]
        return out

    def grayscale_palette(self):
        """
        Identity grey palette of indexed GRAY8 images.

        Returns:
            ``(256, 3)`` ``uint8`` array mapping index ``i`` to ``(i, i, i)``

        Raises:
            UnsupportedFormatError: buffer is not GRAY8
        """
        if self.pixel_format is not PixelFormat.GRAY8:
            raise UnsupportedFormatError(self.pixel_format, "grayscale_palette")
        ramp = np.arange(256, dtype=np.uint8)
        return np.stack([ramp, ramp, ramp], axis=1)

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------

    def copy(self, dst):
        """
        Copy this buffer's rows into ``dst``.

        Both buffers must share width, height and format. When strides differ
        only ``min(self.stride, dst.stride)`` bytes of each row are copied.

        Raises:
            SizeMismatchError: size or format differ
        """
        if not self.same_shape(dst):
            raise SizeMismatchError("Destination image has different size or pixel format")
        n = min(self.stride, dst.stride)
        dst.rows()[:, :n] = self.rows()[:, :n]

    def clone(self):
        """Owning deep copy with the same stride."""
        data = np.array(self.data[: self.nbytes], dtype=np.uint8, copy=True)
        return PixelBuffer(data, self.width, self.height, self.stride, self.pixel_format, owns_data=True)


__all__ = ["PixelBuffer", "Color", "luma"]
