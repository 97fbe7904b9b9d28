"""
Exception hierarchy for PyAntialias.

All failures are raised synchronously to the immediate caller. Each concrete
error also derives from the closest builtin exception so callers catching
``ValueError`` or ``IndexError`` keep working.
"""


class PixelBufferError(Exception):
    """Base class for every error raised by the package."""


class OutOfRangeError(PixelBufferError, IndexError):
    """A pixel coordinate lies outside ``[0, width) x [0, height)``."""

    def __init__(self, x, y, width, height):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        super().__init__(
            f"Pixel ({x}, {y}) is out of bounds for a {width}x{height} buffer"
        )


class UnsupportedFormatError(PixelBufferError, ValueError):
    """The operation has no defined behaviour for this pixel format."""

    def __init__(self, pixel_format, operation=None):
        self.pixel_format = pixel_format
        self.operation = operation
        name = getattr(pixel_format, "name", pixel_format)
        if operation:
            message = f"Pixel format {name} is not supported by {operation}"
        else:
            message = f"Pixel format {name} is not supported"
        super().__init__(message)


class InvalidKernelError(PixelBufferError, ValueError):
    """Kernel is not square, has an even side or a side outside [3, 99]."""


class InvalidDivisorError(PixelBufferError, ValueError):
    """An explicit divisor is zero or not an integer."""


class SizeMismatchError(PixelBufferError, ValueError):
    """Buffer dimensions, stride or format are incompatible with the request."""


class BufferReleasedError(PixelBufferError, RuntimeError):
    """The buffer memory was already released."""


__all__ = [
    "PixelBufferError",
    "OutOfRangeError",
    "UnsupportedFormatError",
    "InvalidKernelError",
    "InvalidDivisorError",
    "SizeMismatchError",
    "BufferReleasedError",
]
