"""
Resampling entry points.

Dispatches a (source, destination) pair to one of the three resampling
algorithms. ``resample`` allocates the destination, ``resample_into`` writes
into a caller-provided one (useful to reuse memory or to keep a custom
stride).
"""

import logging
from enum import Enum

from ..buffer import PixelBuffer
from .bicubic import bicubic
from .bilinear import bilinear
from .common import check_pair
from .nearest import nearest_neighbor

logger = logging.getLogger(__name__)


class ResamplingMethod(Enum):
    NEAREST_NEIGHBOR = "nearest_neighbor"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"

    @classmethod
    def parse(cls, value):
        """Coerce a member or its name (case-insensitive) to a member."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                names = ", ".join(repr(m.value) for m in cls)
                raise ValueError(f"method must be one of {names}, got {value!r}") from None
        raise TypeError(f"method must be a ResamplingMethod or str, got {type(value).__name__}")


_DISPATCH = {
    ResamplingMethod.NEAREST_NEIGHBOR: nearest_neighbor,
    ResamplingMethod.BILINEAR: bilinear,
    ResamplingMethod.BICUBIC: bicubic,
}


def resample_into(source, destination, method=ResamplingMethod.NEAREST_NEIGHBOR):
    """
    Resample ``source`` into the pre-allocated ``destination``.

    The scale factors are taken from the two buffer sizes.

    Args:
        source: PixelBuffer to read
        destination: PixelBuffer to overwrite, same pixel format as source
        method: ResamplingMethod or its name

    Returns:
        PixelBuffer: ``destination``

    Raises:
        SizeMismatchError: pixel formats differ
        BufferReleasedError: either buffer was released
    """
    method = ResamplingMethod.parse(method)
    check_pair(source, destination)
    logger.debug("Resampling with %s", method.value)
    _DISPATCH[method](source, destination)
    return destination


def resample(source, width, height, method=ResamplingMethod.NEAREST_NEIGHBOR):
    """
    Resample ``source`` to a new ``width`` x ``height`` buffer.

    Args:
        source: PixelBuffer to read
        width: Target width in pixels (> 0)
        height: Target height in pixels (> 0)
        method: ResamplingMethod or its name

    Returns:
        PixelBuffer: newly allocated, same pixel format as ``source``

    Raises:
        SizeMismatchError: width or height <= 0
    """
    method = ResamplingMethod.parse(method)
    destination = PixelBuffer.allocate(width, height, source.pixel_format)
    try:
        resample_into(source, destination, method)
    except Exception:
        destination.release()
        raise
    return destination


__all__ = ["ResamplingMethod", "resample", "resample_into"]
