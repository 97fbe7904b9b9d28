"""
Blur and aliasing detection with a Laplacian edge filter.

The source is convolved with the 4-neighbour Laplacian into a working buffer
of the same size and format, and the working buffer is scanned for its
strongest gradient. An image whose strongest gradient stays below the
threshold is considered blurred; one that exceeds it has hard edges and is
reported as aliased.

Two scans are available through ``GradientMode``:

- ``MAGNITUDE`` (default): the largest colour-channel value of the working
  buffer, compared against ``DEFAULT_SHARPNESS_RATIO * channel_max``.
- ``LEGACY_BITCAST``: reads the working buffer rows as little-endian float32
  words at word index ``0, bpp, 2 * bpp, ... < width // bpp`` and compares
  the largest against ``1e10``. This reproduces historical results byte for
  byte; the values it sees are reinterpreted pixel bytes, not gradients.
"""

import logging
from enum import Enum
from typing import NamedTuple

import numpy as np

from .. import constants as cte
from ..buffer import PixelBuffer
from ..convolution import Kernel, convolve_into, convolve_response

logger = logging.getLogger(__name__)


class GradientMode(Enum):
    MAGNITUDE = "magnitude"
    LEGACY_BITCAST = "legacy_bitcast"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                names = ", ".join(repr(m.value) for m in cls)
                raise ValueError(f"mode must be one of {names}, got {value!r}") from None
        raise TypeError(f"mode must be a GradientMode or str, got {type(value).__name__}")


class BlurReport(NamedTuple):
    is_blurred: bool
    max_gradient: float


def laplacian_kernel():
    """The 3x3 Laplacian with divisor 1 and no threshold."""
    return Kernel(cte.LAPLACIAN_KERNEL, divisor=1, threshold=0)


def laplacian_response(source):
    """Signed Laplacian response per colour channel, ``(h, w, channels)`` int64."""
    return convolve_response(source, laplacian_kernel())


def scan_gradient_magnitude(buffer):
    """Largest colour-channel value of ``buffer`` as a float."""
    colour = buffer.channels()[:, :, : buffer.descriptor.color_channels]
    return float(colour.max())


def scan_legacy_gradient(buffer):
    """
    Largest float32 found by reinterpreting ``buffer`` rows as words.

    Row ``y`` is read at byte offsets ``y * stride + 4 * x`` for
    ``x = 0, bpp, 2 * bpp, ...`` while ``x < width // bpp``. Words that would
    run past the end of the buffer are skipped and NaN values are ignored.
    The scan starts from ``LEGACY_GRADIENT_FLOOR``.
    """
    data = buffer.data[: buffer.nbytes]
    bpp = buffer.bytes_per_pixel
    best = cte.LEGACY_GRADIENT_FLOOR

    xs = np.arange(0, buffer.width // bpp, bpp, dtype=np.int64)
    if xs.size == 0:
        return best

    rows = np.arange(buffer.height, dtype=np.int64)[:, None] * buffer.stride
    offsets = (rows + 4 * xs[None, :]).reshape(-1)
    offsets = offsets[offsets + 4 <= data.size]
    if offsets.size == 0:
        return best

    words = np.ascontiguousarray(data[offsets[:, None] + np.arange(4)])
    values = words.view("<f4").reshape(-1)
    values = values[~np.isnan(values)]
    if values.size:
        best = max(best, float(values.max()))
    return best


def default_threshold(mode, descriptor):
    """Blur threshold used when ``detect_blur`` is called without one."""
    if mode is GradientMode.LEGACY_BITCAST:
        return cte.LEGACY_GRADIENT_THRESHOLD
    return cte.DEFAULT_SHARPNESS_RATIO * descriptor.channel_max


def detect_blur(source, mode=GradientMode.MAGNITUDE, threshold=None):
    """
    Decide whether ``source`` is blurred.

    Args:
        source: PixelBuffer to analyse
        mode: GradientMode or its name
        threshold: Gradient below which the image counts as blurred.
            Defaults to ``default_threshold(mode, source.descriptor)``.

    Returns:
        BlurReport: ``(is_blurred, max_gradient)``
    """
    mode = GradientMode.parse(mode)
    if threshold is None:
        threshold = default_threshold(mode, source.descriptor)

    with PixelBuffer.allocate(source.width, source.height, source.pixel_format) as work:
        convolve_into(source, work, laplacian_kernel())
        if mode is GradientMode.LEGACY_BITCAST:
            max_gradient = scan_legacy_gradient(work)
        else:
            max_gradient = scan_gradient_magnitude(work)

    report = BlurReport(bool(max_gradient < threshold), max_gradient)
    logger.debug(
        "Blur scan (%s): max gradient %g, threshold %g, blurred=%s",
        mode.value, max_gradient, threshold, report.is_blurred,
    )
    return report


def has_aliasing(source, mode=GradientMode.MAGNITUDE, threshold=None):
    """True when ``source`` has edges sharp enough to alias on resampling."""
    return not detect_blur(source, mode=mode, threshold=threshold).is_blurred


__all__ = [
    "GradientMode",
    "BlurReport",
    "laplacian_kernel",
    "laplacian_response",
    "scan_gradient_magnitude",
    "scan_legacy_gradient",
    "default_threshold",
    "detect_blur",
    "has_aliasing",
]
