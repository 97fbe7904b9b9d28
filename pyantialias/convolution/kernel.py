"""Convolution kernel value type."""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .. import constants as cte
from ..errors import InvalidDivisorError, InvalidKernelError


def _as_int(value, what="Kernel weight", error=InvalidKernelError):
    if isinstance(value, (bool, np.bool_)):
        raise error(f"{what} must be an integer, got a boolean")
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return int(value)
    raise error(f"{what} must be an integer, got {value!r}")


def _normalise_weights(weights):
    if isinstance(weights, np.ndarray):
        weights = weights.tolist()
    try:
        rows = [list(row) for row in weights]
    except TypeError:
        raise InvalidKernelError("Kernel weights must be a square matrix") from None

    size = len(rows)
    if any(len(row) != size for row in rows):
        raise InvalidKernelError("Kernel weights must be a square matrix")
    if size % 2 == 0:
        raise InvalidKernelError(f"Kernel size must be odd, got {size}")
    if not cte.KERNEL_MIN_SIZE <= size <= cte.KERNEL_MAX_SIZE:
        raise InvalidKernelError(
            f"Kernel size must be in [{cte.KERNEL_MIN_SIZE}, {cte.KERNEL_MAX_SIZE}], got {size}"
        )
    return tuple(tuple(_as_int(v) for v in row) for row in rows)


@dataclass(frozen=True)
class Kernel:
    """
    Square integer convolution kernel.

    Attributes:
        weights: Odd-sized square matrix of integers, side in [3, 99]
        divisor: Normalisation divisor. Defaults to the sum of the weights,
            or 1 when they sum to zero. An explicit 0 is rejected.
        threshold: Offset added to every result after division
        dynamic_divisor_at_edges: When the kernel window is clipped by the
            image border, divide by the sum of the in-bounds weights instead
            of ``divisor``
        process_alpha: Convolve the fourth channel slot too; otherwise it is
            copied from the source

    Raises:
        InvalidKernelError: weights are not an odd square matrix of integers
        InvalidDivisorError: divisor is 0 or not an integer
    """

    weights: tuple
    divisor: Optional[int] = None
    threshold: int = 0
    dynamic_divisor_at_edges: bool = False
    process_alpha: bool = False

    def __post_init__(self):
        weights = _normalise_weights(self.weights)
        object.__setattr__(self, "weights", weights)

        if self.divisor is None:
            total = sum(sum(row) for row in weights)
            divisor = total if total != 0 else 1
        else:
            divisor = _as_int(self.divisor, "Kernel divisor", InvalidDivisorError)
            if divisor == 0:
                raise InvalidDivisorError("Kernel divisor must not be zero")
        object.__setattr__(self, "divisor", divisor)
        object.__setattr__(self, "threshold", int(self.threshold))
        object.__setattr__(self, "dynamic_divisor_at_edges", bool(self.dynamic_divisor_at_edges))
        object.__setattr__(self, "process_alpha", bool(self.process_alpha))

    @property
    def size(self):
        return len(self.weights)

    @property
    def radius(self):
        return self.size // 2

    def as_array(self):
        """Weights as a ``(size, size)`` ``int64`` array."""
        return np.array(self.weights, dtype=np.int64)


def as_kernel(kernel):
    """Accept a Kernel or a bare weight matrix."""
    if isinstance(kernel, Kernel):
        return kernel
    if isinstance(kernel, (list, tuple, np.ndarray)):
        return Kernel(kernel)
    raise TypeError(f"kernel must be a Kernel or a weight matrix, got {type(kernel).__name__}")


__all__ = ["Kernel", "as_kernel"]
