"""Edge analysis module for PyAntialias: Laplacian blur and aliasing detection."""

from .laplacian import (
    BlurReport,
    GradientMode,
    default_threshold,
    detect_blur,
    has_aliasing,
    laplacian_kernel,
    laplacian_response,
    scan_gradient_magnitude,
    scan_legacy_gradient,
)

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
