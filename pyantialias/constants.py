"""
Global constants and defaults for PyAntialias.

Holds the Taichi scalar types used by the kernels, the byte-layout constants
shared by every pixel format, and the default parameters of the convolution
and blur-detection routines.
"""

import taichi as ti

# Taichi scalar types used across kernels
INT_TYPE_TI = ti.i32
ACC_TYPE_TI = ti.i64
FLOAT_TYPE_TI = ti.f64
BYTE_TYPE_TI = ti.u8

# Rows of allocated buffers are padded to this many bytes
STRIDE_ALIGNMENT = 4

# Channel indices inside a pixel (blue at the lowest offset, alpha last)
BLUE = 0
GREEN = 1
RED = 2
ALPHA = 3

# ITU-R luma weights used when writing colour into grey formats
LUMA_RED = 0.2125
LUMA_GREEN = 0.7154
LUMA_BLUE = 0.0721

# Convolution kernel limits
KERNEL_MIN_SIZE = 3
KERNEL_MAX_SIZE = 99

LAPLACIAN_KERNEL = (
    (0, 1, 0),
    (1, -4, 1),
    (0, 1, 0),
)

# Added to normalised float results before truncating to an integer channel
TRUNCATION_EPSILON = 1e-6

# Blur detection
LEGACY_GRADIENT_THRESHOLD = 1e10
LEGACY_GRADIENT_FLOOR = -32768.0
DEFAULT_SHARPNESS_RATIO = 0.25
