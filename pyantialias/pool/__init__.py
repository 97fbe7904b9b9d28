"""
Memory pool for Taichi working fields.

Kernels in PyAntialias never allocate Taichi fields directly; they check
fields out of the global ``taipool`` and release them when done.
"""

from . import pool
from .pool import TaiPool, TPField, get_temp_field, taipool

__all__ = ["pool", "TaiPool", "TPField", "taipool", "get_temp_field"]
