"""
Taichi field pool for PyAntialias.

Every kernel launch needs flat byte fields for its source and destination
buffers, and often an accumulator field. Allocating Taichi fields is slow and
each new field instance triggers a fresh compilation of the ``ti.template()``
kernels that consume it, so fields are cached by ``(dtype, shape)`` and handed
out as ``TPField`` handles that go back to the pool on ``release()``.

Usage:
    import taichi as ti
    from pyantialias import pool

    tpf = pool.taipool.get_tpfield(dtype=ti.u8, shape=(1024,))
    tpf.field.from_numpy(data)
    ...
    tpf.release()

    # or
    with pool.get_temp_field(ti.u8, 1024) as tpf:
        ...
"""

import logging

import taichi as ti

logger = logging.getLogger(__name__)


def _normalise_shape(shape):
    if isinstance(shape, int):
        return (shape,)
    return tuple(int(s) for s in shape)


class TPField:
    """
    Pool-managed handle around a Taichi field.

    Attributes:
        field: The underlying ``ti.field``
        dtype: Taichi data type of the field
        shape: Normalised shape tuple
        in_use: True while the handle is checked out of the pool
    """

    def __init__(self, pool, dtype, shape):
        self._pool = pool
        self.dtype = dtype
        self.shape = shape
        self.field = ti.field(dtype=dtype, shape=shape)
        self.in_use = False

    def release(self):
        """Return the field to its pool. Releasing twice is a no-op."""
        if self.in_use:
            self._pool._give_back(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def __repr__(self):
        state = "in use" if self.in_use else "free"
        return f"TPField(dtype={self.dtype}, shape={self.shape}, {state})"


class TaiPool:
    """
    Cache of Taichi fields keyed by data type and shape.

    Fields are never destroyed while the pool lives; ``clear()`` drops every
    cached handle, which is required after ``ti.init()`` has been called again
    since the previous runtime's fields become invalid.
    """

    def __init__(self):
        self._free = {}
        self._allocated = 0
        self._requests = 0
        self._reused = 0

    @staticmethod
    def _key(dtype, shape):
        return (str(dtype), shape)

    def get_tpfield(self, dtype, shape):
        """
        Check out a field of the given type and shape.

        Args:
            dtype: Taichi data type (e.g. ``ti.u8``)
            shape: int or tuple of ints

        Returns:
            TPField: handle whose ``field`` attribute is ready to use. The
            contents are whatever the previous user left behind.
        """
        shape = _normalise_shape(shape)
        key = self._key(dtype, shape)
        self._requests += 1

        bucket = self._free.get(key)
        if bucket:
            tpf = bucket.pop()
            self._reused += 1
        else:
            tpf = TPField(self, dtype, shape)
            self._allocated += 1
            logger.debug("Allocated pool field %s %s", dtype, shape)

        tpf.in_use = True
        return tpf

    def _give_back(self, tpf):
        tpf.in_use = False
        self._free.setdefault(self._key(tpf.dtype, tpf.shape), []).append(tpf)

    def clear(self):
        """Forget every cached field."""
        self._free.clear()
        self._allocated = 0
        self._requests = 0
        self._reused = 0

    def stats(self):
        """
        Summary of pool usage.

        Returns:
            dict: ``allocated`` fields created, ``requests`` served, ``reused``
            requests served from cache and ``free`` fields currently idle.
        """
        return {
            "allocated": self._allocated,
            "requests": self._requests,
            "reused": self._reused,
            "free": sum(len(b) for b in self._free.values()),
        }

    def __repr__(self):
        return f"TaiPool({self.stats()})"


taipool = TaiPool()


def get_temp_field(dtype, shape):
    """Shortcut for ``taipool.get_tpfield(dtype, shape)``."""
    return taipool.get_tpfield(dtype, shape)
