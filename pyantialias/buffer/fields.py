"""
Transfer of PixelBuffer memory to and from pooled Taichi fields.

Kernels operate on flat ``u8`` fields mirroring the host layout byte for byte,
stride padding included, so offsets computed on the host are valid inside
the kernels unchanged.
"""

from .. import constants as cte
from .. import pool


def upload(buffer):
    """
    Copy ``buffer`` into a pooled ``u8`` field of ``stride * height`` bytes.

    Returns:
        TPField: checked-out handle; the caller must ``release()`` it
    """
    tpf = pool.get_temp_field(cte.BYTE_TYPE_TI, (buffer.nbytes,))
    try:
        tpf.field.from_numpy(buffer.data[: buffer.nbytes])
    except Exception:
        tpf.release()
        raise
    return tpf


def download(tpf, buffer):
    """Copy the contents of ``tpf`` back into ``buffer``."""
    buffer.data[: buffer.nbytes] = tpf.field.to_numpy()


__all__ = ["upload", "download"]
