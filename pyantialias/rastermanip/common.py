"""Argument checks and field plumbing shared by the resampling algorithms."""

from ..buffer import fields
from ..errors import BufferReleasedError, SizeMismatchError


def check_pair(source, destination):
    """
    Validate a (source, destination) pair before dispatch.

    Raises:
        BufferReleasedError: either buffer was released
        SizeMismatchError: pixel formats differ
    """
    if source.released or destination.released:
        raise BufferReleasedError("Cannot resample a released buffer")
    if source.pixel_format != destination.pixel_format:
        raise SizeMismatchError(
            f"Source format {source.pixel_format.name} does not match "
            f"destination format {destination.pixel_format.name}"
        )


def scale_factors(source, destination):
    """Source pixels per destination pixel along x and y (float64)."""
    return source.width / destination.width, source.height / destination.height


def run_on_fields(launch, source, destination):
    """
    Upload both buffers, call ``launch(source_field, target_field)`` and copy
    the target field back into ``destination``.

    The target field starts from the destination's current bytes so row
    padding survives the round trip.
    """
    source_field = fields.upload(source)
    try:
        target_field = fields.upload(destination)
        try:
            launch(source_field.field, target_field.field)
            fields.download(target_field, destination)
        finally:
            target_field.release()
    finally:
        source_field.release()
