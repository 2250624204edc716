"""Copy rendered frames into a volume at their original bit depth."""

from __future__ import annotations

import numpy as np

from voldicom.core.errors import FileNotFoundOrUnreadable, UnsupportedImageType
from voldicom.core.volume import Volume
from voldicom.io.toolkit import HOST_LITTLE_ENDIAN, ImageView


def frame_shift(depth: int, bits: int, little_endian: bool = HOST_LITTLE_ENDIAN) -> int:
    """Right shift that brings a ``bits``-wide rendered sample back to ``depth`` bits."""
    if depth > bits:
        raise UnsupportedImageType(
            f"buffer is insufficiently wide for {depth}-bit data"
        )
    return bits - depth if little_endian else 0


def decode_frames(
    view: ImageView,
    volume: Volume,
    bits: int = 32,
    little_endian: bool = HOST_LITTLE_ENDIAN,
) -> None:
    """Fill every z-layer of *volume* (channel 0) from the frames of *view*.

    *volume* must already be sized to the view's width, height and frame
    count.
    """
    try:
        shift = frame_shift(view.depth, bits, little_endian)
    except UnsupportedImageType as e:
        raise UnsupportedImageType(f"{e.message} of image {view.path}", view.path) from e

    for z in range(volume.nz):
        frame = view.render_frame(z, bits)
        if frame is None:
            raise FileNotFoundOrUnreadable(
                f"could not get data from image {view.path} frame {z} ({view.status})",
                view.path,
            )
        samples = np.right_shift(frame, frame.dtype.type(shift))
        volume.voxels[z, :, :, 0] = samples.reshape(volume.ny, volume.nx).astype(
            np.float32
        )
