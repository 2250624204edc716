"""Single-file DICOM reader: slice identity, geometry and voxel data."""

from __future__ import annotations

import logging
from pathlib import Path

from voldicom.config import DEFAULTS, CodecDefaults
from voldicom.core.errors import (
    CodecError,
    FileNotFoundOrUnreadable,
    InvalidGeometry,
    MalformedMetadata,
    UnsupportedImageType,
)
from voldicom.core.types import SliceRecord
from voldicom.core.volume import Volume
from voldicom.io import toolkit
from voldicom.io.decoder import decode_frames

logger = logging.getLogger(__name__)


def open_slice(path: Path) -> SliceRecord:
    """Read the identity and geometry of one DICOM file.

    Never raises: an unusable file yields a record with ``valid=False`` and
    the reason in ``error``.
    """
    path = Path(path)
    try:
        return _probe(path)
    except CodecError as e:
        logger.debug(f"Invalid slice {path}: {e.message}")
        return SliceRecord(path=path, valid=False, error=e)


def _probe(path: Path) -> SliceRecord:
    ds = toolkit.parse_file(path)

    series_uid = toolkit.get_string(ds, "SeriesInstanceUID", path)
    instance_str = toolkit.get_string(ds, "InstanceNumber", path)
    try:
        instance = int(instance_str)
    except ValueError as e:
        raise MalformedMetadata(
            f"failed to parse instance number '{instance_str}' from file {path}",
            path,
        ) from e

    view = toolkit.ImageView(ds, path)
    if not view.ok:
        raise FileNotFoundOrUnreadable(
            f"failed to open image {path} ({view.status})", path
        )
    if not view.is_monochrome:
        raise UnsupportedImageType(
            f"reading of color DICOM images is not supported ({path})", path
        )

    nx, ny, nz = view.width, view.height, view.frame_count
    if nx < 1 or ny < 1 or nz < 1:
        raise InvalidGeometry(
            f"invalid dimensions for file {path} ({nx}, {ny}, {nz})", path
        )

    ux = toolkit.get_float(ds, "PixelSpacing", path)
    if not ux > 0.0:
        raise InvalidGeometry(f"file {path} has invalid pixel spacing: {ux}", path)

    ratio = view.height_width_ratio
    uy = ux * ratio
    if not uy > 0.0:
        raise InvalidGeometry(
            f"file {path} has invalid pixel aspect ratio: {ratio}", path
        )

    uz = toolkit.get_float(ds, "SliceThickness", path)
    if not uz > 0.0:
        raise InvalidGeometry(f"file {path} has invalid slice thickness: {uz}", path)

    view.set_min_max_window()

    return SliceRecord(
        path=path,
        series_uid=series_uid,
        instance_number=instance,
        nx=nx,
        ny=ny,
        nz=nz,
        nc=1,
        ux=ux,
        uy=uy,
        uz=uz,
        valid=True,
    )


def read_file(path: Path, volume: Volume, defaults: CodecDefaults = DEFAULTS) -> SliceRecord:
    """Resize *volume* to the file's geometry and fill it with its voxels."""
    record = open_slice(path)
    if not record.valid:
        raise record.error

    ds = toolkit.parse_file(record.path)
    view = toolkit.ImageView(ds, record.path)
    if not view.ok:
        raise FileNotFoundOrUnreadable(
            f"failed to open image {record.path} ({view.status})", record.path
        )

    volume.resize(record.nx, record.ny, record.nz, record.nc)
    volume.ux, volume.uy, volume.uz = record.ux, record.uy, record.uz

    decode_frames(view, volume, bits=defaults.decode_bits)
    return record
