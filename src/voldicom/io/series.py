"""Directory reader: scan, validate and assemble one series into a volume."""

from __future__ import annotations

import logging
from pathlib import Path

from voldicom.config import DEFAULTS, CodecDefaults
from voldicom.core.errors import (
    CodecError,
    DimensionMismatch,
    FileNotFoundOrUnreadable,
    SeriesMismatch,
)
from voldicom.core.types import SliceRecord, instance_order, same_series
from voldicom.core.volume import Volume
from voldicom.io.formats import ImageFormat, get_format
from voldicom.io.slice_reader import open_slice, read_file

logger = logging.getLogger(__name__)


def scan_directory(
    directory: Path, defaults: CodecDefaults = DEFAULTS
) -> list[SliceRecord]:
    """Open every DICOM-typed file in *directory*, in enumeration order.

    The first unusable file aborts the scan.
    """
    directory = Path(directory)
    if not directory.exists():
        raise FileNotFoundOrUnreadable(f"cannot find file {directory}", directory)
    if not directory.is_dir():
        raise FileNotFoundOrUnreadable(
            f"file {directory} is not a directory", directory
        )

    records = []
    try:
        entries = list(directory.iterdir())
    except OSError as e:
        raise FileNotFoundOrUnreadable(
            f"unexpected error opening directory {directory} ({e})", directory
        ) from e

    for entry in entries:
        if get_format(entry, defaults.extension) != ImageFormat.DICOM:
            continue
        record = open_slice(entry)
        if not record.valid:
            raise record.error
        records.append(record)
    return records


def sort_records(records: list[SliceRecord]) -> list[SliceRecord]:
    """Stable sort by instance number; ties keep their scan order."""
    return sorted(records, key=instance_order)


def validate_series(records: list[SliceRecord]) -> int:
    """Check series and in-plane dimensions against the first record.

    Returns the total number of z-layers across all records.
    """
    first = records[0]
    for record in records[1:]:
        if not same_series(first, record):
            raise SeriesMismatch(first.path, record.path)

    nz = 0
    for record in records:
        if record.dims != first.dims:
            raise DimensionMismatch(first.path, first.dims, record.path, record.dims)
        nz += record.nz
    return nz


def assemble_directory(
    directory: Path, volume: Volume, defaults: CodecDefaults = DEFAULTS
) -> None:
    """Read a directory holding one series into *volume*, ordered by instance number."""
    directory = Path(directory)
    records = scan_directory(directory, defaults)
    if not records:
        raise FileNotFoundOrUnreadable(
            f"no dicom files found in {directory}", directory
        )

    nz = validate_series(records)
    first = records[0]
    volume.resize(first.nx, first.ny, nz, first.nc)
    volume.ux, volume.uy, volume.uz = first.ux, first.uy, first.uz

    records = sort_records(records)
    logger.info(f"Assembling {len(records)} files ({nz} slices) from {directory}")

    scratch = Volume()
    try:
        off_z = 0
        for record in records:
            read_file(record.path, scratch, defaults)
            if (scratch.nx, scratch.ny, scratch.nc) != first.dims:
                raise DimensionMismatch(
                    first.path,
                    first.dims,
                    record.path,
                    (scratch.nx, scratch.ny, scratch.nc),
                )
            if off_z + scratch.nz > nz:
                raise CodecError(
                    f"slice {record.path} has more frames than when it was scanned",
                    record.path,
                )
            volume.slab(off_z, off_z + scratch.nz)[:] = scratch.voxels
            off_z += scratch.nz
    finally:
        scratch.free()

    if off_z != nz:
        raise CodecError(
            f"assembled {off_z} slices from {directory}, expected {nz}", directory
        )
