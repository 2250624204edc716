"""Directory writer: one DICOM file per z-slice, sharing one series."""

from __future__ import annotations

import logging
import math
from pathlib import Path

from voldicom.config import DEFAULTS, CodecDefaults
from voldicom.core.errors import IOWriteFailure
from voldicom.core.types import SeriesMetadata
from voldicom.core.volume import Volume
from voldicom.io.encoder import check_non_negative, encode_file
from voldicom.io.metadata import for_instance, resolve

logger = logging.getLogger(__name__)


def pad_width(num_slices: int) -> int:
    """Digits used for zero-padded slice file names."""
    return int(math.ceil(math.log10(num_slices))) if num_slices > 0 else 0


def slice_filenames(num_slices: int, extension: str = DEFAULTS.extension) -> list[str]:
    """File names for slices ``0..num_slices-1``, in index order."""
    width = pad_width(num_slices)
    return [f"{str(i).zfill(width)}.{extension}" for i in range(num_slices)]


def encode_directory(
    directory: Path,
    volume: Volume,
    meta: SeriesMetadata | None = None,
    defaults: CodecDefaults = DEFAULTS,
) -> list[Path]:
    """Write each z-slice of *volume* into *directory*.

    All slices share one intensity scale, taken from the whole volume, and
    one set of study/series identifiers. Returns the written paths.
    """
    directory = Path(directory)
    check_non_negative(volume, directory)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IOWriteFailure(
            f"Failed to create directory {directory} ({e})", directory
        ) from e

    meta = resolve(meta, defaults)
    max_val = volume.max_abs()
    names = slice_filenames(volume.nz, defaults.extension)

    scratch = Volume(ux=volume.ux, uy=volume.uy, uz=volume.uz)
    scratch.resize(volume.nx, volume.ny, 1, volume.nc)

    written = []
    try:
        for i, name in enumerate(names):
            scratch.voxels[0] = volume.voxels[i]
            slice_meta = for_instance(meta, i + 1, defaults)
            path = directory / name
            encode_file(path, scratch, slice_meta, max_val, defaults)
            written.append(path)
    finally:
        scratch.free()

    logger.info(f"Wrote {len(written)} slices to {directory}")
    return written
