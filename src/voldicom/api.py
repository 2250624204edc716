"""Public read/write operations.

The bodies below return nothing; ``codec_boundary`` makes every call return a
:class:`~voldicom.core.errors.CodecResult`, and nothing raised inside the codec
crosses this boundary. After a failed call the destination volume's contents
are unspecified and it should be discarded.
"""

from __future__ import annotations

from pathlib import Path

from voldicom.config import DEFAULTS, CodecDefaults
from voldicom.core.errors import UnsupportedImageType, codec_boundary
from voldicom.core.types import SeriesMetadata
from voldicom.core.volume import Volume
from voldicom.io.encoder import encode_file
from voldicom.io.formats import ImageFormat, get_format
from voldicom.io.series import assemble_directory
from voldicom.io.series_writer import encode_directory
from voldicom.io.slice_reader import read_file


@codec_boundary
def read_dcm(
    path: Path | str, volume: Volume, defaults: CodecDefaults = DEFAULTS
) -> None:
    """Read a single (possibly multi-frame) DICOM file into *volume*."""
    read_file(Path(path), volume, defaults)


@codec_boundary
def read_dcm_dir(
    path: Path | str, volume: Volume, defaults: CodecDefaults = DEFAULTS
) -> None:
    """Read a directory of same-series DICOM files into *volume*."""
    assemble_directory(Path(path), volume, defaults)


@codec_boundary
def write_dcm(
    path: Path | str,
    volume: Volume,
    meta: SeriesMetadata | None = None,
    max_value: float = -1.0,
    defaults: CodecDefaults = DEFAULTS,
) -> None:
    """Write *volume* to one multi-frame DICOM file.

    *max_value* is the intensity mapped to the top sample value; a negative
    value uses the volume's maximum absolute value.
    """
    encode_file(Path(path), volume, meta, max_value, defaults)


@codec_boundary
def write_dcm_dir(
    path: Path | str,
    volume: Volume,
    meta: SeriesMetadata | None = None,
    defaults: CodecDefaults = DEFAULTS,
) -> None:
    """Write *volume* as one DICOM file per z-slice inside directory *path*."""
    encode_directory(Path(path), volume, meta, defaults)


@codec_boundary
def read_volume(
    path: Path | str, volume: Volume, defaults: CodecDefaults = DEFAULTS
) -> None:
    """Read a ``.dcm`` file or a directory series, chosen by *path*."""
    path = Path(path)
    fmt = get_format(path, defaults.extension)
    if fmt == ImageFormat.DICOM:
        read_file(path, volume, defaults)
    elif fmt == ImageFormat.DIRECTORY:
        assemble_directory(path, volume, defaults)
    else:
        raise UnsupportedImageType(f"unrecognized file format for {path}", path)


@codec_boundary
def write_volume(
    path: Path | str,
    volume: Volume,
    meta: SeriesMetadata | None = None,
    max_value: float = -1.0,
    defaults: CodecDefaults = DEFAULTS,
) -> None:
    """Write a ``.dcm`` file, or a directory series for a suffix-less path."""
    path = Path(path)
    fmt = get_format(path, defaults.extension)
    if fmt == ImageFormat.DICOM:
        encode_file(path, volume, meta, max_value, defaults)
    elif fmt == ImageFormat.DIRECTORY or path.suffix == "":
        encode_directory(path, volume, meta, defaults)
    else:
        raise UnsupportedImageType(f"unrecognized file format for {path}", path)
