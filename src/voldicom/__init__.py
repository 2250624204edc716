"""voldicom: read and write 3D volumes as DICOM files and series."""

from voldicom.api import (
    read_dcm,
    read_dcm_dir,
    read_volume,
    write_dcm,
    write_dcm_dir,
    write_volume,
)
from voldicom.core.errors import CodecError, CodecResult
from voldicom.core.types import SeriesMetadata, SliceRecord
from voldicom.core.volume import Volume

__version__ = "0.1.0"

__all__ = [
    "CodecError",
    "CodecResult",
    "SeriesMetadata",
    "SliceRecord",
    "Volume",
    "read_dcm",
    "read_dcm_dir",
    "read_volume",
    "write_dcm",
    "write_dcm_dir",
    "write_volume",
]
