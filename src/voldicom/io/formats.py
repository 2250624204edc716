"""File format sniffing by path."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from voldicom.config import DEFAULTS


class ImageFormat(Enum):
    DICOM = "dicom"
    DIRECTORY = "directory"
    UNKNOWN = "unknown"


def get_format(path: Path | str, extension: str = DEFAULTS.extension) -> ImageFormat:
    """Classify *path* as a DICOM file, a directory, or something else."""
    path = Path(path)
    if path.is_dir():
        return ImageFormat.DIRECTORY
    if path.suffix.lower() == f".{extension.lower()}":
        return ImageFormat.DICOM
    return ImageFormat.UNKNOWN
