"""Core value types for the voldicom codec."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from voldicom.core.errors import CodecError


@dataclass(frozen=True)
class SliceRecord:
    """Identity and geometry of one DICOM file in a series scan."""

    path: Path
    series_uid: str = ""
    instance_number: int = -1
    nx: int = 0
    ny: int = 0
    nz: int = 0
    nc: int = 0
    ux: float = 0.0
    uy: float = 0.0
    uz: float = 0.0
    valid: bool = False
    error: CodecError | None = None

    @property
    def dims(self) -> tuple[int, int, int]:
        """In-plane dimensions and channel count: (nx, ny, nc)."""
        return (self.nx, self.ny, self.nc)


def instance_order(record: SliceRecord) -> int:
    """Sort key placing slices in ascending instance number."""
    return record.instance_number


def same_series(a: SliceRecord, b: SliceRecord) -> bool:
    """Whether two records carry the same Series Instance UID."""
    return a.series_uid == b.series_uid


@dataclass(frozen=True)
class SeriesMetadata:
    """Descriptive strings and identifiers written into each output file."""

    patient_name: str
    patient_id: str
    series_description: str
    study_uid: str
    series_uid: str
    instance_uid: str
    instance_number: int = 1
