"""Shared test fixtures: synthetic volumes and DICOM files."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from pydicom.dataset import FileDataset, FileMetaDataset
from pydicom.uid import CTImageStorage, ExplicitVRLittleEndian, generate_uid

from voldicom.core.volume import Volume


@pytest.fixture
def synthetic_volume() -> Volume:
    """Small 8x6x5 volume whose values are exact multiples of 2 up to 510."""
    nz, ny, nx = 5, 6, 8
    zz, yy, xx = np.mgrid[0:nz, 0:ny, 0:nx]
    voxels = ((xx + yy * nx + zz * nx * ny) % 256) * 2.0
    voxels[-1, -1, -1] = 510.0
    return Volume.from_array(voxels.astype(np.float32), spacing=(0.5, 0.75, 2.0))


@pytest.fixture
def dicom_directory(tmp_path) -> Path:
    """Directory with 10 single-frame slices of one series, instance n has value 10n."""
    directory = tmp_path / "series"
    directory.mkdir()
    series_uid = generate_uid()

    for i in range(10):
        write_synthetic_dicom(
            directory / f"slice_{i:03d}.dcm",
            series_uid=series_uid,
            instance_number=i + 1,
            pixel_value=10 * (i + 1),
        )

    return directory


def write_synthetic_dicom(
    path: Path,
    series_uid: str,
    instance_number: int | str | None = 1,
    rows: int = 16,
    cols: int = 12,
    frames: int = 1,
    pixel_value: int = 100,
    pixels: np.ndarray | None = None,
    bits: int = 16,
    pixel_spacing: list[float] | None = None,
    slice_thickness: float | None = 1.0,
    color: bool = False,
    photometric: str = "MONOCHROME2",
) -> None:
    """Write one synthetic DICOM file.

    Unless *pixels* is given, the image is *pixel_value* everywhere except
    pixel (0, 0) of each frame, which holds the frame index.
    """
    file_meta = FileMetaDataset()
    file_meta.MediaStorageSOPClassUID = CTImageStorage
    file_meta.MediaStorageSOPInstanceUID = generate_uid()
    file_meta.TransferSyntaxUID = ExplicitVRLittleEndian

    ds = FileDataset(str(path), {}, file_meta=file_meta, preamble=b"\x00" * 128)

    ds.SOPClassUID = CTImageStorage
    ds.SOPInstanceUID = file_meta.MediaStorageSOPInstanceUID
    ds.SeriesInstanceUID = series_uid
    ds.StudyInstanceUID = generate_uid()
    ds.Modality = "CT"
    if instance_number is not None:
        ds.InstanceNumber = instance_number
    ds.PixelSpacing = pixel_spacing if pixel_spacing is not None else [1.0, 1.0]
    if slice_thickness is not None:
        ds.SliceThickness = slice_thickness
    ds.Rows = rows
    ds.Columns = cols
    if frames > 1:
        ds.NumberOfFrames = frames

    dtype = np.uint8 if bits == 8 else np.uint16
    ds.BitsAllocated = bits
    ds.BitsStored = bits
    ds.HighBit = bits - 1
    ds.PixelRepresentation = 0

    if color:
        ds.SamplesPerPixel = 3
        ds.PhotometricInterpretation = "RGB"
        ds.PlanarConfiguration = 0
        data = np.full((rows, cols, 3), pixel_value, dtype=np.uint8)
        ds.BitsAllocated = ds.BitsStored = 8
        ds.HighBit = 7
    else:
        ds.SamplesPerPixel = 1
        ds.PhotometricInterpretation = photometric
        if pixels is None:
            data = np.full((frames, rows, cols), pixel_value, dtype=dtype)
            data[:, 0, 0] = np.arange(frames, dtype=dtype)
        else:
            data = pixels.astype(dtype)

    ds.PixelData = data.tobytes()
    ds.save_as(str(path), enforce_file_format=True)


@pytest.fixture
def dicom_writer():
    """The synthetic DICOM writer, for tests that build their own layouts."""
    return write_synthetic_dicom
