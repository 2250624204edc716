"""Single-file DICOM writer: quantize a volume and populate one dataset."""

from __future__ import annotations

import logging
from fractions import Fraction
from pathlib import Path

import numpy as np
from pydicom.uid import SecondaryCaptureImageStorage

from voldicom.config import DEFAULTS, CodecDefaults
from voldicom.core.errors import IOWriteFailure, NegativeSample, UnsupportedImageType
from voldicom.core.types import SeriesMetadata
from voldicom.core.volume import Volume
from voldicom.io import toolkit
from voldicom.io.metadata import resolve

logger = logging.getLogger(__name__)

PHOTOMETRIC = {1: "MONOCHROME2", 3: "RGB"}


def scale_factor(volume: Volume, max_value: float, out_max: float) -> tuple[float, float]:
    """Return (reference maximum, scale) for quantizing *volume*.

    A negative *max_value* means "use the volume's maximum absolute value".
    """
    im_max = volume.max_abs() if max_value < 0.0 else float(max_value)
    scale = 1.0 if im_max == 0.0 else out_max / im_max
    return im_max, scale


def check_non_negative(volume: Volume, path: Path | None = None) -> None:
    negative = np.argwhere(volume.voxels < 0.0)
    if negative.size:
        z, y, x, c = (int(v) for v in negative[0])
        raise NegativeSample(
            f"Image cannot be negative: voxel ({x}, {y}, {z}, {c}) = "
            f"{volume.voxel(x, y, z, c)}",
            path,
        )


def quantize(
    volume: Volume, max_value: float = -1.0, defaults: CodecDefaults = DEFAULTS
) -> bytes:
    """Render *volume* to unsigned 8-bit samples, channel-fastest then x, y, z.

    Samples are truncated; a voxel at or above the reference maximum maps
    to the top of the output range.
    """
    check_non_negative(volume)
    out_max = defaults.output_max
    im_max, scale = scale_factor(volume, max_value, out_max)

    voxels = volume.voxels.astype(np.float64)
    scaled = np.floor(voxels * scale)
    if im_max > 0.0:
        scaled[voxels >= im_max] = out_max
    samples = np.clip(scaled, 0.0, out_max).astype(np.uint8)
    return samples.tobytes()


def _aspect_ratio(ux: float, uy: float) -> list[int]:
    ratio = Fraction(ux / uy).limit_denominator(10000) if uy > 0 else Fraction(1)
    return [ratio.numerator, ratio.denominator]


def encode_file(
    path: Path,
    volume: Volume,
    meta: SeriesMetadata | None = None,
    max_value: float = -1.0,
    defaults: CodecDefaults = DEFAULTS,
) -> None:
    """Write *volume* to *path* as one (possibly multi-frame) DICOM file."""
    path = Path(path)
    if volume.nc != 1:
        raise UnsupportedImageType(
            f"image has {volume.nc} channels. Currently only single-channel "
            f"images are supported.",
            path,
        )
    meta = resolve(meta, defaults)

    try:
        pixel_data = quantize(volume, max_value, defaults)
    except NegativeSample as e:
        raise NegativeSample(e.message, path) from e

    ds = toolkit.new_dataset()

    toolkit.put(ds, "ImageType", "DERIVED", "image type")
    toolkit.put(ds, "SOPClassUID", SecondaryCaptureImageStorage, "SOPClassUID")

    photometric = PHOTOMETRIC.get(volume.nc)
    if photometric is None:
        raise IOWriteFailure(
            f"Failed to determine the photometric representation for "
            f"{volume.nc} channels",
            path,
        )
    toolkit.put(ds, "PhotometricInterpretation", photometric, "photometric interpretation")
    toolkit.put(ds, "PixelRepresentation", 0, "pixel representation")
    toolkit.put(ds, "SamplesPerPixel", volume.nc, "samples per pixel")
    toolkit.put(ds, "PlanarConfiguration", 0, "planar configuration")

    bits = defaults.output_bits
    toolkit.put(ds, "BitsAllocated", bits, "bits allocated")
    toolkit.put(ds, "BitsStored", bits, "bits stored")
    toolkit.put(ds, "HighBit", bits - 1, "high bit")

    toolkit.put(ds, "PatientName", meta.patient_name, "patient name")
    toolkit.put(ds, "PatientID", meta.patient_id, "patient ID")
    toolkit.put(ds, "StudyInstanceUID", meta.study_uid, "StudyInstanceUID")
    toolkit.put(ds, "SeriesInstanceUID", meta.series_uid, "SeriesInstanceUID")
    toolkit.put(ds, "SeriesDescription", meta.series_description, "series description")
    toolkit.put(ds, "SOPInstanceUID", meta.instance_uid, "SOPInstanceUID")

    toolkit.put(ds, "Rows", volume.ny, "dimensions")
    toolkit.put(ds, "Columns", volume.nx, "dimensions")
    toolkit.put(ds, "NumberOfFrames", volume.nz, "dimensions")

    toolkit.put(ds, "InstanceNumber", meta.instance_number, "instance number")
    slice_loc = volume.uz * (meta.instance_number - 1.0)
    toolkit.put(ds, "SliceLocation", f"{slice_loc:f}", "slice location")
    toolkit.put(
        ds, "PixelSpacing", [f"{volume.ux:f}", f"{volume.uy:f}"], "pixel spacing"
    )
    toolkit.put(
        ds, "PixelAspectRatio", _aspect_ratio(volume.ux, volume.uy), "pixel aspect ratio"
    )
    toolkit.put(ds, "SliceThickness", f"{volume.uz:f}", "slice thickness")

    toolkit.put(ds, "PixelData", pixel_data, "pixel data")

    xfer = defaults.transfer_syntax
    if not toolkit.can_write_transfer_syntax(xfer):
        raise IOWriteFailure(f"Failed to choose the encoding format {xfer}", path)

    toolkit.save_dataset(ds, path, xfer)
    logger.debug(
        f"Encoded {volume.nx}x{volume.ny}x{volume.nz} volume to {path} "
        f"(instance {meta.instance_number})"
    )
