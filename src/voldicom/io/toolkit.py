"""Thin adapter over pydicom: the only module that touches the toolkit directly.

Every pydicom failure is translated into the codec's error taxonomy here, so
callers only ever deal with ``CodecError`` subclasses.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import numpy as np
import pydicom
from pydicom.dataset import Dataset, FileDataset, FileMetaDataset
from pydicom.errors import InvalidDicomError
from pydicom.multival import MultiValue
from pydicom.uid import UID

from voldicom.core.errors import (
    FileNotFoundOrUnreadable,
    IOWriteFailure,
    MalformedMetadata,
)

logger = logging.getLogger(__name__)

HOST_LITTLE_ENDIAN = sys.byteorder == "little"

_MONOCHROME = ("MONOCHROME1", "MONOCHROME2")


def parse_file(path: Path) -> FileDataset:
    """Parse *path* into a dataset, pixel data included."""
    try:
        return pydicom.dcmread(str(path))
    except FileNotFoundError as e:
        raise FileNotFoundOrUnreadable(f"cannot find file {path}", path) from e
    except (InvalidDicomError, OSError, ValueError, EOFError) as e:
        raise FileNotFoundOrUnreadable(
            f"failed to read DICOM file {path} ({e})", path
        ) from e


def _lookup(ds: Dataset, keyword: str, path: Path | None):
    try:
        return ds.get(keyword)
    except (TypeError, ValueError) as e:
        raise MalformedMetadata(
            f"failed to parse {keyword} from file {path} ({e})", path
        ) from e


def get_string(ds: Dataset, keyword: str, path: Path | None = None) -> str:
    """Return the string form of *keyword*; missing or empty values fail."""
    value = _lookup(ds, keyword, path)
    if value is None or str(value).strip() == "":
        raise MalformedMetadata(f"failed to get {keyword} from file {path}", path)
    if isinstance(value, MultiValue):
        return "\\".join(str(v) for v in value)
    return str(value).strip()


def get_float(
    ds: Dataset, keyword: str, path: Path | None = None, index: int = 0
) -> float:
    """Return value *index* of a numeric tag as a float."""
    value = _lookup(ds, keyword, path)
    if value is None or value == "":
        raise MalformedMetadata(f"failed to get {keyword} from file {path}", path)
    if isinstance(value, MultiValue):
        if index >= len(value):
            raise MalformedMetadata(
                f"{keyword} in file {path} has no value {index}", path
            )
        value = value[index]
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise MalformedMetadata(
            f"failed to parse {keyword} from file {path} ({value!r})", path
        ) from e


class ImageView:
    """Pixel-level view of a parsed dataset.

    Mirrors a rendering image object: it reports a status string instead of
    raising, so the caller decides how to treat an unusable image.
    """

    def __init__(self, ds: Dataset, path: Path | None = None):
        self.ds = ds
        self.path = path
        self.status = "Normal"
        self._pixels: np.ndarray | None = None
        self._window: tuple[float, float] | None = None

        for keyword in ("Rows", "Columns", "PixelData"):
            if keyword not in ds:
                self.status = f"Missing attribute {keyword}"
                return

    @property
    def ok(self) -> bool:
        return self.status == "Normal"

    @property
    def is_monochrome(self) -> bool:
        photometric = str(self.ds.get("PhotometricInterpretation", "MONOCHROME2"))
        samples = int(self.ds.get("SamplesPerPixel", 1) or 1)
        return photometric.strip() in _MONOCHROME and samples == 1

    @property
    def inverted(self) -> bool:
        """MONOCHROME1: the lowest sample is displayed brightest."""
        photometric = str(self.ds.get("PhotometricInterpretation", ""))
        return photometric.strip() == "MONOCHROME1"

    @property
    def width(self) -> int:
        return int(self.ds.get("Columns", 0) or 0)

    @property
    def height(self) -> int:
        return int(self.ds.get("Rows", 0) or 0)

    @property
    def frame_count(self) -> int:
        return int(self.ds.get("NumberOfFrames", 1) or 1)

    @property
    def depth(self) -> int:
        """Number of significant bits per stored sample."""
        return int(self.ds.get("BitsStored", self.ds.get("BitsAllocated", 8)))

    @property
    def signed(self) -> bool:
        return int(self.ds.get("PixelRepresentation", 0) or 0) == 1

    @property
    def height_width_ratio(self) -> float:
        """Ratio of the y spacing to the x spacing.

        Taken from the second and first PixelSpacing values (the order this
        codec writes them in), then PixelAspectRatio, else 1.
        """
        for keyword in ("PixelSpacing", "PixelAspectRatio"):
            value = self.ds.get(keyword)
            if isinstance(value, MultiValue) and len(value) >= 2:
                try:
                    first, second = float(value[0]), float(value[1])
                except (TypeError, ValueError):
                    continue
                if first != 0.0:
                    return second / first
        return 1.0

    def _load_pixels(self) -> np.ndarray | None:
        if self._pixels is None and self.ok:
            try:
                pixels = self.ds.pixel_array
            except Exception as e:
                self.status = f"Pixel data not decodable ({e})"
                return None
            # Frames first, always
            if pixels.ndim == 2:
                pixels = pixels[np.newaxis, ...]
            self._pixels = pixels
        return self._pixels

    def set_min_max_window(self) -> None:
        """Window rendering to the actual sample range of all frames."""
        pixels = self._load_pixels()
        if pixels is None or pixels.size == 0:
            return
        self._window = (float(pixels.min()), float(pixels.max()))

    def _value_range(self) -> tuple[float, float]:
        if self._window is not None:
            return self._window
        if self.signed:
            half = 1 << (self.depth - 1)
            return (-float(half), float(half - 1))
        return (0.0, float((1 << self.depth) - 1))

    def render_frame(self, frame: int, bits: int) -> np.ndarray | None:
        """Render *frame* into unsigned ``bits``-wide samples, row-major.

        On little-endian hosts the full output range is used, so a sample at
        the top of the value range lands on ``2**bits - 1``. Big-endian hosts
        receive the samples value-aligned. Returns None when no frame data is
        available; ``status`` then says why.
        """
        pixels = self._load_pixels()
        if pixels is None:
            return None
        if not 0 <= frame < pixels.shape[0]:
            self.status = f"Frame {frame} out of range"
            return None

        lo, hi = self._value_range()
        values = np.clip(pixels[frame].astype(np.float64), lo, hi)
        offset = (values - lo).astype(np.uint64)
        span = int(hi - lo)
        if self.inverted:
            offset = np.uint64(span) - offset

        out_dtype = np.uint8 if bits <= 8 else np.uint16 if bits <= 16 else np.uint32
        if not HOST_LITTLE_ENDIAN or span == 0:
            return offset.astype(out_dtype).ravel()
        full = np.uint64((1 << bits) - 1)
        rendered = offset * full // np.uint64(span)
        return rendered.astype(out_dtype).ravel()


def new_dataset() -> FileDataset:
    """Empty dataset with file meta information, ready to populate."""
    file_meta = FileMetaDataset()
    return FileDataset("", Dataset(), file_meta=file_meta, preamble=b"\x00" * 128)


def put(ds: Dataset, keyword: str, value, what: str) -> None:
    """Set *keyword* on *ds*, reporting *what* could not be set on failure."""
    try:
        setattr(ds, keyword, value)
    except (TypeError, ValueError, OverflowError) as e:
        raise IOWriteFailure(f"Failed to set the {what} ({e})") from e


def can_write_transfer_syntax(uid: UID) -> bool:
    """Only native (uncompressed) encodings are written."""
    uid = UID(uid)
    return uid.is_transfer_syntax and not uid.is_compressed


def generate_uid(root: str) -> str:
    """New unique identifier under the namespace *root*."""
    return str(pydicom.uid.generate_uid(prefix=root))


def save_dataset(ds: FileDataset, path: Path, transfer_syntax: UID) -> None:
    """Write *ds* to *path* under *transfer_syntax*.

    The storage identifiers in the file meta are rebuilt from the dataset on
    every save.
    """
    for keyword in ("MediaStorageSOPClassUID", "MediaStorageSOPInstanceUID"):
        if keyword in ds.file_meta:
            delattr(ds.file_meta, keyword)
    ds.file_meta.MediaStorageSOPClassUID = ds.SOPClassUID
    ds.file_meta.MediaStorageSOPInstanceUID = ds.SOPInstanceUID
    ds.file_meta.TransferSyntaxUID = transfer_syntax

    try:
        ds.save_as(str(path), enforce_file_format=True)
    except (OSError, ValueError, TypeError) as e:
        raise IOWriteFailure(f"Failed to write file {path} ({e})", path) from e
    logger.debug(f"Wrote {path}")
