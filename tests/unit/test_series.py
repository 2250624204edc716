"""Unit tests for directory scanning and series assembly."""

from __future__ import annotations

import os
import random

import numpy as np
import pytest
from pydicom.uid import generate_uid

from voldicom.core.errors import (
    DimensionMismatch,
    FileNotFoundOrUnreadable,
    InvalidGeometry,
    SeriesMismatch,
)
from voldicom.core.types import SliceRecord
from voldicom.core.volume import Volume
from voldicom.io.series import (
    assemble_directory,
    scan_directory,
    sort_records,
    validate_series,
)


def test_assemble_orders_by_instance_number(dicom_directory):
    volume = Volume()
    assemble_directory(dicom_directory, volume)

    assert volume.shape == (12, 16, 10, 1)
    for z in range(10):
        assert volume.voxel(5, 5, z) == 10 * (z + 1)


def test_assemble_ignores_file_names(tmp_path, dicom_writer):
    """Files named against instance order still assemble by instance number."""
    uid = generate_uid()
    for i in range(6):
        dicom_writer(
            tmp_path / f"{9 - i}.dcm", uid, instance_number=i + 1, pixel_value=i + 1
        )

    volume = Volume()
    assemble_directory(tmp_path, volume)

    assert [volume.voxel(3, 3, z) for z in range(6)] == [1, 2, 3, 4, 5, 6]


def test_assemble_independent_of_enumeration_order(dicom_directory, monkeypatch):
    expected = Volume()
    assemble_directory(dicom_directory, expected)

    entries = sorted(dicom_directory.iterdir())
    rng = random.Random(0)
    for _ in range(3):
        shuffled = entries[:]
        rng.shuffle(shuffled)
        monkeypatch.setattr(
            type(dicom_directory), "iterdir", lambda self, s=shuffled: iter(s)
        )
        volume = Volume()
        assemble_directory(dicom_directory, volume)
        np.testing.assert_array_equal(volume.voxels, expected.voxels)


def test_assemble_multiframe_slices(tmp_path, dicom_writer):
    uid = generate_uid()
    dicom_writer(tmp_path / "b.dcm", uid, instance_number=2, frames=3, pixel_value=20)
    dicom_writer(tmp_path / "a.dcm", uid, instance_number=1, frames=2, pixel_value=10)

    volume = Volume()
    assemble_directory(tmp_path, volume)

    assert volume.nz == 5
    assert [volume.voxel(4, 4, z) for z in range(5)] == [10, 10, 20, 20, 20]
    # Pixel (0, 0) carries the frame index within each file
    assert [volume.voxel(0, 0, z) for z in range(5)] == [0, 1, 0, 1, 2]


def test_assemble_takes_spacing_from_first_file(tmp_path, dicom_writer):
    uid = generate_uid()
    dicom_writer(tmp_path / "a.dcm", uid, pixel_spacing=[0.5, 0.5], slice_thickness=2.0)
    volume = Volume()
    assemble_directory(tmp_path, volume)
    assert volume.spacing == pytest.approx((0.5, 0.5, 2.0))


def test_series_mismatch_names_both_files(tmp_path, dicom_writer):
    dicom_writer(tmp_path / "a.dcm", generate_uid(), instance_number=1)
    dicom_writer(tmp_path / "b.dcm", generate_uid(), instance_number=2)

    with pytest.raises(SeriesMismatch) as exc_info:
        assemble_directory(tmp_path, Volume())

    err = exc_info.value
    assert {err.first.name, err.other.name} == {"a.dcm", "b.dcm"}
    assert "a.dcm" in err.message and "b.dcm" in err.message


def test_dimension_mismatch_names_files_and_dims(tmp_path, dicom_writer):
    uid = generate_uid()
    dicom_writer(tmp_path / "a.dcm", uid, instance_number=1, rows=16, cols=12)
    dicom_writer(tmp_path / "b.dcm", uid, instance_number=2, rows=16, cols=10)

    with pytest.raises(DimensionMismatch) as exc_info:
        assemble_directory(tmp_path, Volume())

    err = exc_info.value
    assert {err.first.name, err.other.name} == {"a.dcm", "b.dcm"}
    assert {err.first_dims, err.other_dims} == {(12, 16, 1), (10, 16, 1)}
    assert "12x" in err.message and "10x" in err.message


def test_empty_directory(tmp_path):
    with pytest.raises(FileNotFoundOrUnreadable, match="no dicom files found"):
        assemble_directory(tmp_path, Volume())


def test_non_dicom_files_are_ignored(dicom_directory):
    (dicom_directory / "notes.txt").write_text("not an image")
    (dicom_directory / "subdir").mkdir()
    assert len(scan_directory(dicom_directory)) == 10


def test_only_non_dicom_files_counts_as_empty(tmp_path):
    (tmp_path / "notes.txt").write_text("not an image")
    with pytest.raises(FileNotFoundOrUnreadable, match="no dicom files found"):
        assemble_directory(tmp_path, Volume())


def test_invalid_slice_aborts_scan(dicom_directory, dicom_writer):
    dicom_writer(
        dicom_directory / "bad.dcm", generate_uid(), slice_thickness=0.0
    )
    with pytest.raises(InvalidGeometry):
        scan_directory(dicom_directory)


def test_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundOrUnreadable, match="cannot find"):
        scan_directory(tmp_path / "nope")


def test_file_is_not_a_directory(tmp_path):
    path = tmp_path / "file.txt"
    path.write_text("x")
    with pytest.raises(FileNotFoundOrUnreadable, match="not a directory"):
        scan_directory(path)


def test_sort_is_stable_for_equal_instance_numbers(tmp_path):
    records = [
        SliceRecord(path=tmp_path / name, instance_number=n, valid=True)
        for name, n in [("c", 2), ("a", 1), ("d", 2), ("b", 1), ("e", 2)]
    ]
    ordered = sort_records(records)
    assert [r.path.name for r in ordered] == ["a", "b", "c", "d", "e"]


def test_validate_series_sums_frames(tmp_path):
    records = [
        SliceRecord(path=tmp_path / "a", series_uid="1", nx=4, ny=4, nz=2, nc=1),
        SliceRecord(path=tmp_path / "b", series_uid="1", nx=4, ny=4, nz=3, nc=1),
    ]
    assert validate_series(records) == 5


def test_validate_series_checks_channels(tmp_path):
    records = [
        SliceRecord(path=tmp_path / "a", series_uid="1", nx=4, ny=4, nz=1, nc=1),
        SliceRecord(path=tmp_path / "b", series_uid="1", nx=4, ny=4, nz=1, nc=3),
    ]
    with pytest.raises(DimensionMismatch):
        validate_series(records)


@pytest.mark.skipif(os.name == "nt", reason="permission bits not enforced")
def test_unreadable_file_aborts(dicom_directory):
    if hasattr(os, "geteuid") and os.geteuid() == 0:
        pytest.skip("root ignores permission bits")
    target = next(dicom_directory.glob("*.dcm"))
    target.chmod(0)
    try:
        with pytest.raises(FileNotFoundOrUnreadable):
            scan_directory(dicom_directory)
    finally:
        target.chmod(0o644)
