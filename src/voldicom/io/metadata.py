"""Resolve the metadata written into output files."""

from __future__ import annotations

from dataclasses import replace

from voldicom.config import DEFAULTS, CodecDefaults
from voldicom.core.types import SeriesMetadata
from voldicom.io import toolkit


def default_metadata(defaults: CodecDefaults = DEFAULTS) -> SeriesMetadata:
    """Fixed descriptive strings plus freshly generated study/series/instance UIDs."""
    return SeriesMetadata(
        patient_name=defaults.patient_name,
        patient_id=defaults.patient_id,
        series_description=defaults.series_description,
        study_uid=toolkit.generate_uid(defaults.study_uid_root),
        series_uid=toolkit.generate_uid(defaults.series_uid_root),
        instance_uid=toolkit.generate_uid(defaults.instance_uid_root),
        instance_number=defaults.instance_number,
    )


def resolve(
    override: SeriesMetadata | None = None, defaults: CodecDefaults = DEFAULTS
) -> SeriesMetadata:
    """Return a copy of *override*, or defaults when it is None."""
    if override is None:
        return default_metadata(defaults)
    return replace(override)


def for_instance(
    meta: SeriesMetadata, instance_number: int, defaults: CodecDefaults = DEFAULTS
) -> SeriesMetadata:
    """Same series, new SOP Instance UID and the given instance number."""
    return replace(
        meta,
        instance_uid=toolkit.generate_uid(defaults.instance_uid_root),
        instance_number=instance_number,
    )
