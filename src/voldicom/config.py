"""Process-wide codec defaults: metadata strings, UID roots, encoding policy."""

from __future__ import annotations

from dataclasses import dataclass

from pydicom.uid import ExplicitVRLittleEndian, UID

# Sub-roots below pydicom's registered prefix, one per identifier kind
_UID_ROOT = "1.2.826.0.1.3680043.8.498."


@dataclass(frozen=True)
class CodecDefaults:
    """Read-only defaults shared by every read and write call."""

    patient_name: str = "DefaultVoldicomPatient"
    patient_id: str = "DefaultVoldicomPatientID"
    series_description: str = "Series generated by voldicom"
    instance_number: int = 1
    study_uid_root: str = _UID_ROOT + "1."
    series_uid_root: str = _UID_ROOT + "2."
    instance_uid_root: str = _UID_ROOT + "3."
    output_bits: int = 8  # bits per written sample
    decode_bits: int = 32  # width of the buffer frames are rendered into
    extension: str = "dcm"
    transfer_syntax: UID = ExplicitVRLittleEndian

    @property
    def output_max(self) -> float:
        """Largest sample value representable at ``output_bits``."""
        return float((1 << self.output_bits) - 1)


DEFAULTS = CodecDefaults()
