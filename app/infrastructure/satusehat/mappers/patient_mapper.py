"""Mapper from internal patient records to Satu Sehat FHIR Patient resources.

The builder is the last checkpoint before a record leaves the system: it
re-validates every field it needs, independently of the API request schemas,
and never performs I/O.
"""

import re
from datetime import UTC, date, datetime

from fhir.resources.contactpoint import ContactPoint
from fhir.resources.humanname import HumanName
from fhir.resources.identifier import Identifier
from fhir.resources.patient import Patient as FHIRPatient

from app.infrastructure.satusehat.exceptions import SatuSehatValidationError
from app.infrastructure.satusehat.identifiers import NIK_SYSTEM
from app.schemas.patient import PatientRecord

NIK_PATTERN = re.compile(r"[0-9]{16}")
ALLOWED_GENDERS = ("male", "female")
REQUIRED_FIELDS = ("name", "nik", "birth_date", "gender")


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _normalize_birth_date(value: date | datetime | str) -> str:
    """Reduce a date, datetime or ISO-8601 string to ``YYYY-MM-DD``.

    Timezone-aware values are converted to UTC before the date is taken.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise SatuSehatValidationError(
                f"Invalid birth date: {value!r}", fields=["birth_date"]
            ) from None
        return _normalize_birth_date(parsed)
    raise SatuSehatValidationError(f"Invalid birth date: {value!r}", fields=["birth_date"])


def _validate_record(record: PatientRecord) -> None:
    missing = [field for field in REQUIRED_FIELDS if _is_blank(getattr(record, field, None))]
    if missing:
        raise SatuSehatValidationError(
            f"Incomplete patient data, missing: {', '.join(missing)}", fields=missing
        )

    if not NIK_PATTERN.fullmatch(record.nik):
        raise SatuSehatValidationError("NIK must be exactly 16 digits", fields=["nik"])

    if record.gender not in ALLOWED_GENDERS:
        raise SatuSehatValidationError(
            f"Gender must be one of {', '.join(ALLOWED_GENDERS)}, got {record.gender!r}",
            fields=["gender"],
        )


def build_fhir_patient_payload(record: PatientRecord) -> FHIRPatient:
    """Build the FHIR Patient resource submitted to Satu Sehat.

    Args:
        record: Internal patient record (any object exposing ``name``,
            ``nik``, ``birth_date``, ``gender`` and ``phone``)

    Returns:
        A new FHIR Patient resource. ``telecom`` is only set when the record
        has a phone number.

    Raises:
        SatuSehatValidationError: If a required field is missing or invalid
    """
    _validate_record(record)

    patient_data = {
        "resourceType": "Patient",
        "identifier": [Identifier(system=NIK_SYSTEM, value=record.nik)],
        "name": [HumanName(use="official", text=record.name)],
        "gender": record.gender,
        "birthDate": _normalize_birth_date(record.birth_date),
        "active": True,
    }

    phone = getattr(record, "phone", None)
    if not _is_blank(phone):
        patient_data["telecom"] = [ContactPoint(system="phone", use="mobile", value=phone)]

    return FHIRPatient.model_validate(patient_data)
