"""
Patient resource mapper.

Flattens an OpenMRS Patient into a ``staging_patient`` row.
https://hl7.org/fhir/R4/patient.html
"""

import logging
from typing import Any

from pydantic import ValidationError

from src.schemas.staging_schemas import PatientRecord
from src.transform.fhir_to_staging.references import (
    as_list,
    first_item,
    reference_of,
)

logger = logging.getLogger(__name__)

OPENMRS_ADDRESS_EXTENSION = "http://fhir.openmrs.org/ext/address"
VILLAGE_EXTENSION = f"{OPENMRS_ADDRESS_EXTENSION}#village"
PARISH_EXTENSION = f"{OPENMRS_ADDRESS_EXTENSION}#parish"
SUBCOUNTY_EXTENSION = f"{OPENMRS_ADDRESS_EXTENSION}#subcounty"

CLINIC_NUMBER_TYPE = "HIV Clinic No."
NATIONAL_ID_TYPE = "National ID No."


def map_patient(resource: dict[str, Any]) -> PatientRecord | None:
    """
    Map a FHIR Patient to a staging patient record.

    The record is only produced when ``id``, ``gender``, a managing
    organization reference and a full ``YYYY-MM-DD`` birth date are
    available. A bare birth year is read as January 1st.

    Args:
        resource: FHIR Patient resource

    Returns:
        PatientRecord, or None when the patient cannot be staged
    """
    case_id = resource.get("id")
    sex = resource.get("gender")
    date_of_birth = _normalize_birth_date(resource.get("birthDate"))
    facility_id = reference_of(resource.get("managingOrganization"))

    if not (case_id and sex and facility_id):
        return None
    if not isinstance(date_of_birth, str) or len(date_of_birth) != 10:
        return None

    address = first_item(resource.get("address"))
    address_parts = _openmrs_address_parts(address)

    try:
        return PatientRecord(
            case_id=case_id,
            sex=sex,
            date_of_birth=date_of_birth,
            deceased=resource.get("deceasedBoolean"),
            date_of_death=resource.get("deceasedDateTime") or None,
            facility_id=facility_id,
            patient_clinic_number=_identifier_value(resource, CLINIC_NUMBER_TYPE),
            national_id_number=_identifier_value(resource, NATIONAL_ID_TYPE),
            patient_name=_patient_name(resource),
            phone_number=first_item(resource.get("telecom")).get("value"),
            country=address.get("country"),
            district=address.get("district") or None,
            subcounty=address_parts.get(SUBCOUNTY_EXTENSION),
            parish=address_parts.get(PARISH_EXTENSION),
            village=address_parts.get(VILLAGE_EXTENSION),
        )
    except ValidationError as e:
        logger.debug("Rejecting Patient %s: %s", case_id, e)
        return None


def _normalize_birth_date(birth_date: Any) -> Any:
    """Expand a bare year to the first day of that year."""
    if isinstance(birth_date, str) and len(birth_date) == 4:
        return f"{birth_date}-01-01"
    return birth_date


def _identifier_value(resource: dict[str, Any], type_text: str) -> Any:
    """Value of the first identifier whose type text matches."""
    for identifier in as_list(resource.get("identifier")):
        identifier_type = identifier.get("type")
        if isinstance(identifier_type, dict) and identifier_type.get("text") == type_text:
            return identifier.get("value")
    return None


def _patient_name(resource: dict[str, Any]) -> str:
    """First given name and family name of the first name entry."""
    name = first_item(resource.get("name"))
    given = name.get("given")
    given_name = given[0] if isinstance(given, list) and given and given[0] else ""
    family_name = name.get("family") or ""
    return f"{given_name} {family_name}".strip()


def _openmrs_address_parts(address: dict[str, Any]) -> dict[str, Any]:
    """Map extension URL to value for the nested OpenMRS address extension."""
    for extension in as_list(address.get("extension")):
        if extension.get("url") == OPENMRS_ADDRESS_EXTENSION:
            return {
                part.get("url"): part.get("valueString")
                for part in reversed(as_list(extension.get("extension")))
            }
    return {}
