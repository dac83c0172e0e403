"""
Encounter resource mapper.

Key fields read:
- 'type[0].coding[0].code' becomes the encounter type
- 'period.start' becomes the encounter date
- 'subject' and 'serviceProvider' references give patient and facility ids
"""

import logging
from typing import Any

from pydantic import ValidationError

from src.schemas.staging_schemas import EncounterRecord
from src.transform.fhir_to_staging.references import first_item, reference_of

logger = logging.getLogger(__name__)


def map_encounter(resource: dict[str, Any]) -> EncounterRecord | None:
    """
    Map a FHIR Encounter to a staging encounter record.

    Args:
        resource: FHIR Encounter resource

    Returns:
        EncounterRecord, or None when id, type, period, subject or
        serviceProvider is missing
    """
    encounter_id = resource.get("id")
    encounter_types = resource.get("type")
    period = resource.get("period")
    subject = resource.get("subject")
    service_provider = resource.get("serviceProvider")

    if not encounter_id or not isinstance(encounter_types, list) or not encounter_types:
        return None
    if period is None or subject is None or service_provider is None:
        return None

    encounter_type = first_item(first_item(encounter_types).get("coding")).get("code")

    try:
        return EncounterRecord(
            patient_id=reference_of(subject),
            encounter_id=encounter_id,
            encounter_date=period.get("start") if isinstance(period, dict) else None,
            facility_id=reference_of(service_provider),
            encounter_type=encounter_type,
        )
    except ValidationError as e:
        logger.debug("Rejecting Encounter %s: %s", encounter_id, e)
        return None
