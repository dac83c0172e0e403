"""
Observation resource mapper.

OpenMRS codes observations with at least two codings: the first carries
the concept uuid and its display name, the second the mapped code.
"""

import logging
from typing import Any

from pydantic import ValidationError

from src.schemas.staging_schemas import ObservationRecord
from src.transform.fhir_to_staging.references import reference_of
from src.transform.fhir_to_staging.values import is_present, resolve_value

logger = logging.getLogger(__name__)


def map_observation(
    resource: dict[str, Any], falsy_as_absent: bool = False
) -> ObservationRecord | None:
    """
    Map a FHIR Observation to an intermediate observation record.

    Args:
        resource: FHIR Observation resource
        falsy_as_absent: Treat false/0 values as missing (legacy behaviour)

    Returns:
        ObservationRecord, or None when no value resolves or the code has
        fewer than two codings
    """
    value = resolve_value(resource, falsy_as_absent)
    code = resource.get("code")
    codings = code.get("coding") if isinstance(code, dict) else None

    if not is_present(value, falsy_as_absent):
        return None
    if not isinstance(codings, list) or len(codings) < 2:
        return None

    first = codings[0] if isinstance(codings[0], dict) else {}
    second = codings[1] if isinstance(codings[1], dict) else {}

    try:
        return ObservationRecord(
            id=resource.get("id"),
            patient_id=reference_of(resource.get("subject")),
            encounter_id=reference_of(resource.get("encounter")),
            code=second.get("code"),
            uuid=first.get("code"),
            obs_name=first.get("display"),
            real_value=value,
            effective_date_time=resource.get("effectiveDateTime"),
        )
    except ValidationError as e:
        logger.debug("Rejecting Observation %s: %s", resource.get("id"), e)
        return None
