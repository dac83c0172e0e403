"""Ingest endpoint for EMR FHIR bundles."""

import logging

from fastapi import APIRouter, HTTPException, status

from src.exceptions import QueueSubmissionError
from src.routers.deps import JobDispatcherDep
from src.schemas.ingest_schemas import BundleRequest, IngestResponse, IngestStatus
from src.settings import settings
from src.transform.fhir_to_staging import transform_bundle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/fhir", tags=["FHIR"])


@router.post(
    "", response_model=IngestResponse, status_code=status.HTTP_202_ACCEPTED
)
def ingest_bundle(
    bundle: BundleRequest,
    dispatcher: JobDispatcherDep,
) -> IngestResponse:
    """
    Accept a FHIR bundle for staging.

    Patients, Encounters and Observations are flattened into staging rows
    and queued for persistence. The response only confirms the bundle was
    queued; the database write happens later in the worker.
    """
    work_unit, received, accepted = transform_bundle(
        {"entry": bundle.entry},
        falsy_as_absent=settings.legacy_falsy_values,
    )
    logger.info(
        "Bundle classified: %d patient(s), %d encounter(s), %d observation(s); "
        "accepted %d/%d/%d",
        received.Patient,
        received.Encounter,
        received.Observation,
        accepted.Patient,
        accepted.Encounter,
        accepted.Observation,
    )

    try:
        job_id = dispatcher.submit(work_unit)
    except QueueSubmissionError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        ) from e

    return IngestResponse(
        job_id=job_id,
        status=IngestStatus.QUEUED,
        received=received,
        accepted=accepted,
    )
