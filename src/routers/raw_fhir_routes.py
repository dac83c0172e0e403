"""Archive endpoint for raw EMR bundles."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Header, HTTPException, status

from src.exceptions import ArchiveError
from src.routers.deps import EngineDep
from src.schemas.ingest_schemas import ArchiveResponse
from src.services.archive_service import archive_bundle
from src.settings import settings

router = APIRouter(prefix="/raw-fhir", tags=["Archive"])


@router.post("", response_model=ArchiveResponse)
def save_raw_bundle(
    payload: Annotated[dict[str, Any], Body()],
    engine: EngineDep,
    x_source: Annotated[str | None, Header()] = None,
) -> ArchiveResponse:
    """Store a bundle exactly as received, tagged with its source system."""
    try:
        archive_bundle(engine, payload, x_source or settings.default_source)
    except ArchiveError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e

    return ArchiveResponse(success=True, message="FHIR bundle saved successfully.")
