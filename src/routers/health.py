"""Health check endpoint."""

from fastapi import APIRouter

from src.database import ping
from src.routers.deps import EngineDep
from src.schemas.health import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check(engine: EngineDep) -> HealthResponse:
    """Check service health including staging database connectivity."""
    database_healthy = ping(engine)

    return HealthResponse(
        status="healthy" if database_healthy else "degraded",
        database=database_healthy,
    )
