"""FHIR Staging - EMR bundle ingestion into reporting staging tables."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.clients.database import get_engine
from src.routers import fhir_routes, health, raw_fhir_routes
from src.settings import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan management."""
    logging.basicConfig(level=settings.log_level)
    yield
    # Shutdown - release pooled connections if the engine was created
    if get_engine.cache_info().currsize:
        get_engine().dispose()


app = FastAPI(
    title="FHIR Staging",
    description="Flatten EMR FHIR bundles into staging tables for reporting",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(ValidationError)
async def handle_validation_error(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle Pydantic ValidationError and return 422."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors()},
    )


@app.exception_handler(Exception)
async def handle_unhandled_exceptions(request: Request, exc: Exception) -> JSONResponse:
    """Catch and log all unhandled exceptions."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Register routers
app.include_router(health.router)
app.include_router(fhir_routes.router)
app.include_router(raw_fhir_routes.router)


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint."""
    return {"service": "fhir-staging", "version": "0.1.0"}
