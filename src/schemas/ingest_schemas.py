"""Schemas for the ingest and archive endpoints."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class IngestStatus(str, Enum):
    """Ingest job status values."""

    QUEUED = "queued"


class BundleRequest(BaseModel):
    """A FHIR Bundle as posted by the EMR. Only ``entry`` is read."""

    model_config = ConfigDict(extra="allow")

    entry: list[Any] = Field(description="Bundle entries, wrapped or bare resources")


class ResourceCounts(BaseModel):
    """Counts of the resource kinds the pipeline handles."""

    Patient: int = 0
    Encounter: int = 0
    Observation: int = 0


class IngestResponse(BaseModel):
    """Acknowledgement that a bundle was accepted for processing."""

    job_id: str = Field(description="Queue job identifier for the work unit")
    status: IngestStatus = Field(default=IngestStatus.QUEUED)
    received: ResourceCounts = Field(
        default_factory=ResourceCounts,
        description="Resources classified from the bundle",
    )
    accepted: ResourceCounts = Field(
        default_factory=ResourceCounts,
        description="Resources that passed validation and were mapped",
    )


class ArchiveResponse(BaseModel):
    """Response model for the raw bundle archive endpoint."""

    success: bool
    message: str
