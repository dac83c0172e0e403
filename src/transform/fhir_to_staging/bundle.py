"""
Bundle transformer for the staging pipeline.

Classifies the entries of an EMR bundle by resource type, maps each
resource to its staging record and folds observations into their
encounters, producing one work unit per bundle.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable

from src.schemas.ingest_schemas import ResourceCounts
from src.schemas.staging_schemas import WorkUnit
from src.transform.fhir_to_staging.correlation import attach_observations
from src.transform.fhir_to_staging.encounter import map_encounter
from src.transform.fhir_to_staging.observation import map_observation
from src.transform.fhir_to_staging.patient import map_patient

STAGED_RESOURCE_TYPES = ("Patient", "Encounter", "Observation")


@dataclass
class ClassifiedResources:
    """Bare resources of a bundle, bucketed by resource type."""

    patients: list[dict[str, Any]] = field(default_factory=list)
    encounters: list[dict[str, Any]] = field(default_factory=list)
    observations: list[dict[str, Any]] = field(default_factory=list)

    def bucket(self, resource_type: str) -> list[dict[str, Any]]:
        """Bucket holding resources of the given type."""
        return {
            "Patient": self.patients,
            "Encounter": self.encounters,
            "Observation": self.observations,
        }[resource_type]


def classify_entries(entries: Iterable[Any]) -> ClassifiedResources:
    """
    Bucket bundle entries by resource type.

    An entry is either ``{"resource": R}`` or ``R`` itself. Both shapes are
    checked for every entry, so an object that is a resource and also wraps
    one lands in the buckets twice. Other resource types are ignored.

    Args:
        entries: The ``entry`` array of a bundle

    Returns:
        ClassifiedResources holding the bare resources
    """
    classified = ClassifiedResources()

    for entry in entries:
        if not isinstance(entry, dict):
            continue

        wrapped = entry.get("resource")
        if isinstance(wrapped, dict):
            wrapped_type = wrapped.get("resourceType")
            if wrapped_type in STAGED_RESOURCE_TYPES:
                classified.bucket(wrapped_type).append(wrapped)

        bare_type = entry.get("resourceType")
        if bare_type in STAGED_RESOURCE_TYPES:
            classified.bucket(bare_type).append(entry)

    return classified


def transform_bundle(
    bundle: dict[str, Any],
    falsy_as_absent: bool = False,
) -> tuple[WorkUnit, ResourceCounts, ResourceCounts]:
    """
    Transform an EMR bundle into a staging work unit.

    Args:
        bundle: FHIR Bundle with an ``entry`` array
        falsy_as_absent: Treat false/0 observation values as missing

    Returns:
        Tuple of (work unit, classified counts, accepted counts)
    """
    classified = classify_entries(bundle.get("entry") or [])

    patients = [
        record
        for record in (map_patient(resource) for resource in classified.patients)
        if record is not None
    ]
    encounters = [
        record
        for record in (map_encounter(resource) for resource in classified.encounters)
        if record is not None
    ]
    observations = [
        record
        for record in (
            map_observation(resource, falsy_as_absent)
            for resource in classified.observations
        )
        if record is not None
    ]

    received = ResourceCounts(
        Patient=len(classified.patients),
        Encounter=len(classified.encounters),
        Observation=len(classified.observations),
    )
    accepted = ResourceCounts(
        Patient=len(patients),
        Encounter=len(encounters),
        Observation=len(observations),
    )

    work_unit = WorkUnit(
        patients=patients,
        encounters=attach_observations(encounters, observations),
    )
    return work_unit, received, accepted
