"""
FHIR to staging-table transformation module.

Flattens Patient, Encounter and Observation resources from an EMR bundle
into the records written to the staging tables:

- Patients become ``staging_patient`` rows keyed by ``case_id``
- Encounters become ``staging_patient_encounters`` rows keyed by ``encounter_id``
- Observations are folded into the ``obs`` map of their encounter
"""

from src.transform.fhir_to_staging.bundle import classify_entries, transform_bundle

__all__ = ["classify_entries", "transform_bundle"]
