"""Flat staging records produced from FHIR resources."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ObservationRecord(BaseModel):
    """
    One observation, flattened.

    Never written to its own table: observations travel inside the
    ``obs`` map of the encounter they reference.
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str | None = None
    patient_id: str | None = None
    encounter_id: str | None = None
    code: str | None = Field(
        default=None, description="Code of the second coding entry"
    )
    uuid: str | None = Field(
        default=None, description="Code of the first coding entry (concept uuid)"
    )
    obs_name: str | None = Field(
        default=None, description="Display of the first coding entry"
    )
    real_value: Any = Field(default=None, alias="realValue")
    effective_date_time: str | None = Field(default=None, alias="effectiveDateTime")


class PatientRecord(BaseModel):
    """Row for ``staging_patient``, keyed by ``case_id``."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    case_id: str
    sex: str
    date_of_birth: str
    deceased: bool | None = None
    date_of_death: str | None = None
    facility_id: str
    patient_clinic_number: str | None = None
    national_id_number: str | None = None
    patient_name: str = ""
    phone_number: str | None = None
    country: str | None = None
    district: str | None = None
    subcounty: str | None = None
    parish: str | None = None
    village: str | None = None

    def to_row(self) -> dict[str, Any]:
        """Column values for ``staging_patient``."""
        return {
            "case_id": self.case_id,
            "sex": self.sex,
            "date_of_birth": self.date_of_birth,
            "deceased": self.deceased,
            "date_of_death": self.date_of_death,
            "facility_id": self.facility_id,
            "patient_clinic_no": self.patient_clinic_number,
            "patient_name": self.patient_name,
            "phone_number": self.phone_number,
            "country": self.country,
            "district": self.district,
            "subcounty": self.subcounty,
            "parish": self.parish,
            "village": self.village,
            "national_id": self.national_id_number,
        }


class EncounterRecord(BaseModel):
    """Row for ``staging_patient_encounters``, keyed by ``encounter_id``."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    patient_id: str | None = None
    encounter_id: str
    encounter_date: str | None = None
    facility_id: str | None = None
    encounter_type: str | None = None
    obs: dict[str, ObservationRecord] = Field(
        default_factory=dict,
        description="Correlated observations keyed by observation name",
    )

    def serialized_obs(self) -> dict[str, Any]:
        """JSON-ready form of ``obs`` as stored in the ``obs`` column."""
        return {
            name: observation.model_dump(mode="json", by_alias=True)
            for name, observation in self.obs.items()
        }

    def to_row(self) -> dict[str, Any]:
        """Column values for ``staging_patient_encounters``."""
        return {
            "case_id": self.patient_id,
            "encounter_id": self.encounter_id,
            "encounter_date": self.encounter_date,
            "facility_id": self.facility_id,
            "encounter_type": self.encounter_type,
            "obs": self.serialized_obs(),
        }


class WorkUnit(BaseModel):
    """Batch of records produced from one bundle, carried by one queue message."""

    patients: list[PatientRecord] = Field(default_factory=list)
    encounters: list[EncounterRecord] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """JSON-serializable message body."""
        return self.model_dump(mode="json", by_alias=True)
