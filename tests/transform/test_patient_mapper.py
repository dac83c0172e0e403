"""Tests for the Patient mapper."""

from typing import Any

import pytest

from src.transform.fhir_to_staging.patient import (
    OPENMRS_ADDRESS_EXTENSION,
    map_patient,
)
from tests.conftest import make_patient


@pytest.fixture
def full_patient() -> dict[str, Any]:
    """An OpenMRS patient with every optional structure filled in."""
    return make_patient(
        id="P9",
        gender="male",
        birthDate="1985-06-15",
        deceasedBoolean=True,
        deceasedDateTime="2023-02-01T00:00:00",
        identifier=[
            {"type": {"text": "OpenMRS ID"}, "value": "100-1"},
            {"type": {"text": "HIV Clinic No."}, "value": "CLN-42"},
            {"type": {"text": "National ID No."}, "value": "CM9000"},
            {"type": {"text": "HIV Clinic No."}, "value": "CLN-SECOND"},
        ],
        name=[{"given": ["Jane", "Mary"], "family": "Nakato"}],
        telecom=[{"value": "+256700000000"}, {"value": "+256711111111"}],
        address=[
            {
                "country": "Uganda",
                "district": "Wakiso",
                "extension": [
                    {"url": "http://example.org/other", "valueString": "x"},
                    {
                        "url": OPENMRS_ADDRESS_EXTENSION,
                        "extension": [
                            {
                                "url": f"{OPENMRS_ADDRESS_EXTENSION}#subcounty",
                                "valueString": "Nansana",
                            },
                            {
                                "url": f"{OPENMRS_ADDRESS_EXTENSION}#parish",
                                "valueString": "Gombe",
                            },
                            {
                                "url": f"{OPENMRS_ADDRESS_EXTENSION}#village",
                                "valueString": "Kiwenda",
                            },
                        ],
                    },
                ],
            }
        ],
    )


class TestMapPatient:
    """Tests for map_patient field extraction."""

    def test_maps_all_fields(self, full_patient: dict[str, Any]) -> None:
        """Every staging field is read from its FHIR location."""
        record = map_patient(full_patient)

        assert record is not None
        assert record.case_id == "P9"
        assert record.sex == "male"
        assert record.date_of_birth == "1985-06-15"
        assert record.deceased is True
        assert record.date_of_death == "2023-02-01T00:00:00"
        assert record.facility_id == "F1"
        assert record.patient_clinic_number == "CLN-42"
        assert record.national_id_number == "CM9000"
        assert record.patient_name == "Jane Nakato"
        assert record.phone_number == "+256700000000"
        assert record.country == "Uganda"
        assert record.district == "Wakiso"
        assert record.subcounty == "Nansana"
        assert record.parish == "Gombe"
        assert record.village == "Kiwenda"

    def test_bare_year_becomes_january_first(self) -> None:
        """A four-digit birth year is normalized to YYYY-01-01."""
        record = map_patient(make_patient(birthDate="1990"))

        assert record is not None
        assert record.date_of_birth == "1990-01-01"

    def test_optional_structures_may_be_missing(self) -> None:
        """A minimal patient maps with nulls for optional fields."""
        patient = make_patient()
        del patient["address"]

        record = map_patient(patient)

        assert record is not None
        assert record.patient_name == ""
        assert record.phone_number is None
        assert record.patient_clinic_number is None
        assert record.national_id_number is None
        assert record.deceased is None
        assert record.date_of_death is None
        assert record.country is None
        assert record.village is None

    def test_identifier_without_type_is_ignored(self) -> None:
        """Identifiers lacking a type do not break the lookup."""
        record = map_patient(
            make_patient(
                identifier=[
                    {"value": "no-type"},
                    {"type": {"text": "National ID No."}, "value": "CM1"},
                ]
            )
        )

        assert record is not None
        assert record.national_id_number == "CM1"
        assert record.patient_clinic_number is None

    def test_name_with_family_only_is_trimmed(self) -> None:
        """A missing given name leaves no leading space."""
        record = map_patient(make_patient(name=[{"family": "Okello"}]))

        assert record is not None
        assert record.patient_name == "Okello"

    def test_empty_district_is_null(self) -> None:
        """An empty district string is stored as null."""
        record = map_patient(make_patient(address=[{"district": ""}]))

        assert record is not None
        assert record.district is None


class TestPatientRejection:
    """Tests for the required-field rules."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"managingOrganization": None},
            {"managingOrganization": {"reference": "F1"}},
            {"managingOrganization": {}},
            {"gender": None},
            {"id": None},
            {"birthDate": None},
            {"birthDate": "1990-01"},
            {"birthDate": "1990-01-01T00:00:00"},
        ],
    )
    def test_missing_required_field_rejects(self, overrides: dict[str, Any]) -> None:
        """Patients missing facility, sex, id or a full birth date are dropped."""
        assert map_patient(make_patient(**overrides)) is None

    def test_missing_facility_rejects_fully_populated_patient(
        self, full_patient: dict[str, Any]
    ) -> None:
        """Other populated fields never compensate for a missing facility."""
        del full_patient["managingOrganization"]

        assert map_patient(full_patient) is None

    def test_numeric_optional_values_are_kept_as_text(self) -> None:
        """Numbers in optional fields never cost the patient its row."""
        record = map_patient(
            make_patient(
                telecom=[{"value": 256700000000}],
                identifier=[{"type": {"text": "HIV Clinic No."}, "value": 1234}],
            )
        )

        assert record is not None
        assert record.phone_number == "256700000000"
        assert record.patient_clinic_number == "1234"


class TestPatientRow:
    """Tests for the staging_patient row layout."""

    def test_row_uses_table_column_names(self, full_patient: dict[str, Any]) -> None:
        record = map_patient(full_patient)

        assert record is not None
        row = record.to_row()
        assert row["patient_clinic_no"] == "CLN-42"
        assert row["national_id"] == "CM9000"
        assert list(row) == [
            "case_id",
            "sex",
            "date_of_birth",
            "deceased",
            "date_of_death",
            "facility_id",
            "patient_clinic_no",
            "patient_name",
            "phone_number",
            "country",
            "district",
            "subcounty",
            "parish",
            "village",
            "national_id",
        ]
