"""Tests for the Observation mapper."""

from src.transform.fhir_to_staging.observation import map_observation
from tests.conftest import make_observation


class TestMapObservation:
    """Tests for map_observation."""

    def test_maps_fields(self) -> None:
        """Codes come from the first and second coding entries."""
        record = map_observation(make_observation())

        assert record is not None
        assert record.id == "O1"
        assert record.patient_id == "P1"
        assert record.encounter_id == "E1"
        assert record.uuid == "w1"
        assert record.obs_name == "Weight"
        assert record.code == "c2"
        assert record.real_value == 60
        assert record.effective_date_time == "2024-01-01T10:00:00+03:00"

    def test_single_coding_rejects(self) -> None:
        """Observations need at least two codings."""
        observation = make_observation(code={"coding": [{"code": "w1"}]})

        assert map_observation(observation) is None

    def test_missing_code_rejects(self) -> None:
        observation = make_observation()
        del observation["code"]

        assert map_observation(observation) is None

    def test_missing_value_rejects(self) -> None:
        observation = make_observation()
        del observation["valueQuantity"]

        assert map_observation(observation) is None

    def test_false_value_kept_by_default(self) -> None:
        """A boolean false observation is staged in presence mode."""
        observation = make_observation(valueBoolean=False)
        del observation["valueQuantity"]

        record = map_observation(observation)

        assert record is not None
        assert record.real_value is False

    def test_false_value_rejected_in_legacy_mode(self) -> None:
        observation = make_observation(valueBoolean=False)
        del observation["valueQuantity"]

        assert map_observation(observation, falsy_as_absent=True) is None

    def test_missing_encounter_reference_tolerated(self) -> None:
        """An observation without an encounter maps with a null encounter id."""
        observation = make_observation()
        del observation["encounter"]

        record = map_observation(observation)

        assert record is not None
        assert record.encounter_id is None

    def test_serializes_camel_case_keys(self) -> None:
        record = map_observation(make_observation())

        assert record is not None
        dumped = record.model_dump(mode="json", by_alias=True)
        assert dumped["realValue"] == 60
        assert dumped["effectiveDateTime"] == "2024-01-01T10:00:00+03:00"
        assert dumped["obs_name"] == "Weight"

    def test_numeric_code_is_kept_as_text(self) -> None:
        """A numeric mapped code is stored as text, not rejected."""
        observation = make_observation(
            code={"coding": [{"display": "Weight", "code": "w1"}, {"code": 5089}]}
        )

        record = map_observation(observation)

        assert record is not None
        assert record.code == "5089"
        assert record.uuid == "w1"
