"""Attach mapped observations to the encounters they reference."""

import logging
from collections import defaultdict

from src.schemas.staging_schemas import EncounterRecord, ObservationRecord

logger = logging.getLogger(__name__)


def attach_observations(
    encounters: list[EncounterRecord],
    observations: list[ObservationRecord],
) -> list[EncounterRecord]:
    """
    Give every encounter the map of its observations keyed by name.

    Observations are grouped by encounter id first, so the cost is linear
    in the number of records. When two observations of one encounter share
    a name, the later one wins.

    Args:
        encounters: Mapped encounters, in bundle order
        observations: Mapped observations, in bundle order

    Returns:
        New encounter records, in the same order, with ``obs`` populated
    """
    by_encounter: dict[str, list[ObservationRecord]] = defaultdict(list)
    for observation in observations:
        if observation.encounter_id is not None:
            by_encounter[observation.encounter_id].append(observation)

    correlated: list[EncounterRecord] = []
    for encounter in encounters:
        obs: dict[str, ObservationRecord] = {}
        for observation in by_encounter.get(encounter.encounter_id, []):
            key = observation.obs_name or observation.uuid
            if key is None:
                logger.debug(
                    "Observation %s on encounter %s has no name, skipping",
                    observation.id,
                    encounter.encounter_id,
                )
                continue
            obs[key] = observation
        correlated.append(encounter.model_copy(update={"obs": obs}))

    return correlated
