"""Archive of raw EMR bundles, stored as received."""

import logging
from typing import Any

from sqlalchemy import insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from src.exceptions import ArchiveError
from src.tables import emr_fhir_bundles

logger = logging.getLogger(__name__)


def archive_bundle(engine: Engine, payload: dict[str, Any], source: str) -> None:
    """
    Insert an untouched bundle into ``emr_fhir_bundles``.

    Args:
        engine: Engine for the staging database
        payload: The bundle as posted
        source: Tag naming the sending system

    Raises:
        ArchiveError: If the insert fails
    """
    try:
        with engine.begin() as connection:
            connection.execute(
                insert(emr_fhir_bundles).values(source=source, data=payload)
            )
    except SQLAlchemyError as e:
        logger.error("Error saving FHIR bundle from %s: %s", source, e)
        raise ArchiveError(f"Failed to archive FHIR bundle: {e}") from e
