"""
Staging table writer.

Upserts the records of one work unit into ``staging_patient`` and
``staging_patient_encounters`` with one multi-row statement per table.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy import Table, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from src.exceptions import (
    PermanentPersistenceError,
    PersistenceError,
    TransientPersistenceError,
)
from src.schemas.staging_schemas import WorkUnit
from src.tables import staging_patient, staging_patient_encounters

logger = logging.getLogger(__name__)

# Dialects whose INSERT supports ON CONFLICT ... DO UPDATE
UPSERT_INSERTS: dict[str, Callable[[Table], Any]] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

TRANSIENT_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)


@dataclass
class WriteResult:
    """Rows sent to each staging table for one work unit."""

    patients_written: int
    encounters_written: int


def write_work_unit(engine: Engine, work_unit: WorkUnit) -> WriteResult:
    """
    Upsert a work unit into the staging tables.

    Encounters are only written after the patient upsert, and only when the
    unit carries patients. Both statements share one connection and one
    transaction, so a failed encounter write also undoes the patients.

    Args:
        engine: Engine for the staging database
        work_unit: Records produced from one bundle

    Returns:
        WriteResult with the number of rows sent per table

    Raises:
        TransientPersistenceError: Connection-level failure worth retrying
        PermanentPersistenceError: Failure that will repeat on retry
    """
    if not work_unit.patients:
        if work_unit.encounters:
            logger.info(
                "Skipping %d encounter(s): work unit carries no patients",
                len(work_unit.encounters),
            )
        return WriteResult(patients_written=0, encounters_written=0)

    patient_rows = _last_per_key(
        [patient.to_row() for patient in work_unit.patients], "case_id"
    )
    encounter_rows = _last_per_key(
        [encounter.to_row() for encounter in work_unit.encounters], "encounter_id"
    )

    try:
        with engine.begin() as connection:
            connection.execute(
                _upsert_statement(
                    staging_patient, "case_id", patient_rows, connection.dialect.name
                )
            )
            if encounter_rows:
                connection.execute(
                    _upsert_statement(
                        staging_patient_encounters,
                        "encounter_id",
                        encounter_rows,
                        connection.dialect.name,
                    )
                )
    except SQLAlchemyError as e:
        raise classify_persistence_error(e) from e

    logger.info(
        "Upserted %d patient(s) and %d encounter(s)",
        len(patient_rows),
        len(encounter_rows),
    )
    return WriteResult(
        patients_written=len(patient_rows),
        encounters_written=len(encounter_rows),
    )


def classify_persistence_error(error: SQLAlchemyError) -> PersistenceError:
    """Wrap a database error as transient (retryable) or permanent."""
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return TransientPersistenceError(str(error))
    if isinstance(error, TRANSIENT_ERRORS):
        return TransientPersistenceError(str(error))
    return PermanentPersistenceError(str(error))


def _upsert_statement(
    table: Table, key: str, rows: list[dict[str, Any]], dialect_name: str
) -> Any:
    """Multi-row INSERT that overwrites every non-key column on conflict."""
    insert = UPSERT_INSERTS.get(dialect_name)
    if insert is None:
        raise PermanentPersistenceError(
            f"Upsert is not supported for the {dialect_name} dialect"
        )

    statement = insert(table).values(rows)
    updates = {
        column.name: statement.excluded[column.name]
        for column in table.columns
        if column.name not in (key, "updated_date")
    }
    updates["updated_date"] = func.current_timestamp()
    return statement.on_conflict_do_update(index_elements=[key], set_=updates)


def _last_per_key(rows: list[dict[str, Any]], key: str) -> list[dict[str, Any]]:
    """Keep the last row for each key; one statement cannot upsert a key twice."""
    latest: dict[Any, dict[str, Any]] = {}
    for row in rows:
        latest.pop(row[key], None)
        latest[row[key]] = row
    if len(latest) < len(rows):
        logger.debug(
            "Collapsed %d duplicate %s value(s) in batch", len(rows) - len(latest), key
        )
    return list(latest.values())
