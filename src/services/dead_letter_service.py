"""
Dead-letter storage for work units that could not be persisted.

Failed payloads are kept with the reason they failed so they can be
inspected and replayed onto the staging queue once the cause is fixed.
"""

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError
from sqlalchemy import delete, insert, select
from sqlalchemy.engine import Engine

from src.schemas.staging_schemas import WorkUnit
from src.services.dispatch_service import JobDispatcher
from src.tables import staging_dead_letter

logger = logging.getLogger(__name__)


@dataclass
class ReplayResult:
    """Outcome of a dead-letter replay."""

    replayed: int
    skipped: int


def record_dead_letter(
    engine: Engine,
    payload: dict[str, Any],
    reason: str,
    task_id: str | None = None,
) -> None:
    """Store a failed payload with its failure reason."""
    with engine.begin() as connection:
        connection.execute(
            insert(staging_dead_letter).values(
                task_id=task_id,
                reason=reason,
                payload=payload,
            )
        )
    logger.warning("Dead-lettered work unit (task %s): %s", task_id, reason)


def replay_dead_letters(
    engine: Engine,
    dispatcher: JobDispatcher,
    limit: int = 100,
) -> ReplayResult:
    """
    Re-submit stored work units to the staging queue.

    Each entry is deleted once the queue accepts it. Entries whose payload
    is not a valid work unit stay in place.

    Args:
        engine: Engine for the staging database
        dispatcher: Dispatcher for the staging queue
        limit: Maximum number of entries to replay

    Returns:
        ReplayResult with replayed and skipped counts

    Raises:
        QueueSubmissionError: If the broker stops accepting messages
    """
    replayed = 0
    skipped = 0

    with engine.connect() as connection:
        rows = connection.execute(
            select(staging_dead_letter.c.id, staging_dead_letter.c.payload)
            .order_by(staging_dead_letter.c.id)
            .limit(limit)
        ).all()

    for row in rows:
        try:
            work_unit = WorkUnit.model_validate(row.payload)
        except ValidationError as e:
            logger.warning("Dead letter %s is not a valid work unit: %s", row.id, e)
            skipped += 1
            continue

        dispatcher.submit(work_unit)
        with engine.begin() as connection:
            connection.execute(
                delete(staging_dead_letter).where(staging_dead_letter.c.id == row.id)
            )
        replayed += 1

    logger.info("Replayed %d dead letter(s), skipped %d", replayed, skipped)
    return ReplayResult(replayed=replayed, skipped=skipped)
