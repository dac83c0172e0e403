"""
Celery tasks for the staging pipeline.

persist_work_unit upserts one work unit into the staging tables. Transient
database failures are retried with backoff; anything else, and retries
that run out, send the payload to the dead-letter lane. The task itself
never fails back to the broker.
"""

import logging
from typing import Any

from celery import Task
from kombu.exceptions import OperationalError as BrokerError
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from src.clients.database import get_engine
from src.exceptions import PermanentPersistenceError, TransientPersistenceError
from src.schemas.staging_schemas import WorkUnit
from src.services.dead_letter_service import record_dead_letter
from src.services.staging_writer import write_work_unit
from src.settings import settings
from src.worker.celery_app import app

logger = logging.getLogger(__name__)


@app.task(
    bind=True,
    name="staging.persist_work_unit",
    max_retries=settings.persist_max_retries,
)
def persist_work_unit(self: Task, payload: dict[str, Any]) -> dict[str, int]:
    """Upsert one work unit into the staging tables."""
    task_id = self.request.id

    try:
        work_unit = WorkUnit.model_validate(payload)
    except ValidationError as e:
        logger.error("[%s] Malformed work unit: %s", task_id, e)
        send_to_dead_letter(payload, f"Malformed work unit: {e}")
        return {"patients": 0, "encounters": 0}

    try:
        result = write_work_unit(get_engine(), work_unit)
    except TransientPersistenceError as e:
        retries = self.request.retries
        if retries < self.max_retries:
            countdown = settings.persist_retry_backoff * (2**retries)
            logger.warning(
                "[%s] Transient database error, retry %d/%d in %.0fs: %s",
                task_id,
                retries + 1,
                self.max_retries,
                countdown,
                e,
            )
            raise self.retry(exc=e, countdown=countdown)
        logger.error("[%s] Giving up after %d retries: %s", task_id, retries, e)
        send_to_dead_letter(payload, f"Retries exhausted: {e}")
        return {"patients": 0, "encounters": 0}
    except PermanentPersistenceError as e:
        logger.error("[%s] Failed to persist work unit: %s", task_id, e)
        send_to_dead_letter(payload, str(e))
        return {"patients": 0, "encounters": 0}

    return {
        "patients": result.patients_written,
        "encounters": result.encounters_written,
    }


@app.task(bind=True, name="staging.dead_letter_work_unit")
def dead_letter_work_unit(self: Task, payload: dict[str, Any], reason: str) -> None:
    """Store a work unit that could not be persisted."""
    try:
        record_dead_letter(get_engine(), payload, reason, task_id=self.request.id)
    except SQLAlchemyError as e:
        logger.error(
            "[%s] Could not store dead letter (%s); work unit dropped: %s",
            self.request.id,
            reason,
            e,
        )


def send_to_dead_letter(payload: dict[str, Any], reason: str) -> None:
    """Route a failed payload to the dead-letter lane."""
    try:
        dead_letter_work_unit.apply_async(
            args=[payload, reason],
            queue=settings.dead_letter_queue,
        )
    except (BrokerError, OSError) as e:
        logger.error("Could not route work unit to dead-letter lane: %s", e)
