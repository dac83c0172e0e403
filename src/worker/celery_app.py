"""
Celery configuration for the staging worker.

Run with:
    celery -A src.worker.celery_app worker -Q fhir,fhir.dead_letter
"""

import logging
from typing import Any

from celery import Celery
from celery.signals import worker_init

from src.clients.database import get_engine
from src.settings import settings
from src.tables import metadata, staging_dead_letter

logger = logging.getLogger(__name__)

app = Celery("staging", broker=settings.celery_broker_url, include=["src.worker.tasks"])

app.conf.update(
    # One lane for work units, one for the ones that could not be stored
    task_routes={
        "staging.persist_work_unit": {"queue": settings.fhir_queue},
        "staging.dead_letter_work_unit": {"queue": settings.dead_letter_queue},
    },
    task_default_queue=settings.fhir_queue,
    # JSON only; payloads are plain records
    accept_content=["json"],
    task_serializer="json",
    # At-most-once delivery: ack on receipt, failures go to the dead-letter lane
    task_acks_late=False,
    task_ignore_result=True,
    worker_concurrency=settings.worker_concurrency,
    worker_prefetch_multiplier=1,
)


@worker_init.connect
def create_dead_letter_table(**kwargs: Any) -> None:
    """Create the dead-letter table on worker startup if it does not exist."""
    metadata.create_all(get_engine(), tables=[staging_dead_letter])
    logger.info("Dead-letter table %s ready", staging_dead_letter.name)
