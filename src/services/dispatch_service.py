"""Hands work units to the queue feeding the staging upsert worker."""

import logging

from celery import Task
from kombu.exceptions import OperationalError as BrokerError

from src.exceptions import QueueSubmissionError
from src.schemas.staging_schemas import WorkUnit

logger = logging.getLogger(__name__)


class JobDispatcher:
    """Submits work units to the staging queue without waiting for the write."""

    def __init__(self, task: Task, queue: str):
        self._task = task
        self._queue = queue

    @property
    def queue(self) -> str:
        """Name of the queue work units are sent to."""
        return self._queue

    def submit(self, work_unit: WorkUnit) -> str:
        """
        Enqueue a work unit for persistence.

        Args:
            work_unit: Records produced from one bundle

        Returns:
            The queue job id

        Raises:
            QueueSubmissionError: If the broker does not accept the message
        """
        try:
            result = self._task.apply_async(
                args=[work_unit.to_payload()],
                queue=self._queue,
            )
        except (BrokerError, OSError) as e:
            logger.error("Failed to enqueue work unit on %s: %s", self._queue, e)
            raise QueueSubmissionError(
                f"Could not submit work unit to queue '{self._queue}'"
            ) from e

        logger.info(
            "Queued job %s with %d patient(s) and %d encounter(s)",
            result.id,
            len(work_unit.patients),
            len(work_unit.encounters),
        )
        return str(result.id)
