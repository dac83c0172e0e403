"""Dependency provider for the staging job dispatcher."""

from functools import lru_cache

from src.services.dispatch_service import JobDispatcher
from src.settings import settings
from src.worker.tasks import persist_work_unit


@lru_cache(maxsize=1)
def get_job_dispatcher() -> JobDispatcher:
    """Get singleton JobDispatcher instance."""
    return JobDispatcher(persist_work_unit, queue=settings.fhir_queue)
