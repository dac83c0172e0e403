"""Shared dependencies for routers."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.engine import Engine

from src.clients.database import get_engine
from src.clients.queue import get_job_dispatcher
from src.services.dispatch_service import JobDispatcher

# Typed dependency aliases for use in endpoint signatures
EngineDep = Annotated[Engine, Depends(get_engine)]
JobDispatcherDep = Annotated[JobDispatcher, Depends(get_job_dispatcher)]
