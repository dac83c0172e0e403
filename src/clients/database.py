"""Dependency provider for the staging database engine."""

from functools import lru_cache

from sqlalchemy.engine import Engine

from src.database import create_db_engine


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Get singleton Engine instance."""
    return create_db_engine()
