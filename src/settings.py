"""
Application settings for the FHIR staging service.

- Defaults are intended for development use.
- For production, set environment variables to override fields.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """FHIR staging service configuration."""

    # PostgreSQL Configuration
    pg_user: str = Field(default="staging", description="PostgreSQL user")
    pg_password: str = Field(default="staging", description="PostgreSQL password")
    pg_host: str = Field(default="localhost", description="PostgreSQL host")
    pg_port: int = Field(default=5432, description="PostgreSQL port")
    pg_database: str = Field(default="staging", description="PostgreSQL database")
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL; built from the PG_* fields when unset",
    )

    # Connection pool
    db_pool_size: int = Field(
        default=20,
        description="Maximum number of pooled database connections",
    )
    db_pool_timeout: float = Field(
        default=2.0,
        description="Seconds to wait for a pooled connection before failing",
    )
    db_pool_recycle: int = Field(
        default=300,
        description="Seconds after which a pooled connection is replaced",
    )

    # Queue Configuration
    celery_broker_url: str = Field(
        default="redis://localhost:6379/0",
        description="Celery broker URL",
    )
    fhir_queue: str = Field(
        default="fhir",
        description="Queue carrying work units to the upsert worker",
    )
    dead_letter_queue: str = Field(
        default="fhir.dead_letter",
        description="Queue carrying work units that could not be persisted",
    )
    worker_concurrency: int = Field(
        default=4,
        description="Number of work units processed concurrently per worker",
    )
    persist_max_retries: int = Field(
        default=3,
        description="Retries for transient database failures before dead-lettering",
    )
    persist_retry_backoff: float = Field(
        default=5.0,
        description="Base delay in seconds between retries (doubled per attempt)",
    )

    # Transformation
    legacy_falsy_values: bool = Field(
        default=False,
        description="Treat false/0 observation values as absent, as the legacy pipeline did",
    )

    # Archival
    default_source: str = Field(
        default="UgandaEMR",
        description="Source tag stored with archived bundles when none is supplied",
    )

    log_level: str = Field(default="INFO", description="Root log level")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def model_post_init(self, __context: object) -> None:
        """Initialize derived settings after model construction."""
        if self.database_url is None:
            self.database_url = (
                f"postgresql+psycopg2://{self.pg_user}:{self.pg_password}"
                f"@{self.pg_host}:{self.pg_port}/{self.pg_database}"
            )


settings = Settings()
