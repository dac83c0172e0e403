"""Custom exceptions for the FHIR staging service."""


class StagingError(Exception):
    """Base exception for staging pipeline errors."""

    pass


class QueueSubmissionError(StagingError):
    """A work unit could not be handed to the queue."""

    pass


class PersistenceError(StagingError):
    """Error while writing a work unit to the staging tables."""

    pass


class TransientPersistenceError(PersistenceError):
    """Persistence failure that may succeed on retry (connection loss, pool timeout)."""

    pass


class PermanentPersistenceError(PersistenceError):
    """Persistence failure that will fail again on retry (constraint, bad data)."""

    pass


class ArchiveError(StagingError):
    """Error while archiving a raw bundle."""

    pass
