"""
Domain errors raised by the scoring, checkpoint and progress engines.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError


class LessonCoreError(Exception):
    """Base class for engine errors."""


class ConfigurationError(LessonCoreError):
    """A grading rule set cannot be evaluated (authoring bug, not retryable)."""


class DataUnavailableError(LessonCoreError):
    """Storage could not supply or persist the data a request needs."""


class CheckpointExpiredError(LessonCoreError):
    """A checkpoint was submitted after its time limit."""


class CheckpointStateError(LessonCoreError):
    """A checkpoint is not in a state that accepts the requested transition."""


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise database failures as DataUnavailableError."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise DataUnavailableError(f"{operation} failed") from exc
