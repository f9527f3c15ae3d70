"""Errors raised by the progress engine.

Routers translate these into HTTP responses; the engine never turns them into
zeroed results.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import InterfaceError, OperationalError

logger = logging.getLogger(__name__)


class ProgressError(Exception):
    """Base progress error."""

    def __init__(self, message: str, code: str = "progress_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(ProgressError):
    """Referenced module does not exist."""

    def __init__(self, message: str = "Module not found"):
        super().__init__(message, "not_found")


class InvalidScopeError(ProgressError):
    """Scope filter is missing or points outside the caller's cohort."""

    def __init__(self, message: str = "Invalid scope"):
        super().__init__(message, "invalid_scope")


class UpstreamUnavailableError(ProgressError):
    """A record store did not answer."""

    def __init__(self, message: str = "Record store unavailable"):
        super().__init__(message, "upstream_unavailable")


class RollupCancelledError(ProgressError):
    """The caller went away while a dashboard was being composed."""

    def __init__(self, message: str = "Rollup cancelled"):
        super().__init__(message, "cancelled")


@contextmanager
def store_errors(store: str):
    """Re-raise driver/connection failures from `store` as UpstreamUnavailableError."""
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        logger.error("%s store failed: %s", store, e)
        raise UpstreamUnavailableError(f"{store} store unavailable") from e
