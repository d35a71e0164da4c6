"""Application-wide exception classes."""

from __future__ import annotations

from typing import Optional


class ApplicationError(Exception):
    """Base exception for all application errors."""
    pass


class ConfigurationError(ApplicationError):
    """Raised when configuration is invalid."""
    pass


class DatabaseError(ApplicationError):
    """Base exception for database-related errors."""
    pass


class PersistenceFailure(DatabaseError):
    """Raised when the local store is unreadable, unwritable or corrupt."""
    pass


class ServiceError(ApplicationError):
    """Base exception for service-level errors."""
    pass


class SyncError(ServiceError):
    """Base exception for remote sync errors."""
    pass


class ConfigurationAbsent(SyncError):
    """Raised when a remote call is made without a backend URL.

    This is the permanent local-only mode, not a fault.
    """
    pass


class TransportFailure(SyncError):
    """Raised on timeout, abort, DNS or connection faults."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class RemoteRejected(SyncError):
    """Raised when the backend answers with a non-2xx status."""

    def __init__(self, status: int, path: str = "") -> None:
        super().__init__(f"HTTP {status} from {path or 'backend'}")
        self.status = status
        self.path = path
