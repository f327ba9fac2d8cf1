from __future__ import annotations

from typing import Any


class DomainError(Exception):
    error_code = "domain_error"
    status_code = 400

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DomainError):
    """Missing or malformed input; the caller must correct it and resubmit."""

    error_code = "validation_error"
    status_code = 422


class ConflictError(DomainError):
    """Duplicate identity, or the stored revision moved under a conditional save."""

    error_code = "conflict"
    status_code = 409


class NotFoundError(DomainError):
    error_code = "not_found"
    status_code = 404


class InvalidStateError(DomainError):
    """Operation not legal for the record's current lifecycle state."""

    error_code = "invalid_state"
    status_code = 409


class StorageError(DomainError):
    """Backend read or write failed. Never retried by the services."""

    error_code = "storage_unavailable"
    status_code = 503
