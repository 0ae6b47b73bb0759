"""Error types for ipam-firewall-sync."""

from __future__ import annotations

from typing import Any

from ipam_firewall_sync.models.common import ErrorDetail


class SyncError(Exception):
    """Base exception for ipam-firewall-sync."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_error_detail(self) -> ErrorDetail:
        """Convert to ErrorDetail model."""
        return ErrorDetail(code=self.code, message=self.message, details=self.details)


class PreconditionError(SyncError):
    """A required argument was missing or invalid."""

    def __init__(self, message: str, argument: str | None = None):
        details = {"argument": argument} if argument else {}
        super().__init__(message, code="INVALID_ARGUMENT", details=details)


class ConfigurationError(SyncError):
    """Configuration error."""

    def __init__(self, message: str, config_key: str | None = None):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, code="CONFIG_ERROR", details=details)


class CollaboratorFetchError(SyncError):
    """Reading state from an external system failed."""

    def __init__(
        self,
        message: str,
        code: str = "FETCH_ERROR",
        url: str | None = None,
        status_code: int | None = None,
    ):
        details: dict[str, Any] = {}
        if url:
            details["url"] = url
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, code=code, details=details)
        self.status_code = status_code


class NotFoundError(CollaboratorFetchError):
    """The requested object does not exist on the external system."""

    def __init__(self, resource: str, url: str | None = None):
        super().__init__(f"Not found: {resource}", code="NOT_FOUND", url=url, status_code=404)
        self.resource = resource


class CollaboratorMutationError(SyncError):
    """A create, update or delete call on an external system failed."""

    def __init__(
        self,
        message: str,
        code: str = "MUTATION_ERROR",
        url: str | None = None,
        status_code: int | None = None,
    ):
        details: dict[str, Any] = {}
        if url:
            details["url"] = url
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, code=code, details=details)
        self.status_code = status_code

