"""Utility functions for ipam-firewall-sync."""

from ipam_firewall_sync.utils.logging import configure_logging, get_logger, get_logger_with_context
from ipam_firewall_sync.utils.errors import (
    SyncError,
    PreconditionError,
    ConfigurationError,
    CollaboratorFetchError,
    CollaboratorMutationError,
    NotFoundError,
)
from ipam_firewall_sync.utils.config import (
    SyncConfig,
    LoggingConfig,
    load_config,
    get_config,
    set_config,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "get_logger_with_context",
    # Errors
    "SyncError",
    "PreconditionError",
    "ConfigurationError",
    "CollaboratorFetchError",
    "CollaboratorMutationError",
    "NotFoundError",
    # Config
    "SyncConfig",
    "LoggingConfig",
    "load_config",
    "get_config",
    "set_config",
]
