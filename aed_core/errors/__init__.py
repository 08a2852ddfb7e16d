# =============================================================================
# aed_core/errors/__init__.py
# Centralized Error Handling for the AED inventory core
# =============================================================================

from .exceptions import (
    AedInventoryError,
    NotFoundError,
    ValidationError,
    EmptyCollectionError,
    ConnectivityError,
    PersistenceError,
    SyncItemError,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    describe_error,
    safe_execute,
    ErrorContext,
    error_boundary,
)

__all__ = [
    # Exceptions
    "AedInventoryError",
    "NotFoundError",
    "ValidationError",
    "EmptyCollectionError",
    "ConnectivityError",
    "PersistenceError",
    "SyncItemError",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "describe_error",
    "safe_execute",
    "ErrorContext",
    "error_boundary",
]
