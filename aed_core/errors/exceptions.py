# =============================================================================
# aed_core/errors/exceptions.py
# Custom Exception Hierarchy for the AED inventory core
# =============================================================================

from typing import Any, Dict, Optional, Tuple


class AedInventoryError(Exception):
    """
    Base exception for all AED inventory errors.

    Subclasses set ``code`` and list the keyword arguments they accept as
    structured details in ``detail_fields``; those keywords land in
    ``details`` when given.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "AED_404")
        details: Additional context as a dictionary
        recoverable: Whether the caller can carry on after the error
    """

    code: str = "AED_000"
    detail_fields: Tuple[str, ...] = ()
    default_recoverable: bool = True

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
        **fields: Any,
    ):
        unknown = set(fields) - set(self.detail_fields)
        if unknown:
            raise TypeError(
                f"{type(self).__name__} got unexpected detail(s): {', '.join(sorted(unknown))}"
            )

        super().__init__(message)
        self.message = message
        self.code = code or type(self).code
        self.details = dict(details or {})
        self.details.update({k: v for k, v in fields.items() if v})
        self.recoverable = self.default_recoverable if recoverable is None else recoverable

    def __str__(self) -> str:
        text = f"[{self.code}] {self.message}"
        if self.details:
            text += f" | Details: {self.details}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form for logs and ServiceResult metadata"""
        return {
            "error_type": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# DATA LAYER EXCEPTIONS
# =============================================================================

class NotFoundError(AedInventoryError):
    """No AED with the requested title"""
    code = "AED_404"
    detail_fields = ("title", "collection")


class ValidationError(AedInventoryError):
    """An AED or inspection payload failed validation"""
    code = "DATA_001"
    detail_fields = ("errors",)

    @property
    def errors(self) -> Dict[str, str]:
        """Field name -> message"""
        return self.details.get("errors", {})


class EmptyCollectionError(AedInventoryError):
    """An operation needed a non-empty collection"""
    code = "DATA_002"
    detail_fields = ("collection",)


# =============================================================================
# OFFLINE / SYNC EXCEPTIONS
# =============================================================================

class ConnectivityError(AedInventoryError):
    """The remote store is needed but unreachable"""
    code = "NET_001"
    detail_fields = ("operation",)


class PersistenceError(AedInventoryError):
    """The local store could not be read or written"""
    code = "STORE_001"
    detail_fields = ("key", "action")


class SyncItemError(AedInventoryError):
    """One queued operation failed to replay"""
    code = "SYNC_001"
    detail_fields = ("operation_id", "operation_type")


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(AedInventoryError):
    """Configuration is invalid or missing"""
    code = "CONFIG_001"
    detail_fields = ("config_key", "expected_type")
    default_recoverable = False
