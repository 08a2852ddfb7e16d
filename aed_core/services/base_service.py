# =============================================================================
# aed_core/services/base_service.py
# Base Service Class with Common Functionality
# =============================================================================

from __future__ import annotations
from abc import ABC
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from aed_core.logging import get_logger, LogContext
from aed_core.errors import handle_error, AedInventoryError


@dataclass
class ServiceResult:
    """
    Outcome of a service or storage call.

    - ok: ``success`` is True and ``data`` holds the value
    - degraded: ``success`` is False, ``degraded`` is True and ``data``
      holds the default that was substituted
    - failed: ``success`` is False and nothing usable was produced

    Truthiness follows ``success``.
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    degraded: bool = False

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, data: Any = None, metadata: Optional[Dict[str, Any]] = None) -> ServiceResult:
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(
        cls,
        error: str,
        error_code: str = "UNKNOWN",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        return cls(success=False, error=error, error_code=error_code, metadata=metadata)

    @classmethod
    def fallback(
        cls,
        default: Any,
        error: str,
        error_code: str = "UNKNOWN",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """Degraded result: the call failed and ``default`` stands in."""
        return cls(
            success=False,
            data=default,
            error=error,
            error_code=error_code,
            metadata=metadata,
            degraded=True,
        )

    @classmethod
    def from_exception(cls, e: Exception) -> ServiceResult:
        if isinstance(e, AedInventoryError):
            return cls.fail(e.message, e.code, e.details)
        return cls.fail(str(e), "EXCEPTION")


class BaseService(ABC):
    """
    Base class for the inventory services.

    Subclasses get a class-named logger, timed operation logging and
    wrappers that turn exceptions into a failed ``ServiceResult`` instead of
    raising into the UI.

    Usage:
        class InspectionService(BaseService):
            async def get_check_history(self, title) -> ServiceResult:
                return await self.safe_execute_async("Loading history", self._load, title)
    """

    def __init__(self):
        self.logger = get_logger(type(self).__name__)

    def log_operation(self, operation: str) -> LogContext:
        """Timed ``LogContext`` on this service's logger."""
        return LogContext(self.logger, operation)

    def _failed(self, operation: str, e: Exception) -> ServiceResult:
        if isinstance(e, AedInventoryError):
            handle_error(e, show_user_message=False)
        else:
            self.logger.error(f"{operation} failed: {e}", exc_info=True)
        return ServiceResult.from_exception(e)

    def safe_execute(
        self,
        operation: str,
        func: Callable[..., Any],
        *args,
        **kwargs
    ) -> ServiceResult:
        """Run ``func`` under ``log_operation``; errors become a failed result."""
        try:
            with self.log_operation(operation):
                return ServiceResult.ok(func(*args, **kwargs))
        except Exception as e:
            return self._failed(operation, e)

    async def safe_execute_async(
        self,
        operation: str,
        func: Callable[..., Awaitable[Any]],
        *args,
        **kwargs
    ) -> ServiceResult:
        """Awaitable counterpart of :meth:`safe_execute`."""
        try:
            with self.log_operation(operation):
                return ServiceResult.ok(await func(*args, **kwargs))
        except Exception as e:
            return self._failed(operation, e)
