# =============================================================================
# aed_core/errors/handlers.py
# Error Handling Utilities for the AED inventory core
# =============================================================================

from __future__ import annotations
import functools
import traceback
from typing import Any, Callable, Dict, Optional, TypeVar
import streamlit as st

from aed_core.logging import get_logger
from .exceptions import AedInventoryError, ConnectivityError, ValidationError

logger = get_logger(__name__)

T = TypeVar("T")


def describe_error(error: Exception) -> Dict[str, Any]:
    """
    Normalize any exception into the fields the handlers log and display.

    Non-inventory exceptions get code ``UNKNOWN``, count as recoverable and
    carry the formatted traceback as their details.
    """
    if isinstance(error, AedInventoryError):
        return error.to_dict()
    return {
        "error_type": type(error).__name__,
        "code": "UNKNOWN",
        "message": str(error),
        "details": {"traceback": traceback.format_exc()},
        "recoverable": True,
    }


def _show(error: Exception, message: str, recoverable: bool) -> None:
    if isinstance(error, ConnectivityError):
        st.warning(f"Offline: {message}")
    elif not recoverable:
        st.error(f"Critical Error: {message}. Please contact support.")
    elif isinstance(error, ValidationError) and error.errors:
        lines = "\n".join(f"- {text}" for text in error.errors.values())
        st.error(f"Error: {message}\n{lines}")
    else:
        st.error(f"Error: {message}")


def handle_error(
    error: Exception,
    show_user_message: bool = True,
    log_error: bool = True,
    user_message: Optional[str] = None,
) -> None:
    """
    Log an error and optionally surface it in the Streamlit UI.

    Args:
        error: The exception to handle
        show_user_message: Whether to display the error to the user
        log_error: Whether to log the error
        user_message: Text shown instead of the error's own message
    """
    info = describe_error(error)
    message = user_message or info["message"]

    if log_error:
        logger.error(
            f"[{info['code']}] {message}",
            extra={"details": info["details"]},
            exc_info=error,
        )

    if show_user_message:
        _show(error, message, info["recoverable"])


def safe_execute(
    func: Callable[..., T],
    *args,
    default: Optional[T] = None,
    error_message: Optional[str] = None,
    reraise: bool = False,
    show_user_message: bool = False,
    **kwargs,
) -> Optional[T]:
    """
    Call ``func`` and hand any exception to ``handle_error``.

    Usage:
        errors = safe_execute(
            validate_aed,
            form_data,
            default={},
            error_message="Could not check the AED form",
        )
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        handle_error(e, show_user_message=show_user_message, user_message=error_message)
        if reraise:
            raise
        return default


class ErrorContext:
    """
    Context manager that logs an operation and routes failures to
    ``handle_error``. The exception is swallowed when ``recoverable`` is set
    and kept on ``error``.

    Usage:
        with ErrorContext("Saving AED CU-AED-004") as ctx:
            ...
        if ctx.error:
            ...
    """

    def __init__(
        self,
        operation: str,
        recoverable: bool = True,
        show_user_message: bool = False,
    ):
        self.operation = operation
        self.recoverable = recoverable
        self.show_user_message = show_user_message
        self.error: Optional[Exception] = None

    def __enter__(self) -> ErrorContext:
        logger.debug(f"{self.operation}: started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_val is None:
            logger.debug(f"{self.operation}: done")
            return False
        if not isinstance(exc_val, Exception):
            return False

        self.error = exc_val
        user_message = None
        if not isinstance(exc_val, AedInventoryError):
            user_message = f"{self.operation} failed"
        handle_error(exc_val, show_user_message=self.show_user_message, user_message=user_message)
        return self.recoverable


def error_boundary(
    default_return: Any = None,
    error_message: Optional[str] = None,
    log: bool = True,
):
    """
    Decorator form of ``safe_execute`` for UI callbacks.

    Usage:
        @error_boundary(default_return=[], error_message="Could not read inventory")
        def load_rows(path: str) -> List[dict]:
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., Optional[T]]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Optional[T]:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                if log:
                    logger.error(f"{func.__name__} failed: {e}", exc_info=True)
                if error_message:
                    st.error(error_message)
                return default_return

        return wrapper

    return decorator
