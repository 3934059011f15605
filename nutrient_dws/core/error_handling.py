"""
Error handling utilities for build client operations.

This module provides the exception hierarchy surfaced by the client and a
decorator for consistent logging around API calls.
"""
import inspect
import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar, ParamSpec
from functools import wraps
from contextvars import ContextVar

logger = logging.getLogger(__name__)

# Context variable for request ID tracking across async contexts
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

# Type variables for generic function signatures
P = ParamSpec('P')
T = TypeVar('T')


# ============================================================================
# Custom Exceptions
# ============================================================================

class NutrientError(Exception):
    """Base exception for all build client errors.

    Carries a machine readable ``code``, optional structured ``details`` and
    the HTTP ``status_code`` when the error came from a response.
    """

    default_code = "NUTRIENT_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly representation of the error."""
        return {
            "name": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "status_code": self.status_code,
        }

    def __str__(self) -> str:
        result = f"{self.__class__.__name__}: {self.message}"
        if self.code != NutrientError.default_code:
            result += f" ({self.code})"
        if self.status_code:
            result += f" [HTTP {self.status_code}]"
        return result

    @classmethod
    def wrap(cls, error: Any, message: str) -> "NutrientError":
        """Normalize any raised value into a NutrientError.

        NutrientErrors pass through unchanged; other exceptions keep their
        type and message in ``details``.
        """
        if isinstance(error, NutrientError):
            return error

        if isinstance(error, Exception):
            return NutrientError(
                f"{message}: {error}",
                "WRAPPED_ERROR",
                {
                    "original_error": type(error).__name__,
                    "original_message": str(error),
                }
            )

        return NutrientError(
            f"{message}: {error}",
            "UNKNOWN_ERROR",
            {"original_error": repr(error)}
        )


class ValidationError(NutrientError):
    """Invalid input, empty workflow or misuse of the builder."""

    default_code = "VALIDATION_ERROR"


class APIError(NutrientError):
    """The remote service answered with a server error."""

    default_code = "API_ERROR"


class AuthenticationError(NutrientError):
    """API key missing, rejected or not resolvable."""

    default_code = "AUTHENTICATION_ERROR"


class NetworkError(NutrientError):
    """The request could not reach the service or timed out."""

    default_code = "NETWORK_ERROR"


# ============================================================================
# Logging Decorator
# ============================================================================

def log_api_call(
    operation: str = "API call"
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Decorator to log timing and failures of async client operations.

    Assigns a request id if none is set, logs start and completion, warns when
    the call exceeds RESPONSE_TIME_WARNING_THRESHOLD_MS and re-raises every
    error unchanged.

    Args:
        operation: Human readable name used in log lines

    Returns:
        Decorated coroutine function

    Example:
        @log_api_call("Build request")
        async def send(...):
            ...
    """
    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"log_api_call only supports coroutine functions, got {func.__name__}")

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            if not request_id_var.get():
                request_id_var.set(str(uuid.uuid4()))

            request_id = request_id_var.get()
            start_time = time.time()

            try:
                logger.debug(f"[{request_id}] Starting {operation}")
                result = await func(*args, **kwargs)
                elapsed = time.time() - start_time

                from nutrient_dws.core.config import settings
                threshold_ms = settings.RESPONSE_TIME_WARNING_THRESHOLD_MS
                elapsed_ms = elapsed * 1000
                if elapsed_ms > threshold_ms:
                    logger.warning(
                        f"[{request_id}] SLOW RESPONSE: {operation} took {elapsed:.2f}s "
                        f"({elapsed_ms:.0f}ms > {threshold_ms}ms threshold)"
                    )
                else:
                    logger.debug(f"[{request_id}] Completed {operation} in {elapsed:.2f}s")

                return result
            except NutrientError as e:
                elapsed = time.time() - start_time
                logger.error(f"[{request_id}] {operation} failed after {elapsed:.2f}s: {e}")
                raise
            except Exception as e:
                elapsed = time.time() - start_time
                logger.exception(f"[{request_id}] Unexpected error in {operation} after {elapsed:.2f}s: {e}")
                raise

        return async_wrapper

    return decorator
