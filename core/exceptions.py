"""
Custom exceptions for the store sync system with structured error context.

Every error raised by the client, the gateway or the reconciler carries a
context dict so that the log line written at the point of escalation has
enough detail (status code, response body, external id) to diagnose.

Exception Hierarchy:
    SyncException (base)
    ├── ConfigurationError
    ├── RemoteAPIError
    │   ├── ServerError            (retryable, 5xx)
    │   ├── RateLimitError         (retryable, 429)
    │   ├── AuthenticationError    (401, 403)
    │   ├── ResourceNotFoundError  (404)
    │   ├── ClientRequestError     (other 4xx)
    │   └── TransportError         (connect errors, timeouts)
    ├── NormalizationError
    ├── StoreError
    │   ├── UpsertError
    │   └── EventPersistenceError
    ├── ReconciliationError
    └── RetryableError / NonRetryableError (mixins)
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class SyncException(Exception):
    """
    Base exception for all sync-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (entity, status code, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += (
                f" | Caused by: {type(self.original_exception).__name__}: "
                f"{str(self.original_exception)}"
            )

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


class RetryableError(SyncException):
    """
    Mixin for errors that should trigger retry logic.

    Only server errors (5xx) and rate limiting (429) qualify.
    """
    pass


class NonRetryableError(SyncException):
    """Mixin for errors that must be surfaced immediately."""
    pass


class ConfigurationError(NonRetryableError):
    """Required configuration is missing or invalid. Fatal at startup."""
    pass


# ============================================================================
# Remote API Errors
# ============================================================================

class RemoteAPIError(SyncException):
    """
    Exception raised when a call to the commerce API fails.

    Context includes:
        - url: The endpoint that failed
        - status_code: HTTP status code (if a response was received)
        - response_body: Response body (truncated)
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        context = dict(context or {})
        if status_code is not None:
            context["status_code"] = status_code
        if response_body:
            context["response_body"] = response_body[:500]
        super().__init__(message, context, original_exception)
        self.status_code = status_code
        self.response_body = response_body


class ServerError(RetryableError, RemoteAPIError):
    """Server errors (HTTP 5xx)."""
    pass


class RateLimitError(RetryableError, RemoteAPIError):
    """Rate limiting errors (HTTP 429), optionally with a Retry-After hint."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = 429,
        response_body: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        retry_after: Optional[float] = None
    ):
        super().__init__(message, status_code, response_body, context, original_exception)
        self.retry_after = retry_after  # Seconds to wait before retry
        if retry_after is not None:
            self.context["retry_after"] = retry_after


class AuthenticationError(NonRetryableError, RemoteAPIError):
    """Authentication failures (HTTP 401, 403)."""
    pass


class ResourceNotFoundError(NonRetryableError, RemoteAPIError):
    """Resource not found (HTTP 404)."""
    pass


class ClientRequestError(NonRetryableError, RemoteAPIError):
    """Any other 4xx response, e.g. a 422 on a rejected create."""
    pass


class TransportError(NonRetryableError, RemoteAPIError):
    """Connection failures and timeouts. No response was received."""
    pass


# ============================================================================
# Mapping Errors
# ============================================================================

class NormalizationError(NonRetryableError):
    """
    A remote record could not be mapped to the local schema.

    Context includes:
        - entity_type: products, customers or orders
        - external_id: The remote id of the record (if present)
    """
    pass


# ============================================================================
# Store Errors
# ============================================================================

class StoreError(SyncException):
    """Base exception for local store failures."""
    pass


class UpsertError(StoreError):
    """
    Exception raised when an upsert is rejected by the database.

    Context includes:
        - table_name: Name of the table
        - external_id: External id of the record being upserted
    """
    pass


class EventPersistenceError(StoreError):
    """An inbound webhook event could not be stored."""
    pass


class ReconciliationError(SyncException):
    """Unexpected failure during a reconciliation run."""
    pass
