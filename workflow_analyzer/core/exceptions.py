"""
Custom exception hierarchy for the workflow analyzer.
Provides structured error handling with proper HTTP status codes.
"""

from typing import Any, Optional


class WorkflowAnalyzerError(Exception):
    """Base exception for all workflow analyzer errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(WorkflowAnalyzerError):
    """Error in application configuration."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details=details,
            status_code=500,
        )


# =============================================================================
# Classified Errors (tracker responses and request validation)
# =============================================================================


class NetworkError(WorkflowAnalyzerError):
    """Transport-level failure (connect, read, timeout)."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="NETWORK_ERROR", status_code=502)


class AuthenticationError(WorkflowAnalyzerError):
    """Token rejected or access denied."""

    def __init__(self, message: str = "Invalid or expired authentication token") -> None:
        super().__init__(message=message, code="AUTHENTICATION_FAILED", status_code=401)


class NotFoundError(WorkflowAnalyzerError):
    """Requested resource not found."""

    def __init__(
        self,
        resource: str,
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        msg = message or f"Resource not found: {resource}"
        if resource_id:
            msg = message or f"{resource} {resource_id} not found"

        super().__init__(
            message=msg,
            code="NOT_FOUND",
            details={"resource": resource, "resource_id": resource_id},
            status_code=404,
        )
        self.resource = resource
        self.resource_id = resource_id


class RateLimitError(WorkflowAnalyzerError):
    """Rate limit exceeded."""

    def __init__(self, retry_after: int) -> None:
        super().__init__(
            message=f"Rate limit exceeded. Retry after: {retry_after}s",
            code="RATE_LIMIT_EXCEEDED",
            details={"retry_after_seconds": retry_after},
            status_code=429,
        )
        self.retry_after = retry_after


class ValidationError(WorkflowAnalyzerError):
    """Invalid input, either ours or the tracker's response."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field},
            status_code=400,
        )
        self.field = field


class ServerError(WorkflowAnalyzerError):
    """Tracker answered with a 5xx status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(
            message=message,
            code="SERVER_ERROR",
            details={"upstream_status": status_code},
            status_code=502,
        )
        self.upstream_status = status_code


class UnknownError(WorkflowAnalyzerError):
    """Tracker answered with something we cannot classify."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="UNKNOWN_ERROR", status_code=500)


# =============================================================================
# Service Errors
# =============================================================================


class CacheError(WorkflowAnalyzerError):
    """Error communicating with the cache store."""

    def __init__(self, message: str) -> None:
        super().__init__(message=f"Cache error: {message}", code="CACHE_ERROR", status_code=503)


class CompletionError(WorkflowAnalyzerError):
    """Error returned by the language-model provider."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(
            message=f"Completion provider error: {message}",
            code="COMPLETION_ERROR",
            details=details,
            status_code=502,
        )


class AnalysisError(WorkflowAnalyzerError):
    """Unexpected failure while analysing a request."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="ANALYSIS_FAILED", status_code=500)
