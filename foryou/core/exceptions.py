"""
Exception hierarchy for the ranking service.
Each exception carries the HTTP status and error code it renders as.
"""
from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(AppException):
    """Invalid input data."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class ForbiddenError(AppException):
    """Caller is not allowed to perform this action."""

    def __init__(self, action: str) -> None:
        super().__init__(
            message=f"Forbidden: {action}",
            status_code=403,
            error_code="FORBIDDEN",
            details={"action": action},
        )


class CandidateRetrievalError(AppException):
    """Candidate pool could not be fetched; nothing can be ranked."""

    def __init__(self, reason: str = "Unknown error") -> None:
        super().__init__(
            message="Failed to fetch feed",
            status_code=500,
            error_code="CANDIDATE_RETRIEVAL_ERROR",
            details={"reason": reason},
        )


class CircuitBreakerOpenError(AppException):
    """Circuit breaker is open - service calls blocked."""

    def __init__(self, service_name: str) -> None:
        super().__init__(
            message=f"Circuit breaker open for: {service_name}",
            status_code=503,
            error_code="CIRCUIT_BREAKER_OPEN",
            details={"service": service_name},
        )
