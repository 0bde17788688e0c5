"""Core infrastructure components."""
from .cache import TTLCache
from .circuit_breaker import CircuitBreaker, CircuitState
from .clock import Clock, FixedRandomSource, RandomSource, SystemRandomSource, utc_now
from .exceptions import (
    AppException,
    CandidateRetrievalError,
    CircuitBreakerOpenError,
    ForbiddenError,
    ValidationError,
)

__all__ = [
    "AppException",
    "CandidateRetrievalError",
    "CircuitBreaker",
    "CircuitBreakerOpenError",
    "CircuitState",
    "Clock",
    "FixedRandomSource",
    "ForbiddenError",
    "RandomSource",
    "SystemRandomSource",
    "TTLCache",
    "ValidationError",
    "utc_now",
]
