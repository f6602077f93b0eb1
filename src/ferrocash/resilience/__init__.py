"""
Resilience Layer for FerroCash.

Circuit breaker and retry helpers for outbound deliveries.
"""

from .circuit import CircuitBreaker, CircuitOpenError, CircuitState
from .retry import delivery_retrying, execute_with_retry, is_transient_error

__all__ = [
    "CircuitBreaker",
    "CircuitOpenError",
    "CircuitState",
    "delivery_retrying",
    "execute_with_retry",
    "is_transient_error",
]
