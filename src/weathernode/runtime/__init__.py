"""Per-client rate limiting for both surfaces."""

from weathernode.runtime.errors import AdmissionDeniedError, RuntimeAdmissionError
from weathernode.runtime.models import AdmissionDecision, RateLimitConfig, WindowEntry
from weathernode.runtime.ratelimit import SlidingWindowLimiter

__all__ = [
    "AdmissionDecision",
    "AdmissionDeniedError",
    "RateLimitConfig",
    "RuntimeAdmissionError",
    "SlidingWindowLimiter",
    "WindowEntry",
]
