"""
Admission-control primitives built on a shared coordinator.

Provides a fixed-window rate limiter and a counting semaphore whose
state lives entirely in the coordinator, so any number of processes
can share one permit budget.
"""

from permitgate.limits.base import Bucket, Semaphore
from permitgate.limits.bucket import RateLimiter
from permitgate.limits.semaphore import PermitSemaphore

__all__ = [
    "Bucket",
    "PermitSemaphore",
    "RateLimiter",
    "Semaphore",
]
