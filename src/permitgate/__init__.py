"""Distributed rate limiting and semaphores over a shared Redis store."""

from permitgate.coordinator import (
    AtomicCoordinator,
    CoordinatorError,
    InMemoryCoordinator,
    RedisCoordinator,
    ScriptId,
)
from permitgate.limits import PermitSemaphore, RateLimiter

__version__ = "0.1.0"

__all__ = [
    "AtomicCoordinator",
    "CoordinatorError",
    "InMemoryCoordinator",
    "PermitSemaphore",
    "RateLimiter",
    "RedisCoordinator",
    "ScriptId",
]
