"""
Coordinator module for shared, atomically-scriptable stores.

Provides pluggable backends (Redis and in-memory) that serialize
permit bookkeeping across every process sharing a budget.
"""

from permitgate.coordinator.base import AtomicCoordinator, CoordinatorError, ScriptId
from permitgate.coordinator.memory import InMemoryCoordinator
from permitgate.coordinator.redis import RedisCoordinator
from permitgate.coordinator.factory import create_coordinator, get_coordinator

__all__ = [
    "AtomicCoordinator",
    "CoordinatorError",
    "InMemoryCoordinator",
    "RedisCoordinator",
    "ScriptId",
    "create_coordinator",
    "get_coordinator",
]
