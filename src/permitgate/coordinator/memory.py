"""In-memory coordinator implementation."""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from permitgate.coordinator.base import AtomicCoordinator, CoordinatorError, ScriptId

logger = logging.getLogger(__name__)


@dataclass
class CounterEntry:
    """An integer counter with an optional absolute expiry."""

    value: int
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class InMemoryCoordinator(AtomicCoordinator):
    """
    In-process coordinator with the same contract as Redis.

    Best for:
    - Unit and property tests
    - Single-process development

    Limitations:
    - Not shared across processes, so it coordinates nothing in production
    - Lost on restart

    A single asyncio.Lock makes every operation one atomic unit. Expiry
    is evaluated lazily against ``time_func`` whenever a key is touched,
    mirroring Redis's passive expiry; no background task runs.
    """

    def __init__(self, time_func: Callable[[], float] = time.time) -> None:
        """
        Initialize in-memory coordinator.

        Args:
            time_func: Clock used for key expiry, in seconds
        """
        self._store: dict[str, CounterEntry] = {}
        self._time = time_func
        self._lock = asyncio.Lock()
        self._connected = True
        self._scripts: dict[ScriptId, Callable[[str, Sequence[str]], int]] = {
            ScriptId.BUCKET_CHECK: self._bucket_check,
            ScriptId.SEMAPHORE_CHECK: self._semaphore_check,
            ScriptId.SEMAPHORE_RELEASE: self._semaphore_release,
        }

    @property
    def name(self) -> str:
        return "memory"

    @property
    def is_connected(self) -> bool:
        return self._connected

    def _check_open(self) -> None:
        if not self._connected:
            raise CoordinatorError("In-memory coordinator is closed")

    def _get(self, key: str) -> int | None:
        """Read a live counter (must hold lock)."""
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._time()):
            del self._store[key]
            return None
        return entry.value

    def _incr(self, key: str, by: int) -> int:
        """INCRBY semantics: keeps any existing expiry (must hold lock)."""
        current = self._get(key)
        if current is None:
            self._store[key] = CounterEntry(value=by)
            return by
        entry = self._store[key]
        entry.value = current + by
        return entry.value

    def _expire(self, key: str, seconds: int) -> None:
        entry = self._store.get(key)
        if entry is not None:
            entry.expires_at = self._time() + seconds

    def _bucket_check(self, key: str, args: Sequence[str]) -> int:
        limit = int(args[0])
        current = self._get(key) or 0
        if current + 1 > limit:
            return 0
        self._incr(key, 1)
        self._expire(key, 2)
        return 1

    def _semaphore_check(self, key: str, args: Sequence[str]) -> int:
        current = self._get(key)
        if current is None or current <= 0:
            return 0
        self._incr(key, -1)
        return 1

    def _semaphore_release(self, key: str, args: Sequence[str]) -> int:
        limit = int(args[0])
        current = self._get(key) or 0
        if current >= limit:
            return 0
        self._incr(key, 1)
        return 1

    async def execute_atomic(
        self,
        key: str,
        script_id: ScriptId,
        args: Sequence[str] = (),
    ) -> int:
        """Run a script against one key under the store lock."""
        async with self._lock:
            self._check_open()
            script = self._scripts.get(script_id)
            if script is None:
                raise CoordinatorError(f"Unknown script: {script_id}")
            return script(key, args)

    async def increment(self, key: str, by: int = 1) -> int:
        """Atomically increment a counter."""
        async with self._lock:
            self._check_open()
            return self._incr(key, by)

    async def delete(self, key: str) -> bool:
        """Delete a counter."""
        async with self._lock:
            self._check_open()
            return self._store.pop(key, None) is not None

    async def get(self, key: str) -> int | None:
        """Read a counter without mutating it (inspection only)."""
        async with self._lock:
            self._check_open()
            return self._get(key)

    async def close(self) -> None:
        """Close the coordinator; further operations raise CoordinatorError."""
        async with self._lock:
            self._connected = False
            self._store.clear()

    async def health_check(self) -> dict[str, Any]:
        """Return health status with store statistics."""
        async with self._lock:
            now = self._time()
            total_keys = len(self._store)
            expired_keys = sum(1 for e in self._store.values() if e.is_expired(now))

        return {
            "backend": self.name,
            "connected": self.is_connected,
            "total_keys": total_keys,
            "expired_keys": expired_keys,
        }
