"""Abstract base class for atomic coordinators."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum
from typing import Any


class CoordinatorError(Exception):
    """Raised when the shared store cannot be reached or misbehaves.

    Covers connection failures, timeouts, protocol errors and use of a
    closed coordinator. Callers of the coordinator decide whether to
    absorb or propagate it.
    """


class ScriptId(str, Enum):
    """Named check-and-mutate scripts a coordinator can run atomically."""

    BUCKET_CHECK = "bucket_check"
    SEMAPHORE_CHECK = "semaphore_check"
    SEMAPHORE_RELEASE = "semaphore_release"


class AtomicCoordinator(ABC):
    """
    Abstract base class for shared, atomically-scriptable stores.

    A coordinator is the single serialization point for every process
    sharing a permit budget. Each script runs against one key as an
    indivisible unit; no other caller can observe or mutate the key
    mid-script. The coordinator owns no business logic and never
    interprets script results.

    Implement this class to add new store backends.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique identifier for this backend.

        Returns:
            Backend name (e.g., 'memory', 'redis')
        """
        ...

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """
        Check if the backend is connected and usable.

        Returns:
            True if connected, False otherwise
        """
        ...

    @abstractmethod
    async def execute_atomic(
        self,
        key: str,
        script_id: ScriptId,
        args: Sequence[str] = (),
    ) -> int:
        """
        Run a named script against a single key atomically.

        Args:
            key: Key the script reads and mutates
            script_id: Which script to run
            args: Ordered script arguments, passed as strings

        Returns:
            Integer result of the script

        Raises:
            CoordinatorError: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def increment(self, key: str, by: int = 1) -> int:
        """
        Atomically increment an integer key (absent counts as 0).

        Args:
            key: Counter key
            by: Amount to add (can be negative)

        Returns:
            New value after increment

        Raises:
            CoordinatorError: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def get(self, key: str) -> int | None:
        """
        Read an integer key without mutating it.

        For inspection only: a value read here may be stale by the time
        the caller acts on it, so admission decisions never use it.

        Args:
            key: Counter key

        Returns:
            Current value, or None if the key is absent or expired

        Raises:
            CoordinatorError: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete a key.

        Args:
            key: Key to delete

        Returns:
            True if deleted, False if not found

        Raises:
            CoordinatorError: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the coordinator and release its connections."""
        ...

    async def health_check(self) -> dict[str, Any]:
        """
        Perform a health check on the coordinator.

        Returns:
            Dict with health status info
        """
        return {
            "backend": self.name,
            "connected": self.is_connected,
        }
