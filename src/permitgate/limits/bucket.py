"""
Fixed-window rate limiter backed by a shared coordinator.

Every process sharing a key prefix draws from the same per-second quota.
Windows are whole Unix seconds on the caller's clock; the counter for a
window expires in the store two seconds after its last grant, so no
process ever has to reset anything.
"""

import logging
import time
from collections.abc import Callable

from permitgate.coordinator.base import AtomicCoordinator, ScriptId
from permitgate.limits.base import Bucket

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "rateLimit:bucket:"


class RateLimiter(Bucket):
    """
    Fixed-window rate limiter.

    Allows at most ``permits_per_second`` grants per whole second across
    all callers. A full burst at the end of one second may be followed
    immediately by another full burst at the start of the next; there is
    no smoothing across the boundary.

    Fails closed: if the coordinator is unreachable, every call is denied.

    Example:
        limiter = RateLimiter(coordinator, permits_per_second=10)
        if await limiter.try_acquire():
            await call_upstream()
    """

    def __init__(
        self,
        coordinator: AtomicCoordinator,
        permits_per_second: int,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        time_func: Callable[[], float] | None = None,
    ) -> None:
        """
        Initialize the rate limiter.

        Args:
            coordinator: Shared store every process reaches
            permits_per_second: Grants allowed per window (must be >= 1)
            key_prefix: Namespace for window counter keys
            time_func: Wall clock in seconds, used only to pick the window
                (defaults to time.time)
        """
        if (
            not isinstance(permits_per_second, int)
            or isinstance(permits_per_second, bool)
            or permits_per_second < 1
        ):
            raise ValueError(
                f"permits_per_second must be a positive int, got {permits_per_second!r}"
            )

        self._coordinator = coordinator
        self._permits_per_second = permits_per_second
        self._key_prefix = key_prefix
        self._time = time_func or time.time

    @property
    def permits_per_second(self) -> int:
        return self._permits_per_second

    def window_key(self) -> str:
        """Key of the counter for the current one-second window."""
        return f"{self._key_prefix}{int(self._time())}"

    async def try_acquire(self) -> bool:
        """Take one permit from the current window, or deny immediately."""
        key = self.window_key()
        try:
            result = await self._coordinator.execute_atomic(
                key,
                ScriptId.BUCKET_CHECK,
                [str(self._permits_per_second)],
            )
        except Exception as e:
            logger.error(f"try_acquire error for {key}: {e}", exc_info=True)
            return False

        if result == 1:
            return True
        if result != 0:
            logger.error(f"Unexpected bucket result {result!r} for {key}; denying")
        return False
