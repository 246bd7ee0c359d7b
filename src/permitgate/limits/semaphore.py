"""Counting semaphore backed by a shared coordinator."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from permitgate.coordinator.base import AtomicCoordinator, ScriptId
from permitgate.limits.base import Semaphore

logger = logging.getLogger(__name__)

DEFAULT_KEY = "rateLimit:semaphore"


class PermitSemaphore(Semaphore):
    """
    Distributed counting semaphore.

    The store holds a single counter of available permits. Initializing
    a semaphore resets that counter to ``limit``, discarding whatever was
    there before, including permits held through another live instance
    on the same key. Build one semaphore per key per deployment.

    ``release()`` is unconditional by default: every call adds a permit,
    whether or not it matches an earlier grant, so a stray release lets
    the counter grow past ``limit`` until the next initialization. Pass
    ``clamp_release=True`` to refuse releases once the counter is full.

    Fails closed: if the coordinator is unreachable, ``try_acquire()``
    denies and ``release()`` does nothing. A release lost this way is not
    retried; that permit stays leaked until the next initialization.

    Example:
        semaphore = await PermitSemaphore.create(coordinator, limit=100)
        async with semaphore.permit() as granted:
            if granted:
                await do_work()
    """

    def __init__(
        self,
        coordinator: AtomicCoordinator,
        limit: int,
        key: str = DEFAULT_KEY,
        clamp_release: bool = False,
    ) -> None:
        """
        Create a semaphore handle. Call initialize() before use.

        Args:
            coordinator: Shared store every process reaches
            limit: Total permits (must be >= 0)
            key: Store key of the permit counter
            clamp_release: Refuse releases that would exceed limit
        """
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 0:
            raise ValueError(f"limit must be a non-negative int, got {limit!r}")

        self._coordinator = coordinator
        self._limit = limit
        self._key = key
        self._clamp_release = clamp_release

    @classmethod
    async def create(
        cls,
        coordinator: AtomicCoordinator,
        limit: int,
        key: str = DEFAULT_KEY,
        clamp_release: bool = False,
    ) -> "PermitSemaphore":
        """Create a semaphore and reset its counter to ``limit``."""
        semaphore = cls(coordinator, limit, key=key, clamp_release=clamp_release)
        await semaphore.initialize()
        return semaphore

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def key(self) -> str:
        return self._key

    async def initialize(self) -> None:
        """
        Reset the permit counter to ``limit``.

        Raises:
            CoordinatorError: If the store cannot be reached
        """
        await self._coordinator.delete(self._key)
        await self._coordinator.increment(self._key, self._limit)
        logger.debug(f"Semaphore {self._key} initialized with {self._limit} permits")

    async def try_acquire(self) -> bool:
        """Take one permit if any is available, or deny immediately."""
        try:
            result = await self._coordinator.execute_atomic(
                self._key, ScriptId.SEMAPHORE_CHECK
            )
        except Exception as e:
            logger.error(f"try_acquire error for {self._key}: {e}", exc_info=True)
            return False

        if result == 1:
            return True
        if result != 0:
            logger.error(
                f"Unexpected semaphore result {result!r} for {self._key}; denying"
            )
        return False

    async def release(self) -> None:
        """Return one permit. Faults are logged, never raised or retried."""
        try:
            if not self._clamp_release:
                await self._coordinator.increment(self._key, 1)
                return

            result = await self._coordinator.execute_atomic(
                self._key, ScriptId.SEMAPHORE_RELEASE, [str(self._limit)]
            )
        except Exception as e:
            logger.error(f"release error for {self._key}: {e}", exc_info=True)
            return

        if result != 1:
            logger.warning(
                f"Release refused for {self._key}: counter already at limit {self._limit}"
            )

    @asynccontextmanager
    async def permit(self) -> AsyncIterator[bool]:
        """
        Try to acquire for the duration of a block.

        Yields whether the permit was granted; releases on exit only if
        it was.
        """
        granted = await self.try_acquire()
        try:
            yield granted
        finally:
            if granted:
                await self.release()
