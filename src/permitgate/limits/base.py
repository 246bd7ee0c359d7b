"""Caller-facing contracts for admission-control primitives."""

from abc import ABC, abstractmethod


class Bucket(ABC):
    """A rate limiter that answers "may this caller act now?"."""

    @abstractmethod
    async def try_acquire(self) -> bool:
        """
        Try to take one permit from the current window without waiting.

        Returns:
            True if granted, False if denied or the store is unavailable
        """
        ...


class Semaphore(ABC):
    """A counting semaphore over a shared permit budget."""

    @abstractmethod
    async def try_acquire(self) -> bool:
        """
        Try to take one permit without waiting.

        Returns:
            True if granted, False if denied or the store is unavailable
        """
        ...

    @abstractmethod
    async def release(self) -> None:
        """Return a previously acquired permit. Never raises."""
        ...
