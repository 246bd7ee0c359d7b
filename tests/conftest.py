"""Pytest configuration and fixtures."""

from collections.abc import Generator

import pytest

from permitgate.coordinator.factory import reset_coordinator
from permitgate.coordinator.memory import InMemoryCoordinator


class FakeClock:
    """Manually advanced wall clock, in seconds."""

    def __init__(self, now: float = 1_700_000_000.25) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """A clock parked a quarter second into a window."""
    return FakeClock()


@pytest.fixture
def coordinator(clock: FakeClock) -> InMemoryCoordinator:
    """An in-memory coordinator sharing the test clock."""
    return InMemoryCoordinator(time_func=clock)


@pytest.fixture(autouse=True)
def fresh_global_coordinator() -> Generator[None, None, None]:
    """Forget the process-wide coordinator around each test."""
    reset_coordinator()
    yield
    reset_coordinator()
