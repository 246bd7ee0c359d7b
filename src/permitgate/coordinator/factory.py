"""Coordinator factory for creating coordinator instances based on configuration."""

import logging
from typing import Any

from permitgate.config import settings
from permitgate.coordinator.base import AtomicCoordinator
from permitgate.coordinator.memory import InMemoryCoordinator
from permitgate.coordinator.redis import RedisCoordinator

logger = logging.getLogger(__name__)

# Global coordinator instance
_coordinator_instance: AtomicCoordinator | None = None


def create_coordinator(
    backend: str | None = None,
    **kwargs: Any,
) -> AtomicCoordinator:
    """
    Create a coordinator instance.

    Args:
        backend: Backend type ("redis" or "memory"), defaults to config
        **kwargs: Overrides for the backend's constructor arguments

    Returns:
        AtomicCoordinator instance

    Raises:
        ValueError: If backend type is unknown
    """
    backend_type = backend or settings.coordinator_backend

    if backend_type == "memory":
        logger.warning(
            "Using in-memory coordinator: permits are not shared across processes."
        )
        return InMemoryCoordinator(**kwargs)

    elif backend_type == "redis":
        return RedisCoordinator(
            url=kwargs.get("url", settings.redis_url),
            max_connections=kwargs.get(
                "max_connections", settings.redis_max_connections
            ),
            socket_timeout=kwargs.get("socket_timeout", settings.redis_socket_timeout),
            socket_connect_timeout=kwargs.get(
                "socket_connect_timeout", settings.redis_socket_connect_timeout
            ),
        )

    else:
        raise ValueError(f"Unknown coordinator backend: {backend_type}")


def get_coordinator() -> AtomicCoordinator:
    """
    Get the global coordinator instance.

    Creates the coordinator on first access using configuration settings.

    Returns:
        AtomicCoordinator instance
    """
    global _coordinator_instance

    if _coordinator_instance is None:
        _coordinator_instance = create_coordinator()
        logger.info(f"Initialized {_coordinator_instance.name} coordinator backend")

    return _coordinator_instance


async def initialize_coordinator() -> AtomicCoordinator:
    """
    Initialize the global coordinator and establish connections.

    A Redis coordinator that fails to connect is still returned: its
    operations keep failing closed and it reconnects lazily once Redis
    is reachable again. There is no fallback to the in-memory backend,
    which would silently stop coordinating across processes.

    Returns:
        Initialized AtomicCoordinator instance
    """
    coordinator = get_coordinator()

    if isinstance(coordinator, RedisCoordinator):
        connected = await coordinator.connect()
        if not connected:
            logger.warning(
                "Failed to connect to Redis; permits will be denied until it is reachable"
            )

    return coordinator


async def shutdown_coordinator() -> None:
    """
    Shutdown the global coordinator and close connections.

    Call this during application shutdown for clean teardown.
    """
    global _coordinator_instance

    if _coordinator_instance is not None:
        await _coordinator_instance.close()
        _coordinator_instance = None
        logger.info("Coordinator shutdown complete")


def reset_coordinator() -> None:
    """
    Reset the global coordinator instance.

    Useful for testing or when configuration changes.
    """
    global _coordinator_instance
    _coordinator_instance = None
