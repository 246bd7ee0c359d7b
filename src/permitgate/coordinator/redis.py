"""Redis coordinator implementation."""

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from permitgate.coordinator.base import AtomicCoordinator, CoordinatorError, ScriptId
from permitgate.coordinator.scripts import SCRIPTS

logger = logging.getLogger(__name__)


class RedisCoordinator(AtomicCoordinator):
    """
    Redis-backed coordinator shared by every process in a fleet.

    Scripts are registered once per client and invoked with EVALSHA
    (redis-py falls back to EVAL when the server has flushed its script
    cache). Every command borrows a connection from the client's pool and
    returns it when the command completes, whether it succeeded or not.

    Redis and socket errors are translated into CoordinatorError.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        max_connections: int = 10,
        socket_timeout: float = 5.0,
        socket_connect_timeout: float = 5.0,
    ) -> None:
        """
        Initialize Redis coordinator.

        Args:
            url: Redis connection URL
            max_connections: Maximum connections in pool
            socket_timeout: Socket timeout in seconds
            socket_connect_timeout: Connection timeout in seconds
        """
        self._url = url
        self._max_connections = max_connections
        self._socket_timeout = socket_timeout
        self._socket_connect_timeout = socket_connect_timeout
        self._client: Any = None
        self._scripts: dict[ScriptId, Any] = {}
        self._connected = False
        self._connect_lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return "redis"

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> bool:
        """
        Connect to Redis and register the coordinator scripts.

        Returns:
            True if connected successfully
        """
        if self._connected and self._client:
            return True

        # Concurrent first callers share one client instead of each building a pool
        async with self._connect_lock:
            if self._connected and self._client:
                return True

            client: Any = None
            try:
                client = aioredis.from_url(
                    self._url,
                    max_connections=self._max_connections,
                    socket_timeout=self._socket_timeout,
                    socket_connect_timeout=self._socket_connect_timeout,
                    decode_responses=True,
                )

                # Test connection
                await client.ping()
                self._scripts = {
                    script_id: client.register_script(source)
                    for script_id, source in SCRIPTS.items()
                }
                self._client = client
                self._connected = True
                logger.info(f"Connected to Redis at {self._url}")
                return True

            except (RedisError, OSError) as e:
                logger.error(f"Failed to connect to Redis: {e}")
                if client is not None:
                    await self._discard(client)
                self._client = None
                self._scripts = {}
                self._connected = False
                return False

    async def _discard(self, client: Any) -> None:
        """Close a client whose connect attempt failed."""
        try:
            await client.aclose()
        except (RedisError, OSError) as e:
            logger.error(f"Error closing Redis connection: {e}")

    async def _ensure_connected(self) -> None:
        """Connect lazily, raising if Redis is unreachable."""
        if not self._connected and not await self.connect():
            raise CoordinatorError(f"Redis at {self._url} is unreachable")

    async def execute_atomic(
        self,
        key: str,
        script_id: ScriptId,
        args: Sequence[str] = (),
    ) -> int:
        """Run a registered script against one key."""
        await self._ensure_connected()

        script = self._scripts.get(script_id)
        if script is None:
            raise CoordinatorError(f"Unknown script: {script_id}")

        try:
            result = await script(keys=[key], args=list(args))
        except (RedisError, OSError) as e:
            raise CoordinatorError(
                f"Redis {script_id.value} error for {key}: {e}"
            ) from e
        return int(result)

    async def increment(self, key: str, by: int = 1) -> int:
        """Atomically increment a counter with INCRBY."""
        await self._ensure_connected()

        try:
            return int(await self._client.incrby(key, by))
        except (RedisError, OSError) as e:
            raise CoordinatorError(f"Redis INCRBY error for {key}: {e}") from e

    async def delete(self, key: str) -> bool:
        """Delete a key."""
        await self._ensure_connected()

        try:
            result = await self._client.delete(key)
        except (RedisError, OSError) as e:
            raise CoordinatorError(f"Redis DELETE error for {key}: {e}") from e
        return result > 0

    async def get(self, key: str) -> int | None:
        """Read a counter with GET."""
        await self._ensure_connected()

        try:
            value = await self._client.get(key)
        except (RedisError, OSError) as e:
            raise CoordinatorError(f"Redis GET error for {key}: {e}") from e
        return None if value is None else int(value)

    async def close(self) -> None:
        """Close the Redis connection pool."""
        if self._client:
            try:
                await self._client.aclose()
            except (RedisError, OSError) as e:
                logger.error(f"Error closing Redis connection: {e}")
            finally:
                self._client = None
                self._scripts = {}
                self._connected = False

    async def health_check(self) -> dict[str, Any]:
        """Return health status with Redis server info."""
        if not self._connected and not await self.connect():
            return {
                "backend": self.name,
                "connected": False,
                "error": "Not connected to Redis",
            }

        try:
            info = await self._client.info("server", "clients")
            return {
                "backend": self.name,
                "connected": True,
                "redis_version": info.get("redis_version"),
                "connected_clients": info.get("connected_clients"),
                "uptime_seconds": info.get("uptime_in_seconds"),
            }
        except (RedisError, OSError) as e:
            return {
                "backend": self.name,
                "connected": self._connected,
                "error": str(e),
            }
