"""
Redis Store Handles

Architecture:
    StoreHandles (Public API)
        ├── primary  (read-write, every write and the fallback read)
        ├── replica  (read-preferring, batched multi-get)
        └── health_check (ping latency per handle)

When no replica URL is configured the replica is the primary handle itself.
Connection pooling and socket timeouts belong to redis-py; this layer never
retries or times out on its own.
"""

import time
from typing import Any

import redis.asyncio as redis
from redis.exceptions import ConnectionError, TimeoutError

from redis_dataloader.core.config.constants import Stage
from redis_dataloader.core.config.settings import RedisSettings, get_settings
from redis_dataloader.core.exceptions import CacheConnectionError
from redis_dataloader.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)


def _build_client(url: str, settings: RedisSettings) -> redis.Redis:
    return redis.Redis.from_url(
        url,
        max_connections=settings.REDIS_MAX_CONNECTIONS,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=settings.REDIS_SOCKET_CONNECT_TIMEOUT,
        health_check_interval=settings.REDIS_HEALTH_CHECK_INTERVAL,
        retry_on_timeout=True,
    )


class StoreHandles:
    """
    The primary/replica pair shared by every loader of a process.

    Usage:
        handles = StoreHandles.from_settings()
        await handles.connect()
        factory = RedisDataLoaderFactory.from_handles(handles)
        ...
        await handles.close()
    """

    def __init__(self, primary, replica=None):
        self.primary = primary
        self.replica = replica or primary
        self._is_connected = False

    @classmethod
    def from_settings(cls, settings: RedisSettings | None = None) -> "StoreHandles":
        """Build (unconnected) handles from Redis settings."""
        settings = settings or get_settings().redis
        primary = _build_client(settings.REDIS_PRIMARY_URL, settings)
        if settings.REDIS_REPLICA_URL and settings.REDIS_REPLICA_URL != settings.REDIS_PRIMARY_URL:
            replica = _build_client(settings.REDIS_REPLICA_URL, settings)
        else:
            replica = primary
        return cls(primary, replica)

    @property
    def has_replica(self) -> bool:
        return self.replica is not self.primary

    def is_connected(self) -> bool:
        return self._is_connected

    async def connect(self) -> "StoreHandles":
        """
        Ping both handles.

        Raises:
            CacheConnectionError: If either handle is unreachable
        """
        for role, handle in self._roles():
            try:
                await handle.ping()
            except (ConnectionError, TimeoutError) as e:
                log_stage(logger, Stage.REDIS_CONNECT, "Store handle unreachable", level="error", role=role, error=str(e))
                raise CacheConnectionError(
                    message=f"Failed to connect to Redis {role}: {e}",
                    details={"role": role},
                ) from e

        self._is_connected = True
        log_stage(logger, Stage.REDIS_CONNECT, "Store handles connected", has_replica=self.has_replica)
        return self

    async def close(self) -> None:
        """Close both handles (a shared handle is closed once)."""
        for _, handle in self._roles():
            await handle.aclose()
        self._is_connected = False
        log_stage(logger, Stage.REDIS_CLOSE, "Store handles closed")

    async def health_check(self) -> dict[str, Any]:
        """
        Ping every handle and report latency.

        Returns:
            Dict with overall status and one entry per role
        """
        health: dict[str, Any] = {"status": "healthy", "connected": self._is_connected}

        for role, handle in self._roles():
            try:
                start = time.perf_counter()
                await handle.ping()
                latency = (time.perf_counter() - start) * 1000
                health[role] = {"status": "healthy", "ping_latency_ms": round(latency, 2)}
            except Exception as e:
                if role == "primary":
                    health["status"] = "unhealthy"
                elif health["status"] == "healthy":
                    health["status"] = "degraded"
                health[role] = {"status": "unhealthy", "error": str(e)}

        if not self.has_replica:
            health["replica"] = {"status": "shared_with_primary"}

        if health["status"] != "healthy":
            log_stage(logger, Stage.REDIS_HEALTH, "Store health check failed", level="warning", status=health["status"])

        return health

    def _roles(self) -> list[tuple[str, Any]]:
        roles = [("primary", self.primary)]
        if self.has_replica:
            roles.append(("replica", self.replica))
        return roles


# =============================================================================
# GLOBAL INSTANCE (SINGLETON PATTERN)
# =============================================================================

_store_handles: StoreHandles | None = None


def get_store_handles() -> StoreHandles:
    """Get the global store handles (built from settings on first use)."""
    global _store_handles

    if _store_handles is None:
        _store_handles = StoreHandles.from_settings()

    return _store_handles


async def init_store_handles() -> StoreHandles:
    """Build and connect the global store handles."""
    return await get_store_handles().connect()


async def close_store_handles() -> None:
    """Close the global store handles."""
    global _store_handles

    if _store_handles:
        await _store_handles.close()
        _store_handles = None
