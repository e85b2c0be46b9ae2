#!/usr/bin/env python3
"""
Redis DataLoader - Read-Through Cache Facade

Architecture:
    RedisDataLoaderFactory (holds the primary/replica handles)
        └── RedisDataLoader (one per key-space, public API)
            ├── DataLoader (aiodataloader: coalescing + process-local cache)
            ├── BatchFillPipeline (batch function: multi-get, fetch, backfill)
            ├── StoreGateway (replica reads, primary writes)
            └── CacheObserver (stats + logging)

Flow:
    load(key) -> DataLoader merges same-iteration loads -> fill_batch(keys)
    -> multi-get -> hit: decode / miss: fetch + detached backfill
    -> results in request order -> DataLoader caches them per process

Usage:
    factory = RedisDataLoaderFactory(primary, replica)
    users = factory.create("user", fetch_user, expire=3600)

    user = await users.load("42")
    many = await users.load_many(["42", "43"])
    await users.prime("44", {"name": "Bob"})
    await users.clear("42")
"""

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

import orjson
from aiodataloader import DataLoader

from redis_dataloader.core.config.constants import Stage
from redis_dataloader.core.config.settings import Settings
from redis_dataloader.core.exceptions import ConfigurationError, InvalidArgumentError
from redis_dataloader.core.interfaces.store import StoreHandle
from redis_dataloader.core.logging.logger import get_logger, log_stage
from redis_dataloader.infrastructure.cache.fill_pipeline import BatchFillPipeline, FetchFn
from redis_dataloader.infrastructure.cache.observer import CacheObserver
from redis_dataloader.infrastructure.cache.options import LoaderOptions
from redis_dataloader.infrastructure.cache.store_gateway import StoreGateway

logger = get_logger(__name__)

_UNSET: Any = object()


def _is_missing(key: Any) -> bool:
    # Empty containers are valid structured keys; None, "", 0 and False are not.
    if isinstance(key, (Mapping, list, tuple)):
        return False
    return not key


class RedisDataLoader:
    """
    Read-through cache for one key-space.

    Create it inside the event loop that will await its loads; the
    coalescer binds its futures to that loop.

    Attributes:
        key_space: Prefix of every key this loader writes
        options: Resolved, immutable options
        loader: The underlying request coalescer
        gateway: Store gateway of this key-space
    """

    def __init__(
        self,
        key_space: str,
        fetch: FetchFn,
        primary: StoreHandle,
        replica: StoreHandle | None = None,
        options: LoaderOptions | None = None,
        logger_instance=None,
    ):
        if not callable(fetch):
            raise ConfigurationError(
                "fetch must be callable", details={"key_space": key_space}
            )

        self.key_space = key_space
        self.options = options or LoaderOptions.from_settings()
        self._primary = primary
        self._logger = (logger_instance or logger).bind(key_space=key_space)

        self._observer = CacheObserver(self._logger)
        self.gateway = StoreGateway(
            primary,
            replica or primary,
            key_space,
            cache_key_fn=self.options.cache_key_fn,
            expire=self.options.expire,
            observer=self._observer,
        )
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise ConfigurationError(
                "RedisDataLoader must be created inside a running event loop",
                details={"key_space": key_space},
            ) from e

        self._pipeline = BatchFillPipeline(self.gateway, fetch, self._observer)
        self.loader = DataLoader(
            self._pipeline.fill_batch, loop=loop, **self.options.coalescer_kwargs()
        )

        log_stage(
            self._logger, Stage.LOADER_INIT, "Loader created", level="debug",
            expire=self.options.expire, local_cache=self.options.cache,
        )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def load(self, key: Any) -> "asyncio.Future[Any]":
        """
        Load one key.

        The key joins the current batch immediately; await the returned
        future for the value (None for a known-null key).

        Raises:
            InvalidArgumentError: If key is missing
        """
        if _is_missing(key):
            raise InvalidArgumentError("key parameter is required")
        return self.loader.load(key)

    def load_many(self, keys: Sequence[Any]) -> "asyncio.Future[list[Any]]":
        """
        Load several keys; each one is an independent load.

        Raises:
            InvalidArgumentError: If keys is None
        """
        if keys is None:
            raise InvalidArgumentError("keys parameter is required")
        return asyncio.gather(*(self.loader.load(k) for k in keys))

    # -------------------------------------------------------------------------
    # Writes and invalidation
    # -------------------------------------------------------------------------

    async def prime(self, key: Any, value: Any = _UNSET) -> None:
        """
        Store ``value`` for ``key`` and replace the local entry with it.

        ``None`` is a valid value (stored as the empty-marker).

        Raises:
            InvalidArgumentError: If key is missing or value is not given
        """
        if _is_missing(key):
            raise InvalidArgumentError("key parameter is required")
        if value is _UNSET:
            raise InvalidArgumentError("value parameter is required")

        stored = await self.gateway.set_and_get(key, value)
        self.loader.clear(key).prime(key, stored)

        log_stage(self._logger, Stage.LOADER_PRIME, "Key primed", level="debug")

    async def clear(self, key: Any) -> DataLoader:
        """
        Delete ``key`` from the store, then from the local cache.

        The store delete completes before the local entry goes, so once this
        returns the remote entry is gone. With an invalidation channel
        configured, other processes are told to drop their local entry.

        Raises:
            InvalidArgumentError: If key is missing
        """
        if _is_missing(key):
            raise InvalidArgumentError("key parameter is required")

        await self.gateway.delete(key)
        self.loader.clear(key)
        log_stage(self._logger, Stage.LOADER_CLEAR, "Key cleared", level="debug")

        channel = self.options.invalidation_channel
        if channel:
            message = orjson.dumps({"key_space": self.key_space, "key": key})
            await self._primary.publish(channel, message)
            log_stage(
                self._logger, Stage.INVALIDATION_PUBLISH, "Invalidation published",
                level="debug", channel=channel,
            )

        return self.loader

    async def clear_local(self, key: Any) -> DataLoader:
        """Drop ``key`` from the process-local cache only."""
        return self.loader.clear(key)

    async def clear_all_local(self) -> DataLoader:
        """Drop every process-local entry; the store is untouched."""
        return self.loader.clear_all()

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    async def drain(self) -> None:
        """Wait until every detached backfill write has finished."""
        await self._pipeline.drain()

    def stats(self) -> dict[str, Any]:
        """Cache-fill statistics of this key-space."""
        return {
            "key_space": self.key_space,
            **self._observer.get_stats(),
            "pending_backfills": self._pipeline.pending_backfills,
        }


class RedisDataLoaderFactory:
    """
    Builds loaders that share one primary/replica pair.

    Args:
        primary: Read-write handle
        replica: Read-preferring handle (defaults to primary)
        settings: Source of option defaults (defaults to get_settings())
    """

    def __init__(
        self,
        primary: StoreHandle,
        replica: StoreHandle | None = None,
        settings: Settings | None = None,
        logger_instance=None,
    ):
        self._primary = primary
        self._replica = replica or primary
        self._settings = settings
        self._logger = logger_instance

    @classmethod
    def from_handles(cls, handles, **kwargs) -> "RedisDataLoaderFactory":
        """Build from a connected StoreHandles pair."""
        return cls(handles.primary, handles.replica, **kwargs)

    def create(
        self,
        key_space: str,
        fetch: FetchFn,
        options: LoaderOptions | None = None,
        **overrides,
    ) -> RedisDataLoader:
        """
        Create the loader of one key-space.

        Args:
            key_space: Prefix of every key
            fetch: ``(key) -> value | None``, called once per true miss
            options: Complete options; settings defaults are used when None
            **overrides: Individual option values (expire=..., cache=...)
        """
        if options is None:
            options = LoaderOptions.from_settings(self._settings, **overrides)
        elif overrides:
            current = {name: getattr(options, name) for name in LoaderOptions.model_fields}
            options = LoaderOptions(**{**current, **overrides})

        return RedisDataLoader(
            key_space,
            fetch,
            self._primary,
            self._replica,
            options=options,
            logger_instance=self._logger,
        )
