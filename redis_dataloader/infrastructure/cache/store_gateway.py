"""
Store Gateway

Thin operational facade over the two store handles of one key-space:

    multi_get      replica, falls back to primary while the replica loads
    set_and_get    primary, SET [EX] + GET in one transaction
    pipelined_set  primary, one non-transactional pipeline for many SETs
    delete         primary

Fallback is read-path only: writes always go to the primary and never
switch handles.
"""

from collections.abc import Sequence
from typing import Any

from redis.exceptions import BusyLoadingError

from redis_dataloader.core.config.constants import REPLICA_LOADING_MARKER, Stage
from redis_dataloader.core.interfaces.store import StoreHandle
from redis_dataloader.core.logging.logger import log_stage, truncate_key
from redis_dataloader.infrastructure.cache import key_codec
from redis_dataloader.infrastructure.cache.observer import CacheObserver


def is_replica_loading_error(error: BaseException) -> bool:
    """
    True when a replica reports it is still loading its snapshot.

    Redis replies ``LOADING Redis is loading the dataset in memory``; redis-py
    turns that into BusyLoadingError and strips the LOADING prefix, so both
    are checked.
    """
    if isinstance(error, BusyLoadingError):
        return True
    return REPLICA_LOADING_MARKER in str(error)


class StoreGateway:
    """
    Store operations for one key-space.

    Args:
        primary: Read-write handle
        replica: Read-preferring handle (may be the primary itself)
        key_space: Prefix of every key
        cache_key_fn: Key normalization function
        expire: Store-side expiry in seconds, None for no expiry
        observer: Metrics/logging sink
    """

    def __init__(
        self,
        primary: StoreHandle,
        replica: StoreHandle,
        key_space: str,
        cache_key_fn: key_codec.CacheKeyFn = key_codec.default_cache_key_fn,
        expire: int | None = None,
        observer: CacheObserver | None = None,
    ):
        self._primary = primary
        self._replica = replica
        self._key_space = key_space
        self._cache_key_fn = cache_key_fn
        self._expire = expire
        self._observer = observer or CacheObserver()

    @property
    def key_space(self) -> str:
        return self._key_space

    def make_key(self, key: Any) -> str:
        return key_codec.make_key(self._key_space, key, self._cache_key_fn)

    async def multi_get(self, keys: Sequence[Any]) -> list[Any]:
        """
        Fetch raw replies for ``keys`` from the replica.

        Returns:
            Replies aligned with ``keys``: None (absent), the empty-marker,
            or a serialized value

        Raises:
            Any store error other than the replica-loading condition
        """
        cache_keys = [self.make_key(k) for k in keys]
        if not cache_keys:
            return []

        log_stage(self._observer.logger, Stage.STORE_MGET, "Multi-get", level="debug", keys=len(cache_keys))

        try:
            return list(await self._replica.mget(cache_keys))
        except Exception as e:
            if not is_replica_loading_error(e):
                raise
            self._observer.record_replica_fallback(len(cache_keys), e)
            return list(await self._primary.mget(cache_keys))

    async def set_and_get(self, key: Any, raw_value: Any) -> Any:
        """
        Write a value to the primary and read it back.

        SET (with EX when an expiry is configured) and GET run in one
        MULTI/EXEC, so the returned value is exactly what was stored.

        Returns:
            The decoded stored value (None for the empty-marker)
        """
        cache_key = self.make_key(key)
        payload = key_codec.encode(raw_value)

        async with self._primary.pipeline(transaction=True) as pipe:
            pipe.set(cache_key, payload, ex=self._expire)
            pipe.get(cache_key)
            replies = await pipe.execute()

        log_stage(
            self._observer.logger, Stage.STORE_SET, "Value stored", level="debug",
            cache_key=truncate_key(cache_key), expire=self._expire,
        )
        return key_codec.decode(replies[-1])

    async def pipelined_set(self, entries: Sequence[tuple[Any, Any]]) -> None:
        """
        Write many entries to the primary in one non-transactional pipeline.

        Completes once for the whole batch. Failures propagate to the caller
        and are never retried here.
        """
        if not entries:
            return

        async with self._primary.pipeline(transaction=False) as pipe:
            for key, value in entries:
                pipe.set(self.make_key(key), key_codec.encode(value), ex=self._expire)
            await pipe.execute()

        log_stage(
            self._observer.logger, Stage.STORE_PIPELINE, "Pipelined set", level="debug",
            entries=len(entries), expire=self._expire,
        )

    async def delete(self, key: Any) -> int:
        """Delete one key from the primary."""
        cache_key = self.make_key(key)
        deleted = await self._primary.delete(cache_key)
        log_stage(
            self._observer.logger, Stage.STORE_DEL, "Key deleted", level="debug",
            cache_key=truncate_key(cache_key), deleted=deleted,
        )
        return deleted
