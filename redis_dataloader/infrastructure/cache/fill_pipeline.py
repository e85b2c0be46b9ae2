"""
Batch Fill Pipeline

The batch function handed to the request coalescer. For one coalesced
batch of keys:

    1. one multi-get for every key
    2. per position: HIT -> decoded value, EMPTY -> None, MISS -> fetch(key)
    3. fetches run concurrently; results come back in input order
    4. every fetched value is written back in one pipelined multi-set that
       runs as a detached task: the caller never waits for it and its
       failures are only logged

A fetch result of "" is returned as None and not written back. Any other
fetch result is returned in its stored form (encoded, then decoded), so the
first load and every later load agree: scalars and None become the
empty-marker and resolve to None, models and dataclasses become plain JSON.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from redis_dataloader.core.config.constants import EntryState, Stage
from redis_dataloader.core.exceptions import BackfillWriteError
from redis_dataloader.core.logging.logger import log_stage
from redis_dataloader.infrastructure.cache import key_codec
from redis_dataloader.infrastructure.cache.observer import CacheObserver
from redis_dataloader.infrastructure.cache.store_gateway import StoreGateway

FetchFn = Callable[[Any], Awaitable[Any] | Any]


class BatchFillPipeline:
    """
    Resolves coalesced batches from the store, falling back to ``fetch``.

    Args:
        gateway: Store gateway of the key-space
        fetch: User fetch function ``(key) -> value | None``; may be async,
            sync, or return any awaitable
        observer: Metrics/logging sink
    """

    def __init__(self, gateway: StoreGateway, fetch: FetchFn, observer: CacheObserver | None = None):
        self._gateway = gateway
        self._fetch = fetch
        self._observer = observer or CacheObserver()
        self._backfills: set[asyncio.Task] = set()

    @property
    def pending_backfills(self) -> int:
        return len(self._backfills)

    async def fill_batch(self, keys: Sequence[Any]) -> list[Any]:
        """
        Resolve ``keys`` in order.

        A failing fetch or an undecodable payload occupies only its own slot
        as an exception instance, which the coalescer turns into a rejection
        of that key alone. A failing multi-get raises and fails the batch.
        """
        keys = list(keys)
        if not keys:
            return []

        replies = await self._gateway.multi_get(keys)
        write_back: list[tuple[Any, Any]] = []

        async def resolve(key: Any, raw: Any) -> Any:
            state = key_codec.entry_state(raw)
            self._observer.record_lookup(state, self._gateway.make_key(key))

            if state is EntryState.HIT:
                return key_codec.decode(raw)
            if state is EntryState.EMPTY:
                return None

            value = await self._call_fetch(key)
            if isinstance(value, str) and not value:
                return None
            write_back.append((key, value))
            # Serve what the store will serve to every later load.
            return key_codec.decode(key_codec.encode(value))

        results = await asyncio.gather(
            *(resolve(key, raw) for key, raw in zip(keys, replies)),
            return_exceptions=True,
        )

        if write_back:
            self._schedule_backfill(write_back)

        return list(results)

    async def _call_fetch(self, key: Any) -> Any:
        self._observer.record_fetch()
        value = self._fetch(key)
        if inspect.isawaitable(value):
            value = await value
        return value

    def _schedule_backfill(self, entries: list[tuple[Any, Any]]) -> None:
        task = asyncio.get_running_loop().create_task(self._backfill(entries))
        # The loop only keeps weak references to tasks.
        self._backfills.add(task)
        task.add_done_callback(self._backfills.discard)

    async def _backfill(self, entries: list[tuple[Any, Any]]) -> None:
        try:
            await self._gateway.pipelined_set(entries)
        except Exception as e:
            error = BackfillWriteError.from_exception(
                e, message="Backfill pipeline failed", key_space=self._gateway.key_space
            )
            self._observer.record_backfill_failure(len(entries), error)
            return
        self._observer.record_backfill(len(entries))

    async def drain(self) -> None:
        """Wait for every outstanding backfill (shutdown, tests)."""
        while self._backfills:
            await asyncio.gather(*list(self._backfills), return_exceptions=True)
        log_stage(self._observer.logger, Stage.FILL_BACKFILL, "Backfills drained", level="debug")
