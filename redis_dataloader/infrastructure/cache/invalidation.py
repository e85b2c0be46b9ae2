"""
Invalidation Listener

Keeps process-local coalescer caches in step with clears issued by other
processes. A loader with an ``invalidation_channel`` publishes
``{"key_space": ..., "key": ...}`` after every clear; the listener receives
it over pub/sub and drops the key from every registered loader of that
key-space. The store itself is not touched.
"""

import asyncio
from collections import defaultdict
from contextlib import suppress
from typing import Any

import orjson

from redis_dataloader.core.config.constants import Stage
from redis_dataloader.core.logging.logger import get_logger, log_stage
from redis_dataloader.infrastructure.cache.redis_data_loader import RedisDataLoader

logger = get_logger(__name__)


class InvalidationListener:
    """
    Subscribes to one invalidation channel.

    Args:
        handle: Store handle with ``pubsub()`` (normally the primary)
        channel: Channel the loaders publish on
    """

    def __init__(self, handle, channel: str, logger_instance=None):
        self._handle = handle
        self._channel = channel
        self._logger = logger_instance or logger
        self._loaders: dict[str, list[RedisDataLoader]] = defaultdict(list)
        self._task: asyncio.Task | None = None

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def register(self, loader: RedisDataLoader) -> None:
        if loader not in self._loaders[loader.key_space]:
            self._loaders[loader.key_space].append(loader)

    def unregister(self, loader: RedisDataLoader) -> None:
        loaders = self._loaders.get(loader.key_space, [])
        if loader in loaders:
            loaders.remove(loader)

    async def handle_message(self, data: Any) -> int:
        """
        Apply one invalidation message.

        Returns:
            Number of loaders whose local entry was dropped
        """
        try:
            payload = orjson.loads(data)
            key_space = payload["key_space"]
            key = payload["key"]
        except (orjson.JSONDecodeError, KeyError, TypeError) as e:
            log_stage(
                self._logger, Stage.INVALIDATION_RECEIVE, "Malformed invalidation message skipped",
                level="warning", error=str(e),
            )
            return 0

        loaders = list(self._loaders.get(key_space, ()))
        for loader in loaders:
            await loader.clear_local(key)

        log_stage(
            self._logger, Stage.INVALIDATION_RECEIVE, "Invalidation applied", level="debug",
            key_space=key_space, loaders=len(loaders),
        )
        return len(loaders)

    async def run(self) -> None:
        """Consume the channel until cancelled."""
        pubsub = self._handle.pubsub()
        await pubsub.subscribe(self._channel)
        log_stage(self._logger, Stage.INVALIDATION_LISTEN, "Listening for invalidations", channel=self._channel)
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                await self.handle_message(message["data"])
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()

    def start(self) -> asyncio.Task:
        """Run the listener as a background task."""
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(self.run())
            self._task.add_done_callback(self._on_task_done)
        return self._task

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            log_stage(
                self._logger, Stage.INVALIDATION_LISTEN, "Invalidation listener died",
                level="error", channel=self._channel, error=str(error),
                error_type=type(error).__name__,
            )

    async def stop(self) -> None:
        """Cancel the listener task and wait for it to unsubscribe."""
        if self._task is None:
            return
        # A task that already failed was logged by _on_task_done.
        if not self._task.done():
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        log_stage(self._logger, Stage.INVALIDATION_LISTEN, "Invalidation listener stopped", channel=self._channel)
