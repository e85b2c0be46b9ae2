"""
Store Test Factory

Creates store handles with controllable failure behaviour.
"""

import asyncio
from typing import Any
from unittest.mock import AsyncMock

from redis.exceptions import BusyLoadingError, ResponseError

from redis_dataloader.core.interfaces.store import InMemoryStore


class FailingPipelineStore(InMemoryStore):
    """InMemoryStore whose pipelines fail on execute()."""

    def __init__(self, error: Exception | None = None):
        super().__init__()
        self.error = error or ConnectionError("pipeline connection reset")

    def pipeline(self, transaction: bool = True):
        pipe = super().pipeline(transaction)
        error = self.error

        async def execute():
            raise error

        pipe.execute = execute
        return pipe


class FakePubSub:
    """pub/sub double yielding queued messages, then failing or blocking."""

    def __init__(self, messages: list[dict[str, Any]] | None = None, error: Exception | None = None):
        self.messages = list(messages or [])
        self.error = error
        self.subscribed: list[str] = []
        self.unsubscribed: list[str] = []
        self.closed = False

    async def subscribe(self, channel: str) -> None:
        self.subscribed.append(channel)

    async def unsubscribe(self, channel: str) -> None:
        self.unsubscribed.append(channel)

    async def aclose(self) -> None:
        self.closed = True

    async def listen(self):
        for message in self.messages:
            yield message
        if self.error is not None:
            raise self.error
        await asyncio.Event().wait()


class StoreTestFactory:
    """Factory for creating store test doubles."""

    @staticmethod
    def store_with_data(initial_data: dict[str, Any] | None = None) -> InMemoryStore:
        """InMemoryStore pre-populated with raw payloads."""
        store = InMemoryStore()
        for key, value in (initial_data or {}).items():
            store.data[key] = value if isinstance(value, bytes) else str(value).encode("utf-8")
        return store

    @staticmethod
    def loading_replica(redis_py_style: bool = False) -> AsyncMock:
        """Replica that is still loading its snapshot."""
        replica = AsyncMock()
        if redis_py_style:
            # redis-py strips the LOADING prefix from the reply
            error = BusyLoadingError("Redis is loading the dataset in memory")
        else:
            error = ResponseError("LOADING Redis is loading the dataset in memory")
        replica.mget = AsyncMock(side_effect=error)
        return replica

    @staticmethod
    def failing_replica(error: Exception | None = None) -> AsyncMock:
        """Replica whose multi-get fails with an ordinary error."""
        replica = AsyncMock()
        replica.mget = AsyncMock(side_effect=error or ConnectionError("replica unreachable"))
        return replica

    @staticmethod
    def failing_pipeline_store(error: Exception | None = None) -> FailingPipelineStore:
        """Primary whose pipelines fail."""
        return FailingPipelineStore(error)
