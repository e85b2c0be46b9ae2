"""
Store Handle Protocol

The loader never speaks the wire protocol itself. It drives two handles
(a write-capable primary and a read-preferring replica) through the subset
of the ``redis.asyncio.Redis`` API described here.

Architectural Decision: Protocol-based abstraction
- ``redis.asyncio.Redis`` satisfies it structurally
- Tests and development use InMemoryStore
"""

import time
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StorePipeline(Protocol):
    """Queued commands sent in one round trip by ``execute()``."""

    def set(self, name: str, value: Any, ex: int | None = None) -> Any:
        ...

    def get(self, name: str) -> Any:
        ...

    async def execute(self) -> list[Any]:
        ...

    async def __aenter__(self) -> "StorePipeline":
        ...

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        ...


@runtime_checkable
class StoreHandle(Protocol):
    """
    One store endpoint (primary or replica).

    ``mget`` replies are aligned with the requested keys; ``None`` marks an
    absent key.
    """

    async def ping(self) -> bool:
        ...

    async def get(self, name: str) -> Any:
        ...

    async def mget(self, keys: Sequence[str], *args: str) -> list[Any]:
        ...

    async def set(self, name: str, value: Any, ex: int | None = None) -> Any:
        ...

    async def delete(self, *names: str) -> int:
        ...

    async def publish(self, channel: str, message: Any) -> int:
        ...

    def pipeline(self, transaction: bool = True) -> StorePipeline:
        ...


class InMemoryPipeline:
    """Pipeline over an InMemoryStore; commands apply in order on execute()."""

    def __init__(self, store: "InMemoryStore", transaction: bool):
        self._store = store
        self.transaction = transaction
        self._commands: list[tuple[str, tuple, dict]] = []

    def set(self, name: str, value: Any, ex: int | None = None) -> "InMemoryPipeline":
        self._commands.append(("set", (name, value), {"ex": ex}))
        return self

    def get(self, name: str) -> "InMemoryPipeline":
        self._commands.append(("get", (name,), {}))
        return self

    async def execute(self) -> list[Any]:
        commands = self._commands
        self._commands = []
        self._store.pipelines_executed.append([(cmd, args) for cmd, args, _ in commands])
        results = []
        for command, args, kwargs in commands:
            results.append(await getattr(self._store, command)(*args, **kwargs))
        return results

    async def __aenter__(self) -> "InMemoryPipeline":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        self._commands = []


class InMemoryStore:
    """
    Simple in-memory store implementing StoreHandle.

    Values are kept as bytes, the way a Redis client without
    ``decode_responses`` returns them. Expiry is honoured lazily on read.

    Note: NOT distributed. Use only for testing and development.
    """

    def __init__(self):
        self.data: dict[str, bytes] = {}
        self.expiry: dict[str, float] = {}
        self.published: list[tuple[str, Any]] = []
        self.pipelines_executed: list[list[tuple[str, tuple]]] = []

    @staticmethod
    def _to_bytes(value: Any) -> bytes:
        if isinstance(value, bytes):
            return value
        return str(value).encode("utf-8")

    def _expired(self, name: str) -> bool:
        deadline = self.expiry.get(name)
        if deadline is not None and time.monotonic() >= deadline:
            self.data.pop(name, None)
            self.expiry.pop(name, None)
            return True
        return False

    async def ping(self) -> bool:
        return True

    async def get(self, name: str) -> bytes | None:
        if self._expired(name):
            return None
        return self.data.get(name)

    async def mget(self, keys: Sequence[str], *args: str) -> list[bytes | None]:
        names = [keys] if isinstance(keys, str) else list(keys)
        names.extend(args)
        return [await self.get(name) for name in names]

    async def set(self, name: str, value: Any, ex: int | None = None) -> bool:
        self.data[name] = self._to_bytes(value)
        if ex:
            self.expiry[name] = time.monotonic() + ex
        else:
            self.expiry.pop(name, None)
        return True

    async def delete(self, *names: str) -> int:
        count = 0
        for name in names:
            self.expiry.pop(name, None)
            if self.data.pop(name, None) is not None:
                count += 1
        return count

    async def publish(self, channel: str, message: Any) -> int:
        self.published.append((channel, message))
        return 0

    def pipeline(self, transaction: bool = True) -> InMemoryPipeline:
        return InMemoryPipeline(self, transaction)
