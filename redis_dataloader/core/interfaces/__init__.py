"""
Core Interfaces Module

- **store.py**: StoreHandle / StorePipeline protocols and the InMemoryStore
  implementation

Interfaces follow the Protocol pattern (PEP 544): ``redis.asyncio.Redis``
satisfies StoreHandle without inheritance, and tests swap in InMemoryStore.
"""

from redis_dataloader.core.interfaces.store import (
    InMemoryPipeline,
    InMemoryStore,
    StoreHandle,
    StorePipeline,
)

__all__ = [
    "InMemoryPipeline",
    "InMemoryStore",
    "StoreHandle",
    "StorePipeline",
]
