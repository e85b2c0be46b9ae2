"""
redis-dataloader

Batched, read-through caching of an expensive data source on a Redis
primary/replica pair.

Usage:
------
```python
from redis_dataloader import RedisDataLoaderFactory, StoreHandles

handles = await StoreHandles.from_settings().connect()
factory = RedisDataLoaderFactory.from_handles(handles)

users = factory.create("user", fetch_user, expire=3600)
user = await users.load("42")
```
"""

from redis_dataloader.core.exceptions import (
    DecodeError,
    InvalidArgumentError,
    RedisDataLoaderError,
)
from redis_dataloader.infrastructure.cache import (
    InvalidationListener,
    LoaderOptions,
    RedisDataLoader,
    RedisDataLoaderFactory,
    StoreHandles,
)

__version__ = "1.0.0"

__all__ = [
    "DecodeError",
    "InvalidArgumentError",
    "InvalidationListener",
    "LoaderOptions",
    "RedisDataLoader",
    "RedisDataLoaderError",
    "RedisDataLoaderFactory",
    "StoreHandles",
]
