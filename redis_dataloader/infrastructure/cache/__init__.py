"""
Cache Module

Read-through cache over a Redis primary/replica pair with per-process
request coalescing.
"""

from .fill_pipeline import BatchFillPipeline
from .invalidation import InvalidationListener
from .options import LoaderOptions
from .redis_client import (
    StoreHandles,
    close_store_handles,
    get_store_handles,
    init_store_handles,
)
from .redis_data_loader import RedisDataLoader, RedisDataLoaderFactory
from .store_gateway import StoreGateway, is_replica_loading_error

__all__ = [
    "BatchFillPipeline",
    "InvalidationListener",
    "LoaderOptions",
    "RedisDataLoader",
    "RedisDataLoaderFactory",
    "StoreGateway",
    "StoreHandles",
    "close_store_handles",
    "get_store_handles",
    "init_store_handles",
    "is_replica_loading_error",
]
