"""
Cache-Related Exceptions

All exceptions related to the store handles and the stored payloads.
"""

from redis_dataloader.core.exceptions.base import RedisDataLoaderError


class CacheError(RedisDataLoaderError):
    """Base exception for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when a store handle cannot be reached.

    Common causes:
    - Redis server is down
    - Incorrect primary/replica URL
    - Authentication failure
    """
    pass


class DecodeError(CacheError, ValueError):
    """
    Raised when a stored payload is not valid JSON.

    Never retried: it means the store holds corrupted data, or writer and
    reader disagree on the codec.
    """
    pass


class BackfillWriteError(CacheError):
    """
    A write-back pipeline failed.

    Logged by the fill pipeline and never raised to a caller.
    """
    pass
