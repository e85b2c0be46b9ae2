"""
Validation Exceptions

Raised synchronously for bad arguments to the loader API.
"""

from redis_dataloader.core.exceptions.base import RedisDataLoaderError


class ValidationError(RedisDataLoaderError):
    """Base exception for argument validation errors."""
    pass


class InvalidArgumentError(ValidationError, TypeError):
    """
    Raised when a key is missing or falsy, or prime() gets no value.

    Also a TypeError, so callers that guard with ``except TypeError`` keep
    working.
    """
    pass
