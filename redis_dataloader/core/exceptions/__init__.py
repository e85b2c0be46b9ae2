"""
Exception Module

- **base.py**: RedisDataLoaderError base class + ConfigurationError
- **cache.py**: Store and payload exceptions
- **validation.py**: Argument validation exceptions

Usage:
------
```python
from redis_dataloader.core.exceptions import DecodeError, InvalidArgumentError
```
"""

from redis_dataloader.core.exceptions.base import ConfigurationError, RedisDataLoaderError
from redis_dataloader.core.exceptions.cache import (
    BackfillWriteError,
    CacheConnectionError,
    CacheError,
    DecodeError,
)
from redis_dataloader.core.exceptions.validation import InvalidArgumentError, ValidationError

__all__ = [
    # Base
    "RedisDataLoaderError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "CacheConnectionError",
    "DecodeError",
    "BackfillWriteError",
    # Validation
    "ValidationError",
    "InvalidArgumentError",
]
