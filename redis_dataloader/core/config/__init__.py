"""
Configuration Module

- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Persisted layout markers, entry states and stage identifiers

Usage:
------
```python
from redis_dataloader.core.config import get_settings, Stage

settings = get_settings()
primary_url = settings.redis.REDIS_PRIMARY_URL
```

Environment Variables:
---------------------
```bash
REDIS_PRIMARY_URL=redis://primary:6379/0
REDIS_REPLICA_URL=redis://replica:6379/0
LOADER_DEFAULT_EXPIRE=3600
LOADER_INVALIDATION_CHANNEL=loader:invalidate
LOG_LEVEL=INFO
LOG_FORMAT=json
```
"""

from redis_dataloader.core.config.constants import (
    EMPTY_MARKER,
    KEY_SEPARATOR,
    LOG_KEY_MAX_LENGTH,
    REPLICA_LOADING_MARKER,
    EntryState,
    Stage,
)
from redis_dataloader.core.config.settings import get_settings, reload_settings

__all__ = [
    # Settings
    "get_settings",
    "reload_settings",
    # Enums
    "EntryState",
    "Stage",
    # Layout
    "EMPTY_MARKER",
    "KEY_SEPARATOR",
    "LOG_KEY_MAX_LENGTH",
    "REPLICA_LOADING_MARKER",
]
