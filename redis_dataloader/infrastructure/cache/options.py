"""
Loader Options

Immutable per-loader configuration, resolved once when a loader is built.
Cache-specific options (expire, invalidation_channel) stay with the loader;
the rest is forwarded to the request coalescer.
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from redis_dataloader.core.config.settings import Settings, get_settings
from redis_dataloader.infrastructure.cache.key_codec import default_cache_key_fn


class LoaderOptions(BaseModel):
    """
    Options of one RedisDataLoader.

    Attributes:
        expire: Store-side expiry in seconds (None: never expires)
        cache_key_fn: Key normalization, also the coalescer's cache key
        batch: Coalesce loads issued in the same loop iteration
        max_batch_size: Split larger batches (None: unbounded)
        cache: Keep resolved loads in the process-local coalescer cache
        cache_map: Mapping backing the coalescer cache (None: a new dict)
        invalidation_channel: Pub/sub channel announcing clears
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    expire: int | None = Field(default=None, gt=0)
    cache_key_fn: Callable[[Any], str] = default_cache_key_fn
    batch: bool = True
    max_batch_size: int | None = Field(default=None, gt=0)
    cache: bool = True
    cache_map: Any = None
    invalidation_channel: str | None = None

    @field_validator("cache_key_fn", mode="before")
    @classmethod
    def default_key_fn(cls, v):
        return default_cache_key_fn if v is None else v

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides) -> "LoaderOptions":
        """
        Build options from the loader defaults in ``settings``.

        Keyword overrides win over settings.
        """
        loader_settings = (settings or get_settings()).loader
        values: dict[str, Any] = {
            "expire": loader_settings.LOADER_DEFAULT_EXPIRE,
            "max_batch_size": loader_settings.LOADER_MAX_BATCH_SIZE,
            "cache": loader_settings.LOADER_LOCAL_CACHE,
            "invalidation_channel": loader_settings.LOADER_INVALIDATION_CHANNEL,
        }
        values.update(overrides)
        return cls(**values)

    def coalescer_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``aiodataloader.DataLoader``."""
        return {
            "batch": self.batch,
            "max_batch_size": self.max_batch_size,
            "cache": self.cache,
            "cache_map": self.cache_map,
            "get_cache_key": self.cache_key_fn,
        }
