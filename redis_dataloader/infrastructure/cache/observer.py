"""
Cache Observer

Counts what the fill pipeline and the store gateway did and writes the
matching log entries. One observer per loader, so stats are per key-space.
"""

from typing import Any

from redis_dataloader.core.config.constants import EntryState, Stage
from redis_dataloader.core.logging.logger import get_logger, log_stage, truncate_key

logger = get_logger(__name__)


class CacheObserver:
    """
    Tracks cache-fill metrics and logs operations.

    Metrics Tracked:
    - hits, empty markers, misses (per multi-get reply)
    - fetches (fetch function invocations)
    - backfill writes / failures (entries, not pipelines)
    - replica fallbacks
    """

    def __init__(self, logger_instance=None):
        self._logger = logger_instance or logger

        self._hits = 0
        self._empty = 0
        self._misses = 0
        self._fetches = 0
        self._backfill_writes = 0
        self._backfill_failures = 0
        self._replica_fallbacks = 0

    @property
    def logger(self):
        return self._logger

    def record_lookup(self, state: EntryState, cache_key: str) -> None:
        """Record one multi-get reply."""
        if state is EntryState.HIT:
            self._hits += 1
        elif state is EntryState.EMPTY:
            self._empty += 1
        else:
            self._misses += 1
        log_stage(
            self._logger, Stage.FILL_BATCH, "Cache lookup", level="debug",
            cache_key=truncate_key(cache_key), state=state.value,
        )

    def record_fetch(self) -> None:
        self._fetches += 1

    def record_replica_fallback(self, key_count: int, error: Exception) -> None:
        self._replica_fallbacks += 1
        log_stage(
            self._logger, Stage.STORE_FALLBACK,
            "Replica is loading its dataset, retrying multi-get on primary",
            level="warning", keys=key_count, error=str(error),
        )

    def record_backfill(self, entry_count: int) -> None:
        self._backfill_writes += entry_count
        log_stage(self._logger, Stage.FILL_BACKFILL, "Backfill written", level="debug", entries=entry_count)

    def record_backfill_failure(self, entry_count: int, error: Exception) -> None:
        self._backfill_failures += entry_count
        error_info = error.to_dict() if hasattr(error, "to_dict") else {"message": str(error)}
        log_stage(
            self._logger, Stage.FILL_BACKFILL, "Backfill write failed, entries dropped",
            level="warning", entries=entry_count, error=error_info,
        )

    def get_stats(self) -> dict[str, Any]:
        """
        Get cache-fill statistics.

        Returns:
            Dict with counters and the hit rate (hits + empty markers over
            all lookups)
        """
        lookups = self._hits + self._empty + self._misses
        served = self._hits + self._empty
        return {
            "hits": self._hits,
            "empty_hits": self._empty,
            "misses": self._misses,
            "lookups": lookups,
            "hit_rate": round(served / lookups, 3) if lookups else 0.0,
            "fetches": self._fetches,
            "backfill_writes": self._backfill_writes,
            "backfill_failures": self._backfill_failures,
            "replica_fallbacks": self._replica_fallbacks,
        }
