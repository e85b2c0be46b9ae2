"""
System Constants

Key layout, store markers and log stage identifiers used across the
cache-fill pipeline.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for the persisted key/value layout
- Stage identifiers keep structured logs greppable
"""

from enum import Enum

# ============================================================================
# Persisted Layout
# ============================================================================

# <key_space>:<normalized_key>
KEY_SEPARATOR = ":"

# Stored for a key whose fetch resolved to None ("known null").
EMPTY_MARKER = ""

# Substring of the error a replica reports while it loads its snapshot.
REPLICA_LOADING_MARKER = "LOADING"

# Longest cache key written into a log field.
LOG_KEY_MAX_LENGTH = 40


# ============================================================================
# Entry States
# ============================================================================


class EntryState(str, Enum):
    """
    State of one multi-get reply.

    MISS: no entry in the store, the fetch function must run
    EMPTY: empty-marker, the key was fetched before and resolved to None
    HIT: serialized non-null value
    """

    MISS = "miss"
    EMPTY = "empty"
    HIT = "hit"


# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """Stage identifiers attached to log entries as the ``stage`` field."""

    REDIS_CONNECT = "REDIS.CONNECT"
    REDIS_CLOSE = "REDIS.CLOSE"
    REDIS_HEALTH = "REDIS.HEALTH"

    STORE_MGET = "STORE.MGET"
    STORE_FALLBACK = "STORE.FALLBACK"
    STORE_SET = "STORE.SET"
    STORE_PIPELINE = "STORE.PIPELINE"
    STORE_DEL = "STORE.DEL"

    FILL_BATCH = "FILL.BATCH"
    FILL_BACKFILL = "FILL.BACKFILL"

    LOADER_INIT = "LOADER.INIT"
    LOADER_PRIME = "LOADER.PRIME"
    LOADER_CLEAR = "LOADER.CLEAR"

    INVALIDATION_PUBLISH = "INVALIDATION.PUBLISH"
    INVALIDATION_RECEIVE = "INVALIDATION.RECEIVE"
    INVALIDATION_LISTEN = "INVALIDATION.LISTEN"
