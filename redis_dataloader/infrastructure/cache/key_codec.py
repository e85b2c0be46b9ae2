"""
Key Codec

Derives fully-qualified cache keys and converts values to and from the
store's wire representation.

Key layout:   <key_space>:<cache_key_fn(key)>
Value layout: JSON for structured values, EMPTY_MARKER ("") for everything
              else, so a stored known-null never looks like an absent key.

Application keys are either text or structured (acyclic, JSON-serializable).
Structured keys are normalized with a sorted-keys JSON dump, so
``{"a": 1, "b": 2}`` and ``{"b": 2, "a": 1}`` land on the same entry.
"""

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import orjson

from redis_dataloader.core.config.constants import EMPTY_MARKER, KEY_SEPARATOR, EntryState
from redis_dataloader.core.exceptions import DecodeError, InvalidArgumentError

CacheKeyFn = Callable[[Any], str]


# =============================================================================
# Application keys
# =============================================================================


@dataclass(frozen=True)
class TextKey:
    """A plain string key, used verbatim."""

    value: str


@dataclass(frozen=True)
class StructuredKey:
    """A JSON-serializable key, normalized by stable serialization."""

    value: Any


AppKey = TextKey | StructuredKey


def to_app_key(key: Any) -> AppKey:
    """Tag a raw key once at the API boundary."""
    if isinstance(key, (TextKey, StructuredKey)):
        return key
    if isinstance(key, str):
        return TextKey(key)
    return StructuredKey(key)


def stable_stringify(value: Any) -> str:
    """
    Canonical JSON for a structured value.

    Mapping keys are sorted at every depth, so the result does not depend
    on insertion order.

    Raises:
        InvalidArgumentError: If the value is not JSON-serializable
    """
    try:
        return orjson.dumps(value, default=_jsonable, option=orjson.OPT_SORT_KEYS).decode("utf-8")
    except TypeError as e:
        raise InvalidArgumentError(
            f"Key is not JSON-serializable: {e}",
            details={"key_type": type(value).__name__},
        ) from e


def normalize_key(key: AppKey) -> str:
    """Map a tagged key to its canonical string."""
    if isinstance(key, TextKey):
        return key.value
    return stable_stringify(key.value)


def default_cache_key_fn(key: Any) -> str:
    """Identity for strings, stable serialization for structured keys."""
    return normalize_key(to_app_key(key))


def make_key(key_space: str, key: Any, cache_key_fn: CacheKeyFn = default_cache_key_fn) -> str:
    """
    Build the fully-qualified store key.

    Example:
        >>> make_key("user", {"b": 2, "a": 1})
        'user:{"a":1,"b":2}'
        >>> make_key("", "42")
        '42'
    """
    normalized = cache_key_fn(key)
    if key_space:
        return f"{key_space}{KEY_SEPARATOR}{normalized}"
    return normalized


# =============================================================================
# Values
# =============================================================================


def _jsonable(value: Any) -> Any:
    # orjson handles dataclasses natively; pydantic models need a dump.
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


def is_structured(value: Any) -> bool:
    """True for mappings, lists/tuples, dataclass instances and pydantic models."""
    if isinstance(value, (Mapping, list, tuple)):
        return True
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return True
    return hasattr(value, "model_dump") and not isinstance(value, type)


def encode(value: Any) -> str:
    """
    Serialize a value for the store.

    Structured, non-null values become JSON; anything else (None included)
    becomes the empty-marker.
    """
    if value is not None and is_structured(value):
        return orjson.dumps(value, default=_jsonable).decode("utf-8")
    return EMPTY_MARKER


def entry_state(raw: Any) -> EntryState:
    """Classify one multi-get reply."""
    if raw is None:
        return EntryState.MISS
    if raw == EMPTY_MARKER or raw == EMPTY_MARKER.encode("utf-8"):
        return EntryState.EMPTY
    return EntryState.HIT


def decode(raw: Any) -> Any:
    """
    Deserialize a stored payload.

    Empty-marker and absent both decode to None. Binary payloads are decoded
    as UTF-8 text first.

    Raises:
        DecodeError: If the payload is not valid JSON
    """
    if entry_state(raw) is not EntryState.HIT:
        return None

    try:
        if isinstance(raw, (bytes, bytearray, memoryview)):
            raw = bytes(raw).decode("utf-8")
        return orjson.loads(raw)
    except (orjson.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
        preview = raw[:40] if isinstance(raw, (str, bytes)) else type(raw).__name__
        raise DecodeError(
            f"Stored payload is not valid JSON: {e}",
            details={"payload_preview": repr(preview)},
        ) from e
