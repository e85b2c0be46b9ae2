"""
Unit Tests for Core Exceptions

Tests the exception hierarchy and error context helpers.
"""

import pytest

from redis_dataloader.core.exceptions import (
    BackfillWriteError,
    CacheConnectionError,
    CacheError,
    ConfigurationError,
    DecodeError,
    InvalidArgumentError,
    RedisDataLoaderError,
    ValidationError,
)


@pytest.mark.unit
class TestRedisDataLoaderError:
    """Test the base exception class."""

    def test_message_and_details(self):
        error = RedisDataLoaderError("Test message", details={"key": "user:1"})

        assert str(error) == "Test message"
        assert error.message == "Test message"
        assert error.details == {"key": "user:1"}

    def test_details_default_to_empty_dict(self):
        assert RedisDataLoaderError("Test").details == {}

    def test_details_are_copied(self):
        details = {"a": 1}
        error = RedisDataLoaderError("Test", details=details)
        error.with_context(b=2)

        assert details == {"a": 1}
        assert error.details == {"a": 1, "b": 2}

    def test_to_dict(self):
        error = DecodeError("bad payload", details={"payload_preview": "'{x'"})

        assert error.to_dict() == {
            "error_type": "DecodeError",
            "message": "bad payload",
            "details": {"payload_preview": "'{x'"},
        }

    def test_repr(self):
        assert repr(CacheError("boom")) == "CacheError(message='boom')"
        assert "details={'k': 1}" in repr(CacheError("boom", details={"k": 1}))

    def test_from_exception(self):
        original = ConnectionError("reset by peer")

        error = BackfillWriteError.from_exception(original, message="Backfill pipeline failed", key_space="user")

        assert isinstance(error, BackfillWriteError)
        assert error.message == "Backfill pipeline failed"
        assert error.details == {
            "original_error": "ConnectionError",
            "original_message": "reset by peer",
            "key_space": "user",
        }

    def test_from_exception_defaults_message(self):
        assert CacheError.from_exception(ValueError("nope")).message == "nope"


@pytest.mark.unit
class TestExceptionHierarchy:
    """Test that themed exceptions inherit correctly."""

    @pytest.mark.parametrize("cls", [CacheConnectionError, DecodeError, BackfillWriteError])
    def test_cache_errors(self, cls):
        assert issubclass(cls, CacheError)
        assert issubclass(cls, RedisDataLoaderError)

    def test_decode_error_is_value_error(self):
        assert issubclass(DecodeError, ValueError)

    def test_invalid_argument_is_type_error(self):
        assert issubclass(InvalidArgumentError, ValidationError)
        assert issubclass(InvalidArgumentError, TypeError)

    def test_configuration_error(self):
        assert issubclass(ConfigurationError, RedisDataLoaderError)
