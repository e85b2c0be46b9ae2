"""
Base Exception Class

All loader exceptions inherit from RedisDataLoaderError. Specialized
exceptions live in their themed modules.
"""

from typing import Any


class RedisDataLoaderError(Exception):
    """
    Base exception for all loader errors.

    Attributes:
        message: Error message
        details: Additional error details (dict)

    Example:
        raise DecodeError(
            "Stored payload is not valid JSON",
            details={"key": "user:42"}
        )
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging.

        Returns:
            Dict with error_type, message and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }

    def with_context(self, **context) -> "RedisDataLoaderError":
        """
        Add additional context to the error details.

        Returns:
            Self (for method chaining)
        """
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        return f"{self.__class__.__name__}(message='{self.message}'{details_str})"

    @classmethod
    def from_exception(cls, exc: Exception, message: str | None = None, **details) -> "RedisDataLoaderError":
        """
        Create an error from another exception.

        Example:
            >>> try:
            ...     await pipe.execute()
            ... except RedisError as e:
            ...     error = BackfillWriteError.from_exception(e, entries=3)
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details,
        }
        return cls(error_message, details=error_details)


class ConfigurationError(RedisDataLoaderError):
    """Raised when configuration is invalid or missing."""
    pass
