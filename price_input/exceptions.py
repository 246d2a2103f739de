"""
Price Input Exceptions - Error taxonomy for price inputs.

Three failure classes, by where they happen:
- ConfigurationError: bad or missing input, detected before any network call
- InitializationError: remote symbol verification failed, input never activates
- GatherError: per-cycle failure, only ever reported through the accumulator
"""

from datetime import datetime, timezone
from typing import Any, Optional


class PriceInputError(Exception):
    """Base exception for all price input errors."""

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.source_name = source_name
        self.original_error = original_error
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "source_name": self.source_name,
            "original_error": str(self.original_error) if self.original_error else None,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.source_name:
            parts.append(f"[source={self.source_name}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error!r})")
        return " ".join(parts)


class ConfigurationError(PriceInputError):
    """Configuration error, raised before any network access."""

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        config_key: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, source_name, original_error, context)
        self.config_key = config_key

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["config_key"] = self.config_key
        return data


class RemoteCallError(PriceInputError):
    """
    Failure of a call to the remote service.

    Carries whatever is known about the call: the URL, the HTTP status and,
    when the service answered with an error payload, its code and message.
    """

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        symbol: Optional[str] = None,
        request_url: Optional[str] = None,
        status_code: Optional[int] = None,
        remote_code: Optional[int] = None,
        remote_message: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, source_name, original_error, context)
        self.symbol = symbol
        self.request_url = request_url
        self.status_code = status_code
        self.remote_code = remote_code
        self.remote_message = remote_message

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "symbol": self.symbol,
            "request_url": self.request_url,
            "status_code": self.status_code,
            "remote_code": self.remote_code,
            "remote_message": self.remote_message,
        })
        return data

    def is_remote_error(self) -> bool:
        """Check if the service answered with a decodable error payload."""
        return self.remote_code is not None

    def is_transport_error(self) -> bool:
        """Check if no HTTP response was received at all."""
        return self.status_code is None and self.original_error is not None


class InitializationError(RemoteCallError):
    """Remote verification failed; the input is not activated."""


class GatherError(RemoteCallError):
    """Per-cycle failure; reported, never fatal to the host."""
