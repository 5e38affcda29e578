"""LLM-related exception classes.

Contains all exception classes for LLM operations:
- LLMError: Base exception for LLM-related errors
- ConfigurationError: Provider settings are incomplete
- MissingAPIKeyError: Raised when API key is not set
- HttpError: The endpoint answered with a non-success status
- TransportError: The request never got an HTTP answer
- AbortedError: The request was cancelled
- EmptyResponseError: The model produced no usable text
"""

from typing import Optional


class LLMError(Exception):
    """Base exception for LLM-related errors."""

    pass


class ConfigurationError(LLMError):
    """Raised when provider configuration is incomplete."""

    pass


class MissingAPIKeyError(ConfigurationError):
    """Raised when the required API key is not set."""

    pass


class HttpError(LLMError):
    """Raised when the endpoint returns a non-success HTTP status."""

    def __init__(self, provider: str, message: str, status_code: int):
        super().__init__(f"[{provider}] {message}")
        self.provider = provider
        self.status_code = status_code


class TransportError(LLMError):
    """Raised on network failures (no HTTP status available)."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"[{provider}] {message}")
        self.provider = provider


class AbortedError(LLMError):
    """Raised when a cancellation token stops a request."""

    def __init__(self, message: str = "Aborted", reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason


class EmptyResponseError(LLMError):
    """Raised when a generation completes without any content."""

    pass
