"""
Core Exceptions - Error taxonomy and exception classes for MediaHub.

Every failure raised inside MediaHub carries an ErrorKind so that callers
can tell retryable conditions (rate limits, transport failures) apart from
conditions that mean "this source is currently broken, try another one".
"""

from enum import Enum
from typing import Optional, Any


class ErrorKind(str, Enum):
    """Classification of a failure, shared by exceptions and result values."""

    FORMAT = "format"
    NOT_AVAILABLE = "not_available"
    RATE_LIMITED = "rate_limited"
    NETWORK = "network"
    CRYPTO = "crypto"
    UNKNOWN = "unknown"

    @property
    def retryable(self) -> bool:
        """Whether the user may simply try again later."""
        return self in (ErrorKind.RATE_LIMITED, ErrorKind.NETWORK)

    def __str__(self) -> str:
        return self.value


def error_kind_for_status(status_code: Optional[int]) -> ErrorKind:
    """
    Map an HTTP status code onto the error taxonomy.

    Args:
        status_code: HTTP status, or None for transport-level failures

    Returns:
        Matching ErrorKind
    """
    if status_code is None:
        return ErrorKind.NETWORK
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code == 404:
        return ErrorKind.NOT_AVAILABLE
    return ErrorKind.UNKNOWN


class MediaHubError(Exception):
    """Base exception class for all MediaHub-specific errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, details: Optional[Any] = None, kind: Optional[ErrorKind] = None):
        """
        Initialize MediaHub error.

        Args:
            message: Human-readable error message
            details: Additional error details for debugging
            kind: Error classification, defaults to the class-level kind
        """
        super().__init__(message)
        self.message = message
        self.details = details
        if kind is not None:
            self.kind = kind

    def __str__(self) -> str:
        return self.message


class ConfigurationError(MediaHubError):
    """Raised when configuration-related errors occur."""

    def __init__(self, message: str, config_path: Optional[str] = None, details: Optional[Any] = None):
        """
        Initialize configuration error.

        Args:
            message: Error description
            config_path: Path to the problematic configuration file
            details: Additional error context
        """
        super().__init__(message, details)
        self.config_path = config_path


class NetworkError(MediaHubError):
    """Raised when an HTTP request fails or returns a non-2xx status."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None, details: Optional[Any] = None):
        """
        Initialize network error.

        The error kind is derived from the status code: 429 is a rate
        limit, 404 means not available, no status at all is a transport
        failure.

        Args:
            message: Error description
            url: URL that caused the error
            status_code: HTTP status code if applicable
            details: Additional error context
        """
        super().__init__(message, details, kind=error_kind_for_status(status_code))
        self.url = url
        self.status_code = status_code


class ValidationError(MediaHubError):
    """Raised when a caller passes invalid input (a programmer error)."""

    kind = ErrorKind.FORMAT

    def __init__(self, message: str, field_name: Optional[str] = None, invalid_value: Optional[Any] = None, details: Optional[Any] = None):
        """
        Initialize validation error.

        Args:
            message: Error description
            field_name: Name of the field that failed validation
            invalid_value: The invalid value that caused the error
            details: Additional error context
        """
        super().__init__(message, details)
        self.field_name = field_name
        self.invalid_value = invalid_value


class ProviderError(ValidationError):
    """Raised when a provider name is not in the catalog."""

    def __init__(self, message: str, provider: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message, field_name="provider", invalid_value=provider, details=details)
        self.provider = provider


class CryptoError(MediaHubError):
    """Raised when decryption fails or no usable key is available."""

    kind = ErrorKind.CRYPTO


class EnvelopeFormatError(CryptoError):
    """Raised when an encrypted blob does not carry the expected envelope."""

    kind = ErrorKind.FORMAT


class ExtractionError(MediaHubError):
    """
    Raised inside an extractor step to short-circuit the pipeline.

    Never escapes SourceExtractor.extract(); it is converted to an
    ExtractionFailure carrying the same kind and fallback flag.
    """

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN, should_fallback: bool = True, details: Optional[Any] = None):
        super().__init__(message, details, kind=kind)
        self.should_fallback = should_fallback


class ChapterImageError(MediaHubError):
    """Raised by the MangaPlus chapter-image pipeline."""

    def __init__(self, message: str, kind: ErrorKind, chapter_id: Optional[str] = None, details: Optional[Any] = None):
        """
        Initialize chapter image error.

        Args:
            message: User-facing error description
            kind: Error classification
            chapter_id: Chapter the error relates to, when known
            details: Additional error context
        """
        super().__init__(message, details, kind=kind)
        self.chapter_id = chapter_id


# Export all exception classes
__all__ = [
    "ErrorKind",
    "error_kind_for_status",
    "MediaHubError",
    "ConfigurationError",
    "ProviderError",
    "NetworkError",
    "ValidationError",
    "CryptoError",
    "EnvelopeFormatError",
    "ExtractionError",
    "ChapterImageError",
]
