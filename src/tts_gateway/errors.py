"""
Gateway Error Taxonomy.

Every failure the gateway can report is a GatewayError subclass carrying a
machine-readable code. The route layer maps codes to HTTP status codes and
returns ``GatewayError.to_dict()`` as the JSON body, so callers always see
``{"error": "<message>"}``.

Hierarchy:
    GatewayError
    +-- ValidationError       (400) bad or missing caller input
    +-- ConfigurationError    (500) required credential not configured
    +-- AuthenticationError   (500) identity token could not be obtained
    +-- QuotaError            (429) provider reported quota/rate exhaustion
    +-- ProviderError         (500) provider failed or returned no audio
    +-- InternalError         (500) unexpected failure, e.g. unparsable body

Quota Detection:
    Providers report quota exhaustion as free text. A message is treated as
    a quota condition when it contains any of QUOTA_MARKERS, compared
    case-insensitively. Structured signals (HTTP 429, Google's
    RESOURCE_EXHAUSTED status) are checked by the adapters as well.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class ErrorCode:
    """Machine-readable error codes."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


QUOTA_MARKERS = ("quota", "requests_per_minute", "rate limit")
QUOTA_MESSAGE = "Limit exceeded per project per minute"
INTERNAL_MESSAGE = "Internal server error"


class GatewayError(Exception):
    """
    Base exception for gateway errors.

    Attributes:
        message: Public, human-readable message returned to the caller.
        code: Error code from ErrorCode.
        details: Diagnostic context for logs; never sent to the caller.
    """
    def __init__(self, message: str, code: str = ErrorCode.INTERNAL_ERROR, details: Optional[Dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Public JSON body for API responses."""
        return {"error": self.message}


class ValidationError(GatewayError):
    """Raised when caller input is missing or invalid."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class ConfigurationError(GatewayError):
    """Raised when a credential the chosen adapter needs is not configured."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class AuthenticationError(GatewayError):
    """Raised when a managed-identity token cannot be obtained."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.AUTHENTICATION_ERROR, details)


class QuotaError(GatewayError):
    """Raised when a provider reports quota or rate-limit exhaustion."""
    def __init__(self, message: str = QUOTA_MESSAGE, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.QUOTA_EXCEEDED, details)


class ProviderError(GatewayError):
    """Raised when a provider call fails or returns an unusable payload."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.PROVIDER_ERROR, details)


class InternalError(GatewayError):
    """Raised for unanticipated failures such as unparsable provider output."""
    def __init__(self, message: str = INTERNAL_MESSAGE, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.INTERNAL_ERROR, details)


def is_quota_message(message: Optional[str]) -> bool:
    """
    Check a provider error message against the quota markers.

    Examples:
        >>> is_quota_message("Quota exceeded for requests_per_minute")
        True
        >>> is_quota_message("Invalid voice name")
        False
    """
    if not message:
        return False
    lowered = message.lower()
    return any(marker in lowered for marker in QUOTA_MARKERS)


def classify_provider_failure(
    message: str,
    status_code: Optional[int] = None,
    provider_status: Optional[str] = None,
    details: Optional[Dict] = None,
) -> GatewayError:
    """
    Turn a provider-reported failure into QuotaError or ProviderError.

    Args:
        message: Provider's error message (or a fallback).
        status_code: HTTP status of the provider response, if any.
        provider_status: Structured status string such as RESOURCE_EXHAUSTED.
        details: Diagnostic context attached to the error.

    Returns:
        QuotaError for quota conditions, ProviderError otherwise.
    """
    if (
        is_quota_message(message)
        or status_code == 429
        or (provider_status or "").upper() == "RESOURCE_EXHAUSTED"
    ):
        return QuotaError(details=details)
    return ProviderError(message, details=details)
