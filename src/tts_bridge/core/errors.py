"""
Exception Hierarchy for tts-bridge.

Every failure surfaced by the library is a TTSError subclass carrying a
machine-readable code, so callers can branch on ``exc.code`` or serialize
the error with ``to_dict()``.

    TTSError
    ├── ConfigurationError   - unknown driver, bad credentials, missing SDK
    ├── InvalidArgumentError - bad chunk limit, malformed options, bad source
    └── ProviderError        - provider/network failure (keeps the cause)

There is no local recovery anywhere in the library: errors propagate to
the caller of ``convert()`` unchanged.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class ErrorCode:
    """Standardized error codes used by TTSError subclasses."""
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TTSError(Exception):
    """
    Base exception for tts-bridge errors.

    Attributes:
        message: Human-readable error message.
        code: Error code from ErrorCode.
        details: Optional dictionary with additional context.
    """
    def __init__(self, message: str, code: str = ErrorCode.INTERNAL_ERROR, details: Optional[Dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dict (for CLI JSON output and logging)."""
        result: Dict[str, Any] = {
            "ok": False,
            "error": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(TTSError):
    """Raised for a bad or missing driver, credentials, SDK or config value."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class InvalidArgumentError(TTSError):
    """Raised for caller mistakes: bad chunk limit, malformed options, unknown source kind."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.INVALID_ARGUMENT, details)


class ProviderError(TTSError):
    """
    Raised when a provider call fails.

    The original SDK or network exception is kept on ``cause`` and is
    also chained as ``__cause__`` by the raising code.
    """
    def __init__(self, message: str, cause: Optional[BaseException] = None, details: Optional[Dict] = None):
        self.cause = cause
        details = dict(details or {})
        if cause is not None:
            details.setdefault("cause", f"{type(cause).__name__}: {cause}")
        super().__init__(message, ErrorCode.PROVIDER_ERROR, details)
