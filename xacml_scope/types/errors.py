"""
Error types and error codes for XACML scope validation.
Every failure on the validation path is one of these; the validator facade
converts all of them into a deny.
"""

from enum import Enum
from typing import Dict, Any, Optional


class ErrorCode(str, Enum):
    """Standard error codes used across the scope validator."""
    INVALID_TOKEN = "invalid_token"
    APPLICATION_NOT_FOUND = "application_not_found"
    ENCODING_FAILED = "encoding_failed"
    PROTOCOL_ERROR = "protocol_error"
    DECODING_FAILED = "decoding_failed"
    ORACLE_UNAVAILABLE = "oracle_unavailable"
    TIMEOUT = "timeout"
    CONFIGURATION_ERROR = "configuration_error"
    INTERNAL_ERROR = "internal_error"

    def __str__(self) -> str:
        return self.value


class ScopeValidationError(Exception):
    """Base exception for all scope validation errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            'error': self.error_code.value,
            'message': self.message,
            'details': self.details
        }

        if self.cause:
            result['cause'] = str(self.cause)

        return result

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class InvalidTokenError(ScopeValidationError):
    """Raised when an access token carries no authorized subject."""

    def __init__(self, message: str = "Access token has no authorized user",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.INVALID_TOKEN, details)


class ApplicationLookupError(ScopeValidationError):
    """Raised when the OAuth application or its tenant cannot be resolved."""

    def __init__(
        self,
        message: str,
        client_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, ErrorCode.APPLICATION_NOT_FOUND, details, cause)
        self.client_id = client_id

        if client_id:
            self.details['client_id'] = client_id


class EncodingError(ScopeValidationError):
    """Raised when an authorization request cannot be rendered as XACML."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.ENCODING_FAILED, details, cause)


class ProtocolError(ScopeValidationError):
    """Raised when a PDP response is not a well-formed XACML response."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.PROTOCOL_ERROR, details, cause)


class DecodingError(ScopeValidationError):
    """Raised when the decision text of a PDP response is not a known decision."""

    def __init__(self, message: str, value: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.DECODING_FAILED, details)
        self.value = value

        if value is not None:
            self.details['value'] = value


class OracleError(ScopeValidationError):
    """Raised when the decision oracle cannot produce a response."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.ORACLE_UNAVAILABLE,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, error_code, details, cause)


class ConfigurationError(ScopeValidationError):
    """Raised when there's a configuration error."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)
        self.config_key = config_key
        self.config_value = config_value

        if config_key:
            self.details['config_key'] = config_key
        if config_value is not None:
            self.details['config_value'] = str(config_value)
