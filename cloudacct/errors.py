from typing import Any, Dict, Optional


class CloudAccountError(Exception):
    """Base exception for all cloudacct errors."""
    def __init__(
        self,
        message: str,
        code: str = "internal_error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ValidationError(CloudAccountError):
    """Raised when configuration input or an identifier is malformed."""
    def __init__(self, message: str, code: str = "validation_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code, details)


class MalformedIdError(ValidationError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "malformed_id", details)


class NoVariantSelectedError(ValidationError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "no_variant_selected", details)


class MultipleVariantsSelectedError(ValidationError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "multiple_variants_selected", details)


class CredentialsError(ValidationError):
    """Raised when a GCP credentials blob cannot be decoded."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "invalid_credentials", details)


class NotFoundError(CloudAccountError):
    """Raised by an API client when the platform has no such account."""
    def __init__(self, message: str = "object not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "not_found", details)


class DuplicateAccountError(CloudAccountError):
    """Raised by an API client when creating an account that already exists."""
    def __init__(self, message: str = "duplicate cloud account", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "duplicate_account", details)


class PlatformError(CloudAccountError):
    """Raised when the platform rejects a request for any other reason."""
    def __init__(self, message: str, code: str = "platform_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code, details)


class TransportError(PlatformError):
    """Raised when the platform could not be reached."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "transport_error", details)


class ConfigurationError(CloudAccountError):
    """Raised when the settings file is invalid."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "configuration_error", details)
