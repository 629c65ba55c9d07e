"""Custom exceptions for the glucose log."""


class GlucoseLogError(Exception):
    """Base exception for all glucose log errors."""

    pass


class ConfigurationError(GlucoseLogError):
    """Raised when there is a configuration error."""

    pass


class StorageError(GlucoseLogError):
    """Raised when a storage slot cannot be read or written."""

    pass


class ImportValidationError(GlucoseLogError):
    """Raised when an import document fails validation."""

    pass


class AssistantServiceError(GlucoseLogError):
    """Raised when the assistant completion service fails."""

    pass
