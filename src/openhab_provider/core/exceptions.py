"""
Custom exception classes for the openHAB provider.

User-facing problems (bad configuration, rejected API calls) are reported as
diagnostics, see ``openhab_provider.core.diagnostics``. The exceptions below
cover internal failures: broken framework contracts, undecodable responses and
registry lookups.
"""

from typing import Optional


class OpenhabProviderException(Exception):
    """Base exception class for all openhab_provider exceptions."""

    pass


class ConversionError(OpenhabProviderException, TypeError):
    """
    Raised when a tri-state value handed to the conversion layer breaks its contract.

    A present list or map must only hold present string elements. Anything else
    means the configuration framework passed a value it should have rejected,
    so this is always a bug and never a user error.
    """

    pass


class ResponseDecodeError(OpenhabProviderException, ValueError):
    """Raised when an openHAB response body cannot be parsed into the expected DTO."""

    def __init__(self, reason: str, status_code: Optional[int] = None, preview: Optional[str] = None):
        self.reason = reason
        self.status_code = status_code
        self.preview = preview
        message = reason
        if status_code is not None:
            message += f" (status: {status_code})"
        if preview:
            message += f". Response preview: {preview}"
        super().__init__(message)


class ConfigurationError(OpenhabProviderException):
    """Raised when a configuration document cannot be loaded or parsed."""

    pass


class ResourceRegistryError(OpenhabProviderException, RuntimeError):
    """Raised on duplicate or missing resource type registrations."""

    pass
