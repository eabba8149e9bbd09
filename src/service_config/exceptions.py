"""
Service Config Exceptions

Exception classes raised while resolving deployment configuration. Every
exception carries the original message plus a context dictionary (URL
attempted, stage, path) so hosts can report failures without re-parsing
strings.
"""

from enum import Enum
from typing import Any


class ErrorType(Enum):
    """Categories of resolution failures."""

    CONFIGURATION = "configuration_error"
    AUTHENTICATION = "authentication_error"
    UPSTREAM_FETCH = "upstream_fetch_error"
    KEY_RESOLUTION = "key_resolution_error"
    ENCRYPTION = "encryption_error"
    MISSING_VALUE = "missing_value_error"
    CONFIG_UNAVAILABLE = "config_unavailable"


class ServiceConfigError(Exception):
    """Base exception for configuration resolution."""

    error_type = ErrorType.CONFIGURATION

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for host error reporting."""
        return {
            "error": self.error_type.value,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(ServiceConfigError):
    """A required setting (token, key id, address) is missing or invalid."""


class AuthenticationError(ConfigurationError):
    """A credential required to call a store is missing or rejected."""

    error_type = ErrorType.AUTHENTICATION


class KeyResolutionError(ConfigurationError):
    """No KMS key id is declared for the requested stage."""

    error_type = ErrorType.KEY_RESOLUTION

    def __init__(self, stage: str, context: dict[str, Any] | None = None):
        context = dict(context or {})
        context.setdefault("stage", stage)
        super().__init__(
            f"No KMS key id configured for stage '{stage}', "
            f"please specify it in [custom/KMS_KEY_ID/{stage}]",
            context,
        )
        self.stage = stage


class UpstreamFetchError(ServiceConfigError):
    """A store was unreachable or answered with a non-success status."""

    error_type = ErrorType.UPSTREAM_FETCH

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        context = dict(context or {})
        if url:
            context["url"] = url
        if status is not None:
            context["status"] = status
        super().__init__(message, context)
        self.url = url
        self.status = status


class EncryptionError(ServiceConfigError):
    """The key-wrap service rejected an encrypt request."""

    error_type = ErrorType.ENCRYPTION


class MissingValueError(ServiceConfigError):
    """A store returned no value where one was expected."""

    error_type = ErrorType.MISSING_VALUE

    def __init__(self, url: str, context: dict[str, Any] | None = None):
        context = dict(context or {})
        context.setdefault("url", url)
        super().__init__(f"Missing value at {url}", context)
        self.url = url


class ConfigUnavailable(ServiceConfigError):
    """The configuration namespace could not be listed."""

    error_type = ErrorType.CONFIG_UNAVAILABLE
